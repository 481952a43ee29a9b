import logging
from collections import namedtuple
from urllib.parse import quote

import requests

logger = logging.getLogger("n2yo-proxy")

# ----------------------
# Routes
# ----------------------
UpstreamResult = namedtuple("UpstreamResult", ["status", "body"])


class ProxyRoute(namedtuple("ProxyRoute", ["name", "upstream", "params", "required"])):
    """An inbound route and the upstream endpoint it forwards to.

    ``params`` is ordered: it is both the inbound path-segment order and the
    upstream path-segment order.
    """

    __slots__ = ()

    @property
    def rule(self) -> str:
        return "/" + "/".join([self.name] + [f"<{p}>" for p in self.params])


ROUTES = (
    ProxyRoute("getAbove", "above",
               ("obs_lat", "obs_lon", "obs_alt", "src_rad", "cat_id"), False),
    ProxyRoute("getRadioPasses", "radiopasses",
               ("id", "obs_lat", "obs_lon", "obs_alt", "days", "min_elv"), False),
    ProxyRoute("getVisualPasses", "visualpasses",
               ("id", "obs_lat", "obs_lon", "obs_alt", "days", "min_vis"), False),
    ProxyRoute("getSatPos", "positions",
               ("id", "obs_lat", "obs_lon", "obs_alt", "sec"), False),
    ProxyRoute("getTLE", "tle", ("id",), True),
)

ROUTES_BY_NAME = {route.name: route for route in ROUTES}


# ----------------------
# Helpers
# ----------------------
def missing_params(route: ProxyRoute, values: dict, api_key: str) -> bool:
    """True when the request must be rejected before going upstream."""
    if not api_key:
        return True
    if route.required:
        return any(not values.get(p) for p in route.params)
    return False


def upstream_path(route: ProxyRoute, values: dict) -> str:
    segments = [quote(str(values.get(p, "")), safe="") for p in route.params]
    return "/".join([route.upstream] + segments)


def build_url(base_url: str, route: ProxyRoute, values: dict, api_key: str) -> str:
    # apiKey is always the last (and only) query parameter
    return "{}/{}?apiKey={}".format(
        base_url.rstrip("/"),
        upstream_path(route, values),
        quote(api_key, safe=""),
    )


# ----------------------
# Forwarding
# ----------------------
def forward(url: str, timeout=None, target: str = "") -> UpstreamResult:
    """Issue one GET and translate the outcome into a status and JSON body.

    ``target`` is what gets logged; the URL itself carries the API key.
    """
    try:
        resp = requests.get(url, timeout=timeout, stream=True)
    except requests.RequestException as e:
        logger.error("Upstream request failed for %s: %s", target, e.__class__.__name__)
        return UpstreamResult(400, {"message": "Request Failed"})

    with resp:
        try:
            resp.content  # drains the streamed body
        except requests.RequestException as e:
            logger.error("Unable to read upstream body for %s: %s", target, e.__class__.__name__)
            return UpstreamResult(400, {"message": "Unable to Read Body"})

        try:
            body = resp.json()
        except ValueError:
            logger.warning(
                "Upstream returned a non-JSON body for %s (status %s)",
                target, resp.status_code,
            )
            return UpstreamResult(502, {"message": "Invalid Upstream Response"})

    if not isinstance(body, dict):
        logger.warning("Upstream returned JSON that is not an object for %s", target)
        return UpstreamResult(502, {"message": "Invalid Upstream Response"})

    return UpstreamResult(200, body)
