import os
import logging
from flask import Flask, request, jsonify
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from tls_config import load_ssl_context
from upstream import ROUTES, ROUTES_BY_NAME, build_url, forward, missing_params, upstream_path

# ----------------------
# Configuration
# ----------------------
N2YO_BASE_URL = os.getenv("N2YO_BASE_URL", "https://api.n2yo.com/rest/v1/satellite")
UPSTREAM_TIMEOUT = float(os.getenv("UPSTREAM_TIMEOUT")) if os.getenv("UPSTREAM_TIMEOUT") else None
FRONTEND_ORIGIN = os.getenv("FRONTEND_ORIGIN", "*")
RATE_LIMIT = os.getenv("RATE_LIMIT", "")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "9443"))
TLS_CERT_FILE = os.getenv("TLS_CERT_FILE", "tls.crt")
TLS_KEY_FILE = os.getenv("TLS_KEY_FILE", "tls.key")
TLS_ECDH_CURVE = os.getenv("TLS_ECDH_CURVE", "secp384r1")

# Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("n2yo-proxy")

# ----------------------
# App Setup
# ----------------------
app = Flask(__name__)
app.json.sort_keys = False  # keep the upstream key order
CORS(app, origins=[FRONTEND_ORIGIN])

# ----------------------
# Rate Limiter
# ----------------------
limiter = Limiter(
    app=app,
    key_func=get_remote_address,
    default_limits=[RATE_LIMIT] if RATE_LIMIT else [],
)

# ----------------------
# Endpoints
# ----------------------
@app.route("/ping", methods=["GET"])
@limiter.exempt
def ping():
    return jsonify({"message": "pong"}), 200


def make_proxy_view(route):
    def proxy_view(**path_values):
        # /getTLE?id=... carries its parameters in the query string
        values = {p: path_values.get(p, request.args.get(p, "")) for p in route.params}
        api_key = request.args.get("apiKey", "")

        if missing_params(route, values, api_key):
            return jsonify({"message": "Invalid Satellite ID or API Key"}), 400

        url = build_url(N2YO_BASE_URL, route, values, api_key)
        target = f"{route.name} -> {upstream_path(route, values)}"
        status, body = forward(url, timeout=UPSTREAM_TIMEOUT, target=target)
        return jsonify(body), status

    proxy_view.__name__ = route.name
    return proxy_view


for _route in ROUTES:
    app.add_url_rule(_route.rule, endpoint=_route.name,
                     view_func=make_proxy_view(_route), methods=["GET"])

app.add_url_rule("/getTLE", endpoint="getTLEQuery",
                 view_func=make_proxy_view(ROUTES_BY_NAME["getTLE"]), methods=["GET"])


# ----------------------
# Error Handlers
# ----------------------
@app.errorhandler(404)
def not_found(e):
    return jsonify({"message": "Not Found"}), 404


@app.errorhandler(405)
def method_not_allowed(e):
    return jsonify({"message": "Method Not Allowed"}), 405


@app.errorhandler(429)
def rate_limited(e):
    return jsonify({"message": "Rate limit exceeded"}), 429


# ----------------------
# Server
# ----------------------
def serve():
    try:
        ssl_context = load_ssl_context(TLS_CERT_FILE, TLS_KEY_FILE, curve=TLS_ECDH_CURVE)
    except OSError as e:
        logger.error("Unable to load TLS certificate %s / %s: %s", TLS_CERT_FILE, TLS_KEY_FILE, e)
        raise SystemExit(1)

    logger.info("Listening on https://%s:%s", HOST, PORT)
    # werkzeug reports a failed bind and exits with status 1 itself
    app.run(host=HOST, port=PORT, ssl_context=ssl_context)


if __name__ == "__main__":
    serve()
