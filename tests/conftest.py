import pytest
import requests

import main
import upstream


def make_response(body=b"", status=200):
    resp = requests.Response()
    resp.status_code = status
    resp._content = body
    resp._content_consumed = True
    return resp


class FakeUpstream:
    """Stands in for requests.get and records every URL it was asked for."""

    def __init__(self):
        self.calls = []
        self.response = make_response(b"{}")
        self.error = None

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    @property
    def urls(self):
        return [url for url, _ in self.calls]


@pytest.fixture
def fake_upstream(monkeypatch):
    fake = FakeUpstream()
    monkeypatch.setattr(upstream.requests, "get", fake)
    return fake


@pytest.fixture
def client(monkeypatch, fake_upstream):
    monkeypatch.setattr(main, "N2YO_BASE_URL", "https://upstream.test/rest/v1/satellite")
    main.app.config["TESTING"] = True
    with main.app.test_client() as c:
        yield c
