import json

import pytest
import requests

from services.config import Settings
from services.relay_service import (
    RelayService,
    UpstreamAuthError,
    UpstreamFetchFailed,
    UpstreamHTTPError,
    UpstreamNetworkError,
    UpstreamTimeout,
)


class FakeResponse:
    def __init__(self, status_code=200, content=b"", reason="OK", payload=None):
        self.status_code = status_code
        self.content = content
        self.reason = reason
        self._payload = payload or {}

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, get=None, post=None):
        self._get = get
        self._post = post
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        if isinstance(self._get, Exception):
            raise self._get
        return self._get

    def post(self, url, **kwargs):
        self.calls.append(("POST", url, kwargs))
        if isinstance(self._post, Exception):
            raise self._post
        return self._post


def make_service(session, **overrides):
    settings = Settings(status_os_url="https://example.test/status.csv", timeout=5, **overrides)
    return RelayService(settings, session=session)


def test_fetch_csv_public_link():
    session = FakeSession(get=FakeResponse(content="Planta;O/S\nCL01;1\n".encode("utf-8")))

    text = make_service(session).fetch_csv()

    assert text == "Planta;O/S\nCL01;1\n"
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("GET", "https://example.test/status.csv")
    assert kwargs["timeout"] == 5
    assert kwargs["allow_redirects"] is True
    assert "Authorization" not in kwargs["headers"]


def test_http_error_keeps_status():
    session = FakeSession(get=FakeResponse(status_code=403, reason="Forbidden"))

    with pytest.raises(UpstreamHTTPError) as excinfo:
        make_service(session).fetch_csv()

    assert excinfo.value.status == 403
    assert excinfo.value.reason == "Forbidden"


def test_timeout_and_network_errors_are_distinct():
    with pytest.raises(UpstreamTimeout):
        make_service(FakeSession(get=requests.Timeout("slow"))).fetch_csv()
    with pytest.raises(UpstreamNetworkError):
        make_service(FakeSession(get=requests.ConnectionError("down"))).fetch_csv()
    assert not issubclass(UpstreamTimeout, UpstreamNetworkError)


def test_missing_url():
    service = RelayService(Settings(status_os_url=""), session=FakeSession())

    with pytest.raises(UpstreamFetchFailed):
        service.fetch_csv()


def test_client_credentials_adds_bearer_token():
    session = FakeSession(
        get=FakeResponse(content=b"A;B\n"),
        post=FakeResponse(payload={"access_token": "tok-123"}),
    )
    service = make_service(session, tenant_id="t1", client_id="c1", client_secret="s1")

    service.fetch_csv()

    post, get = session.calls
    assert post[1] == "https://login.microsoftonline.com/t1/oauth2/v2.0/token"
    assert post[2]["data"]["grant_type"] == "client_credentials"
    assert post[2]["data"]["scope"] == "https://graph.microsoft.com/.default"
    assert get[2]["headers"]["Authorization"] == "Bearer tok-123"


def test_rejected_token_exchange():
    session = FakeSession(post=FakeResponse(status_code=401, reason="Unauthorized"))
    service = make_service(session, tenant_id="t1", client_id="c1", client_secret="bad")

    with pytest.raises(UpstreamAuthError):
        service.fetch_csv()
    assert [c[0] for c in session.calls] == ["POST"]


class HTMLResponse(FakeResponse):
    def json(self):
        raise ValueError("Expecting value: line 1 column 1 (char 0)")


@pytest.mark.parametrize(
    "post",
    [
        HTMLResponse(content=b"<html>login</html>"),
        FakeResponse(payload=["access_token", "tok-123"]),
    ],
)
def test_malformed_token_response(post):
    """Un 200 sin JSON de objeto es un error de autenticación, no un crash."""
    session = FakeSession(get=FakeResponse(content=b"A;B\n"), post=post)
    service = make_service(session, tenant_id="t1", client_id="c1", client_secret="s1")

    with pytest.raises(UpstreamAuthError):
        service.fetch_csv()

    response = service.relay_csv()
    assert response.status == 500
    assert "error" in json.loads(response.body)
    assert [c[0] for c in session.calls] == ["POST", "POST"]


def test_relay_response_success_headers():
    session = FakeSession(get=FakeResponse(content=b"A;B\n1;2\n"))

    response = make_service(session).relay_csv()

    assert response.status == 200
    assert response.body == "A;B\n1;2\n"
    assert response.headers["Content-Type"] == "text/csv; charset=utf-8"
    assert response.headers["Cache-Control"] == "no-store"


@pytest.mark.parametrize(
    "get, status",
    [
        (requests.Timeout("slow"), 504),
        (FakeResponse(status_code=404, reason="Not Found"), 500),
        (requests.ConnectionError("down"), 500),
    ],
)
def test_relay_response_errors(get, status):
    response = make_service(FakeSession(get=get)).relay_csv()

    assert response.status == status
    assert "error" in json.loads(response.body)


def test_relay_response_reports_upstream_status():
    response = make_service(FakeSession(get=FakeResponse(status_code=404, reason="Not Found"))).relay_csv()

    body = json.loads(response.body)
    assert body["status"] == 404
    assert body["statusText"] == "Not Found"
