import json

import pytest
import requests

from storefront.api.client import ApiClient
from storefront.api.errors import (
    ApiError,
    AuthenticationError,
    InvalidRequestError,
    NetworkError,
    NotFoundError,
    ResponseFormatError,
)
from storefront.config import set_config_for_test


class MockResponse:
    def __init__(self, status_code=200, payload=None, text=None, url="http://testserver/api/"):
        self.status_code = status_code
        if text is None:
            text = "" if payload is None else json.dumps(payload)
        self.text = text
        self.content = text.encode()
        self.url = url

    def json(self):
        return json.loads(self.text)


class MockSession:
    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, params=None, json=None, timeout=None):
        self.calls.append({
            "method": method,
            "url": url,
            "params": params,
            "json": json,
            "timeout": timeout,
            "authorization": self.headers.get("Authorization"),
        })
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, timeout=None):
        return self.request("GET", url, timeout=timeout)


@pytest.fixture(autouse=True)
def config(monkeypatch):
    for var in ["API_BASE_URL", "API_TOKEN", "REQUEST_TIMEOUT", "LOG_LEVEL"]:
        monkeypatch.delenv(var, raising=False)
    set_config_for_test(api_base_url="http://testserver/api", api_token=None, request_timeout=7.0, log_level="ERROR")


def test_get_decodes_json_and_drops_empty_params():
    """Test GET builds the URL, cleans params and decodes the body."""
    session = MockSession(MockResponse(200, {"id": 1}))
    client = ApiClient(session=session, token="t")
    body = client.get("/library/books/", params={"page": 1, "search": None, "new_only": True, "available_to_borrow": False})
    assert body == {"id": 1}
    call = session.calls[0]
    assert call["url"] == "http://testserver/api/library/books/"
    assert call["params"] == {"page": 1, "new_only": "true", "available_to_borrow": "false"}
    assert call["timeout"] == 7.0
    assert call["authorization"] == "Bearer t"


def test_empty_body_is_none():
    """Test a 204 response decodes to None."""
    client = ApiClient(session=MockSession(MockResponse(204)))
    assert client.delete("/notifications/3/") is None


def test_error_status_raises_mapped_error():
    """Test non-2xx responses raise the matching ApiError subclass."""
    client = ApiClient(session=MockSession(
        MockResponse(400, {"message": "Bad page"}),
        MockResponse(404, {"detail": "Not found."}),
    ))
    with pytest.raises(InvalidRequestError) as exc:
        client.get("/library/books/")
    assert exc.value.message == "Bad page"
    with pytest.raises(NotFoundError):
        client.get("/library/books/99/")


def test_failed_envelope_raises():
    """Test a 2xx {success: false} envelope is treated as a failure."""
    client = ApiClient(session=MockSession(MockResponse(200, {"success": False, "message": "Nope", "error_code": "FETCH_FAILED"})))
    with pytest.raises(ApiError) as exc:
        client.get("/delivery/managers/assigned-requests/")
    assert exc.value.message == "Nope"
    assert exc.value.error_code == "FETCH_FAILED"


def test_non_json_success_body_raises_format_error():
    """Test an undecodable 2xx body raises ResponseFormatError."""
    client = ApiClient(session=MockSession(MockResponse(200, text="<html>")))
    with pytest.raises(ResponseFormatError):
        client.get("/ads/public/")


def test_timeout_and_connection_errors_become_network_errors():
    """Test transport failures surface as NetworkError."""
    client = ApiClient(session=MockSession(
        requests.exceptions.Timeout("slow"),
        requests.exceptions.ConnectionError("down"),
    ))
    with pytest.raises(NetworkError) as exc:
        client.get("/ads/public/", timeout=5.0)
    assert "timed out" in exc.value.message
    with pytest.raises(NetworkError):
        client.get("/ads/public/")


def test_refresh_and_retry_once_on_401():
    """Test a 401 triggers one token refresh and one replay."""
    session = MockSession(MockResponse(401, {"detail": "expired"}), MockResponse(200, {"ok": True}))
    refreshed = []

    def refresh():
        refreshed.append(True)
        return "fresh"

    client = ApiClient(session=session, token="stale", on_token_refresh=refresh)
    assert client.get("/notifications/") == {"ok": True}
    assert refreshed == [True]
    assert [c["authorization"] for c in session.calls] == ["Bearer stale", "Bearer fresh"]
    assert client.token == "fresh"


def test_no_second_retry_after_refresh():
    """Test a second 401 after refresh is raised, not retried again."""
    session = MockSession(MockResponse(401), MockResponse(401))
    client = ApiClient(session=session, token="stale", on_token_refresh=lambda: "fresh")
    with pytest.raises(AuthenticationError):
        client.get("/notifications/")
    assert len(session.calls) == 2


def test_401_without_refresh_callback_raises():
    """Test a 401 is raised directly when no refresh callback is set."""
    session = MockSession(MockResponse(401))
    client = ApiClient(session=session, token="stale")
    with pytest.raises(AuthenticationError):
        client.get("/notifications/")
    assert len(session.calls) == 1


def test_unwrap_and_extract_items():
    """Test envelope helpers accept the shapes the backend returns."""
    assert ApiClient.unwrap({"data": {"id": 1}}) == {"id": 1}
    assert ApiClient.unwrap({"id": 1}) == {"id": 1}
    assert ApiClient.extract_items([1, 2]) == [1, 2]
    assert ApiClient.extract_items({"results": [1]}) == [1]
    assert ApiClient.extract_items({"results": {"results": [2]}}) == [2]
    assert ApiClient.extract_items({"success": True, "delivery_managers": [3]}, "delivery_managers") == [3]
    assert ApiClient.extract_items({"data": {"orders": [4]}}, "orders") == [4]
    assert ApiClient.extract_items(None) == []


def test_build_image_url():
    """Test media paths resolve against the server root."""
    client = ApiClient(session=MockSession())
    assert client.build_image_url("/media/covers/a.jpg") == "http://testserver/media/covers/a.jpg"
    assert client.build_image_url("media/covers/a.jpg") == "http://testserver/media/covers/a.jpg"
    assert client.build_image_url("https://cdn.example.com/a.jpg") == "https://cdn.example.com/a.jpg"
    assert client.build_image_url(None) is None


def test_check_connectivity():
    """Test the login probe counts 200, 401 and 405 as reachable."""
    session = MockSession(MockResponse(405), MockResponse(500), requests.exceptions.ConnectionError("down"))
    client = ApiClient(session=session)
    assert client.check_connectivity() is True
    assert client.check_connectivity() is False
    assert client.check_connectivity() is False
    assert session.calls[0]["url"] == "http://testserver/api/login/"
