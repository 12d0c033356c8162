import pytest
from storefront.api.auth import ApiAuthentication
from storefront.config import set_config_for_test

@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    for var in ["API_BASE_URL", "API_TOKEN", "API_REFRESH_TOKEN", "REQUEST_TIMEOUT", "LOG_LEVEL"]:
        monkeypatch.delenv(var, raising=False)

def test_token_from_config():
    """Test the bearer header is built from the configured token."""
    set_config_for_test(api_base_url="http://testserver/api", api_token="token-123", log_level="ERROR")
    auth = ApiAuthentication()
    headers = auth.get_auth_headers()
    assert headers["Authorization"] == "Bearer token-123"
    assert headers["Content-Type"] == "application/json"
    assert headers["Accept"] == "application/json"

def test_explicit_token_overrides_config():
    """Test an explicit token wins over AppConfig.api_token."""
    set_config_for_test(api_base_url="http://testserver/api", api_token="from-config", log_level="ERROR")
    auth = ApiAuthentication(token="explicit")
    assert auth.get_auth_headers()["Authorization"] == "Bearer explicit"

def test_anonymous_session():
    """Test no Authorization header is sent without a token."""
    set_config_for_test(api_base_url="http://testserver/api", api_token=None, log_level="ERROR")
    session = ApiAuthentication().get_session()
    assert "Authorization" not in session.headers
    assert session.headers["Accept"] == "application/json"

def test_authenticated_session():
    """Test the session carries the bearer token."""
    set_config_for_test(api_base_url="http://testserver/api", api_token="abc", log_level="ERROR")
    session = ApiAuthentication().get_session()
    assert session.headers["Authorization"] == "Bearer abc"
