import pytest

from storefront.config import set_config_for_test
from storefront.data.backends.http_backend import HttpStorefrontApi
from storefront.data.util import get_storefront_api


@pytest.fixture(autouse=True)
def config(monkeypatch):
    for var in ["API_BASE_URL", "API_TOKEN", "LOG_LEVEL"]:
        monkeypatch.delenv(var, raising=False)
    set_config_for_test(api_base_url="http://testserver/api", api_token=None, log_level="ERROR")


def test_http_kind_builds_http_backend():
    """Test the default kind is the REST backend with the given token."""
    api = get_storefront_api(token="abc")
    assert isinstance(api, HttpStorefrontApi)
    assert api.has_token
    assert api.client.base_url == "http://testserver/api"


def test_anonymous_backend_has_no_token():
    """Test no token is configured when none is given."""
    assert not get_storefront_api().has_token


def test_unknown_kind_raises():
    """Test an unknown backend kind is rejected."""
    with pytest.raises(ValueError):
        get_storefront_api(kind="sqlite")
