from __future__ import annotations

from typing import Literal, Optional

from storefront.api.client import get_api_client

from .backends.http_backend import HttpStorefrontApi
from .interface import StorefrontApi


def get_storefront_api(kind: Literal["http"] = "http", token: Optional[str] = None) -> StorefrontApi:
    if kind == "http":
        # Base URL and timeout come from the configured AppConfig
        return HttpStorefrontApi(get_api_client(token))
    raise ValueError(f"Unknown storefront api kind: {kind}")
