from __future__ import annotations

from typing import Optional

from storefront.data.interface import StorefrontApi
from storefront.data.models import Ad

from .base import Provider


class AdsProvider(Provider):
    """Public advertisements for the home screen carousel."""

    def __init__(self, api: Optional[StorefrontApi] = None) -> None:
        super().__init__(api)
        self._ads: list[Ad] = []

    @property
    def ads(self) -> list[Ad]:
        return list(self._ads)

    @property
    def visible_ads(self) -> list[Ad]:
        return [ad for ad in self._ads if ad.is_visible()]

    def load_ads(self, limit: Optional[int] = None) -> bool:
        """Bounded by AppConfig.ad_load_timeout; on timeout or failure the carousel stays empty."""
        ads = self._run(
            "Failed to load advertisements",
            self.api.get_public_ads,
            limit or self.config.default_ads_limit,
            self.config.ad_load_timeout,
        )
        if ads is None:
            self._ads = []
            self.notify_listeners()
            return False
        self._ads = ads
        self.notify_listeners()
        return True
