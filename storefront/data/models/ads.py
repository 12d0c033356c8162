from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import AliasChoices, Field

from .common import ApiModel, Timestamp


def _as_utc(value: Optional[datetime]) -> datetime:
    # Naive timestamps are read as UTC
    if value is None:
        return datetime.now(timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Ad(ApiModel):
    """Response model for a public advertisement."""
    id: int = Field(description="Advertisement identifier")
    title: str = Field(default="", description="Headline")
    content: str = Field(default="", description="Body text")
    image_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("image_url", "imageUrl", "image"), description="Banner image URL")
    ad_type: str = Field(default="general", description="general or discount_code")
    discount_code: Optional[str] = Field(default=None, description="Code promoted by a discount_code ad")
    status: str = Field(default="active", description="active, inactive, scheduled or expired")
    start_date: Timestamp = Field(default=None, description="First day the ad runs")
    end_date: Timestamp = Field(default=None, description="Last day the ad runs")
    created_at: Timestamp = Field(default=None, description="Creation timestamp")

    def is_started(self, now: Optional[datetime] = None) -> bool:
        if self.start_date is None:
            return True
        return _as_utc(self.start_date) <= _as_utc(now)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.status == "expired":
            return True
        if self.end_date is None:
            return False
        return _as_utc(self.end_date) < _as_utc(now)

    def is_visible(self, now: Optional[datetime] = None) -> bool:
        """Active and inside its start and end dates."""
        return self.status == "active" and self.is_started(now) and not self.is_expired(now)

    @property
    def is_discount_ad(self) -> bool:
        return self.ad_type == "discount_code" and bool(self.discount_code)
