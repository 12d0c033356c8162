from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, Field, model_validator

from .common import ApiModel, LenientFloat, Money, Timestamp


class DiscountedBook(ApiModel):
    """Response model for a book with a running discount."""
    id: int = Field(description="Book identifier")
    title: str = Field(default="", description="Book title")
    description: Optional[str] = Field(default=None, description="Book description")
    author: str = Field(default="", validation_alias=AliasChoices("author", "author_name"), description="Author display name")
    category: str = Field(default="", validation_alias=AliasChoices("category", "category_name"), description="Category display name")
    thumbnail_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("thumbnail_url", "thumbnailUrl", "primary_image_url"), description="Cover image URL")
    original_price: Money = Field(default=Decimal("0"), description="Price before discount")
    final_price: Money = Field(default=Decimal("0"), description="Price after discount")
    discount_amount: Money = Field(default=Decimal("0"), description="Absolute discount")
    discount_percentage: LenientFloat = Field(default=0.0, description="Discount in percent")
    discount_type: str = Field(default="percentage", description="percentage or fixed_amount")
    discount_code: Optional[str] = Field(default=None, description="Code that unlocks the discount")
    can_use: bool = Field(default=True, description="Whether the caller may still use the discount")
    is_active: bool = Field(default=True, description="Discount is running")
    is_upcoming: bool = Field(default=False, description="Discount has not started yet")
    is_expiring_soon: bool = Field(default=False, description="Discount ends shortly")
    is_available_for_purchase: bool = Field(default=True, description="Book can be bought")
    is_available_for_borrow: bool = Field(default=False, description="Book can be borrowed")
    starts_at: Timestamp = Field(default=None, description="Discount start")
    expires_at: Timestamp = Field(default=None, description="Discount end")

    @property
    def savings(self) -> Decimal:
        return max(self.original_price - self.final_price, Decimal("0"))


class DiscountCode(ApiModel):
    """Response model for an active discount code."""
    id: int = Field(description="Discount identifier")
    code: str = Field(description="Code entered at checkout")
    discount_percentage: LenientFloat = Field(default=0.0, validation_alias=AliasChoices("discount_percentage", "value"), description="Discount in percent")
    expiration_date: Timestamp = Field(default=None, validation_alias=AliasChoices("expiration_date", "end_date"), description="Last valid day")


class AppliedDiscount(ApiModel):
    """Response model for a discount code applied to an order amount."""
    code: str = Field(default="", description="Code that was applied")
    order_amount: Money = Field(default=Decimal("0"), validation_alias=AliasChoices("order_amount", "original_amount"), description="Amount before the discount")
    discount_amount: Money = Field(default=Decimal("0"), description="Amount taken off")
    final_amount: Money = Field(default=Decimal("0"), validation_alias=AliasChoices("final_amount", "final_price"), description="Amount after the discount")
    discount_percentage: LenientFloat = Field(default=0.0, description="Discount in percent")

    @model_validator(mode="after")
    def _fill_final_amount(self) -> "AppliedDiscount":
        # Some responses only carry discount_amount
        if self.final_amount == 0 and self.order_amount > 0:
            self.final_amount = max(self.order_amount - self.discount_amount, Decimal("0"))
        return self
