from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from storefront.data.interface import StorefrontApi
from storefront.data.models import AppliedDiscount, Order

from .base import Provider


class CheckoutProvider(Provider):
    """Order total, an optional discount code and placing the order once paid."""
    requires_token = True

    def __init__(self, api: Optional[StorefrontApi] = None, subtotal: Decimal = Decimal("0")) -> None:
        super().__init__(api)
        self.subtotal = subtotal
        self.applied_discount: Optional[AppliedDiscount] = None
        self.placed_order: Optional[Order] = None

    @property
    def total(self) -> Decimal:
        if self.applied_discount is None:
            return self.subtotal
        return self.applied_discount.final_amount

    def set_subtotal(self, subtotal: Decimal) -> None:
        # A discount computed for another amount no longer applies
        if subtotal != self.subtotal:
            self.applied_discount = None
        self.subtotal = subtotal
        self.notify_listeners()

    def apply_discount_code(self, code: str) -> bool:
        code = (code or "").strip()
        if not code:
            return self._fail("Failed to apply discount code: enter a code")
        if self.subtotal <= 0:
            return self._fail("Failed to apply discount code: the order is empty")
        discount = self._run("Failed to apply discount code", self.api.apply_discount_code, code, self.subtotal)
        if discount is None:
            return False
        self.applied_discount = discount
        self.notify_listeners()
        return True

    def clear_discount(self) -> None:
        self.applied_discount = None
        self.notify_listeners()

    def place_order(self, payment: dict[str, Any]) -> Optional[Order]:
        """Create the order for a confirmed payment, carrying the applied discount code."""
        payload = dict(payment)
        if self.applied_discount is not None:
            payload.setdefault("discount_code", self.applied_discount.code)
        order = self._run("Failed to place order", self.api.create_order_from_payment, payload)
        if order is None:
            return None
        self.placed_order = order
        self.notify_listeners()
        return order
