from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, Field, model_validator

from .common import ApiModel, LenientInt, OptionalInt, OptionalMoney, Timestamp

BORROW_STATUS_LABELS = {
    "payment_pending": "Payment Pending",
    "pending": "Under Review",
    "approved": "Approved",
    "rejected": "Rejected",
    "awaiting_pickup": "Awaiting Pickup",
    "pending_delivery": "Pending Delivery",
    "assigned_to_delivery": "Assigned to Delivery",
    "preparing": "Preparing",
    "out_for_delivery": "Out for Delivery",
    "delivered": "Delivered",
    "active": "Active",
    "extended": "Extended",
    "return_requested": "Return Requested",
    "return_approved": "Return Approved",
    "return_assigned": "Return Assigned",
    "out_for_return_pickup": "Out for Return Pickup",
    "returned": "Returned",
    "late": "Late",
    "returned_after_delay": "Returned After Delay",
    "cancelled": "Cancelled",
}


class BorrowRequest(ApiModel):
    """Response model for a customer's request to borrow a book."""
    id: int = Field(description="Borrow request identifier")
    book_id: OptionalInt = Field(default=None, description="Borrowed book")
    book_title: str = Field(default="", description="Borrowed book title")
    customer_id: OptionalInt = Field(default=None, description="Borrowing customer")
    customer_name: str = Field(default="", description="Customer display name")
    status: str = Field(default="pending", description="Borrow status")
    status_display: Optional[str] = Field(default=None, description="Backend status label")
    borrow_period_days: LenientInt = Field(
        default=0,
        validation_alias=AliasChoices("borrow_period_days", "duration_days"),
        description="Requested borrowing period in days",
    )
    delivery_address: Optional[str] = Field(default=None, description="Where the book is delivered")
    additional_notes: Optional[str] = Field(default=None, description="Notes from the customer")
    rejection_reason: Optional[str] = Field(default=None, description="Reason given on rejection")
    request_date: Timestamp = Field(default=None, description="When the request was made")
    approved_date: Timestamp = Field(default=None, description="When the library approved it")
    delivery_date: Timestamp = Field(default=None, description="When the book reached the customer")
    due_date: Timestamp = Field(
        default=None,
        validation_alias=AliasChoices("due_date", "expected_return_date"),
        description="When the book is due back",
    )
    final_return_date: Timestamp = Field(default=None, description="Due date after extensions")
    return_date: Timestamp = Field(
        default=None,
        validation_alias=AliasChoices("return_date", "actual_return_date"),
        description="When the book came back",
    )
    days_remaining: OptionalInt = Field(default=None, description="Days left before the due date")
    days_overdue: OptionalInt = Field(default=None, description="Days past the due date")
    is_overdue: bool = Field(default=False, description="Past the due date and not returned")
    can_extend: bool = Field(default=False, description="Backend allows an extension")
    fine_amount: OptionalMoney = Field(default=None, description="Late return fine")
    fine_status: Optional[str] = Field(default=None, description="paid or unpaid")
    payment_method: Optional[str] = Field(default=None, description="cash or mastercard")
    timeline: list[dict] = Field(default_factory=list, description="Status history entries")

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        book = data.get("book")
        if isinstance(book, dict):
            data.setdefault("book_id", book.get("id"))
            if not data.get("book_title"):
                data["book_title"] = book.get("name") or book.get("title") or ""
        elif book is not None:
            data.setdefault("book_id", book)
        customer = data.get("customer")
        if isinstance(customer, dict):
            data.setdefault("customer_id", customer.get("id"))
            if not data.get("customer_name"):
                data["customer_name"] = customer.get("full_name") or customer.get("name") or ""
        elif customer is not None:
            data.setdefault("customer_id", customer)
        return data

    @property
    def status_label(self) -> str:
        return self.status_display or BORROW_STATUS_LABELS.get(self.status, self.status)
