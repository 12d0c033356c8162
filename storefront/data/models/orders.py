from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from pydantic import AliasChoices, Field, model_validator

from .common import ApiModel, LenientInt, Money, OptionalInt, Timestamp, first_present, parse_decimal, parse_int

# Applied when the backend omits tax on an order that has line items
DEFAULT_TAX_RATE = Decimal("0.08")

STATUS_LABELS = {
    "pending": "Pending Review",
    "confirmed": "Confirmed",
    "pending_assignment": "Pending Assignment",
    "assigned_to_delivery": "Assigned to Delivery",
    "waiting_for_delivery_manager": "Waiting for Delivery Manager",
    "rejected_by_admin": "Rejected by Admin",
    "rejected_by_delivery_manager": "Rejected by Delivery Manager",
    "in_delivery": "In Delivery",
    "shipped": "Shipped",
    "delivered": "Delivered",
    "completed": "Completed",
    "cancelled": "Cancelled",
    "returned": "Returned",
}

ORDER_TYPE_LABELS = {
    "purchase": "Purchase",
    "borrowing": "Borrowing",
    "return_collection": "Return Collection",
}


class OrderItem(ApiModel):
    """Response model for a single order line."""
    id: OptionalInt = Field(default=None, description="Line identifier")
    book_id: int = Field(description="Ordered book")
    book_title: str = Field(default="Unknown Book", description="Title of the ordered book")
    book_author: Optional[str] = Field(default=None, description="Author of the ordered book")
    book_image: Optional[str] = Field(default=None, description="Cover image of the ordered book")
    quantity: LenientInt = Field(default=1, description="Ordered quantity")
    unit_price: Money = Field(default=Decimal("0"), validation_alias=AliasChoices("unit_price", "price"), description="Price per unit")
    total_price: Money = Field(default=Decimal("0"), description="Line total")

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        book = data.get("book")
        if isinstance(book, dict):
            data.setdefault("book_id", book.get("id"))
            data.setdefault("book_title", book.get("title") or book.get("name"))
            author = book.get("author")
            data.setdefault("book_author", author.get("name") if isinstance(author, dict) else book.get("author_name"))
            data.setdefault("book_image", first_present(book, "primary_image_url", "image", "cover_url"))
        elif book is not None:
            data.setdefault("book_id", parse_int(book))
        if data.get("total_price") is None:
            price = parse_decimal(first_present(data, "unit_price", "price"))
            if price is not None:
                data["total_price"] = price * (parse_int(data.get("quantity"), 1) or 0)
        return {k: v for k, v in data.items() if v is not None}


def _line_total(item: Any) -> Decimal:
    if isinstance(item, OrderItem):
        return item.total_price
    if not isinstance(item, dict):
        return Decimal("0")
    total = parse_decimal(item.get("total_price"))
    if total is not None:
        return total
    price = parse_decimal(first_present(item, "unit_price", "price"), Decimal("0"))
    return price * (parse_int(item.get("quantity"), 1) or 0)


class OrderAddress(ApiModel):
    """Postal address attached to an order."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    address1: str = Field(default="", validation_alias=AliasChoices("address1", "address", "street"))
    address2: Optional[str] = None
    city: str = ""
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    @property
    def one_line(self) -> str:
        return ", ".join(p for p in (self.address1, self.address2, self.city, self.state, self.postal_code, self.country) if p)


class PaymentInfo(ApiModel):
    """Payment details attached to an order."""
    payment_method: str = Field(default="unknown", validation_alias=AliasChoices("payment_type", "payment_method"))
    transaction_id: Optional[str] = None
    card_last4: Optional[str] = None
    card_brand: Optional[str] = None
    status: Optional[str] = None
    processed_at: Timestamp = None


class DeliveryAssignment(ApiModel):
    """Assignment of an order to a delivery manager."""
    id: OptionalInt = Field(default=None, description="Assignment identifier")
    order_id: OptionalInt = Field(default=None, description="Assigned order")
    delivery_manager_id: OptionalInt = Field(default=None, description="Assigned delivery manager")
    delivery_manager_name: Optional[str] = Field(default=None, description="Delivery manager display name")
    delivery_manager_phone: Optional[str] = Field(default=None, description="Delivery manager phone")
    delivery_manager_email: Optional[str] = Field(default=None, description="Delivery manager email")
    status: str = Field(default="assigned", description="Assignment status")
    assigned_at: Timestamp = None
    started_at: Timestamp = None
    completed_at: Timestamp = None
    assigned_by_name: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        manager = data.get("delivery_manager")
        if isinstance(manager, dict):
            data.setdefault("delivery_manager_id", manager.get("id"))
            data.setdefault("delivery_manager_name", first_present(manager, "full_name", "get_full_name", "name"))
            data.setdefault("delivery_manager_phone", first_present(manager, "phone", "phone_number"))
            data.setdefault("delivery_manager_email", manager.get("email"))
        elif manager is not None:
            data.setdefault("delivery_manager_id", parse_int(manager))
        order = data.get("order")
        if "order_id" not in data and order is not None:
            data["order_id"] = order.get("id") if isinstance(order, dict) else parse_int(order)
        return {k: v for k, v in data.items() if v is not None}


class OrderNote(ApiModel):
    """A note left on an order by staff or the customer."""
    id: LenientInt = Field(default=0, description="Note identifier")
    content: str = Field(default="", description="Note text")
    author_id: OptionalInt = Field(default=None, validation_alias=AliasChoices("author_id", "author"), description="Author user id")
    author_name: Optional[str] = None
    author_email: Optional[str] = None
    author_type: Optional[str] = None
    can_edit: bool = False
    can_delete: bool = False
    created_at: Timestamp = None
    updated_at: Timestamp = None


class Order(ApiModel):
    """Response model for order data."""
    id: int = Field(description="Order identifier")
    order_number: str = Field(default="", description="Human readable order number")
    user_id: OptionalInt = Field(default=None, description="Customer user id")
    customer_name: str = Field(default="Unknown", description="Customer display name")
    customer_email: Optional[str] = Field(default=None, description="Customer email")
    customer_phone: Optional[str] = Field(default=None, description="Customer phone")
    status: str = Field(default="pending", description="Backend order status")
    order_type: str = Field(default="purchase", description="Order workflow: purchase, borrowing or return_collection")
    payment_method: Optional[str] = Field(default=None, description="Payment method")
    total_amount: Money = Field(default=Decimal("0"), description="Total as charged by the backend")
    delivery_cost: Money = Field(default=Decimal("0"), description="Delivery fee")
    tax_amount: Money = Field(default=Decimal("0"), description="Tax")
    discount_code: Optional[str] = Field(default=None, validation_alias=AliasChoices("discount_code", "coupon_code"), description="Applied discount code")
    discount_amount: Money = Field(default=Decimal("0"), description="Discount applied")
    notes: Optional[str] = Field(default=None, description="Legacy single delivery note")
    order_notes: list[OrderNote] = Field(default_factory=list, description="Notes with author information")
    cancellation_reason: Optional[str] = Field(default=None, description="Reason given on cancellation")
    items: list[OrderItem] = Field(default_factory=list, description="Order lines")
    delivery_address: Optional[OrderAddress] = Field(default=None, description="Delivery address")
    billing_address: Optional[OrderAddress] = Field(default=None, description="Billing address")
    payment_info: Optional[PaymentInfo] = Field(default=None, description="Payment details")
    delivery_assignment: Optional[DeliveryAssignment] = Field(default=None, description="Current delivery assignment")
    book_title: Optional[str] = Field(default=None, description="Book title for single-book borrow orders")
    book_author: Optional[str] = Field(default=None, description="Book author for single-book borrow orders")
    can_edit_notes: bool = Field(default=True, description="Whether the caller may edit notes")
    can_delete_notes: bool = Field(default=True, description="Whether the caller may delete notes")
    created_at: Timestamp = Field(default=None, description="Creation timestamp")
    updated_at: Timestamp = Field(default=None, description="Last update timestamp")

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = {k: v for k, v in data.items() if v is not None}

        customer = data.get("customer")
        if isinstance(customer, dict):
            profile = customer.get("profile") if isinstance(customer.get("profile"), dict) else {}
            data.setdefault("user_id", customer.get("id"))
            name = first_present(customer, "full_name", "get_full_name")
            if name is None and (customer.get("first_name") or customer.get("last_name")):
                name = " ".join(p for p in (customer.get("first_name"), customer.get("last_name")) if p)
            data.setdefault("customer_name", name)
            data.setdefault("customer_email", customer.get("email"))
            data.setdefault("customer_phone", first_present(profile, "phone_number") or customer.get("phone_number"))
        elif customer is not None:
            data.setdefault("user_id", parse_int(customer))

        notes = data.get("notes")
        if isinstance(notes, list):
            data["order_notes"] = [n for n in notes if isinstance(n, dict)]
            data.pop("notes")
        legacy = first_present(data, "delivery_notes", "notes")
        if isinstance(legacy, str):
            data["notes"] = legacy
        else:
            data.pop("notes", None)

        address = data.get("delivery_address")
        if isinstance(address, str):
            data["delivery_address"] = {"address1": address, "city": data.get("delivery_city") or ""}

        if "tax_amount" not in data and data.get("items"):
            subtotal = sum((_line_total(item) for item in data["items"]), Decimal("0"))
            data["tax_amount"] = (subtotal * DEFAULT_TAX_RATE).quantize(Decimal("0.01"))
        return {k: v for k, v in data.items() if v is not None}

    @property
    def subtotal(self) -> Decimal:
        return sum((item.total_price for item in self.items), Decimal("0"))

    @property
    def final_total(self) -> Decimal:
        return self.subtotal + self.delivery_cost + self.tax_amount - self.discount_amount

    @property
    def has_discount(self) -> bool:
        return self.discount_amount > 0

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_borrowing_order(self) -> bool:
        return self.order_type == "borrowing" or self.order_number.startswith("BR")

    @property
    def status_display(self) -> str:
        return STATUS_LABELS.get(self.status, self.status)

    @property
    def order_type_display(self) -> str:
        return ORDER_TYPE_LABELS.get(self.order_type, self.order_type)

    @property
    def all_notes(self) -> list[OrderNote]:
        """Notes with author info, or the legacy note wrapped as a single entry."""
        if self.order_notes:
            return list(self.order_notes)
        if self.notes:
            return [OrderNote(content=self.notes, created_at=self.created_at, updated_at=self.updated_at)]
        return []
