from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

# Sentinel the filter sheets use for "no restriction"
ALL = "all"


def _query_params(values: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None and v != "" and v != ALL}


class BookFilters(BaseModel):
    """Server-side filters for the book catalog."""
    search: Optional[str] = Field(default=None, description="Free text search")
    category: Optional[str] = Field(default=None, description="Category name filter")
    category_id: Optional[int] = Field(default=None, description="Category id; switches to the per-category endpoint")
    author: Optional[str] = Field(default=None, description="Author name filter")
    author_id: Optional[int] = Field(default=None, description="Author id filter")
    min_price: Optional[float] = Field(default=None, description="Minimum list price")
    max_price: Optional[float] = Field(default=None, description="Maximum list price")
    min_rating: Optional[float] = Field(default=None, description="Minimum average rating")
    max_rating: Optional[float] = Field(default=None, description="Maximum average rating")
    available_to_borrow: Optional[bool] = Field(default=None, description="True for borrowable only, False for purchase only")
    new_only: Optional[bool] = Field(default=None, description="Only new arrivals")
    sort_by: Optional[str] = Field(default=None, description="Sort key understood by the backend")
    sort_order: Optional[str] = Field(default=None, description="asc or desc")

    def to_query_params(self) -> dict[str, Any]:
        # category_id travels in the path, not the query
        params = self.model_dump(exclude={"category_id"})
        if not params.get("new_only"):
            params["new_only"] = None
        return _query_params(params)


class OrderFilters(BaseModel):
    """Server-side filters for the order list."""
    order_type: Optional[str] = Field(default=None, description="purchase, borrowing or return_collection")
    status: Optional[str] = Field(default=None, description="Order status, 'all' for no restriction")
    search: Optional[str] = Field(default=None, description="Order number or customer search")

    def to_query_params(self) -> dict[str, Any]:
        return _query_params(self.model_dump())


class DeliveryFilters(BaseModel):
    """Server-side filters for delivery requests."""
    status: Optional[str] = Field(default=None, description="Request status")
    delivery_type: Optional[str] = Field(default=None, description="purchase, borrow or return")

    def to_query_params(self) -> dict[str, Any]:
        return _query_params({"status": self.status, "type": self.delivery_type})


class NotificationFilters(BaseModel):
    """Server-side filters for notifications."""
    notification_type: Optional[str] = Field(default=None, description="Notification category")
    priority: Optional[str] = Field(default=None, description="Priority label")
    is_read: Optional[bool] = Field(default=None, description="Read flag")
    search: Optional[str] = Field(default=None, description="Free text search")
    unread_only: Optional[bool] = Field(default=None, description="Only unread notifications")

    def to_query_params(self) -> dict[str, Any]:
        params = self.model_dump()
        if not params.get("unread_only"):
            params["unread_only"] = None
        return _query_params(params)
