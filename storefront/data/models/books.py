from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Optional

from pydantic import AliasChoices, Field, model_validator

from .common import (
    ApiModel,
    LenientFloat,
    LenientInt,
    OptionalInt,
    OptionalMoney,
    Timestamp,
    first_present,
    parse_int,
)


class Author(ApiModel):
    """Response model for author data."""
    id: OptionalInt = Field(default=None, description="Author identifier")
    name: str = Field(default="", description="Display name")
    bio: Optional[str] = Field(default=None, description="Short biography")
    photo_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("photo_url", "photoUrl", "photo"), description="Portrait URL")
    nationality: Optional[str] = Field(default=None, description="Nationality")
    is_active: bool = Field(default=True, validation_alias=AliasChoices("is_active", "isActive"), description="Whether the author is listed")
    books_count: OptionalInt = Field(default=None, validation_alias=AliasChoices("books_count", "booksCount"), description="Number of books by the author")


class Category(ApiModel):
    """Response model for category data."""
    id: OptionalInt = Field(default=None, description="Category identifier")
    name: str = Field(default="", description="Display name")
    description: Optional[str] = Field(default=None, description="Category description")


def _related(data: dict, key: str) -> Optional[dict]:
    """Nested author/category: either an object, or an id with a sibling ``<key>_name``."""
    value = data.get(key)
    if isinstance(value, dict):
        return value
    name = data.get(f"{key}_name")
    if value is None:
        value = data.get(f"{key}_id")
    if value is None and name is None:
        return None
    if isinstance(value, str) and parse_int(value) is None:
        # Some endpoints send the display name in place of the id
        return {"id": None, "name": name or value}
    return {"id": parse_int(value), "name": name or ""}


class Book(ApiModel):
    """Response model for book data."""
    id: int = Field(description="Book identifier")
    title: str = Field(default="", description="Book title")
    description: Optional[str] = Field(default=None, description="Book description")
    author: Optional[Author] = Field(default=None, description="Book author")
    category: Optional[Category] = Field(default=None, description="Book category")
    primary_image_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("primary_image_url", "primaryImageUrl", "cover_url", "coverUrl"),
        description="Cover image URL",
    )
    images: list[str] = Field(default_factory=list, validation_alias=AliasChoices("images", "additional_images", "additionalImages"), description="Additional image URLs")
    price: OptionalMoney = Field(default=None, description="List (purchase) price")
    borrow_price: OptionalMoney = Field(default=None, validation_alias=AliasChoices("borrow_price", "borrowPrice"), description="Borrowing price")
    available_copies: OptionalInt = Field(default=None, validation_alias=AliasChoices("available_copies", "availableCopies"), description="Copies on hand")
    quantity: OptionalInt = Field(default=None, description="Total copies")
    average_rating: LenientFloat = Field(default=0.0, validation_alias=AliasChoices("average_rating", "averageRating"), description="Mean evaluation score")
    evaluations_count: LenientInt = Field(default=0, validation_alias=AliasChoices("evaluations_count", "evaluationsCount"), description="Number of evaluations")
    borrow_count: LenientInt = Field(default=0, validation_alias=AliasChoices("borrow_count", "borrowCount"), description="Times borrowed")
    is_active: bool = Field(default=True, validation_alias=AliasChoices("is_active", "isActive"), description="Whether the book is listed")
    is_new: bool = Field(default=False, validation_alias=AliasChoices("is_new", "isNew"), description="Flagged as a new arrival")
    is_available: bool = Field(default=True, validation_alias=AliasChoices("is_available", "isAvailable"), description="Available for purchase")
    is_available_for_borrow: bool = Field(default=False, validation_alias=AliasChoices("is_available_for_borrow", "isAvailableForBorrow"), description="Available for borrowing")
    availability_status: Optional[str] = Field(default=None, description="Backend availability label")
    original_price: OptionalMoney = Field(default=None, description="Price before discount")
    discounted_price: OptionalMoney = Field(default=None, description="Price after discount")
    discount_amount: OptionalMoney = Field(default=None, description="Absolute discount")
    discount_percentage: Optional[float] = Field(default=None, description="Discount in percent")
    has_active_discount: bool = Field(default=False, description="Backend flag for a running discount")
    created_at: Timestamp = Field(default=None, validation_alias=AliasChoices("created_at", "createdAt"), description="Creation timestamp")
    updated_at: Timestamp = Field(default=None, validation_alias=AliasChoices("updated_at", "updatedAt"), description="Last update timestamp")

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get("title") and data.get("name"):
            data["title"] = data["name"]
        for key in ("author", "category"):
            related = _related(data, key)
            if related is None:
                data.pop(key, None)
            else:
                data[key] = related
        return data

    @property
    def author_name(self) -> str:
        return self.author.name if self.author else ""

    @property
    def category_name(self) -> str:
        return self.category.name if self.category else ""

    @property
    def has_discount(self) -> bool:
        if self.original_price is None or self.discounted_price is None:
            return False
        return self.discounted_price < self.original_price or self.has_active_discount

    @property
    def final_price(self) -> Optional[Decimal]:
        """Price the customer pays: the discounted price when a discount applies."""
        if self.has_discount:
            return self.discounted_price
        return self.price

    @property
    def savings_amount(self) -> Decimal:
        if not self.has_discount:
            return Decimal("0")
        return max(self.original_price - self.discounted_price, Decimal("0"))

    @property
    def savings_percentage(self) -> float:
        if not self.has_discount:
            return 0.0
        if self.discount_percentage is not None:
            return self.discount_percentage
        if self.original_price > 0:
            return float(self.savings_amount / self.original_price * 100)
        return 0.0


class BooksPage(ApiModel):
    """One page of books plus the pagination metadata that came with it."""
    books: list[Book] = Field(default_factory=list, description="Books on this page")
    total_items: LenientInt = Field(default=0, validation_alias=AliasChoices("total_items", "totalItems", "total", "count"), description="Total matching books")
    total_pages: LenientInt = Field(default=1, validation_alias=AliasChoices("total_pages", "totalPages"), description="Total number of pages")
    current_page: LenientInt = Field(default=1, validation_alias=AliasChoices("current_page", "currentPage", "page"), description="1-based page number")
    items_per_page: LenientInt = Field(default=20, validation_alias=AliasChoices("items_per_page", "itemsPerPage", "per_page", "limit"), description="Page size")
    has_next_page: bool = Field(default=False, description="Whether another page follows")
    has_previous_page: bool = Field(default=False, description="Whether a page precedes this one")

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if isinstance(data, list):
            return {"books": data, "total_items": len(data)}
        if not isinstance(data, dict):
            return data
        data = {k: v for k, v in data.items() if v is not None}
        books = first_present(data, "books", "results")
        if books is None and isinstance(data.get("data"), list):
            books = data["data"]
        data["books"] = books or []
        pagination = data.get("pagination")
        if isinstance(pagination, dict):
            data = {**pagination, **data}

        total = parse_int(first_present(data, "total_items", "totalItems", "total", "count"), len(data["books"]))
        data.setdefault("total_items", total)
        per_page = parse_int(first_present(data, "items_per_page", "itemsPerPage", "per_page", "limit"), 20) or 20
        page = parse_int(first_present(data, "current_page", "currentPage", "page"), 1) or 1
        if first_present(data, "total_pages", "totalPages") is None:
            data["total_pages"] = max(1, math.ceil(total / per_page))
        pages = parse_int(first_present(data, "total_pages", "totalPages"), 1)
        if "has_next_page" not in data:
            data["has_next_page"] = bool(data["next"]) if "next" in data else page < pages
        if "has_previous_page" not in data:
            data["has_previous_page"] = bool(data["previous"]) if "previous" in data else page > 1
        return data

    @property
    def next_page(self) -> Optional[int]:
        return self.current_page + 1 if self.has_next_page else None

    @property
    def previous_page(self) -> Optional[int]:
        return self.current_page - 1 if self.has_previous_page else None
