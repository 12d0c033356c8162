"""Client-side filtering and sorting over lists the providers already fetched.

Each function builds a small DataFrame keyed by the original list position,
applies boolean masks, and maps the surviving positions back to the models,
so the returned objects are the caller's own instances in a stable order.
"""
from __future__ import annotations

from typing import Iterable, Literal, Optional, Sequence

import pandas as pd
from pydantic import BaseModel, Field, field_validator

from storefront.data.models import Book, BookFilters, DeliveryTask, DiscountedBook

from .status import ACTIVE_TASK_STATUSES, FINISHED_TASK_STATUSES, IN_TRANSIT_TASK_STATUSES

ALL = "all"

PRICE_RANGES: dict[str, tuple[Optional[float], Optional[float]]] = {
    ALL: (None, None),
    "0-10": (0.0, 10.0),
    "10-25": (10.0, 25.0),
    "25-50": (25.0, 50.0),
    "50-100": (50.0, 100.0),
    "100+": (100.0, None),
}

SortOption = Literal["newest", "oldest", "most_borrowed", "price_low", "price_high", "rating", "title", "author"]
Availability = Literal["all", "available", "borrow_only", "purchase_only"]

# sort option -> (frame column, ascending)
SORT_KEYS: dict[str, tuple[str, bool]] = {
    "newest": ("created_ts", False),
    "oldest": ("created_ts", True),
    "most_borrowed": ("borrow_count", False),
    "price_low": ("price", True),
    "price_high": ("price", False),
    "rating": ("rating", False),
    "title": ("title_key", True),
    "author": ("author_key", True),
}

# sort option -> (backend sort_by, sort_order)
SERVER_SORT: dict[str, tuple[str, str]] = {
    "newest": ("created_at", "desc"),
    "oldest": ("created_at", "asc"),
    "most_borrowed": ("borrow_count", "desc"),
    "price_low": ("price", "asc"),
    "price_high": ("price", "desc"),
    "rating": ("average_rating", "desc"),
    "title": ("title", "asc"),
    "author": ("author", "asc"),
}


class BookFilterCriteria(BaseModel):
    """Selections from the book filter sheet."""
    search: Optional[str] = Field(default=None, description="Title or author substring")
    category_id: Optional[int] = Field(default=None, description="Category id")
    price_range: str = Field(default=ALL, description="One of PRICE_RANGES")
    min_price: Optional[float] = Field(default=None, description="Explicit lower price bound, overrides price_range")
    max_price: Optional[float] = Field(default=None, description="Explicit upper price bound, overrides price_range")
    min_rating: Optional[float] = Field(default=None, description="Minimum average rating")
    availability: Availability = Field(default=ALL, description="Availability filter")
    new_only: bool = Field(default=False, description="Only new arrivals")
    sort_by: Optional[SortOption] = Field(default=None, description="Sort option")

    @field_validator("price_range")
    @classmethod
    def _known_price_range(cls, value: str) -> str:
        if value not in PRICE_RANGES:
            raise ValueError(f"Unknown price range: {value}")
        return value

    def price_bounds(self) -> tuple[Optional[float], Optional[float]]:
        low, high = PRICE_RANGES[self.price_range]
        if self.min_price is not None:
            low = self.min_price
        if self.max_price is not None:
            high = self.max_price
        return low, high

    def to_book_filters(self) -> BookFilters:
        """The same selection expressed as backend query filters."""
        low, high = self.price_bounds()
        available_to_borrow = None
        if self.availability == "borrow_only":
            available_to_borrow = True
        elif self.availability == "purchase_only":
            available_to_borrow = False
        sort_by, sort_order = SERVER_SORT[self.sort_by] if self.sort_by else (None, None)
        return BookFilters(
            search=(self.search or "").strip() or None,
            category_id=self.category_id,
            min_price=low,
            max_price=high,
            min_rating=self.min_rating,
            available_to_borrow=available_to_borrow,
            new_only=self.new_only or None,
            sort_by=sort_by,
            sort_order=sort_order,
        )


# ---------- frame builders ----------

def _book_frame(books: Sequence[Book]) -> pd.DataFrame:
    rows = []
    for pos, book in enumerate(books):
        rows.append({
            "pos": pos,
            "title_key": (book.title or "").lower(),
            "author_key": book.author_name.lower(),
            "category_id": book.category.id if book.category else None,
            "price": float(book.price) if book.price is not None else float("nan"),
            "rating": float(book.average_rating or 0.0),
            "borrow_count": int(book.borrow_count or 0),
            "created_ts": book.created_at.timestamp() if book.created_at else 0.0,
            "is_available": bool(book.is_available) and (book.available_copies is None or book.available_copies > 0),
            "borrowable": bool(book.is_available_for_borrow),
            "is_new": bool(book.is_new),
        })
    return pd.DataFrame(rows)


def _pick(items: Sequence, df: pd.DataFrame, mask: Optional[pd.Series] = None) -> list:
    positions = df.loc[mask, "pos"] if mask is not None else df["pos"]
    return [items[int(p)] for p in positions]


def _contains(series: pd.Series, needle: str) -> pd.Series:
    return series.str.contains(needle, regex=False, na=False)


# ---------- books ----------

def filter_books(books: Iterable[Book], criteria: BookFilterCriteria) -> list[Book]:
    """Books matching every selected criterion, in their original order."""
    books = list(books)
    if not books:
        return []
    df = _book_frame(books)

    mask = pd.Series(True, index=df.index)
    if criteria.search and criteria.search.strip():
        s = criteria.search.strip().lower()
        mask &= _contains(df["title_key"], s) | _contains(df["author_key"], s)
    if criteria.category_id is not None:
        mask &= (df["category_id"] == criteria.category_id)
    low, high = criteria.price_bounds()
    if low is not None:
        mask &= (df["price"] >= low)
    if high is not None:
        mask &= (df["price"] <= high)
    if criteria.min_rating is not None:
        mask &= (df["rating"] >= criteria.min_rating)
    if criteria.availability == "available":
        mask &= df["is_available"]
    elif criteria.availability == "borrow_only":
        mask &= df["borrowable"]
    elif criteria.availability == "purchase_only":
        mask &= ~df["borrowable"]
    if criteria.new_only:
        mask &= df["is_new"]

    return _pick(books, df, mask)


def sort_books(books: Iterable[Book], sort_by: Optional[str]) -> list[Book]:
    """Stable sort; missing prices count as 0 and missing dates as the epoch."""
    books = list(books)
    if not books or not sort_by:
        return books
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort option: {sort_by}")
    column, ascending = SORT_KEYS[sort_by]
    df = _book_frame(books).sort_values(
        column,
        ascending=ascending,
        kind="mergesort",
        key=lambda s: s.fillna(0) if s.dtype.kind == "f" else s,
    )
    return _pick(books, df)


def apply_criteria(books: Iterable[Book], criteria: BookFilterCriteria) -> list[Book]:
    return sort_books(filter_books(books, criteria), criteria.sort_by)


# ---------- discounts ----------

def search_discounted_books(books: Iterable[DiscountedBook], query: Optional[str]) -> list[DiscountedBook]:
    """Case-insensitive substring match on title, author or category."""
    books = list(books)
    if not books or not query or not query.strip():
        return books
    s = query.strip().lower()
    df = pd.DataFrame({
        "pos": range(len(books)),
        "title": [b.title.lower() for b in books],
        "author": [b.author.lower() for b in books],
        "category": [b.category.lower() for b in books],
    })
    mask = _contains(df["title"], s) | _contains(df["author"], s) | _contains(df["category"], s)
    return _pick(books, df, mask)


# ---------- delivery tasks ----------

def filter_tasks_by_status(tasks: Iterable[DeliveryTask], status: Optional[str]) -> list[DeliveryTask]:
    tasks = list(tasks)
    if not tasks or not status or status == ALL:
        return tasks
    df = pd.DataFrame({"pos": range(len(tasks)), "status": [t.status for t in tasks]})
    return _pick(tasks, df, df["status"] == status)


def count_tasks_by_group(tasks: Iterable[DeliveryTask]) -> dict[str, int]:
    """Counters shown on the delivery dashboard."""
    statuses = pd.Series([t.status for t in tasks], dtype="object")
    return {
        "total": int(statuses.size),
        "assigned": int(statuses.isin(list(ACTIVE_TASK_STATUSES)).sum()),
        "in_transit": int(statuses.isin(list(IN_TRANSIT_TASK_STATUSES)).sum()),
        "completed": int(statuses.isin(list(FINISHED_TASK_STATUSES)).sum()),
        "failed": int((statuses == "failed").sum()),
    }
