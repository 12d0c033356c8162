from __future__ import annotations

from typing import Optional

from storefront.data.interface import StorefrontApi
from storefront.data.models import DiscountCode, DiscountedBook
from storefront.domain.filters import search_discounted_books

from .base import Provider


class DiscountsProvider(Provider):
    """Discounted books and the discount codes currently on offer."""

    def __init__(self, api: Optional[StorefrontApi] = None) -> None:
        super().__init__(api)
        self._books: list[DiscountedBook] = []
        self.active_codes: list[DiscountCode] = []
        self.query = ""

    @property
    def discounted_books(self) -> list[DiscountedBook]:
        return list(self._books)

    @property
    def visible_books(self) -> list[DiscountedBook]:
        return search_discounted_books(self._books, self.query)

    def load_discounted_books(self) -> bool:
        books = self._run("Failed to load discounted books", self.api.get_discounted_books)
        if books is None:
            return False
        self._books = books
        self.notify_listeners()
        return True

    def search(self, query: str) -> None:
        self.query = (query or "").strip()
        self.notify_listeners()

    def load_active_codes(self) -> bool:
        codes = self._run("Failed to load discount codes", self.api.get_active_discount_codes)
        if codes is None:
            return False
        self.active_codes = codes
        self.notify_listeners()
        return True
