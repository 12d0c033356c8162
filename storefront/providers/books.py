from __future__ import annotations

from typing import Callable, Optional

from storefront.data.interface import StorefrontApi
from storefront.data.models import Book, BookFilters, BooksPage
from storefront.domain.filters import BookFilterCriteria, apply_criteria
from storefront.utils.debounce import Debouncer

from .base import Provider


class BooksProvider(Provider):
    """Catalog state: the current page of books, the active filters and a debounced search."""

    def __init__(self, api: Optional[StorefrontApi] = None, debouncer: Optional[Debouncer] = None) -> None:
        super().__init__(api)
        self._books: list[Book] = []
        self.page: Optional[BooksPage] = None
        self.filters = BookFilters()
        self.criteria: Optional[BookFilterCriteria] = None
        self.search_query = ""
        self._page_query = ""
        self.selected_book: Optional[Book] = None
        self._debouncer = debouncer or Debouncer(self.config.search_debounce_ms / 1000, self._search)

    @property
    def books(self) -> list[Book]:
        return list(self._books)

    @property
    def visible_books(self) -> list[Book]:
        """The fetched page with the local filter sheet applied."""
        if self.criteria is None:
            return list(self._books)
        return apply_criteria(self._books, self.criteria)

    def _store_page(self, page: BooksPage, query: str) -> None:
        self.page = page
        self._books = list(page.books)
        self._page_query = query

    def _load_page(self, label: str, fetch: Callable[[], BooksPage], query: str = "") -> bool:
        # Catalog loads and searches share one key
        return self._load("books", label, fetch, lambda page: self._store_page(page, query))

    def load_books(self, filters: Optional[BookFilters] = None, page: int = 1) -> bool:
        if filters is not None:
            self.filters = filters
        filters = self.filters
        return self._load_page("Failed to load books", lambda: self.api.get_books(filters, page))

    def load_next_page(self) -> bool:
        if self.page is None or self.page.next_page is None:
            return False
        return self._page_to(self.page.next_page)

    def load_previous_page(self) -> bool:
        if self.page is None or self.page.previous_page is None:
            return False
        return self._page_to(self.page.previous_page)

    def _page_to(self, page: int) -> bool:
        # Follows the source of the page on screen
        if self._page_query:
            return self._search_page(self._page_query, page)
        return self.load_books(page=page)

    def apply_filters(self, criteria: BookFilterCriteria) -> bool:
        """Send the filter sheet to the backend and keep it for local re-filtering."""
        self.criteria = criteria
        return self.load_books(criteria.to_book_filters())

    def apply_local_filters(self, criteria: Optional[BookFilterCriteria]) -> None:
        self.criteria = criteria
        self.notify_listeners()

    def search(self, query: str) -> None:
        """Debounced: only the last query typed within the debounce window is sent."""
        self.search_query = (query or "").strip()
        self._debouncer.call(self.search_query)

    def _search(self, query: str) -> bool:
        if not query:
            return self.load_books()
        return self._search_page(query, 1)

    def _search_page(self, query: str, page: int) -> bool:
        category_id = self.filters.category_id
        return self._load_page(
            "Search failed", lambda: self.api.search_books(query, page, None, category_id), query,
        )

    def load_book(self, book_id: int) -> Optional[Book]:
        book = self._run("Failed to load book", self.api.get_book, book_id)
        if book is not None:
            self.selected_book = book
            self.notify_listeners()
        return book

    def dispose(self) -> None:
        self._debouncer.cancel()
