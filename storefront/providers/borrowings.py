from __future__ import annotations

from typing import Optional

from storefront.data.interface import StorefrontApi
from storefront.data.models import BorrowRequest
from storefront.domain.status import (
    CANCELLABLE_BORROW_STATUSES,
    MAX_BORROW_PERIOD_DAYS,
    MAX_EXTENSION_DAYS,
    RETURNABLE_BORROW_STATUSES,
)

from .base import Provider


class BorrowingsProvider(Provider):
    """The signed-in customer's borrow requests and their lifecycle.

    Requests are checked locally before anything is sent: the period and
    extension ranges, and the status a borrowing must be in for a cancel,
    return or renewal. After a successful write the list is re-fetched.
    """
    requires_token = True

    def __init__(self, api: Optional[StorefrontApi] = None) -> None:
        super().__init__(api)
        self._borrowings: list[BorrowRequest] = []
        self.status_filter: Optional[str] = None

    @property
    def borrowings(self) -> list[BorrowRequest]:
        return list(self._borrowings)

    @property
    def active_borrowings(self) -> list[BorrowRequest]:
        return [b for b in self._borrowings if b.status in RETURNABLE_BORROW_STATUSES]

    def get_borrowing(self, borrow_id: int) -> Optional[BorrowRequest]:
        return next((b for b in self._borrowings if b.id == borrow_id), None)

    # ---------- queries ----------

    def _store_borrowings(self, borrowings: list[BorrowRequest]) -> None:
        self._borrowings = borrowings

    def load_borrowings(self, status: Optional[str] = None) -> bool:
        self.status_filter = status
        return self._load(
            "borrowings",
            "Failed to load borrowings",
            lambda: self.api.get_customer_borrowings(status),
            self._store_borrowings,
        )

    def _refresh(self) -> None:
        status = self.status_filter
        self._load(
            "borrowings",
            "Failed to reload borrowings",
            lambda: self.api.get_customer_borrowings(status),
            self._store_borrowings,
            quiet=True,
        )

    # ---------- lifecycle ----------

    def request_borrow(
        self,
        book_id: int,
        borrow_period_days: int,
        delivery_address: str,
        notes: Optional[str] = None,
    ) -> Optional[BorrowRequest]:
        label = "Failed to request borrowing"
        if not 1 <= borrow_period_days <= MAX_BORROW_PERIOD_DAYS:
            self._fail(f"{label}: period must be between 1 and {MAX_BORROW_PERIOD_DAYS} days")
            return None
        address = (delivery_address or "").strip()
        if not address:
            self._fail(f"{label}: a delivery address is required")
            return None
        request = self._run(label, self.api.request_borrow, book_id, borrow_period_days, address, notes)
        if request is None:
            return None
        with self._lock:
            self._borrowings = [request] + [b for b in self._borrowings if b.id != request.id]
        self.notify_listeners()
        return request

    def renew(self, borrowing: BorrowRequest, additional_days: int) -> bool:
        label = "Failed to extend borrowing"
        if not borrowing.can_extend:
            return self._fail(f"{label}: this borrowing cannot be extended")
        if not 1 <= additional_days <= MAX_EXTENSION_DAYS:
            return self._fail(f"{label}: extension must be between 1 and {MAX_EXTENSION_DAYS} days")
        if not self._write(label, self.api.extend_borrowing, borrowing.id, additional_days):
            return False
        self._refresh()
        return True

    def return_book(self, borrowing: BorrowRequest, reason: Optional[str] = None) -> bool:
        label = "Failed to return book"
        if borrowing.status not in RETURNABLE_BORROW_STATUSES:
            return self._fail(f"{label}: not available on a {borrowing.status} borrowing")
        if not self._write(label, self.api.return_borrowing, borrowing.id, (reason or "").strip() or None):
            return False
        self._refresh()
        return True

    def cancel(self, borrowing: BorrowRequest) -> bool:
        label = "Failed to cancel borrow request"
        if borrowing.status not in CANCELLABLE_BORROW_STATUSES:
            return self._fail(f"{label}: only requests under review can be cancelled")
        if not self._write(label, self.api.cancel_borrow_request, borrowing.id):
            return False
        self._refresh()
        return True
