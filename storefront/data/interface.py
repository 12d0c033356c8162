from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol

from .models import (
    # Filter classes
    BookFilters,
    DeliveryFilters,
    NotificationFilters,
    OrderFilters,
    # Response models
    ActionResult,
    Ad,
    AppliedDiscount,
    Author,
    Book,
    BooksPage,
    BorrowRequest,
    Category,
    DeliveryManager,
    DeliveryRequest,
    DeliveryTask,
    DiscountCode,
    DiscountedBook,
    ManagerAvailability,
    Notification,
    Order,
)


# ---- Storefront API protocol ----

class StorefrontApi(Protocol):
    """
    Transport-agnostic contract the providers are written against.

    - Read methods return decoded models and raise ApiError subclasses on failure.
    - Write methods return an ActionResult; the backend owns every state transition,
      so callers re-fetch rather than patching state locally.
    """

    @property
    def has_token(self) -> bool:
        """Whether requests are sent with a bearer token."""
        ...

    # Catalog queries

    def get_books(self, filters: Optional[BookFilters] = None, page: int = 1, limit: Optional[int] = None) -> BooksPage:
        """Get one page of the catalog, server-side filtered."""
        ...

    def get_book(self, book_id: int) -> Book:
        """Get a single book."""
        ...

    def search_books(self, query: str, page: int = 1, limit: Optional[int] = None,
                     category_id: Optional[int] = None, author_id: Optional[int] = None) -> BooksPage:
        """Full text search over the catalog."""
        ...

    def get_new_books(self, limit: Optional[int] = 10) -> list[Book]:
        """Get the newest arrivals."""
        ...

    def get_most_borrowed_books(self, limit: Optional[int] = 10) -> list[Book]:
        """Get the most borrowed books."""
        ...

    def get_top_rated_books(self, limit: Optional[int] = 10) -> list[Book]:
        """Get the best rated books."""
        ...

    def get_books_with_offers(self, limit: Optional[int] = 10) -> list[Book]:
        """Get books that currently have an offer."""
        ...

    def check_availability(self, book_id: int) -> bool:
        """Check whether a book can currently be ordered."""
        ...

    def get_categories(self) -> list[Category]:
        """Get all categories."""
        ...

    def get_authors(self) -> list[Author]:
        """Get all authors."""
        ...

    # Order queries and actions

    def get_orders(self, filters: Optional[OrderFilters] = None, page: int = 1, limit: Optional[int] = None) -> list[Order]:
        """Get orders visible to the caller."""
        ...

    def get_order(self, order_id: int) -> Order:
        """Get a single order."""
        ...

    def update_order_status(self, order_id: int, status: str) -> ActionResult:
        """Request a status change for an order."""
        ...

    def cancel_order(self, order_id: int) -> ActionResult:
        """Cancel an order."""
        ...

    def create_order_from_payment(self, payment: dict) -> Order:
        """Create an order from a confirmed payment."""
        ...

    def get_orders_ready_for_delivery(self) -> list[Order]:
        """Get approved orders waiting for a delivery manager."""
        ...

    def track_order(self, order_number: str) -> Order:
        """Look up an order by its order number."""
        ...

    def get_order_delivery_contact(self, order_id: int) -> dict:
        """Get the delivery manager contact card for an order."""
        ...

    def get_order_delivery_location(self, order_id: int) -> dict:
        """Get the last reported delivery location for an order."""
        ...

    def approve_order(self, order_id: int, delivery_manager_id: Optional[int] = None) -> ActionResult:
        """Approve a pending order, optionally assigning a delivery manager."""
        ...

    def reject_order(self, order_id: int, reason: str) -> ActionResult:
        """Reject a pending order."""
        ...

    def assign_delivery_manager(self, order_id: int, delivery_manager_id: int) -> ActionResult:
        """Assign a delivery manager to an order."""
        ...

    def start_delivery(self, order_id: int) -> ActionResult:
        """Mark an order as out for delivery."""
        ...

    def complete_delivery(self, order_id: int) -> ActionResult:
        """Mark an order as delivered."""
        ...

    def add_order_note(self, order_id: int, content: str) -> ActionResult:
        """Add a note to an order."""
        ...

    def edit_order_note(self, order_id: int, note_id: int, content: str) -> ActionResult:
        """Edit an existing order note."""
        ...

    def delete_order_note(self, order_id: int, note_id: int) -> ActionResult:
        """Delete an order note."""
        ...

    def get_order_activities(self, order_id: int) -> list[dict]:
        """Get the activity log of an order."""
        ...

    def get_available_delivery_managers(self) -> list[DeliveryManager]:
        """Get delivery managers that can take an assignment."""
        ...

    # Delivery manager queries and actions

    def get_delivery_tasks(self) -> list[DeliveryTask]:
        """Get tasks assigned to the signed-in delivery manager."""
        ...

    def accept_assignment(self, assignment_id: int) -> ActionResult:
        """Accept a delivery assignment."""
        ...

    def update_assignment_status(self, assignment_id: int, status: str, notes: Optional[str] = None,
                                 failure_reason: Optional[str] = None) -> ActionResult:
        """Move a delivery assignment to a new status."""
        ...

    def update_task_location(self, task_id: int, latitude: float, longitude: float) -> ActionResult:
        """Report the current location for a task."""
        ...

    def get_delivery_requests(self, filters: Optional[DeliveryFilters] = None) -> list[DeliveryRequest]:
        """Get unified delivery requests."""
        ...

    def get_delivery_request(self, request_id: int) -> DeliveryRequest:
        """Get a single delivery request."""
        ...

    def accept_delivery_request(self, request_id: int) -> ActionResult:
        """Accept a delivery request."""
        ...

    def reject_delivery_request(self, request_id: int, reason: str) -> ActionResult:
        """Reject a delivery request."""
        ...

    def start_delivery_request(self, request_id: int) -> ActionResult:
        """Start a delivery request."""
        ...

    def update_delivery_request_location(self, request_id: int, latitude: float, longitude: float) -> ActionResult:
        """Report the current location for a delivery request."""
        ...

    def complete_delivery_request(self, request_id: int, notes: Optional[str] = None) -> ActionResult:
        """Complete a delivery request."""
        ...

    def get_manager_availability(self) -> ManagerAvailability:
        """Get the signed-in delivery manager's availability."""
        ...

    def set_manager_availability(self, status: str) -> ManagerAvailability:
        """Switch between online and offline."""
        ...

    def reset_manager_availability(self) -> ManagerAvailability:
        """Let the backend recompute availability from active deliveries."""
        ...

    # Borrowing

    def request_borrow(self, book_id: int, borrow_period_days: int, delivery_address: str,
                       notes: Optional[str] = None) -> BorrowRequest:
        """Ask to borrow a book for a number of days."""
        ...

    def get_customer_borrowings(self, status: Optional[str] = None) -> list[BorrowRequest]:
        """Get the signed-in customer's borrow requests."""
        ...

    def extend_borrowing(self, borrow_id: int, additional_days: int) -> ActionResult:
        """Extend an active borrowing."""
        ...

    def return_borrowing(self, borrow_id: int, reason: Optional[str] = None) -> ActionResult:
        """Return a borrowed book before its due date."""
        ...

    def cancel_borrow_request(self, borrow_id: int) -> ActionResult:
        """Cancel a borrow request still under review."""
        ...

    # Marketing

    def get_public_ads(self, limit: Optional[int] = None, timeout: Optional[float] = None) -> list[Ad]:
        """Get public advertisements."""
        ...

    def get_public_ad(self, ad_id: int) -> Ad:
        """Get a single public advertisement."""
        ...

    def get_discounted_books(self) -> list[DiscountedBook]:
        """Get books with a running discount."""
        ...

    def get_active_discount_codes(self) -> list[DiscountCode]:
        """Get discount codes that can currently be used."""
        ...

    def apply_discount_code(self, code: str, order_amount: Decimal) -> AppliedDiscount:
        """Apply a discount code to an order amount."""
        ...

    # Notifications

    def get_notifications(self, filters: Optional[NotificationFilters] = None, page: int = 1,
                          limit: Optional[int] = None) -> list[Notification]:
        """Get notifications for the signed-in user."""
        ...

    def mark_notification_read(self, notification_id: int) -> ActionResult:
        """Mark one notification as read."""
        ...

    def mark_all_notifications_read(self) -> ActionResult:
        """Mark every notification as read."""
        ...

    def delete_notification(self, notification_id: int) -> ActionResult:
        """Delete a notification."""
        ...

    def get_unread_notification_count(self) -> int:
        """Get the number of unread notifications."""
        ...
