from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from storefront.api.client import ApiClient
from storefront.api.errors import InvalidRequestError, NotFoundError, ResponseFormatError
from storefront.config import get_config
from storefront.domain.status import MAX_BORROW_PERIOD_DAYS, MAX_EXTENSION_DAYS
from storefront.logging import get_logger

from ..interface import StorefrontApi
from ..models import (
    ActionResult,
    Ad,
    AppliedDiscount,
    Author,
    Book,
    BookFilters,
    BooksPage,
    BorrowRequest,
    Category,
    DeliveryFilters,
    DeliveryManager,
    DeliveryRequest,
    DeliveryTask,
    DiscountCode,
    DiscountedBook,
    ManagerAvailability,
    Notification,
    NotificationFilters,
    Order,
    OrderFilters,
    UnreadCount,
)

M = TypeVar("M", bound=BaseModel)

# Statuses a delivery manager may pick by hand; "busy" is owned by the backend
MANUAL_MANAGER_STATUSES = ("online", "offline")

DEFAULT_STATUS_NOTE = "Status updated via mobile app"


class HttpStorefrontApi(StorefrontApi):
    """
    REST implementation over the bookstore backend.
    - Every method performs exactly one request (two after a token refresh).
    - Responses are decoded into the pydantic models; list endpoints skip records
      that fail validation and log them, single-record endpoints raise.
    """

    def __init__(self, client: Optional[ApiClient] = None) -> None:
        self.client = client or ApiClient()
        self.config = get_config()
        self.logger = get_logger(__name__)

    @property
    def has_token(self) -> bool:
        return bool(self.client.token)

    # ---------- decoding helpers ----------

    def _parse(self, model: Type[M], payload: Any) -> M:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            self.logger.error(f"Could not parse {model.__name__}: {e}")
            raise ResponseFormatError(details=payload) from e

    def _parse_list(self, model: Type[M], payload: Any, *keys: str) -> list[M]:
        records = []
        for item in self.client.extract_items(payload, *keys):
            try:
                records.append(model.model_validate(item))
            except ValidationError as e:
                self.logger.error(f"Skipping malformed {model.__name__} record: {e}")
        return records

    def _page(self, payload: Any, page: int, limit: int) -> BooksPage:
        # Search responses nest the page one level down under "data"
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]
        if isinstance(payload, dict):
            payload = {"current_page": page, "items_per_page": limit, **payload}
        return self._parse(BooksPage, payload)

    def _action(self, payload: Any) -> ActionResult:
        return ActionResult.from_payload(payload)

    # ---------- books ----------

    def get_books(self, filters: Optional[BookFilters] = None, page: int = 1, limit: Optional[int] = None) -> BooksPage:
        filters = filters or BookFilters()
        limit = limit or self.config.default_page_size
        if filters.category_id is not None:
            endpoint = f"/library/books/category/{filters.category_id}/"
        else:
            endpoint = "/library/books/"
        params = {**filters.to_query_params(), "page": page, "limit": limit}
        return self._page(self.client.get(endpoint, params=params), page, limit)

    def get_book(self, book_id: int) -> Book:
        payload = self.client.get(f"/library/books/{book_id}/")
        return self._parse(Book, self.client.unwrap(payload))

    def search_books(
        self,
        query: str,
        page: int = 1,
        limit: Optional[int] = None,
        category_id: Optional[int] = None,
        author_id: Optional[int] = None,
    ) -> BooksPage:
        limit = limit or self.config.default_page_size
        params = {"q": query, "page": page, "limit": limit, "category": category_id, "author": author_id}
        return self._page(self.client.get("/library/books/search/", params=params), page, limit)

    def _book_list(self, endpoint: str, limit: Optional[int]) -> list[Book]:
        payload = self.client.get(endpoint, params={"limit": limit})
        return self._parse_list(Book, payload, "books")

    def get_new_books(self, limit: Optional[int] = 10) -> list[Book]:
        return self._book_list("/library/books/new/", limit)

    def get_most_borrowed_books(self, limit: Optional[int] = 10) -> list[Book]:
        return self._book_list("/library/books/most-borrowed/", limit)

    def get_top_rated_books(self, limit: Optional[int] = 10) -> list[Book]:
        return self._book_list("/library/books/top-rated/", limit)

    def get_books_with_offers(self, limit: Optional[int] = 10) -> list[Book]:
        return self._book_list("/library/books/offers/", limit)

    def check_availability(self, book_id: int) -> bool:
        payload = self.client.unwrap(self.client.get(f"/library/books/{book_id}/availability/"))
        if isinstance(payload, dict):
            for key in ("is_available", "available", "isAvailable"):
                if key in payload:
                    return bool(payload[key])
        return bool(payload)

    def get_categories(self) -> list[Category]:
        return self._parse_list(Category, self.client.get("/library/categories/"), "categories")

    def get_authors(self) -> list[Author]:
        return self._parse_list(Author, self.client.get("/library/authors/"), "authors")

    # ---------- orders ----------

    def get_orders(self, filters: Optional[OrderFilters] = None, page: int = 1, limit: Optional[int] = None) -> list[Order]:
        filters = filters or OrderFilters()
        params = {**filters.to_query_params(), "page": page, "limit": limit or self.config.default_page_size}
        return self._parse_list(Order, self.client.get("/delivery/orders/", params=params), "orders")

    def get_order(self, order_id: int) -> Order:
        payload = self.client.get(f"/delivery/orders/{order_id}/")
        return self._parse(Order, self.client.unwrap(payload))

    def update_order_status(self, order_id: int, status: str) -> ActionResult:
        self.logger.info(f"Updating order {order_id} to status {status}")
        return self._action(self.client.post(f"/delivery/orders/{order_id}/update-status/", json={"status": status}))

    def cancel_order(self, order_id: int) -> ActionResult:
        return self.update_order_status(order_id, "cancelled")

    def create_order_from_payment(self, payment: dict) -> Order:
        self.logger.info("Creating order from payment")
        payload = self.client.unwrap(self.client.post("/delivery/orders/create-from-payment/", json=payment))
        if isinstance(payload, dict) and isinstance(payload.get("order"), dict):
            payload = payload["order"]
        return self._parse(Order, payload)

    def get_orders_ready_for_delivery(self) -> list[Order]:
        payload = self.client.get("/delivery/orders/ready-for-delivery/")
        return self._parse_list(Order, payload, "orders")

    def track_order(self, order_number: str) -> Order:
        payload = self.client.unwrap(self.client.get(f"/delivery/customer/orders/track/{order_number}/"))
        if isinstance(payload, dict) and isinstance(payload.get("order"), dict):
            payload = payload["order"]
        return self._parse(Order, payload)

    def get_order_delivery_contact(self, order_id: int) -> dict:
        return self.client.unwrap(self.client.get(f"/delivery/customer/orders/{order_id}/delivery-contact/")) or {}

    def get_order_delivery_location(self, order_id: int) -> dict:
        return self.client.unwrap(self.client.get(f"/delivery/orders/{order_id}/delivery-location/")) or {}

    def approve_order(self, order_id: int, delivery_manager_id: Optional[int] = None) -> ActionResult:
        self.logger.info(f"Approving order {order_id}")
        body = {"delivery_manager_id": delivery_manager_id} if delivery_manager_id is not None else {}
        return self._action(self.client.patch(f"/delivery/orders/{order_id}/approve/", json=body))

    def reject_order(self, order_id: int, reason: str) -> ActionResult:
        self.logger.info(f"Rejecting order {order_id}")
        return self._action(self.client.patch(f"/delivery/orders/{order_id}/reject/", json={"rejection_reason": reason}))

    def assign_delivery_manager(self, order_id: int, delivery_manager_id: int) -> ActionResult:
        self.logger.info(f"Assigning delivery manager {delivery_manager_id} to order {order_id}")
        return self._action(
            self.client.patch(
                f"/delivery/orders/{order_id}/assign_delivery_manager/",
                json={"delivery_manager_id": delivery_manager_id},
            )
        )

    def start_delivery(self, order_id: int) -> ActionResult:
        self.logger.info(f"Starting delivery of order {order_id}")
        return self._action(self.client.patch(f"/delivery/orders/{order_id}/start_delivery/"))

    def complete_delivery(self, order_id: int) -> ActionResult:
        self.logger.info(f"Completing delivery of order {order_id}")
        return self._action(self.client.patch(f"/delivery/orders/{order_id}/complete_delivery/"))

    def _log_note(self, body: dict) -> ActionResult:
        return self._action(self.client.post("/delivery/activities/log/note/", json=body))

    def add_order_note(self, order_id: int, content: str) -> ActionResult:
        return self._log_note({"order_id": order_id, "notes_content": content, "action": "add"})

    def edit_order_note(self, order_id: int, note_id: int, content: str) -> ActionResult:
        return self._log_note({"order_id": order_id, "notes_content": content, "action": "edit", "note_id": note_id})

    def delete_order_note(self, order_id: int, note_id: int) -> ActionResult:
        return self._log_note({"order_id": order_id, "action": "delete", "note_id": note_id})

    def get_order_activities(self, order_id: int) -> list[dict]:
        payload = self.client.get(f"/delivery/activities/order/{order_id}/")
        return [a for a in self.client.extract_items(payload, "activities") if isinstance(a, dict)]

    def get_available_delivery_managers(self) -> list[DeliveryManager]:
        payload = self.client.get("/delivery/orders/available_delivery_managers/")
        return self._parse_list(DeliveryManager, payload, "delivery_managers")

    # ---------- delivery tasks ----------

    def get_delivery_tasks(self) -> list[DeliveryTask]:
        payload = self.client.get("/delivery/managers/assigned-requests/")
        return self._parse_list(DeliveryTask, payload, "tasks", "requests", "assignments")

    def accept_assignment(self, assignment_id: int) -> ActionResult:
        self.logger.info(f"Accepting delivery assignment {assignment_id}")
        return self._action(self.client.post(f"/delivery/assignments/{assignment_id}/accept/"))

    def update_assignment_status(
        self,
        assignment_id: int,
        status: str,
        notes: Optional[str] = None,
        failure_reason: Optional[str] = None,
    ) -> ActionResult:
        self.logger.info(f"Updating delivery assignment {assignment_id} to status {status}")
        body = {"status": status, "notes": notes or DEFAULT_STATUS_NOTE}
        if failure_reason:
            body["failure_reason"] = failure_reason
        return self._action(self.client.patch(f"/delivery/assignments/{assignment_id}/update-status/", json=body))

    def update_task_location(self, task_id: int, latitude: float, longitude: float) -> ActionResult:
        body = {
            "task_id": task_id,
            "latitude": latitude,
            "longitude": longitude,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        return self._action(self.client.post("/delivery/location/", json=body))

    # ---------- delivery requests ----------

    def get_delivery_requests(self, filters: Optional[DeliveryFilters] = None) -> list[DeliveryRequest]:
        filters = filters or DeliveryFilters()
        payload = self.client.get("/delivery/delivery-requests/", params=filters.to_query_params())
        return self._parse_list(DeliveryRequest, payload, "delivery_requests", "requests")

    def get_delivery_request(self, request_id: int) -> DeliveryRequest:
        payload = self.client.get(f"/delivery/delivery-requests/{request_id}/")
        return self._parse(DeliveryRequest, self.client.unwrap(payload))

    def accept_delivery_request(self, request_id: int) -> ActionResult:
        return self._action(self.client.post(f"/delivery/delivery-requests/{request_id}/accept/"))

    def reject_delivery_request(self, request_id: int, reason: str) -> ActionResult:
        return self._action(
            self.client.post(f"/delivery/delivery-requests/{request_id}/reject/", json={"rejection_reason": reason})
        )

    def start_delivery_request(self, request_id: int) -> ActionResult:
        return self._action(self.client.post(f"/delivery/delivery-requests/{request_id}/start/"))

    def update_delivery_request_location(self, request_id: int, latitude: float, longitude: float) -> ActionResult:
        return self._action(
            self.client.post(
                f"/delivery/delivery-requests/{request_id}/update-location/",
                json={"latitude": latitude, "longitude": longitude},
            )
        )

    def complete_delivery_request(self, request_id: int, notes: Optional[str] = None) -> ActionResult:
        body = {"notes": notes} if notes else {}
        return self._action(self.client.post(f"/delivery/delivery-requests/{request_id}/complete/", json=body))

    # ---------- manager availability ----------

    def _availability(self, payload: Any, fallback_status: Optional[str] = None) -> ManagerAvailability:
        data = self.client.unwrap(payload)
        if isinstance(data, dict) and "delivery_status" in data:
            return self._parse(ManagerAvailability, data)
        if fallback_status is None:
            raise ResponseFormatError(details=payload)
        return ManagerAvailability(delivery_status=fallback_status)

    def get_manager_availability(self) -> ManagerAvailability:
        return self._availability(self.client.get("/delivery-profiles/current_status/"))

    def set_manager_availability(self, status: str) -> ManagerAvailability:
        status = (status or "").lower()
        if status not in MANUAL_MANAGER_STATUSES:
            raise InvalidRequestError(
                "Invalid status. You can only manually change between online and offline.",
                error_code="INVALID_STATUS",
            )
        self.logger.info(f"Setting delivery manager availability to {status}")
        payload = self.client.post("/delivery-profiles/update_status/", json={"delivery_status": status})
        return self._availability(payload, fallback_status=status)

    def reset_manager_availability(self) -> ManagerAvailability:
        return self._availability(self.client.post("/delivery-profiles/reset_status/"))

    # ---------- borrowing ----------

    def request_borrow(
        self,
        book_id: int,
        borrow_period_days: int,
        delivery_address: str,
        notes: Optional[str] = None,
    ) -> BorrowRequest:
        if not 1 <= borrow_period_days <= MAX_BORROW_PERIOD_DAYS:
            raise InvalidRequestError(
                f"Borrow period must be between 1 and {MAX_BORROW_PERIOD_DAYS} days.",
                error_code="INVALID_PERIOD",
            )
        self.logger.info(f"Requesting to borrow book {book_id} for {borrow_period_days} days")
        body = {
            "book_id": book_id,
            "borrow_period_days": borrow_period_days,
            "delivery_address": delivery_address,
            "additional_notes": notes or "",
        }
        payload = self.client.post("/borrow/requests/", json=body)
        return self._parse(BorrowRequest, self.client.unwrap(payload))

    def get_customer_borrowings(self, status: Optional[str] = None) -> list[BorrowRequest]:
        payload = self.client.get("/borrow/my-borrowings/", params={"status": status})
        return self._parse_list(BorrowRequest, payload, "borrowings", "requests")

    def extend_borrowing(self, borrow_id: int, additional_days: int) -> ActionResult:
        if not 1 <= additional_days <= MAX_EXTENSION_DAYS:
            raise InvalidRequestError(
                f"Extension must be between 1 and {MAX_EXTENSION_DAYS} days.",
                error_code="INVALID_EXTENSION",
            )
        self.logger.info(f"Extending borrowing {borrow_id} by {additional_days} days")
        return self._action(
            self.client.post(f"/borrow/borrowings/{borrow_id}/extend/", json={"additional_days": additional_days})
        )

    def return_borrowing(self, borrow_id: int, reason: Optional[str] = None) -> ActionResult:
        self.logger.info(f"Returning borrowing {borrow_id}")
        body = {"return_reason": reason} if reason else {}
        return self._action(self.client.post(f"/borrow/borrowings/{borrow_id}/early-return/", json=body))

    def cancel_borrow_request(self, borrow_id: int) -> ActionResult:
        self.logger.info(f"Cancelling borrow request {borrow_id}")
        return self._action(self.client.delete(f"/borrow/requests/{borrow_id}/cancel/"))

    # ---------- ads ----------

    def get_public_ads(self, limit: Optional[int] = None, timeout: Optional[float] = None) -> list[Ad]:
        params = {"limit": limit or self.config.default_ads_limit}
        payload = self.client.get("/ads/public/", params=params, timeout=timeout)
        return self._parse_list(Ad, payload, "ads")

    def get_public_ad(self, ad_id: int) -> Ad:
        try:
            payload = self.client.get(f"/ads/public/{ad_id}/")
        except NotFoundError as e:
            raise NotFoundError("Advertisement not found", status_code=404, details=e.details) from e
        return self._parse(Ad, self.client.unwrap(payload))

    # ---------- discounts ----------

    def get_discounted_books(self) -> list[DiscountedBook]:
        payload = self.client.get("/discounts/book-discounts/discounted-books/")
        return self._parse_list(DiscountedBook, payload, "discounted_books")

    def get_active_discount_codes(self) -> list[DiscountCode]:
        return self._parse_list(DiscountCode, self.client.get("/discounts/active/"), "discounts")

    def apply_discount_code(self, code: str, order_amount: Decimal) -> AppliedDiscount:
        code = (code or "").strip()
        if not code:
            raise InvalidRequestError("Discount code is required.", error_code="MISSING_CODE")
        if order_amount <= 0:
            raise InvalidRequestError("Valid order amount is required.", error_code="INVALID_AMOUNT")
        payload = self.client.post("/discounts/apply/", json={"code": code, "order_amount": float(order_amount)})
        data = self.client.unwrap(payload)
        if isinstance(data, dict):
            data = {"code": code, "order_amount": order_amount, **data}
        return self._parse(AppliedDiscount, data)

    # ---------- notifications ----------

    def get_notifications(
        self,
        filters: Optional[NotificationFilters] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> list[Notification]:
        filters = filters or NotificationFilters()
        params = {**filters.to_query_params(), "page": page, "limit": limit or self.config.default_page_size}
        return self._parse_list(Notification, self.client.get("/notifications/", params=params), "notifications")

    def mark_notification_read(self, notification_id: int) -> ActionResult:
        return self._action(self.client.patch(f"/notifications/{notification_id}/mark_as_read/"))

    def mark_all_notifications_read(self) -> ActionResult:
        return self._action(self.client.post("/notifications/mark_all_as_read/"))

    def delete_notification(self, notification_id: int) -> ActionResult:
        return self._action(self.client.delete(f"/notifications/{notification_id}/"))

    def get_unread_notification_count(self) -> int:
        payload = self.client.unwrap(self.client.get("/notifications/unread_count/"))
        return self._parse(UnreadCount, payload if isinstance(payload, dict) else {}).unread_count
