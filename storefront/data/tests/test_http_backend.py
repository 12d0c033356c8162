import json
from decimal import Decimal

import pytest

from storefront.api.client import ApiClient
from storefront.api.errors import InvalidRequestError, NotFoundError, ResponseFormatError
from storefront.config import set_config_for_test
from storefront.data.backends.http_backend import HttpStorefrontApi
from storefront.data.models import BookFilters, DeliveryFilters, OrderFilters


class MockResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self.text = "" if payload is None else json.dumps(payload)
        self.content = self.text.encode()
        self.url = "http://testserver/api/"

    def json(self):
        return json.loads(self.text)


class MockSession:
    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, params=None, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json, "timeout": timeout})
        return self.responses.pop(0) if self.responses else MockResponse(200, {"success": True})

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture(autouse=True)
def config(monkeypatch):
    for var in ["API_BASE_URL", "API_TOKEN", "DEFAULT_PAGE_SIZE", "LOG_LEVEL"]:
        monkeypatch.delenv(var, raising=False)
    set_config_for_test(api_base_url="http://testserver/api", api_token="tkn", default_page_size=20, log_level="ERROR")


def make_api(*responses):
    session = MockSession(*responses)
    return HttpStorefrontApi(ApiClient(session=session)), session


def path(call):
    return call["url"].replace("http://testserver/api", "")


def test_get_books_uses_category_endpoint_and_filters():
    """Test category_id switches the endpoint and other filters go in the query."""
    api, session = make_api(MockResponse(200, {"books": [{"id": 1, "title": "A"}], "total": 1}))
    page = api.get_books(BookFilters(category_id=4, search="a", available_to_borrow=True), page=2)
    assert path(session.last) == "/library/books/category/4/"
    assert session.last["params"] == {"search": "a", "available_to_borrow": "true", "page": 2, "limit": 20}
    assert page.current_page == 2
    assert [b.title for b in page.books] == ["A"]


def test_search_books_unwraps_nested_data():
    """Test search results nested under data are unwrapped."""
    api, session = make_api(MockResponse(200, {"success": True, "data": {"books": [{"id": 9, "title": "Z"}], "total_items": 1}}))
    page = api.search_books("z", limit=5)
    assert path(session.last) == "/library/books/search/"
    assert session.last["params"] == {"q": "z", "page": 1, "limit": 5}
    assert page.books[0].id == 9


def test_list_endpoints_skip_malformed_records():
    """Test records failing validation are dropped, not fatal."""
    api, _ = make_api(MockResponse(200, {"results": [{"id": 1, "title": "ok"}, {"title": "no id"}]}))
    books = api.get_new_books()
    assert [b.id for b in books] == [1]


def test_get_book_raises_on_malformed_payload():
    """Test a single record that fails validation raises ResponseFormatError."""
    api, _ = make_api(MockResponse(200, {"title": "no id"}))
    with pytest.raises(ResponseFormatError):
        api.get_book(1)


def test_get_orders_envelope_and_params():
    """Test order lists in an 'orders' envelope and the status filter."""
    api, session = make_api(MockResponse(200, {"orders": [{"id": 1, "status": "pending"}]}))
    orders = api.get_orders(OrderFilters(status="pending"))
    assert path(session.last) == "/delivery/orders/"
    assert session.last["params"]["status"] == "pending"
    assert orders[0].status == "pending"


def test_order_actions_hit_expected_endpoints():
    """Test each order action's method, path and body."""
    api, session = make_api()
    api.cancel_order(5)
    assert (session.last["method"], path(session.last), session.last["json"]) == ("POST", "/delivery/orders/5/update-status/", {"status": "cancelled"})
    api.approve_order(5, delivery_manager_id=7)
    assert (session.last["method"], path(session.last), session.last["json"]) == ("PATCH", "/delivery/orders/5/approve/", {"delivery_manager_id": 7})
    api.reject_order(5, "Out of stock")
    assert (path(session.last), session.last["json"]) == ("/delivery/orders/5/reject/", {"rejection_reason": "Out of stock"})
    api.assign_delivery_manager(5, 8)
    assert (path(session.last), session.last["json"]) == ("/delivery/orders/5/assign_delivery_manager/", {"delivery_manager_id": 8})
    api.start_delivery(5)
    assert (session.last["method"], path(session.last)) == ("PATCH", "/delivery/orders/5/start_delivery/")
    api.complete_delivery(5)
    assert path(session.last) == "/delivery/orders/5/complete_delivery/"


def test_order_notes():
    """Test note add/edit/delete share the activity log endpoint."""
    api, session = make_api()
    api.add_order_note(3, "Fragile")
    assert path(session.last) == "/delivery/activities/log/note/"
    assert session.last["json"] == {"order_id": 3, "notes_content": "Fragile", "action": "add"}
    api.edit_order_note(3, 11, "Very fragile")
    assert session.last["json"] == {"order_id": 3, "notes_content": "Very fragile", "action": "edit", "note_id": 11}
    api.delete_order_note(3, 11)
    assert session.last["json"] == {"order_id": 3, "action": "delete", "note_id": 11}


def test_available_delivery_managers():
    """Test the delivery_managers envelope is read."""
    api, session = make_api(MockResponse(200, {"success": True, "delivery_managers": [{"id": 1, "full_name": "A", "status": "Online"}]}))
    managers = api.get_available_delivery_managers()
    assert path(session.last) == "/delivery/orders/available_delivery_managers/"
    assert managers[0].name == "A"
    assert managers[0].status == "online"


def test_assignment_status_update_body():
    """Test the default note and optional failure reason."""
    api, session = make_api()
    api.update_assignment_status(4, "in_transit")
    assert session.last["method"] == "PATCH"
    assert path(session.last) == "/delivery/assignments/4/update-status/"
    assert session.last["json"] == {"status": "in_transit", "notes": "Status updated via mobile app"}
    api.update_assignment_status(4, "failed", failure_reason="Nobody home")
    assert session.last["json"]["failure_reason"] == "Nobody home"


def test_task_location_payload():
    """Test location reports carry the task id and a timestamp."""
    api, session = make_api()
    api.update_task_location(4, 1.5, 2.5)
    body = session.last["json"]
    assert path(session.last) == "/delivery/location/"
    assert (body["task_id"], body["latitude"], body["longitude"]) == (4, 1.5, 2.5)
    assert body["timestamp"]


def test_delivery_requests():
    """Test delivery request listing and actions."""
    api, session = make_api(MockResponse(200, {"results": {"results": [{"id": 1, "type": "borrow", "status": "pending"}]}}))
    requests_ = api.get_delivery_requests(DeliveryFilters(status="pending", delivery_type="borrow"))
    assert session.last["params"] == {"status": "pending", "type": "borrow"}
    assert requests_[0].delivery_type == "borrow"
    api.reject_delivery_request(1, "Too far")
    assert (path(session.last), session.last["json"]) == ("/delivery/delivery-requests/1/reject/", {"rejection_reason": "Too far"})
    api.update_delivery_request_location(1, 3.0, 4.0)
    assert path(session.last) == "/delivery/delivery-requests/1/update-location/"
    api.complete_delivery_request(1, notes="Signed")
    assert session.last["json"] == {"notes": "Signed"}


def test_manager_availability():
    """Test reading and changing availability."""
    api, session = make_api(
        MockResponse(200, {"success": True, "data": {"delivery_status": "busy", "can_change_manually": False}}),
        MockResponse(200, {"success": True, "message": "Status updated"}),
    )
    current = api.get_manager_availability()
    assert current.delivery_status == "busy"
    assert current.can_change_manually is False
    updated = api.set_manager_availability("Online")
    assert session.last["json"] == {"delivery_status": "online"}
    assert updated.delivery_status == "online"


def test_manager_availability_rejects_busy_without_request():
    """Test only online/offline can be chosen by hand."""
    api, session = make_api()
    with pytest.raises(InvalidRequestError) as exc:
        api.set_manager_availability("busy")
    assert exc.value.error_code == "INVALID_STATUS"
    assert session.calls == []


def test_public_ads_use_timeout_and_limit():
    """Test the ad request carries the limit and the per-call timeout."""
    api, session = make_api(MockResponse(200, [{"id": 1, "title": "Sale", "status": "active"}]))
    ads = api.get_public_ads(limit=10, timeout=5.0)
    assert session.last["params"] == {"limit": 10}
    assert session.last["timeout"] == 5.0
    assert ads[0].title == "Sale"


def test_public_ad_not_found_message():
    """Test a missing ad reports a specific message."""
    api, _ = make_api(MockResponse(404, {"detail": "Not found."}))
    with pytest.raises(NotFoundError) as exc:
        api.get_public_ad(3)
    assert exc.value.message == "Advertisement not found"


def test_discounts():
    """Test discounted books and active codes."""
    api, session = make_api(
        MockResponse(200, {"success": True, "discounted_books": [{"id": 1, "title": "T", "final_price": "5.00"}]}),
        MockResponse(200, [{"id": 2, "code": "SPRING", "discount_percentage": 15, "expiration_date": "2030-01-01T00:00:00Z"}]),
    )
    books = api.get_discounted_books()
    assert path(session.last) == "/discounts/book-discounts/discounted-books/"
    assert str(books[0].final_price) == "5.00"
    codes = api.get_active_discount_codes()
    assert codes[0].code == "SPRING"


def test_notifications():
    """Test notification list, actions and unread count."""
    api, session = make_api(
        MockResponse(200, {"results": [{"id": 1, "title": "Hi", "notification_type": "order"}]}),
        MockResponse(200, {"success": True}),
        MockResponse(204),
        MockResponse(200, {"unread_count": 4}),
    )
    notifications = api.get_notifications()
    assert notifications[0].type == "order"
    api.mark_notification_read(1)
    assert (session.last["method"], path(session.last)) == ("PATCH", "/notifications/1/mark_as_read/")
    assert api.delete_notification(1).success
    assert session.last["method"] == "DELETE"
    assert api.get_unread_notification_count() == 4


def test_create_order_from_payment_and_ready_list():
    """Test order creation posts the payment and the ready list decodes orders."""
    api, session = make_api(
        MockResponse(201, {"success": True, "data": {"id": 21, "status": "pending", "order_number": "ORD-21"}}),
        MockResponse(200, {"orders": [{"id": 3, "status": "confirmed"}, {"status": "no id"}]}),
    )
    created = api.create_order_from_payment({"payment_id": 8, "payment_method": "cash"})
    assert (session.last["method"], path(session.last)) == ("POST", "/delivery/orders/create-from-payment/")
    assert session.last["json"] == {"payment_id": 8, "payment_method": "cash"}
    assert created.id == 21
    ready = api.get_orders_ready_for_delivery()
    assert path(session.last) == "/delivery/orders/ready-for-delivery/"
    assert [o.id for o in ready] == [3]


def test_request_borrow_body_and_response():
    """Test a borrow request sends the expected body and decodes the created request."""
    api, session = make_api(MockResponse(201, {
        "success": True,
        "data": {"id": 11, "book": {"id": 3, "name": "Dune"}, "status": "pending", "borrow_period_days": 14},
    }))
    request = api.request_borrow(3, 14, "12 Main St")
    assert (session.last["method"], path(session.last)) == ("POST", "/borrow/requests/")
    assert session.last["json"] == {
        "book_id": 3, "borrow_period_days": 14, "delivery_address": "12 Main St", "additional_notes": "",
    }
    assert (request.id, request.book_title, request.status) == (11, "Dune", "pending")


def test_borrow_ranges_rejected_without_request():
    """Test out of range periods and extensions never reach the backend."""
    api, session = make_api()
    with pytest.raises(InvalidRequestError) as exc:
        api.request_borrow(3, 31, "12 Main St")
    assert exc.value.error_code == "INVALID_PERIOD"
    with pytest.raises(InvalidRequestError) as exc:
        api.extend_borrowing(5, 0)
    assert exc.value.error_code == "INVALID_EXTENSION"
    assert session.calls == []


def test_customer_borrowings_and_lifecycle_endpoints():
    """Test listing borrowings and the extend, return and cancel calls."""
    api, session = make_api(
        MockResponse(200, {"success": True, "data": [{"id": 5, "status": "active"}]}),
        MockResponse(200, {"success": True, "message": "Extension approved"}),
        MockResponse(200, {"success": True}),
        MockResponse(200, {"success": True}),
    )
    borrowings = api.get_customer_borrowings("active")
    assert path(session.last) == "/borrow/my-borrowings/"
    assert session.last["params"] == {"status": "active"}
    assert borrowings[0].id == 5
    assert api.extend_borrowing(5, 7).message == "Extension approved"
    assert (session.last["method"], path(session.last), session.last["json"]) == (
        "POST", "/borrow/borrowings/5/extend/", {"additional_days": 7},
    )
    api.return_borrowing(5, reason="Done")
    assert (path(session.last), session.last["json"]) == ("/borrow/borrowings/5/early-return/", {"return_reason": "Done"})
    api.cancel_borrow_request(6)
    assert (session.last["method"], path(session.last)) == ("DELETE", "/borrow/requests/6/cancel/")


def test_apply_discount_code():
    """Test a discount code is posted with the order amount and the result decoded."""
    api, session = make_api(MockResponse(201, {"original_amount": 50.0, "discount_amount": 5.0, "final_amount": 45.0}))
    applied = api.apply_discount_code(" SAVE10 ", Decimal("50.00"))
    assert (session.last["method"], path(session.last)) == ("POST", "/discounts/apply/")
    assert session.last["json"] == {"code": "SAVE10", "order_amount": 50.0}
    assert applied.code == "SAVE10"
    assert applied.final_amount == Decimal("45")


def test_apply_discount_code_validated_locally():
    """Test an empty code or amount is refused before any request."""
    api, session = make_api()
    with pytest.raises(InvalidRequestError):
        api.apply_discount_code("", Decimal("10"))
    with pytest.raises(InvalidRequestError):
        api.apply_discount_code("SAVE10", Decimal("0"))
    assert session.calls == []
