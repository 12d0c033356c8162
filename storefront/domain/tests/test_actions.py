import pytest

from storefront.data.models import Order
from storefront.domain.actions import (
    ACTION_TABLE,
    TERMINAL_STATUSES,
    OrderAction,
    Role,
    actions_for_order,
    allowed_order_actions,
    can_perform,
)
from storefront.domain.status import OrderStatus


def test_role_parse():
    """Test user types map to roles and unknown types become customers."""
    assert Role.parse("library_admin") is Role.LIBRARY_ADMIN
    assert Role.parse(" Delivery_Admin ") is Role.DELIVERY_ADMIN
    assert Role.parse("superuser") is Role.CUSTOMER
    assert Role.parse(None) is Role.CUSTOMER


@pytest.mark.parametrize("role", list(Role))
@pytest.mark.parametrize("status", [s.value for s in OrderStatus] + ["unknown", ""])
def test_actions_always_include_view_and_are_deterministic(role, status):
    """Test every (role, status) pair offers view and answers the same way twice."""
    first = allowed_order_actions(role, status)
    assert OrderAction.VIEW in first
    assert allowed_order_actions(role, status) == first


@pytest.mark.parametrize("role", list(Role))
@pytest.mark.parametrize("status", sorted(TERMINAL_STATUSES))
def test_terminal_statuses_only_allow_view(role, status):
    """Test finished orders offer nothing but view."""
    assert allowed_order_actions(role, status) == frozenset({OrderAction.VIEW})


def test_customer_actions():
    """Test customers cancel early orders and track orders in delivery."""
    assert OrderAction.CANCEL in allowed_order_actions(Role.CUSTOMER, "pending")
    assert OrderAction.CANCEL in allowed_order_actions(Role.CUSTOMER, "confirmed")
    assert OrderAction.CANCEL not in allowed_order_actions(Role.CUSTOMER, "in_delivery")
    assert OrderAction.CANCEL not in allowed_order_actions(Role.CUSTOMER, "delivered")
    assert OrderAction.TRACK in allowed_order_actions(Role.CUSTOMER, "in_delivery")


def test_library_admin_actions():
    """Test approval and assignment for library admins."""
    assert allowed_order_actions(Role.LIBRARY_ADMIN, "pending") == frozenset(
        {OrderAction.VIEW, OrderAction.APPROVE, OrderAction.REJECT}
    )
    for status in ("confirmed", "pending_assignment", "rejected_by_delivery_manager"):
        assert OrderAction.ASSIGN_DELIVERY_MANAGER in allowed_order_actions(Role.LIBRARY_ADMIN, status)
    assert OrderAction.APPROVE not in allowed_order_actions(Role.LIBRARY_ADMIN, "confirmed")


def test_delivery_admin_actions():
    """Test the delivery manager's path through an order."""
    assert allowed_order_actions("delivery_admin", "waiting_for_delivery_manager") == frozenset(
        {OrderAction.VIEW, OrderAction.ACCEPT_DELIVERY, OrderAction.REJECT_DELIVERY}
    )
    assert OrderAction.START_DELIVERY in allowed_order_actions("delivery_admin", "assigned_to_delivery")
    assert allowed_order_actions("delivery_admin", "in_delivery") == frozenset(
        {OrderAction.VIEW, OrderAction.UPDATE_LOCATION, OrderAction.COMPLETE_DELIVERY}
    )
    assert OrderAction.APPROVE not in allowed_order_actions("delivery_admin", "pending")


def test_table_has_no_terminal_entries():
    """Test the action table never grants anything on a terminal status."""
    for statuses in ACTION_TABLE.values():
        assert not TERMINAL_STATUSES & set(statuses)


def test_actions_for_order_use_effective_status():
    """Test an assignment already in delivery unlocks the in-delivery actions."""
    order = Order.model_validate({
        "id": 1,
        "status": "assigned_to_delivery",
        "delivery_assignment": {"id": 9, "status": "in_delivery"},
    })
    assert OrderAction.COMPLETE_DELIVERY in actions_for_order(Role.DELIVERY_ADMIN, order)
    assert can_perform(Role.CUSTOMER, order, OrderAction.TRACK)
    assert not can_perform(Role.CUSTOMER, order, OrderAction.CANCEL)
