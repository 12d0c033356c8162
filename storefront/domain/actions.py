"""Which order actions each role may see for a given order status.

The table is static: the backend owns every transition, the client only
decides which buttons to offer.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from storefront.data.models import Order

from .status import OrderStatus, effective_order_status


class Role(str, Enum):
    CUSTOMER = "customer"
    LIBRARY_ADMIN = "library_admin"
    DELIVERY_ADMIN = "delivery_admin"

    @classmethod
    def parse(cls, user_type: Optional[str]) -> "Role":
        """Map a backend user type to a role; anything unrecognized is a customer."""
        try:
            return cls((user_type or "").strip().lower())
        except ValueError:
            return cls.CUSTOMER


class OrderAction(str, Enum):
    VIEW = "view"
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"
    TRACK = "track"
    ASSIGN_DELIVERY_MANAGER = "assign_delivery_manager"
    ACCEPT_DELIVERY = "accept_delivery"
    REJECT_DELIVERY = "reject_delivery"
    START_DELIVERY = "start_delivery"
    UPDATE_LOCATION = "update_location"
    COMPLETE_DELIVERY = "complete_delivery"


# Terminal statuses only ever allow viewing
TERMINAL_STATUSES = frozenset({
    OrderStatus.CANCELLED.value,
    OrderStatus.REJECTED_BY_ADMIN.value,
    OrderStatus.DELIVERED.value,
    OrderStatus.COMPLETED.value,
    OrderStatus.RETURNED.value,
})

_S = OrderStatus
_A = OrderAction

ACTION_TABLE: dict[Role, dict[str, frozenset[OrderAction]]] = {
    Role.CUSTOMER: {
        _S.PENDING.value: frozenset({_A.CANCEL}),
        _S.CONFIRMED.value: frozenset({_A.CANCEL}),
        _S.IN_DELIVERY.value: frozenset({_A.TRACK}),
    },
    Role.LIBRARY_ADMIN: {
        _S.PENDING.value: frozenset({_A.APPROVE, _A.REJECT}),
        _S.CONFIRMED.value: frozenset({_A.ASSIGN_DELIVERY_MANAGER}),
        _S.PENDING_ASSIGNMENT.value: frozenset({_A.ASSIGN_DELIVERY_MANAGER}),
        _S.REJECTED_BY_DELIVERY_MANAGER.value: frozenset({_A.ASSIGN_DELIVERY_MANAGER}),
        _S.IN_DELIVERY.value: frozenset({_A.TRACK}),
    },
    Role.DELIVERY_ADMIN: {
        _S.WAITING_FOR_DELIVERY_MANAGER.value: frozenset({_A.ACCEPT_DELIVERY, _A.REJECT_DELIVERY}),
        _S.ASSIGNED_TO_DELIVERY.value: frozenset({_A.START_DELIVERY}),
        _S.IN_DELIVERY.value: frozenset({_A.UPDATE_LOCATION, _A.COMPLETE_DELIVERY}),
    },
}


def allowed_order_actions(role: Role | str | None, status: Optional[str]) -> frozenset[OrderAction]:
    """Actions visible for ``(role, status)``; always includes ``view``."""
    if not isinstance(role, Role):
        role = Role.parse(role)
    status = (status or "").lower()
    if status in TERMINAL_STATUSES:
        return frozenset({OrderAction.VIEW})
    return frozenset({OrderAction.VIEW}) | ACTION_TABLE[role].get(status, frozenset())


def actions_for_order(role: Role | str | None, order: Order) -> frozenset[OrderAction]:
    return allowed_order_actions(role, effective_order_status(order))


def can_perform(role: Role | str | None, order: Order, action: OrderAction) -> bool:
    return action in actions_for_order(role, order)
