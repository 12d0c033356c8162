"""Status vocabularies and their display mappings.

Every mapping here is total: unknown or missing statuses fall back to grey
(colors) or to the raw string (labels) instead of raising.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from storefront.data.models import Order
from storefront.data.models.orders import STATUS_LABELS


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PENDING_ASSIGNMENT = "pending_assignment"
    ASSIGNED_TO_DELIVERY = "assigned_to_delivery"
    WAITING_FOR_DELIVERY_MANAGER = "waiting_for_delivery_manager"
    REJECTED_BY_ADMIN = "rejected_by_admin"
    REJECTED_BY_DELIVERY_MANAGER = "rejected_by_delivery_manager"
    IN_DELIVERY = "in_delivery"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RETURNED = "returned"


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    ACCEPTED = "accepted"
    PICKED_UP = "picked_up"
    IN_PROGRESS = "in_progress"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class ManagerStatus(str, Enum):
    ONLINE = "online"
    AVAILABLE = "available"
    BUSY = "busy"
    OFFLINE = "offline"


class BorrowStatus(str, Enum):
    PAYMENT_PENDING = "payment_pending"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    AWAITING_PICKUP = "awaiting_pickup"
    PENDING_DELIVERY = "pending_delivery"
    ASSIGNED_TO_DELIVERY = "assigned_to_delivery"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    ACTIVE = "active"
    EXTENDED = "extended"
    RETURN_REQUESTED = "return_requested"
    RETURN_APPROVED = "return_approved"
    RETURN_ASSIGNED = "return_assigned"
    OUT_FOR_RETURN_PICKUP = "out_for_return_pickup"
    RETURNED = "returned"
    LATE = "late"
    RETURNED_AFTER_DELAY = "returned_after_delay"
    CANCELLED = "cancelled"


class StatusColor(str, Enum):
    GREEN = "green"
    RED = "red"
    GREY = "grey"
    ORANGE = "orange"
    AMBER = "amber"
    BLUE = "blue"
    INDIGO = "indigo"
    TEAL = "teal"


# ---------- delivery manager availability ----------

def normalize_manager_status(status: Optional[str]) -> str:
    """Lowercase a manager status and fold the legacy ``busy`` into ``online``."""
    value = (status or "").strip().lower()
    if value == ManagerStatus.BUSY.value:
        return ManagerStatus.ONLINE.value
    return value


def manager_status_color(status: Optional[str]) -> StatusColor:
    value = normalize_manager_status(status)
    if value in (ManagerStatus.ONLINE.value, ManagerStatus.AVAILABLE.value):
        return StatusColor.GREEN
    if value == ManagerStatus.OFFLINE.value:
        return StatusColor.RED
    return StatusColor.GREY


def is_manager_selectable(status: Optional[str]) -> bool:
    """Whether a delivery manager may be offered for a new assignment."""
    return normalize_manager_status(status) in (ManagerStatus.ONLINE.value, ManagerStatus.AVAILABLE.value)


# ---------- orders ----------

ORDER_STATUS_COLORS = {
    OrderStatus.PENDING.value: StatusColor.ORANGE,
    OrderStatus.PENDING_ASSIGNMENT.value: StatusColor.AMBER,
    OrderStatus.CONFIRMED.value: StatusColor.BLUE,
    OrderStatus.IN_DELIVERY.value: StatusColor.INDIGO,
    OrderStatus.DELIVERED.value: StatusColor.GREEN,
    OrderStatus.RETURNED.value: StatusColor.GREY,
}


def order_status_color(status: Optional[str]) -> StatusColor:
    return ORDER_STATUS_COLORS.get((status or "").lower(), StatusColor.GREY)


def order_status_label(status: Optional[str]) -> str:
    return STATUS_LABELS.get(status or "", status or "")


def effective_order_status(order: Order) -> str:
    """Order status as shown to the user.

    An assignment already in delivery wins over a stale order status.
    """
    assignment = order.delivery_assignment
    if assignment is not None and assignment.status == OrderStatus.IN_DELIVERY.value:
        return OrderStatus.IN_DELIVERY.value
    return order.status


# ---------- delivery tasks ----------

DELIVERY_STATUS_COLORS = {
    DeliveryStatus.ASSIGNED.value: StatusColor.BLUE,
    DeliveryStatus.ACCEPTED.value: StatusColor.BLUE,
    DeliveryStatus.PICKED_UP.value: StatusColor.ORANGE,
    DeliveryStatus.IN_PROGRESS.value: StatusColor.TEAL,
    DeliveryStatus.IN_TRANSIT.value: StatusColor.TEAL,
    DeliveryStatus.DELIVERED.value: StatusColor.GREEN,
    DeliveryStatus.COMPLETED.value: StatusColor.GREEN,
    DeliveryStatus.FAILED.value: StatusColor.RED,
}

ACTIVE_TASK_STATUSES = frozenset({"assigned", "accepted", "in_progress", "in_transit", "picked_up"})
IN_TRANSIT_TASK_STATUSES = frozenset({"in_progress", "in_transit", "picked_up"})
FINISHED_TASK_STATUSES = frozenset({"completed", "delivered"})

# Transitions a delivery manager can request from the task screen
TASK_TRANSITIONS = {
    "assigned": ("accepted", "failed"),
    "accepted": ("picked_up", "failed"),
    "picked_up": ("in_transit", "failed"),
    "in_progress": ("in_transit", "delivered", "completed", "failed"),
    "in_transit": ("delivered", "completed", "failed"),
    "delivered": ("completed",),
}


def delivery_status_color(status: Optional[str]) -> StatusColor:
    return DELIVERY_STATUS_COLORS.get((status or "").lower(), StatusColor.GREY)


def next_task_statuses(status: Optional[str]) -> tuple[str, ...]:
    return TASK_TRANSITIONS.get((status or "").lower(), ())


# ---------- borrowing ----------

MAX_BORROW_PERIOD_DAYS = 30
MAX_EXTENSION_DAYS = 14

CANCELLABLE_BORROW_STATUSES = frozenset({BorrowStatus.PENDING.value})
RETURNABLE_BORROW_STATUSES = frozenset({BorrowStatus.ACTIVE.value, BorrowStatus.EXTENDED.value})
