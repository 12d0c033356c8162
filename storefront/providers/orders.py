from __future__ import annotations

from typing import Optional

from storefront.data.interface import StorefrontApi
from storefront.data.models import DeliveryManager, Order, OrderFilters
from storefront.domain.actions import OrderAction, Role, actions_for_order
from storefront.domain.status import effective_order_status, is_manager_selectable
from storefront.utils.debounce import Debouncer

from .base import Provider


class OrdersProvider(Provider):
    """Order list and order actions for one signed-in role.

    Write actions are offered only when the action table allows them for the
    order's effective status; after a successful write the order is re-fetched
    because the backend decides the resulting status.
    """
    requires_token = True

    def __init__(
        self,
        role: Role | str | None = Role.CUSTOMER,
        api: Optional[StorefrontApi] = None,
        debouncer: Optional[Debouncer] = None,
    ) -> None:
        super().__init__(api)
        self.role = role if isinstance(role, Role) else Role.parse(role)
        self._orders: list[Order] = []
        self.selected_order: Optional[Order] = None
        self.delivery_managers: list[DeliveryManager] = []
        self.ready_for_delivery: list[Order] = []
        self.filters = OrderFilters()
        self._debouncer = debouncer or Debouncer(self.config.search_debounce_ms / 1000, self.load_orders)

    @property
    def orders(self) -> list[Order]:
        return list(self._orders)

    @property
    def selectable_delivery_managers(self) -> list[DeliveryManager]:
        return [m for m in self.delivery_managers if is_manager_selectable(m.status)]

    def actions_for(self, order: Order) -> frozenset[OrderAction]:
        return actions_for_order(self.role, order)

    # ---------- queries ----------

    def _store_orders(self, orders: list[Order]) -> None:
        self._orders = orders

    def load_orders(self, filters: Optional[OrderFilters] = None) -> bool:
        if filters is not None:
            self.filters = filters
        filters = self.filters
        return self._load("orders", "Failed to load orders", lambda: self.api.get_orders(filters), self._store_orders)

    def set_search_query(self, query: str) -> None:
        """Debounced search by order number or customer."""
        self.filters = self.filters.model_copy(update={"search": (query or "").strip() or None})
        self._debouncer.call()

    def set_status_filter(self, status: Optional[str]) -> bool:
        self.filters = self.filters.model_copy(update={"status": status})
        return self.load_orders()

    def _store_order(self, order: Order) -> None:
        self.selected_order = order
        self._orders = [order if o.id == order.id else o for o in self._orders]

    def load_order(self, order_id: int) -> Optional[Order]:
        if not self._load(
            f"order:{order_id}", "Failed to load order", lambda: self.api.get_order(order_id), self._store_order,
        ):
            return None
        return self.selected_order

    def _refresh_order(self, order_id: int) -> None:
        self._load(
            f"order:{order_id}",
            "Failed to reload order",
            lambda: self.api.get_order(order_id),
            self._store_order,
            quiet=True,
        )

    def load_ready_for_delivery(self) -> bool:
        """Approved orders that still need a delivery manager."""
        def store(orders: list[Order]) -> None:
            self.ready_for_delivery = orders

        return self._load(
            "ready_for_delivery", "Failed to load orders ready for delivery",
            self.api.get_orders_ready_for_delivery, store,
        )

    def load_delivery_managers(self) -> bool:
        managers = self._run("Failed to load delivery managers", self.api.get_available_delivery_managers)
        if managers is None:
            return False
        self.delivery_managers = managers
        self.notify_listeners()
        return True

    # ---------- actions ----------

    def _act(self, order: Order, action: OrderAction, label: str, fn, *args) -> bool:
        if action not in self.actions_for(order):
            status = effective_order_status(order)
            return self._fail(f"{label}: not available for {self.role.value} on a {status} order")
        if not self._write(label, fn, order.id, *args):
            return False
        # The write went through; a failed re-fetch only leaves the old copy on screen
        self._refresh_order(order.id)
        return True

    def cancel_order(self, order: Order) -> bool:
        return self._act(order, OrderAction.CANCEL, "Failed to cancel order", self.api.cancel_order)

    def approve_order(self, order: Order, delivery_manager_id: Optional[int] = None) -> bool:
        return self._act(order, OrderAction.APPROVE, "Failed to approve order", self.api.approve_order, delivery_manager_id)

    def reject_order(self, order: Order, reason: str) -> bool:
        if not reason or not reason.strip():
            return self._fail("Failed to reject order: a rejection reason is required")
        return self._act(order, OrderAction.REJECT, "Failed to reject order", self.api.reject_order, reason.strip())

    def assign_delivery_manager(self, order: Order, delivery_manager_id: int) -> bool:
        return self._act(
            order,
            OrderAction.ASSIGN_DELIVERY_MANAGER,
            "Failed to assign delivery manager",
            self.api.assign_delivery_manager,
            delivery_manager_id,
        )

    def start_delivery(self, order: Order) -> bool:
        return self._act(order, OrderAction.START_DELIVERY, "Failed to start delivery", self.api.start_delivery)

    def complete_delivery(self, order: Order) -> bool:
        return self._act(order, OrderAction.COMPLETE_DELIVERY, "Failed to complete delivery", self.api.complete_delivery)

    def add_note(self, order: Order, content: str) -> bool:
        if not content or not content.strip():
            return self._fail("Failed to add note: note is empty")
        if not self._write("Failed to add note", self.api.add_order_note, order.id, content.strip()):
            return False
        self._refresh_order(order.id)
        return True

    def dispose(self) -> None:
        self._debouncer.cancel()
