from __future__ import annotations

from typing import Optional

from storefront.data.interface import StorefrontApi
from storefront.data.models import DeliveryTask, ManagerAvailability
from storefront.domain.filters import count_tasks_by_group, filter_tasks_by_status
from storefront.domain.status import (
    ManagerStatus,
    StatusColor,
    manager_status_color,
    next_task_statuses,
    normalize_manager_status,
)

from .base import Provider


class DeliveryTasksProvider(Provider):
    """Tasks assigned to the signed-in delivery manager."""
    requires_token = True

    def __init__(self, api: Optional[StorefrontApi] = None) -> None:
        super().__init__(api)
        self._tasks: list[DeliveryTask] = []
        self.status_filter = "all"

    @property
    def tasks(self) -> list[DeliveryTask]:
        return list(self._tasks)

    @property
    def visible_tasks(self) -> list[DeliveryTask]:
        return filter_tasks_by_status(self._tasks, self.status_filter)

    @property
    def counts(self) -> dict[str, int]:
        return count_tasks_by_group(self._tasks)

    def get_task(self, task_id: int) -> Optional[DeliveryTask]:
        return next((t for t in self._tasks if t.id == task_id), None)

    def set_status_filter(self, status: str) -> None:
        self.status_filter = status or "all"
        self.notify_listeners()

    def _store_tasks(self, tasks: list[DeliveryTask]) -> None:
        self._tasks = tasks

    def load_tasks(self) -> bool:
        return self._load("tasks", "Failed to load delivery tasks", self.api.get_delivery_tasks, self._store_tasks)

    def _refresh_tasks(self) -> None:
        self._load(
            "tasks", "Failed to reload delivery tasks", self.api.get_delivery_tasks, self._store_tasks, quiet=True,
        )

    def update_task_status(
        self,
        task_id: int,
        status: str,
        notes: Optional[str] = None,
        failure_reason: Optional[str] = None,
    ) -> bool:
        task = self.get_task(task_id)
        if task is not None and status not in next_task_statuses(task.status):
            return self._fail(f"Failed to update task: cannot move from {task.status} to {status}")
        if status == "failed" and not (failure_reason or "").strip():
            return self._fail("Failed to update task: a failure reason is required")
        if not self._write(
            "Failed to update task", self.api.update_assignment_status, task_id, status, notes, failure_reason,
        ):
            return False
        self._refresh_tasks()
        return True

    def accept_task(self, task_id: int) -> bool:
        task = self.get_task(task_id)
        if task is not None and "accepted" not in next_task_statuses(task.status):
            return self._fail(f"Failed to accept task: task is {task.status}")
        if not self._write("Failed to accept task", self.api.accept_assignment, task_id):
            return False
        self._refresh_tasks()
        return True

    def mark_picked_up(self, task_id: int) -> bool:
        return self.update_task_status(task_id, "picked_up")

    def mark_in_transit(self, task_id: int) -> bool:
        return self.update_task_status(task_id, "in_transit")

    def mark_delivered(self, task_id: int, notes: Optional[str] = None) -> bool:
        return self.update_task_status(task_id, "delivered", notes=notes)

    def mark_completed(self, task_id: int, notes: Optional[str] = None) -> bool:
        return self.update_task_status(task_id, "completed", notes=notes)

    def mark_failed(self, task_id: int, failure_reason: str) -> bool:
        return self.update_task_status(task_id, "failed", failure_reason=failure_reason)

    def update_location(self, task_id: int, latitude: float, longitude: float) -> bool:
        if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
            return self._fail(f"Failed to update location: invalid coordinates ({latitude}, {longitude})")
        return self._write("Failed to update location", self.api.update_task_location, task_id, latitude, longitude)


class DeliveryStatusProvider(Provider):
    """Online/offline availability of the signed-in delivery manager."""
    requires_token = True

    def __init__(self, api: Optional[StorefrontApi] = None) -> None:
        super().__init__(api)
        self.availability: Optional[ManagerAvailability] = None

    @property
    def status(self) -> str:
        if self.availability is None:
            return ManagerStatus.OFFLINE.value
        return normalize_manager_status(self.availability.delivery_status)

    @property
    def status_color(self) -> StatusColor:
        return manager_status_color(self.status)

    @property
    def can_change_manually(self) -> bool:
        return self.availability is None or self.availability.can_change_manually

    def _store(self, availability: Optional[ManagerAvailability]) -> bool:
        if availability is None:
            return False
        self.availability = availability
        self.notify_listeners()
        return True

    def refresh(self) -> bool:
        return self._store(self._run("Failed to load delivery status", self.api.get_manager_availability))

    def set_status(self, status: str) -> bool:
        if not self.can_change_manually:
            return self._fail("Failed to update status: status is managed automatically while deliveries are active")
        return self._store(self._run("Failed to update status", self.api.set_manager_availability, status))

    def go_online(self) -> bool:
        return self.set_status(ManagerStatus.ONLINE.value)

    def go_offline(self) -> bool:
        return self.set_status(ManagerStatus.OFFLINE.value)

    def reset(self) -> bool:
        return self._store(self._run("Failed to reset status", self.api.reset_manager_availability))
