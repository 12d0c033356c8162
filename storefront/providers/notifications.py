from __future__ import annotations

from typing import Optional

from storefront.data.interface import StorefrontApi
from storefront.data.models import Notification, NotificationFilters

from .base import Provider


class NotificationsProvider(Provider):
    """Notifications and the unread badge counter for the signed-in user."""
    requires_token = True

    def __init__(self, api: Optional[StorefrontApi] = None) -> None:
        super().__init__(api)
        self._notifications: list[Notification] = []
        self.unread_count = 0
        self.filters = NotificationFilters()

    @property
    def notifications(self) -> list[Notification]:
        return list(self._notifications)

    def load_notifications(self, filters: Optional[NotificationFilters] = None, page: int = 1) -> bool:
        if filters is not None:
            self.filters = filters
        notifications = self._run("Failed to load notifications", self.api.get_notifications, self.filters, page)
        if notifications is None:
            return False
        self._notifications = notifications
        self.notify_listeners()
        return True

    def refresh_unread_count(self) -> bool:
        count = self._run("Failed to load unread count", self.api.get_unread_notification_count)
        if count is None:
            return False
        self.unread_count = count
        self.notify_listeners()
        return True

    def mark_read(self, notification_id: int) -> bool:
        if not self._write("Failed to mark notification as read", self.api.mark_notification_read, notification_id):
            return False
        updated = []
        for n in self._notifications:
            if n.id == notification_id and not n.is_read:
                n = n.model_copy(update={"is_read": True})
                self.unread_count = max(self.unread_count - 1, 0)
            updated.append(n)
        self._notifications = updated
        self.notify_listeners()
        return True

    def mark_all_read(self) -> bool:
        if not self._write("Failed to mark notifications as read", self.api.mark_all_notifications_read):
            return False
        self._notifications = [n.model_copy(update={"is_read": True}) for n in self._notifications]
        self.unread_count = 0
        self.notify_listeners()
        return True

    def delete(self, notification_id: int) -> bool:
        if not self._write("Failed to delete notification", self.api.delete_notification, notification_id):
            return False
        removed = [n for n in self._notifications if n.id == notification_id]
        if any(not n.is_read for n in removed):
            self.unread_count = max(self.unread_count - 1, 0)
        self._notifications = [n for n in self._notifications if n.id != notification_id]
        self.notify_listeners()
        return True
