from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field

from .common import ApiModel, OptionalInt, Timestamp


class Notification(ApiModel):
    """Response model for an in-app notification."""
    id: int = Field(description="Notification identifier")
    user_id: OptionalInt = Field(default=None, validation_alias=AliasChoices("user_id", "user", "recipient"), description="Recipient user id")
    title: str = Field(default="", description="Headline")
    message: str = Field(default="", description="Body text")
    type: str = Field(default="info", validation_alias=AliasChoices("type", "notification_type"), description="Notification category")
    priority: Optional[str] = Field(default=None, description="Priority label")
    related_entity_id: OptionalInt = Field(default=None, description="Id of the entity the notification is about")
    related_entity_type: Optional[str] = Field(default=None, description="Kind of the related entity")
    is_read: bool = Field(default=False, description="Read flag")
    created_at: Timestamp = Field(default=None, description="Creation timestamp")
