from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class ActionResult(BaseModel):
    """Outcome of a write call that answers with a ``{success, message}`` envelope."""
    success: bool = Field(default=True, description="Whether the backend accepted the action")
    message: Optional[str] = Field(default=None, description="Backend message")
    data: Any = Field(default=None, description="Payload returned with the result")
    error_code: Optional[str] = Field(default=None, description="Backend error code on failure")

    @classmethod
    def from_payload(cls, payload: Any) -> "ActionResult":
        """Wrap whatever a write endpoint returned; non-envelope bodies count as success data."""
        if isinstance(payload, dict) and ("success" in payload or "message" in payload):
            return cls(
                success=payload.get("success", True) is not False,
                message=payload.get("message"),
                data=payload.get("data"),
                error_code=payload.get("error_code"),
            )
        return cls(success=True, data=payload)


class UnreadCount(BaseModel):
    """Unread notification counter."""
    unread_count: int = Field(default=0, description="Number of unread notifications")
