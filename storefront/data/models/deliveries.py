from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, Field, model_validator

from .common import ApiModel, LenientInt, OptionalInt, Timestamp, first_present, parse_float, parse_int


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else parse_float(value, default=None)


class DeliveryTask(ApiModel):
    """Response model for a delivery task assigned to the current delivery manager."""
    id: int = Field(description="Task (assignment) identifier")
    task_number: str = Field(default="", validation_alias=AliasChoices("task_number", "taskNumber"), description="Human readable task number")
    task_type: str = Field(default="delivery", validation_alias=AliasChoices("task_type", "taskType", "delivery_type"), description="pickup, delivery or return")
    status: str = Field(default="pending", description="Task status")
    order_id: OptionalInt = Field(default=None, validation_alias=AliasChoices("order_id", "orderId"), description="Related order")
    customer_name: str = Field(default="", validation_alias=AliasChoices("customer_name", "customerName"), description="Customer display name")
    customer_phone: Optional[str] = Field(default=None, validation_alias=AliasChoices("customer_phone", "customerPhone"), description="Customer phone")
    customer_email: Optional[str] = Field(default=None, validation_alias=AliasChoices("customer_email", "customerEmail"), description="Customer email")
    delivery_address: str = Field(default="", validation_alias=AliasChoices("delivery_address", "deliveryAddress"), description="Street address")
    delivery_city: Optional[str] = Field(default=None, validation_alias=AliasChoices("delivery_city", "deliveryCity"), description="City")
    delivery_instructions: Optional[str] = Field(default=None, validation_alias=AliasChoices("delivery_instructions", "deliveryInstructions"), description="Instructions from the customer")
    notes: Optional[str] = Field(default=None, validation_alias=AliasChoices("notes", "delivery_notes", "deliveryNotes"), description="Delivery notes")
    failure_reason: Optional[str] = Field(default=None, validation_alias=AliasChoices("failure_reason", "failureReason"), description="Reason for a failed delivery")
    retry_count: LenientInt = Field(default=0, validation_alias=AliasChoices("retry_count", "retryCount"), description="Delivery attempts after a failure")
    items: list[dict] = Field(default_factory=list, description="Raw order lines carried with the task")
    status_history: list[dict] = Field(default_factory=list, validation_alias=AliasChoices("status_history", "statusHistory"), description="Status change log")
    latitude: Optional[float] = Field(default=None, description="Last reported latitude")
    longitude: Optional[float] = Field(default=None, description="Last reported longitude")
    assigned_at: Timestamp = Field(default=None, validation_alias=AliasChoices("assigned_at", "assignedAt"))
    accepted_at: Timestamp = Field(default=None, validation_alias=AliasChoices("accepted_at", "acceptedAt"))
    picked_up_at: Timestamp = Field(default=None, validation_alias=AliasChoices("picked_up_at", "pickedUpAt"))
    delivered_at: Timestamp = Field(default=None, validation_alias=AliasChoices("delivered_at", "deliveredAt"))
    completed_at: Timestamp = Field(default=None, validation_alias=AliasChoices("completed_at", "completedAt"))
    estimated_delivery_time: Timestamp = Field(default=None, validation_alias=AliasChoices("estimated_delivery_time", "estimatedDeliveryTime", "eta"))
    created_at: Timestamp = Field(default=None, validation_alias=AliasChoices("created_at", "createdAt"))
    updated_at: Timestamp = Field(default=None, validation_alias=AliasChoices("updated_at", "updatedAt"))

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = {k: v for k, v in data.items() if v is not None}
        order = data.get("order")
        if isinstance(order, dict):
            data.setdefault("order_id", order.get("id"))
            data.setdefault("customer_name", order.get("customer_name"))
            data.setdefault("items", order.get("items"))
        elif order is not None and "order_id" not in data and "orderId" not in data:
            data["order_id"] = parse_int(order)
        address = data.get("delivery_address")
        if isinstance(address, dict):
            data["delivery_address"] = first_present(address, "address1", "address", "street", default="")
            data.setdefault("delivery_city", address.get("city"))
        for key in ("latitude", "longitude"):
            if key in data:
                data[key] = _optional_float(data[key])
        return {k: v for k, v in data.items() if v is not None}


class DeliveryManager(ApiModel):
    """Response model for a delivery manager as listed for assignment."""
    id: int = Field(description="Delivery manager user id")
    name: str = Field(default="", description="Display name")
    email: Optional[str] = Field(default=None, description="Email")
    phone: Optional[str] = Field(default=None, description="Phone number")
    status: str = Field(default="offline", description="Availability status, lowercased")
    is_available: bool = Field(default=False, validation_alias=AliasChoices("is_available", "isAvailable"), description="Backend availability flag")
    rating: Optional[float] = Field(default=None, description="Average rating")
    total_deliveries: LenientInt = Field(default=0, validation_alias=AliasChoices("total_deliveries", "totalDeliveries"), description="Lifetime deliveries")
    active_deliveries: LenientInt = Field(default=0, validation_alias=AliasChoices("active_deliveries", "activeDeliveries", "current_deliveries"), description="Deliveries in progress")

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        data["name"] = first_present(data, "name", "full_name", "get_full_name", default="")
        data["phone"] = first_present(data, "phone", "phone_number")
        status = first_present(data, "status", "delivery_status", "status_display", default="offline")
        data["status"] = str(status).lower()
        if "rating" in data:
            data["rating"] = _optional_float(data["rating"])
        return {k: v for k, v in data.items() if v is not None}


class ManagerAvailability(ApiModel):
    """Availability status of the signed-in delivery manager."""
    delivery_status: str = Field(default="offline", description="online, busy or offline")
    can_change_manually: bool = Field(default=True, description="False while the backend holds the manager busy")
    active_deliveries: LenientInt = Field(default=0, description="Deliveries in progress")

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("delivery_status"), str):
            data = {**data, "delivery_status": data["delivery_status"].lower()}
        return data


class DeliveryRequest(ApiModel):
    """Unified delivery request covering purchase, borrow and return deliveries."""
    id: int = Field(description="Request identifier")
    request_number: str = Field(default="", description="Human readable request number")
    delivery_type: str = Field(default="purchase", validation_alias=AliasChoices("delivery_type", "type", "request_type"), description="purchase, borrow or return")
    status: str = Field(default="pending", description="Request status")
    order_id: OptionalInt = Field(default=None, description="Related order")
    customer_name: str = Field(default="", description="Customer display name")
    customer_phone: Optional[str] = Field(default=None, description="Customer phone")
    delivery_address: str = Field(default="", description="Street address")
    delivery_city: Optional[str] = Field(default=None, description="City")
    delivery_manager_id: OptionalInt = Field(default=None, description="Assigned delivery manager")
    delivery_manager_name: Optional[str] = Field(default=None, description="Assigned delivery manager name")
    notes: Optional[str] = Field(default=None, description="Delivery notes")
    rejection_reason: Optional[str] = Field(default=None, description="Reason given on rejection")
    latitude: Optional[float] = Field(default=None, description="Last reported latitude")
    longitude: Optional[float] = Field(default=None, description="Last reported longitude")
    deposit_paid: Optional[bool] = Field(default=None, description="Borrow deposit collected")
    fine_status: Optional[str] = Field(default=None, description="Late-return fine status")
    scheduled_date: Timestamp = None
    delivered_date: Timestamp = None
    created_at: Timestamp = None
    updated_at: Timestamp = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = {k: v for k, v in data.items() if v is not None}
        order = data.get("order")
        if isinstance(order, dict):
            data.setdefault("order_id", order.get("id"))
        elif order is not None:
            data.setdefault("order_id", parse_int(order))
        customer = data.get("customer")
        if isinstance(customer, dict):
            data.setdefault("customer_name", first_present(customer, "full_name", "get_full_name", "name"))
            data.setdefault("customer_phone", first_present(customer, "phone", "phone_number"))
        manager = data.get("delivery_manager")
        if isinstance(manager, dict):
            data.setdefault("delivery_manager_id", manager.get("id"))
            data.setdefault("delivery_manager_name", first_present(manager, "full_name", "get_full_name", "name"))
        elif manager is not None:
            data.setdefault("delivery_manager_id", parse_int(manager))
        for key in ("latitude", "longitude"):
            if key in data:
                data[key] = _optional_float(data[key])
        return {k: v for k, v in data.items() if v is not None}
