from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer, model_validator


class ApiModel(BaseModel):
    """Base for records decoded from the bookstore API.

    Accepts field names or their aliases and ignores keys the client does not model.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # Explicit nulls fall back to the field default
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


def parse_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """Lenient decimal parsing: amounts arrive as strings, ints or floats."""
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    if isinstance(value, bool):
        return default
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    return parsed if parsed.is_finite() else default


def parse_float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def parse_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return default


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO-8601 strings (with or without a trailing ``Z``) to datetime, None when unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def first_present(data: dict, *keys: str, default: Any = None) -> Any:
    """Value of the first key that is present and not None."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


# Decimal amounts keep the backend's string formatting when dumped to JSON
Money = Annotated[
    Decimal,
    BeforeValidator(lambda v: parse_decimal(v, Decimal("0"))),
    PlainSerializer(lambda d: str(d), return_type=str, when_used="json"),
]
OptionalMoney = Annotated[
    Optional[Decimal],
    BeforeValidator(parse_decimal),
    PlainSerializer(lambda d: str(d), return_type=str, when_used="json-unless-none"),
]
LenientFloat = Annotated[float, BeforeValidator(parse_float)]
LenientInt = Annotated[int, BeforeValidator(lambda v: parse_int(v, 0))]
OptionalInt = Annotated[Optional[int], BeforeValidator(parse_int)]
Timestamp = Annotated[Optional[datetime], BeforeValidator(parse_timestamp)]
