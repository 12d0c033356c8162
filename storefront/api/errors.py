from __future__ import annotations

from typing import Any, Mapping, Optional


class ApiError(Exception):
    """Base error for every failed call against the bookstore API.

    Attributes:
        message (str): Human readable message, safe to show to the user.
        status_code (int, optional): HTTP status, None for transport failures.
        details (Any, optional): Decoded error body returned by the backend.
        error_code (str, optional): Backend error code from a ``{success: false}`` envelope.
    """
    default_message = "An unexpected error occurred."

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Any = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message = message or self.default_message
        self.status_code = status_code
        self.details = details
        self.error_code = error_code
        super().__init__(self.message)


class InvalidRequestError(ApiError):
    default_message = "Invalid request. Please check your input."


class AuthenticationError(ApiError):
    default_message = "Authentication failed. Please log in again."


class PermissionDeniedError(ApiError):
    default_message = "You are not authorized to perform this action."


class NotFoundError(ApiError):
    default_message = "Resource not found."


class ValidationFailedError(ApiError):
    default_message = "Validation error. Please check your input."


class ServerError(ApiError):
    default_message = "Server error. Please try again later."


class NetworkError(ApiError):
    default_message = "No internet connection. Please check your network settings."


class ResponseFormatError(ApiError):
    default_message = "Invalid response format from the server."


# Statuses whose message is fixed regardless of what the backend says
_FIXED = {
    401: AuthenticationError,
    403: PermissionDeniedError,
    404: NotFoundError,
}


def backend_message(body: Any) -> Optional[str]:
    """Pull the most specific message out of an error body, if there is one."""
    if isinstance(body, Mapping):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
        errors = body.get("errors")
        if isinstance(errors, Mapping) and errors:
            return format_validation_errors(errors)
    if isinstance(body, str) and body:
        return body
    return None


def error_for_status(status_code: int, body: Any = None) -> ApiError:
    """Map a non-2xx response onto the matching ApiError subclass.

    Args:
        status_code (int): HTTP status of the response.
        body (Any, optional): Decoded response body.
    Returns:
        ApiError: An instance ready to be raised.
    """
    error_code = body.get("error_code") if isinstance(body, Mapping) else None
    if status_code in _FIXED:
        return _FIXED[status_code](status_code=status_code, details=body, error_code=error_code)
    if 500 <= status_code < 600:
        return ServerError(status_code=status_code, details=body, error_code=error_code)
    message = backend_message(body)
    if status_code == 400:
        return InvalidRequestError(message, status_code, body, error_code)
    if status_code == 422:
        return ValidationFailedError(message, status_code, body, error_code)
    return ApiError(message, status_code, body, error_code)


def format_validation_errors(errors: Optional[Mapping[str, Any]]) -> str:
    """Render a ``{field: [messages]}`` mapping as one line per field."""
    if not errors:
        return "Validation failed."
    lines = []
    for field, messages in errors.items():
        if isinstance(messages, (list, tuple)):
            lines.append(f"{field}: {', '.join(str(m) for m in messages)}")
        else:
            lines.append(f"{field}: {messages}")
    return "\n".join(lines)
