from storefront.api.errors import (
    ApiError,
    AuthenticationError,
    InvalidRequestError,
    NotFoundError,
    PermissionDeniedError,
    ServerError,
    ValidationFailedError,
    error_for_status,
    format_validation_errors,
)

def test_bad_request_prefers_backend_message():
    """Test 400 uses the backend message when one is given."""
    err = error_for_status(400, {"message": "Quantity must be positive"})
    assert isinstance(err, InvalidRequestError)
    assert err.message == "Quantity must be positive"
    assert err.status_code == 400

def test_bad_request_default_message():
    """Test 400 falls back to the generic invalid input message."""
    err = error_for_status(400, None)
    assert err.message == "Invalid request. Please check your input."

def test_fixed_messages():
    """Test 401, 403 and 404 ignore the backend message."""
    assert isinstance(error_for_status(401, {"message": "x"}), AuthenticationError)
    forbidden = error_for_status(403, {"detail": "nope"})
    assert isinstance(forbidden, PermissionDeniedError)
    assert forbidden.message == "You are not authorized to perform this action."
    missing = error_for_status(404, {"detail": "Not found."})
    assert isinstance(missing, NotFoundError)
    assert missing.message == "Resource not found."

def test_server_errors():
    """Test every 5xx maps to ServerError."""
    for status in (500, 502, 503, 504):
        err = error_for_status(status, {"message": "boom"})
        assert isinstance(err, ServerError)
        assert err.message == "Server error. Please try again later."

def test_validation_error_renders_field_errors():
    """Test 422 with field errors lists each field."""
    err = error_for_status(422, {"errors": {"email": ["is required"]}})
    assert isinstance(err, ValidationFailedError)
    assert err.message == "email: is required"

def test_other_status_is_generic():
    """Test unknown statuses keep the base class and backend message."""
    err = error_for_status(409, {"error": "Conflict", "error_code": "DUPLICATE"})
    assert type(err) is ApiError
    assert err.message == "Conflict"
    assert err.error_code == "DUPLICATE"
    assert error_for_status(418).message == "An unexpected error occurred."

def test_format_validation_errors():
    """Test field errors are rendered one per line."""
    text = format_validation_errors({"email": ["is required", "must be valid"], "name": "too short"})
    assert text == "email: is required, must be valid\nname: too short"
    assert format_validation_errors({}) == "Validation failed."
    assert format_validation_errors(None) == "Validation failed."
