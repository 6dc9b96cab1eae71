"""Error Hierarchy - verifies status codes, codes and the REST envelope.

Tests:
    - Each error type maps to its HTTP status
    - AuthenticationError defaults to one generic message
    - to_response() has the documented shape
"""

import pytest

from user_service.core.errors import (
    AuthenticationError,
    ConflictError,
    ErrorCategory,
    NotFoundError,
    StorageError,
    UserServiceError,
    ValidationError,
)


@pytest.mark.parametrize(
    "error,status,code",
    [
        (ValidationError("bad", field="email"), 400, "VALIDATION_ERROR"),
        (AuthenticationError(), 401, "AUTHENTICATION_FAILED"),
        (NotFoundError("User", 7), 404, "RESOURCE_NOT_FOUND"),
        (ConflictError("dup", field="email"), 409, "CONFLICT"),
        (StorageError("down", "list"), 500, "STORAGE_ERROR"),
    ],
)
def test_error_status_and_code(error, status, code):
    assert isinstance(error, UserServiceError)
    assert error.http_status == status
    assert error.code == code


def test_authentication_error_message_is_generic():
    assert AuthenticationError().message == "Invalid email or password"


def test_not_found_message_names_resource():
    err = NotFoundError("User", 42)
    assert err.message == "User '42' not found"
    assert err.category == ErrorCategory.RESOURCE_NOT_FOUND


def test_storage_error_message_includes_operation():
    assert StorageError("Failed to fetch users", "list").message == (
        "Database list failed: Failed to fetch users"
    )


def test_to_response_shape():
    body = ConflictError("A user with that email already exists", field="email").to_response()
    error = body["error"]
    assert error["code"] == "CONFLICT"
    assert error["category"] == "conflict"
    assert error["severity"] == "error"
    assert "timestamp" in error
