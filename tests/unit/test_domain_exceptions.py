"""Tests for domain exceptions and their HTTP status mapping."""

from signflow.core.exception_handlers import status_for
from signflow.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ConflictException,
    ExternalDependencyException,
    ResourceNotFoundException,
    SignflowException,
    SqlNotConfiguredException,
    ValidationException,
)
from signflow.infrastructure.exceptions import StampRenderError, StorageNotFoundError


def test_signflow_exception_default_error_code() -> None:
    """Base SignflowException uses class name as error_code when not provided."""
    exc = SignflowException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "SignflowException"
    assert exc.details == {}
    assert exc.to_dict() == {
        "error": "SignflowException",
        "message": "Something failed",
        "details": {},
    }


def test_validation_exception() -> None:
    exc = ValidationException("Invalid format", field="reason")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "reason"}
    assert ValidationException("x").details == {}


def test_authorization_exception_is_generic() -> None:
    exc = AuthorizationException()
    assert exc.error_code == "PERMISSION_DENIED"
    assert exc.details == {}


def test_not_found_does_not_echo_identifier() -> None:
    exc = ResourceNotFoundException("slot", "secret-token")
    assert exc.message == "Slot not found"
    assert exc.details == {"resource_type": "slot"}
    assert "secret-token" not in str(exc.to_dict())
    assert exc.resource_id == "secret-token"


def test_conflict_carries_current_state() -> None:
    assert ConflictException("late", current_state="approved").details == {
        "current_state": "approved"
    }
    assert ConflictException("late").details == {}


def test_status_mapping() -> None:
    assert status_for(ValidationException("x")) == 400
    assert status_for(AuthenticationException()) == 401
    assert status_for(AuthorizationException()) == 403
    assert status_for(ResourceNotFoundException("document")) == 404
    assert status_for(ConflictException("x")) == 409
    assert status_for(ExternalDependencyException("x")) == 502
    assert status_for(StorageNotFoundError("a.pdf")) == 502
    assert status_for(StampRenderError("bad")) == 502
    assert status_for(SqlNotConfiguredException()) == 503
    assert status_for(SignflowException("x", "SOMETHING_ELSE")) == 400
