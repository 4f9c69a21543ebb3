"""Domain exceptions for the Signflow application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class SignflowException(Exception):
    """Base exception for all Signflow application errors.

    All custom exceptions inherit from this class to allow consistent
    error handling and logging. Presentation layer maps these to HTTP
    responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, current_state).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API error bodies."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(SignflowException):
    """Raised when input validation fails (missing file, bad id, empty reason)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(SignflowException):
    """Raised when the caller identity cannot be established."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(SignflowException):
    """Raised when the caller may not act on a slot or document.

    The message is deliberately generic and carries no details so a caller
    probing slot tokens learns nothing about why access was refused.
    """

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message, "PERMISSION_DENIED")


class ResourceNotFoundException(SignflowException):
    """Raised when a document, slot token or group member does not exist."""

    def __init__(self, resource_type: str, resource_id: str | None = None) -> None:
        """Initialize with the resource kind.

        The identifier is kept on the instance for logging but is not echoed
        back in the message or details.

        Args:
            resource_type: Kind of resource (e.g. 'document', 'slot').
            resource_id: Identifier that was looked up.
        """
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"{resource_type.capitalize()} not found",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type},
        )


class ConflictException(SignflowException):
    """Raised when the target is not in the state the transition requires."""

    def __init__(self, message: str, current_state: str | None = None) -> None:
        """Initialize with message and the state the caller can react to.

        Args:
            message: Description of the conflict.
            current_state: Current state of the slot or document.
        """
        details = {"current_state": current_state} if current_state else {}
        super().__init__(message, "CONFLICT", details)


class ExternalDependencyException(SignflowException):
    """Raised when a collaborator (file system, PDF renderer, mail) fails."""

    def __init__(
        self,
        message: str,
        error_code: str = "EXTERNAL_DEPENDENCY_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class SqlNotConfiguredException(SignflowException):
    """Raised when the SQL engine is used before DATABASE_URL is configured."""

    def __init__(self) -> None:
        super().__init__(
            "SQL database is not configured. Set DATABASE_URL.",
            "SQL_NOT_CONFIGURED",
        )
