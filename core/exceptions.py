"""Custom exception classes for the application.

Defines domain-specific exceptions that can be raised throughout the
application and handled consistently by exception handlers. Every exception
carries a stable, machine-readable `code` so API clients can branch on it
without parsing the message.
"""

from typing import Optional, Any, Dict


class AppException(Exception):
    """Base exception class for all application exceptions.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional additional error details.
        code: Machine-readable failure code.
    """

    default_code = "SERVER_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        code: Optional[str] = None
    ):
        """Initialize application exception.

        Args:
            message: Error message.
            status_code: HTTP status code (default: 500).
            details: Optional dictionary with additional error context.
            code: Optional failure code; defaults to the class `default_code`.
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.code = code or self.default_code
        super().__init__(self.message)


class NotFoundError(AppException):
    """Exception raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: Any, code: Optional[str] = None):
        """Initialize not found error.

        Args:
            resource: Type of resource (e.g., 'User', 'Recipe').
            identifier: ID or identifier that was not found.
            code: Optional failure code, defaults to `<RESOURCE>_NOT_FOUND`.
        """
        message = f"{resource} with id '{identifier}' not found"
        super().__init__(
            message,
            status_code=404,
            details={"resource": resource, "id": identifier},
            code=code or f"{resource.upper()}_NOT_FOUND",
        )


class InvalidStateError(AppException):
    """Exception raised when an operation conflicts with the current state.

    Examples are self-follow, favoriting a recipe twice or reviewing the
    same recipe twice.
    """

    def __init__(self, message: str, code: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details, code=code)


class UnauthorizedError(AppException):
    """Exception raised when the actor does not own the resource it mutates."""

    def __init__(self, message: str = "Not authorized to modify this resource", code: str = "UNAUTHORIZED"):
        super().__init__(message, status_code=403, code=code)


class AuthenticationError(AppException):
    """Exception raised when the caller cannot be authenticated."""

    def __init__(self, message: str, code: str = "INVALID_TOKEN"):
        super().__init__(message, status_code=401, code=code)


class ValidationError(AppException):
    """Exception raised when input validation fails."""

    default_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, code: Optional[str] = None):
        """Initialize validation error.

        Args:
            message: Validation error message.
            field: Optional field name that failed validation.
            code: Optional failure code.
        """
        details = {"field": field} if field else {}
        super().__init__(message, status_code=400, details=details, code=code)


class DatabaseError(AppException):
    """Exception raised when database operations fail."""

    default_code = "DATABASE_ERROR"

    def __init__(self, message: str, operation: Optional[str] = None):
        """Initialize database error.

        Args:
            message: Database error message.
            operation: Optional operation that failed (e.g., 'create', 'update').
        """
        details = {"operation": operation} if operation else {}
        super().__init__(message, status_code=500, details=details)
