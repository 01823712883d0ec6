"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling
- A single mapping from error code to HTTP status

Error Taxonomy:
    UNAUTHENTICATED   - No resolvable caller identity (401)
    NOT_FOUND         - Target absent, or the caller cannot see it (404)
    FORBIDDEN         - Target visible, but the caller's role disallows the action (403)
    INVALID_ARGUMENT  - Malformed input (400)
    CONFLICT          - Target state prevents the action, e.g. a deleted group (409)

Exception Hierarchy:
    BaseApplicationError (base)
    ├── UnauthenticatedError
    ├── NotFoundError
    ├── PermissionDeniedError
    ├── ValidationError
    └── ConflictError

Usage:
    from core.exceptions import ErrorCode, NotFoundError

    raise NotFoundError("Conversation not found")

    # Services return ServiceResult instead of raising; views convert failed
    # results with result.raise_for_error(), which picks the class by code.

Note:
    These exceptions are for domain/business logic errors.
    DRF handles API-layer exceptions (serialization, authentication, etc.);
    core.exception_handler renders both with the same body shape.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class ErrorCode:
    """Machine-readable error codes shared by services, exceptions and views."""

    UNAUTHENTICATED = "UNAUTHENTICATED"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    CONFLICT = "CONFLICT"


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
        status_code: HTTP status used when the error reaches the API layer

    Example:
        try:
            ...
        except BaseApplicationError as e:
            return Response(e.to_dict(), status=e.status_code)
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Returns:
            Dict with error, error_code, and (when present) details keys

        Example:
            {
                "error": "Conversation not found",
                "error_code": "NOT_FOUND",
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class UnauthenticatedError(BaseApplicationError):
    """
    Raised when no caller identity can be resolved.

    The operation is aborted before any state is read or written.
    """

    default_error_code: str = ErrorCode.UNAUTHENTICATED
    status_code: int = 401


class NotFoundError(BaseApplicationError):
    """
    Raised when a referenced record is absent or invisible to the caller.

    Conversations the caller does not belong to are reported with this
    error as well, so existence is never confirmed to outsiders.
    """

    default_error_code: str = ErrorCode.NOT_FOUND
    status_code: int = 404


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when the caller can see the target but their role forbids the action.

    Example:
        raise PermissionDeniedError("Admins cannot remove other admins")
    """

    default_error_code: str = ErrorCode.FORBIDDEN
    status_code: int = 403


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for unknown emoji, blank group names, empty member lists and
    messages with neither content nor attachment.
    """

    default_error_code: str = ErrorCode.INVALID_ARGUMENT
    status_code: int = 400


class ConflictError(BaseApplicationError):
    """
    Raised when the target's state prevents the operation.

    Example:
        raise ConflictError("This group no longer exists")

    Note:
        HTTP 409 Conflict is the appropriate status for these errors.
    """

    default_error_code: str = ErrorCode.CONFLICT
    status_code: int = 409


ERROR_CLASSES: dict[str, type[BaseApplicationError]] = {
    ErrorCode.UNAUTHENTICATED: UnauthenticatedError,
    ErrorCode.NOT_FOUND: NotFoundError,
    ErrorCode.FORBIDDEN: PermissionDeniedError,
    ErrorCode.INVALID_ARGUMENT: ValidationError,
    ErrorCode.CONFLICT: ConflictError,
}


def exception_for_code(
    error_code: str | None,
    message: str,
    details: dict[str, Any] | None = None,
) -> BaseApplicationError:
    """
    Build the exception matching an error code.

    Unknown codes fall back to BaseApplicationError (HTTP 500).
    """
    error_class = ERROR_CLASSES.get(error_code or "", BaseApplicationError)
    return error_class(message, error_code=error_code, details=details)
