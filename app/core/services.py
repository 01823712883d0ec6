"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from views and models.
    Views handle HTTP concerns, models handle data, services handle logic.
    Every chat, directory and blob store operation is a classmethod on a
    BaseService subclass and takes the resolved caller as its first argument.

Pattern Comparison:
    - ServiceResult: Use for expected failures (validation, business rules)
    - Exceptions: Use for unexpected failures (database errors, bugs)

Usage:
    from core.exceptions import ErrorCode
    from core.services import BaseService, ServiceResult

    class ConversationService(BaseService):
        @classmethod
        def delete_group(cls, caller, conversation_id) -> ServiceResult[None]:
            conversation = Conversation.objects.filter(id=conversation_id).first()
            if conversation is None:
                return ServiceResult.failure(
                    "Conversation not found",
                    error_code=ErrorCode.NOT_FOUND,
                )

            with cls.atomic():
                conversation.soft_delete()

            cls.get_logger().info(f"Deleted group {conversation.id}")
            return ServiceResult.success(None)

    # In view
    result = ConversationService.delete_group(request.user, pk)
    result.raise_for_error()  # 404/403/409 via core.exception_handler
    return Response(status=204)

Related:
    - core.exceptions: Error codes and the exception raised per code
    - core.exception_handler: Renders failures as HTTP responses
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

from core.exceptions import ErrorCode, exception_for_code

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Provides consistent success/failure handling without exceptions.
    Use this for expected failures (validation errors, business rule violations).

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code (see core.exceptions.ErrorCode)
        errors: Field-level errors for validation failures

    Usage:
        # Success case
        return ServiceResult.success(message)

        # Failure case
        return ServiceResult.failure("Message not found", ErrorCode.NOT_FOUND)

        # Validation errors with field details
        return ServiceResult.failure(
            "Validation failed",
            error_code=ErrorCode.INVALID_ARGUMENT,
            errors={"group_name": ["This field is required."]}
        )

        # Check result
        result = MessageService.send(caller, conversation_id, content="hi")
        if result.success:
            message = result.data
        else:
            print(f"Error: {result.error} ({result.error_code})")

    Note:
        This pattern is inspired by Result types in Rust/Swift.
        It makes error handling explicit without try/except blocks.
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)

        Returns:
            ServiceResult with success=False and error details

        Example:
            # Simple error
            return ServiceResult.failure("User not found", ErrorCode.NOT_FOUND)

            # Validation errors
            return ServiceResult.failure(
                "Validation failed",
                error_code=ErrorCode.INVALID_ARGUMENT,
                errors={"member_ids": ["At least one member is required."]}
            )
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            errors=errors,
        )

    @classmethod
    def from_exception(cls, exc: Exception, error_code: str | None = None) -> ServiceResult[T]:
        """
        Create a failed result from an exception.

        Application errors keep their own code; anything else defaults to
        the exception class name.

        Args:
            exc: The caught exception
            error_code: Optional error code override

        Returns:
            ServiceResult with error details from exception
        """
        code = error_code or getattr(exc, "error_code", None) or exc.__class__.__name__.upper()
        message = getattr(exc, "message", None) or str(exc)
        return cls(success=False, error=message, error_code=code)

    def to_response(self) -> dict[str, Any]:
        """
        Convert to API response format.

        Returns:
            Dict with success status and data or error details
        """
        if self.success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {
            "success": False,
            "error": self.error,
        }
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response["errors"] = self.errors
        return response

    def raise_for_error(self) -> T | None:
        """
        Raise the application exception matching error_code if this failed.

        Returns the data unchanged on success so views can chain:

            conversation = ConversationService.get(caller, pk).raise_for_error()

        Raises:
            BaseApplicationError subclass chosen by error_code
        """
        if self.success:
            return self.data
        details = {"errors": self.errors} if self.errors else None
        raise exception_for_code(self.error_code, self.error or "", details)

    def __bool__(self) -> bool:
        """
        Allow using result in boolean context.

        Example:
            result = ReactionService.toggle(caller, message_id, "🔥")
            if result:  # Same as: if result.success
                print("Toggled!")
        """
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management
    - Exception handling patterns

    Usage:
        class MembershipService(BaseService):
            @classmethod
            def leave(cls, caller, conversation_id) -> ServiceResult[None]:
                with cls.atomic():
                    # All operations in this block are in a transaction
                    ...

                cls.get_logger().info(f"User {caller.id} left {conversation_id}")
                return ServiceResult.success(None)

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Services should be stateless
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs (e.g. "chat.services.MessageService").

        Returns:
            Logger instance for this service
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        All database operations within this context manager are
        wrapped in a transaction. If any operation fails, all
        changes are rolled back.

        Yields:
            None

        Note:
            This is a thin wrapper around Django's transaction.atomic().
            Use it to make transaction boundaries explicit in service code.
        """
        with transaction.atomic():
            yield

    @classmethod
    def handle_exception(
        cls,
        exc: Exception,
        context: str = "",
        log_level: int = logging.ERROR,
    ) -> ServiceResult:
        """
        Convert exception to ServiceResult with logging.

        Args:
            exc: The caught exception
            context: Additional context for logging
            log_level: Logging level (default ERROR)

        Returns:
            ServiceResult with error details

        Example:
            try:
                default_storage.save(name, file)
            except OSError as e:
                return cls.handle_exception(e, "storing upload")
        """
        logger = cls.get_logger()
        message = f"{context}: {exc}" if context else str(exc)
        logger.log(log_level, message, exc_info=True)
        return ServiceResult.from_exception(exc)

    @classmethod
    def validate_required(cls, **kwargs) -> ServiceResult | None:
        """
        Validate that required fields are provided.

        Returns a failure result if any required field is None or blank
        after trimming. Returns None if all fields are valid.

        Args:
            **kwargs: Field names and their values

        Returns:
            ServiceResult.failure if validation fails, None otherwise

        Example:
            validation = cls.validate_required(group_name=group_name)
            if validation is not None:
                return validation  # Return the error
        """
        errors = {}
        for field_name, value in kwargs.items():
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[field_name] = ["This field is required."]

        if errors:
            return ServiceResult.failure(
                f"Required fields missing: {', '.join(errors)}",
                error_code=ErrorCode.INVALID_ARGUMENT,
                errors=errors,
            )
        return None
