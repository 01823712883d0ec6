"""
Core Application - Infrastructure & Base Classes

This app contains infrastructure code shared by the directory, chat and
blob store apps. It holds no domain logic of its own.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - SoftDeleteMixin: Soft delete support (is_deleted, deleted_at)

Managers (import from core.managers):
    - SoftDeleteQuerySet: QuerySet with active()/deleted() filters

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - ErrorCode: UNAUTHENTICATED, NOT_FOUND, FORBIDDEN, INVALID_ARGUMENT, CONFLICT
    - BaseApplicationError: Base exception with error codes
    - UnauthenticatedError, NotFoundError, PermissionDeniedError,
      ValidationError, ConflictError

API (import from core.exception_handler):
    - api_exception_handler: DRF EXCEPTION_HANDLER rendering the taxonomy

Note:
    Django models and model mixins are NOT imported here to avoid
    AppRegistryNotReady errors. Import them directly from their modules.
"""

# Exceptions (no Django dependencies)
from .exceptions import (
    BaseApplicationError,
    ConflictError,
    ErrorCode,
    NotFoundError,
    PermissionDeniedError,
    UnauthenticatedError,
    ValidationError,
)

# Services (no Django model dependencies)
from .services import BaseService, ServiceResult

__all__ = [
    # Services
    "BaseService",
    "ServiceResult",
    # Exceptions
    "ErrorCode",
    "BaseApplicationError",
    "UnauthenticatedError",
    "ValidationError",
    "NotFoundError",
    "PermissionDeniedError",
    "ConflictError",
]
