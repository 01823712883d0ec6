"""
Tests for ServiceResult and BaseService in core/services.py.
"""

import logging

import pytest

from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    ErrorCode,
    NotFoundError,
    ValidationError,
)
from core.services import BaseService, ServiceResult


class ExampleService(BaseService):
    pass


# =============================================================================
# ServiceResult
# =============================================================================


class TestServiceResult:
    """Tests for ServiceResult."""

    def test_success_is_truthy(self):
        result = ServiceResult.success({"id": 1})

        assert result
        assert result.data == {"id": 1}
        assert result.error is None

    def test_failure_is_falsy(self):
        result = ServiceResult.failure("Conversation not found", error_code=ErrorCode.NOT_FOUND)

        assert not result
        assert result.data is None
        assert result.error_code == ErrorCode.NOT_FOUND

    def test_raise_for_error_returns_data_on_success(self):
        assert ServiceResult.success(42).raise_for_error() == 42

    @pytest.mark.parametrize(
        "code,exc_class",
        [
            (ErrorCode.NOT_FOUND, NotFoundError),
            (ErrorCode.INVALID_ARGUMENT, ValidationError),
            (ErrorCode.CONFLICT, ConflictError),
        ],
    )
    def test_raise_for_error_picks_class_by_code(self, code, exc_class):
        with pytest.raises(exc_class) as exc_info:
            ServiceResult.failure("nope", error_code=code).raise_for_error()

        assert exc_info.value.message == "nope"
        assert exc_info.value.error_code == code

    def test_raise_for_error_carries_field_errors(self):
        result = ServiceResult.failure(
            "Unknown users",
            error_code=ErrorCode.NOT_FOUND,
            errors={"member_ids": ["7"]},
        )

        with pytest.raises(NotFoundError) as exc_info:
            result.raise_for_error()

        assert exc_info.value.details == {"errors": {"member_ids": ["7"]}}

    def test_unknown_code_raises_base_error(self):
        with pytest.raises(BaseApplicationError) as exc_info:
            ServiceResult.failure("odd", error_code="SOMETHING_ELSE").raise_for_error()

        assert exc_info.value.status_code == 500

    def test_from_exception_keeps_application_code(self):
        result = ServiceResult.from_exception(ConflictError("Group deleted"))

        assert result.error_code == ErrorCode.CONFLICT
        assert result.error == "Group deleted"

    def test_to_response_for_failure(self):
        result = ServiceResult.failure(
            "Validation failed",
            error_code=ErrorCode.INVALID_ARGUMENT,
            errors={"emoji": ["Unsupported"]},
        )

        assert result.to_response() == {
            "success": False,
            "error": "Validation failed",
            "error_code": ErrorCode.INVALID_ARGUMENT,
            "errors": {"emoji": ["Unsupported"]},
        }


# =============================================================================
# BaseService
# =============================================================================


class TestBaseService:
    """Tests for BaseService helpers."""

    def test_logger_is_named_after_service(self):
        assert ExampleService.get_logger().name == f"{__name__}.ExampleService"

    def test_validate_required_flags_blank_values(self):
        result = ExampleService.validate_required(group_name="   ", content="hi", owner=None)

        assert result.error_code == ErrorCode.INVALID_ARGUMENT
        assert set(result.errors) == {"group_name", "owner"}

    def test_validate_required_passes(self):
        assert ExampleService.validate_required(group_name="Team") is None

    def test_handle_exception_logs_and_wraps(self, caplog):
        with caplog.at_level(logging.ERROR):
            result = ExampleService.handle_exception(OSError("disk full"), "storing upload")

        assert not result
        assert result.error_code == "OSERROR"
        assert "storing upload: disk full" in caplog.text
