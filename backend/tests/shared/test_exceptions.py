"""Tests for shared/exceptions.py."""

import pytest

from shared.exceptions import (
    HomeworkError,
    ValidationError,
    ConfigurationError,
    ExternalServiceError,
    OperationTimeoutError,
)


class TestHomeworkError:
    def test_homework_error_message(self):
        """HomeworkError should store message."""
        error = HomeworkError("Test error")
        assert error.message == "Test error"
        assert str(error) == "Test error"

    def test_homework_error_default_code(self):
        """HomeworkError should default code to class name."""
        error = HomeworkError("Test error")
        assert error.code == "HomeworkError"

    def test_homework_error_custom_code(self):
        """HomeworkError should accept custom code."""
        error = HomeworkError("Test error", code="CUSTOM_ERROR")
        assert error.code == "CUSTOM_ERROR"

    def test_homework_error_default_details(self):
        """HomeworkError should default details to empty dict."""
        error = HomeworkError("Test error")
        assert error.details == {}

    def test_homework_error_to_dict(self):
        """HomeworkError should convert to dict."""
        error = HomeworkError("Test error", code="TEST_ERROR", details={"key": "value"})
        result = error.to_dict()

        assert result["error"] == "TEST_ERROR"
        assert result["message"] == "Test error"
        assert result["details"]["key"] == "value"


class TestSubclasses:
    @pytest.mark.parametrize(
        "cls",
        [ValidationError, ConfigurationError],
    )
    def test_inherits_homework_error(self, cls):
        """Every module error should be a HomeworkError with its class name as code."""
        error = cls("Something went wrong")
        assert isinstance(error, HomeworkError)
        assert error.code == cls.__name__


class TestExternalServiceError:
    def test_external_service_error_stores_service(self):
        """ExternalServiceError should store service name."""
        error = ExternalServiceError("Connection failed", service="supabase")
        assert error.service == "supabase"

    def test_external_service_error_preserves_other_details(self):
        """ExternalServiceError should preserve other details."""
        error = ExternalServiceError(
            "Connection failed",
            service="supabase",
            details={"status_code": 500}
        )
        result = error.to_dict()

        assert result["details"]["service"] == "supabase"
        assert result["details"]["status_code"] == 500


class TestOperationTimeoutError:
    def test_timeout_is_external_service_error(self):
        """Timeouts should be caught alongside explicit service errors."""
        error = OperationTimeoutError("get_session", 10.0)
        assert isinstance(error, ExternalServiceError)

    def test_timeout_fields(self):
        error = OperationTimeoutError("get_session", 10.0)
        assert error.code == "TIMEOUT"
        assert error.operation == "get_session"
        assert error.timeout == 10.0
        assert error.message == "get_session timed out after 10s"
        assert error.details == {"operation": "get_session", "timeout": 10.0, "service": "supabase"}
