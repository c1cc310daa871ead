"""
Base exception classes for the Vibe Homework backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application.
"""

from typing import Optional, Any


class HomeworkError(Exception):
    """
    Base exception for all Vibe Homework errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for result values."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(HomeworkError):
    """Input validation failed."""

    pass


class ConfigurationError(HomeworkError):
    """Required configuration is missing or still a placeholder."""

    pass


class ExternalServiceError(HomeworkError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class OperationTimeoutError(ExternalServiceError):
    """A bounded wait on an external call elapsed before it settled."""

    def __init__(self, operation: str, timeout: float, service: str = "supabase"):
        super().__init__(
            f"{operation} timed out after {timeout:g}s",
            service=service,
            code="TIMEOUT",
            details={"operation": operation, "timeout": timeout},
        )
        self.operation = operation
        self.timeout = timeout
