"""
Authentication module exceptions.

These exceptions are raised by the identity adapters and converted into
result values by the session bootstrapper.
"""

from typing import Any, Optional

from shared.exceptions import ExternalServiceError, ValidationError


class IdentityServiceError(ExternalServiceError):
    """Raised when the identity service reports an error or cannot be reached."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, service="supabase", code=code, details=details)


class InvalidAuthInputError(ValidationError):
    """Raised when sign-in or sign-up input fails validation."""

    def __init__(self, message: str, errors: Optional[list[dict[str, Any]]] = None):
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"errors": errors or []},
        )
