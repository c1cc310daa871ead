"""
Shared infrastructure for the Vibe Homework backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- race: First-settled combinator for bounded external calls

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import create_supabase_client
from .exceptions import (
    HomeworkError,
    ValidationError,
    ConfigurationError,
    ExternalServiceError,
    OperationTimeoutError,
)
from .models import Principal
from .race import first_settled

__all__ = [
    "Settings",
    "get_settings",
    "create_supabase_client",
    "HomeworkError",
    "ValidationError",
    "ConfigurationError",
    "ExternalServiceError",
    "OperationTimeoutError",
    "Principal",
    "first_settled",
]
