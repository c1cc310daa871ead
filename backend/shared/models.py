"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from typing import Any, Optional
from pydantic import BaseModel, Field


class Principal(BaseModel):
    """
    The authenticated identity returned by the identity service.

    Distinct from the application's Profile record: a principal exists as
    soon as someone signs in, a profile may not exist yet.
    """

    id: str = Field(..., description="User ID (UUID from Supabase)")
    email: Optional[str] = Field(None, description="User's email address")
    user_metadata: dict[str, Any] = Field(
        default_factory=dict, description="Metadata attached at signup"
    )

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",  # Ignore extra fields from the auth service
    }

    @property
    def display_name(self) -> Optional[str]:
        """
        Display name supplied at signup, if any.

        Metadata is written by the client at signup, so anything that is
        not a non-blank string is treated as absent.
        """
        name = self.user_metadata.get("full_name")
        if isinstance(name, str) and name.strip():
            return name.strip()
        return None
