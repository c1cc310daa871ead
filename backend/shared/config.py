"""
Centralized configuration for the Vibe Homework backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., SUPABASE_*, AUTH_*).
"""

from functools import lru_cache
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Marker used by unconfigured deployments (e.g. https://placeholder.supabase.co)
PLACEHOLDER_SENTINEL = "placeholder"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Vibe Homework"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Supabase (the front-end VITE_* names are accepted too)
    supabase_url: str = Field(
        default="",
        validation_alias=AliasChoices("supabase_url", "vite_supabase_url"),
    )
    supabase_anon_key: str = Field(
        default="",
        validation_alias=AliasChoices("supabase_anon_key", "vite_supabase_anon_key"),
    )

    # Auth bootstrap bounds (seconds)
    auth_session_timeout: float = 10.0
    auth_profile_timeout: float = 10.0
    auth_request_timeout: float = 10.0

    # Delay before a stuck loading screen offers reload / forced login
    auth_fallback_delay: float = 5.0

    @property
    def backend_configured(self) -> bool:
        """
        Whether the identity service can be reached at all.

        Empty values and placeholder values both count as unconfigured.
        """
        for value in (self.supabase_url, self.supabase_anon_key):
            if not value or PLACEHOLDER_SENTINEL in value.lower():
                return False
        return True


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
