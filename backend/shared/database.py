"""
Database client factory for Supabase.

Clients are constructed explicitly and handed to the services that need
them, so tests can substitute a fake without patching module state.
"""

from typing import Optional
from supabase import acreate_client, AsyncClient

from .config import Settings, get_settings
from .exceptions import ConfigurationError


async def create_supabase_client(settings: Optional[Settings] = None) -> AsyncClient:
    """
    Create an async Supabase client authenticated with the anon key.

    Row Level Security applies to every query made through this client,
    so profile reads and writes happen as the signed-in user.

    Args:
        settings: Settings to read the URL and key from (defaults to cached settings)

    Returns:
        Supabase async client

    Raises:
        ConfigurationError: If the URL or key is missing or a placeholder
    """
    settings = settings or get_settings()
    if not settings.backend_configured:
        raise ConfigurationError(
            "Supabase configuration missing. "
            "Set SUPABASE_URL and SUPABASE_ANON_KEY environment variables.",
            code="BACKEND_NOT_CONFIGURED",
        )

    return await acreate_client(
        settings.supabase_url,
        settings.supabase_anon_key,
    )
