"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access and providing shared utilities for data operations.
"""

from typing import TypeVar, Generic
from supabase import AsyncClient


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class ProfileRepository(BaseRepository[Profile]):
            async def get_by_user_id(self, user_id: str) -> Optional[Profile]:
                result = await (
                    self._db.table("profiles").select("*").eq("user_id", user_id).execute()
                )
                if not result.data:
                    return None
                return Profile(**result.data[0])
    """

    def __init__(self, db: AsyncClient) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase async client instance for database operations.
        """
        self._db = db
