"""
Profile repository for database access.

Encapsulates the Supabase queries against the profiles table.
"""

from typing import Optional

from shared.repository import BaseRepository
from .models import NewProfile, Profile


class ProfileRepository(BaseRepository[Profile]):
    """
    Repository for profile data access.

    Uniqueness of user_id is enforced by the database; this repository
    reads at most one row per principal.
    """

    TABLE = "profiles"

    async def get_by_user_id(self, user_id: str) -> Optional[Profile]:
        """
        Get the profile belonging to a principal.

        Args:
            user_id: The principal's ID.

        Returns:
            Profile if a row exists, None otherwise.
        """
        result = await (
            self._db.table(self.TABLE)
            .select("*")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )

        if not result.data:
            return None

        return Profile(**result.data[0])

    async def create(self, new_profile: NewProfile) -> Profile:
        """
        Insert a profile row.

        Args:
            new_profile: Fields to insert.

        Returns:
            Created Profile with generated ID and timestamps.
        """
        result = await (
            self._db.table(self.TABLE)
            .insert(new_profile.model_dump(mode="json"))
            .execute()
        )
        return Profile(**result.data[0])
