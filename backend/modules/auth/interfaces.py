"""
Authentication module interfaces.

The session bootstrapper depends on IIdentityService, not on the Supabase
client. This enables testing with fakes and swapping the backend later.
"""

from typing import Any, Callable, Optional, Protocol, runtime_checkable

from .models import AuthChangeEvent, AuthData, NewProfile, Profile, Session


AuthStateCallback = Callable[[AuthChangeEvent, Optional[Session]], None]


@runtime_checkable
class ISubscription(Protocol):
    """Handle returned by on_auth_state_change."""

    def unsubscribe(self) -> None:
        """Stop delivering events to the callback."""
        ...


@runtime_checkable
class IIdentityService(Protocol):
    """
    Interface for the hosted identity and data service.

    Implementations raise HomeworkError subclasses on failure; they do not
    return error values. Converting failures into results is the caller's job.
    """

    async def get_session(self) -> Optional[Session]:
        """
        Get the current session, if any.

        Returns:
            The stored session, or None when nobody is signed in

        Raises:
            IdentityServiceError: If the service reports an error
            ConfigurationError: If the service is not configured
        """
        ...

    async def sign_in_with_password(self, email: str, password: str) -> AuthData:
        """
        Sign in with email and password.

        Raises:
            IdentityServiceError: On bad credentials or service failure
        """
        ...

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: dict[str, Any],
    ) -> AuthData:
        """
        Register a new principal.

        Args:
            email: Email address
            password: Password
            metadata: Stored on the principal (full_name, role)

        Raises:
            IdentityServiceError: On duplicate registration or service failure
        """
        ...

    async def sign_out(self) -> None:
        """
        End the current session.

        Raises:
            IdentityServiceError: If the service reports an error
        """
        ...

    def on_auth_state_change(self, callback: AuthStateCallback) -> ISubscription:
        """
        Register a callback for pushed auth-state-change events.

        The callback runs on the event loop thread and must not block.
        """
        ...

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        """
        Get the profile row for a principal.

        Returns:
            The profile if one exists, None otherwise
        """
        ...

    async def create_profile(self, new_profile: NewProfile) -> Profile:
        """
        Persist a new profile row.

        Returns:
            The created row with server-assigned ID and timestamps
        """
        ...
