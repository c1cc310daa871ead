"""
Identity service adapters.

SupabaseIdentityService talks to Supabase Auth and the profiles table.
DisconnectedIdentityService stands in when no backend is configured.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from supabase import AsyncClient, AuthError, PostgrestAPIError

from shared.config import Settings, get_settings
from shared.database import create_supabase_client
from shared.exceptions import ConfigurationError, HomeworkError
from shared.models import Principal

from .exceptions import IdentityServiceError
from .interfaces import AuthStateCallback, IIdentityService, ISubscription
from .models import AuthChangeEvent, AuthData, NewProfile, Profile, Session
from .repository import ProfileRepository

logger = logging.getLogger(__name__)


@contextmanager
def _service_errors(operation: str) -> Iterator[None]:
    """Translate Supabase and transport errors into IdentityServiceError."""
    try:
        yield
    except HomeworkError:
        raise
    except AuthError as e:
        raise IdentityServiceError(
            getattr(e, "message", None) or str(e),
            code=getattr(e, "code", None) or "AUTH_ERROR",
            details={"operation": operation, "status": getattr(e, "status", None)},
        ) from e
    except PostgrestAPIError as e:
        raise IdentityServiceError(
            e.message or str(e),
            code=e.code or "DATABASE_ERROR",
            details={"operation": operation, "hint": e.hint},
        ) from e
    except Exception as e:
        raise IdentityServiceError(
            f"{operation} failed: {e}",
            code="SERVICE_UNAVAILABLE",
            details={"operation": operation},
        ) from e


def to_principal(user: Any) -> Principal:
    """Convert a Supabase auth user into a Principal."""
    return Principal(
        id=user.id,
        email=user.email,
        user_metadata=user.user_metadata or {},
    )


def to_session(session: Any) -> Optional[Session]:
    """Convert a Supabase auth session into a Session."""
    if session is None or session.user is None:
        return None
    return Session(
        access_token=session.access_token,
        refresh_token=session.refresh_token or "",
        expires_at=session.expires_at,
        user=to_principal(session.user),
    )


def to_auth_data(response: Any) -> AuthData:
    """Convert a Supabase AuthResponse into AuthData."""
    return AuthData(
        user=to_principal(response.user) if response.user else None,
        session=to_session(response.session),
    )


class SupabaseIdentityService(IIdentityService):
    """
    Identity service backed by Supabase Auth and the profiles table.

    The client is passed in rather than created here so tests and
    callers decide its lifetime.
    """

    def __init__(self, client: AsyncClient):
        self._client = client
        self._profiles = ProfileRepository(client)

    async def get_session(self) -> Optional[Session]:
        with _service_errors("get_session"):
            session = await self._client.auth.get_session()
        return to_session(session)

    async def sign_in_with_password(self, email: str, password: str) -> AuthData:
        with _service_errors("sign_in_with_password"):
            response = await self._client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        return to_auth_data(response)

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: dict[str, Any],
    ) -> AuthData:
        with _service_errors("sign_up"):
            response = await self._client.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"data": metadata},
                }
            )
        return to_auth_data(response)

    async def sign_out(self) -> None:
        with _service_errors("sign_out"):
            await self._client.auth.sign_out()

    def on_auth_state_change(self, callback: AuthStateCallback) -> ISubscription:
        def forward(event: str, session: Any) -> None:
            try:
                change = AuthChangeEvent(event)
            except ValueError:
                logger.debug("Ignoring unknown auth event %s", event)
                return
            callback(change, to_session(session))

        return self._client.auth.on_auth_state_change(forward)

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        with _service_errors("get_profile"):
            return await self._profiles.get_by_user_id(user_id)

    async def create_profile(self, new_profile: NewProfile) -> Profile:
        with _service_errors("create_profile"):
            return await self._profiles.create(new_profile)


class _InertSubscription:
    """Subscription that never delivers anything."""

    def unsubscribe(self) -> None:
        pass


class DisconnectedIdentityService(IIdentityService):
    """
    Identity service used when Supabase is not configured.

    Every call fails with ConfigurationError, which callers turn into
    an unauthenticated state or an error result.
    """

    def _unavailable(self) -> ConfigurationError:
        return ConfigurationError(
            "Identity service is not configured",
            code="BACKEND_NOT_CONFIGURED",
        )

    async def get_session(self) -> Optional[Session]:
        raise self._unavailable()

    async def sign_in_with_password(self, email: str, password: str) -> AuthData:
        raise self._unavailable()

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: dict[str, Any],
    ) -> AuthData:
        raise self._unavailable()

    async def sign_out(self) -> None:
        raise self._unavailable()

    def on_auth_state_change(self, callback: AuthStateCallback) -> ISubscription:
        return _InertSubscription()

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        raise self._unavailable()

    async def create_profile(self, new_profile: NewProfile) -> Profile:
        raise self._unavailable()


async def create_identity_service(settings: Optional[Settings] = None) -> IIdentityService:
    """
    Build the identity service for the given settings.

    Returns a DisconnectedIdentityService when the backend is unconfigured
    instead of failing, so the app can still show its login view.
    """
    settings = settings or get_settings()
    if not settings.backend_configured:
        logger.info("Supabase not configured, using disconnected identity service")
        return DisconnectedIdentityService()

    client = await create_supabase_client(settings)
    return SupabaseIdentityService(client)
