"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules,
most importantly a fake identity service whose calls can be made to succeed,
fail or hang on a future the test controls.
"""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import pytest

from modules.auth.models import (
    AuthChangeEvent,
    AuthData,
    NewProfile,
    Profile,
    Session,
    UserRole,
)
from shared.config import Settings, get_settings
from shared.models import Principal


SERVER_TIME = datetime(2024, 9, 1, 12, 0, tzinfo=timezone.utc)


class FakeSubscription:
    def __init__(self) -> None:
        self.active = True

    def unsubscribe(self) -> None:
        self.active = False


class FakeIdentityService:
    """
    In-memory identity service.

    Each *_outcome attribute may be a plain value (returned), an exception
    (raised) or an asyncio.Future (awaited, so the test decides when and how
    the call settles). Every call is recorded in `calls`.
    """

    def __init__(self) -> None:
        self.session_outcome: Any = None
        self.profile_outcome: Any = None
        self.create_outcome: Any = None  # None: echo the insert as a server row
        self.sign_in_outcome: Any = AuthData()
        self.sign_up_outcome: Any = AuthData()
        self.sign_out_outcome: Any = None
        self.emit_on_sign_in = False
        self.calls: list[tuple[str, tuple]] = []
        self.inserted: list[NewProfile] = []
        self.subscriptions: list[tuple[Callable, FakeSubscription]] = []

    async def _settle(self, outcome: Any) -> Any:
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, asyncio.Future):
            return await outcome
        return outcome

    async def get_session(self) -> Optional[Session]:
        self.calls.append(("get_session", ()))
        return await self._settle(self.session_outcome)

    async def sign_in_with_password(self, email: str, password: str) -> AuthData:
        self.calls.append(("sign_in_with_password", (email, password)))
        data = await self._settle(self.sign_in_outcome)
        if self.emit_on_sign_in and data.session is not None:
            self.emit(AuthChangeEvent.SIGNED_IN, data.session)
        return data

    async def sign_up(self, email: str, password: str, metadata: dict[str, Any]) -> AuthData:
        self.calls.append(("sign_up", (email, password, metadata)))
        return await self._settle(self.sign_up_outcome)

    async def sign_out(self) -> None:
        self.calls.append(("sign_out", ()))
        return await self._settle(self.sign_out_outcome)

    def on_auth_state_change(self, callback: Callable) -> FakeSubscription:
        subscription = FakeSubscription()
        self.subscriptions.append((callback, subscription))
        return subscription

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        self.calls.append(("get_profile", (user_id,)))
        return await self._settle(self.profile_outcome)

    async def create_profile(self, new_profile: NewProfile) -> Profile:
        self.calls.append(("create_profile", (new_profile,)))
        self.inserted.append(new_profile)
        if self.create_outcome is None:
            return Profile(
                id=f"profile-{uuid.uuid4()}",
                **new_profile.model_dump(),
                created_at=SERVER_TIME,
                updated_at=SERVER_TIME,
            )
        return await self._settle(self.create_outcome)

    def emit(self, event: AuthChangeEvent, session: Optional[Session]) -> None:
        """Push an auth-state-change event to every active subscriber."""
        for callback, subscription in list(self.subscriptions):
            if subscription.active:
                callback(event, session)

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Clear cached settings before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Configured settings with short bounds so timeouts are quick to hit."""
    return Settings(
        _env_file=None,
        supabase_url="https://abcdefgh.supabase.co",
        supabase_anon_key="test-anon-key",
        auth_session_timeout=0.2,
        auth_profile_timeout=0.2,
        auth_request_timeout=0.2,
        auth_fallback_delay=0.1,
    )


@pytest.fixture
def unconfigured_settings() -> Settings:
    """Settings with the placeholder values an unconfigured deployment ships."""
    return Settings(
        _env_file=None,
        supabase_url="https://placeholder.supabase.co",
        supabase_anon_key="placeholder-key",
        auth_session_timeout=0.2,
        auth_profile_timeout=0.2,
        auth_request_timeout=0.2,
        auth_fallback_delay=0.1,
    )


@pytest.fixture
def identity() -> FakeIdentityService:
    return FakeIdentityService()


@pytest.fixture
def principal() -> Principal:
    return Principal(id="user-123", email="ada@example.com")


@pytest.fixture
def make_session() -> Callable[..., Session]:
    def _make(principal: Principal, token: str = "access-token") -> Session:
        return Session(
            access_token=token,
            refresh_token="refresh-token",
            expires_at=1_900_000_000,
            user=principal,
        )

    return _make


@pytest.fixture
def make_profile() -> Callable[..., Profile]:
    def _make(
        user_id: str,
        full_name: str = "Ada Lovelace",
        role: UserRole = UserRole.STUDENT,
        email: str = "ada@example.com",
    ) -> Profile:
        return Profile(
            id=f"profile-of-{user_id}",
            user_id=user_id,
            email=email,
            full_name=full_name,
            role=role,
            avatar_url="https://example.com/ada.png",
            created_at=SERVER_TIME,
            updated_at=SERVER_TIME,
        )

    return _make
