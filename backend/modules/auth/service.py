"""
Session bootstrapper.

Establishes whether a user is signed in, resolves their profile and
publishes one consistent AuthState to the rest of the application.

Three things race during startup: the initial session lookup, pushed
auth-state-change events and an unreachable backend. Every transition
carries an epoch ticket; a result is committed only if no newer
transition has started since, so the most recent event always wins.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from shared.config import Settings, get_settings
from shared.exceptions import HomeworkError, OperationTimeoutError
from shared.models import Principal
from shared.race import first_settled

from .exceptions import InvalidAuthInputError
from .identity import create_identity_service
from .interfaces import IIdentityService, ISubscription
from .models import (
    AuthChangeEvent,
    AuthResult,
    AuthState,
    Profile,
    ServiceError,
    Session,
    SignInRequest,
    SignOutResult,
    SignUpRequest,
    UserRole,
    build_default_profile,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[AuthState], None]

_UNAUTHENTICATED = {"user": None, "profile": None, "session": None, "loading": False}


def _error_value(error: HomeworkError) -> ServiceError:
    return ServiceError.from_dict(error.to_dict())


def _invalid_input(error: PydanticValidationError) -> ServiceError:
    errors = error.errors(include_url=False, include_context=False)
    message = "; ".join(f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in errors)
    return _error_value(InvalidAuthInputError(message or "Invalid input", errors))


class AuthSession:
    """
    Client-side session and profile state for one application instance.

    Usage:
        async with await open_auth_session() as auth:
            state = await auth.wait_until_settled()
            if state.is_authenticated:
                print(state.profile.full_name)

    Only this class writes the state; everything else reads it through
    `state`, `subscribe()` or `wait_until_settled()`.
    """

    def __init__(
        self,
        identity: IIdentityService,
        settings: Optional[Settings] = None,
    ):
        self._identity = identity
        self._settings = settings or get_settings()
        self._state = AuthState()
        self._listeners: list[StateListener] = []
        self._settled = asyncio.Event()
        self._mounted = False
        self._closed = False
        self._epoch = 0
        self._subscription: Optional[ISubscription] = None
        self._tasks: set[asyncio.Task] = set()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> "AuthSession":
        """
        Begin the bootstrap and start listening for auth events.

        Returns immediately; the state is INITIALIZING until the bootstrap
        task commits its first result.
        """
        if self._mounted or self._closed:
            raise RuntimeError("AuthSession can only be started once")

        self._mounted = True
        if self._settings.backend_configured:
            self._subscription = self._identity.on_auth_state_change(
                self._on_auth_state_change
            )
        self._spawn(self._bootstrap(self._epoch))
        return self

    async def close(self) -> None:
        """
        Stop listening and stop publishing.

        Calls already in flight are left to finish; nothing they return is
        committed after this returns.
        """
        if self._closed:
            return
        self._mounted = False
        self._closed = True

        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

        self._listeners.clear()

    async def __aenter__(self) -> "AuthSession":
        return await self.start()

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Published state
    # -------------------------------------------------------------------------

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user(self) -> Optional[Principal]:
        return self._state.user

    @property
    def profile(self) -> Optional[Profile]:
        return self._state.profile

    @property
    def session(self) -> Optional[Session]:
        return self._state.session

    @property
    def loading(self) -> bool:
        return self._state.loading

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Call listener with every new state. Returns an unsubscribe function.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def wait_until_settled(self, timeout: Optional[float] = None) -> AuthState:
        """
        Wait until loading is false and return the state at that moment.

        Raises:
            asyncio.TimeoutError: If timeout elapses first
        """
        await asyncio.wait_for(self._settled.wait(), timeout=timeout)
        return self._state

    def _commit(self, epoch: int, **changes: Any) -> bool:
        """
        Apply changes if the caller's ticket is still current.

        Returns False when the result is stale or the session is closed;
        the caller should stop its transition.
        """
        if not self._mounted or epoch != self._epoch:
            logger.debug("Discarding stale auth update (epoch %s, current %s)", epoch, self._epoch)
            return False

        self._state = self._state.model_copy(update=changes)
        if self._state.loading:
            self._settled.clear()
        else:
            self._settled.set()

        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("Auth state listener %r failed", listener)
        return True

    def _spawn(self, coro: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # -------------------------------------------------------------------------
    # Bootstrap
    # -------------------------------------------------------------------------

    async def _bootstrap(self, epoch: int) -> None:
        logger.info("Initializing auth")

        if not self._settings.backend_configured:
            logger.info("Supabase not configured, showing login")
            self._commit(epoch, **_UNAUTHENTICATED)
            return

        try:
            session = await first_settled(
                self._identity.get_session(),
                self._settings.auth_session_timeout,
                operation="get_session",
            )
        except HomeworkError as e:
            logger.warning("Could not restore session: %s", e.message)
            self._commit(epoch, **_UNAUTHENTICATED)
            return

        logger.info("Got session: %s", session.user.id if session else "no session")
        await self._resolve(epoch, session)

    def _on_auth_state_change(self, event: AuthChangeEvent, session: Optional[Session]) -> None:
        if not self._mounted:
            return

        logger.info(
            "Auth state changed: %s %s",
            event.value,
            session.user.id if session else "no session",
        )
        self._epoch += 1
        self._spawn(self._resolve(self._epoch, session))

    async def _resolve(self, epoch: int, session: Optional[Session]) -> None:
        """Move to the state matching session, loading its profile if needed."""
        if session is None:
            self._commit(epoch, **_UNAUTHENTICATED)
            return

        principal = session.user
        current = self._state
        if current.profile is not None and current.profile.user_id == principal.id:
            # Same principal already on screen: refresh without a loading flash
            if not self._commit(epoch, session=session, user=principal):
                return
        elif not self._commit(epoch, session=session, user=principal, profile=None, loading=True):
            return

        profile = await self._load_profile(principal)
        self._commit(epoch, profile=profile, loading=False)

    async def _load_profile(self, principal: Principal) -> Profile:
        """
        Fetch the principal's profile, creating a default one if missing.

        Never raises. When the profile cannot be read in time or cannot be
        persisted, an in-memory profile is returned so the user can still
        enter the app.
        """
        logger.debug("Handling profile for user %s", principal.id)
        draft = build_default_profile(principal.id, principal.email, principal.display_name)

        try:
            existing = await first_settled(
                self._identity.get_profile(principal.id),
                self._settings.auth_profile_timeout,
                operation="get_profile",
            )
        except OperationTimeoutError as e:
            logger.warning("Profile fetch timed out for %s, using fallback profile: %s", principal.id, e.message)
            return draft.unpersisted()
        except HomeworkError as e:
            logger.error("Error fetching profile for %s: %s", principal.id, e.message)
            existing = None
        except Exception:
            logger.exception("Unexpected error fetching profile for %s", principal.id)
            existing = None

        if existing is not None:
            logger.info("Profile found: %s", existing.full_name)
            return existing

        logger.info("Creating new profile for %s", principal.id)
        try:
            created = await first_settled(
                self._identity.create_profile(draft),
                self._settings.auth_request_timeout,
                operation="create_profile",
            )
        except HomeworkError as e:
            logger.error("Error creating profile for %s, using fallback profile: %s", principal.id, e.message)
            return draft.unpersisted()
        except Exception:
            logger.exception("Unexpected error creating profile for %s, using fallback profile", principal.id)
            return draft.unpersisted()

        logger.info("Profile created: %s", created.full_name)
        return created

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def sign_in(self, email: str, password: str) -> AuthResult:
        """
        Sign in with email and password.

        State follows from the SIGNED_IN event the identity service pushes.
        Failures are returned in the result, never raised.
        """
        try:
            request = SignInRequest(email=email, password=password)
        except PydanticValidationError as e:
            return AuthResult(error=_invalid_input(e))

        try:
            data = await first_settled(
                self._identity.sign_in_with_password(request.email, request.password),
                self._settings.auth_request_timeout,
                operation="sign_in_with_password",
            )
        except HomeworkError as e:
            logger.info("Sign-in failed: %s", e.code)
            return AuthResult(error=_error_value(e))
        return AuthResult(data=data)

    async def sign_up(
        self,
        email: str,
        password: str,
        full_name: str,
        role: UserRole | str = UserRole.STUDENT,
    ) -> AuthResult:
        """
        Register a new principal with full_name and role as signup metadata.

        Only student and teacher may be chosen here; admins are assigned
        out of band. Failures are returned in the result, never raised.
        """
        try:
            request = SignUpRequest(
                email=email,
                password=password,
                full_name=full_name,
                role=role,
            )
        except PydanticValidationError as e:
            return AuthResult(error=_invalid_input(e))

        try:
            data = await first_settled(
                self._identity.sign_up(request.email, request.password, request.metadata()),
                self._settings.auth_request_timeout,
                operation="sign_up",
            )
        except HomeworkError as e:
            logger.info("Sign-up failed: %s", e.code)
            return AuthResult(error=_error_value(e))
        return AuthResult(data=data)

    async def sign_out(self) -> SignOutResult:
        """
        Sign out and clear local state right away.

        Clearing does not wait for the SIGNED_OUT event, so stale
        authenticated state is never visible after this returns.
        """
        try:
            await first_settled(
                self._identity.sign_out(),
                self._settings.auth_request_timeout,
                operation="sign_out",
            )
        except HomeworkError as e:
            logger.warning("Sign-out failed: %s", e.message)
            return SignOutResult(error=_error_value(e))

        self._epoch += 1
        self._commit(self._epoch, **_UNAUTHENTICATED)
        return SignOutResult()


async def open_auth_session(settings: Optional[Settings] = None) -> AuthSession:
    """
    Build an AuthSession wired to the configured identity service.

    The session is not started; use it as an async context manager or
    call start().
    """
    settings = settings or get_settings()
    identity = await create_identity_service(settings)
    return AuthSession(identity, settings)
