"""
Role-gated view selection on top of an AuthSession.

Decides whether the app shows the loading screen, the login form or one
of the role dashboards. When loading drags on past the fallback delay,
the loading screen offers a reload or a forced login.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

from .models import AuthState, UserRole
from .service import AuthSession

logger = logging.getLogger(__name__)


class AppView(str, Enum):
    """Top-level views the application can show."""

    LOADING = "loading"
    LOADING_FALLBACK = "loading_fallback"  # Connection problem: reload or force login
    LOGIN = "login"
    STUDENT_DASHBOARD = "student_dashboard"
    TEACHER_DASHBOARD = "teacher_dashboard"
    ADMIN_DASHBOARD = "admin_dashboard"
    UNRECOGNIZED_ROLE = "unrecognized_role"


DASHBOARDS = {
    UserRole.STUDENT: AppView.STUDENT_DASHBOARD,
    UserRole.TEACHER: AppView.TEACHER_DASHBOARD,
    UserRole.ADMIN: AppView.ADMIN_DASHBOARD,
}


def view_for_state(state: AuthState, show_fallback: bool = False) -> AppView:
    """Pick the view for a state, ignoring timers and overrides."""
    if state.loading:
        return AppView.LOADING_FALLBACK if show_fallback else AppView.LOADING
    if state.user is None or state.profile is None:
        return AppView.LOGIN
    return DASHBOARDS.get(state.profile.role, AppView.UNRECOGNIZED_ROLE)


class AuthGate:
    """
    Tracks which view to show for an AuthSession.

    The fallback delay is separate from the session's internal timeouts;
    the two are configured independently.
    """

    def __init__(self, auth: AuthSession, fallback_delay: Optional[float] = None):
        self._auth = auth
        if fallback_delay is None:
            fallback_delay = auth.settings.auth_fallback_delay
        self._fallback_delay = fallback_delay
        self._show_fallback = False
        self._forced_login = False
        self._timer: Optional[asyncio.TimerHandle] = None
        self._unsubscribe = auth.subscribe(self._on_state)
        self._on_state(auth.state)

    @property
    def show_fallback(self) -> bool:
        return self._show_fallback

    @property
    def view(self) -> AppView:
        state = self._auth.state
        if self._forced_login and state.loading:
            return AppView.LOGIN
        return view_for_state(state, self._show_fallback)

    def force_login(self) -> None:
        """Leave a stuck loading screen for the login form."""
        logger.info("Forced login requested while loading")
        self._forced_login = True
        self._show_fallback = False
        self._cancel_timer()

    def close(self) -> None:
        self._cancel_timer()
        self._unsubscribe()

    def _on_state(self, state: AuthState) -> None:
        if state.loading:
            if self._timer is None and not self._show_fallback and not self._forced_login:
                loop = asyncio.get_running_loop()
                self._timer = loop.call_later(self._fallback_delay, self._fallback_due)
            return

        self._cancel_timer()
        self._show_fallback = False
        self._forced_login = False

    def _fallback_due(self) -> None:
        self._timer = None
        if self._auth.loading:
            logger.warning("Still loading after %gs, offering fallback", self._fallback_delay)
            self._show_fallback = True

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
