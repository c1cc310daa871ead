"""
Authentication module.

Bootstraps the client-side session, resolves the user's profile and
exposes sign-in, sign-up and sign-out.

Public API:
- AuthSession: Session bootstrapper publishing AuthState
- open_auth_session: Build an AuthSession from settings
- AuthGate / AppView: Role-gated view selection with a loading fallback
- IIdentityService: Interface for the identity and data service
- Models: Profile, Session, AuthState, AuthResult, ...
"""

from .gate import AppView, AuthGate, view_for_state
from .identity import (
    DisconnectedIdentityService,
    SupabaseIdentityService,
    create_identity_service,
)
from .interfaces import IIdentityService, ISubscription
from .models import (
    AuthChangeEvent,
    AuthData,
    AuthResult,
    AuthState,
    AuthStatus,
    NewProfile,
    Profile,
    ServiceError,
    Session,
    SignOutResult,
    UserRole,
    build_default_profile,
)
from .exceptions import IdentityServiceError, InvalidAuthInputError
from .service import AuthSession, open_auth_session

__all__ = [
    # Bootstrapper
    "AuthSession",
    "open_auth_session",
    # Gate
    "AppView",
    "AuthGate",
    "view_for_state",
    # Interfaces
    "IIdentityService",
    "ISubscription",
    # Adapters
    "SupabaseIdentityService",
    "DisconnectedIdentityService",
    "create_identity_service",
    # Models
    "AuthChangeEvent",
    "AuthData",
    "AuthResult",
    "AuthState",
    "AuthStatus",
    "NewProfile",
    "Profile",
    "ServiceError",
    "Session",
    "SignOutResult",
    "UserRole",
    "build_default_profile",
    # Exceptions
    "IdentityServiceError",
    "InvalidAuthInputError",
]
