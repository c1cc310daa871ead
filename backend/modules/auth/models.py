"""
Authentication module data models.

These models define the data structures used by the auth module
and exposed to other modules through the interface.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union
from pydantic import BaseModel, EmailStr, Field, field_validator

from shared.models import Principal


class UserRole(str, Enum):
    """Application role stored on a profile."""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


# Roles a user may pick for themselves at signup
SIGNUP_ROLES = frozenset({UserRole.STUDENT, UserRole.TEACHER})


class AuthChangeEvent(str, Enum):
    """Auth-state-change events pushed by the identity service."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
    MFA_CHALLENGE_VERIFIED = "MFA_CHALLENGE_VERIFIED"


class AuthStatus(str, Enum):
    """Observable bootstrap states."""

    INITIALIZING = "initializing"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING_PROFILE = "authenticating_profile"
    READY = "ready"


class Session(BaseModel):
    """
    Token bundle issued by the identity service.

    Expiry and refresh are owned by the identity service; the client
    only carries the tokens around.
    """

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(default="", description="Refresh token")
    expires_at: Optional[int] = Field(None, description="Expiry as a unix timestamp")
    user: Principal = Field(..., description="Principal the session belongs to")

    model_config = {"frozen": True, "extra": "ignore"}


class Profile(BaseModel):
    """Application-level user record keyed to a principal."""

    id: str = Field(..., description="Profile ID (UUID)")
    user_id: str = Field(..., description="Principal ID this profile belongs to")
    email: str = Field(default="", description="Email address")
    full_name: str = Field(..., description="Display name")
    role: Union[UserRole, str] = Field(
        default=UserRole.STUDENT,
        union_mode="left_to_right",
        description="Application role; unknown stored values are kept as strings",
    )
    avatar_url: Optional[str] = Field(None, description="Avatar URL")
    created_at: datetime = Field(..., description="Creation time")
    updated_at: datetime = Field(..., description="Last update time")

    model_config = {"extra": "ignore"}

    @property
    def role_name(self) -> str:
        """Role as stored, whether or not the app recognizes it."""
        return self.role.value if isinstance(self.role, UserRole) else self.role


class NewProfile(BaseModel):
    """Insert payload for the profiles table."""

    user_id: str
    email: str
    full_name: str
    role: UserRole = UserRole.STUDENT

    def unpersisted(self, now: Optional[datetime] = None) -> Profile:
        """
        Build the in-memory profile used when persistence fails.

        The principal ID stands in for the server-assigned profile ID and
        the client clock stands in for the server timestamps.
        """
        now = now or datetime.now(timezone.utc)
        return Profile(
            id=self.user_id,
            user_id=self.user_id,
            email=self.email,
            full_name=self.full_name,
            role=self.role,
            avatar_url=None,
            created_at=now,
            updated_at=now,
        )


def build_default_profile(
    principal_id: str,
    email: Optional[str],
    display_name: Optional[str] = None,
) -> NewProfile:
    """
    Build the default profile for a principal that has none yet.

    Args:
        principal_id: ID of the signed-in principal
        email: Principal's email, if known
        display_name: Name supplied at signup, if any

    Returns:
        NewProfile with the student role and a name derived from the
        display name, then the email local part, then "User"
    """
    email = email or ""
    full_name = display_name or email.split("@")[0] or "User"
    return NewProfile(
        user_id=principal_id,
        email=email,
        full_name=full_name,
        role=UserRole.STUDENT,
    )


class AuthState(BaseModel):
    """Snapshot of the session state published to the rest of the app."""

    user: Optional[Principal] = None
    profile: Optional[Profile] = None
    session: Optional[Session] = None
    loading: bool = True

    model_config = {"frozen": True}

    @property
    def status(self) -> AuthStatus:
        """Derive the bootstrap state from the published fields."""
        if self.user is None:
            return AuthStatus.INITIALIZING if self.loading else AuthStatus.UNAUTHENTICATED
        if self.profile is None:
            return AuthStatus.AUTHENTICATING_PROFILE
        return AuthStatus.READY

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.profile is not None


class SignInRequest(BaseModel):
    """Credentials for password sign-in. The identity service judges the email."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class SignUpRequest(BaseModel):
    """Registration input."""

    email: EmailStr
    password: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1)
    role: UserRole = UserRole.STUDENT

    @field_validator("role")
    @classmethod
    def role_allowed_at_signup(cls, role: UserRole) -> UserRole:
        if role not in SIGNUP_ROLES:
            raise ValueError(f"role must be one of: student, teacher (got {role.value})")
        return role

    def metadata(self) -> dict[str, Any]:
        """Signup metadata stored on the principal."""
        return {"full_name": self.full_name, "role": self.role.value}


class AuthData(BaseModel):
    """Principal and session returned by sign-in or sign-up."""

    user: Optional[Principal] = None
    session: Optional[Session] = None


class ServiceError(BaseModel):
    """An error reported back to the caller as a value."""

    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServiceError":
        """Build from a HomeworkError.to_dict() payload."""
        return cls(
            code=data["error"],
            message=data["message"],
            details=data.get("details") or {},
        )


class AuthResult(BaseModel):
    """Outcome of sign-in or sign-up. Exactly one of data/error is set."""

    data: Optional[AuthData] = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SignOutResult(BaseModel):
    """Outcome of sign-out."""

    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None
