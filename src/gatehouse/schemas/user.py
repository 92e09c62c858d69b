"""User and authentication Pydantic schemas."""

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gatehouse.models.user import NAME_MAX_LENGTH, Role

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: str) -> bool:
    """Return True if ``value`` looks like an email address."""
    return bool(EMAIL_PATTERN.match(value.strip()))


class UserCreate(BaseModel):
    """Data required to create a local account."""

    email: str = Field(..., max_length=255)
    name: str | None = Field(None, max_length=NAME_MAX_LENGTH)
    avatar: str | None = None
    bio: str | None = None
    password: str | None = Field(None, min_length=6, description="Omitted for federated accounts")
    role: Role = Role.USER

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not is_valid_email(v):
            raise ValueError("Invalid email format")
        return v.strip()


class UserUpdate(BaseModel):
    """Partial update applied by ``PATCH /users/{id}``."""

    name: str | None = Field(None, min_length=1, max_length=NAME_MAX_LENGTH)
    avatar: str | None = None
    bio: str | None = None
    password: str | None = Field(None, min_length=6)
    role: Role | None = Field(None, description="Only administrators may change roles")


class UserResponse(BaseModel):
    """Public representation of an account."""

    id: str
    email: str
    name: str | None = None
    avatar: str | None = None
    bio: str | None = None
    role: Role
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class UserListResponse(BaseModel):
    """Paginated list of accounts."""

    items: list[UserResponse]
    total: int
    skip: int
    limit: int


class LoginRequest(BaseModel):
    """Email/password pair submitted to the credential login endpoints."""

    email: str = Field("", description="Account email address")
    password: str = Field("", description="Plain-text password")


class UserInfo(BaseModel):
    """Claims echoed back to the caller after login."""

    id: str
    email: str
    name: str | None = None
    role: Role


class LoginResponse(BaseModel):
    """Response returned after a successful legacy login."""

    success: bool = True
    message: str = "Login successful"
    user: UserInfo
    token: str = Field(..., description="Signed token also stored in the auth-token cookie")
    timestamp: datetime


class AuthStatusResponse(BaseModel):
    """Current legacy login state."""

    success: bool = True
    user: UserInfo
    is_authenticated: bool = True
    timestamp: datetime


class LogoutResponse(BaseModel):
    """Result of clearing the legacy auth cookie."""

    success: bool = True
    message: str
    was_authenticated: bool | None = None
    timestamp: datetime


class SessionUser(BaseModel):
    """User block of a provider session, enriched with id and role."""

    id: str
    email: str
    name: str | None = None
    image: str | None = None
    role: Role


class SessionResponse(BaseModel):
    """Externally visible provider session."""

    user: SessionUser
    expires: datetime


class ProvidersResponse(BaseModel):
    """Sign-in providers currently enabled on this deployment."""

    providers: list[str]


class CsrfTokenResponse(BaseModel):
    """Freshly issued anti-forgery token."""

    csrf_token: str
    expires_in: int = Field(..., description="Token lifetime in seconds")


class ProfileUpdateRequest(BaseModel):
    """Fields a user may change on their own profile."""

    name: str | None = Field(None, min_length=1, max_length=NAME_MAX_LENGTH)
    preferences: dict[str, Any] | None = None
    role: Role | None = Field(None, description="Honoured for administrators only")


class ProfileResponse(BaseModel):
    """Profile view assembled from the legacy token claims."""

    id: str
    email: str
    name: str | None = None
    role: Role
    preferences: dict[str, Any]
    last_login: datetime | None = None
    updated_at: datetime | None = None
