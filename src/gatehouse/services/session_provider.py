"""Provider-managed sessions with credential and federated sign-in.

Sign-in produces a signed session token that is stored in the session cookie.
Role and id claims are written into the token when it is issued and copied
into the visible session on every read, so role checks never need a database
round trip.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Final

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from gatehouse.core.clock import Clock, from_unix_seconds
from gatehouse.core.security import verify_password
from gatehouse.core.settings import Settings
from gatehouse.models.user import NAME_MAX_LENGTH, Role, User
from gatehouse.schemas.user import UserCreate
from gatehouse.services import user_service
from gatehouse.services.claims import SessionClaims
from gatehouse.services.errors import (
    MalformedTokenError,
    MissingCredentialsError,
    NoPasswordSetError,
    NoTokenError,
    PasswordMismatchError,
    ProviderNotEnabledError,
    TokenExpiredError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME: Final[str] = "gatehouse.session-token"
CREDENTIALS_PROVIDER: Final[str] = "credentials"
DEFAULT_MAX_AGE_SECONDS: Final[int] = 30 * 24 * 60 * 60


def authenticate_credentials(db: Session, email: str | None, password: str | None) -> User:
    """Check an email/password pair against the stored bcrypt hash.

    Raises:
        MissingCredentialsError: If either value is empty.
        UserNotFoundError: If no account uses ``email``.
        NoPasswordSetError: If the account was created through a federated provider.
        PasswordMismatchError: If the password does not match.
    """
    if not email or not password:
        raise MissingCredentialsError()

    user = user_service.get_user_by_email(db, email)
    if user is None:
        raise UserNotFoundError()
    if not user.password:
        raise NoPasswordSetError()
    if not verify_password(password, user.password):
        raise PasswordMismatchError()
    return user


@dataclass(frozen=True)
class SignInUser:
    """Minimal identity returned by a successful sign-in."""

    id: str
    email: str
    name: str | None
    image: str | None
    role: Role

    @classmethod
    def from_user(cls, user: User) -> SignInUser:
        return cls(id=user.id, email=user.email, name=user.name, image=user.avatar, role=Role(user.role))


@dataclass(frozen=True)
class FederatedProfile:
    """Profile asserted by an external identity provider after it authenticated the user."""

    email: str
    name: str | None = None
    image: str | None = None

    @property
    def display_name(self) -> str | None:
        """Provider name trimmed to what a local account can store."""
        if self.name is None:
            return None
        return self.name.strip()[:NAME_MAX_LENGTH].rstrip() or None


@dataclass(frozen=True)
class SessionData:
    """Session object exposed to route handlers."""

    user: SessionClaims
    expires: datetime


class SessionProvider:
    """Issue and read provider sessions.

    Args:
        secret_key: Key used to sign session tokens.
        algorithm: JWS algorithm.
        max_age_seconds: Session lifetime.
        federated_providers: ``{name: (client_id, client_secret)}`` of enabled providers.
        clock: Time source in Unix seconds.
    """

    def __init__(
        self,
        secret_key: str,
        *,
        algorithm: str = "HS256",
        max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS,
        federated_providers: Mapping[str, tuple[str, str]] | None = None,
        clock: Clock = time.time,
    ) -> None:
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.max_age_seconds = max_age_seconds
        self._federated = dict(federated_providers or {})
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> SessionProvider:
        return cls(
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
            max_age_seconds=settings.session_max_age_seconds,
            federated_providers=settings.federated_providers,
        )

    def providers(self) -> list[str]:
        """Return the enabled sign-in providers, credentials first."""
        return [CREDENTIALS_PROVIDER, *sorted(self._federated)]

    def authorize_credentials(self, db: Session, email: str | None, password: str | None) -> SignInUser:
        """Credentials provider: verify the pair and return the signed-in identity."""
        user = authenticate_credentials(db, email, password)
        logger.info("User signed in: email=%s provider=%s", user.email, CREDENTIALS_PROVIDER)
        return SignInUser.from_user(user)

    def sign_in_federated(self, db: Session, provider: str, profile: FederatedProfile) -> SignInUser:
        """Sign in a user already authenticated by ``provider``.

        The first sign-in for an email provisions a local account without a
        password; later sign-ins reuse the account matched by email.

        Raises:
            ProviderNotEnabledError: If ``provider`` is not configured.
        """
        if provider not in self._federated:
            raise ProviderNotEnabledError(provider)

        user = user_service.get_user_by_email(db, profile.email)
        if user is None:
            user = user_service.create_user(
                db,
                UserCreate(email=profile.email, name=profile.display_name, avatar=profile.image),
            )
            logger.info("Provisioned account %s via %s", user.email, provider)

        logger.info("User signed in: email=%s provider=%s", user.email, provider)
        return SignInUser.from_user(user)

    def jwt_callback(self, token: dict[str, Any], user: SignInUser | None = None) -> dict[str, Any]:
        """Enrich the internal token with id and role at sign-in time."""
        if user is not None:
            token["id"] = user.id
            token["role"] = user.role.value
        return token

    def session_callback(self, token: Mapping[str, Any]) -> SessionData:
        """Copy token claims into the externally visible session."""
        claims = SessionClaims.from_payload(token)
        return SessionData(user=claims, expires=from_unix_seconds(int(token["exp"])))

    def encode_session(self, user: SignInUser) -> str:
        """Return a signed session token for ``user``."""
        now = int(self._clock())
        token: dict[str, Any] = {
            "sub": user.id,
            "email": user.email,
            "name": user.name,
            "picture": user.image,
            "iat": now,
            "exp": now + self.max_age_seconds,
        }
        encoded: str = jwt.encode(self.jwt_callback(token, user), self._secret_key, algorithm=self.algorithm)
        return encoded

    def read_session(self, token: str | None) -> SessionData:
        """Decode a session cookie value.

        Raises:
            NoTokenError: If there is no session.
            TokenExpiredError: If the session is past its max age.
            MalformedTokenError: If the token fails verification or lacks claims.
        """
        if not token:
            raise NoTokenError()
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_iat": False},
            )
        except JWTError as err:
            raise MalformedTokenError() from err

        exp = payload.get("exp")
        if not isinstance(exp, int | float):
            raise MalformedTokenError()
        if exp < self._clock():
            raise TokenExpiredError("Session expired")
        return self.session_callback(payload)

    def sign_out(self, session: SessionData | None) -> None:
        """Record a sign-out event; the caller clears the cookie."""
        logger.info("User signed out: email=%s", session.user.email if session else None)
