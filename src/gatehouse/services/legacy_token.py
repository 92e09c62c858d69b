"""Legacy cookie token used by the ``/auth/login`` flow.

The token carries ``{id, email, name, role, exp}`` as a compact JWS signed
with HMAC-SHA256, so claims can no longer be forged by re-encoding the
payload. ``exp`` is expressed in Unix seconds.
"""

from __future__ import annotations

import time
from datetime import timedelta
from typing import Any, Final

from jose import JWTError, jwt

from gatehouse.core.clock import Clock
from gatehouse.services.claims import ClaimsSubject, SessionClaims
from gatehouse.services.errors import MalformedTokenError, NoTokenError, TokenExpiredError

LEGACY_COOKIE_NAME: Final[str] = "auth-token"
DEFAULT_TTL_SECONDS: Final[int] = 60 * 60 * 24


class LegacyTokenCodec:
    """Issue and resolve signed legacy tokens."""

    def __init__(
        self,
        secret_key: str,
        *,
        algorithm: str = "HS256",
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Clock = time.time,
    ) -> None:
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def issue(self, user: ClaimsSubject, expires_in: timedelta | None = None) -> str:
        """Return a signed token for ``user``.

        Args:
            user: Object exposing ``id``, ``email``, ``name`` and ``role``.
            expires_in: Lifetime override; defaults to the codec TTL.
        """
        lifetime = expires_in if expires_in is not None else timedelta(seconds=self.ttl_seconds)
        role = user.role.value if hasattr(user.role, "value") else str(user.role)
        payload: dict[str, Any] = {
            "id": str(user.id),
            "email": user.email,
            "name": user.name,
            "role": role,
            "exp": int(self._clock() + lifetime.total_seconds()),
        }
        token: str = jwt.encode(payload, self._secret_key, algorithm=self.algorithm)
        return token

    def resolve(self, token: str | None) -> SessionClaims:
        """Decode ``token`` and return its claims.

        Raises:
            NoTokenError: If no token was supplied.
            TokenExpiredError: If ``exp`` lies in the past.
            MalformedTokenError: If the token is undecodable, unsigned, or incomplete.
        """
        if not token:
            raise NoTokenError()
        try:
            # Expiry is checked below against the injectable clock.
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as err:
            raise MalformedTokenError() from err

        exp = payload.get("exp")
        if not isinstance(exp, int | float):
            raise MalformedTokenError()
        if exp * 1000 < self._clock() * 1000:
            raise TokenExpiredError()
        return SessionClaims.from_payload(payload)
