"""Identity claims shared by the session mechanisms and the authorization guard."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from gatehouse.models.user import Role
from gatehouse.services.errors import MalformedTokenError


class ClaimsSubject(Protocol):
    """Anything that can be turned into claims, e.g. a ``User`` row."""

    id: Any
    email: str
    name: str | None
    role: Any


@dataclass(frozen=True)
class SessionClaims:
    """Resolved identity of the caller.

    ``exp`` is the Unix-seconds expiry of the credential the claims came from.
    """

    id: str
    email: str
    role: Role
    name: str | None = None
    image: str | None = None
    exp: int | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> SessionClaims:
        """Build claims from a decoded token payload.

        Raises:
            MalformedTokenError: If a required claim is missing or the role is unknown.
        """
        try:
            user_id = payload["id"]
            email = payload["email"]
            role = Role(payload["role"])
        except (KeyError, ValueError, TypeError) as err:
            raise MalformedTokenError() from err
        if user_id is None or not email:
            raise MalformedTokenError()
        exp = payload.get("exp")
        return cls(
            id=str(user_id),
            email=str(email),
            role=role,
            name=payload.get("name"),
            image=payload.get("picture"),
            exp=int(exp) if exp is not None else None,
        )
