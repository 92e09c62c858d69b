"""Role and ownership authorization.

Decisions are returned as values rather than raised, so the HTTP layer can
map them to status codes without inspecting exception types.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final

from fastapi import status
from starlette.requests import HTTPConnection

from gatehouse.models.user import Role
from gatehouse.services.claims import SessionClaims
from gatehouse.services.errors import TokenError
from gatehouse.services.resolvers import SessionResolver

ADMIN_ONLY: Final[frozenset[Role]] = frozenset({Role.ADMIN})
ADMIN_OR_MODERATOR: Final[frozenset[Role]] = frozenset({Role.ADMIN, Role.MODERATOR})


class DenyReason(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"

    @property
    def status_code(self) -> int:
        if self is DenyReason.UNAUTHENTICATED:
            return status.HTTP_401_UNAUTHORIZED
        return status.HTTP_403_FORBIDDEN


@dataclass(frozen=True)
class AuthDecision:
    """Allow with the resolved claims, or deny with a reason and message."""

    claims: SessionClaims | None = None
    reason: DenyReason | None = None
    detail: str | None = None

    @property
    def allowed(self) -> bool:
        return self.reason is None

    @property
    def status_code(self) -> int:
        return self.reason.status_code if self.reason else status.HTTP_200_OK

    @classmethod
    def allow(cls, claims: SessionClaims) -> AuthDecision:
        return cls(claims=claims)

    @classmethod
    def deny(cls, reason: DenyReason, detail: str) -> AuthDecision:
        return cls(reason=reason, detail=detail)


def check_role(claims: SessionClaims, allowed_roles: Iterable[Role]) -> AuthDecision:
    """Allow ``claims`` if its role is one of ``allowed_roles``."""
    if claims.role in set(allowed_roles):
        return AuthDecision.allow(claims)
    return AuthDecision.deny(DenyReason.FORBIDDEN, "Insufficient permissions to access this resource")


def check_owner_or_role(
    claims: SessionClaims,
    owner_id: str | int | None,
    privileged_roles: Iterable[Role],
) -> AuthDecision:
    """Allow the resource owner, or any caller holding a privileged role."""
    if owner_id is not None and claims.id == str(owner_id):
        return AuthDecision.allow(claims)
    if claims.role in set(privileged_roles):
        return AuthDecision.allow(claims)
    return AuthDecision.deny(DenyReason.FORBIDDEN, "Insufficient permissions, you can only access your own resources")


class AuthorizationGuard:
    """Answer "may this caller perform this operation" for a request."""

    def __init__(self, resolver: SessionResolver) -> None:
        self.resolver = resolver

    def require_authenticated(self, request: HTTPConnection) -> AuthDecision:
        try:
            claims = self.resolver.resolve(request)
        except TokenError as err:
            return AuthDecision.deny(DenyReason.UNAUTHENTICATED, err.detail)
        return AuthDecision.allow(claims)

    def require_role(self, request: HTTPConnection, allowed_roles: Iterable[Role]) -> AuthDecision:
        decision = self.require_authenticated(request)
        if not decision.allowed or decision.claims is None:
            return decision
        return check_role(decision.claims, allowed_roles)

    def require_owner_or_role(
        self,
        request: HTTPConnection,
        owner_id: str | int | None,
        privileged_roles: Iterable[Role],
    ) -> AuthDecision:
        decision = self.require_authenticated(request)
        if not decision.allowed or decision.claims is None:
            return decision
        return check_owner_or_role(decision.claims, owner_id, privileged_roles)

    def require_admin(self, request: HTTPConnection) -> AuthDecision:
        return self.require_role(request, ADMIN_ONLY)

    def require_moderator(self, request: HTTPConnection) -> AuthDecision:
        """Allow administrators and moderators."""
        return self.require_role(request, ADMIN_OR_MODERATOR)

    def require_owner_or_admin(self, request: HTTPConnection, owner_id: str | int | None) -> AuthDecision:
        return self.require_owner_or_role(request, owner_id, ADMIN_ONLY)
