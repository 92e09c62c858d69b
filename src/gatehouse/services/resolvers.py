"""Session resolvers turning a request into caller claims.

The authorization guard depends only on :class:`SessionResolver`, so either
mechanism can be swapped or removed without touching guard logic.
"""

from __future__ import annotations

from typing import Protocol

from starlette.requests import HTTPConnection

from gatehouse.services.claims import SessionClaims
from gatehouse.services.legacy_token import LEGACY_COOKIE_NAME, LegacyTokenCodec
from gatehouse.services.session_provider import SESSION_COOKIE_NAME, SessionProvider


class SessionResolver(Protocol):
    """Resolve the caller of a request.

    Implementations raise a :class:`~gatehouse.services.errors.TokenError`
    subclass when the caller cannot be identified.
    """

    def resolve(self, request: HTTPConnection) -> SessionClaims: ...


class LegacyCookieResolver:
    """Resolve callers from the legacy ``auth-token`` cookie."""

    def __init__(self, codec: LegacyTokenCodec, cookie_name: str = LEGACY_COOKIE_NAME) -> None:
        self.codec = codec
        self.cookie_name = cookie_name

    def resolve(self, request: HTTPConnection) -> SessionClaims:
        return self.codec.resolve(request.cookies.get(self.cookie_name))


class ProviderSessionResolver:
    """Resolve callers from the provider session cookie."""

    def __init__(self, provider: SessionProvider, cookie_name: str = SESSION_COOKIE_NAME) -> None:
        self.provider = provider
        self.cookie_name = cookie_name

    def resolve(self, request: HTTPConnection) -> SessionClaims:
        return self.provider.read_session(request.cookies.get(self.cookie_name)).user
