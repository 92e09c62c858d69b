"""Cross-site request forgery protection.

Two independent mechanisms are provided:

- :class:`CSRFTokenManager` issues per-session anti-forgery tokens that
  expire after a fixed lifetime.
- :class:`OriginPolicy` performs the lightweight Origin/Referer and
  Content-Type checks used on form submissions.

Every check returns a boolean; translating ``False`` into a 403 is the job of
the HTTP layer.
"""

from __future__ import annotations

import hmac
import logging
import secrets
import time
from collections.abc import Iterable
from dataclasses import dataclass
from threading import Lock
from typing import Final
from urllib.parse import urlsplit

from starlette.requests import HTTPConnection

from gatehouse.core.clock import Clock

logger = logging.getLogger(__name__)

TOKEN_BYTES: Final[int] = 32
DEFAULT_TOKEN_TTL_SECONDS: Final[int] = 60 * 60
ALLOWED_CONTENT_TYPES: Final[tuple[str, ...]] = (
    "application/json",
    "application/x-www-form-urlencoded",
    "multipart/form-data",
)


@dataclass
class _TokenRecord:
    token: str
    expires: float


class CSRFTokenManager:
    """Store at most one live anti-forgery token per session identity."""

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
        *,
        clock: Clock = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._tokens: dict[str, _TokenRecord] = {}
        self._lock = Lock()

    def generate_token(self, session_id: str) -> str:
        """Issue a fresh token for ``session_id``, replacing any previous one."""
        token = secrets.token_hex(TOKEN_BYTES)
        expires = self._clock() + self.ttl_seconds
        with self._lock:
            self._tokens[session_id] = _TokenRecord(token=token, expires=expires)
        self.cleanup()
        return token

    def validate_token(self, session_id: str, token: str | None) -> bool:
        """Return True if ``token`` is the live token issued to ``session_id``.

        An expired record is deleted on the way out.
        """
        with self._lock:
            stored = self._tokens.get(session_id)
            if stored is None:
                return False
            if self._clock() > stored.expires:
                del self._tokens[session_id]
                return False
        if not token:
            return False
        return hmac.compare_digest(stored.token, token)

    def cleanup(self) -> int:
        """Remove expired tokens and return how many were dropped."""
        now = self._clock()
        with self._lock:
            expired = [sid for sid, record in self._tokens.items() if now > record.expires]
            for session_id in expired:
                del self._tokens[session_id]
        if expired:
            logger.debug("Swept %d expired CSRF tokens", len(expired))
        return len(expired)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._tokens

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)


def _origin_of(url: str) -> str | None:
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}".lower()


class OriginPolicy:
    """Decide whether a request originates from this application.

    Args:
        trusted_urls: Canonical application and auth-service URLs.
        production: When True, requests without Origin and Referer are refused.
    """

    def __init__(self, trusted_urls: Iterable[str | None] = (), *, production: bool = False) -> None:
        self.trusted_urls = [url for url in trusted_urls if url]
        self.production = production

    def allowed_origins(self, host: str | None) -> set[str]:
        origins: set[str] = set()
        if host:
            origins.update({f"https://{host}".lower(), f"http://{host}".lower()})
        for url in self.trusted_urls:
            origin = _origin_of(url)
            if origin:
                origins.add(origin)
        return origins

    def check_origin(self, request: HTTPConnection) -> bool:
        """Return True if the Origin or Referer header names an allowed origin."""
        headers = request.headers
        allowed = self.allowed_origins(headers.get("host"))

        origin = headers.get("origin")
        if origin:
            return origin.rstrip("/").lower() in allowed

        referer = headers.get("referer")
        if referer:
            referer_origin = _origin_of(referer)
            return referer_origin is not None and referer_origin in allowed

        return not self.production

    def simple_csrf_check(self, request: HTTPConnection) -> bool:
        """Combine the origin check with a Content-Type allowlist for POST requests."""
        if not self.check_origin(request):
            return False

        if request.scope.get("method") == "POST":
            content_type = (request.headers.get("content-type") or "").lower()
            if not any(allowed in content_type for allowed in ALLOWED_CONTENT_TYPES):
                return False

        return True
