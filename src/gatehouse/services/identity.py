"""Caller fingerprinting from request metadata.

The keys produced here are pseudo-identities used to bucket throttling and
anti-forgery state. They are not verified identities: callers behind the same
proxy share a key, and anyone can spoof the forwarding headers.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from typing import Final

from starlette.requests import HTTPConnection

UNKNOWN: Final[str] = "unknown"


def client_ip(headers: Mapping[str, str]) -> str:
    """Return the best-effort client address from proxy headers.

    Args:
        headers: Case-insensitive request headers.

    Returns:
        The first ``x-forwarded-for`` entry, else ``x-real-ip``, else ``"unknown"``.
    """
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return UNKNOWN


def identify(request: HTTPConnection) -> str:
    """Derive the rate-limit identity key for ``request``.

    Falls back to the User-Agent when no address can be resolved.
    """
    ip = client_ip(request.headers)
    if not ip or ip == UNKNOWN:
        user_agent = request.headers.get("user-agent") or UNKNOWN
        return f"ua:{user_agent}"
    return f"ip:{ip}"


def session_fingerprint(request: HTTPConnection) -> str:
    """Return a SHA-256 fingerprint of the caller's address and User-Agent.

    Used as the session key for CSRF tokens when no dedicated session id exists.
    """
    ip = client_ip(request.headers)
    user_agent = request.headers.get("user-agent") or ""
    return hashlib.sha256(f"{ip}:{user_agent}".encode()).hexdigest()
