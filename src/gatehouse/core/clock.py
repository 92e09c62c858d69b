# src/gatehouse/core/clock.py
"""Time sources shared by the models, the token codecs and the gating stores.

Stores and codecs take a :data:`Clock` returning Unix seconds so expiry can be
driven by hand in tests. Rate-limit windows are kept in Unix milliseconds.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], float]


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def from_unix_seconds(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, UTC)


def iso_from_unix_ms(epoch_ms: int) -> str:
    """Render Unix milliseconds as ISO-8601 UTC with a ``Z`` suffix, as sent in ``X-RateLimit-Reset``."""
    return from_unix_seconds(epoch_ms / 1000).isoformat().replace("+00:00", "Z")
