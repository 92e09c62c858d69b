"""Sliding-window rate limiting for Gatehouse.

State lives in process memory, so limits are advisory: they are not shared
between worker processes and reset on restart.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from threading import Lock

from gatehouse.core.clock import Clock, iso_from_unix_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a rate-limit check at the HTTP boundary."""

    success: bool
    remaining: int
    reset_time: str | None = None
    error: str | None = None


class SlidingWindowRateLimiter:
    """Count requests per identity over a trailing time window.

    Each identity maps to the millisecond timestamps of its accepted requests.
    Entries older than ``window_ms`` are pruned on every access and by
    :meth:`cleanup`, which is expected to run periodically.
    """

    def __init__(
        self,
        window_ms: int = 15 * 60 * 1000,
        max_requests: int = 5,
        *,
        name: str = "default",
        clock: Clock = time.time,
    ) -> None:
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        self.window_ms = window_ms
        self.max_requests = max_requests
        self.name = name
        self._clock = clock
        self._requests: dict[str, list[int]] = {}
        self._lock = Lock()

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _live(self, identity: str, now_ms: int) -> list[int]:
        window_start = now_ms - self.window_ms
        return [ts for ts in self._requests.get(identity, ()) if ts > window_start]

    def is_rate_limited(self, identity: str) -> bool:
        """Return True if ``identity`` has exhausted its quota.

        A request that is not limited is recorded; a limited one is not.
        """
        now_ms = self._now_ms()
        with self._lock:
            live = self._live(identity, now_ms)
            if len(live) >= self.max_requests:
                self._requests[identity] = live
                return True
            live.append(now_ms)
            self._requests[identity] = live
            return False

    def remaining(self, identity: str) -> int:
        """Return how many more requests ``identity`` may make in the current window."""
        now_ms = self._now_ms()
        with self._lock:
            return max(0, self.max_requests - len(self._live(identity, now_ms)))

    def reset_time(self, identity: str) -> int:
        """Return the ms timestamp at which the oldest live request leaves the window.

        Returns:
            0 when the identity has no live requests.
        """
        now_ms = self._now_ms()
        with self._lock:
            live = self._live(identity, now_ms)
        if not live:
            return 0
        return min(live) + self.window_ms

    def cleanup(self) -> int:
        """Drop expired timestamps and identities with no live requests.

        Returns:
            Number of identities removed.
        """
        now_ms = self._now_ms()
        with self._lock:
            retained: dict[str, list[int]] = {}
            for identity in self._requests:
                live = self._live(identity, now_ms)
                if live:
                    retained[identity] = live
            removed = len(self._requests) - len(retained)
            self._requests = retained
        if removed:
            logger.debug("Rate limiter %s swept %d idle identities", self.name, removed)
        return removed

    def timestamps(self, identity: str) -> list[int]:
        """Return a copy of the stored timestamps for ``identity``."""
        with self._lock:
            return list(self._requests.get(identity, ()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._requests)

    def check(self, identity: str) -> RateLimitResult:
        """Record a request for ``identity`` and report the boundary outcome."""
        if self.is_rate_limited(identity):
            reset_ms = self.reset_time(identity)
            logger.info("Rate limit %s exceeded for %s", self.name, identity)
            return RateLimitResult(
                success=False,
                remaining=0,
                reset_time=iso_from_unix_ms(reset_ms),
                error="Too many requests, please try again later",
            )
        return RateLimitResult(success=True, remaining=self.remaining(identity))
