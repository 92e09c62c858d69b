"""Background sweeps of expired rate-limit and CSRF state.

Checks expire entries lazily when they are read; this worker bounds memory by
removing entries that are never read again.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from gatehouse.services.registry import GateServices

# Configure logger for this module
logger = logging.getLogger(__name__)


class MaintenanceWorker:
    """Periodically sweeps the in-memory stores held by :class:`GateServices`.

    Rate limiters and the CSRF token store are swept on independent intervals.
    """

    def __init__(
        self,
        services: GateServices,
        *,
        rate_limit_interval: float | None = None,
        csrf_interval: float | None = None,
    ) -> None:
        self.services = services
        self.rate_limit_interval = max(
            0.1, float(rate_limit_interval or services.settings.rate_limit_sweep_seconds)
        )
        self.csrf_interval = max(0.1, float(csrf_interval or services.settings.csrf_sweep_seconds))
        self._tasks: list[asyncio.Task[None]] = []
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    async def start(self) -> None:
        """Start the background sweep loops."""

        if self.running:
            return

        self._stopping.clear()
        self._tasks = [
            asyncio.create_task(self._run(self.rate_limit_interval, self.sweep_rate_limits)),
            asyncio.create_task(self._run(self.csrf_interval, self.sweep_csrf_tokens)),
        ]

    async def stop(self) -> None:
        """Stop the background sweep loops."""

        if not self._tasks:
            return

        self._stopping.set()
        await asyncio.gather(*self._tasks)
        self._tasks = []

    def sweep_rate_limits(self) -> int:
        removed = 0
        for limiter in self.services.rate_limiters.values():
            removed += limiter.cleanup()
        return removed

    def sweep_csrf_tokens(self) -> int:
        return self.services.csrf_tokens.cleanup()

    def run_once(self) -> dict[str, int]:
        """Run every sweep immediately and report how many entries were removed."""
        return {
            "rate_limit_identities": self.sweep_rate_limits(),
            "csrf_tokens": self.sweep_csrf_tokens(),
        }

    async def _run(self, interval: float, sweep: Callable[[], int]) -> None:
        while not self._stopping.is_set():
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._stopping.wait(), timeout=interval)
            if self._stopping.is_set():
                return
            try:
                removed = sweep()
            except Exception:
                # Entries left behind are retried on the next tick.
                logger.exception("Maintenance sweep %s failed", sweep.__name__)
                continue
            if removed:
                logger.info("Maintenance sweep %s removed %d entries", sweep.__name__, removed)
