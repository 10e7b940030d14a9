"""Background task that periodically drops expired rate-limit records."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from lead_api.adapters.rate_limit.base import AbstractRateLimiter

logger = logging.getLogger(__name__)


class RateLimitSweeper:
    """Run ``limiter.sweep()`` every ``interval_seconds`` on the event loop.

    ``sleep`` is injectable so tests can step the loop without waiting on the
    wall clock.
    """

    def __init__(
        self,
        limiter: AbstractRateLimiter,
        *,
        interval_seconds: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")

        self._limiter = limiter
        self._interval_seconds = interval_seconds
        self._sleep = sleep
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the sweep loop (no-op if it is already running)."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="rate-limit-sweeper")
        logger.info("rate_limit.sweeper_started", extra={"interval_s": self._interval_seconds})

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("rate_limit.sweeper_stopped")

    def sweep_once(self) -> int:
        removed = self._limiter.sweep()
        if removed:
            logger.debug("rate_limit.swept", extra={"removed": removed})
        return removed

    async def _run(self) -> None:
        while True:
            await self._sleep(self._interval_seconds)
            try:
                self.sweep_once()
            except Exception:
                logger.exception("rate_limit.sweep_failed")
