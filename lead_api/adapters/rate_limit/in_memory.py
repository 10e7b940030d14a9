"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Windows are anchored at each client's first request, not at wall-clock
  boundaries.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from lead_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class RateRecord:
    """Per-client counter for the window that started at ``window_start``."""

    count: int
    window_start: float


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed time window per client.

    The first request from a client opens a window of ``window_seconds``.
    Up to ``limit`` requests are admitted inside it; later ones are rejected
    without touching the counter. The first request after the window expired
    replaces the record with a fresh one (count 1). Expired records are
    removed by ``sweep()``, which keeps memory bounded by the number of
    recently active clients.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of admitted requests per window.
            window_seconds: Size of the fixed window in seconds.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._records: dict[str, RateRecord] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._records

    def _is_expired(self, record: RateRecord, now: float) -> bool:
        return now - record.window_start >= self._window_seconds

    def _reset_at(self, record: RateRecord) -> int:
        return int(math.ceil(record.window_start + self._window_seconds))

    def consume(self, key: str) -> RateLimitResult:
        """Count one request for ``key``.

        Args:
            key: Client identifier.

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()

        with self._lock:
            record = self._records.get(key)

            if record is None or self._is_expired(record, now):
                record = RateRecord(count=1, window_start=now)
                self._records[key] = record
                return RateLimitResult(
                    allowed=True,
                    limit=self._limit,
                    remaining=self._limit - 1,
                    reset_at=self._reset_at(record),
                    retry_after_seconds=None,
                )

            if record.count < self._limit:
                record.count += 1
                return RateLimitResult(
                    allowed=True,
                    limit=self._limit,
                    remaining=self._limit - record.count,
                    reset_at=self._reset_at(record),
                    retry_after_seconds=None,
                )

            retry_after = record.window_start + self._window_seconds - now
            return RateLimitResult(
                allowed=False,
                limit=self._limit,
                remaining=0,
                reset_at=self._reset_at(record),
                retry_after_seconds=max(1, int(math.ceil(retry_after))),
            )

    def sweep(self) -> int:
        """Remove every record whose window has expired.

        Returns:
            Number of records removed.
        """
        now = self._clock()
        with self._lock:
            expired = [key for key, record in self._records.items() if self._is_expired(record, now)]
            for key in expired:
                del self._records[key]
        return len(expired)
