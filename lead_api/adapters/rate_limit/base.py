"""Rate limiter interfaces.

The lead pipeline depends on this abstraction (not the concrete
implementation) so the process-local table can be replaced by a shared
store without touching the service layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit consume operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the client's current window expires.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def consume(self, key: str) -> RateLimitResult:
        """Count one request for ``key`` and report whether it is allowed.

        Args:
            key: Client identifier (e.g., IP address).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def sweep(self) -> int:
        """Drop state whose window has expired.

        Returns:
            Number of keys removed.
        """
        raise NotImplementedError

    def admit(self, key: str) -> bool:
        """Boolean shorthand for ``consume(key).allowed``."""
        return self.consume(key).allowed
