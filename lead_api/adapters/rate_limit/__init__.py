"""Rate limiting adapters.

A small abstraction layer so lead submissions can be throttled by an
in-memory, per-process table today and by a shared store later without
changing the service layer.
"""

from lead_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from lead_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter, RateRecord
from lead_api.adapters.rate_limit.sweeper import RateLimitSweeper

__all__ = [
    "AbstractRateLimiter",
    "InMemoryFixedWindowRateLimiter",
    "RateLimitResult",
    "RateLimitSweeper",
    "RateRecord",
]
