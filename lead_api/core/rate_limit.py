"""Rate limiting wiring for the HTTP layer.

Builds the limiter and its sweeper from settings and resolves which client a
request is counted against. The limiter itself is owned by ``app.state``
(see ``app_factory``), never by this module, so each app instance and each
test gets its own table.

Client identifier resolution:
- Socket peer address (as reported by the ASGI server / trusted proxy).
- Otherwise the first ``X-Forwarded-For`` entry.
- Otherwise the sentinel ``"unknown"``.

With ``APP_TRUST_FORWARDED_FOR`` enabled the header is preferred over the
peer address, for deployments behind a reverse proxy.
"""

from __future__ import annotations

from typing import Callable

from fastapi import Request

from lead_api.adapters.rate_limit.base import AbstractRateLimiter
from lead_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from lead_api.adapters.rate_limit.sweeper import RateLimitSweeper
from lead_api.core.config import AppSettings

UNKNOWN_CLIENT = "unknown"
FORWARDED_FOR_HEADER = "x-forwarded-for"


def _forwarded_for(request: Request) -> str | None:
    header = request.headers.get(FORWARDED_FOR_HEADER)
    if not header:
        return None
    first = header.split(",")[0].strip()
    return first or None


def resolve_client_id(request: Request, *, trust_forwarded_for: bool = False) -> str:
    """Pick the identifier a request is rate limited under.

    Args:
        request: Incoming request.
        trust_forwarded_for: Prefer ``X-Forwarded-For`` over the peer address.

    Returns:
        str: Client identifier, ``"unknown"`` when nothing is available.
    """
    peer = request.client.host if request.client and request.client.host else None
    forwarded = _forwarded_for(request)

    if trust_forwarded_for:
        return forwarded or peer or UNKNOWN_CLIENT
    return peer or forwarded or UNKNOWN_CLIENT


def build_rate_limiter(
    app_settings: AppSettings,
    *,
    clock: Callable[[], float] | None = None,
) -> InMemoryFixedWindowRateLimiter:
    """Create the per-process limiter from settings."""
    kwargs = {"clock": clock} if clock is not None else {}
    return InMemoryFixedWindowRateLimiter(
        limit=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window_seconds,
        **kwargs,
    )


def build_sweeper(limiter: AbstractRateLimiter, app_settings: AppSettings) -> RateLimitSweeper:
    """Create the background sweeper; one run per window by default."""
    return RateLimitSweeper(limiter, interval_seconds=app_settings.sweep_interval_seconds)
