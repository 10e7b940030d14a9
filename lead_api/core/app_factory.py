from __future__ import annotations

"""Application factory for the lead API.

Builds the FastAPI app and the state it owns: the rate-limit table, the
sweeper that keeps it bounded, and the lead service that uses both. The
sweeper's lifetime is tied to the app lifespan.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Callable

from fastapi import FastAPI

from lead_api.adapters.mail.factory import create_mailer
from lead_api.adapters.rate_limit.base import AbstractRateLimiter
from lead_api.api.routes import health_router, lead_router
from lead_api.core.config import settings
from lead_api.core.exception_handlers import setup_exception_handlers
from lead_api.core.logging import configure_logging
from lead_api.core.middleware import request_id_middleware
from lead_api.core.rate_limit import build_rate_limiter, build_sweeper
from lead_api.services.lead_service import LeadService, MailerFactory


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    sweeper = app.state.rate_limit_sweeper
    sweeper.start()
    try:
        yield
    finally:
        await sweeper.stop()


def create_app(
    *,
    rate_limiter: AbstractRateLimiter | None = None,
    mailer_factory: MailerFactory | None = None,
    now: Callable[[], datetime] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        rate_limiter: Limiter to own; a fresh in-memory one by default.
        mailer_factory: Builds the delivery collaborator per request;
            Resend by default.
        now: Clock used for the submission timestamp in notifications.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Lead API",
        description=(
            "Przyjmuje zgłoszenia z formularza analizy systemu grzewczego, "
            "waliduje je, ogranicza liczbę zgłoszeń na klienta i wysyła "
            "powiadomienie do firmy oraz potwierdzenie do zgłaszającego."
        ),
        version="0.1.0",
        lifespan=_lifespan,
    )

    limiter = rate_limiter if rate_limiter is not None else build_rate_limiter(settings.app)
    app.state.rate_limiter = limiter
    app.state.rate_limit_sweeper = build_sweeper(limiter, settings.app)
    app.state.lead_service = LeadService(
        rate_limiter=limiter,
        mailer_factory=mailer_factory or create_mailer,
        rate_limit_enabled=settings.app.rate_limit_enabled,
        now=now,
    )

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(lead_router, prefix="/api")
    app.include_router(health_router)

    return app
