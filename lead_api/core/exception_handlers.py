"""Error-to-response mapping and global exception handlers.

Every error kind leaves the service as ``{"error": "<message>"}`` with a
status code chosen by its type:

- ConfigurationAppError → 500
- RateLimitAppError → 429 (plus X-RateLimit-* headers when enabled)
- MalformedRequestAppError, ValidationAppError → 400
- DeliveryAppError → 500
- Unexpected Exception → generic 500 (safety net)
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from lead_api.core.config import settings
from lead_api.core.errors import (
    AppError,
    ConfigurationAppError,
    DeliveryAppError,
    MalformedRequestAppError,
    RateLimitAppError,
    ValidationAppError,
)
from lead_api.core.logging import get_request_id

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Wystąpił nieoczekiwany błąd. Proszę spróbować ponownie."

_STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (ConfigurationAppError, 500),
    (RateLimitAppError, 429),
    (MalformedRequestAppError, 400),
    (ValidationAppError, 400),
    (DeliveryAppError, 500),
)


def status_code_for(exc: AppError) -> int:
    """Return the HTTP status code for an application error.

    Unknown AppError subclasses default to 400 (client fault).
    """
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 400


def _rate_limit_headers(exc: AppError) -> dict[str, str] | None:
    if not isinstance(exc, RateLimitAppError) or not exc.details:
        return None
    if not settings.app.rate_limit_include_headers:
        return None

    details = exc.details
    headers = {"Retry-After": str(details.get("retry_after", 0))}
    if "limit" in details:
        headers["X-RateLimit-Limit"] = str(details["limit"])
    if "remaining" in details:
        headers["X-RateLimit-Remaining"] = str(details["remaining"])
    if "reset_at" in details:
        headers["X-RateLimit-Reset"] = str(details["reset_at"])
    return headers


def error_response(exc: AppError) -> JSONResponse:
    """Convert an application error into the client-facing JSON response.

    Only ``exc.message`` reaches the client; ``details`` stay server-side.

    Args:
        exc: AppError instance (or subclass), raised or returned.

    Returns:
        JSONResponse with the mapped status code and ``{"error": message}``.
    """
    return JSONResponse(
        status_code=status_code_for(exc),
        content={"error": exc.message},
        headers=_rate_limit_headers(exc),
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle raised application errors with the shared response mapping."""
    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "status_code": status_code_for(exc),
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )
    return error_response(exc)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic
    message. No stack traces or exception text reach the client.

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse with status 500 and a generic error message.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={"error": GENERIC_ERROR_MESSAGE},
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
