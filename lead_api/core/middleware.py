"""Request correlation for the lead endpoint.

A single form submission produces several log lines (rate-limit decision,
validation outcome, two delivery calls). ``request_id_middleware`` gives
them a shared id, echoes it back to the browser and closes the request with
one ``http.request`` access line.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response

from lead_api.core.config import settings
from lead_api.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

DURATION_HEADER = "X-Request-Duration-ms"

# Accepted incoming ids; anything else is replaced so headers and logs stay clean
_REQUEST_ID_RE = re.compile(r"[A-Za-z0-9._:-]{1,128}")


def choose_request_id(incoming: str | None) -> str:
    """Reuse a well-formed incoming id, otherwise mint a UUID4."""
    if incoming and _REQUEST_ID_RE.fullmatch(incoming):
        return incoming
    return str(uuid.uuid4())


async def request_id_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    header_name = settings.log.request_id_header
    request_id = choose_request_id(request.headers.get(header_name))

    set_request_id(request_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "http.request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers[DURATION_HEADER] = f"{elapsed_ms:.2f}"
    return response
