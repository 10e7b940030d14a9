from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe for load balancers and uptime monitors.

    Does not touch the email provider or the rate limit table.
    """

    return {"status": "ok"}
