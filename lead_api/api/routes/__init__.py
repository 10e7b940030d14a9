from __future__ import annotations

from lead_api.api.routes.health import router as health_router
from lead_api.api.routes.lead import router as lead_router

__all__ = ["health_router", "lead_router"]
