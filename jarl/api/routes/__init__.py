from __future__ import annotations

from jarl.api.routes.delay import router as delay_router
from jarl.api.routes.health import router as health_router

__all__ = ["delay_router", "health_router"]
