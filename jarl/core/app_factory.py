"""Application factory for the HTTP transport.

Centralizes app construction (metadata, middleware, handlers, routers) and
binds the process-wide keeper to the app state.
"""

from __future__ import annotations

from fastapi import FastAPI

from jarl import __version__
from jarl.adapters.keeper.base import AbstractDelayKeeper
from jarl.api.routes import delay_router, health_router
from jarl.core.exception_handlers import setup_exception_handlers
from jarl.core.middleware import request_id_middleware


def create_app(keeper: AbstractDelayKeeper) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        keeper: Shared delay keeper; every request to /delay records on it.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    app = FastAPI(
        title="jarl",
        description=(
            "Sliding-window delay service. GET /delay records an attempt and "
            "returns how many seconds the caller should wait before proceeding."
        ),
        version=__version__,
    )
    app.state.keeper = keeper

    app.middleware("http")(request_id_middleware)
    setup_exception_handlers(app)

    app.include_router(delay_router)
    app.include_router(health_router)

    return app
