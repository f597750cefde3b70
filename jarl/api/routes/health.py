from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request) -> dict:
    """Liveness check that reports the keeper configuration.

    Only reads immutable keeper settings, so probes never consume the window.
    """

    keeper = request.app.state.keeper
    return {"status": "ok", "limit": keeper.limit, "period_s": keeper.period}
