from __future__ import annotations

import math

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from jarl.core.admission import admit

router = APIRouter(tags=["Delay"])


@router.get("/delay", response_class=PlainTextResponse)
def get_delay(request: Request) -> PlainTextResponse:
    """Record one attempt and return the suggested delay as plain text.

    Declared sync so requests run in the threadpool; the keeper's lock
    serializes them.
    """

    keeper = request.app.state.keeper
    peer = request.client.host if request.client else None
    body = admit(keeper, transport="http", peer=peer)

    headers: dict[str, str] = {}
    delay = float(body)
    if delay > 0:
        headers["Retry-After"] = str(math.ceil(delay))

    return PlainTextResponse(body, headers=headers or None)
