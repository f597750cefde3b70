"""HTTP middleware for request correlation and access logging.

Every HTTP request gets the same treatment a TCP connection gets in
``jarl.server.tcp``: a request id and ``transport="http"`` bound into the
logging context, so admission logs from both transports line up. The
middleware also writes one ``http.request_completed`` access line per
request, since uvicorn's own access logger is left unconfigured.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from jarl.core.config import settings
from jarl.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)


async def request_id_middleware(request: Request, call_next) -> Response:
    """Bind the request id, time the request and log its outcome.

    The incoming request id header (``X-Request-ID`` by default, see
    ``LOG_REQUEST_ID_HEADER``) is reused when present, otherwise a UUID is
    generated. The id is echoed back along with the request duration and is
    kept on ``request.state`` for the fallback exception handler, which runs
    after this middleware has cleared the logging context.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response with request id and duration headers.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    request.state.request_id = request_id
    set_request_id(request_id, transport="http")
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "http.request_completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
