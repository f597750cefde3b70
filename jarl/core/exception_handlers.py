"""Global exception handler for the HTTP transport.

The delay routes have no recoverable errors: configuration problems abort
startup before the app exists. Anything that escapes a route (for example a
clock failure inside the keeper) is logged and answered with a generic 500
that carries the request id but no internals.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from jarl.core.logging import get_request_id

logger = logging.getLogger(__name__)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse with a generic error (no implementation details leaked).
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": getattr(request.state, "request_id", None),
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": getattr(request.state, "request_id", None) or get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register the fallback exception handler with the FastAPI app."""
    app.exception_handler(Exception)(general_exception_handler)
