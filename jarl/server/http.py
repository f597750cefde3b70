"""HTTP transport.

Serves the FastAPI app from ``jarl.core.app_factory`` with uvicorn on a
socket bound here, so a busy address surfaces as ``TransportAppError`` like
it does for the TCP transport instead of uvicorn exiting the process.
"""

from __future__ import annotations

import logging
import socket

import uvicorn

from jarl.adapters.keeper.base import AbstractDelayKeeper
from jarl.core.app_factory import create_app
from jarl.core.config import ServerSettings
from jarl.core.errors import TransportAppError

logger = logging.getLogger(__name__)


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind a listening-ready TCP socket.

    Raises:
        TransportAppError: If the address cannot be bound.
    """

    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as exc:
        sock.close()
        raise TransportAppError(
            code="bind_failed",
            message=f"Could not listen on {host}:{port}: {exc.strerror or exc}",
            details={"host": host, "port": port},
        ) from exc
    sock.set_inheritable(True)
    return sock


async def serve(keeper: AbstractDelayKeeper, server_settings: ServerSettings) -> None:
    """Run the HTTP transport until uvicorn receives a shutdown signal."""

    sock = bind_socket(server_settings.host, server_settings.port)
    config = uvicorn.Config(
        create_app(keeper),
        host=server_settings.host,
        port=server_settings.port,
        log_config=None,
        access_log=False,
    )
    server = uvicorn.Server(config)
    logger.info(
        "server.listening",
        extra={"transport": "http", "address": str(sock.getsockname())},
    )
    try:
        await server.serve(sockets=[sock])
    finally:
        sock.close()
