"""Raw TCP transport.

Every accepted connection is one attempt: the handler asks the shared keeper
for a delay, writes it back as ``"%.3f"`` text and closes the connection.
Nothing is read from the peer.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from functools import partial

from jarl.adapters.keeper.base import AbstractDelayKeeper
from jarl.core.admission import admit
from jarl.core.config import ServerSettings
from jarl.core.errors import TransportAppError
from jarl.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)


def _format_peer(writer: asyncio.StreamWriter) -> str | None:
    peername = writer.get_extra_info("peername")
    if not peername:
        return None
    return f"{peername[0]}:{peername[1]}"


async def handle_connection(
    keeper: AbstractDelayKeeper,
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    *,
    write_timeout: float,
) -> None:
    """Serve a single connection.

    The keeper update happens before any network I/O, so a peer that goes
    away mid-reply never skips or half-applies it.

    Args:
        keeper: Shared delay keeper.
        reader: Stream reader for the connection (unused, no request body).
        writer: Stream writer for the connection.
        write_timeout: Seconds allowed for flushing the reply.
    """

    set_request_id(uuid.uuid4().hex, transport="tcp")
    peer = _format_peer(writer)
    try:
        response = admit(keeper, transport="tcp", peer=peer)
        try:
            writer.write(response.encode("ascii"))
            await asyncio.wait_for(writer.drain(), timeout=write_timeout)
        except (ConnectionError, asyncio.TimeoutError) as exc:
            logger.warning(
                "tcp.write_failed",
                extra={
                    "peer": peer,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except ConnectionError:
            # Peer already reset; nothing left to flush.
            pass
        clear_request_id()


async def start_server(
    keeper: AbstractDelayKeeper,
    host: str,
    port: int,
    *,
    write_timeout: float = 5.0,
) -> asyncio.Server:
    """Bind the listener and start accepting connections.

    Args:
        keeper: Shared delay keeper.
        host: Interface to bind to.
        port: Port to bind to (0 picks a free port).
        write_timeout: Seconds allowed for flushing each reply.

    Returns:
        asyncio.Server: The started server.

    Raises:
        TransportAppError: If the address cannot be bound.
    """

    handler = partial(handle_connection, keeper, write_timeout=write_timeout)
    try:
        server = await asyncio.start_server(handler, host, port)
    except OSError as exc:
        raise TransportAppError(
            code="bind_failed",
            message=f"Could not listen on {host}:{port}: {exc.strerror or exc}",
            details={"host": host, "port": port},
        ) from exc

    for sock in server.sockets:
        logger.info(
            "server.listening",
            extra={"transport": "tcp", "address": str(sock.getsockname())},
        )
    return server


async def serve(keeper: AbstractDelayKeeper, server_settings: ServerSettings) -> None:
    """Run the TCP transport until the task is cancelled."""

    server = await start_server(
        keeper,
        server_settings.host,
        server_settings.port,
        write_timeout=server_settings.write_timeout_seconds,
    )
    async with server:
        await server.serve_forever()
