"""Tests for the HTTP transport listener."""

import socket

import pytest

from jarl.core.errors import TransportAppError
from jarl.server.http import bind_socket


def test_bind_socket_on_free_port() -> None:
    sock = bind_socket("127.0.0.1", 0)
    try:
        host, port = sock.getsockname()
        assert host == "127.0.0.1"
        assert port > 0
    finally:
        sock.close()


def test_bind_socket_on_busy_port_raises_transport_error() -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
        busy.bind(("127.0.0.1", 0))
        busy.listen()
        port = busy.getsockname()[1]

        with pytest.raises(TransportAppError) as exc_info:
            bind_socket("127.0.0.1", port)

    assert exc_info.value.code == "bind_failed"
    assert exc_info.value.details == {"host": "127.0.0.1", "port": port}
