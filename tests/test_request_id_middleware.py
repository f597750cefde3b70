from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from jarl.adapters.keeper.sliding_window import SlidingWindowKeeper
from jarl.core.app_factory import create_app
from jarl.core.logging import get_request_id, get_transport


app = create_app(SlidingWindowKeeper(limit=10, period=1))


@app.get("/context")
def read_context() -> dict:
    return {"request_id": get_request_id(), "transport": get_transport()}


client = TestClient(app)


def test_preserves_incoming_request_id_header():
    incoming_id = "test-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing():
    resp = client.get("/delay")

    assert resp.status_code == 200
    generated = resp.headers.get("X-Request-ID")
    assert generated
    assert isinstance(generated, str)

    duration = resp.headers.get("X-Request-Duration-ms")
    assert duration is not None


def test_binds_request_id_and_http_transport_for_route():
    resp = client.get("/context", headers={"X-Request-ID": "req-ctx"})

    assert resp.json() == {"request_id": "req-ctx", "transport": "http"}
    assert get_request_id() is None
    assert get_transport() is None


def test_logs_one_access_line_per_request(caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.INFO, logger="jarl.core.middleware"):
        client.get("/delay")

    records = [r for r in caplog.records if r.getMessage() == "http.request_completed"]
    assert len(records) == 1
    assert records[0].method == "GET"
    assert records[0].path == "/delay"
    assert records[0].status_code == 200
    assert records[0].duration_ms >= 0
