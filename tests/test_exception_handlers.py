"""Tests for the fallback exception handler.

Validates that failures escaping a route return a generic 500 that keeps
the request id but leaks no internals.
"""

import logging
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from jarl.adapters.keeper.sliding_window import SlidingWindowKeeper
from jarl.core.app_factory import create_app


@pytest.fixture
def failing_clock() -> Mock:
    return Mock(side_effect=OSError("secret clock detail"))


@pytest.fixture
def client(failing_clock: Mock) -> TestClient:
    keeper = SlidingWindowKeeper(limit=1, period=1, clock=failing_clock)
    return TestClient(create_app(keeper), raise_server_exceptions=False)


class TestGeneralExceptionHandler:
    """Test the safety net for unexpected errors."""

    def test_clock_failure_returns_generic_500(self, client: TestClient):
        response = client.get("/delay", headers={"X-Request-ID": "req-clock"})

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "internal_server_error"
        assert error["request_id"] == "req-clock"
        assert "secret clock detail" not in response.text

    def test_failure_is_logged_with_request_id(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ):
        with caplog.at_level(logging.ERROR, logger="jarl.core.exception_handlers"):
            client.get("/delay", headers={"X-Request-ID": "req-logged"})

        record = next(r for r in caplog.records if r.getMessage() == "unhandled_exception")
        assert record.error_type == "OSError"
        assert record.request_path == "/delay"
        assert record.request_id == "req-logged"

    def test_health_unaffected_by_broken_clock(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
