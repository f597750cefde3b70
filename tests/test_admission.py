"""Tests for admission wiring shared by the transports."""

import logging
from unittest.mock import Mock

import pytest

from jarl.adapters.keeper.base import AbstractDelayKeeper, DelayDecision
from jarl.core.admission import admit, build_keeper, format_delay
from jarl.core.config import LimiterSettings
from jarl.core.errors import ConfigurationAppError


@pytest.mark.parametrize(
    ("delay", "expected"),
    [
        (0.0, "0.000"),
        (2.0, "2.000"),
        (12.3456, "12.346"),
        (5.05, "5.050"),
        (0.1, "0.100"),
    ],
)
def test_format_delay_uses_three_decimals(delay: float, expected: str) -> None:
    assert format_delay(delay) == expected


def test_build_keeper_from_settings() -> None:
    keeper = build_keeper(LimiterSettings(service="billing", requests=5, period=2))

    assert keeper.limit == 5
    assert keeper.period == 2.0
    assert keeper.base_delay == pytest.approx(0.4)


def test_build_keeper_rejects_invalid_limit() -> None:
    limiter_settings = LimiterSettings.model_construct(service="x", requests=0, period=1)

    with pytest.raises(ConfigurationAppError):
        build_keeper(limiter_settings)


def _stub_keeper(decision: DelayDecision) -> Mock:
    keeper = Mock(spec=AbstractDelayKeeper)
    keeper.decide.return_value = decision
    return keeper


def test_admit_allowed_logs_info(caplog: pytest.LogCaptureFixture) -> None:
    keeper = _stub_keeper(
        DelayDecision(delay_seconds=0.0, throttled=False, backoff_count=0.0, window_size=1)
    )

    with caplog.at_level(logging.INFO, logger="jarl.core.admission"):
        response = admit(keeper, transport="tcp", peer="10.0.0.1:5000")

    assert response == "0.000"
    keeper.decide.assert_called_once_with()
    record = next(r for r in caplog.records if r.getMessage() == "admission.allowed")
    assert record.levelno == logging.INFO
    assert record.transport == "tcp"
    assert record.peer == "10.0.0.1:5000"


def test_admit_throttled_logs_warning(caplog: pytest.LogCaptureFixture) -> None:
    keeper = _stub_keeper(
        DelayDecision(delay_seconds=3.25, throttled=True, backoff_count=2.0, window_size=4)
    )

    with caplog.at_level(logging.INFO, logger="jarl.core.admission"):
        response = admit(keeper, transport="http")

    assert response == "3.250"
    record = next(r for r in caplog.records if r.getMessage() == "admission.throttled")
    assert record.levelno == logging.WARNING
    assert record.delay_s == 3.25
    assert record.backoff_count == 2.0
    assert record.window_size == 4
