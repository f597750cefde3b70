"""Admission wiring shared by the TCP and HTTP transports.

This module wires the delay keeper into the network layer.

Design goals:
- One keeper per process: every transport receives the same instance.
- Minimal coupling: transports call ``admit()`` and write back the string.
- Structured logs for every decision, throttled ones at WARNING.
"""

from __future__ import annotations

import logging

from jarl.adapters.keeper.base import AbstractDelayKeeper
from jarl.adapters.keeper.sliding_window import SlidingWindowKeeper
from jarl.core.config import LimiterSettings

logger = logging.getLogger(__name__)


def build_keeper(limiter_settings: LimiterSettings) -> SlidingWindowKeeper:
    """Create the process-wide keeper from limiter settings.

    Args:
        limiter_settings: Resolved limiter configuration.

    Returns:
        SlidingWindowKeeper: Keeper shared by every connection.

    Raises:
        ConfigurationAppError: If the configured limit or period is invalid.
    """

    keeper = SlidingWindowKeeper(
        limit=limiter_settings.requests,
        period=limiter_settings.period,
    )
    logger.info(
        "keeper.created",
        extra={
            "service": limiter_settings.service,
            "limit": keeper.limit,
            "period_s": keeper.period,
            "base_delay_s": keeper.base_delay,
        },
    )
    return keeper


def format_delay(delay: float) -> str:
    """Render a delay as decimal ASCII with exactly three decimals."""

    return f"{delay:.3f}"


def admit(
    keeper: AbstractDelayKeeper,
    *,
    transport: str,
    peer: str | None = None,
) -> str:
    """Record one attempt and return the delay the caller should observe.

    Args:
        keeper: Shared delay keeper.
        transport: Name of the calling transport ("tcp" or "http").
        peer: Optional peer address, for logs only.

    Returns:
        str: Formatted delay, e.g. ``"0.000"`` or ``"1.234"``.
    """

    decision = keeper.decide()
    fields = {
        "transport": transport,
        "peer": peer,
        "delay_s": round(decision.delay_seconds, 3),
        "backoff_count": decision.backoff_count,
        "window_size": decision.window_size,
    }

    if decision.throttled:
        logger.warning("admission.throttled", extra=fields)
    else:
        logger.info("admission.allowed", extra=fields)

    return format_delay(decision.delay_seconds)
