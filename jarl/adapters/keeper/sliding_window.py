"""In-memory sliding-window delay keeper.

Notes:
- Per-process only: one instance holds the single global window.
- Thread-safe: a lock guards the whole read-modify-write of each attempt.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable

from jarl.adapters.keeper.base import AbstractDelayKeeper, DelayDecision
from jarl.core.errors import ConfigurationAppError

MIN_BASE_DELAY = 0.01


class SlidingWindowKeeper(AbstractDelayKeeper):
    """Convert a stream of attempts into suggested delays.

    The keeper remembers the timestamps of recent attempts in a FIFO bounded
    to ``limit + 1`` entries. Once the FIFO fills up, the newest timestamp is
    compared against the one ``limit`` attempts back: if they are less than
    ``period`` apart the caller is over the rate and gets told to wait for the
    rest of the period plus an escalating backoff (``base_delay`` times the
    number of consecutive over-rate attempts). Any attempt found within the
    rate resets the backoff to zero.
    """

    def __init__(
        self,
        *,
        limit: int,
        period: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the keeper.

        Args:
            limit: Maximum number of attempts allowed per period.
            period: Rolling window width in seconds.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ConfigurationAppError: If limit or period are not positive.
        """
        if limit < 1:
            raise ConfigurationAppError(
                code="invalid_limit",
                message="limit must be >= 1",
                details={"field": "limit", "min_value": 1, "actual_value": limit},
            )
        if period <= 0:
            raise ConfigurationAppError(
                code="invalid_period",
                message="period must be > 0",
                details={"field": "period", "actual_value": period},
            )

        self._limit = limit
        self._period = float(period)
        self._base_delay = max(self._period / limit, MIN_BASE_DELAY)
        self._clock = clock
        self._lock = threading.Lock()
        self._window: deque[float] = deque(maxlen=limit + 1)
        self._backoff_count = 0.0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"SlidingWindowKeeper(limit={self._limit}, period={self._period}, "
            f"base_delay={self._base_delay}, backoff_count={self._backoff_count}, "
            f"window_size={len(self._window)})"
        )

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def period(self) -> float:
        return self._period

    @property
    def base_delay(self) -> float:
        return self._base_delay

    @property
    def backoff_count(self) -> float:
        with self._lock:
            return self._backoff_count

    @property
    def window_size(self) -> int:
        with self._lock:
            return len(self._window)

    def _record_locked(self) -> float:
        """Record one attempt. Caller must hold the lock."""
        now = self._clock()
        self._window.append(now)

        # Comparison against the attempt exactly `limit` calls back; the
        # popped entry shrinks the FIFO back to `limit` for the next call.
        if len(self._window) == self._limit + 1:
            last = self._window.popleft()
            diff = now - last
            if diff < self._period:
                self._backoff_count += 1
                adjustment = self._period - diff
                return self._base_delay * self._backoff_count + adjustment

        self._backoff_count = 0.0
        return 0.0

    def record_attempt(self) -> float:
        """Record an attempt now and return the delay the caller should observe.

        Returns:
            Delay in seconds, 0.0 when the caller is within the rate.
        """
        with self._lock:
            return self._record_locked()

    def decide(self) -> DelayDecision:
        """Record an attempt and snapshot the resulting keeper state.

        Returns:
            DelayDecision with the delay and the counters observed under the
            same lock acquisition.
        """
        with self._lock:
            delay = self._record_locked()
            return DelayDecision(
                delay_seconds=delay,
                throttled=delay > 0,
                backoff_count=self._backoff_count,
                window_size=len(self._window),
            )
