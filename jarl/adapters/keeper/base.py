"""Delay keeper interfaces.

The transports should depend on this abstraction (not the concrete
implementation) so they can be exercised with a stub keeper in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class DelayDecision:
    """Result of recording a single attempt.

    Attributes:
        delay_seconds: How long the caller should wait before proceeding.
        throttled: Whether the caller was found over the rate.
        backoff_count: Backoff counter right after this attempt.
        window_size: Number of timestamps held right after this attempt.
    """

    delay_seconds: float
    throttled: bool
    backoff_count: float
    window_size: int


class AbstractDelayKeeper(ABC):
    """Interface for delay keepers."""

    @property
    @abstractmethod
    def limit(self) -> int:
        """Maximum number of attempts allowed per period."""
        raise NotImplementedError

    @property
    @abstractmethod
    def period(self) -> float:
        """Rolling window width in seconds."""
        raise NotImplementedError

    @abstractmethod
    def record_attempt(self) -> float:
        """Record an attempt now and return the delay the caller should observe.

        Returns:
            Delay in seconds (0.0 when the caller is within the rate).
        """
        raise NotImplementedError

    @abstractmethod
    def decide(self) -> DelayDecision:
        """Record an attempt now and describe the outcome.

        Returns:
            DelayDecision snapshotting the keeper state for this attempt.
        """
        raise NotImplementedError
