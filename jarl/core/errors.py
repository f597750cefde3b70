"""Application-level exception types.

This module defines domain errors used across the keeper, the transports and
the command line, enabling consistent error handling, logging, and responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability.

    Keeper validation fills ``field``/``min_value``/``actual_value``;
    listener failures fill ``host``/``port``.
    """

    field: str
    min_value: float
    actual_value: float
    host: str
    port: int


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ConfigurationAppError(AppError):
    """Raised when limiter or server configuration is invalid."""


class TransportAppError(AppError):
    """Raised when a listener cannot be started or keeps failing."""
