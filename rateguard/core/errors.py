"""Package-level exception types.

Handler failures are never wrapped in these; they reach the caller as raised.
These types cover failures that belong to the guard itself (configuration and
persistence).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability."""

    field: str
    actual_value: Any
    backend: str
    path: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for rate guard failures.

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
    """Raised when guard or storage configuration is invalid."""


class StorageAppError(AppError):
    """Raised when the persistence medium cannot be written."""
