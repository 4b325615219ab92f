"""Per-key request throttling that delays calls instead of rejecting them."""

from rateguard.adapters.storage import (
    AbstractKeyValueStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
)
from rateguard.core.errors import AppError, ConfigurationAppError, StorageAppError
from rateguard.guard import (
    AbstractRateGuard,
    GuardConfig,
    InMemoryRateGuard,
    KeyState,
    PersistentRateGuard,
    ThresholdPolicy,
    create_rate_guard,
)

__all__ = [
    "AbstractKeyValueStore",
    "AbstractRateGuard",
    "AppError",
    "ConfigurationAppError",
    "GuardConfig",
    "InMemoryKeyValueStore",
    "InMemoryRateGuard",
    "JsonFileKeyValueStore",
    "KeyState",
    "PersistentRateGuard",
    "StorageAppError",
    "ThresholdPolicy",
    "create_rate_guard",
]
