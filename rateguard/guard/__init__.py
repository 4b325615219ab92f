"""Rate guards: per-key counting that delays, never rejects."""

from rateguard.guard.base import AbstractRateGuard, RequestHandler
from rateguard.guard.factory import create_rate_guard
from rateguard.guard.in_memory import InMemoryRateGuard
from rateguard.guard.models import GuardConfig, KeyState, ThresholdPolicy
from rateguard.guard.persistent import (
    FIRST_ACCESS_TIMES_RECORD,
    TOTAL_REQUESTS_RECORD,
    PersistentRateGuard,
    load_mapping,
    save_mapping,
)

__all__ = [
    "AbstractRateGuard",
    "FIRST_ACCESS_TIMES_RECORD",
    "GuardConfig",
    "InMemoryRateGuard",
    "KeyState",
    "PersistentRateGuard",
    "RequestHandler",
    "TOTAL_REQUESTS_RECORD",
    "ThresholdPolicy",
    "create_rate_guard",
    "load_mapping",
    "save_mapping",
]
