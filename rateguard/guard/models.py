"""Value types shared by the guard variants."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from rateguard.core.errors import ConfigurationAppError


def _is_real(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ThresholdPolicy(str, Enum):
    """When a key's count triggers a delay.

    REACHED delays the call that brings the count to the quota (count >= quota).
    EXCEEDED lets `quota` calls through and delays the next one (count > quota).
    """

    REACHED = "reached"
    EXCEEDED = "exceeded"

    def is_triggered(self, count: int, quota: int) -> bool:
        if self is ThresholdPolicy.REACHED:
            return count >= quota
        return count > quota


@dataclass(frozen=True)
class GuardConfig:
    """Immutable guard configuration.

    Attributes:
        quota: Call count per key at which the threshold policy applies.
        window_minutes: Counting window length; None means windows never expire.
        delay_minutes: Suspension inserted before forwarding a throttled call.
        threshold: Comparison used against the quota.
        reset_on_delay: Reset the key's count to 0 when a delay triggers.
    """

    quota: int
    window_minutes: float | None
    delay_minutes: float
    threshold: ThresholdPolicy = ThresholdPolicy.REACHED
    reset_on_delay: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.quota, bool) or not isinstance(self.quota, int) or self.quota < 1:
            raise ConfigurationAppError(
                code="guard_invalid_quota",
                message="quota must be an integer >= 1",
                details={"field": "quota", "actual_value": self.quota},
            )
        if self.window_minutes is not None and not (
            _is_real(self.window_minutes)
            and math.isfinite(self.window_minutes)
            and self.window_minutes > 0
        ):
            raise ConfigurationAppError(
                code="guard_invalid_window",
                message="window_minutes must be > 0",
                details={"field": "window_minutes", "actual_value": self.window_minutes},
            )
        if not (
            _is_real(self.delay_minutes)
            and math.isfinite(self.delay_minutes)
            and self.delay_minutes >= 0
        ):
            raise ConfigurationAppError(
                code="guard_invalid_delay",
                message="delay_minutes must be >= 0",
                details={"field": "delay_minutes", "actual_value": self.delay_minutes},
            )
        # Accept plain strings ("reached"/"exceeded") from settings.
        try:
            object.__setattr__(self, "threshold", ThresholdPolicy(self.threshold))
        except ValueError as exc:
            raise ConfigurationAppError(
                code="guard_invalid_threshold",
                message="threshold must be 'reached' or 'exceeded'",
                details={"field": "threshold", "actual_value": self.threshold},
            ) from exc

    @property
    def delay_seconds(self) -> float:
        return self.delay_minutes * 60

    @property
    def window_seconds(self) -> float | None:
        if self.window_minutes is None:
            return None
        return self.window_minutes * 60


@dataclass
class KeyState:
    """Counting state for one key.

    Attributes:
        count: Calls recorded in the current window.
        window_start: UNIX time in seconds at which the current window began.
    """

    count: int
    window_start: float
