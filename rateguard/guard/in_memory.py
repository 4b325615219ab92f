"""In-process rate guard.

Notes:
- Per-process only: counters are lost on restart and each process throttles
  independently.
- By default there is no counting window; the counter is reset only when a
  delay triggers.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable

from rateguard.guard.base import AbstractRateGuard
from rateguard.guard.models import GuardConfig, ThresholdPolicy


class InMemoryRateGuard(AbstractRateGuard):
    """Delay every call that brings a key's count to the quota.

    With the defaults, calls 1..quota-1 for a key forward immediately, the
    quota-th call resets the counter to 0 and sleeps for timeout_minutes, and
    counting starts over with the next call.

    Example:
        >>> guard = InMemoryRateGuard(total_requests=5, timeout_minutes=0.5)
        >>> await guard.guard("https://api.example.com/items", fetch)
    """

    def __init__(
        self,
        total_requests: int,
        timeout_minutes: float,
        *,
        window_minutes: float | None = None,
        threshold: ThresholdPolicy | str = ThresholdPolicy.REACHED,
        reset_on_delay: bool = True,
        clock: Callable[[], float] = time.time,
        sleeper: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the in-memory guard.

        Args:
            total_requests: Quota per key.
            timeout_minutes: Delay inserted once the quota is hit.
            window_minutes: Optional counting window; None disables expiry.
            threshold: Quota comparison policy.
            reset_on_delay: Reset the counter when a delay triggers.
            clock: Time source returning UNIX time in seconds.
            sleeper: Coroutine function used for the delay.

        Raises:
            ConfigurationAppError: If any value is out of range.
        """
        config = GuardConfig(
            quota=total_requests,
            window_minutes=window_minutes,
            delay_minutes=timeout_minutes,
            threshold=threshold,
            reset_on_delay=reset_on_delay,
        )
        super().__init__(config, clock=clock, sleeper=sleeper)
