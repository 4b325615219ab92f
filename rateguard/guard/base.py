"""Rate guard interface and the counting algorithm shared by all variants.

A guard never rejects a call. It counts calls per key, and once a key's count
trips the threshold policy it sleeps for the configured delay before
forwarding the call to the handler.

Concurrency:
    Counting happens synchronously before the first await, so it is race-free
    within one event loop. There is no per-key lock: overlapping calls for the
    same key are counted in scheduling order, so two in-flight calls can both
    pass below the threshold or both be delayed.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
import uuid
from abc import ABC
from dataclasses import replace
from typing import Any, Awaitable, Callable, TypeVar

from rateguard.core.logging import hash_key, reset_call_id, set_call_id
from rateguard.guard.models import GuardConfig, KeyState

logger = logging.getLogger(__name__)

T = TypeVar("T")

RequestHandler = Callable[..., Awaitable[T]]


class _NoParams:
    def __repr__(self) -> str:  # pragma: no cover - representation only
        return "NO_PARAMS"


NO_PARAMS: Any = _NoParams()


def _to_millis(now: float) -> float:
    """Truncate a timestamp to whole milliseconds, the resolution window starts are persisted at."""
    return math.floor(now * 1000) / 1000


class AbstractRateGuard(ABC):
    """Base class implementing count, window reset, delay and forward.

    Subclasses customise persistence through _on_window_started() and
    _on_count_changed(), which run synchronously right after each mutation.
    """

    def __init__(
        self,
        config: GuardConfig,
        *,
        clock: Callable[[], float] = time.time,
        sleeper: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the guard.

        Args:
            config: Validated guard configuration.
            clock: Time source returning UNIX time in seconds.
            sleeper: Coroutine function used for the delay.
        """
        self._config = config
        self._clock = clock
        self._sleep = sleeper
        self._states: dict[str, KeyState] = {}
        self._calls = 0
        self._delays = 0

    @property
    def config(self) -> GuardConfig:
        return self._config

    def snapshot(self, key: str) -> KeyState | None:
        """Return a copy of the state tracked for key, or None if unseen."""
        state = self._states.get(key)
        return replace(state) if state is not None else None

    def stats(self) -> dict[str, int]:
        """Return lightweight counters without exposing keys."""
        return {
            "keys": len(self._states),
            "calls": self._calls,
            "delays": self._delays,
        }

    def _on_window_started(self, key: str, state: KeyState) -> None:
        """Called after a key's window is (re)started."""

    def _on_count_changed(self, key: str, state: KeyState) -> None:
        """Called after a key's count changes."""

    def _window_expired(self, state: KeyState, now: float) -> bool:
        window_seconds = self._config.window_seconds
        if window_seconds is None:
            return False
        return (now - state.window_start) > window_seconds

    def _record_call(self, key: str, now: float) -> bool:
        """Count one call for key and decide whether it must be delayed.

        Returns:
            True when the caller must sleep before forwarding.
        """
        state = self._states.get(key)
        if state is None:
            state = KeyState(count=0, window_start=_to_millis(now))
            self._states[key] = state
            self._on_window_started(key, state)
        elif self._window_expired(state, now):
            logger.debug(
                "rate_guard.window_reset",
                extra={
                    "key_hash": hash_key(key),
                    "previous_count": state.count,
                    "window_age_s": round(now - state.window_start, 3),
                },
            )
            state.count = 0
            state.window_start = _to_millis(now)
            self._on_window_started(key, state)

        state.count += 1
        self._on_count_changed(key, state)

        if not self._config.threshold.is_triggered(state.count, self._config.quota):
            return False

        logger.info(
            "rate_guard.delay",
            extra={
                "key_hash": hash_key(key),
                "count": state.count,
                "quota": self._config.quota,
                "threshold": self._config.threshold.value,
                "delay_s": self._config.delay_seconds,
            },
        )
        # Reset before sleeping: the delayed call does not count toward the next window.
        if self._config.reset_on_delay:
            state.count = 0
            self._on_count_changed(key, state)
        return True

    async def guard(
        self,
        key: str,
        handler: RequestHandler[T],
        params: Any = NO_PARAMS,
    ) -> T:
        """Count the call, delay it if throttled, then forward it.

        Args:
            key: Throttling identifier (e.g., a target URL).
            handler: Async callable invoked as handler(key), or
                handler(key, params) when params is given.
            params: Optional value passed through to the handler untouched.

        Returns:
            Whatever the handler returns.

        Raises:
            Exception: Anything the handler raises propagates unchanged.
        """
        self._calls += 1
        if self._record_call(key, self._clock()):
            self._delays += 1
            await self._sleep(self._config.delay_seconds)

        token = set_call_id(uuid.uuid4().hex)
        try:
            logger.debug("rate_guard.forward", extra={"key_hash": hash_key(key)})
            if params is NO_PARAMS:
                return await handler(key)
            return await handler(key, params)
        finally:
            reset_call_id(token)
