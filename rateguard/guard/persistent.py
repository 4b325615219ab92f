"""Rate guard with a rolling window and write-through persistence.

State is mirrored into two records of a key-value store:

- ``urlTotalRequests``: JSON object mapping key -> call count in the window.
- ``urlFirstAccessTimes``: JSON object mapping key -> window start, in UNIX
  epoch milliseconds.

Both records are read once at construction and the relevant record is
rewritten in full after every mutation. The two records are written
separately, so a crash between writes can leave them out of step; keys that
appear in only one record are treated as unseen on the next load.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, Awaitable, Callable, Mapping

from rateguard.adapters.storage.base import AbstractKeyValueStore
from rateguard.guard.base import AbstractRateGuard
from rateguard.guard.models import GuardConfig, KeyState, ThresholdPolicy

logger = logging.getLogger(__name__)

TOTAL_REQUESTS_RECORD = "urlTotalRequests"
FIRST_ACCESS_TIMES_RECORD = "urlFirstAccessTimes"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def load_mapping(store: AbstractKeyValueStore, name: str) -> dict[str, float]:
    """Read a JSON-encoded key -> number mapping from the store.

    Absent records load as an empty mapping. Unparsable records and
    non-object payloads also load as empty, with a warning; non-numeric
    entries are dropped.

    Args:
        store: Persistence medium.
        name: Record name.

    Returns:
        The decoded mapping.
    """
    raw = store.get(name)
    if raw is None:
        return {}

    try:
        decoded = json.loads(raw)
    except ValueError:
        logger.warning("rate_guard.storage.corrupt_record", extra={"record": name})
        return {}

    if not isinstance(decoded, dict):
        logger.warning(
            "rate_guard.storage.corrupt_record",
            extra={"record": name, "payload_type": type(decoded).__name__},
        )
        return {}

    return {str(k): v for k, v in decoded.items() if _is_number(v)}


def save_mapping(store: AbstractKeyValueStore, name: str, mapping: Mapping[str, float]) -> None:
    """Write a key -> number mapping to the store as JSON."""
    store.set(name, json.dumps(dict(mapping)))


def states_from_records(
    counts: Mapping[str, float], first_access_ms: Mapping[str, float]
) -> dict[str, KeyState]:
    """Join the two persisted records into per-key state.

    Keys missing from either record, or with a negative count, are skipped.
    """
    states: dict[str, KeyState] = {}
    for key, count in counts.items():
        started_ms = first_access_ms.get(key)
        if started_ms is None or count < 0:
            continue
        states[key] = KeyState(count=int(count), window_start=started_ms / 1000)
    return states


class PersistentRateGuard(AbstractRateGuard):
    """Windowed guard whose counters survive process restarts.

    With the defaults, the first total_allowed_requests calls for a key within
    a window forward immediately; every further call in that window sleeps for
    timeout_minutes first. The counter is not reset by a delay, only by window
    expiry, so all calls past the quota are delayed until the window ends.
    """

    def __init__(
        self,
        total_allowed_requests: int,
        total_requests_window_mins: float,
        timeout_minutes: float,
        *,
        store: AbstractKeyValueStore,
        threshold: ThresholdPolicy | str = ThresholdPolicy.EXCEEDED,
        reset_on_delay: bool = False,
        clock: Callable[[], float] = time.time,
        sleeper: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the guard and load prior state from the store.

        Args:
            total_allowed_requests: Quota per key per window.
            total_requests_window_mins: Window length in minutes.
            timeout_minutes: Delay inserted once the quota is exceeded.
            store: Persistence medium shared across restarts.
            threshold: Quota comparison policy.
            reset_on_delay: Reset the counter when a delay triggers.
            clock: Time source returning UNIX time in seconds.
            sleeper: Coroutine function used for the delay.

        Raises:
            ConfigurationAppError: If any value is out of range.
        """
        config = GuardConfig(
            quota=total_allowed_requests,
            window_minutes=total_requests_window_mins,
            delay_minutes=timeout_minutes,
            threshold=threshold,
            reset_on_delay=reset_on_delay,
        )
        super().__init__(config, clock=clock, sleeper=sleeper)
        self._store = store

        counts = load_mapping(store, TOTAL_REQUESTS_RECORD)
        first_access_ms = load_mapping(store, FIRST_ACCESS_TIMES_RECORD)
        self._states = states_from_records(counts, first_access_ms)

        logger.debug(
            "rate_guard.state_loaded",
            extra={
                "keys": len(self._states),
                "skipped": len(counts.keys() | first_access_ms.keys()) - len(self._states),
            },
        )

    def _counts(self) -> dict[str, int]:
        return {key: state.count for key, state in self._states.items()}

    def _first_access_ms(self) -> dict[str, int]:
        return {key: round(state.window_start * 1000) for key, state in self._states.items()}

    def _on_window_started(self, key: str, state: KeyState) -> None:
        save_mapping(self._store, FIRST_ACCESS_TIMES_RECORD, self._first_access_ms())

    def _on_count_changed(self, key: str, state: KeyState) -> None:
        save_mapping(self._store, TOTAL_REQUESTS_RECORD, self._counts())
