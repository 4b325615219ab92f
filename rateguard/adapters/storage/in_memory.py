"""In-memory key-value store.

Notes:
- Per-process only: contents are lost on restart. Two guards sharing one
  instance behave like one guard restarted against durable storage.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import threading

from rateguard.adapters.storage.base import AbstractKeyValueStore


class InMemoryKeyValueStore(AbstractKeyValueStore):
    """Dict-backed store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._lock = threading.RLock()
        self._records: dict[str, str] = dict(initial or {})

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"InMemoryKeyValueStore(records={sorted(self._records)})"

    def get(self, name: str) -> str | None:
        with self._lock:
            return self._records.get(name)

    def set(self, name: str, value: str) -> None:
        with self._lock:
            self._records[name] = value
