"""JSON file key-value store.

All records live in a single JSON object on disk. Every set() rewrites the
whole file through a temporary file and os.replace(), so a crash mid-write
leaves the previous contents intact.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path

from rateguard.adapters.storage.base import AbstractKeyValueStore
from rateguard.core.errors import StorageAppError

logger = logging.getLogger(__name__)


class JsonFileKeyValueStore(AbstractKeyValueStore):
    """Store records as string values of one JSON object file.

    The file is read once at construction. A missing file starts empty; an
    unreadable or corrupt file also starts empty (and is logged), and is
    overwritten on the next set().

    Writes are synchronous: every set() does a blocking temp-file write and
    os.replace() on the calling thread, which for the persistent guard is the
    event loop, once or twice per guarded call. No fsync is issued.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.RLock()
        self._records: dict[str, str] = self._read_file()

    @property
    def path(self) -> Path:
        return self._path

    def _read_file(self) -> dict[str, str]:
        if not self._path.is_file():
            return {}

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning(
                "storage.file.unreadable",
                extra={"path": str(self._path), "error": str(exc)},
            )
            return {}

        if not isinstance(raw, dict):
            logger.warning(
                "storage.file.unreadable",
                extra={"path": str(self._path), "error": "top-level value is not an object"},
            )
            return {}

        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _write_file_locked(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._records, fh)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageAppError(
                code="storage_write_failed",
                message=f"Could not write rate guard state to {self._path}",
                details={"path": str(self._path), "backend": "file"},
            ) from exc

    def get(self, name: str) -> str | None:
        with self._lock:
            return self._records.get(name)

    def set(self, name: str, value: str) -> None:
        with self._lock:
            self._records[name] = value
            self._write_file_locked()
            logger.debug(
                "storage.file.write",
                extra={"path": str(self._path), "record": name, "size": len(value)},
            )
