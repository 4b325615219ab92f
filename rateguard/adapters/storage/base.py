"""Key-value store interface.

Values are opaque strings; callers own the encoding (the guard stores
JSON-encoded mappings).
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractKeyValueStore(ABC):
    """Interface for the persistence medium used by the persistent guard."""

    @abstractmethod
    def get(self, name: str) -> str | None:
        """Return the value stored under name, or None when absent.

        Args:
            name: Record name (e.g., "urlTotalRequests").

        Returns:
            The stored string, or None if nothing was stored.
        """
        raise NotImplementedError

    @abstractmethod
    def set(self, name: str, value: str) -> None:
        """Store value under name, replacing any previous value.

        Args:
            name: Record name.
            value: Encoded record contents.

        Raises:
            StorageAppError: If the medium cannot be written.
        """
        raise NotImplementedError
