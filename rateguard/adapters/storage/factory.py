"""Factory for creating key-value store instances."""

from __future__ import annotations

from rateguard.adapters.storage.base import AbstractKeyValueStore
from rateguard.adapters.storage.file import JsonFileKeyValueStore
from rateguard.adapters.storage.in_memory import InMemoryKeyValueStore
from rateguard.core.config import StorageSettings, settings
from rateguard.core.errors import ConfigurationAppError


def create_key_value_store(storage_settings: StorageSettings | None = None) -> AbstractKeyValueStore:
    """Instantiate the store selected by configuration.

    Args:
        storage_settings: Optional settings; defaults to settings.storage.

    Returns:
        AbstractKeyValueStore: Configured store instance.

    Raises:
        ConfigurationAppError: If the backend is unknown.
    """
    cfg = storage_settings or settings.storage
    backend = cfg.backend.lower()

    if backend == "memory":
        return InMemoryKeyValueStore()

    if backend == "file":
        return JsonFileKeyValueStore(cfg.file_path)

    raise ConfigurationAppError(
        code="storage_unknown_backend",
        message=f"Unknown storage backend: '{backend}'. Supported backends: memory, file",
        details={"backend": backend},
    )
