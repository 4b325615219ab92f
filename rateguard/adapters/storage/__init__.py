"""Key-value store adapters.

The persistent guard depends on the AbstractKeyValueStore interface only, so
the medium (process memory, a JSON file, ...) can be swapped without touching
the counting logic.
"""

from rateguard.adapters.storage.base import AbstractKeyValueStore
from rateguard.adapters.storage.factory import create_key_value_store
from rateguard.adapters.storage.file import JsonFileKeyValueStore
from rateguard.adapters.storage.in_memory import InMemoryKeyValueStore

__all__ = [
    "AbstractKeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "create_key_value_store",
]
