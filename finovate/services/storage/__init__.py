"""
Storage Services Package

Provides the key-value slot interface and its implementations.
The JSON-file backend is the default; the in-memory one is for tests.
"""

from finovate.services.storage.interface import (
    LedgerStorageInterface,
    SlotDecodeError,
    StorageError,
    StorageUnavailableError,
)
from finovate.services.storage.json_files import JsonFileStorage
from finovate.services.storage.memory import InMemoryStorage

__all__ = [
    # Interface
    "LedgerStorageInterface",
    # Exceptions
    "SlotDecodeError",
    "StorageError",
    "StorageUnavailableError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
