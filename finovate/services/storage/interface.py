"""
Abstract Storage Interface

DESIGN DECISION: The ledger is persisted to a plain key-value store,
one text value per slot. This allows us to:
1. Keep each collection independently addressable
2. Use in-memory storage for testing
3. Swap the JSON-file backend for something else without touching the
   ledger logic

The interface is intentionally tiny. There is no transaction across keys:
the four slots are written one after the other and a failure half-way
leaves the earlier slots updated. That window is accepted.
"""

from abc import ABC, abstractmethod
from typing import Optional

from finovate.errors import FinovateError


class LedgerStorageInterface(ABC):
    """
    Abstract interface for key-value slot storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the text stored under a key.

        Returns:
            The stored text, or None if the key was never written

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """
        Store text under a key, replacing any previous value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """All keys currently stored."""
        pass

    def clear(self, prefix: str = "") -> None:
        """Remove every key starting with ``prefix``."""
        for key in self.keys():
            if key.startswith(prefix):
                self.delete(key)


class StorageError(FinovateError):
    """Base exception for storage operations."""
    pass


class SlotDecodeError(StorageError):
    """A stored slot exists but does not contain a valid ledger value."""
    pass


class StorageUnavailableError(StorageError):
    """The storage location cannot be reached or created."""
    pass
