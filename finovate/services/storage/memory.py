"""In-memory storage, used by tests and throwaway sessions."""

from typing import Optional

from finovate.services.storage.interface import LedgerStorageInterface, StorageError


class InMemoryStorage(LedgerStorageInterface):
    """
    Dict-backed slot storage.

    ``fail_writes`` makes every write raise StorageError, which is how
    the save-failure path is exercised.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._slots: dict[str, str] = dict(initial or {})
        self.fail_writes = False

    def read(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def write(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError(f"Write rejected for {key}")
        self._slots[key] = value

    def delete(self, key: str) -> None:
        self._slots.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._slots)
