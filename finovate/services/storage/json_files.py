"""
JSON File Storage Implementation

Each slot is one UTF-8 text file, ``<data_dir>/<key>.json``.

TRADEOFFS:
- A single file write is atomic (write to a temp file, then rename)
- Writes across slots are not; see the interface module
- Transient OS errors (locked file, full buffer) are retried a few times
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

import structlog
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finovate.config import get_settings
from finovate.services.storage.interface import (
    LedgerStorageInterface,
    SlotDecodeError,
    StorageError,
    StorageUnavailableError,
)


logger = structlog.get_logger(__name__)


class JsonFileStorage(LedgerStorageInterface):
    """Key-value storage backed by a directory of JSON files."""

    SUFFIX = ".json"

    def __init__(
        self,
        directory: Optional[Path] = None,
        write_attempts: Optional[int] = None,
    ):
        settings = get_settings().storage
        self._directory = Path(directory) if directory is not None else settings.data_dir
        self._write_attempts = write_attempts or settings.write_attempts

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}{self.SUFFIX}"

    def _ensure_directory(self) -> None:
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(
                f"Cannot create data directory {self._directory}: {e}"
            ) from e

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise SlotDecodeError(f"{path} is not UTF-8 text: {e}") from e

    def _write_once(self, path: Path, value: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=".tmp-", suffix=self.SUFFIX)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        self._ensure_directory()

        retrying = Retrying(
            stop=stop_after_attempt(self._write_attempts),
            wait=wait_exponential(multiplier=0.05, max=1),
            retry=retry_if_exception_type(OSError),
        )
        try:
            for attempt in retrying:
                with attempt:
                    self._write_once(path, value)
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.error("slot_write_failed", key=key, path=str(path), error=str(cause))
            raise StorageError(f"Failed to write {path}: {cause}") from cause

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e

    def keys(self) -> list[str]:
        if not self._directory.exists():
            return []
        return sorted(
            path.stem
            for path in self._directory.glob(f"*{self.SUFFIX}")
            if not path.name.startswith(".")
        )
