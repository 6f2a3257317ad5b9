"""Storage backends for Rit repositories.

A backend maps string keys (``HEAD``, ``index``, ``objects/<hash>``) to whole
byte records. The core only talks to this interface, so it can run against
the on-disk ``.rit/`` directory or against an in-memory dictionary in tests.
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict

from rit.constants import OBJECTS_DIR
from rit.errors import IOFailureError, NotFoundError

logger = logging.getLogger(__name__)


class StorageBackend(ABC):
    """Abstract key/value record storage used by the Rit core.

    Every write replaces the whole record; there are no partial or
    append-in-place writes.
    """

    @abstractmethod
    def read(self, key: str) -> bytes:
        """Read the record stored under ``key``.

        Raises:
            NotFoundError: If nothing is stored under ``key``
            IOFailureError: If the underlying storage fails
        """

    @abstractmethod
    def write(self, key: str, data: bytes) -> None:
        """Atomically replace the record stored under ``key``.

        Raises:
            IOFailureError: If the underlying storage fails
        """

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check whether a record is stored under ``key``."""

    @abstractmethod
    def ensure_layout(self) -> None:
        """Create whatever containers the backend needs before first use."""


class FileSystemBackend(StorageBackend):
    """Backend storing each record as a file below the ``.rit`` directory.

    Storage layout:
        .rit/HEAD
        .rit/index
        .rit/objects/<hash>

    Attributes:
        rit_dir: Path to the ``.rit`` directory
    """

    def __init__(self, rit_dir: Path) -> None:
        self.rit_dir = Path(rit_dir)

    def read(self, key: str) -> bytes:
        path = self._get_path(key)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError as e:
            raise NotFoundError(f"Not found: {key}") from e
        except OSError as e:
            raise IOFailureError(f"Failed to read {path}: {e}", key=key) from e

    def write(self, key: str, data: bytes) -> None:
        """Write a record via tmp file + rename so readers never see a torn write."""
        path = self._get_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_fd, tmp_path = tempfile.mkstemp(
                dir=path.parent,
                prefix=".tmp_",
            )
        except OSError as e:
            raise IOFailureError(f"Failed to write {path}: {e}", key=key) from e

        try:
            with os.fdopen(tmp_fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise IOFailureError(f"Failed to write {path}: {e}", key=key) from e

        logger.debug("Wrote %d bytes to %s", len(data), path)

    def exists(self, key: str) -> bool:
        return self._get_path(key).is_file()

    def ensure_layout(self) -> None:
        try:
            (self.rit_dir / OBJECTS_DIR).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IOFailureError(f"Failed to create {self.rit_dir}: {e}") from e

    def _get_path(self, key: str) -> Path:
        """Map a storage key to a path, refusing keys that escape ``rit_dir``."""
        parts = key.split("/")
        if not key or any(part in ("", ".", "..") for part in parts):
            raise NotFoundError(f"Invalid storage key: {key!r}")
        return self.rit_dir.joinpath(*parts)


class MemoryBackend(StorageBackend):
    """Dictionary-backed backend for tests and throwaway repositories."""

    def __init__(self) -> None:
        self.records: Dict[str, bytes] = {}

    def read(self, key: str) -> bytes:
        try:
            return self.records[key]
        except KeyError:
            raise NotFoundError(f"Not found: {key}") from None

    def write(self, key: str, data: bytes) -> None:
        self.records[key] = bytes(data)

    def exists(self, key: str) -> bool:
        return key in self.records

    def ensure_layout(self) -> None:
        pass
