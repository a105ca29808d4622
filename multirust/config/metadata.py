"""
Persisted metadata for multirust.

The metadata file holds the override mapping, the default toolchain pointer
and the metadata version:

    {
      "version": "2",
      "default_toolchain": "stable",
      "overrides": {
        "/home/alice/proj": {"toolchain": "nightly", "reason": "..."}
      }
    }

Every read-modify-write cycle runs under an advisory file lock so that
concurrent multirust invocations serialize instead of losing updates, and
writes are atomic (temp file + rename).
"""

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from filelock import FileLock, Timeout

from multirust.core.exceptions import ConfigurationError, StoreLockTimeoutError
from multirust.core.filesystem import atomic_write

logger = logging.getLogger(__name__)

METADATA_VERSION = "2"


def empty_metadata() -> Dict[str, Any]:
    """Metadata document for a fresh home directory."""
    return {
        "version": METADATA_VERSION,
        "default_toolchain": None,
        "overrides": {},
    }


class MetadataFile:
    """
    Locked, atomically written JSON metadata document.

    Example:
        >>> metadata = MetadataFile(home / "metadata.json", home / "lock" / "metadata.lock")
        >>> with metadata.transaction() as data:
        ...     data["default_toolchain"] = "stable"
    """

    def __init__(self, path: Path, lock_path: Path, lock_timeout: float = 30):
        self.path = Path(path)
        self.lock_path = Path(lock_path)
        self.lock_timeout = lock_timeout

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> Dict[str, Any]:
        """
        Read the current document without taking the lock.

        Writes are atomic renames, so a reader always sees a complete file.
        A missing file yields an empty document.

        Raises:
            ConfigurationError: If the file is not valid metadata
        """
        if not self.path.exists():
            return empty_metadata()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"metadata file {self.path} is corrupt: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"could not read {self.path}: {e}") from e

        if not isinstance(data, dict) or "version" not in data:
            raise ConfigurationError(f"metadata file {self.path} has no version")

        data.setdefault("default_toolchain", None)
        data.setdefault("overrides", {})
        return data

    def version(self) -> Optional[str]:
        """Recorded metadata version, or None for a fresh home."""
        if not self.path.exists():
            return None
        return str(self.read()["version"])

    def write(self, data: Dict[str, Any]) -> None:
        """Write the document atomically (caller must hold the lock)."""
        atomic_write(self.path, json.dumps(data, indent=2, sort_keys=True) + "\n")
        logger.debug(f"Saved metadata with {len(data['overrides'])} overrides")

    @contextmanager
    def lock(self) -> Iterator[None]:
        """
        Hold the metadata lock.

        Raises:
            StoreLockTimeoutError: If the lock cannot be acquired within timeout
        """
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        file_lock = FileLock(self.lock_path, timeout=self.lock_timeout)

        try:
            with file_lock:
                logger.debug("Acquired metadata lock")
                yield
            logger.debug("Released metadata lock")
        except Timeout as e:
            raise StoreLockTimeoutError(
                f"could not acquire metadata lock within {self.lock_timeout} seconds. "
                "Another multirust process may be running."
            ) from e

    @contextmanager
    def transaction(self) -> Iterator[Dict[str, Any]]:
        """
        Read-modify-write the document under the lock.

        The yielded dict is written back when the block exits without error.
        """
        with self.lock():
            data = self.read()
            yield data
            self.write(data)


__all__ = ["METADATA_VERSION", "MetadataFile", "empty_metadata"]
