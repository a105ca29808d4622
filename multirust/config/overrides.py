"""
Directory override store.

Maps an exact directory to a toolchain name plus a human-readable reason.
Lookup is exact: an override for ``/home/alice/proj`` does not apply to
``/home/alice/proj/src``. Overrides reference toolchains by name only, so
removing a toolchain leaves any override naming it dangling until it is
resolved.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from multirust.config.metadata import MetadataFile
from multirust.core.directory import normalize_directory
from multirust.core.notify import Notifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class Override:
    """A directory-scoped toolchain pin. Orders by directory."""

    directory: str
    toolchain: str
    reason: str

    def __str__(self) -> str:
        return f"{self.directory}\t{self.toolchain}"


def default_reason(directory: str) -> str:
    return f"directory override for '{directory}'"


class OverrideStore:
    """
    Persisted directory -> toolchain mapping.

    Attributes:
        metadata: Backing metadata file
        notifier: Sink for user-facing notifications
    """

    def __init__(self, metadata: MetadataFile, notifier: Notifier):
        self.metadata = metadata
        self.notifier = notifier

    def add(
        self,
        directory: Union[str, Path],
        toolchain: str,
        reason: Optional[str] = None,
    ) -> Override:
        """
        Pin a toolchain for a directory, replacing any previous pin.

        Args:
            directory: Directory to pin (made absolute, symlinks kept)
            toolchain: Toolchain name; not required to be installed
            reason: Free-text reason (default: "directory override for '<dir>'")

        Returns:
            The stored override
        """
        key = normalize_directory(directory)
        override = Override(key, toolchain, reason or default_reason(key))

        with self.metadata.transaction() as data:
            data["overrides"][key] = {
                "toolchain": override.toolchain,
                "reason": override.reason,
            }

        self.notifier.info(f"override toolchain for '{key}' set to '{toolchain}'")
        return override

    def find(self, directory: Union[str, Path]) -> Optional[Override]:
        """Return the override registered for exactly this directory."""
        key = normalize_directory(directory)
        entry = self.metadata.read()["overrides"].get(key)
        if entry is None:
            logger.debug(f"No override for {key}")
            return None
        return _override_from_entry(key, entry)

    def remove(self, directory: Union[str, Path]) -> bool:
        """
        Remove the override for a directory.

        Idempotent: removing a missing override is not an error.

        Returns:
            True if an override was removed
        """
        key = normalize_directory(directory)

        with self.metadata.transaction() as data:
            removed = data["overrides"].pop(key, None) is not None

        if removed:
            self.notifier.info(f"override removed for '{key}'")
        else:
            self.notifier.info(f"no override for directory '{key}'")
        return removed

    def list(self) -> List[Override]:
        """All overrides, sorted lexicographically by directory."""
        overrides = self.metadata.read()["overrides"]
        return sorted(
            _override_from_entry(key, entry) for key, entry in overrides.items()
        )


def _override_from_entry(directory: str, entry) -> Override:
    return Override(
        directory,
        entry["toolchain"],
        entry.get("reason") or default_reason(directory),
    )


__all__ = ["Override", "OverrideStore", "default_reason"]
