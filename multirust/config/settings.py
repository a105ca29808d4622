"""
User settings for multirust.

Settings are read from ``<home>/settings.yaml`` when present, then
environment variables are applied on top:

    # ~/.multirust/settings.yaml
    dist_root: https://static.rust-lang.org/dist
    channels: [stable, beta, nightly]
    lock_timeout: 30

Environment overrides:
    MULTIRUST_DIST_ROOT: replaces ``dist_root``
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from multirust.core.directory import SETTINGS_FILE
from multirust.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_DIST_ROOT = "https://static.rust-lang.org/dist"
DEFAULT_CHANNELS = ("stable", "beta", "nightly")
DEFAULT_LOCK_TIMEOUT = 30.0

DIST_ROOT_ENV_VAR = "MULTIRUST_DIST_ROOT"


@dataclass
class Settings:
    """
    Resolved user settings.

    Attributes:
        dist_root: Base URL of the distribution server
        channels: Channel names refreshed by a bare ``update``
        lock_timeout: Seconds to wait for the metadata lock
    """

    dist_root: str = DEFAULT_DIST_ROOT
    channels: List[str] = field(default_factory=lambda: list(DEFAULT_CHANNELS))
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT

    @classmethod
    def load(cls, home: Path) -> "Settings":
        """
        Load settings for a multirust home directory.

        Args:
            home: multirust home directory

        Returns:
            Settings with file values and environment overrides applied

        Raises:
            ConfigurationError: If settings.yaml is malformed
        """
        settings_file = Path(home) / SETTINGS_FILE
        settings = cls.from_dict(_load_yaml(settings_file), source=settings_file)

        dist_root = os.environ.get(DIST_ROOT_ENV_VAR)
        if dist_root:
            logger.debug(f"Using {DIST_ROOT_ENV_VAR}={dist_root}")
            settings.dist_root = dist_root

        return settings

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Any = "settings") -> "Settings":
        """Build settings from a parsed mapping, validating field types."""
        settings = cls()

        if "dist_root" in data:
            if not isinstance(data["dist_root"], str) or not data["dist_root"]:
                raise ConfigurationError(f"{source}: 'dist_root' must be a URL string")
            settings.dist_root = data["dist_root"]

        if "channels" in data:
            channels = data["channels"]
            if not isinstance(channels, list) or not all(
                isinstance(c, str) for c in channels
            ):
                raise ConfigurationError(
                    f"{source}: 'channels' must be a list of channel names"
                )
            settings.channels = list(channels)

        if "lock_timeout" in data:
            timeout = data["lock_timeout"]
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
                raise ConfigurationError(f"{source}: 'lock_timeout' must be a number")
            settings.lock_timeout = float(timeout)

        unknown = sorted(set(data) - {"dist_root", "channels", "lock_timeout"})
        if unknown:
            logger.warning(f"Ignoring unknown settings in {source}: {', '.join(unknown)}")

        return settings


def _load_yaml(settings_file: Path) -> Dict[str, Any]:
    """Parse settings.yaml, returning an empty mapping when it is absent."""
    if not settings_file.exists():
        logger.debug(f"Settings file not found (optional): {settings_file}")
        return {}

    try:
        with open(settings_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML in {settings_file}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"could not read {settings_file}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{settings_file}: expected a mapping at top level")
    return data


__all__ = [
    "Settings",
    "DEFAULT_DIST_ROOT",
    "DEFAULT_CHANNELS",
    "DEFAULT_LOCK_TIMEOUT",
    "DIST_ROOT_ENV_VAR",
]
