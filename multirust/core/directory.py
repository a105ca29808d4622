"""
Directory structure management for multirust.

Directory Structure:
    Home (~/.multirust/ or %USERPROFILE%\\.multirust\\, or $MULTIRUST_HOME):
        - bin/            : multirust binary and generated proxy scripts
        - toolchains/     : One install prefix per named toolchain
        - lock/           : Advisory lock files guarding metadata.json
        - metadata.json   : Overrides, default toolchain, metadata version
        - settings.yaml   : Optional user settings
"""

import os
from pathlib import Path

from multirust.core.exceptions import ConfigurationError, WorkingDirectoryError

HOME_ENV_VAR = "MULTIRUST_HOME"

BIN_DIR = "bin"
TOOLCHAINS_DIR = "toolchains"
LOCK_DIR = "lock"
METADATA_FILE = "metadata.json"
SETTINGS_FILE = "settings.yaml"


def get_user_home() -> Path:
    """
    Get the current user's home directory.

    Raises:
        ConfigurationError: If the home directory cannot be determined
    """
    if os.name == "nt":
        user_profile = os.environ.get("USERPROFILE")
        if user_profile:
            return Path(user_profile)
    try:
        return Path.home()
    except RuntimeError as e:
        raise ConfigurationError(f"could not locate home directory: {e}") from e


def get_multirust_home() -> Path:
    """
    Get the multirust home directory.

    Returns:
        Path: $MULTIRUST_HOME if set, otherwise ~/.multirust

    Example:
        >>> get_multirust_home()
        PosixPath('/home/user/.multirust')
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override)
    return get_user_home() / ".multirust"


def current_dir() -> Path:
    """
    Get the current working directory.

    Raises:
        WorkingDirectoryError: If the working directory was removed or is
            otherwise inaccessible
    """
    try:
        return Path(os.getcwd())
    except OSError as e:
        raise WorkingDirectoryError(f"could not locate working directory: {e}") from e


def check_removable_home(home: Path) -> None:
    """
    Refuse to wipe a multirust home that would take other user data with it.

    Raises:
        ConfigurationError: If home is a filesystem root, the user's home
            directory or one of its ancestors
    """
    resolved = Path(home).resolve()
    if resolved == Path(resolved.anchor):
        raise ConfigurationError(
            f"refusing to delete '{home}': it is a filesystem root. check {HOME_ENV_VAR}"
        )

    user_home = get_user_home().resolve()
    if resolved == user_home or resolved in user_home.parents:
        raise ConfigurationError(
            f"refusing to delete '{home}': it contains the user home directory. "
            f"check {HOME_ENV_VAR}"
        )


def normalize_directory(directory) -> str:
    """
    Normalize a directory into the exact key used for overrides.

    The path is made absolute and '..' segments are collapsed, but symlinks
    are NOT resolved: an override applies to the directory as the user
    entered it.
    """
    return os.path.abspath(os.fspath(directory))


__all__ = [
    "HOME_ENV_VAR",
    "BIN_DIR",
    "TOOLCHAINS_DIR",
    "LOCK_DIR",
    "METADATA_FILE",
    "SETTINGS_FILE",
    "get_user_home",
    "get_multirust_home",
    "check_removable_home",
    "current_dir",
    "normalize_directory",
]
