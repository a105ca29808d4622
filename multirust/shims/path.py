"""
Persistent PATH registration.

Two platform variants of one capability:

- WindowsRegistryPath: prepends the directory to ``HKCU\\Environment\\PATH``
  and broadcasts WM_SETTINGCHANGE so new shells pick it up.
- ProfilePath: appends a marked ``export PATH=...`` block to ``~/.profile``.

Both skip registration when the directory is already present, so running
``multirust install --add-to-path`` twice does not duplicate entries.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from multirust.core.directory import get_user_home
from multirust.core.exceptions import PermissionDeniedError
from multirust.core.filesystem import append_file
from multirust.core.interfaces import PathRegistrar
from multirust.core.notify import Notifier

logger = logging.getLogger(__name__)

PROFILE_MARKER = "# Multirust override:"

HWND_BROADCAST = 0xFFFF
WM_SETTINGCHANGE = 0x001A
SMTO_ABORTIFHUNG = 0x0002
BROADCAST_TIMEOUT_MS = 5000


def profile_block(directory: Path) -> str:
    return f'\n{PROFILE_MARKER}\nexport PATH="{directory}:$PATH"\n'


class ProfilePath(PathRegistrar):
    """Register a directory through the user's login shell profile."""

    def __init__(self, notifier: Notifier, profile: Optional[Path] = None):
        self.notifier = notifier
        self.profile = Path(profile) if profile else get_user_home() / ".profile"

    def register(self, directory: Path) -> None:
        block = profile_block(directory)

        try:
            existing = self.profile.read_text(encoding="utf-8")
        except FileNotFoundError:
            existing = ""
        except OSError as e:
            raise PermissionDeniedError(f"could not read '{self.profile}': {e}") from e

        if block.strip() in existing:
            logger.debug(f"{directory} already registered in {self.profile}")
            self.notifier.info(f"'{self.profile}' already adds '{directory}' to PATH")
            return

        try:
            append_file(self.profile, block)
        except OSError as e:
            raise PermissionDeniedError(f"could not write '{self.profile}': {e}") from e

        self.notifier.say(
            f"'{self.profile}' has been updated. You will need to start a new "
            "login shell for changes to take effect."
        )


class WindowsRegistryPath(PathRegistrar):
    """Register a directory in the per-user PATH stored in the registry."""

    def __init__(self, notifier: Notifier):
        self.notifier = notifier

    def register(self, directory: Path) -> None:
        import winreg

        directory = str(directory)
        try:
            with winreg.OpenKey(
                winreg.HKEY_CURRENT_USER,
                "Environment",
                0,
                winreg.KEY_READ | winreg.KEY_WRITE,
            ) as key:
                try:
                    old_path, value_type = winreg.QueryValueEx(key, "PATH")
                except FileNotFoundError:
                    old_path, value_type = "", winreg.REG_EXPAND_SZ

                entries = [p for p in old_path.split(";") if p]
                if any(os.path.normcase(p) == os.path.normcase(directory) for p in entries):
                    self.notifier.info(f"'{directory}' is already on PATH")
                    return

                new_path = ";".join([directory, *entries])
                winreg.SetValueEx(key, "PATH", 0, value_type, new_path)
        except OSError as e:
            raise PermissionDeniedError(
                f"could not update PATH in the registry: {e}"
            ) from e

        self._broadcast_change()
        self.notifier.say(
            "PATH has been updated. You may need to restart your shell for "
            "changes to take effect."
        )

    def _broadcast_change(self) -> None:
        """Tell running programs that the environment changed (best effort)."""
        import ctypes
        from ctypes import wintypes

        result = wintypes.DWORD()
        sent = ctypes.windll.user32.SendMessageTimeoutW(
            HWND_BROADCAST,
            WM_SETTINGCHANGE,
            0,
            "Environment",
            SMTO_ABORTIFHUNG,
            BROADCAST_TIMEOUT_MS,
            ctypes.byref(result),
        )
        if not sent:
            logger.debug("WM_SETTINGCHANGE broadcast timed out")


def select_path_registrar(notifier: Notifier) -> PathRegistrar:
    """Pick the PATH registrar for the running platform."""
    if os.name == "nt":
        return WindowsRegistryPath(notifier)
    return ProfilePath(notifier)


__all__ = [
    "PROFILE_MARKER",
    "ProfilePath",
    "WindowsRegistryPath",
    "profile_block",
    "select_path_registrar",
]
