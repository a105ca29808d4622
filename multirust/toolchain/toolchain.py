"""
Installed (or installable) toolchain.

A Toolchain is a name plus an install prefix under ``<home>/toolchains``.
Whether it is installed is never stored; ``exists()`` checks the prefix on
every call.

Example:
    >>> toolchain = Toolchain("nightly", home, notifier)
    >>> if toolchain.exists():
    ...     command = toolchain.create_command("rustc")
    ...     subprocess.run(command.argv(["--version"]), env=command.env)
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from multirust.core.directory import TOOLCHAINS_DIR
from multirust.core.exceptions import (
    BinaryNotFoundError,
    FilesystemError,
    InvalidToolchainNameError,
    ToolchainInstallError,
    ToolchainNotInstalledError,
)
from multirust.core.filesystem import EXE_SUFFIX, safe_rmtree
from multirust.core.interfaces import ToolchainInstaller
from multirust.core.notify import Notifier
from multirust.core.platform import PlatformInfo, detect_platform

logger = logging.getLogger(__name__)

# Binary whose presence marks a toolchain as installed
PRIMARY_COMPILER = "rustc"

DOC_DIR = Path("share") / "doc" / "rust" / "html"


@dataclass
class ToolCommand:
    """A resolved tool binary plus the environment to run it in."""

    name: str
    program: Path
    env: Dict[str, str]

    def argv(self, args: Optional[List[str]] = None) -> List[str]:
        return [str(self.program), *(args or [])]


def validate_toolchain_name(name: str) -> str:
    """
    Check that a toolchain name can be used as a single directory name.

    Raises:
        InvalidToolchainNameError: If the name is empty, '.'/'..' or contains
            a path separator
    """
    separators = {"/", "\\", os.sep}
    if os.altsep:
        separators.add(os.altsep)
    if not name or name in (".", "..") or any(sep in name for sep in separators):
        raise InvalidToolchainNameError(name)
    return name


class Toolchain:
    """
    One named toolchain and its install prefix.

    Attributes:
        name: Toolchain name (e.g., 'stable', 'nightly-2016-01-01')
        home: multirust home directory
        prefix: Install prefix (``<home>/toolchains/<name>``)
    """

    def __init__(
        self,
        name: str,
        home: Path,
        notifier: Notifier,
        platform_info: Optional[PlatformInfo] = None,
    ):
        self.name = validate_toolchain_name(name)
        self.home = Path(home)
        self.prefix = self.home / TOOLCHAINS_DIR / name
        self.notifier = notifier
        self.platform_info = platform_info or detect_platform()

    def __repr__(self) -> str:
        return f"Toolchain({self.name!r}, prefix={str(self.prefix)!r})"

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def binary_file(self, tool: str) -> Path:
        """Path of a tool binary inside the prefix."""
        return self.prefix / "bin" / f"{tool}{EXE_SUFFIX}"

    def lib_dir(self) -> Path:
        """Directory holding the toolchain's shared runtime libraries."""
        if self.platform_info.os == "windows":
            return self.prefix / "bin"
        return self.prefix / "lib"

    def doc_path(self, relative: str) -> Path:
        return self.prefix / DOC_DIR / relative

    def exists(self) -> bool:
        """True iff the primary compiler is present under the prefix."""
        return self.binary_file(PRIMARY_COMPILER).is_file()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def set_ldpath(self, env: Dict[str, str]) -> None:
        """Prepend the toolchain's library directory to the loader search path."""
        var = self.platform_info.library_path_var()
        existing = env.get(var)
        paths = [str(self.lib_dir())]
        if existing:
            paths.append(existing)
        env[var] = os.pathsep.join(paths)

    def create_command(self, tool: str) -> ToolCommand:
        """
        Build the command for a tool in this toolchain.

        Raises:
            ToolchainNotInstalledError: If the toolchain is not installed
            BinaryNotFoundError: If the tool is missing from the toolchain
        """
        if not self.exists():
            raise ToolchainNotInstalledError(self.name)

        binary = self.binary_file(tool)
        if not binary.is_file():
            raise BinaryNotFoundError(self.name, tool)

        env = dict(os.environ)
        self.set_ldpath(env)
        env["MULTIRUST_TOOLCHAIN"] = self.name
        env["MULTIRUST_HOME"] = str(self.home)
        return ToolCommand(tool, binary, env)

    def tool_versions(self) -> List[str]:
        """
        Version lines of the compiler and build tool, for display only.

        Failures are reported inline rather than raised.
        """
        if not self.exists():
            return ["(toolchain not installed)"]

        lines = []
        for tool in (PRIMARY_COMPILER, "cargo"):
            if not self.binary_file(tool).is_file():
                lines.append(f"(no {tool} command in toolchain?)")
                continue

            command = self.create_command(tool)
            try:
                result = subprocess.run(
                    command.argv(["--version"]),
                    env=command.env,
                    capture_output=True,
                    text=True,
                    check=False,
                )
            except OSError as e:
                logger.debug(f"Could not run {tool}: {e}")
                lines.append(f"(failed to run {tool})")
                continue

            if result.returncode != 0:
                lines.append(f"(failed to run {tool})")
            else:
                lines.append(result.stdout.strip())
        return lines

    # ------------------------------------------------------------------
    # Installation
    # ------------------------------------------------------------------

    def install(self, installer: ToolchainInstaller) -> None:
        """
        Install (or reinstall) the toolchain.

        The installer populates a staging prefix which replaces the current
        prefix only once it holds a working toolchain, so a failed update
        leaves the previous installation untouched.

        Raises:
            ToolchainInstallError: If installation fails
        """
        self.notifier.info(f"installing toolchain '{self.name}'")
        self.notifier.detail(f"installing from {installer.describe()}")

        staging = self.prefix.parent / f".{self.name}.partial"
        try:
            safe_rmtree(staging)
            self.prefix.parent.mkdir(parents=True, exist_ok=True)
            installer.install(self.name, staging)

            compiler = staging / "bin" / f"{PRIMARY_COMPILER}{EXE_SUFFIX}"
            if not compiler.is_file():
                raise ToolchainInstallError(
                    f"installation of '{self.name}' did not provide {compiler.name}"
                )

            safe_rmtree(self.prefix, require_prefix=self.prefix.parent)
            os.replace(staging, self.prefix)
        except (OSError, FilesystemError) as e:
            self._discard(staging)
            raise ToolchainInstallError(
                f"could not install toolchain '{self.name}': {e}"
            ) from e
        except ToolchainInstallError:
            self._discard(staging)
            raise

        self.notifier.info(f"toolchain '{self.name}' installed")

    def install_if_missing(self, installer: ToolchainInstaller) -> bool:
        """
        Install only when the toolchain is not already present.

        Returns:
            True if an installation was performed
        """
        if self.exists():
            self.notifier.detail(f"toolchain '{self.name}' already installed")
            return False
        self.install(installer)
        return True

    def remove(self) -> bool:
        """
        Delete the whole prefix.

        No "in use" check is made: overrides naming this toolchain are left
        dangling.

        Returns:
            True if something was removed
        """
        if not (self.prefix.exists() or self.prefix.is_symlink()):
            self.notifier.info(f"no toolchain installed for '{self.name}'")
            return False

        self.notifier.info(f"uninstalling toolchain '{self.name}'")
        safe_rmtree(self.prefix, require_prefix=self.prefix.parent)
        self.notifier.info(f"toolchain '{self.name}' uninstalled")
        return True

    def _discard(self, staging: Path) -> None:
        try:
            safe_rmtree(staging)
        except FilesystemError as e:
            logger.warning(f"Could not clean up {staging}: {e}")


__all__ = [
    "PRIMARY_COMPILER",
    "ToolCommand",
    "Toolchain",
    "validate_toolchain_name",
]
