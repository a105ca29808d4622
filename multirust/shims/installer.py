"""
Self-installation of the manager binary and its proxy shims.

Installing places the running multirust executable in ``<home>/bin`` and
writes one forwarding script per proxied tool (a POSIX ``sh`` script and a
Windows ``.bat``), each of which re-enters ``multirust proxy <tool>``.
Every step is idempotent, so installing again regenerates the same set of
files.
"""

import logging
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Dict, Optional

from jinja2 import Environment, FileSystemLoader, TemplateError

from multirust.config.store import ConfigStore
from multirust.core.directory import check_removable_home
from multirust.core.exceptions import FilesystemError
from multirust.core.filesystem import (
    EXE_SUFFIX,
    IS_WINDOWS,
    copy_file,
    ensure_directory,
    make_executable,
    move_file,
    safe_rmtree,
    write_file,
)
from multirust.core.interfaces import PathRegistrar
from multirust.core.notify import Notifier
from multirust.core.process import command_succeeds, shell_command
from multirust.shims.path import select_path_registrar

logger = logging.getLogger(__name__)

MANAGER_NAME = "multirust"

# Tools proxied through the manager
TOOLS = ("rustc", "rustdoc", "cargo", "rust-lldb", "rust-gdb")

TEMPLATE_DIR = Path(__file__).parent / "templates"


def manager_binary(bin_dir: Path) -> Path:
    return bin_dir / f"{MANAGER_NAME}{EXE_SUFFIX}"


def launcher_file(bin_dir: Path) -> Path:
    """Where the ``python -m multirust`` launcher script is written."""
    return bin_dir / (f"{MANAGER_NAME}.bat" if IS_WINDOWS else MANAGER_NAME)


def running_as_module() -> bool:
    """True when started as ``python -m multirust`` rather than a launcher."""
    return Path(sys.argv[0]).suffix.lower() == ".py"


def current_executable() -> Path:
    """
    Locate the running multirust executable.

    Under ``python -m multirust`` the module source is not an executable,
    so only a ``multirust`` found on the PATH qualifies.

    Raises:
        FilesystemError: If it cannot be found on disk
    """
    module = running_as_module()
    argv0 = Path(sys.argv[0])
    if argv0.is_file() and not module:
        return argv0.absolute()

    found = (None if module else shutil.which(sys.argv[0])) or shutil.which(MANAGER_NAME)
    if found:
        return Path(found)
    raise FilesystemError("could not locate the running multirust executable")


def proxies_active() -> bool:
    """True if ``rustc`` on the PATH is a working multirust proxy."""
    return command_succeeds(shell_command("rustc --multirust"))


def self_installed(cfg: ConfigStore) -> bool:
    """True if the manager binary or its launcher is in the managed bin directory."""
    return manager_binary(cfg.bin_dir).is_file() or launcher_file(cfg.bin_dir).is_file()


class ShimInstaller:
    """
    Install or remove multirust for the current user.

    Attributes:
        cfg: Configuration store (provides the home and bin directories)
        notifier: Sink for user-facing notifications
        path_registrar: Persists the bin directory on the PATH
    """

    def __init__(
        self,
        cfg: ConfigStore,
        notifier: Notifier,
        path_registrar: Optional[PathRegistrar] = None,
    ):
        self.cfg = cfg
        self.notifier = notifier
        self.path_registrar = path_registrar or select_path_registrar(notifier)
        self._jinja_env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    @property
    def bin_dir(self) -> Path:
        return self.cfg.bin_dir

    def install(
        self,
        should_move: bool = False,
        add_to_path: bool = False,
        source: Optional[Path] = None,
    ) -> Path:
        """
        Install the manager binary and regenerate all shims.

        Args:
            should_move: Move the source binary instead of copying it
            add_to_path: Register the bin directory on the user's PATH
            source: Binary to install. By default the running executable;
                under ``python -m multirust`` a launcher script instead

        Returns:
            Path of the installed manager binary

        Raises:
            FilesystemError: If a file operation fails
            PermissionDeniedError: If PATH registration fails
        """
        ensure_directory(self.bin_dir, "bin directory")

        if source is None and running_as_module():
            destination = self.write_launcher()
        else:
            source = Path(source) if source is not None else current_executable()
            destination = manager_binary(self.bin_dir)
            logger.debug(f"Placing {source} at {destination}")

            if should_move:
                move_file(source, destination)
            else:
                copy_file(source, destination)
            make_executable(destination)

        for tool in TOOLS:
            self.write_shims(tool)

        if add_to_path:
            self.path_registrar.register(self.bin_dir)

        self.notifier.info("Installed")
        return destination

    def write_shims(self, tool: str) -> Dict[str, Path]:
        """Write the POSIX and batch forwarding scripts for one tool."""
        sh_path = self.bin_dir / tool
        write_file(sh_path, self._render("proxy.sh.j2", tool=tool), newline="\n")
        make_executable(sh_path)

        bat_path = self.bin_dir / f"{tool}.bat"
        write_file(bat_path, self._render("proxy.bat.j2", tool=tool), newline="\r\n")

        return {"sh": sh_path, "bat": bat_path}

    def write_launcher(self) -> Path:
        """
        Write a script that starts this interpreter with ``-m multirust``.

        Stands in for the manager binary when multirust runs from an
        installed package instead of a standalone executable.
        """
        python = sys.executable
        if not python:
            raise FilesystemError("could not locate the Python interpreter running multirust")

        destination = launcher_file(self.bin_dir)
        logger.debug(f"Writing launcher for {python} at {destination}")
        if IS_WINDOWS:
            content = self._render("launcher.bat.j2", python=python)
            write_file(destination, content, newline="\r\n")
        else:
            write_file(destination, self._render("launcher.sh.j2", python=python), newline="\n")
            make_executable(destination)
        return destination

    def _render(self, template_name: str, **context) -> str:
        try:
            template = self._jinja_env.get_template(template_name)
            return template.render(**context)
        except TemplateError as e:
            raise FilesystemError(
                f"could not render shim template {template_name}: {e}"
            ) from e

    def uninstall(self) -> None:
        """
        Remove the whole multirust home directory.

        On Windows the running binary lives inside that directory, so removal
        is handed to a detached shell that waits briefly first.
        """
        self.notifier.warn(
            f"This will not attempt to remove the '{self.bin_dir}' directory "
            "from your PATH"
        )
        check_removable_home(self.cfg.home)

        if IS_WINDOWS:
            self.notifier.say("Uninstalling...")
            cmdline = (
                "echo Uninstalling... & ping -n 4 127.0.0.1>nul & "
                f'rd /S /Q "{self.cfg.home}" & echo Uninstalled'
            )
            try:
                subprocess.Popen(
                    ["cmd", "/C", "start", "cmd", "/C", cmdline],
                    creationflags=subprocess.CREATE_NEW_PROCESS_GROUP,
                )
            except OSError as e:
                raise FilesystemError(f"could not start uninstaller: {e}") from e
            return

        self.notifier.say("Uninstalling...")
        safe_rmtree(self.cfg.home)
        self.notifier.info("Uninstalled")


__all__ = [
    "MANAGER_NAME",
    "TOOLS",
    "ShimInstaller",
    "current_executable",
    "launcher_file",
    "manager_binary",
    "proxies_active",
    "running_as_module",
    "self_installed",
]
