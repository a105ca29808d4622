"""
Install-or-update commands: update, default, override.
"""

import logging
from typing import Optional

from multirust.core.directory import current_dir
from multirust.core.interfaces import ToolchainInstaller
from multirust.toolchain.installers import ArchiveInstaller, LocalDirectoryInstaller
from multirust.cli.commands.show import print_tool_versions

logger = logging.getLogger(__name__)


def installer_from_args(args) -> Optional[ToolchainInstaller]:
    """Installer selected by --installer/--copy-local/--link-local, if any."""
    if args.installer:
        return ArchiveInstaller(args.installer)
    if args.copy_local:
        return LocalDirectoryInstaller(args.copy_local, link=False)
    if args.link_local:
        return LocalDirectoryInstaller(args.link_local, link=True)
    return None


def _ensure_installed(cfg, args):
    toolchain = cfg.get_toolchain(args.toolchain, create_parent=True)
    installer = installer_from_args(args)
    if installer is not None:
        logger.debug(f"Installing {toolchain.name} from {installer.describe()}")
        toolchain.install(installer)
    elif not toolchain.install_if_missing(cfg.dist_installer()):
        logger.debug(f"{toolchain.name} already installed")
    return toolchain


def run_update(cfg, args) -> int:
    """
    Install or update one toolchain, or every installed tracked channel.

    Returns:
        0 if all updates succeeded, 1 otherwise
    """
    if args.toolchain:
        toolchain = cfg.get_toolchain(args.toolchain, create_parent=True)
        toolchain.install(installer_from_args(args) or cfg.dist_installer())
        return 0

    results = cfg.update_all_channels()
    if not results:
        print("no installed channels to update")
        return 0

    width = max(len(name) for name, _ in results)
    print()
    for name, error in results:
        status = "succeeded" if error is None else "FAILED"
        print(f"{name.rjust(width)} update {status}")
    print()

    for name, _ in results:
        print(f"{name} revision:")
        print_tool_versions(cfg.get_toolchain(name))

    return 0 if all(error is None for _, error in results) else 1


def run_default(cfg, args) -> int:
    """
    Install the toolchain if needed and make it the default.

    Args:
        cfg: Configuration store
        args: Parsed arguments with ``toolchain`` and the install options

    Returns:
        Exit code (0 for success)
    """
    _ensure_installed(cfg, args)
    cfg.set_default(args.toolchain)
    return 0


def run_override(cfg, args) -> int:
    """
    Install the toolchain if needed and pin it for the current directory.

    Args:
        cfg: Configuration store
        args: Parsed arguments with ``toolchain`` and the install options

    Returns:
        Exit code (0 for success)
    """
    _ensure_installed(cfg, args)
    cfg.set_override(current_dir(), args.toolchain)
    return 0
