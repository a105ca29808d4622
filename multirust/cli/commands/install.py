"""
Self-installation commands: install, uninstall, and the first-run flow
that runs when multirust is started without a subcommand.
"""

import logging

from multirust.cli.utils import ask, confirm_destructive
from multirust.core.filesystem import same_file
from multirust.shims.installer import (
    ShimInstaller,
    current_executable,
    manager_binary,
    running_as_module,
    self_installed,
)

logger = logging.getLogger(__name__)


def run_install(cfg, args) -> int:
    """
    Install multirust and its proxies into the managed bin directory.

    Args:
        cfg: Configuration store
        args: Parsed arguments with ``move`` and ``add_to_path``

    Returns:
        Exit code (0 for success)
    """
    ShimInstaller(cfg, cfg.notifier).install(
        should_move=args.move, add_to_path=args.add_to_path
    )
    return 0


def run_uninstall(cfg, args) -> int:
    """
    Remove multirust and all of its data.

    Args:
        cfg: Configuration store
        args: Parsed arguments; ``no_prompt`` skips the confirmation

    Returns:
        Exit code (0 for success)

    Raises:
        UserAbortedError: If the user declines the confirmation
    """
    if not args.no_prompt:
        confirm_destructive()
    ShimInstaller(cfg, cfg.notifier).uninstall()
    return 0


def maybe_install(cfg, args=None) -> int:
    """
    Offer to install, update, or confirm the current installation.

    Returns:
        Exit code (0 unless installation fails)
    """
    installer = ShimInstaller(cfg, cfg.notifier)

    if not self_installed(cfg):
        if not ask("Install multirust now?"):
            return 0
        add_to_path = ask("Add multirust to PATH?")
        installer.install(should_move=False, add_to_path=add_to_path)
        return 0

    # Under `python -m multirust` there is no binary to compare; the
    # installed launcher is simply rewritten
    running = None if running_as_module() else current_executable()
    logger.debug(f"Running from {running or 'python -m multirust'}")
    if running is not None and same_file(running, manager_binary(cfg.bin_dir)):
        print("This is the currently installed multirust binary.")
        return 0

    print("Existing multirust installation detected.")
    if not ask("Replace or update it now?"):
        return 0
    installer.install(should_move=False, add_to_path=False, source=running)
    return 0
