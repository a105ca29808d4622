"""
Metadata maintenance commands: upgrade-data, delete-data.

Both run without the metadata version check.
"""

from multirust.cli.utils import confirm_destructive


def run_upgrade_data(cfg, args) -> int:
    """
    Upgrade the home directory's metadata to the current version.

    Args:
        cfg: Configuration store
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    cfg.upgrade_data()
    return 0


def run_delete_data(cfg, args) -> int:
    """
    Delete every toolchain, override and setting for this user.

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
    cfg.delete_data()
    return 0
