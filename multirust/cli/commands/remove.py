"""
Removal commands: remove-override, remove-toolchain.

Both are idempotent; removing something absent is reported, not an error.
"""

from multirust.core.directory import current_dir


def run_remove_override(cfg, args) -> int:
    """
    Remove the override for a directory.

    Args:
        cfg: Configuration store
        args: Parsed arguments; ``path`` (or ``--path``) names the directory,
            the current directory when neither is given

    Returns:
        Exit code (0 for success, including when no override existed)
    """
    directory = args.path or getattr(args, "path_option", None) or current_dir()
    cfg.remove_override(directory)
    return 0


def run_remove_toolchain(cfg, args) -> int:
    """
    Uninstall a toolchain.

    Args:
        cfg: Configuration store
        args: Parsed arguments with ``toolchain``

    Returns:
        Exit code (0 for success, including when it was not installed)
    """
    cfg.get_toolchain(args.toolchain).remove()
    return 0
