"""
Machine-readable queries for scripts: ``multirust ctl <query>``.

Each query prints a single line and nothing else, so the output can be
captured directly by a shell script.
"""

from multirust.core.directory import current_dir
from multirust.core.exceptions import NoDefaultToolchainError


def run_home(cfg, args) -> int:
    """Print the multirust home directory."""
    print(cfg.home)
    return 0


def run_default_toolchain(cfg, args) -> int:
    """
    Print the name of the default toolchain.

    Raises:
        NoDefaultToolchainError: If no default is configured
    """
    toolchain = cfg.find_default()
    if toolchain is None:
        raise NoDefaultToolchainError()
    print(toolchain.name)
    return 0


def run_override_toolchain(cfg, args) -> int:
    """Print the toolchain in effect for the current directory."""
    toolchain, _ = cfg.resolve_effective(current_dir())
    print(toolchain.name)
    return 0


def run_toolchain_sysroot(cfg, args) -> int:
    """Print the install prefix of ``args.toolchain`` (installed or not)."""
    print(cfg.get_toolchain(args.toolchain).prefix)
    return 0


HANDLERS = {
    "home": run_home,
    "default-toolchain": run_default_toolchain,
    "override-toolchain": run_override_toolchain,
    "toolchain-sysroot": run_toolchain_sysroot,
}


def run(cfg, args) -> int:
    """
    Run a ctl query.

    Args:
        cfg: Configuration store
        args: Parsed arguments with ``ctl_command`` naming the query

    Returns:
        Exit code (0 for success)

    Raises:
        ValueError: If no query was given
    """
    handler = HANDLERS.get(args.ctl_command)
    if handler is None:
        raise ValueError("no ctl query given")
    return handler(cfg, args)
