"""
Read-only commands: show-default, show-override, list-overrides,
list-toolchains.
"""

from multirust.core.directory import current_dir


def print_tool_versions(toolchain) -> None:
    print()
    for line in toolchain.tool_versions():
        print(line)
    print()


def run_show_default(cfg, args) -> int:
    """
    Show the default toolchain, its location and its tool versions.

    Args:
        cfg: Configuration store
        args: Parsed command-line arguments

    Returns:
        Exit code (0 whether or not a default is configured)
    """
    toolchain = cfg.find_default()
    if toolchain is None:
        print("no default toolchain configured. run `multirust default <toolchain>`")
        return 0

    print(f"default toolchain: {toolchain.name}")
    print(f"default location: {toolchain.prefix}")
    print_tool_versions(toolchain)
    return 0


def run_show_override(cfg, args) -> int:
    """
    Show the override for the current directory, or the default if none.

    Args:
        cfg: Configuration store
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    found = cfg.find_override(current_dir())
    if found is None:
        print("no override")
        return run_show_default(cfg, args)

    toolchain, reason = found
    print(f"override toolchain: {toolchain.name}")
    print(f"override location: {toolchain.prefix}")
    print(f"override reason: {reason}")
    print_tool_versions(toolchain)
    return 0


def run_list_overrides(cfg, args) -> int:
    """Print one ``directory<TAB>toolchain`` line per override, sorted."""
    overrides = cfg.list_overrides()
    if not overrides:
        print("no overrides")
    for override in overrides:
        print(override)
    return 0


def run_list_toolchains(cfg, args) -> int:
    """Print the installed toolchain names, sorted."""
    toolchains = cfg.list_toolchains()
    if not toolchains:
        print("no installed toolchains")
    for name in toolchains:
        print(name)
    return 0
