"""
Dispatch commands: run, proxy, which, doc.

``run`` and ``proxy`` return the child's exit status unchanged.
"""

import logging

from multirust.core.directory import current_dir
from multirust.proxy.dispatcher import ProxyDispatcher, has_sentinel

logger = logging.getLogger(__name__)


def _tool_args(args):
    if not args.command_args:
        raise ValueError("no command given")
    return list(args.command_args)


def run_run(cfg, args) -> int:
    """
    Run a tool from a named toolchain.

    Args:
        cfg: Configuration store
        args: Parsed arguments with ``toolchain`` and ``command_args``

    Returns:
        The tool's exit status
    """
    dispatcher = ProxyDispatcher(cfg, cfg.notifier)
    return dispatcher.run_direct(args.toolchain, _tool_args(args))


def run_proxy(cfg, args) -> int:
    """
    Run a tool from the toolchain in effect for the current directory.

    Args:
        cfg: Configuration store
        args: Parsed arguments with ``command_args``

    Returns:
        The tool's exit status (0 for a sentinel invocation)
    """
    tool_args = _tool_args(args)
    dispatcher = ProxyDispatcher(cfg, cfg.notifier)
    # The sentinel must answer even where the working directory is gone
    directory = "." if has_sentinel(tool_args) else current_dir()
    logger.debug(f"Proxying {tool_args[0]} for {directory}")
    return dispatcher.run_for_dir(directory, tool_args)


def run_which(cfg, args) -> int:
    """Print the binary that `multirust proxy <binary>` would run here."""
    print(cfg.which_binary(current_dir(), args.binary))
    return 0


def run_doc(cfg, args) -> int:
    """Open the local documentation of the toolchain in effect here."""
    relative = "index.html" if args.all else "std/index.html"
    cfg.open_docs_for_dir(current_dir(), relative)
    return 0
