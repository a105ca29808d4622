"""
Proxy dispatch.

Forwards a tool invocation to the right toolchain: either a named toolchain
(``multirust run nightly rustc ...``) or whichever toolchain applies to the
working directory (``multirust proxy rustc ...``, used by the shims).

Passing the ``--multirust`` sentinel anywhere in the tool's arguments
short-circuits dispatch: nothing is resolved or spawned and the proxy
reports that it is working. This is how the setup self-test detects that
the shims are on the PATH.
"""

import logging
from pathlib import Path
from typing import Callable, List, Union

from multirust.config.store import ConfigStore
from multirust.core.notify import Notifier
from multirust.core.process import run_and_wait
from multirust.toolchain.toolchain import ToolCommand

logger = logging.getLogger(__name__)

SENTINEL = "--multirust"
SENTINEL_REPLY = "Proxied via multirust"


def has_sentinel(args: List[str]) -> bool:
    """True if the sentinel appears among the tool's arguments (not args[0])."""
    return SENTINEL in args[1:]


class ProxyDispatcher:
    """
    Resolve and run tool commands on behalf of the user.

    Attributes:
        cfg: Configuration store used for resolution
        notifier: Sink for user-facing output
    """

    def __init__(self, cfg: ConfigStore, notifier: Notifier):
        self.cfg = cfg
        self.notifier = notifier

    def run_direct(self, toolchain_name: str, args: List[str]) -> int:
        """
        Run a tool from a named toolchain.

        Args:
            toolchain_name: Toolchain to use
            args: Tool name followed by its arguments

        Returns:
            Exit status to report
        """
        return self._dispatch(
            args,
            lambda: self.cfg.get_toolchain(toolchain_name).create_command(args[0]),
        )

    def run_for_dir(self, directory: Union[str, Path], args: List[str]) -> int:
        """
        Run a tool from the toolchain effective for a directory.

        Args:
            directory: Directory whose override or default applies
            args: Tool name followed by its arguments

        Returns:
            Exit status to report
        """
        return self._dispatch(
            args, lambda: self.cfg.create_command_for_dir(directory, args[0])
        )

    def _dispatch(self, args: List[str], build: Callable[[], ToolCommand]) -> int:
        if not args:
            raise ValueError("no tool given")

        if has_sentinel(args):
            self.notifier.say(SENTINEL_REPLY)
            return 0

        command = build()
        return run_and_wait(args[0], command.argv(args[1:]), env=command.env)


__all__ = ["ProxyDispatcher", "SENTINEL", "SENTINEL_REPLY", "has_sentinel"]
