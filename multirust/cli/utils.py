"""
Shared utilities for CLI commands.

Interactive prompts used by the install flow and the destructive
maintenance commands.
"""

import logging
import sys
from typing import Callable, Optional

from multirust.core.exceptions import UserAbortedError

logger = logging.getLogger(__name__)

DESTRUCTIVE_WARNING = (
    "This will delete all toolchains, overrides, aliases, and other multirust "
    "data associated with this user. Continue?"
)


def ask(question: str, input_fn: Optional[Callable[[str], str]] = None) -> bool:
    """
    Ask a yes/no question on the terminal.

    Only ``y``/``Y`` count as yes; ``n``/``N``, any other answer and
    end-of-input all count as no.
    """
    try:
        answer = (input_fn or input)(f"{question} (y/n) ")
    except EOFError:
        logger.debug("No answer on stdin")
        return False
    return answer.strip() in ("y", "Y")


def confirm_destructive(
    question: str = DESTRUCTIVE_WARNING,
    input_fn: Optional[Callable[[str], str]] = None,
) -> None:
    """
    Require confirmation before deleting user data.

    Raises:
        UserAbortedError: If the user does not answer yes
    """
    if not ask(question, input_fn):
        print("aborting")
        raise UserAbortedError()


def pause_if_interactive() -> None:
    """Wait for the user before exiting when run from a terminal window."""
    if not sys.stdin.isatty():
        return
    try:
        input("Press any key to continue...")
    except EOFError:
        pass


__all__ = ["ask", "confirm_destructive", "pause_if_interactive", "DESTRUCTIVE_WARNING"]
