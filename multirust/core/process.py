"""
Child process helpers.

Children are always spawned and waited for; the current process image is
never replaced, so cleanup in the manager runs regardless of outcome.
"""

import logging
import signal
import subprocess
from contextlib import contextmanager
from typing import Dict, List, Optional

from multirust.core.exceptions import RunningCommandError
from multirust.core.filesystem import IS_WINDOWS

logger = logging.getLogger(__name__)

# Exit status reported when a child terminated without an exit code
GENERIC_FAILURE = 1


def shell_command(cmdline: str) -> List[str]:
    """
    Build an argv that runs cmdline under the platform's generic shell.

    Example:
        >>> shell_command("rustc --multirust")
        ['/bin/sh', '-c', 'rustc --multirust']
    """
    if IS_WINDOWS:
        return ["cmd", "/C", cmdline]
    return ["/bin/sh", "-c", cmdline]


def exit_code_from(returncode: Optional[int]) -> int:
    """
    Map a child's return code to the manager's exit status.

    Negative return codes (killed by a signal) and missing codes map to
    GENERIC_FAILURE.
    """
    if returncode is None or returncode < 0:
        return GENERIC_FAILURE
    return returncode


@contextmanager
def _interrupts_go_to_child():
    """
    Ignore SIGINT in the manager while a child runs.

    The child shares the controlling terminal and receives the interrupt
    itself; the manager just observes the resulting exit status.
    """
    try:
        previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
    except ValueError:
        # Not the main thread; leave signal handling alone
        yield
        return

    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def run_and_wait(name: str, argv: List[str], env: Optional[Dict[str, str]] = None) -> int:
    """
    Spawn a child, wait for it and return its mapped exit status.

    Args:
        name: Tool name used in error messages
        argv: Program and arguments
        env: Child environment (inherits the manager's when None)

    Returns:
        Exit status to report for the manager

    Raises:
        RunningCommandError: If the child cannot be spawned
    """
    logger.debug(f"Running {argv}")
    try:
        child = subprocess.Popen(argv, env=env)
    except OSError as e:
        raise RunningCommandError(name, e) from e

    # Installed after spawning so the child does not inherit SIG_IGN
    with _interrupts_go_to_child():
        returncode = child.wait()

    logger.debug(f"{name} exited with {returncode}")
    return exit_code_from(returncode)


def command_succeeds(argv: List[str], env: Optional[Dict[str, str]] = None) -> bool:
    """
    Run a command silently and report whether it exited with status 0.

    Spawn failures count as failure.
    """
    try:
        result = subprocess.run(
            argv,
            env=env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError as e:
        logger.debug(f"Could not run {argv}: {e}")
        return False
    return result.returncode == 0


__all__ = [
    "GENERIC_FAILURE",
    "shell_command",
    "exit_code_from",
    "run_and_wait",
    "command_succeeds",
]
