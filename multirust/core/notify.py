"""
Leveled notification sink.

Every component reports user-facing events through a Notifier handed to it
at construction instead of a process-wide callback. Levels:

- VERBOSE: progress detail, printed to stdout only when ``verbose`` is set
- NORMAL:  plain output on stdout
- INFO / WARN / ERROR: ``info: ``/``warning: ``/``error: `` prefixed lines
  routed through the ``multirust.notify`` logger (stderr once
  logging is configured by the CLI)

Example:
    >>> notifier = Notifier(verbose=True)
    >>> notifier.report(NotificationLevel.INFO, "installing toolchain 'stable'")
"""

import logging
import sys
from enum import Enum
from typing import Optional, TextIO


class NotificationLevel(Enum):
    """Severity of a notification."""

    VERBOSE = "verbose"
    NORMAL = "normal"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


_PREFIXES = {
    NotificationLevel.INFO: ("info", logging.INFO),
    NotificationLevel.WARN: ("warning", logging.WARNING),
    NotificationLevel.ERROR: ("error", logging.ERROR),
}


class Notifier:
    """
    Explicit notification sink.

    Attributes:
        verbose: Whether VERBOSE notifications are shown
        out: Stream for VERBOSE and NORMAL notifications (default: stdout)
    """

    def __init__(
        self,
        verbose: bool = False,
        out: Optional[TextIO] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.verbose = verbose
        self._out = out
        self._logger = logger or logging.getLogger("multirust.notify")

    @property
    def out(self) -> TextIO:
        # Resolved lazily so pytest's capsys replacement of sys.stdout is seen
        return self._out if self._out is not None else sys.stdout

    def report(self, level: NotificationLevel, message: str) -> None:
        """Report a message at the given level."""
        if level is NotificationLevel.VERBOSE:
            if self.verbose:
                print(message, file=self.out)
        elif level is NotificationLevel.NORMAL:
            print(message, file=self.out)
        else:
            prefix, log_level = _PREFIXES[level]
            self._logger.log(log_level, "%s: %s", prefix, message)

    def detail(self, message: str) -> None:
        self.report(NotificationLevel.VERBOSE, message)

    def say(self, message: str) -> None:
        self.report(NotificationLevel.NORMAL, message)

    def info(self, message: str) -> None:
        self.report(NotificationLevel.INFO, message)

    def warn(self, message: str) -> None:
        self.report(NotificationLevel.WARN, message)

    def error(self, message: str) -> None:
        self.report(NotificationLevel.ERROR, message)


__all__ = ["NotificationLevel", "Notifier"]
