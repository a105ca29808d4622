"""
Core interfaces for multirust.

This module defines the abstract interfaces the core depends on without
knowing their implementations. Toolchain installation (downloading,
extracting and laying out a distribution) is an external collaborator: the
core only asks an installer to populate a prefix. PATH registration is a
single capability with one variant per platform family.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class ToolchainInstaller(ABC):
    """
    Abstract interface for components that populate a toolchain prefix.

    Implementations may copy a local build, unpack archives or fetch a
    distribution; the core does not care which.
    """

    @abstractmethod
    def install(self, toolchain_name: str, prefix: Path) -> None:
        """
        Install the named toolchain into prefix.

        Args:
            toolchain_name: Toolchain being installed (e.g., "nightly")
            prefix: Install prefix; may not exist yet

        Raises:
            ToolchainInstallError: If installation fails
        """
        pass

    @abstractmethod
    def describe(self) -> str:
        """
        Short human-readable description of the installation source.

        Returns:
            Description used in notifications (e.g., "local directory '/x'")
        """
        pass


class PathRegistrar(ABC):
    """
    Abstract interface for adding a directory to the user's persistent PATH.
    """

    @abstractmethod
    def register(self, directory: Path) -> None:
        """
        Add directory to the user's PATH for future shells.

        Args:
            directory: Directory to put on the PATH

        Raises:
            PermissionDeniedError: If the persisted PATH cannot be written
        """
        pass


__all__ = [
    "ToolchainInstaller",
    "PathRegistrar",
]
