"""Toolchains and the installers that populate them."""

from .installers import ArchiveInstaller, DistInstaller, LocalDirectoryInstaller
from .toolchain import ToolCommand, Toolchain, validate_toolchain_name

__all__ = [
    "ArchiveInstaller",
    "DistInstaller",
    "LocalDirectoryInstaller",
    "ToolCommand",
    "Toolchain",
    "validate_toolchain_name",
]
