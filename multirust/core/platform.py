"""
Platform detection for multirust.

Detects the operating system and CPU architecture to pick the dynamic-library
search variable for child processes and the target triple used to name dist
archives.

Usage:
    from multirust.core.platform import detect_platform

    info = detect_platform()
    print(info.target_triple())   # e.g. 'x86_64-unknown-linux-gnu'
"""

import functools
import platform
from dataclasses import dataclass


@dataclass(frozen=True)
class PlatformInfo:
    """
    Platform information.

    Attributes:
        os: Operating system ('windows', 'linux', 'macos', 'freebsd')
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm')
    """

    os: str
    arch: str

    def platform_string(self) -> str:
        """Get canonical platform string (e.g., 'linux-x64')."""
        return f"{self.os}-{self.arch}"

    def library_path_var(self) -> str:
        """
        Environment variable the dynamic loader searches for shared libraries.

        Windows has no separate variable; DLLs are found through PATH.
        """
        if self.os == "windows":
            return "PATH"
        if self.os == "macos":
            return "DYLD_LIBRARY_PATH"
        return "LD_LIBRARY_PATH"

    def target_triple(self) -> str:
        """
        Get the target triple used in dist archive names.

        Example:
            >>> PlatformInfo('macos', 'arm64').target_triple()
            'aarch64-apple-darwin'
        """
        arch_map = {
            "x64": "x86_64",
            "arm64": "aarch64",
            "x86": "i686",
            "arm": "arm",
        }
        arch = arch_map.get(self.arch, self.arch)

        if self.os == "windows":
            return f"{arch}-pc-windows-msvc"
        if self.os == "macos":
            return f"{arch}-apple-darwin"
        if self.os == "freebsd":
            return f"{arch}-unknown-freebsd"
        if self.arch == "arm":
            return "arm-unknown-linux-gnueabihf"
        return f"{arch}-unknown-linux-gnu"

    def __str__(self) -> str:
        return self.platform_string()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> str:
    """
    Detect operating system.

    Raises:
        RuntimeError: If OS is not supported
    """
    system = platform.system().lower()

    if system == "windows":
        return "windows"
    elif system == "linux":
        return "linux"
    elif system == "darwin":
        return "macos"
    elif system == "freebsd":
        return "freebsd"
    else:
        raise RuntimeError(f"Unsupported operating system: {system}")


def _detect_architecture() -> str:
    """Detect CPU architecture, normalized to 'x64', 'arm64', 'x86', 'arm'."""
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    else:
        # Return original for unknown architectures
        return machine


def clear_platform_cache() -> None:
    """Clear the cached platform detection (used by tests)."""
    detect_platform.cache_clear()


__all__ = ["PlatformInfo", "detect_platform", "clear_platform_cache"]
