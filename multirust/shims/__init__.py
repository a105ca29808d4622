"""Manager binary placement, proxy shims and PATH registration."""

from .installer import (
    TOOLS,
    ShimInstaller,
    manager_binary,
    proxies_active,
    self_installed,
)
from .path import ProfilePath, WindowsRegistryPath, select_path_registrar

__all__ = [
    "TOOLS",
    "ShimInstaller",
    "manager_binary",
    "proxies_active",
    "self_installed",
    "ProfilePath",
    "WindowsRegistryPath",
    "select_path_registrar",
]
