"""
Core functionality for multirust.

This package contains the foundational modules that other components depend on.
"""

from .directory import (
    get_multirust_home,
    current_dir,
    normalize_directory,
)

from .notify import (
    NotificationLevel,
    Notifier,
)

from .platform import (
    PlatformInfo,
    detect_platform,
    clear_platform_cache,
)

from .exceptions import (
    MultirustError,
    ConfigurationError,
    NoDefaultToolchainError,
    MetadataVersionError,
    ToolchainNotInstalledError,
    BinaryNotFoundError,
    InvalidToolchainNameError,
    WorkingDirectoryError,
    StoreLockTimeoutError,
    FilesystemError,
    PermissionDeniedError,
    ProcessError,
    RunningCommandError,
    UserAbortedError,
    ToolchainInstallError,
    DownloadError,
    ChecksumError,
)

__all__ = [
    "get_multirust_home",
    "current_dir",
    "normalize_directory",
    "NotificationLevel",
    "Notifier",
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
    "MultirustError",
    "ConfigurationError",
    "NoDefaultToolchainError",
    "MetadataVersionError",
    "ToolchainNotInstalledError",
    "BinaryNotFoundError",
    "InvalidToolchainNameError",
    "WorkingDirectoryError",
    "StoreLockTimeoutError",
    "FilesystemError",
    "PermissionDeniedError",
    "ProcessError",
    "RunningCommandError",
    "UserAbortedError",
    "ToolchainInstallError",
    "DownloadError",
    "ChecksumError",
]
