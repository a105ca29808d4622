"""
Centralized exception hierarchy for multirust.

Every error raised by the core derives from MultirustError so the CLI entry
point can report it uniformly and exit with status 1.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class MultirustError(Exception):
    """Base exception for all multirust errors."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationError(MultirustError):
    """Base exception for configuration and resolution errors."""

    pass


class NoDefaultToolchainError(ConfigurationError):
    """Raised when resolution needs a default toolchain and none is set."""

    def __init__(self):
        super().__init__(
            "no default toolchain configured. run `multirust default <toolchain>`"
        )


class MetadataVersionError(ConfigurationError):
    """Raised when the persisted metadata version does not match."""

    def __init__(self, found: str, expected: str):
        self.found = found
        self.expected = expected
        super().__init__(
            f"metadata version is {found}, expected {expected}. "
            "run `multirust upgrade-data` to upgrade your data"
        )


class ToolchainNotInstalledError(ConfigurationError):
    """Raised when a resolved toolchain has no installation on disk."""

    def __init__(self, toolchain_name: str):
        self.toolchain_name = toolchain_name
        super().__init__(f"toolchain '{toolchain_name}' is not installed")


class BinaryNotFoundError(ConfigurationError):
    """Raised when a tool is missing from an installed toolchain."""

    def __init__(self, toolchain_name: str, binary: str):
        self.toolchain_name = toolchain_name
        self.binary = binary
        super().__init__(
            f"toolchain '{toolchain_name}' does not have the binary '{binary}'"
        )


class InvalidToolchainNameError(ConfigurationError):
    """Raised when a toolchain name cannot be used as a directory name."""

    def __init__(self, toolchain_name: str):
        self.toolchain_name = toolchain_name
        super().__init__(f"invalid toolchain name: '{toolchain_name}'")


class WorkingDirectoryError(ConfigurationError):
    """Raised when the current working directory cannot be determined."""

    pass


class StoreLockTimeoutError(MultirustError):
    """Raised when the metadata lock cannot be acquired within timeout."""

    pass


# ============================================================================
# Filesystem / Permission Exceptions
# ============================================================================


class FilesystemError(MultirustError):
    """Base exception for filesystem operations."""

    pass


class PermissionDeniedError(MultirustError):
    """Raised when the registry or the shell profile cannot be written."""

    pass


# ============================================================================
# Process Exceptions
# ============================================================================


class ProcessError(MultirustError):
    """Base exception for child process failures (not non-zero exits)."""

    pass


class RunningCommandError(ProcessError):
    """Raised when a child process cannot be spawned."""

    def __init__(self, name: str, error: Exception):
        self.name = name
        self.error = error
        super().__init__(f"error running command `{name}`: {error}")


# ============================================================================
# Interaction / Installation Exceptions
# ============================================================================


class UserAbortedError(MultirustError):
    """Raised when the user declines an interactive confirmation."""

    def __init__(self, message: str = "aborted by user"):
        super().__init__(message)


class ToolchainInstallError(MultirustError):
    """Raised when an installer fails to populate a toolchain prefix."""

    pass


class DownloadError(ToolchainInstallError):
    """Raised when a toolchain archive cannot be downloaded."""

    pass


class ChecksumError(DownloadError):
    """Raised when a downloaded archive does not match its checksum."""

    pass
