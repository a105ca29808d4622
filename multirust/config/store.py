"""
Configuration store.

ConfigStore owns the multirust home directory: the default toolchain
pointer, the directory overrides, the metadata version and the user
settings. It resolves which toolchain applies to a directory and builds
the command for a tool in that toolchain.
"""

import logging
import webbrowser
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from multirust.config.metadata import METADATA_VERSION, MetadataFile, empty_metadata
from multirust.config.overrides import OverrideStore
from multirust.config.settings import Settings
from multirust.core.directory import (
    BIN_DIR,
    LOCK_DIR,
    METADATA_FILE,
    TOOLCHAINS_DIR,
    check_removable_home,
    get_multirust_home,
)
from multirust.core.exceptions import (
    MetadataVersionError,
    MultirustError,
    NoDefaultToolchainError,
    ToolchainNotInstalledError,
)
from multirust.core.filesystem import safe_rmtree
from multirust.core.interfaces import ToolchainInstaller
from multirust.core.notify import Notifier
from multirust.core.platform import PlatformInfo, detect_platform
from multirust.toolchain.installers import DistInstaller
from multirust.toolchain.toolchain import ToolCommand, Toolchain, validate_toolchain_name

logger = logging.getLogger(__name__)

DEFAULT_REASON = "default toolchain"

# Pre-JSON layout: one file per setting directly in the home directory
LEGACY_METADATA_VERSION = "1"
LEGACY_VERSION_FILE = "version"
LEGACY_DEFAULT_FILE = "default"
LEGACY_OVERRIDES_FILE = "overrides"

PathLike = Union[str, Path]


class ConfigStore:
    """
    State of one multirust home directory.

    Attributes:
        home: multirust home directory
        bin_dir: Managed directory holding the manager binary and proxies
        toolchains_dir: Parent of every toolchain prefix
        metadata: Locked metadata document
        overrides: Directory override store
        settings: User settings
    """

    def __init__(
        self,
        home: PathLike,
        notifier: Notifier,
        settings: Optional[Settings] = None,
        platform_info: Optional[PlatformInfo] = None,
    ):
        self.home = Path(home)
        self.notifier = notifier
        self.settings = settings or Settings.load(self.home)
        self.platform_info = platform_info or detect_platform()

        self.bin_dir = self.home / BIN_DIR
        self.toolchains_dir = self.home / TOOLCHAINS_DIR
        self.metadata = MetadataFile(
            self.home / METADATA_FILE,
            self.home / LOCK_DIR / "metadata.lock",
            lock_timeout=self.settings.lock_timeout,
        )
        self.overrides = OverrideStore(self.metadata, notifier)

    @classmethod
    def from_env(cls, notifier: Notifier) -> "ConfigStore":
        """Build the store for $MULTIRUST_HOME (or ~/.multirust)."""
        home = get_multirust_home()
        logger.debug(f"Using multirust home {home}")
        return cls(home, notifier)

    # ------------------------------------------------------------------
    # Metadata version
    # ------------------------------------------------------------------

    def check_metadata_version(self) -> None:
        """
        Ensure the recorded metadata version is the current one.

        A home without metadata (fresh install) passes.

        Raises:
            MetadataVersionError: If the recorded version differs
        """
        found = self._recorded_version()
        if found is not None and found != METADATA_VERSION:
            raise MetadataVersionError(found, METADATA_VERSION)

    def _recorded_version(self) -> Optional[str]:
        version = self.metadata.version()
        if version is not None:
            return version

        legacy = self.home / LEGACY_VERSION_FILE
        if legacy.is_file():
            return legacy.read_text(encoding="utf-8").strip()
        return None

    def upgrade_data(self) -> None:
        """
        Bring the home directory's metadata up to the current version.

        Raises:
            MetadataVersionError: If the recorded version is unknown
        """
        found = self._recorded_version()

        if found is None:
            self.notifier.info("no metadata found, writing current version")
            with self.metadata.transaction():
                pass
            return

        if found == METADATA_VERSION:
            self.notifier.info("metadata is up to date")
            return

        if found != LEGACY_METADATA_VERSION:
            raise MetadataVersionError(found, METADATA_VERSION)

        self.notifier.info(
            f"upgrading metadata from version {found} to {METADATA_VERSION}"
        )
        self._upgrade_legacy_layout()
        self.notifier.info("metadata upgraded")

    def _upgrade_legacy_layout(self) -> None:
        data = empty_metadata()

        default_file = self.home / LEGACY_DEFAULT_FILE
        if default_file.is_file():
            name = default_file.read_text(encoding="utf-8").strip()
            data["default_toolchain"] = name or None

        overrides_file = self.home / LEGACY_OVERRIDES_FILE
        if overrides_file.is_file():
            for line in overrides_file.read_text(encoding="utf-8").splitlines():
                directory, sep, toolchain = line.strip().partition(";")
                if not sep or not directory or not toolchain:
                    if line.strip():
                        logger.warning(f"Skipping malformed override line: {line!r}")
                    continue
                data["overrides"][directory] = {
                    "toolchain": toolchain,
                    "reason": f"directory override for '{directory}'",
                }

        with self.metadata.lock():
            self.metadata.write(data)

        for name in (LEGACY_DEFAULT_FILE, LEGACY_OVERRIDES_FILE, LEGACY_VERSION_FILE):
            (self.home / name).unlink(missing_ok=True)

    def delete_data(self) -> None:
        """
        Remove the whole home directory. Idempotent.

        Raises:
            ConfigurationError: If the home is the user home, one of its
                ancestors or a filesystem root
        """
        check_removable_home(self.home)
        if not self.home.exists():
            self.notifier.info(f"no multirust data at '{self.home}'")
            return
        safe_rmtree(self.home)
        self.notifier.info(f"deleted multirust data at '{self.home}'")

    # ------------------------------------------------------------------
    # Toolchains
    # ------------------------------------------------------------------

    def get_toolchain(self, name: str, create_parent: bool = False) -> Toolchain:
        """
        Build the Toolchain for a name.

        Args:
            name: Toolchain name
            create_parent: Create ``<home>/toolchains`` if it is missing

        Raises:
            InvalidToolchainNameError: If the name is not a valid directory name
        """
        validate_toolchain_name(name)
        if create_parent:
            self.toolchains_dir.mkdir(parents=True, exist_ok=True)
        return Toolchain(name, self.home, self.notifier, self.platform_info)

    def list_toolchains(self) -> List[str]:
        """Names of all toolchain directories, sorted."""
        if not self.toolchains_dir.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self.toolchains_dir.iterdir()
            if entry.is_dir() and not entry.name.startswith(".")
        )

    def dist_installer(self) -> DistInstaller:
        return DistInstaller(self.settings.dist_root, self.platform_info.target_triple())

    def update_all_channels(
        self,
        installer_factory: Optional[Callable[[str], ToolchainInstaller]] = None,
    ) -> List[Tuple[str, Optional[MultirustError]]]:
        """
        Reinstall every installed toolchain that tracks a channel.

        A failure for one toolchain does not stop the others.

        Args:
            installer_factory: Builds the installer for a channel name
                (default: the dist server installer)

        Returns:
            (toolchain name, error or None) per attempted update
        """
        if installer_factory is None:
            dist = self.dist_installer()
            installer_factory = lambda name: dist  # noqa: E731

        results = []
        for name in self.list_toolchains():
            if name not in self.settings.channels:
                continue
            toolchain = self.get_toolchain(name)
            if not toolchain.exists():
                continue

            try:
                toolchain.install(installer_factory(name))
            except MultirustError as e:
                self.notifier.error(f"failed to update '{name}': {e}")
                results.append((name, e))
            else:
                results.append((name, None))
        return results

    # ------------------------------------------------------------------
    # Default and overrides
    # ------------------------------------------------------------------

    def find_default(self) -> Optional[Toolchain]:
        name = self.metadata.read()["default_toolchain"]
        if not name:
            return None
        return self.get_toolchain(name)

    def set_default(self, name: str) -> None:
        validate_toolchain_name(name)
        with self.metadata.transaction() as data:
            data["default_toolchain"] = name
        self.notifier.info(f"default toolchain set to '{name}'")

    def find_override(self, directory: PathLike) -> Optional[Tuple[Toolchain, str]]:
        override = self.overrides.find(directory)
        if override is None:
            return None
        return self.get_toolchain(override.toolchain), override.reason

    def set_override(self, directory: PathLike, name: str) -> None:
        validate_toolchain_name(name)
        self.overrides.add(directory, name)

    def remove_override(self, directory: PathLike) -> bool:
        return self.overrides.remove(directory)

    def list_overrides(self):
        return self.overrides.list()

    def resolve_effective(self, directory: PathLike) -> Tuple[Toolchain, str]:
        """
        Pick the toolchain that applies to a directory.

        An override registered for exactly this directory wins; otherwise
        the default toolchain applies.

        Returns:
            (toolchain, human-readable reason)

        Raises:
            NoDefaultToolchainError: If there is no override and no default
        """
        found = self.find_override(directory)
        if found is not None:
            return found

        default = self.find_default()
        if default is None:
            raise NoDefaultToolchainError()
        return default, DEFAULT_REASON

    def create_command_for_dir(self, directory: PathLike, tool: str) -> ToolCommand:
        """
        Build the command for a tool in the toolchain effective for a directory.

        A dangling override fails instead of falling back to the default.

        Raises:
            NoDefaultToolchainError: If nothing applies to the directory
            ToolchainNotInstalledError: If the effective toolchain is missing
            BinaryNotFoundError: If the tool is missing from the toolchain
        """
        toolchain, reason = self.resolve_effective(directory)
        logger.debug(f"Using {toolchain.name} for {directory} ({reason})")
        return toolchain.create_command(tool)

    def which_binary(self, directory: PathLike, tool: str) -> Path:
        return self.create_command_for_dir(directory, tool).program

    def open_docs_for_dir(
        self,
        directory: PathLike,
        relative: str = "index.html",
        opener: Optional[Callable[[str], bool]] = None,
    ) -> Path:
        """
        Open the effective toolchain's local documentation in a browser.

        Returns:
            The documentation file that was opened
        """
        toolchain, _ = self.resolve_effective(directory)
        if not toolchain.exists():
            raise ToolchainNotInstalledError(toolchain.name)

        doc = toolchain.doc_path(relative)
        self.notifier.detail(f"opening {doc}")
        (opener or webbrowser.open)(doc.resolve().as_uri())
        return doc


__all__ = ["ConfigStore", "DEFAULT_REASON"]
