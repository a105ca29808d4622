"""
Toolchain installers.

Concrete ToolchainInstaller implementations used by ``update``, ``default``
and ``override``:

- ArchiveInstaller: local archive files or http(s) URLs
- LocalDirectoryInstaller: copy or link an existing local build
- DistInstaller: the archive for a channel name on the dist server

Archives in the rust-installer format (an ``install.sh`` at the top level)
are installed by running that script; any other archive is copied into the
prefix as-is.
"""

import logging
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from multirust.core.download import download_file, fetch_text, parse_checksum
from multirust.core.exceptions import FilesystemError, ToolchainInstallError
from multirust.core.filesystem import (
    create_dir_link,
    extract_archive,
    recursive_copy,
    temporary_directory,
)
from multirust.core.interfaces import ToolchainInstaller

logger = logging.getLogger(__name__)


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _normalize_root_directory(extract_dir: Path) -> Path:
    """
    Unwrap a single top-level directory.

    Archives usually contain ``rust-nightly-x86_64-unknown-linux-gnu/...``;
    the interesting content is inside that directory.
    """
    entries = list(extract_dir.iterdir())
    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]
    return extract_dir


class ArchiveInstaller(ToolchainInstaller):
    """
    Install from one or more archives.

    Attributes:
        sources: Local archive paths or http(s) URLs, installed in order
        checksums: Optional expected SHA256 per source
    """

    def __init__(
        self,
        sources: List[str],
        checksums: Optional[Dict[str, str]] = None,
        timeout: int = 30,
    ):
        if not sources:
            raise ValueError("at least one installer source is required")
        self.sources = list(sources)
        self.checksums = dict(checksums or {})
        self.timeout = timeout

    def describe(self) -> str:
        return ", ".join(f"'{s}'" for s in self.sources)

    def install(self, toolchain_name: str, prefix: Path) -> None:
        try:
            with temporary_directory(prefix="multirust-install-") as work:
                for index, source in enumerate(self.sources):
                    archive = self._fetch(source, work / "downloads")
                    unpacked = work / f"unpacked-{index}"
                    extract_archive(archive, unpacked)
                    self._install_tree(_normalize_root_directory(unpacked), prefix)
        except FilesystemError as e:
            raise ToolchainInstallError(
                f"could not install '{toolchain_name}' from archive: {e}"
            ) from e

    def _fetch(self, source: str, download_dir: Path) -> Path:
        if is_url(source):
            name = source.rstrip("/").rsplit("/", 1)[-1] or "installer.tar.gz"
            return download_file(
                source,
                download_dir / name,
                expected_sha256=self.checksums.get(source),
                timeout=self.timeout,
            )

        path = Path(source)
        if not path.is_file():
            raise ToolchainInstallError(f"installer not found: '{source}'")
        return path

    def _install_tree(self, root: Path, prefix: Path) -> None:
        script = root / "install.sh"
        if not script.is_file():
            recursive_copy(root, prefix)
            return

        prefix.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Running {script} --prefix={prefix}")
        try:
            result = subprocess.run(
                ["sh", str(script), f"--prefix={prefix}", "--disable-ldconfig"],
                cwd=root,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise ToolchainInstallError(f"could not run {script}: {e}") from e

        if result.returncode != 0:
            raise ToolchainInstallError(
                f"{script.name} failed with status {result.returncode}: "
                f"{result.stderr.strip()}"
            )


class LocalDirectoryInstaller(ToolchainInstaller):
    """
    Install from a local directory, by copy or by link.

    Linking keeps the toolchain in sync with a local build tree; removing
    the toolchain then only removes the link.
    """

    def __init__(self, path: Path, link: bool = False):
        self.path = Path(path)
        self.link = link

    def describe(self) -> str:
        action = "link to" if self.link else "copy of"
        return f"{action} local directory '{self.path}'"

    def install(self, toolchain_name: str, prefix: Path) -> None:
        if not self.path.is_dir():
            raise ToolchainInstallError(f"not a directory: '{self.path}'")

        try:
            if self.link:
                create_dir_link(self.path, prefix)
            else:
                recursive_copy(self.path, prefix)
        except FilesystemError as e:
            raise ToolchainInstallError(
                f"could not install '{toolchain_name}' from '{self.path}': {e}"
            ) from e


class DistInstaller(ToolchainInstaller):
    """
    Install a channel from the distribution server.

    Fetches ``<dist_root>/rust-<name>-<target>.tar.gz`` after reading the
    expected checksum from the matching ``.sha256`` file.
    """

    def __init__(self, dist_root: str, target: str, timeout: int = 30):
        self.dist_root = dist_root.rstrip("/")
        self.target = target
        self.timeout = timeout

    def archive_url(self, toolchain_name: str) -> str:
        return f"{self.dist_root}/rust-{toolchain_name}-{self.target}.tar.gz"

    def describe(self) -> str:
        return f"dist server '{self.dist_root}'"

    def install(self, toolchain_name: str, prefix: Path) -> None:
        url = self.archive_url(toolchain_name)
        checksum = parse_checksum(fetch_text(url + ".sha256", timeout=self.timeout))
        ArchiveInstaller([url], {url: checksum}, timeout=self.timeout).install(
            toolchain_name, prefix
        )


__all__ = [
    "ArchiveInstaller",
    "LocalDirectoryInstaller",
    "DistInstaller",
    "is_url",
]
