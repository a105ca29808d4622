"""
Cross-platform file system utilities for multirust.

This module provides the filesystem primitives the installer and the
metadata store rely on:
- Idempotent directory creation, copies, moves and permission changes
- Atomic writes and appends
- Safe deletion of directory trees
- Archive extraction (tar.gz, tar.xz, tar.bz2, zip) with traversal checks
- Directory links (symlink on Unix, junction on Windows)

Every mutation is safe to repeat so a partially completed install can be
re-run.
"""

import os
import shutil
import stat
import subprocess
import sys
import tarfile
import tempfile
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Optional, Union

from multirust.core.exceptions import FilesystemError

IS_WINDOWS = os.name == "nt"

EXE_SUFFIX = ".exe" if IS_WINDOWS else ""


class ArchiveExtractionError(FilesystemError):
    """An installer archive could not be unpacked."""


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """The archive file name has no recognized suffix."""


class InsecureArchiveError(ArchiveExtractionError):
    """An archive member would be written outside the destination."""


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """True if path is parent itself or lies beneath it."""
    return path == parent or parent in path.parents


def same_file(first: Union[str, Path], second: Union[str, Path]) -> bool:
    """Return True if both paths exist and refer to the same file."""
    try:
        return os.path.samefile(first, second)
    except OSError:
        return False


# ============================================================================
# Idempotent Mutations
# ============================================================================


def ensure_directory(path: Union[str, Path], description: str = "directory") -> Path:
    """
    Ensure a directory exists (idempotent).

    Args:
        path: Directory path
        description: Description for error messages

    Returns:
        Path object

    Raises:
        FilesystemError: If directory cannot be created
    """
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"could not create {description} '{path}': {e}") from e
    return path


def copy_file(source: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Copy a file, replacing any existing destination.

    Copying a file onto itself is a no-op.

    Raises:
        FilesystemError: If the copy fails
    """
    source = Path(source)
    destination = Path(destination)

    if same_file(source, destination):
        return

    try:
        shutil.copy2(source, destination)
    except OSError as e:
        raise FilesystemError(
            f"could not copy file from '{source}' to '{destination}': {e}"
        ) from e


def move_file(source: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Move a file, replacing any existing destination.

    Moving a file onto itself is a no-op.

    Raises:
        FilesystemError: If the move fails
    """
    source = Path(source)
    destination = Path(destination)

    if same_file(source, destination):
        return

    try:
        shutil.move(str(source), str(destination))
    except OSError as e:
        raise FilesystemError(
            f"could not rename file from '{source}' to '{destination}': {e}"
        ) from e


def make_executable(path: Union[str, Path]) -> None:
    """
    Add execute permission bits to a file (no-op on Windows).

    Raises:
        FilesystemError: If permissions cannot be changed
    """
    if IS_WINDOWS:
        return

    path = Path(path)
    try:
        mode = path.stat().st_mode
        wanted = mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH
        if wanted != mode:
            path.chmod(wanted)
    except OSError as e:
        raise FilesystemError(f"could not set permissions for '{path}': {e}") from e


def write_file(
    file_path: Union[str, Path], content: str, newline: Optional[str] = None
) -> None:
    """
    Write a text file, replacing its previous contents.

    Raises:
        FilesystemError: If the file cannot be written
    """
    file_path = Path(file_path)
    try:
        with open(file_path, "w", encoding="utf-8", newline=newline) as f:
            f.write(content)
    except OSError as e:
        raise FilesystemError(f"could not write file '{file_path}': {e}") from e


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Replace a file's contents without ever exposing a half-written file.

    The content goes to a sibling temporary file which is then renamed over
    the target; on failure the target keeps its previous contents.

    Example:
        >>> atomic_write('metadata.json', '{"version": "2"}')
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    data = content.encode(encoding) if isinstance(content, str) else content
    fd, temp_name = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_name)

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(temp_path, file_path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


def append_file(file_path: Union[str, Path], content: str) -> None:
    """
    Append text to a file, creating it if needed.

    Raises:
        PermissionError / OSError: Propagated to the caller, which decides
            how to classify the failure.
    """
    file_path = Path(file_path)
    with open(file_path, "a", encoding="utf-8") as f:
        f.write(content)


def _clear_readonly(func, target, exc_info):
    # Windows refuses to delete read-only files
    if os.access(target, os.W_OK):
        raise exc_info[1]
    os.chmod(target, stat.S_IWRITE)
    func(target)


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Removing a path that does not exist is a no-op. A symlink (or junction)
    is unlinked without touching its target.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        FilesystemError: If path is not under require_prefix or deletion fails
    """
    path = Path(path)

    if path.is_symlink():
        try:
            path.unlink()
        except OSError as e:
            raise FilesystemError(f"could not remove link '{path}': {e}") from e
        return

    path = path.resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise FilesystemError(
                f"refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"path is not a directory: '{path}'")

    try:
        shutil.rmtree(path, onerror=_clear_readonly if IS_WINDOWS else None)
    except OSError as e:
        raise FilesystemError(f"could not remove directory '{path}': {e}") from e


def recursive_copy(source: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Recursively copy a directory tree, merging into an existing destination.

    Symlinks inside the tree are preserved as symlinks.

    Raises:
        FilesystemError: If the source is missing or the copy fails
    """
    source = Path(source)
    destination = Path(destination)

    if not source.is_dir():
        raise FilesystemError(f"source is not a directory: '{source}'")

    try:
        shutil.copytree(source, destination, symlinks=True, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise FilesystemError(
            f"could not copy directory '{source}' to '{destination}': {e}"
        ) from e


def create_dir_link(source: Union[str, Path], target: Union[str, Path]) -> None:
    """
    Create a directory link at target pointing to source.

    Uses a symlink on Unix and a junction on Windows (no admin rights
    needed). An existing link at target is replaced.

    Raises:
        FilesystemError: If the link cannot be created
    """
    source = Path(source).resolve()
    target = Path(target)

    if not source.is_dir():
        raise FilesystemError(f"link source is not a directory: '{source}'")

    target.parent.mkdir(parents=True, exist_ok=True)
    if target.is_symlink():
        target.unlink()
    elif target.exists():
        raise FilesystemError(
            f"link target exists and is not a link: '{target}'. "
            "Remove it manually before linking."
        )

    try:
        if IS_WINDOWS:
            result = subprocess.run(
                ["cmd", "/c", "mklink", "/J", str(target), str(source)],
                capture_output=True,
                text=True,
                check=False,
            )
            if result.returncode != 0:
                raise FilesystemError(
                    f"could not create junction '{target}': {result.stderr.strip()}"
                )
        else:
            os.symlink(source, target, target_is_directory=True)
    except OSError as e:
        raise FilesystemError(f"could not create link '{target}': {e}") from e


# ============================================================================
# Archive Extraction
# ============================================================================

# Lower-cased file suffix -> tarfile read mode ("zip" for zip archives)
ARCHIVE_FORMATS = (
    (".tar.gz", "r:gz"),
    (".tgz", "r:gz"),
    (".tar.xz", "r:xz"),
    (".tar.bz2", "r:bz2"),
    (".tbz2", "r:bz2"),
    (".zip", "zip"),
)


def archive_format(archive_path: Union[str, Path]) -> Optional[str]:
    """Read mode for an archive, judged by its file name, or None."""
    name = Path(archive_path).name.lower()
    for suffix, mode in ARCHIVE_FORMATS:
        if name.endswith(suffix):
            return mode
    return None


def _check_members(names: Iterable[str], destination: Path) -> None:
    root = destination.resolve()
    for name in names:
        if not is_relative_to((root / name).resolve(), root):
            raise InsecureArchiveError(
                f"refusing to extract '{name}': it would land outside '{root}'"
            )


def extract_archive(
    archive_path: Union[str, Path], destination: Union[str, Path]
) -> None:
    """
    Unpack a toolchain archive into a directory.

    Every member is checked before anything is written, so an archive with
    a member escaping the destination leaves the destination untouched.

    Raises:
        UnsupportedArchiveFormat: If the file name has no known suffix
        InsecureArchiveError: If a member escapes the destination
        ArchiveExtractionError: If the archive is missing or corrupt
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    mode = archive_format(archive_path)
    if mode is None:
        raise UnsupportedArchiveFormat(
            f"unsupported archive format: '{archive_path.name}'"
        )
    if not archive_path.is_file():
        raise ArchiveExtractionError(f"archive not found: '{archive_path}'")

    destination.mkdir(parents=True, exist_ok=True)

    try:
        if mode == "zip":
            with zipfile.ZipFile(archive_path) as zf:
                _check_members(zf.namelist(), destination)
                zf.extractall(destination)
        else:
            with tarfile.open(archive_path, mode) as tar:
                _check_members(tar.getnames(), destination)
                if sys.version_info >= (3, 12):
                    tar.extractall(destination, filter="data")
                else:
                    tar.extractall(destination)
    except ArchiveExtractionError:
        raise
    except (OSError, tarfile.TarError, zipfile.BadZipFile) as e:
        raise ArchiveExtractionError(
            f"could not extract '{archive_path}': {e}"
        ) from e


# ============================================================================
# Temporary Directories
# ============================================================================


@contextmanager
def temporary_directory(prefix: str = "multirust-"):
    """Yield a fresh temporary directory, removed on exit."""
    temp_dir = Path(tempfile.mkdtemp(prefix=prefix))
    try:
        yield temp_dir
    finally:
        safe_rmtree(temp_dir)


__all__ = [
    "IS_WINDOWS",
    "EXE_SUFFIX",
    "FilesystemError",
    "ArchiveExtractionError",
    "UnsupportedArchiveFormat",
    "InsecureArchiveError",
    "is_relative_to",
    "same_file",
    "ensure_directory",
    "copy_file",
    "move_file",
    "make_executable",
    "write_file",
    "atomic_write",
    "append_file",
    "safe_rmtree",
    "recursive_copy",
    "create_dir_link",
    "archive_format",
    "extract_archive",
    "temporary_directory",
]
