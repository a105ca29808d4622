"""
Unit tests for toolchain installers.
"""

import hashlib
import io
import sys
import tarfile

import pytest
import responses

from multirust.core.exceptions import ChecksumError, ToolchainInstallError
from multirust.core.filesystem import EXE_SUFFIX
from multirust.toolchain.installers import (
    ArchiveInstaller,
    DistInstaller,
    LocalDirectoryInstaller,
    is_url,
)

DIST_ROOT = "https://dist.example.org/dist"
TARGET = "x86_64-unknown-linux-gnu"

INSTALL_SH = """#!/bin/sh
for arg in "$@"; do
    case "$arg" in
        --prefix=*) PREFIX="${arg#--prefix=}" ;;
    esac
done
mkdir -p "$PREFIX"
cp -R payload/. "$PREFIX/"
"""


def _add_file(tar, name, data, mode=0o644):
    info = tarfile.TarInfo(name)
    info.size = len(data)
    info.mode = mode
    tar.addfile(info, io.BytesIO(data))


def make_archive_bytes(root="rust-nightly", with_install_sh=False) -> bytes:
    """Build a .tar.gz with a single top-level directory holding a toolchain."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        base = f"{root}/payload" if with_install_sh else root
        _add_file(tar, f"{base}/bin/rustc{EXE_SUFFIX}", b"#!/bin/sh\n", 0o755)
        _add_file(tar, f"{base}/lib/librustc.so", b"lib")
        if with_install_sh:
            _add_file(tar, f"{root}/install.sh", INSTALL_SH.encode(), 0o755)
    return buffer.getvalue()


class TestArchiveInstaller:
    def test_requires_sources(self):
        with pytest.raises(ValueError):
            ArchiveInstaller([])

    def test_copies_tree_without_install_script(self, tmp_path):
        archive = tmp_path / "rust-nightly.tar.gz"
        archive.write_bytes(make_archive_bytes())
        prefix = tmp_path / "prefix"

        ArchiveInstaller([str(archive)]).install("nightly", prefix)

        assert (prefix / "bin" / f"rustc{EXE_SUFFIX}").is_file()
        assert (prefix / "lib" / "librustc.so").read_bytes() == b"lib"

    @pytest.mark.skipif(sys.platform == "win32", reason="needs sh")
    def test_runs_install_script(self, tmp_path):
        archive = tmp_path / "rust-nightly.tar.gz"
        archive.write_bytes(make_archive_bytes(with_install_sh=True))
        prefix = tmp_path / "prefix"

        ArchiveInstaller([str(archive)]).install("nightly", prefix)

        assert (prefix / "bin" / "rustc").is_file()
        assert not (prefix / "install.sh").exists()

    def test_missing_local_archive(self, tmp_path):
        installer = ArchiveInstaller([str(tmp_path / "missing.tar.gz")])

        with pytest.raises(ToolchainInstallError, match="installer not found"):
            installer.install("nightly", tmp_path / "prefix")

    def test_corrupt_archive(self, tmp_path):
        archive = tmp_path / "broken.tar.gz"
        archive.write_bytes(b"not a tarball")

        with pytest.raises(ToolchainInstallError, match="could not install 'nightly'"):
            ArchiveInstaller([str(archive)]).install("nightly", tmp_path / "prefix")

    @responses.activate
    def test_url_source(self, tmp_path):
        url = f"{DIST_ROOT}/custom.tar.gz"
        responses.add(responses.GET, url, body=make_archive_bytes())
        prefix = tmp_path / "prefix"

        ArchiveInstaller([url]).install("custom", prefix)

        assert (prefix / "bin" / f"rustc{EXE_SUFFIX}").is_file()

    def test_describe(self):
        assert ArchiveInstaller(["a.tar.gz", "b.tar.gz"]).describe() == "'a.tar.gz', 'b.tar.gz'"

    def test_is_url(self):
        assert is_url("https://x/y.tar.gz")
        assert is_url("http://x/y.tar.gz")
        assert not is_url("/tmp/y.tar.gz")


class TestLocalDirectoryInstaller:
    def test_not_a_directory(self, tmp_path):
        installer = LocalDirectoryInstaller(tmp_path / "missing")

        with pytest.raises(ToolchainInstallError, match="not a directory"):
            installer.install("dev", tmp_path / "prefix")

    def test_copy(self, tmp_path, toolchain_source):
        source = toolchain_source("dev")
        prefix = tmp_path / "prefix"

        LocalDirectoryInstaller(source).install("dev", prefix)

        assert (prefix / "bin" / f"rustc{EXE_SUFFIX}").is_file()

    def test_describe(self, tmp_path):
        assert "link to" in LocalDirectoryInstaller(tmp_path, link=True).describe()
        assert "copy of" in LocalDirectoryInstaller(tmp_path).describe()


class TestDistInstaller:
    def test_archive_url(self):
        installer = DistInstaller(DIST_ROOT + "/", TARGET)

        assert installer.archive_url("nightly") == (
            f"{DIST_ROOT}/rust-nightly-{TARGET}.tar.gz"
        )

    @responses.activate
    def test_install_verifies_checksum(self, tmp_path):
        installer = DistInstaller(DIST_ROOT, TARGET)
        url = installer.archive_url("nightly")
        payload = make_archive_bytes()
        digest = hashlib.sha256(payload).hexdigest()
        responses.add(responses.GET, url + ".sha256", body=f"{digest}  rust-nightly.tar.gz\n")
        responses.add(responses.GET, url, body=payload)
        prefix = tmp_path / "prefix"

        installer.install("nightly", prefix)

        assert (prefix / "bin" / f"rustc{EXE_SUFFIX}").is_file()

    @responses.activate
    def test_checksum_mismatch(self, tmp_path):
        installer = DistInstaller(DIST_ROOT, TARGET)
        url = installer.archive_url("nightly")
        responses.add(responses.GET, url + ".sha256", body="0" * 64)
        responses.add(responses.GET, url, body=make_archive_bytes())

        with pytest.raises(ChecksumError):
            installer.install("nightly", tmp_path / "prefix")
