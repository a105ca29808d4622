"""
Unit tests for the locked metadata file.
"""

import json

import pytest
from filelock import FileLock

from multirust.config.metadata import METADATA_VERSION, MetadataFile, empty_metadata
from multirust.core.exceptions import ConfigurationError, StoreLockTimeoutError


@pytest.fixture
def metadata(tmp_path):
    return MetadataFile(
        tmp_path / "metadata.json", tmp_path / "lock" / "metadata.lock", lock_timeout=5
    )


class TestMetadataRead:
    def test_missing_file_is_empty_document(self, metadata):
        assert metadata.read() == empty_metadata()
        assert metadata.version() is None
        assert not metadata.exists()

    def test_corrupt_file(self, metadata):
        metadata.path.write_text("{not json")

        with pytest.raises(ConfigurationError, match="corrupt"):
            metadata.read()

    def test_missing_version(self, metadata):
        metadata.path.write_text(json.dumps({"overrides": {}}))

        with pytest.raises(ConfigurationError, match="has no version"):
            metadata.read()

    def test_fills_missing_sections(self, metadata):
        metadata.path.write_text(json.dumps({"version": "2"}))

        data = metadata.read()

        assert data["default_toolchain"] is None
        assert data["overrides"] == {}


class TestMetadataTransaction:
    def test_first_transaction_writes_current_version(self, metadata):
        with metadata.transaction() as data:
            data["default_toolchain"] = "stable"

        on_disk = json.loads(metadata.path.read_text())
        assert on_disk["version"] == METADATA_VERSION
        assert on_disk["default_toolchain"] == "stable"
        assert metadata.version() == METADATA_VERSION

    def test_failed_block_does_not_write(self, metadata):
        with pytest.raises(RuntimeError):
            with metadata.transaction() as data:
                data["default_toolchain"] = "nightly"
                raise RuntimeError("boom")

        assert not metadata.path.exists()

    def test_updates_accumulate(self, metadata):
        with metadata.transaction() as data:
            data["overrides"]["/a"] = {"toolchain": "stable", "reason": "r"}
        with metadata.transaction() as data:
            data["overrides"]["/b"] = {"toolchain": "nightly", "reason": "r"}

        assert sorted(metadata.read()["overrides"]) == ["/a", "/b"]

    def test_lock_timeout(self, metadata):
        """A held lock makes a second writer give up after the timeout."""
        metadata.lock_timeout = 0.1
        metadata.lock_path.parent.mkdir(parents=True)

        with FileLock(metadata.lock_path, timeout=1):
            with pytest.raises(StoreLockTimeoutError, match="could not acquire metadata lock"):
                with metadata.transaction():
                    pass
