"""
Unit tests for the directory override store.
"""

import logging
import os

import pytest

from multirust.config.metadata import MetadataFile
from multirust.config.overrides import Override, OverrideStore, default_reason
from multirust.core.notify import Notifier


@pytest.fixture
def store(tmp_path):
    metadata = MetadataFile(tmp_path / "metadata.json", tmp_path / "lock" / "metadata.lock")
    return OverrideStore(metadata, Notifier())


class TestOverrideStore:
    def test_add_and_find(self, store, tmp_path):
        project = tmp_path / "proj"

        stored = store.add(project, "nightly")
        found = store.find(project)

        assert found == stored
        assert found.toolchain == "nightly"
        assert found.reason == default_reason(str(project))

    def test_custom_reason(self, store, tmp_path):
        store.add(tmp_path, "beta", reason="pinned for CI")

        assert store.find(tmp_path).reason == "pinned for CI"

    def test_replace_existing(self, store, tmp_path):
        store.add(tmp_path, "stable")
        store.add(tmp_path, "nightly")

        assert store.find(tmp_path).toolchain == "nightly"
        assert len(store.list()) == 1

    def test_exact_directory_only(self, store, tmp_path):
        """An override does not apply to subdirectories."""
        store.add(tmp_path / "proj", "nightly")

        assert store.find(tmp_path / "proj" / "src") is None
        assert store.find(tmp_path) is None

    def test_normalized_key(self, store, tmp_path):
        store.add(tmp_path / "proj" / ".." / "proj", "nightly")

        assert store.find(tmp_path / "proj").directory == os.path.abspath(
            str(tmp_path / "proj")
        )

    def test_remove_is_idempotent(self, store, tmp_path):
        store.add(tmp_path, "nightly")

        assert store.remove(tmp_path) is True
        assert store.remove(tmp_path) is False
        assert store.find(tmp_path) is None
        assert store.list() == []

    def test_remove_notifications(self, store, tmp_path, caplog):
        caplog.set_level(logging.INFO, logger="multirust.notify")
        store.add(tmp_path, "nightly")
        store.remove(tmp_path)
        store.remove(tmp_path)

        messages = [r.getMessage() for r in caplog.records]
        assert f"info: override toolchain for '{tmp_path}' set to 'nightly'" in messages
        assert f"info: override removed for '{tmp_path}'" in messages
        assert f"info: no override for directory '{tmp_path}'" in messages

    def test_list_sorted_regardless_of_insertion(self, store, tmp_path):
        for name in ("zeta", "alpha", "mid"):
            store.add(tmp_path / name, "stable")

        listed = [o.directory for o in store.list()]

        assert listed == sorted(listed)
        assert len(listed) == 3

    def test_str_is_tab_separated(self):
        assert str(Override("/home/alice/proj", "nightly", "r")) == "/home/alice/proj\tnightly"
