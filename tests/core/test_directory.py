"""
Unit tests for home directory resolution and path normalization.
"""

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from multirust.core.directory import (
    check_removable_home,
    current_dir,
    get_multirust_home,
    normalize_directory,
)
from multirust.core.exceptions import ConfigurationError, WorkingDirectoryError


class TestMultirustHome:
    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MULTIRUST_HOME", str(tmp_path / "custom"))

        assert get_multirust_home() == tmp_path / "custom"

    def test_default_under_user_home(self, isolated_home, monkeypatch):
        monkeypatch.delenv("MULTIRUST_HOME", raising=False)

        assert get_multirust_home() == isolated_home / ".multirust"


class TestCurrentDir:
    def test_returns_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert current_dir() == Path(os.getcwd())

    def test_removed_cwd(self):
        with patch("multirust.core.directory.os.getcwd", side_effect=FileNotFoundError("gone")):
            with pytest.raises(WorkingDirectoryError, match="could not locate working directory"):
                current_dir()


class TestNormalizeDirectory:
    def test_relative_made_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert normalize_directory("proj") == os.path.join(os.getcwd(), "proj")

    def test_dotdot_collapsed(self, tmp_path):
        path = tmp_path / "proj" / ".." / "other"

        assert normalize_directory(path) == str(tmp_path / "other")

    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
    def test_symlinks_not_resolved(self, tmp_path):
        real = tmp_path / "real"
        real.mkdir()
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)

        assert normalize_directory(link) == str(link)


class TestCheckRemovableHome:
    def test_dedicated_directory_allowed(self, isolated_home):
        check_removable_home(isolated_home / ".multirust")

    def test_missing_directory_allowed(self, isolated_home):
        check_removable_home(isolated_home / "not-created-yet")

    def test_user_home_refused(self, isolated_home):
        with pytest.raises(ConfigurationError, match="contains the user home"):
            check_removable_home(isolated_home)

    def test_ancestor_of_user_home_refused(self, isolated_home):
        with pytest.raises(ConfigurationError, match="contains the user home"):
            check_removable_home(isolated_home.parent)

    def test_filesystem_root_refused(self, isolated_home):
        root = Path(isolated_home.anchor)
        with pytest.raises(ConfigurationError, match="filesystem root"):
            check_removable_home(root)
