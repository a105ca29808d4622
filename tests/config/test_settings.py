"""
Unit tests for user settings loading.
"""

import logging

import pytest

from multirust.config.settings import (
    DEFAULT_CHANNELS,
    DEFAULT_DIST_ROOT,
    Settings,
)
from multirust.core.exceptions import ConfigurationError


class TestSettingsLoad:
    """Tests for Settings.load()."""

    def test_defaults_without_file(self, multirust_home):
        settings = Settings.load(multirust_home)

        assert settings.dist_root == DEFAULT_DIST_ROOT
        assert settings.channels == list(DEFAULT_CHANNELS)
        assert settings.lock_timeout == 30.0

    def test_values_from_yaml(self, multirust_home):
        multirust_home.mkdir()
        (multirust_home / "settings.yaml").write_text(
            "dist_root: https://mirror.example.org/dist\n"
            "channels: [stable, nightly]\n"
            "lock_timeout: 5\n"
        )

        settings = Settings.load(multirust_home)

        assert settings.dist_root == "https://mirror.example.org/dist"
        assert settings.channels == ["stable", "nightly"]
        assert settings.lock_timeout == 5.0

    def test_empty_file(self, multirust_home):
        multirust_home.mkdir()
        (multirust_home / "settings.yaml").write_text("")

        assert Settings.load(multirust_home) == Settings()

    def test_env_overrides_dist_root(self, multirust_home, monkeypatch):
        multirust_home.mkdir()
        (multirust_home / "settings.yaml").write_text("dist_root: https://a.example\n")
        monkeypatch.setenv("MULTIRUST_DIST_ROOT", "https://b.example")

        assert Settings.load(multirust_home).dist_root == "https://b.example"

    def test_invalid_yaml(self, multirust_home):
        multirust_home.mkdir()
        (multirust_home / "settings.yaml").write_text("channels: [stable\n")

        with pytest.raises(ConfigurationError, match="invalid YAML"):
            Settings.load(multirust_home)

    def test_top_level_not_mapping(self, multirust_home):
        multirust_home.mkdir()
        (multirust_home / "settings.yaml").write_text("- stable\n- nightly\n")

        with pytest.raises(ConfigurationError, match="expected a mapping"):
            Settings.load(multirust_home)


class TestSettingsFromDict:
    """Tests for Settings.from_dict() validation."""

    @pytest.mark.parametrize(
        "data,field",
        [
            ({"dist_root": 42}, "dist_root"),
            ({"dist_root": ""}, "dist_root"),
            ({"channels": "stable"}, "channels"),
            ({"channels": ["stable", 1]}, "channels"),
            ({"lock_timeout": "soon"}, "lock_timeout"),
            ({"lock_timeout": True}, "lock_timeout"),
        ],
    )
    def test_invalid_types(self, data, field):
        with pytest.raises(ConfigurationError, match=field):
            Settings.from_dict(data)

    def test_unknown_keys_warn(self, caplog):
        caplog.set_level(logging.WARNING, logger="multirust.config.settings")

        Settings.from_dict({"aliases": {}})

        assert "Ignoring unknown settings" in caplog.text
        assert "aliases" in caplog.text
