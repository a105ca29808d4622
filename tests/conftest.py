"""
Pytest configuration and shared fixtures for multirust tests.
"""

import logging
from pathlib import Path
from typing import Callable, Iterable

import pytest

from multirust.config.settings import Settings
from multirust.config.store import ConfigStore
from multirust.core.filesystem import EXE_SUFFIX
from multirust.core.notify import Notifier
from multirust.core.platform import PlatformInfo

LINUX_X64 = PlatformInfo(os="linux", arch="x64")


def write_fake_tool(bin_dir: Path, tool: str, output: str = "") -> Path:
    """Write an executable shell script standing in for a toolchain binary."""
    bin_dir.mkdir(parents=True, exist_ok=True)
    path = bin_dir / f"{tool}{EXE_SUFFIX}"
    path.write_text(f'#!/bin/sh\necho "{output or tool}"\n', encoding="utf-8")
    path.chmod(0o755)
    return path


def populate_toolchain_dir(
    root: Path, name: str, tools: Iterable[str] = ("rustc", "cargo")
) -> Path:
    """Lay out a minimal toolchain (bin/ with fake tools, lib/) under root."""
    for tool in tools:
        write_fake_tool(root / "bin", tool, f"{tool} 1.0.0 ({name})")
    (root / "lib").mkdir(parents=True, exist_ok=True)
    return root


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Create isolated user home directory for tests."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))
    monkeypatch.delenv("MULTIRUST_DIST_ROOT", raising=False)
    monkeypatch.delenv("MULTIRUST_TOOLCHAIN", raising=False)

    return fake_home


@pytest.fixture
def multirust_home(isolated_home: Path, monkeypatch) -> Path:
    """multirust home directory inside the isolated user home."""
    home = isolated_home / ".multirust"
    monkeypatch.setenv("MULTIRUST_HOME", str(home))
    return home


@pytest.fixture
def notifier() -> Notifier:
    return Notifier(verbose=True)


@pytest.fixture
def cfg(multirust_home: Path, notifier: Notifier) -> ConfigStore:
    """ConfigStore over an empty home with default settings."""
    return ConfigStore(
        multirust_home, notifier, settings=Settings(), platform_info=LINUX_X64
    )


@pytest.fixture
def install_toolchain(cfg: ConfigStore) -> Callable[..., Path]:
    """Factory that lays out a fake installed toolchain in the home directory."""

    def _install(name: str, tools: Iterable[str] = ("rustc", "cargo")) -> Path:
        return populate_toolchain_dir(cfg.toolchains_dir / name, name, tools)

    return _install


@pytest.fixture
def toolchain_source(tmp_path: Path) -> Callable[[str], Path]:
    """Factory for a local toolchain build directory outside the home."""

    def _make(name: str) -> Path:
        return populate_toolchain_dir(tmp_path / "builds" / name, name)

    return _make


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo logging.basicConfig(force=True) calls made by the CLI under test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def not_running_as_module(monkeypatch):
    """
    Treat the process as a standalone multirust executable.

    pytest itself may be started as ``python -m pytest``, which would make
    the installer write a launcher instead of copying the binary under test.
    """
    monkeypatch.setattr("multirust.shims.installer.running_as_module", lambda: False)
    monkeypatch.setattr(
        "multirust.cli.commands.install.running_as_module", lambda: False
    )
