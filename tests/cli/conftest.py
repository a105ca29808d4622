"""
Fixtures for driving the CLI end to end.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from multirust.cli.parser import CLI


@pytest.fixture
def run_cli(multirust_home: Path):
    """
    Run the CLI in-process against the isolated home.

    The PATH self-test is reported as passing unless a test patches it.
    """

    def _run(*argv: str) -> int:
        with patch("multirust.cli.parser.proxies_active", return_value=True):
            return CLI().run(list(argv))

    return _run


@pytest.fixture
def answers(monkeypatch):
    """Feed canned answers to input() prompts; returns the prompts seen."""
    prompts = []

    def _feed(*replies: str):
        queue = list(replies)

        def fake_input(prompt=""):
            prompts.append(prompt)
            if not queue:
                raise EOFError
            return queue.pop(0)

        monkeypatch.setattr("builtins.input", fake_input)
        return prompts

    return _feed


@pytest.fixture
def fake_binary(tmp_path: Path, monkeypatch) -> Path:
    """A stand-in for the running multirust executable."""
    binary = tmp_path / "dist" / "multirust"
    binary.parent.mkdir(parents=True)
    binary.write_text("#!/bin/sh\necho multirust\n")
    binary.chmod(0o755)

    monkeypatch.setattr(
        "multirust.shims.installer.current_executable", lambda: binary
    )
    monkeypatch.setattr(
        "multirust.cli.commands.install.current_executable", lambda: binary
    )
    return binary
