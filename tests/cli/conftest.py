"""Shared fixtures for CLI tests."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

from linkdrift.cli import output


@pytest.fixture
def console(monkeypatch: pytest.MonkeyPatch) -> Console:
    """Replace the output console with a plain-text in-memory one."""
    plain = Console(file=io.StringIO(), width=200, color_system=None)
    monkeypatch.setattr(output, "console", plain)
    return plain


def console_text(console: Console) -> str:
    """Everything written to a console created by the ``console`` fixture."""
    return console.file.getvalue()


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty home directory, so no user npmrc is read."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.delenv("npm_config_registry", raising=False)
    return home_dir
