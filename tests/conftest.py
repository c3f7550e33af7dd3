"""Shared fixtures for linkdrift tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from linkdrift.checker import Project
from linkdrift.registry.config import RegistryConfig
from linkdrift.registry.metadata import PackageMetadata
from tests.helpers import make_metadata


@pytest.fixture
def left_pad_metadata() -> PackageMetadata:
    """Registry metadata for left-pad: 1.1.0@aaa, 1.2.0@bbb, 1.3.0@ccc."""
    return make_metadata(
        "left-pad",
        {"1.1.0": "aaa", "1.2.0": "bbb", "1.3.0": "ccc"},
    )


@pytest.fixture
def project(tmp_path: Path) -> Project:
    """A consuming project with an empty node_modules and a left-pad requirement."""
    project_dir = tmp_path / "app"
    (project_dir / "node_modules").mkdir(parents=True)
    (project_dir / "package.json").write_text(
        '{"name": "app", "dependencies": {"left-pad": "^1.2.0"}}'
    )
    return Project.at(project_dir, RegistryConfig())
