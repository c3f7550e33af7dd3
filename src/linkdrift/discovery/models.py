"""Data models for the discovery module."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class LinkedDependency:
    """An installed dependency that is a symlink to an external working copy.

    Attributes:
        name: Package name, including the scope for scoped packages
            (``@scope/name``).
        path: Absolute path of the symlink target.
        link_path: Path of the symlink inside the dependency directory.
    """

    name: str
    path: Path
    link_path: Path
