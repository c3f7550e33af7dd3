"""Consumer manifest (``package.json``) access.

Only the declared requirement of a dependency is needed. Dependency tables
are searched in install-relevance order, so a linked package declared as a
dev dependency is still checked.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from linkdrift.exceptions import ManifestError

logger = logging.getLogger(__name__)

MANIFEST_NAME: str = "package.json"

DEPENDENCY_TABLES: tuple[str, ...] = (
    "dependencies",
    "devDependencies",
    "optionalDependencies",
)


def read_manifest(path: Path) -> dict[str, Any]:
    """Read and decode a manifest file.

    Raises:
        ManifestError: If the file is missing, unreadable or not a JSON object.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ManifestError(f"Cannot read manifest {path}: {exc}") from exc
    except ValueError as exc:
        raise ManifestError(f"Invalid JSON in manifest {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(f"Manifest {path} is not a JSON object")
    return data


def declared_range(manifest: dict[str, Any], package_name: str) -> str | None:
    """Return the requirement declared for *package_name*, or None if undeclared."""
    for table in DEPENDENCY_TABLES:
        deps = manifest.get(table)
        if isinstance(deps, dict) and isinstance(deps.get(package_name), str):
            return deps[package_name]
    return None
