"""Discovery of linked (symlinked) dependencies in a dependency directory.

Top-level entries of ``node_modules`` are packages, except entries starting
with ``@``, which are scope directories holding the packages of that scope
one level deeper. An entry is a linked dependency when the entry itself is
a symbolic link (``npm link``, ``yarn link``, workspaces); real directories
are ordinary installed packages and are skipped.

Usage::

    for dep in LinkedPackageScan(project / "node_modules"):
        print(dep.name, dep.path)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from linkdrift.discovery.models import LinkedDependency
from linkdrift.exceptions import DependencyDirectoryNotFoundError

logger = logging.getLogger(__name__)

SCOPE_MARKER: str = "@"


def _sorted_entries(directory: Path) -> list[Path]:
    # Hidden entries (.bin, .package-lock.json, .cache) are npm bookkeeping.
    return sorted(
        (entry for entry in directory.iterdir() if not entry.name.startswith(".")),
        key=lambda entry: entry.name,
    )


def iter_packages(dependency_dir: Path) -> Iterator[tuple[str, Path]]:
    """Yield ``(name, entry_path)`` for every installed package entry.

    Args:
        dependency_dir: The dependency directory (``node_modules``).

    Yields:
        Package name and the path of its entry, scoped packages as
        ``@scope/name``.

    Raises:
        DependencyDirectoryNotFoundError: If *dependency_dir* does not exist.
    """
    if not dependency_dir.is_dir():
        raise DependencyDirectoryNotFoundError(
            f"No dependency directory at {dependency_dir}; are dependencies installed?"
        )
    for entry in _sorted_entries(dependency_dir):
        if entry.name.startswith(SCOPE_MARKER):
            if not entry.is_dir():
                continue
            for scoped in _sorted_entries(entry):
                yield f"{entry.name}/{scoped.name}", scoped
        else:
            yield entry.name, entry


def iter_linked_packages(dependency_dir: Path) -> Iterator[LinkedDependency]:
    """Yield the installed packages whose entry is a symbolic link.

    Raises:
        DependencyDirectoryNotFoundError: If *dependency_dir* does not exist.
    """
    for name, entry in iter_packages(dependency_dir):
        if not entry.is_symlink():
            continue
        target = entry.resolve()
        logger.debug("Linked package %s -> %s", name, target)
        yield LinkedDependency(name=name, path=target, link_path=entry.absolute())


class LinkedPackageScan:
    """Restartable, lazy sequence of the linked packages in a directory.

    Every iteration re-enumerates the directory, so the scan reflects links
    created or removed since the previous pass.

    Args:
        dependency_dir: The dependency directory (``node_modules``).
    """

    def __init__(self, dependency_dir: Path) -> None:
        self.dependency_dir = dependency_dir

    def __iter__(self) -> Iterator[LinkedDependency]:
        return iter_linked_packages(self.dependency_dir)

    def __repr__(self) -> str:
        return f"LinkedPackageScan({str(self.dependency_dir)!r})"
