"""Shared test helpers for building registry metadata and linked projects."""

from __future__ import annotations

import os
from pathlib import Path

from linkdrift.registry.metadata import PackageMetadata, ReleaseRecord


def make_metadata(name: str, commits: dict[str, str | None]) -> PackageMetadata:
    """Build PackageMetadata from a version -> source commit mapping."""
    return PackageMetadata(
        name=name,
        versions={
            version: ReleaseRecord(version=version, source_commit=commit)
            for version, commit in commits.items()
        },
    )


def make_registry_document(name: str, commits: dict[str, str | None]) -> dict:
    """Build a registry JSON document as served by npm."""
    versions = {}
    for version, commit in commits.items():
        doc: dict = {"name": name, "version": version}
        if commit is not None:
            doc["gitHead"] = commit
        versions[version] = doc
    return {"name": name, "dist-tags": {}, "versions": versions}


def link_package(node_modules: Path, name: str, target: Path) -> Path:
    """Symlink *target* into *node_modules* as package *name*."""
    link = node_modules / name
    link.parent.mkdir(parents=True, exist_ok=True)
    target.mkdir(parents=True, exist_ok=True)
    os.symlink(target, link, target_is_directory=True)
    return link


def install_package(node_modules: Path, name: str) -> Path:
    """Create a regular (non-linked) installed package directory."""
    pkg = node_modules / name
    pkg.mkdir(parents=True)
    (pkg / "package.json").write_text(f'{{"name": "{name}"}}')
    return pkg


async def async_iter(items):
    """Yield *items* from an async generator."""
    for item in items:
        yield item
