"""Registry metadata models and the metadata fetcher.

A package's registry document ("packument") lists every published version
together with the ``package.json`` it was published with. The only fields
the checker needs are the version string, the ``gitHead`` commit the
release was built from, and the declared dependencies.

Usage::

    metadata = await fetch_package_metadata("left-pad", RegistryConfig())
    metadata.versions["1.2.0"].source_commit
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from linkdrift.core.semver import is_exact_version
from linkdrift.registry.config import (
    RegistryConfig,
    auth_for,
    package_url,
    registry_url_for,
)
from linkdrift.registry.http_client import fetch_json

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReleaseRecord:
    """Metadata of a single published version.

    Attributes:
        version: The semantic version string.
        source_commit: Commit hash the release was built from (``gitHead``),
            or None when the publisher did not record it.
        declared_dependencies: Dependency name -> required range string.
    """

    version: str
    source_commit: str | None = None
    declared_dependencies: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PackageMetadata:
    """Published metadata of a package.

    Attributes:
        name: Package name as reported by the registry.
        versions: Version string -> ``ReleaseRecord``, in registry order.
            Every key is a valid semantic version.
    """

    name: str
    versions: Mapping[str, ReleaseRecord] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _release_from(version: str, doc: Any) -> ReleaseRecord:
    doc = doc if isinstance(doc, dict) else {}
    git_head = doc.get("gitHead")
    deps = doc.get("dependencies")
    return ReleaseRecord(
        version=version,
        source_commit=git_head if isinstance(git_head, str) and git_head else None,
        declared_dependencies=(
            {str(k): str(v) for k, v in deps.items()} if isinstance(deps, dict) else {}
        ),
    )


def parse_package_metadata(package_name: str, data: Mapping[str, Any]) -> PackageMetadata:
    """Convert a registry document into ``PackageMetadata``.

    Versions whose key is not a valid semantic version are dropped.

    Args:
        package_name: Requested package name (fallback when the document has none).
        data: Decoded registry JSON document.

    Returns:
        The parsed metadata.
    """
    raw_versions = data.get("versions")
    versions: dict[str, ReleaseRecord] = {}
    if isinstance(raw_versions, dict):
        for version, doc in raw_versions.items():
            if not is_exact_version(version):
                logger.debug("Skipping invalid version %r of %s", version, package_name)
                continue
            versions[version] = _release_from(version, doc)
    name = data.get("name")
    return PackageMetadata(
        name=name if isinstance(name, str) and name else package_name,
        versions=versions,
    )


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------


async def fetch_package_metadata(
    package_name: str, config: RegistryConfig
) -> PackageMetadata:
    """Fetch the published metadata of a package.

    Args:
        package_name: Package name, optionally scoped.
        config: Registry configuration selecting endpoint and credentials.

    Returns:
        The package metadata.

    Raises:
        PackageNotFoundError: If the registry does not know the package.
        RegistryError: On any other fetch failure.
    """
    registry_url = registry_url_for(package_name, config)
    credential = auth_for(registry_url, config)
    headers = {"Authorization": credential.header} if credential else {}
    data = await fetch_json(
        package_url(package_name, registry_url),
        package_name=package_name,
        headers=headers,
    )
    metadata = parse_package_metadata(package_name, data)
    logger.debug(
        "Fetched %d versions of %s from %s", len(metadata.versions), package_name, registry_url
    )
    return metadata
