"""npm registry access: endpoint/credential resolution and metadata fetching.

Public API::

    from linkdrift.registry import RegistryConfig, fetch_package_metadata
    from linkdrift.registry.config import load_registry_config
"""

from __future__ import annotations

from linkdrift.registry.config import (
    DEFAULT_REGISTRY,
    RegistryConfig,
    RegistryCredential,
    auth_for,
    load_registry_config,
    registry_url_for,
)
from linkdrift.registry.metadata import (
    PackageMetadata,
    ReleaseRecord,
    fetch_package_metadata,
    parse_package_metadata,
)

__all__ = [
    "DEFAULT_REGISTRY",
    "PackageMetadata",
    "RegistryConfig",
    "RegistryCredential",
    "ReleaseRecord",
    "auth_for",
    "fetch_package_metadata",
    "load_registry_config",
    "parse_package_metadata",
    "registry_url_for",
]
