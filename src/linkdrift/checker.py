"""Per-dependency compatibility checks and the sequential initial pass.

``check_dependency`` is the boundary at which recoverable conditions end:
a package unknown to the registry, a linked history containing no released
commit, or a missing/non-semver requirement all become ``Unresolvable``
verdicts. Git, transport and manifest failures propagate to the caller.

Every check fetches fresh metadata and re-reads the manifest; nothing is
cached between checks.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

from linkdrift.core.compatibility import (
    REASON_NOT_DECLARED,
    REASON_NOT_IN_REGISTRY,
    REASON_NO_RELEASED_VERSION,
    CompatibilityVerdict,
    check_compatibility,
)
from linkdrift.core.git import find_repo_root
from linkdrift.core.resolver import find_closest_version
from linkdrift.discovery import LinkedDependency, LinkedPackageScan
from linkdrift.exceptions import PackageNotFoundError
from linkdrift.manifest import MANIFEST_NAME, declared_range, read_manifest
from linkdrift.registry.config import RegistryConfig, load_registry_config
from linkdrift.registry.metadata import fetch_package_metadata

logger = logging.getLogger(__name__)

DEPENDENCY_DIR_NAME: str = "node_modules"
NPMRC_NAME: str = ".npmrc"


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Project:
    """The consuming project whose linked dependencies are checked.

    Attributes:
        project_dir: Root directory of the consuming project.
        manifest_path: The project's ``package.json``.
        dependency_dir: The project's ``node_modules``.
        registry_config: Registry endpoints and credentials.
    """

    project_dir: Path
    manifest_path: Path
    dependency_dir: Path
    registry_config: RegistryConfig

    @classmethod
    def at(cls, project_dir: Path, registry_config: RegistryConfig) -> Project:
        """Describe a project laid out the standard npm way."""
        return cls(
            project_dir=project_dir,
            manifest_path=project_dir / MANIFEST_NAME,
            dependency_dir=project_dir / DEPENDENCY_DIR_NAME,
            registry_config=registry_config,
        )

    @classmethod
    def load(cls, project_dir: Path, home: Path, env: Mapping[str, str]) -> Project:
        """Describe a project, reading registry settings from user and project npmrc."""
        config = load_registry_config(
            [home / NPMRC_NAME, project_dir / NPMRC_NAME], env
        )
        return cls.at(project_dir, config)


@dataclass(frozen=True)
class CheckResult:
    """Outcome of checking one linked dependency.

    Attributes:
        dependency: The linked dependency that was checked.
        repo_root: Top-level directory of its linked working copy.
        verdict: Compatibility verdict.
    """

    dependency: LinkedDependency
    repo_root: Path
    verdict: CompatibilityVerdict


class Reporter:
    """Receives check progress. The base implementation ignores everything."""

    def result(self, result: CheckResult) -> None:
        """Called once per completed check."""

    def head_changed(self, dependency: LinkedDependency) -> None:
        """Called before a watch-triggered re-check starts."""

    def watching(self) -> None:
        """Called once all watches of the initial pass are registered."""


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


async def check_dependency(
    dependency: LinkedDependency, repo_root: Path, project: Project
) -> CheckResult:
    """Check one linked dependency against the project's requirement.

    Args:
        dependency: The linked dependency.
        repo_root: Top-level directory of its linked working copy.
        project: The consuming project.

    Returns:
        The check result; recoverable conditions yield ``Unresolvable``.

    Raises:
        RegistryError: On registry failures other than 404.
        GitError: If the linked history cannot be read.
        ManifestError: If the project manifest cannot be read.
    """
    def done(verdict: CompatibilityVerdict) -> CheckResult:
        return CheckResult(dependency=dependency, repo_root=repo_root, verdict=verdict)

    try:
        metadata = await fetch_package_metadata(dependency.name, project.registry_config)
    except PackageNotFoundError:
        logger.info("Package %s not found in registry", dependency.name)
        return done(CompatibilityVerdict.unresolvable(REASON_NOT_IN_REGISTRY))

    version = await find_closest_version(repo_root, metadata)
    if version is None:
        logger.info("No released version of %s in %s history", dependency.name, repo_root)
        return done(CompatibilityVerdict.unresolvable(REASON_NO_RELEASED_VERSION))

    requirement = declared_range(read_manifest(project.manifest_path), dependency.name)
    if requirement is None:
        return done(CompatibilityVerdict.unresolvable(REASON_NOT_DECLARED, version=version))

    verdict = check_compatibility(version, requirement, metadata.versions)
    logger.debug("%s %s vs %s: %s", dependency.name, version, requirement, verdict.status.value)
    return done(verdict)


async def run_checks(
    project: Project,
    reporter: Reporter,
    *,
    on_checked: Callable[[LinkedDependency, Path], None] | None = None,
) -> list[CheckResult]:
    """Check every linked dependency of a project, one after another.

    Each dependency is fully checked and reported before the next starts.

    Args:
        project: The consuming project.
        reporter: Receives each result as soon as it is available.
        on_checked: Called after each dependency's first check, e.g. to
            start watching its repository.

    Returns:
        Results in discovery order.

    Raises:
        DependencyDirectoryNotFoundError: If the project has no node_modules.
        LinkDriftError: Any non-recoverable failure, aborting the pass.
    """
    results: list[CheckResult] = []
    for dependency in LinkedPackageScan(project.dependency_dir):
        repo_root = await find_repo_root(dependency.path)
        logger.debug("Checking %s (%s -> %s)", dependency.name, dependency.link_path, repo_root)
        result = await check_dependency(dependency, repo_root, project)
        reporter.result(result)
        results.append(result)
        if on_checked is not None:
            on_checked(dependency, repo_root)
    return results
