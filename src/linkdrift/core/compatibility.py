"""Compatibility of a resolved version with a declared requirement.

``check_compatibility`` is a pure function of the resolved version, the
declared requirement and the published versions. An exact-version
requirement (``"1.2.0"``) is read as a minimum: a linked working copy built
on a later release is still compatible. Any other requirement uses npm
range semantics.

On a violation, the lowest published version meeting the requirement is
suggested together with a short form of the commit it was built from.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from linkdrift.core.semver import (
    SemVer,
    VersionRange,
    is_exact_version,
    lowest_matching,
    parse_version,
)
from linkdrift.exceptions import InvalidRangeError

if TYPE_CHECKING:
    from linkdrift.registry.metadata import ReleaseRecord

# Length of commit hashes shown to the operator.
SHORT_COMMIT_LENGTH: int = 7

# Reasons reported for unresolvable checks.
REASON_NOT_IN_REGISTRY: str = "package not found in registry"
REASON_NO_RELEASED_VERSION: str = "no released version found for linked HEAD ancestry"
REASON_NOT_DECLARED: str = "package is not declared in the manifest"
REASON_INVALID_RANGE: str = "declared requirement is not a semantic-version range"


class VerdictStatus(Enum):
    """Outcome classes of a compatibility check."""

    SATISFIED = "satisfied"
    VIOLATED = "violated"
    UNRESOLVABLE = "unresolvable"


@dataclass(frozen=True)
class CompatibilityVerdict:
    """Result of checking a linked dependency against its requirement.

    Attributes:
        status: Outcome class.
        version: The resolved version (None when unresolvable).
        range: The declared requirement.
        minimum_version: Lowest published version meeting the requirement
            (violations only, when one exists).
        minimum_commit: Short source commit of ``minimum_version``, when recorded.
        reason: Why the check is unresolvable.
    """

    status: VerdictStatus
    version: str | None = None
    range: str | None = None
    minimum_version: str | None = None
    minimum_commit: str | None = None
    reason: str | None = None

    @classmethod
    def satisfied(cls, version: str, range_: str) -> CompatibilityVerdict:
        return cls(VerdictStatus.SATISFIED, version=version, range=range_)

    @classmethod
    def violated(
        cls,
        version: str,
        range_: str,
        minimum_version: str | None = None,
        minimum_commit: str | None = None,
    ) -> CompatibilityVerdict:
        return cls(
            VerdictStatus.VIOLATED,
            version=version,
            range=range_,
            minimum_version=minimum_version,
            minimum_commit=minimum_commit,
        )

    @classmethod
    def unresolvable(
        cls, reason: str, version: str | None = None, range_: str | None = None
    ) -> CompatibilityVerdict:
        return cls(VerdictStatus.UNRESOLVABLE, version=version, range=range_, reason=reason)

    @property
    def is_satisfied(self) -> bool:
        return self.status is VerdictStatus.SATISFIED

    @property
    def is_violated(self) -> bool:
        return self.status is VerdictStatus.VIOLATED

    @property
    def is_unresolvable(self) -> bool:
        return self.status is VerdictStatus.UNRESOLVABLE


def shorten_commit(commit: str) -> str:
    """Truncate a commit hash to its display form."""
    return commit[:SHORT_COMMIT_LENGTH]


def requirement_predicate(declared_range: str) -> Callable[[SemVer], bool]:
    """Build the satisfaction test for a declared requirement.

    Raises:
        InvalidRangeError: If the requirement is neither a version nor a range.
    """
    if is_exact_version(declared_range):
        minimum = parse_version(declared_range)
        return lambda version: version >= minimum
    return VersionRange(declared_range).satisfies


def check_compatibility(
    resolved_version: str | None,
    declared_range: str,
    all_versions: Mapping[str, ReleaseRecord],
) -> CompatibilityVerdict:
    """Classify a resolved version against a declared requirement.

    Args:
        resolved_version: Closest released version of the linked HEAD, or None.
        declared_range: Requirement from the consumer manifest.
        all_versions: Published versions of the package.

    Returns:
        ``Satisfied``, ``Violated`` (with the minimum satisfying version and
        commit when computable) or ``Unresolvable``.
    """
    if resolved_version is None:
        return CompatibilityVerdict.unresolvable(REASON_NO_RELEASED_VERSION, range_=declared_range)
    try:
        predicate = requirement_predicate(declared_range)
    except InvalidRangeError:
        return CompatibilityVerdict.unresolvable(
            REASON_INVALID_RANGE, version=resolved_version, range_=declared_range
        )

    if predicate(parse_version(resolved_version)):
        return CompatibilityVerdict.satisfied(resolved_version, declared_range)

    minimum = lowest_matching(all_versions, predicate)
    commit = all_versions[minimum].source_commit if minimum is not None else None
    return CompatibilityVerdict.violated(
        resolved_version,
        declared_range,
        minimum_version=minimum,
        minimum_commit=shorten_commit(commit) if commit else None,
    )
