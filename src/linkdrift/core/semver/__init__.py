"""Semantic versions and npm-style version ranges.

Public API::

    from linkdrift.core.semver import VersionRange, lowest_matching

    VersionRange("^1.2.0").satisfies("1.4.1")  # True
    lowest_matching(["1.1.0", "1.2.0", "1.3.0"], VersionRange("^1.2.0").satisfies)  # "1.2.0"
"""

from __future__ import annotations

from linkdrift.core.semver.ranges import Comparator, VersionRange, lowest_matching
from linkdrift.core.semver.version import SemVer, is_exact_version, parse_version

__all__ = [
    "Comparator",
    "SemVer",
    "VersionRange",
    "is_exact_version",
    "lowest_matching",
    "parse_version",
]
