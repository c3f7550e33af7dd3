"""Semantic version parsing and precedence ordering.

Implements SemVer 2.0.0 precedence (section 11): versions compare by
major, minor and patch numerically; a pre-release version has lower
precedence than the associated normal version; pre-release identifiers
compare left to right, numeric identifiers numerically and below
alphanumeric ones, and a shorter identifier list sorts first when all
preceding identifiers are equal. Build metadata never affects precedence.

References
----------
.. [SemVer] Preston-Werner, T. (2013). "Semantic Versioning 2.0.0."
   https://semver.org/
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering

from linkdrift.exceptions import InvalidVersionError

_NUMERIC = r"0|[1-9]\d*"
_PRE_IDENT = rf"(?:{_NUMERIC}|\d*[a-zA-Z-][0-9a-zA-Z-]*)"

_SEMVER_RE = re.compile(
    rf"^v?(?P<major>{_NUMERIC})\.(?P<minor>{_NUMERIC})\.(?P<patch>{_NUMERIC})"
    rf"(?:-(?P<pre>{_PRE_IDENT}(?:\.{_PRE_IDENT})*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$",
    re.ASCII,
)

PrereleaseId = int | str


def _split_prerelease(pre: str | None) -> tuple[PrereleaseId, ...]:
    if not pre:
        return ()
    return tuple(int(part) if part.isdigit() else part for part in pre.split("."))


def _prerelease_key(prerelease: tuple[PrereleaseId, ...]) -> tuple:
    # A release (no identifiers) outranks every pre-release of the same triple.
    if not prerelease:
        return (1,)
    return (0, tuple((0, p) if isinstance(p, int) else (1, p) for p in prerelease))


@total_ordering
@dataclass(frozen=True, eq=False)
class SemVer:
    """A parsed semantic version.

    Equality and hashing ignore build metadata, matching precedence rules.

    Attributes:
        major: Major version number.
        minor: Minor version number.
        patch: Patch version number.
        prerelease: Pre-release identifiers, numeric ones as ``int``.
        build: Build metadata identifiers (informational only).
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[PrereleaseId, ...] = ()
    build: tuple[str, ...] = field(default=())

    @property
    def release(self) -> tuple[int, int, int]:
        """The (major, minor, patch) triple."""
        return self.major, self.minor, self.patch

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def sort_key(self) -> tuple:
        """Total-order key implementing SemVer precedence."""
        return (self.major, self.minor, self.patch, _prerelease_key(self.prerelease))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.sort_key() == other.sort_key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __hash__(self) -> int:
        return hash(self.sort_key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(str(p) for p in self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text

    def __repr__(self) -> str:
        return f"SemVer({str(self)!r})"


def parse_version(text: str) -> SemVer:
    """Parse a semantic version string.

    Surrounding whitespace and a single leading ``v`` are accepted.

    Args:
        text: Version string (e.g., "1.2.3", "v2.0.0-rc.1+build.5").

    Returns:
        The parsed ``SemVer``.

    Raises:
        InvalidVersionError: If the string is not a valid semantic version.
    """
    m = _SEMVER_RE.match(text.strip()) if isinstance(text, str) else None
    if not m:
        raise InvalidVersionError(f"Invalid semantic version: {text!r}")
    build = m.group("build")
    return SemVer(
        major=int(m.group("major")),
        minor=int(m.group("minor")),
        patch=int(m.group("patch")),
        prerelease=_split_prerelease(m.group("pre")),
        build=tuple(build.split(".")) if build else (),
    )


def is_exact_version(text: str) -> bool:
    """Return True if *text* is a single exact version rather than a range."""
    try:
        parse_version(text)
    except InvalidVersionError:
        return False
    return True
