"""Semantic-version ranges with npm (node-semver) semantics.

A range is a ``||``-separated union of comparator sets. Each comparator set
is a whitespace-separated conjunction of comparators, or a hyphen range.
Every shorthand desugars into primitive ``<``, ``<=``, ``>``, ``>=`` and
``=`` comparators:

- Hyphen:   ``1.2.3 - 2.3.4``  := ``>=1.2.3 <=2.3.4``
- X-range:  ``1.2.x``          := ``>=1.2.0 <1.3.0-0``
- Partial:  ``1``              := ``>=1.0.0 <2.0.0-0``
- Tilde:    ``~1.2.3``         := ``>=1.2.3 <1.3.0-0``
- Caret:    ``^0.2.3``         := ``>=0.2.3 <0.3.0-0``
- Wildcard: ``*`` or ``""``    := any version

A pre-release version only satisfies a comparator set when some comparator
in that set names a pre-release of the same major.minor.patch, so
``1.3.0-beta`` does not satisfy ``^1.2.0`` while ``1.2.0-rc.2`` satisfies
``>=1.2.0-rc.1``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from linkdrift.core.semver.version import (
    PrereleaseId,
    SemVer,
    _split_prerelease,
    parse_version,
)
from linkdrift.exceptions import InvalidRangeError, InvalidVersionError


# ---------------------------------------------------------------------------
# Grammar
# ---------------------------------------------------------------------------

_XID = r"0|[1-9]\d*|[xX*]"
_PRE_IDENT = r"(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
_PRE = rf"{_PRE_IDENT}(?:\.{_PRE_IDENT})*"
_BUILD = r"[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*"

_PARTIAL = (
    rf"=?v?(?P<major>{_XID})"
    rf"(?:\.(?P<minor>{_XID})"
    rf"(?:\.(?P<patch>{_XID})(?:-(?P<pre>{_PRE}))?(?:\+{_BUILD})?)?)?"
)

_TOKEN_RE = re.compile(rf"^(?P<op><=|>=|<|>|=|\^|~>|~)?{_PARTIAL}$", re.ASCII)
_PARTIAL_RE = re.compile(rf"^{_PARTIAL}$", re.ASCII)
_HYPHEN_RE = re.compile(r"^\s*(?P<low>\S+)\s+-\s+(?P<high>\S+)\s*$")
_OPERATOR_SPACE_RE = re.compile(r"(<=|>=|<|>|=|\^|~>|~)\s+")
_UNION_RE = re.compile(r"\s*\|\|\s*")

# Used as an upper bound so pre-releases of the next release are excluded.
_LOWEST_PRE: tuple[PrereleaseId, ...] = (0,)


# ---------------------------------------------------------------------------
# Comparator
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Comparator:
    """A primitive comparison against a single version.

    A comparator whose ``version`` is None matches every version.

    Attributes:
        operator: One of ``<``, ``<=``, ``>``, ``>=``, ``=``.
        version: The version compared against, or None for "any".
    """

    operator: str
    version: SemVer | None

    def test(self, version: SemVer) -> bool:
        """Return True if *version* satisfies this comparator."""
        if self.version is None:
            return True
        op = self.operator
        if op == "=":
            return version == self.version
        elif op == ">=":
            return version >= self.version
        elif op == "<=":
            return version <= self.version
        elif op == ">":
            return version > self.version
        elif op == "<":
            return version < self.version
        else:  # pragma: no cover
            raise InvalidRangeError(f"Unknown operator: {op!r}")

    def __str__(self) -> str:
        if self.version is None:
            return "*"
        return f"{self.operator}{self.version}"


ANY = Comparator("", None)


def _v(
    major: int, minor: int = 0, patch: int = 0, pre: tuple[PrereleaseId, ...] = ()
) -> SemVer:
    return SemVer(major, minor, patch, pre)


def _xpart(part: str | None) -> int | None:
    """Return the numeric value of a version part, or None for x/missing."""
    if part is None or part in ("x", "X", "*"):
        return None
    return int(part)


# ---------------------------------------------------------------------------
# Desugaring
# ---------------------------------------------------------------------------


def _caret(
    major: int | None, minor: int | None, patch: int | None,
    pre: tuple[PrereleaseId, ...],
) -> list[Comparator]:
    """Allow changes that do not modify the left-most non-zero part."""
    if major is None:
        return [ANY]
    if minor is None:
        return [Comparator(">=", _v(major)), Comparator("<", _v(major + 1, 0, 0, _LOWEST_PRE))]
    if patch is None:
        if major == 0:
            upper = _v(0, minor + 1, 0, _LOWEST_PRE)
        else:
            upper = _v(major + 1, 0, 0, _LOWEST_PRE)
        return [Comparator(">=", _v(major, minor)), Comparator("<", upper)]
    if major:
        upper = _v(major + 1, 0, 0, _LOWEST_PRE)
    elif minor:
        upper = _v(0, minor + 1, 0, _LOWEST_PRE)
    else:
        upper = _v(0, 0, patch + 1, _LOWEST_PRE)
    return [Comparator(">=", _v(major, minor, patch, pre)), Comparator("<", upper)]


def _tilde(
    major: int | None, minor: int | None, patch: int | None,
    pre: tuple[PrereleaseId, ...],
) -> list[Comparator]:
    """Allow patch-level changes when a minor is given, minor-level otherwise."""
    if major is None:
        return [ANY]
    if minor is None:
        return [Comparator(">=", _v(major)), Comparator("<", _v(major + 1, 0, 0, _LOWEST_PRE))]
    lower = _v(major, minor) if patch is None else _v(major, minor, patch, pre)
    return [Comparator(">=", lower), Comparator("<", _v(major, minor + 1, 0, _LOWEST_PRE))]


def _xrange(
    op: str, major: int | None, minor: int | None, patch: int | None,
    pre: tuple[PrereleaseId, ...],
) -> list[Comparator]:
    """Desugar a primitive comparator or an x-range/partial version."""
    if major is not None and minor is not None and patch is not None:
        return [Comparator(op or "=", _v(major, minor, patch, pre))]
    if op == "=":
        op = ""
    if major is None:
        if op in (">", "<"):
            # Nothing is greater or less than every version.
            return [Comparator("<", _v(0, 0, 0, _LOWEST_PRE))]
        return [ANY]
    if op:
        minor_missing = minor is None
        minor = 0 if minor is None else minor
        if op == ">":
            op = ">="
            if minor_missing:
                major, minor = major + 1, 0
            else:
                minor += 1
        elif op == "<=":
            op = "<"
            if minor_missing:
                major += 1
            else:
                minor += 1
        bound_pre = _LOWEST_PRE if op == "<" else ()
        return [Comparator(op, _v(major, minor, 0, bound_pre))]
    if minor is None:
        return [Comparator(">=", _v(major)), Comparator("<", _v(major + 1, 0, 0, _LOWEST_PRE))]
    return [Comparator(">=", _v(major, minor)), Comparator("<", _v(major, minor + 1, 0, _LOWEST_PRE))]


def _hyphen(low: str, high: str, raw: str) -> list[Comparator]:
    lm, hm = _PARTIAL_RE.match(low), _PARTIAL_RE.match(high)
    if not lm or not hm:
        raise InvalidRangeError(f"Invalid hyphen range: {raw!r}")

    comparators: list[Comparator] = []
    major, minor, patch = (_xpart(lm.group(g)) for g in ("major", "minor", "patch"))
    if major is not None:
        if minor is None:
            comparators.append(Comparator(">=", _v(major)))
        elif patch is None:
            comparators.append(Comparator(">=", _v(major, minor)))
        else:
            pre = _split_prerelease(lm.group("pre"))
            comparators.append(Comparator(">=", _v(major, minor, patch, pre)))

    major, minor, patch = (_xpart(hm.group(g)) for g in ("major", "minor", "patch"))
    if major is not None:
        if minor is None:
            comparators.append(Comparator("<", _v(major + 1, 0, 0, _LOWEST_PRE)))
        elif patch is None:
            comparators.append(Comparator("<", _v(major, minor + 1, 0, _LOWEST_PRE)))
        else:
            pre = _split_prerelease(hm.group("pre"))
            comparators.append(Comparator("<=", _v(major, minor, patch, pre)))
    return comparators or [ANY]


def _parse_token(token: str) -> list[Comparator]:
    m = _TOKEN_RE.match(token)
    if not m:
        raise InvalidRangeError(f"Invalid comparator: {token!r}")
    op = m.group("op") or ""
    major, minor, patch = (_xpart(m.group(g)) for g in ("major", "minor", "patch"))
    pre = _split_prerelease(m.group("pre"))
    if op == "^":
        return _caret(major, minor, patch, pre)
    if op in ("~", "~>"):
        return _tilde(major, minor, patch, pre)
    return _xrange(op, major, minor, patch, pre)


def _parse_set(text: str) -> tuple[Comparator, ...]:
    hyphen = _HYPHEN_RE.match(text)
    if hyphen:
        return tuple(_hyphen(hyphen.group("low"), hyphen.group("high"), text))
    comparators: list[Comparator] = []
    for token in _OPERATOR_SPACE_RE.sub(r"\1", text.strip()).split():
        comparators.extend(_parse_token(token))
    return tuple(comparators) or (ANY,)


def _test_set(comparators: tuple[Comparator, ...], version: SemVer) -> bool:
    if not all(c.test(version) for c in comparators):
        return False
    if not version.prerelease:
        return True
    return any(
        c.version is not None
        and c.version.prerelease
        and c.version.release == version.release
        for c in comparators
    )


# ---------------------------------------------------------------------------
# VersionRange
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VersionRange:
    """A semantic-version range expression, parsed with npm semantics.

    Attributes:
        raw: The range string as authored (e.g., "^1.2.0 || >=3.0.0").
        comparator_sets: Parsed union of comparator conjunctions.

    Raises:
        InvalidRangeError: On construction, if *raw* is not a valid range.
    """

    raw: str
    comparator_sets: tuple[tuple[Comparator, ...], ...] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if not isinstance(self.raw, str):
            raise InvalidRangeError(f"Invalid range: {self.raw!r}")
        sets = tuple(_parse_set(part) for part in _UNION_RE.split(self.raw.strip()))
        object.__setattr__(self, "comparator_sets", sets)

    def satisfies(self, version: str | SemVer) -> bool:
        """Check whether a version satisfies any comparator set of this range.

        Args:
            version: A semantic version string or parsed ``SemVer``.

        Returns:
            True if the version lies within the range.

        Raises:
            InvalidVersionError: If *version* is not a valid semantic version.
        """
        parsed = version if isinstance(version, SemVer) else parse_version(version)
        return any(_test_set(cset, parsed) for cset in self.comparator_sets)

    def __str__(self) -> str:
        return " || ".join(" ".join(str(c) for c in cset) for cset in self.comparator_sets)

    def __repr__(self) -> str:
        return f"VersionRange({self.raw!r})"


# ---------------------------------------------------------------------------
# Convenience functions
# ---------------------------------------------------------------------------


def lowest_matching(
    versions: Iterable[str], predicate: Callable[[SemVer], bool]
) -> str | None:
    """Return the lowest version string in *versions* accepted by *predicate*.

    Strings that are not valid versions are ignored.
    """
    best: tuple[SemVer, str] | None = None
    for text in versions:
        try:
            parsed = parse_version(text)
        except InvalidVersionError:
            continue
        if predicate(parsed) and (best is None or parsed < best[0]):
            best = (parsed, text)
    return best[1] if best else None
