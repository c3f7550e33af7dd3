"""Tests for VersionRange parsing and satisfaction with npm semantics.

Covers primitive comparators, caret, tilde, x-ranges, partial versions,
hyphen ranges, unions and the pre-release exclusion rule.
"""

from __future__ import annotations

import pytest

from linkdrift.core.semver import VersionRange, lowest_matching
from linkdrift.exceptions import InvalidRangeError, InvalidVersionError


def _sat(range_text: str, version: str) -> bool:
    return VersionRange(range_text).satisfies(version)


class TestPrimitiveComparators:
    """Tests for <, <=, >, >=, = and bare versions."""

    def test_exact_match(self) -> None:
        """A bare or '=' version matches only itself."""
        assert _sat("1.2.3", "1.2.3") is True
        assert _sat("=1.2.3", "1.2.3") is True
        assert _sat("1.2.3", "1.2.4") is False

    def test_gte(self) -> None:
        assert _sat(">=1.0.0", "1.0.0") is True
        assert _sat(">=1.0.0", "0.9.9") is False

    def test_lt_is_exclusive(self) -> None:
        assert _sat("<2.0.0", "2.0.0") is False
        assert _sat("<2.0.0", "1.99.99") is True

    def test_operator_whitespace(self) -> None:
        """Whitespace between operator and version is allowed."""
        assert _sat(">= 1.2.0 < 2", "1.5.0") is True
        assert _sat(">= 1.2.0 < 2", "2.0.0") is False

    def test_conjunction(self) -> None:
        """Space-separated comparators must all hold."""
        vr = VersionRange(">=1.0.0 <1.5.0")
        assert vr.satisfies("1.4.9") is True
        assert vr.satisfies("1.5.0") is False


class TestCaret:
    """Tests for ^ ranges."""

    @pytest.mark.parametrize(
        ("range_text", "inside", "outside"),
        [
            ("^1.2.3", ["1.2.3", "1.9.9"], ["1.2.2", "2.0.0"]),
            ("^0.2.3", ["0.2.3", "0.2.9"], ["0.3.0", "0.2.2"]),
            ("^0.0.3", ["0.0.3"], ["0.0.4", "0.0.2"]),
            ("^1.2.x", ["1.2.0", "1.99.0"], ["2.0.0", "1.1.9"]),
            ("^0.0.x", ["0.0.0", "0.0.9"], ["0.1.0"]),
            ("^1.x", ["1.0.0", "1.9.0"], ["2.0.0"]),
            ("^0.x", ["0.0.0", "0.9.9"], ["1.0.0"]),
        ],
    )
    def test_caret_bounds(
        self, range_text: str, inside: list[str], outside: list[str]
    ) -> None:
        """Caret allows changes right of the left-most non-zero part."""
        for version in inside:
            assert _sat(range_text, version), f"{version} should satisfy {range_text}"
        for version in outside:
            assert not _sat(range_text, version), f"{version} should not satisfy {range_text}"

    def test_caret_with_prerelease(self) -> None:
        """^1.2.3-beta.2 admits later pre-releases of 1.2.3 only."""
        assert _sat("^1.2.3-beta.2", "1.2.3-beta.4") is True
        assert _sat("^1.2.3-beta.2", "1.2.4-beta.2") is False
        assert _sat("^1.2.3-beta.2", "1.3.0") is True


class TestTilde:
    """Tests for ~ and ~> ranges."""

    def test_tilde_full(self) -> None:
        assert _sat("~1.2.3", "1.2.9") is True
        assert _sat("~1.2.3", "1.3.0") is False

    def test_tilde_partial(self) -> None:
        assert _sat("~1.2", "1.2.0") is True
        assert _sat("~1", "1.9.0") is True
        assert _sat("~1", "2.0.0") is False

    def test_tilde_greater(self) -> None:
        """'~>' is an alias of '~'."""
        assert _sat("~>1.2.3", "1.2.5") is True


class TestXRanges:
    """Tests for wildcards and partial versions."""

    @pytest.mark.parametrize("range_text", ["*", "", "x", "X"])
    def test_any(self, range_text: str) -> None:
        assert _sat(range_text, "0.0.1") is True
        assert _sat(range_text, "99.0.0") is True

    def test_partial_major(self) -> None:
        assert _sat("1", "1.5.0") is True
        assert _sat("1.x", "2.0.0") is False

    def test_partial_minor(self) -> None:
        assert _sat("1.2", "1.2.7") is True
        assert _sat("1.2.*", "1.3.0") is False

    def test_gt_partial(self) -> None:
        """>1 := >=2.0.0, >1.2 := >=1.3.0."""
        assert _sat(">1", "1.9.9") is False
        assert _sat(">1", "2.0.0") is True
        assert _sat(">1.2", "1.3.0") is True

    def test_lte_partial(self) -> None:
        """<=1.2 includes every 1.2.x."""
        assert _sat("<=1.2", "1.2.99") is True
        assert _sat("<=1.2", "1.3.0") is False

    def test_lt_star_matches_nothing(self) -> None:
        assert _sat("<*", "0.0.0") is False


class TestHyphen:
    """Tests for hyphen ranges."""

    def test_full_bounds_inclusive(self) -> None:
        vr = VersionRange("1.2.3 - 2.3.4")
        assert vr.satisfies("1.2.3") is True
        assert vr.satisfies("2.3.4") is True
        assert vr.satisfies("2.3.5") is False

    def test_partial_upper(self) -> None:
        """1.2.3 - 2.3 := >=1.2.3 <2.4.0-0."""
        assert _sat("1.2.3 - 2.3", "2.3.9") is True
        assert _sat("1.2.3 - 2.3", "2.4.0") is False

    def test_partial_lower(self) -> None:
        assert _sat("1.2 - 2.3.4", "1.2.0") is True
        assert _sat("1.2 - 2.3.4", "1.1.9") is False


class TestUnions:
    """Tests for '||' unions."""

    def test_union(self) -> None:
        vr = VersionRange("^1.2.0 || >=3.0.0")
        assert vr.satisfies("1.4.0") is True
        assert vr.satisfies("2.0.0") is False
        assert vr.satisfies("3.1.0") is True


class TestPrereleaseRule:
    """Pre-releases only match comparators naming the same release triple."""

    def test_prerelease_excluded_from_plain_range(self) -> None:
        assert _sat("^1.2.0", "1.3.0-beta") is False

    def test_prerelease_of_upper_bound_excluded(self) -> None:
        assert _sat("^1.2.0", "2.0.0-alpha") is False

    def test_prerelease_with_matching_comparator(self) -> None:
        assert _sat(">=1.2.0-rc.1", "1.2.0-rc.2") is True
        assert _sat(">=1.2.0-rc.1", "1.2.1-rc.1") is False


class TestInvalidInput:
    """Tests for invalid ranges and versions."""

    @pytest.mark.parametrize(
        "range_text", ["latest", "file:../left-pad", "github:user/repo", ">=a.b.c", "1.2.3 -"]
    )
    def test_invalid_range_raises(self, range_text: str) -> None:
        with pytest.raises(InvalidRangeError):
            VersionRange(range_text)

    def test_satisfies_invalid_version_raises(self) -> None:
        with pytest.raises(InvalidVersionError):
            VersionRange("^1.0.0").satisfies("not-a-version")


class TestLowestMatching:
    """Tests for ``lowest_matching`` with range predicates."""

    def test_lowest_satisfying(self) -> None:
        predicate = VersionRange("^1.2.0").satisfies
        assert lowest_matching(["1.3.0", "1.1.0", "1.2.0"], predicate) == "1.2.0"

    def test_none_satisfying(self) -> None:
        assert lowest_matching(["1.1.0"], VersionRange("^2.0.0").satisfies) is None

    def test_invalid_versions_ignored(self) -> None:
        assert lowest_matching(["bogus", "2.0.0"], VersionRange(">=1.0.0").satisfies) == "2.0.0"

    def test_returns_text_as_given(self) -> None:
        """The original string is returned, including a leading v."""
        assert lowest_matching(["v0.2.0", "0.1.0"], VersionRange("~0.2").satisfies) == "v0.2.0"
