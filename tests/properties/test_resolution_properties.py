"""Property-based tests for closest-version resolution.

Verifies the invariants of ``closest_version``:
- The result is the version of the first indexed commit in the history
- Commits after the first match never influence the result
- A history without indexed commits resolves to None
"""
from __future__ import annotations

import asyncio

from hypothesis import given
from hypothesis import strategies as st

from linkdrift.core.resolver import build_commit_index, closest_version
from tests.helpers import async_iter, make_metadata


def _closest(history: list[str], index: dict[str, str]) -> str | None:
    return asyncio.run(closest_version(async_iter(history), index))


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

commit_hashes = st.text(alphabet="0123456789abcdef", min_size=7, max_size=7)

release_versions = st.builds(
    lambda major, minor, patch: f"{major}.{minor}.{patch}",
    st.integers(0, 5), st.integers(0, 5), st.integers(0, 5),
)


@st.composite
def indexed_history(draw: st.DrawFn) -> tuple[list[str], dict[str, str]]:
    """Draw a commit history and an index over a subset of its commits."""
    history = draw(st.lists(commit_hashes, min_size=0, max_size=20, unique=True))
    released = draw(st.lists(st.sampled_from(history), unique=True) if history else st.just([]))
    index = {commit: draw(release_versions) for commit in released}
    return history, index


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


@given(indexed_history())
def test_first_indexed_commit_wins(case: tuple[list[str], dict[str, str]]) -> None:
    """The result comes from the earliest history entry present in the index."""
    history, index = case
    expected = next((index[c] for c in history if c in index), None)
    assert _closest(history, index) == expected


@given(indexed_history(), st.lists(commit_hashes, max_size=10))
def test_suffix_after_match_irrelevant(
    case: tuple[list[str], dict[str, str]], suffix: list[str]
) -> None:
    history, index = case
    if _closest(history, index) is None:
        return
    assert _closest(history + suffix, index) == _closest(history, index)


@given(st.lists(commit_hashes, max_size=20))
def test_empty_index_resolves_nothing(history: list[str]) -> None:
    assert _closest(history, {}) is None


@given(st.dictionaries(release_versions, commit_hashes, max_size=10))
def test_index_contains_every_recorded_commit(commits: dict[str, str]) -> None:
    """Every release's commit maps to a release built from that commit."""
    index = build_commit_index(make_metadata("pkg", commits))
    assert set(index) == set(commits.values())
    for commit, version in index.items():
        assert commits[version] == commit
