"""Closest released version of a linked working copy.

Maps a commit history onto a package's published versions: every release
that recorded the commit it was built from (``gitHead``) becomes an entry
in a commit -> version index, and the history is walked from HEAD
backwards until the first indexed commit is found. Because the walk starts
at HEAD, the first match is the nearest released ancestor; a single pass
with a dict lookup per commit suffices.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable
from contextlib import aclosing
from pathlib import Path
from typing import TYPE_CHECKING

from linkdrift.core.git import iter_commits

if TYPE_CHECKING:
    from linkdrift.registry.metadata import PackageMetadata

logger = logging.getLogger(__name__)


def build_commit_index(metadata: PackageMetadata) -> dict[str, str]:
    """Invert published versions into a source-commit -> version mapping.

    Releases without a recorded source commit are left out.
    """
    index: dict[str, str] = {}
    for release in metadata.versions.values():
        if release.source_commit:
            index[release.source_commit] = release.version
    return index


async def closest_version(
    commits: AsyncIterable[str], index: dict[str, str]
) -> str | None:
    """Return the version of the first commit in *commits* present in *index*.

    Args:
        commits: Commit hashes, most recent first. Consumed lazily; iteration
            stops at the first match.
        index: Commit -> version mapping from ``build_commit_index``.

    Returns:
        The matched version, or None if no commit is indexed.
    """
    async for commit in commits:
        version = index.get(commit)
        if version:
            return version
    return None


async def find_closest_version(
    linked_repo_root: Path, metadata: PackageMetadata
) -> str | None:
    """Find the closest released version the linked HEAD is based on.

    Args:
        linked_repo_root: Top-level directory of the linked working copy.
        metadata: Published metadata of the linked package.

    Returns:
        The resolved version, or None if no released commit is an ancestor
        of HEAD (a normal outcome, not an error).

    Raises:
        GitError: If the commit history cannot be listed.
    """
    index = build_commit_index(metadata)
    async with aclosing(iter_commits(linked_repo_root)) as commits:
        version = await closest_version(commits, index)
    logger.debug("Closest release of %s: %s", linked_repo_root, version)
    return version
