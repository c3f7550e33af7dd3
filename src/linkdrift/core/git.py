"""Read-only git queries against a linked working copy.

Each query runs ``git`` as an asyncio subprocess so other pending work
(watch callbacks, other re-checks) keeps running while git executes.
Failures (git missing, not a repository) raise ``GitError``.

git runs in the C locale: error detection matches its English messages.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import AsyncIterator
from pathlib import Path

from linkdrift.exceptions import GitError

logger = logging.getLogger(__name__)

GIT: str = "git"

# Reported by ``git log`` in a repository whose HEAD is still unborn.
_NO_COMMITS: str = "does not have any commits"


async def _spawn_git(cwd: Path, *args: str) -> asyncio.subprocess.Process:
    """Start a git command in *cwd* with piped output.

    Raises:
        GitError: If git cannot be started.
    """
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        return await asyncio.create_subprocess_exec(
            GIT, *args,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env={**os.environ, "LC_ALL": "C"},
        )
    except OSError as exc:
        raise GitError(f"Could not run git in {cwd}: {exc}") from exc


def _failure(cwd: Path, args: tuple[str, ...], returncode: int, stderr: bytes) -> GitError:
    err = stderr.decode("utf-8", errors="replace").strip()
    return GitError(
        f"git {' '.join(args)} failed in {cwd}: {err or 'exit ' + str(returncode)}",
        returncode=returncode,
        stderr=err,
    )


async def _run_git(cwd: Path, *args: str) -> str:
    """Run a git command in *cwd* and return its stripped stdout.

    Raises:
        GitError: If git cannot be started or exits non-zero.
    """
    proc = await _spawn_git(cwd, *args)
    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        raise _failure(cwd, args, proc.returncode, stderr)
    return stdout.decode("utf-8", errors="replace").strip()


async def find_repo_root(path: Path) -> Path:
    """Return the top-level directory of the working copy containing *path*."""
    return Path(await _run_git(path, "rev-parse", "--show-toplevel"))


async def iter_commits(repo_root: Path) -> AsyncIterator[str]:
    """Yield full commit hashes of HEAD's ancestry, most recent first.

    Hashes are read from ``git log`` as it produces them. Closing the
    generator early (e.g. with ``contextlib.aclosing``) stops git. A
    repository without commits yields nothing.

    Raises:
        GitError: If git fails.
    """
    args = ("log", "--format=%H")
    proc = await _spawn_git(repo_root, *args)
    try:
        async for raw in proc.stdout:
            commit = raw.decode("ascii", errors="replace").strip()
            if commit:
                yield commit
        stderr = await proc.stderr.read()
        returncode = await proc.wait()
        if returncode != 0:
            if _NO_COMMITS in stderr.decode("utf-8", errors="replace"):
                return
            raise _failure(repo_root, args, returncode, stderr)
    finally:
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                logger.debug("git log in %s already exited", repo_root)
            await proc.wait()


def head_file(repo_root: Path) -> Path:
    """Return the HEAD reference file of a working copy.

    Handles linked worktrees and submodules, where ``.git`` is a file
    pointing at the real git directory (``gitdir: <path>``).
    """
    dot_git = repo_root / ".git"
    if dot_git.is_file():
        content = dot_git.read_text(encoding="utf-8").strip()
        if content.startswith("gitdir:"):
            git_dir = Path(content[len("gitdir:"):].strip())
            if not git_dir.is_absolute():
                git_dir = repo_root / git_dir
            return git_dir / "HEAD"
    return dot_git / "HEAD"
