"""Initial check pass plus optional re-checks on HEAD changes.

Lifecycle per linked dependency::

    Idle --(watch requested)--> Monitoring --(HEAD changed)--> re-check --> Monitoring

Monitoring ends only when the session's stop event is set (for example by
a shutdown signal) or when a re-check fails with a non-recoverable error,
which is then re-raised to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from linkdrift.checker import CheckResult, Project, Reporter, check_dependency, run_checks
from linkdrift.core.git import head_file
from linkdrift.discovery import LinkedDependency
from linkdrift.watch.watcher import HeadWatcher, WatchHandle

logger = logging.getLogger(__name__)


class WatchOrchestrator:
    """Keeps one HEAD subscription per linked dependency and re-checks on change.

    Must be created inside a running event loop.

    Args:
        project: The consuming project.
        reporter: Receives re-check notifications and results.
        watcher_factory: Builds the ``HeadWatcher`` given an error callback.
    """

    def __init__(
        self,
        project: Project,
        reporter: Reporter,
        watcher_factory: Callable[..., HeadWatcher] = HeadWatcher,
    ) -> None:
        self.project = project
        self.reporter = reporter
        self.handles: dict[str, WatchHandle] = {}
        self._failure: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._watcher = watcher_factory(on_error=self._fail)

    def add(self, dependency: LinkedDependency, repo_root: Path) -> WatchHandle:
        """Start monitoring the HEAD of *dependency*'s working copy."""

        async def recheck() -> None:
            self.reporter.head_changed(dependency)
            result = await check_dependency(dependency, repo_root, self.project)
            self.reporter.result(result)

        handle = self._watcher.watch(head_file(repo_root), recheck)
        self.handles[dependency.name] = handle
        return handle

    async def wait(self, stop_event: asyncio.Event) -> None:
        """Block until *stop_event* is set or a re-check fails.

        Raises:
            LinkDriftError: The failure of a watch-triggered re-check.
        """
        stopper = asyncio.ensure_future(stop_event.wait())
        try:
            await asyncio.wait({stopper, self._failure}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stopper.cancel()
        if self._failure.done():
            self._failure.result()

    def close(self) -> None:
        """Stop every subscription and the underlying observer."""
        self._watcher.stop()
        self.handles.clear()

    def _fail(self, exc: BaseException) -> None:
        if not self._failure.done():
            self._failure.set_exception(exc)


async def check_and_watch(
    project: Project,
    reporter: Reporter,
    *,
    watch: bool = False,
    stop_event: asyncio.Event | None = None,
    watcher_factory: Callable[..., HeadWatcher] = HeadWatcher,
) -> list[CheckResult]:
    """Check all linked dependencies, then optionally watch for HEAD changes.

    The initial check of every linked dependency always runs. With *watch*,
    each dependency's HEAD is monitored right after its initial check and
    the call only returns once *stop_event* is set. Without any linked
    dependency there is nothing to monitor, and the call returns after the
    initial pass.

    Args:
        project: The consuming project.
        reporter: Receives results and watch notifications.
        watch: Whether to keep re-checking on HEAD changes.
        stop_event: Ends watch mode when set. Defaults to a fresh event,
            which makes watch mode run until cancelled.
        watcher_factory: Builds the ``HeadWatcher`` (overridable in tests).

    Returns:
        Results of the initial pass.
    """
    if not watch:
        return await run_checks(project, reporter)

    orchestrator = WatchOrchestrator(project, reporter, watcher_factory)
    try:
        results = await run_checks(project, reporter, on_checked=orchestrator.add)
        if not orchestrator.handles:
            logger.info("No linked dependencies to watch")
            return results
        reporter.watching()
        await orchestrator.wait(stop_event or asyncio.Event())
    finally:
        orchestrator.close()
    logger.debug("Watch session ended after %d initial checks", len(results))
    return results
