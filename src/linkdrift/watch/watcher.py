"""HEAD reference watching with watchdog.

Watchdog observes directories from a background thread. ``HeadWatcher``
schedules the directory containing a HEAD file, filters events down to
that file, and hands each change to the asyncio loop, where the callback
runs as its own task. Every matching event starts exactly one callback;
events are neither debounced nor coalesced.

git updates HEAD atomically by renaming ``HEAD.lock`` over it, so moves
onto the HEAD path count as changes alongside plain modifications.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[], Awaitable[None]]
ErrorCallback = Callable[[BaseException], None]


def _normalize(path: str | bytes | Path) -> str:
    return os.path.normcase(os.path.abspath(os.fsdecode(path)))


class HeadChangeHandler(FileSystemEventHandler):
    """Forwards events that touch one file to a notification function."""

    def __init__(self, head_path: Path, notify: Callable[[], None]) -> None:
        super().__init__()
        self._head = _normalize(head_path)
        self._notify = notify

    def _touches_head(self, path: str | bytes) -> bool:
        return bool(path) and _normalize(path) == self._head

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._touches_head(event.src_path):
            self._notify()

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._touches_head(event.src_path):
            self._notify()

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._touches_head(event.dest_path):
            self._notify()


class WatchHandle:
    """Subscription on one HEAD file; ``stop()`` ends it."""

    def __init__(
        self, watcher: HeadWatcher, head_path: Path, handler: HeadChangeHandler, watch: Any
    ) -> None:
        self.head_path = head_path
        self.handler = handler
        self._watcher = watcher
        self._watch = watch
        self.active = True

    def stop(self) -> None:
        """Unsubscribe. Re-checks already running are not interrupted."""
        if not self.active:
            return
        self.active = False
        self._watcher._unschedule(self.handler, self._watch)
        logger.debug("Stopped watching %s", self.head_path)


class HeadWatcher:
    """Runs async callbacks on the current loop whenever a HEAD file changes.

    Must be used from within a running event loop.

    Args:
        on_error: Receives exceptions raised by callbacks. Without it,
            failures are logged.
        observer_factory: Creates the watchdog observer (overridable in tests).
    """

    def __init__(
        self,
        on_error: ErrorCallback | None = None,
        observer_factory: Callable[[], Any] = Observer,
    ) -> None:
        self._on_error = on_error
        self._observer = observer_factory()
        self._started = False
        self._handles: list[WatchHandle] = []
        self._tasks: set[asyncio.Task[None]] = set()

    def watch(self, head_path: Path, callback: ChangeCallback) -> WatchHandle:
        """Start watching *head_path*, running *callback* once per change.

        Returns:
            A handle whose ``stop()`` ends this subscription.
        """
        loop = asyncio.get_running_loop()

        def notify() -> None:
            loop.call_soon_threadsafe(self._spawn, callback)

        handler = HeadChangeHandler(head_path, notify)
        watch = self._observer.schedule(handler, str(head_path.parent), recursive=False)
        if not self._started:
            self._observer.start()
            self._started = True
        handle = WatchHandle(self, head_path, handler, watch)
        self._handles.append(handle)
        logger.debug("Watching %s", head_path)
        return handle

    @property
    def pending(self) -> int:
        """Number of callbacks still running."""
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every running callback has finished."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def stop(self) -> None:
        """Stop all subscriptions, cancel running callbacks, join the observer."""
        for handle in self._handles:
            handle.stop()
        for task in list(self._tasks):
            task.cancel()
        if self._started:
            self._observer.stop()
            self._observer.join()
            self._started = False

    def _unschedule(self, handler: HeadChangeHandler, watch: Any) -> None:
        # Linked packages from one monorepo share a watch; drop only this handler.
        self._observer.remove_handler_for_watch(handler, watch)

    def _spawn(self, callback: ChangeCallback) -> None:
        task = asyncio.ensure_future(callback())
        self._tasks.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        if self._on_error is not None:
            self._on_error(exc)
        else:
            logger.error("HEAD change callback failed", exc_info=exc)
