"""Watch mode: re-check linked dependencies when their git HEAD changes.

Public API::

    from linkdrift.watch import check_and_watch

    await check_and_watch(project, reporter, watch=True, stop_event=stop)
"""

from __future__ import annotations

from linkdrift.watch.orchestrator import WatchOrchestrator, check_and_watch
from linkdrift.watch.watcher import HeadChangeHandler, HeadWatcher, WatchHandle

__all__ = [
    "HeadChangeHandler",
    "HeadWatcher",
    "WatchHandle",
    "WatchOrchestrator",
    "check_and_watch",
]
