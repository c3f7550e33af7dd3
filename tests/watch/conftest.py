"""Fixtures for watch tests: an in-process stand-in for the watchdog observer."""

from __future__ import annotations

from typing import Any

import pytest
from watchdog.events import FileSystemEvent, FileSystemEventHandler


class FakeObserver:
    """Records schedules and dispatches events synchronously on demand."""

    def __init__(self) -> None:
        self.handlers: list[tuple[FileSystemEventHandler, Any]] = []
        self.scheduled: list[tuple[str, bool]] = []
        self.started = False
        self.stopped = False
        self.joined = False

    def schedule(
        self, handler: FileSystemEventHandler, path: str, recursive: bool = False
    ) -> Any:
        watch = (path, recursive)
        self.scheduled.append(watch)
        self.handlers.append((handler, watch))
        return watch

    def remove_handler_for_watch(self, handler: FileSystemEventHandler, watch: Any) -> None:
        self.handlers.remove((handler, watch))

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def join(self, timeout: float | None = None) -> None:
        self.joined = True

    def emit(self, event: FileSystemEvent) -> None:
        for handler, _ in list(self.handlers):
            handler.dispatch(event)


@pytest.fixture
def observer() -> FakeObserver:
    return FakeObserver()
