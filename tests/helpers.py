"""Shared test helpers and stub classes.

Import from here instead of duplicating fakes in individual test files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable


@dataclass
class ManualHandle:
    due: float
    seq: int
    callback: Callable[[], None]
    _cancelled: bool = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class ManualScheduler:
    """Scheduler driven by a virtual clock advanced explicitly by the test.

    Example:
        scheduler = ManualScheduler()
        persister = DebouncedPersister(..., scheduler=scheduler)
        scheduler.advance(0.5)
    """

    now: float = 0.0
    handles: list[ManualHandle] = field(default_factory=list)
    spawned: list[Awaitable[Any]] = field(default_factory=list)
    _seq: int = 0

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        self._seq += 1
        handle = ManualHandle(due=self.now + max(0.0, delay), seq=self._seq, callback=callback)
        self.handles.append(handle)
        return handle

    def spawn(self, awaitable: Awaitable[Any]) -> None:
        self.spawned.append(awaitable)

    @property
    def pending(self) -> list[ManualHandle]:
        return [handle for handle in self.handles if not handle.cancelled()]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due callbacks in order."""

        target = self.now + seconds
        while True:
            due = [handle for handle in self.pending if handle.due <= target]
            if not due:
                break
            handle = min(due, key=lambda item: (item.due, item.seq))
            self.handles.remove(handle)
            self.now = handle.due
            handle.callback()
        self.now = target

    def close_spawned(self) -> None:
        for awaitable in self.spawned:
            close = getattr(awaitable, "close", None)
            if callable(close):
                close()
        self.spawned.clear()
