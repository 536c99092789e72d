"""Cancellable scheduled callbacks on top of the asyncio event loop."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Protocol

__all__ = ["ScheduledTask", "Scheduler", "LoopScheduler", "fire_and_forget"]

LOGGER = logging.getLogger(__name__)


class ScheduledTask(Protocol):
    """Handle for a pending callback."""

    def cancel(self) -> None:
        ...

    def cancelled(self) -> bool:
        ...


class Scheduler(Protocol):
    """Clock abstraction used by components that defer work."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        ...

    def spawn(self, awaitable: Awaitable[Any]) -> None:
        ...


class LoopScheduler:
    """:class:`Scheduler` backed by an asyncio loop.

    The loop is resolved lazily from the running loop on first use so the
    scheduler can be built before the host starts its loop (for example an
    embedding GUI host).
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._tasks: set[asyncio.Future[Any]] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay), callback)

    def spawn(self, awaitable: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(awaitable, loop=self.loop)
        # Keep a strong reference until completion; the loop only holds weak ones.
        self._tasks.add(task)
        task.add_done_callback(self._task_finished)

    def _task_finished(self, task: asyncio.Future[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.warning("Background callback failed: %s", exc, exc_info=exc)


def fire_and_forget(scheduler: Scheduler, callback: Callable[..., Any], *args: Any) -> None:
    """Invoke ``callback`` without observing its outcome.

    Coroutine results are handed to ``scheduler.spawn`` instead of being awaited.
    """

    result = callback(*args)
    if inspect.isawaitable(result):
        scheduler.spawn(result)
