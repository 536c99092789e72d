"""Debounced persistence of the settings working copy.

Edits are coalesced: each edit restarts a quiet-period timer and only the
timer that survives the quiet period persists the (latest) working copy. A
successful trigger shows a transient "Saved" status for a fixed interval.

State machine::

    SUSPENDED --observe()--> IDLE
    SUSPENDED/IDLE/DIRTY/ANNOUNCING --edit--> DIRTY   (timer replaced)
    DIRTY --quiet period elapses--> ANNOUNCING        (persist once)
    ANNOUNCING --display interval elapses--> IDLE
    any --reset()--> SUSPENDED                        (timer cancelled)

``SUSPENDED`` guards the value loaded from a snapshot: it is never persisted
unless an edit follows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Awaitable, Callable, Protocol

from ..utils.scheduling import LoopScheduler, ScheduledTask, Scheduler, fire_and_forget
from .settings import ConfigurationState

__all__ = [
    "PersisterState",
    "SaveStatus",
    "PersisterConfig",
    "DebouncedPersister",
    "PersistCallback",
]

LOGGER = logging.getLogger(__name__)

PersistCallback = Callable[[ConfigurationState], "None | Awaitable[Any]"]


class PersisterState(Enum):
    SUSPENDED = auto()
    DIRTY = auto()
    IDLE = auto()
    ANNOUNCING = auto()


class SaveStatus(Enum):
    IDLE = "idle"
    SAVED = "saved"


class StatusListener(Protocol):
    def __call__(self, status: SaveStatus) -> None:
        ...


class SnapshotProvider(Protocol):
    def __call__(self) -> ConfigurationState:
        ...


@dataclass(slots=True)
class PersisterConfig:
    """Timing parameters in seconds."""

    quiet_period: float = 0.5
    announce_interval: float = 2.0


class DebouncedPersister:
    """Coalesces working-copy edits into single calls to ``persist``.

    Only one scheduled task is ever pending: the quiet-period timer while
    ``DIRTY`` or the announce timer while ``ANNOUNCING``. Replacing it always
    cancels the previous handle first.
    """

    def __init__(
        self,
        *,
        persist: PersistCallback,
        snapshot_provider: SnapshotProvider,
        scheduler: Scheduler | None = None,
        config: PersisterConfig | None = None,
    ) -> None:
        if persist is None:
            raise ValueError("persist is required")
        self._persist = persist
        self._snapshot_provider = snapshot_provider
        self._scheduler = scheduler or LoopScheduler()
        self._config = config or PersisterConfig()
        self._state = PersisterState.SUSPENDED
        self._save_status = SaveStatus.IDLE
        self._pending: ScheduledTask | None = None
        self._generation = 0
        self._status_listeners: list[StatusListener] = []
        self._torn_down = False
        self._persist_count = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def state(self) -> PersisterState:
        return self._state

    @property
    def save_status(self) -> SaveStatus:
        return self._save_status

    @property
    def config(self) -> PersisterConfig:
        return self._config

    @property
    def persist_count(self) -> int:
        return self._persist_count

    @property
    def has_pending_timer(self) -> bool:
        return self._pending is not None

    def reset(self) -> None:
        """Return to ``SUSPENDED`` for a freshly loaded snapshot without saving."""

        self._cancel_pending()
        self._torn_down = False
        self._set_state(PersisterState.SUSPENDED)
        self._set_status(SaveStatus.IDLE)

    def observe(self) -> None:
        """Complete an observation cycle with no edit."""

        if self._state is PersisterState.SUSPENDED and not self._torn_down:
            self._set_state(PersisterState.IDLE)

    def notify_edit(self, *_args: Any) -> None:
        """Register an edit and restart the quiet period.

        Accepts and ignores listener arguments so it can be registered directly
        as a :class:`~parchub.services.config_editor.ConfigEditState` edit listener.
        """

        if self._torn_down:
            LOGGER.debug("Ignoring edit after teardown")
            return
        if self._state is PersisterState.ANNOUNCING:
            self._set_status(SaveStatus.IDLE)
        self._replace_pending(self._config.quiet_period, self._handle_quiet_period_elapsed)
        self._set_state(PersisterState.DIRTY)

    def teardown(self) -> None:
        """Drop any pending timer; pending edits are not flushed."""

        self._cancel_pending()
        self._torn_down = True
        self._set_state(PersisterState.IDLE)
        self._set_status(SaveStatus.IDLE)

    def add_status_listener(self, listener: StatusListener) -> None:
        self._status_listeners.append(listener)

    def remove_status_listener(self, listener: StatusListener) -> None:
        try:
            self._status_listeners.remove(listener)
        except ValueError:  # pragma: no cover - defensive guard
            pass

    # ------------------------------------------------------------------
    # Timer callbacks
    # ------------------------------------------------------------------
    def _handle_quiet_period_elapsed(self) -> None:
        if self._state is not PersisterState.DIRTY:
            return
        snapshot = self._snapshot_provider()
        self._persist_count += 1
        generation = self._generation
        LOGGER.debug("Persisting configuration after quiet period (trigger #%d)", self._persist_count)
        try:
            fire_and_forget(self._scheduler, self._persist, snapshot)
        except Exception:
            LOGGER.exception("Configuration persist callback failed")
        # The callback may have torn us down, reset us or issued a new edit.
        if self._torn_down or generation != self._generation:
            LOGGER.debug("Persister re-entered during persist; skipping announcement")
            return
        self._set_state(PersisterState.ANNOUNCING)
        self._set_status(SaveStatus.SAVED)
        self._replace_pending(self._config.announce_interval, self._handle_announce_elapsed)

    def _handle_announce_elapsed(self) -> None:
        if self._state is not PersisterState.ANNOUNCING:
            return
        self._set_state(PersisterState.IDLE)
        self._set_status(SaveStatus.IDLE)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _replace_pending(self, delay: float, callback: Callable[[], None]) -> None:
        self._cancel_pending()
        generation = self._generation

        def _fire() -> None:
            # A handle that was superseded must never act, even if the clock
            # delivers it after cancellation.
            if generation != self._generation:
                return
            self._pending = None
            callback()

        self._pending = self._scheduler.call_later(delay, _fire)

    def _cancel_pending(self) -> None:
        self._generation += 1
        pending, self._pending = self._pending, None
        if pending is not None:
            pending.cancel()

    def _set_state(self, state: PersisterState) -> None:
        if state is self._state:
            return
        LOGGER.debug("Persister %s -> %s", self._state.name, state.name)
        self._state = state

    def _set_status(self, status: SaveStatus) -> None:
        if status is self._save_status:
            return
        self._save_status = status
        for listener in list(self._status_listeners):
            listener(status)
