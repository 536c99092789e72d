"""Working copy of the configuration being edited in the settings dialog."""

from __future__ import annotations

import logging
from dataclasses import fields, replace
from typing import Any, Protocol

from .settings import ConfigurationState, coerce_field_value

__all__ = ["ConfigEditState"]

LOGGER = logging.getLogger(__name__)
_FIELD_NAMES = frozenset(field.name for field in fields(ConfigurationState))


class EditListener(Protocol):
    def __call__(self, name: str, value: Any) -> None:
        ...


class SnapshotListener(Protocol):
    def __call__(self, snapshot: ConfigurationState) -> None:
        ...


class ConfigEditState:
    """Holds the local working copy; the committed copy lives with the host."""

    def __init__(self, snapshot: ConfigurationState | None = None) -> None:
        self._working = replace(snapshot) if snapshot is not None else ConfigurationState()
        self._edit_listeners: list[EditListener] = []
        self._snapshot_listeners: list[SnapshotListener] = []

    @property
    def working_copy(self) -> ConfigurationState:
        """Return a detached copy of the current working state."""

        return replace(self._working)

    def get_field(self, name: str) -> Any:
        if name not in _FIELD_NAMES:
            raise KeyError(f"Unknown configuration field '{name}'")
        return getattr(self._working, name)

    def set_field(self, name: str, value: Any) -> None:
        """Change exactly one field and notify edit listeners.

        Every call counts as an edit, even when the value is unchanged, matching
        a form control that fires on each keystroke.
        """

        coerced = coerce_field_value(name, value)
        setattr(self._working, name, coerced)
        for listener in list(self._edit_listeners):
            listener(name, coerced)

    def replace_snapshot(self, snapshot: ConfigurationState) -> None:
        """Discard local edits in favour of a fresh external snapshot."""

        self._working = replace(snapshot)
        LOGGER.debug("Configuration working copy replaced from snapshot")
        for listener in list(self._snapshot_listeners):
            listener(self.working_copy)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_edit_listener(self, listener: EditListener) -> None:
        self._edit_listeners.append(listener)

    def remove_edit_listener(self, listener: EditListener) -> None:
        try:
            self._edit_listeners.remove(listener)
        except ValueError:  # pragma: no cover - defensive guard
            pass

    def add_snapshot_listener(self, listener: SnapshotListener) -> None:
        self._snapshot_listeners.append(listener)

    def remove_snapshot_listener(self, listener: SnapshotListener) -> None:
        try:
            self._snapshot_listeners.remove(listener)
        except ValueError:  # pragma: no cover - defensive guard
            pass
