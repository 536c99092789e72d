"""Settings dialog session: working copy, auto-save and forwarded intents."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from ..utils.scheduling import LoopScheduler, Scheduler, fire_and_forget
from .config_editor import ConfigEditState
from .persister import DebouncedPersister, PersistCallback, PersisterConfig, SaveStatus
from .settings import AIProvider, ConfigurationState, StoragePresentation, StorageProvider, storage_presentation

__all__ = ["SettingsEditor", "OLLAMA_SERVER_HINT", "AUTOSAVE_FOOTER", "SAVED_LABEL"]

LOGGER = logging.getLogger(__name__)

OLLAMA_SERVER_HINT = "Ensure your local Ollama server is running at http://localhost:11434."
OLLAMA_MODEL_PLACEHOLDER = "e.g., llama3, codellama"
AUTOSAVE_FOOTER = "Settings are saved automatically."
SAVED_LABEL = "Saved!"

Intent = Callable[[], "None | Awaitable[Any]"]


class SettingsEditor:
    """One settings dialog and its independent edit/persist pair.

    ``close`` only hides the dialog; a pending save still fires. ``teardown``
    removes the dialog and discards any pending save.
    """

    def __init__(
        self,
        snapshot: ConfigurationState,
        *,
        persist: PersistCallback,
        request_autonomy_engagement: Intent | None = None,
        request_community_management: Intent | None = None,
        scheduler: Scheduler | None = None,
        config: PersisterConfig | None = None,
    ) -> None:
        self._scheduler = scheduler or LoopScheduler()
        self._snapshot = snapshot
        self._edit_state = ConfigEditState(snapshot)
        self._persister = DebouncedPersister(
            persist=persist,
            snapshot_provider=lambda: self._edit_state.working_copy,
            scheduler=self._scheduler,
            config=config,
        )
        self._edit_state.add_edit_listener(self._persister.notify_edit)
        self._edit_state.add_snapshot_listener(self._handle_snapshot_replaced)
        self._request_autonomy_engagement = request_autonomy_engagement
        self._request_community_management = request_community_management
        self._is_open = False
        self._persister.observe()

    # ------------------------------------------------------------------
    # Dialog lifecycle
    # ------------------------------------------------------------------
    @property
    def is_open(self) -> bool:
        return self._is_open

    def open(self, snapshot: ConfigurationState | None = None) -> None:
        """Show the dialog, reloading the working copy when the host passes new data.

        Snapshots are compared by identity: reopening with the object the
        editor already holds keeps unsaved local edits, while any other
        object (even an equal one) replaces the working copy and suspends
        auto-save until the next edit.
        """

        self._is_open = True
        if snapshot is not None and snapshot is not self._snapshot:
            self.replace_snapshot(snapshot)

    def close(self) -> None:
        self._is_open = False

    def replace_snapshot(self, snapshot: ConfigurationState) -> None:
        self._snapshot = snapshot
        self._edit_state.replace_snapshot(snapshot)

    def teardown(self) -> None:
        self._is_open = False
        self._persister.teardown()
        self._edit_state.remove_edit_listener(self._persister.notify_edit)
        self._edit_state.remove_snapshot_listener(self._handle_snapshot_replaced)

    # ------------------------------------------------------------------
    # Field edits
    # ------------------------------------------------------------------
    @property
    def edit_state(self) -> ConfigEditState:
        return self._edit_state

    @property
    def persister(self) -> DebouncedPersister:
        return self._persister

    @property
    def current(self) -> ConfigurationState:
        return self._edit_state.working_copy

    def select_ai_provider(self, provider: AIProvider | str) -> None:
        self._edit_state.set_field("ai_provider", provider)

    def set_ollama_model(self, model: str) -> None:
        self._edit_state.set_field("ollama_model", model)

    def select_storage_provider(self, provider: StorageProvider | str) -> None:
        self._edit_state.set_field("storage_provider", provider)

    def set_storage_path(self, path: str) -> None:
        self._edit_state.set_field("storage_path", path)

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------
    @property
    def show_model_field(self) -> bool:
        return self._edit_state.get_field("ai_provider") is AIProvider.OLLAMA

    @property
    def model_hint(self) -> str:
        return OLLAMA_SERVER_HINT if self.show_model_field else ""

    @property
    def model_placeholder(self) -> str:
        return OLLAMA_MODEL_PLACEHOLDER

    @property
    def storage_presentation(self) -> StoragePresentation:
        return storage_presentation(self._edit_state.get_field("storage_provider"))

    @property
    def save_status(self) -> SaveStatus:
        return self._persister.save_status

    @property
    def saved_label(self) -> str:
        return SAVED_LABEL if self.save_status is SaveStatus.SAVED else ""

    @property
    def footer(self) -> str:
        return AUTOSAVE_FOOTER

    # ------------------------------------------------------------------
    # Forwarded intents
    # ------------------------------------------------------------------
    def engage_autonomy(self) -> None:
        self._forward_intent(self._request_autonomy_engagement, "autonomy engagement")

    def open_community_manager(self) -> None:
        self._forward_intent(self._request_community_management, "community management")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _forward_intent(self, intent: Intent | None, label: str) -> None:
        if intent is None:
            LOGGER.debug("No handler registered for %s request", label)
            return
        fire_and_forget(self._scheduler, intent)

    def _handle_snapshot_replaced(self, _snapshot: ConfigurationState) -> None:
        self._persister.reset()
        self._persister.observe()
        LOGGER.debug("Settings editor reloaded; persister state %s", self._persister.state.name)
