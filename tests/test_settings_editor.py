"""Tests for the settings dialog session."""

from __future__ import annotations

from unittest.mock import MagicMock

from parchub.services.persister import PersisterState, SaveStatus
from parchub.services.settings import AIProvider, ConfigurationState, StorageProvider
from parchub.services.settings_editor import (
    AUTOSAVE_FOOTER,
    OLLAMA_SERVER_HINT,
    SAVED_LABEL,
    SettingsEditor,
)
from tests.helpers import ManualScheduler


def _editor(
    snapshot: ConfigurationState,
    scheduler: ManualScheduler,
    **kwargs: object,
) -> tuple[SettingsEditor, MagicMock]:
    persist = MagicMock()
    editor = SettingsEditor(snapshot, persist=persist, scheduler=scheduler, **kwargs)  # type: ignore[arg-type]
    return editor, persist


def test_open_and_close_without_edits_never_saves(
    scheduler: ManualScheduler, local_snapshot: ConfigurationState
) -> None:
    editor, persist = _editor(local_snapshot, scheduler)

    editor.open()
    assert editor.is_open
    editor.close()
    scheduler.advance(10.0)

    persist.assert_not_called()
    assert editor.persister.state is PersisterState.IDLE
    assert editor.saved_label == ""


def test_path_edits_save_latest_value(scheduler: ManualScheduler, local_snapshot: ConfigurationState) -> None:
    editor, persist = _editor(local_snapshot, scheduler)
    editor.open()

    editor.set_storage_path("Docs/Y")
    scheduler.advance(0.1)
    editor.set_storage_path("Docs/Z")
    scheduler.advance(0.5)

    persist.assert_called_once()
    saved = persist.call_args.args[0]
    assert saved == ConfigurationState(
        ai_provider=AIProvider.GEMINI,
        storage_provider=StorageProvider.LOCAL_STORAGE,
        storage_path="Docs/Z",
    )
    assert editor.save_status is SaveStatus.SAVED
    assert editor.saved_label == SAVED_LABEL

    scheduler.advance(2.0)
    assert editor.saved_label == ""


def test_close_keeps_pending_save(scheduler: ManualScheduler) -> None:
    editor, persist = _editor(ConfigurationState(), scheduler)
    editor.open()
    editor.set_ollama_model("mistral")

    editor.close()
    scheduler.advance(0.5)

    persist.assert_called_once()


def test_teardown_discards_pending_save(scheduler: ManualScheduler) -> None:
    editor, persist = _editor(ConfigurationState(), scheduler)
    editor.open()
    editor.set_ollama_model("mistral")

    editor.teardown()
    scheduler.advance(5.0)

    persist.assert_not_called()
    assert scheduler.pending == []


def test_open_with_new_snapshot_reloads_without_saving(
    scheduler: ManualScheduler, local_snapshot: ConfigurationState
) -> None:
    editor, persist = _editor(ConfigurationState(), scheduler)
    editor.open()
    editor.set_storage_path("draft")

    editor.open(local_snapshot)
    scheduler.advance(5.0)

    persist.assert_not_called()
    assert editor.current == local_snapshot
    assert editor.persister.state is PersisterState.IDLE


def test_model_field_visible_only_for_ollama(scheduler: ManualScheduler) -> None:
    editor, _ = _editor(ConfigurationState(), scheduler)

    assert not editor.show_model_field
    assert editor.model_hint == ""

    editor.select_ai_provider("ollama")

    assert editor.show_model_field
    assert editor.model_hint == OLLAMA_SERVER_HINT
    assert editor.current.ollama_model == "llama3"


def test_toggling_provider_keeps_model(scheduler: ManualScheduler) -> None:
    editor, persist = _editor(ConfigurationState(ai_provider=AIProvider.OLLAMA), scheduler)
    editor.set_ollama_model("codellama")

    editor.select_ai_provider(AIProvider.GEMINI)
    scheduler.advance(0.5)

    saved = persist.call_args.args[0]
    assert saved.ai_provider is AIProvider.GEMINI
    assert saved.ollama_model == "codellama"


def test_storage_presentation_follows_provider(scheduler: ManualScheduler) -> None:
    editor, _ = _editor(ConfigurationState(), scheduler)
    assert editor.storage_presentation.path_prefix == "/My Drive/"

    editor.select_storage_provider(StorageProvider.ONE_DRIVE)

    assert editor.storage_presentation.path_prefix == "/OneDrive/"
    assert editor.storage_presentation.placeholder_example == "e.g., Documents/PARC"
    assert editor.footer == AUTOSAVE_FOOTER


def test_intents_forwarded_without_touching_configuration(scheduler: ManualScheduler) -> None:
    engage = MagicMock()
    manage = MagicMock()
    editor, persist = _editor(
        ConfigurationState(),
        scheduler,
        request_autonomy_engagement=engage,
        request_community_management=manage,
    )

    editor.engage_autonomy()
    editor.open_community_manager()
    scheduler.advance(5.0)

    engage.assert_called_once_with()
    manage.assert_called_once_with()
    persist.assert_not_called()


def test_async_intent_is_spawned(scheduler: ManualScheduler) -> None:
    async def _engage() -> None:
        return None

    editor, _ = _editor(ConfigurationState(), scheduler, request_autonomy_engagement=_engage)

    editor.engage_autonomy()

    assert len(scheduler.spawned) == 1
    scheduler.close_spawned()


def test_missing_intent_handler_is_ignored(scheduler: ManualScheduler) -> None:
    editor, _ = _editor(ConfigurationState(), scheduler)

    editor.engage_autonomy()
    editor.open_community_manager()

    assert scheduler.spawned == []


def test_two_editors_are_independent(scheduler: ManualScheduler) -> None:
    first, first_persist = _editor(ConfigurationState(), scheduler)
    second, second_persist = _editor(ConfigurationState(), scheduler)

    first.set_storage_path("one")
    scheduler.advance(0.5)

    first_persist.assert_called_once()
    second_persist.assert_not_called()
    assert second.save_status is SaveStatus.IDLE


def test_dialog_removed_on_save_leaves_nothing_scheduled(scheduler: ManualScheduler) -> None:
    holder: dict[str, SettingsEditor] = {}
    persist = MagicMock(side_effect=lambda _state: holder["editor"].teardown())
    editor = SettingsEditor(ConfigurationState(), persist=persist, scheduler=scheduler)
    holder["editor"] = editor
    editor.open()

    editor.set_storage_path("x")
    scheduler.advance(0.5)

    persist.assert_called_once()
    assert scheduler.pending == []
    assert editor.saved_label == ""
    assert not editor.is_open


def test_host_echoing_saved_snapshot_reloads_quietly(scheduler: ManualScheduler) -> None:
    holder: dict[str, SettingsEditor] = {}
    persist = MagicMock(side_effect=lambda state: holder["editor"].replace_snapshot(state))
    editor = SettingsEditor(ConfigurationState(), persist=persist, scheduler=scheduler)
    holder["editor"] = editor

    editor.set_storage_path("Docs/Echo")
    scheduler.advance(0.5)
    scheduler.advance(10.0)

    persist.assert_called_once()
    assert editor.persister.state is PersisterState.IDLE
    assert editor.save_status is SaveStatus.IDLE
    assert editor.current.storage_path == "Docs/Echo"


def test_reopening_with_same_snapshot_keeps_local_edits(
    scheduler: ManualScheduler, local_snapshot: ConfigurationState
) -> None:
    editor, _ = _editor(local_snapshot, scheduler)
    editor.open(local_snapshot)
    editor.set_storage_path("draft")
    editor.close()

    editor.open(local_snapshot)

    assert editor.current.storage_path == "draft"
