"""Service layer helpers (settings persistence, editing and auto-save)."""

from .config_editor import ConfigEditState
from .persister import DebouncedPersister, PersisterConfig, PersisterState, SaveStatus
from .settings import (
    AIProvider,
    ConfigurationState,
    ConfigurationStore,
    StoragePresentation,
    StorageProvider,
    storage_presentation,
)
from .settings_editor import SettingsEditor

__all__ = [
    "AIProvider",
    "ConfigEditState",
    "ConfigurationState",
    "ConfigurationStore",
    "DebouncedPersister",
    "PersisterConfig",
    "PersisterState",
    "SaveStatus",
    "SettingsEditor",
    "StoragePresentation",
    "StorageProvider",
    "storage_presentation",
]
