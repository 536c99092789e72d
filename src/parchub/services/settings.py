"""Configuration dataclasses, storage presentation table and JSON persistence."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping

import jsonschema

__all__ = [
    "AIProvider",
    "StorageProvider",
    "StoragePresentation",
    "ConfigurationState",
    "ConfigurationStore",
    "CONFIGURATION_SCHEMA",
    "STORAGE_PRESENTATION",
    "coerce_field_value",
    "storage_presentation",
]

LOGGER = logging.getLogger(__name__)
_SETTINGS_DIR = Path.home() / ".parchub"
_DEFAULT_SETTINGS_PATH = _SETTINGS_DIR / "settings.json"
_SETTINGS_VERSION = 1
_ENV_OVERRIDES: Mapping[str, str] = {
    "PARCHUB_AI_PROVIDER": "ai_provider",
    "PARCHUB_OLLAMA_MODEL": "ollama_model",
    "PARCHUB_STORAGE_PROVIDER": "storage_provider",
    "PARCHUB_STORAGE_PATH": "storage_path",
}
_WIRE_KEYS: Mapping[str, str] = {
    "aiProvider": "ai_provider",
    "ollamaModel": "ollama_model",
    "storageProvider": "storage_provider",
    "storagePath": "storage_path",
}


class AIProvider(str, Enum):
    GEMINI = "gemini"
    OLLAMA = "ollama"


class StorageProvider(str, Enum):
    """Conceptual storage backends offered by the settings dialog."""

    GOOGLE_DRIVE = "google-drive"
    LOCAL_STORAGE = "local-storage"
    DROPBOX = "dropbox"
    ONE_DRIVE = "one-drive"


@dataclass(frozen=True, slots=True)
class StoragePresentation:
    """Display-only hints for the storage path field."""

    path_prefix: str
    placeholder_example: str
    help_text: str


STORAGE_PRESENTATION: Mapping[StorageProvider, StoragePresentation] = {
    StorageProvider.GOOGLE_DRIVE: StoragePresentation(
        path_prefix="/My Drive/",
        placeholder_example="e.g., PARC_Projects/Data",
        help_text="The Google Drive folder where PARC will store project data.",
    ),
    StorageProvider.LOCAL_STORAGE: StoragePresentation(
        path_prefix="/Local/",
        placeholder_example="e.g., Documents/PARC_Data",
        help_text="The local directory path for storing project data.",
    ),
    StorageProvider.DROPBOX: StoragePresentation(
        path_prefix="/Dropbox/",
        placeholder_example="e.g., Apps/PARC_Data",
        help_text="The Dropbox folder where PARC will store project data.",
    ),
    StorageProvider.ONE_DRIVE: StoragePresentation(
        path_prefix="/OneDrive/",
        placeholder_example="e.g., Documents/PARC",
        help_text="The OneDrive folder where PARC will store project data.",
    ),
}


def storage_presentation(provider: StorageProvider | str | None) -> StoragePresentation:
    """Look up the display triple for ``provider``, defaulting to Google Drive."""

    try:
        key = StorageProvider(provider) if provider is not None else StorageProvider.GOOGLE_DRIVE
    except ValueError:
        key = StorageProvider.GOOGLE_DRIVE
    return STORAGE_PRESENTATION[key]


@dataclass(slots=True)
class ConfigurationState:
    """Hub configuration edited in the settings dialog.

    Every field is always present; ``ollama_model`` is kept even while Gemini
    is selected so toggling providers restores it.
    """

    ai_provider: AIProvider = AIProvider.GEMINI
    ollama_model: str = "llama3"
    storage_provider: StorageProvider = StorageProvider.GOOGLE_DRIVE
    storage_path: str = ""

    def __post_init__(self) -> None:
        self.ai_provider = AIProvider(self.ai_provider)
        self.storage_provider = StorageProvider(self.storage_provider)
        self.ollama_model = "" if self.ollama_model is None else str(self.ollama_model)
        self.storage_path = "" if self.storage_path is None else str(self.storage_path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ai_provider": self.ai_provider.value,
            "ollama_model": self.ollama_model,
            "storage_provider": self.storage_provider.value,
            "storage_path": self.storage_path,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ConfigurationState":
        """Build a state from snake_case or camelCase keys; unknown keys are ignored."""

        data = _normalize_keys(payload)
        allowed = {field.name for field in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in allowed and value is not None})


CONFIGURATION_SCHEMA: Mapping[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "version": {"type": "integer"},
        "ai_provider": {"enum": [provider.value for provider in AIProvider]},
        "ollama_model": {"type": ["string", "null"]},
        "storage_provider": {"enum": [provider.value for provider in StorageProvider]},
        "storage_path": {"type": ["string", "null"]},
    },
}


def coerce_field_value(name: str, value: Any) -> Any:
    """Validate ``value`` for the configuration field ``name``.

    Raises ``KeyError`` for unknown fields and ``ValueError`` for values the
    field cannot hold.
    """

    if name not in {field.name for field in fields(ConfigurationState)}:
        raise KeyError(f"Unknown configuration field '{name}'")
    if name == "ai_provider":
        return AIProvider(value)
    if name == "storage_provider":
        return StorageProvider(value)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"Configuration field '{name}' expects a string")
    return value


class ConfigurationStore:
    """JSON persistence adapter for :class:`ConfigurationState`."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or _DEFAULT_SETTINGS_PATH
        self._validator = jsonschema.Draft202012Validator(CONFIGURATION_SCHEMA)

    @property
    def path(self) -> Path:
        return self._path

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> ConfigurationState:
        """Load the configuration, falling back to defaults for unreadable files."""

        payload = self._read_payload()
        state = ConfigurationState()
        if payload:
            errors = sorted(self._validator.iter_errors(payload), key=lambda err: list(err.path))
            if errors:
                LOGGER.warning(
                    "Settings file %s failed validation (%s); using defaults",
                    self._path,
                    "; ".join(error.message for error in errors),
                )
            else:
                state = ConfigurationState.from_dict(payload)
        if overrides:
            state = self.apply_overrides(state, overrides, source="CLI")
        return self._apply_env_overrides(state)

    def save(self, state: ConfigurationState) -> Path:
        """Persist ``state`` with an atomic temp-file replace."""

        payload = state.to_dict()
        payload["version"] = _SETTINGS_VERSION
        body = json.dumps(payload, indent=2, sort_keys=True)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(self._path)
        LOGGER.debug(
            "Settings saved to %s (provider=%s, storage=%s)",
            self._path,
            state.ai_provider.value,
            state.storage_provider.value,
        )
        return self._path

    def apply_overrides(
        self,
        state: ConfigurationState,
        overrides: Mapping[str, Any],
        *,
        source: str = "runtime",
    ) -> ConfigurationState:
        filtered: Dict[str, Any] = {}
        for key, value in _normalize_keys(overrides).items():
            if value is None:
                continue
            try:
                filtered[key] = coerce_field_value(key, value)
            except (KeyError, ValueError) as exc:
                LOGGER.warning("Ignoring %s override %s=%r: %s", source, key, value, exc)
        if filtered:
            LOGGER.debug("Applying %s settings overrides: %s", source, sorted(filtered))
            state = replace(state, **filtered)
        return state

    def _apply_env_overrides(self, state: ConfigurationState) -> ConfigurationState:
        overrides: Dict[str, Any] = {}
        for env_name, field_name in _ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value.strip()
        if overrides:
            state = self.apply_overrides(state, overrides, source="environment")
        return state

    def _read_payload(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
            data = json.loads(text)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Settings file %s is not valid JSON: %s", self._path, exc)
            return {}
        if not isinstance(data, Mapping):
            LOGGER.warning("Settings file %s does not contain a JSON object", self._path)
            return {}
        return _normalize_keys(data)


def _normalize_keys(payload: Mapping[str, Any]) -> Dict[str, Any]:
    return {_WIRE_KEYS.get(key, key): value for key, value in payload.items()}
