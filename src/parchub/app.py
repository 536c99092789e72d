"""Command-line helpers for inspecting and editing the hub configuration."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, TextIO

from .services.persister import PersisterConfig
from .services.settings import ConfigurationState, ConfigurationStore, coerce_field_value, storage_presentation
from .services.settings_editor import SettingsEditor
from .utils import logging as logging_utils
from .utils.scheduling import LoopScheduler

_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_LOGGER = logging.getLogger(__name__)


def configure_logging(
    debug: bool = False,
    *,
    log_dir: Path | str | None = None,
    machine_output: bool = False,
    force: bool = False,
) -> Path:
    """Configure structured logging for the CLI and return the log file path."""

    options = logging_utils.LoggingOptions.for_cli(debug=debug, log_dir=log_dir, machine_output=machine_output)
    log_path = logging_utils.setup_logging(options, force=force)
    _LOGGER.debug("Logging configured (level=%s, file=%s)", logging.getLevelName(options.level), log_path)
    return log_path


def load_settings(
    path: Optional[Path] = None,
    *,
    store: ConfigurationStore | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ConfigurationState:
    """Load persisted settings or fall back to defaults."""

    active_store = store or ConfigurationStore(path)
    try:
        return active_store.load(overrides=overrides)
    except OSError as exc:
        _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
        return ConfigurationState()


async def apply_edits(
    snapshot: ConfigurationState,
    edits: Mapping[str, Any],
    store: ConfigurationStore,
    *,
    config: PersisterConfig | None = None,
) -> ConfigurationState:
    """Replay ``edits`` through a settings editor and wait for the auto-save.

    With no edits nothing is written, exactly like opening the dialog and
    closing it untouched.
    """

    saved: list[ConfigurationState] = []
    persisted = asyncio.Event()

    def _persist(state: ConfigurationState) -> None:
        store.save(state)
        saved.append(state)
        persisted.set()

    editor = SettingsEditor(
        snapshot,
        persist=_persist,
        scheduler=LoopScheduler(asyncio.get_running_loop()),
        config=config,
    )
    editor.open()
    try:
        for name, value in edits.items():
            editor.edit_state.set_field(name, value)
        if edits:
            timeout = editor.persister.config.quiet_period + 1.0
            await asyncio.wait_for(persisted.wait(), timeout=timeout)
    finally:
        editor.teardown()
    return saved[-1] if saved else editor.current


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point invoked by the ``parchub`` console script."""

    args = _parse_cli_args(argv)
    debug = args.debug or _env_flag("PARCHUB_DEBUG", default=False)
    dumps_json = args.dump_settings or not args.edits
    configure_logging(debug, log_dir=args.log_dir, machine_output=dumps_json)

    settings_path = args.settings_path or os.environ.get("PARCHUB_SETTINGS_PATH")
    resolved_path = Path(settings_path).expanduser() if settings_path else None
    store = ConfigurationStore(resolved_path)
    try:
        overrides = _coerce_cli_pairs(args.overrides or [], flag="--set")
        edits = _coerce_cli_pairs(args.edits or [], flag="--edit")
    except (KeyError, ValueError) as exc:
        print(f"Invalid setting: {exc}", file=sys.stderr)
        return 2

    settings = load_settings(resolved_path, store=store, overrides=overrides or None)
    if edits:
        settings = asyncio.run(apply_edits(settings, edits, store))
        _LOGGER.info("Saved %d edited field(s) to %s", len(edits), store.path)

    if dumps_json:
        _dump_settings(settings, store, overrides=overrides)
    return 0


def _env_flag(name: str, *, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _parse_cli_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="parchub",
        description="Inspect or edit the PARC Research Hub configuration.",
    )
    parser.add_argument(
        "--dump-settings",
        action="store_true",
        help="Print the effective settings payload and exit.",
    )
    parser.add_argument(
        "--settings-path",
        metavar="PATH",
        help="Override the default ~/.parchub/settings.json path.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Override a setting for this run only (repeatable).",
    )
    parser.add_argument(
        "--edit",
        dest="edits",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Edit a setting and persist it through the auto-save path (repeatable).",
    )
    parser.add_argument(
        "--log-dir",
        metavar="PATH",
        help="Write parchub.log to PATH instead of ~/.parchub/logs.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def _coerce_cli_pairs(items: Sequence[str], *, flag: str) -> Dict[str, Any]:
    pairs: Dict[str, Any] = {}
    for entry in items:
        if "=" not in entry:
            raise ValueError(f"{flag} '{entry}' must use KEY=VALUE syntax.")
        key, raw_value = entry.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError(f"{flag} is missing a field name.")
        pairs[key] = coerce_field_value(key, raw_value.strip())
    return pairs


def _dump_settings(
    settings: ConfigurationState,
    store: ConfigurationStore,
    *,
    overrides: Mapping[str, Any],
    stream: TextIO | None = None,
) -> None:
    destination = stream or sys.stdout
    presentation = storage_presentation(settings.storage_provider)
    log_path = logging_utils.get_log_path()
    metadata = {
        "path": str(store.path),
        "cli_overrides": sorted(overrides.keys()),
        "environment_variables": _active_env_overrides(),
        "log_path": str(log_path) if log_path is not None else None,
        "storage": {
            "path_prefix": presentation.path_prefix,
            "placeholder_example": presentation.placeholder_example,
            "help_text": presentation.help_text,
        },
    }
    output = {"settings": settings.to_dict(), "meta": metadata}
    json.dump(output, destination, indent=2)
    destination.write("\n")


def _active_env_overrides() -> list[str]:
    return sorted(name for name in os.environ if name.startswith("PARCHUB_"))


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())
