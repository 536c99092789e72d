"""Logging setup shared by the hub CLI and embedding hosts."""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass
from pathlib import Path

__all__ = ["LoggingOptions", "setup_logging", "get_log_path", "resolve_level"]

_DEFAULT_LOG_DIR = Path.home() / ".parchub" / "logs"
_LOG_FILENAME = "parchub.log"
_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
_NOISY_LOGGERS: tuple[str, ...] = ("asyncio", "jsonschema")
_CONFIGURED = False
_LOG_PATH: Path | None = None


def resolve_level(value: int | str | None, default: int = logging.INFO) -> int:
    """Map ``"debug"``/``"WARNING"``/``10`` style values to a logging level."""

    if value is None or value == "":
        return default
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else default


@dataclass(slots=True)
class LoggingOptions:
    """How the hub routes its log records.

    The rotating file always receives ``level``. The console handler writes to
    stderr so stdout stays free for JSON emitted by the CLI.
    """

    level: int = logging.INFO
    log_dir: Path | None = None
    console: bool = True
    console_level: int | None = None
    max_bytes: int = 1_000_000
    backup_count: int = 3

    @classmethod
    def for_cli(
        cls,
        *,
        debug: bool = False,
        log_dir: Path | str | None = None,
        machine_output: bool = False,
    ) -> "LoggingOptions":
        """Options for the ``parchub`` command.

        ``PARCHUB_LOG_LEVEL`` sets the file level when ``debug`` is off. When the
        command prints machine-readable output the console only carries
        warnings, unless debugging was requested.
        """

        level = logging.DEBUG if debug else resolve_level(os.environ.get("PARCHUB_LOG_LEVEL"))
        console_level = None
        if machine_output and not debug:
            console_level = max(level, logging.WARNING)
        return cls(
            level=level,
            log_dir=Path(log_dir).expanduser() if log_dir else None,
            console_level=console_level,
        )


def setup_logging(options: LoggingOptions | None = None, *, force: bool = False) -> Path:
    """Install the rotating file handler and optional console handler on the root logger.

    Later calls return the active log path untouched unless ``force`` is set.
    """

    global _CONFIGURED, _LOG_PATH
    if _CONFIGURED and not force and _LOG_PATH is not None:
        return _LOG_PATH

    opts = options or LoggingOptions()
    target_dir = _resolve_log_dir(opts.log_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    log_path = target_dir / _LOG_FILENAME

    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=opts.max_bytes, backupCount=opts.backup_count, encoding="utf-8"
    )
    file_handler.setLevel(opts.level)
    file_handler.setFormatter(logging.Formatter(fmt=_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handlers: list[logging.Handler] = [file_handler]

    if opts.console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(opts.console_level if opts.console_level is not None else opts.level)
        console_handler.setFormatter(logging.Formatter(fmt=_CONSOLE_FORMAT))
        handlers.append(console_handler)

    logging.basicConfig(level=opts.level, handlers=handlers, force=True)
    logging.captureWarnings(True)
    _tune_external_loggers(opts.level)

    _CONFIGURED = True
    _LOG_PATH = log_path
    return log_path


def get_log_path() -> Path | None:
    """Return the currently configured log file if available."""

    return _LOG_PATH


def _resolve_log_dir(log_dir: Path | None) -> Path:
    env_override = os.environ.get("PARCHUB_LOG_DIR")
    return Path(log_dir or env_override or _DEFAULT_LOG_DIR).expanduser()


def _tune_external_loggers(root_level: int) -> None:
    quiet_level = max(root_level, logging.WARNING)
    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(quiet_level)
