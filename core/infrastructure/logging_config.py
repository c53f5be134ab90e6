"""
Logging setup for the desktop assistant.

``configure_logging`` is called once by the bootstrap code before the
``ConfigStore`` is built, so the resolved config path and every load,
save and sanitization message land in the rotating log file.

Handlers are added to the root logger next to whatever is already
installed; ``reset_logging`` removes only the handlers added here.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from platformdirs import user_log_dir

from core.constants import (
    APP_AUTHOR,
    APP_NAME,
    ENV_LOG_CONFIG_LEVEL,
    ENV_LOG_CONSOLE_LEVEL,
    ENV_LOG_DIR,
    ENV_LOG_FILE_LEVEL,
    LOG_FILE_NAME,
)

logger = logging.getLogger(__name__)

FILE_HANDLER_NAME = "assistant_desk.file"
CONSOLE_HANDLER_NAME = "assistant_desk.console"

# Loggers that report config loads, saves and corrections.
CONFIG_LOGGERS = ("core.config", "core.model_policy", "core.persistence")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
MAX_LOG_BYTES = 2 * 1024 * 1024
LOG_BACKUPS = 5

_configured_log_file: Optional[Path] = None
_previous_root_level: Optional[int] = None
_previous_excepthook = None


def _parse_level(value: Optional[str], default: int) -> int:
    if not value:
        return default
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else default


def default_log_dir() -> Path:
    """Log directory from ``ASSISTANT_DESK_LOG_DIR`` or the per-user log dir."""
    override = os.getenv(ENV_LOG_DIR)
    if override:
        return Path(override).expanduser()
    return Path(user_log_dir(APP_NAME, APP_AUTHOR))


def _log_uncaught(exc_type, exc, tb) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc, tb)
        return
    logging.getLogger("uncaught").critical(
        "Unhandled exception", exc_info=(exc_type, exc, tb)
    )
    sys.__excepthook__(exc_type, exc, tb)


def _open_log_file(log_file: Path, level: int, formatter: logging.Formatter):
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_file,
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUPS,
            encoding="utf-8",
        )
    except OSError:
        return None
    handler.set_name(FILE_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _remove_own_handlers(root: logging.Logger) -> None:
    for handler in list(root.handlers):
        if handler.get_name() in (FILE_HANDLER_NAME, CONSOLE_HANDLER_NAME):
            root.removeHandler(handler)
            handler.close()


def configure_logging(
    log_dir: Optional[Path] = None,
    file_level: Optional[str] = None,
    console_level: Optional[str] = None,
    config_level: Optional[str] = None,
    force: bool = False,
) -> Optional[Path]:
    """
    Install the file and console handlers and return the log file path.

    Runs once per process; later calls return the first log file unless
    ``force`` is set. Returns None when the log directory is not writable
    and only console logging is active.

    Args:
        log_dir: Directory for the log file. Defaults to ``default_log_dir()``.
        file_level: Level name for the log file (``ASSISTANT_DESK_LOG_FILE_LEVEL``).
        console_level: Level name for stdout (``ASSISTANT_DESK_LOG_CONSOLE_LEVEL``).
        config_level: Level for the config store loggers
            (``ASSISTANT_DESK_LOG_CONFIG_LEVEL``); left alone when unset.
    """
    global _configured_log_file, _previous_root_level, _previous_excepthook

    root = logging.getLogger()
    if any(h.get_name() == CONSOLE_HANDLER_NAME for h in root.handlers) and not force:
        return _configured_log_file

    file_level_value = _parse_level(file_level or os.getenv(ENV_LOG_FILE_LEVEL), logging.INFO)
    console_level_value = _parse_level(
        console_level or os.getenv(ENV_LOG_CONSOLE_LEVEL), logging.INFO
    )
    config_level_name = config_level or os.getenv(ENV_LOG_CONFIG_LEVEL)

    _remove_own_handlers(root)
    formatter = logging.Formatter(LOG_FORMAT)
    log_file = (log_dir or default_log_dir()) / LOG_FILE_NAME

    file_handler = _open_log_file(log_file, file_level_value, formatter)
    if file_handler is not None:
        root.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.set_name(CONSOLE_HANDLER_NAME)
    console_handler.setLevel(console_level_value)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if _previous_root_level is None:
        _previous_root_level = root.level
        _previous_excepthook = sys.excepthook
    root.setLevel(min(file_level_value, console_level_value))

    if config_level_name:
        level = _parse_level(config_level_name, logging.INFO)
        for name in CONFIG_LOGGERS:
            logging.getLogger(name).setLevel(level)

    logging.captureWarnings(True)
    sys.excepthook = _log_uncaught

    if file_handler is None:
        logger.warning("Cannot write log file %s, logging to console only", log_file)
    _configured_log_file = log_file if file_handler is not None else None
    logger.info("Logging initialized at %s", _configured_log_file or "console")
    return _configured_log_file


def reset_logging() -> None:
    """Remove the handlers added by ``configure_logging`` and restore the root logger."""
    global _configured_log_file, _previous_root_level, _previous_excepthook

    root = logging.getLogger()
    _remove_own_handlers(root)
    if _previous_root_level is not None:
        root.setLevel(_previous_root_level)
        sys.excepthook = _previous_excepthook
    for name in CONFIG_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)
    logging.captureWarnings(False)

    _configured_log_file = None
    _previous_root_level = None
    _previous_excepthook = None
