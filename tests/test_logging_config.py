"""Tests for application logging setup."""

import logging
import sys
from pathlib import Path

import pytest

from core.infrastructure.logging_config import (
    CONSOLE_HANDLER_NAME,
    FILE_HANDLER_NAME,
    configure_logging,
    reset_logging,
)


@pytest.fixture(autouse=True)
def restore_logging():
    reset_logging()
    yield
    reset_logging()


def _handler(name: str):
    return next((h for h in logging.getLogger().handlers if h.get_name() == name), None)


def test_configure_logging_writes_config_messages_to_file(tmp_path: Path) -> None:
    log_file = configure_logging(tmp_path / "logs", file_level="DEBUG", console_level="ERROR")

    assert log_file == tmp_path / "logs" / "assistant_desk.log"
    assert log_file.exists()
    assert logging.getLogger().level == logging.DEBUG

    file_handler = _handler(FILE_HANDLER_NAME)
    assert file_handler is not None
    assert file_handler.level == logging.DEBUG
    assert _handler(CONSOLE_HANDLER_NAME).level == logging.ERROR

    logging.getLogger("core.config").info("Config path: %s", "somewhere")
    file_handler.flush()
    text = log_file.read_text(encoding="utf-8")
    assert "Logging initialized at" in text
    assert "[core.config] Config path: somewhere" in text


def test_levels_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ASSISTANT_DESK_LOG_FILE_LEVEL", "warning")
    monkeypatch.setenv("ASSISTANT_DESK_LOG_CONSOLE_LEVEL", "bogus")

    configure_logging(tmp_path)

    assert _handler(FILE_HANDLER_NAME).level == logging.WARNING
    assert _handler(CONSOLE_HANDLER_NAME).level == logging.INFO


def test_log_dir_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ASSISTANT_DESK_LOG_DIR", str(tmp_path / "env-logs"))

    log_file = configure_logging()

    assert log_file == tmp_path / "env-logs" / "assistant_desk.log"


def test_config_logger_level(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ASSISTANT_DESK_LOG_CONFIG_LEVEL", "DEBUG")

    configure_logging(tmp_path)

    assert logging.getLogger("core.config").level == logging.DEBUG
    assert logging.getLogger("core.model_policy").level == logging.DEBUG
    assert logging.getLogger("core.persistence.config_file").getEffectiveLevel() == logging.DEBUG

    reset_logging()
    assert logging.getLogger("core.config").level == logging.NOTSET


def test_configure_logging_runs_once(tmp_path: Path) -> None:
    first = configure_logging(tmp_path / "first")
    second = configure_logging(tmp_path / "second")

    assert second == first
    assert not (tmp_path / "second").exists()
    names = [h.get_name() for h in logging.getLogger().handlers]
    assert names.count(FILE_HANDLER_NAME) == 1
    assert names.count(CONSOLE_HANDLER_NAME) == 1

    forced = configure_logging(tmp_path / "second", force=True)

    assert forced == tmp_path / "second" / "assistant_desk.log"
    names = [h.get_name() for h in logging.getLogger().handlers]
    assert names.count(FILE_HANDLER_NAME) == 1


def test_existing_handlers_are_kept(tmp_path: Path) -> None:
    other = logging.NullHandler()
    root = logging.getLogger()
    root.addHandler(other)
    try:
        configure_logging(tmp_path)
        assert other in root.handlers

        reset_logging()
        assert other in root.handlers
        assert _handler(FILE_HANDLER_NAME) is None
    finally:
        root.removeHandler(other)


def test_reset_restores_root_level_and_excepthook(tmp_path: Path) -> None:
    root = logging.getLogger()
    level = root.level
    excepthook = sys.excepthook

    configure_logging(tmp_path, file_level="DEBUG", console_level="DEBUG")
    assert sys.excepthook is not excepthook

    reset_logging()
    assert root.level == level
    assert sys.excepthook is excepthook


def test_unwritable_log_dir_uses_console_only(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    assert configure_logging(blocker) is None

    assert _handler(FILE_HANDLER_NAME) is None
    assert _handler(CONSOLE_HANDLER_NAME) is not None
