"""Shared fixtures for the configuration tests."""

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of the defaults."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("ASSISTANT_DESK_CONFIG_DIR", raising=False)
    for name in (
        "ASSISTANT_DESK_LOG_DIR",
        "ASSISTANT_DESK_LOG_FILE_LEVEL",
        "ASSISTANT_DESK_LOG_CONSOLE_LEVEL",
        "ASSISTANT_DESK_LOG_CONFIG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
