"""JSON file backing the configuration store."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from platformdirs import user_data_dir

from core.constants import APP_AUTHOR, APP_NAME, CONFIG_FILE_NAME, ENV_CONFIG_DIR

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Base class for configuration file failures."""

    def __init__(self, message: str, path: Path):
        super().__init__(f"{message}: {path}")
        self.path = path


class ConfigReadError(ConfigError):
    """The config file is missing, unreadable or not a JSON object."""


class ConfigWriteError(ConfigError):
    """The config file or its directory could not be written."""


def resolve_config_path() -> Path:
    """
    Resolve where ``config.json`` lives.

    Preference order:
    1. ``ASSISTANT_DESK_CONFIG_DIR`` environment variable
    2. The per-user application data directory
    3. The current working directory

    Never raises.
    """
    override = os.environ.get(ENV_CONFIG_DIR)
    if override:
        return Path(override).expanduser() / CONFIG_FILE_NAME
    try:
        return Path(user_data_dir(APP_NAME, APP_AUTHOR)) / CONFIG_FILE_NAME
    except Exception as exc:
        logger.warning("Could not access user data path, using fallback: %s", exc)
        return Path.cwd() / CONFIG_FILE_NAME


class ConfigFile:
    """Reads and writes the configuration document."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else resolve_config_path()

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> dict[str, Any]:
        """Return the parsed document.

        Raises:
            ConfigReadError: If the file can't be read, isn't valid JSON,
                or doesn't hold a JSON object.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigReadError("Could not read config file", self.path) from exc
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigReadError("Malformed config file", self.path) from exc
        if not isinstance(document, dict):
            raise ConfigReadError("Config file does not contain an object", self.path)
        return document

    def write(self, document: dict[str, Any]) -> None:
        """Write ``document`` as indented JSON, creating parent directories.

        Raises:
            ConfigWriteError: If the directory or file is not writable.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(document, indent=2, ensure_ascii=False)
            self.path.write_text(payload + "\n", encoding="utf-8")
        except (OSError, TypeError, ValueError) as exc:
            raise ConfigWriteError("Could not write config file", self.path) from exc
