"""Persistence package exports."""

from .config_file import (
    ConfigError,
    ConfigFile,
    ConfigReadError,
    ConfigWriteError,
    resolve_config_path,
)

__all__ = [
    "ConfigError",
    "ConfigFile",
    "ConfigReadError",
    "ConfigWriteError",
    "resolve_config_path",
]
