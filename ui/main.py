"""
Application bootstrap for the configuration subsystem.

The bootstrap code owns the process-wide ``ConfigStore``. Components get
the store (or the settings viewmodel) handed to them instead of importing
a module-level instance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from core.config import ConfigStore
from core.infrastructure.logging_config import configure_logging
from core.persistence import ConfigFile
from ui.viewmodels.settings_viewmodel import SettingsViewModel

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Long-lived objects shared across the running application."""

    config_store: ConfigStore
    settings: SettingsViewModel


_context: Optional[AppContext] = None


def bootstrap(
    config_path: Optional[Path] = None, *, log_dir: Optional[Path] = None
) -> AppContext:
    """Create the application context once and return it on later calls.

    Logging is configured first so the config path and any load errors
    are written to the log file.
    """
    global _context
    if _context is not None:
        return _context

    configure_logging(log_dir)
    config_file = ConfigFile(config_path) if config_path is not None else ConfigFile()
    store = ConfigStore(config_file)
    _context = AppContext(config_store=store, settings=SettingsViewModel(store))

    if not store.has_api_key():
        logger.warning("No API key configured. You can add one in Settings.")
    return _context


def get_app_context() -> AppContext:
    """Return the bootstrapped context.

    Raises:
        RuntimeError: If ``bootstrap`` has not been called.
    """
    if _context is None:
        raise RuntimeError("Application context not initialized. Call bootstrap() first.")
    return _context


def reset_app_context() -> None:
    """Drop the process-wide context. Useful for testing."""
    global _context
    _context = None
