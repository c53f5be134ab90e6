"""
Configuration store for the desktop assistant.

Every load runs the same pipeline:
1. Read ``config.json`` (a default document is written when it is missing)
2. Overlay the document on compiled-in defaults so new fields are backfilled
3. Validate the provider and the provider's model allow-list

Updates go through ``ConfigStore.update_config`` which applies the
provider auto-detection and model reset rules, persists the result and
notifies subscribers.
"""

from __future__ import annotations

import itertools
import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError
from PySide6.QtCore import QObject, Signal

from core.constants import (
    CONFIG_UPDATED_EVENT,
    DEFAULT_LANGUAGE,
    DEFAULT_OPACITY,
    ENV_OPENAI_API_KEY,
    MAX_OPACITY,
    MIN_OPACITY,
)
from core.model_policy import (
    MODEL_FIELDS,
    default_models,
    detect_provider,
    normalize_provider,
    sanitize_model,
)
from core.models import CONFIG_FIELDS, AppConfig, field_alias, field_name
from core.persistence import ConfigFile, ConfigReadError, ConfigWriteError

logger = logging.getLogger(__name__)

ConfigCallback = Callable[[AppConfig], None]

# Fields whose change requires consumers (e.g. the AI client) to reinitialize.
NOTIFYING_FIELDS = frozenset({"api_key", "api_provider", *MODEL_FIELDS, "language"})


def default_config() -> AppConfig:
    """Compiled-in defaults. The API key may be seeded from the environment."""
    return AppConfig(api_key=os.environ.get(ENV_OPENAI_API_KEY, ""))


def clamp_opacity(value: Any) -> float:
    """Clamp opacity to the supported window range."""
    return min(MAX_OPACITY, max(MIN_OPACITY, float(value)))


def merge_config(loaded: Mapping[str, Any], defaults: AppConfig) -> AppConfig:
    """
    Overlay a loaded document on the defaults.

    A default is replaced only when the document defines the field with a
    non-null value. Values of the wrong type fall back to the default.
    Unknown keys are preserved as extras.
    """
    merged = defaults.to_document()
    for key, value in loaded.items():
        if value is None:
            continue
        name = field_name(key)
        merged[field_alias(name) if name else key] = value

    merged["apiProvider"] = normalize_provider(
        merged.get("apiProvider"), defaults.api_provider
    ).value

    try:
        return AppConfig.model_validate(merged)
    except ValidationError as exc:
        fallback = defaults.to_document()
        for error in exc.errors():
            if not error["loc"]:
                continue
            key = str(error["loc"][0])
            logger.warning(
                "Invalid value %r for %s in config, using default",
                merged.get(key),
                key,
            )
            merged[key] = fallback.get(key)
        return AppConfig.model_validate(merged)


def validate_config(config: AppConfig) -> AppConfig:
    """Replace any model that the stored provider does not offer."""
    updates = {
        name: sanitize_model(getattr(config, name), config.api_provider)
        for name in MODEL_FIELDS
    }
    return config.model_copy(update=updates)


def _normalize_updates(
    updates: Optional[Mapping[str, Any]], fields: Mapping[str, Any]
) -> dict[str, Any]:
    """Key a partial update by attribute name, dropping unset (None) values."""
    partial: dict[str, Any] = {}
    for source in (updates or {}, fields):
        for key, value in source.items():
            if value is None:
                continue
            partial[field_name(key) or key] = value
    return partial


class ConfigStore(QObject):
    """
    Owner of the persisted configuration.

    Construct one per application and pass it to the components that need
    it. Subscribers registered with ``subscribe`` and slots connected to
    ``config_updated`` receive the full new configuration after every
    update that touches more than the window opacity.
    """

    config_updated = Signal(object)

    def __init__(
        self,
        config_file: Optional[ConfigFile] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._file = config_file or ConfigFile()
        self._defaults = default_config()
        self._lock = threading.RLock()
        self._subscribers: dict[int, ConfigCallback] = {}
        self._handles = itertools.count(1)

        # Last known good configuration
        self._current: AppConfig = self._defaults
        # Set when the latest write failed; memory wins over disk until a write succeeds
        self._unsaved = False

        logger.info("Config path: %s", self._file.path)
        self._ensure_config_exists()

    @property
    def config_path(self) -> Path:
        return self._file.path

    def _ensure_config_exists(self) -> None:
        if not self._file.exists():
            self.save_config(self._defaults)

    # ----- Load / save -----

    def load_config(self) -> AppConfig:
        """Load, merge and validate the configuration. Never raises."""
        with self._lock:
            if self._unsaved:
                return self._current.model_copy(deep=True)

            if not self._file.exists():
                self.save_config(self._defaults)
                return self._current.model_copy(deep=True)

            try:
                document = self._file.read()
            except ConfigReadError as exc:
                logger.error("Error loading config: %s", exc)
                self._current = self._defaults
                return self._current.model_copy(deep=True)

            self._current = validate_config(merge_config(document, self._defaults))
            return self._current.model_copy(deep=True)

    def save_config(self, config: AppConfig) -> bool:
        """Persist ``config`` and make it the in-memory state.

        Returns False when the write failed. The configuration is still kept
        in memory for the rest of the run.
        """
        with self._lock:
            self._current = config.model_copy(deep=True)
            try:
                self._file.write(config.to_document())
            except ConfigWriteError as exc:
                logger.error("Error saving config: %s", exc)
                self._unsaved = True
                return False
            self._unsaved = False
            return True

    # ----- Update -----

    def update_config(
        self, updates: Optional[Mapping[str, Any]] = None, **fields: Any
    ) -> AppConfig:
        """
        Apply a partial update and return the new configuration.

        Keys may be given as JSON names (``apiKey``) or attribute names
        (``api_key``); ``None`` values are treated as not set. On an
        unexpected failure the last known good configuration is returned.
        """
        with self._lock:
            last_good = self._current
            try:
                partial = _normalize_updates(updates, fields)
                current = self.load_config()
                last_good = current
                new_config = self._apply_update(current, partial)
            except Exception:
                logger.exception("Error updating config")
                self._current = last_good
                return last_good.model_copy(deep=True)

            if NOTIFYING_FIELDS.intersection(partial):
                self._notify(new_config)
            return new_config.model_copy(deep=True)

    def _apply_update(self, current: AppConfig, partial: dict[str, Any]) -> AppConfig:
        stored_provider = current.api_provider

        if "api_provider" in partial:
            provider = normalize_provider(partial["api_provider"])
            partial["api_provider"] = provider
        elif partial.get("api_key"):
            provider = detect_provider(partial["api_key"], stored_provider)
            partial["api_provider"] = provider
        else:
            provider = stored_provider

        if provider != stored_provider:
            logger.info(
                "Provider changed from %s to %s, resetting models",
                stored_provider.value,
                provider.value,
            )
            partial.update(default_models(provider))

        for name in MODEL_FIELDS:
            if name in partial:
                partial[name] = sanitize_model(partial[name], provider)

        if "opacity" in partial:
            partial["opacity"] = clamp_opacity(partial["opacity"])

        document = current.to_document()
        for key, value in partial.items():
            document[field_alias(key) if key in CONFIG_FIELDS else key] = value
        new_config = AppConfig.model_validate(document)

        self.save_config(new_config)
        return new_config

    # ----- Change notification -----

    def subscribe(self, callback: ConfigCallback) -> int:
        """Register ``callback`` for config updates and return its handle."""
        with self._lock:
            handle = next(self._handles)
            self._subscribers[handle] = callback
            return handle

    def unsubscribe(self, handle: int) -> bool:
        with self._lock:
            return self._subscribers.pop(handle, None) is not None

    def _notify(self, config: AppConfig) -> None:
        payload = config.model_copy(deep=True)
        logger.debug(
            "Emitting %s to %d subscribers", CONFIG_UPDATED_EVENT, len(self._subscribers)
        )
        for handle, callback in list(self._subscribers.items()):
            try:
                callback(payload)
            except Exception:
                logger.exception("Config subscriber %s failed", handle)
        self.config_updated.emit(payload)

    # ----- Accessors -----

    def has_api_key(self) -> bool:
        """Check if the API key is configured."""
        return bool(self.load_config().api_key.strip())

    def get_opacity(self) -> float:
        opacity = self.load_config().opacity
        return opacity if opacity is not None else DEFAULT_OPACITY

    def set_opacity(self, opacity: float) -> AppConfig:
        """Set the window opacity, clamped to 0.1-1.0.

        Values that are not numbers leave the configuration unchanged.
        """
        return self.update_config(opacity=opacity)

    def get_language(self) -> str:
        return self.load_config().language or DEFAULT_LANGUAGE

    def set_language(self, language: str) -> AppConfig:
        return self.update_config(language=language)
