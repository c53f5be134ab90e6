"""SettingsViewModel - draft state behind the API settings dialog."""

from __future__ import annotations

import logging
from typing import Any, Optional

from PySide6.QtCore import QObject, Signal

from core.config import ConfigStore, clamp_opacity
from core.constants import DEFAULT_LANGUAGE
from core.model_policy import (
    MODEL_FIELDS,
    Provider,
    available_models,
    default_models,
    normalize_provider,
    sanitize_model,
)
from core.models import AppConfig, field_alias

logger = logging.getLogger(__name__)

# Fields edited in the dialog and written on save; opacity is applied live.
EDITABLE_FIELDS = ("api_key", "api_provider", *MODEL_FIELDS, "language")


def mask_api_key(api_key: str) -> str:
    """Mask an API key for display, keeping the first and last four characters."""
    api_key = api_key.strip()
    if not api_key:
        return ""
    if len(api_key) <= 8:
        return "*" * len(api_key)
    return f"{api_key[:4]}...{api_key[-4:]}"


class SettingsViewModel(QObject):
    """Holds unsaved edits from the settings dialog and commits them to the store."""

    settings_changed = Signal()
    settings_saved = Signal()
    opacity_changed = Signal(float)
    config_updated = Signal(object)

    def __init__(self, config_store: ConfigStore, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._store = config_store
        self._saved: AppConfig = config_store.load_config()
        self._draft: AppConfig = self._saved.model_copy(deep=True)

        self._store.config_updated.connect(self._on_config_updated)

    # ----- Draft properties -----

    @property
    def api_key(self) -> str:
        return self._draft.api_key

    @api_key.setter
    def api_key(self, value: str) -> None:
        self._set_draft(api_key=(value or "").strip())

    @property
    def api_provider(self) -> Provider:
        return self._draft.api_provider

    @api_provider.setter
    def api_provider(self, value: Provider | str) -> None:
        provider = normalize_provider(value)
        if provider == self._draft.api_provider:
            return
        self._set_draft(api_provider=provider, **default_models(provider))

    @property
    def extraction_model(self) -> str:
        return self._draft.extraction_model

    @extraction_model.setter
    def extraction_model(self, value: str) -> None:
        self._set_model("extraction_model", value)

    @property
    def solution_model(self) -> str:
        return self._draft.solution_model

    @solution_model.setter
    def solution_model(self, value: str) -> None:
        self._set_model("solution_model", value)

    @property
    def debugging_model(self) -> str:
        return self._draft.debugging_model

    @debugging_model.setter
    def debugging_model(self, value: str) -> None:
        self._set_model("debugging_model", value)

    @property
    def language(self) -> str:
        return self._draft.language

    @language.setter
    def language(self, value: str) -> None:
        self._set_draft(language=(value or "").strip() or DEFAULT_LANGUAGE)

    @property
    def available_models(self) -> list[str]:
        """Models offered by the provider selected in the dialog."""
        return available_models(self._draft.api_provider)

    # ----- Live settings -----

    @property
    def opacity(self) -> float:
        return self._store.get_opacity()

    @opacity.setter
    def opacity(self, value: float) -> None:
        """Apply window opacity immediately, clamped to 0.1-1.0."""
        try:
            value = clamp_opacity(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid opacity %r", value)
            return
        if value != self._store.get_opacity():
            self._store.set_opacity(value)
            self.opacity_changed.emit(value)

    # ----- State -----

    @property
    def has_api_key(self) -> bool:
        return bool(self._draft.api_key.strip())

    @property
    def masked_api_key(self) -> str:
        return mask_api_key(self._draft.api_key)

    @property
    def has_unsaved_changes(self) -> bool:
        return bool(self._pending_changes())

    def load_settings(self) -> None:
        """Discard the draft and reload it from the store."""
        self._saved = self._store.load_config()
        self._draft = self._saved.model_copy(deep=True)
        self.settings_changed.emit()

    def save_settings(self) -> bool:
        """Commit the draft. Returns False when there was nothing to save."""
        changes = self._pending_changes()
        if not changes:
            return False

        # The store resets models when the provider changes, so commit the
        # provider first and the model picks in a second update.
        model_changes = {name: changes.pop(name) for name in MODEL_FIELDS if name in changes}
        config = self._saved
        if changes:
            config = self._store.update_config(self._as_update(changes))
        model_changes = {
            name: value
            for name, value in model_changes.items()
            if getattr(config, name) != value
        }
        if model_changes:
            config = self._store.update_config(self._as_update(model_changes))

        self._saved = config
        self._draft = config.model_copy(deep=True)
        self.settings_saved.emit()
        self.settings_changed.emit()
        return True

    def revert_settings(self) -> None:
        self._draft = self._saved.model_copy(deep=True)
        self.settings_changed.emit()

    # ----- Helpers -----

    def _set_model(self, name: str, value: str) -> None:
        self._set_draft(**{name: sanitize_model(value, self._draft.api_provider)})

    def _set_draft(self, **updates: Any) -> None:
        changed = {
            name: value
            for name, value in updates.items()
            if getattr(self._draft, name) != value
        }
        if not changed:
            return
        self._draft = self._draft.model_copy(update=changed)
        self.settings_changed.emit()

    def _pending_changes(self) -> dict[str, Any]:
        return {
            name: getattr(self._draft, name)
            for name in EDITABLE_FIELDS
            if getattr(self._draft, name) != getattr(self._saved, name)
        }

    @staticmethod
    def _as_update(changes: dict[str, Any]) -> dict[str, Any]:
        return {field_alias(name): value for name, value in changes.items()}

    def _on_config_updated(self, config: AppConfig) -> None:
        self.config_updated.emit(config)
        if not self.has_unsaved_changes:
            self._saved = config
            self._draft = config.model_copy(deep=True)
            self.settings_changed.emit()
