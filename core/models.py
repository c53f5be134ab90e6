"""Domain model for the persisted configuration."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.constants import DEFAULT_LANGUAGE, DEFAULT_OPACITY
from core.model_policy import DEFAULT_PROVIDER, PROVIDER_MODELS, Provider

_DEFAULT_MODEL = PROVIDER_MODELS[DEFAULT_PROVIDER].fallback


class AppConfig(BaseModel):
    """User configuration as stored in ``config.json``.

    Field names are snake_case in Python and camelCase on disk. Keys the
    model does not know about are kept as extras and written back as-is.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    api_key: str = Field(default="", alias="apiKey")
    api_provider: Provider = Field(default=DEFAULT_PROVIDER, alias="apiProvider")
    extraction_model: str = Field(default=_DEFAULT_MODEL, alias="extractionModel")
    solution_model: str = Field(default=_DEFAULT_MODEL, alias="solutionModel")
    debugging_model: str = Field(default=_DEFAULT_MODEL, alias="debuggingModel")
    language: str = DEFAULT_LANGUAGE
    opacity: float = DEFAULT_OPACITY

    def to_document(self) -> dict[str, Any]:
        """Serialize to the JSON document shape (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)


# JSON key -> python attribute
FIELD_ALIASES: dict[str, str] = {
    info.alias or name: name for name, info in AppConfig.model_fields.items()
}

CONFIG_FIELDS: tuple[str, ...] = tuple(AppConfig.model_fields)


def field_name(key: str) -> Optional[str]:
    """Map a JSON key or attribute name to the attribute name, None if unknown."""
    if key in AppConfig.model_fields:
        return key
    return FIELD_ALIASES.get(key)


def field_alias(name: str) -> str:
    return AppConfig.model_fields[name].alias or name
