"""Provider enumeration and the per-provider model allow-lists.

Every model field in the configuration must name a model offered by the
configured provider. Anything else is replaced by the provider's fallback
model. Corrections are logged, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


class Provider(str, Enum):
    """AI service vendor whose model namespace governs valid model ids."""

    OPENAI = "openai"
    GEMINI = "gemini"
    ANTHROPIC = "anthropic"


@dataclass(frozen=True)
class ProviderModels:
    """Allow-listed models for a provider and the model used when none is valid."""

    models: tuple[str, ...]
    fallback: str

    def allows(self, model: str) -> bool:
        return model in self.models


PROVIDER_MODELS: dict[Provider, ProviderModels] = {
    Provider.OPENAI: ProviderModels(
        models=("gpt-4o", "gpt-4o-mini", "gpt-5"),
        fallback="gpt-5",
    ),
    Provider.GEMINI: ProviderModels(
        models=("gemini-1.5-pro", "gemini-2.0-flash"),
        fallback="gemini-2.0-flash",
    ),
    Provider.ANTHROPIC: ProviderModels(
        models=(
            "claude-3-7-sonnet-20250219",
            "claude-3-5-sonnet-20241022",
            "claude-3-opus-20240229",
        ),
        fallback="claude-3-7-sonnet-20250219",
    ),
}

DEFAULT_PROVIDER = Provider.OPENAI

MODEL_FIELDS = ("extraction_model", "solution_model", "debugging_model")

OPENAI_KEY_PREFIX = "sk-"


def normalize_provider(raw: Any, default: Provider = DEFAULT_PROVIDER) -> Provider:
    """Return ``raw`` as a Provider, substituting ``default`` when unrecognized."""
    if isinstance(raw, Provider):
        return raw
    try:
        return Provider(str(raw).strip().lower())
    except (ValueError, TypeError):
        logger.warning(
            "Unknown API provider %r, falling back to %s", raw, default.value
        )
        return default


def sanitize_model(model: Any, provider: Provider) -> str:
    """Return ``model`` if the provider offers it, else the provider's fallback."""
    entry = PROVIDER_MODELS[provider]
    if isinstance(model, str) and entry.allows(model):
        return model
    logger.warning(
        "Model %r is not available for provider %s, using %s",
        model,
        provider.value,
        entry.fallback,
    )
    return entry.fallback


def default_models(provider: Provider) -> dict[str, str]:
    """Canonical model selection for a freshly chosen provider."""
    fallback = PROVIDER_MODELS[provider].fallback
    return {name: fallback for name in MODEL_FIELDS}


def available_models(provider: Provider) -> list[str]:
    return list(PROVIDER_MODELS[provider].models)


def detect_provider(api_key: Optional[str], current: Provider) -> Provider:
    """Infer the provider from the shape of a newly supplied API key.

    Keys starting with ``sk-`` are OpenAI keys. Any other key keeps the
    current provider.
    """
    if api_key and api_key.strip().startswith(OPENAI_KEY_PREFIX):
        if current is not Provider.OPENAI:
            logger.info("Auto-detected OpenAI API key format")
        return Provider.OPENAI
    return current
