"""Tests for the provider/model allow-list policy."""

import logging

import pytest

from core.model_policy import (
    DEFAULT_PROVIDER,
    PROVIDER_MODELS,
    Provider,
    available_models,
    default_models,
    detect_provider,
    normalize_provider,
    sanitize_model,
)


def test_every_fallback_is_allow_listed() -> None:
    for provider, entry in PROVIDER_MODELS.items():
        assert entry.fallback in entry.models, provider


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("openai", Provider.OPENAI),
        (" Gemini ", Provider.GEMINI),
        (Provider.ANTHROPIC, Provider.ANTHROPIC),
        ("mistral", DEFAULT_PROVIDER),
        (None, DEFAULT_PROVIDER),
        (42, DEFAULT_PROVIDER),
    ],
)
def test_normalize_provider(raw, expected) -> None:
    assert normalize_provider(raw) is expected


def test_normalize_provider_custom_default() -> None:
    assert normalize_provider("unknown", Provider.GEMINI) is Provider.GEMINI


def test_normalize_provider_logs_correction(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="core.model_policy"):
        result = normalize_provider("mistral")

    assert result is Provider.OPENAI
    assert "Unknown API provider 'mistral'" in caplog.text


def test_normalize_provider_variant_is_not_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="core.model_policy"):
        assert normalize_provider(" Gemini ") is Provider.GEMINI

    assert caplog.records == []


def test_sanitize_model_keeps_allowed_model() -> None:
    assert sanitize_model("gpt-4o-mini", Provider.OPENAI) == "gpt-4o-mini"
    assert sanitize_model("gemini-1.5-pro", Provider.GEMINI) == "gemini-1.5-pro"


def test_sanitize_model_logs_substitution(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="core.model_policy"):
        result = sanitize_model("not-a-real-model", Provider.OPENAI)

    assert result == "gpt-5"
    assert "not-a-real-model" in caplog.text


def test_sanitize_model_rejects_other_providers_models() -> None:
    assert sanitize_model("gpt-5", Provider.ANTHROPIC) == "claude-3-7-sonnet-20250219"
    assert sanitize_model("claude-3-opus-20240229", Provider.GEMINI) == "gemini-2.0-flash"
    assert sanitize_model(None, Provider.GEMINI) == "gemini-2.0-flash"


def test_default_models_cover_all_model_fields() -> None:
    assert default_models(Provider.GEMINI) == {
        "extraction_model": "gemini-2.0-flash",
        "solution_model": "gemini-2.0-flash",
        "debugging_model": "gemini-2.0-flash",
    }


def test_available_models_returns_copy() -> None:
    models = available_models(Provider.OPENAI)
    models.append("custom")
    assert available_models(Provider.OPENAI) == ["gpt-4o", "gpt-4o-mini", "gpt-5"]


def test_detect_provider() -> None:
    assert detect_provider("sk-abc123", Provider.GEMINI) is Provider.OPENAI
    assert detect_provider("  sk-abc123  ", Provider.ANTHROPIC) is Provider.OPENAI
    assert detect_provider("AIzaSyExample", Provider.GEMINI) is Provider.GEMINI
    assert detect_provider("", Provider.ANTHROPIC) is Provider.ANTHROPIC
    assert detect_provider(None, Provider.GEMINI) is Provider.GEMINI
