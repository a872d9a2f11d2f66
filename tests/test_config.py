"""
Tests for environment-driven configuration.
"""

import pytest
from pydantic import ValidationError

from image_chat.core.config import (
    APIConfig,
    BackendConfig,
    GenerationConfig,
    RetryConfig,
    Settings,
)


def test_defaults():
    settings = Settings()
    assert settings.retry.max_retries == 0
    assert settings.retry.delay_seconds == 5.0
    assert settings.backend.timeout == 600.0
    assert settings.api.rate_limit == "60/minute"
    assert settings.generation.default_model in settings.generation.model_ids


def test_backend_url_from_environment_is_normalised(monkeypatch):
    monkeypatch.setenv("BACKEND_BASE_URL", "http://localhost:9000/v1/")
    assert BackendConfig().base_url == "http://localhost:9000/v1"


def test_backend_url_requires_http_scheme(monkeypatch):
    monkeypatch.setenv("BACKEND_BASE_URL", "localhost:9000")
    with pytest.raises(ValidationError):
        BackendConfig()


def test_retry_settings_from_environment(monkeypatch):
    monkeypatch.setenv("RETRY_MAX_RETRIES", "3")
    monkeypatch.setenv("RETRY_DELAY_SECONDS", "0.25")
    config = RetryConfig()
    assert (config.max_retries, config.delay_seconds) == (3, 0.25)


def test_negative_retries_rejected(monkeypatch):
    monkeypatch.setenv("RETRY_MAX_RETRIES", "-1")
    with pytest.raises(ValidationError):
        RetryConfig()


def test_supported_models_are_split_and_trimmed(monkeypatch):
    monkeypatch.setenv("GENERATION_SUPPORTED_MODELS", " a , b,,c ")
    assert GenerationConfig().model_ids == ["a", "b", "c"]


def test_api_port_bounds(monkeypatch):
    monkeypatch.setenv("API_PORT", "70000")
    with pytest.raises(ValidationError):
        APIConfig()
