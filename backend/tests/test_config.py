"""
Unit tests for environment configuration.
"""
import pytest

from livingword.core import config as config_module
from livingword.services.ai.schema import AggregateSettings, ProviderConfig, ServiceType

ENV_PREFIXES = ("GEMINI", "OPENAI", "DEEPSEEK", "OLLAMA", "REFORMED_BIBLE", "ESV")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for prefix in ENV_PREFIXES:
        for suffix in ("API_KEY", "MODEL", "TEMPERATURE", "ENABLED", "BASE_URL"):
            monkeypatch.delenv(f"{prefix}_{suffix}", raising=False)
    for name in ("AI_SELECTED_PROVIDER", "AI_ATTEMPT_TIMEOUT_SECONDS", "AI_HTTP_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)


def test_no_environment_yields_empty_settings():
    settings = config_module.get_ai_settings()

    assert settings.configs == {}
    assert settings.selected_provider_id is None


def test_provider_settings_from_environment(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "g-key")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.0-flash")
    monkeypatch.setenv("GEMINI_TEMPERATURE", "0.3")
    monkeypatch.setenv("OPENAI_API_KEY", "o-key")
    monkeypatch.setenv("OPENAI_ENABLED", "false")
    monkeypatch.setenv("OLLAMA_BASE_URL", "http://gpu-box:11434")
    monkeypatch.setenv("AI_SELECTED_PROVIDER", "gemini")

    settings = config_module.get_ai_settings()

    assert set(settings.configs) == {"gemini", "openai", "ollama"}
    gemini = settings.configs["gemini"]
    assert gemini.model_name == "gemini-2.0-flash"
    assert gemini.temperature == pytest.approx(0.3)
    assert gemini.service_type == ServiceType.GEMINI
    assert settings.configs["openai"].enabled is False
    assert settings.configs["ollama"].base_url == "http://gpu-box:11434"
    assert settings.selected_provider_id == "gemini"


def test_bad_temperature_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("ESV_API_KEY", "e-key")
    monkeypatch.setenv("ESV_TEMPERATURE", "9")

    assert config_module.provider_config_from_env("esv").temperature == pytest.approx(0.7)

    monkeypatch.setenv("ESV_TEMPERATURE", "warm")
    assert config_module.provider_config_from_env("esv").temperature == pytest.approx(0.7)


def test_timeouts(monkeypatch):
    assert config_module.get_attempt_timeout_seconds() == pytest.approx(10.0)
    monkeypatch.setenv("AI_ATTEMPT_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("AI_HTTP_TIMEOUT_SECONDS", "-1")

    assert config_module.get_attempt_timeout_seconds() == pytest.approx(2.5)
    assert config_module.get_http_timeout_seconds() == pytest.approx(30.0)


def test_settings_keys_must_match_provider_ids():
    config = ProviderConfig(provider_id="gemini", service_type=ServiceType.GEMINI, api_key="k")

    with pytest.raises(ValueError):
        AggregateSettings(configs={"openai": config})
    with pytest.raises(ValueError):
        AggregateSettings.from_configs([config, config])


def test_temperature_is_bounded():
    with pytest.raises(ValueError):
        ProviderConfig(provider_id="gemini", service_type=ServiceType.GEMINI, temperature=2.5)
