"""
Environment configuration for the AI service.

Variables:
- AI_SELECTED_PROVIDER: preferred provider id for `AIService.test()` (optional)
- AI_ATTEMPT_TIMEOUT_SECONDS: per-attempt timeout for the fallback loop (default: 10)
- AI_HTTP_TIMEOUT_SECONDS: transport timeout of each provider request (default: 30)

Per provider, with PREFIX one of GEMINI, OPENAI, DEEPSEEK, OLLAMA, REFORMED_BIBLE, ESV:
- <PREFIX>_API_KEY: credential (the Ollama-hosted providers need none)
- <PREFIX>_MODEL: model name; blank selects the provider default
- <PREFIX>_TEMPERATURE: 0.0-2.0 (default: 0.7)
- <PREFIX>_ENABLED: "true"/"false"; defaults to true when an API key (or, for
  Ollama, a base URL) is set
- <PREFIX>_BASE_URL: endpoint override
"""
import os
from typing import Dict, List, Optional

from livingword.core.logging import get_logger
from livingword.services.ai.schema import AggregateSettings, ProviderConfig, ServiceType

logger = get_logger(__name__)

DEFAULT_ATTEMPT_TIMEOUT_SECONDS = 10.0
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
DEFAULT_TEMPERATURE = 0.7

# provider id -> (env prefix, display name, service type)
PROVIDER_ENV: Dict[str, tuple] = {
    "gemini": ("GEMINI", "Gemini AI", ServiceType.GEMINI),
    "openai": ("OPENAI", "OpenAI", ServiceType.OPENAI),
    "deepseek": ("DEEPSEEK", "DeepSeek", ServiceType.DEEPSEEK),
    "ollama": ("OLLAMA", "Ollama (self-hosted)", ServiceType.OLLAMA),
    "reformed_bible_ai": ("REFORMED_BIBLE", "Reformed Bible AI", ServiceType.REFORMED_BIBLE),
    "esv": ("ESV", "ESV Bible API", ServiceType.ESV),
}

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE_VALUES


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("config_invalid_float", variable=name, value=raw, default=default)
        return default


def get_attempt_timeout_seconds() -> float:
    value = _get_float("AI_ATTEMPT_TIMEOUT_SECONDS", DEFAULT_ATTEMPT_TIMEOUT_SECONDS)
    return value if value > 0 else DEFAULT_ATTEMPT_TIMEOUT_SECONDS


def get_http_timeout_seconds() -> float:
    value = _get_float("AI_HTTP_TIMEOUT_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS)
    return value if value > 0 else DEFAULT_HTTP_TIMEOUT_SECONDS


def provider_config_from_env(provider_id: str) -> Optional[ProviderConfig]:
    """
    Build one provider's config from the environment.

    Returns None when nothing is set for the provider, leaving it unconfigured.
    """
    prefix, display_name, service_type = PROVIDER_ENV[provider_id]
    api_key = os.getenv(f"{prefix}_API_KEY", "").strip()
    base_url = os.getenv(f"{prefix}_BASE_URL", "").strip() or None
    explicitly_enabled = os.getenv(f"{prefix}_ENABLED")

    if not api_key and not base_url and explicitly_enabled is None:
        return None

    temperature = _get_float(f"{prefix}_TEMPERATURE", DEFAULT_TEMPERATURE)
    if not 0.0 <= temperature <= 2.0:
        logger.warning("config_temperature_out_of_range", provider=provider_id, temperature=temperature)
        temperature = DEFAULT_TEMPERATURE

    return ProviderConfig(
        provider_id=provider_id,
        display_name=display_name,
        service_type=service_type,
        model_name=os.getenv(f"{prefix}_MODEL", "").strip(),
        api_key=api_key,
        temperature=temperature,
        enabled=_get_bool(f"{prefix}_ENABLED", True),
        base_url=base_url,
    )


def get_ai_settings() -> AggregateSettings:
    """Read the complete configuration batch from the environment."""
    configs: List[ProviderConfig] = []
    for provider_id in PROVIDER_ENV:
        config = provider_config_from_env(provider_id)
        if config is not None:
            configs.append(config)

    selected = os.getenv("AI_SELECTED_PROVIDER", "").strip() or None
    settings = AggregateSettings.from_configs(configs, selected_provider_id=selected)
    logger.info(
        "ai_settings_loaded",
        providers=sorted(settings.configs),
        selected_provider=selected,
    )
    return settings
