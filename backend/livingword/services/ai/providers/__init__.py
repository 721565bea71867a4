"""
Provider adapters and their registration.
"""
from typing import Optional

import httpx

from livingword.core.logging import get_logger
from livingword.services.ai.http_client import DEFAULT_HTTP_TIMEOUT_SECONDS
from livingword.services.ai.providers.base import AIProvider, ChatCompletionProvider, ScriptureProvider
from livingword.services.ai.providers.esv import ESVScriptureProvider
from livingword.services.ai.providers.gemini import GeminiProvider
from livingword.services.ai.providers.ollama import OllamaProvider, ReformedBibleProvider
from livingword.services.ai.providers.openai import DeepSeekProvider, OpenAIProvider

logger = get_logger(__name__)

BUILTIN_PROVIDERS = (
    GeminiProvider,
    OpenAIProvider,
    DeepSeekProvider,
    OllamaProvider,
    ReformedBibleProvider,
    ESVScriptureProvider,
)


def register_default_providers(
    registry,
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> None:
    """Register every built-in adapter with `registry` (AI and scripture pools)."""
    for provider_cls in BUILTIN_PROVIDERS:
        registry.register(provider_cls(transport=transport, http_timeout_seconds=http_timeout_seconds))
    stats = registry.statistics()
    logger.info(
        "default_providers_registered",
        total_providers=stats.total_providers,
        ai_providers=stats.ai_providers,
        scripture_providers=stats.scripture_providers,
    )


__all__ = [
    "AIProvider",
    "ChatCompletionProvider",
    "ScriptureProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "DeepSeekProvider",
    "OllamaProvider",
    "ReformedBibleProvider",
    "ESVScriptureProvider",
    "BUILTIN_PROVIDERS",
    "register_default_providers",
]
