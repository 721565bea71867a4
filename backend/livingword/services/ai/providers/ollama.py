"""
Self-hosted Ollama provider (`POST /api/generate`, non-streaming).

No credential is required; `base_url` points at the Ollama server.
"""
from typing import Any, Dict

from livingword.services.ai.errors import ParseError
from livingword.services.ai.providers.base import ChatCompletionProvider
from livingword.services.ai.schema import ServiceType


class OllamaProvider(ChatCompletionProvider):
    provider_id = "ollama"
    display_name = "Ollama (self-hosted)"
    service_type = ServiceType.OLLAMA
    default_model = "hf.co/mradermacher/Protestant-Christian-Bible-Expert-v2.0-12B-i1-GGUF:IQ4_XS"
    priority = 1
    default_base_url = "http://localhost:11434"
    requires_api_key = False

    async def _complete(self, system_instruction: str, prompt: str, max_tokens: int) -> str:
        payload: Dict[str, Any] = {
            "model": self.model_name,
            "system": system_instruction,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": self.temperature, "num_predict": max_tokens},
        }
        data = await self.client.post_json("/api/generate", payload)

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str) or not text.strip():
            raise ParseError("Received empty response from AI", provider=self.provider_id)
        return text


class ReformedBibleProvider(OllamaProvider):
    """Reformed Bible expert model served by the same kind of Ollama server."""

    provider_id = "reformed_bible_ai"
    display_name = "Reformed Bible AI"
    service_type = ServiceType.REFORMED_BIBLE
    default_model = "hf.co/sleepdeprived3/Reformed-Christian-Bible-Expert-v1.1-12B-Q8_0-GGUF:Q8_0"
    priority = 2
