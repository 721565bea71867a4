"""
OpenAI-compatible chat completion providers (OpenAI, DeepSeek).

Both speak `POST /chat/completions` and return the answer in
`choices[0].message.content`.
"""
from typing import Any, Dict

from livingword.services.ai.errors import ParseError
from livingword.services.ai.providers.base import ChatCompletionProvider
from livingword.services.ai.schema import ProviderConfig, ServiceType


class OpenAIProvider(ChatCompletionProvider):
    provider_id = "openai"
    display_name = "OpenAI"
    service_type = ServiceType.OPENAI
    default_model = "gpt-4o-mini"
    priority = 20
    default_base_url = "https://api.openai.com/v1"

    def _client_headers(self, config: ProviderConfig) -> dict:
        return {"Authorization": f"Bearer {config.api_key.strip()}"}

    async def _complete(self, system_instruction: str, prompt: str, max_tokens: int) -> str:
        payload: Dict[str, Any] = {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": system_instruction},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": max_tokens,
        }
        data = await self.client.post_json("/chat/completions", payload)

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ParseError("Missing choices[0].message.content", provider=self.provider_id) from exc
        if not isinstance(content, str) or not content.strip():
            raise ParseError("Received empty response from AI", provider=self.provider_id)
        return content


class DeepSeekProvider(OpenAIProvider):
    provider_id = "deepseek"
    display_name = "DeepSeek"
    service_type = ServiceType.DEEPSEEK
    default_model = "deepseek-chat"
    priority = 100
    default_base_url = "https://api.deepseek.com/v1"
