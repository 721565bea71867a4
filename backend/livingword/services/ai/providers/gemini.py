"""
Google Gemini provider over the `generateContent` REST endpoint.
"""
from typing import Any, Dict

from livingword.services.ai.errors import ParseError
from livingword.services.ai.providers.base import ChatCompletionProvider
from livingword.services.ai.schema import ProviderConfig, ServiceType


class GeminiProvider(ChatCompletionProvider):
    provider_id = "gemini"
    display_name = "Gemini AI"
    service_type = ServiceType.GEMINI
    default_model = "gemini-1.5-flash"
    priority = 10
    default_base_url = "https://generativelanguage.googleapis.com/v1beta"

    def _client_headers(self, config: ProviderConfig) -> dict:
        return {"x-goog-api-key": config.api_key.strip()}

    async def _complete(self, system_instruction: str, prompt: str, max_tokens: int) -> str:
        payload: Dict[str, Any] = {
            "systemInstruction": {"parts": [{"text": system_instruction}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": max_tokens,
            },
        }
        data = await self.client.post_json(f"/models/{self.model_name}:generateContent", payload)

        try:
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            # blocked prompts come back without candidates
            reason = (data.get("promptFeedback") or {}).get("blockReason") if isinstance(data, dict) else None
            raise ParseError("Missing candidates[0].content", provider=self.provider_id, details=reason) from exc
        if not text.strip():
            raise ParseError("Received empty response from AI", provider=self.provider_id)
        return text
