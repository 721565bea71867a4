"""
Tests for the HTTP provider adapters.

Backends are emulated with httpx.MockTransport; no real network calls.
"""
import json

import httpx
import pytest

from livingword.core.circuit_breaker import CircuitState
from livingword.services.ai.providers import (
    DeepSeekProvider,
    ESVScriptureProvider,
    GeminiProvider,
    OllamaProvider,
    ReformedBibleProvider,
    OpenAIProvider,
    register_default_providers,
)
from livingword.services.ai.registry import ProviderRegistry
from livingword.services.ai.result import Error, Success
from livingword.services.ai.schema import ProviderConfig, ServiceType, VerseRef


def config_for(provider, api_key="secret", **overrides) -> ProviderConfig:
    values = dict(
        provider_id=provider.provider_id,
        display_name=provider.display_name,
        service_type=ServiceType.ESV if provider.provider_id == "esv" else provider.service_type,
        api_key=api_key,
    )
    values.update(overrides)
    return ProviderConfig(**values)


def openai_reply(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class Recorder:
    """MockTransport handler that records requests and replies with canned responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses[0] if len(self.responses) == 1 else self.responses.pop(0)
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, json=response)

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


def configured(provider_cls, recorder, api_key="secret", **overrides):
    provider = provider_cls(transport=httpx.MockTransport(recorder))
    assert provider.configure(config_for(provider, api_key=api_key, **overrides)) is True
    return provider


def test_missing_api_key_fails_configuration():
    provider = OpenAIProvider()

    assert provider.configure(config_for(provider, api_key="  ")) is False
    assert not provider.is_initialized()
    assert provider.get_initialization_error() == "OpenAI API key is missing"


def test_disabled_config_fails_configuration():
    provider = GeminiProvider()

    assert provider.configure(config_for(provider, enabled=False)) is False
    assert "disabled" in provider.get_initialization_error()


def test_reconfigure_replaces_previous_state():
    provider = OpenAIProvider()
    assert provider.configure(config_for(provider, model_name="gpt-4o")) is True
    assert provider.model_name == "gpt-4o"

    assert provider.configure(config_for(provider, api_key="")) is False
    assert not provider.is_initialized()

    assert provider.configure(config_for(provider)) is True
    assert provider.model_name == "gpt-4o-mini"
    assert provider.get_initialization_error() is None


@pytest.mark.asyncio
async def test_unconfigured_provider_returns_error():
    provider = OpenAIProvider()

    result = await provider.get_key_takeaway("John 3:16")

    assert isinstance(result, Error)
    assert "not configured" in result.message
    assert await provider.test() is False


@pytest.mark.asyncio
async def test_openai_takeaway_request_shape():
    recorder = Recorder(openai_reply("God's love is given freely."))
    provider = configured(OpenAIProvider, recorder, temperature=0.2)

    result = await provider.get_key_takeaway("John 3:16")

    assert result == Success("God's love is given freely.")
    request = recorder.requests[0]
    assert request.url == "https://api.openai.com/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer secret"
    body = recorder.last_json
    assert body["model"] == "gpt-4o-mini"
    assert body["temperature"] == pytest.approx(0.2)
    assert body["messages"][-1]["content"].endswith("John 3:16")


@pytest.mark.asyncio
async def test_openai_scripture_drops_blank_verse():
    content = '```json\n[{"verse_num": 35, "verse_string": ""}, {"verse_num": 35, "verse_string": "Jesus wept."}]\n```'
    provider = configured(OpenAIProvider, Recorder(openai_reply(content)))

    result = await provider.fetch_scripture(VerseRef(book="John", chapter=11, start_verse=35, end_verse=35), "KJV")

    assert isinstance(result, Success)
    assert [(v.verse_num, v.verse_text) for v in result.payload] == [(35, "Jesus wept.")]


@pytest.mark.asyncio
async def test_http_status_error_becomes_error_result():
    provider = configured(OpenAIProvider, Recorder(httpx.Response(500, text="upstream exploded")))

    result = await provider.get_key_takeaway("John 3:16")

    assert isinstance(result, Error)
    assert "HTTP 500" in result.message
    assert result.cause is not None


@pytest.mark.asyncio
async def test_unparseable_score_becomes_error_result():
    provider = configured(OpenAIProvider, Recorder(openai_reply("I think it deserves a B+")))

    result = await provider.get_ai_score("John 3:16", "Love others")

    assert isinstance(result, Error)
    assert "JSON" in result.message


@pytest.mark.asyncio
async def test_connection_error_becomes_error_result():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    provider = OpenAIProvider(transport=httpx.MockTransport(refuse))
    provider.configure(config_for(provider))

    result = await provider.get_new_verses_based_on_description("hope in suffering")

    assert isinstance(result, Error)
    assert "Network request failed" in result.message


@pytest.mark.asyncio
async def test_circuit_opens_after_repeated_failures():
    recorder = Recorder(httpx.Response(503, text="overloaded"))
    provider = configured(OpenAIProvider, recorder)

    for _ in range(5):
        assert isinstance(await provider.get_key_takeaway("John 3:16"), Error)
    result = await provider.get_key_takeaway("John 3:16")

    assert isinstance(result, Error)
    assert "Circuit breaker" in result.message
    assert len(recorder.requests) == 5


@pytest.mark.asyncio
async def test_reconfigure_closes_open_circuit():
    recorder = Recorder(httpx.Response(503, text="overloaded"))
    provider = configured(OpenAIProvider, recorder)
    for _ in range(5):
        await provider.get_key_takeaway("John 3:16")
    assert provider.circuit_breaker.state == CircuitState.OPEN

    assert provider.configure(config_for(provider)) is True

    assert provider.circuit_breaker.state == CircuitState.CLOSED
    assert provider.client.circuit_breaker is provider.circuit_breaker


def test_client_construction_failure_is_configuration_error(monkeypatch):
    def broken_client(**kwargs):
        raise ValueError("bad base url")

    monkeypatch.setattr("livingword.services.ai.providers.base.ProviderHTTPClient", broken_client)
    provider = GeminiProvider()

    assert provider.configure(config_for(provider)) is False
    assert provider.get_initialization_error() == "Failed to initialize Gemini AI: bad base url"
    assert not provider.is_initialized()


@pytest.mark.asyncio
async def test_deepseek_uses_its_own_endpoint():
    recorder = Recorder(openai_reply("true"))
    provider = configured(DeepSeekProvider, recorder)

    result = await provider.validate_key_takeaway_response("John 3:16", "God loves the world")

    assert result == Success(True)
    assert recorder.requests[0].url == "https://api.deepseek.com/v1/chat/completions"
    assert recorder.last_json["model"] == "deepseek-chat"


@pytest.mark.asyncio
async def test_gemini_generate_content():
    reply = {"candidates": [{"content": {"parts": [{"text": "False."}]}}]}
    recorder = Recorder(reply)
    provider = configured(GeminiProvider, recorder)

    result = await provider.validate_key_takeaway_response("John 3:16", "This is about fishing techniques")

    assert result == Success(False)
    request = recorder.requests[0]
    assert request.url.path == "/v1beta/models/gemini-1.5-flash:generateContent"
    assert request.headers["x-goog-api-key"] == "secret"
    assert recorder.last_json["generationConfig"]["temperature"] == pytest.approx(0.7)


@pytest.mark.asyncio
async def test_gemini_blocked_prompt_is_error():
    provider = configured(GeminiProvider, Recorder({"promptFeedback": {"blockReason": "SAFETY"}}))

    result = await provider.get_key_takeaway("John 3:16")

    assert isinstance(result, Error)
    assert "SAFETY" in result.message


@pytest.mark.asyncio
async def test_ollama_needs_no_key_and_scores():
    reply = {"response": '{"ContextScore": 72, "ContextExplanation": "Good", "ApplicationFeedback": "Go further"}'}
    recorder = Recorder(reply)
    provider = configured(OllamaProvider, recorder, api_key="", base_url="http://ollama.local:11434")

    result = await provider.get_ai_score("Romans 12:12", "Pray daily", direct_quote="Rejoice in hope")

    assert isinstance(result, Success)
    assert result.payload.context_score == 72
    assert recorder.requests[0].url == "http://ollama.local:11434/api/generate"
    body = recorder.last_json
    assert body["stream"] is False
    assert "Rejoice in hope" in body["prompt"]


@pytest.mark.asyncio
async def test_reformed_bible_runs_its_own_model_on_ollama():
    recorder = Recorder({"response": "Trust in the Lord"})
    provider = configured(ReformedBibleProvider, recorder, api_key="")

    result = await provider.get_key_takeaway("Proverbs 3:5")

    assert isinstance(result, Success)
    assert provider.priority == 2
    assert recorder.requests[0].url == "http://localhost:11434/api/generate"
    assert recorder.last_json["model"] == ReformedBibleProvider.default_model
    assert ReformedBibleProvider.default_model != OllamaProvider.default_model


@pytest.mark.asyncio
async def test_chat_provider_test_round_trip():
    provider = configured(OpenAIProvider, Recorder(openai_reply("ok")))
    assert await provider.test() is True

    failing = configured(OpenAIProvider, Recorder(httpx.Response(401, text="bad key")))
    assert await failing.test() is False


@pytest.mark.asyncio
async def test_esv_passage_lookup():
    passage = (
        "[12] Rejoice in hope, be patient in tribulation, be constant in prayer. "
        "[13] Contribute to the needs of the saints and seek to show hospitality. "
        "[14] Bless those who persecute you; bless and do not curse them. (ESV)"
    )
    recorder = Recorder({"query": "Romans 12:12-14", "passages": [passage]})
    provider = configured(ESVScriptureProvider, recorder)

    result = await provider.fetch_scripture(VerseRef(book="Romans", chapter=12, start_verse=12, end_verse=14))

    assert isinstance(result, Success)
    assert [v.verse_num for v in result.payload] == [12, 13, 14]
    request = recorder.requests[0]
    assert request.method == "GET"
    assert request.url.path == "/v3/passage/text/"
    assert request.url.params["q"] == "Romans 12:12-14"
    assert request.headers["Authorization"] == "Token secret"
    assert provider.supports("esv")
    assert not provider.supports("NIV")


@pytest.mark.asyncio
async def test_esv_missing_passage_is_error():
    provider = configured(ESVScriptureProvider, Recorder({"query": "Hezekiah 1:1", "passages": []}))

    result = await provider.fetch_scripture(VerseRef(book="Hezekiah", chapter=1, start_verse=1, end_verse=1))

    assert isinstance(result, Error)
    assert "Passage not found" in result.message


def test_register_default_providers():
    registry = ProviderRegistry()
    register_default_providers(registry)

    assert [p.provider_id for p in registry.list()] == [
        "ollama",
        "reformed_bible_ai",
        "gemini",
        "openai",
        "deepseek",
    ]
    assert [p.provider_id for p in registry.list_scripture_providers()] == ["esv"]
    assert registry.available_list() == []
