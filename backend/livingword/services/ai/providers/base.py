"""
Provider capability contract.

`AIProvider` is the interface every general AI backend implements;
`ScriptureProvider` is the narrower interface of scripture-only backends.
Every operation returns an `OperationResult`: exceptions raised inside an
adapter are converted to `Error` here, at the provider boundary.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional, Tuple, TypeVar

import httpx

from livingword.core.circuit_breaker import CircuitBreaker
from livingword.core.logging import get_logger
from livingword.services.ai import parsing, prompts
from livingword.services.ai.errors import ConfigurationError, describe_exception
from livingword.services.ai.http_client import DEFAULT_HTTP_TIMEOUT_SECONDS, ProviderHTTPClient
from livingword.services.ai.result import Error, OperationResult, Success
from livingword.services.ai.schema import (
    ProviderConfig,
    ProviderDescriptor,
    ScoreResult,
    ScriptureVerse,
    ServiceType,
    VerseRef,
)

logger = get_logger(__name__)

T = TypeVar("T")


class AIProvider(ABC):
    """A general AI backend able to serve all five operations."""

    provider_id: str = ""
    display_name: str = ""
    service_type: ServiceType
    default_model: str = ""
    priority: int = 100

    @property
    def descriptor(self) -> ProviderDescriptor:
        return ProviderDescriptor(
            provider_id=self.provider_id,
            display_name=self.display_name,
            service_type=self.service_type,
            default_model=self.default_model,
            priority=self.priority,
        )

    @abstractmethod
    def configure(self, config: ProviderConfig) -> bool:
        """Apply `config`, fully replacing prior state. Returns True when usable."""

    @abstractmethod
    def reset(self) -> None:
        """Drop any configuration; the provider becomes unavailable."""

    @abstractmethod
    def is_initialized(self) -> bool:
        ...

    @abstractmethod
    def get_initialization_error(self) -> Optional[str]:
        ...

    @abstractmethod
    async def test(self) -> bool:
        """Minimal round-trip to the backend. Never mutates configuration."""

    @abstractmethod
    async def fetch_scripture(self, verse_ref: VerseRef, translation: str) -> OperationResult[List[ScriptureVerse]]:
        ...

    @abstractmethod
    async def get_key_takeaway(self, verse_ref: str) -> OperationResult[str]:
        ...

    @abstractmethod
    async def get_ai_score(
        self, verse_ref: str, user_application: str, direct_quote: str = ""
    ) -> OperationResult[ScoreResult]:
        ...

    @abstractmethod
    async def validate_key_takeaway_response(self, verse_ref: str, takeaway: str) -> OperationResult[bool]:
        """`Success(False)` means the takeaway was judged inaccurate; it is not an error."""

    @abstractmethod
    async def get_new_verses_based_on_description(self, description: str) -> OperationResult[List[VerseRef]]:
        ...


class ScriptureProvider(ABC):
    """A backend that only retrieves scripture text, for a fixed set of translations."""

    provider_id: str = ""
    display_name: str = ""
    supported_translations: Tuple[str, ...] = ()
    priority: int = 100

    def supports(self, translation: str) -> bool:
        wanted = (translation or "").strip().upper()
        return any(wanted == t.upper() for t in self.supported_translations)

    @abstractmethod
    def configure(self, config: ProviderConfig) -> bool:
        ...

    @abstractmethod
    def reset(self) -> None:
        ...

    @abstractmethod
    def is_initialized(self) -> bool:
        ...

    @abstractmethod
    def get_initialization_error(self) -> Optional[str]:
        ...

    @abstractmethod
    async def test(self) -> bool:
        ...

    @abstractmethod
    async def fetch_scripture(self, verse_ref: VerseRef) -> OperationResult[List[ScriptureVerse]]:
        ...


class HTTPProviderMixin:
    """
    Configuration lifecycle shared by HTTP-backed providers.

    Subclasses set `default_base_url`, `requires_api_key` and implement
    `_client_headers`.
    """

    provider_id: str
    display_name: str
    default_base_url: str = ""
    requires_api_key: bool = True

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
    ):
        self._transport = transport
        self._http_timeout_seconds = http_timeout_seconds
        self._config: Optional[ProviderConfig] = None
        self._client: Optional[ProviderHTTPClient] = None
        self._initialization_error: Optional[str] = None
        # survives reconfiguration; reset() closes it again
        self.circuit_breaker = CircuitBreaker(name=f"provider_{self.provider_id}")

    def _client_headers(self, config: ProviderConfig) -> dict:
        return {}

    def _check_config(self, config: ProviderConfig) -> None:
        """Raise ConfigurationError when `config` cannot be applied to this provider."""
        if config.provider_id != self.provider_id:
            raise ConfigurationError(
                f"Configuration for {config.provider_id} cannot be applied to {self.provider_id}",
                provider=self.provider_id,
            )
        if not config.enabled:
            raise ConfigurationError(f"{self.display_name} is disabled", provider=self.provider_id)
        if self.requires_api_key and not config.api_key.strip():
            raise ConfigurationError(f"{self.display_name} API key is missing", provider=self.provider_id)

    def _build_client(self, config: ProviderConfig) -> ProviderHTTPClient:
        try:
            return ProviderHTTPClient(
                name=self.provider_id,
                base_url=config.base_url or self.default_base_url,
                headers=self._client_headers(config),
                timeout_seconds=self._http_timeout_seconds,
                transport=self._transport,
                circuit_breaker=self.circuit_breaker,
            )
        except Exception as exc:
            raise ConfigurationError(
                f"Failed to initialize {self.display_name}", provider=self.provider_id, details=str(exc)
            ) from exc

    def configure(self, config: ProviderConfig) -> bool:
        self.reset()
        try:
            self._check_config(config)
            self._client = self._build_client(config)
        except ConfigurationError as exc:
            self._initialization_error = str(exc)
            logger.warning("provider_configuration_failed", provider=self.provider_id, reason=str(exc))
            return False

        self._config = config
        logger.info(
            "provider_configured",
            provider=self.provider_id,
            model=self.model_name,
            temperature=config.temperature,
            api_key_present=bool(config.api_key.strip()),
        )
        return True

    def reset(self) -> None:
        self._config = None
        self._client = None
        self._initialization_error = None
        self.circuit_breaker.reset()

    def is_initialized(self) -> bool:
        return self._config is not None and self._client is not None and self._initialization_error is None

    def get_initialization_error(self) -> Optional[str]:
        return self._initialization_error

    @property
    def model_name(self) -> str:
        if self._config is not None and self._config.model_name.strip():
            return self._config.model_name.strip()
        return getattr(self, "default_model", "")

    @property
    def temperature(self) -> float:
        return self._config.temperature if self._config is not None else 0.7

    @property
    def client(self) -> ProviderHTTPClient:
        if self._client is None:
            raise RuntimeError(f"{self.display_name} is not configured")
        return self._client

    def _not_ready(self) -> Error:
        return Error(self._initialization_error or f"{self.display_name} is not configured")

    async def _run(self, operation: str, call: Callable[[], Awaitable[T]]) -> OperationResult[T]:
        """Run one operation, converting any raised exception into `Error`."""
        if not self.is_initialized():
            return self._not_ready()
        try:
            return Success(await call())
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            message = describe_exception(exc)
            logger.warning(
                "provider_operation_failed",
                provider=self.provider_id,
                operation=operation,
                error=message,
                error_type=type(exc).__name__,
            )
            return Error(f"{self.display_name}: {message}", cause=exc)


class ChatCompletionProvider(HTTPProviderMixin, AIProvider):
    """
    Shared implementation of the five operations for prompt-driven backends.

    Subclasses only implement `_complete`, returning the model's raw text.
    """

    @abstractmethod
    async def _complete(self, system_instruction: str, prompt: str, max_tokens: int) -> str:
        ...

    async def test(self) -> bool:
        if not self.is_initialized():
            return False
        try:
            text = await self._complete(prompts.SYSTEM_INSTRUCTION, prompts.TEST_PROMPT, 16)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("provider_test_failed", provider=self.provider_id, error=describe_exception(exc))
            return False
        return bool(text and text.strip())

    async def fetch_scripture(self, verse_ref: VerseRef, translation: str) -> OperationResult[List[ScriptureVerse]]:
        async def call() -> List[ScriptureVerse]:
            text = await self._complete(
                prompts.SCRIPTURE_INSTRUCTION, prompts.scripture_prompt(verse_ref, translation), 2048
            )
            return parsing.parse_scripture_verses(text)

        return await self._run("fetch_scripture", call)

    async def get_key_takeaway(self, verse_ref: str) -> OperationResult[str]:
        async def call() -> str:
            text = await self._complete(prompts.TAKEAWAY_INSTRUCTION, prompts.takeaway_prompt(verse_ref), 1024)
            return parsing.parse_text(text)

        return await self._run("get_key_takeaway", call)

    async def get_ai_score(
        self, verse_ref: str, user_application: str, direct_quote: str = ""
    ) -> OperationResult[ScoreResult]:
        async def call() -> ScoreResult:
            text = await self._complete(
                prompts.SYSTEM_INSTRUCTION,
                prompts.score_prompt(verse_ref, user_application, direct_quote),
                1024,
            )
            return parsing.parse_score(text)

        return await self._run("get_ai_score", call)

    async def validate_key_takeaway_response(self, verse_ref: str, takeaway: str) -> OperationResult[bool]:
        async def call() -> bool:
            text = await self._complete(
                prompts.VALIDATION_INSTRUCTION, prompts.validate_takeaway_prompt(verse_ref, takeaway), 16
            )
            return parsing.parse_boolean(text)

        return await self._run("validate_key_takeaway_response", call)

    async def get_new_verses_based_on_description(self, description: str) -> OperationResult[List[VerseRef]]:
        async def call() -> List[VerseRef]:
            text = await self._complete(prompts.SYSTEM_INSTRUCTION, prompts.verse_search_prompt(description), 1024)
            return parsing.parse_verse_refs(text)

        return await self._run("get_new_verses_based_on_description", call)
