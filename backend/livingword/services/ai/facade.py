"""
Orchestrating facade for AI operations.

Every operation resolves the available providers from the registry in
ascending priority, tries them one at a time under a fixed per-attempt
timeout, and returns the first `Success`. Timeouts, `Error` results and
unexpected exceptions all count as a failed attempt and move on to the next
candidate. When the list is exhausted the caller gets a single `Error` naming
the last failure.

Attempts within one call are strictly sequential so that at most one paid or
rate-limited backend is in flight per operation.
"""
import asyncio
import time
from typing import Awaitable, Callable, List, Optional, Tuple, Union

from livingword.core.config import get_ai_settings, get_attempt_timeout_seconds, get_http_timeout_seconds
from livingword.core.logging import get_logger
from livingword.core.metrics import (
    record_fallback,
    record_operation_result,
    record_provider_attempt,
    update_available_providers,
)
from livingword.services.ai.errors import describe_exception
from livingword.services.ai.providers import register_default_providers
from livingword.services.ai.providers.base import AIProvider, ScriptureProvider
from livingword.services.ai.registry import ProviderRegistry
from livingword.services.ai.result import Error, OperationResult, Success
from livingword.services.ai.schema import (
    AggregateSettings,
    ConfigurationReport,
    ScoreResult,
    ScriptureVerse,
    VerseRef,
)

logger = get_logger(__name__)

DEFAULT_ATTEMPT_TIMEOUT_SECONDS = 10.0

Attempt = Tuple[str, Callable[[], Awaitable[OperationResult]]]


class AIService:
    """Single entry point for the five AI operations."""

    def __init__(
        self,
        registry: ProviderRegistry,
        attempt_timeout_seconds: float = DEFAULT_ATTEMPT_TIMEOUT_SECONDS,
    ):
        if attempt_timeout_seconds <= 0:
            raise ValueError("attempt_timeout_seconds must be positive")
        self.registry = registry
        self.attempt_timeout_seconds = attempt_timeout_seconds
        self._settings: Optional[AggregateSettings] = None
        self._initialized = False
        self._initialization_error: Optional[str] = "AI service has not been configured"

    # Configuration

    def configure(self, settings: AggregateSettings) -> ConfigurationReport:
        """
        Apply a configuration batch to every registered provider.

        Providers with an entry in `settings.configs` are configured with it;
        providers without one are reset, so nothing carries over from an
        earlier batch. The facade is initialized when at least one provider
        ends up usable.
        """
        report = ConfigurationReport()
        providers: List[Union[AIProvider, ScriptureProvider]] = [
            *self.registry.list(),
            *self.registry.list_scripture_providers(),
        ]
        known_ids = set()

        for provider in providers:
            provider_id = provider.provider_id
            known_ids.add(provider_id)
            config = settings.configs.get(provider_id)
            if config is None:
                provider.reset()
                continue

            try:
                ok = bool(provider.configure(config))
                reason = provider.get_initialization_error()
            except Exception as exc:
                ok = False
                reason = f"configure raised {type(exc).__name__}: {exc}"
                logger.error("provider_configure_raised", provider=provider_id, error=str(exc), exc_info=True)

            report.results[provider_id] = ok
            if not ok:
                report.errors.append(f"{provider_id}: {reason or 'configuration failed'}")

        for provider_id in settings.configs:
            if provider_id not in known_ids:
                report.errors.append(f"{provider_id}: no such provider is registered")

        self._settings = settings
        self._initialized = report.has_successful_configurations
        if self._initialized:
            self._initialization_error = None
        elif report.errors:
            self._initialization_error = "No AI provider could be configured: " + "; ".join(report.errors)
        else:
            self._initialization_error = "No AI provider could be configured: no provider settings supplied"

        update_available_providers(
            ai_count=len(self.registry.available_list()),
            scripture_count=len(self.registry.available_scripture_list()),
        )
        logger.info(
            "ai_service_configured",
            initialized=self._initialized,
            selected_provider=settings.selected_provider_id,
            results=report.results,
            error_count=len(report.errors),
        )
        return report

    def is_initialized(self) -> bool:
        return self._initialized

    def get_initialization_error(self) -> Optional[str]:
        return self._initialization_error

    def get_selected_provider_id(self) -> Optional[str]:
        return self._settings.selected_provider_id if self._settings else None

    def get_last_configuration(self) -> Optional[AggregateSettings]:
        return self._settings

    # Fallback loop

    async def _run_with_fallback(self, operation: str, attempts: List[Attempt]) -> OperationResult:
        if not attempts:
            message = f"No available providers for {operation}"
            if self._initialization_error:
                message = f"{message} ({self._initialization_error})"
            record_operation_result(operation, "no_providers")
            logger.warning("ai_no_available_providers", operation=operation)
            return Error(message)

        last_failure: Optional[Error] = None
        for index, (provider_id, call) in enumerate(attempts):
            if index > 0:
                record_fallback(operation)

            start = time.perf_counter()
            try:
                result = await asyncio.wait_for(call(), timeout=self.attempt_timeout_seconds)
                if isinstance(result, Success):
                    outcome = "success"
                elif isinstance(result, Error):
                    outcome = "error"
                else:
                    result = Error(f"{provider_id} returned {type(result).__name__} instead of a result")
                    outcome = "error"
            except asyncio.TimeoutError:
                result = Error(f"{provider_id} timed out after {self.attempt_timeout_seconds:g}s")
                outcome = "timeout"
            except Exception as exc:
                result = Error(f"{provider_id} failed: {describe_exception(exc)}", cause=exc)
                outcome = "error"
            duration = time.perf_counter() - start
            record_provider_attempt(provider_id, operation, outcome, duration)

            if isinstance(result, Success):
                logger.info(
                    "ai_attempt_succeeded",
                    provider=provider_id,
                    operation=operation,
                    attempt=index + 1,
                    duration_ms=round(duration * 1000.0, 1),
                )
                record_operation_result(operation, "success")
                return result

            logger.warning(
                "ai_attempt_failed",
                provider=provider_id,
                operation=operation,
                attempt=index + 1,
                outcome=outcome,
                error=result.message,
            )
            last_failure = result

        record_operation_result(operation, "exhausted")
        return Error(
            f"All providers failed for {operation}: {last_failure.message}",
            cause=last_failure.cause,
        )

    def _ai_attempts(self, call: Callable[[AIProvider], Awaitable[OperationResult]]) -> List[Attempt]:
        return [(p.provider_id, (lambda p=p: call(p))) for p in self.registry.available_list()]

    # Operations

    async def fetch_scripture(self, verse_ref: VerseRef, translation: str) -> OperationResult[List[ScriptureVerse]]:
        """Scripture-only providers serving `translation` go first, then AI providers."""
        attempts: List[Attempt] = [
            (p.provider_id, (lambda p=p: p.fetch_scripture(verse_ref)))
            for p in self.registry.available_scripture_list()
            if p.supports(translation)
        ]
        attempts.extend(self._ai_attempts(lambda p: p.fetch_scripture(verse_ref, translation)))
        return await self._run_with_fallback("fetch_scripture", attempts)

    async def get_key_takeaway(self, verse_ref: str) -> OperationResult[str]:
        return await self._run_with_fallback(
            "get_key_takeaway",
            self._ai_attempts(lambda p: p.get_key_takeaway(verse_ref)),
        )

    async def get_ai_score(
        self, verse_ref: str, direct_quote: str, user_application: str
    ) -> OperationResult[ScoreResult]:
        return await self._run_with_fallback(
            "get_ai_score",
            self._ai_attempts(lambda p: p.get_ai_score(verse_ref, user_application, direct_quote)),
        )

    async def validate_key_takeaway_response(self, verse_ref: str, takeaway: str) -> OperationResult[bool]:
        return await self._run_with_fallback(
            "validate_key_takeaway_response",
            self._ai_attempts(lambda p: p.validate_key_takeaway_response(verse_ref, takeaway)),
        )

    async def get_new_verses_based_on_description(self, description: str) -> OperationResult[List[VerseRef]]:
        return await self._run_with_fallback(
            "get_new_verses_based_on_description",
            self._ai_attempts(lambda p: p.get_new_verses_based_on_description(description)),
        )

    async def test(self) -> bool:
        """
        Coarse health check of the preferred provider.

        Uses the selected provider when one is set, otherwise the
        highest-priority available AI provider. Not part of the fallback path.
        """
        selected = self.get_selected_provider_id()
        if selected:
            provider = self.registry.get(selected) or self.registry.get_scripture_provider(selected)
        else:
            available = self.registry.available_list()
            provider = available[0] if available else None
        if provider is None:
            logger.warning("ai_test_no_provider", selected_provider=selected)
            return False

        try:
            ok = bool(await asyncio.wait_for(provider.test(), timeout=self.attempt_timeout_seconds))
        except asyncio.TimeoutError:
            ok = False
        except Exception as exc:
            logger.warning("ai_test_failed", provider=provider.provider_id, error=describe_exception(exc))
            ok = False
        logger.info("ai_test_completed", provider=provider.provider_id, ok=ok)
        return ok


_ai_service: Optional[AIService] = None


def get_ai_service() -> AIService:
    """
    Global AIService instance with the built-in providers registered and
    configured from the environment.
    """
    global _ai_service
    if _ai_service is None:
        registry = ProviderRegistry()
        register_default_providers(registry, http_timeout_seconds=get_http_timeout_seconds())
        service = AIService(registry, attempt_timeout_seconds=get_attempt_timeout_seconds())
        service.configure(get_ai_settings())
        _ai_service = service
    return _ai_service


def reset_ai_service() -> None:
    """Drop the global instance (tests, reconfiguration)."""
    global _ai_service
    _ai_service = None
