"""
Provider registry.

Holds two independent pools keyed by provider id: general AI providers and
scripture-only providers. Listings are sorted ascending by priority; ties
keep registration order. Re-registering an id replaces the prior entry in
its original position.

Construct one registry per service (or per test) and pass it to
`AIService`; nothing here is global.
"""
from threading import Lock
from typing import Any, Dict, List, Optional

from livingword.core.logging import get_logger
from livingword.services.ai.providers.base import AIProvider, ScriptureProvider
from livingword.services.ai.schema import RegistryStatistics, ServiceType

logger = get_logger(__name__)


def _require_id(provider: Any) -> str:
    provider_id = getattr(provider, "provider_id", None)
    if not isinstance(provider_id, str) or not provider_id.strip():
        raise ValueError(f"Provider {type(provider).__name__} has no provider_id")
    return provider_id


def _availability(provider) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "available": provider.is_initialized(),
        "initialization_error": provider.get_initialization_error(),
    }
    # only HTTP-backed providers carry a breaker
    breaker = getattr(provider, "circuit_breaker", None)
    if breaker is not None:
        entry["circuit_breaker"] = breaker.get_metrics()
    return entry


class ProviderRegistry:
    """Catalog of providers with priority ordering, lookup and statistics."""

    def __init__(self):
        self._lock = Lock()
        self._providers: Dict[str, AIProvider] = {}
        self._scripture_providers: Dict[str, ScriptureProvider] = {}

    # Registration

    def register(self, provider: Any) -> None:
        """Add or replace a provider in the pool matching its type."""
        if isinstance(provider, AIProvider):
            self.register_provider(provider)
        elif isinstance(provider, ScriptureProvider):
            self.register_scripture_provider(provider)
        else:
            raise TypeError(f"{type(provider).__name__} is neither an AIProvider nor a ScriptureProvider")

    def register_provider(self, provider: AIProvider) -> None:
        if not isinstance(provider, AIProvider):
            raise TypeError(f"{type(provider).__name__} is not an AIProvider")
        provider_id = _require_id(provider)
        with self._lock:
            replaced = provider_id in self._providers
            self._providers[provider_id] = provider
        logger.info("provider_registered", provider=provider_id, pool="ai", priority=provider.priority, replaced=replaced)

    def register_scripture_provider(self, provider: ScriptureProvider) -> None:
        if not isinstance(provider, ScriptureProvider):
            raise TypeError(f"{type(provider).__name__} is not a ScriptureProvider")
        provider_id = _require_id(provider)
        with self._lock:
            replaced = provider_id in self._scripture_providers
            self._scripture_providers[provider_id] = provider
        logger.info(
            "provider_registered", provider=provider_id, pool="scripture", priority=provider.priority, replaced=replaced
        )

    def unregister(self, provider_id: str) -> bool:
        """Remove `provider_id` from both pools. Returns True if anything was removed."""
        with self._lock:
            removed_ai = self._providers.pop(provider_id, None)
            removed_scripture = self._scripture_providers.pop(provider_id, None)
        removed = removed_ai is not None or removed_scripture is not None
        if removed:
            logger.info(
                "provider_unregistered",
                provider=provider_id,
                ai_pool=removed_ai is not None,
                scripture_pool=removed_scripture is not None,
            )
        return removed

    def clear(self) -> None:
        """Empty both pools."""
        with self._lock:
            self._providers.clear()
            self._scripture_providers.clear()
        logger.info("provider_registry_cleared")

    # Lookup

    def get(self, provider_id: str) -> Optional[AIProvider]:
        with self._lock:
            return self._providers.get(provider_id)

    def get_scripture_provider(self, provider_id: str) -> Optional[ScriptureProvider]:
        with self._lock:
            return self._scripture_providers.get(provider_id)

    def list(self) -> List[AIProvider]:
        """All AI providers, ascending priority (stable)."""
        with self._lock:
            snapshot = list(self._providers.values())
        return sorted(snapshot, key=lambda p: p.priority)

    def list_scripture_providers(self) -> List[ScriptureProvider]:
        with self._lock:
            snapshot = list(self._scripture_providers.values())
        return sorted(snapshot, key=lambda p: p.priority)

    def available_list(self) -> List[AIProvider]:
        return [p for p in self.list() if p.is_initialized()]

    def available_scripture_list(self) -> List[ScriptureProvider]:
        return [p for p in self.list_scripture_providers() if p.is_initialized()]

    def providers_by_type(self, service_type: ServiceType) -> List[AIProvider]:
        return [p for p in self.list() if p.service_type == service_type]

    # Reporting

    def describe(self) -> List[Dict[str, Any]]:
        """Descriptor and availability of every provider, AI pool first."""
        entries: List[Dict[str, Any]] = []
        for provider in self.list():
            entries.append(
                {
                    "provider_id": provider.provider_id,
                    "display_name": provider.display_name,
                    "pool": "ai",
                    "service_type": provider.service_type.value,
                    "default_model": provider.default_model,
                    "priority": provider.priority,
                    **_availability(provider),
                }
            )
        for provider in self.list_scripture_providers():
            entries.append(
                {
                    "provider_id": provider.provider_id,
                    "display_name": provider.display_name,
                    "pool": "scripture",
                    "supported_translations": list(provider.supported_translations),
                    "priority": provider.priority,
                    **_availability(provider),
                }
            )
        return entries

    def statistics(self) -> RegistryStatistics:
        """Counts recomputed on every call."""
        ai = self.list()
        scripture = self.list_scripture_providers()
        available_ai = sum(1 for p in ai if p.is_initialized())
        available_scripture = sum(1 for p in scripture if p.is_initialized())

        by_type: Dict[str, int] = {}
        for provider in ai:
            key = provider.service_type.value
            by_type[key] = by_type.get(key, 0) + 1

        return RegistryStatistics(
            total_providers=len(ai) + len(scripture),
            available_providers=available_ai + available_scripture,
            ai_providers=len(ai),
            scripture_providers=len(scripture),
            available_scripture_providers=available_scripture,
            providers_by_type=by_type,
        )
