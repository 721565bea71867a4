"""
Async JSON-over-HTTP client used by provider adapters.

One client per provider. Each request opens its own `httpx.AsyncClient`, so
concurrent operations share no connection state. Calls go through the
provider's circuit breaker; non-2xx statuses count as failures.

Failures surface as `TransportError` / `ProviderTimeoutError` / `ParseError`
(or `CircuitBreakerOpenError` when the breaker is open).
"""
from typing import Any, Dict, Optional

import httpx

from livingword.core.circuit_breaker import CircuitBreaker, CircuitBreakerOpenError
from livingword.core.logging import get_logger
from livingword.services.ai.errors import ParseError, ProviderTimeoutError, TransportError

logger = get_logger(__name__)

DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0


class ProviderHTTPClient:
    """HTTP client bound to one provider's base URL and headers."""

    def __init__(
        self,
        name: str,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
    ):
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.headers = dict(headers or {})
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self.circuit_breaker = circuit_breaker or CircuitBreaker(name=f"provider_{name}")

    async def _send(
        self,
        method: str,
        path: str,
        json_payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Low-level request helper (isolated for circuit breaker)."""
        headers = {"Content-Type": "application/json", **self.headers}
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            response = await client.request(
                method,
                f"{self.base_url}{path}",
                headers=headers,
                json=json_payload,
                params=params,
            )
        response.raise_for_status()
        return response

    async def request_json(
        self,
        method: str,
        path: str,
        json_payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            response: httpx.Response = await self.circuit_breaker.call_async(
                self._send, method, path, json_payload=json_payload, params=params
            )
        except CircuitBreakerOpenError:
            logger.warning("provider_circuit_open", provider=self.name)
            raise
        except httpx.TimeoutException as exc:
            logger.warning("provider_http_timeout", provider=self.name, error_type=type(exc).__name__)
            raise ProviderTimeoutError(provider=self.name, details=type(exc).__name__) from exc
        except httpx.HTTPStatusError as exc:
            body = exc.response.text[:200]
            logger.warning(
                "provider_http_status_error",
                provider=self.name,
                status_code=exc.response.status_code,
                body=body,
            )
            raise TransportError(
                f"HTTP {exc.response.status_code}", provider=self.name, details=body or None
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "provider_http_error",
                provider=self.name,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise TransportError(provider=self.name, details=f"{type(exc).__name__}: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise ParseError("Response body is not JSON", provider=self.name, details=response.text[:120]) from exc

    async def post_json(self, path: str, json_payload: Dict[str, Any], params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request_json("POST", path, json_payload=json_payload, params=params)

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request_json("GET", path, params=params)
