"""
Error taxonomy for provider adapters.

These exceptions are raised and caught *inside* provider implementations and
converted into `Error` results at the provider boundary; none of them reach
the facade's callers.

Exception Hierarchy:
    ProviderError (base)
    ├── ConfigurationError   missing/invalid settings
    ├── TransportError       network failure or non-2xx HTTP status
    ├── ProviderTimeoutError request exceeded its transport timeout
    └── ParseError           response could not be decoded into the payload
"""
from typing import Optional

import httpx

from livingword.core.circuit_breaker import CircuitBreakerOpenError


class ProviderError(Exception):
    """Base exception for provider failures."""

    default_message: str = "Provider error"

    def __init__(self, message: Optional[str] = None, provider: str = "", details: Optional[str] = None):
        self.message = message or self.default_message
        self.provider = provider
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(ProviderError):
    default_message = "Provider is not configured"


class TransportError(ProviderError):
    default_message = "Network request failed"


class ProviderTimeoutError(TransportError):
    default_message = "Request timed out"


class ParseError(ProviderError):
    default_message = "Could not parse provider response"


def describe_exception(exc: BaseException) -> str:
    """
    Build the human-readable message used in an `Error` result.

    Transport failures, timeouts and parse failures are all reported as text
    so results stay uniform across heterogeneous backends.
    """
    if isinstance(exc, ProviderError):
        return str(exc)
    if isinstance(exc, CircuitBreakerOpenError):
        return str(exc)
    if isinstance(exc, httpx.TimeoutException):
        return f"Request timed out ({type(exc).__name__})"
    if isinstance(exc, httpx.HTTPStatusError):
        body = exc.response.text[:200] if exc.response is not None else ""
        return f"HTTP {exc.response.status_code}: {body}".strip()
    if isinstance(exc, httpx.HTTPError):
        return f"Network error ({type(exc).__name__}): {exc}"
    return f"Unexpected error ({type(exc).__name__}): {exc}"
