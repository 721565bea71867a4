"""
Prometheus metrics collection module.

Metrics Categories:
- RED Metrics: Rate, Errors, Duration of the HTTP surface
- Provider Metrics: per-provider attempts, outcomes and latency
- Orchestration Metrics: operation outcomes and fallbacks
- Cache Metrics: feedback cache hits and misses

All metrics follow Prometheus naming conventions:
- Counters: _total suffix
- Histograms: _seconds suffix for duration
- Gauges: No special suffix
"""
from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from livingword.core.logging import get_logger

logger = get_logger(__name__)

registry = REGISTRY

# ============================================================================
# RED METRICS - Rate, Errors, Duration
# ============================================================================

http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status"],
    registry=registry,
)

http_errors_total = Counter(
    "http_errors_total",
    "Total number of HTTP errors",
    ["method", "endpoint", "status_code"],
    registry=registry,
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
    registry=registry,
)

# ============================================================================
# PROVIDER METRICS
# ============================================================================

# outcome: success | error | timeout
ai_provider_attempts_total = Counter(
    "ai_provider_attempts_total",
    "Total number of operation attempts made against a provider",
    ["provider", "operation", "outcome"],
    registry=registry,
)

ai_provider_attempt_duration_seconds = Histogram(
    "ai_provider_attempt_duration_seconds",
    "Latency of a single provider attempt in seconds",
    ["provider", "operation"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 7.5, 10.0, 15.0],
    registry=registry,
)

ai_providers_available = Gauge(
    "ai_providers_available",
    "Number of configured, ready providers",
    ["pool"],  # "ai", "scripture"
    registry=registry,
)

# ============================================================================
# ORCHESTRATION METRICS
# ============================================================================

# outcome: success | exhausted | no_providers
ai_operation_results_total = Counter(
    "ai_operation_results_total",
    "Final outcome of facade operations",
    ["operation", "outcome"],
    registry=registry,
)

ai_fallbacks_total = Counter(
    "ai_fallbacks_total",
    "Number of times an operation advanced to the next provider",
    ["operation"],
    registry=registry,
)

# ============================================================================
# CACHE METRICS
# ============================================================================

feedback_cache_lookups_total = Counter(
    "feedback_cache_lookups_total",
    "Feedback cache lookups",
    ["result"],  # "hit", "miss"
    registry=registry,
)


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def normalize_endpoint(path: str) -> str:
    """
    Normalize endpoint path for metrics.

    Strips query strings and trailing slashes to keep label cardinality low.

    Examples:
        /ai/score?x=1 -> /ai/score
        /health/ -> /health
    """
    if "?" in path:
        path = path.split("?")[0]
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/")
    return path


def record_http_request(
    method: str,
    endpoint: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record HTTP request metrics (RED metrics)."""
    normalized_endpoint = normalize_endpoint(endpoint)

    http_requests_total.labels(
        method=method,
        endpoint=normalized_endpoint,
        status=str(status_code),
    ).inc()

    if status_code >= 400:
        http_errors_total.labels(
            method=method,
            endpoint=normalized_endpoint,
            status_code=str(status_code),
        ).inc()

    http_request_duration_seconds.labels(
        method=method,
        endpoint=normalized_endpoint,
    ).observe(duration_seconds)


def record_provider_attempt(
    provider: str,
    operation: str,
    outcome: str,
    duration_seconds: Optional[float] = None,
) -> None:
    """
    Record a single provider attempt.

    Args:
        provider: Provider id
        operation: Facade operation name (e.g. "get_key_takeaway")
        outcome: "success", "error" or "timeout"
        duration_seconds: Attempt latency, when measured
    """
    ai_provider_attempts_total.labels(
        provider=provider,
        operation=operation,
        outcome=outcome,
    ).inc()
    if duration_seconds is not None:
        ai_provider_attempt_duration_seconds.labels(
            provider=provider,
            operation=operation,
        ).observe(duration_seconds)


def record_operation_result(operation: str, outcome: str) -> None:
    """Record the final outcome of a facade operation."""
    ai_operation_results_total.labels(operation=operation, outcome=outcome).inc()


def record_fallback(operation: str) -> None:
    ai_fallbacks_total.labels(operation=operation).inc()


def record_feedback_cache_lookup(hit: bool) -> None:
    feedback_cache_lookups_total.labels(result="hit" if hit else "miss").inc()


def update_available_providers(ai_count: int, scripture_count: int) -> None:
    """Update the available-provider gauges after (re)configuration."""
    ai_providers_available.labels(pool="ai").set(ai_count)
    ai_providers_available.labels(pool="scripture").set(scripture_count)


def get_metrics() -> bytes:
    """Get Prometheus metrics in text format."""
    return generate_latest(registry)


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
