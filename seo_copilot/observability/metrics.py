"""Prometheus metrics definitions for SEO Copilot.

Defines counters, gauges, and histograms for monitoring:
- Provider call throughput, latency and failures
- LLM token usage and cost
- Cache and rate-limit behaviour
- Router fallbacks and provider availability
- Fan-out outcomes and inbound API traffic

Usage:
    from seo_copilot.observability.metrics import PROVIDER_REQUESTS_TOTAL

    PROVIDER_REQUESTS_TOTAL.labels(
        provider="claude", operation="content-gaps", status="success"
    ).inc()

Metrics are exposed via the /metrics endpoint of the HTTP API.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Custom registry to avoid conflicts with default registry
REGISTRY = CollectorRegistry(auto_describe=True)

# =============================================================================
# COUNTERS - Monotonically increasing values
# =============================================================================

PROVIDER_REQUESTS_TOTAL = Counter(
    name="seo_provider_requests_total",
    documentation="Total provider operations by outcome",
    labelnames=["provider", "operation", "status"],  # success, failed, cached
    registry=REGISTRY,
)

PROVIDER_RETRIES_TOTAL = Counter(
    name="seo_provider_retries_total",
    documentation="Total retry attempts issued after a transient failure",
    labelnames=["provider"],
    registry=REGISTRY,
)

LLM_TOKENS_TOTAL = Counter(
    name="seo_llm_tokens_total",
    documentation="Total LLM tokens used",
    labelnames=["provider"],
    registry=REGISTRY,
)

LLM_COST_USD_TOTAL = Counter(
    name="seo_llm_cost_usd_total",
    documentation="Total LLM cost in USD",
    labelnames=["provider"],
    registry=REGISTRY,
)

CACHE_OPERATIONS = Counter(
    name="seo_cache_operations_total",
    documentation="Total response cache operations",
    labelnames=["provider", "operation"],  # hit, miss, set, error
    registry=REGISTRY,
)

RATE_LIMIT_REJECTIONS = Counter(
    name="seo_rate_limit_rejections_total",
    documentation="Requests rejected by the local rate limiter",
    labelnames=["provider"],
    registry=REGISTRY,
)

ROUTER_FALLBACKS = Counter(
    name="seo_router_fallbacks_total",
    documentation="Router fallbacks away from a failing provider",
    labelnames=["from_provider"],
    registry=REGISTRY,
)

FANOUT_OUTCOMES = Counter(
    name="seo_fanout_outcomes_total",
    documentation="Fan-out dispatch outcomes",
    labelnames=["operation", "outcome"],  # complete, partial, failed
    registry=REGISTRY,
)

HTTP_REQUESTS_TOTAL = Counter(
    name="seo_http_requests_total",
    documentation="Inbound API requests by route and status code",
    labelnames=["route", "status_code"],
    registry=REGISTRY,
)

# =============================================================================
# GAUGES - Values that can go up and down
# =============================================================================

PROVIDER_AVAILABLE = Gauge(
    name="seo_provider_available",
    documentation="1 if the router considers the provider available, else 0",
    labelnames=["provider"],
    registry=REGISTRY,
)

# =============================================================================
# HISTOGRAMS - Distribution of values
# =============================================================================

PROVIDER_REQUEST_DURATION = Histogram(
    name="seo_provider_request_duration_seconds",
    documentation="Provider call duration in seconds, retries included",
    labelnames=["provider"],
    buckets=(0.5, 1, 2, 5, 10, 30, 60, 120, float("inf")),
    registry=REGISTRY,
)

ANALYSIS_DURATION = Histogram(
    name="seo_analysis_duration_seconds",
    documentation="End-to-end inbound operation duration in seconds",
    labelnames=["operation"],
    buckets=(0.1, 0.5, 1, 2, 5, 10, 30, 60, 120, float("inf")),
    registry=REGISTRY,
)


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_metrics_text() -> bytes:
    """Generate Prometheus metrics in text exposition format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for Prometheus metrics response."""
    return CONTENT_TYPE_LATEST
