"""Observability for SEO Copilot.

Provides:
- Correlation ID context management for request tracing
- Structured logging with context propagation
- Prometheus metrics for monitoring and alerting
"""

from seo_copilot.observability.context import (
    set_correlation_id,
    get_correlation_id,
    clear_correlation_id,
    correlation_id_context,
)
from seo_copilot.observability.logging import (
    get_logger,
    configure_logging,
    add_correlation_id_processor,
    redact_secrets_processor,
)
from seo_copilot.observability.metrics import (
    PROVIDER_REQUESTS_TOTAL,
    PROVIDER_RETRIES_TOTAL,
    LLM_TOKENS_TOTAL,
    LLM_COST_USD_TOTAL,
    CACHE_OPERATIONS,
    RATE_LIMIT_REJECTIONS,
    ROUTER_FALLBACKS,
    FANOUT_OUTCOMES,
    HTTP_REQUESTS_TOTAL,
    PROVIDER_AVAILABLE,
    PROVIDER_REQUEST_DURATION,
    ANALYSIS_DURATION,
    get_metrics_text,
    get_metrics_content_type,
)

__all__ = [
    # Context
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
    "correlation_id_context",
    # Logging
    "get_logger",
    "configure_logging",
    "add_correlation_id_processor",
    "redact_secrets_processor",
    # Counters
    "PROVIDER_REQUESTS_TOTAL",
    "PROVIDER_RETRIES_TOTAL",
    "LLM_TOKENS_TOTAL",
    "LLM_COST_USD_TOTAL",
    "CACHE_OPERATIONS",
    "RATE_LIMIT_REJECTIONS",
    "ROUTER_FALLBACKS",
    "FANOUT_OUTCOMES",
    "HTTP_REQUESTS_TOTAL",
    # Gauges
    "PROVIDER_AVAILABLE",
    # Histograms
    "PROVIDER_REQUEST_DURATION",
    "ANALYSIS_DURATION",
    # Utilities
    "get_metrics_text",
    "get_metrics_content_type",
]
