"""Usage Tracker Module

This module handles:
- Per-provider token, cost and request accounting
- Cache-hit, retry and failure counters
- Usage summary generation for provider status and the CLI
"""

import threading
from dataclasses import dataclass, field
from typing import Dict

import structlog

from seo_copilot.observability.metrics import LLM_COST_USD_TOTAL, LLM_TOKENS_TOTAL

logger = structlog.get_logger()


@dataclass
class ProviderUsage:
    """Usage tracking for a single provider."""

    provider: str
    tokens: int = 0
    cost_usd: float = 0.0
    requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    cached_responses: int = 0
    retry_attempts: int = 0

    def record_success(self, tokens: int, cost: float) -> None:
        """Record a successful request."""
        self.tokens += tokens
        self.cost_usd += cost
        self.requests += 1
        self.successful_requests += 1

    def record_failure(self) -> None:
        """Record a failed request."""
        self.requests += 1
        self.failed_requests += 1

    def to_dict(self) -> dict:
        return {
            "tokens": self.tokens,
            "cost_usd": round(self.cost_usd, 6),
            "requests": self.requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "cached_responses": self.cached_responses,
            "retry_attempts": self.retry_attempts,
        }


@dataclass
class UsageTracker:
    """Tracks LLM usage across providers.

    Only live provider calls count toward tokens and cost; cache hits are
    counted separately since they cost nothing.

    Attributes:
        total_tokens: Total tokens used across all providers
        total_cost_usd: Total cost in USD
        by_provider: Per-provider usage statistics
    """

    total_tokens: int = 0
    total_cost_usd: float = 0.0
    by_provider: Dict[str, ProviderUsage] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def _usage(self, provider: str) -> ProviderUsage:
        if provider not in self.by_provider:
            self.by_provider[provider] = ProviderUsage(provider=provider)
        return self.by_provider[provider]

    def record_usage(self, provider: str, tokens: int, cost: float) -> None:
        """Record token usage and cost of a successful live call."""
        with self._lock:
            self.total_tokens += tokens
            self.total_cost_usd += cost
            self._usage(provider).record_success(tokens, cost)

        LLM_TOKENS_TOTAL.labels(provider=provider).inc(tokens)
        LLM_COST_USD_TOTAL.labels(provider=provider).inc(cost)

        logger.debug(
            "usage_recorded",
            provider=provider,
            tokens=tokens,
            cost_usd=cost,
            total_cost_usd=self.total_cost_usd,
        )

    def record_failure(self, provider: str) -> None:
        with self._lock:
            self._usage(provider).record_failure()

    def record_cache_hit(self, provider: str) -> None:
        with self._lock:
            self._usage(provider).cached_responses += 1

    def record_retry(self, provider: str) -> None:
        with self._lock:
            self._usage(provider).retry_attempts += 1

    def get_provider_summary(self, provider: str) -> dict:
        with self._lock:
            return self._usage(provider).to_dict()

    def get_summary(self) -> dict:
        """Get current usage summary."""
        with self._lock:
            return {
                "total_tokens": self.total_tokens,
                "total_cost_usd": round(self.total_cost_usd, 6),
                "by_provider": {
                    name: usage.to_dict() for name, usage in self.by_provider.items()
                },
            }
