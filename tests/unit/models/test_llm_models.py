"""Tests for provider and orchestration configuration models."""

import pytest
from pydantic import ValidationError

from seo_copilot.models.llm import (
    CacheConfig,
    CacheStats,
    ConfidencePolicy,
    Operation,
    ProviderConfig,
    ProviderName,
    RoutingConfig,
    TTLClass,
)


class TestProviderConfig:
    """Tests for ProviderConfig."""

    @pytest.mark.parametrize("key", [None, "", "   ", "YOUR_API_KEY", "PLACEHOLDER"])
    def test_placeholder_keys_are_absent(self, key):
        """Test blanks and placeholders do not count as credentials."""
        config = ProviderConfig(name=ProviderName.OPENAI, api_key=key)
        assert config.api_key is None
        assert config.has_credentials is False

    def test_real_key_is_stripped(self):
        """Test keys are trimmed."""
        config = ProviderConfig(name=ProviderName.CLAUDE, api_key="  sk-ant  ")
        assert config.api_key == "sk-ant"
        assert config.has_credentials is True

    def test_blank_model_is_none(self):
        """Test a blank model is treated as unconfigured."""
        assert ProviderConfig(name=ProviderName.GEMINI, model=" ").model is None

    def test_frozen(self):
        """Test provider configuration cannot change after load."""
        config = ProviderConfig(name=ProviderName.OPENAI)
        with pytest.raises(ValidationError):
            config.model = "other"

    def test_defaults(self):
        """Test default timeout, retry and rate-limit values."""
        config = ProviderConfig(name=ProviderName.PERPLEXITY)
        assert config.timeout_seconds == 30.0
        assert config.max_retries == 3
        assert config.base_delay_seconds == 1.0
        assert config.max_delay_seconds == 30.0
        assert config.rate_limit_requests == 100
        assert config.rate_limit_window_seconds == 60.0


class TestOperationTTL:
    """Tests for operation TTL classes."""

    @pytest.mark.parametrize(
        "operation",
        [Operation.ANALYZE_COMPETITORS, Operation.CONTENT_GAPS, Operation.ANALYZE_KEYWORDS],
    )
    def test_stable_operations(self, operation):
        """Test competitor, gap and keyword data is long-lived."""
        assert operation.ttl_class == TTLClass.STABLE
        assert CacheConfig().ttl_for(operation) == 86400

    @pytest.mark.parametrize(
        "operation", [Operation.ANALYZE_CONTENT, Operation.OPTIMIZE_SEO, Operation.GENERATE]
    )
    def test_volatile_operations(self, operation):
        """Test content scoring and generation expire after an hour."""
        assert operation.ttl_class == TTLClass.VOLATILE
        assert CacheConfig().ttl_for(operation) == 3600


class TestConfidencePolicy:
    """Tests for confidence computation."""

    @pytest.mark.parametrize("count,expected", [(0, 0), (1, 85), (2, 95), (3, 100), (5, 100)])
    def test_confidence_for(self, count, expected):
        """Test 85 + 10 per extra provider, capped at 100."""
        assert ConfidencePolicy().confidence_for(count) == expected


class TestRoutingConfig:
    """Tests for default provider roles."""

    def test_defaults(self):
        """Test default router order and fan-out roles."""
        routing = RoutingConfig()
        assert routing.router_order == [
            ProviderName.CLAUDE,
            ProviderName.GEMINI,
            ProviderName.OPENAI,
        ]
        assert routing.competitor_providers == [ProviderName.OPENAI, ProviderName.PERPLEXITY]
        assert routing.gap_provider == ProviderName.CLAUDE
        assert routing.seo_detail_provider == ProviderName.GEMINI


class TestCacheStats:
    """Tests for cache statistics."""

    def test_hit_rate(self):
        assert CacheStats(provider=ProviderName.OPENAI, hits=3, misses=1).hit_rate == 0.75

    def test_hit_rate_without_traffic(self):
        assert CacheStats(provider=ProviderName.OPENAI).hit_rate == 0.0
