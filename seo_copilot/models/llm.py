"""Provider and orchestration configuration models.

This module defines the data structures for:
- Provider identity and per-provider configuration (credentials, limits)
- Operation catalogue with cache TTL classes
- Cache, merge and confidence policy configuration
- Top-level Settings assembled by ConfigManager
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProviderName(str, Enum):
    """LLM vendors the orchestrator can dispatch to."""

    OPENAI = "openai"
    CLAUDE = "claude"
    GEMINI = "gemini"
    PERPLEXITY = "perplexity"


class TTLClass(str, Enum):
    """Cache lifetime classes.

    Volatile analyses (content scoring) change with every draft edit;
    stable analyses (competitor and keyword data) change slowly.
    """

    VOLATILE = "volatile"
    STABLE = "stable"


class Operation(str, Enum):
    """Logical operations a provider client can serve."""

    ANALYZE_COMPETITORS = "analyze-competitors"
    CONTENT_GAPS = "content-gaps"
    ANALYZE_CONTENT = "analyze-content"
    ANALYZE_READABILITY = "analyze-readability"
    ANALYZE_ORIGINALITY = "analyze-originality"
    OPTIMIZE_SEO = "optimize-seo"
    SEO_RECOMMENDATIONS = "seo-recommendations"
    ANALYZE_KEYWORDS = "analyze-keywords"
    GENERATE = "generate"

    @property
    def ttl_class(self) -> TTLClass:
        if self in _STABLE_OPERATIONS:
            return TTLClass.STABLE
        return TTLClass.VOLATILE


_STABLE_OPERATIONS = {
    Operation.ANALYZE_COMPETITORS,
    Operation.CONTENT_GAPS,
    Operation.ANALYZE_KEYWORDS,
}


# Environment variable prefix and default model per provider
PROVIDER_ENV_PREFIX: Dict[ProviderName, str] = {
    ProviderName.OPENAI: "OPENAI",
    ProviderName.CLAUDE: "ANTHROPIC",
    ProviderName.GEMINI: "GOOGLE_AI",
    ProviderName.PERPLEXITY: "PERPLEXITY",
}

DEFAULT_MODELS: Dict[ProviderName, str] = {
    ProviderName.OPENAI: "gpt-4o-mini",
    ProviderName.CLAUDE: "claude-3-haiku-20240307",
    ProviderName.GEMINI: "gemini-1.5-flash",
    ProviderName.PERPLEXITY: "sonar",
}


class ProviderConfig(BaseModel):
    """Per-provider configuration, immutable for the process lifetime.

    Security Note:
    - API keys must be loaded from environment variables
    - Never hardcode API keys in configuration files
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    name: ProviderName
    api_key: Optional[str] = Field(
        default=None, description="API key (from environment variable)"
    )
    model: Optional[str] = Field(default=None, description="Model identifier")
    timeout_seconds: float = Field(
        default=30.0, gt=0.0, le=600.0, description="Per-call timeout"
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries after the first attempt (max_retries + 1 calls)",
    )
    base_delay_seconds: float = Field(
        default=1.0, ge=0.0, le=60.0, description="Base delay for exponential backoff"
    )
    max_delay_seconds: float = Field(
        default=30.0, gt=0.0, le=300.0, description="Maximum backoff delay"
    )
    rate_limit_requests: int = Field(
        default=100, ge=1, description="Requests allowed per window"
    )
    rate_limit_window_seconds: float = Field(
        default=60.0, gt=0.0, description="Rate-limit window length"
    )
    priority: int = Field(default=100, description="Router priority (lower first)")

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        """Treat placeholders and blanks as an absent credential."""
        if v is None:
            return None
        v = v.strip()
        if v in ("", "YOUR_API_KEY", "PLACEHOLDER", "None"):
            return None
        return v

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key)


class CacheConfig(BaseModel):
    """Response cache configuration"""

    model_config = ConfigDict(protected_namespaces=())

    enabled: bool = True
    cache_dir: Optional[str] = None  # None = fresh temporary directory

    # TTL settings (seconds)
    ttl_volatile_seconds: int = Field(default=3600, ge=1)
    ttl_stable_seconds: int = Field(default=86400, ge=1)

    size_limit_mb: int = Field(default=256, ge=1)

    def ttl_for(self, operation: Operation) -> int:
        if operation.ttl_class == TTLClass.STABLE:
            return self.ttl_stable_seconds
        return self.ttl_volatile_seconds


class MergeLimits(BaseModel):
    """Output caps applied by the merge layer."""

    max_competitors: int = Field(default=5, ge=1)
    max_opportunities: int = Field(default=10, ge=1)
    max_market_insights: int = Field(default=10, ge=1)
    max_gaps_per_competitor: int = Field(default=8, ge=1)
    gaps_assigned_per_competitor: int = Field(default=2, ge=0)
    max_suggestions: int = Field(default=10, ge=1)
    opportunity_keyword_count: int = Field(default=3, ge=1)


class ConfidencePolicy(BaseModel):
    """Confidence and synthesis constants.

    Confidence = base + increment * (successful providers - 1), capped.
    Synthesised opportunity estimates are position-based, not provider-reported.
    """

    base: int = Field(default=85, ge=0, le=100)
    increment: int = Field(default=10, ge=0, le=100)
    cap: int = Field(default=100, ge=0, le=100)

    gap_difficulty_start: int = 30
    gap_difficulty_step: int = 10
    gap_potential_start: int = 70
    gap_potential_step: int = 5

    default_scores: Dict[str, int] = Field(
        default_factory=lambda: {
            "readability": 75,
            "seo": 70,
            "originality": 85,
            "fact_check": 80,
            "human_authenticity": 90,
            "engagement": 75,
        }
    )

    def confidence_for(self, successful_providers: int) -> int:
        if successful_providers <= 0:
            return 0
        value = self.base + self.increment * (successful_providers - 1)
        return min(self.cap, value)


class RoutingConfig(BaseModel):
    """Provider roles for routed and fanned-out operations."""

    router_order: List[ProviderName] = Field(
        default_factory=lambda: [
            ProviderName.CLAUDE,
            ProviderName.GEMINI,
            ProviderName.OPENAI,
        ],
        description="Router providers, first = priority 1",
    )
    initially_disabled: List[ProviderName] = Field(default_factory=list)

    competitor_providers: List[ProviderName] = Field(
        default_factory=lambda: [ProviderName.OPENAI, ProviderName.PERPLEXITY],
        description="Competitor analysis providers, primary first",
    )
    gap_provider: Optional[ProviderName] = ProviderName.CLAUDE

    content_providers: List[ProviderName] = Field(
        default_factory=lambda: [
            ProviderName.OPENAI,
            ProviderName.CLAUDE,
            ProviderName.PERPLEXITY,
        ],
        description="Content analysis providers, primary first",
    )
    seo_detail_provider: Optional[ProviderName] = ProviderName.GEMINI


class Settings(BaseModel):
    """Complete application settings."""

    model_config = ConfigDict(protected_namespaces=())

    providers: Dict[ProviderName, ProviderConfig]
    cache: CacheConfig = Field(default_factory=CacheConfig)
    limits: MergeLimits = Field(default_factory=MergeLimits)
    confidence: ConfidencePolicy = Field(default_factory=ConfidencePolicy)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    log_level: str = "INFO"
    log_json: bool = True

    def provider(self, name: ProviderName) -> ProviderConfig:
        return self.providers[name]


class CacheStats(BaseModel):
    """Response cache statistics for one provider namespace"""

    provider: ProviderName
    size: int = 0
    hits: int = 0
    misses: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total
