"""SEO domain models.

Request and response shapes for the inbound operations, and the typed
decode targets for provider output. Provider output is untrusted: every
field has a default so partially-filled JSON still decodes, and scores are
coerced into 0-100 integers.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional

from pydantic import BeforeValidator, Field, ValidationInfo, field_validator

from seo_copilot.models.common import (
    CamelModel,
    Count,
    Number,
    OptionalCount,
    OptionalFlag,
    OptionalNumber,
    OptionalScore,
    OptionalText,
    Score,
    coerce_object,
    flag_or,
    keyed_entries,
    text_or,
)


def _string_list(value: object) -> List[str]:
    """Accept a list of strings, a single string, or None."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return []


StringList = Annotated[List[str], BeforeValidator(_string_list)]


# =============================================================================
# Competitor analysis
# =============================================================================


class AnalysisDepth(str, Enum):
    BASIC = "basic"
    DETAILED = "detailed"
    COMPREHENSIVE = "comprehensive"


class CompetitorAnalysisRequest(CamelModel):
    website_url: str = Field(..., min_length=1)
    target_keywords: List[str] = Field(..., min_length=1)
    analysis_depth: AnalysisDepth = AnalysisDepth.DETAILED

    @field_validator("website_url")
    @classmethod
    def strip_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("websiteUrl must not be blank")
        return v

    @field_validator("target_keywords")
    @classmethod
    def clean_keywords(cls, v: List[str]) -> List[str]:
        cleaned = [k.strip() for k in v if k and k.strip()]
        if not cleaned:
            raise ValueError("at least one target keyword is required")
        return cleaned


class CompetitorData(CamelModel):
    domain: str
    domain_authority: OptionalScore = None
    monthly_traffic: OptionalText = None
    top_keywords: StringList = Field(default_factory=list)
    content_gaps: StringList = Field(default_factory=list)
    backlinks: OptionalCount = None
    avg_page_speed: OptionalNumber = None
    content_quality: OptionalScore = None
    technical_seo: OptionalScore = Field(default=None, alias="technicalSEO")
    last_analyzed: Optional[datetime] = None

    @field_validator("last_analyzed", mode="before")
    @classmethod
    def lenient_timestamp(cls, v: object) -> Optional[datetime]:
        if isinstance(v, datetime):
            return v
        if isinstance(v, str):
            try:
                return datetime.fromisoformat(v.replace("Z", "+00:00"))
            except ValueError:
                return None
        return None


CONTENT_TYPES: List[str] = ["blog", "guide", "tutorial", "comparison", "review"]


class ContentOpportunity(CamelModel):
    topic: str
    keywords: StringList = Field(default_factory=list)
    difficulty: Score = 0
    potential: Score = 0
    content_type: str = "blog"
    reasoning: Annotated[str, text_or("")] = ""
    competitor_gaps: StringList = Field(default_factory=list)
    # "provider" when reported by an LLM, "synthesized" when built from gaps
    source: Literal["provider", "synthesized"] = "provider"

    @field_validator("content_type", mode="before")
    @classmethod
    def known_content_type(cls, v: object) -> str:
        return v if v in CONTENT_TYPES else "blog"


class MarketInsight(CamelModel):
    insight: str
    category: Annotated[str, text_or("opportunity")] = "opportunity"
    impact: Annotated[str, text_or("medium")] = "medium"
    timeframe: Annotated[str, text_or("short-term")] = "short-term"
    actionable: Annotated[bool, flag_or(True)] = True
    recommendations: StringList = Field(default_factory=list)


class AnalysisMetadata(CamelModel):
    total_competitors: Count = 0
    analysis_time: Count = 0
    confidence: Count = 0
    providers_succeeded: StringList = Field(default_factory=list)
    providers_failed: Dict[str, str] = Field(default_factory=dict)

    @field_validator("providers_failed", mode="before")
    @classmethod
    def string_pairs(cls, v: object) -> Dict[str, str]:
        if not isinstance(v, dict):
            return {}
        return {str(k): str(code) for k, code in v.items() if code is not None}


_NATURAL_KEYS = {
    "competitors": "domain",
    "opportunities": "topic",
    "market_insights": "insight",
}


class CompetitorAnalysisResponse(CamelModel):
    """Canonical (normalized) competitor analysis result."""

    competitors: List[CompetitorData] = Field(default_factory=list)
    opportunities: List[ContentOpportunity] = Field(default_factory=list)
    market_insights: List[MarketInsight] = Field(default_factory=list)
    analysis_metadata: AnalysisMetadata = Field(default_factory=AnalysisMetadata)

    @field_validator("competitors", "opportunities", "market_insights", mode="before")
    @classmethod
    def drop_malformed_entries(cls, v: object, info: ValidationInfo) -> list:
        return keyed_entries(v, _NATURAL_KEYS[info.field_name])

    @field_validator("analysis_metadata", mode="before")
    @classmethod
    def metadata_object(cls, v: object) -> object:
        return coerce_object(v) or {}


class ContentGapsRequest(CamelModel):
    """Input for the content-gap pass that follows competitor discovery."""

    competitor_summaries: List[str] = Field(default_factory=list)
    target_keywords: List[str] = Field(default_factory=list)


class ContentGaps(CamelModel):
    gaps: StringList = Field(default_factory=list)


# =============================================================================
# Content analysis
# =============================================================================


class ContentAnalysisRequest(CamelModel):
    title: str = Field(..., min_length=1)
    meta_description: str = ""
    content: str = Field(..., min_length=1)
    target_keywords: List[str] = Field(default_factory=list)
    human_insights: Optional[str] = None
    sources: List[str] = Field(default_factory=list)

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class FocusedAnalysisRequest(CamelModel):
    """Input for a single-dimension check (readability, originality, SEO tips)."""

    content: str = Field(..., min_length=1)
    target_keywords: List[str] = Field(default_factory=list)
    human_insights: Optional[str] = None

    @field_validator("content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class ContentScores(CamelModel):
    overall: OptionalScore = None
    readability: OptionalScore = None
    seo: OptionalScore = None
    originality: OptionalScore = None
    fact_check: OptionalScore = None
    human_authenticity: OptionalScore = None
    engagement: OptionalScore = None


class ContentSuggestion(CamelModel):
    type: Annotated[str, text_or("improvement")] = "improvement"
    category: Annotated[str, text_or("content")] = "content"
    message: str
    impact: Annotated[str, text_or("medium")] = "medium"
    effort: Annotated[str, text_or("moderate")] = "moderate"
    implementation: OptionalText = None


class ReadabilityAnalysis(CamelModel):
    grade_level: OptionalNumber = None
    flesch_score: OptionalScore = None
    avg_sentence_length: OptionalNumber = None
    avg_syllables_per_word: OptionalNumber = None
    complex_words: OptionalCount = None
    suggestions: StringList = Field(default_factory=list)


class SEOSection(CamelModel):
    """One scored block of an SEO analysis (title, meta, headings...)."""

    score: OptionalScore = None
    length: OptionalCount = None
    count: OptionalCount = None
    keyword_presence: OptionalFlag = None
    compelling: OptionalFlag = None
    h1_count: OptionalCount = None
    h2_count: OptionalCount = None
    hierarchy: OptionalFlag = None
    density: OptionalNumber = None
    distribution: OptionalText = None
    authority_score: OptionalScore = None
    suggestions: StringList = Field(default_factory=list)


class SEOAnalysis(CamelModel):
    title_optimization: Optional[SEOSection] = None
    meta_description: Optional[SEOSection] = None
    heading_structure: Optional[SEOSection] = None
    keyword_optimization: Optional[SEOSection] = None
    internal_linking: Optional[SEOSection] = None
    external_linking: Optional[SEOSection] = None

    @field_validator("*", mode="before")
    @classmethod
    def section_objects(cls, v: object) -> object:
        return coerce_object(v)

    def sections(self) -> Dict[str, SEOSection]:
        return {
            name: section
            for name, section in (
                ("title_optimization", self.title_optimization),
                ("meta_description", self.meta_description),
                ("heading_structure", self.heading_structure),
                ("keyword_optimization", self.keyword_optimization),
                ("internal_linking", self.internal_linking),
                ("external_linking", self.external_linking),
            )
            if section is not None
        }


class OriginalityAnalysis(CamelModel):
    score: OptionalScore = None
    ai_detection_score: OptionalScore = None
    plagiarism_score: OptionalScore = None
    uniqueness_indicators: StringList = Field(default_factory=list)
    human_markers: StringList = Field(default_factory=list)
    suggestions: StringList = Field(default_factory=list)


class FlaggedClaim(CamelModel):
    claim: str
    confidence: OptionalScore = None
    reasoning: Annotated[str, text_or("")] = ""
    suggested_sources: StringList = Field(default_factory=list)


class FactCheckAnalysis(CamelModel):
    score: OptionalScore = None
    claims_verified: OptionalCount = None
    sources_provided: OptionalCount = None
    source_quality: OptionalScore = None
    factual_accuracy: OptionalScore = None
    suggestions: StringList = Field(default_factory=list)
    flagged_claims: List[FlaggedClaim] = Field(default_factory=list)

    @field_validator("flagged_claims", mode="before")
    @classmethod
    def claims_with_text(cls, v: object) -> list:
        return keyed_entries(v, "claim")


class ContentAnalysisResponse(CamelModel):
    scores: ContentScores = Field(default_factory=ContentScores)
    suggestions: List[ContentSuggestion] = Field(default_factory=list)
    readability_analysis: Optional[ReadabilityAnalysis] = None
    seo_analysis: Optional[SEOAnalysis] = None
    originality_analysis: Optional[OriginalityAnalysis] = None
    fact_check_analysis: Optional[FactCheckAnalysis] = None
    defaulted_scores: StringList = Field(default_factory=list)

    @field_validator(
        "readability_analysis",
        "seo_analysis",
        "originality_analysis",
        "fact_check_analysis",
        mode="before",
    )
    @classmethod
    def analysis_objects(cls, v: object) -> object:
        return coerce_object(v)

    @field_validator("scores", mode="before")
    @classmethod
    def scores_object(cls, v: object) -> object:
        return coerce_object(v) or {}

    @field_validator("suggestions", mode="before")
    @classmethod
    def lenient_suggestions(cls, v: object) -> object:
        # Some providers return bare strings instead of suggestion objects
        if not isinstance(v, list):
            return []
        out = []
        for item in v:
            if isinstance(item, str) and item.strip():
                out.append({"message": item.strip()})
            elif isinstance(item, dict) and isinstance(item.get("message"), str):
                if item["message"].strip():
                    out.append(item)
            elif isinstance(item, ContentSuggestion):
                out.append(item)
        return out


class SEORecommendations(CamelModel):
    recommendations: StringList = Field(default_factory=list)


# =============================================================================
# Keyword research
# =============================================================================


class KeywordResearchRequest(CamelModel):
    seed_keywords: List[str] = Field(..., min_length=1)
    target_audience: Optional[str] = None
    industry: Optional[str] = None
    location: Optional[str] = None

    @field_validator("seed_keywords")
    @classmethod
    def clean_keywords(cls, v: List[str]) -> List[str]:
        cleaned = [k.strip() for k in v if k and k.strip()]
        if not cleaned:
            raise ValueError("at least one seed keyword is required")
        return cleaned


def _keyword_entries(value: object) -> list:
    """Accept bare keyword strings as well as keyword objects."""
    if isinstance(value, list):
        value = [{"keyword": k} if isinstance(k, str) else k for k in value]
    return keyed_entries(value, "keyword")


class KeywordData(CamelModel):
    keyword: str
    search_volume: OptionalCount = None
    difficulty: OptionalScore = None
    cpc: OptionalText = None
    trend: OptionalText = None
    opportunity: OptionalText = None
    intent: OptionalText = None
    related_keywords: StringList = Field(default_factory=list)


class KeywordCluster(CamelModel):
    theme: str
    keywords: List[KeywordData] = Field(default_factory=list)
    priority: Annotated[str, text_or("medium")] = "medium"
    content_suggestions: StringList = Field(default_factory=list)

    @field_validator("keywords", mode="before")
    @classmethod
    def keyword_objects(cls, v: object) -> list:
        return _keyword_entries(v)


class KeywordResearchMetadata(CamelModel):
    total_keywords: Count = 0
    avg_difficulty: Number = 0.0
    total_search_volume: Count = 0


class KeywordResearchResponse(CamelModel):
    keywords: List[KeywordData] = Field(default_factory=list)
    clusters: List[KeywordCluster] = Field(default_factory=list)
    suggestions: StringList = Field(default_factory=list)
    metadata: KeywordResearchMetadata = Field(default_factory=KeywordResearchMetadata)

    @field_validator("keywords", mode="before")
    @classmethod
    def keyword_objects(cls, v: object) -> list:
        return _keyword_entries(v)

    @field_validator("clusters", mode="before")
    @classmethod
    def clusters_with_theme(cls, v: object) -> list:
        return keyed_entries(v, "theme")

    @field_validator("metadata", mode="before")
    @classmethod
    def metadata_object(cls, v: object) -> object:
        return coerce_object(v) or {}


# =============================================================================
# Content enhancement / free-form generation
# =============================================================================


class EnhanceMode(str, Enum):
    READABILITY = "readability"
    HUMAN = "human"
    PERSONAL = "personal"


class EnhanceContentRequest(CamelModel):
    content: str = Field(..., min_length=1)
    mode: EnhanceMode
    target_grade_level: int = Field(default=8, ge=1, le=20)
    prompt: Optional[str] = None

    @field_validator("content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class EnhanceContentResponse(CamelModel):
    enhanced_content: str
    original_length: int
    enhanced_length: int
    provider_used: str
    mode: EnhanceMode
    target_grade_level: Optional[int] = None


class GenerateRequest(CamelModel):
    prompt: str = Field(..., min_length=1)
    max_tokens: int = Field(default=1000, ge=1, le=32000)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)


class GeneratedText(CamelModel):
    text: str
