"""Merge/normalize layer.

Pure functions combining the successful outcomes of a fan-out into one
canonical result. Nothing here performs I/O or reads the clock; given the
same inputs in the same order the output is identical.

Rules:
- list fields are unioned in provider order, de-duplicated by a natural
  key keeping the first occurrence, then capped
- numeric scores reported by several providers are blended (mean, half-up)
- content gaps become synthesised opportunities with position-based
  difficulty/potential estimates tagged `source="synthesized"`
"""

import math
from typing import Any, Dict, Iterable, List, Optional, Sequence, TypeVar
from urllib.parse import urlsplit

from pydantic import BaseModel

from seo_copilot.models.llm import ConfidencePolicy, MergeLimits
from seo_copilot.models.seo import (
    CONTENT_TYPES,
    AnalysisMetadata,
    CompetitorAnalysisResponse,
    CompetitorData,
    ContentAnalysisResponse,
    ContentOpportunity,
    ContentScores,
    ContentSuggestion,
    KeywordResearchMetadata,
    KeywordResearchResponse,
    MarketInsight,
    SEOAnalysis,
)

M = TypeVar("M", bound=BaseModel)

SCORE_DIMENSIONS = (
    "readability",
    "seo",
    "originality",
    "fact_check",
    "human_authenticity",
    "engagement",
)

GAP_REASONING_PREFIX = "Content gap identified through AI analysis"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def blend_scores(values: Iterable[Optional[float]]) -> Optional[int]:
    """Mean of the reported values rounded half-up; None if none reported.

    >>> blend_scores([70, 80])
    75
    >>> blend_scores([None, 90])
    90
    """
    reported = [v for v in values if v is not None]
    if not reported:
        return None
    return round_half_up(sum(reported) / len(reported))


def normalize_domain(value: str) -> str:
    """Natural key for a competitor: lower-case host without scheme, www. or path."""
    text = value.strip().lower()
    if "://" not in text:
        text = "//" + text
    try:
        host = urlsplit(text).hostname or ""
    except ValueError:
        host = ""
    if host.startswith("www."):
        host = host[4:]
    return host or value.strip().lower()


def union_strings(*lists: Iterable[str]) -> List[str]:
    """Concatenate string lists dropping case-insensitive repeats."""
    seen = set()
    out = []
    for items in lists:
        for item in items:
            key = item.strip().casefold()
            if key and key not in seen:
                seen.add(key)
                out.append(item)
    return out


def _dedupe(items: Iterable[M], key: Any) -> List[M]:
    seen = set()
    out = []
    for item in items:
        k = key(item)
        if k and k not in seen:
            seen.add(k)
            out.append(item)
    return out


def _first(values: Iterable[Any]) -> Any:
    return next((v for v in values if v is not None), None)


# =============================================================================
# Competitor analysis
# =============================================================================


def merge_competitors(
    lists: Sequence[Sequence[CompetitorData]], limits: MergeLimits
) -> List[CompetitorData]:
    """Union competitor lists by normalised domain, blending duplicates."""
    groups: Dict[str, List[CompetitorData]] = {}
    for competitors in lists:
        for competitor in competitors:
            key = normalize_domain(competitor.domain)
            if key:
                groups.setdefault(key, []).append(competitor)

    merged = []
    for entries in list(groups.values())[: limits.max_competitors]:
        head = entries[0]
        if len(entries) == 1:
            merged.append(
                head.model_copy(
                    update={
                        "content_gaps": head.content_gaps[
                            : limits.max_gaps_per_competitor
                        ]
                    }
                )
            )
            continue
        merged.append(
            CompetitorData(
                domain=head.domain,
                domain_authority=blend_scores(e.domain_authority for e in entries),
                monthly_traffic=_first(e.monthly_traffic for e in entries),
                top_keywords=union_strings(*(e.top_keywords for e in entries)),
                content_gaps=union_strings(*(e.content_gaps for e in entries))[
                    : limits.max_gaps_per_competitor
                ],
                backlinks=_first(e.backlinks for e in entries),
                avg_page_speed=_first(e.avg_page_speed for e in entries),
                content_quality=blend_scores(e.content_quality for e in entries),
                technical_seo=blend_scores(e.technical_seo for e in entries),
                last_analyzed=_first(e.last_analyzed for e in entries),
            )
        )
    return merged


def assign_gaps(
    competitors: Sequence[CompetitorData], gaps: Sequence[str], limits: MergeLimits
) -> List[CompetitorData]:
    """Append gap findings to competitors; competitor i gets a slice at i*n."""
    n = limits.gaps_assigned_per_competitor
    out = []
    for i, competitor in enumerate(competitors):
        assigned = list(gaps[i * n : (i + 1) * n])
        out.append(
            competitor.model_copy(
                update={
                    "content_gaps": union_strings(competitor.content_gaps, assigned)[
                        : limits.max_gaps_per_competitor
                    ]
                }
            )
        )
    return out


def synthesize_opportunities(
    gaps: Sequence[str],
    target_keywords: Sequence[str],
    limits: MergeLimits,
    policy: ConfidencePolicy,
) -> List[ContentOpportunity]:
    """Turn textual gap findings into opportunity records.

    Difficulty and potential are position-based estimates, not provider
    scores, and every record is tagged `source="synthesized"`.
    """
    keywords = list(target_keywords[: limits.opportunity_keyword_count])
    return [
        ContentOpportunity(
            topic=gap,
            keywords=keywords,
            difficulty=min(100, policy.gap_difficulty_start + policy.gap_difficulty_step * i),
            potential=min(100, policy.gap_potential_start + policy.gap_potential_step * i),
            content_type=CONTENT_TYPES[i % len(CONTENT_TYPES)],
            reasoning=f"{GAP_REASONING_PREFIX}: {gap}",
            competitor_gaps=[gap],
            source="synthesized",
        )
        for i, gap in enumerate(gaps)
    ]


def merge_competitor_analysis(
    results: Sequence[CompetitorAnalysisResponse],
    gaps: Sequence[str],
    target_keywords: Sequence[str],
    limits: MergeLimits,
    policy: ConfidencePolicy,
    providers_succeeded: Sequence[str] = (),
    providers_failed: Optional[Dict[str, str]] = None,
    analysis_time_ms: int = 0,
) -> CompetitorAnalysisResponse:
    """Merge competitor analyses (primary first) and gap findings.

    Args:
        results: Successful competitor analyses in fixed provider order
        gaps: Content-gap findings from the gap provider (may be empty)
        target_keywords: Keywords of the inbound request
        limits: Output caps
        policy: Confidence and synthesis constants
        providers_succeeded: Every provider that contributed, gap provider included
        providers_failed: Failure code per provider that did not contribute
        analysis_time_ms: Elapsed time recorded in the metadata

    Returns:
        Normalised CompetitorAnalysisResponse
    """
    competitors = merge_competitors([r.competitors for r in results], limits)
    competitors = assign_gaps(competitors, gaps, limits)

    provider_opportunities = [
        o.model_copy(update={"source": "provider"})
        for r in results
        for o in r.opportunities
    ]
    opportunities = _dedupe(
        provider_opportunities
        + synthesize_opportunities(gaps, target_keywords, limits, policy),
        key=lambda o: o.topic.strip().casefold(),
    )[: limits.max_opportunities]

    insights: List[MarketInsight] = _dedupe(
        (i for r in results for i in r.market_insights),
        key=lambda i: i.insight.strip().casefold(),
    )[: limits.max_market_insights]

    return CompetitorAnalysisResponse(
        competitors=competitors,
        opportunities=opportunities,
        market_insights=insights,
        analysis_metadata=AnalysisMetadata(
            total_competitors=len(competitors),
            analysis_time=analysis_time_ms,
            confidence=policy.confidence_for(len(providers_succeeded)),
            providers_succeeded=list(providers_succeeded),
            providers_failed=dict(providers_failed or {}),
        ),
    )


# =============================================================================
# Content analysis
# =============================================================================


def _blend_values(values: List[Any]) -> Any:
    reported = [v for v in values if v is not None]
    if not reported:
        return None
    head = reported[0]
    if isinstance(head, bool) or isinstance(head, str):
        return head
    if isinstance(head, (int, float)):
        numbers = [v for v in reported if isinstance(v, (int, float)) and not isinstance(v, bool)]
        if all(isinstance(v, int) for v in numbers):
            return blend_scores(numbers)
        return round(sum(numbers) / len(numbers), 2)
    if isinstance(head, BaseModel):
        return blend_models([v for v in reported if isinstance(v, type(head))])
    if isinstance(head, list):
        if all(isinstance(v, str) for items in reported for v in items):
            return union_strings(*reported)
        return [item for items in reported for item in items]
    return head


def blend_models(models: Sequence[M]) -> Optional[M]:
    """Field-wise blend of same-typed sub-analyses.

    Numbers are averaged (integers half-up), string lists unioned, nested
    models blended recursively, anything else taken from the first report.
    """
    if not models:
        return None
    if len(models) == 1:
        return models[0]
    cls = type(models[0])
    data = {
        name: _blend_values([getattr(m, name) for m in models])
        for name in cls.model_fields
    }
    return cls.model_validate({k: v for k, v in data.items() if v is not None})


def merge_content_analysis(
    results: Sequence[ContentAnalysisResponse],
    seo_detail: Optional[SEOAnalysis],
    policy: ConfidencePolicy,
    limits: Optional[MergeLimits] = None,
) -> ContentAnalysisResponse:
    """Blend content analyses (primary first) into one score bundle.

    Dimensions no provider reported take the policy default and are listed
    in `defaulted_scores`; `overall` falls back to the mean of the six.
    """
    limits = limits or MergeLimits()

    scores: Dict[str, int] = {}
    defaulted = []
    for dimension in SCORE_DIMENSIONS:
        value = blend_scores(getattr(r.scores, dimension) for r in results)
        if value is None:
            value = policy.default_scores[dimension]
            defaulted.append(dimension)
        scores[dimension] = value

    overall = blend_scores(r.scores.overall for r in results)
    if overall is None:
        overall = blend_scores(scores.values())

    seo_reports = [r.seo_analysis for r in results if r.seo_analysis is not None]
    if seo_detail is not None:
        seo_reports.insert(0, seo_detail)

    suggestions: List[ContentSuggestion] = _dedupe(
        (s for r in results for s in r.suggestions),
        key=lambda s: s.message.strip().casefold(),
    )[: limits.max_suggestions]

    return ContentAnalysisResponse(
        scores=ContentScores(overall=overall, **scores),
        suggestions=suggestions,
        readability_analysis=blend_models(
            [r.readability_analysis for r in results if r.readability_analysis]
        ),
        seo_analysis=blend_models(seo_reports),
        originality_analysis=blend_models(
            [r.originality_analysis for r in results if r.originality_analysis]
        ),
        fact_check_analysis=blend_models(
            [r.fact_check_analysis for r in results if r.fact_check_analysis]
        ),
        defaulted_scores=defaulted,
    )


# =============================================================================
# Keyword research
# =============================================================================


def normalize_keyword_research(response: KeywordResearchResponse) -> KeywordResearchResponse:
    """De-duplicate keywords and recompute the summary metadata.

    Provider-reported totals are ignored; the metadata always describes the
    keywords actually returned.
    """
    keywords = _dedupe(response.keywords, key=lambda k: k.keyword.strip().casefold())
    difficulties = [k.difficulty for k in keywords if k.difficulty is not None]
    return response.model_copy(
        update={
            "keywords": keywords,
            "metadata": KeywordResearchMetadata(
                total_keywords=len(keywords),
                avg_difficulty=(
                    round(sum(difficulties) / len(difficulties), 1)
                    if difficulties
                    else 0.0
                ),
                total_search_volume=sum(k.search_volume or 0 for k in keywords),
            ),
        }
    )
