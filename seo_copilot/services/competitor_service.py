"""Competitor Analysis Service

Flow:
1. Fan out ANALYZE_COMPETITORS to the competitor providers (primary first)
2. Summarise the discovered competitors and ask the gap provider for
   content gaps; a failed gap call only lowers confidence
3. Merge everything into one normalised CompetitorAnalysisResponse

Only a failure of every competitor provider is an error.
"""

import time
from typing import Any, Dict, List, Optional

import structlog

from seo_copilot.models.envelope import APIResponse
from seo_copilot.models.llm import (
    ConfidencePolicy,
    MergeLimits,
    Operation,
    ProviderName,
    RoutingConfig,
)
from seo_copilot.models.seo import (
    CompetitorAnalysisRequest,
    CompetitorAnalysisResponse,
    CompetitorData,
    ContentGapsRequest,
)
from seo_copilot.observability.metrics import ANALYSIS_DURATION
from seo_copilot.orchestration.fanout import (
    FanOutOrchestrator,
    ProviderCall,
    combine_metadata,
)
from seo_copilot.orchestration.merge import merge_competitor_analysis, merge_competitors
from seo_copilot.services.llm.resilience import ResilientProvider
from seo_copilot.utils.exceptions import AllProvidersExhausted
from seo_copilot.utils.validation import parse_request

logger = structlog.get_logger()


def summarize_competitor(competitor: CompetitorData) -> str:
    """One-line summary fed to the gap provider."""
    return (
        f"{competitor.domain}: {', '.join(competitor.top_keywords)}"
        f" - {', '.join(competitor.content_gaps)}"
    )


class CompetitorService:
    """Multi-provider competitor analysis."""

    def __init__(
        self,
        providers: Dict[ProviderName, ResilientProvider],
        routing: Optional[RoutingConfig] = None,
        limits: Optional[MergeLimits] = None,
        policy: Optional[ConfidencePolicy] = None,
        fanout: Optional[FanOutOrchestrator] = None,
    ):
        self.providers = providers
        self.routing = routing or RoutingConfig()
        self.limits = limits or MergeLimits()
        self.policy = policy or ConfidencePolicy()
        self.fanout = fanout or FanOutOrchestrator()

    async def analyze(self, payload: Any) -> APIResponse[CompetitorAnalysisResponse]:
        """Analyze competitors for a website and its target keywords.

        Raises:
            InvalidRequestError: websiteUrl or targetKeywords missing
            AllProvidersExhausted: every competitor provider failed
        """
        request = parse_request(
            CompetitorAnalysisRequest,
            payload,
            "Website URL and target keywords are required",
        )
        start = time.monotonic()
        logger.info(
            "competitor_analysis_started",
            website_url=request.website_url,
            keywords=len(request.target_keywords),
            depth=request.analysis_depth.value,
        )

        order = [p for p in self.routing.competitor_providers if p in self.providers]
        if not order:
            raise AllProvidersExhausted("No competitor analysis providers configured")

        outcomes = await self.fanout.fan_out(
            {
                p: ProviderCall(self.providers[p], Operation.ANALYZE_COMPETITORS, request)
                for p in order
            },
            label=Operation.ANALYZE_COMPETITORS.value,
        )
        successes = self.fanout.require_success(outcomes, order)
        results = [r.data for _, r in successes]
        responses = [r for _, r in successes]
        succeeded = [p.value for p, _ in successes]
        failed = self.fanout.failures(outcomes)

        gaps: List[str] = []
        gap_provider = self.routing.gap_provider
        if gap_provider is not None and gap_provider in self.providers:
            discovered = merge_competitors([r.competitors for r in results], self.limits)
            gap_response = await self.providers[gap_provider].execute(
                Operation.CONTENT_GAPS,
                ContentGapsRequest(
                    competitor_summaries=[summarize_competitor(c) for c in discovered],
                    target_keywords=request.target_keywords,
                ),
            )
            if gap_response.success:
                gaps = gap_response.data.gaps
                responses.append(gap_response)
                succeeded.append(gap_provider.value)
            else:
                assert gap_response.error is not None
                failed[gap_provider.value] = gap_response.error.code
                logger.warning(
                    "content_gaps_failed",
                    provider=gap_provider.value,
                    error_code=gap_response.error.code,
                )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        merged = merge_competitor_analysis(
            results,
            gaps,
            request.target_keywords,
            self.limits,
            self.policy,
            providers_succeeded=succeeded,
            providers_failed=failed,
            analysis_time_ms=elapsed_ms,
        )
        ANALYSIS_DURATION.labels(operation="analyze-competitors").observe(
            time.monotonic() - start
        )

        logger.info(
            "competitor_analysis_completed",
            competitors=len(merged.competitors),
            opportunities=len(merged.opportunities),
            confidence=merged.analysis_metadata.confidence,
            providers_succeeded=succeeded,
            providers_failed=list(failed),
        )
        return APIResponse.ok(
            merged,
            combine_metadata(responses, elapsed_ms, provider=succeeded[0]),
        )
