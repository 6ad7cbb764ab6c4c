"""Content Analysis Service

Fans ANALYZE_CONTENT out to the content providers while the SEO detail
provider runs OPTIMIZE_SEO alongside, then blends the reports into one
score bundle. The SEO detail call is enrichment only: it cannot rescue a
request on which every content provider failed.
"""

import asyncio
import time
from typing import Any, Dict, Optional

import structlog

from seo_copilot.models.envelope import APIResponse
from seo_copilot.models.llm import (
    ConfidencePolicy,
    MergeLimits,
    Operation,
    ProviderName,
    RoutingConfig,
)
from seo_copilot.models.seo import ContentAnalysisRequest, ContentAnalysisResponse
from seo_copilot.observability.metrics import ANALYSIS_DURATION
from seo_copilot.orchestration.fanout import (
    FanOutOrchestrator,
    ProviderCall,
    combine_metadata,
)
from seo_copilot.orchestration.merge import merge_content_analysis
from seo_copilot.services.llm.resilience import ResilientProvider
from seo_copilot.utils.exceptions import AllProvidersExhausted
from seo_copilot.utils.validation import parse_request

logger = structlog.get_logger()


class ContentService:
    """Multi-provider content scoring."""

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

    async def analyze(self, payload: Any) -> APIResponse[ContentAnalysisResponse]:
        """Score a draft for readability, SEO, originality and engagement.

        Raises:
            InvalidRequestError: title or content missing
            AllProvidersExhausted: every content provider failed
        """
        request = parse_request(
            ContentAnalysisRequest, payload, "Title and content are required"
        )
        start = time.monotonic()
        logger.info(
            "content_analysis_started",
            title_length=len(request.title),
            content_length=len(request.content),
            keywords=len(request.target_keywords),
        )

        order = [p for p in self.routing.content_providers if p in self.providers]
        if not order:
            raise AllProvidersExhausted("No content analysis providers configured")

        outcomes, seo_response = await asyncio.gather(
            self.fanout.fan_out(
                {
                    p: ProviderCall(self.providers[p], Operation.ANALYZE_CONTENT, request)
                    for p in order
                },
                label=Operation.ANALYZE_CONTENT.value,
            ),
            self._seo_detail(request),
        )
        successes = self.fanout.require_success(outcomes, order)
        responses = [r for _, r in successes]

        seo_detail = None
        if seo_response is not None:
            if seo_response.success:
                seo_detail = seo_response.data
                responses.append(seo_response)
            else:
                assert seo_response.error is not None
                logger.warning(
                    "seo_detail_failed",
                    provider=self.routing.seo_detail_provider.value,
                    error_code=seo_response.error.code,
                )

        merged = merge_content_analysis(
            [r.data for _, r in successes], seo_detail, self.policy, self.limits
        )
        elapsed = time.monotonic() - start
        ANALYSIS_DURATION.labels(operation="analyze-content").observe(elapsed)

        logger.info(
            "content_analysis_completed",
            overall=merged.scores.overall,
            providers=[p.value for p, _ in successes],
            defaulted_scores=merged.defaulted_scores,
        )
        return APIResponse.ok(
            merged,
            combine_metadata(
                responses, int(elapsed * 1000), provider=successes[0][0].value
            ),
        )

    async def _seo_detail(
        self, request: ContentAnalysisRequest
    ) -> Optional[APIResponse[Any]]:
        provider = self.routing.seo_detail_provider
        if provider is None or provider not in self.providers:
            return None
        return await self.providers[provider].execute(Operation.OPTIMIZE_SEO, request)
