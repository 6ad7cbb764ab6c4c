"""Focused Analysis Service

Routed single-dimension checks on a draft: readability metrics,
originality and human authenticity, and a short list of SEO
recommendations. Each is served by the first available router provider.
"""

import time
from typing import Any

import structlog
from pydantic import BaseModel

from seo_copilot.models.envelope import APIResponse
from seo_copilot.models.llm import MergeLimits, Operation
from seo_copilot.models.seo import (
    FocusedAnalysisRequest,
    OriginalityAnalysis,
    ReadabilityAnalysis,
    SEORecommendations,
)
from seo_copilot.observability.metrics import ANALYSIS_DURATION
from seo_copilot.orchestration.merge import union_strings
from seo_copilot.orchestration.router import LLMRouter
from seo_copilot.utils.validation import parse_request

logger = structlog.get_logger()


class FocusedAnalysisService:
    def __init__(self, router: LLMRouter, limits: MergeLimits):
        self.router = router
        self.limits = limits

    async def readability(self, payload: Any) -> APIResponse[ReadabilityAnalysis]:
        return await self._run(Operation.ANALYZE_READABILITY, payload)

    async def originality(self, payload: Any) -> APIResponse[OriginalityAnalysis]:
        return await self._run(Operation.ANALYZE_ORIGINALITY, payload)

    async def seo_recommendations(self, payload: Any) -> APIResponse[SEORecommendations]:
        """Up to ``max_suggestions`` de-duplicated recommendations."""
        response = await self._run(Operation.SEO_RECOMMENDATIONS, payload)
        recommendations = union_strings(response.data.recommendations)
        trimmed = SEORecommendations(
            recommendations=recommendations[: self.limits.max_suggestions]
        )
        return response.model_copy(update={"data": trimmed})

    async def _run(self, operation: Operation, payload: Any) -> APIResponse[Any]:
        """
        Raises:
            InvalidRequestError: blank or missing content
            AllProvidersExhausted: no router provider could serve the request
        """
        request = parse_request(
            FocusedAnalysisRequest, payload, "Content is required for analysis"
        )
        start = time.monotonic()

        routed = await self.router.route(operation, request)
        result: BaseModel = routed.content

        elapsed = time.monotonic() - start
        ANALYSIS_DURATION.labels(operation=operation.value).observe(elapsed)
        logger.info(
            "focused_analysis_completed",
            operation=operation.value,
            provider=routed.provider_used.value,
        )
        return APIResponse.ok(
            result,
            routed.response.metadata.model_copy(
                update={"duration_ms": int(elapsed * 1000)}
            ),
        )
