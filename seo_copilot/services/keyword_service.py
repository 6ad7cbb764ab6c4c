"""Keyword Research Service

Routed single-provider keyword research; the summary metadata is recomputed
from the returned keywords.
"""

import time
from typing import Any

import structlog

from seo_copilot.models.envelope import APIResponse
from seo_copilot.models.llm import Operation
from seo_copilot.models.seo import KeywordResearchRequest, KeywordResearchResponse
from seo_copilot.observability.metrics import ANALYSIS_DURATION
from seo_copilot.orchestration.merge import normalize_keyword_research
from seo_copilot.orchestration.router import LLMRouter
from seo_copilot.utils.validation import parse_request

logger = structlog.get_logger()


class KeywordService:
    def __init__(self, router: LLMRouter):
        self.router = router

    async def research(self, payload: Any) -> APIResponse[KeywordResearchResponse]:
        """Expand seed keywords into scored keywords and topic clusters.

        Raises:
            InvalidRequestError: no seed keywords
            AllProvidersExhausted: no router provider could serve the request
        """
        request = parse_request(
            KeywordResearchRequest, payload, "At least one seed keyword is required"
        )
        start = time.monotonic()

        routed = await self.router.route(Operation.ANALYZE_KEYWORDS, request)
        result = normalize_keyword_research(routed.content)

        elapsed = time.monotonic() - start
        ANALYSIS_DURATION.labels(operation="research-keywords").observe(elapsed)
        logger.info(
            "keyword_research_completed",
            provider=routed.provider_used.value,
            keywords=result.metadata.total_keywords,
            clusters=len(result.clusters),
        )
        return APIResponse.ok(
            result,
            routed.response.metadata.model_copy(
                update={"duration_ms": int(elapsed * 1000)}
            ),
        )
