"""Content Enhancement Service

Rewrites a draft through the router (readability, human or personal mode)
and strips prompt echoes from the reply.
"""

import re
import time
from typing import Any

import structlog

from seo_copilot.models.envelope import APIResponse
from seo_copilot.models.seo import EnhanceContentRequest, EnhanceContentResponse
from seo_copilot.observability.metrics import ANALYSIS_DURATION
from seo_copilot.orchestration.router import LLMRouter
from seo_copilot.services.llm.prompt_builder import PromptBuilder
from seo_copilot.utils.exceptions import EnhancementTooShortError
from seo_copilot.utils.validation import parse_request

logger = structlog.get_logger()

MIN_ENHANCED_LENGTH = 50
ENHANCE_MAX_TOKENS = 2000
ENHANCE_TEMPERATURE = 0.7

_ARTIFACT_RE = re.compile(
    r"^(ENHANCED CONTENT:|Enhanced Content:|Rewritten Content:)", re.IGNORECASE
)


def clean_enhanced_content(text: str) -> str:
    """Drop a leading prompt echo such as "ENHANCED CONTENT:"."""
    return _ARTIFACT_RE.sub("", text.strip()).strip()


class EnhancementService:
    def __init__(self, router: LLMRouter):
        self.router = router

    async def enhance(self, payload: Any) -> APIResponse[EnhanceContentResponse]:
        """Rewrite content in the requested mode.

        Raises:
            InvalidRequestError: content missing or mode unknown
            AllProvidersExhausted: no router provider could serve the rewrite
            EnhancementTooShortError: the rewrite came back under 50 characters
        """
        request = parse_request(
            EnhanceContentRequest, payload, "Content and a valid mode are required"
        )
        start = time.monotonic()
        logger.info(
            "enhancement_started",
            mode=request.mode.value,
            content_length=len(request.content),
            custom_prompt=bool(request.prompt),
        )

        routed = await self.router.route_generate(
            PromptBuilder.build_enhancement(request),
            max_tokens=ENHANCE_MAX_TOKENS,
            temperature=ENHANCE_TEMPERATURE,
        )
        enhanced = clean_enhanced_content(routed.content)
        if len(enhanced) < MIN_ENHANCED_LENGTH:
            raise EnhancementTooShortError(
                "Enhanced content is too short - enhancement may have failed",
                provider=routed.provider_used.value,
            )

        elapsed = time.monotonic() - start
        ANALYSIS_DURATION.labels(operation="enhance-content").observe(elapsed)
        logger.info(
            "enhancement_completed",
            mode=request.mode.value,
            provider=routed.provider_used.value,
            original_length=len(request.content),
            enhanced_length=len(enhanced),
        )

        metadata = routed.response.metadata.model_copy(
            update={"duration_ms": int(elapsed * 1000)}
        )
        return APIResponse.ok(
            EnhanceContentResponse(
                enhanced_content=enhanced,
                original_length=len(request.content),
                enhanced_length=len(enhanced),
                provider_used=routed.provider_used.value,
                mode=request.mode,
                target_grade_level=request.target_grade_level,
            ),
            metadata,
        )
