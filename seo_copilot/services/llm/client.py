"""Provider Client

Uniform `invoke(operation, request)` on top of a vendor LLMProvider:
builds the prompt, calls the vendor once, decodes the reply into the
operation's typed response and accounts tokens and cost.

No retry, cache or rate limiting happens here; ResilientProvider wraps
this client with those concerns.
"""

from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, Type, TypeVar

import structlog
from pydantic import BaseModel

from seo_copilot.models.llm import Operation, ProviderName
from seo_copilot.models.seo import (
    CompetitorAnalysisResponse,
    ContentAnalysisResponse,
    ContentGaps,
    GeneratedText,
    GenerateRequest,
    KeywordResearchResponse,
    OriginalityAnalysis,
    ReadabilityAnalysis,
    SEOAnalysis,
    SEORecommendations,
)
from seo_copilot.services.llm.prompt_builder import PromptBuilder
from seo_copilot.services.llm.providers.base import LLMProvider
from seo_copilot.services.llm.response_parser import ResponseParser

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class OperationSpec:
    """Response model and sampling parameters for one operation."""

    response_model: Type[BaseModel]
    max_tokens: int
    temperature: float
    json_mode: bool = True


OPERATION_SPECS: Dict[Operation, OperationSpec] = {
    Operation.ANALYZE_COMPETITORS: OperationSpec(CompetitorAnalysisResponse, 3000, 0.4),
    Operation.CONTENT_GAPS: OperationSpec(ContentGaps, 1000, 0.5),
    Operation.ANALYZE_CONTENT: OperationSpec(ContentAnalysisResponse, 2000, 0.3),
    Operation.ANALYZE_READABILITY: OperationSpec(ReadabilityAnalysis, 1000, 0.3),
    Operation.ANALYZE_ORIGINALITY: OperationSpec(OriginalityAnalysis, 1000, 0.3),
    Operation.OPTIMIZE_SEO: OperationSpec(SEOAnalysis, 2000, 0.3),
    Operation.SEO_RECOMMENDATIONS: OperationSpec(SEORecommendations, 1000, 0.3),
    Operation.ANALYZE_KEYWORDS: OperationSpec(KeywordResearchResponse, 2000, 0.4),
    Operation.GENERATE: OperationSpec(GeneratedText, 1000, 0.7, json_mode=False),
}


@dataclass
class ProviderResult(Generic[T]):
    """Outcome of a successful provider invocation."""

    data: T
    tokens_used: int = 0
    cost: float = 0.0
    latency_ms: float = 0.0


class ProviderClient:
    """Invokes operations against a single vendor provider."""

    def __init__(
        self,
        provider: LLMProvider,
        prompt_builder: Optional[PromptBuilder] = None,
        response_parser: Optional[ResponseParser] = None,
    ):
        self.provider = provider
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.response_parser = response_parser or ResponseParser()

    @property
    def name(self) -> ProviderName:
        return self.provider.name

    async def invoke(self, operation: Operation, request: Any) -> ProviderResult[Any]:
        """Run one operation against the provider.

        Args:
            operation: Operation to perform
            request: Typed request payload for the operation

        Returns:
            ProviderResult holding the decoded response model

        Raises:
            ProviderCallFailed: transport, vendor or timeout failure
            ResponseParseError: reply did not decode into the response model
        """
        spec = OPERATION_SPECS[operation]
        prompt = self.prompt_builder.build(operation, request)

        max_tokens = spec.max_tokens
        temperature = spec.temperature
        if isinstance(request, GenerateRequest):
            max_tokens = request.max_tokens
            temperature = request.temperature

        response = await self.provider.generate(
            prompt.user,
            max_tokens=max_tokens,
            temperature=temperature,
            system=prompt.system,
            json_mode=spec.json_mode,
        )

        data = self.response_parser.parse(
            response.content, spec.response_model, provider=self.name.value
        )

        tokens = response.total_tokens
        result = ProviderResult(
            data=data,
            tokens_used=tokens,
            cost=self.provider.calculate_cost(tokens),
            latency_ms=response.latency_ms,
        )

        logger.debug(
            "provider_invoke_complete",
            provider=self.name.value,
            operation=operation.value,
            tokens=tokens,
            cost_usd=round(result.cost, 6),
        )
        return result

    async def close(self) -> None:
        await self.provider.close()
