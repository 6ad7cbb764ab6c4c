"""Anthropic (Claude) Provider Implementation"""

import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog

from seo_copilot.services.llm.providers.base import LLMProvider, LLMResponse
from seo_copilot.utils.exceptions import ProviderCallFailed

logger = structlog.get_logger()


class AnthropicProvider(LLMProvider):
    """Anthropic Claude provider implementation.

    First choice of the router; also produces content gaps for competitor
    analysis.
    """

    PRICE_PER_1K = 0.009

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                from anthropic import AsyncAnthropic
            except ImportError:
                raise ProviderCallFailed(
                    "anthropic package not installed. Run: pip install anthropic",
                    provider=self.name.value,
                    retryable=False,
                )
            self._client = AsyncAnthropic(
                api_key=self.config.api_key,
                timeout=self.config.timeout_seconds,
                max_retries=0,
            )
        return self._client

    async def generate(
        self,
        prompt: str,
        max_tokens: int = 2000,
        temperature: float = 0.3,
        system: Optional[str] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate text using Claude.

        Claude has no JSON mode flag; `json_mode` is honoured through the
        prompt wording and the response parser.
        """
        start_time = time.time()
        client = self._get_client()

        kwargs: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        try:
            response = await client.messages.create(**kwargs)
        except Exception as e:
            raise self._classify_error(e)

        latency_ms = (time.time() - start_time) * 1000

        content = "".join(
            getattr(block, "text", "") for block in (response.content or [])
        )

        llm_response = LLMResponse(
            content=content,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=self.model,
            provider=self.name.value,
            latency_ms=latency_ms,
            finish_reason=response.stop_reason,
            timestamp=datetime.now(timezone.utc),
        )

        logger.debug(
            "anthropic_generate_success",
            model=self.model,
            input_tokens=llm_response.input_tokens,
            output_tokens=llm_response.output_tokens,
            latency_ms=latency_ms,
        )

        return llm_response

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
