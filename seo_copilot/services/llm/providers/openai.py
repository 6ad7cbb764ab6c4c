"""OpenAI Provider Implementation"""

import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from seo_copilot.services.llm.providers.base import LLMProvider, LLMResponse
from seo_copilot.utils.exceptions import ProviderCallFailed

logger = structlog.get_logger()


class OpenAIProvider(LLMProvider):
    """OpenAI chat-completions provider.

    Used for competitor analysis and content scoring, where JSON mode
    (`response_format={"type": "json_object"}`) keeps the body parseable.
    """

    PRICE_PER_1K = 0.045

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                from openai import AsyncOpenAI
            except ImportError:
                raise ProviderCallFailed(
                    "openai package not installed. Run: pip install openai",
                    provider=self.name.value,
                    retryable=False,
                )
            # Retries are handled by RetryHandler, not the SDK
            self._client = AsyncOpenAI(
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
        start_time = time.time()
        client = self._get_client()

        messages: List[Dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await client.chat.completions.create(**kwargs)
        except Exception as e:
            raise self._classify_error(e)

        latency_ms = (time.time() - start_time) * 1000

        choice = response.choices[0] if response.choices else None
        content = (choice.message.content or "") if choice else ""
        usage = getattr(response, "usage", None)

        llm_response = LLMResponse(
            content=content,
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
            model=self.model,
            provider=self.name.value,
            latency_ms=latency_ms,
            finish_reason=getattr(choice, "finish_reason", None),
            timestamp=datetime.now(timezone.utc),
        )

        logger.debug(
            "openai_generate_success",
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
