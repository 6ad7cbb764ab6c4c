"""Google (Gemini) Provider Implementation"""

import time
from datetime import datetime, timezone
from typing import Any, Optional

import structlog

from seo_copilot.services.llm.providers.base import (
    LLMProvider,
    LLMResponse,
    estimate_tokens,
)
from seo_copilot.utils.exceptions import ProviderCallFailed

logger = structlog.get_logger()


class GoogleProvider(LLMProvider):
    """Google Gemini provider implementation.

    Usage metadata from the SDK is not relied on; tokens are estimated as
    characters / 4 over prompt plus output.
    """

    PRICE_PER_1K = 0.00035

    CONTEXT_LENGTH_PATTERNS = LLMProvider.CONTEXT_LENGTH_PATTERNS + [
        "token limit",
        "exceeds the maximum",
    ]

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                from google import genai
            except ImportError:
                raise ProviderCallFailed(
                    "google-genai package not installed. Run: pip install google-genai",
                    provider=self.name.value,
                    retryable=False,
                )
            self._client = genai.Client(api_key=self.config.api_key)
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

        try:
            from google.genai import types

            config = types.GenerateContentConfig(
                temperature=temperature,
                max_output_tokens=max_tokens,
                system_instruction=system,
                response_mime_type="application/json" if json_mode else None,
            )
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        except Exception as e:
            raise self._classify_error(e)

        latency_ms = (time.time() - start_time) * 1000

        content = getattr(response, "text", None) or ""
        input_tokens = estimate_tokens(prompt)
        output_tokens = estimate_tokens(content)

        llm_response = LLMResponse(
            content=content,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            model=self.model,
            provider=self.name.value,
            latency_ms=latency_ms,
            finish_reason=self._get_finish_reason(response),
            timestamp=datetime.now(timezone.utc),
        )

        logger.debug(
            "google_generate_success",
            model=self.model,
            estimated_tokens=llm_response.total_tokens,
            latency_ms=latency_ms,
        )

        return llm_response

    def _get_finish_reason(self, response: Any) -> Optional[str]:
        """Extract finish reason from response."""
        candidates = getattr(response, "candidates", None)
        if candidates:
            reason = getattr(candidates[0], "finish_reason", None)
            if reason is not None:
                return str(reason)
        return None
