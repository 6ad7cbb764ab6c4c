"""Perplexity Provider Implementation

Perplexity exposes an OpenAI-compatible chat completions endpoint; it is
called directly over aiohttp.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp
import structlog

from seo_copilot.models.llm import ProviderConfig
from seo_copilot.services.llm.providers.base import (
    LLMProvider,
    LLMResponse,
    estimate_tokens,
)
from seo_copilot.utils.exceptions import ProviderCallFailed, ResponseParseError

logger = structlog.get_logger()


class PerplexityProvider(LLMProvider):
    """Perplexity Sonar provider implementation."""

    BASE_URL = "https://api.perplexity.ai/chat/completions"
    PRICE_PER_1K = 0.008

    def __init__(
        self,
        config: ProviderConfig,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        super().__init__(config)
        self._session = session

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def generate(
        self,
        prompt: str,
        max_tokens: int = 2000,
        temperature: float = 0.3,
        system: Optional[str] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        start_time = time.time()

        messages: List[Dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        body = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }

        session = await self._get_session()
        try:
            async with session.post(
                self.BASE_URL,
                json=body,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
            ) as response:
                if response.status != 200:
                    text = await response.text()
                    logger.error(
                        "perplexity_api_error", status=response.status, body=text[:500]
                    )
                    raise self._classify_error(
                        RuntimeError(
                            f"Perplexity API error: {response.status} {text[:200]}"
                        )
                    )
                try:
                    data: Dict[str, Any] = await response.json(content_type=None)
                except ValueError:
                    raise ResponseParseError(
                        "Perplexity returned a non-JSON body", provider=self.name.value
                    )
        except asyncio.TimeoutError:
            raise ProviderCallFailed(
                "perplexity request timed out", provider=self.name.value
            )
        except aiohttp.ClientError as e:
            raise self._classify_error(e)

        latency_ms = (time.time() - start_time) * 1000

        try:
            choice = data["choices"][0]
            content = choice["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            raise ResponseParseError(
                "Perplexity response has no choices", provider=self.name.value
            )

        usage = data.get("usage") or {}
        input_tokens = usage.get("prompt_tokens")
        output_tokens = usage.get("completion_tokens")
        if input_tokens is None or output_tokens is None:
            total = usage.get("total_tokens")
            if total is not None:
                input_tokens, output_tokens = 0, int(total)
            else:
                input_tokens = estimate_tokens(prompt)
                output_tokens = estimate_tokens(content)

        llm_response = LLMResponse(
            content=content,
            input_tokens=int(input_tokens),
            output_tokens=int(output_tokens),
            model=self.model,
            provider=self.name.value,
            latency_ms=latency_ms,
            finish_reason=choice.get("finish_reason"),
            timestamp=datetime.now(timezone.utc),
        )

        logger.debug(
            "perplexity_generate_success",
            model=self.model,
            total_tokens=llm_response.total_tokens,
            latency_ms=latency_ms,
        )

        return llm_response

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
