"""Resilience wrapper around a ProviderClient.

Every call goes through, in order:
1. Response cache lookup (a hit skips everything below)
2. Rate-limit window consumption
3. Provider configuration validation
4. Retry with capped exponential backoff and a per-call timeout
5. Response cache write with the operation's TTL

The outcome is always an APIResponse envelope; errors never propagate.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Optional

import structlog
from pydantic import ValidationError

from seo_copilot.models.envelope import APIResponse, ResponseMetadata
from seo_copilot.models.llm import Operation, ProviderConfig, ProviderName
from seo_copilot.observability.metrics import (
    PROVIDER_REQUEST_DURATION,
    PROVIDER_REQUESTS_TOTAL,
    PROVIDER_RETRIES_TOTAL,
    RATE_LIMIT_REJECTIONS,
)
from seo_copilot.services.cache_service import ResponseCache
from seo_copilot.services.llm.client import (
    OPERATION_SPECS,
    ProviderClient,
    ProviderResult,
)
from seo_copilot.services.llm.cost_tracker import UsageTracker
from seo_copilot.utils.exceptions import (
    MissingCredentialError,
    MissingModelError,
    ProviderCallFailed,
    RateLimitExceeded,
    SeoCopilotError,
)
from seo_copilot.utils.rate_limiter import RateLimiter
from seo_copilot.utils.retry import RetryHandler

logger = structlog.get_logger()


class ResilientProvider:
    """A provider client with caching, rate limiting and retries."""

    def __init__(
        self,
        client: ProviderClient,
        config: ProviderConfig,
        cache: ResponseCache,
        rate_limiter: Optional[RateLimiter] = None,
        usage: Optional[UsageTracker] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.config = config
        self.cache = cache
        self.rate_limiter = rate_limiter or RateLimiter(
            max_requests=config.rate_limit_requests,
            window_seconds=config.rate_limit_window_seconds,
            provider=config.name.value,
        )
        self.usage = usage or UsageTracker()
        self.retry_handler = RetryHandler.from_config(config, sleep=sleep)

    @property
    def name(self) -> ProviderName:
        return self.config.name

    def validate_config(self) -> None:
        """Raise if the provider cannot be called with its configuration.

        Raises:
            MissingCredentialError: no API key configured
            MissingModelError: no model configured
        """
        if not self.config.has_credentials:
            raise MissingCredentialError(self.name.value)
        if not self.config.model:
            raise MissingModelError(self.name.value)

    async def execute(self, operation: Operation, request: Any) -> APIResponse[Any]:
        """Execute an operation and wrap the outcome in an envelope.

        Args:
            operation: Operation to perform
            request: Typed request payload (also the cache key input)

        Returns:
            APIResponse with `data` on success or `error` on failure
        """
        start = time.monotonic()
        provider = self.name.value

        cached = self._cached_response(operation, request)
        if cached is not None:
            data, tokens, cost = cached
            self.usage.record_cache_hit(provider)
            PROVIDER_REQUESTS_TOTAL.labels(
                provider=provider, operation=operation.value, status="cached"
            ).inc()
            return APIResponse.ok(
                data, self._metadata(start, cached=True, tokens=tokens, cost=cost)
            )

        try:
            self.rate_limiter.try_acquire()
            self.validate_config()
            with PROVIDER_REQUEST_DURATION.labels(provider=provider).time():
                result = await self.retry_handler.execute(
                    lambda: self._call(operation, request),
                    on_retry=self._on_retry,
                )
        except RateLimitExceeded as e:
            RATE_LIMIT_REJECTIONS.labels(provider=provider).inc()
            return self._failure(start, operation, e)
        except SeoCopilotError as e:
            return self._failure(start, operation, e)
        except Exception as e:
            return self._unexpected_failure(start, operation, e)

        try:
            self._record_success(operation, request, result)
        except Exception as e:
            return self._unexpected_failure(start, operation, e)

        logger.info(
            "provider_call_succeeded",
            provider=provider,
            operation=operation.value,
            tokens=result.tokens_used,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        return APIResponse.ok(
            result.data,
            self._metadata(
                start, cached=False, tokens=result.tokens_used, cost=result.cost
            ),
        )

    def _record_success(
        self, operation: Operation, request: Any, result: ProviderResult[Any]
    ) -> None:
        provider = self.name.value
        self.cache.set(
            self.name,
            operation,
            request,
            result.data.model_dump(mode="json"),
            tokens_used=result.tokens_used,
            cost=result.cost,
        )
        self.usage.record_usage(provider, result.tokens_used, result.cost)
        PROVIDER_REQUESTS_TOTAL.labels(
            provider=provider, operation=operation.value, status="success"
        ).inc()

    def _unexpected_failure(
        self, start: float, operation: Operation, error: Exception
    ) -> APIResponse[Any]:
        provider = self.name.value
        logger.exception(
            "provider_call_unexpected_error",
            provider=provider,
            operation=operation.value,
        )
        # Unclassified errors are never retried, so the envelope says so
        return self._failure(
            start,
            operation,
            ProviderCallFailed(
                f"{provider} request failed: {error}",
                provider=provider,
                retryable=False,
            ),
        )

    async def _call(self, operation: Operation, request: Any) -> ProviderResult[Any]:
        try:
            return await asyncio.wait_for(
                self.client.invoke(operation, request),
                timeout=self.config.timeout_seconds,
            )
        except asyncio.TimeoutError:
            raise ProviderCallFailed(
                f"{self.name.value} request timed out after "
                f"{self.config.timeout_seconds:g}s",
                provider=self.name.value,
            )

    def _cached_response(self, operation: Operation, request: Any) -> Optional[tuple]:
        entry = self.cache.get(self.name, operation, request)
        if entry is None:
            return None
        model = OPERATION_SPECS[operation].response_model
        try:
            data = model.model_validate(entry.data)
        except ValidationError:
            logger.warning(
                "cache_entry_invalid",
                provider=self.name.value,
                operation=operation.value,
            )
            return None
        return data, entry.tokens_used, entry.cost

    def _on_retry(self, attempt: int, error: BaseException, delay: float) -> None:
        self.usage.record_retry(self.name.value)
        PROVIDER_RETRIES_TOTAL.labels(provider=self.name.value).inc()

    def _failure(
        self, start: float, operation: Operation, error: SeoCopilotError
    ) -> APIResponse[Any]:
        provider = self.name.value
        self.usage.record_failure(provider)
        PROVIDER_REQUESTS_TOTAL.labels(
            provider=provider, operation=operation.value, status="failed"
        ).inc()
        logger.warning(
            "provider_call_failed",
            provider=provider,
            operation=operation.value,
            error_code=error.code,
            error=error.message,
            retryable=error.retryable,
        )
        api_error = error.to_api_error()
        if api_error.provider is None:
            api_error.provider = provider
        return APIResponse.fail(api_error, self._metadata(start, cached=False))

    def _metadata(
        self,
        start: float,
        cached: bool,
        tokens: Optional[int] = None,
        cost: Optional[float] = None,
    ) -> ResponseMetadata:
        return ResponseMetadata(
            duration_ms=int((time.monotonic() - start) * 1000),
            provider=self.name.value,
            cached=cached,
            tokens_used=tokens,
            cost=cost,
        )

    def remaining_capacity(self) -> int:
        return self.rate_limiter.remaining()

    async def close(self) -> None:
        await self.client.close()
