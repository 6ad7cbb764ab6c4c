"""Retry handler for provider calls.

Implements exponential backoff on top of tenacity:
- max_retries retries after the first attempt (max_retries + 1 calls)
- delay = base_delay * 2^attempt (1s, 2s, 4s with the defaults), capped
- rate-limit and non-retryable errors are raised immediately
- structured logging and an optional callback before every retry
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from seo_copilot.models.llm import ProviderConfig
from seo_copilot.utils.exceptions import RateLimitExceeded, SeoCopilotError

logger = structlog.get_logger(__name__)


T = TypeVar("T")


def is_retryable(error: BaseException) -> bool:
    """Whether a failed attempt should be retried.

    Only classified provider errors flagged retryable qualify; local
    rate-limit rejections are left to the caller.
    """
    if isinstance(error, RateLimitExceeded):
        return False
    return isinstance(error, SeoCopilotError) and error.retryable


class RetryHandler:
    """Async retry handler with capped exponential backoff."""

    def __init__(
        self,
        max_retries: int = 3,
        base_delay_seconds: float = 1.0,
        max_delay_seconds: float = 30.0,
        provider: Optional[str] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize retry handler.

        Args:
            max_retries: Retries after the first attempt
            base_delay_seconds: Delay before the first retry
            max_delay_seconds: Cap applied to every delay
            provider: Provider name for log context
            sleep: Awaitable sleep, injectable for tests
        """
        self.max_retries = max_retries
        self.base_delay_seconds = base_delay_seconds
        self.max_delay_seconds = max_delay_seconds
        self.provider = provider
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        config: ProviderConfig,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> "RetryHandler":
        return cls(
            max_retries=config.max_retries,
            base_delay_seconds=config.base_delay_seconds,
            max_delay_seconds=config.max_delay_seconds,
            provider=config.name.value,
            sleep=sleep,
        )

    def calculate_delay(self, attempt: int) -> float:
        """Delay before retry number `attempt + 1` (attempt is 0-indexed)."""
        return min(self.base_delay_seconds * (2**attempt), self.max_delay_seconds)

    async def execute(
        self,
        func: Callable[[], Awaitable[T]],
        on_retry: Optional[Callable[[int, BaseException, float], None]] = None,
    ) -> T:
        """Execute function with retry logic.

        Args:
            func: Zero-argument callable returning an awaitable (a coroutine
                  function, a lambda or a partial)
            on_retry: Optional callback called before each retry with
                     (attempt_number, exception, delay_seconds)

        Returns:
            Result of successful function execution

        Raises:
            SeoCopilotError: the last error once retries are exhausted, or
                the first non-retryable error
        """

        def before_sleep(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            delay = retry_state.next_action.sleep if retry_state.next_action else 0.0

            logger.warning(
                "retry_attempt",
                provider=self.provider,
                attempt=retry_state.attempt_number,
                max_attempts=self.max_retries + 1,
                error_type=type(error).__name__,
                error_message=str(error),
                delay_seconds=delay,
            )

            if on_retry is not None and error is not None:
                on_retry(retry_state.attempt_number, error, delay)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(
                multiplier=self.base_delay_seconds,
                min=0,
                max=self.max_delay_seconds,
            ),
            retry=retry_if_exception(is_retryable),
            sleep=self._sleep,
            before_sleep=before_sleep,
            reraise=True,
        )

        # AsyncRetrying only awaits coroutine functions; a lambda returning a
        # coroutine would be called once and its coroutine returned unawaited
        async def attempt() -> T:
            return await func()

        return await retrying(attempt)
