import threading
import time
from typing import Callable, Optional

import structlog

from seo_copilot.utils.exceptions import RateLimitExceeded

logger = structlog.get_logger()


class RateLimiter:
    """Fixed-window rate limiter for outbound provider calls.

    Allows `max_requests` per `window_seconds`. The window starts with the
    first request after the previous window expired. Consumption is guarded
    by a lock so concurrent callers cannot both take the last slot.
    """

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 60.0,
        provider: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.provider = provider
        self._clock = clock
        self._lock = threading.Lock()
        self._window_start: Optional[float] = None
        self._count = 0

    def _roll_window(self, now: float) -> None:
        if (
            self._window_start is None
            or now - self._window_start >= self.window_seconds
        ):
            self._window_start = now
            self._count = 0

    def try_acquire(self) -> None:
        """Consume one request slot.

        Raises:
            RateLimitExceeded: window exhausted; carries seconds until reset
        """
        with self._lock:
            now = self._clock()
            self._roll_window(now)

            if self._count >= self.max_requests:
                assert self._window_start is not None
                retry_after = max(
                    1.0, self._window_start + self.window_seconds - now
                )
                logger.warning(
                    "rate_limit_exceeded",
                    provider=self.provider,
                    limit=self.max_requests,
                    retry_after_seconds=round(retry_after, 1),
                )
                raise RateLimitExceeded(retry_after, provider=self.provider)

            self._count += 1

    def remaining(self) -> int:
        """Slots left in the current window, without consuming one."""
        with self._lock:
            now = self._clock()
            if (
                self._window_start is None
                or now - self._window_start >= self.window_seconds
            ):
                return self.max_requests
            return max(0, self.max_requests - self._count)

    def reset(self) -> None:
        with self._lock:
            self._window_start = None
            self._count = 0
