"""
Per-provider disk cache for provider responses.

Each provider gets its own diskcache namespace; keys are derived from the
operation and a canonical hash of the request payload. Entries expire by
TTL class:
1. Volatile (content scoring, generation): 1 hour
2. Stable (competitors, gaps, keywords): 24 hours

Cache failures are logged and treated as misses; the cache never turns a
successful provider call into a failure.
"""

import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import diskcache
import structlog

from seo_copilot.models.llm import CacheConfig, CacheStats, Operation, ProviderName
from seo_copilot.observability.metrics import CACHE_OPERATIONS
from seo_copilot.utils.hash import calculate_payload_hash

logger = structlog.get_logger()


@dataclass
class CachedResponse:
    """A cache hit: the stored JSON payload plus the original accounting."""

    data: Any
    tokens_used: Optional[int] = None
    cost: Optional[float] = None


class ResponseCache:
    """
    Provider response cache.

    Thread-safe and process-safe through diskcache's SQLite backend.
    """

    def __init__(
        self,
        config: CacheConfig,
        providers: Iterable[ProviderName] = tuple(ProviderName),
    ):
        """
        Initialize cache namespaces.

        Args:
            config: Cache configuration
            providers: Providers that get a namespace
        """
        self.config = config
        self.enabled = config.enabled
        self._caches: Dict[ProviderName, diskcache.Cache] = {}

        if not self.enabled:
            logger.info("cache_disabled")
            return

        if config.cache_dir:
            self.cache_dir = Path(config.cache_dir)
        else:
            self.cache_dir = Path(tempfile.mkdtemp(prefix="seo-copilot-cache-"))
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        size_limit = config.size_limit_mb * 1024 * 1024
        for provider in providers:
            cache = diskcache.Cache(
                str(self.cache_dir / provider.value), size_limit=size_limit
            )
            cache.stats(enable=True)
            self._caches[provider] = cache

        logger.info(
            "cache_service_initialized",
            cache_dir=str(self.cache_dir),
            ttl_volatile_seconds=config.ttl_volatile_seconds,
            ttl_stable_seconds=config.ttl_stable_seconds,
        )

    @staticmethod
    def make_key(operation: Operation, payload: Any) -> str:
        return f"{operation.value}:{calculate_payload_hash(payload)}"

    def get(
        self, provider: ProviderName, operation: Operation, payload: Any
    ) -> Optional[CachedResponse]:
        """
        Get a cached response.

        Returns:
            CachedResponse or None on miss, expiry or cache error
        """
        cache = self._caches.get(provider)
        if not self.enabled or cache is None:
            return None

        cache_key = self.make_key(operation, payload)

        try:
            entry = cache.get(cache_key)
        except Exception as e:
            logger.error("cache_get_error", provider=provider.value, error=str(e))
            CACHE_OPERATIONS.labels(provider=provider.value, operation="error").inc()
            return None

        if not isinstance(entry, dict) or "data" not in entry:
            logger.debug(
                "cache_miss",
                provider=provider.value,
                operation=operation.value,
                cache_key=cache_key[-8:],
            )
            CACHE_OPERATIONS.labels(provider=provider.value, operation="miss").inc()
            return None

        logger.info(
            "cache_hit",
            provider=provider.value,
            operation=operation.value,
            cache_key=cache_key[-8:],
        )
        CACHE_OPERATIONS.labels(provider=provider.value, operation="hit").inc()
        return CachedResponse(
            data=entry["data"],
            tokens_used=entry.get("tokens_used"),
            cost=entry.get("cost"),
        )

    def set(
        self,
        provider: ProviderName,
        operation: Operation,
        payload: Any,
        data: Any,
        tokens_used: Optional[int] = None,
        cost: Optional[float] = None,
    ) -> None:
        """
        Store a response with the operation's TTL.

        Args:
            data: JSON-serialisable response payload
        """
        cache = self._caches.get(provider)
        if not self.enabled or cache is None:
            return

        cache_key = self.make_key(operation, payload)
        entry = {"data": data, "tokens_used": tokens_used, "cost": cost}

        try:
            cache.set(cache_key, entry, expire=self.config.ttl_for(operation))
            logger.debug(
                "response_cached",
                provider=provider.value,
                operation=operation.value,
                cache_key=cache_key[-8:],
                ttl_class=operation.ttl_class.value,
            )
            CACHE_OPERATIONS.labels(provider=provider.value, operation="set").inc()
        except Exception as e:
            logger.error("cache_set_error", provider=provider.value, error=str(e))
            CACHE_OPERATIONS.labels(provider=provider.value, operation="error").inc()

    def get_stats(self, provider: ProviderName) -> CacheStats:
        cache = self._caches.get(provider)
        if not self.enabled or cache is None:
            return CacheStats(provider=provider)

        try:
            hits, misses = cache.stats()
            return CacheStats(
                provider=provider, size=len(cache), hits=hits, misses=misses
            )
        except Exception as e:
            logger.error("cache_stats_error", provider=provider.value, error=str(e))
            return CacheStats(provider=provider)

    def clear(self, provider: Optional[ProviderName] = None) -> None:
        """
        Clear one provider namespace, or all when provider is None.
        """
        for name, cache in self._caches.items():
            if provider is None or provider == name:
                cache.clear()
                logger.info("cache_cleared", provider=name.value)

    def close(self) -> None:
        for cache in self._caches.values():
            cache.close()
