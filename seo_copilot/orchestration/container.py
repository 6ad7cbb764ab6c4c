"""Process-wide orchestrator container.

Owns every shared resource for the lifetime of the process: one resilient
provider (with its own rate limiter and cache namespace) per vendor, the
usage tracker, the router state and the analysis services built on them.
Request handlers receive the container; nothing is module-level state.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional

import structlog

from seo_copilot.health.checks import HealthChecker
from seo_copilot.models.llm import ProviderConfig, ProviderName, Settings
from seo_copilot.orchestration.fanout import FanOutOrchestrator
from seo_copilot.orchestration.router import LLMRouter, RouterState
from seo_copilot.services.cache_service import ResponseCache
from seo_copilot.services.competitor_service import CompetitorService
from seo_copilot.services.content_service import ContentService
from seo_copilot.services.enhancement_service import EnhancementService
from seo_copilot.services.focused_analysis_service import FocusedAnalysisService
from seo_copilot.services.keyword_service import KeywordService
from seo_copilot.services.llm.client import ProviderClient
from seo_copilot.services.llm.cost_tracker import UsageTracker
from seo_copilot.services.llm.providers import create_provider
from seo_copilot.services.llm.providers.base import LLMProvider
from seo_copilot.services.llm.resilience import ResilientProvider

logger = structlog.get_logger()

ProviderFactory = Callable[[ProviderConfig], LLMProvider]


class Orchestrator:
    """Wires providers, router and services from Settings."""

    def __init__(
        self,
        settings: Settings,
        providers: Dict[ProviderName, ResilientProvider],
        cache: ResponseCache,
        usage: UsageTracker,
    ):
        self.settings = settings
        self.providers = providers
        self.cache = cache
        self.usage = usage

        routing = settings.routing
        router_providers = {
            name: providers[name] for name in routing.router_order if name in providers
        }
        self.router_state = RouterState(
            {name: p.config.priority for name, p in router_providers.items()},
            disabled=routing.initially_disabled,
        )
        self.router = LLMRouter(router_providers, self.router_state)

        fanout = FanOutOrchestrator()
        self.competitors = CompetitorService(
            providers, routing, settings.limits, settings.confidence, fanout
        )
        self.content = ContentService(
            providers, routing, settings.limits, settings.confidence, fanout
        )
        self.enhancement = EnhancementService(self.router)
        self.keywords = KeywordService(self.router)
        self.focused = FocusedAnalysisService(self.router, settings.limits)
        self.health = HealthChecker(providers, self.router_state, cache)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        provider_factory: ProviderFactory = create_provider,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> "Orchestrator":
        """Build the container.

        Args:
            settings: Loaded settings
            provider_factory: Builds the vendor provider for a config
            sleep: Backoff sleep, injectable for tests
        """
        cache = ResponseCache(settings.cache, providers=settings.providers.keys())
        usage = UsageTracker()
        providers = {
            name: ResilientProvider(
                ProviderClient(provider_factory(config)),
                config,
                cache,
                usage=usage,
                sleep=sleep,
            )
            for name, config in settings.providers.items()
        }
        logger.info(
            "orchestrator_initialized",
            providers=[n.value for n in providers],
            configured=[n.value for n, p in providers.items() if p.config.has_credentials],
            router_order=[n.value for n in settings.routing.router_order],
        )
        return cls(settings, providers, cache, usage)

    def provider_status(self) -> List[Dict[str, Any]]:
        """Router status for every provider with usage and cache statistics."""
        router = {s["name"]: s for s in self.router.get_provider_status()}
        status = []
        for name, provider in self.providers.items():
            entry: Dict[str, Any] = {
                "name": name.value,
                "model": provider.config.model,
                "configured": provider.config.has_credentials,
                "inRouter": name.value in router,
                "rateLimitRemaining": provider.remaining_capacity(),
                "usage": self.usage.get_provider_summary(name.value),
            }
            if name.value in router:
                entry.update(
                    {k: v for k, v in router[name.value].items() if k != "name"}
                )
            stats = self.cache.get_stats(name)
            entry["cache"] = {
                "size": stats.size,
                "hits": stats.hits,
                "misses": stats.misses,
                "hitRate": round(stats.hit_rate, 4),
            }
            status.append(entry)
        return status

    def clear_cache(self, provider: Optional[ProviderName] = None) -> None:
        self.cache.clear(provider)

    async def close(self) -> None:
        for provider in self.providers.values():
            await provider.close()
        self.cache.close()
        logger.info("orchestrator_closed")
