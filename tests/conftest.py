"""Shared fixtures: scripted vendor providers and prebuilt orchestrators."""

import json
from typing import Any, Dict, List, Optional

import pytest

from seo_copilot.models.llm import (
    DEFAULT_MODELS,
    CacheConfig,
    ProviderConfig,
    ProviderName,
    Settings,
)
from seo_copilot.orchestration.container import Orchestrator
from seo_copilot.services.cache_service import ResponseCache
from seo_copilot.services.llm.client import ProviderClient
from seo_copilot.services.llm.cost_tracker import UsageTracker
from seo_copilot.services.llm.providers.base import LLMProvider, LLMResponse
from seo_copilot.services.llm.resilience import ResilientProvider
from seo_copilot.utils.exceptions import ProviderCallFailed


class ScriptedProvider(LLMProvider):
    """Vendor provider replaying scripted replies.

    Each reply is a string, a JSON-serialisable object or an exception to
    raise. Replies are consumed in order; the last one repeats.
    """

    def __init__(self, config: ProviderConfig, replies: Optional[List[Any]] = None):
        super().__init__(config)
        self.replies = list(replies or [])
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    async def generate(
        self,
        prompt: str,
        max_tokens: int = 2000,
        temperature: float = 0.3,
        system: Optional[str] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        self.calls.append(
            {
                "prompt": prompt,
                "max_tokens": max_tokens,
                "temperature": temperature,
                "system": system,
                "json_mode": json_mode,
            }
        )
        if not self.replies:
            raise ProviderCallFailed("no scripted reply", provider=self.name.value)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        content = reply if isinstance(reply, str) else json.dumps(reply)
        return LLMResponse(
            content=content,
            input_tokens=100,
            output_tokens=50,
            model=self.model,
            provider=self.name.value,
            latency_ms=5.0,
        )

    async def close(self) -> None:
        self.closed = True


async def no_sleep(seconds: float) -> None:
    return None


def make_config(name: ProviderName, **overrides: Any) -> ProviderConfig:
    values: Dict[str, Any] = {
        "name": name,
        "api_key": "test-key",
        "model": DEFAULT_MODELS[name],
        "timeout_seconds": 5.0,
        "max_retries": 3,
        "base_delay_seconds": 0.0,
    }
    values.update(overrides)
    return ProviderConfig(**values)


# =============================================================================
# Sample provider replies
# =============================================================================


def competitor_reply(*domains: str, gaps: Optional[List[str]] = None) -> Dict[str, Any]:
    return {
        "competitors": [
            {
                "domain": domain,
                "domainAuthority": 60 + i,
                "monthlyTraffic": "10K",
                "topKeywords": [f"{domain} keyword"],
                "contentGaps": gaps or [],
                "technicalSEO": 80,
            }
            for i, domain in enumerate(domains)
        ],
        "opportunities": [],
        "marketInsights": [],
    }


def content_reply(**scores: Any) -> Dict[str, Any]:
    return {
        "scores": scores,
        "suggestions": [{"message": "Add more examples"}],
    }


@pytest.fixture
def cache_config(tmp_path) -> CacheConfig:
    return CacheConfig(cache_dir=str(tmp_path / "cache"))


@pytest.fixture
def cache(cache_config):
    response_cache = ResponseCache(cache_config)
    yield response_cache
    response_cache.close()


@pytest.fixture
def resilient_factory(cache):
    """Build a ResilientProvider around a ScriptedProvider.

    Returns (resilient, scripted).
    """

    def _build(name: ProviderName, replies: Optional[List[Any]] = None, **overrides):
        scripted = ScriptedProvider(make_config(name, **overrides), replies)
        resilient = ResilientProvider(
            ProviderClient(scripted),
            scripted.config,
            cache,
            usage=UsageTracker(),
            sleep=no_sleep,
        )
        return resilient, scripted

    return _build


@pytest.fixture
def orchestrator_factory(tmp_path):
    """Build an Orchestrator whose vendors are ScriptedProviders.

    Usage:
        orchestrator, scripted = orchestrator_factory({ProviderName.OPENAI: [...]})
    """
    built: List[Orchestrator] = []

    def _build(
        replies: Dict[ProviderName, List[Any]],
        missing_keys: tuple = (),
        **settings_overrides: Any,
    ):
        providers = {
            name: make_config(
                name,
                api_key=None if name in missing_keys else "test-key",
                priority={
                    ProviderName.CLAUDE: 1,
                    ProviderName.GEMINI: 2,
                    ProviderName.OPENAI: 3,
                }.get(name, 100),
            )
            for name in ProviderName
        }
        settings = Settings(
            providers=providers,
            cache=CacheConfig(cache_dir=str(tmp_path / "orchestrator-cache")),
            **settings_overrides,
        )
        scripted = {
            name: ScriptedProvider(config, replies.get(name))
            for name, config in providers.items()
        }
        orchestrator = Orchestrator.from_settings(
            settings,
            provider_factory=lambda config: scripted[config.name],
            sleep=no_sleep,
        )
        built.append(orchestrator)
        return orchestrator, scripted

    yield _build
    for orchestrator in built:
        orchestrator.cache.close()


@pytest.fixture
def sample_replies():
    """Reply builders shared by service and integration tests."""
    return {"competitor": competitor_reply, "content": content_reply}


@pytest.fixture
def provider_config():
    """ProviderConfig builder with a test key and zero backoff."""
    return make_config


@pytest.fixture
def scripted_provider():
    """ScriptedProvider builder: scripted_provider(name, replies, **config)."""

    def _build(name: ProviderName, replies: Optional[List[Any]] = None, **overrides):
        return ScriptedProvider(make_config(name, **overrides), replies)

    return _build


@pytest.fixture
def instant_sleep():
    return no_sleep
