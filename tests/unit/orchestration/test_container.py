"""Tests for the Orchestrator container."""

import pytest

from seo_copilot.models.llm import ProviderName, RoutingConfig
from seo_copilot.models.seo import GenerateRequest


class TestOrchestrator:
    def test_wiring(self, orchestrator_factory):
        orchestrator, _ = orchestrator_factory({})

        assert set(orchestrator.providers) == set(ProviderName)
        assert orchestrator.router.state is orchestrator.router_state
        assert orchestrator.router_state.candidates() == [
            ProviderName.CLAUDE,
            ProviderName.GEMINI,
            ProviderName.OPENAI,
        ]
        assert ProviderName.PERPLEXITY not in orchestrator.router_state
        assert orchestrator.focused.router is orchestrator.router
        assert orchestrator.keywords.router is orchestrator.router

    def test_providers_share_usage_and_cache(self, orchestrator_factory):
        orchestrator, _ = orchestrator_factory({})
        for provider in orchestrator.providers.values():
            assert provider.usage is orchestrator.usage
            assert provider.cache is orchestrator.cache

    def test_initially_disabled(self, orchestrator_factory):
        orchestrator, _ = orchestrator_factory(
            {}, routing=RoutingConfig(initially_disabled=[ProviderName.CLAUDE])
        )
        assert orchestrator.router_state.candidates()[0] == ProviderName.GEMINI

    def test_provider_status(self, orchestrator_factory):
        """Test status merges router, usage and cache views per provider."""
        orchestrator, _ = orchestrator_factory({}, missing_keys=(ProviderName.PERPLEXITY,))

        status = {s["name"]: s for s in orchestrator.provider_status()}

        assert status["claude"]["inRouter"] is True
        assert status["claude"]["isCurrent"] is True
        assert status["claude"]["priority"] == 1
        assert status["perplexity"]["inRouter"] is False
        assert status["perplexity"]["configured"] is False
        assert "isCurrent" not in status["perplexity"]
        assert status["openai"]["cache"] == {"size": 0, "hits": 0, "misses": 0, "hitRate": 0.0}
        assert status["gemini"]["usage"]["requests"] == 0

    @pytest.mark.asyncio
    async def test_clear_cache(self, orchestrator_factory):
        orchestrator, _ = orchestrator_factory({ProviderName.CLAUDE: ["Some text"]})
        await orchestrator.router.route_generate("Say something")
        assert orchestrator.cache.get_stats(ProviderName.CLAUDE).size == 1

        orchestrator.clear_cache()

        assert orchestrator.cache.get_stats(ProviderName.CLAUDE).size == 0

    @pytest.mark.asyncio
    async def test_close_closes_vendors(self, orchestrator_factory):
        orchestrator, scripted = orchestrator_factory({})
        await orchestrator.close()
        assert all(s.closed for s in scripted.values())


class TestGenerateRequestDefaults:
    def test_defaults(self):
        request = GenerateRequest(prompt="x")
        assert (request.max_tokens, request.temperature) == (1000, 0.7)
