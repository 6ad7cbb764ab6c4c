"""Tests for RouterState and LLMRouter."""

import pytest

from seo_copilot.models.llm import Operation, ProviderName
from seo_copilot.models.seo import KeywordResearchRequest
from seo_copilot.orchestration.router import LLMRouter, RouterState
from seo_copilot.utils.exceptions import (
    AllProvidersExhausted,
    AuthenticationError,
    InvalidRequestError,
    ProviderCallFailed,
)

PRIORITIES = {ProviderName.CLAUDE: 1, ProviderName.GEMINI: 2, ProviderName.OPENAI: 3}
KEYWORD_REQUEST = KeywordResearchRequest(seed_keywords=["crm software"])
KEYWORD_REPLY = {"keywords": [{"keyword": "best crm", "difficulty": 40}]}


@pytest.fixture
def router_factory(resilient_factory):
    """Build a router over scripted providers.

    Returns (router, scripted-by-name).
    """

    def _build(replies, disabled=(), config_overrides=None):
        config_overrides = config_overrides or {}
        providers, scripted = {}, {}
        for name in PRIORITIES:
            providers[name], scripted[name] = resilient_factory(
                name, replies.get(name), max_retries=0, **config_overrides.get(name, {})
            )
        return LLMRouter(providers, RouterState(PRIORITIES, disabled)), scripted

    return _build


class TestRouterState:
    """Tests for availability bookkeeping."""

    def test_initial_state(self):
        state = RouterState(PRIORITIES)
        assert state.candidates() == [
            ProviderName.CLAUDE,
            ProviderName.GEMINI,
            ProviderName.OPENAI,
        ]
        assert state.current == ProviderName.CLAUDE

    def test_disabled_by_configuration(self):
        state = RouterState(PRIORITIES, disabled=[ProviderName.CLAUDE])
        assert state.candidates() == [ProviderName.GEMINI, ProviderName.OPENAI]
        snapshot = {s["name"]: s for s in state.snapshot()}
        assert snapshot["claude"]["available"] is False
        assert snapshot["claude"]["lastError"] == "Disabled by configuration"

    def test_failure_and_success(self):
        state = RouterState(PRIORITIES)
        state.mark_failure(ProviderName.CLAUDE, "boom")
        assert not state.is_available(ProviderName.CLAUDE)

        state.mark_success(ProviderName.GEMINI)
        assert state.current == ProviderName.GEMINI

        state.enable(ProviderName.CLAUDE)
        assert state.candidates()[0] == ProviderName.CLAUDE

    def test_switch_to_requires_availability(self):
        state = RouterState(PRIORITIES)
        state.mark_failure(ProviderName.OPENAI, "down")
        assert state.switch_to(ProviderName.OPENAI) is False
        assert state.switch_to(ProviderName.PERPLEXITY) is False
        assert state.switch_to(ProviderName.GEMINI) is True
        assert state.current == ProviderName.GEMINI

    def test_snapshot_order_and_current(self):
        snapshot = RouterState(PRIORITIES).snapshot()
        assert [s["name"] for s in snapshot] == ["claude", "gemini", "openai"]
        assert [s["isCurrent"] for s in snapshot] == [True, False, False]
        assert [s["priority"] for s in snapshot] == [1, 2, 3]


class TestRoute:
    """Tests for priority fallback."""

    @pytest.mark.asyncio
    async def test_first_provider_serves(self, router_factory):
        router, scripted = router_factory({ProviderName.CLAUDE: [KEYWORD_REPLY]})

        routed = await router.route(Operation.ANALYZE_KEYWORDS, KEYWORD_REQUEST)

        assert routed.provider_used == ProviderName.CLAUDE
        assert routed.content.keywords[0].keyword == "best crm"
        assert scripted[ProviderName.GEMINI].calls == []

    @pytest.mark.asyncio
    async def test_fallback_marks_failed_unavailable(self, router_factory):
        """Test a failing provider is skipped on later requests."""
        router, scripted = router_factory(
            {
                ProviderName.CLAUDE: [ProviderCallFailed("503")],
                ProviderName.GEMINI: [KEYWORD_REPLY],
            }
        )

        routed = await router.route(Operation.ANALYZE_KEYWORDS, KEYWORD_REQUEST)

        assert routed.provider_used == ProviderName.GEMINI
        status = {s["name"]: s for s in router.get_provider_status()}
        assert status["claude"]["available"] is False
        assert "503" in status["claude"]["lastError"]
        assert status["gemini"]["isCurrent"] is True

        other = KeywordResearchRequest(seed_keywords=["other"])
        await router.route(Operation.ANALYZE_KEYWORDS, other)
        assert len(scripted[ProviderName.CLAUDE].calls) == 1

    @pytest.mark.asyncio
    async def test_unconfigured_provider_falls_through(self, router_factory):
        router, _ = router_factory(
            {ProviderName.GEMINI: [KEYWORD_REPLY]},
            config_overrides={ProviderName.CLAUDE: {"api_key": None}},
        )
        routed = await router.route(Operation.ANALYZE_KEYWORDS, KEYWORD_REQUEST)
        assert routed.provider_used == ProviderName.GEMINI

    @pytest.mark.asyncio
    async def test_all_fail(self, router_factory):
        router, _ = router_factory(
            {
                ProviderName.CLAUDE: [ProviderCallFailed("503")],
                ProviderName.GEMINI: [ProviderCallFailed("timeout")],
                ProviderName.OPENAI: [AuthenticationError("401 bad key")],
            }
        )

        with pytest.raises(AllProvidersExhausted) as exc_info:
            await router.route(Operation.ANALYZE_KEYWORDS, KEYWORD_REQUEST)

        error = exc_info.value
        assert error.message.startswith("All LLM providers failed")
        assert error.last_error.code == "AUTHENTICATION_FAILED"
        assert error.provider_errors == {
            "claude": "PROVIDER_CALL_FAILED",
            "gemini": "PROVIDER_CALL_FAILED",
            "openai": "AUTHENTICATION_FAILED",
        }

    @pytest.mark.asyncio
    async def test_no_available_providers(self, router_factory):
        router, scripted = router_factory({}, disabled=list(PRIORITIES))
        with pytest.raises(AllProvidersExhausted, match="No available LLM providers"):
            await router.route(Operation.ANALYZE_KEYWORDS, KEYWORD_REQUEST)
        assert all(s.calls == [] for s in scripted.values())

    @pytest.mark.asyncio
    async def test_success_restores_availability(self, router_factory):
        router, _ = router_factory({ProviderName.CLAUDE: [KEYWORD_REPLY]})
        router.state.mark_failure(ProviderName.CLAUDE, "earlier")
        router.enable_provider(ProviderName.CLAUDE)

        routed = await router.route(Operation.ANALYZE_KEYWORDS, KEYWORD_REQUEST)

        assert routed.provider_used == ProviderName.CLAUDE
        assert router.state.is_available(ProviderName.CLAUDE)


class TestRouteGenerate:
    @pytest.mark.asyncio
    async def test_returns_text(self, router_factory):
        router, scripted = router_factory({ProviderName.CLAUDE: ["Generated words"]})

        routed = await router.route_generate("Write", max_tokens=300, temperature=0.2)

        assert routed.content == "Generated words"
        assert routed.provider_used == ProviderName.CLAUDE
        call = scripted[ProviderName.CLAUDE].calls[0]
        assert (call["max_tokens"], call["temperature"]) == (300, 0.2)


class TestOperatorControls:
    def test_enable_unknown_provider(self, router_factory):
        router, _ = router_factory({})
        with pytest.raises(InvalidRequestError):
            router.enable_provider(ProviderName.PERPLEXITY)

    def test_switch_to(self, router_factory):
        router, _ = router_factory({})
        assert router.switch_to(ProviderName.OPENAI) is True
        assert router.state.current == ProviderName.OPENAI
