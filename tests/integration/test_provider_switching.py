import pytest
from fastapi.testclient import TestClient

from seo_copilot.api.server import create_app
from seo_copilot.models.llm import ProviderName
from seo_copilot.utils.exceptions import AuthenticationError, ProviderCallFailed

REWRITE = "This rewrite is long enough to be accepted as enhanced content."


@pytest.mark.asyncio
async def test_failover_persists_until_operator_enables(orchestrator_factory):
    """Router state is shared across requests and never recovers on a timer."""
    orchestrator, scripted = orchestrator_factory(
        {
            ProviderName.CLAUDE: [ProviderCallFailed("overloaded")] * 4 + [REWRITE],
            ProviderName.GEMINI: [REWRITE],
        }
    )
    claude = scripted[ProviderName.CLAUDE]

    # 1. Claude fails all four attempts of the first request; Gemini serves it
    first = await orchestrator.enhancement.enhance({"content": "Draft one", "mode": "human"})
    assert first.data.provider_used == "gemini"
    assert orchestrator.router_state.current == ProviderName.GEMINI

    # 2. Later requests skip Claude entirely
    second = await orchestrator.enhancement.enhance({"content": "Draft two", "mode": "human"})
    assert second.data.provider_used == "gemini"
    assert len(claude.calls) == 4

    # 3. Operator re-enables Claude; it serves again and becomes current
    orchestrator.router.enable_provider(ProviderName.CLAUDE)
    third = await orchestrator.enhancement.enhance({"content": "Draft three", "mode": "human"})
    assert third.data.provider_used == "claude"
    assert orchestrator.router_state.current == ProviderName.CLAUDE


@pytest.mark.asyncio
async def test_routed_and_fanned_out_share_providers(orchestrator_factory, sample_replies):
    """A router failure does not remove a provider from fan-out operations."""
    orchestrator, _ = orchestrator_factory(
        {
            ProviderName.CLAUDE: [
                AuthenticationError("401 invalid x-api-key"),
                sample_replies["content"](readability=70),
            ],
            ProviderName.GEMINI: [{"keywords": [{"keyword": "crm"}]}],
            ProviderName.OPENAI: [sample_replies["content"](readability=90)],
        },
        missing_keys=(ProviderName.PERPLEXITY,),
    )

    keywords = await orchestrator.keywords.research({"seedKeywords": ["crm"]})
    assert keywords.metadata.provider == "gemini"
    assert not orchestrator.router_state.is_available(ProviderName.CLAUDE)

    content = await orchestrator.content.analyze({"title": "CRM", "content": "Body"})
    assert content.data.scores.readability == 80


def test_operator_endpoints(orchestrator_factory):
    orchestrator, _ = orchestrator_factory({ProviderName.OPENAI: [REWRITE]})
    client = TestClient(create_app(orchestrator), raise_server_exceptions=False)

    # switch_to only records the current provider; routing stays priority based
    assert client.post("/api/providers/openai/switch").json()["switched"] is True
    status = {s["name"]: s for s in client.get("/api/providers").json()["providers"]}
    assert status["openai"]["isCurrent"] is True

    client.post("/api/providers/claude/enable")
    orchestrator.router_state.mark_failure(ProviderName.CLAUDE, "down")
    orchestrator.router_state.mark_failure(ProviderName.GEMINI, "down")
    response = client.post("/api/content/enhance", json={"content": "Draft", "mode": "personal"})
    assert response.json()["data"]["providerUsed"] == "openai"

    health = client.get("/health")
    assert health.status_code == 503
    assert health.json()["services"]["claude"] is False
