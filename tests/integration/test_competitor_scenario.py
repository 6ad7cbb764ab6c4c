"""End-to-end competitor analysis through the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from seo_copilot.api.server import create_app
from seo_copilot.models.llm import ProviderName, RoutingConfig
from seo_copilot.utils.exceptions import ProviderCallFailed

REQUEST = {
    "websiteUrl": "example.com",
    "targetKeywords": ["seo tools"],
    "analysisDepth": "detailed",
}


def test_two_providers_with_overlap(orchestrator_factory, sample_replies):
    reply = sample_replies["competitor"]
    orchestrator, scripted = orchestrator_factory(
        {
            ProviderName.OPENAI: [reply("ahrefs.com", "semrush.com", "moz.com")],
            ProviderName.PERPLEXITY: [reply("https://www.moz.com", "ubersuggest.com", "serpstat.com")],
        },
        missing_keys=(ProviderName.CLAUDE,),
    )
    client = TestClient(create_app(orchestrator), raise_server_exceptions=False)

    first = client.post("/api/competitor/analyze", json=REQUEST).json()

    assert first["success"] is True
    domains = [c["domain"] for c in first["data"]["competitors"]]
    assert domains == [
        "ahrefs.com",
        "semrush.com",
        "moz.com",
        "ubersuggest.com",
        "serpstat.com",
    ]
    assert first["data"]["analysisMetadata"]["confidence"] == 95
    assert first["data"]["analysisMetadata"]["providersSucceeded"] == ["openai", "perplexity"]
    assert first["metadata"]["cached"] is False

    second = client.post("/api/competitor/analyze", json=REQUEST).json()

    assert second["metadata"]["cached"] is True
    assert second["data"]["competitors"] == first["data"]["competitors"]
    assert len(scripted[ProviderName.OPENAI].calls) == 1
    assert len(scripted[ProviderName.PERPLEXITY].calls) == 1


@pytest.mark.asyncio
async def test_one_of_three_succeeds(orchestrator_factory, sample_replies):
    """Partial tolerance: the lone success is merged at base confidence."""
    orchestrator, _ = orchestrator_factory(
        {
            ProviderName.OPENAI: [ProviderCallFailed("503")],
            ProviderName.PERPLEXITY: [sample_replies["competitor"]("moz.com")],
            ProviderName.GEMINI: [ProviderCallFailed("timeout")],
        },
        routing=RoutingConfig(
            competitor_providers=[
                ProviderName.OPENAI,
                ProviderName.PERPLEXITY,
                ProviderName.GEMINI,
            ],
            gap_provider=None,
        ),
    )

    response = await orchestrator.competitors.analyze(REQUEST)

    assert response.success is True
    metadata = response.data.analysis_metadata
    assert [c.domain for c in response.data.competitors] == ["moz.com"]
    assert metadata.confidence == 85
    assert metadata.providers_failed == {
        "openai": "PROVIDER_CALL_FAILED",
        "gemini": "PROVIDER_CALL_FAILED",
    }
    assert response.metadata.provider == "perplexity"


@pytest.mark.asyncio
async def test_five_competitor_cap(orchestrator_factory, sample_replies):
    reply = sample_replies["competitor"]
    orchestrator, _ = orchestrator_factory(
        {
            ProviderName.OPENAI: [reply(*(f"site{i}.com" for i in range(4)))],
            ProviderName.PERPLEXITY: [reply(*(f"other{i}.com" for i in range(4)))],
            ProviderName.CLAUDE: [{"gaps": [f"gap {i}" for i in range(20)]}],
        }
    )

    response = await orchestrator.competitors.analyze(REQUEST)

    result = response.data
    assert len(result.competitors) == 5
    assert result.competitors[-1].domain == "other0.com"
    assert result.competitors[4].content_gaps == ["gap 8", "gap 9"]
    assert len(result.opportunities) == 10
    assert result.analysis_metadata.confidence == 100
