"""Tests for ProviderClient.invoke()."""

import pytest

from seo_copilot.models.llm import Operation, ProviderName
from seo_copilot.models.seo import (
    CompetitorAnalysisRequest,
    ContentGaps,
    ContentGapsRequest,
    GeneratedText,
    GenerateRequest,
)
from seo_copilot.services.llm.client import OPERATION_SPECS, ProviderClient
from seo_copilot.utils.exceptions import ResponseParseError


class TestOperationSpecs:
    def test_every_operation_has_a_spec(self):
        assert set(OPERATION_SPECS) == set(Operation)

    def test_only_generate_is_free_text(self):
        assert [op for op, spec in OPERATION_SPECS.items() if not spec.json_mode] == [
            Operation.GENERATE
        ]


class TestInvoke:
    """Tests for a single provider invocation."""

    @pytest.mark.asyncio
    async def test_decodes_typed_response(self, scripted_provider):
        provider = scripted_provider(ProviderName.CLAUDE, [{"gaps": ["pricing pages"]}])
        client = ProviderClient(provider)

        result = await client.invoke(
            Operation.CONTENT_GAPS, ContentGapsRequest(competitor_summaries=["a.com"])
        )

        assert isinstance(result.data, ContentGaps)
        assert result.data.gaps == ["pricing pages"]
        assert result.tokens_used == 150
        assert result.cost == pytest.approx(provider.calculate_cost(150))
        call = provider.calls[0]
        assert call["json_mode"] is True
        assert call["max_tokens"] == OPERATION_SPECS[Operation.CONTENT_GAPS].max_tokens

    @pytest.mark.asyncio
    async def test_generate_uses_request_sampling(self, scripted_provider):
        """Test free-form generation honours max_tokens and temperature."""
        provider = scripted_provider(ProviderName.GEMINI, ["Plain text reply"])
        client = ProviderClient(provider)

        result = await client.invoke(
            Operation.GENERATE,
            GenerateRequest(prompt="Rewrite", max_tokens=2000, temperature=0.7),
        )

        assert isinstance(result.data, GeneratedText)
        assert result.data.text == "Plain text reply"
        call = provider.calls[0]
        assert (call["max_tokens"], call["temperature"]) == (2000, 0.7)
        assert call["json_mode"] is False
        assert call["prompt"] == "Rewrite"

    @pytest.mark.asyncio
    async def test_malformed_reply(self, scripted_provider):
        client = ProviderClient(scripted_provider(ProviderName.OPENAI, ["no json here"]))
        with pytest.raises(ResponseParseError):
            await client.invoke(
                Operation.ANALYZE_COMPETITORS,
                CompetitorAnalysisRequest(website_url="a.com", target_keywords=["x"]),
            )

    @pytest.mark.asyncio
    async def test_close_closes_provider(self, scripted_provider):
        provider = scripted_provider(ProviderName.OPENAI)
        await ProviderClient(provider).close()
        assert provider.closed is True

    def test_name(self, scripted_provider):
        assert ProviderClient(scripted_provider(ProviderName.OPENAI)).name == ProviderName.OPENAI
