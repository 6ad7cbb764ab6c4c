"""Tests for ResponseParser."""

import pytest

from seo_copilot.models.seo import (
    CompetitorAnalysisResponse,
    ContentGaps,
    GeneratedText,
    SEORecommendations,
)
from seo_copilot.services.llm.response_parser import ResponseParser
from seo_copilot.utils.exceptions import ResponseParseError


@pytest.fixture
def parser():
    return ResponseParser()


class TestParse:
    """Tests for decoding provider output."""

    def test_plain_json(self, parser):
        result = parser.parse('{"gaps": ["a", "b"]}', ContentGaps)
        assert result.gaps == ["a", "b"]

    def test_fenced_json(self, parser):
        content = 'Here you go:\n```json\n{"gaps": ["a"]}\n```\nThanks'
        assert parser.parse(content, ContentGaps).gaps == ["a"]

    def test_prose_around_object(self, parser):
        content = 'Sure! {"competitors": [{"domain": "a.com"}]} Let me know.'
        result = parser.parse(content, CompetitorAnalysisResponse)
        assert result.competitors[0].domain == "a.com"

    def test_bare_list_wrapped(self, parser):
        """Test providers returning a bare list for list-shaped responses."""
        assert parser.parse('["x", "y"]', ContentGaps).gaps == ["x", "y"]
        assert parser.parse('["r1"]', SEORecommendations).recommendations == ["r1"]

    def test_generated_text_is_raw(self, parser):
        assert parser.parse("  Just text  ", GeneratedText).text == "Just text"

    def test_invalid_json(self, parser):
        with pytest.raises(ResponseParseError, match="Invalid JSON"):
            parser.parse('{"gaps": [', ContentGaps, provider="claude")

    def test_empty_body(self, parser):
        with pytest.raises(ResponseParseError, match="Empty response body"):
            parser.parse("   ", ContentGaps)

    def test_non_object(self, parser):
        with pytest.raises(ResponseParseError, match="Expected a JSON object"):
            parser.parse("[1, 2]", CompetitorAnalysisResponse)

    def test_schema_mismatch(self, parser):
        with pytest.raises(ResponseParseError, match="does not match"):
            parser.parse('{"competitors": [], "analysisMetadata": "x"}', CompetitorAnalysisResponse)

    def test_error_is_retryable(self, parser):
        """Test parse failures are transient so the retry layer re-asks."""
        with pytest.raises(ResponseParseError) as exc_info:
            parser.parse("not json at all", ContentGaps, provider="openai")
        assert exc_info.value.retryable is True
        assert exc_info.value.provider == "openai"
        assert exc_info.value.code == "MALFORMED_RESPONSE"
