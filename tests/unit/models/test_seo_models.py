"""Tests for SEO request/response models decoding untrusted provider output."""

import pytest
from pydantic import ValidationError

from seo_copilot.models.seo import (
    CompetitorAnalysisResponse,
    CompetitorData,
    ContentAnalysisResponse,
    ContentGaps,
    EnhanceContentRequest,
    EnhanceMode,
    KeywordData,
    KeywordResearchResponse,
)


class TestCompetitorData:
    """Tests for lenient competitor decoding."""

    def test_technical_seo_alias(self):
        """Test the technicalSEO key maps to technical_seo."""
        competitor = CompetitorData.model_validate(
            {"domain": "a.com", "technicalSEO": "77"}
        )
        assert competitor.technical_seo == 77
        assert competitor.to_json_dict()["technicalSEO"] == 77

    def test_loose_values(self):
        """Test traffic, backlinks and speed accept loosely typed values."""
        competitor = CompetitorData.model_validate(
            {
                "domain": "a.com",
                "monthlyTraffic": 12000,
                "backlinks": "1,250",
                "avgPageSpeed": "fast",
                "topKeywords": "seo",
                "lastAnalyzed": "2024-01-01T00:00:00Z",
            }
        )
        assert competitor.monthly_traffic == "12000"
        assert competitor.backlinks == 1250
        assert competitor.avg_page_speed is None
        assert competitor.top_keywords == ["seo"]
        assert competitor.last_analyzed.year == 2024

    def test_bad_timestamp_is_dropped(self):
        competitor = CompetitorData.model_validate(
            {"domain": "a.com", "lastAnalyzed": "yesterday"}
        )
        assert competitor.last_analyzed is None


class TestCompetitorAnalysisResponse:
    """Tests for dropping entries that cannot be merged."""

    def test_entries_without_natural_key_are_dropped(self):
        """Test competitors without a domain and opportunities without a topic vanish."""
        response = CompetitorAnalysisResponse.model_validate(
            {
                "competitors": [{"domain": "a.com"}, {"domainAuthority": 50}, "junk"],
                "opportunities": [{"topic": " "}, {"topic": "Guides"}],
                "marketInsights": "not a list",
            }
        )
        assert [c.domain for c in response.competitors] == ["a.com"]
        assert [o.topic for o in response.opportunities] == ["Guides"]
        assert response.market_insights == []


class TestContentGaps:
    def test_string_list_filters_blanks(self):
        assert ContentGaps.model_validate({"gaps": ["a", "", None, " b "]}).gaps == ["a", "b"]


class TestEnhanceContentRequest:
    """Tests for enhancement request validation."""

    def test_valid_request(self):
        request = EnhanceContentRequest.model_validate(
            {"content": "Some text", "mode": "human"}
        )
        assert request.mode == EnhanceMode.HUMAN
        assert request.target_grade_level == 8

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValidationError):
            EnhanceContentRequest.model_validate({"content": "x", "mode": "poetic"})

    def test_blank_content_rejected(self):
        with pytest.raises(ValidationError):
            EnhanceContentRequest.model_validate({"content": "   ", "mode": "human"})


class TestNullTolerance:
    """Tests that one null or mistyped field never rejects a whole reply."""

    def test_market_insight_nulls_take_defaults(self):
        response = CompetitorAnalysisResponse.model_validate(
            {
                "marketInsights": [
                    {
                        "insight": "Video reviews convert well",
                        "category": None,
                        "impact": None,
                        "timeframe": 3,
                        "actionable": "maybe",
                    }
                ],
                "opportunities": [{"topic": "CRM pricing", "reasoning": None}],
                "analysisMetadata": "n/a",
            }
        )
        insight = response.market_insights[0]
        assert insight.category == "opportunity"
        assert insight.impact == "medium"
        assert insight.timeframe == "3"
        assert insight.actionable is True
        assert response.opportunities[0].reasoning == ""
        assert response.analysis_metadata.confidence == 0

    def test_suggestion_and_claim_nulls(self):
        response = ContentAnalysisResponse.model_validate(
            {
                "scores": None,
                "suggestions": [
                    {"message": "Shorten the intro", "type": None, "effort": None},
                    {"message": 42},
                ],
                "factCheckAnalysis": {
                    "claimsVerified": "7.0",
                    "flaggedClaims": [
                        {"claim": "CRMs double sales", "reasoning": None},
                        {"claim": None},
                    ],
                },
                "seoAnalysis": {"titleOptimization": "good", "metaDescription": {"length": 151.6}},
                "readabilityAnalysis": "easy",
            }
        )
        suggestion = response.suggestions[0]
        assert len(response.suggestions) == 1
        assert suggestion.type == "improvement"
        assert suggestion.effort == "moderate"
        claims = response.fact_check_analysis.flagged_claims
        assert [c.claim for c in claims] == ["CRMs double sales"]
        assert claims[0].reasoning == ""
        assert response.fact_check_analysis.claims_verified == 7
        assert response.seo_analysis.title_optimization is None
        assert response.seo_analysis.meta_description.length == 151
        assert response.readability_analysis is None
        assert response.scores.overall is None

    @pytest.mark.parametrize("volume", [float("inf"), float("nan"), 10**400, "lots", [1]])
    def test_unreadable_search_volume(self, volume):
        keyword = KeywordData.model_validate({"keyword": "seo", "searchVolume": volume})
        assert keyword.search_volume is None

    def test_backlinks_overflow(self):
        competitor = CompetitorData.model_validate({"domain": "a.com", "backlinks": float("inf")})
        assert competitor.backlinks is None

    def test_keyword_entries_without_text_dropped(self):
        response = KeywordResearchResponse.model_validate(
            {
                "keywords": ["crm", {"keyword": None}, {"keyword": "sales", "cpc": 1.5}],
                "clusters": [{"theme": None}, {"theme": "Guides", "priority": None}],
                "metadata": None,
            }
        )
        assert [k.keyword for k in response.keywords] == ["crm", "sales"]
        assert response.keywords[1].cpc == "1.5"
        assert response.clusters[0].priority == "medium"
        assert response.metadata.total_keywords == 0
