"""Prompt Builder Module

This module handles:
- Building one prompt per provider operation from its typed request
- Describing the JSON shape each structured operation must return
- Building the content-enhancement rewrite prompts
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import structlog
from pydantic import BaseModel

from seo_copilot.models.llm import Operation
from seo_copilot.models.seo import (
    CompetitorAnalysisRequest,
    ContentAnalysisRequest,
    ContentGapsRequest,
    EnhanceContentRequest,
    EnhanceMode,
    FocusedAnalysisRequest,
    GenerateRequest,
    KeywordResearchRequest,
)

logger = structlog.get_logger()

# Prompt excerpts are truncated to keep requests within context windows
MAX_CONTENT_CHARS = 12000
MAX_SUMMARY_CHARS = 500
MAX_RECOMMENDATION_CONTENT_CHARS = 2000


@dataclass
class Prompt:
    """A ready-to-send prompt: optional system instruction plus user text."""

    user: str
    system: Optional[str] = None


def _join(values: List[str], empty: str = "None provided") -> str:
    return ", ".join(values) if values else empty


def _excerpt(text: str, limit: int) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."


_SCORES_SHAPE = """  "scores": {
    "overall": 0-100,
    "readability": 0-100,
    "seo": 0-100,
    "originality": 0-100,
    "factCheck": 0-100,
    "humanAuthenticity": 0-100,
    "engagement": 0-100
  }"""

_READABILITY_SHAPE = """{
  "gradeLevel": number,
  "fleschScore": 0-100,
  "avgSentenceLength": number,
  "avgSyllablesPerWord": number,
  "complexWords": number,
  "suggestions": ["suggestion"]
}"""

_ORIGINALITY_SHAPE = """{
  "score": 0-100,
  "aiDetectionScore": 0-100,
  "plagiarismScore": 0-100,
  "uniquenessIndicators": ["indicator"],
  "humanMarkers": ["marker"],
  "suggestions": ["suggestion"]
}"""

_SEO_SHAPE = """{
  "titleOptimization": {"score": 0-100, "length": number, "keywordPresence": boolean, "suggestions": ["..."]},
  "metaDescription": {"score": 0-100, "length": number, "compelling": boolean, "suggestions": ["..."]},
  "headingStructure": {"score": 0-100, "h1Count": number, "h2Count": number, "hierarchy": boolean, "suggestions": ["..."]},
  "keywordOptimization": {"score": 0-100, "density": number, "distribution": "description", "suggestions": ["..."]},
  "internalLinking": {"score": 0-100, "count": number, "suggestions": ["..."]},
  "externalLinking": {"score": 0-100, "count": number, "authorityScore": 0-100, "suggestions": ["..."]}
}"""


class PromptBuilder:
    """Builds provider prompts for each orchestration operation.

    Prompts are opaque payloads to the rest of the system; only the
    response shapes they request matter, since ResponseParser decodes
    replies into the matching pydantic models.
    """

    JSON_SYSTEM = (
        "You are an expert SEO analyst. Respond only with a single valid JSON "
        "object, without markdown fences or commentary."
    )

    def __init__(self) -> None:
        self._builders: Dict[Operation, Callable[[Any], Prompt]] = {
            Operation.ANALYZE_COMPETITORS: self._competitors,
            Operation.CONTENT_GAPS: self._content_gaps,
            Operation.ANALYZE_CONTENT: self._content_analysis,
            Operation.ANALYZE_READABILITY: self._readability,
            Operation.ANALYZE_ORIGINALITY: self._originality,
            Operation.OPTIMIZE_SEO: self._seo,
            Operation.SEO_RECOMMENDATIONS: self._seo_recommendations,
            Operation.ANALYZE_KEYWORDS: self._keywords,
            Operation.GENERATE: self._generate,
        }

    def build(self, operation: Operation, request: BaseModel) -> Prompt:
        """Build the prompt for an operation.

        Args:
            operation: Operation being invoked
            request: Typed request payload for that operation

        Returns:
            Prompt with user text and optional system instruction
        """
        prompt = self._builders[operation](request)
        logger.debug(
            "prompt_built",
            operation=operation.value,
            prompt_chars=len(prompt.user),
        )
        return prompt

    def _competitors(self, request: CompetitorAnalysisRequest) -> Prompt:
        return Prompt(
            system=(
                "You are an expert SEO strategist specializing in competitive "
                "analysis. Respond only with valid JSON."
            ),
            user=f"""Analyze competitors for this website and provide strategic insights:

Website: {request.website_url}
Target Keywords: {_join(request.target_keywords)}
Analysis Depth: {request.analysis_depth.value}

Identify 3-5 main competitors and respond in this JSON format:
{{
  "competitors": [
    {{
      "domain": "competitor.com",
      "domainAuthority": 0-100,
      "monthlyTraffic": "estimated traffic",
      "topKeywords": ["keyword"],
      "contentGaps": ["gap"],
      "backlinks": number,
      "avgPageSpeed": number,
      "contentQuality": 0-100,
      "technicalSEO": 0-100
    }}
  ],
  "opportunities": [
    {{
      "topic": "content topic",
      "keywords": ["keyword"],
      "difficulty": 0-100,
      "potential": 0-100,
      "contentType": "blog|guide|tutorial|comparison|review",
      "reasoning": "why this is an opportunity",
      "competitorGaps": ["what competitors are missing"]
    }}
  ],
  "marketInsights": [
    {{
      "insight": "market insight",
      "category": "trend|gap|opportunity|threat",
      "impact": "high|medium|low",
      "timeframe": "immediate|short-term|long-term",
      "actionable": true,
      "recommendations": ["action"]
    }}
  ]
}}""",
        )

    def _content_gaps(self, request: ContentGapsRequest) -> Prompt:
        summaries = "\n\n".join(
            f"Competitor {i + 1}: {_excerpt(summary, MAX_SUMMARY_CHARS)}"
            for i, summary in enumerate(request.competitor_summaries)
        )
        return Prompt(
            user=f"""Analyze competitor content and identify content gaps and opportunities:

Competitor Content Summaries:
{summaries or 'None available'}

Target Keywords: {_join(request.target_keywords)}

Identify 5-10 specific content gaps where our content could provide unique value. Focus on:
1. Topics competitors haven't covered thoroughly
2. Unique angles or perspectives missing
3. User questions left unanswered
4. Technical details overlooked
5. Human experiences and insights missing

Return as JSON: {{"gaps": ["gap1", "gap2"]}}""",
        )

    def _content_analysis(self, request: ContentAnalysisRequest) -> Prompt:
        return Prompt(
            system=(
                "You are an expert SEO content analyst specializing in human-first "
                "content evaluation. Respond only with valid JSON."
            ),
            user=f"""Analyze this content for SEO and human-first quality metrics:

Title: "{request.title}"
Meta Description: "{request.meta_description}"
Content: "{_excerpt(request.content, MAX_CONTENT_CHARS)}"
Target Keywords: {_join(request.target_keywords, 'Not specified')}
Human Insights: "{request.human_insights or 'None provided'}"
Sources: {_join(request.sources)}

Respond in this JSON format:
{{
{_SCORES_SHAPE},
  "suggestions": [
    {{
      "type": "improvement|warning|optimization",
      "category": "readability|seo|structure|content|technical",
      "message": "specific suggestion",
      "impact": "high|medium|low",
      "effort": "easy|moderate|complex",
      "implementation": "how to implement"
    }}
  ],
  "readabilityAnalysis": {_READABILITY_SHAPE},
  "originalityAnalysis": {_ORIGINALITY_SHAPE},
  "factCheckAnalysis": {{
    "score": 0-100,
    "claimsVerified": number,
    "sourcesProvided": number,
    "sourceQuality": 0-100,
    "factualAccuracy": 0-100,
    "suggestions": ["suggestion"],
    "flaggedClaims": [{{"claim": "text", "confidence": 0-100, "reasoning": "why", "suggestedSources": ["url"]}}]
  }}
}}""",
        )

    def _readability(self, request: FocusedAnalysisRequest) -> Prompt:
        return Prompt(
            user=f"""Analyze the readability of this content and provide detailed metrics:

Content: "{_excerpt(request.content, MAX_CONTENT_CHARS)}"

Respond in this JSON format:
{_READABILITY_SHAPE}

Focus on sentence structure, word choice, paragraph organization, transitions and overall flow.""",
        )

    def _originality(self, request: FocusedAnalysisRequest) -> Prompt:
        return Prompt(
            user=f"""Analyze this content for originality and human authenticity:

Content: "{_excerpt(request.content, MAX_CONTENT_CHARS)}"
Human Insights: "{request.human_insights or 'None provided'}"

Respond in this JSON format:
{_ORIGINALITY_SHAPE}

Look for personal experiences, unique perspectives, specific examples and original data.""",
        )

    def _seo(self, request: ContentAnalysisRequest) -> Prompt:
        return Prompt(
            user=f"""Provide a detailed SEO optimization analysis of this content:

Title: "{request.title}"
Content: "{_excerpt(request.content, MAX_CONTENT_CHARS)}"
Target Keywords: {_join(request.target_keywords, 'Not specified')}

Respond in this JSON format:
{_SEO_SHAPE}

Evaluate keyword placement and density, content structure, technical SEO elements,
user experience and E-A-T signals.""",
        )

    def _seo_recommendations(self, request: FocusedAnalysisRequest) -> Prompt:
        return Prompt(
            system=(
                "You are an SEO expert. Provide specific, actionable "
                "recommendations in JSON format."
            ),
            user=f"""Analyze this content and provide 5-10 specific SEO improvement recommendations:

Content: "{_excerpt(request.content, MAX_RECOMMENDATION_CONTENT_CHARS)}"
Target Keywords: {_join(request.target_keywords, 'Not specified')}

Focus on keyword placement, structure and readability, meta elements, internal
linking and user experience.

Return as JSON: {{"recommendations": ["recommendation1", "recommendation2"]}}""",
        )

    def _keywords(self, request: KeywordResearchRequest) -> Prompt:
        return Prompt(
            system=self.JSON_SYSTEM,
            user=f"""Perform keyword research for these seed keywords:

Seed Keywords: {_join(request.seed_keywords)}
Target Audience: {request.target_audience or 'General'}
Industry: {request.industry or 'Not specified'}
Location: {request.location or 'Global'}

Respond in this JSON format:
{{
  "keywords": [
    {{
      "keyword": "keyword phrase",
      "searchVolume": number,
      "difficulty": 0-100,
      "cpc": "estimated cost per click",
      "trend": "rising|stable|declining",
      "opportunity": "high|medium|low",
      "intent": "informational|navigational|commercial|transactional",
      "relatedKeywords": ["related"]
    }}
  ],
  "clusters": [
    {{
      "theme": "cluster theme",
      "keywords": [{{"keyword": "keyword phrase"}}],
      "priority": "high|medium|low",
      "contentSuggestions": ["content idea"]
    }}
  ],
  "suggestions": ["strategic suggestion"]
}}""",
        )

    def _generate(self, request: GenerateRequest) -> Prompt:
        return Prompt(user=request.prompt)

    # ==================== Content enhancement ====================

    @staticmethod
    def build_enhancement(request: EnhanceContentRequest) -> str:
        """Build the rewrite prompt for a content-enhancement request.

        A caller-supplied `prompt` replaces the mode template entirely.
        """
        if request.prompt and request.prompt.strip():
            return request.prompt

        if request.mode == EnhanceMode.READABILITY:
            instruction = (
                f"Rewrite the following content to be at a "
                f"{request.target_grade_level}th grade reading level."
            )
            requirements = [
                "Use shorter sentences (15-20 words max)",
                "Replace complex words with simpler alternatives",
                "Maintain all factual information",
                "Keep the same meaning and tone",
                "Use active voice where possible",
                "Break up long paragraphs",
            ]
        elif request.mode == EnhanceMode.HUMAN:
            instruction = (
                "Rewrite the following content to sound more human and authentic "
                "while keeping all information accurate."
            )
            requirements = [
                "Add personal pronouns (I, we, you)",
                "Use conversational language",
                "Include transitional phrases",
                "Add human touches and relatable examples",
                "Make it sound like a real person wrote it",
                "Keep all facts and information intact",
            ]
        else:
            instruction = (
                "Enhance the following content by adding personal experiences, "
                "opinions, and authentic insights."
            )
            requirements = [
                "Add personal anecdotes where appropriate",
                'Include "I" statements and personal opinions',
                "Add emotional language and personal reactions",
                "Include lessons learned or personal insights",
                "Make it sound like it's written by someone with real experience",
                "Keep all factual information accurate",
            ]

        lines = "\n".join(f"- {r}" for r in requirements)
        return (
            f"{instruction}\n\nREQUIREMENTS:\n{lines}\n\n"
            f"ORIGINAL CONTENT:\n{request.content}\n\nENHANCED CONTENT:"
        )
