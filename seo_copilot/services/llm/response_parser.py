"""Response Parser Module

This module handles:
- Stripping markdown code fences and prose around JSON bodies
- Decoding JSON and validating it into the operation's pydantic model
- Accepting raw text for free-form generation
"""

import json
import re
from typing import Any, Optional, Type, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from seo_copilot.models.seo import GeneratedText
from seo_copilot.utils.exceptions import ResponseParseError

logger = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)

# Lists some providers return bare instead of wrapped in an object
_BARE_LIST_KEYS = {
    "ContentGaps": "gaps",
    "SEORecommendations": "recommendations",
}


class ResponseParser:
    """Parses provider text into typed response models."""

    def parse(
        self,
        content: str,
        model: Type[M],
        provider: Optional[str] = None,
    ) -> M:
        """Parse provider output into `model`.

        Args:
            content: Raw text returned by the provider
            model: Response model for the operation
            provider: Provider name for error context

        Returns:
            Validated model instance

        Raises:
            ResponseParseError: body is not JSON or violates the schema
        """
        if model is GeneratedText:
            return model.model_validate({"text": content.strip()})

        cleaned = self._clean_json_content(content)
        data = self._parse_json(cleaned, provider)

        if isinstance(data, list) and model.__name__ in _BARE_LIST_KEYS:
            data = {_BARE_LIST_KEYS[model.__name__]: data}

        if not isinstance(data, dict):
            raise ResponseParseError(
                f"Expected a JSON object, got {type(data).__name__}",
                provider=provider,
            )

        try:
            result = model.model_validate(data)
        except ValidationError as e:
            logger.warning(
                "response_schema_mismatch",
                provider=provider,
                model=model.__name__,
                errors=e.error_count(),
            )
            raise ResponseParseError(
                f"Response does not match {model.__name__}: {e.errors()[0]['msg']}",
                provider=provider,
            )

        logger.debug("response_parsed", provider=provider, model=model.__name__)
        return result

    @staticmethod
    def _clean_json_content(content: str) -> str:
        """Remove code fences and surrounding prose, keeping the JSON value."""
        content = content.strip()

        fenced = _FENCE_RE.search(content)
        if fenced:
            content = fenced.group(1).strip()

        if content.startswith(("{", "[")):
            return content

        # Fall back to the outermost {...} or [...] span
        starts = [i for i in (content.find("{"), content.find("[")) if i != -1]
        if not starts:
            return content
        start = min(starts)
        end = content.rfind("}" if content[start] == "{" else "]")
        if end <= start:
            return content
        return content[start : end + 1]

    @staticmethod
    def _parse_json(content: str, provider: Optional[str]) -> Any:
        if not content:
            raise ResponseParseError("Empty response body", provider=provider)
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning(
                "json_parse_failed",
                provider=provider,
                error=str(e),
                content_preview=content[:200],
            )
            raise ResponseParseError(f"Invalid JSON in response: {e}", provider=provider)
