"""Abstract LLM Provider Interface

This module defines:
- LLMResponse: Standardized response dataclass
- LLMProvider: Abstract base class for all vendor providers, including the
  pattern-based classification of vendor exceptions into the
  orchestration error hierarchy
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional

from seo_copilot.models.llm import ProviderConfig, ProviderName
from seo_copilot.utils.exceptions import (
    AuthenticationError,
    ContentFilterError,
    ContextLengthExceededError,
    ProviderCallFailed,
)


@dataclass
class LLMResponse:
    """Standardized response from any LLM provider.

    Attributes:
        content: The generated text content
        input_tokens: Number of input tokens consumed
        output_tokens: Number of output tokens generated
        model: The model identifier used
        provider: The provider name
        latency_ms: Request latency in milliseconds
        finish_reason: Why generation stopped (stop, length, etc.)
        timestamp: When the response was received
    """

    content: str
    input_tokens: int
    output_tokens: int
    model: str
    provider: str
    latency_ms: float
    finish_reason: Optional[str] = None
    timestamp: Optional[datetime] = None

    @property
    def total_tokens(self) -> int:
        """Total tokens used (input + output)."""
        return self.input_tokens + self.output_tokens


def estimate_tokens(text: str) -> int:
    """Rough token estimate for vendors that do not report usage."""
    return math.ceil(len(text) / 4)


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Each provider handles its own API communication and response
    normalization. Vendor exceptions are converted by `_classify_error`
    so that the retry layer only ever sees SeoCopilotError subclasses.

    Implementations:
        - OpenAIProvider: GPT models
        - AnthropicProvider: Claude models
        - GoogleProvider: Gemini models
        - PerplexityProvider: Sonar models
    """

    # Blended price per 1000 tokens (input + output)
    PRICE_PER_1K: float = 0.0

    # Error patterns for classification
    AUTH_PATTERNS: List[str] = [
        "authentication",
        "401",
        "403",
        "invalid api key",
        "invalid x-api-key",
        "incorrect api key",
        "permission",
    ]

    CONTENT_FILTER_PATTERNS: List[str] = [
        "content filter",
        "content_filter",
        "content policy",
        "safety",
        "blocked",
    ]

    CONTEXT_LENGTH_PATTERNS: List[str] = [
        "context length",
        "context_length",
        "maximum context",
        "too many tokens",
        "prompt is too long",
    ]

    def __init__(self, config: ProviderConfig):
        self.config = config
        self._client: Any = None

    @property
    def name(self) -> ProviderName:
        """Provider name."""
        return self.config.name

    @property
    def model(self) -> str:
        """Current model identifier."""
        return self.config.model or ""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        max_tokens: int = 2000,
        temperature: float = 0.3,
        system: Optional[str] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate text from prompt.

        Args:
            prompt: The input prompt
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            system: Optional system instruction
            json_mode: Ask the vendor for a JSON object where supported

        Returns:
            LLMResponse with generated content and metadata

        Raises:
            ProviderCallFailed: transient failures (retryable)
            AuthenticationError: When API key is invalid
            ContentFilterError: When content is blocked by safety filters
            ContextLengthExceededError: When the prompt is too long
        """
        pass  # pragma: no cover - abstract method, always overridden

    def calculate_cost(self, total_tokens: int) -> float:
        """Calculate cost in USD from the blended per-1K price."""
        return (total_tokens / 1000) * self.PRICE_PER_1K

    def _classify_error(self, error: Exception) -> ProviderCallFailed:
        """Classify a vendor exception into the error hierarchy."""
        if isinstance(error, ProviderCallFailed):
            return error

        provider = self.name.value
        error_str = str(error).lower()
        message = f"{provider} request failed: {error}"

        status = getattr(error, "status_code", None) or getattr(error, "status", None)
        if isinstance(status, int):
            error_str = f"{status} {error_str}"

        if any(pattern in error_str for pattern in self.AUTH_PATTERNS):
            return AuthenticationError(message, provider=provider)

        if any(pattern in error_str for pattern in self.CONTENT_FILTER_PATTERNS):
            return ContentFilterError(message, provider=provider)

        if any(pattern in error_str for pattern in self.CONTEXT_LENGTH_PATTERNS):
            return ContextLengthExceededError(message, provider=provider)

        # Everything else (vendor 429s, 5xx, transport errors) is transient
        return ProviderCallFailed(message, provider=provider)

    async def close(self) -> None:
        """Release vendor client resources. Default is a no-op."""
        return None
