"""LLM Service Package

This package provides:
- Provider implementations (OpenAI, Anthropic, Google, Perplexity)
- ProviderClient: operation-level invoke on top of a provider
- ResilientProvider: cache, rate limiting and retry around a client
- Usage tracking, prompt building and response parsing

Usage:
    from seo_copilot.services.llm import ProviderClient, ResilientProvider
"""

from seo_copilot.services.llm.client import (
    OPERATION_SPECS,
    OperationSpec,
    ProviderClient,
    ProviderResult,
)
from seo_copilot.services.llm.cost_tracker import ProviderUsage, UsageTracker
from seo_copilot.services.llm.prompt_builder import Prompt, PromptBuilder
from seo_copilot.services.llm.providers.base import LLMProvider, LLMResponse
from seo_copilot.services.llm.resilience import ResilientProvider
from seo_copilot.services.llm.response_parser import ResponseParser

__all__ = [
    # Components
    "ProviderClient",
    "ResilientProvider",
    "UsageTracker",
    "ProviderUsage",
    "PromptBuilder",
    "Prompt",
    "ResponseParser",
    # Operation table
    "OPERATION_SPECS",
    "OperationSpec",
    "ProviderResult",
    # Provider base
    "LLMProvider",
    "LLMResponse",
]
