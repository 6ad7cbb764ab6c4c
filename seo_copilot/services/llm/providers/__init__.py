"""LLM provider implementations.

Provides:
- LLMProvider / LLMResponse: the provider contract
- One implementation per vendor, and a factory keyed by ProviderName
"""

from typing import Dict, Type

from seo_copilot.models.llm import ProviderConfig, ProviderName
from seo_copilot.services.llm.providers.anthropic import AnthropicProvider
from seo_copilot.services.llm.providers.base import LLMProvider, LLMResponse
from seo_copilot.services.llm.providers.google import GoogleProvider
from seo_copilot.services.llm.providers.openai import OpenAIProvider
from seo_copilot.services.llm.providers.perplexity import PerplexityProvider

PROVIDER_CLASSES: Dict[ProviderName, Type[LLMProvider]] = {
    ProviderName.OPENAI: OpenAIProvider,
    ProviderName.CLAUDE: AnthropicProvider,
    ProviderName.GEMINI: GoogleProvider,
    ProviderName.PERPLEXITY: PerplexityProvider,
}


def create_provider(config: ProviderConfig) -> LLMProvider:
    """Instantiate the vendor provider for a configuration."""
    return PROVIDER_CLASSES[config.name](config)


__all__ = [
    "LLMProvider",
    "LLMResponse",
    "OpenAIProvider",
    "AnthropicProvider",
    "GoogleProvider",
    "PerplexityProvider",
    "PROVIDER_CLASSES",
    "create_provider",
]
