"""SEO Copilot: multi-provider LLM orchestration for SEO content workflows."""

__version__ = "0.1.0"
