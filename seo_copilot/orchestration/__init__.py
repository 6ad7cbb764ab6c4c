"""Orchestration module: provider routing, fan-out and result merging.

The Orchestrator container lives in `seo_copilot.orchestration.container`
and is imported from there.
"""

from seo_copilot.orchestration.fanout import (
    FanOutOrchestrator,
    ProviderCall,
    combine_metadata,
)
from seo_copilot.orchestration.merge import (
    blend_scores,
    merge_competitor_analysis,
    merge_content_analysis,
    normalize_domain,
)
from seo_copilot.orchestration.router import (
    LLMRouter,
    ProviderRuntimeState,
    RoutedResult,
    RouterState,
)

__all__ = [
    # Routing
    "LLMRouter",
    "RouterState",
    "ProviderRuntimeState",
    "RoutedResult",
    # Fan-out
    "FanOutOrchestrator",
    "ProviderCall",
    "combine_metadata",
    # Merge
    "merge_competitor_analysis",
    "merge_content_analysis",
    "blend_scores",
    "normalize_domain",
]
