"""Concurrent settle-all dispatch to several providers.

Every call is issued at once and awaited to completion; one provider
failing never cancels or short-circuits another. Callers merge whatever
succeeded, and only total failure is an error.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import structlog

from seo_copilot.models.envelope import APIResponse, ResponseMetadata
from seo_copilot.models.llm import Operation, ProviderName
from seo_copilot.observability.metrics import FANOUT_OUTCOMES
from seo_copilot.services.llm.resilience import ResilientProvider
from seo_copilot.utils.exceptions import AllProvidersExhausted, SeoCopilotError

logger = structlog.get_logger()

Outcomes = Dict[ProviderName, APIResponse[Any]]

# Error codes that say little about why the operation itself failed
_UNINFORMATIVE_CODES = {"RATE_LIMIT_EXCEEDED", "MISSING_API_KEY", "MISSING_MODEL"}


def combine_metadata(
    responses: Sequence[APIResponse[Any]],
    duration_ms: int,
    provider: Optional[str] = None,
) -> ResponseMetadata:
    """Metadata for a result assembled from several successful calls.

    Tokens and cost are summed; the result counts as cached only when every
    contributing call was served from cache.
    """
    return ResponseMetadata(
        duration_ms=duration_ms,
        provider=provider,
        cached=bool(responses) and all(r.metadata.cached for r in responses),
        tokens_used=sum(r.metadata.tokens_used or 0 for r in responses),
        cost=round(sum(r.metadata.cost or 0.0 for r in responses), 6),
    )


@dataclass(frozen=True)
class ProviderCall:
    """One leg of a fan-out."""

    provider: ResilientProvider
    operation: Operation
    request: Any


class FanOutOrchestrator:
    """Issues provider calls concurrently and collects every outcome."""

    async def fan_out(
        self,
        calls: Dict[ProviderName, ProviderCall],
        label: str = "fanout",
    ) -> Outcomes:
        """Run all calls concurrently and wait for all to settle.

        Args:
            calls: Call to issue per provider
            label: Operation label for logs and metrics

        Returns:
            Envelope per provider, failures included
        """
        names = list(calls)
        logger.info("fanout_started", operation=label, providers=[n.value for n in names])

        responses = await asyncio.gather(
            *(
                calls[n].provider.execute(calls[n].operation, calls[n].request)
                for n in names
            )
        )
        outcomes: Outcomes = dict(zip(names, responses))

        succeeded = [n.value for n, r in outcomes.items() if r.success]
        failed = self.failures(outcomes)
        if not failed:
            outcome = "complete"
        elif succeeded:
            outcome = "partial"
        else:
            outcome = "failed"
        FANOUT_OUTCOMES.labels(operation=label, outcome=outcome).inc()

        for provider, code in failed.items():
            logger.warning(
                "fanout_provider_failed",
                operation=label,
                provider=provider,
                error_code=code,
            )
        logger.info(
            "fanout_completed",
            operation=label,
            outcome=outcome,
            succeeded=succeeded,
            failed=list(failed),
        )
        return outcomes

    @staticmethod
    def successful(
        outcomes: Outcomes, order: Sequence[ProviderName]
    ) -> List[Tuple[ProviderName, APIResponse[Any]]]:
        """Successful outcomes in the fixed merge order."""
        return [(n, outcomes[n]) for n in order if n in outcomes and outcomes[n].success]

    @staticmethod
    def failures(outcomes: Outcomes) -> Dict[str, str]:
        return {
            n.value: r.error.code
            for n, r in outcomes.items()
            if not r.success and r.error is not None
        }

    @classmethod
    def require_success(
        cls, outcomes: Outcomes, order: Sequence[ProviderName]
    ) -> List[Tuple[ProviderName, APIResponse[Any]]]:
        """Successful outcomes, or raise when none succeeded.

        Raises:
            AllProvidersExhausted: carrying the most informative error; the
                first error in `order` that is neither a rate-limit nor a
                configuration error, else the first error
        """
        successes = cls.successful(outcomes, order)
        if successes:
            return successes

        errors = [
            outcomes[n].error
            for n in order
            if n in outcomes and outcomes[n].error is not None
        ]
        informative = [e for e in errors if e.code not in _UNINFORMATIVE_CODES]
        chosen = (informative or errors or [None])[0]
        raise AllProvidersExhausted(
            "All providers failed",
            last_error=SeoCopilotError.from_api_error(chosen) if chosen else None,
            provider_errors=cls.failures(outcomes),
        )
