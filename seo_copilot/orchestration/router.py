"""Priority-ordered provider router.

Single-path requests (enhancement, keyword research, free-form generation)
go to the highest-priority available provider. A failing provider is marked
unavailable and the next one is tried; a success marks the serving provider
available again and records it as current.

Unavailable providers stay unavailable until they serve a request or an
operator calls `enable_provider`. There is no time-based recovery.
"""

import threading
from dataclasses import dataclass
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar

import structlog

from seo_copilot.models.envelope import APIResponse
from seo_copilot.models.llm import Operation, ProviderName
from seo_copilot.models.seo import GenerateRequest
from seo_copilot.observability.metrics import PROVIDER_AVAILABLE, ROUTER_FALLBACKS
from seo_copilot.services.llm.resilience import ResilientProvider
from seo_copilot.utils.exceptions import (
    AllProvidersExhausted,
    InvalidRequestError,
    SeoCopilotError,
)

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass
class ProviderRuntimeState:
    """Mutable router view of one provider."""

    name: ProviderName
    priority: int
    available: bool = True
    last_error: Optional[str] = None


class RouterState:
    """Runtime availability of the router providers.

    Owned by the orchestrator container and shared by every request. All
    reads and writes of provider state happen under one lock.
    """

    def __init__(
        self,
        priorities: Dict[ProviderName, int],
        disabled: Iterable[ProviderName] = (),
    ):
        self._lock = threading.Lock()
        disabled = set(disabled)
        self._providers: Dict[ProviderName, ProviderRuntimeState] = {}
        for name, priority in priorities.items():
            state = ProviderRuntimeState(name=name, priority=priority)
            if name in disabled:
                state.available = False
                state.last_error = "Disabled by configuration"
            self._providers[name] = state
            PROVIDER_AVAILABLE.labels(provider=name.value).set(int(state.available))

        ordered = sorted(self._providers.values(), key=lambda s: s.priority)
        self.current: Optional[ProviderName] = ordered[0].name if ordered else None

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def candidates(self) -> List[ProviderName]:
        """Available providers, highest priority (lowest number) first."""
        with self._lock:
            available = [s for s in self._providers.values() if s.available]
        return [s.name for s in sorted(available, key=lambda s: s.priority)]

    def is_available(self, name: ProviderName) -> bool:
        with self._lock:
            return self._providers[name].available

    def mark_success(self, name: ProviderName) -> None:
        with self._lock:
            state = self._providers[name]
            state.available = True
            state.last_error = None
            self.current = name
        PROVIDER_AVAILABLE.labels(provider=name.value).set(1)

    def mark_failure(self, name: ProviderName, error: str) -> None:
        with self._lock:
            state = self._providers[name]
            state.available = False
            state.last_error = error
        PROVIDER_AVAILABLE.labels(provider=name.value).set(0)

    def enable(self, name: ProviderName) -> None:
        with self._lock:
            state = self._providers[name]
            state.available = True
            state.last_error = None
        PROVIDER_AVAILABLE.labels(provider=name.value).set(1)

    def switch_to(self, name: ProviderName) -> bool:
        with self._lock:
            state = self._providers.get(name)
            if state is None or not state.available:
                return False
            self.current = name
            return True

    def snapshot(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [
                {
                    "name": s.name.value,
                    "available": s.available,
                    "priority": s.priority,
                    "lastError": s.last_error,
                    "isCurrent": s.name == self.current,
                }
                for s in sorted(self._providers.values(), key=lambda s: s.priority)
            ]


@dataclass
class RoutedResult(Generic[T]):
    """A routed success tagged with the provider that served it."""

    content: T
    provider_used: ProviderName
    response: APIResponse[Any]


class LLMRouter:
    """Routes single-path operations with priority fallback."""

    def __init__(
        self,
        providers: Dict[ProviderName, ResilientProvider],
        state: RouterState,
    ):
        self.providers = providers
        self.state = state

    async def route(self, operation: Operation, request: Any) -> RoutedResult[Any]:
        """Serve `operation` from the first available provider that succeeds.

        Raises:
            AllProvidersExhausted: no provider available, or all failed
        """
        candidates = [n for n in self.state.candidates() if n in self.providers]
        if not candidates:
            logger.error("router_no_providers", operation=operation.value)
            raise AllProvidersExhausted("No available LLM providers")

        last_error: Optional[SeoCopilotError] = None
        provider_errors: Dict[str, str] = {}

        for name in candidates:
            logger.info("router_dispatch", provider=name.value, operation=operation.value)
            response = await self.providers[name].execute(operation, request)

            if response.success:
                self.state.mark_success(name)
                return RoutedResult(
                    content=response.data, provider_used=name, response=response
                )

            error = response.error
            assert error is not None
            self.state.mark_failure(name, error.message)
            ROUTER_FALLBACKS.labels(from_provider=name.value).inc()
            logger.warning(
                "router_fallback",
                provider=name.value,
                operation=operation.value,
                error_code=error.code,
                error=error.message,
            )
            last_error = SeoCopilotError.from_api_error(error)
            provider_errors[name.value] = error.code

        raise AllProvidersExhausted(
            "All LLM providers failed",
            last_error=last_error,
            provider_errors=provider_errors,
        )

    async def route_generate(
        self, prompt: str, max_tokens: int = 1000, temperature: float = 0.7
    ) -> RoutedResult[str]:
        """Free-form text generation through the router."""
        request = GenerateRequest(
            prompt=prompt, max_tokens=max_tokens, temperature=temperature
        )
        routed = await self.route(Operation.GENERATE, request)
        return RoutedResult(
            content=routed.content.text,
            provider_used=routed.provider_used,
            response=routed.response,
        )

    def enable_provider(self, name: ProviderName) -> None:
        """Operator re-enable of an unavailable provider."""
        if name not in self.state:
            raise InvalidRequestError(f"{name.value} is not a router provider")
        self.state.enable(name)
        logger.info("router_provider_enabled", provider=name.value)

    def switch_to(self, name: ProviderName) -> bool:
        switched = self.state.switch_to(name)
        if switched:
            logger.info("router_switched", provider=name.value)
        return switched

    def get_provider_status(self) -> List[Dict[str, Any]]:
        return self.state.snapshot()
