"""Health check implementations for the provider layer.

Provides checks for:
- Provider readiness (credentials and model configured, router
  availability, rate-limit headroom)
- Response cache directory accessibility

No provider is called and no rate-limit token is consumed; the checks only
read local state.

Usage:
    checker = HealthChecker(providers, router_state=state, cache=cache)
    report = await checker.check_all()
    report.services  # {"openai": True, "claude": False, ...}
"""

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import structlog

from seo_copilot.models.envelope import utc_now
from seo_copilot.models.llm import ProviderName
from seo_copilot.orchestration.router import RouterState
from seo_copilot.services.cache_service import ResponseCache
from seo_copilot.services.llm.resilience import ResilientProvider
from seo_copilot.utils.exceptions import ConfigurationError

logger = structlog.get_logger()


class HealthStatus(str, Enum):
    """Overall health status."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class CheckStatus(str, Enum):
    """Individual check status."""

    PASS = "pass"
    FAIL = "fail"


@dataclass
class CheckResult:
    """Result of a single health check."""

    name: str
    status: CheckStatus
    message: str
    duration_ms: float = 0.0
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return self.status == CheckStatus.PASS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "durationMs": round(self.duration_ms, 2),
            "details": self.details,
        }


@dataclass
class HealthReport:
    """Per-provider availability plus the individual check results."""

    status: HealthStatus
    services: Dict[str, bool]
    checks: List[CheckResult]
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "status": self.status.value,
            "services": self.services,
            "checks": [c.to_dict() for c in self.checks],
            "timestamp": self.timestamp.isoformat(),
        }


class HealthChecker:
    """Health checker for the configured providers."""

    def __init__(
        self,
        providers: Dict[ProviderName, ResilientProvider],
        router_state: Optional[RouterState] = None,
        cache: Optional[ResponseCache] = None,
    ):
        self.providers = providers
        self.router_state = router_state
        self.cache = cache

    async def check_all(self) -> HealthReport:
        """Run all health checks and return comprehensive report.

        Returns:
            HealthReport, HEALTHY only if every check passed
        """
        results = await asyncio.gather(
            *(self.check_provider(name) for name in self.providers),
            self.check_cache(),
        )
        checks = list(results)

        services = {
            name.value: result.passed for name, result in zip(self.providers, checks)
        }
        status = (
            HealthStatus.HEALTHY
            if all(c.passed for c in checks)
            else HealthStatus.UNHEALTHY
        )
        if status != HealthStatus.HEALTHY:
            logger.warning(
                "health_check_failed",
                failed=[c.name for c in checks if not c.passed],
            )
        return HealthReport(status=status, services=services, checks=checks)

    async def check_provider(self, name: ProviderName) -> CheckResult:
        """Check a provider can accept a call right now.

        Returns:
            CheckResult named after the provider
        """
        start = time.time()
        provider = self.providers[name]
        remaining = provider.remaining_capacity()
        details: Dict[str, Any] = {
            "model": provider.config.model,
            "rateLimitRemaining": remaining,
        }

        try:
            provider.validate_config()
        except ConfigurationError as e:
            return CheckResult(
                name=name.value,
                status=CheckStatus.FAIL,
                message=e.message,
                duration_ms=(time.time() - start) * 1000,
                details=details,
            )

        if self.router_state is not None and name in self.router_state:
            details["routerAvailable"] = self.router_state.is_available(name)
            if not details["routerAvailable"]:
                return CheckResult(
                    name=name.value,
                    status=CheckStatus.FAIL,
                    message=f"{name.value} marked unavailable by the router",
                    duration_ms=(time.time() - start) * 1000,
                    details=details,
                )

        if remaining <= 0:
            return CheckResult(
                name=name.value,
                status=CheckStatus.FAIL,
                message=f"{name.value} rate limit window exhausted",
                duration_ms=(time.time() - start) * 1000,
                details=details,
            )

        return CheckResult(
            name=name.value,
            status=CheckStatus.PASS,
            message=f"{name.value} ready",
            duration_ms=(time.time() - start) * 1000,
            details=details,
        )

    async def check_cache(self) -> CheckResult:
        """Check the response cache directory is writable."""
        start = time.time()
        name = "response_cache"

        if self.cache is None or not self.cache.enabled:
            return CheckResult(name=name, status=CheckStatus.PASS, message="Cache disabled")

        try:
            test_file = self.cache.cache_dir / ".health_check"
            test_file.write_text("health_check")
            test_file.unlink()
        except OSError as e:
            return CheckResult(
                name=name,
                status=CheckStatus.FAIL,
                message=f"Cache directory not writable: {e}",
                duration_ms=(time.time() - start) * 1000,
            )

        return CheckResult(
            name=name,
            status=CheckStatus.PASS,
            message="Cache directory accessible",
            duration_ms=(time.time() - start) * 1000,
            details={"path": str(self.cache.cache_dir)},
        )

    async def is_alive(self) -> bool:
        """Liveness check; the process answering is enough."""
        return True
