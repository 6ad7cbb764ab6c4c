"""Health check module.

Provides:
- Provider readiness checks (configuration, router availability,
  rate-limit headroom)
- Response cache directory check

The HTTP endpoints (/health, /live, /metrics) are served by
`seo_copilot.api.server`.
"""

from seo_copilot.health.checks import (
    CheckResult,
    CheckStatus,
    HealthChecker,
    HealthReport,
    HealthStatus,
)

__all__ = [
    "HealthChecker",
    "HealthReport",
    "HealthStatus",
    "CheckResult",
    "CheckStatus",
]
