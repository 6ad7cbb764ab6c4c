"""structlog pipeline for SEO Copilot.

Every entry carries the request's correlation id. Values under keys that
look like credentials are masked before rendering, and the vendor SDK
loggers are held at WARNING so request bodies never reach the log.

    configure_logging(level="INFO", json_output=True)
    structlog.get_logger().info("provider_call_succeeded", provider="claude")
"""

import logging
import sys
from typing import Any, Iterable, Optional

import structlog
from structlog.typing import EventDict, WrappedLogger

from seo_copilot.observability.context import get_correlation_id

SECRET_KEY_SUFFIXES = ("api_key", "apikey", "authorization", "token_secret")
REDACTED = "***"

# HTTP and SDK loggers that log full request payloads at DEBUG/INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "google_genai", "aiohttp")


def add_correlation_id_processor(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict["correlation_id"] = get_correlation_id() or "none"
    return event_dict


def redact_secrets_processor(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask credential-looking values, e.g. ``openai_api_key``."""
    for key in list(event_dict):
        if key.lower().endswith(SECRET_KEY_SUFFIXES) and event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def quiet_vendor_loggers(names: Iterable[str] = NOISY_LOGGERS) -> None:
    for name in names:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure structlog to render to stderr.

    Args:
        level: Minimum level name; unknown names fall back to INFO.
        json_output: JSON lines when True, coloured console output otherwise.
        add_timestamp: Stamp each entry with an ISO-8601 timestamp.
    """
    min_level = logging.getLevelName(level.upper())
    if not isinstance(min_level, int):
        min_level = logging.INFO

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        add_correlation_id_processor,
        redact_secrets_processor,
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
    ]
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors.append(
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
    quiet_vendor_loggers()


def get_logger(component: Optional[str] = None, **initial_context: Any) -> Any:
    """Return a bound logger, tagged with ``component`` when given."""
    if component:
        initial_context["component"] = component
    return structlog.get_logger().bind(**initial_context)
