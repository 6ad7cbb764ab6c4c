"""Request-scoped correlation ids.

The id lives in a ContextVar, so tasks spawned by asyncio.gather during a
fan-out inherit it from the request that started them.
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

# Longer inbound X-Request-ID values are truncated
MAX_REQUEST_ID_LENGTH = 128

_request_id: ContextVar[Optional[str]] = ContextVar("seo_request_id", default=None)


def set_correlation_id(corr_id: Optional[str] = None) -> str:
    """Bind a correlation id to the running context, generating one if absent."""
    value = corr_id if corr_id is not None else str(uuid.uuid4())
    _request_id.set(value)
    return value


def get_correlation_id() -> Optional[str]:
    return _request_id.get()


def clear_correlation_id() -> None:
    _request_id.set(None)


@contextmanager
def correlation_id_context(corr_id: Optional[str] = None) -> Iterator[str]:
    """Scope a correlation id to one HTTP request or CLI command.

    Blank ids are replaced with a fresh UUID, and the previous id is
    restored on exit.
    """
    value = (corr_id or "").strip()[:MAX_REQUEST_ID_LENGTH] or str(uuid.uuid4())
    token = _request_id.set(value)
    try:
        yield value
    finally:
        _request_id.reset(token)
