"""Uniform response envelope.

Every provider call, routed call and inbound API operation resolves to an
APIResponse: exactly one of `data` (success) or `error` (failure) is set,
and `metadata` always carries timing and provenance.
"""

from datetime import datetime, timezone
from typing import Generic, Optional, TypeVar

from pydantic import Field

from seo_copilot.models.common import CamelModel

T = TypeVar("T")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class APIError(CamelModel):
    """Structured error carried by a failed envelope."""

    code: str
    message: str
    provider: Optional[str] = None
    retryable: bool = False
    timestamp: datetime = Field(default_factory=utc_now)
    retry_after_seconds: Optional[float] = None


class ResponseMetadata(CamelModel):
    timestamp: datetime = Field(default_factory=utc_now)
    duration_ms: int = 0
    provider: Optional[str] = None
    cached: Optional[bool] = None
    tokens_used: Optional[int] = None
    cost: Optional[float] = None


class APIResponse(CamelModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[APIError] = None
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)

    @classmethod
    def ok(cls, data: T, metadata: ResponseMetadata) -> "APIResponse[T]":
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, error: APIError, metadata: ResponseMetadata) -> "APIResponse[T]":
        return cls(success=False, error=error, metadata=metadata)
