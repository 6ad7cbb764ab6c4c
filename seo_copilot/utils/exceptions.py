"""Exception hierarchy for SEO Copilot.

Every error the orchestration layer can surface derives from
SeoCopilotError, which carries a stable machine-readable `code`, the
provider it came from (if any) and whether retrying may help:

- InvalidRequestError: request failed validation (never retryable)
- MissingCredentialError / MissingModelError: provider not configured
- RateLimitExceeded: local rate-limit window exhausted
- ProviderCallFailed: transport error, non-2xx, timeout (retryable)
- ResponseParseError: provider body did not decode into the expected shape
- AuthenticationError / ContentFilterError / ContextLengthExceededError:
  vendor rejections that will not succeed on retry
- AllProvidersExhausted: every candidate provider failed
- EnhancementTooShortError: an enhancement rewrite came back unusable

Errors are converted to envelope errors with `to_api_error()`:
```python
try:
    result = await client.invoke(operation, request)
except SeoCopilotError as e:
    return APIResponse.fail(e.to_api_error(), metadata)
```
"""

from typing import Optional

from seo_copilot.models.envelope import APIError


class SeoCopilotError(Exception):
    """Base exception for all orchestration errors."""

    code = "INTERNAL_SERVER_ERROR"
    retryable = True

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        retryable: Optional[bool] = None,
    ):
        self.message = message
        self.provider = provider
        if retryable is not None:
            self.retryable = retryable
        super().__init__(message)

    def to_api_error(self) -> APIError:
        return APIError(
            code=self.code,
            message=self.message,
            provider=self.provider,
            retryable=self.retryable,
        )

    @classmethod
    def from_api_error(cls, error: APIError) -> "SeoCopilotError":
        """Rebuild an exception from a failed envelope's error."""
        exc = cls(error.message, provider=error.provider, retryable=error.retryable)
        exc.code = error.code
        return exc


class InvalidRequestError(SeoCopilotError):
    """Inbound request failed validation.

    Raised when:
    - Required fields are missing or blank (websiteUrl, targetKeywords,
      title, content)
    - Enum fields carry unknown values (enhance mode)
    """

    code = "INVALID_REQUEST"
    retryable = False


class ConfigurationError(SeoCopilotError):
    """Provider is not usable with the current configuration."""

    retryable = False


class MissingCredentialError(ConfigurationError):
    code = "MISSING_API_KEY"

    def __init__(self, provider: str):
        super().__init__(f"API key not configured for {provider}", provider=provider)


class MissingModelError(ConfigurationError):
    code = "MISSING_MODEL"

    def __init__(self, provider: str):
        super().__init__(f"Model not specified for {provider}", provider=provider)


class RateLimitExceeded(SeoCopilotError):
    """Local rate-limit window exhausted for a provider.

    Never retried by the resilience wrapper; the caller decides whether to
    wait `retry_after_seconds` and resubmit.
    """

    code = "RATE_LIMIT_EXCEEDED"
    retryable = True

    def __init__(self, retry_after_seconds: float, provider: Optional[str] = None):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            f"Rate limit exceeded. Try again in {int(round(retry_after_seconds))} seconds.",
            provider=provider,
        )

    def to_api_error(self) -> APIError:
        error = super().to_api_error()
        error.retry_after_seconds = self.retry_after_seconds
        return error


class ProviderCallFailed(SeoCopilotError):
    """Provider call failed with a transient error.

    Raised when:
    - Transport error or connection failure
    - Non-2xx response (429 and 5xx included)
    - Per-call timeout elapsed
    """

    code = "PROVIDER_CALL_FAILED"
    retryable = True


class ResponseParseError(ProviderCallFailed):
    """Provider body was not valid JSON or did not match the response schema."""

    code = "MALFORMED_RESPONSE"


class AuthenticationError(ProviderCallFailed):
    """Vendor rejected the API key. Not retryable."""

    code = "AUTHENTICATION_FAILED"
    retryable = False


class ContentFilterError(ProviderCallFailed):
    """Vendor blocked the prompt or the output. Not retryable."""

    code = "CONTENT_FILTERED"
    retryable = False


class ContextLengthExceededError(ProviderCallFailed):
    """Prompt exceeds the model's context window. Not retryable."""

    code = "CONTEXT_LENGTH_EXCEEDED"
    retryable = False


class AllProvidersExhausted(SeoCopilotError):
    """Every candidate provider failed.

    Carries the most informative underlying error as `last_error` and a
    per-provider summary of failure codes.
    """

    code = "ALL_PROVIDERS_EXHAUSTED"
    retryable = True

    def __init__(
        self,
        message: str,
        last_error: Optional[SeoCopilotError] = None,
        provider_errors: Optional[dict[str, str]] = None,
    ):
        self.last_error = last_error
        self.provider_errors = provider_errors or {}
        if last_error is not None:
            message = f"{message}: {last_error.message}"
        super().__init__(
            message,
            provider=last_error.provider if last_error is not None else None,
        )


class EnhancementTooShortError(SeoCopilotError):
    """Enhanced content came back shorter than the usable minimum."""

    code = "ENHANCEMENT_TOO_SHORT"
    retryable = True
