"""Domain exceptions for the translation pipeline and CLI diagnostics.

Responsibilities:
- Provide the single `ApiError` family threaded through every pipeline call.
- Keep failure metadata (`failure_kind`, HTTP status, parse excerpt) on the
  exception so hosts can render concise diagnostics.
- Keep CLI-facing stage errors separate from provider errors.
"""

from __future__ import annotations


class ApiError(RuntimeError):
    """Base class for every provider, parsing, and cancellation failure."""

    failure_kind = "unknown"

    def __init__(self, message: str, *, failure_kind: str | None = None) -> None:
        """Initialize the error message and optional failure classification."""

        super().__init__(message)
        if failure_kind is not None:
            self.failure_kind = failure_kind


class NoApiKeyError(ApiError):
    """Raised when a provider that requires an API key has none configured."""

    failure_kind = "missing_api_key"

    def __init__(self, provider: str) -> None:
        super().__init__(f"No API key set for provider: {provider}")
        self.provider = provider


class TransportError(ApiError):
    """Raised when the HTTP request could not be completed."""

    failure_kind = "transport"


class ApiResponseError(ApiError):
    """Raised when a provider answers with a non-success HTTP status."""

    failure_kind = "http_error"

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"API returned error: {status} — {body}")
        self.status = status
        self.body = body


class ParseError(ApiError):
    """Raised when provider output cannot be decoded into the expected shape."""

    failure_kind = "parse"

    def __init__(self, message: str, *, excerpt: str | None = None) -> None:
        """Initialize parse failure with a bounded excerpt of the offending text."""

        detail = message if excerpt is None else f"{message} | output: {excerpt}"
        super().__init__(f"Failed to parse response: {detail}")
        self.cause = message
        self.excerpt = excerpt


class ProviderConfigError(ApiError):
    """Raised when provider configuration cannot be resolved before any request."""

    failure_kind = "config"


class TranslationCancelledError(ApiError):
    """Raised when a job observes its cancellation flag between rounds."""

    failure_kind = "cancelled"

    def __init__(self, job_id: str | None = None) -> None:
        super().__init__("Cancelled")
        self.job_id = job_id


class PipelineStageError(RuntimeError):
    """Raised when a specific CLI-driven stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
