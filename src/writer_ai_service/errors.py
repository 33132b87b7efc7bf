"""Error taxonomy for the text-processing service.

Every error raised on purpose by the service derives from WriterAIError and
carries the HTTP status it maps to. The API layer renders them as
``{"error": message}``.

Hierarchy:
    WriterAIError
    ├── ConfigError          → 500 (fatal at startup)
    ├── CacheError           → 500 (soft on the request path)
    ├── SerializationError   → 500 (malformed inbound/outbound JSON)
    └── UpstreamError        → 502
        ├── LlmApiError      (provider answered with a non-2xx status)
        ├── NetworkError     (transport failure or timeout)
        └── UnrecognizedFormat (2xx body matched no known response shape)
"""

from typing import Any

# Provider bodies can be arbitrarily large HTML error pages.
MAX_BODY_CHARS = 1000


def truncate_body(body: str, limit: int = MAX_BODY_CHARS) -> str:
    """Shorten a provider body for inclusion in an error message."""
    if len(body) <= limit:
        return body
    return f"{body[:limit]}... [truncated {len(body) - limit} chars]"


class WriterAIError(Exception):
    """Base class for all service errors.

    Attributes:
        message: Client-facing description
        context: Extra details for logs, never returned to the client
    """

    status_code: int = 500

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        self.message = message
        self.context = context or {}
        super().__init__(message)


class ConfigError(WriterAIError):
    """Configuration could not be read, parsed or written."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(f"Configuration error: {message}", context)


class CacheError(WriterAIError):
    """The cache backend failed to read or write an entry."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(f"Cache error: {message}", context)


class SerializationError(WriterAIError):
    """Request or response JSON violated the API contract."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(f"JSON processing error: {message}", context)


class UpstreamError(WriterAIError):
    """The LLM provider, not this service, is the failure point."""

    status_code = 502


class LlmApiError(UpstreamError):
    """The LLM provider returned a non-2xx status."""

    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(
            f"LLM API error (Status {status}): {truncate_body(body)}",
            {"status": status},
        )


class NetworkError(UpstreamError):
    """The LLM provider could not be reached or did not answer in time."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(f"LLM request failed: {message}", context)


class UnrecognizedFormat(UpstreamError):
    """The provider body matched none of the known response shapes."""

    def __init__(self, raw_body: str) -> None:
        self.raw_body = raw_body
        super().__init__(
            f"Unrecognized LLM response format. Received: {truncate_body(raw_body)}",
            {"body_length": len(raw_body)},
        )
