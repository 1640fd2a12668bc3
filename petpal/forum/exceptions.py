"""
Failures raised while ingesting posts from Reddit.

None of these are retried here; the pipeline propagates them as-is and the
HTTP layer turns any of them into one generic error response.
"""

from typing import Any


class IngestionError(Exception):
    """Base class for every Reddit ingestion failure."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


class TransportError(IngestionError):
    """The request never completed: DNS, refused connection, timeout, reset."""


class UpstreamStatusError(IngestionError):
    """Reddit answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str | None = None, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message or f"Reddit responded with status {status_code}", context=context)
        self.status_code = status_code


class MalformedPayloadError(IngestionError):
    """The response body was not JSON, or not a Reddit listing."""


__all__ = [
    "IngestionError",
    "TransportError",
    "UpstreamStatusError",
    "MalformedPayloadError",
]
