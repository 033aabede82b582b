"""
Application-level exceptions.

Construction failures are fatal for the client. Request, decode and
pagination failures are returned to the caller, who decides what to do next.
Transport errors raised by httpx are never wrapped. Push payload problems
never surface here; they are logged and dropped by the subscriber.
"""

from __future__ import annotations

from typing import Any


class InsightClientError(Exception):
    """Base class for every error raised by the Insight client."""


class ConstructionError(InsightClientError):
    """The client cannot be built (bad URL scheme, failed push handshake)."""


class ConnectTimeout(ConstructionError):
    """The push channel did not report a connection within the handshake timeout."""

    def __init__(self, url: str, timeout: float) -> None:
        super().__init__(f"timed out after {timeout:g}s waiting for push connection to {url}")
        self.url = url
        self.timeout = timeout


class RequestFailed(InsightClientError):
    """The explorer answered with a non-200 status after the retry policy ran."""

    def __init__(self, status_code: int, status_text: str, url: str = "") -> None:
        super().__init__(f"status not ok: {status_code} {status_text}".rstrip())
        self.status_code = status_code
        self.status_text = status_text
        self.url = url


class DecodeError(InsightClientError):
    """A response body did not match the expected shape."""


class InsufficientData(InsightClientError):
    """The explorer returned fewer block summaries than best-block resolution needs."""


class NormalizationError(InsightClientError):
    """A monetary field could not be turned into a float."""


class TypeMismatch(NormalizationError):
    """A monetary field was neither a number nor a string."""

    def __init__(self, value: Any) -> None:
        super().__init__(f"unknown value type in response: {type(value).__name__}")
        self.value = value


class MalformedAmount(NormalizationError):
    """A monetary field was not a finite decimal number."""

    def __init__(self, value: object) -> None:
        super().__init__(f"error parsing value float: {value!r}")
        self.value = value


class PaginationLimitExceeded(InsightClientError):
    """Paging stopped before the declared total was reached."""


class PartialResultError(InsightClientError):
    """
    A paged fetch failed part way through.

    ``partial`` holds everything accumulated before the failure, in page
    order; ``error`` is the failure itself (also chained as ``__cause__``).
    """

    def __init__(self, partial: list[Any], error: BaseException) -> None:
        super().__init__(f"paged fetch failed after {len(partial)} items: {error}")
        self.partial = partial
        self.error = error


class StreamClosed(InsightClientError):
    """A notification stream was read after it was closed and drained."""
