"""Exception types raised while resolving and recording a stream."""

from __future__ import annotations

from typing import Optional

TERMINAL_STATUSES = {404, 410}
TRANSIENT_STATUSES = {408, 429}


class RecorderError(Exception):
    """Base class for failures that end (or interrupt) a recording session."""

    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.stage = stage


class NetworkError(RecorderError):
    """Raised when a connection cannot be established or drops mid-transfer."""


class FetchTimeoutError(RecorderError, TimeoutError):
    """Raised when a request does not complete within its bound."""


class HttpStatusError(RecorderError):
    """Raised for a non-success HTTP response."""

    def __init__(self, status: int, url: str, stage: Optional[str] = None) -> None:
        super().__init__(f"HTTP {status} from {url}", stage=stage)
        self.status = status
        self.url = url

    @property
    def is_transient(self) -> bool:
        return self.status in TRANSIENT_STATUSES or 500 <= self.status < 600

    @property
    def stream_ended(self) -> bool:
        return self.status in TERMINAL_STATUSES


class OutputIOError(RecorderError, OSError):
    """Raised when the output file cannot be opened or fully written."""


class ParseError(RecorderError):
    """Raised when an upstream API response does not have the expected shape."""


class NoVariantsFoundError(RecorderError):
    """Raised when a master playlist exposes no variant streams."""


class QualityNotAvailableError(RecorderError):
    """Raised when the requested quality is not among the variants."""
