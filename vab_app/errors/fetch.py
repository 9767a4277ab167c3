"""
Fetch failure classifications for external bar sources.

A failed fetch voids only the (symbol, day) cell that needed the data; the
retryable/permanent split decides whether the source tries again first.
"""

from typing import Any, Optional


class FetchError(Exception):
    """Base class for bar source failures."""

    def __init__(self, message: str, symbol: Optional[str] = None,
                 status_code: Optional[int] = None,
                 context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.symbol = symbol
        self.status_code = status_code
        self.context = context or {}
        self.recoverable = True


class RetryableFetchError(FetchError):
    """Network error, server error or rate limit response."""


class PermanentFetchError(FetchError):
    """Client error or unusable payload that should not be retried."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.recoverable = False
