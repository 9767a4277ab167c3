"""
Error classification for bar ingestion, request validation and data fetching.

Data quality errors are recoverable per cell, input errors abort a run before
any work starts, and fetch errors are reported as missing cells.
"""

from .data_quality import (
    DataQualityError,
    MalformedDataError,
)
from .fetch import (
    FetchError,
    PermanentFetchError,
    RetryableFetchError,
)
from .input import InvalidInputError

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MalformedDataError",
    # Fetch Failures
    "FetchError",
    "RetryableFetchError",
    "PermanentFetchError",
    # Input Errors
    "InvalidInputError",
]
