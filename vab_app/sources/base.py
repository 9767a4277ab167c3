"""Base class for bar sources."""

import threading
import time
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Callable, Optional

import structlog

from ..data.models import Bar
from ..errors import FetchError, PermanentFetchError, RetryableFetchError


class BarSource(ABC):
    """Supplies one UTC day of bars for a symbol and interval."""

    def __init__(self, name: str, max_retries: int = 3,
                 retry_backoff_seconds: float = 1.0,
                 sleep: Optional[Callable[[float], None]] = None):
        self.name = name
        self.max_retries = max_retries
        self.retry_backoff_seconds = retry_backoff_seconds
        self.logger = structlog.get_logger(f"vab_app.sources.{name}")
        self._sleep = sleep or time.sleep
        self._stats_lock = threading.Lock()
        self._fetch_count = 0
        self._error_count = 0

    def _record(self, success: bool) -> None:
        with self._stats_lock:
            if success:
                self._fetch_count += 1
            else:
                self._error_count += 1

    @abstractmethod
    def fetch_bars(self, symbol: str, interval: str, day: date) -> list[Bar]:
        """
        Fetch every bar of a UTC calendar day.

        Args:
            symbol: Trading pair, e.g. BTCUSDT
            interval: Bar interval, e.g. 5m
            day: UTC calendar day

        Returns:
            Bars in chronological order, possibly empty

        Raises:
            FetchError: If the data could not be retrieved
        """
        pass

    def fetch_with_retry(self, symbol: str, interval: str, day: date) -> list[Bar]:
        """
        Fetch bars, retrying retryable failures with exponential backoff.

        Raises:
            PermanentFetchError: Immediately, without retrying
            RetryableFetchError: Once max_retries is exhausted
        """
        attempt = 0
        last_error: Optional[FetchError] = None

        while attempt <= self.max_retries:
            try:
                bars = self.fetch_bars(symbol, interval, day)
                self._record(success=True)
                if attempt > 0:
                    self.logger.info(
                        "Fetch succeeded after retry",
                        symbol=symbol,
                        interval=interval,
                        day=day.isoformat(),
                        attempts=attempt + 1
                    )
                return bars

            except PermanentFetchError:
                self._record(success=False)
                raise

            except RetryableFetchError as e:
                last_error = e

            attempt += 1

            if attempt <= self.max_retries:
                delay = self.retry_backoff_seconds * (2 ** (attempt - 1))
                self.logger.warning(
                    "Fetch attempt failed, retrying",
                    symbol=symbol,
                    interval=interval,
                    day=day.isoformat(),
                    attempt=attempt,
                    retry_in_seconds=delay,
                    error=str(last_error)
                )
                self._sleep(delay)

        self._record(success=False)
        raise last_error

    def get_stats(self) -> dict[str, Any]:
        """Get fetch statistics."""
        with self._stats_lock:
            fetches, errors = self._fetch_count, self._error_count
        return {
            "name": self.name,
            "fetch_count": fetches,
            "error_count": errors,
            "success_rate": fetches / (fetches + errors) if (fetches + errors) > 0 else 0.0
        }

    def reset_stats(self):
        """Reset fetch statistics."""
        with self._stats_lock:
            self._fetch_count = 0
            self._error_count = 0
