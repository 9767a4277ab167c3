"""Binance spot REST bar source."""

import socket
from datetime import date
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode, urlparse
from urllib.request import Request, urlopen

from ..config.defaults import FetchParams
from ..data.models import Bar
from ..data.parsers import (
    decode_json,
    parse_exchange_symbols,
    parse_klines_payload,
)
from ..errors import (
    MalformedDataError,
    PermanentFetchError,
    RetryableFetchError,
)
from ..utils.rate_limit import RateLimiter
from ..utils.time import day_bounds_ms
from .base import BarSource

# 429 = rate limited, 418 = IP banned after ignoring 429s
RETRYABLE_STATUS_CODES = frozenset({418, 429})


class BinanceBarSource(BarSource):
    """Fetches klines from /api/v3/klines, one UTC day at a time."""

    def __init__(self, params: Optional[FetchParams] = None,
                 rate_limiter: Optional[RateLimiter] = None, **kwargs):
        self.params = params or FetchParams()
        kwargs.setdefault("max_retries", self.params.max_retries)
        kwargs.setdefault("retry_backoff_seconds", self.params.retry_backoff_seconds)
        super().__init__("binance", **kwargs)

        parsed = urlparse(self.params.base_url)
        if not parsed.scheme or not parsed.netloc:
            raise PermanentFetchError(f"Invalid base URL: {self.params.base_url}")

        self.rate_limiter = rate_limiter or RateLimiter.from_milliseconds(
            self.params.request_delay_ms
        )
        self._request_count = 0

    def fetch_bars(self, symbol: str, interval: str, day: date) -> list[Bar]:
        """
        Fetch a full UTC day of klines, following pagination.

        Pages are requested from the day start, each one starting 1 ms after
        the previous page's last close time, until a page comes back empty or
        short, or the day is covered.
        """
        start_ms, end_ms = day_bounds_ms(day)
        last_ms = end_ms - 1
        cursor = start_ms
        bars: list[Bar] = []

        while cursor <= last_ms:
            payload = self._get_json("/api/v3/klines", {
                "symbol": symbol,
                "interval": interval,
                "startTime": cursor,
                "endTime": last_ms,
                "limit": self.params.page_limit,
            }, symbol=symbol)

            try:
                page = parse_klines_payload(payload)
            except MalformedDataError as e:
                raise PermanentFetchError(
                    f"Malformed klines for {symbol} on {day.isoformat()}: {e}",
                    symbol=symbol,
                    context={"interval": interval, "day": day.isoformat()},
                )

            if not page:
                break

            bars.extend(page)

            next_cursor = int(payload[-1][6]) + 1
            if len(page) < self.params.page_limit or next_cursor <= cursor:
                break
            cursor = next_cursor

        self.logger.debug(
            "Fetched klines",
            symbol=symbol,
            interval=interval,
            day=day.isoformat(),
            bar_count=len(bars)
        )
        return bars

    def list_symbols(self, quote_asset: str = "USDT") -> list[str]:
        """Tradable symbols quoted in quote_asset, from /api/v3/exchangeInfo."""
        payload = self._get_json("/api/v3/exchangeInfo", {})
        try:
            return parse_exchange_symbols(payload, quote_asset)
        except MalformedDataError as e:
            raise PermanentFetchError(f"Malformed exchangeInfo: {e}")

    def _get_json(self, path: str, query: dict[str, Any],
                  symbol: Optional[str] = None) -> Any:
        """Perform a rate-limited GET and decode the JSON body."""
        url = f"{self.params.base_url.rstrip('/')}{path}"
        if query:
            url = f"{url}?{urlencode(query)}"

        req = Request(url, headers={
            'Accept': 'application/json',
            'User-Agent': 'vab-app/1.0'
        }, method='GET')

        self.rate_limiter.acquire()
        with self._stats_lock:
            self._request_count += 1

        try:
            with urlopen(req, timeout=self.params.timeout_seconds) as response:
                body = response.read()

        except HTTPError as e:
            error_msg = f"HTTP {e.code}: {e.reason}"
            self.logger.warning(
                "Bar source HTTP error",
                path=path,
                symbol=symbol,
                error_code=e.code,
                error_reason=str(e.reason)
            )

            if e.code >= 500 or e.code in RETRYABLE_STATUS_CODES:
                raise RetryableFetchError(error_msg, symbol=symbol, status_code=e.code)
            raise PermanentFetchError(error_msg, symbol=symbol, status_code=e.code)

        except (URLError, socket.timeout, OSError) as e:
            self.logger.warning(
                "Bar source network error",
                path=path,
                symbol=symbol,
                error=str(e)
            )
            raise RetryableFetchError(f"Network error: {e}", symbol=symbol)

        try:
            return decode_json(body)
        except MalformedDataError as e:
            raise PermanentFetchError(str(e), symbol=symbol)

    def get_stats(self) -> dict[str, Any]:
        stats = super().get_stats()
        with self._stats_lock:
            stats["request_count"] = self._request_count
        return stats
