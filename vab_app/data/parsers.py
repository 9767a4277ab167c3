"""
Binance-specific parsers for converting raw kline payloads to Bar objects.

Kline arrays arrive as:

    [
        1499040000000,      // Open time (ms)
        "0.01634790",       // Open
        "0.80000000",       // High
        "0.01575800",       // Low
        "0.01577100",       // Close
        "148976.11427815",  // Volume
        1499644799999,      // Close time (ms)
        ...                 // Quote volume, trade count, taker volumes, ignore
    ]
"""

from datetime import UTC, datetime
from typing import Any, Union

import orjson

from ..errors import MalformedDataError
from .models import Bar
from .validators import validate_bar


class ParseError(MalformedDataError):
    """Raised when a payload cannot be turned into bars."""
    pass


def decode_json(raw: Union[bytes, str]) -> Any:
    """Decode a JSON response body."""
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON payload: {e}", raw_data=str(raw[:200]))


def ms_to_datetime(ts_ms: Union[int, str]) -> datetime:
    """Convert an epoch milliseconds value to a UTC datetime."""
    return datetime.fromtimestamp(int(ts_ms) / 1000.0, tz=UTC)


def parse_kline(kline: list[Any], index: int = 0) -> Bar:
    """Parse a single Binance kline array into a Bar."""
    if not isinstance(kline, list):
        raise ParseError(f"Kline {index} must be a list, got {type(kline).__name__}")

    if len(kline) < 7:
        raise ParseError(
            f"Kline {index} must have at least 7 elements, got {len(kline)}",
            raw_data=str(kline),
        )

    try:
        bar = Bar(
            open_time=ms_to_datetime(kline[0]),
            close_time=ms_to_datetime(kline[6]),
            open=float(kline[1]),
            high=float(kline[2]),
            low=float(kline[3]),
            close=float(kline[4]),
            volume=float(kline[5]),
        )
    except (ValueError, TypeError, OverflowError, OSError) as e:
        raise ParseError(f"Invalid kline data at index {index}: {e}", raw_data=str(kline))

    validate_bar(bar, index)
    return bar


def parse_klines_payload(payload: Any) -> list[Bar]:
    """
    Parse a decoded /api/v3/klines response into bars.

    Args:
        payload: Decoded JSON body, expected to be a list of kline arrays

    Returns:
        Bars in the order received (Binance returns them oldest first)

    Raises:
        ParseError: If the payload is not a list or a kline is malformed
        MalformedDataError: If a kline carries impossible values
    """
    if not isinstance(payload, list):
        raise ParseError(
            "Klines payload must be a list",
            raw_data=str(payload)[:200],
            expected_format="list of kline arrays",
        )

    return [parse_kline(kline, i) for i, kline in enumerate(payload)]


def parse_exchange_symbols(payload: Any, quote_asset: str = "USDT") -> list[str]:
    """
    Extract tradable symbols quoted in quote_asset from /api/v3/exchangeInfo.

    Args:
        payload: Decoded exchangeInfo body
        quote_asset: Quote currency to keep

    Returns:
        Sorted symbol names with status TRADING
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("symbols"), list):
        raise ParseError(
            "exchangeInfo payload must contain a 'symbols' list",
            expected_format="{'symbols': [...]}",
        )

    return sorted(
        entry["symbol"]
        for entry in payload["symbols"]
        if isinstance(entry, dict)
        and entry.get("quoteAsset") == quote_asset
        and entry.get("status") == "TRADING"
        and "symbol" in entry
    )
