"""Pytest configuration and shared fixtures."""

from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional

import pytest

from vab_app.data.models import Bar, ValueArea


SESSION_START = datetime(2024, 3, 2, 0, 0, 0, tzinfo=timezone.utc)


def _make_bars(
    closes: list[float],
    volumes: Optional[list[float]] = None,
    open_price: Optional[float] = None,
    highs: Optional[list[float]] = None,
    lows: Optional[list[float]] = None,
    start: datetime = SESSION_START,
    minutes: int = 30,
) -> list[Bar]:
    """Build a chronological session where each bar opens at the prior close."""
    volumes = volumes or [1.0] * len(closes)
    bars = []
    prev_close = open_price if open_price is not None else closes[0]
    for i, close in enumerate(closes):
        bar_open = prev_close
        open_time = start + timedelta(minutes=minutes * i)
        bars.append(Bar(
            open_time=open_time,
            close_time=open_time + timedelta(minutes=minutes) - timedelta(milliseconds=1),
            open=bar_open,
            high=highs[i] if highs else max(bar_open, close),
            low=lows[i] if lows else min(bar_open, close),
            close=close,
            volume=volumes[i],
        ))
        prev_close = close
    return bars


@pytest.fixture
def make_bars() -> Callable[..., list[Bar]]:
    """Factory for synthetic session bars."""
    return _make_bars


@pytest.fixture
def value_area_100_110() -> ValueArea:
    """Previous-day value area spanning 100 to 110."""
    return ValueArea(val=100.0, vah=110.0, poc=105.0, total_volume=100.0, covered_volume=70.0)


@pytest.fixture
def trading_day() -> date:
    return date(2024, 3, 2)


@pytest.fixture
def sample_kline() -> list:
    """Sample Binance kline array for 2024-03-02 00:00 UTC, 30m."""
    open_ms = int(SESSION_START.timestamp() * 1000)
    return [
        open_ms,
        "101.50000000",
        "103.00000000",
        "100.90000000",
        "102.25000000",
        "1532.40000000",
        open_ms + 30 * 60 * 1000 - 1,
        "156000.12",
        420,
        "800.1",
        "81000.5",
        "0",
    ]
