"""In-memory bar source for offline runs and tests."""

from datetime import date
from typing import Optional

from ..data.models import Bar
from .base import BarSource


class InMemoryBarSource(BarSource):
    """Serves preloaded bars keyed by (symbol, interval, day).

    Missing keys yield an empty day rather than an error, matching an
    exchange that has no trades for the period.
    """

    def __init__(self, bars: Optional[dict[tuple[str, str, date], list[Bar]]] = None,
                 **kwargs):
        kwargs.setdefault("max_retries", 0)
        super().__init__("memory", **kwargs)
        self._bars: dict[tuple[str, str, date], list[Bar]] = dict(bars or {})

    def add_bars(self, symbol: str, interval: str, day: date, bars: list[Bar]) -> None:
        self._bars[(symbol, interval, day)] = list(bars)

    def fetch_bars(self, symbol: str, interval: str, day: date) -> list[Bar]:
        return list(self._bars.get((symbol, interval, day), []))
