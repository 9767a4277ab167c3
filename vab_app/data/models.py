"""
Canonical data models for bars, value areas and signal outcomes.

All records are immutable. Bars belong to whoever fetched them; value areas
and signal results are built once per call and handed back to the caller.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional


class TradeDirection(Enum):
    """Side of a value area re-entry trade."""
    LONG = "long"       # Opened below VAL, closed back above it
    SHORT = "short"     # Opened above VAH, closed back below it


class SignalOutcome(Enum):
    """Why a day did or did not produce a trade."""
    INSUFFICIENT_DATA = "insufficient_data"   # Cannot evaluate
    NO_SETUP = "no_setup"                     # Opened inside the value area
    NO_ENTRY = "no_entry"                     # Opened outside, never re-entered
    TRIGGERED = "triggered"


class EntryPolicy(Enum):
    """Entry detection rule."""
    REENTRY_CROSS = "reentry_cross"
    CONSECUTIVE_CLOSES = "consecutive_closes"


@dataclass(frozen=True)
class Bar:
    """Time-bucketed trading record with UTC timestamps."""
    open_time: datetime     # UTC bucket start
    close_time: datetime    # UTC bucket end
    open: float
    high: float
    low: float
    close: float
    volume: float           # Base asset volume


@dataclass(frozen=True)
class ValueArea:
    """Price band holding the target share of a session's volume."""
    val: Optional[float] = None         # Value Area Low
    vah: Optional[float] = None         # Value Area High
    poc: Optional[float] = None         # Point of Control
    total_volume: float = 0.0
    covered_volume: float = 0.0

    @property
    def is_empty(self) -> bool:
        """True when the session had no usable volume."""
        return self.val is None or self.vah is None

    def contains(self, price: float) -> bool:
        """Whether price lies inside [val, vah]."""
        if self.is_empty:
            return False
        return self.val <= price <= self.vah

    @property
    def coverage(self) -> Optional[float]:
        """Covered share of total volume, None if empty."""
        if self.is_empty or self.total_volume <= 0:
            return None
        return self.covered_volume / self.total_volume


@dataclass(frozen=True)
class SignalResult:
    """Outcome of evaluating one session against the previous value area."""
    val: Optional[float] = None
    vah: Optional[float] = None
    triggered: bool = False
    outcome: SignalOutcome = SignalOutcome.INSUFFICIENT_DATA
    direction: Optional[TradeDirection] = None

    entry_price: Optional[float] = None
    entry_time: Optional[datetime] = None
    exit_price: Optional[float] = None
    exit_time: Optional[datetime] = None
    roi: Optional[float] = None                 # Percent

    # Diagnostics; never alter exit or roi
    target_price: Optional[float] = None
    target_hit_time: Optional[datetime] = None
    highest_price: Optional[float] = None
    lowest_price: Optional[float] = None
    max_excursion: Optional[float] = None

    @classmethod
    def insufficient_data(cls, value_area: Optional[ValueArea] = None) -> "SignalResult":
        """Result for a day that cannot be evaluated."""
        if value_area is None or value_area.is_empty:
            return cls()
        return cls(val=value_area.val, vah=value_area.vah)

    @classmethod
    def not_triggered(cls, value_area: ValueArea, outcome: SignalOutcome,
                      direction: Optional[TradeDirection] = None) -> "SignalResult":
        """Result for an evaluated day without a trade."""
        return cls(
            val=value_area.val,
            vah=value_area.vah,
            triggered=False,
            outcome=outcome,
            direction=direction,
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain dictionary with ISO timestamps and enum values."""
        result: dict[str, Any] = {}
        for name in self.__dataclass_fields__:
            value = getattr(self, name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, datetime):
                value = value.isoformat()
            result[name] = value
        return result


@dataclass(frozen=True)
class BacktestReport:
    """Results table keyed by day then symbol.

    A cell is None when its bars could not be fetched.
    """
    symbols: tuple[str, ...]
    days: tuple[date, ...]
    results: dict[date, dict[str, Optional[SignalResult]]] = field(default_factory=dict)

    def get(self, day: date, symbol: str) -> Optional[SignalResult]:
        return self.results.get(day, {}).get(symbol)

    def rows(self) -> list[tuple[date, str, Optional[SignalResult]]]:
        """Flatten the table in day-major, then symbol order."""
        return [
            (day, symbol, self.get(day, symbol))
            for day in self.days
            for symbol in self.symbols
        ]

    def summary(self) -> dict[str, dict[str, Any]]:
        """Per-symbol trade statistics over the triggered cells."""
        stats: dict[str, dict[str, Any]] = {}
        for symbol in self.symbols:
            cells = [self.get(day, symbol) for day in self.days]
            rois = [
                result.roi for result in cells
                if result is not None and result.triggered and result.roi is not None
            ]
            failed = sum(1 for result in cells if result is None)
            wins = sum(1 for roi in rois if roi > 0)
            losses = sum(1 for roi in rois if roi < 0)
            stats[symbol] = {
                "trades": len(rois),
                "wins": wins,
                "losses": losses,
                "breakeven": len(rois) - wins - losses,
                "win_rate": wins / len(rois) if rois else None,
                "average_roi": sum(rois) / len(rois) if rois else None,
                "total_roi": sum(rois) if rois else 0.0,
                "failed_cells": failed,
            }
        return stats

    def to_dict(self) -> dict[str, Any]:
        """Plain dictionary suitable for JSON output."""
        return {
            "symbols": list(self.symbols),
            "days": [day.isoformat() for day in self.days],
            "results": {
                day.isoformat(): {
                    symbol: (result.to_dict() if result is not None else None)
                    for symbol, result in self.results.get(day, {}).items()
                }
                for day in self.days
            },
            "summary": self.summary(),
        }
