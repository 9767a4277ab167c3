"""Bar data models, exchange payload parsing and validation."""

from .models import (
    BacktestReport,
    Bar,
    EntryPolicy,
    SignalOutcome,
    SignalResult,
    TradeDirection,
    ValueArea,
)

__all__ = [
    "BacktestReport",
    "Bar",
    "EntryPolicy",
    "SignalOutcome",
    "SignalResult",
    "TradeDirection",
    "ValueArea",
]
