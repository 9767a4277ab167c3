"""Pluggable bar sources"""

from .base import BarSource
from .binance import BinanceBarSource
from .memory import InMemoryBarSource

__all__ = ["BarSource", "BinanceBarSource", "InMemoryBarSource"]
