"""Backtest request validation."""

from .request import BacktestRequest, validate_backtest_request

__all__ = ["BacktestRequest", "validate_backtest_request"]
