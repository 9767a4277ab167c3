"""
Backtest engine coordinator.

Runs the value area re-entry strategy over a range of days for a batch of
symbols: validates the request, fetches bars through a pluggable source,
computes each previous-day value area, evaluates each day and assembles the
results table.
"""

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from .config.defaults import DefaultConfig
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .data.models import BacktestReport, SignalResult
from .errors import DataQualityError, FetchError, InvalidInputError
from .logging.config import get_backtest_logger, log_signal_decision
from .metrics.value_area import ValueAreaCalculator
from .signals.evaluator import SignalEvaluator
from .sources.base import BarSource
from .sources.binance import BinanceBarSource
from .utils.time import previous_day
from .validation.request import validate_backtest_request

logger = structlog.get_logger(__name__)
backtest_logger = get_backtest_logger(__name__)


class BacktestEngine:
    """
    Main coordinator for value area backtests.

    Pipeline per (day, symbol):
    Previous-day bars → Value Area → Current-day bars → Signal → Report cell
    """

    def __init__(
        self,
        source: Optional[BarSource] = None,
        config_dir: Optional[Union[str, Path]] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> None:
        """
        Initialize the backtest engine.

        Args:
            source: Bar source; defaults to Binance using the fetch config
            config_dir: Directory holding symbols.yaml
            overrides: Per-run configuration overrides (highest precedence)
        """
        self.logger = logger
        self.backtest_logger = backtest_logger

        self.config_loader = ConfigLoader.create(Path(config_dir) if config_dir else None)
        self.overrides = overrides or {}

        errors = ConfigValidator.validate_config(self.config_loader.merge_config(None, self.overrides))
        if errors:
            raise InvalidInputError(
                "Invalid configuration: " + "; ".join(
                    f"{err.field}: {err.message} (got: {err.value})" for err in errors
                ),
                errors=errors
            )

        self.config: DefaultConfig = self.config_loader.load(None, self.overrides)
        self.source = source or BinanceBarSource(self.config.fetch)

        self.logger.info(
            "Backtest engine initialized",
            source=self.source.name,
            target_fraction=self.config.value_area.target_fraction,
            entry_policy=self.config.signal.entry_policy,
            max_workers=self.config.batch.max_workers
        )

    def load_symbol_config(self, symbol: str) -> DefaultConfig:
        """
        Resolve and validate the configuration for one symbol.

        Raises:
            InvalidInputError: If symbol overrides produce invalid parameters
        """
        merged = self.config_loader.merge_config(symbol, self.overrides)
        errors = ConfigValidator.validate_config(merged)
        if errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in errors]
            self.logger.error(
                "Symbol configuration validation failed",
                symbol=symbol,
                errors=error_msgs
            )
            raise InvalidInputError(
                f"Invalid configuration for {symbol}: {'; '.join(error_msgs)}",
                field=symbol,
                errors=errors
            )
        return self.config_loader.load(symbol, self.overrides)

    def run(
        self,
        symbols: Iterable[str],
        start: Union[str, date, datetime],
        end: Union[str, date, datetime]
    ) -> BacktestReport:
        """
        Backtest every symbol on every day from start to end inclusive.

        Args:
            symbols: Trading pairs, e.g. ["BTCUSDT", "ETHUSDT"]
            start: First day evaluated (its value area comes from the day before)
            end: Last day evaluated

        Returns:
            BacktestReport; a cell is None when its bars could not be fetched

        Raises:
            InvalidInputError: Before any fetch, if the request or a symbol's
                configuration is invalid
        """
        request = validate_backtest_request(
            symbols, start, end, max_symbols=self.config.batch.max_symbols
        )
        symbol_configs = {symbol: self.load_symbol_config(symbol) for symbol in request.symbols}
        days = request.days

        cells = [(day, symbol) for day in days for symbol in request.symbols]

        self.logger.info(
            "Starting backtest",
            symbols=list(request.symbols),
            start=request.start.isoformat(),
            end=request.end.isoformat(),
            cell_count=len(cells)
        )

        max_workers = self.config.batch.max_workers
        if max_workers <= 1:
            outcomes = [
                self.evaluate_cell(symbol, day, symbol_configs[symbol])
                for day, symbol in cells
            ]
        else:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                outcomes = list(executor.map(
                    lambda cell: self.evaluate_cell(cell[1], cell[0], symbol_configs[cell[1]]),
                    cells
                ))

        results: dict[date, dict[str, Optional[SignalResult]]] = {day: {} for day in days}
        for (day, symbol), outcome in zip(cells, outcomes):
            results[day][symbol] = outcome

        report = BacktestReport(symbols=request.symbols, days=days, results=results)

        self.logger.info(
            "Backtest complete",
            cell_count=len(cells),
            failed_cells=sum(1 for outcome in outcomes if outcome is None),
            triggered_cells=sum(1 for outcome in outcomes if outcome is not None and outcome.triggered),
            source_stats=self.source.get_stats()
        )

        return report

    def evaluate_cell(
        self,
        symbol: str,
        day: date,
        config: Optional[DefaultConfig] = None
    ) -> Optional[SignalResult]:
        """
        Evaluate one symbol on one day.

        Returns:
            SignalResult, or None if the bars could not be fetched or were
            unusable
        """
        config = config or self.config
        prev_day = previous_day(day)

        try:
            prev_bars = self.source.fetch_with_retry(
                symbol, config.fetch.value_area_interval, prev_day
            )
            value_area = ValueAreaCalculator(config.value_area).calculate(prev_bars)

            if value_area.is_empty:
                result = SignalResult.insufficient_data(value_area)
            else:
                todays_bars = self.source.fetch_with_retry(
                    symbol, config.fetch.signal_interval, day
                )
                result = SignalEvaluator(config.signal).evaluate(value_area, todays_bars)

        except FetchError as e:
            self.logger.warning(
                "Bar fetch failed, cell skipped",
                symbol=symbol,
                day=day.isoformat(),
                error=str(e),
                status_code=e.status_code,
                recoverable=e.recoverable
            )
            return None

        except DataQualityError as e:
            self.logger.error(
                "Unusable bar data, cell skipped",
                symbol=symbol,
                day=day.isoformat(),
                error=str(e),
                context=e.context
            )
            return None

        log_signal_decision(
            self.backtest_logger,
            symbol=symbol,
            day=day.isoformat(),
            outcome=result.outcome.value,
            roi=result.roi,
            context={"val": result.val, "vah": result.vah}
        )
        return result
