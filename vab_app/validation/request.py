"""Validation of backtest requests before any data is fetched."""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from ..errors import InvalidInputError
from ..utils.time import dates_in_range, parse_day

SYMBOL_PATTERN = re.compile(r"^[A-Z0-9]{2,20}$")


@dataclass(frozen=True)
class BacktestRequest:
    """A validated backtest request."""
    symbols: tuple[str, ...]
    start: date
    end: date

    @property
    def days(self) -> tuple[date, ...]:
        return tuple(dates_in_range(self.start, self.end))


def _parse_date_field(name: str, value: Optional[Union[str, date, datetime]]) -> date:
    if value is None or value == "":
        raise InvalidInputError(f"{name} date is required", field=name, value=value)
    try:
        return parse_day(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(
            f"{name} date must be an ISO date (YYYY-MM-DD): {e}",
            field=name,
            value=value
        )


def validate_backtest_request(
    symbols: Optional[Iterable[str]],
    start: Optional[Union[str, date, datetime]],
    end: Optional[Union[str, date, datetime]],
    max_symbols: int = 10
) -> BacktestRequest:
    """
    Validate and normalize a backtest request.

    Symbols are stripped and upper-cased; their order is kept.

    Raises:
        InvalidInputError: If no symbols or too many are given, a symbol is
            malformed or repeated, a date is missing or unparsable, or start
            is after end
    """
    normalized = [s.strip().upper() for s in (symbols or []) if s and s.strip()]

    if not normalized:
        raise InvalidInputError("At least one symbol is required", field="symbols", value=symbols)

    if len(normalized) > max_symbols:
        raise InvalidInputError(
            f"At most {max_symbols} symbols per batch, got {len(normalized)}",
            field="symbols",
            value=normalized
        )

    for symbol in normalized:
        if not SYMBOL_PATTERN.match(symbol):
            raise InvalidInputError(f"Invalid symbol '{symbol}'", field="symbols", value=symbol)

    duplicates = sorted({s for s in normalized if normalized.count(s) > 1})
    if duplicates:
        raise InvalidInputError(
            f"Duplicate symbols: {', '.join(duplicates)}",
            field="symbols",
            value=duplicates
        )

    start_day = _parse_date_field("start", start)
    end_day = _parse_date_field("end", end)

    if start_day > end_day:
        raise InvalidInputError(
            f"Start date {start_day.isoformat()} is after end date {end_day.isoformat()}",
            field="start",
            value=start_day
        )

    return BacktestRequest(symbols=tuple(normalized), start=start_day, end=end_day)
