"""
Value area re-entry signal evaluation.

A session that opens outside the previous session's value area and then
closes back inside it is treated as a mean-reversion entry: long when the
open was below VAL, short when it was above VAH. Every trade exits at the
session's last close.
"""

from collections.abc import Sequence
from typing import Optional, Union

import structlog

from ..config.defaults import SignalParams
from ..data.models import (
    Bar,
    EntryPolicy,
    SignalOutcome,
    SignalResult,
    TradeDirection,
    ValueArea,
)
from ..data.validators import validate_bars

logger = structlog.get_logger(__name__)


def calculate_roi(entry_price: float, exit_price: float, direction: TradeDirection) -> float:
    """
    Return on the trade in percent.

    Shorts use (entry - exit) / entry so that a profitable short is positive.
    """
    if direction == TradeDirection.SHORT:
        return (entry_price - exit_price) / entry_price * 100
    return (exit_price - entry_price) / entry_price * 100


def _find_reentry_cross(bars: Sequence[Bar], level: float,
                        direction: TradeDirection) -> Optional[int]:
    """Index of the first bar closing back across level after a close outside it."""
    for i in range(1, len(bars)):
        prev_close = bars[i - 1].close
        curr_close = bars[i].close
        if direction == TradeDirection.LONG:
            if prev_close <= level < curr_close:
                return i
        elif prev_close >= level > curr_close:
            return i
    return None


def _find_consecutive_closes(bars: Sequence[Bar], val: float) -> Optional[int]:
    """Index of the second of the first two consecutive closes above val."""
    for i in range(1, len(bars)):
        if bars[i - 1].close > val and bars[i].close > val:
            return i
    return None


def _resolve_policy(policy: Union[str, EntryPolicy]) -> EntryPolicy:
    return policy if isinstance(policy, EntryPolicy) else EntryPolicy(policy)


def evaluate_day(
    previous_value_area: ValueArea,
    todays_bars: Sequence[Bar],
    params: Optional[SignalParams] = None
) -> SignalResult:
    """
    Evaluate one session against the previous session's value area.

    Args:
        previous_value_area: Value area of the prior session
        todays_bars: Current session bars in chronological order
        params: Entry policy and diagnostic target settings

    Returns:
        SignalResult; optional price/time fields are only set when triggered
    """
    params = params or SignalParams()
    policy = _resolve_policy(params.entry_policy)

    if previous_value_area.is_empty or not todays_bars:
        return SignalResult.insufficient_data(previous_value_area)

    validate_bars(todays_bars)

    val = previous_value_area.val
    vah = previous_value_area.vah
    open_price = todays_bars[0].open

    if open_price < val:
        direction = TradeDirection.LONG
    elif open_price > vah and policy == EntryPolicy.REENTRY_CROSS:
        direction = TradeDirection.SHORT
    else:
        return SignalResult.not_triggered(previous_value_area, SignalOutcome.NO_SETUP)

    if policy == EntryPolicy.CONSECUTIVE_CLOSES:
        if len(todays_bars) < 2:
            return SignalResult.insufficient_data(previous_value_area)
        entry_idx = _find_consecutive_closes(todays_bars, val)
    else:
        level = val if direction == TradeDirection.LONG else vah
        entry_idx = _find_reentry_cross(todays_bars, level, direction)

    if entry_idx is None:
        return SignalResult.not_triggered(
            previous_value_area, SignalOutcome.NO_ENTRY, direction
        )

    entry_bar = todays_bars[entry_idx]
    exit_bar = todays_bars[-1]
    entry_price = entry_bar.close
    exit_price = exit_bar.close

    highest_price = max(bar.high for bar in todays_bars)
    lowest_price = min(bar.low for bar in todays_bars)

    if direction == TradeDirection.LONG:
        target_price = entry_price * (1 + params.profit_target_pct)
        max_excursion = highest_price - entry_price
        target_hit = next(
            (bar for bar in todays_bars[entry_idx + 1:] if bar.high >= target_price),
            None,
        )
    else:
        target_price = entry_price * (1 - params.profit_target_pct)
        max_excursion = entry_price - lowest_price
        target_hit = next(
            (bar for bar in todays_bars[entry_idx + 1:] if bar.low <= target_price),
            None,
        )

    return SignalResult(
        val=val,
        vah=vah,
        triggered=True,
        outcome=SignalOutcome.TRIGGERED,
        direction=direction,
        entry_price=entry_price,
        entry_time=entry_bar.close_time,
        exit_price=exit_price,
        exit_time=exit_bar.close_time,
        roi=calculate_roi(entry_price, exit_price, direction),
        target_price=target_price,
        target_hit_time=target_hit.close_time if target_hit is not None else None,
        highest_price=highest_price,
        lowest_price=lowest_price,
        max_excursion=max_excursion,
    )


class SignalEvaluator:
    """Signal evaluator bound to a set of entry parameters"""

    def __init__(self, params: Optional[SignalParams] = None):
        self.params = params or SignalParams()

    def evaluate(self, previous_value_area: ValueArea,
                 todays_bars: Sequence[Bar]) -> SignalResult:
        """Evaluate one session using the bound parameters."""
        result = evaluate_day(previous_value_area, todays_bars, self.params)

        if result.triggered:
            logger.info(
                "Value area re-entry",
                direction=result.direction.value,
                val=result.val,
                vah=result.vah,
                entry_price=result.entry_price,
                exit_price=result.exit_price,
                roi=result.roi,
            )

        return result
