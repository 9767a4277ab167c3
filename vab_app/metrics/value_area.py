"""Value area (VAL/VAH) and Point of Control from a session volume profile"""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import structlog

from ..config.defaults import ValueAreaParams
from ..data.models import Bar, ValueArea
from ..data.validators import validate_bars
from ..errors import MalformedDataError

logger = structlog.get_logger(__name__)


def quantize_price(price: float, price_precision: int = 2) -> float:
    """Round a price to price_precision decimals, halves away from zero."""
    step = Decimal(1).scaleb(-price_precision)
    return float(Decimal(repr(price)).quantize(step, rounding=ROUND_HALF_UP))


def build_price_volume_map(bars: Sequence[Bar], price_precision: int = 2) -> dict[float, float]:
    """
    Accumulate volume per quantized closing price.

    Args:
        bars: Session bars
        price_precision: Decimal places used to bucket close prices

    Returns:
        Mapping of rounded close price to total volume traded at it
    """
    price_volume: dict[float, float] = {}
    for bar in bars:
        price = quantize_price(bar.close, price_precision)
        price_volume[price] = price_volume.get(price, 0.0) + bar.volume
    return price_volume


def find_point_of_control(price_volume: dict[float, float]) -> Optional[float]:
    """
    Find the price level with the largest volume.

    Ties go to the lowest price.

    Args:
        price_volume: Quantized price to volume mapping

    Returns:
        POC price or None if the mapping is empty
    """
    poc = None
    poc_volume = 0.0
    for price in sorted(price_volume):
        volume = price_volume[price]
        if poc is None or volume > poc_volume:
            poc = price
            poc_volume = volume
    return poc


def compute_value_area(
    bars: Sequence[Bar],
    target_fraction: float = 0.70,
    price_precision: int = 2
) -> ValueArea:
    """
    Compute the value area of a session.

    Starting at the POC, the band grows one observed price level at a time
    toward whichever neighbour holds more volume until it covers
    target_fraction of the session's volume. Equal neighbours, or an
    exhausted upper side, extend the band downward. Gaps between traded
    prices are skipped.

    Args:
        bars: Session bars (may be empty)
        target_fraction: Share of total volume to cover, in (0, 1]
        price_precision: Decimal places used to bucket close prices

    Returns:
        ValueArea with val <= poc <= vah, or an empty ValueArea when the
        session has no bars or no volume

    Raises:
        MalformedDataError: If parameters are out of range or a bar has
            non-finite prices or negative volume
    """
    if not 0 < target_fraction <= 1:
        raise MalformedDataError(
            f"target_fraction must be in (0, 1], got {target_fraction}",
            context={"target_fraction": target_fraction},
        )
    if price_precision < 0:
        raise MalformedDataError(
            f"price_precision must be non-negative, got {price_precision}",
            context={"price_precision": price_precision},
        )

    validate_bars(bars)

    price_volume = build_price_volume_map(bars, price_precision)
    total_volume = sum(price_volume.values())

    if not price_volume or total_volume <= 0:
        return ValueArea(total_volume=total_volume)

    prices = sorted(price_volume)
    poc = find_point_of_control(price_volume)
    target_volume = target_fraction * total_volume

    low_idx = high_idx = prices.index(poc)
    covered = price_volume[poc]

    while covered < target_volume:
        below = prices[low_idx - 1] if low_idx > 0 else None
        above = prices[high_idx + 1] if high_idx < len(prices) - 1 else None

        if below is None and above is None:
            break

        below_volume = price_volume[below] if below is not None else 0.0
        above_volume = price_volume[above] if above is not None else 0.0

        if below is not None and (above is None or below_volume >= above_volume):
            low_idx -= 1
            covered += below_volume
        else:
            high_idx += 1
            covered += above_volume

    return ValueArea(
        val=prices[low_idx],
        vah=prices[high_idx],
        poc=poc,
        total_volume=total_volume,
        covered_volume=covered,
    )


class ValueAreaCalculator:
    """Value area calculator bound to a set of profile parameters"""

    def __init__(self, params: Optional[ValueAreaParams] = None):
        self.params = params or ValueAreaParams()

    def calculate(self, bars: Sequence[Bar]) -> ValueArea:
        """
        Compute the value area of a session using the bound parameters.

        Args:
            bars: Session bars

        Returns:
            ValueArea, empty when the session has no usable volume
        """
        value_area = compute_value_area(
            bars,
            target_fraction=self.params.target_fraction,
            price_precision=self.params.price_precision,
        )

        if value_area.is_empty:
            logger.debug(
                "Value area unavailable",
                bar_count=len(bars),
                total_volume=value_area.total_volume,
            )
        else:
            logger.debug(
                "Value area computed",
                bar_count=len(bars),
                poc=value_area.poc,
                val=value_area.val,
                vah=value_area.vah,
                coverage=value_area.coverage,
            )

        return value_area
