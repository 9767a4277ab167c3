"""
Precondition checks for bars handed to the value area and signal code.

Sparse data is a normal result state; these checks only reject bars whose
shape is impossible (non-finite prices, negative volume).
"""

import math
from collections.abc import Sequence

from ..errors import MalformedDataError
from .models import Bar


def validate_bar(bar: Bar, index: int = 0) -> None:
    """
    Validate a single bar's numeric fields.

    Args:
        bar: Bar to validate
        index: Position in the session, used in error messages

    Raises:
        MalformedDataError: If a price is non-finite or non-positive, or
            volume is non-finite or negative
    """
    for name in ("open", "high", "low", "close"):
        price = getattr(bar, name)
        if not isinstance(price, (int, float)) or not math.isfinite(price) or price <= 0:
            raise MalformedDataError(
                f"Bar {index} {name} must be a positive finite number, got {price!r}",
                expected_format="positive float",
                context={"index": index, "field": name},
            )

    if not isinstance(bar.volume, (int, float)) or not math.isfinite(bar.volume) or bar.volume < 0:
        raise MalformedDataError(
            f"Bar {index} volume must be a non-negative finite number, got {bar.volume!r}",
            expected_format="non-negative float",
            context={"index": index, "field": "volume"},
        )


def validate_bars(bars: Sequence[Bar]) -> None:
    """Validate every bar in a session."""
    for i, bar in enumerate(bars):
        validate_bar(bar, i)
