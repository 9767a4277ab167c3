"""Volume profile calculations"""

from .value_area import (
    ValueAreaCalculator,
    build_price_volume_map,
    compute_value_area,
    find_point_of_control,
    quantize_price,
)

__all__ = [
    "ValueAreaCalculator",
    "build_price_volume_map",
    "compute_value_area",
    "find_point_of_control",
    "quantize_price",
]
