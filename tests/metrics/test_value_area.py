"""Tests for value area and point of control calculations"""

import math

import pytest

from vab_app.config.defaults import ValueAreaParams
from vab_app.errors import MalformedDataError
from vab_app.metrics.value_area import (
    ValueAreaCalculator,
    build_price_volume_map,
    compute_value_area,
    find_point_of_control,
    quantize_price,
)


class TestPriceVolumeMap:
    """Test quantized price bucketing"""

    def test_closes_rounded_to_precision(self, make_bars):
        bars = make_bars([100.001, 100.004, 100.009], volumes=[1.0, 2.0, 3.0])

        price_volume = build_price_volume_map(bars, price_precision=2)

        assert set(price_volume) == {100.0, 100.01}
        assert price_volume[100.0] == pytest.approx(3.0)
        assert price_volume[100.01] == pytest.approx(3.0)

    def test_zero_precision_buckets_whole_numbers(self, make_bars):
        bars = make_bars([100.4, 100.6, 101.2], volumes=[1.0, 1.0, 1.0])

        price_volume = build_price_volume_map(bars, price_precision=0)

        assert price_volume == {100.0: 1.0, 101.0: 2.0}

    def test_total_volume_preserved(self, make_bars):
        volumes = [3.5, 1.25, 7.0, 0.0, 2.25]
        bars = make_bars([10.0, 10.5, 10.0, 11.0, 10.5], volumes=volumes)

        price_volume = build_price_volume_map(bars)

        assert sum(price_volume.values()) == pytest.approx(sum(volumes))

    def test_half_rounds_up(self, make_bars):
        bars = make_bars([100.125, 100.135], volumes=[10.0, 4.0])

        price_volume = build_price_volume_map(bars, price_precision=2)

        assert price_volume == {100.13: 10.0, 100.14: 4.0}

    def test_half_rounding_moves_poc(self, make_bars):
        # 100.125 joins the 100.13 bucket, outweighing 100.12
        bars = make_bars([100.125, 100.13, 100.12], volumes=[5.0, 5.0, 8.0])

        va = compute_value_area(bars, target_fraction=0.5)

        assert va.poc == 100.13

    def test_empty_bars(self):
        assert build_price_volume_map([]) == {}


class TestPointOfControl:
    """Test POC selection"""

    def test_largest_volume_wins(self):
        assert find_point_of_control({100.0: 10.0, 101.0: 50.0, 102.0: 10.0}) == 101.0

    def test_tie_goes_to_lowest_price(self):
        assert find_point_of_control({102.0: 20.0, 100.0: 20.0, 101.0: 5.0}) == 100.0

    def test_empty_map(self):
        assert find_point_of_control({}) is None


class TestComputeValueArea:
    """Test value area expansion"""

    def test_poc_alone_covers_target(self, make_bars):
        bars = make_bars([100.0, 101.0, 102.0], volumes=[10.0, 50.0, 10.0])

        va = compute_value_area(bars, target_fraction=0.7)

        assert va.poc == 101.0
        assert va.val == 101.0
        assert va.vah == 101.0
        assert va.covered_volume == pytest.approx(50.0)
        assert va.total_volume == pytest.approx(70.0)

    def test_expansion_tie_extends_downward(self, make_bars):
        bars = make_bars([99.0, 100.0, 101.0], volumes=[10.0, 30.0, 10.0])

        va = compute_value_area(bars, target_fraction=0.8)

        assert (va.val, va.poc, va.vah) == (99.0, 100.0, 100.0)

    def test_extends_toward_larger_neighbour(self, make_bars):
        bars = make_bars([99.0, 100.0, 101.0], volumes=[5.0, 30.0, 15.0])

        va = compute_value_area(bars, target_fraction=0.8)

        assert (va.val, va.vah) == (100.0, 101.0)

    def test_exhausted_upper_side_extends_downward(self, make_bars):
        bars = make_bars([100.0, 101.0], volumes=[10.0, 30.0])

        va = compute_value_area(bars, target_fraction=1.0)

        assert (va.val, va.poc, va.vah) == (100.0, 101.0, 101.0)

    def test_exhausted_lower_side_extends_upward(self, make_bars):
        bars = make_bars([100.0, 101.0, 102.0], volumes=[30.0, 10.0, 5.0])

        va = compute_value_area(bars, target_fraction=0.85)

        assert (va.val, va.poc, va.vah) == (100.0, 100.0, 101.0)

    def test_gaps_between_prices_skipped(self, make_bars):
        bars = make_bars([100.0, 105.0, 200.0], volumes=[10.0, 40.0, 30.0])

        va = compute_value_area(bars, target_fraction=0.75)

        assert (va.val, va.vah) == (105.0, 200.0)

    def test_uniform_volume_contains_poc(self, make_bars):
        closes = [float(p) for p in range(100, 111)]
        bars = make_bars(closes, volumes=[1.0] * len(closes))

        va = compute_value_area(bars, target_fraction=0.7)

        # Uniform ties resolve to the lowest price; nothing below it
        assert va.poc == 100.0
        assert va.val <= va.poc <= va.vah
        assert (va.val, va.vah) == (100.0, 107.0)

    def test_full_target_spans_observed_range(self, make_bars):
        bars = make_bars([103.0, 99.5, 101.0, 107.25, 100.0],
                         volumes=[2.0, 9.0, 4.0, 1.0, 3.0])

        va = compute_value_area(bars, target_fraction=1.0)

        assert va.val == 99.5
        assert va.vah == 107.25
        assert va.covered_volume == pytest.approx(va.total_volume)

    def test_tiny_target_collapses_to_poc(self, make_bars):
        bars = make_bars([100.0, 101.0, 102.0, 103.0], volumes=[4.0, 3.0, 9.0, 1.0])

        va = compute_value_area(bars, target_fraction=1e-9)

        assert va.val == va.vah == va.poc == 102.0

    def test_coverage_meets_target(self, make_bars):
        closes = [100.0, 100.5, 101.0, 101.5, 102.0, 102.5, 103.0]
        volumes = [3.0, 8.0, 12.0, 20.0, 9.0, 6.0, 2.0]
        bars = make_bars(closes, volumes=volumes)

        for target in (0.3, 0.5, 0.7, 0.8, 0.95):
            va = compute_value_area(bars, target_fraction=target)
            assert va.covered_volume >= target * va.total_volume
            assert va.val <= va.poc <= va.vah

    def test_band_grows_monotonically_with_target(self, make_bars):
        closes = [100.0, 100.5, 101.0, 101.5, 102.0, 102.5, 103.0]
        volumes = [3.0, 8.0, 12.0, 20.0, 9.0, 6.0, 2.0]
        bars = make_bars(closes, volumes=volumes)

        previous = None
        for target in (0.1, 0.3, 0.5, 0.7, 0.9, 1.0):
            va = compute_value_area(bars, target_fraction=target)
            if previous is not None:
                assert va.covered_volume >= previous.covered_volume
                assert va.val <= previous.val
                assert va.vah >= previous.vah
            previous = va

    def test_bounds_are_observed_prices(self, make_bars):
        closes = [100.013, 100.2, 100.456, 100.9]
        bars = make_bars(closes, volumes=[1.0, 5.0, 2.0, 2.0])

        va = compute_value_area(bars, target_fraction=0.7)
        observed = set(build_price_volume_map(bars))

        assert va.val in observed
        assert va.vah in observed
        assert va.poc in observed

    def test_idempotent(self, make_bars):
        bars = make_bars([100.0, 101.0, 101.0, 102.0], volumes=[1.0, 2.0, 3.0, 4.0])
        snapshot = list(bars)

        first = compute_value_area(bars, target_fraction=0.7)
        second = compute_value_area(bars, target_fraction=0.7)

        assert first == second
        assert bars == snapshot


class TestInsufficientData:
    """Test empty and zero-volume sessions"""

    def test_empty_bars(self):
        va = compute_value_area([])

        assert va.is_empty
        assert va.val is None
        assert va.vah is None
        assert va.poc is None

    def test_zero_volume(self, make_bars):
        bars = make_bars([100.0, 101.0], volumes=[0.0, 0.0])

        va = compute_value_area(bars)

        assert va.is_empty
        assert va.total_volume == 0.0


class TestPreconditions:
    """Test rejection of malformed input"""

    @pytest.mark.parametrize("target", [0.0, -0.5, 1.01])
    def test_target_fraction_out_of_range(self, make_bars, target):
        with pytest.raises(MalformedDataError):
            compute_value_area(make_bars([100.0]), target_fraction=target)

    def test_negative_precision(self, make_bars):
        with pytest.raises(MalformedDataError):
            compute_value_area(make_bars([100.0]), price_precision=-1)

    def test_negative_volume(self, make_bars):
        bars = make_bars([100.0, 101.0], volumes=[1.0, -1.0])

        with pytest.raises(MalformedDataError) as exc_info:
            compute_value_area(bars)
        assert exc_info.value.context["index"] == 1

    def test_non_finite_close(self, make_bars):
        bars = make_bars([100.0, 101.0])
        bars[1] = bars[1].__class__(
            open_time=bars[1].open_time,
            close_time=bars[1].close_time,
            open=bars[1].open,
            high=bars[1].high,
            low=bars[1].low,
            close=math.nan,
            volume=1.0,
        )

        with pytest.raises(MalformedDataError):
            compute_value_area(bars)


class TestValueAreaCalculator:
    """Test ValueAreaCalculator class"""

    def test_defaults(self):
        calc = ValueAreaCalculator()
        assert calc.params.target_fraction == 0.70
        assert calc.params.price_precision == 2

    def test_uses_bound_params(self, make_bars):
        bars = make_bars([100.0, 101.0, 102.0], volumes=[10.0, 50.0, 10.0])

        narrow = ValueAreaCalculator(ValueAreaParams(target_fraction=0.7)).calculate(bars)
        wide = ValueAreaCalculator(ValueAreaParams(target_fraction=1.0)).calculate(bars)

        assert (narrow.val, narrow.vah) == (101.0, 101.0)
        assert (wide.val, wide.vah) == (100.0, 102.0)

    def test_empty_session(self):
        assert ValueAreaCalculator().calculate([]).is_empty


class TestQuantizePrice:
    """Test half-up price rounding"""

    @pytest.mark.parametrize("price,precision,expected", [
        (100.125, 2, 100.13),
        (2.5, 0, 3.0),
        (0.000012345, 8, 0.00001235),
        (100.124999, 2, 100.12),
    ])
    def test_rounding(self, price, precision, expected):
        assert quantize_price(price, precision) == expected
