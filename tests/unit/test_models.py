"""Tests for result records and the backtest report."""

from datetime import date, datetime, timezone

import pytest

from vab_app.data.models import (
    BacktestReport,
    SignalOutcome,
    SignalResult,
    TradeDirection,
    ValueArea,
)


def triggered(roi: float) -> SignalResult:
    return SignalResult(
        val=100.0,
        vah=110.0,
        triggered=True,
        outcome=SignalOutcome.TRIGGERED,
        direction=TradeDirection.LONG,
        entry_price=101.0,
        entry_time=datetime(2024, 3, 2, 1, 29, tzinfo=timezone.utc),
        exit_price=101.0 * (1 + roi / 100),
        exit_time=datetime(2024, 3, 2, 23, 59, tzinfo=timezone.utc),
        roi=roi,
    )


class TestValueArea:
    """Test ValueArea helpers"""

    def test_empty(self):
        va = ValueArea()
        assert va.is_empty
        assert va.coverage is None
        assert not va.contains(100.0)

    def test_contains_is_inclusive(self):
        va = ValueArea(val=100.0, vah=110.0, poc=104.0, total_volume=10.0, covered_volume=7.5)

        assert va.contains(100.0)
        assert va.contains(110.0)
        assert not va.contains(99.99)
        assert va.coverage == pytest.approx(0.75)


class TestSignalResult:
    """Test SignalResult constructors and serialization"""

    def test_insufficient_data_without_value_area(self):
        result = SignalResult.insufficient_data()

        assert result.triggered is False
        assert result.outcome == SignalOutcome.INSUFFICIENT_DATA
        assert result.val is None

    def test_not_triggered_keeps_bounds(self):
        va = ValueArea(val=1.0, vah=2.0, poc=1.5)

        result = SignalResult.not_triggered(va, SignalOutcome.NO_ENTRY, TradeDirection.SHORT)

        assert (result.val, result.vah) == (1.0, 2.0)
        assert result.direction == TradeDirection.SHORT
        assert result.roi is None

    def test_to_dict(self):
        data = triggered(2.5).to_dict()

        assert data["outcome"] == "triggered"
        assert data["direction"] == "long"
        assert data["entry_time"] == "2024-03-02T01:29:00+00:00"
        assert data["target_hit_time"] is None
        assert data["roi"] == 2.5


class TestBacktestReport:
    """Test report flattening and statistics"""

    @pytest.fixture
    def report(self):
        d1, d2, d3 = date(2024, 3, 1), date(2024, 3, 2), date(2024, 3, 3)
        return BacktestReport(
            symbols=("ETHUSDT", "BTCUSDT"),
            days=(d1, d2, d3),
            results={
                d1: {"ETHUSDT": triggered(2.0), "BTCUSDT": None},
                d2: {"ETHUSDT": triggered(-1.0), "BTCUSDT": SignalResult.insufficient_data()},
                d3: {"ETHUSDT": triggered(4.0), "BTCUSDT": triggered(1.0)},
            },
        )

    def test_rows_day_major(self, report):
        rows = report.rows()

        assert len(rows) == 6
        assert [(day.day, symbol) for day, symbol, _ in rows[:2]] == [(1, "ETHUSDT"), (1, "BTCUSDT")]
        assert rows[1][2] is None

    def test_summary(self, report):
        summary = report.summary()

        eth = summary["ETHUSDT"]
        assert eth["trades"] == 3
        assert eth["wins"] == 2
        assert eth["losses"] == 1
        assert eth["breakeven"] == 0
        assert eth["win_rate"] == pytest.approx(2 / 3)
        assert eth["average_roi"] == pytest.approx(5.0 / 3)
        assert eth["total_roi"] == pytest.approx(5.0)
        assert eth["failed_cells"] == 0

        btc = summary["BTCUSDT"]
        assert btc["trades"] == 1
        assert btc["failed_cells"] == 1

    def test_flat_trade_is_breakeven(self):
        day = date(2024, 3, 1)
        report = BacktestReport(symbols=("ETHUSDT",), days=(day,),
                                results={day: {"ETHUSDT": triggered(0.0)}})

        stats = report.summary()["ETHUSDT"]
        assert stats["trades"] == 1
        assert stats["wins"] == 0
        assert stats["losses"] == 0
        assert stats["breakeven"] == 1

    def test_summary_without_trades(self):
        report = BacktestReport(symbols=("ETHUSDT",), days=(date(2024, 3, 1),),
                                results={date(2024, 3, 1): {"ETHUSDT": SignalResult()}})

        stats = report.summary()["ETHUSDT"]
        assert stats["trades"] == 0
        assert stats["win_rate"] is None
        assert stats["average_roi"] is None
        assert stats["total_roi"] == 0.0

    def test_to_dict(self, report):
        data = report.to_dict()

        assert data["days"] == ["2024-03-01", "2024-03-02", "2024-03-03"]
        assert data["results"]["2024-03-01"]["BTCUSDT"] is None
        assert data["results"]["2024-03-03"]["ETHUSDT"]["roi"] == 4.0
        assert "summary" in data
