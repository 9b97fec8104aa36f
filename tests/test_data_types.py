"""
Tests for candles, candle series and indicator parameters.
"""

import math

import pytest

from chart_indicators.continuous.data_types import (
    BollingerParams,
    Candle,
    CandleSeries,
    IndicatorPoint,
    IndicatorSeries,
    MACDParams,
    PeriodParams,
    StochasticParams,
)
from chart_indicators.errors import (
    InvalidCandleError,
    InvalidParamsError,
    OutOfOrderError,
    UnsortedSeriesError,
)
from conftest import BASE_TS, make_candle


class TestCandle:
    """Tests for Candle validation."""

    def test_valid_candle(self):
        candle = Candle(BASE_TS, 10.0, 12.0, 9.0, 11.0, 500.0)
        candle.validate()
        assert candle.typical_price == pytest.approx((12.0 + 9.0 + 11.0) / 3)

    @pytest.mark.parametrize(
        "fields",
        [
            (10.0, 9.0, 11.0, 10.0, 1.0),  # high < low
            (10.0, 10.5, 9.0, 11.0, 1.0),  # close above high
            (8.0, 10.0, 9.0, 9.5, 1.0),  # open below low
            (0.0, 10.0, 0.0, 5.0, 1.0),  # zero price
            (10.0, 11.0, 9.0, 10.0, -1.0),  # negative volume
            (10.0, math.inf, 9.0, 10.0, 1.0),
            (10.0, 11.0, 9.0, math.nan, 1.0),
        ],
    )
    def test_invalid_candles(self, fields):
        with pytest.raises(InvalidCandleError):
            Candle(BASE_TS, *fields).validate()

    @pytest.mark.parametrize(
        "fields",
        [
            (10.0, 11.0, 9.0, "10", 1.0),
            (10.0, 11.0, None, 10.0, 1.0),
            (10.0, 11.0, 9.0, 10.0, "1000"),
            (True, 11.0, 9.0, 10.0, 1.0),
        ],
    )
    def test_non_numeric_fields(self, fields):
        with pytest.raises(InvalidCandleError):
            Candle(BASE_TS, *fields).validate()

    def test_zero_volume_is_valid(self):
        Candle(BASE_TS, 10.0, 10.0, 10.0, 10.0, 0.0).validate()

    def test_timestamp_must_be_int(self):
        with pytest.raises(InvalidCandleError):
            Candle(float(BASE_TS), 10.0, 11.0, 9.0, 10.0, 1.0).validate()

    def test_error_carries_index(self):
        with pytest.raises(InvalidCandleError) as exc_info:
            Candle(BASE_TS, 10.0, 9.0, 11.0, 10.0, 1.0).validate(index=7)
        assert exc_info.value.index == 7
        assert "#7" in str(exc_info.value)

    def test_from_dict(self):
        candle = Candle.from_dict(
            {"timestamp": BASE_TS, "open": "10", "high": 11, "low": 9, "close": 10.5}
        )
        assert candle.close == 10.5
        assert candle.volume == 0.0

    def test_from_dict_malformed(self):
        with pytest.raises(InvalidCandleError):
            Candle.from_dict({"timestamp": BASE_TS, "open": 10})


class TestCandleSeries:
    """Tests for CandleSeries."""

    def test_accepts_sorted(self):
        series = CandleSeries(make_candle(i, 10.0 + i) for i in range(5))
        assert len(series) == 5
        assert series.closes() == [10.0, 11.0, 12.0, 13.0, 14.0]

    def test_rejects_unsorted(self):
        candles = [make_candle(1, 10.0), make_candle(0, 11.0)]
        with pytest.raises(UnsortedSeriesError):
            CandleSeries(candles)

    def test_rejects_duplicate_timestamps(self):
        with pytest.raises(OutOfOrderError):
            CandleSeries([make_candle(0, 10.0), make_candle(0, 11.0)])

    def test_invalid_candle_anywhere_fails_whole_series(self):
        candles = [make_candle(i, 10.0) for i in range(10)]
        candles[6] = Candle(candles[6].timestamp, 10.0, 9.0, 11.0, 10.0, 1.0)
        with pytest.raises(InvalidCandleError) as exc_info:
            CandleSeries(candles)
        assert exc_info.value.index == 6

    def test_slice_is_series(self):
        series = CandleSeries(make_candle(i, 10.0) for i in range(5))
        head = series[:3]
        assert isinstance(head, CandleSeries)
        assert len(head) == 3
        assert series[-1].timestamp == series.timestamps()[-1]

    def test_reverse_slice_rejected(self):
        series = CandleSeries(make_candle(i, 10.0) for i in range(3))
        with pytest.raises(UnsortedSeriesError):
            series[::-1]

    def test_appended(self):
        series = CandleSeries([make_candle(0, 10.0)])
        longer = series.appended(make_candle(1, 11.0))
        assert len(series) == 1
        assert len(longer) == 2
        with pytest.raises(UnsortedSeriesError):
            longer.appended(make_candle(1, 12.0))

    def test_equality(self):
        a = CandleSeries(make_candle(i, 10.0) for i in range(3))
        b = CandleSeries(make_candle(i, 10.0) for i in range(3))
        assert a == b
        assert hash(a) == hash(b)

    def test_from_dicts(self):
        rows = [
            {"timestamp": BASE_TS + i, "open": 1, "high": 2, "low": 1, "close": 2, "volume": 3}
            for i in range(3)
        ]
        assert len(CandleSeries.from_dicts(rows)) == 3


class TestParams:
    """Tests for indicator parameter validation."""

    @pytest.mark.parametrize(
        "params",
        [
            PeriodParams(0),
            PeriodParams(-3),
            PeriodParams(True),
            PeriodParams(14, source="open"),
            MACDParams(12, 0, 9),
            BollingerParams(20, -1.0),
            StochasticParams(14, 0),
        ],
    )
    def test_invalid(self, params):
        with pytest.raises(InvalidParamsError):
            params.validate()

    def test_invalid_params_is_value_error(self):
        with pytest.raises(ValueError):
            PeriodParams(0).validate()

    def test_params_are_frozen(self):
        params = PeriodParams(14)
        with pytest.raises(Exception):
            params.period = 20


class TestIndicatorSeries:
    """Tests for IndicatorSeries accessors."""

    def test_line_accessors(self):
        series = IndicatorSeries(
            "STOCH",
            StochasticParams(),
            (
                IndicatorPoint(1, {"k": 10.0}),
                IndicatorPoint(2, {"k": 20.0, "d": 15.0}),
            ),
        )
        assert series.line("k") == [10.0, 20.0]
        assert series.line("d") == [15.0]
        assert series.line_points("d") == [(2, 15.0)]
        assert series.last().timestamp == 2

    def test_empty(self):
        series = IndicatorSeries("RSI", PeriodParams())
        assert series.is_empty
        assert len(series) == 0
        assert series.last() is None
