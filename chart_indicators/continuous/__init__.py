"""
Candle data model and rolling-window primitives.

Streaming sessions live in `chart_indicators.continuous.session`; they are
not re-exported here because they depend on the engines package.
"""

from .data_types import (
    BollingerParams,
    Candle,
    CandleSeries,
    IndicatorParams,
    IndicatorPoint,
    IndicatorSeries,
    MACDParams,
    PeriodParams,
    StochasticParams,
    VWAPParams,
)
from .ring_buffer import RingBuffer
from .rolling_window import (
    RollingMax,
    RollingMin,
    RollingSum,
    RollingWeightedSum,
    WindowAccumulator,
)

__all__ = [
    "Candle",
    "CandleSeries",
    "IndicatorParams",
    "PeriodParams",
    "MACDParams",
    "BollingerParams",
    "StochasticParams",
    "VWAPParams",
    "IndicatorPoint",
    "IndicatorSeries",
    "RingBuffer",
    "WindowAccumulator",
    "RollingSum",
    "RollingMin",
    "RollingMax",
    "RollingWeightedSum",
]
