"""
Core data types for indicator computation.

Candles flow in, IndicatorSeries flow out. Both sides are immutable; the
only mutable state in the engine is the per-kernel state owned by a
streaming session.
"""

import math
from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
    overload,
)

from ..errors import InvalidCandleError, InvalidParamsError, UnsortedSeriesError

# =============================================================================
# CANDLES
# =============================================================================


@dataclass(frozen=True, slots=True)
class Candle:
    """One OHLCV bucket. Timestamp is epoch milliseconds."""

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float

    @property
    def typical_price(self) -> float:
        """(high + low + close) / 3"""
        return (self.high + self.low + self.close) / 3

    def validate(self, index: Optional[int] = None) -> None:
        """Raise InvalidCandleError unless the candle is well formed."""
        if isinstance(self.timestamp, bool) or not isinstance(self.timestamp, int):
            raise InvalidCandleError(f"timestamp must be an int, got {self.timestamp!r}", index)

        for name in ("open", "high", "low", "close", "volume"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidCandleError(f"{name} must be a number, got {value!r}", index)

        for name in ("open", "high", "low", "close"):
            price = getattr(self, name)
            if not math.isfinite(price) or price <= 0:
                raise InvalidCandleError(f"{name} must be positive, got {price!r}", index)

        if not math.isfinite(self.volume) or self.volume < 0:
            raise InvalidCandleError(f"volume must be non-negative, got {self.volume!r}", index)

        body_low = min(self.open, self.close)
        body_high = max(self.open, self.close)
        if not (self.low <= body_low and body_high <= self.high):
            raise InvalidCandleError(
                f"OHLC out of order (o={self.open}, h={self.high}, l={self.low}, c={self.close})",
                index,
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Candle":
        """Build from a JSON-like mapping (timestamp, open, high, low, close, volume)."""
        try:
            return cls(
                timestamp=int(data["timestamp"]),
                open=float(data["open"]),
                high=float(data["high"]),
                low=float(data["low"]),
                close=float(data["close"]),
                volume=float(data.get("volume", 0.0)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidCandleError(f"malformed candle payload {data!r}: {e}") from e


class CandleSeries(Sequence[Candle]):
    """
    Immutable, strictly timestamp-ordered sequence of validated candles.

    The constructor never sorts, dedupes or repairs: any malformed candle
    or ordering violation fails the whole series.
    """

    __slots__ = ("_candles",)

    def __init__(self, candles: Iterable[Candle] = ()):
        items = tuple(candles)
        previous_ts: Optional[int] = None
        for i, candle in enumerate(items):
            if not isinstance(candle, Candle):
                raise InvalidCandleError(f"expected Candle, got {type(candle).__name__}", i)
            candle.validate(i)
            if previous_ts is not None and candle.timestamp <= previous_ts:
                raise UnsortedSeriesError(previous_ts, candle.timestamp)
            previous_ts = candle.timestamp
        self._candles: Tuple[Candle, ...] = items

    @classmethod
    def from_dicts(cls, rows: Iterable[Mapping[str, Any]]) -> "CandleSeries":
        return cls(Candle.from_dict(row) for row in rows)

    @classmethod
    def coerce(cls, candles: Union["CandleSeries", Iterable[Candle]]) -> "CandleSeries":
        """Return candles as a CandleSeries, validating if needed."""
        if isinstance(candles, CandleSeries):
            return candles
        return cls(candles)

    def __len__(self) -> int:
        return len(self._candles)

    @overload
    def __getitem__(self, index: int) -> Candle: ...

    @overload
    def __getitem__(self, index: slice) -> "CandleSeries": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            if index.step is not None and index.step < 0:
                raise UnsortedSeriesError(0, 0, "negative slice step reverses the series")
            series = CandleSeries.__new__(CandleSeries)
            series._candles = self._candles[index]
            return series
        return self._candles[index]

    def __iter__(self) -> Iterator[Candle]:
        return iter(self._candles)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CandleSeries):
            return self._candles == other._candles
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._candles)

    def __repr__(self) -> str:
        if not self._candles:
            return "CandleSeries([])"
        return (
            f"CandleSeries(len={len(self._candles)}, "
            f"first={self._candles[0].timestamp}, last={self._candles[-1].timestamp})"
        )

    def appended(self, candle: Candle) -> "CandleSeries":
        """New series with one more candle (validated)."""
        candle.validate(len(self._candles))
        if self._candles and candle.timestamp <= self._candles[-1].timestamp:
            raise UnsortedSeriesError(self._candles[-1].timestamp, candle.timestamp)
        series = CandleSeries.__new__(CandleSeries)
        series._candles = self._candles + (candle,)
        return series

    def timestamps(self) -> List[int]:
        return [c.timestamp for c in self._candles]

    def highs(self) -> List[float]:
        return [c.high for c in self._candles]

    def lows(self) -> List[float]:
        return [c.low for c in self._candles]

    def closes(self) -> List[float]:
        return [c.close for c in self._candles]

    def volumes(self) -> List[float]:
        return [c.volume for c in self._candles]


# =============================================================================
# PARAMETERS
# =============================================================================


def _require_period(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidParamsError(f"{name} must be an integer >= 1, got {value!r}")


@dataclass(frozen=True)
class IndicatorParams:
    """Base class for immutable indicator parameter sets."""

    def validate(self) -> None:
        """Raise InvalidParamsError if out of range."""


@dataclass(frozen=True)
class PeriodParams(IndicatorParams):
    """Single-period indicators (SMA, EMA, COG, RSI, Williams %R, CCI, ATR)."""

    period: int = 14
    source: str = "close"  # "close" or "volume"

    def validate(self) -> None:
        _require_period("period", self.period)
        if self.source not in ("close", "volume"):
            raise InvalidParamsError(f"source must be 'close' or 'volume', got {self.source!r}")


@dataclass(frozen=True)
class MACDParams(IndicatorParams):
    fast_period: int = 12
    slow_period: int = 26
    signal_period: int = 9

    def validate(self) -> None:
        _require_period("fast_period", self.fast_period)
        _require_period("slow_period", self.slow_period)
        _require_period("signal_period", self.signal_period)


@dataclass(frozen=True)
class BollingerParams(IndicatorParams):
    period: int = 20
    multiplier: float = 2.0  # Standard deviations from the middle band

    def validate(self) -> None:
        _require_period("period", self.period)
        if not math.isfinite(self.multiplier) or self.multiplier < 0:
            raise InvalidParamsError(f"multiplier must be >= 0, got {self.multiplier!r}")


@dataclass(frozen=True)
class StochasticParams(IndicatorParams):
    k_period: int = 14
    d_period: int = 3

    def validate(self) -> None:
        _require_period("k_period", self.k_period)
        _require_period("d_period", self.d_period)


@dataclass(frozen=True)
class VWAPParams(IndicatorParams):
    """VWAP is cumulative from the first candle and takes no period."""


# =============================================================================
# OUTPUT
# =============================================================================

IndicatorValue = Union[float, Dict[str, float]]


@dataclass(frozen=True)
class IndicatorPoint:
    """One output value anchored on an input candle's timestamp."""

    timestamp: int
    value: IndicatorValue


@dataclass(frozen=True)
class IndicatorSeries:
    """
    Timestamp-aligned output of one indicator.

    Timestamps are a subsequence of the input candle timestamps; consumers
    must not assume contiguous coverage.
    """

    indicator_id: str
    params: IndicatorParams
    points: Tuple[IndicatorPoint, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[IndicatorPoint]:
        return iter(self.points)

    @property
    def is_empty(self) -> bool:
        return not self.points

    def timestamps(self) -> List[int]:
        return [p.timestamp for p in self.points]

    def values(self) -> List[IndicatorValue]:
        """Raw point values (floats, or dicts for multi-line indicators)."""
        return [p.value for p in self.points]

    def line(self, name: str) -> List[float]:
        """One component of a multi-line indicator, skipping points without it."""
        return [p.value[name] for p in self.points if isinstance(p.value, dict) and name in p.value]

    def line_points(self, name: str) -> List[Tuple[int, float]]:
        """(timestamp, value) pairs for one component."""
        return [
            (p.timestamp, p.value[name])
            for p in self.points
            if isinstance(p.value, dict) and name in p.value
        ]

    def last(self) -> Optional[IndicatorPoint]:
        return self.points[-1] if self.points else None
