import random
from typing import Callable, List, Optional, Sequence

import pytest

from chart_indicators.continuous.data_types import Candle, CandleSeries

BASE_TS = 1_700_000_000_000
STEP_MS = 60_000


def make_candle(
    index: int,
    close: float,
    high: Optional[float] = None,
    low: Optional[float] = None,
    open_: Optional[float] = None,
    volume: float = 1000.0,
) -> Candle:
    """Candle at BASE_TS + index minutes; defaults to a flat bar at `close`."""
    open_ = close if open_ is None else open_
    return Candle(
        timestamp=BASE_TS + index * STEP_MS,
        open=open_,
        high=max(open_, close) if high is None else high,
        low=min(open_, close) if low is None else low,
        close=close,
        volume=volume,
    )


def candles_from_closes(closes: Sequence[float], volume: float = 1000.0) -> CandleSeries:
    return CandleSeries(make_candle(i, c, volume=volume) for i, c in enumerate(closes))


def random_walk(n: int, seed: int = 7, zero_volume_head: int = 0) -> CandleSeries:
    """Reproducible OHLCV random walk; the first `zero_volume_head` bars have no volume."""
    rng = random.Random(seed)
    candles: List[Candle] = []
    price = 100.0
    for i in range(n):
        open_ = price
        close = max(1.0, open_ + rng.uniform(-2.0, 2.0))
        high = max(open_, close) + rng.uniform(0.0, 1.0)
        low = max(0.5, min(open_, close) - rng.uniform(0.0, 1.0))
        volume = 0.0 if i < zero_volume_head else float(rng.randint(100, 5000))
        candles.append(make_candle(i, close, high=high, low=low, open_=open_, volume=volume))
        price = close
    return CandleSeries(candles)


@pytest.fixture
def closes_candles() -> Callable[..., CandleSeries]:
    """Factory: flat candles from a list of closes."""
    return candles_from_closes


@pytest.fixture
def walk_candles() -> CandleSeries:
    """300-bar random walk, long enough for every default warm-up (SMA200)."""
    return random_walk(300, seed=11, zero_volume_head=3)


@pytest.fixture
def short_walk() -> CandleSeries:
    return random_walk(60, seed=3)
