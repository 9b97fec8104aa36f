"""
Rolling Window accumulators for fixed-period indicators.

Each accumulator keeps the last `period` values in a RingBuffer and
maintains its aggregate in O(1) amortized time per push. `push()` returns
None until the window is full, then the aggregate over exactly the last
`period` values.
"""

import math
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, List, Optional, Tuple

from .ring_buffer import RingBuffer

DEFAULT_RECALC_INTERVAL = 10000


class WindowAccumulator(ABC):
    """
    Base class for rolling-window aggregates.

    Subclasses that keep running float sums rebuild them from the window
    every `recalc_interval` pushes to stop drift. The rebuild is keyed on
    the push count only, so two accumulators fed the same values always
    hold the same bits.
    """

    def __init__(self, period: int, recalc_interval: int = DEFAULT_RECALC_INTERVAL):
        if period <= 0:
            raise ValueError("period must be positive")
        self._period = period
        self._window = RingBuffer[float](period)
        self._recalc_interval = recalc_interval
        self._ops_since_recalc = 0

    @property
    def period(self) -> int:
        return self._period

    @property
    def count(self) -> int:
        """Values currently held (at most period)."""
        return len(self._window)

    @property
    def is_ready(self) -> bool:
        """True once `period` values have been pushed."""
        return self._window.is_full

    def values(self) -> List[float]:
        """Window contents, oldest first."""
        return self._window.to_list()

    def push(self, value: float) -> Optional[float]:
        """Add a value; return the aggregate, or None while not ready."""
        evicted = self._window.append(value)
        self._on_push(value, evicted)

        self._ops_since_recalc += 1
        if self._recalc_interval and self._ops_since_recalc >= self._recalc_interval:
            self._recalculate()
            self._ops_since_recalc = 0

        return self.aggregate if self.is_ready else None

    def reset(self) -> None:
        self._window.clear()
        self._ops_since_recalc = 0
        self._clear()

    def mean_absolute_deviation(self, center: float) -> float:
        """Mean of |x - center| over the current window."""
        n = len(self._window)
        if n == 0:
            return 0.0
        return sum(abs(v - center) for v in self._window) / n

    @property
    @abstractmethod
    def aggregate(self) -> float:
        """Current aggregate (meaningful once is_ready)."""

    @abstractmethod
    def _on_push(self, value: float, evicted: Optional[float]) -> None:
        ...

    @abstractmethod
    def _clear(self) -> None:
        ...

    def _recalculate(self) -> None:
        """Rebuild running sums from the window (no-op by default)."""


class RollingSum(WindowAccumulator):
    """
    Running sum over the window, with optional sum of squares.

    Eviction subtracts before the new value is added, so a period-1 window
    reproduces its input exactly.

    Squares are tracked on values shifted by a reference point: the first
    value pushed, re-anchored to the window mean on each rebuild. Variance
    is taken from the shifted sums, so it stays accurate when the spread is
    tiny next to the price level.
    """

    def __init__(
        self,
        period: int,
        track_squares: bool = False,
        recalc_interval: int = DEFAULT_RECALC_INTERVAL,
    ):
        super().__init__(period, recalc_interval)
        self._track_squares = track_squares
        self._sum = 0.0
        self._shift: Optional[float] = None
        self._shifted_sum = 0.0
        self._shifted_sum_sq = 0.0

    def _on_push(self, value: float, evicted: Optional[float]) -> None:
        if evicted is not None:
            self._sum -= evicted
        self._sum += value

        if self._track_squares:
            if self._shift is None:
                self._shift = value
            if evicted is not None:
                d = evicted - self._shift
                self._shifted_sum -= d
                self._shifted_sum_sq -= d * d
            d = value - self._shift
            self._shifted_sum += d
            self._shifted_sum_sq += d * d

    def _clear(self) -> None:
        self._sum = 0.0
        self._shift = None
        self._shifted_sum = 0.0
        self._shifted_sum_sq = 0.0

    def _recalculate(self) -> None:
        values = self._window.to_list()
        self._sum = sum(values)
        if self._track_squares and values:
            self._shift = self._sum / len(values)
            deviations = [v - self._shift for v in values]
            self._shifted_sum = sum(deviations)
            self._shifted_sum_sq = sum(d * d for d in deviations)

    @property
    def aggregate(self) -> float:
        return self._sum

    @property
    def sum(self) -> float:
        return self._sum

    @property
    def mean(self) -> float:
        n = len(self._window)
        return self._sum / n if n > 0 else 0.0

    @property
    def variance(self) -> float:
        """Population variance. Requires track_squares=True."""
        if not self._track_squares:
            raise RuntimeError("variance requires track_squares=True")
        n = len(self._window)
        if n == 0:
            return 0.0
        shifted_mean = self._shifted_sum / n
        variance = (self._shifted_sum_sq / n) - (shifted_mean * shifted_mean)
        # Cancellation can leave a tiny negative residue
        return variance if variance > 0.0 else 0.0

    @property
    def std(self) -> float:
        return math.sqrt(self.variance)


class _RollingExtreme(WindowAccumulator):
    """Monotonic-deque min/max. Each value enters and leaves the deque once."""

    def __init__(self, period: int):
        super().__init__(period, recalc_interval=0)
        self._candidates: Deque[Tuple[int, float]] = deque()
        self._seq = 0

    @staticmethod
    @abstractmethod
    def _dominates(new: float, old: float) -> bool:
        """True if `old` can never again be the extreme once `new` arrived."""

    def _on_push(self, value: float, evicted: Optional[float]) -> None:
        candidates = self._candidates
        while candidates and self._dominates(value, candidates[-1][1]):
            candidates.pop()
        candidates.append((self._seq, value))

        oldest_live = self._seq - self._period + 1
        while candidates[0][0] < oldest_live:
            candidates.popleft()

        self._seq += 1

    def _clear(self) -> None:
        self._candidates.clear()
        self._seq = 0

    @property
    def aggregate(self) -> float:
        if not self._candidates:
            raise ValueError("window is empty")
        return self._candidates[0][1]


class RollingMin(_RollingExtreme):
    """Lowest value in the window."""

    @staticmethod
    def _dominates(new: float, old: float) -> bool:
        return new <= old


class RollingMax(_RollingExtreme):
    """Highest value in the window."""

    @staticmethod
    def _dominates(new: float, old: float) -> bool:
        return new >= old


class RollingWeightedSum(WindowAccumulator):
    """
    Linearly weighted sum: newest value weight = period, oldest weight = 1.

    Once full, sliding by one drops every weight by one and gives the new
    value the top weight: WS' = WS - S + period * x, with S the plain sum
    before eviction.
    """

    def __init__(self, period: int, recalc_interval: int = DEFAULT_RECALC_INTERVAL):
        super().__init__(period, recalc_interval)
        self._sum = 0.0
        self._weighted_sum = 0.0
        self._weight_total = period * (period + 1) / 2

    def _on_push(self, value: float, evicted: Optional[float]) -> None:
        if evicted is None:
            # Filling: weights are 1..count
            self._weighted_sum += len(self._window) * value
            self._sum += value
        else:
            self._weighted_sum = self._weighted_sum - self._sum + self._period * value
            self._sum = self._sum - evicted + value

    def _clear(self) -> None:
        self._sum = 0.0
        self._weighted_sum = 0.0

    def _recalculate(self) -> None:
        values = self._window.to_list()
        self._sum = sum(values)
        self._weighted_sum = sum((i + 1) * v for i, v in enumerate(values))

    @property
    def aggregate(self) -> float:
        return self._weighted_sum

    @property
    def weight_total(self) -> float:
        """Sum of weights for a full window: period * (period + 1) / 2."""
        return self._weight_total

    @property
    def weighted_mean(self) -> float:
        return self._weighted_sum / self._weight_total
