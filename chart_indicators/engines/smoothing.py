"""
Recursive smoothers shared by the kernels.

Both smoothers seed with the arithmetic mean of their first `period` inputs
and are O(1) per update afterwards.
"""

from typing import Optional


class EMASmoother:
    """Exponential moving average: ema = (x - ema) * 2/(period+1) + ema."""

    __slots__ = ("period", "alpha", "value", "_seed_sum", "_seed_count")

    def __init__(self, period: int):
        self.period = period
        self.alpha = 2.0 / (period + 1.0)
        self.value: Optional[float] = None
        self._seed_sum = 0.0
        self._seed_count = 0

    def update(self, x: float) -> Optional[float]:
        """Feed one input; returns the EMA or None while seeding."""
        if self.value is None:
            self._seed_sum += x
            self._seed_count += 1
            if self._seed_count == self.period:
                self.value = self._seed_sum / self.period
            return self.value

        self.value = (x - self.value) * self.alpha + self.value
        return self.value


class WilderSmoother:
    """Wilder's running average: avg = (avg * (period - 1) + x) / period."""

    __slots__ = ("period", "value", "_seed_sum", "_seed_count")

    def __init__(self, period: int):
        self.period = period
        self.value: Optional[float] = None
        self._seed_sum = 0.0
        self._seed_count = 0

    def update(self, x: float) -> Optional[float]:
        if self.value is None:
            self._seed_sum += x
            self._seed_count += 1
            if self._seed_count == self.period:
                self.value = self._seed_sum / self.period
            return self.value

        self.value = (self.value * (self.period - 1) + x) / self.period
        return self.value
