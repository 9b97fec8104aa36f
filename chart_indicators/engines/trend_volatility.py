"""
Trend and volatility kernels: MACD, Bollinger Bands and ATR.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..continuous.data_types import BollingerParams, Candle, MACDParams, PeriodParams
from ..continuous.rolling_window import RollingSum
from .kernel import IndicatorKernel, KernelState
from .smoothing import EMASmoother, WilderSmoother

# =============================================================================
# MACD
# =============================================================================


@dataclass
class MACDState(KernelState):
    fast: EMASmoother = field(default_factory=lambda: EMASmoother(1))
    slow: EMASmoother = field(default_factory=lambda: EMASmoother(1))
    signal: EMASmoother = field(default_factory=lambda: EMASmoother(1))


class MACDKernel(IndicatorKernel):
    """
    Moving Average Convergence Divergence.

    - MACD line = EMA(fast) - EMA(slow), defined once both EMAs are seeded
    - Signal line = EMA(signal) of the MACD line
    - Histogram = MACD line - signal line

    All three lines are emitted together, starting when the signal EMA is
    seeded: warm-up = max(fast, slow) + signal - 1.
    """

    name = "MACD"
    params_type = MACDParams

    @property
    def warmup_period(self) -> int:
        p = self.params
        return max(p.fast_period, p.slow_period) + p.signal_period - 1

    def new_state(self) -> MACDState:
        p = self.params
        return MACDState(
            fast=EMASmoother(p.fast_period),
            slow=EMASmoother(p.slow_period),
            signal=EMASmoother(p.signal_period),
        )

    def _step(self, state: MACDState, candle: Candle) -> Optional[Dict[str, float]]:
        fast = state.fast.update(candle.close)
        slow = state.slow.update(candle.close)
        if fast is None or slow is None:
            return None

        macd = fast - slow
        signal = state.signal.update(macd)
        if signal is None:
            return None

        return {"macd": macd, "signal": signal, "histogram": macd - signal}


# =============================================================================
# BOLLINGER BANDS
# =============================================================================


@dataclass
class BollingerState(KernelState):
    window: RollingSum = field(default_factory=lambda: RollingSum(1, track_squares=True))


class BollingerKernel(IndicatorKernel):
    """
    Bollinger Bands over closes.

    middle = SMA(period), upper/lower = middle +/- multiplier * population std.
    """

    name = "BB"
    params_type = BollingerParams

    @property
    def warmup_period(self) -> int:
        return self.params.period

    def new_state(self) -> BollingerState:
        return BollingerState(
            window=RollingSum(
                self.params.period,
                track_squares=True,
                recalc_interval=self.config.accumulators.recalc_interval,
            )
        )

    def _step(self, state: BollingerState, candle: Candle) -> Optional[Dict[str, float]]:
        total = state.window.push(candle.close)
        if total is None:
            return None

        middle = total / self.params.period
        width = self.params.multiplier * state.window.std
        return {"upper": middle + width, "middle": middle, "lower": middle - width}


# =============================================================================
# ATR
# =============================================================================


def true_range(high: float, low: float, prev_close: Optional[float]) -> float:
    """max(H-L, |H-prevC|, |L-prevC|); plain H-L when there is no previous close."""
    if prev_close is None:
        return high - low
    return max(high - low, abs(high - prev_close), abs(low - prev_close))


@dataclass
class ATRState(KernelState):
    prev_close: Optional[float] = None
    average: WilderSmoother = field(default_factory=lambda: WilderSmoother(1))


class ATRKernel(IndicatorKernel):
    """Average True Range: Wilder-smoothed true range, first value on index period - 1."""

    name = "ATR"
    params_type = PeriodParams

    @property
    def warmup_period(self) -> int:
        return self.params.period

    def new_state(self) -> ATRState:
        return ATRState(average=WilderSmoother(self.params.period))

    def _step(self, state: ATRState, candle: Candle) -> Optional[float]:
        tr = true_range(candle.high, candle.low, state.prev_close)
        state.prev_close = candle.close
        return state.average.update(tr)
