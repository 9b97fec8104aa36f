"""
Oscillator kernels: RSI, Stochastic, Williams %R and CCI.

Degenerate windows (no movement, zero range, zero deviation) map to fixed
fallback values instead of NaN or infinity:

    RSI         avg_gain == avg_loss == 0 -> 50, avg_loss == 0 -> 100
    Stochastic  highest high == lowest low -> %K = 50
    Williams %R highest high == lowest low -> 0
    CCI         mean absolute deviation == 0 -> 0
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..continuous.data_types import Candle, PeriodParams, StochasticParams
from ..continuous.rolling_window import RollingMax, RollingMin, RollingSum
from .kernel import IndicatorKernel, KernelState
from .smoothing import WilderSmoother

# =============================================================================
# RSI
# =============================================================================


def rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    """RSI = 100 - 100 / (1 + avg_gain / avg_loss), with flat-market fallbacks."""
    if avg_loss == 0:
        return 50.0 if avg_gain == 0 else 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


@dataclass
class RSIState(KernelState):
    prev_close: Optional[float] = None
    avg_gain: WilderSmoother = field(default_factory=lambda: WilderSmoother(1))
    avg_loss: WilderSmoother = field(default_factory=lambda: WilderSmoother(1))


class RSIKernel(IndicatorKernel):
    """
    Relative Strength Index with Wilder smoothing.

    Needs `period` close-to-close changes, i.e. period + 1 candles, before
    the first value.
    """

    name = "RSI"
    params_type = PeriodParams

    @property
    def warmup_period(self) -> int:
        return self.params.period + 1

    def new_state(self) -> RSIState:
        period = self.params.period
        return RSIState(avg_gain=WilderSmoother(period), avg_loss=WilderSmoother(period))

    def _step(self, state: RSIState, candle: Candle) -> Optional[float]:
        close = candle.close
        prev_close = state.prev_close
        state.prev_close = close
        if prev_close is None:
            return None

        gain = max(close - prev_close, 0.0)
        loss = max(prev_close - close, 0.0)
        avg_gain = state.avg_gain.update(gain)
        avg_loss = state.avg_loss.update(loss)

        if avg_gain is None or avg_loss is None:
            return None
        return rsi_from_averages(avg_gain, avg_loss)


# =============================================================================
# STOCHASTIC
# =============================================================================


@dataclass
class StochasticState(KernelState):
    highest: RollingMax = field(default_factory=lambda: RollingMax(1))
    lowest: RollingMin = field(default_factory=lambda: RollingMin(1))
    k_window: RollingSum = field(default_factory=lambda: RollingSum(1))


class StochasticKernel(IndicatorKernel):
    """
    Stochastic oscillator.

    %K = (close - LL) / (HH - LL) * 100 over k_period candles
    %D = SMA(d_period) of %K

    Points carry {"k": ..., "d": ...}; "d" is absent for the first
    d_period - 1 points while its own window fills.
    """

    name = "STOCH"
    params_type = StochasticParams

    @property
    def warmup_period(self) -> int:
        return self.params.k_period

    def new_state(self) -> StochasticState:
        k_period = self.params.k_period
        return StochasticState(
            highest=RollingMax(k_period),
            lowest=RollingMin(k_period),
            k_window=RollingSum(
                self.params.d_period,
                recalc_interval=self.config.accumulators.recalc_interval,
            ),
        )

    def _step(self, state: StochasticState, candle: Candle) -> Optional[Dict[str, float]]:
        highest = state.highest.push(candle.high)
        lowest = state.lowest.push(candle.low)
        if highest is None or lowest is None:
            return None

        price_range = highest - lowest
        if price_range == 0:
            k = 50.0
        else:
            k = (candle.close - lowest) / price_range * 100.0

        value = {"k": k}
        d_total = state.k_window.push(k)
        if d_total is not None:
            value["d"] = d_total / self.params.d_period
        return value


# =============================================================================
# WILLIAMS %R
# =============================================================================


@dataclass
class WilliamsRState(KernelState):
    highest: RollingMax = field(default_factory=lambda: RollingMax(1))
    lowest: RollingMin = field(default_factory=lambda: RollingMin(1))


class WilliamsRKernel(IndicatorKernel):
    """Williams %R = (HH - close) / (HH - LL) * -100, in [-100, 0]."""

    name = "WILLR"
    params_type = PeriodParams

    @property
    def warmup_period(self) -> int:
        return self.params.period

    def new_state(self) -> WilliamsRState:
        return WilliamsRState(
            highest=RollingMax(self.params.period),
            lowest=RollingMin(self.params.period),
        )

    def _step(self, state: WilliamsRState, candle: Candle) -> Optional[float]:
        highest = state.highest.push(candle.high)
        lowest = state.lowest.push(candle.low)
        if highest is None or lowest is None:
            return None

        price_range = highest - lowest
        if price_range == 0:
            return 0.0
        return (highest - candle.close) / price_range * -100.0


# =============================================================================
# CCI
# =============================================================================


@dataclass
class CCIState(KernelState):
    typical: RollingSum = field(default_factory=lambda: RollingSum(1))


class CCIKernel(IndicatorKernel):
    """
    Commodity Channel Index.

    CCI = (TP - SMA(TP)) / (c * MAD(TP)), TP = (high + low + close) / 3,
    c = 0.015 by default (OscillatorDefaults.cci_constant).
    """

    name = "CCI"
    params_type = PeriodParams

    @property
    def warmup_period(self) -> int:
        return self.params.period

    def new_state(self) -> CCIState:
        return CCIState(
            typical=RollingSum(
                self.params.period,
                recalc_interval=self.config.accumulators.recalc_interval,
            )
        )

    def _step(self, state: CCIState, candle: Candle) -> Optional[float]:
        typical_price = candle.typical_price
        total = state.typical.push(typical_price)
        if total is None:
            return None

        mean = total / self.params.period
        deviation = state.typical.mean_absolute_deviation(mean)
        if deviation == 0:
            return 0.0
        return (typical_price - mean) / (self.config.oscillators.cci_constant * deviation)
