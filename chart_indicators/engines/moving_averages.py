"""
Moving-average kernels: SMA, EMA and COG (linearly weighted mean).

All three take PeriodParams and produce their first value on candle
index period - 1.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..continuous.data_types import Candle, PeriodParams
from ..continuous.rolling_window import RollingSum, RollingWeightedSum
from .kernel import IndicatorKernel, KernelState
from .smoothing import EMASmoother


def _source_value(candle: Candle, source: str) -> float:
    return candle.volume if source == "volume" else candle.close


# =============================================================================
# SMA
# =============================================================================


@dataclass
class SMAState(KernelState):
    window: RollingSum = field(default_factory=lambda: RollingSum(1))


class SMAKernel(IndicatorKernel):
    """
    Simple moving average of closes (or volumes with source="volume").

    SMA[t] = mean(x[t-period+1 .. t])
    """

    name = "SMA"
    params_type = PeriodParams

    @property
    def warmup_period(self) -> int:
        return self.params.period

    def new_state(self) -> SMAState:
        return SMAState(
            window=RollingSum(
                self.params.period,
                recalc_interval=self.config.accumulators.recalc_interval,
            )
        )

    def _step(self, state: SMAState, candle: Candle) -> Optional[float]:
        total = state.window.push(_source_value(candle, self.params.source))
        if total is None:
            return None
        return total / self.params.period


# =============================================================================
# EMA
# =============================================================================


@dataclass
class EMAState(KernelState):
    ema: EMASmoother = field(default_factory=lambda: EMASmoother(1))


class EMAKernel(IndicatorKernel):
    """
    Exponential moving average, seeded with the SMA of the first `period` closes.

    EMA[t] = (close[t] - EMA[t-1]) * 2/(period+1) + EMA[t-1]
    """

    name = "EMA"
    params_type = PeriodParams

    @property
    def warmup_period(self) -> int:
        return self.params.period

    def new_state(self) -> EMAState:
        return EMAState(ema=EMASmoother(self.params.period))

    def _step(self, state: EMAState, candle: Candle) -> Optional[float]:
        return state.ema.update(_source_value(candle, self.params.source))


# =============================================================================
# COG
# =============================================================================


@dataclass
class COGState(KernelState):
    window: RollingWeightedSum = field(default_factory=lambda: RollingWeightedSum(1))


class COGKernel(IndicatorKernel):
    """
    Center of gravity: linearly weighted mean of closes.

    The newest close has weight `period`, the oldest in the window weight 1:
    COG[t] = sum(w_i * close_i) / (period * (period + 1) / 2)
    """

    name = "COG"
    params_type = PeriodParams

    @property
    def warmup_period(self) -> int:
        return self.params.period

    def new_state(self) -> COGState:
        return COGState(
            window=RollingWeightedSum(
                self.params.period,
                recalc_interval=self.config.accumulators.recalc_interval,
            )
        )

    def _step(self, state: COGState, candle: Candle) -> Optional[float]:
        weighted = state.window.push(_source_value(candle, self.params.source))
        if weighted is None:
            return None
        return weighted / state.window.weight_total
