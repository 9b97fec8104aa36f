"""
Volume-weighted kernels.

VWAP here is cumulative from the first candle of the series (no session
resets): VWAP[t] = sum(TP_i * V_i) / sum(V_i) for i = 0..t.
"""

from dataclasses import dataclass
from typing import Optional

from ..continuous.data_types import Candle, VWAPParams
from .kernel import IndicatorKernel, KernelState


@dataclass
class VWAPState(KernelState):
    pv_sum: float = 0.0  # sum(typical price * volume)
    v_sum: float = 0.0  # sum(volume)


class VWAPKernel(IndicatorKernel):
    """
    Cumulative volume-weighted average of typical price.

    No warm-up: the first candle yields its own typical price. While the
    cumulative volume is exactly zero the point is omitted, so the output
    can skip candles.
    """

    name = "VWAP"
    params_type = VWAPParams
    contiguous = False

    @property
    def warmup_period(self) -> int:
        return 1

    def new_state(self) -> VWAPState:
        return VWAPState()

    def _step(self, state: VWAPState, candle: Candle) -> Optional[float]:
        state.pv_sum += candle.typical_price * candle.volume
        state.v_sum += candle.volume
        if state.v_sum == 0:
            return None
        return state.pv_sum / state.v_sum
