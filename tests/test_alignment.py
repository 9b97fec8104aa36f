"""
Tests for timestamp alignment of kernel outputs.
"""

from dataclasses import dataclass

import pytest

from chart_indicators.continuous.data_types import IndicatorParams
from chart_indicators.engines.alignment import DEFAULT_MAPPER
from chart_indicators.engines.kernel import IndicatorKernel, KernelState
from chart_indicators.engines.registry import get_registry
from chart_indicators.errors import AlignmentError


@dataclass
class _CountState(KernelState):
    pass


class EarlyKernel(IndicatorKernel):
    """Declares a warm-up of 3 but emits from the first candle."""

    name = "EARLY"

    @property
    def warmup_period(self) -> int:
        return 3

    def new_state(self) -> _CountState:
        return _CountState()

    def _step(self, state, candle):
        return candle.close


class GappyKernel(EarlyKernel):
    """Contiguous kernel that skips a candle after warming up."""

    name = "GAPPY"

    def _step(self, state, candle):
        if state.bar_index < 2 or state.bar_index == 4:
            return None
        return candle.close


class TestAlignmentMapper:
    """Tests for AlignmentMapper."""

    def test_offset_and_expected_length(self):
        kernel = get_registry().create_kernel("SMA20")
        assert DEFAULT_MAPPER.offset(kernel) == 19
        assert DEFAULT_MAPPER.expected_length(kernel, 100) == 81
        assert DEFAULT_MAPPER.expected_length(kernel, 19) == 0
        assert DEFAULT_MAPPER.expected_length(kernel, 20) == 1

    def test_early_emission_rejected(self, closes_candles):
        with pytest.raises(AlignmentError):
            EarlyKernel(IndicatorParams()).compute(closes_candles([1.0] * 5))

    def test_gap_in_contiguous_kernel_rejected(self, closes_candles):
        with pytest.raises(AlignmentError):
            GappyKernel(IndicatorParams()).compute(closes_candles([1.0] * 6))

    def test_anchor_one_inside_warmup(self, closes_candles):
        candles = closes_candles([1.0, 2.0])
        kernel = EarlyKernel(IndicatorParams())
        with pytest.raises(AlignmentError):
            DEFAULT_MAPPER.anchor_one(kernel, 1, candles[1], 2.0)


class TestTimestampAlignment:
    """Every indicator's timestamps are a subsequence of the candle timestamps."""

    def test_all_registered_indicators(self, walk_candles):
        registry = get_registry()
        candle_ts = walk_candles.timestamps()
        positions = {ts: i for i, ts in enumerate(candle_ts)}

        for indicator_id in registry.ids():
            kernel = registry.create_kernel(indicator_id)
            series = kernel.compute(walk_candles)
            indices = [positions[ts] for ts in series.timestamps()]
            assert indices == sorted(set(indices)), indicator_id
            if kernel.contiguous:
                offset = kernel.warmup_period - 1
                assert indices == list(range(offset, len(candle_ts))), indicator_id
