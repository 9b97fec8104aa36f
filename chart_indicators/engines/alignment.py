"""
Alignment between kernel outputs and the candle timestamp axis.

A kernel with warm-up W consumes W candles before its first output, so
that output belongs to candle index W - 1 and a contiguous kernel over N
candles yields N - W + 1 points. Every kernel declares W once; nothing
else in the engine computes slicing offsets.
"""

from typing import TYPE_CHECKING, List, Sequence, Tuple

from ..continuous.data_types import Candle, IndicatorPoint, IndicatorValue
from ..errors import AlignmentError

if TYPE_CHECKING:
    from .kernel import IndicatorKernel


class AlignmentMapper:
    """Maps (candle_index, value) kernel outputs onto candle timestamps."""

    @staticmethod
    def warmup_period(kernel: "IndicatorKernel") -> int:
        return kernel.warmup_period

    def offset(self, kernel: "IndicatorKernel") -> int:
        """Index of the candle carrying the first output."""
        return max(self.warmup_period(kernel) - 1, 0)

    def expected_length(self, kernel: "IndicatorKernel", n_candles: int) -> int:
        warmup = self.warmup_period(kernel)
        return n_candles - warmup + 1 if n_candles >= warmup else 0

    def anchor_one(
        self,
        kernel: "IndicatorKernel",
        index: int,
        candle: Candle,
        value: IndicatorValue,
    ) -> IndicatorPoint:
        """Anchor a single output emitted while consuming candles[index]."""
        if index < self.offset(kernel):
            raise AlignmentError(
                f"{kernel.name} emitted at index {index}, inside its warm-up "
                f"of {self.warmup_period(kernel)}"
            )
        return IndicatorPoint(candle.timestamp, value)

    def anchor(
        self,
        kernel: "IndicatorKernel",
        candles: Sequence[Candle],
        outputs: Sequence[Tuple[int, IndicatorValue]],
    ) -> Tuple[IndicatorPoint, ...]:
        """
        Anchor a full batch of outputs.

        Contiguous kernels must start exactly at the warm-up offset and emit
        on every candle after it; anything else is a kernel bug.
        """
        if kernel.contiguous:
            expected = self.expected_length(kernel, len(candles))
            if len(outputs) != expected:
                raise AlignmentError(
                    f"{kernel.name} produced {len(outputs)} points over {len(candles)} "
                    f"candles, expected {expected}"
                )
            if outputs and outputs[0][0] != self.offset(kernel):
                raise AlignmentError(
                    f"{kernel.name} first output at index {outputs[0][0]}, "
                    f"expected {self.offset(kernel)}"
                )

        points: List[IndicatorPoint] = [
            self.anchor_one(kernel, index, candles[index], value) for index, value in outputs
        ]
        return tuple(points)


DEFAULT_MAPPER = AlignmentMapper()
