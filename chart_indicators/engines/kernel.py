"""
Indicator kernel base class.

A kernel is immutable configuration (its params) plus two operations over
a separate mutable KernelState:

- update(state, candle): the incremental step used by streaming sessions
- compute(candles): the batch form, which is nothing more than update()
  folded over the series with a fresh state

Because batch is the streaming recurrence replayed, both paths produce the
same floats for the same prefix.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Iterable, List, Optional, Tuple, Type, Union

from ..continuous.data_types import (
    Candle,
    CandleSeries,
    IndicatorParams,
    IndicatorSeries,
    IndicatorValue,
)
from ..errors import InvalidParamsError
from ..indicator_config import DEFAULT_CONFIG, IndicatorConfig
from .alignment import DEFAULT_MAPPER, AlignmentMapper

logger = logging.getLogger(__name__)


@dataclass
class KernelState:
    """Mutable per-kernel accumulator. Subclassed by each kernel."""

    bar_index: int = 0  # Candles consumed so far


class IndicatorKernel(ABC):
    """Base class for all indicator kernels."""

    name: ClassVar[str] = "indicator"
    params_type: ClassVar[Type[IndicatorParams]] = IndicatorParams
    # False when the kernel may skip candles after its warm-up (VWAP)
    contiguous: ClassVar[bool] = True

    def __init__(
        self,
        params: Optional[IndicatorParams] = None,
        config: Optional[IndicatorConfig] = None,
    ):
        if params is None:
            params = self.params_type()
        if not isinstance(params, self.params_type):
            raise InvalidParamsError(
                f"{type(self).__name__} expects {self.params_type.__name__}, "
                f"got {type(params).__name__}"
            )
        params.validate()
        self.params = params
        self.config = config or DEFAULT_CONFIG

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.params!r})"

    @property
    @abstractmethod
    def warmup_period(self) -> int:
        """Candles consumed before the first output."""

    @abstractmethod
    def new_state(self) -> KernelState:
        """Fresh state for a new series or session."""

    @abstractmethod
    def _step(self, state: KernelState, candle: Candle) -> Optional[IndicatorValue]:
        ...

    def update(self, state: KernelState, candle: Candle) -> Optional[IndicatorValue]:
        """Consume one candle; return the new value or None during warm-up."""
        value = self._step(state, candle)
        state.bar_index += 1
        return value

    def compute(
        self,
        candles: Union[CandleSeries, Iterable[Candle]],
        indicator_id: Optional[str] = None,
        mapper: AlignmentMapper = DEFAULT_MAPPER,
    ) -> IndicatorSeries:
        """Batch computation over a full series."""
        series = CandleSeries.coerce(candles)
        state = self.new_state()
        outputs: List[Tuple[int, IndicatorValue]] = []

        for index, candle in enumerate(series):
            value = self.update(state, candle)
            if value is not None:
                outputs.append((index, value))

        if not outputs:
            logger.debug(
                "%s: %d candles, warm-up %d, no output",
                indicator_id or self.name,
                len(series),
                self.warmup_period,
            )

        return IndicatorSeries(
            indicator_id=indicator_id or self.name,
            params=self.params,
            points=mapper.anchor(self, series, outputs),
        )
