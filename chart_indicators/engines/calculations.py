"""
Batch indicator computation over a full candle history.

Pure and stateless: every call builds fresh kernel state, so independent
computations over the same CandleSeries need no locking.
"""

import logging
from typing import Dict, Iterable, Optional, Union

from ..continuous.data_types import Candle, CandleSeries, IndicatorParams, IndicatorSeries
from .registry import IndicatorRegistry, get_registry

logger = logging.getLogger(__name__)

CandleInput = Union[CandleSeries, Iterable[Candle]]


def compute_indicator(
    candles: CandleInput,
    indicator_id: str,
    params: Optional[IndicatorParams] = None,
    registry: Optional[IndicatorRegistry] = None,
) -> IndicatorSeries:
    """
    Compute one indicator over a full series.

    Returns an empty series when there are fewer candles than the warm-up.

    Raises:
        InvalidCandleError / UnsortedSeriesError: malformed input (whole call fails)
        UnknownIndicatorError: id not registered
        InvalidParamsError: params out of range
    """
    registry = registry or get_registry()
    series = CandleSeries.coerce(candles)
    kernel = registry.create_kernel(indicator_id, params)
    return kernel.compute(series, indicator_id=registry.get(indicator_id).indicator_id)


def compute_indicators(
    candles: CandleInput,
    indicator_ids: Iterable[str],
    registry: Optional[IndicatorRegistry] = None,
) -> Dict[str, IndicatorSeries]:
    """
    Compute several indicators over the same series.

    Returns:
        Mapping of indicator id (as requested) to its aligned series
    """
    registry = registry or get_registry()
    series = CandleSeries.coerce(candles)
    ids = list(indicator_ids)

    # Resolve every id before computing anything
    kernels = {indicator_id: registry.create_kernel(indicator_id) for indicator_id in ids}

    results: Dict[str, IndicatorSeries] = {}
    for indicator_id, kernel in kernels.items():
        canonical_id = registry.get(indicator_id).indicator_id
        results[indicator_id] = kernel.compute(series, indicator_id=canonical_id)

    logger.debug(
        "Computed %d indicators over %d candles: %s",
        len(results),
        len(series),
        {k: len(v) for k, v in results.items()},
    )
    return results
