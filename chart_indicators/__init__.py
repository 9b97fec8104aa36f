"""Chart Indicator Engine.

Technical indicators over OHLCV candles, in batch and streaming form.

Public symbols are exposed lazily so importing `chart_indicators` does not
eagerly import optional network dependencies (`aiohttp` via the fetcher).
"""

from __future__ import annotations

import importlib
from typing import Dict, Tuple

__version__ = "0.1.0"

__all__ = [
    # Data model
    "Candle",
    "CandleSeries",
    "IndicatorParams",
    "PeriodParams",
    "MACDParams",
    "BollingerParams",
    "StochasticParams",
    "VWAPParams",
    "IndicatorPoint",
    "IndicatorSeries",
    # Batch
    "compute_indicator",
    "compute_indicators",
    # Streaming
    "StreamingSession",
    "SessionManager",
    # Registry
    "IndicatorDefinition",
    "IndicatorRegistry",
    "build_default_registry",
    "get_registry",
    # Kernels
    "IndicatorKernel",
    "AlignmentMapper",
    # Config
    "IndicatorConfig",
    "RequestConfig",
    "DEFAULT_CONFIG",
    "get_config",
    # Errors
    "IndicatorError",
    "InvalidCandleError",
    "OutOfOrderError",
    "UnsortedSeriesError",
    "OutOfOrderAppendError",
    "InvalidParamsError",
    "UnknownIndicatorError",
    "AlignmentError",
    "SessionClosedError",
    "ConcurrentAppendError",
    "DataUnavailableError",
    # Data fetcher
    "ChartDataFetcher",
    "ChartAPIError",
    # Logging
    "setup_logging",
    "log_exception",
]


_EXPORT_TO_SOURCE: Dict[str, Tuple[str, str]] = {}


def _register(module: str, names: list[str]) -> None:
    for name in names:
        _EXPORT_TO_SOURCE[name] = (module, name)


_register(
    ".continuous.data_types",
    [
        "Candle",
        "CandleSeries",
        "IndicatorParams",
        "PeriodParams",
        "MACDParams",
        "BollingerParams",
        "StochasticParams",
        "VWAPParams",
        "IndicatorPoint",
        "IndicatorSeries",
    ],
)

_register(".engines.calculations", ["compute_indicator", "compute_indicators"])

_register(".continuous.session", ["StreamingSession", "SessionManager"])

_register(
    ".engines.registry",
    ["IndicatorDefinition", "IndicatorRegistry", "build_default_registry", "get_registry"],
)

_register(".engines.kernel", ["IndicatorKernel"])

_register(".engines.alignment", ["AlignmentMapper"])

_register(
    ".indicator_config",
    ["IndicatorConfig", "RequestConfig", "DEFAULT_CONFIG", "get_config"],
)

_register(
    ".errors",
    [
        "IndicatorError",
        "InvalidCandleError",
        "OutOfOrderError",
        "UnsortedSeriesError",
        "OutOfOrderAppendError",
        "InvalidParamsError",
        "UnknownIndicatorError",
        "AlignmentError",
        "SessionClosedError",
        "ConcurrentAppendError",
        "DataUnavailableError",
    ],
)

_register(".engines.data_fetcher", ["ChartDataFetcher", "ChartAPIError"])

_register(".logging_config", ["setup_logging", "log_exception"])


_missing_exports = [name for name in __all__ if name not in _EXPORT_TO_SOURCE]
if _missing_exports:
    raise RuntimeError(f"Lazy export map incomplete: {_missing_exports}")


def __getattr__(name: str):
    if name not in _EXPORT_TO_SOURCE:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_name, symbol_name = _EXPORT_TO_SOURCE[name]
    module = importlib.import_module(module_name, __name__)
    value = getattr(module, symbol_name)

    # Cache resolved symbol on module globals for subsequent fast access.
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(__all__))
