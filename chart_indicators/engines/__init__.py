"""Indicator kernels, registry and batch computation."""

from .alignment import DEFAULT_MAPPER, AlignmentMapper
from .calculations import compute_indicator, compute_indicators
from .kernel import IndicatorKernel, KernelState
from .registry import (
    PANE_OSCILLATOR,
    PANE_PRICE,
    PANE_VOLUME,
    IndicatorDefinition,
    IndicatorRegistry,
    build_default_registry,
    get_registry,
)

__all__ = [
    "AlignmentMapper",
    "DEFAULT_MAPPER",
    "IndicatorKernel",
    "KernelState",
    "IndicatorDefinition",
    "IndicatorRegistry",
    "build_default_registry",
    "get_registry",
    "PANE_PRICE",
    "PANE_OSCILLATOR",
    "PANE_VOLUME",
    "compute_indicator",
    "compute_indicators",
]
