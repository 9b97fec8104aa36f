"""
Indicator Configuration Module
Centralizes default periods, constants and request settings.

This module provides a single source of truth for the registry defaults,
making it easy to tune the catalog without hunting through kernel modules.
"""

import os
from dataclasses import dataclass, field
from typing import Tuple

# =============================================================================
# INDICATOR DEFAULTS
# =============================================================================


@dataclass
class MovingAverageDefaults:
    """Moving-average catalog defaults."""

    sma_periods: Tuple[int, ...] = (5, 10, 20, 50, 100, 200)
    ema_periods: Tuple[int, ...] = (5, 9, 12, 20, 26, 50)
    cog_period: int = 10
    volume_sma_period: int = 9


@dataclass
class OscillatorDefaults:
    """Oscillator defaults."""

    rsi_period: int = 14
    stoch_k_period: int = 14
    stoch_d_period: int = 3
    williams_r_period: int = 14
    cci_period: int = 20
    cci_constant: float = 0.015  # Lambert's scaling constant


@dataclass
class TrendDefaults:
    """Trend and volatility defaults."""

    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    bollinger_period: int = 20
    bollinger_multiplier: float = 2.0
    atr_period: int = 14


@dataclass
class AccumulatorSettings:
    """Rolling-window accumulator settings."""

    # Running float sums are rebuilt from the window every N pushes
    recalc_interval: int = 10000


# =============================================================================
# REQUEST SETTINGS (candle source)
# =============================================================================


@dataclass
class RequestConfig:
    """Configuration for candle HTTP requests."""

    base_url: str = field(
        default_factory=lambda: os.getenv(
            "CHART_API_BASE_URL", "http://localhost:8000/api/charts"
        )
    )
    token: str = field(default_factory=lambda: os.getenv("CHART_API_TOKEN", ""))
    timeout_total: float = 10.0
    timeout_connect: float = 5.0
    max_retries: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 10.0
    retry_on_status: Tuple[int, ...] = (429, 500, 502, 503, 504)


@dataclass
class IndicatorConfig:
    """
    Master configuration for the engine.

    Usage:
        config = IndicatorConfig()
        # Use defaults

        # Or customize:
        config = IndicatorConfig(
            oscillators=OscillatorDefaults(rsi_period=21),
            trend=TrendDefaults(bollinger_multiplier=2.5),
        )
    """

    moving_averages: MovingAverageDefaults = field(default_factory=MovingAverageDefaults)
    oscillators: OscillatorDefaults = field(default_factory=OscillatorDefaults)
    trend: TrendDefaults = field(default_factory=TrendDefaults)
    accumulators: AccumulatorSettings = field(default_factory=AccumulatorSettings)


# Global default config instance
DEFAULT_CONFIG = IndicatorConfig()


def get_config() -> IndicatorConfig:
    """Get the default configuration."""
    return DEFAULT_CONFIG
