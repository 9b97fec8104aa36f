"""
Indicator Registry - declarative catalog of the indicators the chart offers.

Maps an indicator id (e.g. "SMA20", "MACD") to its kernel class, default
parameters and display metadata. Adding an indicator means registering a
definition here; call sites only ever deal in ids.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Type

from ..continuous.data_types import (
    BollingerParams,
    IndicatorParams,
    MACDParams,
    PeriodParams,
    StochasticParams,
    VWAPParams,
)
from ..errors import InvalidParamsError, UnknownIndicatorError
from ..indicator_config import DEFAULT_CONFIG, IndicatorConfig
from .kernel import IndicatorKernel
from .moving_averages import COGKernel, EMAKernel, SMAKernel
from .oscillators import CCIKernel, RSIKernel, StochasticKernel, WilliamsRKernel
from .trend_volatility import ATRKernel, BollingerKernel, MACDKernel
from .volume import VWAPKernel

logger = logging.getLogger(__name__)

# Where the chart places the series; layout only, no styling
PANE_PRICE = "price"
PANE_OSCILLATOR = "oscillator"
PANE_VOLUME = "volume"


@dataclass(frozen=True)
class IndicatorDefinition:
    """One catalog entry."""

    indicator_id: str
    kernel_cls: Type[IndicatorKernel]
    params: IndicatorParams
    label: str
    pane: str = PANE_PRICE

    def create_kernel(
        self,
        params: Optional[IndicatorParams] = None,
        config: Optional[IndicatorConfig] = None,
    ) -> IndicatorKernel:
        return self.kernel_cls(params if params is not None else self.params, config)


class IndicatorRegistry:
    """
    Catalog of indicator definitions keyed by upper-case id.

    Example:
        registry = build_default_registry()
        kernel = registry.create_kernel("SMA20")
        custom = registry.create_kernel("BB", multiplier=2.5)
        registry.warmup_period("MACD")  # 34
    """

    def __init__(self, config: Optional[IndicatorConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self._definitions: Dict[str, IndicatorDefinition] = {}

    @staticmethod
    def _key(indicator_id: str) -> str:
        return indicator_id.strip().upper()

    def register(self, definition: IndicatorDefinition, replace: bool = False) -> None:
        key = self._key(definition.indicator_id)
        if key in self._definitions and not replace:
            raise ValueError(f"indicator {key!r} is already registered")
        # Fail at registration, not at first use
        definition.params.validate()
        self._definitions[key] = definition
        logger.debug("Registered indicator %s (%s)", key, definition.kernel_cls.__name__)

    def get(self, indicator_id: str) -> IndicatorDefinition:
        try:
            return self._definitions[self._key(indicator_id)]
        except KeyError:
            raise UnknownIndicatorError(indicator_id) from None

    def resolve_params(
        self,
        indicator_id: str,
        params: Optional[IndicatorParams] = None,
        **overrides: Any,
    ) -> IndicatorParams:
        """Explicit params, else registered defaults, with field overrides applied."""
        base = params if params is not None else self.get(indicator_id).params
        if not overrides:
            return base
        try:
            return dataclasses.replace(base, **overrides)
        except TypeError as e:
            raise InvalidParamsError(f"{indicator_id}: {e}") from e

    def create_kernel(
        self,
        indicator_id: str,
        params: Optional[IndicatorParams] = None,
        **overrides: Any,
    ) -> IndicatorKernel:
        definition = self.get(indicator_id)
        resolved = self.resolve_params(indicator_id, params, **overrides)
        return definition.create_kernel(resolved, self.config)

    def warmup_period(
        self,
        indicator_id: str,
        params: Optional[IndicatorParams] = None,
        **overrides: Any,
    ) -> int:
        return self.create_kernel(indicator_id, params, **overrides).warmup_period

    def ids(self) -> List[str]:
        return list(self._definitions)

    def definitions(self) -> List[IndicatorDefinition]:
        return list(self._definitions.values())

    def __contains__(self, indicator_id: object) -> bool:
        return isinstance(indicator_id, str) and self._key(indicator_id) in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)


def build_default_registry(config: Optional[IndicatorConfig] = None) -> IndicatorRegistry:
    """Register the standard chart catalog using `config` defaults."""
    cfg = config or DEFAULT_CONFIG
    ma = cfg.moving_averages
    osc = cfg.oscillators
    trend = cfg.trend

    registry = IndicatorRegistry(cfg)

    for period in ma.sma_periods:
        registry.register(
            IndicatorDefinition(f"SMA{period}", SMAKernel, PeriodParams(period), f"SMA {period}")
        )
    for period in ma.ema_periods:
        registry.register(
            IndicatorDefinition(f"EMA{period}", EMAKernel, PeriodParams(period), f"EMA {period}")
        )

    registry.register(
        IndicatorDefinition("COG", COGKernel, PeriodParams(ma.cog_period), f"COG {ma.cog_period}")
    )
    registry.register(IndicatorDefinition("VWAP", VWAPKernel, VWAPParams(), "VWAP"))
    registry.register(
        IndicatorDefinition(
            "BB",
            BollingerKernel,
            BollingerParams(trend.bollinger_period, trend.bollinger_multiplier),
            f"BB ({trend.bollinger_period}, {trend.bollinger_multiplier:g})",
        )
    )
    registry.register(
        IndicatorDefinition(
            "VOLSMA",
            SMAKernel,
            PeriodParams(ma.volume_sma_period, source="volume"),
            f"Volume SMA {ma.volume_sma_period}",
            PANE_VOLUME,
        )
    )
    registry.register(
        IndicatorDefinition(
            "RSI", RSIKernel, PeriodParams(osc.rsi_period), f"RSI {osc.rsi_period}", PANE_OSCILLATOR
        )
    )
    registry.register(
        IndicatorDefinition(
            "MACD",
            MACDKernel,
            MACDParams(trend.macd_fast, trend.macd_slow, trend.macd_signal),
            f"MACD ({trend.macd_fast}, {trend.macd_slow}, {trend.macd_signal})",
            PANE_OSCILLATOR,
        )
    )
    registry.register(
        IndicatorDefinition(
            "STOCH",
            StochasticKernel,
            StochasticParams(osc.stoch_k_period, osc.stoch_d_period),
            f"Stochastic ({osc.stoch_k_period}, {osc.stoch_d_period})",
            PANE_OSCILLATOR,
        )
    )
    registry.register(
        IndicatorDefinition(
            "WILLR",
            WilliamsRKernel,
            PeriodParams(osc.williams_r_period),
            f"Williams %R {osc.williams_r_period}",
            PANE_OSCILLATOR,
        )
    )
    registry.register(
        IndicatorDefinition(
            "CCI", CCIKernel, PeriodParams(osc.cci_period), f"CCI {osc.cci_period}", PANE_OSCILLATOR
        )
    )
    registry.register(
        IndicatorDefinition(
            "ATR",
            ATRKernel,
            PeriodParams(trend.atr_period),
            f"ATR {trend.atr_period}",
            PANE_OSCILLATOR,
        )
    )

    return registry


DEFAULT_REGISTRY = build_default_registry()


def get_registry() -> IndicatorRegistry:
    """Get the default registry."""
    return DEFAULT_REGISTRY
