"""Formatting utilities for indicator output."""

from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, List

from ..continuous.data_types import IndicatorPoint, IndicatorSeries, IndicatorValue
from ..engines.registry import IndicatorDefinition
from .colors import Colors, pane_color


def format_timestamp(timestamp: int) -> str:
    """Epoch milliseconds as a UTC date-time string."""
    return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")


def format_value(value: IndicatorValue, precision: int = 4) -> str:
    """Scalar as a fixed-precision number; multi-line values as name=value pairs."""
    if isinstance(value, dict):
        return "  ".join(f"{name}={line:.{precision}f}" for name, line in value.items())
    return f"{value:.{precision}f}"


def format_series(
    definition: IndicatorDefinition, series: IndicatorSeries, tail: int = 5
) -> List[str]:
    """Colored text block: heading plus the last `tail` points."""
    color = pane_color(definition.pane)
    lines = [
        f"{Colors.BOLD}{color}{definition.indicator_id}{Colors.RESET} "
        f"{Colors.DIM}{definition.label} [{definition.pane}] "
        f"points={len(series)}{Colors.RESET}"
    ]
    if series.is_empty:
        lines.append(f"  {Colors.YELLOW}not enough candles for warm-up{Colors.RESET}")
        return lines

    points = series.points[-tail:] if tail > 0 else series.points
    for point in points:
        lines.append(f"  {format_timestamp(point.timestamp)}  {format_value(point.value)}")
    return lines


def point_to_dict(point: IndicatorPoint) -> Dict[str, Any]:
    return {"timestamp": point.timestamp, "value": point.value}


def series_to_dict(series: IndicatorSeries) -> Dict[str, Any]:
    """JSON-ready form of a series."""
    return {
        "indicator": series.indicator_id,
        "params": asdict(series.params),
        "points": [point_to_dict(p) for p in series.points],
    }
