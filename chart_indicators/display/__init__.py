"""Display utilities for indicator output."""

from .colors import Colors, pane_color
from .formatters import format_series, format_timestamp, format_value, series_to_dict

__all__ = [
    "Colors",
    "pane_color",
    "format_series",
    "format_timestamp",
    "format_value",
    "series_to_dict",
]
