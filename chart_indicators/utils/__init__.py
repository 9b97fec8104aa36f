"""Utility modules for the chart_indicators package."""

from .retry import ExponentialBackoff, RetryError, retry_async

__all__ = [
    "ExponentialBackoff",
    "RetryError",
    "retry_async",
]
