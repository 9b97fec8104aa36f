"""
Exception hierarchy for the indicator engine.

Insufficient history is deliberately absent: a kernel that has not seen
enough candles returns an empty IndicatorSeries instead of raising.
"""

from typing import Optional


class IndicatorError(Exception):
    """Base class for all engine errors."""


class InvalidCandleError(IndicatorError):
    """Candle violates OHLC ordering, has a non-positive price or negative volume."""

    def __init__(self, message: str, index: Optional[int] = None):
        if index is not None:
            message = f"candle #{index}: {message}"
        super().__init__(message)
        self.index = index


class OutOfOrderError(IndicatorError):
    """Timestamps are not strictly increasing."""

    def __init__(self, previous_ts: int, timestamp: int, message: str = ""):
        self.previous_ts = previous_ts
        self.timestamp = timestamp
        super().__init__(
            message or f"timestamp {timestamp} is not after previous timestamp {previous_ts}"
        )


class UnsortedSeriesError(OutOfOrderError):
    """Batch input is not sorted ascending (or contains duplicates)."""


class OutOfOrderAppendError(OutOfOrderError):
    """Streamed candle is not newer than the session's last candle."""


class InvalidParamsError(IndicatorError, ValueError):
    """Indicator parameters are out of range."""


class UnknownIndicatorError(IndicatorError, KeyError):
    """Indicator id is not registered."""

    def __init__(self, indicator_id: str):
        super().__init__(indicator_id)
        self.indicator_id = indicator_id

    def __str__(self) -> str:
        return f"unknown indicator: {self.indicator_id!r}"


class AlignmentError(IndicatorError):
    """Kernel output does not line up with its declared warm-up."""


class SessionClosedError(IndicatorError):
    """Streaming session was used after close()."""


class ConcurrentAppendError(IndicatorError):
    """A second append() was issued while another is still in flight."""


class DataUnavailableError(IndicatorError):
    """Candle source could not deliver data (distinct from insufficient history)."""

    def __init__(self, message: str, last_exception: Optional[Exception] = None):
        super().__init__(message)
        self.last_exception = last_exception
