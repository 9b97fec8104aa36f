"""
Streaming sessions: incremental indicator updates per (symbol, timeframe).

A session owns one kernel state per subscribed indicator and pushes each
appended candle through all of them. Replaying N candles through append()
yields exactly the series a batch compute over the same N candles returns.

Single-writer contract: callers serialize appends per session. A second
append (or subscribe) arriving while one is in flight is rejected with
ConcurrentAppendError rather than queued.

Appended candles are retained so late subscribers can be replayed. By
default the whole history is kept; pass `max_history` to bound memory, in
which case a late subscriber only sees the retained tail.
"""

import logging
import threading
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterable, Iterator, List, Optional, Tuple

from ..engines.alignment import DEFAULT_MAPPER, AlignmentMapper
from ..engines.kernel import IndicatorKernel, KernelState
from ..engines.registry import IndicatorRegistry, get_registry
from ..errors import (
    ConcurrentAppendError,
    InvalidCandleError,
    OutOfOrderAppendError,
    SessionClosedError,
)
from .data_types import Candle, IndicatorParams, IndicatorPoint, IndicatorSeries

logger = logging.getLogger(__name__)


@dataclass
class _Subscription:
    """Kernel, its live state and the points emitted so far."""

    indicator_id: str
    kernel: IndicatorKernel
    state: KernelState
    points: List[IndicatorPoint] = field(default_factory=list)


class StreamingSession:
    """
    Incremental indicator computation for one symbol/timeframe.

    Example:
        session = StreamingSession("INFY", "1d")
        session.subscribe("RSI")
        session.subscribe("MACD")
        for candle in live_candles:
            points = session.append(candle)   # {"RSI": IndicatorPoint | None, ...}
        rsi = session.series("RSI")
    """

    def __init__(
        self,
        symbol: str,
        timeframe: str,
        registry: Optional[IndicatorRegistry] = None,
        mapper: AlignmentMapper = DEFAULT_MAPPER,
        max_history: Optional[int] = None,
    ):
        if max_history is not None and max_history < 1:
            raise ValueError(f"max_history must be >= 1, got {max_history}")
        self.symbol = symbol
        self.timeframe = timeframe
        self._registry = registry or get_registry()
        self._mapper = mapper
        self._subscriptions: Dict[str, _Subscription] = {}
        self._history: Deque[Candle] = deque(maxlen=max_history)
        self._appended = 0
        self._writer = threading.Lock()
        self._closed = False

    def __repr__(self) -> str:
        return (
            f"StreamingSession({self.symbol!r}, {self.timeframe!r}, "
            f"candles={self._appended}, indicators={list(self._subscriptions)})"
        )

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def last_timestamp(self) -> Optional[int]:
        return self._history[-1].timestamp if self._history else None

    @property
    def history(self) -> Tuple[Candle, ...]:
        """Retained candles, oldest first."""
        return tuple(self._history)

    @property
    def candle_count(self) -> int:
        """Candles appended since the session opened, retained or not."""
        return self._appended

    @property
    def indicator_ids(self) -> List[str]:
        return list(self._subscriptions)

    # -------------------------------------------------------------------------
    # Mutation (single writer)
    # -------------------------------------------------------------------------

    @contextmanager
    def _exclusive(self, operation: str) -> Iterator[None]:
        if self._closed:
            raise SessionClosedError(f"{self.symbol}/{self.timeframe} session is closed")
        if not self._writer.acquire(blocking=False):
            raise ConcurrentAppendError(
                f"{operation} on {self.symbol}/{self.timeframe} while another write is in flight"
            )
        try:
            yield
        finally:
            self._writer.release()

    def subscribe(
        self,
        indicator_id: str,
        params: Optional[IndicatorParams] = None,
        **overrides: Any,
    ) -> str:
        """
        Start tracking an indicator. Returns its canonical id.

        A late subscriber is replayed over the session history so its series
        matches what it would have been had it subscribed from the start.
        With `max_history` set, the replay covers the retained tail only.
        """
        definition = self._registry.get(indicator_id)
        key = definition.indicator_id
        kernel = self._registry.create_kernel(indicator_id, params, **overrides)

        with self._exclusive("subscribe"):
            existing = self._subscriptions.get(key)
            if existing is not None:
                if existing.kernel.params != kernel.params:
                    raise ValueError(
                        f"{key} already subscribed with {existing.kernel.params!r}; "
                        "unsubscribe first"
                    )
                return key

            subscription = _Subscription(key, kernel, kernel.new_state())
            first_index = self._appended - len(self._history)
            for index, candle in enumerate(self._history, start=first_index):
                self._feed(subscription, index, candle)
            self._subscriptions[key] = subscription

        logger.info(
            "%s/%s subscribed %s (warm-up %d, replayed %d candles)",
            self.symbol,
            self.timeframe,
            key,
            kernel.warmup_period,
            len(self._history),
        )
        return key

    def unsubscribe(self, indicator_id: str) -> bool:
        """Drop an indicator and its state. Returns False if it was not subscribed."""
        key = self._registry.get(indicator_id).indicator_id
        with self._exclusive("unsubscribe"):
            removed = self._subscriptions.pop(key, None)
        if removed is not None:
            logger.info("%s/%s unsubscribed %s", self.symbol, self.timeframe, key)
        return removed is not None

    def append(self, candle: Candle) -> Dict[str, Optional[IndicatorPoint]]:
        """
        Feed one new candle through every subscribed kernel.

        Returns:
            Mapping of indicator id to its new point, or None while that
            indicator is still warming up (or, for VWAP, omits the candle)

        Raises:
            InvalidCandleError: malformed candle
            OutOfOrderAppendError: timestamp not after the last appended candle
            ConcurrentAppendError: another append is in flight
            SessionClosedError: session was closed
        """
        with self._exclusive("append"):
            index = self._appended
            try:
                candle.validate(index)
            except InvalidCandleError as e:
                logger.warning("%s/%s rejected candle: %s", self.symbol, self.timeframe, e)
                raise

            last_ts = self.last_timestamp
            if last_ts is not None and candle.timestamp <= last_ts:
                logger.warning(
                    "%s/%s rejected out-of-order candle %d (last %d)",
                    self.symbol,
                    self.timeframe,
                    candle.timestamp,
                    last_ts,
                )
                raise OutOfOrderAppendError(last_ts, candle.timestamp)

            self._history.append(candle)
            self._appended += 1
            emitted = {
                key: self._feed(subscription, index, candle)
                for key, subscription in self._subscriptions.items()
            }

        logger.debug(
            "%s/%s appended candle %d: %d/%d indicators emitted",
            self.symbol,
            self.timeframe,
            candle.timestamp,
            sum(1 for p in emitted.values() if p is not None),
            len(emitted),
        )
        return emitted

    def warmup(self, candles: Iterable[Candle]) -> int:
        """Append historical candles in order. Returns the number appended."""
        count = 0
        for candle in candles:
            self.append(candle)
            count += 1
        return count

    def _feed(
        self, subscription: _Subscription, index: int, candle: Candle
    ) -> Optional[IndicatorPoint]:
        value = subscription.kernel.update(subscription.state, candle)
        if value is None:
            return None
        point = self._mapper.anchor_one(subscription.kernel, index, candle, value)
        subscription.points.append(point)
        return point

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def series(self, indicator_id: str) -> IndicatorSeries:
        """Everything emitted so far for one indicator."""
        if self._closed:
            raise SessionClosedError(f"{self.symbol}/{self.timeframe} session is closed")
        key = self._registry.get(indicator_id).indicator_id
        subscription = self._subscriptions.get(key)
        if subscription is None:
            raise KeyError(f"{key} is not subscribed on {self.symbol}/{self.timeframe}")
        return IndicatorSeries(
            indicator_id=key,
            params=subscription.kernel.params,
            points=tuple(subscription.points),
        )

    def all_series(self) -> Dict[str, IndicatorSeries]:
        return {key: self.series(key) for key in self._subscriptions}

    def close(self) -> None:
        """Discard all kernel state. Idempotent."""
        if self._closed:
            return
        with self._exclusive("close"):
            self._subscriptions.clear()
            self._history.clear()
            self._closed = True
        logger.info("%s/%s session closed", self.symbol, self.timeframe)


def normalize_symbol(symbol: str) -> str:
    """Normalize symbol format (BTC/USDT -> BTCUSDT)."""
    return symbol.upper().replace("/", "").replace("-", "").replace("_", "")


class SessionManager:
    """One StreamingSession per (symbol, timeframe)."""

    def __init__(
        self,
        registry: Optional[IndicatorRegistry] = None,
        max_history: Optional[int] = None,
    ):
        self._registry = registry or get_registry()
        self._max_history = max_history
        self._sessions: Dict[Tuple[str, str], StreamingSession] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(symbol: str, timeframe: str) -> Tuple[str, str]:
        return normalize_symbol(symbol), timeframe

    def open(self, symbol: str, timeframe: str) -> StreamingSession:
        """Return the open session for the pair, creating it if needed.

        A session closed directly through StreamingSession.close() is
        replaced by a fresh one.
        """
        key = self._key(symbol, timeframe)
        with self._lock:
            session = self._sessions.get(key)
            if session is None or session.closed:
                session = StreamingSession(
                    key[0], timeframe, self._registry, max_history=self._max_history
                )
                self._sessions[key] = session
                logger.info("Opened session %s/%s", key[0], timeframe)
        return session

    def get(self, symbol: str, timeframe: str) -> Optional[StreamingSession]:
        session = self._sessions.get(self._key(symbol, timeframe))
        if session is None or session.closed:
            return None
        return session

    def close(self, symbol: str, timeframe: str) -> bool:
        """Close and forget the pair's session.

        The session stays tracked if close() raises (e.g. an append is in
        flight), so a retry can still reach it.
        """
        key = self._key(symbol, timeframe)
        with self._lock:
            session = self._sessions.get(key)
            if session is None:
                return False
            session.close()
            del self._sessions[key]
        return True

    def close_all(self) -> None:
        with self._lock:
            for key in list(self._sessions):
                self._sessions[key].close()
                del self._sessions[key]

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        return self._key(*key) in self._sessions
