"""
Tests for streaming sessions: batch/stream equivalence, ordering and lifecycle.
"""

import pytest

from chart_indicators.continuous.data_types import Candle, PeriodParams
from chart_indicators.continuous.session import SessionManager, StreamingSession
from chart_indicators.engines.calculations import compute_indicator
from chart_indicators.engines.registry import get_registry
from chart_indicators.errors import (
    ConcurrentAppendError,
    InvalidCandleError,
    OutOfOrderAppendError,
    OutOfOrderError,
    SessionClosedError,
    UnknownIndicatorError,
)
from conftest import make_candle


class TestStreamBatchEquivalence:
    """Streaming N candles yields exactly the batch result over the same N."""

    def test_every_registered_indicator(self, walk_candles):
        registry = get_registry()
        session = StreamingSession("INFY", "1d")
        for indicator_id in registry.ids():
            session.subscribe(indicator_id)

        session.warmup(walk_candles)

        for indicator_id in registry.ids():
            assert session.series(indicator_id) == compute_indicator(walk_candles, indicator_id)

    def test_every_prefix(self, short_walk):
        session = StreamingSession("INFY", "1d")
        session.subscribe("RSI")
        session.subscribe("MACD")
        for n, candle in enumerate(short_walk, start=1):
            session.append(candle)
            prefix = short_walk[:n]
            assert session.series("RSI") == compute_indicator(prefix, "RSI")
            assert session.series("MACD") == compute_indicator(prefix, "MACD")

    def test_late_subscriber_is_replayed(self, short_walk):
        session = StreamingSession("INFY", "1d")
        session.subscribe("SMA5")
        session.warmup(short_walk[:40])

        session.subscribe("RSI")
        assert session.series("RSI") == compute_indicator(short_walk[:40], "RSI")

        session.warmup(short_walk[40:])
        assert session.series("RSI") == compute_indicator(short_walk, "RSI")
        assert session.series("SMA5") == compute_indicator(short_walk, "SMA5")


class TestAppend:
    """Tests for StreamingSession.append."""

    def test_returns_none_during_warmup(self, closes_candles):
        session = StreamingSession("INFY", "1d")
        session.subscribe("SMA5")
        candles = closes_candles([10.0, 11.0, 12.0, 13.0, 14.0])

        results = [session.append(c)["SMA5"] for c in candles]

        assert results[:4] == [None, None, None, None]
        assert results[4].timestamp == candles[4].timestamp
        assert results[4].value == pytest.approx(12.0)

    def test_out_of_order_rejected(self):
        session = StreamingSession("INFY", "1d")
        session.subscribe("SMA5")
        session.append(make_candle(5, 10.0))

        with pytest.raises(OutOfOrderAppendError) as exc_info:
            session.append(make_candle(4, 10.0))
        assert exc_info.value.previous_ts == make_candle(5, 10.0).timestamp

        with pytest.raises(OutOfOrderError):
            session.append(make_candle(5, 11.0))

        assert len(session.history) == 1

    def test_invalid_candle_rejected_without_side_effects(self):
        session = StreamingSession("INFY", "1d")
        session.subscribe("SMA5")
        session.append(make_candle(0, 10.0))

        bad = Candle(make_candle(1, 10.0).timestamp, 10.0, 9.0, 11.0, 10.0, 1.0)
        with pytest.raises(InvalidCandleError):
            session.append(bad)

        assert session.last_timestamp == make_candle(0, 10.0).timestamp
        assert len(session.history) == 1

    def test_concurrent_append_rejected(self):
        session = StreamingSession("INFY", "1d")
        session._writer.acquire()
        try:
            with pytest.raises(ConcurrentAppendError):
                session.append(make_candle(0, 10.0))
        finally:
            session._writer.release()
        session.append(make_candle(0, 10.0))

    def test_no_subscriptions(self):
        session = StreamingSession("INFY", "1d")
        assert session.append(make_candle(0, 10.0)) == {}
        assert session.last_timestamp == make_candle(0, 10.0).timestamp


class TestSubscriptions:
    """Tests for subscribe / unsubscribe."""

    def test_subscribe_returns_canonical_id(self):
        session = StreamingSession("INFY", "1d")
        assert session.subscribe("rsi") == "RSI"
        assert session.indicator_ids == ["RSI"]

    def test_subscribe_unknown(self):
        session = StreamingSession("INFY", "1d")
        with pytest.raises(UnknownIndicatorError):
            session.subscribe("FOO")

    def test_resubscribe_same_params_is_noop(self):
        session = StreamingSession("INFY", "1d")
        session.subscribe("RSI")
        assert session.subscribe("RSI", PeriodParams(14)) == "RSI"

    def test_resubscribe_different_params(self):
        session = StreamingSession("INFY", "1d")
        session.subscribe("RSI")
        with pytest.raises(ValueError):
            session.subscribe("RSI", period=21)

    def test_custom_params(self, short_walk):
        session = StreamingSession("INFY", "1d")
        session.subscribe("RSI", period=7)
        session.warmup(short_walk)
        expected = compute_indicator(short_walk, "RSI", PeriodParams(7))
        assert session.series("RSI") == expected

    def test_unsubscribe(self, short_walk):
        session = StreamingSession("INFY", "1d")
        session.subscribe("RSI")
        assert session.unsubscribe("RSI") is True
        assert session.unsubscribe("RSI") is False
        assert "RSI" not in session.append(short_walk[0])
        with pytest.raises(KeyError):
            session.series("RSI")


class TestLifecycle:
    """Tests for closing sessions and the session manager."""

    def test_close(self):
        session = StreamingSession("INFY", "1d")
        session.subscribe("SMA5")
        session.append(make_candle(0, 10.0))
        session.close()
        session.close()

        assert session.closed
        with pytest.raises(SessionClosedError):
            session.append(make_candle(1, 10.0))
        with pytest.raises(SessionClosedError):
            session.subscribe("RSI")
        with pytest.raises(SessionClosedError):
            session.series("SMA5")

    def test_manager_reuses_sessions(self):
        manager = SessionManager()
        a = manager.open("btc/usdt", "1h")
        b = manager.open("BTCUSDT", "1h")
        c = manager.open("BTCUSDT", "4h")

        assert a is b
        assert a is not c
        assert len(manager) == 2
        assert ("BTC-USDT", "1h") in manager
        assert manager.get("BTCUSDT", "1d") is None

    def test_manager_close(self):
        manager = SessionManager()
        session = manager.open("INFY", "1d")
        assert manager.close("INFY", "1d") is True
        assert manager.close("INFY", "1d") is False
        assert session.closed
        assert len(manager) == 0

    def test_manager_close_all(self):
        manager = SessionManager()
        sessions = [manager.open(symbol, "1d") for symbol in ("INFY", "TCS", "WIPRO")]
        manager.close_all()
        assert len(manager) == 0
        assert all(s.closed for s in sessions)

    def test_sessions_are_independent(self, short_walk):
        manager = SessionManager()
        first = manager.open("INFY", "1d")
        second = manager.open("TCS", "1d")
        first.subscribe("SMA5")
        second.subscribe("SMA5")
        first.warmup(short_walk)
        assert second.series("SMA5").is_empty
        assert len(first.series("SMA5")) == len(short_walk) - 4

    def test_manager_replaces_directly_closed_session(self):
        manager = SessionManager()
        first = manager.open("INFY", "1d")
        first.close()

        assert manager.get("INFY", "1d") is None
        again = manager.open("INFY", "1d")
        assert again is not first
        assert not again.closed
        again.subscribe("SMA5")
        again.append(make_candle(0, 10.0))
        assert again.candle_count == 1

    def test_manager_close_keeps_busy_session_tracked(self):
        manager = SessionManager()
        session = manager.open("INFY", "1d")
        session._writer.acquire()
        try:
            with pytest.raises(ConcurrentAppendError):
                manager.close("INFY", "1d")
            assert manager.get("INFY", "1d") is session
            assert not session.closed
        finally:
            session._writer.release()

        assert manager.close("INFY", "1d") is True
        assert session.closed
        assert len(manager) == 0


class TestBoundedHistory:
    """Tests for max_history."""

    def test_history_is_capped(self, short_walk):
        session = StreamingSession("INFY", "1d", max_history=20)
        session.subscribe("SMA5")
        session.warmup(short_walk)

        assert len(session.history) == 20
        assert session.history[-1] == short_walk[-1]
        assert session.candle_count == len(short_walk)
        assert session.series("SMA5") == compute_indicator(short_walk, "SMA5")

    def test_late_subscriber_replays_retained_tail(self, short_walk):
        session = StreamingSession("INFY", "1d", max_history=20)
        session.warmup(short_walk)
        session.subscribe("SMA5")

        tail = short_walk[-20:]
        series = session.series("SMA5")
        assert len(series) == 16
        assert series.points[0].timestamp == tail[4].timestamp
        assert series.values()[-1] == pytest.approx(sum(c.close for c in tail[-5:]) / 5)

    def test_manager_passes_cap(self, short_walk):
        manager = SessionManager(max_history=3)
        session = manager.open("INFY", "1d")
        session.warmup(short_walk)
        assert len(session.history) == 3

    def test_invalid_cap(self):
        with pytest.raises(ValueError):
            StreamingSession("INFY", "1d", max_history=0)
