"""
Tests for the chart-indicators command line.
"""

import json
import logging

import pytest

from chart_indicators.apps import compute
from conftest import random_walk


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    monkeypatch.setattr(compute, "setup_logging", lambda **kwargs: None)


@pytest.fixture
def candles_file(tmp_path):
    candles = random_walk(40, seed=21)
    rows = [
        {
            "timestamp": c.timestamp,
            "open": c.open,
            "high": c.high,
            "low": c.low,
            "close": c.close,
            "volume": c.volume,
        }
        for c in candles
    ]
    path = tmp_path / "candles.json"
    path.write_text(json.dumps({"candles": rows}), encoding="utf-8")
    return path


class TestCompute:
    """Tests for the compute entry point."""

    def test_json_output(self, candles_file, capsys):
        code = compute.main(
            ["--input", str(candles_file), "--indicators", "SMA5", "RSI", "MACD", "--json"]
        )
        assert code == 0

        output = json.loads(capsys.readouterr().out)
        assert output["candles"] == 40
        assert len(output["indicators"]["SMA5"]["points"]) == 36
        assert len(output["indicators"]["RSI"]["points"]) == 26
        assert len(output["indicators"]["MACD"]["points"]) == 7
        assert output["indicators"]["RSI"]["params"] == {"period": 14, "source": "close"}

    def test_text_output(self, candles_file, capsys):
        code = compute.main(["--input", str(candles_file), "--indicators", "SMA200", "EMA9"])
        assert code == 0
        out = capsys.readouterr().out
        assert "SMA200" in out
        assert "not enough candles" in out
        assert "EMA9" in out

    def test_list(self, capsys):
        assert compute.main(["--list"]) == 0
        out = capsys.readouterr().out
        assert "MACD" in out
        assert "warm-up 34" in out

    def test_unknown_indicator(self, candles_file, capsys):
        code = compute.main(["--input", str(candles_file), "--indicators", "FOO"])
        assert code == 1
        assert "FOO" in capsys.readouterr().err

    def test_failure_traceback_logged_at_debug(self, candles_file, caplog):
        caplog.set_level(logging.DEBUG, logger="chart_indicators")
        code = compute.main(["--input", str(candles_file), "--indicators", "FOO"])
        assert code == 1

        records = [r for r in caplog.records if r.getMessage().startswith("Failed:")]
        assert len(records) == 1
        assert records[0].levelno == logging.DEBUG
        assert records[0].exc_info is not None

    def test_missing_source(self, capsys):
        assert compute.main([]) == 2

    def test_load_candles_rejects_bad_shape(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"rows": []}), encoding="utf-8")
        with pytest.raises(ValueError):
            compute.load_candles(str(path))
