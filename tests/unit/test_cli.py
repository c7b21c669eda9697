"""Command line tests (synthetic data only, no network)."""

from __future__ import annotations

import json

from cryptolens.cli import main
from cryptolens.exceptions import MarketDataError


class TestCli:
    def test_synthetic_summary(self, capsys):
        code = main(["analyze", "demo", "--synthetic", "--seed", "7", "--limit", "200"])
        out = capsys.readouterr().out

        assert code == 0
        assert out.startswith("DEMO [1h] ")
        assert "confidence=" in out
        assert "Last candle 2024-01-09 07:00 UTC, volume " in out
        assert "DEMO is trading at" in out

    def test_synthetic_json(self, capsys):
        code = main(["analyze", "demo", "--synthetic", "--seed", "7", "--limit", "150", "--json"])
        payload = json.loads(capsys.readouterr().out)

        assert code == 0
        assert payload["candle_count"] == 150
        assert len(payload["rsi"]) == 150
        assert payload["trend"] in {"bullish", "bearish", "neutral"}

    def test_too_few_candles(self, capsys):
        code = main(["analyze", "demo", "--synthetic", "--seed", "1", "--limit", "10"])
        assert code == 1
        assert "Not enough data" in capsys.readouterr().out

    def test_market_data_error_exit_code(self, monkeypatch):
        async def failing(self, symbol, interval=None, limit=None):
            raise MarketDataError(symbol, "boom")

        monkeypatch.setattr("cryptolens.cli.BinanceClient.get_klines", failing)
        assert main(["analyze", "BTCUSDT"]) == 2
