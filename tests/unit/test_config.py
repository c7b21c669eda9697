"""Settings and logging setup tests."""

from __future__ import annotations

import json

import pytest
import structlog

from cryptolens.config import Settings, get_settings
from cryptolens.observability import configure_logging


@pytest.fixture
def clean_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self, clean_settings, monkeypatch):
        monkeypatch.delenv("CRYPTOLENS_KLINE_LIMIT", raising=False)
        settings = Settings(_env_file=None)
        assert settings.kline_limit == 500
        assert settings.binance_base_url == "https://api.binance.com/api/v3"

    def test_env_override(self, clean_settings, monkeypatch):
        monkeypatch.setenv("CRYPTOLENS_KLINE_LIMIT", "250")
        settings = get_settings()
        assert settings.kline_limit == 250
        assert settings.http_timeout == 10.0

    def test_cached(self, clean_settings):
        assert get_settings() is get_settings()


class TestLogging:
    def test_json_lines_on_stderr(self, capsys):
        configure_logging(level="INFO", json=True)
        structlog.get_logger("test").info("engine.ready", candles=10)

        captured = capsys.readouterr()
        assert captured.out == ""
        record = json.loads(captured.err.strip().splitlines()[-1])
        assert record["event"] == "engine.ready"
        assert record["candles"] == 10
        assert record["level"] == "info"

    def test_level_filtering(self, capsys):
        configure_logging(level="WARNING", json=True)
        structlog.get_logger("test").info("hidden")
        assert capsys.readouterr().err == ""
