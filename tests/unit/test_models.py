"""Candle model, series validation and config model tests."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from cryptolens.exceptions import CandleSeriesError
from cryptolens.models import (
    Candle,
    PatternScanResult,
    RSIConfig,
    SignalConfig,
    TrianglePattern,
    TriangleType,
    WedgePattern,
    WedgeType,
    to_dataframe,
    validate_series,
)


def _candle(**overrides) -> Candle:
    fields = dict(open_time=0, open=10.0, high=12.0, low=9.0, close=11.0, volume=5.0, close_time=59_999)
    fields.update(overrides)
    return Candle(**fields)


class TestCandle:
    def test_camel_case_aliases(self):
        candle = Candle.model_validate({
            "openTime": 1, "open": 1.0, "high": 2.0, "low": 0.5, "close": 1.5,
            "volume": 3.0, "closeTime": 2, "quoteAssetVolume": 4.5, "numberOfTrades": 7,
        })
        assert candle.open_time == 1
        assert candle.number_of_trades == 7
        assert candle.model_dump(by_alias=True)["quoteAssetVolume"] == 4.5

    def test_is_frozen(self):
        candle = _candle()
        with pytest.raises(ValidationError):
            candle.close = 20.0

    def test_low_above_body(self):
        with pytest.raises(ValidationError):
            _candle(low=10.5)

    def test_high_below_body(self):
        with pytest.raises(ValidationError):
            _candle(high=10.5)


class TestSeries:
    def test_ascending_open_times(self, flat_candles):
        validate_series(flat_candles(5))

    def test_duplicate_open_time(self):
        with pytest.raises(CandleSeriesError) as exc:
            validate_series([_candle(open_time=0), _candle(open_time=0)])
        assert exc.value.index == 1

    def test_descending_open_time(self):
        with pytest.raises(CandleSeriesError):
            validate_series([_candle(open_time=60_000), _candle(open_time=0)])

    def test_dataframe(self, flat_candles):
        df = to_dataframe(flat_candles(3))
        assert list(df.columns) == ["open", "high", "low", "close", "volume"]
        assert list(df.index) == [0, 60_000, 120_000]


class TestConfigs:
    def test_defaults(self):
        cfg = SignalConfig()
        assert cfg.rsi.period == 14
        assert cfg.rsi.warmup_value is None
        assert (cfg.stop_multiplier, cfg.target_multiplier) == (2.0, 3.0)
        assert cfg.atr_anchor == "entry"

    def test_rejects_invalid_period(self):
        with pytest.raises(ValidationError):
            RSIConfig(period=0)

    def test_rejects_unknown_anchor(self):
        with pytest.raises(ValidationError):
            SignalConfig(atr_anchor="close")


class TestPatternScanResult:
    def test_pattern_names(self):
        scan = PatternScanResult(
            double_bottom=[50],
            triangle=[TrianglePattern(start=0, end=29, type=TriangleType.ASCENDING)],
            wedge=[WedgePattern(start=3, end=32, type=WedgeType.FALLING)],
        )
        assert scan.pattern_names() == ["Double Bottom", "Ascending Triangle", "Falling Wedge"]
        assert not scan.is_empty
