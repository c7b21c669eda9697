"""
Analysis Pipeline and Summary Tests
"""

from __future__ import annotations

import pytest

from cryptolens.data.synthetic import generate_synthetic_candles
from cryptolens.engines.analysis_engine import AnalysisEngine
from cryptolens.engines.summary_engine import SummaryEngine
from cryptolens.models import (
    MACDResult,
    RiskLevel,
    RSIConfig,
    TechnicalAnalysis,
    TrendLabel,
)


@pytest.fixture
def pipeline() -> AnalysisEngine:
    return AnalysisEngine()


class TestAnalysisEngine:
    def test_empty_input(self, pipeline):
        analysis = pipeline.analyze([])
        assert analysis.candle_count == 0
        assert analysis.current_price is None
        assert analysis.rsi == []
        assert analysis.macd.is_empty
        assert analysis.trend == TrendLabel.NEUTRAL
        assert not analysis.signals.has_entry
        assert analysis.fibonacci == []
        assert analysis.patterns.is_empty

    def test_flat_market(self, pipeline, flat_candles):
        analysis = pipeline.analyze(flat_candles(200))
        assert analysis.trend == TrendLabel.NEUTRAL
        assert analysis.levels.supports == []
        assert analysis.levels.resistances == []
        assert analysis.patterns.is_empty
        assert analysis.signals.entry_points == []
        assert analysis.fibonacci == [100.0] * 7

    def test_deterministic(self, pipeline):
        candles = generate_synthetic_candles(300, seed=11)
        assert pipeline.analyze(candles) == pipeline.analyze(candles)

    def test_rsi_aligned_with_candles(self, pipeline):
        candles = generate_synthetic_candles(120, seed=6)
        analysis = pipeline.analyze(candles)
        assert len(analysis.rsi) == len(candles)
        assert analysis.current_price == candles[-1].close
        assert analysis.candle_count == 120

    def test_component_config(self, pipeline):
        candles = generate_synthetic_candles(60, seed=6)
        analysis = pipeline.analyze(candles, rsi_config=RSIConfig(period=5))
        assert analysis.rsi[4] is None
        assert analysis.rsi[5] is not None

    def test_input_is_not_mutated(self, pipeline):
        candles = generate_synthetic_candles(150, seed=13)
        snapshot = [c.model_copy() for c in candles]
        pipeline.analyze(candles, suppress_overlapping=True)
        assert candles == snapshot

    def test_json_round_trip(self, pipeline):
        candles = generate_synthetic_candles(150, seed=14)
        analysis = pipeline.analyze(candles)
        restored = TechnicalAnalysis.model_validate_json(analysis.model_dump_json())
        assert restored.trend == analysis.trend
        assert restored.patterns == analysis.patterns


# ═══════════════════════════════════════════════
#  SUMMARY
# ═══════════════════════════════════════════════

def _analysis(trend: TrendLabel, rsi=None, macd=None, signal=None) -> TechnicalAnalysis:
    return TechnicalAnalysis(
        candle_count=100,
        trend=trend,
        rsi=[rsi] if rsi is not None else [],
        macd=MACDResult(
            macd_line=[macd] if macd is not None else [],
            signal_line=[signal] if signal is not None else [],
        ),
    )


class TestConfidenceScore:
    def test_neutral_is_flat(self):
        assert SummaryEngine.confidence_score(_analysis(TrendLabel.NEUTRAL), 3.0, 4) == 90

    def test_bullish_agreement(self):
        analysis = _analysis(TrendLabel.BULLISH, rsi=60.0, macd=2.0, signal=1.0)
        assert SummaryEngine.confidence_score(analysis, 1.2, 2) == 90

    def test_bearish_disagreement(self):
        analysis = _analysis(TrendLabel.BEARISH, rsi=60.0, macd=2.0, signal=1.0)
        assert SummaryEngine.confidence_score(analysis, 0.8, 0) == 50

    def test_missing_indicators_count_as_disagreeing(self):
        assert SummaryEngine.confidence_score(_analysis(TrendLabel.BULLISH), 0.5, 0) == 50

    def test_clamped_to_100(self):
        analysis = _analysis(TrendLabel.BULLISH, rsi=80.0, macd=2.0, signal=1.0)
        assert SummaryEngine.confidence_score(analysis, 2.0, 5) == 100


class TestRiskLevel:
    @pytest.mark.parametrize("change,expected", [
        (0.0, RiskLevel.LOW),
        (4.0, RiskLevel.LOW),
        (4.1, RiskLevel.MEDIUM),
        (10.0, RiskLevel.MEDIUM),
        (10.2, RiskLevel.HIGH),
        (-12.0, RiskLevel.HIGH),
    ])
    def test_thresholds(self, change, expected):
        assert SummaryEngine.risk_level(change) == expected


class TestSummarize:
    def test_short_series(self, pipeline, flat_candles):
        candles = flat_candles(29)
        assert SummaryEngine().summarize(pipeline.analyze(candles), candles, "BTCUSDT") is None

    def test_flat_market(self, pipeline, flat_candles):
        candles = flat_candles(200)
        summary = SummaryEngine().summarize(pipeline.analyze(candles), candles, "BTCUSDT")

        assert summary.direction == TrendLabel.NEUTRAL
        assert summary.confidence == 90
        assert summary.risk_level == RiskLevel.LOW
        assert summary.percent_change == 0.0
        assert summary.key_points[0] == "Neutral trend over the hourly timeframe"
        assert "No significant patterns detected" in summary.key_points
        assert "range trading between support levels and resistance levels" in summary.narrative

    def test_bullish_series(self, pipeline, candles_from_closes):
        candles = candles_from_closes([100.0 + i for i in range(100)])
        summary = SummaryEngine().summarize(pipeline.analyze(candles), candles, "ETHUSDT", "4h")

        assert summary.direction == TrendLabel.BULLISH
        assert summary.risk_level == RiskLevel.MEDIUM
        assert summary.percent_change == pytest.approx((199 - 190) / 190 * 100)
        assert summary.volume_ratio > 1
        assert 65 <= summary.confidence <= 100
        assert summary.key_points[0] == "Bullish trend over the 4-hour timeframe"
        assert summary.narrative.startswith("ETHUSDT is trading at 199")
        assert "stops below recent lows" in summary.narrative

    def test_bearish_series(self, pipeline, candles_from_closes):
        candles = candles_from_closes([300.0 - i for i in range(100)])
        summary = SummaryEngine().summarize(pipeline.analyze(candles), candles, "SOLUSDT")
        assert summary.direction == TrendLabel.BEARISH
        assert "Short entries near" in summary.narrative
