"""
Cryptolens Analysis Pipeline

Runs every engine once over a candle series and bundles the results. The
pipeline has no incremental mode: on each new candle batch callers re-run it
over the updated series.
"""

from __future__ import annotations

from typing import Optional, Sequence

import structlog

from cryptolens.engines.overlap import suppress_overlaps
from cryptolens.engines.pattern_engine import PatternEngine
from cryptolens.engines.ta_engine import TAEngine
from cryptolens.models import (
    Candle,
    FibonacciConfig,
    MACDConfig,
    PatternConfig,
    RSIConfig,
    SignalConfig,
    SupportResistanceConfig,
    TechnicalAnalysis,
    TrendConfig,
    TrendLineConfig,
)

log = structlog.get_logger(__name__)


class AnalysisEngine:
    """Full technical analysis of one candle series.

    Usage:
        analysis = AnalysisEngine().analyze(candles)
        analysis.trend, analysis.signals.stop_loss, analysis.patterns.double_top
    """

    def __init__(
        self,
        ta_engine: Optional[TAEngine] = None,
        pattern_engine: Optional[PatternEngine] = None,
    ):
        self._ta = ta_engine or TAEngine()
        self._patterns = pattern_engine or PatternEngine()

    def analyze(
        self,
        candles: Sequence[Candle],
        *,
        levels_config: Optional[SupportResistanceConfig] = None,
        rsi_config: Optional[RSIConfig] = None,
        macd_config: Optional[MACDConfig] = None,
        trend_config: Optional[TrendConfig] = None,
        signal_config: Optional[SignalConfig] = None,
        fibonacci_config: Optional[FibonacciConfig] = None,
        trend_line_config: Optional[TrendLineConfig] = None,
        pattern_config: Optional[PatternConfig] = None,
        suppress_overlapping: bool = False,
    ) -> TechnicalAnalysis:
        """Run the whole pipeline. Never raises on short series."""
        patterns = self._patterns.detect_patterns(candles, pattern_config)
        if suppress_overlapping and not patterns.is_empty:
            patterns = suppress_overlaps(patterns, candles)

        analysis = TechnicalAnalysis(
            candle_count=len(candles),
            current_price=candles[-1].close if candles else None,
            levels=self._ta.detect_support_resistance(candles, levels_config),
            rsi=self._ta.compute_rsi(candles, rsi_config),
            macd=self._ta.compute_macd(candles, macd_config),
            trend=self._ta.classify_trend(candles, trend_config),
            signals=self._ta.identify_signal_points(candles, signal_config),
            fibonacci=self._patterns.fibonacci_levels(candles, fibonacci_config),
            trend_lines=self._patterns.detect_trend_lines(candles, trend_line_config),
            patterns=patterns,
        )
        log.debug(
            "analysis.complete",
            candles=len(candles),
            trend=analysis.trend.value,
            entries=len(analysis.signals.entry_points),
        )
        return analysis
