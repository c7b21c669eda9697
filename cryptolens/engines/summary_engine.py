"""
Cryptolens Technical Summary Engine

Turns a TechnicalAnalysis into a human-readable summary: direction,
confidence score (0-100), risk level, key points and a narrative paragraph.
Rule-based and deterministic.
"""

from __future__ import annotations

from typing import Optional, Sequence

import structlog

from cryptolens.models import (
    Candle,
    RiskLevel,
    TechnicalAnalysis,
    TechnicalSummary,
    TrendLabel,
    to_dataframe,
)
from cryptolens.utils.formatters import format_price, format_price_change

log = structlog.get_logger(__name__)


MIN_CANDLES = 30
CHANGE_LOOKBACK = 10
VOLUME_LOOKBACK = 10

_INTERVAL_TEXT = {
    "1s": "second",
    "1m": "minute",
    "5m": "5-minute",
    "15m": "15-minute",
    "1h": "hourly",
    "4h": "4-hour",
    "1d": "daily",
    "1w": "weekly",
    "1M": "monthly",
}


class SummaryEngine:
    """Narrative layer over the analysis pipeline.

    Usage:
        summary = SummaryEngine().summarize(analysis, candles, symbol="BTCUSDT", interval="1h")
    """

    def summarize(
        self,
        analysis: TechnicalAnalysis,
        candles: Sequence[Candle],
        symbol: str,
        interval: str = "1h",
    ) -> Optional[TechnicalSummary]:
        """Build the summary. Returns None for series shorter than 30 candles."""
        if len(candles) < MIN_CANDLES:
            log.debug("summary.insufficient_data", symbol=symbol, candles=len(candles))
            return None

        df = to_dataframe(candles)
        current_price = float(df["close"].iloc[-1])
        previous_price = float(df["close"].iloc[-CHANGE_LOOKBACK])
        percent_change = (
            (current_price - previous_price) / previous_price * 100 if previous_price else 0.0
        )

        volume = float(df["volume"].iloc[-1])
        avg_volume = float(df["volume"].iloc[-VOLUME_LOOKBACK:].mean())
        volume_ratio = volume / avg_volume if avg_volume > 0 else 0.0

        pattern_names = analysis.patterns.pattern_names()
        confidence = self.confidence_score(analysis, volume_ratio, len(pattern_names))
        risk = self.risk_level(percent_change)
        interval_text = _INTERVAL_TEXT.get(interval, interval)

        key_points = self._key_points(analysis, volume_ratio, pattern_names, interval_text)
        narrative = self._narrative(
            analysis, symbol, current_price, percent_change, volume_ratio,
            pattern_names, risk, interval_text,
        )

        return TechnicalSummary(
            symbol=symbol,
            interval=interval,
            direction=analysis.trend,
            confidence=confidence,
            risk_level=risk,
            percent_change=percent_change,
            volume_ratio=volume_ratio,
            key_points=key_points,
            narrative=narrative,
        )

    # ──────────────────────────────────────────
    # Scoring
    # ──────────────────────────────────────────

    @staticmethod
    def confidence_score(
        analysis: TechnicalAnalysis,
        volume_ratio: float,
        pattern_count: int,
    ) -> int:
        """40 baseline plus momentum, volume and pattern agreement with the trend.

        A neutral trend scores a flat 90. Missing RSI/MACD values count as
        disagreeing.
        """
        rsi = analysis.latest_rsi
        macd = analysis.latest_macd
        signal = analysis.latest_signal
        has_macd = macd is not None and signal is not None

        if analysis.trend == TrendLabel.BULLISH:
            strength = (15 if rsi is not None and rsi > 50 else 5)
            strength += 15 if has_macd and macd > signal else 5
        elif analysis.trend == TrendLabel.BEARISH:
            strength = (15 if rsi is not None and rsi < 50 else 5)
            strength += 15 if has_macd and macd < signal else 5
        else:
            return 90

        strength += 10 if volume_ratio > 1 else 0
        strength += pattern_count * 5
        return int(min(100, max(0, 40 + strength)))

    @staticmethod
    def risk_level(percent_change: float) -> RiskLevel:
        volatility = abs(percent_change) / 2
        if volatility > 5:
            return RiskLevel.HIGH
        if volatility > 2:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    # ──────────────────────────────────────────
    # Text
    # ──────────────────────────────────────────

    @staticmethod
    def _rsi_condition(rsi: Optional[float]) -> str:
        if rsi is None:
            return "unavailable"
        if rsi > 70:
            return "overbought"
        if rsi < 30:
            return "oversold"
        return "neutral"

    @staticmethod
    def _conviction(volume_ratio: float) -> str:
        if volume_ratio > 1.5:
            return "strong"
        if volume_ratio > 1:
            return "moderate"
        return "weak"

    def _key_points(
        self,
        analysis: TechnicalAnalysis,
        volume_ratio: float,
        pattern_names: list[str],
        interval_text: str,
    ) -> list[str]:
        points = [f"{analysis.trend.value.capitalize()} trend over the {interval_text} timeframe"]

        rsi = analysis.latest_rsi
        if rsi is not None:
            points.append(f"RSI at {rsi:.1f} - {self._rsi_condition(rsi)} conditions")

        macd, signal = analysis.latest_macd, analysis.latest_signal
        if macd is not None and signal is not None:
            side = "above" if macd > signal else "below"
            tone = "bullish" if macd > signal else "bearish"
            points.append(f"MACD {side} signal line - {tone} momentum")

        points.append({
            "strong": "Volume significantly above average - strong conviction",
            "moderate": "Volume above average - moderate conviction",
            "weak": "Volume below average - weak conviction",
        }[self._conviction(volume_ratio)])

        if pattern_names:
            points.append(f"Key patterns detected: {', '.join(pattern_names)}")
        else:
            points.append("No significant patterns detected")

        if analysis.levels.supports:
            points.append(f"Nearest support at {format_price(analysis.levels.supports[0])}")
        if analysis.levels.resistances:
            points.append(f"Nearest resistance at {format_price(analysis.levels.resistances[0])}")
        return points

    def _narrative(
        self,
        analysis: TechnicalAnalysis,
        symbol: str,
        current_price: float,
        percent_change: float,
        volume_ratio: float,
        pattern_names: list[str],
        risk: RiskLevel,
        interval_text: str,
    ) -> str:
        trend = analysis.trend
        supports = analysis.levels.supports
        resistances = analysis.levels.resistances
        support_text = format_price(supports[0]) if supports else "support levels"
        resistance_text = format_price(resistances[0]) if resistances else "resistance levels"

        parts = [
            f"{symbol} is trading at {format_price(current_price)} "
            f"({format_price_change(percent_change)} over the last {CHANGE_LOOKBACK} candles) "
            f"on the {interval_text} timeframe, in a {trend.value} trend with "
            f"{self._conviction(volume_ratio)} volume support.",
        ]

        rsi = analysis.latest_rsi
        if rsi is not None:
            parts.append(f"RSI reads {rsi:.1f}, indicating {self._rsi_condition(rsi)} momentum.")

        if pattern_names:
            parts.append(f"Chart patterns present: {', '.join(pattern_names)}.")
        else:
            parts.append("No significant chart patterns were identified.")

        stop = analysis.signals.stop_loss
        if trend == TrendLabel.BULLISH:
            stop_text = format_price(stop) if stop is not None else "recent lows"
            parts.append(
                f"Long entries near {support_text} target {resistance_text} "
                f"with stops below {stop_text}."
            )
        elif trend == TrendLabel.BEARISH:
            stop_text = format_price(stop) if stop is not None else "recent highs"
            parts.append(
                f"Short entries near {resistance_text} target {support_text} "
                f"with stops above {stop_text}."
            )
        else:
            parts.append(
                f"Without a clear direction, range trading between {support_text} "
                f"and {resistance_text} is the conservative stance."
            )

        parts.append(f"Current risk profile: {risk.value}.")
        return " ".join(parts)
