"""
Cryptolens Technical Analysis Engine

Pure domain logic for support/resistance levels, momentum indicators (RSI,
MACD), moving-average trend classification and RSI crossover signal points
with ATR-sized stops. No I/O and no shared state: every call recomputes from
the candles it is given and never mutates them.

Short series never raise. They produce empty lists, ``TrendLabel.NEUTRAL`` or
``None`` scalars, so callers must check results before using them.
"""

from __future__ import annotations

from typing import Optional, Sequence

import structlog

from cryptolens.engines.extrema import find_candle_extrema
from cryptolens.models import (
    Candle,
    MACDConfig,
    MACDResult,
    PositionBias,
    RSIConfig,
    SignalConfig,
    SignalPoints,
    SupportResistanceConfig,
    SupportResistanceLevels,
    TrendConfig,
    TrendLabel,
)

log = structlog.get_logger(__name__)


class TAEngine:
    """Stateless technical analysis engine.

    Usage:
        engine = TAEngine()
        levels = engine.detect_support_resistance(candles)
        rsi = engine.compute_rsi(candles, RSIConfig(period=7))
    """

    # ──────────────────────────────────────────────
    # Support / Resistance
    # ──────────────────────────────────────────────

    def detect_support_resistance(
        self,
        candles: Sequence[Candle],
        config: Optional[SupportResistanceConfig] = None,
    ) -> SupportResistanceLevels:
        """Detect deduplicated support and resistance levels.

        Every strict local low (window ``significance``) is a candidate support
        and every strict local high a candidate resistance. Candidates closer
        than ``min_distance_pct`` of the latest close to the previously kept
        level are dropped.
        """
        cfg = config or SupportResistanceConfig()
        if len(candles) < cfg.lookback + cfg.significance:
            log.debug(
                "support_resistance.insufficient_data",
                candles=len(candles),
                required=cfg.lookback + cfg.significance,
            )
            return SupportResistanceLevels()

        lows, highs = find_candle_extrema(candles, cfg.significance)
        min_distance = candles[-1].close * cfg.min_distance_pct

        return SupportResistanceLevels(
            supports=self._filter_close_levels([v for _, v in lows], min_distance),
            resistances=self._filter_close_levels([v for _, v in highs], min_distance),
        )

    @staticmethod
    def _filter_close_levels(levels: list[float], min_distance: float) -> list[float]:
        """Sort ascending and keep the first level of every cluster."""
        if not levels:
            return []

        ordered = sorted(levels)
        kept = [ordered[0]]
        for level in ordered[1:]:
            if level - kept[-1] > min_distance:
                kept.append(level)
        return kept

    # ──────────────────────────────────────────────
    # Momentum Indicators
    # ──────────────────────────────────────────────

    def compute_rsi(
        self,
        candles: Sequence[Candle],
        config: Optional[RSIConfig] = None,
    ) -> list[Optional[float]]:
        """Wilder RSI over close prices, one value per candle."""
        cfg = config or RSIConfig()
        return self._rsi([c.close for c in candles], cfg)

    @staticmethod
    def _rsi(closes: list[float], cfg: RSIConfig) -> list[Optional[float]]:
        """Relative Strength Index over a list of close prices.

        Returns a list the same length as closes. The first ``period``
        positions hold ``cfg.warmup_value``; position ``period`` is computed
        from the simple-mean seed and later positions use Wilder smoothing.
        """
        period = cfg.period
        result: list[Optional[float]] = [cfg.warmup_value] * len(closes)
        if len(closes) <= period:
            return result

        gains = []
        losses = []
        for i in range(1, len(closes)):
            diff = closes[i] - closes[i - 1]
            gains.append(max(0.0, diff))
            losses.append(max(0.0, -diff))

        avg_gain = sum(gains[:period]) / period
        avg_loss = sum(losses[:period]) / period

        def _value(gain: float, loss: float) -> float:
            rs = gain / (loss if loss != 0 else cfg.zero_loss_epsilon)
            return 100 - 100 / (1 + rs)

        result[period] = _value(avg_gain, avg_loss)

        for i in range(period, len(gains)):
            avg_gain = (avg_gain * (period - 1) + gains[i]) / period
            avg_loss = (avg_loss * (period - 1) + losses[i]) / period
            result[i + 1] = _value(avg_gain, avg_loss)

        return result

    @staticmethod
    def sma(values: list[float], period: int) -> list[Optional[float]]:
        """Simple Moving Average.

        Returns a list the same length as values. Positions before
        `period - 1` are None.
        """
        result: list[Optional[float]] = [None] * len(values)
        for i in range(period - 1, len(values)):
            window = values[i - period + 1: i + 1]
            result[i] = sum(window) / period
        return result

    @staticmethod
    def ema(values: list[float], period: int) -> list[float]:
        """Exponential Moving Average seeded with the SMA of the first `period` values.

        Returns only the defined part: ``len(values) - period + 1`` values, the
        first belonging to position ``period - 1``. Empty if too short.
        """
        if period < 1 or len(values) < period:
            return []

        result = [sum(values[:period]) / period]
        multiplier = 2 / (period + 1)
        for price in values[period:]:
            result.append((price - result[-1]) * multiplier + result[-1])
        return result

    def compute_macd(
        self,
        candles: Sequence[Candle],
        config: Optional[MACDConfig] = None,
    ) -> MACDResult:
        """MACD line, signal line and histogram, aligned on the tail."""
        cfg = config or MACDConfig()
        n = len(candles)
        if n <= max(cfg.fast, cfg.slow):
            log.debug("macd.insufficient_data", candles=n, slow=cfg.slow)
            return MACDResult()

        closes = [c.close for c in candles]
        fast_ema = self.ema(closes, cfg.fast)
        slow_ema = self.ema(closes, cfg.slow)

        length = min(len(fast_ema), len(slow_ema))
        fast_tail = fast_ema[len(fast_ema) - length:]
        slow_tail = slow_ema[len(slow_ema) - length:]
        macd_line = [f - s for f, s in zip(fast_tail, slow_tail)]
        macd_offset = n - length

        signal_line = self.ema(macd_line, cfg.signal)
        if not signal_line:
            return MACDResult(macd_line=macd_line, macd_offset=macd_offset)

        macd_tail = macd_line[len(macd_line) - len(signal_line):]
        histogram = [m - s for m, s in zip(macd_tail, signal_line)]

        return MACDResult(
            macd_line=macd_line,
            signal_line=signal_line,
            histogram=histogram,
            macd_offset=macd_offset,
            signal_offset=n - len(signal_line),
        )

    # ──────────────────────────────────────────────
    # Trend
    # ──────────────────────────────────────────────

    def classify_trend(
        self,
        candles: Sequence[Candle],
        config: Optional[TrendConfig] = None,
    ) -> TrendLabel:
        """Compare the short and long SMA of the latest closes."""
        cfg = config or TrendConfig()
        if len(candles) < max(cfg.short_period, cfg.long_period):
            return TrendLabel.NEUTRAL

        closes = [c.close for c in candles]
        short_sma = self.sma(closes, cfg.short_period)[-1]
        long_sma = self.sma(closes, cfg.long_period)[-1]

        if short_sma > long_sma * (1 + cfg.band):
            return TrendLabel.BULLISH
        if short_sma < long_sma * (1 - cfg.band):
            return TrendLabel.BEARISH
        return TrendLabel.NEUTRAL

    # ──────────────────────────────────────────────
    # Signal Points
    # ──────────────────────────────────────────────

    @staticmethod
    def average_true_range(
        candles: Sequence[Candle],
        period: int = 14,
        end: Optional[int] = None,
    ) -> Optional[float]:
        """Simple mean of the `period` true ranges ending at candle `end`.

        ``end`` defaults to the last candle. Returns None when fewer than
        ``period`` true ranges (``period + 1`` candles) are available.
        """
        last = len(candles) - 1 if end is None else end
        if last >= len(candles) or last - period < 0:
            return None

        total = 0.0
        for j in range(last - period + 1, last + 1):
            prev_close = candles[j - 1].close
            total += max(
                candles[j].high - candles[j].low,
                abs(candles[j].high - prev_close),
                abs(candles[j].low - prev_close),
            )
        return total / period

    def identify_signal_points(
        self,
        candles: Sequence[Candle],
        config: Optional[SignalConfig] = None,
    ) -> SignalPoints:
        """RSI oversold entries and overbought exits, with stops for the latest entry."""
        cfg = config or SignalConfig()
        n = len(candles)
        if n < cfg.min_candles:
            log.debug("signal_points.insufficient_data", candles=n, required=cfg.min_candles)
            return SignalPoints()

        rsi = self.compute_rsi(candles, cfg.rsi)

        entries: list[int] = []
        exits: list[int] = []
        for i in range(1, n):
            prev, cur = rsi[i - 1], rsi[i]
            if prev is None or cur is None:
                continue
            if prev > cfg.oversold and cur <= cfg.oversold:
                entries.append(i)
            elif prev < cfg.overbought and cur >= cfg.overbought:
                exits.append(i)

        if not entries:
            return SignalPoints(exit_points=exits)

        last_entry = entries[-1]
        entry_price = candles[last_entry].close
        current_price = candles[-1].close
        anchor = last_entry if cfg.atr_anchor == "entry" else n - 1
        atr = self.average_true_range(candles, cfg.atr_period, end=anchor)

        if atr is None:
            log.debug("signal_points.atr_unavailable", entry=last_entry, period=cfg.atr_period)
            return SignalPoints(entry_points=entries, exit_points=exits)

        if entry_price < current_price:
            bias = PositionBias.LONG
            stop_loss = entry_price - atr * cfg.stop_multiplier
            take_profit = entry_price + atr * cfg.target_multiplier
        else:
            bias = PositionBias.SHORT
            stop_loss = entry_price + atr * cfg.stop_multiplier
            take_profit = entry_price - atr * cfg.target_multiplier

        log.debug(
            "signal_points.stops_computed",
            entry=last_entry,
            bias=bias.value,
            atr=atr,
        )
        return SignalPoints(
            entry_points=entries,
            exit_points=exits,
            stop_loss=stop_loss,
            take_profit=take_profit,
            bias=bias,
        )
