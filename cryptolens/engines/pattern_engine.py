"""
Cryptolens Pattern Detection Engine

Rule-based chart structure detection from OHLCV candles. Deterministic, no
ML, and no cross-call memory: every scan is derived fresh from its input.

  Levels:   Fibonacci retracements of the trailing high/low range
  Lines:    Uptrend / downtrend segments between consecutive swing points
  Patterns: Double Top/Bottom, Head & Shoulders,
            Ascending/Descending/Symmetrical Triangle, Rising/Falling Wedge

Triangles and wedges come from a sliding fixed-size box. Every start offset
is tested, so overlapping detections are expected; see
:mod:`cryptolens.engines.overlap` for the optional suppression stage.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np
import structlog
from numpy.lib.stride_tricks import sliding_window_view

from cryptolens.engines.extrema import Extremum, find_candle_extrema
from cryptolens.models import (
    Candle,
    FibonacciConfig,
    PatternConfig,
    PatternScanResult,
    TrendLineConfig,
    TrendLines,
    TrendLineSegment,
    TrianglePattern,
    TriangleType,
    WedgePattern,
    WedgeType,
)

log = structlog.get_logger(__name__)


FIBONACCI_RATIOS: tuple[float, ...] = (0.0, 0.236, 0.382, 0.5, 0.618, 0.786, 1.0)

# Slopes closer than this fraction of the box's price level are treated as equal
SLOPE_TOLERANCE = 1e-9

BoxType = Union[TriangleType, WedgeType]


def linear_regression_slope(values: Sequence[float]) -> float:
    """Least squares slope of `values` against x = 0..n-1.

    Returns 0.0 when the slope is undefined (fewer than two points).
    """
    if len(values) < 2:
        return 0.0
    return float(np.polyfit(np.arange(len(values)), values, 1)[0])


def classify_box(
    high_slope: float,
    low_slope: float,
    flat: float,
    tolerance: float = 0.0,
) -> Optional[BoxType]:
    """Map the slopes of a box's highs and lows to a triangle or wedge type.

    Values within ``tolerance`` of each other compare as equal: a slope that
    close to ``±flat`` counts as rising/falling, and a wedge needs the two
    slope magnitudes to differ by more than it.
    """
    def close(a: float, b: float) -> bool:
        return bool(np.isclose(a, b, rtol=SLOPE_TOLERANCE, atol=tolerance))

    highs_rising = high_slope >= flat or close(high_slope, flat)
    lows_rising = low_slope >= flat or close(low_slope, flat)
    highs_falling = high_slope <= -flat or close(high_slope, -flat)
    lows_falling = low_slope <= -flat or close(low_slope, -flat)
    highs_flat = not (highs_rising or highs_falling)
    lows_flat = not (lows_rising or lows_falling)
    converging = not close(abs(high_slope), abs(low_slope))

    if highs_flat and lows_rising:
        return TriangleType.ASCENDING
    if highs_falling and lows_flat:
        return TriangleType.DESCENDING
    if highs_falling and lows_rising:
        return TriangleType.SYMMETRICAL
    if highs_falling and lows_falling and converging and abs(high_slope) > abs(low_slope):
        return WedgeType.FALLING
    if highs_rising and lows_rising and converging and abs(low_slope) > abs(high_slope):
        return WedgeType.RISING
    return None


class PatternEngine:
    """Rule-based chart pattern, trend-line and Fibonacci detector.

    Usage:
        engine = PatternEngine()
        result = engine.detect_patterns(candles)
    """

    # ──────────────────────────────────────────
    # Fibonacci Retracement Levels
    # ──────────────────────────────────────────

    def fibonacci_levels(
        self,
        candles: Sequence[Candle],
        config: Optional[FibonacciConfig] = None,
    ) -> list[float]:
        """Retracement levels measured down from the trailing highest high.

        One price per ratio in FIBONACCI_RATIOS, from the high (0%) to the low
        (100%). The ratios are always measured from the high, whatever the
        direction of the move.
        """
        cfg = config or FibonacciConfig()
        if len(candles) < cfg.lookback:
            return []

        recent = candles[-cfg.lookback:]
        highest = float(np.max([c.high for c in recent]))
        lowest = float(np.min([c.low for c in recent]))
        diff = highest - lowest

        return [highest - ratio * diff for ratio in FIBONACCI_RATIOS]

    # ──────────────────────────────────────────
    # Trend Line Detection
    # ──────────────────────────────────────────

    def detect_trend_lines(
        self,
        candles: Sequence[Candle],
        config: Optional[TrendLineConfig] = None,
    ) -> TrendLines:
        """Connect consecutive swing lows (rising) and swing highs (falling).

        Pairs that do not satisfy the ordering are skipped, never reported as
        flat. Indices refer to the full input series.
        """
        cfg = config or TrendLineConfig()
        n = len(candles)
        if n < cfg.lookback:
            return TrendLines()

        offset = n - cfg.lookback
        lows, highs = find_candle_extrema(candles[offset:], cfg.window)

        uptrend = [
            TrendLineSegment(start=i1 + offset, end=i2 + offset, slope=(v2 - v1) / (i2 - i1))
            for (i1, v1), (i2, v2) in zip(lows, lows[1:])
            if v2 > v1
        ]
        downtrend = [
            TrendLineSegment(start=i1 + offset, end=i2 + offset, slope=(v2 - v1) / (i2 - i1))
            for (i1, v1), (i2, v2) in zip(highs, highs[1:])
            if v2 < v1
        ]
        return TrendLines(uptrend=uptrend, downtrend=downtrend)

    # ──────────────────────────────────────────
    # Chart Patterns
    # ──────────────────────────────────────────

    def detect_patterns(
        self,
        candles: Sequence[Candle],
        config: Optional[PatternConfig] = None,
    ) -> PatternScanResult:
        """Detect double tops/bottoms, head & shoulders, triangles and wedges."""
        cfg = config or PatternConfig()
        if len(candles) < cfg.min_candles:
            log.debug("pattern_scan.insufficient_data", candles=len(candles), required=cfg.min_candles)
            return PatternScanResult()

        swing_lows, swing_highs = find_candle_extrema(candles, cfg.window)
        highs = np.array([c.high for c in candles], dtype=float)
        lows = np.array([c.low for c in candles], dtype=float)
        triangles, wedges = self.scan_boxes(highs, lows, cfg)

        result = PatternScanResult(
            head_and_shoulders=self._detect_head_and_shoulders(swing_highs, cfg),
            double_top=self._detect_double_top(swing_highs, cfg),
            double_bottom=self._detect_double_bottom(swing_lows, cfg),
            triangle=triangles,
            wedge=wedges,
        )
        log.debug(
            "pattern_scan.complete",
            candles=len(candles),
            head_and_shoulders=len(result.head_and_shoulders),
            double_top=len(result.double_top),
            double_bottom=len(result.double_bottom),
            triangles=len(triangles),
            wedges=len(wedges),
        )
        return result

    @staticmethod
    def _is_double(first: Extremum, second: Extremum, cfg: PatternConfig) -> bool:
        (idx1, val1), (idx2, val2) = first, second
        if not cfg.double_min_gap < idx2 - idx1 < cfg.double_max_gap:
            return False
        if val1 == 0:
            return False
        return abs(val2 - val1) / abs(val1) < cfg.double_tolerance

    def _detect_double_top(self, swing_highs: list[Extremum], cfg: PatternConfig) -> list[int]:
        """Two consecutive peaks at similar height; emits the second peak."""
        return [
            second[0]
            for first, second in zip(swing_highs, swing_highs[1:])
            if self._is_double(first, second, cfg)
        ]

    def _detect_double_bottom(self, swing_lows: list[Extremum], cfg: PatternConfig) -> list[int]:
        """Two consecutive troughs at similar depth; emits the second trough."""
        return [
            second[0]
            for first, second in zip(swing_lows, swing_lows[1:])
            if self._is_double(first, second, cfg)
        ]

    @staticmethod
    def _detect_head_and_shoulders(swing_highs: list[Extremum], cfg: PatternConfig) -> list[int]:
        """Head above both shoulders, shoulders within tolerance; emits the head."""
        heads = []
        for j in range(2, len(swing_highs)):
            _, ls_v = swing_highs[j - 2]
            hd_i, hd_v = swing_highs[j - 1]
            _, rs_v = swing_highs[j]

            if hd_v <= ls_v or hd_v <= rs_v:
                continue
            if ls_v == 0 or abs(ls_v - rs_v) / abs(ls_v) >= cfg.shoulder_tolerance:
                continue
            heads.append(hd_i)
        return heads

    # ──────────────────────────────────────────
    # Triangle / Wedge Box Scan
    # ──────────────────────────────────────────

    @staticmethod
    def _collect_boxes(
        high_slopes: Sequence[float],
        low_slopes: Sequence[float],
        price_levels: Sequence[float],
        cfg: PatternConfig,
    ) -> tuple[list[TrianglePattern], list[WedgePattern]]:
        triangles: list[TrianglePattern] = []
        wedges: list[WedgePattern] = []
        for start, (hs, ls, level) in enumerate(zip(high_slopes, low_slopes, price_levels)):
            tolerance = SLOPE_TOLERANCE * abs(float(level))
            kind = classify_box(float(hs), float(ls), cfg.flat_slope, tolerance)
            end = start + cfg.box_size - 1
            if isinstance(kind, TriangleType):
                triangles.append(TrianglePattern(start=start, end=end, type=kind))
            elif isinstance(kind, WedgeType):
                wedges.append(WedgePattern(start=start, end=end, type=kind))
        return triangles, wedges

    def scan_boxes(
        self,
        highs: np.ndarray,
        lows: np.ndarray,
        cfg: PatternConfig,
    ) -> tuple[list[TrianglePattern], list[WedgePattern]]:
        """Classify every box with vectorised OLS slopes.

        x is the same 0..size-1 for every box, so each slope is a dot product
        of the centred window with one fixed weight vector. Slope comparisons
        use a tolerance scaled to the box's mean high.
        """
        size = cfg.box_size
        if len(highs) < size:
            return [], []

        x = np.arange(size, dtype=float)
        x_centred = x - x.mean()
        weights = x_centred / np.sum(x_centred ** 2)

        high_windows = sliding_window_view(highs, size)
        low_windows = sliding_window_view(lows, size)
        high_means = high_windows.mean(axis=1)
        high_slopes = (high_windows - high_means[:, None]) @ weights
        low_slopes = (low_windows - low_windows.mean(axis=1, keepdims=True)) @ weights

        return self._collect_boxes(high_slopes, low_slopes, high_means, cfg)

    def scan_boxes_reference(
        self,
        highs: Sequence[float],
        lows: Sequence[float],
        cfg: PatternConfig,
    ) -> tuple[list[TrianglePattern], list[WedgePattern]]:
        """Per-box refit with linear_regression_slope. O(n * size)."""
        size = cfg.box_size
        starts = range(0, len(highs) - size + 1)
        high_slopes = [linear_regression_slope(highs[s:s + size]) for s in starts]
        low_slopes = [linear_regression_slope(lows[s:s + size]) for s in starts]
        levels = [float(np.mean(highs[s:s + size])) for s in starts]
        return self._collect_boxes(high_slopes, low_slopes, levels, cfg)
