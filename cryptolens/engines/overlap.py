"""
Cryptolens Pattern Overlap Suppression

Optional post-processing for presentation layers that draw pattern boxes.

Policy: candidates are visited in detection order (head & shoulders, double
tops, double bottoms, triangles, wedges, each in scan order). A candidate is
rejected when its index range AND its price range both intersect a box that
was already accepted. Ranges are closed intervals.
"""

from __future__ import annotations

from typing import NamedTuple, Sequence

import structlog

from cryptolens.models import Candle, PatternScanResult

log = structlog.get_logger(__name__)


class PatternBox(NamedTuple):
    start: int
    end: int
    low: float
    high: float

    def intersects(self, other: "PatternBox") -> bool:
        return (
            self.start <= other.end and other.start <= self.end
            and self.low <= other.high and other.low <= self.high
        )


def point_box(candles: Sequence[Candle], index: int, radius: int, padding: float) -> PatternBox:
    """Box around a single-index pattern: index ± radius, that candle's range."""
    candle = candles[index]
    return PatternBox(
        start=max(0, index - radius),
        end=min(len(candles) - 1, index + radius),
        low=candle.low * (1 - padding),
        high=candle.high * (1 + padding),
    )


def range_box(candles: Sequence[Candle], start: int, end: int, padding: float) -> PatternBox:
    """Box spanning [start, end] and the price extremes of those candles."""
    span = candles[start:end + 1]
    return PatternBox(
        start=start,
        end=end,
        low=min(c.low for c in span) * (1 - padding),
        high=max(c.high for c in span) * (1 + padding),
    )


def suppress_overlaps(
    scan: PatternScanResult,
    candles: Sequence[Candle],
    point_radius: int = 8,
    padding: float = 0.01,
    head_and_shoulders_radius: int = 10,
) -> PatternScanResult:
    """Return a copy of `scan` without instances overlapping an earlier one.

    Head & shoulders boxes span ``head_and_shoulders_radius`` candles either
    side of the head; double tops/bottoms span ``point_radius``.
    """
    accepted: list[PatternBox] = []

    def _accept(box: PatternBox) -> bool:
        if any(box.intersects(other) for other in accepted):
            return False
        accepted.append(box)
        return True

    head_and_shoulders = [
        i for i in scan.head_and_shoulders
        if _accept(point_box(candles, i, head_and_shoulders_radius, padding))
    ]
    double_top = [
        i for i in scan.double_top
        if _accept(point_box(candles, i, point_radius, padding))
    ]
    double_bottom = [
        i for i in scan.double_bottom
        if _accept(point_box(candles, i, point_radius, padding))
    ]
    triangle = [
        t for t in scan.triangle
        if _accept(range_box(candles, t.start, t.end, padding))
    ]
    wedge = [
        w for w in scan.wedge
        if _accept(range_box(candles, w.start, w.end, padding))
    ]

    result = PatternScanResult(
        head_and_shoulders=head_and_shoulders,
        double_top=double_top,
        double_bottom=double_bottom,
        triangle=[t.model_copy() for t in triangle],
        wedge=[w.model_copy() for w in wedge],
    )
    log.debug("overlap.suppressed", kept=len(accepted))
    return result
