"""
Cryptolens Extremum Scanner

Strict local minima / maxima in a symmetric neighbourhood. Support/resistance
(window 3), trend lines (window 2) and chart patterns (window 5) each call this
with their own window.
"""

from __future__ import annotations

from typing import Literal, Sequence

from cryptolens.models import Candle

Extremum = tuple[int, float]


def find_local_extrema(
    values: Sequence[float],
    window: int,
    mode: Literal["min", "max"] = "min",
) -> list[Extremum]:
    """Find strict local extrema. Returns list of (index, value).

    Index ``i`` qualifies when ``values[i]`` is strictly below (``min``) or
    strictly above (``max``) every other value in ``[i - window, i + window]``.
    Ties disqualify, so plateaus yield nothing. Only indices with a full
    neighbourhood on both sides are candidates.
    """
    n = len(values)
    if window < 1 or n < 2 * window + 1:
        return []

    extrema: list[Extremum] = []
    for i in range(window, n - window):
        v = values[i]
        neighbours = (values[j] for j in range(i - window, i + window + 1) if j != i)
        if mode == "min":
            if all(v < other for other in neighbours):
                extrema.append((i, float(v)))
        else:
            if all(v > other for other in neighbours):
                extrema.append((i, float(v)))
    return extrema


def find_candle_extrema(
    candles: Sequence[Candle],
    window: int,
) -> tuple[list[Extremum], list[Extremum]]:
    """Local lows (on ``low``) and local highs (on ``high``) of a candle series."""
    lows = [c.low for c in candles]
    highs = [c.high for c in candles]
    return (
        find_local_extrema(lows, window, mode="min"),
        find_local_extrema(highs, window, mode="max"),
    )
