"""
Extremum Scanner Tests

Strict local minima/maxima with symmetric windows.
"""

from __future__ import annotations

from cryptolens.engines.extrema import find_candle_extrema, find_local_extrema


class TestFindLocalExtrema:
    def test_single_peak(self):
        assert find_local_extrema([1, 2, 3, 2, 1], 1, mode="max") == [(2, 3.0)]
        assert find_local_extrema([1, 2, 3, 2, 1], 1, mode="min") == []

    def test_plateau_is_not_an_extremum(self):
        assert find_local_extrema([1, 3, 3, 1, 0], 1, mode="max") == []
        assert find_local_extrema([5, 2, 2, 5, 6], 1, mode="min") == []

    def test_wider_window_is_stricter(self):
        values = [5, 1, 4, 0, 6, 2, 7]
        assert [i for i, _ in find_local_extrema(values, 1, mode="min")] == [1, 3, 5]
        assert find_local_extrema(values, 2, mode="min") == [(3, 0.0)]

    def test_edges_are_never_candidates(self):
        # index 0 is the lowest value but lacks a left neighbourhood
        assert find_local_extrema([0, 5, 6, 5, 7], 1, mode="min") == [(3, 5.0)]

    def test_short_series_returns_empty(self):
        assert find_local_extrema([3, 1, 3, 1], 2, mode="min") == []
        assert find_local_extrema([], 3, mode="max") == []


class TestFindCandleExtrema:
    def test_uses_lows_and_highs(self, candles_from_range):
        highs = [10, 11, 15, 11, 10, 11, 12]
        lows = [9, 8, 9, 10, 6, 10, 11]
        candles = candles_from_range(highs, lows)
        swing_lows, swing_highs = find_candle_extrema(candles, 1)
        assert swing_lows == [(1, 8.0), (4, 6.0)]
        assert swing_highs == [(2, 15.0)]
