"""Shared candle factories for the test suite."""

from __future__ import annotations

from typing import Callable, Sequence

import pytest
import structlog

from cryptolens.models import Candle

MINUTE_MS = 60_000


def make_candles_from_closes(closes: Sequence[float], spread: float = 0.01) -> list[Candle]:
    """Candles whose open is the previous close and whose wicks extend by `spread`."""
    candles = []
    prev = closes[0] if closes else 0.0
    for i, close in enumerate(closes):
        open_ = prev
        candles.append(Candle(
            open_time=i * MINUTE_MS,
            open=open_,
            high=max(open_, close) * (1 + spread),
            low=min(open_, close) * (1 - spread),
            close=close,
            volume=1_000.0 + i,
            close_time=(i + 1) * MINUTE_MS - 1,
        ))
        prev = close
    return candles


def make_candles_from_range(highs: Sequence[float], lows: Sequence[float]) -> list[Candle]:
    """Candles with the given highs/lows; open and close sit at the midpoint."""
    candles = []
    for i, (high, low) in enumerate(zip(highs, lows)):
        mid = (high + low) / 2
        candles.append(Candle(
            open_time=i * MINUTE_MS,
            open=mid,
            high=high,
            low=low,
            close=mid,
            volume=1_000.0,
            close_time=(i + 1) * MINUTE_MS - 1,
        ))
    return candles


def make_flat_candles(count: int, price: float = 100.0) -> list[Candle]:
    return make_candles_from_range([price] * count, [price] * count)


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo any structlog.configure() made by the code under test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def candles_from_closes() -> Callable[..., list[Candle]]:
    return make_candles_from_closes


@pytest.fixture
def candles_from_range() -> Callable[..., list[Candle]]:
    return make_candles_from_range


@pytest.fixture
def flat_candles() -> Callable[..., list[Candle]]:
    return make_flat_candles
