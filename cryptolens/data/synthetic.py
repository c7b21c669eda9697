"""
Cryptolens Synthetic Candle Generator

Random-walk OHLCV series for instruments without a first-party feed and for
tests. Deterministic for a given seed.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import structlog

from cryptolens.models import Candle

log = structlog.get_logger(__name__)


DEFAULT_START_MS = 1_704_067_200_000  # 2024-01-01T00:00:00Z
HOUR_MS = 3_600_000


def generate_synthetic_candles(
    count: int,
    start_price: float = 50_000.0,
    seed: Optional[int] = None,
    interval_ms: int = HOUR_MS,
    start_time_ms: int = DEFAULT_START_MS,
    max_volume: float = 10_000_000_000.0,
) -> list[Candle]:
    """Generate `count` candles.

    Each step moves the base price 0-3% up or down, the close lands within
    ±1% of the open, and high/low extend up to 1% beyond the body.
    """
    rng = np.random.default_rng(seed)
    candles: list[Candle] = []
    base = float(start_price)

    for i in range(count):
        volatility = rng.random() * 0.03
        direction = 1 if rng.random() > 0.5 else -1
        base = base * (1 + direction * volatility)

        open_ = base
        close = base * (1 + (rng.random() * 0.02 - 0.01))
        high = max(open_, close) * (1 + rng.random() * 0.01)
        low = min(open_, close) * (1 - rng.random() * 0.01)
        volume = float(rng.random() * max_volume)
        open_time = start_time_ms + i * interval_ms

        candles.append(Candle(
            open_time=open_time,
            open=open_,
            high=high,
            low=low,
            close=close,
            volume=volume,
            close_time=open_time + interval_ms - 1,
            quote_asset_volume=volume * close,
            number_of_trades=int(rng.integers(100, 10_000)),
        ))

    log.debug("synthetic.generated", count=count, seed=seed)
    return candles
