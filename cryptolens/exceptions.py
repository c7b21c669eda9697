"""
Cryptolens Exceptions

The analysis engines never raise on short or degenerate input; they return
empty results instead. Exceptions are reserved for malformed input series and
for the market data boundary.
"""

from __future__ import annotations

from typing import Optional


class CryptolensError(Exception):
    """Base class for all cryptolens errors."""


class CandleSeriesError(CryptolensError):
    """Raised when a candle series violates the ascending open-time ordering."""

    def __init__(self, index: int, previous_open_time: int, open_time: int):
        self.index = index
        self.previous_open_time = previous_open_time
        self.open_time = open_time
        super().__init__(
            f"Candle {index} opens at {open_time}, not after previous candle at {previous_open_time}"
        )


class MarketDataError(CryptolensError):
    """Raised when klines cannot be fetched or parsed."""

    def __init__(self, symbol: str, message: str, status_code: Optional[int] = None):
        self.symbol = symbol
        self.status_code = status_code
        detail = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"Market data for '{symbol}' unavailable{detail}: {message}")
