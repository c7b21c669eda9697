"""
Cryptolens Pydantic Models

All I/O schemas for the analysis engines. The data clients produce candles,
the engines consume candles and return these result types, and the summary
layer and CLI serialize them.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional, Sequence

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, model_validator

from cryptolens.exceptions import CandleSeriesError


# ──────────────────────────────────────────────
# Enums
# ──────────────────────────────────────────────

class TimeInterval(str, Enum):
    """Kline intervals offered by the exchange feed."""
    S1 = "1s"
    M1 = "1m"
    M5 = "5m"
    M15 = "15m"
    H1 = "1h"
    H4 = "4h"
    D1 = "1d"
    W1 = "1w"
    MO = "1M"


class TrendLabel(str, Enum):
    """Moving-average trend classification."""
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class PositionBias(str, Enum):
    """Direction implied by the latest entry relative to the current price."""
    LONG = "long"
    SHORT = "short"


class TriangleType(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"
    SYMMETRICAL = "symmetrical"


class WedgeType(str, Enum):
    RISING = "rising"
    FALLING = "falling"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ──────────────────────────────────────────────
# Market Data Models
# ──────────────────────────────────────────────

class Candle(BaseModel):
    """Single OHLCV candle. Immutable once constructed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    open_time: int = Field(alias="openTime")
    open: float
    high: float
    low: float
    close: float
    volume: float
    close_time: int = Field(alias="closeTime")
    quote_asset_volume: float = Field(default=0.0, alias="quoteAssetVolume")
    number_of_trades: int = Field(default=0, alias="numberOfTrades")

    @model_validator(mode="after")
    def _check_price_bounds(self) -> "Candle":
        if self.low > min(self.open, self.close):
            raise ValueError(f"low {self.low} above open/close at {self.open_time}")
        if self.high < max(self.open, self.close):
            raise ValueError(f"high {self.high} below open/close at {self.open_time}")
        return self


def validate_series(candles: Sequence[Candle]) -> None:
    """Raise CandleSeriesError unless open times are strictly ascending."""
    for i in range(1, len(candles)):
        if candles[i].open_time <= candles[i - 1].open_time:
            raise CandleSeriesError(i, candles[i - 1].open_time, candles[i].open_time)


def to_dataframe(candles: Sequence[Candle]) -> pd.DataFrame:
    """Convert candles to a pandas DataFrame indexed by open time."""
    data = {
        "open_time": [c.open_time for c in candles],
        "open": [c.open for c in candles],
        "high": [c.high for c in candles],
        "low": [c.low for c in candles],
        "close": [c.close for c in candles],
        "volume": [c.volume for c in candles],
    }
    df = pd.DataFrame(data)
    df.set_index("open_time", inplace=True)
    return df


# ──────────────────────────────────────────────
# Engine Configuration
# ──────────────────────────────────────────────

class _EngineConfig(BaseModel):
    model_config = ConfigDict(frozen=True)


class SupportResistanceConfig(_EngineConfig):
    """Support/resistance scan. Needs ``lookback + significance`` candles."""
    lookback: int = Field(default=50, ge=1)
    significance: int = Field(default=3, ge=1)
    min_distance_pct: float = Field(default=0.005, ge=0)


class RSIConfig(_EngineConfig):
    """Wilder RSI. ``warmup_value`` fills positions without enough history."""
    period: int = Field(default=14, ge=1)
    zero_loss_epsilon: float = Field(default=0.001, gt=0)
    warmup_value: Optional[float] = None


class MACDConfig(_EngineConfig):
    fast: int = Field(default=12, ge=1)
    slow: int = Field(default=26, ge=1)
    signal: int = Field(default=9, ge=1)


class TrendConfig(_EngineConfig):
    short_period: int = Field(default=20, ge=1)
    long_period: int = Field(default=50, ge=1)
    band: float = Field(default=0.005, ge=0)


class SignalConfig(_EngineConfig):
    """RSI crossover signals with ATR-sized stop-loss / take-profit.

    ``atr_anchor`` picks the candle the ATR window ends on: the latest entry
    candle (``"entry"``) or the last candle of the series (``"latest"``).
    """
    min_candles: int = Field(default=30, ge=2)
    rsi: RSIConfig = Field(default_factory=RSIConfig)
    oversold: float = 30.0
    overbought: float = 70.0
    atr_period: int = Field(default=14, ge=1)
    stop_multiplier: float = 2.0
    target_multiplier: float = 3.0
    atr_anchor: Literal["entry", "latest"] = "entry"


class FibonacciConfig(_EngineConfig):
    lookback: int = Field(default=100, ge=1)


class TrendLineConfig(_EngineConfig):
    lookback: int = Field(default=50, ge=1)
    window: int = Field(default=2, ge=1)


class PatternConfig(_EngineConfig):
    """Chart pattern recognition thresholds.

    Slopes are in price units per candle.
    """
    min_candles: int = Field(default=100, ge=1)
    window: int = Field(default=5, ge=1)
    double_min_gap: int = 10
    double_max_gap: int = 50
    double_tolerance: float = 0.015
    shoulder_tolerance: float = 0.05
    box_size: int = Field(default=30, ge=2)
    flat_slope: float = Field(default=0.001, ge=0)


# ──────────────────────────────────────────────
# Indicator Results
# ──────────────────────────────────────────────

class SupportResistanceLevels(BaseModel):
    """Deduplicated price levels, each list ascending."""
    supports: list[float] = []
    resistances: list[float] = []


class MACDResult(BaseModel):
    """Tail-aligned MACD series.

    ``macd_line[0]`` belongs to candle ``macd_offset``; ``signal_line[0]`` and
    ``histogram[0]`` belong to candle ``signal_offset``.
    """
    macd_line: list[float] = []
    signal_line: list[float] = []
    histogram: list[float] = []
    macd_offset: Optional[int] = None
    signal_offset: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return not self.macd_line


class SignalPoints(BaseModel):
    """Entry/exit candle indices plus stops derived from the latest entry.

    ``stop_loss`` and ``take_profit`` are None when no entry exists.
    """
    entry_points: list[int] = []
    exit_points: list[int] = []
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    bias: Optional[PositionBias] = None

    @property
    def has_entry(self) -> bool:
        return bool(self.entry_points)


class TrendLineSegment(BaseModel):
    start: int
    end: int
    slope: float


class TrendLines(BaseModel):
    uptrend: list[TrendLineSegment] = []
    downtrend: list[TrendLineSegment] = []


# ──────────────────────────────────────────────
# Pattern Results
# ──────────────────────────────────────────────

class TrianglePattern(BaseModel):
    start: int
    end: int
    type: TriangleType


class WedgePattern(BaseModel):
    start: int
    end: int
    type: WedgeType


class PatternScanResult(BaseModel):
    """Every pattern instance found in one scan, in detection order."""
    head_and_shoulders: list[int] = []
    double_top: list[int] = []
    double_bottom: list[int] = []
    triangle: list[TrianglePattern] = []
    wedge: list[WedgePattern] = []

    @property
    def is_empty(self) -> bool:
        return not (
            self.head_and_shoulders or self.double_top or self.double_bottom
            or self.triangle or self.wedge
        )

    def pattern_names(self) -> list[str]:
        """Human-readable names of the pattern families present."""
        names = []
        if self.head_and_shoulders:
            names.append("Head & Shoulders")
        if self.double_top:
            names.append("Double Top")
        if self.double_bottom:
            names.append("Double Bottom")
        if self.triangle:
            names.append(f"{self.triangle[0].type.value.capitalize()} Triangle")
        if self.wedge:
            names.append(f"{self.wedge[0].type.value.capitalize()} Wedge")
        return names


# ──────────────────────────────────────────────
# Pipeline Results
# ──────────────────────────────────────────────

class TechnicalAnalysis(BaseModel):
    """Output of one full pipeline run over a candle series."""
    candle_count: int
    current_price: Optional[float] = None
    levels: SupportResistanceLevels = Field(default_factory=SupportResistanceLevels)
    rsi: list[Optional[float]] = []
    macd: MACDResult = Field(default_factory=MACDResult)
    trend: TrendLabel = TrendLabel.NEUTRAL
    signals: SignalPoints = Field(default_factory=SignalPoints)
    fibonacci: list[float] = []
    trend_lines: TrendLines = Field(default_factory=TrendLines)
    patterns: PatternScanResult = Field(default_factory=PatternScanResult)

    @property
    def latest_rsi(self) -> Optional[float]:
        return self.rsi[-1] if self.rsi else None

    @property
    def latest_macd(self) -> Optional[float]:
        return self.macd.macd_line[-1] if self.macd.macd_line else None

    @property
    def latest_signal(self) -> Optional[float]:
        return self.macd.signal_line[-1] if self.macd.signal_line else None


class TechnicalSummary(BaseModel):
    """Narrative summary derived from a TechnicalAnalysis."""
    symbol: str
    interval: str
    direction: TrendLabel
    confidence: int = Field(ge=0, le=100)
    risk_level: RiskLevel
    percent_change: float
    volume_ratio: float
    key_points: list[str] = []
    narrative: str = ""
