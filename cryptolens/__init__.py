"""
Cryptolens

Technical analysis for cryptocurrency candle series: support/resistance,
RSI, MACD, trend classification, signal points, Fibonacci retracements,
trend lines and chart patterns.
"""

from cryptolens.engines import (
    AnalysisEngine,
    PatternEngine,
    SummaryEngine,
    TAEngine,
    suppress_overlaps,
)
from cryptolens.models import Candle, TrendLabel

__version__ = "0.1.0"

__all__ = [
    "AnalysisEngine",
    "Candle",
    "PatternEngine",
    "SummaryEngine",
    "TAEngine",
    "TrendLabel",
    "suppress_overlaps",
]
