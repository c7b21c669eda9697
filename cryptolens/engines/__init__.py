# Analysis engines: indicators, patterns, pipeline, narrative
from cryptolens.engines.analysis_engine import AnalysisEngine
from cryptolens.engines.overlap import suppress_overlaps
from cryptolens.engines.pattern_engine import FIBONACCI_RATIOS, PatternEngine, linear_regression_slope
from cryptolens.engines.summary_engine import SummaryEngine
from cryptolens.engines.ta_engine import TAEngine

__all__ = [
    "AnalysisEngine",
    "FIBONACCI_RATIOS",
    "PatternEngine",
    "SummaryEngine",
    "TAEngine",
    "linear_regression_slope",
    "suppress_overlaps",
]
