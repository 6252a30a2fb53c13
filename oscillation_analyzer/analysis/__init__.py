"""Analysis package.

Design principle:
  - Ingest produces a :class:`~oscillation_analyzer.models.frames.TraceFrame`.
  - Analysis consumes it and produces an
    :class:`~oscillation_analyzer.models.results.AnalysisResult`.

All stages operate on the microsecond time axis.
"""

from .crossings import average_period, detect_crossings, estimate_baseline, find_rising_crossings, lock_period
from .envelope import derive_metrics, fit_curve, fit_envelope
from .normalize import normalize
from .peaks import extract_peaks
from .pipeline import AnalysisSession, analyze_trace
from .preprocess import moving_average, preprocess

__all__ = [
    "average_period",
    "detect_crossings",
    "estimate_baseline",
    "find_rising_crossings",
    "lock_period",
    "derive_metrics",
    "fit_curve",
    "fit_envelope",
    "normalize",
    "extract_peaks",
    "AnalysisSession",
    "analyze_trace",
    "moving_average",
    "preprocess",
]
