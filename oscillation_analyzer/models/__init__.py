from .frames import TraceFrame
from .results import AnalysisResult, Crossing, FitParams, NormalizedView, Peak, SignalMetrics
from .settings import AnalysisSettings

__all__ = [
    "TraceFrame",
    "AnalysisResult",
    "Crossing",
    "FitParams",
    "NormalizedView",
    "Peak",
    "SignalMetrics",
    "AnalysisSettings",
]
