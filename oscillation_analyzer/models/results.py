from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional, Tuple

import numpy as np
import pandas as pd

from .settings import AnalysisSettings


Issue = Literal["empty_input", "insufficient_crossings", "insufficient_peaks", "degenerate_fit"]

ISSUE_MESSAGES: Dict[str, str] = {
    "empty_input": "No valid numeric data found in file.",
    "insufficient_crossings": "Fewer than 2 zero crossings; period and metrics are undefined.",
    "insufficient_peaks": (
        "Signal unstable or insufficient cycles. Increase the period tolerance or check the inversion."
    ),
    "degenerate_fit": (
        "Signal unstable or insufficient cycles. Increase the period tolerance or check the inversion."
    ),
}


@dataclass(frozen=True)
class Crossing:
    """Rising crossing through the baseline.

    ``time_us`` is linearly interpolated between samples ``index`` and ``index + 1``
    of the smoothed series.
    """

    time_us: float
    index: int


@dataclass(frozen=True)
class Peak:
    """Maximum of the smoothed series within one validated cycle."""

    time_us: float
    voltage: float


@dataclass(frozen=True)
class FitParams:
    """Envelope model ``y(t) = A * exp(beta * t) + C``.

    ``beta`` is in 1/µs (the fit runs on a microsecond axis) and is negative for
    a decaying oscillation. ``C`` is the baseline, fixed rather than fitted.
    """

    A: float
    beta: float
    C: float

    def evaluate(self, t_us: np.ndarray) -> np.ndarray:
        t = np.asarray(t_us, dtype=float)
        return self.A * np.exp(self.beta * t) + self.C

    def shifted(self, dt_us: float, dv: float) -> "FitParams":
        """Same curve in a frame whose origin is the point ``(dt_us, dv)`` of this frame."""
        return FitParams(A=self.A * float(np.exp(self.beta * dt_us)), beta=self.beta, C=self.C - dv)


@dataclass(frozen=True)
class SignalMetrics:
    """Physical parameters derived from the envelope fit and the average period."""

    frequency_khz: float
    damping_coefficient_per_s: float
    log_decrement: float
    period_us: float
    valid_cycle_count: int


@dataclass(frozen=True)
class NormalizedView:
    """Zero-referenced dataset used for both fitting and display.

    Time is shifted so the first valid crossing sits at 0 (first sample when there is
    none) and voltage so the baseline sits at 0.
    """

    t_us: np.ndarray
    v_raw: np.ndarray
    v_smooth: np.ndarray
    peaks: Tuple[Peak, ...]
    crossings: Tuple[Crossing, ...]
    time_offset_us: float
    voltage_offset: float

    @property
    def baseline(self) -> float:
        return 0.0

    @property
    def cutoff_time_us(self) -> float:
        """Time of the last validated crossing (end of the analysed window)."""
        if self.crossings:
            return float(self.crossings[-1].time_us)
        return float(self.t_us[0]) if self.t_us.size else 0.0


@dataclass(frozen=True)
class AnalysisResult:
    """Full output of one pipeline invocation.

    Attributes
    ----------
    settings:
        Settings the result was computed with.
    baseline, avg_period_us:
        Un-normalized baseline [V] and average period [µs]. ``baseline`` is None
        only for empty input; ``avg_period_us`` is 0 with fewer than 2 valid crossings.
    view:
        Normalized series, peaks and crossings. None only for empty input.
    fit, fit_absolute:
        Envelope fit in the normalized frame (``C == 0``) and in absolute
        coordinates (``C == baseline``).
    fit_t_us, fit_v:
        Sampled fit curve in the normalized frame; empty when there is no fit.
    issue:
        The condition that stopped the pipeline early, if any.
    """

    settings: AnalysisSettings
    n_samples: int
    baseline: Optional[float] = None
    avg_period_us: float = 0.0
    n_raw_crossings: int = 0
    view: Optional[NormalizedView] = None
    fit: Optional[FitParams] = None
    fit_absolute: Optional[FitParams] = None
    metrics: Optional[SignalMetrics] = None
    fit_t_us: np.ndarray = field(default_factory=lambda: np.empty(0))
    fit_v: np.ndarray = field(default_factory=lambda: np.empty(0))
    issue: Optional[Issue] = None
    warnings: Tuple[str, ...] = ()

    @property
    def inverted(self) -> bool:
        return bool(self.settings.invert)

    @property
    def ok(self) -> bool:
        return self.issue is None and self.metrics is not None

    @property
    def issue_message(self) -> Optional[str]:
        if self.issue is None:
            return None
        return ISSUE_MESSAGES[self.issue]

    def to_frame(self) -> pd.DataFrame:
        """Normalized sample series as a DataFrame (empty for empty input)."""
        if self.view is None:
            return pd.DataFrame({"t_us": [], "v_raw": [], "v_smooth": []}, dtype=float)
        return pd.DataFrame(
            {
                "t_us": self.view.t_us,
                "v_raw": self.view.v_raw,
                "v_smooth": self.view.v_smooth,
            }
        )

    def summary_dict(self) -> Dict[str, Any]:
        """Flat JSON-friendly summary (None where a quantity is undefined)."""
        m = self.metrics
        f = self.fit_absolute
        return {
            "n_samples": int(self.n_samples),
            "inverted": self.inverted,
            "smoothing_window": int(self.settings.smoothing_window),
            "period_tolerance_pct": float(self.settings.period_tolerance_pct),
            "baseline_v": _finite_or_none(self.baseline),
            "avg_period_us": float(self.avg_period_us),
            "n_raw_crossings": int(self.n_raw_crossings),
            "n_valid_crossings": 0 if self.view is None else len(self.view.crossings),
            "n_peaks": 0 if self.view is None else len(self.view.peaks),
            "fit_A": None if f is None else _finite_or_none(f.A),
            "fit_beta_per_us": None if f is None else _finite_or_none(f.beta),
            "fit_C": None if f is None else _finite_or_none(f.C),
            "frequency_khz": None if m is None else _finite_or_none(m.frequency_khz),
            "log_decrement": None if m is None else _finite_or_none(m.log_decrement),
            "damping_coefficient_per_s": None if m is None else _finite_or_none(m.damping_coefficient_per_s),
            "valid_cycle_count": 0 if m is None else int(m.valid_cycle_count),
            "issue": self.issue or "",
        }


def _finite_or_none(x: Optional[float]) -> Optional[float]:
    if x is None:
        return None
    x = float(x)
    return x if np.isfinite(x) else None
