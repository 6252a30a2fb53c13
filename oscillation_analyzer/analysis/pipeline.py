from __future__ import annotations

"""Full analysis pipeline for one trace.

Stage order (each a pure function of the previous stages and the settings)
-------------------------------------------------------------------------
1) preprocess: seconds -> microseconds, optional inversion, moving average
2) baseline: tail mean of the smoothed series
3) crossings: raw rising crossings, then period locking
4) peaks: one maximum per validated cycle
5) normalize: first valid crossing -> t=0, baseline -> v=0
6) envelope: log-linear fit of the normalized peaks
7) metrics: frequency, logarithmic decrement, damping coefficient

Problems with the data (no samples, too few crossings or peaks, degenerate
fit) never raise. They stop only the stages that need the missing value and
are reported through ``AnalysisResult.issue``.
"""

import dataclasses
import logging
from typing import Any, Dict, List, Optional

from oscillation_analyzer.models.frames import TraceFrame
from oscillation_analyzer.models.results import AnalysisResult
from oscillation_analyzer.models.settings import AnalysisSettings

from .crossings import average_period, estimate_baseline, find_rising_crossings, lock_period
from .envelope import derive_metrics, fit_curve, fit_envelope_with_reason
from .normalize import normalize
from .peaks import extract_peaks
from .preprocess import preprocess

log = logging.getLogger(__name__)


def analyze_trace(trace: TraceFrame, settings: Optional[AnalysisSettings] = None) -> AnalysisResult:
    """Run the whole pipeline on ``trace`` with ``settings`` (defaults if None)."""
    settings = (settings or AnalysisSettings()).validate()
    warnings: List[str] = list(trace.warnings)

    if trace.is_empty:
        log.warning("no valid numeric data in trace; analysis skipped")
        return AnalysisResult(
            settings=settings,
            n_samples=0,
            issue="empty_input",
            warnings=tuple(warnings),
        )

    pre = preprocess(trace, invert=settings.invert, window=settings.smoothing_window)
    baseline = estimate_baseline(pre.v_smooth)

    raw = find_rising_crossings(pre.t_us, pre.v_smooth, baseline)
    valid = lock_period(raw, settings.tolerance_fraction)
    peaks = extract_peaks(pre.t_us, pre.v_smooth, valid, baseline)
    avg_period_us = average_period(valid)

    view = normalize(pre.t_us, pre.v_raw, pre.v_smooth, peaks, valid, baseline)

    log.debug(
        "baseline=%.6g V, raw crossings=%d, valid=%d, peaks=%d, avg period=%.6g us",
        baseline, len(raw), len(valid), len(peaks), avg_period_us,
    )

    base = dict(
        settings=settings,
        n_samples=pre.n_samples,
        baseline=baseline,
        avg_period_us=avg_period_us,
        n_raw_crossings=len(raw),
        view=view,
    )

    if len(raw) < 2:
        warnings.append(f"Only {len(raw)} rising crossing(s) through the baseline; low confidence")
        log.warning("insufficient zero crossings (%d)", len(raw))
        return AnalysisResult(**base, issue="insufficient_crossings", warnings=tuple(warnings))

    if len(valid) < len(raw):
        warnings.append(
            f"Period lock kept {len(valid)} of {len(raw)} crossings "
            f"(tolerance {settings.period_tolerance_pct:g} %)"
        )

    fit, reason = fit_envelope_with_reason(view.peaks, view.baseline)
    if fit is None:
        warnings.append(f"Envelope fit unavailable ({reason}, {len(view.peaks)} peak(s))")
        log.warning("envelope fit unavailable: %s", reason)
        return AnalysisResult(**base, issue=reason, warnings=tuple(warnings))

    if fit.beta > 0:
        warnings.append(f"Growing envelope (beta={fit.beta:.6g} 1/us); data may be anomalous")

    fit_absolute = fit.shifted(-view.time_offset_us, -view.voltage_offset)
    metrics = derive_metrics(fit, avg_period_us, len(view.peaks))
    if metrics is None:
        warnings.append(
            f"Average period {avg_period_us:.6g} us is not positive (time axis not increasing?); "
            "metrics unavailable"
        )
        log.warning("non-positive average period %.6g us; metrics skipped", avg_period_us)
    fit_t, fit_v = fit_curve(
        fit,
        view.peaks[0].time_us,
        float(view.t_us[-1]),
        n_points=settings.fit_curve_points,
    )

    return AnalysisResult(
        **base,
        fit=fit,
        fit_absolute=fit_absolute,
        metrics=metrics,
        fit_t_us=fit_t,
        fit_v=fit_v,
        warnings=tuple(warnings),
    )


class AnalysisSession:
    """One loaded trace plus a cache of results keyed on the exact settings.

    Changing any setting reruns the full pipeline; repeating a previous setting
    combination returns the stored result. Instances are not shared between
    traces or threads.
    """

    def __init__(self, trace: TraceFrame) -> None:
        self.trace = trace
        self._cache: Dict[AnalysisSettings, AnalysisResult] = {}

    def analyze(self, settings: Optional[AnalysisSettings] = None, **overrides: Any) -> AnalysisResult:
        s = settings or AnalysisSettings()
        if overrides:
            s = dataclasses.replace(s, **overrides)
        if s not in self._cache:
            self._cache[s] = analyze_trace(self.trace, s)
        return self._cache[s]

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
