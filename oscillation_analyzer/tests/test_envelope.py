from __future__ import annotations

import numpy as np
import pytest

from oscillation_analyzer.analysis.envelope import (
    derive_metrics,
    fit_curve,
    fit_envelope,
    fit_envelope_with_reason,
)
from oscillation_analyzer.models.results import FitParams, Peak


def _peaks_from(A: float, beta: float, C: float, times) -> tuple:
    return tuple(Peak(time_us=float(t), voltage=float(A * np.exp(beta * t) + C)) for t in times)


def test_fit_recovers_exact_exponential() -> None:
    peaks = _peaks_from(5.0, -0.01, 2.0, np.arange(0, 1000, 100))

    fit = fit_envelope(peaks, 2.0)

    assert fit is not None
    assert fit.A == pytest.approx(5.0, rel=1e-6)
    assert fit.beta == pytest.approx(-0.01, rel=1e-6)
    assert fit.C == 2.0


def test_fit_ignores_peaks_at_or_below_baseline() -> None:
    good = _peaks_from(3.0, -0.002, 0.0, [0.0, 250.0, 500.0])
    bad = (Peak(750.0, 0.0), Peak(1000.0, -0.4))

    fit = fit_envelope(good + bad, 0.0)

    assert fit is not None
    assert fit.beta == pytest.approx(-0.002, rel=1e-9)


def test_fit_needs_two_qualifying_peaks() -> None:
    assert fit_envelope_with_reason((), 0.0) == (None, "insufficient_peaks")
    assert fit_envelope_with_reason((Peak(0.0, 1.0),), 0.0) == (None, "insufficient_peaks")
    only_one_above = (Peak(0.0, 1.0), Peak(10.0, 0.5))
    assert fit_envelope_with_reason(only_one_above, 0.5) == (None, "insufficient_peaks")


def test_identical_peak_times_are_degenerate() -> None:
    peaks = (Peak(10.0, 1.0), Peak(10.0, 2.0), Peak(10.0, 3.0))
    fit, reason = fit_envelope_with_reason(peaks, 0.0)
    assert fit is None
    assert reason == "degenerate_fit"


def test_growing_envelope_is_returned_as_computed() -> None:
    peaks = _peaks_from(1.0, 0.003, 0.0, [0.0, 100.0, 200.0])
    fit = fit_envelope(peaks, 0.0)
    assert fit is not None
    assert fit.beta == pytest.approx(0.003, rel=1e-9)


def test_metrics_consistency() -> None:
    fit = FitParams(A=1.0, beta=-0.002, C=0.0)
    m = derive_metrics(fit, 1000.0, 7)

    assert m is not None
    assert m.log_decrement == pytest.approx(2.0)
    assert m.frequency_khz == pytest.approx(1.0)
    assert m.damping_coefficient_per_s == pytest.approx(2000.0)
    assert m.period_us == 1000.0
    assert m.valid_cycle_count == 7


def test_damping_coefficient_equals_beta_per_second() -> None:
    fit = FitParams(A=2.0, beta=-3.1e-4, C=0.1)
    m = derive_metrics(fit, 37.5, 4)
    assert m is not None
    assert m.damping_coefficient_per_s == pytest.approx(abs(fit.beta) * 1e6)


def test_metrics_need_fit_and_positive_period() -> None:
    fit = FitParams(A=1.0, beta=-0.01, C=0.0)
    assert derive_metrics(None, 100.0, 3) is None
    assert derive_metrics(fit, 0.0, 3) is None
    assert derive_metrics(fit, -5.0, 3) is None


def test_fit_curve_sampling() -> None:
    fit = FitParams(A=2.0, beta=-0.01, C=0.5)
    t, y = fit_curve(fit, 10.0, 210.0, n_points=200)

    assert t.size == 201
    assert t[0] == 10.0
    assert t[-1] == 210.0
    assert np.allclose(y, 2.0 * np.exp(-0.01 * t) + 0.5)


def test_fit_curve_empty_cases() -> None:
    fit = FitParams(A=1.0, beta=-0.01, C=0.0)
    assert fit_curve(None, 0.0, 10.0)[0].size == 0
    assert fit_curve(fit, 10.0, 0.0)[0].size == 0
    t, y = fit_curve(fit, 5.0, 5.0)
    assert t.size == 1 and y[0] == pytest.approx(np.exp(-0.05))


def test_shifted_fit_describes_same_curve() -> None:
    fit = FitParams(A=3.0, beta=-0.004, C=0.0)
    t0, v0 = 120.0, 0.7
    absolute = fit.shifted(-t0, -v0)

    t = np.linspace(0.0, 500.0, 11)
    assert absolute.C == pytest.approx(v0)
    assert np.allclose(absolute.evaluate(t + t0), fit.evaluate(t) + v0)
