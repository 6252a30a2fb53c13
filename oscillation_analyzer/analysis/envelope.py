from __future__ import annotations

"""Exponential envelope fit and derived damping metrics.

Model
-----
The peak sequence of a damped oscillation is fitted with

  y(t) = A * exp(beta * t) + C

where ``C`` is fixed to the baseline. Taking ``ln(y - C)`` turns this into a
straight line in ``t``, solved by ordinary least squares:

  beta  = (n * sum(t * lnY) - sum(t) * sum(lnY)) / (n * sum(t^2) - sum(t)^2)
  ln(A) = (sum(lnY) - beta * sum(t)) / n

Only peaks strictly above ``C`` take part (the logarithm is undefined
otherwise). The time axis is in microseconds, so ``beta`` is in 1/µs.

Metrics
-------
With the average period ``T`` [µs]:

  f      = 1 / (T * 1e-6)           [Hz], reported in kHz
  lambda = |beta| * T               logarithmic decrement
  delta  = lambda / (T * 1e-6)      damping coefficient [1/s]
"""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from oscillation_analyzer.models.results import FitParams, Peak, SignalMetrics

log = logging.getLogger(__name__)


MIN_FIT_PEAKS = 2


def fit_envelope_with_reason(
    peaks: Sequence[Peak],
    baseline: float,
) -> Tuple[Optional[FitParams], Optional[str]]:
    """Log-linear least-squares envelope fit.

    Returns
    -------
    (fit, reason)
        ``fit`` is None when unavailable and ``reason`` is then
        ``"insufficient_peaks"`` (fewer than 2 peaks above the baseline) or
        ``"degenerate_fit"`` (all qualifying peak times identical).
    """
    if len(peaks) < MIN_FIT_PEAKS:
        return None, "insufficient_peaks"

    C = float(baseline)
    t = np.array([p.time_us for p in peaks], dtype=float)
    y = np.array([p.voltage for p in peaks], dtype=float)

    above = y > C
    n = int(np.count_nonzero(above))
    if n < MIN_FIT_PEAKS:
        return None, "insufficient_peaks"

    t = t[above]
    ln_y = np.log(y[above] - C)

    sum_t = float(np.sum(t))
    sum_ln_y = float(np.sum(ln_y))
    sum_t_ln_y = float(np.sum(t * ln_y))
    sum_t2 = float(np.sum(t * t))

    den = n * sum_t2 - sum_t * sum_t
    if den == 0.0 or float(np.ptp(t)) == 0.0:
        return None, "degenerate_fit"

    beta = (n * sum_t_ln_y - sum_t * sum_ln_y) / den
    ln_a = (sum_ln_y - beta * sum_t) / n

    if beta > 0:
        log.warning("envelope is growing (beta=%.6g 1/us); check polarity or the selected cycles", beta)

    return FitParams(A=float(np.exp(ln_a)), beta=float(beta), C=C), None


def fit_envelope(peaks: Sequence[Peak], baseline: float) -> Optional[FitParams]:
    """Envelope fit, or None when it is unavailable. See :func:`fit_envelope_with_reason`."""
    fit, _ = fit_envelope_with_reason(peaks, baseline)
    return fit


def derive_metrics(
    fit: Optional[FitParams],
    avg_period_us: float,
    peak_count: int,
) -> Optional[SignalMetrics]:
    """Frequency, logarithmic decrement and damping coefficient.

    Requires a fit and a positive average period; returns None otherwise.
    """
    if fit is None or not (avg_period_us > 0):
        return None

    T = float(avg_period_us)
    period_s = T * 1e-6
    log_decrement = abs(fit.beta) * T

    return SignalMetrics(
        frequency_khz=(1.0 / period_s) / 1000.0,
        damping_coefficient_per_s=log_decrement / period_s,
        log_decrement=log_decrement,
        period_us=T,
        valid_cycle_count=int(peak_count),
    )


def fit_curve(
    fit: Optional[FitParams],
    t_start_us: float,
    t_end_us: float,
    n_points: int = 200,
) -> Tuple[np.ndarray, np.ndarray]:
    """Sample the fitted envelope on ``n_points`` even steps from ``t_start_us`` to ``t_end_us``.

    Both ends are included. Empty arrays when there is no fit or the interval is reversed.
    """
    if fit is None or not (t_end_us >= t_start_us):
        return np.empty(0), np.empty(0)
    if t_end_us == t_start_us:
        t = np.array([float(t_start_us)])
    else:
        t = np.linspace(float(t_start_us), float(t_end_us), int(n_points) + 1)
    return t, fit.evaluate(t)
