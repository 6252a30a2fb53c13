from __future__ import annotations

"""Baseline estimation, rising zero crossings and period locking.

Baseline
--------
The DC level is the mean of the settled tail of the smoothed series: the last
``max(floor(0.2 * n), 10)`` samples (all samples when ``n < 10``). Heavily damped
traces start with a large transient, so a full-trace mean would be biased
toward it. A trace that has not settled by the end of the capture biases the
tail mean too; that is a property of the measurement, not corrected here.

Rising crossings
----------------
A rising crossing lies between samples ``i`` and ``i + 1`` when

  v[i] <= baseline < v[i + 1]

and its time is interpolated linearly between ``t[i]`` and ``t[i + 1]``.

Period locking
--------------
The first two raw crossings are always accepted and define ``T_ref``. Each
later crossing is accepted while its distance to the last accepted crossing
stays within ``tolerance * T_ref`` of ``T_ref`` (``<=`` keeps, ``>`` stops). The
first violation ends the run; nothing after it is considered.
"""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from oscillation_analyzer.models.results import Crossing

log = logging.getLogger(__name__)


TAIL_FRACTION = 0.20
TAIL_MIN_SAMPLES = 10


def _validate_same_length(t: np.ndarray, v: np.ndarray) -> None:
    if t.ndim != 1 or v.ndim != 1:
        raise ValueError(f"Expected 1D arrays, got shapes {t.shape} and {v.shape}")
    if t.shape != v.shape:
        raise ValueError(f"Length mismatch: t has {t.size} samples, v has {v.size}")


def estimate_baseline(smoothed: np.ndarray) -> Optional[float]:
    """Mean of the tail of ``smoothed``; None for an empty series."""
    v = np.asarray(smoothed, dtype=float)
    n = int(v.size)
    if n == 0:
        return None
    tail = max(int(np.floor(n * TAIL_FRACTION)), TAIL_MIN_SAMPLES)
    # Summed left to right, matching the window sums of the moving average.
    tail_v = v[-tail:]
    return float(np.cumsum(tail_v)[-1] / tail_v.size)


def find_rising_crossings(t_us: np.ndarray, smoothed: np.ndarray, baseline: float) -> Tuple[Crossing, ...]:
    """All rising crossings of ``smoothed`` through ``baseline``, in time order."""
    t = np.asarray(t_us, dtype=float)
    v = np.asarray(smoothed, dtype=float)
    _validate_same_length(t, v)
    if v.size < 2:
        return ()

    b = float(baseline)
    y1 = v[:-1]
    y2 = v[1:]
    idx = np.nonzero((y1 <= b) & (y2 > b))[0]
    if idx.size == 0:
        return ()

    frac = (b - y1[idx]) / (y2[idx] - y1[idx])
    t_cross = t[idx] + frac * (t[idx + 1] - t[idx])
    return tuple(Crossing(time_us=float(tc), index=int(i)) for tc, i in zip(t_cross, idx))


def lock_period(raw: Sequence[Crossing], tolerance: float) -> Tuple[Crossing, ...]:
    """Longest prefix of ``raw`` whose periods stay within tolerance of the first period.

    Parameters
    ----------
    raw:
        Raw rising crossings in time order.
    tolerance:
        Allowed relative deviation from the reference period, as a fraction
        (0.1 for 10 %).

    Returns
    -------
    tuple of Crossing
        Empty when fewer than 2 raw crossings exist.
    """
    if len(raw) < 2:
        return ()

    valid = [raw[0], raw[1]]
    t_ref = raw[1].time_us - raw[0].time_us
    allowed = t_ref * float(tolerance)

    for current in raw[2:]:
        period = current.time_us - valid[-1].time_us
        if abs(period - t_ref) <= allowed:
            valid.append(current)
        else:
            log.debug(
                "period lock stopped at t=%.6g us: period %.6g us vs reference %.6g us",
                current.time_us, period, t_ref,
            )
            break

    return tuple(valid)


def detect_crossings(
    t_us: np.ndarray,
    smoothed: np.ndarray,
    baseline: float,
    tolerance: float,
) -> Tuple[Crossing, ...]:
    """Validated (period-locked) rising crossings."""
    return lock_period(find_rising_crossings(t_us, smoothed, baseline), tolerance)


def average_period(crossings: Sequence[Crossing]) -> float:
    """Mean spacing of successive crossings [µs]; 0 with fewer than 2 crossings."""
    if len(crossings) < 2:
        return 0.0
    times = np.array([c.time_us for c in crossings], dtype=float)
    return float(np.mean(np.diff(times)))
