from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from oscillation_analyzer.models.results import Crossing, Peak


def extract_peaks(
    t_us: np.ndarray,
    smoothed: np.ndarray,
    crossings: Sequence[Crossing],
    baseline: float,
) -> Tuple[Peak, ...]:
    """One peak per validated cycle.

    For each pair of consecutive crossings the smoothed samples between their
    indices (inclusive) are scanned and the maximum is taken. The peak is kept
    only if it lies strictly above ``baseline``; near-critically damped cycles
    can have no real overshoot.

    Returns at most ``len(crossings) - 1`` peaks, none with fewer than 2 crossings.
    """
    t = np.asarray(t_us, dtype=float)
    v = np.asarray(smoothed, dtype=float)
    if t.shape != v.shape:
        raise ValueError(f"Length mismatch: t has {t.size} samples, v has {v.size}")

    peaks = []
    for c0, c1 in zip(crossings[:-1], crossings[1:]):
        seg = v[c0.index : c1.index + 1]
        if seg.size == 0:
            continue
        j = c0.index + int(np.argmax(seg))
        if v[j] > baseline:
            peaks.append(Peak(time_us=float(t[j]), voltage=float(v[j])))

    return tuple(peaks)
