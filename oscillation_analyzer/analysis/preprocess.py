from __future__ import annotations

"""Preprocessing: unit conversion, polarity inversion and smoothing.

Implemented steps
-----------------
1) Time rescaling

   The exported time axis is in seconds. Every downstream stage works in
   microseconds:

     t_us = t_s * 1e6

2) Polarity inversion (optional)

   When the probe was connected with inverted polarity, the operator can flip
   the trace without re-importing it:

     v <- -v

   Inversion is applied before smoothing, so the "raw" series shown next to the
   smoothed one is the inverted one too.

3) Centered moving average

   For window ``W`` and sample ``i``:

     v_s[i] = mean(v[max(0, i - W//2) : min(n, i + W//2 + 1)])

   Edge windows shrink instead of wrapping or padding, so the output has the
   same length as the input and never reads outside ``[0, n)``. ``W = 1`` is the
   identity.
"""

from dataclasses import dataclass

import numpy as np

from oscillation_analyzer.models.frames import TraceFrame


SECONDS_TO_US = 1e6


@dataclass(frozen=True)
class PreprocessedSeries:
    """Sample-aligned series produced by :func:`preprocess`."""

    t_us: np.ndarray  # (n,)
    v_raw: np.ndarray  # (n,) after optional inversion, unsmoothed
    v_smooth: np.ndarray  # (n,)

    @property
    def n_samples(self) -> int:
        return int(self.t_us.size)


def moving_average(values: np.ndarray, window: int) -> np.ndarray:
    """Centered moving average with shrinking edge windows.

    Parameters
    ----------
    values:
        1D input series.
    window:
        Window size ``W``. Values ``<= 1`` return a copy of the input.

    Returns
    -------
    np.ndarray
        Smoothed series, same length as ``values``.
    """
    x = np.asarray(values, dtype=float)
    if x.ndim != 1:
        raise ValueError(f"Expected 1D array, got shape {x.shape}")

    w = int(window)
    n = x.size
    if w <= 1 or n == 0:
        return x.copy()

    half = w // 2
    idx = np.arange(n)
    start = np.maximum(0, idx - half)
    end = np.minimum(n, idx + half + 1)

    # Each window is summed left to right on its own; zero padding leaves the
    # edge sums unchanged. Equal inputs give bit-identical outputs.
    padded = np.concatenate((np.zeros(half), x, np.zeros(half)))
    sums = np.zeros(n)
    for k in range(2 * half + 1):
        sums += padded[k : k + n]
    return sums / (end - start).astype(float)


def preprocess(trace: TraceFrame, *, invert: bool = False, window: int = 1) -> PreprocessedSeries:
    """Convert a parsed trace to the microsecond axis, invert if requested, and smooth it."""
    t_us = trace.time_s * SECONDS_TO_US
    v = trace.voltage_v
    if invert:
        v = -v

    return PreprocessedSeries(t_us=t_us, v_raw=v, v_smooth=moving_average(v, window))
