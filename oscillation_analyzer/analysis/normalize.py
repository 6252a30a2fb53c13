from __future__ import annotations

from typing import Sequence

import numpy as np

from oscillation_analyzer.models.results import Crossing, NormalizedView, Peak


def normalize(
    t_us: np.ndarray,
    v_raw: np.ndarray,
    v_smooth: np.ndarray,
    peaks: Sequence[Peak],
    crossings: Sequence[Crossing],
    baseline: float,
) -> NormalizedView:
    """Shift everything so the first valid crossing is at t=0 and the baseline at v=0.

    Without valid crossings the first sample time is used as the time origin, so
    the display axis stays defined even when detection fails. The baseline of
    the returned view is 0 by construction, not recomputed.
    """
    t = np.asarray(t_us, dtype=float)
    if crossings:
        t0 = float(crossings[0].time_us)
    elif t.size:
        t0 = float(t[0])
    else:
        t0 = 0.0
    v0 = float(baseline)

    return NormalizedView(
        t_us=t - t0,
        v_raw=np.asarray(v_raw, dtype=float) - v0,
        v_smooth=np.asarray(v_smooth, dtype=float) - v0,
        peaks=tuple(Peak(time_us=p.time_us - t0, voltage=p.voltage - v0) for p in peaks),
        crossings=tuple(Crossing(time_us=c.time_us - t0, index=c.index) for c in crossings),
        time_offset_us=t0,
        voltage_offset=v0,
    )
