"""Report chart export for an analysed trace.

Draws the engineering-report figure: the smoothed, zero-referenced signal in
red and the fitted envelope as a dashed black line, on a white background with
labelled axes. Rendering is headless (Agg canvas), so it works in batch jobs
and tests without a display.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence, Tuple

import numpy as np

from oscillation_analyzer.models.results import AnalysisResult


# Logical size 800x500 px at scale 2.
REPORT_SIZE_IN = (8.0, 5.0)
REPORT_DPI = 200

X_LABEL = "Time [µs]"
Y_LABEL = "Voltage [V]"


def chart_y_limits(values: Sequence[float] | np.ndarray, *, pad_fraction: float = 0.1) -> Tuple[float, float]:
    """Min/max of ``values`` padded by ``pad_fraction`` of the span (1.0 if the span is 0)."""
    y = np.asarray(values, dtype=float)
    y = y[np.isfinite(y)]
    if y.size == 0:
        return -1.0, 1.0
    y_min = float(np.min(y))
    y_max = float(np.max(y))
    pad = (y_max - y_min) * float(pad_fraction)
    if pad == 0:
        pad = 1.0
    return y_min - pad, y_max + pad


def build_report_figure(result: AnalysisResult):
    """Return a matplotlib Figure for ``result`` (requires a non-empty trace)."""
    from matplotlib.backends.backend_agg import FigureCanvasAgg
    from matplotlib.figure import Figure

    view = result.view
    if view is None:
        raise ValueError("Cannot draw a report for an empty trace.")

    fig = Figure(figsize=REPORT_SIZE_IN, dpi=REPORT_DPI, facecolor="white")
    FigureCanvasAgg(fig)
    ax = fig.add_subplot(1, 1, 1)
    ax.set_facecolor("white")

    ax.plot(view.t_us, view.v_smooth, color="red", linewidth=2)

    all_y = [view.v_smooth]
    if result.fit_t_us.size:
        ax.plot(result.fit_t_us, result.fit_v, color="black", linewidth=2, linestyle="--")
        all_y.append(result.fit_v)

    ax.set_xlabel(X_LABEL, color="black")
    ax.set_ylabel(Y_LABEL, color="black")
    ax.grid(True, color="#e0e0e0")
    ax.tick_params(direction="out", length=5, width=1, colors="black")

    t_max = float(np.max(view.t_us))
    if t_max > 0:
        ax.set_xlim(0.0, t_max)
    ax.set_ylim(*chart_y_limits(np.concatenate(all_y)))

    fig.tight_layout()
    return fig


def render_report(result: AnalysisResult, path: str | Path) -> Path:
    """Write the report chart of ``result`` as a PNG file and return its path."""
    out = Path(path).expanduser()
    fig = build_report_figure(result)
    fig.savefig(out, format="png", facecolor="white")
    return out
