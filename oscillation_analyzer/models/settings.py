"""Analysis settings -- bundles every tunable that affects the pipeline output.

AnalysisSettings groups the operator-facing parameters into one frozen,
hashable dataclass.  It can be:

- Overridden field-by-field via ``dataclasses.replace()``
- Serialized to/from a dict (or JSON file) for provenance
- Used directly as a memoization key, since equal settings give equal results
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict


SMOOTHING_WINDOW_MIN = 1
SMOOTHING_WINDOW_MAX = 50


@dataclass(frozen=True)
class AnalysisSettings:
    """Frozen configuration for one pipeline invocation.

    Fields
    ------
    smoothing_window : int
        Moving-average window in samples, 1..50. 1 disables smoothing.
    period_tolerance_pct : float
        Allowed deviation of each period from the first measured period, in
        percent of that period. The operator range is 5..50.
    invert : bool
        Negate the voltage before smoothing (inverted probe polarity).
    fit_curve_points : int
        Number of grid steps used to sample the fitted envelope for display.
    """

    smoothing_window: int = 10
    period_tolerance_pct: float = 10.0
    invert: bool = False
    fit_curve_points: int = 200

    @property
    def tolerance_fraction(self) -> float:
        return float(self.period_tolerance_pct) / 100.0

    def validate(self) -> "AnalysisSettings":
        """Raise ValueError if any field is outside its domain; return self otherwise."""
        w = self.smoothing_window
        if isinstance(w, bool) or int(w) != w:
            raise ValueError(f"smoothing_window must be an integer, got {w!r}")
        if not (SMOOTHING_WINDOW_MIN <= int(w) <= SMOOTHING_WINDOW_MAX):
            raise ValueError(
                f"smoothing_window must be in [{SMOOTHING_WINDOW_MIN}, {SMOOTHING_WINDOW_MAX}], got {w}"
            )
        tol = float(self.period_tolerance_pct)
        if not math.isfinite(tol) or tol <= 0.0:
            raise ValueError(f"period_tolerance_pct must be finite and > 0, got {self.period_tolerance_pct}")
        if int(self.fit_curve_points) < 2:
            raise ValueError(f"fit_curve_points must be >= 2, got {self.fit_curve_points}")
        return self

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> AnalysisSettings:
        """Reconstruct from a dict (e.g. loaded from JSON). Unknown keys raise TypeError."""
        d = dict(d)
        if "invert" in d and not isinstance(d["invert"], bool):
            raise ValueError(f"invert must be true or false, got {d['invert']!r}")
        return cls(**d).validate()


def load_settings_json(path: str | Path) -> AnalysisSettings:
    p = Path(path).expanduser()
    with open(p, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{p.name}: expected a JSON object, got {type(data).__name__}")
    return AnalysisSettings.from_dict(data)


def save_settings_json(settings: AnalysisSettings, path: str | Path) -> Path:
    p = Path(path).expanduser()
    with open(p, "w", encoding="utf-8") as f:
        json.dump(settings.to_dict(), f, indent=2)
    return p
