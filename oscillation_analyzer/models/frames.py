from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class TraceFrame:
    """
    In-memory representation of one oscilloscope trace after parsing.

    Notes
    - 't' is the acquisition time in seconds, exactly as exported (file order, not re-sorted).
    - 'v' is the voltage in volts (mean of min/max for envelope exports).
    - df columns are always float64.
    """
    df: pd.DataFrame
    source_path: Optional[Path] = None
    warnings: Tuple[str, ...] = ()

    @property
    def n_samples(self) -> int:
        return int(len(self.df))

    @property
    def is_empty(self) -> bool:
        return self.n_samples == 0

    @property
    def time_s(self) -> np.ndarray:
        return self.df["t"].to_numpy(dtype=np.float64)

    @property
    def voltage_v(self) -> np.ndarray:
        return self.df["v"].to_numpy(dtype=np.float64)

    def head(self, n: int = 10) -> pd.DataFrame:
        """First ``n`` parsed rows, for a raw-data preview."""
        return self.df.head(int(n)).copy()
