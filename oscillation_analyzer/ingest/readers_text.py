from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from oscillation_analyzer.models.frames import TraceFrame

log = logging.getLogger(__name__)

# Oscilloscopes write +/-1E+308 (or similar) for clipped/overflowed samples.
CLIP_LIMIT = 1e30

_HEADER_PREFIXES = ('"', "'")


class EmptyTraceError(ValueError):
    """Raised by the strict reader when a file yields no numeric rows."""


def _to_float(tok: str) -> Optional[float]:
    try:
        x = float(tok)
    except ValueError:
        return None
    return x if math.isfinite(x) else None


def _parse_row(line: str) -> Tuple[str, Optional[Tuple[float, float]]]:
    """Classify one stripped, non-empty line.

    Returns (kind, (t, v)) where kind is one of "header", "malformed", "clipped",
    "envelope" or "sample"; the pair is None unless the row is kept.
    """
    if line.startswith(_HEADER_PREFIXES):
        return "header", None

    parts = line.replace(",", ".").split()
    if len(parts) < 2:
        return "malformed", None

    t = _to_float(parts[0])
    v1 = _to_float(parts[1])
    if t is None or v1 is None:
        return "malformed", None
    if abs(v1) > CLIP_LIMIT:
        return "clipped", None

    if len(parts) >= 3:
        v2 = _to_float(parts[2])
        if v2 is not None and abs(v2) < CLIP_LIMIT:
            return "envelope", (t, (v1 + v2) / 2.0)

    return "sample", (t, v1)


def parse_trace_text(text: str, source_path: Optional[Path] = None) -> TraceFrame:
    """Parse an oscilloscope text export into a TraceFrame.

    Rules
    -----
    - Blank lines and lines starting with ``"`` or ``'`` (metadata/header rows) are skipped.
    - Commas become decimal points, then the line is split on whitespace.
    - Column 0 is time [s], column 1 voltage [V]. Rows that do not give two finite
      numbers are skipped.
    - Rows whose voltage magnitude exceeds ``CLIP_LIMIT`` are clipping sentinels and skipped.
    - A finite, non-clipped third column marks a min/max envelope row; the stored
      voltage is the mean of columns 1 and 2.

    An empty result is not an error here; the caller decides how to report it.
    """
    t_list: List[float] = []
    v_list: List[float] = []
    counts = {"header": 0, "malformed": 0, "clipped": 0, "envelope": 0, "sample": 0}

    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        kind, row = _parse_row(line)
        counts[kind] += 1
        if row is not None:
            t_list.append(row[0])
            v_list.append(row[1])

    df = pd.DataFrame(
        {
            "t": np.asarray(t_list, dtype=np.float64),
            "v": np.asarray(v_list, dtype=np.float64),
        }
    )

    warnings: List[str] = []
    if counts["header"]:
        warnings.append(f"Skipped {counts['header']} header/metadata rows")
    if counts["malformed"]:
        warnings.append(f"Skipped {counts['malformed']} non-numeric rows")
    if counts["clipped"]:
        warnings.append(f"Skipped {counts['clipped']} clipped rows (|v| > {CLIP_LIMIT:g})")
    if counts["envelope"]:
        warnings.append(f"Averaged {counts['envelope']} min/max envelope rows")
    if df.empty:
        warnings.append("No valid numeric data found")

    log.debug("parsed %d samples (%s)", len(df), counts)
    return TraceFrame(df=df, source_path=source_path, warnings=tuple(warnings))


@dataclass(frozen=True)
class TraceTextReaderConfig:
    """
    Reader configuration for oscilloscope text exports.

    strict:
      - True: raise EmptyTraceError when no numeric rows are found.
      - False: return an empty TraceFrame and let the pipeline report it.
    """
    encoding: str = "utf-8"
    strict: bool = False


class TraceTextReader:
    """Reads one oscilloscope export file (*.txt, *.csv) into a TraceFrame.

    Read and decoding failures (OSError, UnicodeDecodeError) propagate unchanged.
    """

    def __init__(self, config: Optional[TraceTextReaderConfig] = None):
        self.config = config or TraceTextReaderConfig()

    def read(self, path: str | Path) -> TraceFrame:
        p = Path(path).expanduser().resolve()
        with open(p, "r", encoding=self.config.encoding) as f:
            text = f.read()

        trace = parse_trace_text(text, source_path=p)
        if trace.is_empty and self.config.strict:
            raise EmptyTraceError(f"No valid numeric data found in {p.name}")
        return trace


def read_trace_file(path: str | Path, *, encoding: str = "utf-8", strict: bool = False) -> TraceFrame:
    return TraceTextReader(TraceTextReaderConfig(encoding=encoding, strict=strict)).read(path)
