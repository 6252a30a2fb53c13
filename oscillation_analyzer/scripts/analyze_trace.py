"""Command-line analysis of one oscilloscope trace file.

Examples
--------
    python -m oscillation_analyzer.scripts.analyze_trace scope.txt --window 10 --tolerance 10
    oscillation-analyzer scope.txt --invert --report scope.png --csv scope_norm.csv
"""

from __future__ import annotations

import dataclasses
import json
import logging
import sys
from typing import Optional, Sequence

from oscillation_analyzer.analysis.pipeline import analyze_trace
from oscillation_analyzer.ingest.readers_text import read_trace_file
from oscillation_analyzer.models.results import AnalysisResult
from oscillation_analyzer.models.settings import AnalysisSettings, load_settings_json


EXIT_OK = 0
EXIT_EMPTY = 1
EXIT_IO = 2


def format_summary(result: AnalysisResult) -> str:
    lines = []
    s = result.settings
    lines.append(
        f"samples={result.n_samples}  window={s.smoothing_window}  "
        f"tolerance={s.period_tolerance_pct:g} %  inverted={'yes' if s.invert else 'no'}"
    )
    m = result.metrics
    if m is not None:
        lines.append(f"Frequency (f):              {m.frequency_khz:.2f} kHz")
        lines.append(f"Logarithmic decrement (λ):  {m.log_decrement:.4f}")
        lines.append(f"Damping coefficient (β):    {m.damping_coefficient_per_s:.4f} s^-1")
        lines.append(f"Period (T):                 {m.period_us:.2f} µs")
        lines.append(f"Valid cycles:               {m.valid_cycle_count}")
    for w in result.warnings:
        lines.append(f"[warn] {w}")
    if result.issue_message:
        lines.append(f"WARNING: {result.issue_message}")
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    import argparse
    import textwrap

    p = argparse.ArgumentParser(
        prog="python -m oscillation_analyzer.scripts.analyze_trace",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            Extract frequency, logarithmic decrement and damping coefficient from a
            damped-oscillation trace exported by an oscilloscope.

            The file holds whitespace-separated columns: time [s] and voltage [V],
            or time, min and max for envelope exports. Quoted header rows are ignored.
            """
        ),
    )
    p.add_argument("file", help="Trace file (*.txt, *.csv)")
    p.add_argument("--settings", default=None, help="JSON file with analysis settings")
    p.add_argument("--window", type=int, default=None, help="Smoothing window in samples (1..50)")
    p.add_argument("--tolerance", type=float, default=None, help="Period tolerance in percent (e.g. 10)")
    p.add_argument("--invert", action="store_true", help="Invert signal polarity before analysis")
    p.add_argument("--encoding", default="utf-8", help="Text encoding of the trace file")
    p.add_argument("--report", default=None, help="Write the report chart to this PNG file")
    p.add_argument("--csv", default=None, help="Write the normalized series to this CSV file")
    p.add_argument("--json", action="store_true", help="Print the summary as JSON")
    p.add_argument("-v", "--verbose", action="store_true", help="Log pipeline details")

    ns = p.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings_json(ns.settings) if ns.settings else AnalysisSettings()
        overrides = {}
        if ns.window is not None:
            overrides["smoothing_window"] = ns.window
        if ns.tolerance is not None:
            overrides["period_tolerance_pct"] = ns.tolerance
        if ns.invert:
            overrides["invert"] = True
        settings = dataclasses.replace(settings, **overrides).validate()
    except (ValueError, TypeError, OSError) as exc:
        p.error(str(exc))

    try:
        trace = read_trace_file(ns.file, encoding=ns.encoding)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"ERROR: cannot read {ns.file}: {exc}", file=sys.stderr)
        return EXIT_IO

    result = analyze_trace(trace, settings)

    if ns.json:
        print(json.dumps(result.summary_dict(), indent=2, allow_nan=False))
    else:
        print(format_summary(result))

    if result.issue == "empty_input":
        return EXIT_EMPTY

    if ns.csv:
        result.to_frame().to_csv(ns.csv, index=False)
        print(f"[info] wrote {ns.csv}")
    if ns.report:
        from oscillation_analyzer.presentation.report_plot import render_report

        out = render_report(result, ns.report)
        print(f"[info] wrote {out}")

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
