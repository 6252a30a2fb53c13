"""Oscillation Analyzer -- Python tooling for damped-oscillation oscilloscope traces.

Designed for ring-down measurements of RLC circuits and mechanical resonators
captured as time/voltage exports by a digital oscilloscope.

This package provides tools for:
- Ingesting oscilloscope text exports (decimal comma, header rows, envelope columns)
- Smoothing and optional polarity inversion
- Estimating the DC baseline from the settled tail of the trace
- Detecting rising zero crossings with period locking
- Extracting one peak per validated cycle
- Fitting the exponential decay envelope and deriving frequency,
  logarithmic decrement and damping coefficient

Key principles:
- Every stage is a pure function of its inputs and the analysis settings
- No incremental recomputation: a settings change reruns the whole pipeline
- Expected data problems are reported, not raised

Main subpackages:
- analysis: Preprocessing, crossing detection, peaks, envelope fit, pipeline
- ingest: Text trace parser and file reader
- models: Data models (TraceFrame, AnalysisSettings, AnalysisResult)
- presentation: Report chart export
"""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = []
