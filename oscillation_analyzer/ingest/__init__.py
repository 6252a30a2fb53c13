"""Ingest package - oscilloscope text exports to TraceFrame.

This package handles:
- Parsing whitespace-separated time/voltage exports
- Decimal-comma locales and quoted header/metadata rows
- Min/max envelope exports (three columns, stored as their mean)
- Dropping clipped rows (overflow sentinels such as +/-1E+308)

Design principle:
- Malformed rows are skipped and counted, never raised
- Rows are kept in file order; time is not re-sorted or repaired
"""

from .readers_text import (
    CLIP_LIMIT,
    EmptyTraceError,
    TraceTextReader,
    TraceTextReaderConfig,
    parse_trace_text,
    read_trace_file,
)

__all__ = [
    "CLIP_LIMIT",
    "EmptyTraceError",
    "TraceTextReader",
    "TraceTextReaderConfig",
    "parse_trace_text",
    "read_trace_file",
]
