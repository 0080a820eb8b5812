"""
Reporting module for NS Integrity.

Provides the FindingReporter projecting reconciliation findings onto a
human-readable (text, table) or machine-readable (json) stream.
"""

from nsintegrity.reporting.reporter import (
    OUTPUT_FORMATS,
    FindingReporter,
    format_finding,
    format_table,
    summarize,
)

__all__ = [
    "OUTPUT_FORMATS",
    "FindingReporter",
    "format_finding",
    "format_table",
    "summarize",
]
