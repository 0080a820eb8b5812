"""
Finding reporter for NS Integrity.

Projects the findings of a reconciliation run onto an output stream, one
finding per line (or per row) in the order the engine produced them.
"""

from __future__ import annotations

import sys
from typing import Any, Iterable, TextIO

from nsintegrity.models import Finding, FindingCollection

OUTPUT_FORMATS = ("text", "json", "table")

TABLE_COLUMNS = ("severity", "kind", "domain", "zone", "project", "detail")


def format_finding(finding: Finding) -> str:
    """
    Format a finding as a single severity-prefixed line.

    Example:
        ERROR: [NAMESERVER_MISMATCH] domain=a.com. zone=p/z project=p: ...
    """
    return (
        f"{finding.severity.name}: [{finding.kind.name}] "
        f"domain={finding.domain} zone={finding.zone_identifier} "
        f"project={finding.project_id}: {finding.detail}"
    )


def _table_row(finding: Finding) -> dict[str, Any]:
    return dict(
        zip(
            TABLE_COLUMNS,
            (
                finding.severity.name,
                finding.kind.name,
                finding.domain,
                finding.zone_identifier,
                finding.project_id,
                finding.detail,
            ),
        )
    )


def format_table(rows: list[dict[str, Any]]) -> str:
    """
    Format rows as an ASCII table.

    Args:
        rows: List of dictionaries sharing the same keys

    Returns:
        Formatted table string
    """
    if not rows:
        return ""

    headers = list(rows[0].keys())

    widths = {h: len(str(h)) for h in headers}
    for row in rows:
        for h in headers:
            widths[h] = max(widths[h], len(str(row.get(h, ""))))

    lines = []
    lines.append(" | ".join(str(h).ljust(widths[h]) for h in headers))
    lines.append("-+-".join("-" * widths[h] for h in headers))
    for row in rows:
        lines.append(
            " | ".join(str(row.get(h, "")).ljust(widths[h]) for h in headers)
        )

    return "\n".join(lines)


class FindingReporter:
    """
    Writes findings to an output stream.

    The reporter never reorders, filters or deduplicates findings.
    """

    def __init__(self, output_format: str = "text", stream: TextIO | None = None) -> None:
        """
        Initialize the reporter.

        Args:
            output_format: One of text, json or table
            stream: Output stream (default: sys.stdout)

        Raises:
            ValueError: If the output format is unknown
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unknown output format '{output_format}', "
                f"expected one of {', '.join(OUTPUT_FORMATS)}"
            )
        self._output_format = output_format
        self._stream = stream

    @property
    def output_format(self) -> str:
        return self._output_format

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def render(self, findings: Iterable[Finding]) -> str:
        """
        Render findings in the configured format.

        Args:
            findings: Findings in engine order

        Returns:
            Rendered report; empty for text and table with no findings
        """
        collection = FindingCollection(list(findings))

        if self._output_format == "json":
            return collection.to_json()

        if self._output_format == "table":
            return format_table([_table_row(f) for f in collection])

        return "\n".join(format_finding(f) for f in collection)

    def report(self, findings: Iterable[Finding]) -> None:
        """Write findings to the output stream."""
        rendered = self.render(findings)
        if rendered:
            self.stream.write(rendered + "\n")
        self.stream.flush()


def summarize(findings: Iterable[Finding]) -> str:
    """
    Summarize findings as a single line of counts by kind.

    Returns:
        e.g. "3 findings: 2 nameserver_mismatch, 1 orphaned_subdomain_referral"
    """
    counts = FindingCollection(list(findings)).count_by_kind()
    total = sum(counts.values())
    if total == 0:
        return "no findings"

    parts = [
        f"{count} {kind.value}" for kind, count in counts.items() if count
    ]
    noun = "finding" if total == 1 else "findings"
    return f"{total} {noun}: {', '.join(parts)}"
