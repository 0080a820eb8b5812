"""
Finding data model for NS Integrity.

This module defines the Finding class representing a discrepancy between
the managed zone configuration and the live DNS delegation graph, and
FindingCollection for managing the findings of one audit run.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


class Severity(Enum):
    """Severity level of a finding."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class FindingKind(Enum):
    """Category of a reconciliation finding."""

    DUPLICATE_ZONE_OWNERSHIP = "duplicate_zone_ownership"
    UNRESOLVED_ROOT_DELEGATION = "unresolved_root_delegation"
    UNRESOLVED_SUBDOMAIN_DELEGATION = "unresolved_subdomain_delegation"
    NAMESERVER_MISMATCH = "nameserver_mismatch"
    ORPHANED_SUBDOMAIN_REFERRAL = "orphaned_subdomain_referral"

    @property
    def default_severity(self) -> Severity:
        """Severity assigned to findings of this kind."""
        return _KIND_SEVERITY[self]


_KIND_SEVERITY = {
    FindingKind.DUPLICATE_ZONE_OWNERSHIP: Severity.ERROR,
    FindingKind.UNRESOLVED_ROOT_DELEGATION: Severity.ERROR,
    FindingKind.UNRESOLVED_SUBDOMAIN_DELEGATION: Severity.ERROR,
    FindingKind.NAMESERVER_MISMATCH: Severity.ERROR,
    FindingKind.ORPHANED_SUBDOMAIN_REFERRAL: Severity.ERROR,
}


@dataclass(frozen=True)
class Finding:
    """
    Represents one discrepancy found during reconciliation.

    Findings are produced by the reconciliation engine and are never
    mutated afterwards. They are the intended output of an audit, not
    errors of the tool itself.

    Attributes:
        severity: Severity level
        domain: Domain the finding is about
        zone_identifier: Identifier of the managed zone involved
        project_id: Project hosting that zone
        kind: Category of the finding
        detail: Human-readable explanation
        missing: Nameservers declared by the zone but not served live
        extraneous: Nameservers served live but not declared by the zone
        related_zone: Other zone involved (first owner for duplicates)
    """

    severity: Severity
    domain: str
    zone_identifier: str
    project_id: str
    kind: FindingKind
    detail: str

    # Mismatch-specific fields
    missing: tuple[str, ...] = field(default_factory=tuple)
    extraneous: tuple[str, ...] = field(default_factory=tuple)

    # Duplicate-specific fields
    related_zone: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """
        Convert finding to dictionary representation.

        Returns:
            Dictionary with all finding fields
        """
        return {
            "severity": self.severity.value,
            "domain": self.domain,
            "zone_identifier": self.zone_identifier,
            "project_id": self.project_id,
            "kind": self.kind.value,
            "detail": self.detail,
            "missing": list(self.missing),
            "extraneous": list(self.extraneous),
            "related_zone": self.related_zone,
        }


@dataclass(frozen=True)
class ZoneSkip:
    """A zone that could not be audited, with the reason."""

    zone_identifier: str
    project_id: str
    reason: str


class FindingCollection:
    """
    A collection of Finding objects with counting and JSON export.

    The collection is append-only and preserves the order in which
    findings were produced.
    """

    def __init__(self, findings: list[Finding] | None = None) -> None:
        """
        Initialize collection with optional list of findings.

        Args:
            findings: Initial list of findings (defaults to empty list)
        """
        self._findings: list[Finding] = findings if findings is not None else []

    @property
    def findings(self) -> list[Finding]:
        """Get the list of findings."""
        return self._findings

    def __len__(self) -> int:
        """Return number of findings in collection."""
        return len(self._findings)

    def __iter__(self) -> Iterator[Finding]:
        """Iterate over findings in collection."""
        return iter(self._findings)

    def __getitem__(self, index: int) -> Finding:
        """Get finding by index."""
        return self._findings[index]

    def add(self, finding: Finding) -> None:
        """
        Add a finding to the collection.

        Args:
            finding: Finding to add
        """
        self._findings.append(finding)

    def extend(self, findings: list[Finding]) -> None:
        """
        Add multiple findings to the collection.

        Args:
            findings: List of findings to add
        """
        self._findings.extend(findings)

    def count_by_kind(self) -> dict[FindingKind, int]:
        """
        Count findings grouped by kind.

        Returns:
            Dictionary mapping FindingKind to count
        """
        counts: dict[FindingKind, int] = {k: 0 for k in FindingKind}
        for finding in self._findings:
            counts[finding.kind] += 1
        return counts

    def to_list(self) -> list[dict[str, Any]]:
        """
        Convert collection to list of dictionaries.

        Returns:
            List of finding dictionaries
        """
        return [finding.to_dict() for finding in self._findings]

    def to_json(self) -> str:
        """
        Convert collection to JSON string.

        Returns:
            JSON string representation
        """
        return json.dumps(self.to_list(), indent=2, default=str)

