"""
Audit engine for NS Integrity.

This package provides the reconciliation framework including:

- ZoneCatalogBuilder: Build the catalog of public managed zones
- NameserverComparator: Compare declared and live NS sets
- ReconciliationEngine: Audit every zone and classify discrepancies
- CancellationToken: Cancel a run or bound it with a deadline
"""

from __future__ import annotations

from nsintegrity.engine.cancellation import AuditCancelledError, CancellationToken
from nsintegrity.engine.catalog import (
    DNS_SERVICE_HOST,
    ResourceNameError,
    ZoneCatalogBuilder,
    parse_managed_zone_resource_name,
)
from nsintegrity.engine.comparator import (
    ComparisonVerdict,
    NameserverComparator,
    VerdictStatus,
    compare_nameservers,
)
from nsintegrity.engine.reconciler import (
    DEFAULT_CONCURRENCY,
    ReconciliationEngine,
    ReconciliationResult,
    ReconciliationState,
    ZoneOutcome,
)

__all__ = [
    # Cancellation
    "AuditCancelledError",
    "CancellationToken",
    # Catalog
    "DNS_SERVICE_HOST",
    "ResourceNameError",
    "ZoneCatalogBuilder",
    "parse_managed_zone_resource_name",
    # Comparator
    "ComparisonVerdict",
    "NameserverComparator",
    "VerdictStatus",
    "compare_nameservers",
    # Reconciler
    "DEFAULT_CONCURRENCY",
    "ReconciliationEngine",
    "ReconciliationResult",
    "ReconciliationState",
    "ZoneOutcome",
]
