"""
NS Integrity - Cloud DNS nameserver delegation audit

A read-only audit answering one question for every managed zone of an
organization: "Does the public DNS delegate to the nameservers this zone
declares?"

Key Features:
- Read-only: never modifies DNS records
- Detects nameserver mismatches, dangling and unconnected delegations,
  duplicate zone ownership and orphaned subdomain referrals
- Partial failures are isolated to the zone or record they affect

Quick Start:
    >>> from nsintegrity.collectors import get_default_collectors
    >>> from nsintegrity.engine import ReconciliationEngine, ZoneCatalogBuilder
    >>> from nsintegrity.resolution import DNSPythonResolver
    >>>
    >>> catalog_source, zones = get_default_collectors(credentials)
    >>> catalog = ZoneCatalogBuilder(catalog_source, zones).build(organization)
    >>> result = ReconciliationEngine(zones, DNSPythonResolver()).reconcile(catalog)
    >>> print(f"Found {len(result)} issues")
"""

from __future__ import annotations

__version__ = "0.1.0"

# Core models
from nsintegrity.models import (
    AssetRef,
    Finding,
    FindingCollection,
    FindingKind,
    ManagedZone,
    ResourceRecordSet,
    Severity,
    ZoneCatalog,
    ZoneSkip,
    ZoneVisibility,
)

# Engine
from nsintegrity.engine import (
    AuditCancelledError,
    CancellationToken,
    ComparisonVerdict,
    NameserverComparator,
    ReconciliationEngine,
    ReconciliationResult,
    VerdictStatus,
    ZoneCatalogBuilder,
    compare_nameservers,
    parse_managed_zone_resource_name,
)

# Resolution
from nsintegrity.resolution import (
    DNSPythonResolver,
    NameserverResolver,
    ResolutionError,
)

# Reporting
from nsintegrity.reporting import FindingReporter

__all__ = [
    "__version__",
    # Models
    "AssetRef",
    "Finding",
    "FindingCollection",
    "FindingKind",
    "ManagedZone",
    "ResourceRecordSet",
    "Severity",
    "ZoneCatalog",
    "ZoneSkip",
    "ZoneVisibility",
    # Engine
    "AuditCancelledError",
    "CancellationToken",
    "ComparisonVerdict",
    "NameserverComparator",
    "ReconciliationEngine",
    "ReconciliationResult",
    "VerdictStatus",
    "ZoneCatalogBuilder",
    "compare_nameservers",
    "parse_managed_zone_resource_name",
    # Resolution
    "DNSPythonResolver",
    "NameserverResolver",
    "ResolutionError",
    # Reporting
    "FindingReporter",
]
