"""
Data models for NS Integrity.

This package provides the core data models used throughout the audit:

- ManagedZone: A Cloud DNS zone owned by the organization
- ResourceRecordSet: Records declared inside a zone
- ZoneCatalog: The zones taking part in one audit run
- Finding: A discrepancy found during reconciliation
"""

from nsintegrity.models.finding import (
    Finding,
    FindingCollection,
    FindingKind,
    Severity,
    ZoneSkip,
)
from nsintegrity.models.zone import (
    RECORD_TYPE_NS,
    AssetRef,
    CatalogError,
    ManagedZone,
    ResourceRecordSet,
    ZoneCatalog,
    ZoneVisibility,
    zone_identifier,
)

__all__ = [
    # Zone module
    "RECORD_TYPE_NS",
    "AssetRef",
    "CatalogError",
    "ManagedZone",
    "ResourceRecordSet",
    "ZoneCatalog",
    "ZoneVisibility",
    "zone_identifier",
    # Finding module
    "Finding",
    "FindingCollection",
    "FindingKind",
    "Severity",
    "ZoneSkip",
]
