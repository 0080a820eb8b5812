"""
Collector framework for NS Integrity.

Collectors are the read-only views of the cloud the audit works from:

    - GCPAssetCatalog: Enumerates managed zones of an organization
      (Cloud Asset Inventory)
    - GCPZoneDirectory: Reads managed zone metadata and record sets
      (Cloud DNS v1)
"""

from __future__ import annotations

from typing import Any

from nsintegrity.collectors.base import (
    MANAGED_ZONE_ASSET_TYPE,
    AssetCatalog,
    ZoneDirectory,
)
from nsintegrity.collectors.gcp_asset import GCPAssetCatalog
from nsintegrity.collectors.gcp_dns import GCPZoneDirectory

__all__ = [
    "MANAGED_ZONE_ASSET_TYPE",
    "AssetCatalog",
    "ZoneDirectory",
    "GCPAssetCatalog",
    "GCPZoneDirectory",
    "get_default_collectors",
]


def get_default_collectors(credentials: Any | None = None) -> tuple[AssetCatalog, ZoneDirectory]:
    """
    Get the Google Cloud collectors used by an audit.

    Args:
        credentials: Optional google-auth credentials object.

    Returns:
        Tuple of (asset catalog, zone directory)
    """
    return (
        GCPAssetCatalog(credentials=credentials),
        GCPZoneDirectory(credentials=credentials),
    )
