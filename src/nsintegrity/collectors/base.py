"""
Base collector interfaces for NS Integrity.

Collectors are the read-only adapters through which the audit sees the
cloud: the asset catalog enumerating managed zones of an organization and
the zone directory exposing zone metadata and record sets.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator

from nsintegrity.cloud.base import Organization
from nsintegrity.models import AssetRef, ManagedZone, ResourceRecordSet

MANAGED_ZONE_ASSET_TYPE = "dns.googleapis.com/ManagedZone"


class AssetCatalog(ABC):
    """
    Enumerates the managed zone assets of an organization.

    Implementations must yield every asset exactly once per call and may
    be called again to restart the enumeration.
    """

    collector_name: str = "base_asset_catalog"

    @abstractmethod
    def list_managed_zone_assets(self, organization: Organization) -> Iterator[AssetRef]:
        """
        Yield the managed zone assets under the organization.

        Args:
            organization: Organization to enumerate

        Yields:
            AssetRef for each managed zone

        Raises:
            TransportError: If the enumeration itself fails. This aborts
                the audit.
        """
        pass


class ZoneDirectory(ABC):
    """Exposes managed zone metadata and declared record sets."""

    collector_name: str = "base_zone_directory"

    @abstractmethod
    def get(self, project_id: str, zone_name: str) -> ManagedZone:
        """
        Fetch a managed zone.

        Raises:
            ResourceNotFoundError: If the zone no longer exists.
            PermissionDeniedError: If access to the zone is denied.
            TransportError: On any other API failure.
        """
        pass

    @abstractmethod
    def list_records(self, project_id: str, zone_name: str) -> list[ResourceRecordSet]:
        """
        List every record set declared in a managed zone.

        Raises:
            CloudProviderError: If the listing fails.
        """
        pass
