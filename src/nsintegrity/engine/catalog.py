"""
Zone catalog builder for NS Integrity.

Turns the managed zone assets of an organization into a ZoneCatalog of
public zones. Problems with single assets are recorded and skipped; only a
failure of the enumeration itself aborts the build.
"""

from __future__ import annotations

import logging
import re
import time

from nsintegrity.cloud.base import CloudProviderError, Organization
from nsintegrity.collectors.base import AssetCatalog, ZoneDirectory
from nsintegrity.models import ZoneCatalog

logger = logging.getLogger(__name__)

DNS_SERVICE_HOST = "dns.googleapis.com"

# //dns.googleapis.com/projects/<project>/managedZones/<zone>
MANAGED_ZONE_RESOURCE_NAME = re.compile(
    r"^//" + re.escape(DNS_SERVICE_HOST)
    + r"/projects/(?P<project>[^/\s]+)/managedZones/(?P<zone>[^/\s]+)$"
)


class ResourceNameError(ValueError):
    """Raised when an asset name is not a managed zone resource name."""

    pass


def parse_managed_zone_resource_name(name: str) -> tuple[str, str]:
    """
    Extract project and zone from a managed zone resource name.

    Grammar::

        //dns.googleapis.com/projects/<project>/managedZones/<zone>

    where <project> and <zone> are non-empty and contain neither "/" nor
    whitespace. Nothing may precede or follow the name.

    Args:
        name: Full resource name as returned by the asset catalog

    Returns:
        Tuple of (project_id, zone_name)

    Raises:
        ResourceNameError: If the name does not follow the grammar
    """
    match = MANAGED_ZONE_RESOURCE_NAME.match(name)
    if match is None:
        raise ResourceNameError(f"{name!r} is not a managed zone resource name")
    return match.group("project"), match.group("zone")


class ZoneCatalogBuilder:
    """
    Builds the catalog of managed zones to audit.

    Private zones are left out unless include_private_zones is set.
    """

    def __init__(
        self,
        asset_catalog: AssetCatalog,
        zone_directory: ZoneDirectory,
        include_private_zones: bool = False,
    ) -> None:
        """
        Initialize the builder.

        Args:
            asset_catalog: Enumerates managed zone assets
            zone_directory: Fetches zone metadata
            include_private_zones: Keep private zones in the catalog
        """
        self._asset_catalog = asset_catalog
        self._zone_directory = zone_directory
        self._include_private_zones = include_private_zones

    def build(self, organization: Organization) -> ZoneCatalog:
        """
        Build the zone catalog of an organization.

        Args:
            organization: Organization whose zones are enumerated

        Returns:
            ZoneCatalog with the zones in enumeration order

        Raises:
            CloudProviderError: If the asset enumeration fails
        """
        start_time = time.time()
        catalog = ZoneCatalog()

        for asset in self._asset_catalog.list_managed_zone_assets(organization):
            try:
                project_id, zone_name = parse_managed_zone_resource_name(asset.name)
            except ResourceNameError as e:
                logger.error(f"Skipping asset: {e}")
                catalog.record_error(asset.name, str(e))
                continue

            try:
                zone = self._zone_directory.get(project_id, zone_name)
            except (CloudProviderError, ValueError) as e:
                logger.error(f"Skipping {asset.name}: {e}")
                catalog.record_error(asset.name, str(e))
                continue

            if not zone.is_public() and not self._include_private_zones:
                logger.debug(f"Excluding private zone {zone.identifier}")
                catalog.excluded_private += 1
                continue

            catalog.add(zone)

        duration = time.time() - start_time
        logger.info(
            f"Zone catalog built: {len(catalog)} zones, "
            f"{catalog.excluded_private} private zones excluded, "
            f"{len(catalog.errors)} skipped, {duration:.2f}s"
        )
        return catalog
