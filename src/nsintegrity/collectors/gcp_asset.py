"""
Cloud Asset Inventory catalog for NS Integrity.

Enumerates the Cloud DNS managed zones of an organization across all of its
projects with a single ListAssets call.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

from google.api_core.exceptions import GoogleAPIError
from google.cloud import asset_v1

from nsintegrity.cloud.base import Organization, TransportError
from nsintegrity.collectors.base import MANAGED_ZONE_ASSET_TYPE, AssetCatalog
from nsintegrity.models import AssetRef

logger = logging.getLogger(__name__)


class GCPAssetCatalog(AssetCatalog):
    """
    Lists managed zone assets with the Cloud Asset API.

    All API calls are read-only.
    """

    collector_name = "gcp_asset"

    def __init__(self, credentials: Any | None = None, **kwargs: Any) -> None:
        """
        Initialize the asset catalog.

        Args:
            credentials: Optional google-auth credentials object.
            **kwargs: Additional configuration.
        """
        self._credentials = credentials
        self._client: asset_v1.AssetServiceClient | None = None

    def _get_client(self) -> asset_v1.AssetServiceClient:
        """Get or create the Asset Service client."""
        if self._client is None:
            self._client = asset_v1.AssetServiceClient(credentials=self._credentials)
        return self._client

    def list_managed_zone_assets(self, organization: Organization) -> Iterator[AssetRef]:
        """Yield managed zone assets, following pagination."""
        client = self._get_client()
        request = asset_v1.ListAssetsRequest(
            parent=organization.name,
            asset_types=[MANAGED_ZONE_ASSET_TYPE],
        )

        count = 0
        try:
            for asset in client.list_assets(request=request):
                count += 1
                yield AssetRef(name=asset.name, asset_type=asset.asset_type)
        except GoogleAPIError as e:
            raise TransportError(
                f"failed to list managed zones of {organization.name}: {e}"
            ) from e

        logger.info(f"Asset catalog listed {count} managed zones in {organization}")
