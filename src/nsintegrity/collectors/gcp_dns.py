"""
Cloud DNS zone directory for NS Integrity.

Reads managed zone metadata and resource record sets through the Cloud DNS
v1 discovery API.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import google.auth
from google.auth.exceptions import RefreshError
from googleapiclient import discovery
from googleapiclient.errors import HttpError

from nsintegrity.cloud.base import (
    AuthenticationError,
    CloudProviderError,
    PermissionDeniedError,
    ResourceNotFoundError,
    TransportError,
)
from nsintegrity.collectors.base import ZoneDirectory
from nsintegrity.models import ManagedZone, ResourceRecordSet

logger = logging.getLogger(__name__)


class GCPZoneDirectory(ZoneDirectory):
    """
    Reads Cloud DNS managed zones and their record sets.

    All API calls are read-only. Each thread gets its own API service, since
    the httplib2 transport behind a service must not be shared by threads.
    """

    collector_name = "gcp_dns"

    def __init__(self, credentials: Any | None = None, **kwargs: Any) -> None:
        """
        Initialize the zone directory.

        Args:
            credentials: Optional google-auth credentials object.
            **kwargs: Additional configuration.
        """
        self._credentials = credentials
        self._credentials_lock = threading.Lock()
        self._local = threading.local()

    def _get_credentials(self) -> Any:
        with self._credentials_lock:
            if self._credentials is None:
                # Use Application Default Credentials
                self._credentials, _ = google.auth.default()
            return self._credentials

    def _get_service(self) -> Any:
        """Get or create the Cloud DNS API service of the calling thread."""
        service = getattr(self._local, "service", None)
        if service is None:
            service = discovery.build(
                "dns",
                "v1",
                credentials=self._get_credentials(),
                cache_discovery=False,
            )
            self._local.service = service
            logger.debug(
                f"Built Cloud DNS service for thread {threading.current_thread().name}"
            )
        return service

    def get(self, project_id: str, zone_name: str) -> ManagedZone:
        """Fetch the metadata of one managed zone."""
        service = self._get_service()
        request = service.managedZones().get(project=project_id, managedZone=zone_name)
        data = self._execute(request, f"managed zone {project_id}/{zone_name}")
        return ManagedZone.from_api(project_id, data)

    def list_records(self, project_id: str, zone_name: str) -> list[ResourceRecordSet]:
        """List every record set of a managed zone, following pagination."""
        service = self._get_service()
        rrsets = service.resourceRecordSets()
        description = f"record sets of {project_id}/{zone_name}"

        records: list[ResourceRecordSet] = []
        request = rrsets.list(project=project_id, managedZone=zone_name)
        while request is not None:
            response = self._execute(request, description)
            for item in response.get("rrsets", []):
                records.append(ResourceRecordSet.from_api(item))
            request = rrsets.list_next(
                previous_request=request, previous_response=response
            )

        logger.debug(f"Listed {len(records)} record sets in {project_id}/{zone_name}")
        return records

    def _execute(self, request: Any, description: str) -> dict[str, Any]:
        """
        Execute an API request, mapping failures to CloudProviderError.

        Args:
            request: googleapiclient HttpRequest
            description: What is being fetched, for error messages

        Returns:
            Response body

        Raises:
            AuthenticationError: On HTTP 401 or a failed token refresh
            ResourceNotFoundError: On HTTP 404
            PermissionDeniedError: On HTTP 403
            TransportError: On any other HTTP or socket failure
        """
        try:
            return request.execute()
        except HttpError as e:
            raise _map_http_error(e, description) from e
        except RefreshError as e:
            raise AuthenticationError(
                f"failed to fetch {description}: could not refresh credentials: {e}"
            ) from e
        except OSError as e:
            raise TransportError(f"failed to fetch {description}: {e}") from e


def _map_http_error(error: HttpError, description: str) -> CloudProviderError:
    """Map a googleapiclient HttpError to the audit's error taxonomy."""
    status = getattr(error.resp, "status", None)
    message = f"failed to fetch {description}: HTTP {status}"
    if status == 401:
        return AuthenticationError(message)
    if status == 404:
        return ResourceNotFoundError(message)
    if status == 403:
        return PermissionDeniedError(message)
    return TransportError(message)
