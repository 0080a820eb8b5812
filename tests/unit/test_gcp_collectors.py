"""
Unit tests for the Google Cloud collectors.

Tests cover:
- Managed zone enumeration through Cloud Asset Inventory
- Zone metadata and record set listing through Cloud DNS v1
- Pagination of record set listings
- Mapping of API failures to the cloud error taxonomy
- One Cloud DNS service per worker thread
"""

from __future__ import annotations

import threading
from unittest.mock import MagicMock, patch

import pytest
from google.api_core.exceptions import ServiceUnavailable
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError

from nsintegrity.cloud.base import (
    AuthenticationError,
    PermissionDeniedError,
    ResourceNotFoundError,
    TransportError,
)
from nsintegrity.collectors import (
    MANAGED_ZONE_ASSET_TYPE,
    GCPAssetCatalog,
    GCPZoneDirectory,
    get_default_collectors,
)
from nsintegrity.engine import ReconciliationEngine
from nsintegrity.models import ZoneCatalog, ZoneVisibility


def _http_error(status: int) -> HttpError:
    resp = MagicMock(status=status, reason="error")
    return HttpError(resp=resp, content=b"")


def _asset(name: str) -> MagicMock:
    asset = MagicMock()
    asset.name = name
    asset.asset_type = MANAGED_ZONE_ASSET_TYPE
    return asset


@pytest.fixture
def mock_dns_service():
    """Create a mock Cloud DNS service with one zone and two pages of records."""
    service = MagicMock()

    zone_request = MagicMock()
    zone_request.execute.return_value = {
        "name": "example-com",
        "dnsName": "example.com.",
        "visibility": "public",
        "description": "",
    }
    service.managedZones.return_value.get.return_value = zone_request

    first_page = MagicMock()
    first_page.execute.return_value = {
        "rrsets": [
            {
                "name": "example.com.",
                "type": "NS",
                "ttl": 21600,
                "rrdatas": ["ns-cloud-a1.googledomains.com.", "ns-cloud-a2.googledomains.com."],
            },
            {"name": "example.com.", "type": "SOA", "ttl": 21600, "rrdatas": ["soa"]},
        ],
        "nextPageToken": "page-2",
    }
    second_page = MagicMock()
    second_page.execute.return_value = {
        "rrsets": [
            {"name": "sub.example.com.", "type": "NS", "ttl": 300, "rrdatas": ["ns1.other.net."]},
        ]
    }

    rrsets = service.resourceRecordSets.return_value
    rrsets.list.return_value = first_page
    rrsets.list_next.side_effect = [second_page, None]

    return service


class TestGCPAssetCatalog:
    """Tests for GCPAssetCatalog."""

    def test_collector_name(self):
        assert GCPAssetCatalog().collector_name == "gcp_asset"

    def test_lists_managed_zones(self, organization):
        """Test assets are listed for the organization and zone asset type."""
        catalog = GCPAssetCatalog()
        client = MagicMock()
        client.list_assets.return_value = [
            _asset("//dns.googleapis.com/projects/p1/managedZones/a"),
            _asset("//dns.googleapis.com/projects/p2/managedZones/b"),
        ]

        with patch.object(catalog, "_get_client", return_value=client):
            assets = list(catalog.list_managed_zone_assets(organization))

        assert [a.name for a in assets] == [
            "//dns.googleapis.com/projects/p1/managedZones/a",
            "//dns.googleapis.com/projects/p2/managedZones/b",
        ]
        request = client.list_assets.call_args.kwargs["request"]
        assert request.parent == "organizations/123456789"
        assert list(request.asset_types) == [MANAGED_ZONE_ASSET_TYPE]

    def test_api_failure(self, organization):
        catalog = GCPAssetCatalog()
        client = MagicMock()
        client.list_assets.side_effect = ServiceUnavailable("backend unavailable")

        with patch.object(catalog, "_get_client", return_value=client):
            with pytest.raises(TransportError):
                list(catalog.list_managed_zone_assets(organization))


class TestGCPZoneDirectory:
    """Tests for GCPZoneDirectory."""

    def test_get_zone(self, mock_dns_service):
        directory = GCPZoneDirectory()

        with patch.object(directory, "_get_service", return_value=mock_dns_service):
            zone = directory.get("dns-prod", "example-com")

        mock_dns_service.managedZones.return_value.get.assert_called_once_with(
            project="dns-prod", managedZone="example-com"
        )
        assert zone.identifier == "dns-prod/example-com"
        assert zone.dns_name == "example.com."
        assert zone.visibility == ZoneVisibility.PUBLIC

    def test_list_records_follows_pagination(self, mock_dns_service):
        directory = GCPZoneDirectory()

        with patch.object(directory, "_get_service", return_value=mock_dns_service):
            records = directory.list_records("dns-prod", "example-com")

        assert [(r.name, r.record_type) for r in records] == [
            ("example.com.", "NS"),
            ("example.com.", "SOA"),
            ("sub.example.com.", "NS"),
        ]
        assert records[0].values == (
            "ns-cloud-a1.googledomains.com.",
            "ns-cloud-a2.googledomains.com.",
        )
        assert mock_dns_service.resourceRecordSets.return_value.list_next.call_count == 2

    @pytest.mark.parametrize(
        "status,error_type",
        [
            (404, ResourceNotFoundError),
            (403, PermissionDeniedError),
            (500, TransportError),
            (429, TransportError),
        ],
    )
    def test_http_errors_are_mapped(self, mock_dns_service, status, error_type):
        directory = GCPZoneDirectory()
        mock_dns_service.managedZones.return_value.get.return_value.execute.side_effect = (
            _http_error(status)
        )

        with patch.object(directory, "_get_service", return_value=mock_dns_service):
            with pytest.raises(error_type, match=f"HTTP {status}"):
                directory.get("dns-prod", "example-com")

    def test_socket_errors_are_transport_errors(self, mock_dns_service):
        directory = GCPZoneDirectory()
        rrsets = mock_dns_service.resourceRecordSets.return_value
        rrsets.list.return_value.execute.side_effect = ConnectionResetError("reset by peer")

        with patch.object(directory, "_get_service", return_value=mock_dns_service):
            with pytest.raises(TransportError, match="record sets of dns-prod/example-com"):
                directory.list_records("dns-prod", "example-com")

    @pytest.mark.parametrize(
        "status,error_type",
        [(401, AuthenticationError), (403, PermissionDeniedError)],
    )
    def test_auth_failures_are_not_transport_errors(self, mock_dns_service, status, error_type):
        directory = GCPZoneDirectory()
        rrsets = mock_dns_service.resourceRecordSets.return_value
        rrsets.list.return_value.execute.side_effect = _http_error(status)

        with patch.object(directory, "_get_service", return_value=mock_dns_service):
            with pytest.raises(error_type):
                directory.list_records("dns-prod", "example-com")

    def test_refresh_failure_is_authentication_error(self, mock_dns_service):
        directory = GCPZoneDirectory()
        rrsets = mock_dns_service.resourceRecordSets.return_value
        rrsets.list.return_value.execute.side_effect = RefreshError("token expired")

        with patch.object(directory, "_get_service", return_value=mock_dns_service):
            with pytest.raises(AuthenticationError, match="token expired"):
                directory.list_records("dns-prod", "example-com")

    def test_service_built_once_per_thread(self):
        credentials = MagicMock()
        directory = GCPZoneDirectory(credentials=credentials)
        services = []

        with patch(
            "nsintegrity.collectors.gcp_dns.discovery.build",
            side_effect=lambda *args, **kwargs: MagicMock(),
        ) as mock_build:
            first = directory._get_service()
            assert directory._get_service() is first

            other = threading.Thread(target=lambda: services.append(directory._get_service()))
            other.start()
            other.join()

        assert services[0] is not first
        assert mock_build.call_count == 2
        mock_build.assert_called_with(
            "dns", "v1", credentials=credentials, cache_discovery=False
        )

    def test_default_credentials_resolved_once(self):
        credentials = MagicMock()
        directory = GCPZoneDirectory()

        with patch(
            "nsintegrity.collectors.gcp_dns.google.auth.default",
            return_value=(credentials, "p"),
        ) as mock_default, patch("nsintegrity.collectors.gcp_dns.discovery.build"):
            directory._get_service()
            thread = threading.Thread(target=directory._get_service)
            thread.start()
            thread.join()

        mock_default.assert_called_once_with()
        assert directory._credentials is credentials


class TestGCPZoneDirectoryWorkerPool:
    """Tests for GCPZoneDirectory under the reconciliation worker pool."""

    def test_worker_threads_do_not_share_a_service(self, zone_factory, resolver):
        """Test concurrent record listings each run on their own service."""
        workers = 4
        barrier = threading.Barrier(workers, timeout=10)
        lock = threading.Lock()
        calls: list[tuple[int, int]] = []

        def build_service(*args, **kwargs):
            service = MagicMock()

            def execute():
                with lock:
                    calls.append((threading.get_ident(), id(service)))
                # Holds every worker inside execute() at the same time
                barrier.wait()
                return {"rrsets": []}

            rrsets = service.resourceRecordSets.return_value
            rrsets.list.return_value.execute.side_effect = execute
            rrsets.list_next.return_value = None
            return service

        catalog = ZoneCatalog(
            [zone_factory("p", f"zone-{i}", f"zone{i}.example.") for i in range(workers)]
        )
        directory = GCPZoneDirectory(credentials=MagicMock())

        with patch(
            "nsintegrity.collectors.gcp_dns.discovery.build", side_effect=build_service
        ) as mock_build:
            result = ReconciliationEngine(directory, resolver, concurrency=workers).reconcile(
                catalog
            )

        assert result.skipped == []
        assert result.zones_audited == workers
        assert len({thread for thread, _ in calls}) == workers
        assert len({service for _, service in calls}) == workers
        assert mock_build.call_count == workers


class TestGetDefaultCollectors:
    """Tests for get_default_collectors."""

    def test_shares_credentials(self):
        credentials = MagicMock()
        catalog, directory = get_default_collectors(credentials)

        assert isinstance(catalog, GCPAssetCatalog)
        assert isinstance(directory, GCPZoneDirectory)
        assert catalog._credentials is credentials
        assert directory._credentials is credentials
