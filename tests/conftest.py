"""
Pytest configuration and fixtures for NS Integrity tests.

This module provides in-memory fakes of every cloud and DNS collaborator
and common sample data used across unit and integration tests.
"""

from __future__ import annotations

import threading
from typing import Iterator

import pytest

from nsintegrity.cloud.base import (
    Organization,
    ResourceNotFoundError,
    TransportError,
)
from nsintegrity.collectors.base import AssetCatalog, ZoneDirectory
from nsintegrity.models import (
    AssetRef,
    ManagedZone,
    ResourceRecordSet,
    ZoneCatalog,
    ZoneVisibility,
)
from nsintegrity.names import normalize_domain_name
from nsintegrity.resolution.resolver import NameserverResolver, ResolutionError


# Fakes


class FakeAssetCatalog(AssetCatalog):
    """Asset catalog serving a fixed list of asset names."""

    collector_name = "fake_asset"

    def __init__(self, names: list[str] | None = None, fail_after: int | None = None):
        self.names = list(names or [])
        self.fail_after = fail_after
        self.calls = 0

    def list_managed_zone_assets(self, organization: Organization) -> Iterator[AssetRef]:
        self.calls += 1
        for index, name in enumerate(self.names):
            if self.fail_after is not None and index >= self.fail_after:
                raise TransportError("asset listing interrupted")
            yield AssetRef(name=name)


class FakeZoneDirectory(ZoneDirectory):
    """Zone directory backed by dictionaries."""

    collector_name = "fake_dns"

    def __init__(self):
        self.zones: dict[tuple[str, str], ManagedZone] = {}
        self.records: dict[tuple[str, str], list[ResourceRecordSet]] = {}
        self.get_errors: dict[tuple[str, str], Exception] = {}
        self.list_errors: dict[tuple[str, str], Exception] = {}
        self.list_calls: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def add_zone(
        self,
        zone: ManagedZone,
        records: list[ResourceRecordSet] | None = None,
    ) -> ManagedZone:
        key = (zone.project_id, zone.name)
        self.zones[key] = zone
        self.records[key] = list(records or [])
        return zone

    def get(self, project_id: str, zone_name: str) -> ManagedZone:
        key = (project_id, zone_name)
        if key in self.get_errors:
            raise self.get_errors[key]
        if key not in self.zones:
            raise ResourceNotFoundError(f"managed zone {project_id}/{zone_name} not found")
        return self.zones[key]

    def list_records(self, project_id: str, zone_name: str) -> list[ResourceRecordSet]:
        key = (project_id, zone_name)
        with self._lock:
            self.list_calls.append(key)
        if key in self.list_errors:
            raise self.list_errors[key]
        return list(self.records.get(key, []))


class FakeResolver(NameserverResolver):
    """Resolver answering from a dictionary keyed by normalized name."""

    def __init__(self):
        self.answers: dict[str, list[str]] = {}
        self.failures: dict[str, str] = {}
        self.lookups: list[str] = []
        self._lock = threading.Lock()

    def set_answer(self, domain: str, hosts: list[str]) -> None:
        self.answers[normalize_domain_name(domain)] = list(hosts)

    def set_failure(self, domain: str, cause: str = "NXDOMAIN") -> None:
        self.failures[normalize_domain_name(domain)] = cause

    def lookup_ns(self, domain: str) -> list[str]:
        key = normalize_domain_name(domain)
        with self._lock:
            self.lookups.append(key)
        if key in self.failures:
            raise ResolutionError(domain, self.failures[key])
        if key not in self.answers:
            raise ResolutionError(domain, "NXDOMAIN")
        return list(self.answers[key])


def make_zone(
    project_id: str,
    name: str,
    dns_name: str,
    visibility: ZoneVisibility = ZoneVisibility.PUBLIC,
) -> ManagedZone:
    """Build a ManagedZone with a normalized dns name."""
    return ManagedZone(
        project_id=project_id,
        name=name,
        dns_name=normalize_domain_name(dns_name),
        visibility=visibility,
    )


def ns_record(name: str, *hosts: str) -> ResourceRecordSet:
    """Build an NS record set."""
    return ResourceRecordSet(name=name, record_type="NS", values=tuple(hosts), ttl=21600)


def resource_name(project_id: str, zone_name: str) -> str:
    """Build a managed zone asset name."""
    return f"//dns.googleapis.com/projects/{project_id}/managedZones/{zone_name}"


# Fixtures


@pytest.fixture
def organization() -> Organization:
    """Return a sample organization."""
    return Organization(
        name="organizations/123456789",
        organization_id="123456789",
        display_name="example.com",
    )


@pytest.fixture
def zone_directory() -> FakeZoneDirectory:
    """Return an empty fake zone directory."""
    return FakeZoneDirectory()


@pytest.fixture
def resolver() -> FakeResolver:
    """Return a fake resolver with no answers."""
    return FakeResolver()


@pytest.fixture
def zone_factory():
    """Return the make_zone helper."""
    return make_zone


@pytest.fixture
def ns_factory():
    """Return the ns_record helper."""
    return ns_record


@pytest.fixture
def asset_catalog_factory():
    """Return a factory for fake asset catalogs."""
    return FakeAssetCatalog


@pytest.fixture
def resource_name_factory():
    """Return the resource_name helper."""
    return resource_name


@pytest.fixture
def example_zone() -> ManagedZone:
    """Return the public zone example.com. in project dns-prod."""
    return make_zone("dns-prod", "example-com", "example.com.")


@pytest.fixture
def healthy_setup(
    zone_directory: FakeZoneDirectory, resolver: FakeResolver
) -> ZoneCatalog:
    """
    Return a catalog of two zones whose delegations are all consistent.

    example.com. delegates sub.example.com. to a second managed zone.
    """
    parent = make_zone("dns-prod", "example-com", "example.com.")
    child = make_zone("dns-team", "sub-example-com", "sub.example.com.")

    zone_directory.add_zone(
        parent,
        [
            ResourceRecordSet(name="example.com.", record_type="SOA", values=("ns1. hostmaster. 1 21600 3600 259200 300",)),
            ns_record("example.com.", "ns-cloud-a1.googledomains.com.", "ns-cloud-a2.googledomains.com."),
            ns_record("sub.example.com.", "ns-cloud-b1.googledomains.com.", "ns-cloud-b2.googledomains.com."),
            ResourceRecordSet(name="www.example.com.", record_type="A", values=("192.0.2.10",)),
        ],
    )
    zone_directory.add_zone(
        child,
        [ns_record("sub.example.com.", "ns-cloud-b1.googledomains.com.", "ns-cloud-b2.googledomains.com.")],
    )

    resolver.set_answer("example.com.", ["ns-cloud-a2.googledomains.com.", "ns-cloud-a1.googledomains.com."])
    resolver.set_answer("sub.example.com.", ["ns-cloud-b1.googledomains.com.", "ns-cloud-b2.googledomains.com."])

    return ZoneCatalog([parent, child])
