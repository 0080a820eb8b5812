"""
End-to-end tests for the nameserver integrity audit.

Tests cover:
- Catalog building, reconciliation and reporting over one organization
- Findings of every kind in a single run
- Stable output across runs and worker counts
"""

from __future__ import annotations

import io
import json

import pytest

from nsintegrity.cloud.base import TransportError
from nsintegrity.engine import ReconciliationEngine, ZoneCatalogBuilder
from nsintegrity.models import FindingKind, ZoneVisibility
from nsintegrity.reporting import FindingReporter, summarize


@pytest.fixture
def organization_zones(
    zone_directory, resolver, zone_factory, ns_factory, asset_catalog_factory, resource_name_factory
):
    """
    Set up an organization with one example of every finding kind.

    - example.com. (prod): healthy apex, delegates team.example.com. to its
      own zone and legacy.example.com. to nothing
    - team.example.com. (team): live delegation differs
    - example.com. (sandbox): second zone for the same domain
    - parked.example. (prod): apex not delegated at all
    - broken.example. (prod): record listing fails
    - corp.internal. (prod): private, excluded
    """
    zone_directory.add_zone(
        zone_factory("prod", "example-com", "example.com."),
        [
            ns_factory("example.com.", "ns-cloud-a1.googledomains.com.", "ns-cloud-a2.googledomains.com."),
            ns_factory("team.example.com.", "ns-cloud-b1.googledomains.com.", "ns-cloud-b2.googledomains.com."),
            ns_factory("legacy.example.com.", "ns1.retired-provider.net."),
        ],
    )
    zone_directory.add_zone(
        zone_factory("team", "team-example-com", "team.example.com."),
        [ns_factory("team.example.com.", "ns-cloud-b1.googledomains.com.", "ns-cloud-b2.googledomains.com.")],
    )
    zone_directory.add_zone(
        zone_factory("sandbox", "example-com-copy", "example.com."),
        [ns_factory("example.com.", "ns-cloud-c1.googledomains.com.")],
    )
    zone_directory.add_zone(
        zone_factory("prod", "parked", "parked.example."),
        [ns_factory("parked.example.", "ns-cloud-d1.googledomains.com.")],
    )
    zone_directory.add_zone(zone_factory("prod", "broken", "broken.example."))
    zone_directory.list_errors[("prod", "broken")] = TransportError("HTTP 503")
    zone_directory.add_zone(
        zone_factory("prod", "corp", "corp.internal.", visibility=ZoneVisibility.PRIVATE)
    )

    resolver.set_answer(
        "example.com", ["NS-CLOUD-A2.googledomains.com", "ns-cloud-a1.googledomains.com"]
    )
    resolver.set_answer(
        "team.example.com.", ["ns-cloud-b1.googledomains.com.", "ns-cloud-x9.googledomains.com."]
    )
    resolver.set_failure("legacy.example.com.", "SERVFAIL")
    resolver.set_failure("parked.example.", "NXDOMAIN")

    assets = [
        resource_name_factory("prod", "example-com"),
        resource_name_factory("team", "team-example-com"),
        resource_name_factory("sandbox", "example-com-copy"),
        resource_name_factory("prod", "parked"),
        resource_name_factory("prod", "broken"),
        resource_name_factory("prod", "corp"),
        "//dns.googleapis.com/projects/prod/responsePolicies/rp",
    ]
    return asset_catalog_factory(assets)


class TestEndToEnd:
    """End-to-end audit over in-memory collaborators."""

    def test_full_audit(self, organization, organization_zones, zone_directory, resolver):
        catalog = ZoneCatalogBuilder(organization_zones, zone_directory).build(organization)

        assert len(catalog) == 5
        assert catalog.excluded_private == 1
        assert len(catalog.errors) == 1

        result = ReconciliationEngine(zone_directory, resolver, concurrency=4).reconcile(catalog)

        assert [(f.kind, f.domain, f.zone_identifier) for f in result] == [
            (FindingKind.DUPLICATE_ZONE_OWNERSHIP, "example.com.", "sandbox/example-com-copy"),
            (FindingKind.NAMESERVER_MISMATCH, "team.example.com.", "prod/example-com"),
            (FindingKind.UNRESOLVED_SUBDOMAIN_DELEGATION, "legacy.example.com.", "prod/example-com"),
            (FindingKind.NAMESERVER_MISMATCH, "team.example.com.", "team/team-example-com"),
            (FindingKind.NAMESERVER_MISMATCH, "example.com.", "sandbox/example-com-copy"),
            (FindingKind.UNRESOLVED_ROOT_DELEGATION, "parked.example.", "prod/parked"),
            (FindingKind.ORPHANED_SUBDOMAIN_REFERRAL, "legacy.example.com.", "prod/example-com"),
        ]
        assert [skip.zone_identifier for skip in result.skipped] == ["prod/broken"]
        assert result.zones_audited == 4

        team_mismatch = result.findings[3]
        assert team_mismatch.missing == ("ns-cloud-b2.googledomains.com.",)
        assert team_mismatch.extraneous == ("ns-cloud-x9.googledomains.com.",)

    def test_report_output(self, organization, organization_zones, zone_directory, resolver):
        catalog = ZoneCatalogBuilder(organization_zones, zone_directory).build(organization)
        result = ReconciliationEngine(zone_directory, resolver).reconcile(catalog)

        stream = io.StringIO()
        FindingReporter(output_format="json", stream=stream).report(result)
        data = json.loads(stream.getvalue())

        assert len(data) == 7
        assert all(item["severity"] == "error" for item in data)
        assert summarize(result) == (
            "7 findings: 1 duplicate_zone_ownership, 1 unresolved_root_delegation, "
            "1 unresolved_subdomain_delegation, 3 nameserver_mismatch, "
            "1 orphaned_subdomain_referral"
        )

    def test_stable_across_runs_and_worker_counts(
        self, organization, organization_zones, zone_directory, resolver
    ):
        catalog = ZoneCatalogBuilder(organization_zones, zone_directory).build(organization)

        outputs = [
            ReconciliationEngine(zone_directory, resolver, concurrency=n).reconcile(catalog).findings.to_json()
            for n in (1, 2, 8, 1)
        ]

        assert len(set(outputs)) == 1
