"""
Reconciliation engine for NS Integrity.

Walks every zone of a ZoneCatalog, resolves each declared NS record set on
the live DNS, compares the answers with the declared values and classifies
the discrepancies into findings.

A run has three phases:

1. Ownership: every zone claims its apex domain; second and later claims
   are DUPLICATE_ZONE_OWNERSHIP findings. This happens before any I/O so
   it cannot depend on worker timing.
2. Per-zone audit: zones are audited by a bounded thread pool. Workers do
   not touch shared state; they return a per-zone outcome which the
   coordinating thread merges in catalog order once every worker is done.
3. Orphans: delegations to subdomains that no catalog zone owns are
   ORPHANED_SUBDOMAIN_REFERRAL findings. This runs only after the join.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import (
    FIRST_COMPLETED,
    Future,
    ThreadPoolExecutor,
    wait,
)
from dataclasses import dataclass, field
from typing import Iterator

from nsintegrity.cloud.base import CloudProviderError
from nsintegrity.collectors.base import ZoneDirectory
from nsintegrity.engine.cancellation import AuditCancelledError, CancellationToken
from nsintegrity.engine.comparator import ComparisonVerdict, NameserverComparator
from nsintegrity.models import (
    Finding,
    FindingCollection,
    FindingKind,
    ManagedZone,
    ZoneCatalog,
    ZoneSkip,
)
from nsintegrity.names import normalize_domain_name
from nsintegrity.resolution.resolver import NameserverResolver, ResolutionError

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 8

# Upper bound on how long the coordinator waits before re-checking the
# cancellation token.
CANCELLATION_POLL_SECONDS = 0.25


@dataclass
class ReconciliationState:
    """
    Cross-zone state of one reconciliation run.

    Only the coordinating thread mutates this state.

    Attributes:
        domain_to_owning_zone: Normalized apex domain to the first zone
            claiming it
        subdomain_referrals: Normalized delegated subdomain to the first
            zone (in catalog order) declaring an NS record for it
    """

    domain_to_owning_zone: dict[str, ManagedZone] = field(default_factory=dict)
    subdomain_referrals: dict[str, ManagedZone] = field(default_factory=dict)

    def claim(self, zone: ManagedZone) -> ManagedZone | None:
        """
        Register a zone as owner of its apex domain.

        Returns:
            The zone already owning the domain, or None if the claim is
            the first one
        """
        domain = normalize_domain_name(zone.dns_name)
        owner = self.domain_to_owning_zone.get(domain)
        if owner is None:
            self.domain_to_owning_zone[domain] = zone
            return None
        return owner

    def refer(self, subdomain: str, zone: ManagedZone) -> None:
        """Record that a zone delegates a subdomain."""
        self.subdomain_referrals.setdefault(normalize_domain_name(subdomain), zone)

    def is_owned(self, domain: str) -> bool:
        return normalize_domain_name(domain) in self.domain_to_owning_zone


@dataclass
class ZoneOutcome:
    """What auditing a single zone produced."""

    zone: ManagedZone
    findings: list[Finding] = field(default_factory=list)
    referrals: list[str] = field(default_factory=list)
    records_checked: int = 0
    skip: ZoneSkip | None = None


@dataclass
class ReconciliationResult:
    """
    Result of one reconciliation run.

    Iterating the result yields its findings in engine order.

    Attributes:
        findings: Findings in the order they were produced
        skipped: Zones whose records could not be listed
        zones_audited: Number of zones whose records were checked
        records_checked: Number of NS record sets resolved
        duration_seconds: Wall-clock duration of the run
    """

    findings: FindingCollection
    skipped: list[ZoneSkip] = field(default_factory=list)
    zones_audited: int = 0
    records_checked: int = 0
    duration_seconds: float = 0.0

    def __iter__(self) -> Iterator[Finding]:
        return iter(self.findings)

    def __len__(self) -> int:
        return len(self.findings)


class ReconciliationEngine:
    """
    Reconciles managed zones with the live DNS delegation graph.

    The engine holds no state between runs; every call to reconcile()
    starts from an empty ReconciliationState.
    """

    def __init__(
        self,
        zone_directory: ZoneDirectory,
        resolver: NameserverResolver,
        comparator: NameserverComparator | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        """
        Initialize the engine.

        Args:
            zone_directory: Lists the record sets of each zone
            resolver: Resolves NS records on the live DNS
            comparator: Compares declared and live nameservers
            concurrency: Number of zones audited in parallel
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self._zone_directory = zone_directory
        self._resolver = resolver
        self._comparator = comparator or NameserverComparator()
        self._concurrency = concurrency

    @property
    def concurrency(self) -> int:
        return self._concurrency

    def reconcile(
        self,
        catalog: ZoneCatalog,
        token: CancellationToken | None = None,
    ) -> ReconciliationResult:
        """
        Audit every zone of the catalog.

        Per-zone and per-record failures never abort the run: they end up
        as findings or skip records.

        Args:
            catalog: Zones to audit
            token: Optional cancellation token shared with the caller

        Returns:
            ReconciliationResult with all findings

        Raises:
            AuditCancelledError: If the token trips before the run is done
        """
        start_time = time.time()
        token = token or CancellationToken()
        token.raise_if_cancelled()

        state = ReconciliationState()
        findings = FindingCollection()
        skipped: list[ZoneSkip] = []
        zones = list(catalog)

        for zone in zones:
            owner = state.claim(zone)
            if owner is not None:
                findings.add(self._duplicate_finding(zone, owner))

        records_checked = 0
        for outcome in self._audit_zones(zones, token):
            findings.extend(outcome.findings)
            records_checked += outcome.records_checked
            if outcome.skip is not None:
                skipped.append(outcome.skip)
            for subdomain in outcome.referrals:
                state.refer(subdomain, outcome.zone)

        for subdomain, parent in state.subdomain_referrals.items():
            if not state.is_owned(subdomain):
                findings.add(self._orphan_finding(subdomain, parent))

        duration = time.time() - start_time
        result = ReconciliationResult(
            findings=findings,
            skipped=skipped,
            zones_audited=len(zones) - len(skipped),
            records_checked=records_checked,
            duration_seconds=duration,
        )

        logger.info(
            f"Reconciliation complete: {len(findings)} findings from "
            f"{result.zones_audited} zones ({records_checked} NS record sets), "
            f"{len(skipped)} zones skipped, {duration:.2f}s"
        )
        return result

    def _audit_zones(
        self, zones: list[ManagedZone], token: CancellationToken
    ) -> list[ZoneOutcome]:
        """
        Audit zones on the worker pool and join.

        Returns:
            One outcome per zone, in the order of zones
        """
        if not zones:
            return []

        workers = min(self._concurrency, len(zones))
        executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="nsintegrity-audit"
        )
        futures: list[Future[ZoneOutcome]] = [
            executor.submit(self._audit_zone_isolated, zone, token) for zone in zones
        ]

        completed = False
        try:
            pending = set(futures)
            while pending:
                timeout = CANCELLATION_POLL_SECONDS
                remaining = token.remaining()
                if remaining is not None:
                    timeout = min(timeout, remaining)
                done, pending = wait(pending, timeout=timeout, return_when=FIRST_COMPLETED)
                for future in done:
                    # Re-raises AuditCancelledError from a worker
                    future.result()
                if pending:
                    token.raise_if_cancelled()
            completed = True
        except AuditCancelledError:
            token.cancel()
            logger.error(f"Reconciliation aborted: {token.reason}")
            raise
        except KeyboardInterrupt:
            token.cancel("audit interrupted")
            raise
        finally:
            executor.shutdown(wait=completed, cancel_futures=not completed)

        return [future.result() for future in futures]

    def _audit_zone_isolated(
        self, zone: ManagedZone, token: CancellationToken
    ) -> ZoneOutcome:
        """Audit a zone, turning unexpected errors into a skip."""
        try:
            return self.audit_zone(zone, token)
        except AuditCancelledError:
            raise
        except Exception as e:
            reason = f"{type(e).__name__}: {e}"
            logger.error(f"Unexpected error auditing managed zone {zone.identifier}: {reason}")
            return ZoneOutcome(zone=zone, skip=self._skip(zone, reason))

    def audit_zone(
        self, zone: ManagedZone, token: CancellationToken | None = None
    ) -> ZoneOutcome:
        """
        Audit the NS record sets of a single zone.

        Args:
            zone: Zone to audit
            token: Optional cancellation token

        Returns:
            ZoneOutcome with findings and referrals of this zone

        Raises:
            AuditCancelledError: If the token trips
        """
        token = token or CancellationToken()
        token.raise_if_cancelled()
        outcome = ZoneOutcome(zone=zone)
        apex = normalize_domain_name(zone.dns_name)

        try:
            records = self._zone_directory.list_records(zone.project_id, zone.name)
        except CloudProviderError as e:
            logger.error(f"Skipping managed zone {zone.identifier}: {e}")
            outcome.skip = self._skip(zone, str(e))
            return outcome

        for record in records:
            if not record.is_nameserver():
                continue

            domain = normalize_domain_name(record.name)
            if domain != apex:
                outcome.referrals.append(domain)

            logger.info(f"Checking nameserver integrity for {domain}")
            token.raise_if_cancelled()
            outcome.records_checked += 1

            try:
                live = self._resolver.lookup_ns(domain)
            except ResolutionError as e:
                verdict = ComparisonVerdict.unresolved(e.cause)
                outcome.findings.append(
                    self._unresolved_finding(zone, domain, domain == apex, verdict, e)
                )
                continue

            verdict = self._comparator.compare(record.values, live)
            if not verdict.is_match:
                outcome.findings.append(self._mismatch_finding(zone, domain, verdict))

        return outcome

    # Finding construction

    def _skip(self, zone: ManagedZone, reason: str) -> ZoneSkip:
        return ZoneSkip(
            zone_identifier=zone.identifier,
            project_id=zone.project_id,
            reason=reason,
        )

    def _duplicate_finding(self, zone: ManagedZone, owner: ManagedZone) -> Finding:
        domain = normalize_domain_name(zone.dns_name)
        kind = FindingKind.DUPLICATE_ZONE_OWNERSHIP
        return Finding(
            severity=kind.default_severity,
            domain=domain,
            zone_identifier=zone.identifier,
            project_id=zone.project_id,
            kind=kind,
            detail=(
                f"domain {domain} is also claimed by managed zone "
                f"{owner.identifier} in project {owner.project_id}"
            ),
            related_zone=owner.identifier,
        )

    def _unresolved_finding(
        self,
        zone: ManagedZone,
        domain: str,
        is_apex: bool,
        verdict: ComparisonVerdict,
        error: ResolutionError,
    ) -> Finding:
        if is_apex:
            kind = FindingKind.UNRESOLVED_ROOT_DELEGATION
            detail = (
                f"managed zone apex {domain} has no reachable NS delegation: "
                f"{verdict.cause}"
            )
        else:
            kind = FindingKind.UNRESOLVED_SUBDOMAIN_DELEGATION
            detail = (
                f"dangling NS delegation {domain} in managed zone {zone.name}: "
                f"{verdict.cause}"
            )
        logger.debug(f"Resolution of {domain} failed: {error}")
        return Finding(
            severity=kind.default_severity,
            domain=domain,
            zone_identifier=zone.identifier,
            project_id=zone.project_id,
            kind=kind,
            detail=detail,
        )

    def _mismatch_finding(
        self,
        zone: ManagedZone,
        domain: str,
        verdict: ComparisonVerdict,
    ) -> Finding:
        missing = tuple(sorted(verdict.missing))
        extraneous = tuple(sorted(verdict.extraneous))
        kind = FindingKind.NAMESERVER_MISMATCH
        return Finding(
            severity=kind.default_severity,
            domain=domain,
            zone_identifier=zone.identifier,
            project_id=zone.project_id,
            kind=kind,
            detail=(
                f"missing nameservers: {_format_hosts(missing)}; "
                f"extraneous nameservers: {_format_hosts(extraneous)}"
            ),
            missing=missing,
            extraneous=extraneous,
        )

    def _orphan_finding(self, subdomain: str, parent: ManagedZone) -> Finding:
        kind = FindingKind.ORPHANED_SUBDOMAIN_REFERRAL
        return Finding(
            severity=kind.default_severity,
            domain=subdomain,
            zone_identifier=parent.identifier,
            project_id=parent.project_id,
            kind=kind,
            detail=(
                f"domain {subdomain} has an NS record in managed zone "
                f"{parent.name}, but there is no managed zone for it in this "
                "organization"
            ),
        )


def _format_hosts(hosts: tuple[str, ...]) -> str:
    return ", ".join(hosts) if hosts else "none"
