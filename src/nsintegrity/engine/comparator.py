"""
Nameserver set comparison for NS Integrity.

Compares the NS values declared by a zone with the nameservers the live DNS
returns. Comparison is set equality over normalized names (lower case,
single trailing dot); reported differences keep the spelling of the input
they came from.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from nsintegrity.names import normalize_names


class VerdictStatus(Enum):
    """Outcome of comparing a declared NS set with a live answer."""

    MATCH = "match"
    MISMATCH = "mismatch"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class ComparisonVerdict:
    """
    Result of comparing one NS record set against one live answer.

    Attributes:
        status: MATCH, MISMATCH or UNRESOLVED
        extraneous: Hosts served live that the zone does not declare
        missing: Hosts the zone declares that are not served live
        cause: Why the live answer is missing (UNRESOLVED only)
    """

    status: VerdictStatus
    extraneous: frozenset[str] = frozenset()
    missing: frozenset[str] = frozenset()
    cause: str = ""

    @property
    def is_match(self) -> bool:
        return self.status == VerdictStatus.MATCH

    @classmethod
    def match(cls) -> ComparisonVerdict:
        return cls(status=VerdictStatus.MATCH)

    @classmethod
    def mismatch(
        cls, extraneous: Iterable[str], missing: Iterable[str]
    ) -> ComparisonVerdict:
        return cls(
            status=VerdictStatus.MISMATCH,
            extraneous=frozenset(extraneous),
            missing=frozenset(missing),
        )

    @classmethod
    def unresolved(cls, cause: str) -> ComparisonVerdict:
        return cls(status=VerdictStatus.UNRESOLVED, cause=cause)


def compare_nameservers(
    declared: Iterable[str], live: Iterable[str]
) -> ComparisonVerdict:
    """
    Compare declared nameservers with a live answer.

    The result does not depend on the order of either input, and
    duplicate entries within an input collapse.

    Args:
        declared: NS values declared by the zone
        live: Nameserver hosts returned by the live DNS

    Returns:
        MATCH when both are equal as sets, otherwise MISMATCH with
        extraneous = live - declared and missing = declared - live
    """
    declared_names = normalize_names(declared)
    live_names = normalize_names(live)

    if declared_names.keys() == live_names.keys():
        return ComparisonVerdict.match()

    extraneous = [live_names[k] for k in live_names.keys() - declared_names.keys()]
    missing = [declared_names[k] for k in declared_names.keys() - live_names.keys()]
    return ComparisonVerdict.mismatch(extraneous=extraneous, missing=missing)


class NameserverComparator:
    """Injectable wrapper around compare_nameservers."""

    def compare(
        self, declared: Iterable[str], live: Iterable[str]
    ) -> ComparisonVerdict:
        """Compare declared nameservers with a live answer."""
        return compare_nameservers(declared, live)
