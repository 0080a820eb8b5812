"""
Zone data model for NS Integrity.

This module defines ManagedZone, representing one Cloud DNS managed zone,
ResourceRecordSet for the records declared inside a zone, AssetRef for
catalog entries, and ZoneCatalog for the set of zones audited in one run.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

from nsintegrity.names import normalize_domain_name

RECORD_TYPE_NS = "NS"


class ZoneVisibility(Enum):
    """Visibility of a managed zone."""

    PUBLIC = "public"
    PRIVATE = "private"

    @classmethod
    def from_string(cls, value: str) -> ZoneVisibility:
        """
        Create ZoneVisibility from string value.

        Args:
            value: String representation (case-insensitive)

        Returns:
            Matching ZoneVisibility enum value

        Raises:
            ValueError: If value is not a valid visibility
        """
        value_lower = value.lower()
        for visibility in cls:
            if visibility.value == value_lower:
                return visibility
        raise ValueError(f"Invalid zone visibility: {value}")


@dataclass(frozen=True)
class ManagedZone:
    """
    Represents an authoritative DNS zone owned by a cloud project.

    Zones are immutable snapshots of the zone metadata taken while the
    catalog is built. They are keyed by identifier, which combines the
    hosting project and the zone's resource name.

    Attributes:
        project_id: Project hosting the zone
        name: Resource name of the zone inside its project
        dns_name: Fully-qualified apex domain of the zone
        visibility: Public or private visibility
        description: Free-form description from the zone configuration
    """

    project_id: str
    name: str
    dns_name: str
    visibility: ZoneVisibility = ZoneVisibility.PUBLIC
    description: str = ""

    @property
    def identifier(self) -> str:
        """Stable key of this zone within an organization."""
        return zone_identifier(self.project_id, self.name)

    def is_public(self) -> bool:
        """
        Check if this zone is publicly resolvable.

        Returns:
            True if visibility is PUBLIC
        """
        return self.visibility == ZoneVisibility.PUBLIC

    @classmethod
    def from_api(cls, project_id: str, data: dict[str, Any]) -> ManagedZone:
        """
        Create a ManagedZone from a Cloud DNS managedZones resource.

        A zone carrying a privateVisibilityConfig is private even when the
        visibility field is missing from the response.

        Args:
            project_id: Project the zone was fetched from
            data: managedZones.get response body

        Returns:
            New ManagedZone instance
        """
        visibility_value = data.get("visibility") or ""
        if visibility_value:
            visibility = ZoneVisibility.from_string(visibility_value)
        else:
            visibility = ZoneVisibility.PUBLIC
        if data.get("privateVisibilityConfig"):
            visibility = ZoneVisibility.PRIVATE

        return cls(
            project_id=project_id,
            name=data.get("name", ""),
            dns_name=normalize_domain_name(data.get("dnsName", "")),
            visibility=visibility,
            description=data.get("description", ""),
        )


def zone_identifier(project_id: str, zone_name: str) -> str:
    """Build the catalog key of a zone."""
    return f"{project_id}/{zone_name}"


@dataclass(frozen=True)
class ResourceRecordSet:
    """
    A DNS label's record data as declared by the authoritative zone.

    Attributes:
        name: Domain label the records belong to
        record_type: DNS record type (e.g., "NS", "A")
        values: Record data in declaration order
        ttl: Time to live in seconds, if known
    """

    name: str
    record_type: str
    values: tuple[str, ...] = ()
    ttl: int | None = None

    def is_nameserver(self) -> bool:
        """Check if this is an NS record set."""
        return self.record_type.upper() == RECORD_TYPE_NS

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ResourceRecordSet:
        """Create from a Cloud DNS rrsets entry."""
        return cls(
            name=data.get("name", ""),
            record_type=data.get("type", ""),
            values=tuple(data.get("rrdatas", [])),
            ttl=data.get("ttl"),
        )


@dataclass(frozen=True)
class AssetRef:
    """Reference to a managed zone as listed by the asset catalog."""

    name: str
    asset_type: str = "dns.googleapis.com/ManagedZone"


@dataclass(frozen=True)
class CatalogError:
    """A catalog entry that could not be turned into a managed zone."""

    asset_name: str
    reason: str


class ZoneCatalog:
    """
    The managed zones taking part in one audit run.

    Zones are kept in insertion order, which is the order the asset
    catalog enumerated them in. Entries that failed to load are kept as
    CatalogError records rather than dropped silently.

    Attributes:
        zones: Mapping of zone identifier to ManagedZone
        errors: Per-entry failures recorded while building
        excluded_private: Number of private zones left out
    """

    def __init__(self, zones: list[ManagedZone] | None = None) -> None:
        """
        Initialize catalog with optional list of zones.

        Args:
            zones: Initial zones (defaults to empty)
        """
        self._zones: dict[str, ManagedZone] = {}
        self.errors: list[CatalogError] = []
        self.excluded_private = 0
        for zone in zones or []:
            self.add(zone)

    @property
    def zones(self) -> dict[str, ManagedZone]:
        """Get the identifier to zone mapping."""
        return self._zones

    def __len__(self) -> int:
        return len(self._zones)

    def __iter__(self) -> Iterator[ManagedZone]:
        return iter(self._zones.values())

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._zones

    def __getitem__(self, identifier: str) -> ManagedZone:
        return self._zones[identifier]

    def get(self, identifier: str) -> ManagedZone | None:
        """Get a zone by identifier."""
        return self._zones.get(identifier)

    def add(self, zone: ManagedZone) -> None:
        """
        Add a zone to the catalog.

        Args:
            zone: Zone to add; an existing entry with the same
                identifier is replaced
        """
        self._zones[zone.identifier] = zone

    def record_error(self, asset_name: str, reason: str) -> None:
        """Record a catalog entry that was skipped."""
        self.errors.append(CatalogError(asset_name=asset_name, reason=reason))

