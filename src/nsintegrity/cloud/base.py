"""
Base classes for cloud access in NS Integrity.

This module defines the exception taxonomy shared by all cloud
collaborators and the abstract interfaces for obtaining credentials and
selecting the organization to audit.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


# Exceptions


class CloudProviderError(Exception):
    """Base exception for cloud provider errors."""

    pass


class AuthenticationError(CloudProviderError):
    """Raised when credentials cannot be obtained."""

    pass


class ConfigurationError(CloudProviderError):
    """Raised when configuration is invalid."""

    pass


class OrganizationNotFoundError(CloudProviderError):
    """Raised when the organization is unknown, ambiguous or not accessible."""

    pass


class ResourceNotFoundError(CloudProviderError):
    """Raised when a resource is not found."""

    pass


class PermissionDeniedError(CloudProviderError):
    """Raised when permission is denied."""

    pass


class TransportError(CloudProviderError):
    """Raised when a cloud API call fails in transit."""

    pass


# Data classes


@dataclass(frozen=True)
class Organization:
    """
    An organization the credentials have access to.

    Attributes:
        name: Resource name (e.g., "organizations/123456789")
        organization_id: Numeric identifier
        display_name: Human-readable name (usually the primary domain)
    """

    name: str
    organization_id: str
    display_name: str = ""

    def matches(self, handle: str) -> bool:
        """Check whether a user-supplied handle refers to this organization."""
        return handle in (self.display_name, self.organization_id, self.name)

    def __str__(self) -> str:
        return self.display_name or self.name


# Abstract base classes


class CredentialProvider(ABC):
    """Obtains credentials for the cloud APIs used by the audit."""

    @abstractmethod
    def obtain(self) -> Any:
        """
        Obtain credentials.

        Returns:
            A google-auth compatible credentials object.

        Raises:
            AuthenticationError: If no credentials can be obtained.
        """
        pass


class OrganizationResolver(ABC):
    """Selects the organization to audit from the accessible ones."""

    @abstractmethod
    def list_organizations(self) -> list[Organization]:
        """
        List the organizations the credentials can access.

        Raises:
            CloudProviderError: If the listing fails.
        """
        pass

    def resolve(self, handle: str = "") -> Organization:
        """
        Resolve a name or id to exactly one organization.

        With an empty handle the caller must have access to exactly one
        organization.

        Args:
            handle: Display name, numeric id or resource name

        Returns:
            The matching organization

        Raises:
            OrganizationNotFoundError: If no organization, or more than
                one, matches.
        """
        organizations = self.list_organizations()

        if not handle:
            if len(organizations) != 1:
                raise OrganizationNotFoundError(
                    f"found {len(organizations)} accessible organizations, "
                    "please specify an organization to check"
                )
            return organizations[0]

        matches = [org for org in organizations if org.matches(handle)]
        if not matches:
            raise OrganizationNotFoundError(
                f"you do not have access to the organization {handle}"
            )
        if len(matches) > 1:
            names = ", ".join(org.name for org in matches)
            raise OrganizationNotFoundError(
                f"organization {handle} is ambiguous, it matches {names}"
            )
        return matches[0]
