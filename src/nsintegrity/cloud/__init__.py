"""
Cloud access layer for NS Integrity.

Provides the exception taxonomy used by every cloud collaborator and the
Google Cloud implementations of credential acquisition and organization
selection.

Usage:
    from nsintegrity.cloud import GCPCredentialProvider, GCPOrganizationResolver

    credentials = GCPCredentialProvider(use_default_credentials=True).obtain()
    organization = GCPOrganizationResolver(credentials).resolve("example.com")
"""

from __future__ import annotations

from nsintegrity.cloud.base import (
    AuthenticationError,
    CloudProviderError,
    ConfigurationError,
    CredentialProvider,
    Organization,
    OrganizationNotFoundError,
    OrganizationResolver,
    PermissionDeniedError,
    ResourceNotFoundError,
    TransportError,
)
from nsintegrity.cloud.gcp import (
    GCPCredentialProvider,
    GCPOrganizationResolver,
    GcloudCredentials,
)

__all__ = [
    "AuthenticationError",
    "CloudProviderError",
    "ConfigurationError",
    "CredentialProvider",
    "GCPCredentialProvider",
    "GCPOrganizationResolver",
    "GcloudCredentials",
    "Organization",
    "OrganizationNotFoundError",
    "OrganizationResolver",
    "PermissionDeniedError",
    "ResourceNotFoundError",
    "TransportError",
]
