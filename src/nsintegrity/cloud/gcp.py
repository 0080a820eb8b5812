"""
Google Cloud credential and organization access for NS Integrity.

Credentials come from a service account key file, Application Default
Credentials, or the active gcloud SDK configuration. Organizations are
listed through the Cloud Resource Manager API.
"""

from __future__ import annotations

import datetime
import json
import logging
import subprocess
import threading
from typing import Any

import google.auth
import google.auth.credentials
from google.api_core.exceptions import GoogleAPIError, PermissionDenied
from google.auth.exceptions import GoogleAuthError, RefreshError
from google.cloud import resourcemanager_v3
from google.oauth2 import service_account

from nsintegrity.cloud.base import (
    AuthenticationError,
    CredentialProvider,
    Organization,
    OrganizationResolver,
    PermissionDeniedError,
    TransportError,
)

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]

GCLOUD_CONFIG_HELPER = ["gcloud", "config", "config-helper", "--format=json"]


class GCPCredentialProvider(CredentialProvider):
    """
    Obtains google-auth credentials.

    Precedence: service account key file, then Application Default
    Credentials when use_default_credentials is set, then the gcloud SDK.
    """

    def __init__(
        self,
        use_default_credentials: bool = False,
        service_account_file: str = "",
        gcloud_command: list[str] | None = None,
    ) -> None:
        """
        Initialize the credential provider.

        Args:
            use_default_credentials: Use Application Default Credentials
            service_account_file: Optional path to a service account key
            gcloud_command: Override of the gcloud config-helper command
        """
        self._use_default_credentials = use_default_credentials
        self._service_account_file = service_account_file
        self._gcloud_command = gcloud_command or GCLOUD_CONFIG_HELPER

    def obtain(self) -> Any:
        """Obtain credentials or raise AuthenticationError."""
        if self._service_account_file:
            return self._from_service_account_file()
        if self._use_default_credentials:
            return self._from_application_default()
        return self._from_gcloud_config()

    def _from_service_account_file(self) -> Any:
        try:
            return service_account.Credentials.from_service_account_file(
                self._service_account_file, scopes=SCOPES
            )
        except (OSError, ValueError) as e:
            raise AuthenticationError(
                f"could not load service account key "
                f"{self._service_account_file}: {e}"
            ) from e

    def _from_application_default(self) -> Any:
        try:
            credentials, project = google.auth.default(scopes=SCOPES)
        except GoogleAuthError as e:
            raise AuthenticationError(
                f"could not obtain application default credentials: {e}"
            ) from e
        logger.debug(f"Using application default credentials (project {project})")
        return credentials

    def _from_gcloud_config(self) -> Any:
        """Use the access token of the active gcloud configuration."""
        credentials = GcloudCredentials(self._gcloud_command)
        credentials.load()
        logger.debug("Using credentials of the active gcloud configuration")
        return credentials


class GcloudCredentials(google.auth.credentials.Credentials):
    """
    Access token handed out by gcloud config-helper.

    The token carries the expiry reported by gcloud. Refreshing runs the
    helper again, which renews the token once the cached one runs out.
    """

    def __init__(self, command: list[str]) -> None:
        super().__init__()
        self._command = command
        self._lock = threading.Lock()

    def load(self) -> None:
        """Run config-helper and store its token, raising AuthenticationError."""
        with self._lock:
            self.token, self.expiry = read_gcloud_token(self._command)

    def refresh(self, request: Any) -> None:
        try:
            self.load()
        except AuthenticationError as e:
            raise RefreshError(str(e)) from e


def read_gcloud_token(command: list[str]) -> tuple[str, datetime.datetime | None]:
    """
    Run gcloud config-helper and return its access token and expiry.

    Args:
        command: The config-helper command line

    Returns:
        Tuple of (access token, naive UTC expiry or None)

    Raises:
        AuthenticationError: If gcloud is missing, fails, or prints no token
    """
    try:
        completed = subprocess.run(
            command,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as e:
        raise AuthenticationError(
            "gcloud is not installed, use --use-default-credentials instead"
        ) from e
    except subprocess.CalledProcessError as e:
        raise AuthenticationError(
            f"gcloud config-helper failed: {e.stderr.strip() or e}"
        ) from e

    try:
        helper = json.loads(completed.stdout)
        token = helper["credential"]["access_token"]
        expiry = helper["credential"].get("token_expiry", "")
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise AuthenticationError(
            f"unexpected output from gcloud config-helper: {e}"
        ) from e

    return token, _parse_token_expiry(expiry)


def _parse_token_expiry(value: str) -> datetime.datetime | None:
    # google-auth compares expiry against a naive UTC clock
    if not value:
        return None
    try:
        expiry = datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Ignoring unparseable gcloud token expiry {value!r}")
        return None
    if expiry.tzinfo is not None:
        expiry = expiry.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return expiry


class GCPOrganizationResolver(OrganizationResolver):
    """Lists organizations through the Resource Manager v3 API."""

    def __init__(self, credentials: Any | None = None) -> None:
        """
        Initialize the resolver.

        Args:
            credentials: Optional google-auth credentials object.
        """
        self._credentials = credentials
        self._client: resourcemanager_v3.OrganizationsClient | None = None

    def _get_client(self) -> resourcemanager_v3.OrganizationsClient:
        """Get or create the Organizations client."""
        if self._client is None:
            self._client = resourcemanager_v3.OrganizationsClient(
                credentials=self._credentials
            )
        return self._client

    def list_organizations(self) -> list[Organization]:
        """List organizations visible to the credentials."""
        client = self._get_client()
        organizations: list[Organization] = []

        try:
            for org in client.search_organizations():
                organizations.append(
                    Organization(
                        name=org.name,
                        organization_id=org.name.split("/")[-1],
                        display_name=org.display_name,
                    )
                )
        except PermissionDenied as e:
            raise PermissionDeniedError(f"cannot list organizations: {e}") from e
        except GoogleAPIError as e:
            raise TransportError(f"cannot list organizations: {e}") from e

        logger.debug(f"Found {len(organizations)} accessible organizations")
        return organizations
