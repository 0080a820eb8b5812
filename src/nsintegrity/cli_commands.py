"""
CLI command handlers for NS Integrity.

Implements the audit command with error handling and output formatting.
"""

from __future__ import annotations

import argparse
import logging
import sys

from nsintegrity.cloud import (
    CloudProviderError,
    ConfigurationError,
    GCPCredentialProvider,
    GCPOrganizationResolver,
)
from nsintegrity.collectors import get_default_collectors
from nsintegrity.config import AuditConfiguration, load_config_from_env
from nsintegrity.engine import (
    AuditCancelledError,
    CancellationToken,
    ReconciliationEngine,
    ZoneCatalogBuilder,
)
from nsintegrity.reporting import FindingReporter, summarize
from nsintegrity.resolution import DNSPythonResolver

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_configuration(args: argparse.Namespace) -> AuditConfiguration:
    """
    Build the effective configuration for a run.

    Precedence: defaults < --config file < environment < flags.

    Raises:
        ConfigurationError: If a setting is invalid
    """
    config_file = getattr(args, "config", None)
    base = AuditConfiguration.from_file(config_file) if config_file else None
    config = load_config_from_env(base)

    if args.organization is not None:
        config.organization = args.organization
    if args.use_default_credentials is not None:
        config.use_default_credentials = args.use_default_credentials
    if args.service_account_file is not None:
        config.service_account_file = args.service_account_file
    if args.include_private_zones is not None:
        config.include_private_zones = args.include_private_zones
    if args.concurrency is not None:
        config.concurrency = args.concurrency
    if args.resolver is not None:
        config.resolver_nameservers = [
            ns.strip() for ns in args.resolver.split(",") if ns.strip()
        ]
    if args.resolver_timeout is not None:
        config.resolver_timeout = args.resolver_timeout
    if args.deadline is not None:
        config.deadline_seconds = args.deadline
    if args.output is not None:
        config.output_format = args.output

    config.validate()
    return config


def cmd_audit(args: argparse.Namespace) -> int:
    """
    Execute the nameserver integrity audit.

    Steps:
        1. Build configuration
        2. Obtain credentials
        3. Resolve the organization
        4. Build the zone catalog
        5. Reconcile zones with the live DNS
        6. Report findings

    Returns:
        Exit code (0 when the pass completed, whatever the findings;
        1 on a run-level failure)
    """
    try:
        config = build_configuration(args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    token = CancellationToken(deadline_seconds=config.deadline_seconds)

    try:
        credentials = GCPCredentialProvider(
            use_default_credentials=config.use_default_credentials,
            service_account_file=config.service_account_file,
        ).obtain()

        organization = GCPOrganizationResolver(credentials).resolve(config.organization)
        logger.info(f"Checking DNS nameserver integrity for organization {organization}")

        asset_catalog, zone_directory = get_default_collectors(credentials)
        catalog = ZoneCatalogBuilder(
            asset_catalog,
            zone_directory,
            include_private_zones=config.include_private_zones,
        ).build(organization)
        token.raise_if_cancelled()

        resolver = DNSPythonResolver(
            nameservers=config.resolver_nameservers,
            timeout=config.resolver_timeout,
        )
        engine = ReconciliationEngine(
            zone_directory,
            resolver,
            concurrency=config.concurrency,
        )
        result = engine.reconcile(catalog, token)

    except (CloudProviderError, AuditCancelledError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        token.cancel("audit interrupted")
        print("Error: audit interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED

    FindingReporter(config.output_format).report(result.findings)

    for skip in result.skipped:
        logger.warning(f"Managed zone {skip.zone_identifier} was not audited: {skip.reason}")
    logger.info(
        f"Audited {result.zones_audited} of {len(catalog)} managed zones: "
        f"{summarize(result.findings)}"
    )

    return EXIT_OK
