"""
Audit configuration for NS Integrity.

Provides configuration management for audit parameters: organization
selection, credentials, zone inclusion, concurrency, resolver settings and
output format. Settings come from defaults, a JSON or YAML file, the
environment and command line flags, in increasing order of precedence.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any

import yaml

from nsintegrity.cloud.base import ConfigurationError
from nsintegrity.engine.reconciler import DEFAULT_CONCURRENCY
from nsintegrity.reporting.reporter import OUTPUT_FORMATS
from nsintegrity.resolution.resolver import DEFAULT_NAMESERVERS, DEFAULT_TIMEOUT

ENV_PREFIX = "NSINTEGRITY_"

_TRUE_VALUES = ("true", "yes", "1", "on")
_FALSE_VALUES = ("false", "no", "0", "off")


def parse_bool(value: str | bool) -> bool:
    """
    Parse a boolean setting.

    Args:
        value: true/false, yes/no, 1/0 or on/off (case-insensitive)

    Returns:
        Parsed boolean

    Raises:
        ValueError: If the value is not a recognized boolean
    """
    if isinstance(value, bool):
        return value
    value_lower = value.strip().lower()
    if value_lower in _TRUE_VALUES:
        return True
    if value_lower in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value}")


@dataclass
class AuditConfiguration:
    """
    Complete audit configuration.

    Attributes:
        organization: Organization display name, id or resource name
        use_default_credentials: Use Application Default Credentials
        service_account_file: Path to a service account key file
        include_private_zones: Audit private zones as well
        concurrency: Number of zones audited in parallel
        resolver_nameservers: Upstream resolvers for live NS lookups
        resolver_timeout: Seconds allowed per NS lookup
        deadline_seconds: Seconds allowed for the whole run (None: no limit)
        output_format: Report format (text, json, table)
    """

    organization: str = ""
    use_default_credentials: bool = False
    service_account_file: str = ""
    include_private_zones: bool = False
    concurrency: int = DEFAULT_CONCURRENCY
    resolver_nameservers: list[str] = field(
        default_factory=lambda: list(DEFAULT_NAMESERVERS)
    )
    resolver_timeout: float = DEFAULT_TIMEOUT
    deadline_seconds: float | None = None
    output_format: str = "text"

    def validate(self) -> None:
        """
        Check the configuration for invalid values.

        Raises:
            ConfigurationError: If a value is out of range
        """
        if self.concurrency < 1:
            raise ConfigurationError(
                f"concurrency must be at least 1, got {self.concurrency}"
            )
        if self.resolver_timeout <= 0:
            raise ConfigurationError(
                f"resolver timeout must be positive, got {self.resolver_timeout}"
            )
        if self.deadline_seconds is not None and self.deadline_seconds <= 0:
            raise ConfigurationError(
                f"deadline must be positive, got {self.deadline_seconds}"
            )
        if not self.resolver_nameservers:
            raise ConfigurationError("at least one resolver nameserver is required")
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigurationError(
                f"unknown output format '{self.output_format}', "
                f"expected one of {', '.join(OUTPUT_FORMATS)}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditConfiguration:
        """Create from dictionary."""
        deadline = data.get("deadline_seconds")
        return cls(
            organization=data.get("organization", ""),
            use_default_credentials=parse_bool(
                data.get("use_default_credentials", False)
            ),
            service_account_file=data.get("service_account_file", ""),
            include_private_zones=parse_bool(data.get("include_private_zones", False)),
            concurrency=int(data.get("concurrency", DEFAULT_CONCURRENCY)),
            resolver_nameservers=list(
                data.get("resolver_nameservers", DEFAULT_NAMESERVERS)
            ),
            resolver_timeout=float(data.get("resolver_timeout", DEFAULT_TIMEOUT)),
            deadline_seconds=float(deadline) if deadline is not None else None,
            output_format=data.get("output_format", "text"),
        )

    @classmethod
    def from_file(cls, path: str) -> AuditConfiguration:
        """
        Load configuration from a JSON or YAML file.

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        path = os.path.expanduser(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.endswith(".json"):
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"cannot load configuration {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"configuration {path} must be a mapping")
        try:
            return cls.from_dict(data)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"invalid configuration {path}: {e}") from e


def load_config_from_env(base: AuditConfiguration | None = None) -> AuditConfiguration:
    """
    Load configuration from environment variables.

    Environment variables:
        NSINTEGRITY_CONFIG_FILE: Path to a configuration file loaded first
        NSINTEGRITY_ORGANIZATION: Organization to audit
        NSINTEGRITY_USE_DEFAULT_CREDENTIALS: Use Application Default Credentials
        NSINTEGRITY_SERVICE_ACCOUNT_FILE: Service account key file
        NSINTEGRITY_INCLUDE_PRIVATE_ZONES: Audit private zones as well
        NSINTEGRITY_CONCURRENCY: Number of zones audited in parallel
        NSINTEGRITY_RESOLVER_NAMESERVERS: Comma-separated upstream resolvers
        NSINTEGRITY_RESOLVER_TIMEOUT: Seconds allowed per NS lookup
        NSINTEGRITY_DEADLINE: Seconds allowed for the whole run
        NSINTEGRITY_OUTPUT: Report format

    Args:
        base: Configuration to apply the environment to (default: the
            configuration file, or defaults)

    Returns:
        AuditConfiguration instance

    Raises:
        ConfigurationError: If a variable has an invalid value
    """
    if base is not None:
        config = base
    else:
        config_file = os.getenv(f"{ENV_PREFIX}CONFIG_FILE")
        if config_file:
            config = AuditConfiguration.from_file(config_file)
        else:
            config = AuditConfiguration()

    def env(name: str) -> str | None:
        return os.getenv(f"{ENV_PREFIX}{name}")

    try:
        if env("ORGANIZATION") is not None:
            config.organization = env("ORGANIZATION") or ""
        if env("USE_DEFAULT_CREDENTIALS"):
            config.use_default_credentials = parse_bool(env("USE_DEFAULT_CREDENTIALS"))
        if env("SERVICE_ACCOUNT_FILE"):
            config.service_account_file = env("SERVICE_ACCOUNT_FILE") or ""
        if env("INCLUDE_PRIVATE_ZONES"):
            config.include_private_zones = parse_bool(env("INCLUDE_PRIVATE_ZONES"))
        if env("CONCURRENCY"):
            config.concurrency = int(env("CONCURRENCY"))
        if env("RESOLVER_NAMESERVERS"):
            config.resolver_nameservers = [
                ns.strip() for ns in env("RESOLVER_NAMESERVERS").split(",") if ns.strip()
            ]
        if env("RESOLVER_TIMEOUT"):
            config.resolver_timeout = float(env("RESOLVER_TIMEOUT"))
        if env("DEADLINE"):
            config.deadline_seconds = float(env("DEADLINE"))
        if env("OUTPUT"):
            config.output_format = env("OUTPUT")
    except ValueError as e:
        raise ConfigurationError(f"invalid environment configuration: {e}") from e

    return config
