"""
Configuration management for NS Integrity.

Provides the audit configuration and helpers to load it from files and
the environment.
"""

from nsintegrity.config.audit_config import (
    ENV_PREFIX,
    AuditConfiguration,
    load_config_from_env,
    parse_bool,
)

__all__ = [
    "ENV_PREFIX",
    "AuditConfiguration",
    "load_config_from_env",
    "parse_bool",
]
