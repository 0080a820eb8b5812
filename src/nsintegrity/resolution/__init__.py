"""
Live DNS resolution for NS Integrity.

Provides the NameserverResolver interface consumed by the reconciliation
engine and its dnspython implementation.
"""

from nsintegrity.resolution.resolver import (
    DEFAULT_NAMESERVERS,
    DEFAULT_TIMEOUT,
    DNSPythonResolver,
    NameserverResolver,
    ResolutionError,
)

__all__ = [
    "DEFAULT_NAMESERVERS",
    "DEFAULT_TIMEOUT",
    "DNSPythonResolver",
    "NameserverResolver",
    "ResolutionError",
]
