"""
Live nameserver resolution for NS Integrity.

The audit never implements DNS itself; it consumes a NameserverResolver.
DNSPythonResolver is the default implementation, querying public upstream
resolvers with dnspython.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import dns.exception
import dns.resolver

logger = logging.getLogger(__name__)

DEFAULT_NAMESERVERS = ["8.8.8.8"]
DEFAULT_TIMEOUT = 10.0

# Short causes reported in UNRESOLVED findings
CAUSE_NXDOMAIN = "NXDOMAIN"
CAUSE_NOANSWER = "NOANSWER"
CAUSE_SERVFAIL = "SERVFAIL"
CAUSE_YXDOMAIN = "YXDOMAIN"
CAUSE_TIMEOUT = "TIMEOUT"
CAUSE_ERROR = "ERROR"


class ResolutionError(Exception):
    """
    Raised when the live DNS cannot produce an NS answer for a name.

    Attributes:
        domain: Name that was looked up
        cause: Short cause (NXDOMAIN, NOANSWER, SERVFAIL, YXDOMAIN, TIMEOUT,
            or ERROR for any other dnspython failure)
    """

    def __init__(self, domain: str, cause: str, message: str = "") -> None:
        self.domain = domain
        self.cause = cause
        super().__init__(message or f"{cause} looking up NS records of {domain}")


class NameserverResolver(ABC):
    """Resolves the live NS record set of a domain name."""

    @abstractmethod
    def lookup_ns(self, domain: str) -> list[str]:
        """
        Look up the nameservers currently delegated for a domain.

        Args:
            domain: Fully-qualified domain name

        Returns:
            Nameserver host names, possibly empty

        Raises:
            ResolutionError: If the lookup fails
        """
        pass


class DNSPythonResolver(NameserverResolver):
    """
    NameserverResolver backed by dnspython.

    Queries the configured upstream resolvers only; the local resolver
    configuration of the host is ignored so results do not depend on
    split-horizon setups.
    """

    def __init__(
        self,
        nameservers: list[str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            nameservers: Upstream resolver addresses (default: 8.8.8.8)
            timeout: Total time allowed per lookup in seconds
        """
        self._resolver = dns.resolver.Resolver(configure=False)
        self._resolver.nameservers = list(nameservers or DEFAULT_NAMESERVERS)
        self._resolver.timeout = timeout
        self._resolver.lifetime = timeout

    @property
    def nameservers(self) -> list[str]:
        """Upstream resolver addresses."""
        return list(self._resolver.nameservers)

    def lookup_ns(self, domain: str) -> list[str]:
        """Look up NS records, mapping dnspython failures to ResolutionError."""
        try:
            answer = self._resolver.resolve(domain, "NS")
        except dns.resolver.NXDOMAIN as e:
            raise ResolutionError(domain, CAUSE_NXDOMAIN, str(e)) from e
        except dns.resolver.NoAnswer as e:
            raise ResolutionError(domain, CAUSE_NOANSWER, str(e)) from e
        except dns.resolver.NoNameservers as e:
            raise ResolutionError(domain, CAUSE_SERVFAIL, str(e)) from e
        except dns.resolver.YXDOMAIN as e:
            raise ResolutionError(domain, CAUSE_YXDOMAIN, str(e)) from e
        except dns.exception.Timeout as e:
            raise ResolutionError(domain, CAUSE_TIMEOUT, str(e)) from e
        except dns.exception.DNSException as e:
            raise ResolutionError(domain, CAUSE_ERROR, str(e)) from e

        hosts = [rdata.target.to_text() for rdata in answer]
        logger.debug(f"Resolved NS {domain}: {', '.join(hosts) or '<empty>'}")
        return hosts
