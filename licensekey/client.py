"""
License Revocation Oracle Client.

Corroborates a locally decoded license by looking up its fingerprint
out-of-band. A license is verified when an oracle publishes exactly the
license's fingerprint under its id:

    DNS:  TXT record at <license-id>.<zone>
    HTTP: GET <endpoint>/<license-id>, one fingerprint per line

Lookup failures never count as revocation; they just move on to the next
host. Verification never raises.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable, List, Optional
from urllib.parse import quote

import dns.exception
import dns.resolver
import httpx

from licensekey import config
from licensekey.license import License

logger = logging.getLogger(__name__)


class OracleAnswer(Enum):
    """Answer of a single oracle channel."""

    VERIFIED = "verified"
    UNVERIFIED = "unverified"
    UNKNOWN = "unknown"


class OracleChannel(ABC):
    """Abstract interface for fingerprint oracles."""

    @abstractmethod
    def check(self, license_id: str, fingerprint: str) -> OracleAnswer:
        """
        Look up the published fingerprint for license_id.

        Returns VERIFIED on an exact match, UNVERIFIED if an oracle answered
        without a match, UNKNOWN if no oracle could be reached.
        """
        pass


class DNSChannel(OracleChannel):
    """
    Fingerprint lookups through DNS TXT records.

    Example:
        >>> channel = DNSChannel(["licenses.example.com"])
        >>> channel.check(lic.id, lic.fingerprint())
        <OracleAnswer.VERIFIED: 'verified'>
    """

    def __init__(
        self,
        hosts: Iterable[str],
        resolver: Optional[dns.resolver.Resolver] = None,
        timeout: float = config.LOOKUP_TIMEOUT,
    ):
        """
        Args:
            hosts: DNS zones, tried in order.
            resolver: Resolver to use. Defaults to the system configuration.
            timeout: Lifetime of each TXT query in seconds.
        """
        self.hosts = [host.strip(".") for host in hosts]
        self._resolver = resolver
        self._timeout = timeout

    def _get_resolver(self) -> dns.resolver.Resolver:
        if self._resolver is None:
            self._resolver = dns.resolver.Resolver()
        return self._resolver

    def lookup(self, name: str) -> List[str]:
        """Return the TXT records at name, each record's strings joined."""
        answer = self._get_resolver().resolve(name, "TXT", lifetime=self._timeout)
        return [b"".join(rdata.strings).decode("utf-8", "replace") for rdata in answer]

    def check(self, license_id: str, fingerprint: str) -> OracleAnswer:
        result = OracleAnswer.UNKNOWN

        for host in self.hosts:
            name = f"{license_id}.{host}"
            try:
                records = self.lookup(name)
            except dns.exception.DNSException as e:
                logger.debug(f"TXT lookup failed for {name}: {e}")
                continue

            result = OracleAnswer.UNVERIFIED
            if any(record.strip() == fingerprint for record in records):
                return OracleAnswer.VERIFIED

        return result


class HTTPChannel(OracleChannel):
    """
    Fingerprint lookups through HTTP endpoints.

    Each endpoint is queried with GET <endpoint>/<license-id>. A 200 response
    lists published fingerprints, one per line.
    """

    def __init__(
        self,
        endpoints: Iterable[str],
        client: Optional[httpx.Client] = None,
        timeout: float = config.LOOKUP_TIMEOUT,
    ):
        """
        Args:
            endpoints: Endpoint base URLs, tried in order.
            client: HTTP client to use. A short-lived client is created per
                check when omitted.
            timeout: Timeout of each request in seconds.
        """
        self.endpoints = [endpoint.rstrip("/") for endpoint in endpoints]
        self._client = client
        self._timeout = timeout

    def _check_with(self, client: httpx.Client, license_id: str, fingerprint: str) -> OracleAnswer:
        result = OracleAnswer.UNKNOWN

        for endpoint in self.endpoints:
            url = f"{endpoint}/{quote(license_id, safe='')}"
            try:
                response = client.get(url, timeout=self._timeout)
            except httpx.HTTPError as e:
                logger.debug(f"Fingerprint lookup failed for {url}: {e}")
                continue

            if response.status_code != 200:
                logger.debug(f"Fingerprint lookup for {url} returned {response.status_code}")
                continue

            result = OracleAnswer.UNVERIFIED
            if any(line.strip() == fingerprint for line in response.text.splitlines()):
                return OracleAnswer.VERIFIED

        return result

    def check(self, license_id: str, fingerprint: str) -> OracleAnswer:
        if self._client is not None:
            return self._check_with(self._client, license_id, fingerprint)
        with httpx.Client(timeout=self._timeout) as client:
            return self._check_with(client, license_id, fingerprint)


class LicenseClient:
    """
    Verifies licenses against the configured oracles.

    Channels are consulted in priority order (DNS first, then HTTP) and
    the first VERIFIED answer wins. With no channel configured, verify()
    always returns False and callers must rely on signature checks alone.

    Example:
        >>> client = LicenseClient().set_dns_hosts(["licenses.example.com"])
        >>> lic = decode(key_text, public_keys=[public_key_jwk])
        >>> if not client.verify(lic):
        ...     raise PermissionError("License not confirmed")
    """

    def __init__(
        self,
        dns_hosts: Optional[Iterable[str]] = None,
        api_endpoints: Optional[Iterable[str]] = None,
        channels: Optional[List[OracleChannel]] = None,
        timeout: float = config.LOOKUP_TIMEOUT,
    ):
        """
        Args:
            dns_hosts: DNS zones for the DNS channel.
            api_endpoints: Endpoint bases for the HTTP channel.
            channels: Extra channels, consulted after DNS and HTTP.
            timeout: Per-lookup timeout for the built-in channels.
        """
        self._timeout = timeout
        self.dns_channel: Optional[DNSChannel] = None
        self.api_channel: Optional[HTTPChannel] = None
        self.extra_channels: List[OracleChannel] = list(channels or [])

        if dns_hosts:
            self.set_dns_hosts(dns_hosts)
        if api_endpoints:
            self.set_api_endpoints(api_endpoints)

    @classmethod
    def from_env(cls) -> "LicenseClient":
        """Build a client from LICENSEKEY_* environment configuration."""
        return cls(
            dns_hosts=config.DNS_HOSTS,
            api_endpoints=config.API_ENDPOINTS,
            timeout=config.LOOKUP_TIMEOUT,
        )

    def set_dns_hosts(
        self, hosts: Iterable[str], resolver: Optional[dns.resolver.Resolver] = None
    ) -> "LicenseClient":
        self.dns_channel = DNSChannel(hosts, resolver=resolver, timeout=self._timeout)
        return self

    def set_api_endpoints(
        self, endpoints: Iterable[str], client: Optional[httpx.Client] = None
    ) -> "LicenseClient":
        self.api_channel = HTTPChannel(endpoints, client=client, timeout=self._timeout)
        return self

    @property
    def channels(self) -> List[OracleChannel]:
        """Configured channels in priority order."""
        ordered: List[OracleChannel] = []
        if self.dns_channel is not None:
            ordered.append(self.dns_channel)
        if self.api_channel is not None:
            ordered.append(self.api_channel)
        return ordered + self.extra_channels

    def _verify_with(self, channel: Optional[OracleChannel], lic: License) -> bool:
        if channel is None or lic.has_expired():
            return False
        try:
            return channel.check(lic.id, lic.fingerprint()) is OracleAnswer.VERIFIED
        except Exception as e:
            logger.warning(f"{type(channel).__name__} check failed for license {lic.id}: {e}")
            return False

    def dns_verify(self, lic: License) -> bool:
        """Verify through the DNS channel only."""
        return self._verify_with(self.dns_channel, lic)

    def api_verify(self, lic: License) -> bool:
        """Verify through the HTTP channel only."""
        return self._verify_with(self.api_channel, lic)

    def verify(self, lic: License) -> bool:
        """
        Check whether any configured oracle publishes the license fingerprint.

        Expired licenses are never verified. Lookup errors are logged and
        treated as "not verified by this channel".
        """
        for channel in self.channels:
            if self._verify_with(channel, lic):
                logger.debug(f"License {lic.id} verified by {type(channel).__name__}")
                return True
        return False
