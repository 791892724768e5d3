"""Data models for control-plane credentials."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from ipaddress import IPv4Address, IPv6Address
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .config import APISERVER_CERT_AND_KEY_BASE_NAME, CA_CERT_AND_KEY_BASE_NAME

IPAddress = IPv4Address | IPv6Address


class CredentialRole(Enum):
    """Credential kinds provisioned during bootstrap."""

    CERTIFICATE_AUTHORITY = CA_CERT_AND_KEY_BASE_NAME
    SERVER_LEAF = APISERVER_CERT_AND_KEY_BASE_NAME

    @property
    def base_name(self) -> str:
        """File base name used by the key-pair store."""
        return self.value

    @property
    def label(self) -> str:
        return "CA" if self is CredentialRole.CERTIFICATE_AUTHORITY else "API server"


class CredentialState(Enum):
    """On-disk state of a credential pair."""

    ABSENT = "absent"
    PARTIALLY_PRESENT = "partially-present"
    PRESENT_INVALID = "present-invalid"
    PRESENT_VALID = "present-valid"


class ProvisioningOutcome(Enum):
    REUSED = "reused"
    GENERATED = "generated"


def canonical_ip(ip: IPAddress) -> IPAddress:
    """Return the IPv4 form of an IPv4-mapped IPv6 address, else ``ip`` unchanged."""
    if isinstance(ip, IPv6Address) and ip.ipv4_mapped is not None:
        return ip.ipv4_mapped
    return ip


def _dedupe(items: Iterable) -> tuple:
    return tuple(dict.fromkeys(items))


def _dedupe_ips(ips: Iterable[IPAddress]) -> tuple[IPAddress, ...]:
    seen: dict[IPAddress, IPAddress] = {}
    for ip in ips:
        seen.setdefault(canonical_ip(ip), ip)
    return tuple(seen.values())


@dataclass(frozen=True)
class SANSet:
    """DNS names and IP addresses a certificate is valid for.

    Duplicates collapse and first-seen order is kept, so equal inputs always
    render the same extension.
    """

    dns_names: tuple[str, ...] = ()
    ip_addresses: tuple[IPAddress, ...] = ()

    @classmethod
    def of(cls, dns_names: Iterable[str] = (), ip_addresses: Iterable[IPAddress] = ()) -> "SANSet":
        return cls(dns_names=_dedupe(dns_names), ip_addresses=_dedupe_ips(ip_addresses))

    def is_complete(self) -> bool:
        """Return True when both DNS names and IPs are present."""
        return bool(self.dns_names) and bool(self.ip_addresses)

    def is_empty(self) -> bool:
        return not self.dns_names and not self.ip_addresses

    def to_general_names(self) -> list[x509.GeneralName]:
        names: list[x509.GeneralName] = [x509.DNSName(name) for name in self.dns_names]
        names.extend(x509.IPAddress(ip) for ip in self.ip_addresses)
        return names


@dataclass(frozen=True)
class CredentialPair:
    """Private key and the certificate binding it to an identity."""

    key: RSAPrivateKey
    cert: x509.Certificate


@dataclass
class ProvisionResult:
    """Result from provisioning one credential role."""

    role: CredentialRole
    outcome: ProvisioningOutcome
    pair: CredentialPair
    key_path: Path
    cert_path: Path


@dataclass
class BootstrapResult:
    """Result from a full control-plane PKI bootstrap run.

    Contains the CA and API server results plus the SAN set the server
    certificate was checked or issued against.
    """

    pki_dir: Path
    sans: SANSet
    ca: ProvisionResult
    server: ProvisionResult
