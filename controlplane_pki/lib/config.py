"""PKI and cluster configuration dataclasses."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cryptography import x509
from cryptography.x509 import oid

CA_CERT_AND_KEY_BASE_NAME = "ca"
APISERVER_CERT_AND_KEY_BASE_NAME = "apiserver"
APISERVER_CERT_COMMON_NAME = "kube-apiserver"

# Offset of the API server's virtual IP inside the service subnet
API_SERVER_VIP_INDEX = 1

DEFAULT_SERVICE_SUBNET = "10.96.0.0/12"
DEFAULT_DNS_DOMAIN = "cluster.local"


@dataclass
class PKIConfig:
    """Certificate generation settings."""

    country: str = "GB"
    state: str = "London"
    locality: str = "London"
    organization: str = "Kubernetes"
    organizational_unit: str = "Control Plane"
    ca_common_name: str = "kubernetes"
    ca_validity_years: int = 10
    server_validity_days: int = 365
    key_size: int = 2048


@dataclass
class ClusterConfig:
    """Cluster facts the API server certificate must cover."""

    external_dns_names: list[str] = field(default_factory=list)
    advertise_addresses: list[str] = field(default_factory=list)
    service_subnet: str = DEFAULT_SERVICE_SUBNET
    dns_domain: str = DEFAULT_DNS_DOMAIN

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClusterConfig":
        """Build config from a parsed JSON document.

        Unknown keys are rejected so typos surface instead of being ignored.

        Raises:
            ValueError: If an unknown key is present, a list field is not a list
                of strings, or a scalar field is not a string
        """
        known = {"external_dns_names", "advertise_addresses", "service_subnet", "dns_domain"}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"unknown cluster config keys: {', '.join(sorted(unknown))}")

        for key in ("external_dns_names", "advertise_addresses"):
            if key not in data:
                continue
            if not isinstance(data[key], list):
                raise ValueError(f"{key} must be a list")
            for item in data[key]:
                if not isinstance(item, str):
                    raise ValueError(f"{key} entries must be strings, got {item!r}")

        for key in ("service_subnet", "dns_domain"):
            if key in data and not isinstance(data[key], str):
                raise ValueError(f"{key} must be a string, got {data[key]!r}")

        return cls(
            external_dns_names=list(data.get("external_dns_names", [])),
            advertise_addresses=list(data.get("advertise_addresses", [])),
            service_subnet=data.get("service_subnet", DEFAULT_SERVICE_SUBNET),
            dns_domain=data.get("dns_domain", DEFAULT_DNS_DOMAIN),
        )


def load_cluster_config(path: Path) -> ClusterConfig:
    """Load ClusterConfig from a JSON file."""
    data = json.loads(path.read_text())
    if not isinstance(data, dict):
        raise ValueError(f"cluster config must be a JSON object: {path}")
    return ClusterConfig.from_dict(data)


@dataclass
class DistinguishedName:
    """X.509 Subject Distinguished Name."""

    country: str
    state: str
    locality: str
    organization: str
    organizational_unit: str
    common_name: str

    def to_x509_name(self) -> x509.Name:
        """Convert to cryptography x509.Name for certificate generation."""
        return x509.Name(
            [
                x509.NameAttribute(oid.NameOID.COUNTRY_NAME, self.country),
                x509.NameAttribute(oid.NameOID.STATE_OR_PROVINCE_NAME, self.state),
                x509.NameAttribute(oid.NameOID.LOCALITY_NAME, self.locality),
                x509.NameAttribute(oid.NameOID.ORGANIZATION_NAME, self.organization),
                x509.NameAttribute(oid.NameOID.ORGANIZATIONAL_UNIT_NAME, self.organizational_unit),
                x509.NameAttribute(oid.NameOID.COMMON_NAME, self.common_name),
            ]
        )
