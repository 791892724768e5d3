"""Test fixtures for controlplane_pki tests."""

from pathlib import Path

import pytest

from controlplane_pki.lib.ca_utils import (
    SERVER_AUTH_USAGES,
    new_certificate_authority,
    new_signed_leaf,
)
from controlplane_pki.lib.config import ClusterConfig, PKIConfig
from controlplane_pki.lib.host_info import StaticHostInfo
from controlplane_pki.lib.key_store import KeyPairStore
from controlplane_pki.lib.models import CredentialPair, SANSet
from controlplane_pki.lib.provisioner import CredentialProvisioner
from controlplane_pki.lib.san_assembler import assemble_sans

TEST_HOSTNAME = "cp-node-1"


@pytest.fixture
def pki_dir(tmp_path: Path) -> Path:
    """Return an empty PKI directory."""
    return tmp_path / "pki"


@pytest.fixture
def pki_config() -> PKIConfig:
    """Return test PKI configuration with short validity periods."""
    return PKIConfig(
        organization="Test Org",
        organizational_unit="Test Unit",
        ca_validity_years=1,
        server_validity_days=30,
        key_size=2048,
    )


@pytest.fixture
def cluster_config() -> ClusterConfig:
    """Return the reference cluster config used across tests."""
    return ClusterConfig(
        external_dns_names=["example.com"],
        advertise_addresses=["10.0.0.5"],
        service_subnet="10.96.0.0/12",
        dns_domain="cluster.local",
    )


@pytest.fixture
def host_info() -> StaticHostInfo:
    """Return a HostInfo with a fixed hostname."""
    return StaticHostInfo(TEST_HOSTNAME)


@pytest.fixture
def required_sans(cluster_config: ClusterConfig, host_info: StaticHostInfo) -> SANSet:
    """Return the SAN set assembled from the reference cluster config."""
    return assemble_sans(cluster_config, host_info)


@pytest.fixture
def store(pki_dir: Path) -> KeyPairStore:
    return KeyPairStore(pki_dir)


@pytest.fixture
def provisioner(store: KeyPairStore, pki_config: PKIConfig) -> CredentialProvisioner:
    return CredentialProvisioner(store, pki_config)


@pytest.fixture
def ca_pair(pki_config: PKIConfig) -> CredentialPair:
    """Generate a CA credential pair (not persisted)."""
    return new_certificate_authority(pki_config)


@pytest.fixture
def server_pair(
    ca_pair: CredentialPair, required_sans: SANSet, pki_config: PKIConfig
) -> CredentialPair:
    """Generate an API server pair signed by ca_pair (not persisted)."""
    return new_signed_leaf(
        signer=ca_pair,
        common_name="kube-apiserver",
        sans=required_sans,
        usages=SERVER_AUTH_USAGES,
        config=pki_config,
    )
