"""Tests for certificate builder and credential generation."""

from datetime import UTC, datetime, timedelta
from ipaddress import ip_address
from unittest.mock import patch

import pytest
from cryptography import x509
from cryptography.x509.oid import ExtendedKeyUsageOID

from controlplane_pki.lib.ca_utils import (
    SERVER_AUTH_USAGES,
    build_dn_from_config,
    new_certificate_authority,
    new_signed_leaf,
)
from controlplane_pki.lib.cert_utils import generate_private_key
from controlplane_pki.lib.certificate_builder import CertificateBuilder
from controlplane_pki.lib.config import PKIConfig
from controlplane_pki.lib.errors import SigningFailed
from controlplane_pki.lib.models import CredentialPair, SANSet


class TestBuildRootCA:
    """Tests for the self-signed cluster CA."""

    def test_ca_is_self_signed(self, ca_pair: CredentialPair) -> None:
        """CA issuer must equal subject and verify against itself."""
        assert ca_pair.cert.issuer == ca_pair.cert.subject
        ca_pair.cert.verify_directly_issued_by(ca_pair.cert)

    def test_ca_basic_constraints(self, ca_pair: CredentialPair) -> None:
        bc = ca_pair.cert.extensions.get_extension_for_class(x509.BasicConstraints)
        assert bc.critical is True
        assert bc.value.ca is True

    def test_ca_key_usage(self, ca_pair: CredentialPair) -> None:
        ku = ca_pair.cert.extensions.get_extension_for_class(x509.KeyUsage)
        assert ku.value.key_cert_sign is True
        assert ku.value.digital_signature is True

    def test_ca_common_name(self, ca_pair: CredentialPair, pki_config: PKIConfig) -> None:
        cn = ca_pair.cert.subject.get_attributes_for_oid(x509.NameOID.COMMON_NAME)[0].value
        assert cn == pki_config.ca_common_name

    def test_ca_validity_period(self, pki_config: PKIConfig) -> None:
        before = datetime.now(UTC)
        cert = CertificateBuilder.build_root_ca(
            subject_dn=build_dn_from_config(pki_config, "Test CA"),
            private_key=generate_private_key(2048),
            validity_years=3,
        )
        expected_not_after = before + timedelta(days=3 * 365)
        # Allow 5-second delta for test execution time
        assert abs((cert.not_valid_after_utc - expected_not_after).total_seconds()) < 5


class TestBuildServerCertificate:
    """Tests for the CA-signed API server certificate."""

    def test_signed_by_ca(self, server_pair: CredentialPair, ca_pair: CredentialPair) -> None:
        assert server_pair.cert.issuer == ca_pair.cert.subject
        server_pair.cert.verify_directly_issued_by(ca_pair.cert)

    def test_is_not_a_ca(self, server_pair: CredentialPair) -> None:
        bc = server_pair.cert.extensions.get_extension_for_class(x509.BasicConstraints)
        assert bc.value.ca is False

    def test_server_auth_usage(self, server_pair: CredentialPair) -> None:
        eku = server_pair.cert.extensions.get_extension_for_class(x509.ExtendedKeyUsage)
        assert list(eku.value) == [ExtendedKeyUsageOID.SERVER_AUTH]

    def test_key_usage(self, server_pair: CredentialPair) -> None:
        ku = server_pair.cert.extensions.get_extension_for_class(x509.KeyUsage)
        assert ku.value.digital_signature is True
        assert ku.value.key_encipherment is True
        assert ku.value.key_cert_sign is False

    def test_carries_sans(self, server_pair: CredentialPair, required_sans: SANSet) -> None:
        san = server_pair.cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
        assert san.value.get_values_for_type(x509.DNSName) == list(required_sans.dns_names)
        assert ip_address("10.96.0.1") in san.value.get_values_for_type(x509.IPAddress)

    def test_common_name(self, server_pair: CredentialPair) -> None:
        cn = server_pair.cert.subject.get_attributes_for_oid(x509.NameOID.COMMON_NAME)[0].value
        assert cn == "kube-apiserver"

    def test_validity_matches_config(
        self, ca_pair: CredentialPair, required_sans: SANSet, pki_config: PKIConfig
    ) -> None:
        before = datetime.now(UTC)
        pair = new_signed_leaf(ca_pair, "kube-apiserver", required_sans, SERVER_AUTH_USAGES, pki_config)
        expected_not_after = before + timedelta(days=pki_config.server_validity_days)
        assert abs((pair.cert.not_valid_after_utc - expected_not_after).total_seconds()) < 5

    def test_rejects_empty_sans(self, ca_pair: CredentialPair, pki_config: PKIConfig) -> None:
        key = generate_private_key(2048)
        with pytest.raises(ValueError, match="at least one SAN"):
            CertificateBuilder.build_server_certificate(
                subject_dn=build_dn_from_config(pki_config, "kube-apiserver"),
                public_key=key.public_key(),
                sans=SANSet(),
                usages=SERVER_AUTH_USAGES,
                issuer_cert=ca_pair.cert,
                issuer_key=ca_pair.key,
                validity_days=30,
            )


class TestCredentialGeneration:
    """Tests for new_certificate_authority / new_signed_leaf error handling."""

    def test_key_matches_cert(self, ca_pair: CredentialPair) -> None:
        assert (
            ca_pair.key.public_key().public_numbers()
            == ca_pair.cert.public_key().public_numbers()  # type: ignore[union-attr]
        )

    def test_ca_signing_failure_wrapped(self, pki_config: PKIConfig) -> None:
        with (
            patch(
                "controlplane_pki.lib.ca_utils.CertificateBuilder.build_root_ca",
                side_effect=ValueError("bad key"),
            ),
            pytest.raises(SigningFailed, match="generating CA") as exc_info,
        ):
            new_certificate_authority(pki_config)

        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_leaf_with_empty_sans_is_signing_failure(
        self, ca_pair: CredentialPair, pki_config: PKIConfig
    ) -> None:
        with pytest.raises(SigningFailed, match="kube-apiserver"):
            new_signed_leaf(ca_pair, "kube-apiserver", SANSet(), SERVER_AUTH_USAGES, pki_config)
