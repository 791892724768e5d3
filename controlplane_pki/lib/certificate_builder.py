"""Certificate builder for X.509 certificate construction."""

from datetime import datetime, timedelta, timezone

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from cryptography.x509.oid import ObjectIdentifier

from .cert_utils import generate_serial_number
from .config import DistinguishedName
from .models import SANSet


class CertificateBuilder:
    """Builds X.509 certificates for the cluster CA and the API server."""

    @staticmethod
    def build_root_ca(
        subject_dn: DistinguishedName,
        private_key: RSAPrivateKey,
        validity_years: int,
    ) -> x509.Certificate:
        """Build self-signed CA certificate.

        Args:
            subject_dn: Distinguished name for certificate subject
            private_key: RSA private key for signing
            validity_years: Certificate validity period in years

        Returns:
            Self-signed X.509 certificate with CA extensions
        """
        subject = subject_dn.to_x509_name()
        not_before = datetime.now(timezone.utc)
        not_after = not_before + timedelta(days=validity_years * 365)

        builder = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(subject)
            .public_key(private_key.public_key())
            .serial_number(generate_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(
                x509.BasicConstraints(ca=True, path_length=None),
                critical=True,
            )
            .add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    content_commitment=False,
                    key_encipherment=True,
                    data_encipherment=False,
                    key_agreement=False,
                    key_cert_sign=True,
                    crl_sign=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .add_extension(
                x509.SubjectKeyIdentifier.from_public_key(private_key.public_key()),
                critical=False,
            )
        )

        return builder.sign(private_key, hashes.SHA256())

    @staticmethod
    def build_server_certificate(
        subject_dn: DistinguishedName,
        public_key: RSAPublicKey,
        sans: SANSet,
        usages: list[ObjectIdentifier],
        issuer_cert: x509.Certificate,
        issuer_key: RSAPrivateKey,
        validity_days: int,
    ) -> x509.Certificate:
        """Build end-entity certificate signed by the CA.

        Args:
            subject_dn: Distinguished name for certificate subject
            public_key: Public key to bind into the certificate
            sans: DNS names and IPs for the SubjectAlternativeName extension
            usages: Extended key usage OIDs (e.g. SERVER_AUTH)
            issuer_cert: CA certificate (issuer)
            issuer_key: CA private key for signing
            validity_days: Certificate validity period in days

        Returns:
            X.509 end-entity certificate signed by the CA

        Raises:
            ValueError: If the SAN set or usage list is empty
        """
        if sans.is_empty():
            raise ValueError("server certificate requires at least one SAN")
        if not usages:
            raise ValueError("server certificate requires at least one extended key usage")

        not_before = datetime.now(timezone.utc)
        not_after = not_before + timedelta(days=validity_days)

        builder = (
            x509.CertificateBuilder()
            .subject_name(subject_dn.to_x509_name())
            .issuer_name(issuer_cert.subject)
            .public_key(public_key)
            .serial_number(generate_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(
                x509.BasicConstraints(ca=False, path_length=None),
                critical=True,
            )
            .add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    content_commitment=False,
                    key_encipherment=True,
                    data_encipherment=False,
                    key_agreement=False,
                    key_cert_sign=False,
                    crl_sign=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .add_extension(x509.ExtendedKeyUsage(usages), critical=False)
            .add_extension(
                x509.SubjectAlternativeName(sans.to_general_names()),
                critical=False,
            )
            .add_extension(
                x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer_key.public_key()),
                critical=False,
            )
        )

        return builder.sign(issuer_key, hashes.SHA256())
