"""Credential generation: self-signed CA and CA-signed leaf pairs."""

from cryptography.x509.oid import ExtendedKeyUsageOID, ObjectIdentifier

from .cert_utils import generate_private_key
from .certificate_builder import CertificateBuilder
from .config import DistinguishedName, PKIConfig
from .errors import SigningFailed
from .models import CredentialPair, SANSet

SERVER_AUTH_USAGES = [ExtendedKeyUsageOID.SERVER_AUTH]


def build_dn_from_config(config: PKIConfig, common_name: str) -> DistinguishedName:
    """Build DN from PKIConfig fields + common_name."""
    return DistinguishedName(
        country=config.country,
        state=config.state,
        locality=config.locality,
        organization=config.organization,
        organizational_unit=config.organizational_unit,
        common_name=common_name,
    )


def new_certificate_authority(config: PKIConfig) -> CredentialPair:
    """Generate a fresh key and self-signed CA certificate.

    Raises:
        SigningFailed: If key generation or signing fails
    """
    try:
        key = generate_private_key(config.key_size)
        cert = CertificateBuilder.build_root_ca(
            subject_dn=build_dn_from_config(config, config.ca_common_name),
            private_key=key,
            validity_years=config.ca_validity_years,
        )
    except (ValueError, TypeError) as e:
        raise SigningFailed("failure while generating CA certificate and key", cause=e) from e

    return CredentialPair(key=key, cert=cert)


def new_signed_leaf(
    signer: CredentialPair,
    common_name: str,
    sans: SANSet,
    usages: list[ObjectIdentifier],
    config: PKIConfig,
) -> CredentialPair:
    """Generate a fresh key and a certificate for it signed by ``signer``.

    Args:
        signer: CA credential pair used as issuer
        common_name: Subject CN of the new certificate
        sans: DNS names and IPs the certificate is valid for
        usages: Extended key usage OIDs
        config: Key size, validity and subject DN template

    Returns:
        New CredentialPair for the leaf

    Raises:
        SigningFailed: If key generation or signing fails
    """
    try:
        key = generate_private_key(config.key_size)
        cert = CertificateBuilder.build_server_certificate(
            subject_dn=build_dn_from_config(config, common_name),
            public_key=key.public_key(),
            sans=sans,
            usages=usages,
            issuer_cert=signer.cert,
            issuer_key=signer.key,
            validity_days=config.server_validity_days,
        )
    except (ValueError, TypeError) as e:
        raise SigningFailed(
            f"failure while creating {common_name} key and certificate", cause=e
        ) from e

    return CredentialPair(key=key, cert=cert)
