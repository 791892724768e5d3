"""Certificate utility functions for key generation, serialization, and inspection."""

import uuid

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .models import SANSet


def generate_private_key(key_size: int = 2048) -> RSAPrivateKey:
    """Generate RSA private key with specified size."""
    return rsa.generate_private_key(
        public_exponent=65537,
        key_size=key_size,
    )


def serialize_private_key(key: RSAPrivateKey) -> bytes:
    """Serialize private key to PEM format (PKCS8, no encryption)."""
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def deserialize_private_key(pem_data: bytes) -> RSAPrivateKey:
    """Deserialize private key from PEM bytes."""
    key = serialization.load_pem_private_key(pem_data, password=None)
    if not isinstance(key, RSAPrivateKey):
        raise ValueError("expected RSA private key")
    return key


def serialize_certificate(cert: x509.Certificate) -> bytes:
    """Serialize certificate to PEM format."""
    return cert.public_bytes(serialization.Encoding.PEM)


def deserialize_certificate(pem_data: bytes) -> x509.Certificate:
    """Deserialize certificate from PEM bytes."""
    return x509.load_pem_x509_certificate(pem_data)


def generate_serial_number() -> int:
    """Generate certificate serial number from UUID4.

    UUID v4 gives ~122 bits of randomness, above the 64-bit CSPRNG minimum
    required by the CA/Browser Forum baseline.
    """
    return uuid.uuid4().int


def get_certificate_serial_hex(cert: x509.Certificate) -> str:
    """Return certificate serial number as hex with colons (e.g., 3A:F2:B1:...)."""
    serial_hex = f"{cert.serial_number:X}"
    if len(serial_hex) % 2 != 0:
        serial_hex = "0" + serial_hex
    return ":".join(serial_hex[i : i + 2] for i in range(0, len(serial_hex), 2))


def is_certificate_authority(cert: x509.Certificate) -> bool:
    """Return True if the certificate carries BasicConstraints CA=TRUE."""
    try:
        bc = cert.extensions.get_extension_for_class(x509.BasicConstraints)
    except x509.ExtensionNotFound:
        return False
    return bc.value.ca


def extract_sans(cert: x509.Certificate) -> SANSet:
    """Return the DNS names and IP addresses from the SubjectAlternativeName extension.

    A certificate without the extension yields an empty SANSet.
    """
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        return SANSet()
    return SANSet.of(
        dns_names=san.get_values_for_type(x509.DNSName),
        ip_addresses=san.get_values_for_type(x509.IPAddress),
    )


def public_key_matches(key: RSAPrivateKey, cert: x509.Certificate) -> bool:
    """Return True if the certificate's public key belongs to the private key."""
    cert_key = cert.public_key()
    if not isinstance(cert_key, rsa.RSAPublicKey):
        return False
    return cert_key.public_numbers() == key.public_key().public_numbers()
