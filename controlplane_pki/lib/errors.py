"""Exception taxonomy for control-plane PKI provisioning.

Every error is fatal to the current run. Load-phase errors never delete or
overwrite what is already on disk.
"""

from pathlib import Path


class PKIError(Exception):
    """Base class for provisioning failures.

    Attributes:
        role: Label of the credential being provisioned, if any
        location: PKI directory or input value the failure relates to
        cause: Underlying exception, also chained as __cause__ by callers
    """

    def __init__(
        self,
        message: str,
        *,
        role: str | None = None,
        location: Path | str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.role = role
        self.location = location
        self.cause = cause
        super().__init__(self._format(message))

    def _format(self, message: str) -> str:
        parts = [message]
        if self.role is not None:
            parts.append(f"role={self.role}")
        if self.location is not None:
            parts.append(f"location={self.location}")
        if self.cause is not None:
            parts.append(f"cause={self.cause}")
        return "; ".join(parts)


# SAN assembly


class InvalidHostname(PKIError):
    """Local host name could not be determined."""


class InvalidIPLiteral(PKIError):
    """An advertised address does not parse as an IP address."""


class InvalidCIDR(PKIError):
    """Service subnet does not parse as a CIDR block."""


class AddressAllocationFailed(PKIError):
    """Requested offset falls outside the service subnet."""


# Load phase


class IncompleteCredential(PKIError):
    """Exactly one of the key and certificate files exists."""


class CorruptCredential(PKIError):
    """Key or certificate exists but cannot be loaded."""


class NotACertificateAuthority(PKIError):
    """Stored CA certificate loads but lacks the CA basic constraint."""


class InsufficientSANCoverage(PKIError):
    """Stored server certificate does not cover the required SANs."""


# Generate phase


class SigningFailed(PKIError):
    """Key generation or certificate signing failed."""


class PersistFailed(PKIError):
    """Writing the key or certificate to the store failed."""
