"""Load-or-create state machine for CA and API server credential pairs."""

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.x509.oid import ObjectIdentifier

from .ca_utils import SERVER_AUTH_USAGES, new_certificate_authority, new_signed_leaf
from .cert_utils import extract_sans, is_certificate_authority
from .config import APISERVER_CERT_COMMON_NAME, PKIConfig
from .coverage import missing_sans
from .errors import (
    CorruptCredential,
    IncompleteCredential,
    InsufficientSANCoverage,
    NotACertificateAuthority,
)
from .key_store import KeyPairStore
from .logging_config import LOGGER
from .models import (
    CredentialPair,
    CredentialRole,
    CredentialState,
    ProvisioningOutcome,
    ProvisionResult,
    SANSet,
)


class CredentialProvisioner:
    """Resolves each credential role to a reused or freshly generated pair.

    Existing material is never deleted or overwritten: anything other than an
    absent pair or a loadable, acceptable pair is a fatal error.
    """

    def __init__(self, store: KeyPairStore, config: PKIConfig) -> None:
        """Initialize provisioner.

        Args:
            store: Key-pair store rooted at the PKI directory
            config: Key size, validity periods and subject DN template
        """
        self.store = store
        self.config = config

    def probe(self, role: CredentialRole) -> CredentialState:
        """Classify the on-disk state of ``role`` without modifying anything."""
        state, _, _ = self._probe(role)
        return state

    def provision_ca(self) -> ProvisionResult:
        """Load the cluster CA, or generate it when absent.

        Raises:
            IncompleteCredential: If only one of ca.key / ca.crt exists
            CorruptCredential: If the pair exists but cannot be loaded
            NotACertificateAuthority: If the loaded certificate is not a CA
            SigningFailed: If generation fails
            PersistFailed: If writing the new pair fails
        """
        role = CredentialRole.CERTIFICATE_AUTHORITY
        pair = self._load_existing(role)
        if pair is None:
            return self._generate(role, new_certificate_authority(self.config))

        if not is_certificate_authority(pair.cert):
            raise NotACertificateAuthority(
                "certificate and key could be loaded but the certificate is not a CA",
                role=role.label,
                location=self.store.pki_dir,
            )
        return self._reused(role, pair)

    def provision_server(
        self,
        ca: CredentialPair,
        sans: SANSet,
        usages: list[ObjectIdentifier] | None = None,
    ) -> ProvisionResult:
        """Load the API server pair, or generate one signed by ``ca`` when absent.

        A reused certificate must still cover ``sans``.

        Args:
            ca: Resolved CA pair used as signer
            sans: Required SANs; both DNS names and IPs must be present
            usages: Extended key usages for a new certificate (default ServerAuth)

        Raises:
            ValueError: If ``sans`` lacks DNS names or IPs
            IncompleteCredential: If only one of the two files exists
            CorruptCredential: If the pair exists but cannot be loaded
            InsufficientSANCoverage: If a reused certificate misses required SANs
            SigningFailed: If generation fails
            PersistFailed: If writing the new pair fails
        """
        if not sans.is_complete():
            raise ValueError("API server SAN set must contain DNS names and IP addresses")

        role = CredentialRole.SERVER_LEAF
        pair = self._load_existing(role)
        if pair is None:
            leaf = new_signed_leaf(
                signer=ca,
                common_name=APISERVER_CERT_COMMON_NAME,
                sans=sans,
                usages=SERVER_AUTH_USAGES if usages is None else usages,
                config=self.config,
            )
            return self._generate(role, leaf)

        gap = missing_sans(extract_sans(pair.cert), sans)
        if not gap.is_empty():
            raise InsufficientSANCoverage(
                "existing certificate does not cover required SANs "
                f"(missing dns={list(gap.dns_names)} ips={[str(ip) for ip in gap.ip_addresses]})",
                role=role.label,
                location=self.store.pki_dir,
            )
        return self._reused(role, pair)

    def _probe(
        self, role: CredentialRole
    ) -> tuple[CredentialState, CredentialPair | None, Exception | None]:
        key_exists = self.store.key_exists(role.base_name)
        cert_exists = self.store.cert_exists(role.base_name)

        if not key_exists and not cert_exists:
            return CredentialState.ABSENT, None, None
        if key_exists != cert_exists:
            return CredentialState.PARTIALLY_PRESENT, None, None

        try:
            pair = self.store.load(role.base_name)
        except (OSError, ValueError, TypeError, UnsupportedAlgorithm) as e:
            return CredentialState.PRESENT_INVALID, None, e
        return CredentialState.PRESENT_VALID, pair, None

    def _load_existing(self, role: CredentialRole) -> CredentialPair | None:
        """Return the stored pair, None when absent, or raise for unusable state."""
        state, pair, error = self._probe(role)
        LOGGER.debug("%s credential state: %s", role.label, state.value)

        if state is CredentialState.ABSENT:
            return None
        if state is CredentialState.PARTIALLY_PRESENT:
            present = (
                self.store.key_path(role.base_name)
                if self.store.key_exists(role.base_name)
                else self.store.cert_path(role.base_name)
            )
            raise IncompleteCredential(
                f"only one of the certificate and key exists ({present.name})",
                role=role.label,
                location=self.store.pki_dir,
            )
        if state is CredentialState.PRESENT_INVALID:
            raise CorruptCredential(
                "certificate and/or key existed but they could not be loaded properly",
                role=role.label,
                location=self.store.pki_dir,
                cause=error,
            ) from error
        return pair

    def _generate(self, role: CredentialRole, pair: CredentialPair) -> ProvisionResult:
        self.store.save(role.base_name, pair)
        return ProvisionResult(
            role=role,
            outcome=ProvisioningOutcome.GENERATED,
            pair=pair,
            key_path=self.store.key_path(role.base_name),
            cert_path=self.store.cert_path(role.base_name),
        )

    def _reused(self, role: CredentialRole, pair: CredentialPair) -> ProvisionResult:
        return ProvisionResult(
            role=role,
            outcome=ProvisioningOutcome.REUSED,
            pair=pair,
            key_path=self.store.key_path(role.base_name),
            cert_path=self.store.cert_path(role.base_name),
        )
