"""Filesystem store for key and certificate pairs."""

import os
import tempfile
from pathlib import Path

from .cert_utils import (
    deserialize_certificate,
    deserialize_private_key,
    public_key_matches,
    serialize_certificate,
    serialize_private_key,
)
from .errors import PersistFailed
from .logging_config import LOGGER
from .models import CredentialPair

KEY_FILE_MODE = 0o600
CERT_FILE_MODE = 0o644


class KeyPairStore:
    """Reads and writes ``<base>.key`` / ``<base>.crt`` pairs under one directory."""

    def __init__(self, pki_dir: Path) -> None:
        """Initialize store.

        Args:
            pki_dir: Directory holding the PEM files
        """
        self.pki_dir = pki_dir

    def key_path(self, base_name: str) -> Path:
        return self.pki_dir / f"{base_name}.key"

    def cert_path(self, base_name: str) -> Path:
        return self.pki_dir / f"{base_name}.crt"

    def key_exists(self, base_name: str) -> bool:
        return self.key_path(base_name).exists()

    def cert_exists(self, base_name: str) -> bool:
        return self.cert_path(base_name).exists()

    def exists(self, base_name: str) -> bool:
        """Return True only when both the key and the certificate exist."""
        return self.key_exists(base_name) and self.cert_exists(base_name)

    def load(self, base_name: str) -> CredentialPair:
        """Load key and certificate from disk.

        Raises:
            OSError: If either file cannot be read
            ValueError: If either file does not parse as PEM of the expected type,
                or the certificate was not issued for the key
        """
        key = deserialize_private_key(self.key_path(base_name).read_bytes())
        cert = deserialize_certificate(self.cert_path(base_name).read_bytes())
        if not public_key_matches(key, cert):
            raise ValueError(f"{base_name} certificate does not match its private key")
        return CredentialPair(key=key, cert=cert)

    def save(self, base_name: str, pair: CredentialPair) -> None:
        """Write key then certificate, each replaced atomically.

        A crash between the two writes leaves only the key on disk, which the
        next run sees as an incomplete pair.

        Raises:
            PersistFailed: If the directory or either file cannot be written
        """
        try:
            self.pki_dir.mkdir(parents=True, exist_ok=True)
            _atomic_write(self.key_path(base_name), serialize_private_key(pair.key), KEY_FILE_MODE)
            _atomic_write(self.cert_path(base_name), serialize_certificate(pair.cert), CERT_FILE_MODE)
        except OSError as e:
            raise PersistFailed(
                f"failure while saving {base_name} certificate and key",
                location=self.pki_dir,
                cause=e,
            ) from e

        LOGGER.debug("Wrote %s and %s", self.key_path(base_name), self.cert_path(base_name))


def _atomic_write(path: Path, data: bytes, mode: int) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
