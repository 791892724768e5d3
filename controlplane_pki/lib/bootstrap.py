"""Bootstrap orchestration: SANs, then the CA, then the API server certificate."""

from collections.abc import Callable
from pathlib import Path

from .config import ClusterConfig, PKIConfig
from .host_info import HostInfo, SocketHostInfo
from .key_store import KeyPairStore
from .logging_config import LOGGER
from .models import BootstrapResult, ProvisioningOutcome, ProvisionResult
from .provisioner import CredentialProvisioner
from .san_assembler import assemble_sans

StatusSink = Callable[[str], None]


def _report(status: StatusSink, result: ProvisionResult) -> None:
    if result.outcome is ProvisioningOutcome.GENERATED:
        status(f"[certificates] Generated {result.role.label} certificate and key.")
    else:
        status(f"[certificates] Using the existing {result.role.label} certificate and key.")


def provision_control_plane_credentials(
    cluster: ClusterConfig,
    pki_dir: Path,
    pki_config: PKIConfig | None = None,
    host_info: HostInfo | None = None,
    status: StatusSink | None = None,
) -> BootstrapResult:
    """Ensure a CA and an API server certificate exist in ``pki_dir``.

    Safe to call repeatedly: valid existing material is reused unchanged,
    absent material is generated, and anything ambiguous or corrupt aborts
    the run without touching disk. Files already written before a failure
    are left in place.

    Args:
        cluster: External DNS names, advertise addresses, service subnet, DNS domain
        pki_dir: Directory holding ca.{key,crt} and apiserver.{key,crt}
        pki_config: Key size, validity periods and subject DN template
        host_info: Source of the local hostname (default: the OS)
        status: Receives one human-readable line per completed step
            (default: LOGGER.info)

    Returns:
        BootstrapResult with the CA and API server results

    Raises:
        PKIError: Any SAN assembly, load or generation failure
    """
    pki_config = pki_config or PKIConfig()
    host_info = host_info or SocketHostInfo()
    status = status or LOGGER.info

    sans = assemble_sans(cluster, host_info)

    provisioner = CredentialProvisioner(KeyPairStore(pki_dir), pki_config)

    ca_result = provisioner.provision_ca()
    _report(status, ca_result)

    server_result = provisioner.provision_server(ca_result.pair, sans)
    _report(status, server_result)

    status(f"[certificates] Valid certificates and keys now exist in {str(pki_dir)!r}")

    return BootstrapResult(pki_dir=pki_dir, sans=sans, ca=ca_result, server=server_result)
