#!/usr/bin/env python3
"""Provision the control-plane CA and API server certificate."""

import argparse
import sys
from pathlib import Path

from controlplane_pki.lib.bootstrap import provision_control_plane_credentials
from controlplane_pki.lib.cert_utils import get_certificate_serial_hex
from controlplane_pki.lib.config import ClusterConfig, load_cluster_config
from controlplane_pki.lib.errors import PKIError
from controlplane_pki.lib.host_info import HostInfo, SocketHostInfo, StaticHostInfo
from controlplane_pki.lib.logging_config import LOGGER


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Create or reuse the control-plane CA and API server certificate"
    )
    parser.add_argument(
        "--pki-dir",
        type=Path,
        default=Path("/etc/kubernetes/pki"),
        help="Directory for ca.{key,crt} and apiserver.{key,crt} (default: /etc/kubernetes/pki)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON cluster config; command-line values extend or override it",
    )
    parser.add_argument(
        "--external-dns-name",
        action="append",
        default=[],
        help="Extra DNS name for the API server certificate (repeatable)",
    )
    parser.add_argument(
        "--advertise-address",
        action="append",
        default=[],
        help="IP address the API server advertises (repeatable)",
    )
    parser.add_argument("--service-subnet", help="Service CIDR block (default: 10.96.0.0/12)")
    parser.add_argument("--dns-domain", help="Cluster DNS domain (default: cluster.local)")
    parser.add_argument("--hostname", help="Override the local hostname added to the SANs")
    return parser


def resolve_cluster_config(args: argparse.Namespace) -> ClusterConfig:
    """Merge the optional JSON config with command-line values."""
    cluster = load_cluster_config(args.config) if args.config else ClusterConfig()
    cluster.external_dns_names.extend(args.external_dns_name)
    cluster.advertise_addresses.extend(args.advertise_address)
    if args.service_subnet:
        cluster.service_subnet = args.service_subnet
    if args.dns_domain:
        cluster.dns_domain = args.dns_domain
    return cluster


def main(argv: list[str] | None = None) -> int:
    """Run the bootstrap.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = build_parser().parse_args(argv)

    try:
        cluster = resolve_cluster_config(args)
    except (OSError, ValueError) as e:
        LOGGER.error("Invalid cluster config: %s", e)
        return 1

    host_info: HostInfo = StaticHostInfo(args.hostname) if args.hostname else SocketHostInfo()

    try:
        result = provision_control_plane_credentials(cluster, args.pki_dir, host_info=host_info)
    except PKIError as e:
        LOGGER.error("PKI bootstrap failed: %s", e)
        return 1

    LOGGER.info("  CA serial: %s", get_certificate_serial_hex(result.ca.pair.cert))
    LOGGER.info("  API server serial: %s", get_certificate_serial_hex(result.server.pair.cert))
    LOGGER.info("  DNS names: %s", ", ".join(result.sans.dns_names))
    LOGGER.info("  IP addresses: %s", ", ".join(str(ip) for ip in result.sans.ip_addresses))
    return 0


if __name__ == "__main__":
    sys.exit(main())
