"""Compute the SubjectAlternativeNames the API server certificate must carry."""

import ipaddress
from ipaddress import IPv4Network, IPv6Network

from .config import API_SERVER_VIP_INDEX, ClusterConfig
from .errors import AddressAllocationFailed, InvalidCIDR, InvalidHostname, InvalidIPLiteral
from .host_info import HostInfo
from .logging_config import LOGGER
from .models import IPAddress, SANSet


def internal_api_server_names(dns_domain: str) -> list[str]:
    """Return the in-cluster DNS aliases of the API server service."""
    return [
        "kubernetes",
        "kubernetes.default",
        "kubernetes.default.svc",
        f"kubernetes.default.svc.{dns_domain}",
    ]


def get_indexed_ip(network: IPv4Network | IPv6Network, index: int) -> IPAddress:
    """Return the address ``index`` positions after the network address.

    Raises:
        AddressAllocationFailed: If the offset falls outside the block
    """
    if index < 0 or index >= network.num_addresses:
        raise AddressAllocationFailed(
            f"unable to allocate IP address at index {index} from the given CIDR",
            location=str(network),
        )
    return network.network_address + index


def parse_service_subnet(cidr: str) -> IPv4Network | IPv6Network:
    """Parse the service subnet, tolerating host bits (10.96.0.5/12 -> 10.96.0.0/12)."""
    if not isinstance(cidr, str):
        raise InvalidCIDR(f"service subnet must be a string, got {cidr!r}", location=str(cidr))
    try:
        return ipaddress.ip_network(cidr, strict=False)
    except ValueError as e:
        raise InvalidCIDR(f"error parsing CIDR {cidr!r}", location=cidr, cause=e) from e


def parse_advertise_addresses(addresses: list[str]) -> list[IPAddress]:
    ips = []
    for address in addresses:
        if not isinstance(address, str):
            raise InvalidIPLiteral(f"could not parse ip {address!r}", location=str(address))
        try:
            ips.append(ipaddress.ip_address(address))
        except ValueError as e:
            raise InvalidIPLiteral(f"could not parse ip {address!r}", location=address, cause=e) from e
    return ips


def lookup_hostname(host_info: HostInfo) -> str:
    try:
        hostname = host_info.hostname()
    except OSError as e:
        raise InvalidHostname("couldn't get the hostname", cause=e) from e
    if not hostname or not hostname.strip():
        raise InvalidHostname("couldn't get the hostname: empty value")
    return hostname.strip()


def assemble_sans(cluster: ClusterConfig, host_info: HostInfo) -> SANSet:
    """Build the SAN set for the API server certificate.

    DNS names, in order: external names, local hostname, internal service
    aliases. IPs, in order: advertised addresses, then the API server's
    virtual IP inside the service subnet.

    Args:
        cluster: Cluster networking and API configuration
        host_info: Source of the local hostname

    Returns:
        SANSet with duplicates collapsed

    Raises:
        InvalidHostname: If the hostname lookup fails or is empty
        InvalidIPLiteral: If an advertised address does not parse
        InvalidCIDR: If the service subnet does not parse
        AddressAllocationFailed: If the subnet is too small for the virtual IP
    """
    hostname = lookup_hostname(host_info)
    dns_names = [*cluster.external_dns_names, hostname, *internal_api_server_names(cluster.dns_domain)]

    ips = parse_advertise_addresses(cluster.advertise_addresses)
    service_network = parse_service_subnet(cluster.service_subnet)
    ips.append(get_indexed_ip(service_network, API_SERVER_VIP_INDEX))

    sans = SANSet.of(dns_names=dns_names, ip_addresses=ips)
    LOGGER.debug(
        "Assembled API server SANs: dns=%s ips=%s",
        list(sans.dns_names),
        [str(ip) for ip in sans.ip_addresses],
    )
    return sans
