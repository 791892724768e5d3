"""Check that a certificate's SANs cover a required SAN set."""

from .models import SANSet, canonical_ip


def missing_sans(actual: SANSet, required: SANSet) -> SANSet:
    """Return the required names and IPs absent from ``actual``."""
    dns_present = set(actual.dns_names)
    ips_present = {canonical_ip(ip) for ip in actual.ip_addresses}
    return SANSet.of(
        dns_names=(name for name in required.dns_names if name not in dns_present),
        ip_addresses=(ip for ip in required.ip_addresses if canonical_ip(ip) not in ips_present),
    )


def sans_cover(actual: SANSet, required: SANSet) -> bool:
    """Return True if every required DNS name and IP is present in ``actual``.

    DNS names match exactly; IPs compare by value, so ``2001:db8::1`` and
    ``2001:0db8:0:0:0:0:0:1`` are the same address, as are ``10.0.0.5`` and
    its IPv4-mapped form ``::ffff:10.0.0.5``.
    """
    return missing_sans(actual, required).is_empty()
