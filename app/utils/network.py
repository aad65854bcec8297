"""Client address helpers shared by the upload pipeline."""

from __future__ import annotations

import ipaddress
from typing import Final, Mapping

DEFAULT_CLIENT_IP: Final[str] = "127.0.0.1"

_FORWARDING_HEADERS: Final[tuple[str, ...]] = (
    "x-forwarded-for",
    "x-real-ip",
    "cf-connecting-ip",
)

_PRIVATE_NETWORKS: Final[tuple[ipaddress.IPv4Network | ipaddress.IPv6Network, ...]] = (
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fe80::/10"),
    ipaddress.ip_network("fc00::/7"),
)


def get_client_ip(headers: Mapping[str, str], peer_host: str | None = None) -> str:
    """Return the caller IP from proxy headers, the socket peer, or loopback.

    ``X-Forwarded-For`` may carry a chain; the first hop is the client.
    """

    for header in _FORWARDING_HEADERS:
        value = headers.get(header)
        if not value:
            continue
        candidate = value.split(",")[0].strip()
        if candidate:
            return candidate

    if peer_host:
        return peer_host
    return DEFAULT_CLIENT_IP


def is_private_ip(ip: str) -> bool:
    """True for RFC1918, loopback and IPv6 link-local/unique-local addresses."""

    try:
        address = ipaddress.ip_address(ip.strip())
    except ValueError:
        return False

    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped:
        address = address.ipv4_mapped

    return any(
        address.version == network.version and address in network
        for network in _PRIVATE_NETWORKS
    )


__all__ = ["DEFAULT_CLIENT_IP", "get_client_ip", "is_private_ip"]
