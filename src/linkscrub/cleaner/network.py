"""Local and private address detection.

Hosts in these ranges (and ``localhost``) are skipped by the cleaner,
since rewriting requests to local services is never wanted.
"""

import ipaddress
import socket
from typing import Callable, Optional

from linkscrub.core.constants import LOCAL_NETWORKS, LOCALHOST

LocalHostPredicate = Callable[[str], bool]

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

_NETWORKS = tuple(ipaddress.ip_network(network) for network in LOCAL_NETWORKS)


def _parse_address(host: str) -> Optional[IPAddress]:
    """Parse a host as an IP address.

    Shorthand IPv4 forms such as ``127.1`` or ``2130706433`` are expanded
    the way browsers do before comparing against the reserved ranges.
    """
    try:
        return ipaddress.ip_address(host)
    except ValueError:
        pass

    try:
        return ipaddress.IPv4Address(socket.inet_aton(host))
    except (OSError, ValueError):
        return None


def is_local_host(host: str) -> bool:
    """Check if a host names a local or reserved address.

    Only hosts that start with a digit are parsed as IP addresses, so
    domain names are rejected without touching ``ipaddress``.

    Args:
        host: Hostname without port or brackets

    Returns:
        True for ``localhost`` and addresses inside a reserved range
    """
    if not host:
        return False

    host = host.lower()
    if host == LOCALHOST:
        return True
    if not host[0].isdigit():
        return False

    address = _parse_address(host)
    if address is None:
        return False

    return any(address in network for network in _NETWORKS)
