"""Master server address table."""

import logging
import socket
from typing import Iterable, Optional

from ..transport.connection import split_address

logger = logging.getLogger(__name__)

MASTER_SERVER_PORT = 8300

MASTER_SERVER_ADDRESSES = [
    f"master{i}.teeworlds.com:{MASTER_SERVER_PORT}" for i in range(1, 5)
]


def master_server_addresses(addresses: Optional[Iterable[str]] = None) -> list[str]:
    """The master servers to ask, MASTER_SERVER_ADDRESSES unless given."""
    if addresses is None:
        return list(MASTER_SERVER_ADDRESSES)
    return list(addresses)


def resolve_master_server(address: str) -> str:
    """Resolve a "host:port" master server address to "ip:port".

    Raises:
        ValueError: If address has no valid port.
        OSError: If the host cannot be resolved.
    """
    host, port = split_address(address)
    family, _, _, _, sockaddr = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)[0]
    if family == socket.AF_INET6:
        return f"[{sockaddr[0]}]:{sockaddr[1]}"
    return f"{sockaddr[0]}:{sockaddr[1]}"


def resolve_master_servers(addresses: Optional[Iterable[str]] = None) -> list[str]:
    """Resolve master server host names to "ip:port" addresses.

    Hosts that cannot be resolved are skipped. Duplicates are dropped.
    Lookups run one after another, discovery resolves inside each
    master task instead.

    Args:
        addresses: "host:port" strings. Default: MASTER_SERVER_ADDRESSES.
    """
    resolved: dict[str, None] = {}
    for address in master_server_addresses(addresses):
        try:
            resolved[resolve_master_server(address)] = None
        except (OSError, ValueError) as e:
            logger.warning("skipping master server %s: %s", address, e)

    return list(resolved)
