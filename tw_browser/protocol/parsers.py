"""Parsers for the payloads of server list, count and info responses.

Every parser expects the full response including the connless prefix
and the response signature.
"""

import ipaddress
import struct

from ..compression.varint import unpack_int
from ..errors import MalformedPacketError, NoDataToUnpackError
from .constants import (
    RESPONSE_HEADER_SIZE,
    SEND_INFO_RAW,
    SEND_SERVER_COUNT_RAW,
    SEND_SERVER_LIST_RAW,
    SERVER_LIST_ENTRY_SIZE,
    TOKEN_PREFIX_SIZE,
)
from .models import PlayerInfo, ServerInfo


def _payload(response: bytes, signature: bytes, kind: str) -> bytes:
    if len(response) < RESPONSE_HEADER_SIZE:
        raise MalformedPacketError(f"{kind} response too short: {len(response)} bytes")
    if response[TOKEN_PREFIX_SIZE:RESPONSE_HEADER_SIZE] != signature:
        raise MalformedPacketError(f"not a {kind} response")
    return bytes(response[RESPONSE_HEADER_SIZE:])


def format_address(ip: ipaddress.IPv6Address, port: int) -> str:
    """Format an address as ip:port, unwrapping IPv4 mapped addresses."""
    if ip.ipv4_mapped is not None:
        return f"{ip.ipv4_mapped}:{port}"
    return f"[{ip}]:{port}"


def parse_server_list(response: bytes) -> list[str]:
    """Parse a server list response into "ip:port" strings."""
    data = _payload(response, SEND_SERVER_LIST_RAW, "server list")

    if len(data) % SERVER_LIST_ENTRY_SIZE != 0:
        raise MalformedPacketError(
            f"server list payload of {len(data)} bytes is not a multiple "
            f"of {SERVER_LIST_ENTRY_SIZE}"
        )

    servers = []
    for offset in range(0, len(data), SERVER_LIST_ENTRY_SIZE):
        entry = data[offset:offset + SERVER_LIST_ENTRY_SIZE]
        ip = ipaddress.IPv6Address(entry[:16])
        (port,) = struct.unpack("!H", entry[16:])
        servers.append(format_address(ip, port))
    return servers


def parse_server_count(response: bytes) -> int:
    """Parse a server count response."""
    data = _payload(response, SEND_SERVER_COUNT_RAW, "server count")
    if len(data) < 2:
        raise MalformedPacketError("server count payload too short")
    (count,) = struct.unpack("!H", data[:2])
    return count


class _Unpacker:
    """Sequential reader for packed ints and NUL terminated strings."""

    def __init__(self, data: bytes):
        self._rest = data

    def next_int(self) -> int:
        try:
            value, self._rest = unpack_int(self._rest)
        except NoDataToUnpackError as e:
            raise MalformedPacketError(f"server info truncated: {e}") from e
        return value

    def next_string(self) -> str:
        end = self._rest.find(b"\x00")
        if end < 0:
            raise MalformedPacketError("server info truncated: unterminated string")
        value = self._rest[:end].decode("utf-8", errors="replace")
        self._rest = self._rest[end + 1:]
        return value


def parse_server_info(response: bytes, address: str) -> ServerInfo:
    """Parse a server info response of the server at address."""
    unpacker = _Unpacker(_payload(response, SEND_INFO_RAW, "server info"))

    unpacker.next_int()  # request token

    info = ServerInfo(
        address=address,
        version=unpacker.next_string(),
        name=unpacker.next_string(),
        hostname=unpacker.next_string(),
        map=unpacker.next_string(),
        game_type=unpacker.next_string(),
        flags=unpacker.next_int(),
        skill_level=unpacker.next_int(),
        num_players=unpacker.next_int(),
        max_players=unpacker.next_int(),
        num_clients=unpacker.next_int(),
        max_clients=unpacker.next_int(),
    )

    if not 0 <= info.num_clients <= info.max_clients:
        raise MalformedPacketError(
            f"invalid client count {info.num_clients}/{info.max_clients}"
        )

    for _ in range(info.num_clients):
        info.players.append(PlayerInfo(
            name=unpacker.next_string(),
            clan=unpacker.next_string(),
            country=unpacker.next_int(),
            score=unpacker.next_int(),
            type=unpacker.next_int(),
        ))

    return info
