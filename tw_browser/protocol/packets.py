"""Request packet builders and token parsing."""

import os
from typing import Optional

from ..compression.varint import pack_int
from ..errors import InvalidResponseMessageError
from .constants import (
    CONNLESS_HEADER,
    CONTROL_HEADER,
    CTRL_MSG_TOKEN,
    REQUEST_INFO_RAW,
    REQUEST_SERVER_COUNT_RAW,
    REQUEST_SERVER_LIST_RAW,
    TOKEN_NONE,
    TOKEN_REQUEST_DATA_SIZE,
    TOKEN_RESPONSE_SIZE,
)
from .models import PacketType, Token


def new_client_token() -> bytes:
    """Random 4 byte token identifying our side of a handshake."""
    return os.urandom(4)


def new_token_request_packet(client_token: Optional[bytes] = None) -> bytes:
    """Build a token request control packet.

    Args:
        client_token: 4 byte token the server echoes back. Random if omitted.
    """
    if client_token is None:
        client_token = new_client_token()
    if len(client_token) != 4:
        raise ValueError(f"client token must be 4 bytes, got {len(client_token)}")

    data = bytes([CTRL_MSG_TOKEN]) + client_token
    data += bytes(TOKEN_REQUEST_DATA_SIZE - len(data))
    return CONTROL_HEADER + TOKEN_NONE + data


def parse_token(response: bytes) -> Token:
    """Extract the token pair from a token response.

    Raises:
        InvalidResponseMessageError: If response is not a token response.
    """
    if len(response) != TOKEN_RESPONSE_SIZE:
        raise InvalidResponseMessageError(
            f"invalid token response size: {len(response)}, expected {TOKEN_RESPONSE_SIZE}"
        )
    if response[7] != CTRL_MSG_TOKEN:
        raise InvalidResponseMessageError(
            f"invalid token response control message: {response[7]}"
        )
    return Token(client_token=bytes(response[3:7]), server_token=bytes(response[8:12]))


def _connless(token: Token, payload: bytes) -> bytes:
    return bytes([CONNLESS_HEADER]) + token.server_token + token.client_token + payload


def new_server_list_request_packet(token: Token) -> bytes:
    return _connless(token, REQUEST_SERVER_LIST_RAW)


def new_server_count_request_packet(token: Token) -> bytes:
    return _connless(token, REQUEST_SERVER_COUNT_RAW)


def new_server_info_request_packet(token: Token, request_token: Optional[int] = None) -> bytes:
    """Build a server info request.

    The server echoes request_token in its response. It defaults to the
    first byte of the client token.
    """
    if request_token is None:
        request_token = token.client_token[0]
    return _connless(token, REQUEST_INFO_RAW + pack_int(request_token))


_BUILDERS = {
    PacketType.SERVER_LIST: new_server_list_request_packet,
    PacketType.SERVER_COUNT: new_server_count_request_packet,
    PacketType.SERVER_INFO: new_server_info_request_packet,
}


def new_request_packet(packet: PacketType, token: Token) -> bytes:
    """Build the request packet for one of the token protected requests.

    Raises:
        ValueError: If packet is not a request kind.
    """
    try:
        builder = _BUILDERS[PacketType(packet)]
    except (KeyError, ValueError):
        raise ValueError(f"unknown request packet: {packet!r}") from None
    return builder(token)
