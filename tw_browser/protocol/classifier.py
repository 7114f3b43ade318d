"""Classification of raw responses."""

from ..errors import InvalidHeaderLengthError, InvalidResponseMessageError
from .constants import (
    MIN_PREFIX_LENGTH,
    SEND_INFO_RAW,
    SEND_SERVER_COUNT_RAW,
    SEND_SERVER_LIST_RAW,
    SIGNATURE_SIZE,
    TOKEN_PREFIX_SIZE,
    TOKEN_RESPONSE_SIZE,
)
from .models import PacketType

_SIGNATURES = (
    (SEND_SERVER_LIST_RAW, PacketType.SERVER_LIST),
    (SEND_SERVER_COUNT_RAW, PacketType.SERVER_COUNT),
    (SEND_INFO_RAW, PacketType.SERVER_INFO),
)


def match_response(response: bytes) -> PacketType:
    """Determine which kind of response a raw message is.

    Only the size and the signature behind the connless prefix are
    checked, the payload is validated by the parsers.

    Raises:
        InvalidHeaderLengthError: If the message is too short.
        InvalidResponseMessageError: If no known response matches.
    """
    if len(response) < MIN_PREFIX_LENGTH:
        raise InvalidHeaderLengthError(
            f"invalid header length: {len(response)} < {MIN_PREFIX_LENGTH}"
        )

    if len(response) == TOKEN_RESPONSE_SIZE:
        return PacketType.TOKEN

    signature = bytes(response[TOKEN_PREFIX_SIZE:TOKEN_PREFIX_SIZE + SIGNATURE_SIZE])
    for raw, packet in _SIGNATURES:
        if signature == raw:
            return packet

    raise InvalidResponseMessageError(f"unrecognized response signature: {signature!r}")
