"""Protocol module - packets, parsers and response classification."""

from .classifier import match_response
from .models import PacketType, PlayerInfo, ServerInfo, Token
from .packets import (
    new_request_packet,
    new_server_count_request_packet,
    new_server_info_request_packet,
    new_server_list_request_packet,
    new_token_request_packet,
    parse_token,
)
from .parsers import parse_server_count, parse_server_info, parse_server_list

__all__ = [
    "PacketType",
    "PlayerInfo",
    "ServerInfo",
    "Token",
    "match_response",
    "new_request_packet",
    "new_server_count_request_packet",
    "new_server_info_request_packet",
    "new_server_list_request_packet",
    "new_token_request_packet",
    "parse_server_count",
    "parse_server_info",
    "parse_server_list",
    "parse_token",
]
