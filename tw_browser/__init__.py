"""Teeworlds 0.7 server browser client.

Queries the master servers for their server lists and every listed
server for its info over the connectionless UDP protocol.
"""

from .compression import VarInt
from .config import BrowserConfig, load_config
from .discovery import (
    get_server_count,
    get_server_info,
    get_server_info_with_timeout,
    get_server_list,
    server_infos,
    server_infos_with_timeouts,
)
from .protocol import PacketType, PlayerInfo, ServerInfo, Token

__version__ = "0.1.0"

__all__ = [
    "VarInt",
    "BrowserConfig",
    "load_config",
    "get_server_count",
    "get_server_info",
    "get_server_info_with_timeout",
    "get_server_list",
    "server_infos",
    "server_infos_with_timeouts",
    "PacketType",
    "PlayerInfo",
    "ServerInfo",
    "Token",
]
