"""Discovery module - master server fan-out."""

from .browser import (
    get_server_count,
    get_server_info,
    get_server_info_with_timeout,
    get_server_list,
    server_infos,
    server_infos_with_timeouts,
)
from .master_servers import (
    MASTER_SERVER_ADDRESSES,
    master_server_addresses,
    resolve_master_server,
    resolve_master_servers,
)
from .result_collector import ResultCollector

__all__ = [
    "get_server_count",
    "get_server_info",
    "get_server_info_with_timeout",
    "get_server_list",
    "server_infos",
    "server_infos_with_timeouts",
    "MASTER_SERVER_ADDRESSES",
    "master_server_addresses",
    "resolve_master_server",
    "resolve_master_servers",
    "ResultCollector",
]
