"""Server discovery - queries master servers and the servers they list.

Coordinates the full discovery flow:
1. Query every master server for its server list (one thread each)
2. Query every listed server for its info (one thread each)
3. Collect all infos, deduplicated by server address

A peer that cannot be reached or answers garbage only removes its own
contribution from the result, discovery itself never fails.
"""

import ipaddress
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional

from ..config import BrowserConfig
from ..errors import InvalidIPError, InvalidPortError
from ..protocol.constants import MAX_BUFFER_SIZE, MAX_CHUNKS
from ..protocol.models import PacketType, ServerInfo
from ..protocol.parsers import parse_server_count, parse_server_info, parse_server_list
from ..transport.connection import UDPConnection
from ..transport.exchange import fetch
from ..transport.timeout_handler import TimeoutHandler
from .master_servers import master_server_addresses, resolve_master_server
from .result_collector import ResultCollector

logger = logging.getLogger(__name__)


def server_infos(config: Optional[BrowserConfig] = None) -> list[ServerInfo]:
    """Discover all servers using the configured timeouts."""
    config = config or BrowserConfig()
    return server_infos_with_timeouts(
        config.master_timeout, config.server_timeout, config=config
    )


def server_infos_with_timeouts(
    master_timeout: float,
    server_timeout: float,
    master_servers: Optional[Iterable[str]] = None,
    config: Optional[BrowserConfig] = None,
) -> list[ServerInfo]:
    """Retrieve the infos of all servers known to the master servers.

    Args:
        master_timeout: Budget in seconds for each master server query.
        server_timeout: Budget in seconds for each server info query.
        master_servers: "host:port" addresses of the master servers to ask.
            Default: the configured (or built-in) master servers. Each
            master task resolves its own address within master_timeout.
        config: Retry tuning. Default: BrowserConfig().

    Returns:
        Infos of all servers that answered, possibly none.
    """
    config = config or BrowserConfig()

    if master_servers is None:
        master_servers = config.master_servers
    masters = master_server_addresses(master_servers)

    collector = ResultCollector()
    if not masters:
        logger.warning("no master servers to query")
        return collector.values()

    with ThreadPoolExecutor(max_workers=len(masters), thread_name_prefix="master") as pool:
        for master in masters:
            pool.submit(
                _fetch_servers_from_master,
                master, master_timeout, server_timeout, collector, config,
            )

    infos = collector.values()
    logger.info("discovered %d servers from %d master servers", len(infos), len(masters))
    return infos


def _fetch_servers_from_master(
    master: str,
    master_timeout: float,
    server_timeout: float,
    collector: ResultCollector,
    config: BrowserConfig,
) -> None:
    handler = TimeoutHandler(master_timeout).start()
    try:
        address = resolve_master_server(master)
        servers = get_server_list(address, handler.remaining, config)
    except Exception as e:
        logger.debug("master server %s failed: %s", master, e)
        return

    logger.debug("master server %s lists %d servers", master, len(servers))
    if not servers:
        return

    with ThreadPoolExecutor(max_workers=len(servers), thread_name_prefix="server") as pool:
        for server in servers:
            pool.submit(_fetch_server_info, server, server_timeout, collector, config)


def _fetch_server_info(
    address: str,
    timeout: float,
    collector: ResultCollector,
    config: BrowserConfig,
) -> None:
    try:
        info = _query_server_info(address, timeout, config)
    except Exception as e:
        logger.debug("server %s failed: %s", address, e)
        return

    collector.add(info)


def _query_server_info(address: str, timeout: float, config: BrowserConfig) -> ServerInfo:
    with UDPConnection(address) as conn:
        # increase buffers for writing and reading
        conn.set_read_buffer(MAX_BUFFER_SIZE)
        conn.set_write_buffer(MAX_BUFFER_SIZE * timeout)

        response = fetch(
            PacketType.SERVER_INFO, conn, timeout,
            config.token_policy, config.request_policy,
        )
    return parse_server_info(response, address)


def get_server_list(
    master: str,
    timeout: float,
    config: Optional[BrowserConfig] = None,
) -> list[str]:
    """Fetch the "ip:port" addresses a master server knows of."""
    config = config or BrowserConfig()
    with UDPConnection(master) as conn:
        conn.set_write_buffer(MAX_BUFFER_SIZE * MAX_CHUNKS)
        response = fetch(
            PacketType.SERVER_LIST, conn, timeout,
            config.token_policy, config.request_policy,
        )
    return parse_server_list(response)


def get_server_count(
    master: str,
    timeout: float,
    config: Optional[BrowserConfig] = None,
) -> int:
    """Fetch the number of servers a master server knows of."""
    config = config or BrowserConfig()
    with UDPConnection(master) as conn:
        response = fetch(
            PacketType.SERVER_COUNT, conn, timeout,
            config.token_policy, config.request_policy,
        )
    return parse_server_count(response)


def get_server_info_with_timeout(
    ip: str,
    port: int,
    timeout: float,
    config: Optional[BrowserConfig] = None,
) -> ServerInfo:
    """Fetch the info of the server at ip:port.

    Timeouts below the minimum timeout are raised to it.

    Raises:
        InvalidIPError: If ip is not an IPv4 or IPv6 address.
        InvalidPortError: If port is outside of 0-65535.
        ExchangeTimeoutError: If the server did not answer in time.
    """
    config = config or BrowserConfig()

    try:
        ip_addr = ipaddress.ip_address(ip)
    except ValueError:
        raise InvalidIPError(f"invalid ip: {ip!r}") from None

    if isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= 0xFFFF:
        raise InvalidPortError(f"invalid port: {port!r}")

    timeout = config.token_policy.floor_timeout(timeout)

    if ip_addr.version == 6:
        address = f"[{ip_addr}]:{port}"
    else:
        address = f"{ip_addr}:{port}"

    return _query_server_info(address, timeout, config)


def get_server_info(ip: str, port: int, config: Optional[BrowserConfig] = None) -> ServerInfo:
    """Fetch the info of the server at ip:port with the default server timeout.

    If a smaller timeout is needed, use get_server_info_with_timeout().
    """
    config = config or BrowserConfig()
    return get_server_info_with_timeout(ip, port, config.server_timeout, config)
