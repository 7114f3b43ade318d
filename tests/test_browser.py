import threading

import pytest

from fakes import game_handler, master_handler
from tw_browser.config import BrowserConfig
from tw_browser.discovery import browser
from tw_browser.discovery.browser import (
    get_server_count,
    get_server_info_with_timeout,
    get_server_list,
    server_infos_with_timeouts,
)
from tw_browser.discovery.master_servers import (
    master_server_addresses,
    resolve_master_server,
    resolve_master_servers,
)
from tw_browser.discovery.result_collector import ResultCollector
from tw_browser.errors import (
    ExchangeTimeoutError,
    InvalidIPError,
    InvalidPortError,
    InvalidWriteError,
    MalformedPacketError,
)
from tw_browser.protocol.constants import SEND_SERVER_LIST_RAW
from tw_browser.protocol.models import ServerInfo
from tw_browser.transport.connection import UDPConnection

MASTER_TIMEOUT = 1.0
SERVER_TIMEOUT = 1.0


def _silent(signature, rest):
    return None


class TestResultCollector:
    def test_deduplicates_by_address(self):
        collector = ResultCollector()
        collector.add(ServerInfo(address="1.2.3.4:8303", name="old"))
        collector.add(ServerInfo(address="1.2.3.4:8303", name="new"))
        collector.add(ServerInfo(address="1.2.3.4:8304"))

        assert len(collector) == 2
        assert "1.2.3.4:8303" in collector
        assert {i.name for i in collector.values() if i.address == "1.2.3.4:8303"} == {"new"}

    def test_concurrent_adds(self):
        collector = ResultCollector()

        def add_many(offset):
            for i in range(200):
                collector.add(ServerInfo(address=f"10.0.{offset}.{i}:8303"))

        threads = [threading.Thread(target=add_many, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(collector) == 8 * 200


class TestSingleQueries:
    def test_server_list(self, udp_servers):
        master = udp_servers(master_handler([("10.0.0.1", 8303), ("10.0.0.2", 8304)]))
        assert get_server_list(master.address, MASTER_TIMEOUT) == ["10.0.0.1:8303", "10.0.0.2:8304"]

    def test_server_count(self, udp_servers):
        master = udp_servers(master_handler([("10.0.0.1", 8303)] * 3))
        assert get_server_count(master.address, MASTER_TIMEOUT) == 3

    def test_server_info(self, udp_servers):
        server = udp_servers(game_handler("alpha", players=[("nick", "", 0, 1, 0)]))
        info = get_server_info_with_timeout("127.0.0.1", server.port, SERVER_TIMEOUT)

        assert info.address == server.address
        assert info.name == "alpha"
        assert info.players[0].name == "nick"

    def test_silent_server_times_out(self, udp_servers):
        server = udp_servers(_silent, answer=False)
        with pytest.raises(ExchangeTimeoutError):
            get_server_info_with_timeout("127.0.0.1", server.port, 0.2)

    @pytest.mark.parametrize("ip", ["", "localhost", "256.1.1.1", "1.2.3"])
    def test_invalid_ip(self, ip):
        with pytest.raises(InvalidIPError):
            get_server_info_with_timeout(ip, 8303, 0.1)

    @pytest.mark.parametrize("port", [-1, 65536, "8303"])
    def test_invalid_port(self, port):
        with pytest.raises(InvalidPortError):
            get_server_info_with_timeout("127.0.0.1", port, 0.1)


class TestServerInfos:
    def _game_servers(self, udp_servers, names):
        return [udp_servers(game_handler(name)) for name in names]

    def test_collects_servers_of_all_masters(self, udp_servers):
        first = self._game_servers(udp_servers, ["a", "b", "c"])
        second = self._game_servers(udp_servers, ["d", "e"])
        masters = [
            udp_servers(master_handler([("127.0.0.1", s.port) for s in first])),
            udp_servers(master_handler([("127.0.0.1", s.port) for s in second])),
        ]

        infos = server_infos_with_timeouts(
            MASTER_TIMEOUT, SERVER_TIMEOUT, master_servers=[m.address for m in masters]
        )

        assert sorted(i.name for i in infos) == ["a", "b", "c", "d", "e"]
        assert {i.address for i in infos} == {s.address for s in first + second}

    def test_servers_listed_twice_are_reported_once(self, udp_servers):
        shared = self._game_servers(udp_servers, ["shared"])[0]
        own = self._game_servers(udp_servers, ["own"])[0]
        masters = [
            udp_servers(master_handler([("127.0.0.1", shared.port), ("127.0.0.1", own.port)])),
            udp_servers(master_handler([("127.0.0.1", shared.port)])),
        ]

        infos = server_infos_with_timeouts(
            MASTER_TIMEOUT, SERVER_TIMEOUT, master_servers=[m.address for m in masters]
        )

        assert sorted(i.name for i in infos) == ["own", "shared"]

    def test_failing_master_does_not_affect_others(self, udp_servers):
        servers = self._game_servers(udp_servers, ["a", "b"])
        healthy = udp_servers(master_handler([("127.0.0.1", s.port) for s in servers]))
        dead = udp_servers(_silent, answer=False)

        infos = server_infos_with_timeouts(
            0.3, SERVER_TIMEOUT, master_servers=[dead.address, healthy.address]
        )

        assert sorted(i.name for i in infos) == ["a", "b"]
        assert dead.requests

    def test_failing_server_is_skipped(self, udp_servers):
        alive = self._game_servers(udp_servers, ["alive"])[0]
        silent = udp_servers(_silent, answer=False)
        master = udp_servers(master_handler([("127.0.0.1", alive.port), ("127.0.0.1", silent.port)]))

        infos = server_infos_with_timeouts(
            MASTER_TIMEOUT, 0.3, master_servers=[master.address]
        )

        assert [i.name for i in infos] == ["alive"]

    def test_no_masters(self):
        assert server_infos_with_timeouts(0.1, 0.1, master_servers=[]) == []

    def test_unresolvable_master_address(self):
        infos = server_infos_with_timeouts(0.1, 0.1, master_servers=["no port here"])
        assert infos == []

    def test_configured_masters_are_used(self, udp_servers):
        server = self._game_servers(udp_servers, ["configured"])[0]
        master = udp_servers(master_handler([("127.0.0.1", server.port)]))
        config = BrowserConfig(master_servers=[master.address])

        infos = server_infos_with_timeouts(MASTER_TIMEOUT, SERVER_TIMEOUT, config=config)

        assert [i.name for i in infos] == ["configured"]


class TestResolveMasterServers:
    def test_numeric_addresses_and_duplicates(self):
        assert resolve_master_servers(["127.0.0.1:8300", "127.0.0.1:8300", "127.0.0.2:8301"]) == [
            "127.0.0.1:8300",
            "127.0.0.2:8301",
        ]

    def test_invalid_entries_are_skipped(self):
        assert resolve_master_servers(["missing-port", "127.0.0.1:x"]) == []

    def test_host_names_are_kept(self):
        assert master_server_addresses(["localhost:8300"]) == ["localhost:8300"]
        assert len(master_server_addresses()) == 4

    def test_resolve_single(self):
        assert resolve_master_server("127.0.0.1:8300") == "127.0.0.1:8300"
        with pytest.raises(ValueError):
            resolve_master_server("missing-port")


@pytest.fixture
def recording_connection(monkeypatch):
    """Connection class recording every connection the browser opens."""

    class RecordingConnection(UDPConnection):
        instances: list = []
        short_write = False

        def __init__(self, address):
            super().__init__(address)
            RecordingConnection.instances.append(self)

        def write(self, data):
            sent = super().write(data)
            return sent - 1 if self.short_write else sent

    monkeypatch.setattr(browser, "UDPConnection", RecordingConnection)
    return RecordingConnection


class TestConnectionsAreClosed:
    def test_after_success(self, udp_servers, recording_connection):
        master = udp_servers(master_handler([("10.0.0.1", 8303)]))
        get_server_list(master.address, MASTER_TIMEOUT)
        assert len(recording_connection.instances) == 1
        assert recording_connection.instances[0]._sock is None

    def test_after_timeout(self, udp_servers, recording_connection):
        master = udp_servers(_silent, answer=False)
        with pytest.raises(ExchangeTimeoutError):
            get_server_list(master.address, 0.2)
        assert len(recording_connection.instances) == 1
        assert recording_connection.instances[0]._sock is None

    def test_after_short_write(self, udp_servers, recording_connection):
        recording_connection.short_write = True
        server = udp_servers(game_handler("unused"))
        with pytest.raises(InvalidWriteError):
            get_server_info_with_timeout("127.0.0.1", server.port, SERVER_TIMEOUT)
        assert len(recording_connection.instances) == 1
        assert recording_connection.instances[0]._sock is None

    def test_after_malformed_response(self, udp_servers, recording_connection):
        master = udp_servers(lambda signature, rest: SEND_SERVER_LIST_RAW + b"\x00" * 5)
        with pytest.raises(MalformedPacketError):
            get_server_list(master.address, MASTER_TIMEOUT)
        assert recording_connection.instances[0]._sock is None

    def test_after_failures_during_discovery(self, udp_servers, recording_connection):
        alive = udp_servers(game_handler("alive"))
        silent = udp_servers(_silent, answer=False)
        master = udp_servers(master_handler([("127.0.0.1", alive.port), ("127.0.0.1", silent.port)]))
        dead_master = udp_servers(_silent, answer=False)

        infos = server_infos_with_timeouts(
            0.3, 0.3, master_servers=[master.address, dead_master.address]
        )

        assert [i.name for i in infos] == ["alive"]
        assert len(recording_connection.instances) == 4
        assert all(conn._sock is None for conn in recording_connection.instances)
