"""Fixtures shared by the test suite."""

import pytest

from fakes import FakeUDPServer


@pytest.fixture
def udp_servers():
    """Factory for fake UDP peers, stopped after the test."""
    servers: list[FakeUDPServer] = []

    def create(handler, **kwargs) -> FakeUDPServer:
        server = FakeUDPServer(handler, **kwargs).start()
        servers.append(server)
        return server

    yield create

    for server in servers:
        server.stop()
