"""UDP transport with read deadlines.

The exchange loop only needs a duplex byte channel whose reads give up
at a settable point in time. UDPConnection provides that on top of a
connected datagram socket.
"""

import logging
import socket
import time
from typing import Optional, Protocol, Tuple, Union

logger = logging.getLogger(__name__)

Address = Union[str, Tuple[str, int]]


class ReadWriteDeadliner(Protocol):
    """Duplex datagram channel with a read deadline."""

    def write(self, data: bytes) -> int:
        ...

    def read(self, size: int) -> bytes:
        ...

    def set_read_deadline(self, deadline: Optional[float]) -> None:
        """Set the time.monotonic() timestamp at which reads time out."""
        ...


def split_address(address: Address) -> Tuple[str, int]:
    """Split "host:port" or "[ipv6]:port" into host and port.

    Raises:
        ValueError: If the address has no valid port.
    """
    if isinstance(address, tuple):
        return address[0], int(address[1])

    host, sep, port = address.rpartition(":")
    if not sep or not host:
        raise ValueError(f"address without port: {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        return host, int(port)
    except ValueError:
        raise ValueError(f"invalid port in address: {address!r}") from None


class UDPConnection:
    """Connected UDP socket implementing ReadWriteDeadliner."""

    def __init__(self, address: Address):
        """Create and connect the socket.

        Args:
            address: "host:port", "[ipv6]:port" or a (host, port) tuple.

        Raises:
            OSError: If the address cannot be resolved or connected.
        """
        host, port = split_address(address)
        family, type_, proto, _, sockaddr = socket.getaddrinfo(
            host, port, type=socket.SOCK_DGRAM
        )[0]

        self.address = sockaddr
        self._deadline: Optional[float] = None
        self._sock: Optional[socket.socket] = socket.socket(family, type_, proto)
        try:
            self._sock.connect(sockaddr)
        except OSError:
            self.close()
            raise

    @property
    def remote_address(self) -> str:
        host, port = self.address[0], self.address[1]
        if ":" in host:
            return f"[{host}]:{port}"
        return f"{host}:{port}"

    def set_read_buffer(self, size: int) -> None:
        self._setsockopt(socket.SO_RCVBUF, size)

    def set_write_buffer(self, size: int) -> None:
        self._setsockopt(socket.SO_SNDBUF, size)

    def _setsockopt(self, option: int, size: int) -> None:
        try:
            self._socket.setsockopt(socket.SOL_SOCKET, option, max(1, int(size)))
        except OSError as e:
            # The OS may cap buffer sizes, the default still works
            logger.debug("could not resize socket buffer of %s: %s", self.remote_address, e)

    def set_read_deadline(self, deadline: Optional[float]) -> None:
        self._deadline = deadline

    def write(self, data: bytes) -> int:
        return self._socket.send(data)

    def read(self, size: int) -> bytes:
        """Receive one datagram of at most size bytes.

        Raises:
            socket.timeout: If the read deadline passes first.
        """
        sock = self._socket
        if self._deadline is None:
            sock.settimeout(None)
        else:
            remaining = self._deadline - time.monotonic()
            if remaining <= 0:
                raise socket.timeout("read deadline exceeded")
            sock.settimeout(remaining)
        return sock.recv(size)

    @property
    def _socket(self) -> socket.socket:
        if self._sock is None:
            raise OSError("connection is closed")
        return self._sock

    def close(self) -> None:
        """Close the UDP socket."""
        if self._sock:
            try:
                self._sock.close()
            except OSError:
                pass
            self._sock = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
