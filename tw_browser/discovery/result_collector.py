"""Result collector for concurrent server queries.

Many query threads add results, the results are read once after all of
them have been joined.
"""

import threading

from ..protocol.models import ServerInfo


class ResultCollector:
    """Thread safe collection of server infos, deduplicated by address."""

    def __init__(self):
        self._lock = threading.Lock()
        self._infos: dict[str, ServerInfo] = {}

    def add(self, info: ServerInfo) -> None:
        """Add a server info, replacing an earlier one of the same address."""
        with self._lock:
            self._infos[info.address] = info

    def values(self) -> list[ServerInfo]:
        """All collected server infos."""
        with self._lock:
            return list(self._infos.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._infos)

    def __contains__(self, address: str) -> bool:
        with self._lock:
            return address in self._infos
