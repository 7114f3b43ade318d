"""Data models for parsed server browser responses."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class PacketType(str, Enum):
    """Logical request/response kinds."""
    TOKEN = "token"
    SERVER_LIST = "serverlist"
    SERVER_COUNT = "servercount"
    SERVER_INFO = "serverinfo"


@dataclass(frozen=True)
class Token:
    """Token pair of one handshake.

    client_token is the value we sent in the token request,
    server_token the one the server handed out.
    """
    client_token: bytes
    server_token: bytes


@dataclass
class PlayerInfo:
    """A client connected to a game server."""
    name: str
    clan: str
    country: int = -1
    score: int = 0
    type: int = 0

    @property
    def is_spectator(self) -> bool:
        return bool(self.type & 1)


@dataclass
class ServerInfo:
    """Status information a game server reports about itself."""
    address: str
    version: str = ""
    name: str = ""
    hostname: str = ""
    map: str = ""
    game_type: str = ""
    flags: int = 0
    skill_level: int = 0
    num_players: int = 0
    max_players: int = 0
    num_clients: int = 0
    max_clients: int = 0
    players: list[PlayerInfo] = field(default_factory=list)

    @property
    def has_password(self) -> bool:
        return bool(self.flags & 1)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON serializable dictionary."""
        return asdict(self)

    def __str__(self) -> str:
        return (
            f"{self.name} [{self.game_type}] {self.map} "
            f"({self.num_clients}/{self.max_clients}) - {self.address}"
        )
