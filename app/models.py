import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from core.plans import PlanSpec, RuntimeType, ServerStatus

DEFAULT_GAME_PORT = 25565


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass(frozen=True)
class Address:
    host: str
    port: int

    @classmethod
    def parse(cls, text: str) -> "Address":
        """'host:port' or bare 'host' (default game port)."""
        text = text.strip()
        host, sep, port = text.rpartition(":")
        if sep and port.isdigit():
            return cls(host=host, port=int(port))
        return cls(host=text, port=DEFAULT_GAME_PORT)

    def __str__(self):
        return f"{self.host}:{self.port}"


@dataclass
class ServerRecord:
    id: str
    name: str
    version: str
    runtime_type: RuntimeType
    plan: str
    plan_spec: PlanSpec
    address: Address
    description: str = ""
    gamemode: str = "survival"
    modloader_version: Optional[str] = None
    status: ServerStatus = ServerStatus.OFFLINE
    current_players: int = 0
    created_at: datetime.datetime = field(default_factory=utcnow)
    started_at: Optional[datetime.datetime] = None

    @property
    def max_players(self) -> int:
        return self.plan_spec.max_players

    @property
    def is_online(self) -> bool:
        return self.status == ServerStatus.ONLINE

    def set_players(self, count: int):
        self.current_players = max(0, min(count, self.max_players))


@dataclass
class Metrics:
    cpu_usage: float = 0
    cpu_percent: int = 0
    ram_usage: float = 0.0
    ram_percent: int = 0
    uptime: int = 0


@dataclass
class ActionResult:
    success: bool
    message: str
    server: ServerRecord


@dataclass
class PublicStatus:
    status: str
    message: Optional[str] = None
    server: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"status": self.status}
        if self.message is not None:
            data["message"] = self.message
        if self.server is not None:
            data["server"] = self.server
        return data
