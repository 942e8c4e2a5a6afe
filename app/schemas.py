from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ServerCreate(CamelModel):
    # Required fields are checked by the registry so the error message can list them all
    name: Optional[str] = None
    version: Optional[str] = None
    server_type: Optional[str] = None
    modloader_version: Optional[str] = None
    gamemode: Optional[str] = None
    plan: Optional[str] = None
    description: Optional[str] = None


class ServerView(CamelModel):
    id: str
    name: str
    version: str
    type: str
    modloader: Optional[str] = None
    gamemode: str
    plan: str
    ram: float
    cpu_limit: int
    max_players: int
    current_players: int
    status: str
    ip: str
    port: int
    address: str
    description: str
    storage: float
    created_at: datetime
    started_at: Optional[datetime] = None
    # Runtime metrics, recomputed on every read
    uptime: int = 0
    uptime_formatted: str = "0s"
    cpu_usage: float = 0
    cpu_percent: int = 0
    ram_usage: float = 0.0
    ram_percent: int = 0


class ServerListResponse(CamelModel):
    success: bool = True
    servers: List[ServerView]


class ServerResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
    server: ServerView


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class HealthResponse(CamelModel):
    success: bool = True
    message: str
    backend: str
    connected: bool
    servers_count: int
    timestamp: datetime
