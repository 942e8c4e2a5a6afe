import random
from typing import Optional

from app.models import Address, PublicStatus, ServerRecord
from app.services.server_registry import ServerRegistry
from core.plans import ServerStatus

PING_RANGE = (10, 60)  # ms, cosmetic


def public_status(record: Optional[ServerRecord], rng: random.Random) -> PublicStatus:
    """Public-facing view of a record, as shown on a server status page."""
    if record is None:
        return PublicStatus(status="offline", message="Server not found")
    if record.status == ServerStatus.STARTING:
        return PublicStatus(status="starting", message="Server is starting")
    if record.status != ServerStatus.ONLINE:
        return PublicStatus(status="offline", message="Server is offline")

    return PublicStatus(
        status="online",
        server={
            "name": record.name,
            "version": record.version,
            "currentPlayers": record.current_players,
            "maxPlayers": record.max_players,
            "description": record.description,
            "ping": rng.randint(*PING_RANGE),
        },
    )


class StatusResolver:
    def __init__(self, registry: ServerRegistry, rng: Optional[random.Random] = None):
        self.registry = registry
        self.rng = rng or random.Random()

    def resolve(self, address: str) -> PublicStatus:
        record = self.registry.find_by_address(Address.parse(address))
        return public_status(record, self.rng)
