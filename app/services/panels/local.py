import random
from typing import Any, List, Mapping, Optional

from app.models import ActionResult, Metrics, PublicStatus, ServerRecord
from app.services.lifecycle_service import LifecycleController
from app.services.metrics_service import MetricsSimulator
from app.services.panels.base import PanelAdapter
from app.services.player_activity import PlayerActivitySimulator
from app.services.server_registry import ServerRegistry
from app.services.status_service import StatusResolver
from core.config import Settings


class LocalPanel(PanelAdapter):
    """Servers simulated entirely in memory."""

    name = "local"

    def __init__(self, settings: Optional[Settings] = None, rng: Optional[random.Random] = None):
        settings = settings or Settings()
        rng = rng or random.Random()
        self.registry = ServerRegistry(public_host=settings.public_host, base_port=settings.base_port)
        self.lifecycle = LifecycleController(
            self.registry,
            start_delay=settings.start_delay,
            restart_delay=settings.restart_delay,
        )
        self.metrics = MetricsSimulator(rng)
        self.status_resolver = StatusResolver(self.registry, rng)
        self.player_activity = PlayerActivitySimulator(self.registry, settings.player_tick_interval, rng)

    @property
    def server_count(self) -> int:
        return len(self.registry)

    async def connect(self):
        if self.player_activity.interval > 0:
            self.player_activity.start()

    async def close(self):
        await self.player_activity.stop()
        self.lifecycle.scheduler.cancel_all()

    async def list_servers(self) -> List[ServerRecord]:
        return self.registry.list()

    async def get_server(self, ref: str) -> ServerRecord:
        return self.registry.get(ref)

    async def create_server(self, data: Mapping[str, Any]) -> ServerRecord:
        return self.registry.create(data)

    async def delete_server(self, ref: str):
        self.registry.delete(ref)
        self.lifecycle.forget(ref)

    async def start(self, ref: str) -> ActionResult:
        return self.lifecycle.start(ref)

    async def stop(self, ref: str) -> ActionResult:
        return self.lifecycle.stop(ref)

    async def restart(self, ref: str) -> ActionResult:
        return self.lifecycle.restart(ref)

    async def get_resource_usage(self, ref: str) -> Metrics:
        return self.metrics.simulate(self.registry.get(ref))

    async def find_by_address(self, address: str) -> PublicStatus:
        return self.status_resolver.resolve(address)
