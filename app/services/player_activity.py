import asyncio
import logging
import random
from typing import Optional

from app.services.server_registry import ServerRegistry

logger = logging.getLogger(__name__)


class PlayerActivitySimulator:
    """Random +/-1 player drift on online servers, once per tick."""

    def __init__(self, registry: ServerRegistry, interval: float = 30.0, rng: Optional[random.Random] = None):
        self.registry = registry
        self.interval = interval
        self.rng = rng or random.Random()
        self._task: Optional[asyncio.Task] = None

    def tick(self):
        for record in self.registry:
            if not record.is_online:
                continue
            record.set_players(record.current_players + self.rng.choice((-1, 1)))

    async def run(self):
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.tick()
            except Exception:
                logger.exception("Player activity tick failed")

    def start(self):
        if self._task is None:
            self._task = asyncio.create_task(self.run())

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
