import logging
from typing import Optional

from app.models import ActionResult, utcnow
from app.services.server_registry import ServerRegistry
from core.plans import ServerStatus
from core.scheduler import SettlementScheduler

logger = logging.getLogger(__name__)

START_DELAY = 3.0
RESTART_DELAY = 5.0


class LifecycleController:
    """
    Start/stop/restart transitions for registry records.

    start and restart leave the record in "starting" and settle it to
    "online" after a fixed delay without blocking the caller. stop goes
    straight to "offline".
    """

    def __init__(
        self,
        registry: ServerRegistry,
        scheduler: Optional[SettlementScheduler] = None,
        start_delay: float = START_DELAY,
        restart_delay: float = RESTART_DELAY,
    ):
        self.registry = registry
        self.scheduler = scheduler or SettlementScheduler()
        self.start_delay = start_delay
        self.restart_delay = restart_delay

    def start(self, server_id: str) -> ActionResult:
        record = self.registry.get(server_id)
        if record.status == ServerStatus.ONLINE:
            return ActionResult(False, "Server is already online", record)

        if self.scheduler.is_pending(server_id):
            logger.info(f"Server {server_id} already starting, settlement re-armed")
        record.status = ServerStatus.STARTING
        record.started_at = utcnow()
        self.scheduler.schedule(server_id, self.start_delay, lambda: self._settle(server_id))
        logger.info(f"Starting server {server_id} (online in {self.start_delay}s)")
        return ActionResult(True, "Server is starting", record)

    def stop(self, server_id: str) -> ActionResult:
        record = self.registry.get(server_id)
        if record.status == ServerStatus.OFFLINE:
            return ActionResult(False, "Server is already offline", record)

        self.scheduler.cancel(server_id)
        record.status = ServerStatus.OFFLINE
        record.current_players = 0
        record.started_at = None
        logger.info(f"Stopped server {server_id}")
        return ActionResult(True, "Server stopped", record)

    def restart(self, server_id: str) -> ActionResult:
        record = self.registry.get(server_id)
        if self.scheduler.is_pending(server_id):
            logger.info(f"Server {server_id} restarted before settling, settlement re-armed")

        record.status = ServerStatus.STARTING
        record.current_players = 0
        record.started_at = utcnow()
        self.scheduler.schedule(server_id, self.restart_delay, lambda: self._settle(server_id))
        logger.info(f"Restarting server {server_id} (online in {self.restart_delay}s)")
        return ActionResult(True, "Server is restarting", record)

    def forget(self, server_id: str):
        """Drops any pending settlement for a record that is going away."""
        self.scheduler.cancel(server_id)

    def _settle(self, server_id: str):
        if server_id not in self.registry:
            logger.debug(f"Settlement for deleted server {server_id} ignored")
            return
        record = self.registry.get(server_id)
        if record.status != ServerStatus.STARTING:
            return
        record.status = ServerStatus.ONLINE
        logger.info(f"Server {server_id} is online")
