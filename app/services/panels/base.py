import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from app.models import ActionResult, Metrics, PublicStatus, ServerRecord

logger = logging.getLogger(__name__)


class PanelAdapter(ABC):
    """
    Lifecycle and metrics operations against whatever backs the servers.

    The HTTP layer only talks to this interface; it never knows whether the
    servers live in memory or on a remote hosting panel.
    """

    name = "panel"

    @property
    def connected(self) -> bool:
        return True

    @property
    def server_count(self) -> int:
        """Servers currently known, without calling the panel."""
        return 0

    async def connect(self):
        """Log in / warm caches. Failures are logged, not raised."""

    async def close(self):
        """Stops background work started by connect()."""

    @abstractmethod
    async def list_servers(self) -> List[ServerRecord]:
        ...

    @abstractmethod
    async def get_server(self, ref: str) -> ServerRecord:
        ...

    @abstractmethod
    async def create_server(self, data: Mapping[str, Any]) -> ServerRecord:
        ...

    @abstractmethod
    async def delete_server(self, ref: str):
        ...

    @abstractmethod
    async def start(self, ref: str) -> ActionResult:
        ...

    @abstractmethod
    async def stop(self, ref: str) -> ActionResult:
        ...

    @abstractmethod
    async def restart(self, ref: str) -> ActionResult:
        ...

    @abstractmethod
    async def get_resource_usage(self, ref: str) -> Metrics:
        ...

    @abstractmethod
    async def find_by_address(self, address: str) -> PublicStatus:
        ...


class RefreshingPanel(PanelAdapter):
    """Remote panel whose server list is refreshed periodically."""

    def __init__(self, refresh_interval: float = 30.0):
        self.refresh_interval = refresh_interval
        self._refresh_task: Optional[asyncio.Task] = None
        self._servers: Dict[str, Any] = {}

    @property
    def server_count(self) -> int:
        return len(self._servers)

    @abstractmethod
    async def refresh(self):
        ...

    def start_refreshing(self):
        if self._refresh_task is None and self.refresh_interval > 0:
            self._refresh_task = asyncio.create_task(self._refresh_loop())

    async def _refresh_loop(self):
        while True:
            await asyncio.sleep(self.refresh_interval)
            if not self.connected:
                continue
            try:
                await self.refresh()
            except Exception as e:
                logger.warning(f"{self.name}: periodic refresh failed: {e}")

    async def close(self):
        if self._refresh_task is None:
            return
        self._refresh_task.cancel()
        try:
            await self._refresh_task
        except asyncio.CancelledError:
            pass
        self._refresh_task = None
