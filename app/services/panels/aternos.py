"""
Aternos-backed panel.

Aternos has no public API; servers are driven through the python-aternos
client. Servers cannot be provisioned from here, so "create" hands out a
server that was already created on aternos.org.
"""
import dataclasses
import datetime
import logging
import random
from typing import Any, Callable, Dict, List, Mapping, Optional

from starlette.concurrency import run_in_threadpool

from app.models import ActionResult, Address, DEFAULT_GAME_PORT, Metrics, PublicStatus, ServerRecord, utcnow
from app.services.metrics_service import MetricsSimulator
from app.services.panels.base import RefreshingPanel
from app.services.status_service import public_status
from core.errors import NotFoundError, UnsupportedOperationError, UpstreamError, ValidationError
from core.plans import ATERNOS_PLAN, ATERNOS_PLAN_SPEC, RuntimeType, ServerStatus

logger = logging.getLogger(__name__)

STARTING_STATES = {"loading", "preparing", "starting"}
STOPPING_STATES = {"saving", "stopping"}


def map_status(aternos_status: Optional[str]) -> ServerStatus:
    status = (aternos_status or "offline").lower()
    if status == "online":
        return ServerStatus.ONLINE
    if status in STARTING_STATES:
        return ServerStatus.STARTING
    if status in STOPPING_STATES:
        return ServerStatus.STOPPING
    return ServerStatus.OFFLINE


def default_client_factory(username: str, password: str):
    from python_aternos import Client

    client = Client()
    client.login(username, password)
    return client


class AternosPanel(RefreshingPanel):
    name = "aternos"

    def __init__(
        self,
        username: Optional[str],
        password: Optional[str],
        refresh_interval: float = 30.0,
        client_factory: Callable[[str, str], Any] = default_client_factory,
        rng: Optional[random.Random] = None,
    ):
        super().__init__(refresh_interval)
        self.username = username
        self.password = password
        self.client_factory = client_factory
        self.client = None
        self.rng = rng or random.Random()
        self.metrics = MetricsSimulator(self.rng)
        self._servers: Dict[str, Any] = {}
        self._online_since: Dict[str, datetime.datetime] = {}

    @property
    def connected(self) -> bool:
        return self.client is not None

    async def connect(self):
        if not self.username or not self.password:
            logger.error("Aternos credentials missing (ATERNOS_USERNAME / ATERNOS_PASSWORD)")
            return
        logger.info("Connecting to Aternos...")
        try:
            self.client = await run_in_threadpool(self.client_factory, self.username, self.password)
            await self.refresh()
        except Exception as e:
            logger.error(f"Aternos connection failed: {e}")
            self.client = None
            return
        logger.info(f"Connected to Aternos, {len(self._servers)} server(s) loaded")
        self.start_refreshing()

    async def refresh(self):
        self._require_connection()
        try:
            servers = await run_in_threadpool(self._fetch_all)
        except Exception as e:
            raise UpstreamError(f"Aternos request failed: {e}", status_code=500)
        self._servers = {str(s.servid): s for s in servers}
        for ref, server in self._servers.items():
            self._track_uptime(ref, server)

    def _fetch_all(self) -> List[Any]:
        servers = self.client.account.list_servers()
        for server in servers:
            server.fetch()
        return servers

    def _track_uptime(self, ref: str, server: Any):
        if map_status(server.status) == ServerStatus.ONLINE:
            self._online_since.setdefault(ref, utcnow())
        else:
            self._online_since.pop(ref, None)

    def _require_connection(self):
        if not self.connected:
            raise UpstreamError("Not connected to Aternos")

    def _lookup(self, ref: str) -> Any:
        server = self._servers.get(ref)
        if server is None:
            raise NotFoundError(f"Server {ref} not found")
        return server

    def _to_record(self, ref: str, server: Any) -> ServerRecord:
        runtime_type = RuntimeType.guess(server.software)
        slots = server.slots or ATERNOS_PLAN_SPEC.max_players
        plan_spec = ATERNOS_PLAN_SPEC
        if slots != plan_spec.max_players:
            plan_spec = dataclasses.replace(plan_spec, max_players=slots)

        record = ServerRecord(
            id=ref,
            name=server.subdomain or ref,
            version=server.version or "Unknown",
            runtime_type=runtime_type,
            plan=ATERNOS_PLAN,
            plan_spec=plan_spec,
            address=Address(host=server.domain, port=server.port or DEFAULT_GAME_PORT),
            description=server.motd or "",
            modloader_version=f"{runtime_type.value}-{server.version}" if runtime_type.is_modded else None,
            status=map_status(server.status),
            started_at=self._online_since.get(ref),
        )
        record.set_players(server.players_count or 0)
        return record

    async def _fetch_one(self, ref: str) -> Any:
        self._require_connection()
        server = self._lookup(ref)
        try:
            await run_in_threadpool(server.fetch)
        except Exception as e:
            raise UpstreamError(f"Aternos request failed: {e}", status_code=500)
        self._track_uptime(ref, server)
        return server

    async def list_servers(self) -> List[ServerRecord]:
        await self.refresh()
        return [self._to_record(ref, s) for ref, s in self._servers.items()]

    async def get_server(self, ref: str) -> ServerRecord:
        await self.refresh()
        return self._to_record(ref, self._lookup(ref))

    async def create_server(self, data: Mapping[str, Any]) -> ServerRecord:
        await self.refresh()
        if not self._servers:
            raise ValidationError("No Aternos server available. Create one on aternos.org first.")
        ref, server = next(iter(self._servers.items()))
        logger.info(f"Assigned pre-created Aternos server {ref}")
        return self._to_record(ref, server)

    async def delete_server(self, ref: str):
        raise UnsupportedOperationError("Aternos servers cannot be deleted from this API")

    async def start(self, ref: str) -> ActionResult:
        server = await self._fetch_one(ref)
        if map_status(server.status) == ServerStatus.ONLINE:
            return ActionResult(False, "Server is already online", self._to_record(ref, server))
        logger.info(f"Starting Aternos server {ref}...")
        await self._call(server.start)
        return ActionResult(True, "Server is starting (can take 3-5 minutes)", self._to_record(ref, server))

    async def stop(self, ref: str) -> ActionResult:
        server = await self._fetch_one(ref)
        if map_status(server.status) == ServerStatus.OFFLINE:
            return ActionResult(False, "Server is already offline", self._to_record(ref, server))
        logger.info(f"Stopping Aternos server {ref}...")
        await self._call(server.stop)
        return ActionResult(True, "Server stopped", self._to_record(ref, server))

    async def restart(self, ref: str) -> ActionResult:
        server = await self._fetch_one(ref)
        logger.info(f"Restarting Aternos server {ref}...")
        await self._call(server.restart)
        self._online_since.pop(ref, None)
        record = self._to_record(ref, server)
        record.status = ServerStatus.STARTING
        record.current_players = 0
        return ActionResult(True, "Server is restarting", record)

    async def _call(self, action: Callable[[], Any]):
        try:
            await run_in_threadpool(action)
        except Exception as e:
            raise UpstreamError(f"Aternos request failed: {e}", status_code=500)

    async def get_resource_usage(self, ref: str) -> Metrics:
        # Aternos does not expose usage; simulate against the free tier
        self._require_connection()
        return self.metrics.simulate(self._to_record(ref, self._lookup(ref)))

    async def find_by_address(self, address: str) -> PublicStatus:
        if not self.connected:
            return PublicStatus(status="offline", message="Service unavailable")

        wanted = Address.parse(address)
        port_given = ":" in address
        for ref, server in self._servers.items():
            if server.domain != wanted.host:
                continue
            if port_given and (server.port or DEFAULT_GAME_PORT) != wanted.port:
                continue
            server = await self._fetch_one(ref)
            return public_status(self._to_record(ref, server), self.rng)
        return public_status(None, self.rng)
