"""
Pterodactyl-backed panel, driven through the panel's client API.
"""
import datetime
import logging
import random
import time
from typing import Any, Dict, List, Mapping, Optional, Tuple

import requests
from starlette.concurrency import run_in_threadpool

from app.models import ActionResult, Address, DEFAULT_GAME_PORT, Metrics, PublicStatus, ServerRecord, utcnow
from app.services.metrics_service import percent_of
from app.services.panels.base import RefreshingPanel
from app.services.status_service import public_status
from core.errors import NotFoundError, UnsupportedOperationError, UpstreamError
from core.plans import PlanSpec, RuntimeType, ServerStatus

logger = logging.getLogger(__name__)

STATE_MAP = {
    "running": ServerStatus.ONLINE,
    "starting": ServerStatus.STARTING,
    "stopping": ServerStatus.STOPPING,
    "offline": ServerStatus.OFFLINE,
}

VERSION_VARIABLES = ("MINECRAFT_VERSION", "MC_VERSION", "VERSION")
GB = 1024 ** 3
# Seconds a resources snapshot taken for a record may be reused for its metrics
RESOURCES_TTL = 2.0


class PterodactylClient:
    """Thin wrapper over the Pterodactyl client API (/api/client)."""

    def __init__(self, base_url: str, api_key: str, timeout: float = 10):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Accept": "Application/vnd.pterodactyl.v1+json",
            "Content-Type": "application/json",
        })

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}/api/client{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            raise UpstreamError(f"Could not reach Pterodactyl panel: {e}")
        except requests.exceptions.RequestException as e:
            raise UpstreamError(f"Pterodactyl request failed: {e}", status_code=500)

        if response.status_code in (401, 403):
            raise UpstreamError("Pterodactyl rejected the API key")
        if response.status_code == 404:
            raise NotFoundError(f"Server not found on panel ({path})")
        if response.status_code >= 400:
            raise UpstreamError(f"Pterodactyl returned HTTP {response.status_code}", status_code=500)

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    def list_servers(self) -> List[Dict[str, Any]]:
        servers = []
        page = 1
        while True:
            data = self._request("GET", "", params={"page": page})
            servers.extend(item["attributes"] for item in data.get("data", []))
            pagination = data.get("meta", {}).get("pagination", {})
            if page >= pagination.get("total_pages", 1):
                return servers
            page += 1

    def get_server(self, identifier: str) -> Dict[str, Any]:
        return self._request("GET", f"/servers/{identifier}")["attributes"]

    def get_resources(self, identifier: str) -> Dict[str, Any]:
        return self._request("GET", f"/servers/{identifier}/resources")["attributes"]

    def get_startup_variables(self, identifier: str) -> Dict[str, str]:
        data = self._request("GET", f"/servers/{identifier}/startup")
        return {
            item["attributes"]["env_variable"]: item["attributes"].get("server_value")
            for item in data.get("data", [])
        }

    def send_power(self, identifier: str, signal: str):
        self._request("POST", f"/servers/{identifier}/power", json={"signal": signal})


def default_allocation(attributes: Dict[str, Any]) -> Optional[Address]:
    allocations = attributes.get("relationships", {}).get("allocations", {}).get("data", [])
    if not allocations:
        return None
    chosen = next((a["attributes"] for a in allocations if a["attributes"].get("is_default")), allocations[0]["attributes"])
    return Address(host=chosen.get("ip_alias") or chosen.get("ip"), port=chosen.get("port") or DEFAULT_GAME_PORT)


class PterodactylPanel(RefreshingPanel):
    name = "pterodactyl"

    def __init__(
        self,
        base_url: Optional[str],
        api_key: Optional[str],
        max_players: int = 20,
        refresh_interval: float = 30.0,
        client: Optional[PterodactylClient] = None,
        rng: Optional[random.Random] = None,
    ):
        super().__init__(refresh_interval)
        self.rng = rng or random.Random()
        self.client = client
        if self.client is None and base_url and api_key:
            self.client = PterodactylClient(base_url, api_key)
        self.max_players = max_players
        self._servers: Dict[str, Dict[str, Any]] = {}
        self._variables: Dict[str, Dict[str, str]] = {}
        self._recent_resources: Dict[str, Tuple[float, Dict[str, Any]]] = {}
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self):
        if self.client is None:
            logger.error("Pterodactyl panel not configured (PTERODACTYL_URL / PTERODACTYL_API_KEY)")
            return
        logger.info(f"Connecting to Pterodactyl panel at {self.client.base_url}...")
        try:
            await self._reload()
        except Exception as e:
            logger.error(f"Pterodactyl connection failed: {e}")
            return
        self._connected = True
        logger.info(f"Connected to Pterodactyl, {len(self._servers)} server(s) loaded")
        self.start_refreshing()

    async def refresh(self):
        self._require_connection()
        await self._reload()

    async def _reload(self):
        servers = await run_in_threadpool(self.client.list_servers)
        self._servers = {s["identifier"]: s for s in servers}

    def _require_connection(self):
        if not self.connected:
            raise UpstreamError("Not connected to Pterodactyl")

    async def _load(self, ref: str, attributes: Optional[Dict[str, Any]] = None) -> ServerRecord:
        """
        Builds a record from the server attributes (fetched unless given),
        its live resources and its cached startup variables.
        """
        self._require_connection()
        if attributes is None:
            attributes = await run_in_threadpool(self.client.get_server, ref)
            self._servers[ref] = attributes
        resources = await run_in_threadpool(self.client.get_resources, ref)
        self._recent_resources[ref] = (time.monotonic(), resources)
        if ref not in self._variables:
            self._variables[ref] = await run_in_threadpool(self.client.get_startup_variables, ref)
        return self._to_record(attributes, resources, self._variables[ref])

    async def _resources(self, ref: str) -> Dict[str, Any]:
        # Reuse the snapshot a record was just built from, once
        taken_at, resources = self._recent_resources.pop(ref, (None, None))
        if taken_at is not None and time.monotonic() - taken_at <= RESOURCES_TTL:
            return resources
        return await run_in_threadpool(self.client.get_resources, ref)

    def _forget(self, ref: str):
        self._servers.pop(ref, None)
        self._variables.pop(ref, None)
        self._recent_resources.pop(ref, None)

    def _to_record(self, attributes: Dict[str, Any], resources: Dict[str, Any], variables: Dict[str, str]) -> ServerRecord:
        limits = attributes.get("limits", {})
        # 0 means unlimited on Pterodactyl
        plan_spec = PlanSpec(
            ram=round((limits.get("memory") or 0) / 1024, 1),
            cpu_limit=limits.get("cpu") or 100,
            max_players=self.max_players,
            storage=round((limits.get("disk") or 0) / 1024, 1),
        )
        status = STATE_MAP.get(resources.get("current_state"), ServerStatus.OFFLINE)
        runtime_type = RuntimeType.guess(" ".join([
            attributes.get("name", ""),
            attributes.get("invocation", ""),
            variables.get("SERVER_JARFILE") or "",
        ]))
        version = next((variables[v] for v in VERSION_VARIABLES if variables.get(v)), "Unknown")

        started_at = None
        uptime_ms = resources.get("resources", {}).get("uptime") or 0
        if status == ServerStatus.ONLINE and uptime_ms:
            started_at = utcnow() - datetime.timedelta(milliseconds=uptime_ms)

        return ServerRecord(
            id=attributes["identifier"],
            name=attributes.get("name", attributes["identifier"]),
            version=version,
            runtime_type=runtime_type,
            plan=f"Pterodactyl ({plan_spec.ram:g}GB)",
            plan_spec=plan_spec,
            address=default_allocation(attributes) or Address(host="unknown", port=DEFAULT_GAME_PORT),
            description=attributes.get("description") or "",
            status=status,
            started_at=started_at,
        )

    async def list_servers(self) -> List[ServerRecord]:
        await self.refresh()
        records = []
        for ref, attributes in list(self._servers.items()):
            try:
                records.append(await self._load(ref, attributes))
            except NotFoundError:
                # Deleted on the panel since the listing
                logger.info(f"Pterodactyl server {ref} vanished, skipping")
                self._forget(ref)
        return records

    async def get_server(self, ref: str) -> ServerRecord:
        return await self._load(ref)

    async def create_server(self, data: Mapping[str, Any]) -> ServerRecord:
        raise UnsupportedOperationError("Servers must be created on the Pterodactyl panel")

    async def delete_server(self, ref: str):
        raise UnsupportedOperationError("Servers must be deleted on the Pterodactyl panel")

    async def start(self, ref: str) -> ActionResult:
        record = await self._load(ref)
        if record.status == ServerStatus.ONLINE:
            return ActionResult(False, "Server is already online", record)
        await run_in_threadpool(self.client.send_power, ref, "start")
        logger.info(f"Start signal sent to Pterodactyl server {ref}")
        record.status = ServerStatus.STARTING
        return ActionResult(True, "Server is starting", record)

    async def stop(self, ref: str) -> ActionResult:
        record = await self._load(ref)
        if record.status == ServerStatus.OFFLINE:
            return ActionResult(False, "Server is already offline", record)
        await run_in_threadpool(self.client.send_power, ref, "stop")
        logger.info(f"Stop signal sent to Pterodactyl server {ref}")
        record.status = ServerStatus.STOPPING
        record.started_at = None
        return ActionResult(True, "Server is stopping", record)

    async def restart(self, ref: str) -> ActionResult:
        record = await self._load(ref)
        await run_in_threadpool(self.client.send_power, ref, "restart")
        logger.info(f"Restart signal sent to Pterodactyl server {ref}")
        record.status = ServerStatus.STARTING
        return ActionResult(True, "Server is restarting", record)

    async def get_resource_usage(self, ref: str) -> Metrics:
        self._require_connection()
        attributes = self._servers.get(ref) or await run_in_threadpool(self.client.get_server, ref)
        resources = await self._resources(ref)
        if resources.get("current_state") != "running":
            return Metrics()

        limits = attributes.get("limits", {})
        usage = resources.get("resources", {})
        cpu = round(usage.get("cpu_absolute") or 0, 1)
        ram = round((usage.get("memory_bytes") or 0) / GB, 1)
        return Metrics(
            cpu_usage=cpu,
            cpu_percent=percent_of(cpu, limits.get("cpu") or 100),
            ram_usage=ram,
            ram_percent=percent_of(ram, (limits.get("memory") or 0) / 1024),
            uptime=int((usage.get("uptime") or 0) // 1000),
        )

    async def find_by_address(self, address: str) -> PublicStatus:
        if not self.connected:
            return PublicStatus(status="offline", message="Service unavailable")

        wanted = Address.parse(address)
        for ref, attributes in self._servers.items():
            if default_allocation(attributes) == wanted:
                return public_status(await self._load(ref), self.rng)
        return public_status(None, self.rng)
