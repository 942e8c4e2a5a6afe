import logging
from typing import Any, Dict, List, Tuple

from app.models import ActionResult, ServerRecord
from app.schemas import ServerCreate, ServerView
from app.services.metrics_service import format_uptime
from app.services.panels.base import PanelAdapter
from core.errors import StateConflictError, ValidationError

logger = logging.getLogger(__name__)

ACTIONS = ("start", "stop", "restart")


class ServerController:
    """Turns panel records into API views. Knows nothing about which panel it drives."""

    def __init__(self, panel: PanelAdapter):
        self.panel = panel

    async def get_all_servers(self) -> List[ServerView]:
        servers = await self.panel.list_servers()
        return [await self._to_view(s) for s in servers]

    async def get_server(self, server_id: str) -> ServerView:
        server = await self.panel.get_server(server_id)
        return await self._to_view(server)

    async def create_server(self, data: ServerCreate) -> ServerView:
        spec = {
            "name": data.name,
            "version": data.version,
            "runtime_type": data.server_type,
            "modloader_version": data.modloader_version,
            "gamemode": data.gamemode,
            "plan": data.plan,
            "description": data.description,
        }
        server = await self.panel.create_server(spec)
        return await self._to_view(server)

    async def delete_server(self, server_id: str):
        await self.panel.delete_server(server_id)

    async def control_server(self, server_id: str, action: str) -> Tuple[str, ServerView]:
        """
        Runs start/stop/restart. A no-op (already online / already offline)
        raises StateConflictError carrying the unchanged server.
        """
        if action not in ACTIONS:
            raise ValidationError(f"Invalid action '{action}'")

        result: ActionResult = await getattr(self.panel, action)(server_id)
        view = await self._to_view(result.server)
        if not result.success:
            raise StateConflictError(result.message, server=view.model_dump(by_alias=True, mode="json"))
        return result.message, view

    async def get_public_status(self, address: str) -> Dict[str, Any]:
        status = await self.panel.find_by_address(address)
        return status.to_dict()

    async def _to_view(self, server: ServerRecord) -> ServerView:
        metrics = await self.panel.get_resource_usage(server.id)
        spec = server.plan_spec
        return ServerView(
            id=server.id,
            name=server.name,
            version=server.version,
            type=server.runtime_type.value,
            modloader=server.modloader_version,
            gamemode=server.gamemode,
            plan=server.plan,
            ram=spec.ram,
            cpu_limit=spec.cpu_limit,
            max_players=spec.max_players,
            current_players=server.current_players,
            status=server.status.value,
            ip=server.address.host,
            port=server.address.port,
            address=str(server.address),
            description=server.description,
            storage=spec.storage,
            created_at=server.created_at,
            started_at=server.started_at,
            uptime=metrics.uptime,
            uptime_formatted=format_uptime(metrics.uptime),
            cpu_usage=metrics.cpu_usage,
            cpu_percent=metrics.cpu_percent,
            ram_usage=metrics.ram_usage,
            ram_percent=metrics.ram_percent,
        )
