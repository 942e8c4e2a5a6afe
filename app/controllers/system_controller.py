from app.models import utcnow
from app.services.panels.base import PanelAdapter

HEALTH_MESSAGES = {
    "local": "API running (in-memory servers)",
    "aternos": "API running (Aternos)",
    "pterodactyl": "API running (Pterodactyl)",
}


class SystemController:
    def __init__(self, panel: PanelAdapter):
        self.panel = panel

    async def get_health(self):
        """Liveness plus the state of the backing panel. Never calls the panel."""
        return {
            "success": True,
            "message": HEALTH_MESSAGES.get(self.panel.name, "API running"),
            "backend": self.panel.name,
            "connected": self.panel.connected,
            "servers_count": self.panel.server_count,
            "timestamp": utcnow(),
        }
