import random
from typing import Optional

from app.services.panels.aternos import AternosPanel
from app.services.panels.base import PanelAdapter
from app.services.panels.local import LocalPanel
from app.services.panels.pterodactyl import PterodactylPanel
from core.config import Settings


def build_panel(settings: Settings, rng: Optional[random.Random] = None) -> PanelAdapter:
    if settings.panel_backend == "aternos":
        return AternosPanel(
            settings.aternos_username,
            settings.aternos_password,
            refresh_interval=settings.panel_refresh_interval,
            rng=rng,
        )
    if settings.panel_backend == "pterodactyl":
        return PterodactylPanel(
            settings.pterodactyl_url,
            settings.pterodactyl_api_key,
            max_players=settings.pterodactyl_max_players,
            refresh_interval=settings.panel_refresh_interval,
            rng=rng,
        )
    return LocalPanel(settings, rng=rng)
