import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

BACKENDS = ("local", "aternos", "pterodactyl")


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    panel_backend: str = "local"

    # Local registry
    public_host: str = "localhost"
    base_port: int = 25565
    start_delay: float = 3.0
    restart_delay: float = 5.0
    player_tick_interval: float = 30.0

    # Remote panels
    panel_refresh_interval: float = 30.0
    aternos_username: Optional[str] = None
    aternos_password: Optional[str] = None
    pterodactyl_url: Optional[str] = None
    pterodactyl_api_key: Optional[str] = None
    pterodactyl_max_players: int = 20


def load_settings() -> Settings:
    """
    Builds the settings from environment variables (and a .env file if present).
    """
    load_dotenv()

    backend = os.getenv("PANEL_BACKEND", "local").lower()
    if backend not in BACKENDS:
        raise ValueError(f"Unknown PANEL_BACKEND '{backend}', expected one of {', '.join(BACKENDS)}")

    return Settings(
        host=os.getenv("HOST", "0.0.0.0"),
        port=_get_int("PORT", 3000),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        panel_backend=backend,
        public_host=os.getenv("PUBLIC_HOST", "localhost"),
        base_port=_get_int("BASE_PORT", 25565),
        start_delay=_get_float("START_DELAY", 3.0),
        restart_delay=_get_float("RESTART_DELAY", 5.0),
        player_tick_interval=_get_float("PLAYER_TICK_INTERVAL", 30.0),
        panel_refresh_interval=_get_float("PANEL_REFRESH_INTERVAL", 30.0),
        aternos_username=os.getenv("ATERNOS_USERNAME"),
        aternos_password=os.getenv("ATERNOS_PASSWORD"),
        pterodactyl_url=os.getenv("PTERODACTYL_URL"),
        pterodactyl_api_key=os.getenv("PTERODACTYL_API_KEY"),
        pterodactyl_max_players=_get_int("PTERODACTYL_MAX_PLAYERS", 20),
    )
