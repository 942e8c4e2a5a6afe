"""
Pytest configuration and shared fixtures
"""
import random
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Project root holds the app/core/routes packages
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.services.lifecycle_service import LifecycleController
from app.services.panels.local import LocalPanel
from app.services.server_registry import ServerRegistry
from core.config import Settings
from main import create_app

# Short enough to keep the suite fast, long enough to observe "starting"
START_DELAY = 0.2
RESTART_DELAY = 0.3


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def settings():
    return Settings(
        start_delay=START_DELAY,
        restart_delay=RESTART_DELAY,
        player_tick_interval=0,
        panel_refresh_interval=0,
    )


@pytest.fixture
def registry():
    return ServerRegistry()


@pytest.fixture
def lifecycle(registry):
    return LifecycleController(registry, start_delay=START_DELAY, restart_delay=RESTART_DELAY)


@pytest.fixture
def server_spec():
    """Paper server on the Super plan"""
    return {"name": "T", "version": "1.21", "runtime_type": "paper", "plan": "Super"}


@pytest.fixture
def local_panel(settings, rng):
    return LocalPanel(settings, rng=rng)


@pytest.fixture
def client(settings, local_panel):
    app = create_app(settings, panel=local_panel)
    # Context manager keeps one event loop alive so settlements can fire
    with TestClient(app) as test_client:
        yield test_client
