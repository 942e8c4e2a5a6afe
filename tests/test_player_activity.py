"""
Tests for the periodic player count drift
"""
import asyncio
import random

import pytest

from app.services.player_activity import PlayerActivitySimulator
from core.plans import ServerStatus


def test_tick_keeps_players_in_bounds(registry, server_spec):
    record = registry.create({**server_spec, "plan": "Basique"})
    record.status = ServerStatus.ONLINE
    simulator = PlayerActivitySimulator(registry, rng=random.Random(11))

    for _ in range(2000):
        simulator.tick()
        assert 0 <= record.current_players <= record.max_players


def test_tick_moves_by_one(registry, server_spec):
    record = registry.create(server_spec)
    record.status = ServerStatus.ONLINE
    record.set_players(10)
    simulator = PlayerActivitySimulator(registry, rng=random.Random(2))

    simulator.tick()

    assert record.current_players in (9, 11)


def test_tick_ignores_offline_servers(registry, server_spec):
    record = registry.create(server_spec)
    simulator = PlayerActivitySimulator(registry, rng=random.Random(2))

    for _ in range(20):
        simulator.tick()

    assert record.current_players == 0


@pytest.mark.asyncio
async def test_background_task_ticks_and_stops(registry, server_spec):
    record = registry.create(server_spec)
    record.status = ServerStatus.ONLINE
    record.set_players(10)
    simulator = PlayerActivitySimulator(registry, interval=0.01, rng=random.Random(4))

    simulator.start()
    await asyncio.sleep(0.1)
    await simulator.stop()

    assert 0 <= record.current_players <= record.max_players
    assert simulator._task is None
