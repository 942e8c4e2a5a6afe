"""
Tests for the Aternos panel adapter, against a fake python-aternos client
"""
import random
from types import SimpleNamespace

import pytest
import pytest_asyncio

from app.services.panels.aternos import AternosPanel, map_status
from core.errors import UnsupportedOperationError, UpstreamError, ValidationError
from core.plans import ATERNOS_PLAN, RuntimeType, ServerStatus


class FakeServer:
    def __init__(self, servid, status="offline", software="Paper", players=0):
        self.servid = servid
        self.subdomain = f"srv{servid}"
        self.domain = f"srv{servid}.aternos.me"
        self.port = 25565
        self.software = software
        self.version = "1.21"
        self.motd = "Hello"
        self.slots = 20
        self.players_count = players
        self.status = status
        self.calls = []

    def fetch(self):
        self.calls.append("fetch")

    def start(self):
        self.calls.append("start")
        self.status = "starting"

    def stop(self):
        self.calls.append("stop")
        self.status = "stopping"

    def restart(self):
        self.calls.append("restart")


def fake_factory(servers):
    def factory(username, password):
        return SimpleNamespace(account=SimpleNamespace(list_servers=lambda: servers))
    return factory


@pytest.fixture
def servers():
    return [FakeServer("a1", status="online", software="Forge", players=3), FakeServer("b2")]


@pytest_asyncio.fixture
async def panel(servers):
    panel = AternosPanel("user", "pass", refresh_interval=0, client_factory=fake_factory(servers), rng=random.Random(0))
    await panel.connect()
    return panel


@pytest.mark.parametrize("raw,expected", [
    ("online", ServerStatus.ONLINE),
    ("loading", ServerStatus.STARTING),
    ("preparing", ServerStatus.STARTING),
    ("saving", ServerStatus.STOPPING),
    ("crashed", ServerStatus.OFFLINE),
    (None, ServerStatus.OFFLINE),
])
def test_map_status(raw, expected):
    assert map_status(raw) == expected


class TestConnection:
    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        panel = AternosPanel(None, None, client_factory=fake_factory([]))
        await panel.connect()

        assert panel.connected is False
        with pytest.raises(UpstreamError):
            await panel.get_server("a1")

    @pytest.mark.asyncio
    async def test_login_failure_is_logged_not_raised(self):
        def failing_factory(username, password):
            raise RuntimeError("bad credentials")

        panel = AternosPanel("user", "pass", client_factory=failing_factory)
        await panel.connect()

        assert panel.connected is False

    @pytest.mark.asyncio
    async def test_connect_loads_servers(self, panel):
        assert panel.connected is True
        assert panel.server_count == 2


class TestRecords:
    @pytest.mark.asyncio
    async def test_list_servers(self, panel):
        records = await panel.list_servers()

        assert [r.id for r in records] == ["a1", "b2"]
        forge = records[0]
        assert forge.runtime_type == RuntimeType.FORGE
        assert forge.modloader_version == "forge-1.21"
        assert forge.plan == ATERNOS_PLAN
        assert forge.plan_spec.ram == 2
        assert forge.status == ServerStatus.ONLINE
        assert forge.current_players == 3
        assert forge.started_at is not None
        assert str(forge.address) == "srva1.aternos.me:25565"
        assert records[1].started_at is None

    @pytest.mark.asyncio
    async def test_usage_simulated_on_free_tier(self, panel):
        online = await panel.get_resource_usage("a1")
        offline = await panel.get_resource_usage("b2")

        assert 1 <= online.cpu_usage <= 3
        assert 0.3 <= online.ram_usage <= 1.9
        assert offline.cpu_usage == 0

    @pytest.mark.asyncio
    async def test_create_assigns_first_server(self, panel):
        record = await panel.create_server({"name": "ignored"})
        assert record.id == "a1"

    @pytest.mark.asyncio
    async def test_create_without_servers(self):
        panel = AternosPanel("user", "pass", refresh_interval=0, client_factory=fake_factory([]))
        await panel.connect()

        with pytest.raises(ValidationError):
            await panel.create_server({})

    @pytest.mark.asyncio
    async def test_delete_unsupported(self, panel):
        with pytest.raises(UnsupportedOperationError):
            await panel.delete_server("a1")


class TestActions:
    @pytest.mark.asyncio
    async def test_start_online_is_noop(self, panel, servers):
        result = await panel.start("a1")

        assert result.success is False
        assert "start" not in servers[0].calls

    @pytest.mark.asyncio
    async def test_start_offline(self, panel, servers):
        result = await panel.start("b2")

        assert result.success is True
        assert result.server.status == ServerStatus.STARTING
        assert "start" in servers[1].calls

    @pytest.mark.asyncio
    async def test_stop_offline_is_noop(self, panel):
        result = await panel.stop("b2")
        assert result.success is False

    @pytest.mark.asyncio
    async def test_stop_online(self, panel, servers):
        result = await panel.stop("a1")

        assert result.success is True
        assert "stop" in servers[0].calls

    @pytest.mark.asyncio
    async def test_restart(self, panel, servers):
        result = await panel.restart("b2")

        assert result.success is True
        assert result.server.status == ServerStatus.STARTING
        assert servers[1].calls[-2:] == ["fetch", "restart"]

    @pytest.mark.asyncio
    async def test_restart_online_resets_players(self, panel, servers):
        result = await panel.restart("a1")

        assert result.server.status == ServerStatus.STARTING
        assert result.server.current_players == 0
        assert result.server.started_at is None

    @pytest.mark.asyncio
    async def test_upstream_failure(self, panel, servers):
        def broken():
            raise ConnectionError("aternos down")
        servers[1].start = broken

        with pytest.raises(UpstreamError) as exc_info:
            await panel.start("b2")
        assert exc_info.value.status_code == 500


class TestStatus:
    @pytest.mark.asyncio
    async def test_status_by_domain(self, panel):
        online = await panel.find_by_address("srva1.aternos.me")
        offline = await panel.find_by_address("srvb2.aternos.me:25565")
        missing = await panel.find_by_address("other.aternos.me")

        assert online.status == "online"
        assert online.server["currentPlayers"] == 3
        assert offline.status == "offline"
        assert missing.status == "offline"

    @pytest.mark.asyncio
    async def test_status_when_disconnected(self):
        panel = AternosPanel(None, None)

        status = await panel.find_by_address("srva1.aternos.me")

        assert status.to_dict() == {"status": "offline", "message": "Service unavailable"}
