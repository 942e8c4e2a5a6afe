"""
Tests for the Pterodactyl panel adapter and its API client
"""
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
import requests

from app.services.panels.pterodactyl import PterodactylClient, PterodactylPanel, default_allocation
from core.errors import NotFoundError, UnsupportedOperationError, UpstreamError
from core.plans import RuntimeType, ServerStatus


def server_attributes(identifier="abcd1234", name="Forge SMP"):
    return {
        "identifier": identifier,
        "name": name,
        "description": "Modded survival",
        "invocation": "java -Xms128M -Xmx4096M -jar server.jar",
        "limits": {"memory": 4096, "cpu": 200, "disk": 10240},
        "relationships": {
            "allocations": {
                "data": [
                    {"attributes": {"ip": "10.0.0.5", "ip_alias": None, "port": 25570, "is_default": False}},
                    {"attributes": {"ip": "10.0.0.5", "ip_alias": "play.example.com", "port": 25565, "is_default": True}},
                ]
            }
        },
    }


def resources(state="running", cpu=150.0, memory_bytes=2 * 1024 ** 3, uptime_ms=90_000):
    return {
        "current_state": state,
        "resources": {"cpu_absolute": cpu, "memory_bytes": memory_bytes, "uptime": uptime_ms},
    }


@pytest.fixture
def api():
    client = MagicMock(spec=PterodactylClient)
    client.base_url = "https://panel.example.com"
    client.list_servers.return_value = [server_attributes()]
    client.get_server.return_value = server_attributes()
    client.get_resources.return_value = resources()
    client.get_startup_variables.return_value = {"MINECRAFT_VERSION": "1.20.1", "SERVER_JARFILE": "server.jar"}
    return client


@pytest_asyncio.fixture
async def panel(api):
    panel = PterodactylPanel(None, None, max_players=30, refresh_interval=0, client=api)
    await panel.connect()
    return panel


class TestPanel:
    @pytest.mark.asyncio
    async def test_connect_loads_servers(self, panel):
        assert panel.connected is True
        assert panel.server_count == 1

    @pytest.mark.asyncio
    async def test_unconfigured_panel_stays_disconnected(self):
        panel = PterodactylPanel(None, None)
        await panel.connect()

        assert panel.connected is False
        with pytest.raises(UpstreamError) as exc_info:
            await panel.list_servers()
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_record_mapping(self, panel):
        record = await panel.get_server("abcd1234")

        assert record.id == "abcd1234"
        assert record.name == "Forge SMP"
        assert record.runtime_type == RuntimeType.FORGE
        assert record.version == "1.20.1"
        assert record.status == ServerStatus.ONLINE
        assert record.plan_spec.ram == 4
        assert record.plan_spec.cpu_limit == 200
        assert record.plan_spec.storage == 10
        assert record.max_players == 30
        assert str(record.address) == "play.example.com:25565"
        assert record.started_at is not None

    @pytest.mark.asyncio
    async def test_resource_usage_is_real(self, panel):
        metrics = await panel.get_resource_usage("abcd1234")

        assert metrics.cpu_usage == 150.0
        assert metrics.cpu_percent == 75
        assert metrics.ram_usage == 2.0
        assert metrics.ram_percent == 50
        assert metrics.uptime == 90

    @pytest.mark.asyncio
    async def test_resource_usage_offline(self, panel, api):
        api.get_resources.return_value = resources(state="offline")

        metrics = await panel.get_resource_usage("abcd1234")

        assert metrics.cpu_usage == 0
        assert metrics.uptime == 0

    @pytest.mark.asyncio
    async def test_start_running_server_is_noop(self, panel, api):
        result = await panel.start("abcd1234")

        assert result.success is False
        api.send_power.assert_not_called()

    @pytest.mark.asyncio
    async def test_start_offline_server(self, panel, api):
        api.get_resources.return_value = resources(state="offline")

        result = await panel.start("abcd1234")

        assert result.success is True
        assert result.server.status == ServerStatus.STARTING
        api.send_power.assert_called_once_with("abcd1234", "start")

    @pytest.mark.asyncio
    async def test_stop_offline_server_is_noop(self, panel, api):
        api.get_resources.return_value = resources(state="offline")

        result = await panel.stop("abcd1234")

        assert result.success is False
        api.send_power.assert_not_called()

    @pytest.mark.asyncio
    async def test_stop_and_restart_send_signals(self, panel, api):
        await panel.stop("abcd1234")
        await panel.restart("abcd1234")

        assert [c.args for c in api.send_power.call_args_list] == [("abcd1234", "stop"), ("abcd1234", "restart")]

    @pytest.mark.asyncio
    async def test_create_and_delete_unsupported(self, panel):
        with pytest.raises(UnsupportedOperationError):
            await panel.create_server({"name": "x"})
        with pytest.raises(UnsupportedOperationError):
            await panel.delete_server("abcd1234")

    @pytest.mark.asyncio
    async def test_find_by_address(self, panel):
        status = await panel.find_by_address("play.example.com:25565")
        missing = await panel.find_by_address("10.0.0.5:25570")

        assert status.status == "online"
        assert status.server["name"] == "Forge SMP"
        assert missing.status == "offline"

    @pytest.mark.asyncio
    async def test_list_uses_listing_attributes(self, panel, api):
        api.get_server.reset_mock()

        records = await panel.list_servers()

        assert [r.id for r in records] == ["abcd1234"]
        api.get_server.assert_not_called()

    @pytest.mark.asyncio
    async def test_list_skips_server_deleted_on_panel(self, panel, api):
        api.list_servers.return_value = [server_attributes("a", "Alpha"), server_attributes("b", "Beta")]

        def get_resources(identifier):
            if identifier == "b":
                raise NotFoundError("Server not found on panel (/servers/b/resources)")
            return resources()
        api.get_resources.side_effect = get_resources

        records = await panel.list_servers()

        assert [r.id for r in records] == ["a"]
        assert panel.server_count == 1

    @pytest.mark.asyncio
    async def test_metrics_reuse_snapshot_from_record_fetch(self, panel, api):
        await panel.get_server("abcd1234")
        api.get_resources.reset_mock()

        metrics = await panel.get_resource_usage("abcd1234")
        again = await panel.get_resource_usage("abcd1234")

        assert metrics.cpu_usage == again.cpu_usage == 150.0
        # Snapshot is used once, the second read goes to the panel
        api.get_resources.assert_called_once_with("abcd1234")


def test_default_allocation_prefers_default_flag():
    address = default_allocation(server_attributes())
    assert (address.host, address.port) == ("play.example.com", 25565)


def test_default_allocation_without_allocations():
    assert default_allocation({"relationships": {"allocations": {"data": []}}}) is None


class TestPterodactylClient:
    def make_client(self, *responses):
        client = PterodactylClient("https://panel.example.com/", "ptlc_key")
        client.session = MagicMock()
        client.session.request.side_effect = list(responses)
        return client

    def response(self, status_code=200, payload=None):
        response = MagicMock()
        response.status_code = status_code
        response.content = b"{}" if payload is not None else b""
        response.json.return_value = payload
        return response

    def test_sets_auth_headers(self):
        client = PterodactylClient("https://panel.example.com/", "ptlc_key")

        assert client.base_url == "https://panel.example.com"
        assert client.session.headers["Authorization"] == "Bearer ptlc_key"

    def test_list_servers_follows_pages(self):
        client = self.make_client(
            self.response(payload={"data": [{"attributes": {"identifier": "a"}}], "meta": {"pagination": {"total_pages": 2}}}),
            self.response(payload={"data": [{"attributes": {"identifier": "b"}}], "meta": {"pagination": {"total_pages": 2}}}),
        )

        servers = client.list_servers()

        assert [s["identifier"] for s in servers] == ["a", "b"]
        first_call = client.session.request.call_args_list[0]
        assert first_call.args == ("GET", "https://panel.example.com/api/client")

    def test_power_signal(self):
        client = self.make_client(self.response(status_code=204))

        client.send_power("a", "start")

        call = client.session.request.call_args
        assert call.args == ("POST", "https://panel.example.com/api/client/servers/a/power")
        assert call.kwargs["json"] == {"signal": "start"}

    def test_startup_variables(self):
        client = self.make_client(self.response(payload={"data": [
            {"attributes": {"env_variable": "MINECRAFT_VERSION", "server_value": "1.21"}},
        ]}))

        assert client.get_startup_variables("a") == {"MINECRAFT_VERSION": "1.21"}

    def test_connection_error_is_upstream_503(self):
        client = self.make_client(requests.exceptions.ConnectionError("refused"))

        with pytest.raises(UpstreamError) as exc_info:
            client.get_server("a")
        assert exc_info.value.status_code == 503

    def test_auth_error_is_upstream(self):
        client = self.make_client(self.response(status_code=403, payload={}))

        with pytest.raises(UpstreamError):
            client.get_server("a")

    def test_not_found(self):
        client = self.make_client(self.response(status_code=404, payload={}))

        with pytest.raises(NotFoundError):
            client.get_resources("a")

    def test_server_error_is_upstream_500(self):
        client = self.make_client(self.response(status_code=502, payload={}))

        with pytest.raises(UpstreamError) as exc_info:
            client.get_server("a")
        assert exc_info.value.status_code == 500
