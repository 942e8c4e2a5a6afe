import itertools
import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional

from app.models import Address, ServerRecord, utcnow
from core.errors import NotFoundError, ValidationError
from core.plans import RuntimeType, plan_spec_for

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "version", "runtime_type", "plan")


class ServerRegistry:
    """
    In-memory collection of server records.

    Owns id and address assignment. Records live for the lifetime of the
    process; nothing is persisted.
    """

    def __init__(self, public_host: str = "localhost", base_port: int = 25565):
        self.public_host = public_host
        self.base_port = base_port
        self._servers: Dict[str, ServerRecord] = {}
        self._ids = itertools.count(1)

    def __len__(self):
        return len(self._servers)

    def __contains__(self, server_id: str):
        return server_id in self._servers

    def __iter__(self) -> Iterator[ServerRecord]:
        return iter(list(self._servers.values()))

    def create(self, spec: Mapping[str, Any]) -> ServerRecord:
        missing = [f for f in REQUIRED_FIELDS if not str(spec.get(f) or "").strip()]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        runtime_type = RuntimeType.parse(spec["runtime_type"])
        if runtime_type is None:
            allowed = ", ".join(t.value for t in RuntimeType)
            raise ValidationError(f"Unknown server type '{spec['runtime_type']}' (expected one of {allowed})")

        numeric_id = next(self._ids)
        server_id = str(numeric_id)
        plan = spec["plan"].strip()

        record = ServerRecord(
            id=server_id,
            name=spec["name"].strip(),
            version=spec["version"].strip(),
            runtime_type=runtime_type,
            plan=plan,
            plan_spec=plan_spec_for(plan),
            address=self._address_for(numeric_id),
            description=spec.get("description") or "",
            gamemode=spec.get("gamemode") or "survival",
            modloader_version=spec.get("modloader_version") if runtime_type.is_modded else None,
            created_at=utcnow(),
        )
        self._servers[server_id] = record
        logger.info(f"Created server {record.id} '{record.name}' ({record.runtime_type.value} {record.version}, plan {record.plan}) at {record.address}")
        return record

    def get(self, server_id: str) -> ServerRecord:
        record = self._servers.get(server_id)
        if record is None:
            raise NotFoundError(f"Server {server_id} not found")
        return record

    def list(self) -> List[ServerRecord]:
        return list(self._servers.values())

    def delete(self, server_id: str):
        if server_id not in self._servers:
            raise NotFoundError(f"Server {server_id} not found")
        record = self._servers.pop(server_id)
        logger.info(f"Deleted server {record.id} '{record.name}'")

    def find_by_address(self, address: Address) -> Optional[ServerRecord]:
        for record in self._servers.values():
            if record.address == address:
                return record
        return None

    def _address_for(self, numeric_id: int) -> Address:
        # ids are never reused, so neither are ports
        return Address(host=self.public_host, port=self.base_port + numeric_id - 1)
