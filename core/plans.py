from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class ServerStatus(str, Enum):
    OFFLINE = "offline"
    STARTING = "starting"
    ONLINE = "online"
    STOPPING = "stopping"


class RuntimeType(str, Enum):
    VANILLA = "vanilla"
    PAPER = "paper"
    SPIGOT = "spigot"
    FORGE = "forge"
    NEOFORGE = "neoforge"
    FABRIC = "fabric"
    QUILT = "quilt"

    @property
    def is_modded(self) -> bool:
        return self in MODDED_RUNTIMES

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["RuntimeType"]:
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @classmethod
    def guess(cls, text: Optional[str]) -> "RuntimeType":
        """Best effort match of a panel software / image name."""
        text = (text or "").lower()
        # neoforge before forge, it contains it
        for candidate in (cls.NEOFORGE, cls.FORGE, cls.PAPER, cls.SPIGOT, cls.FABRIC, cls.QUILT):
            if candidate.value in text:
                return candidate
        return cls.VANILLA


MODDED_RUNTIMES = {RuntimeType.FORGE, RuntimeType.NEOFORGE, RuntimeType.FABRIC, RuntimeType.QUILT}


@dataclass(frozen=True)
class PlanSpec:
    ram: float        # GB
    cpu_limit: int    # percent of one core
    max_players: int
    storage: float    # GB


DEFAULT_PLAN = "Basique"

PLANS: Dict[str, PlanSpec] = {
    "Basique": PlanSpec(ram=4, cpu_limit=100, max_players=20, storage=10),
    "Super": PlanSpec(ram=8, cpu_limit=200, max_players=50, storage=25),
    "Gamer": PlanSpec(ram=16, cpu_limit=400, max_players=100, storage=50),
}

# Free Aternos servers: 2GB, one core, ~4GB disk
ATERNOS_PLAN = "Aternos Free"
ATERNOS_PLAN_SPEC = PlanSpec(ram=2, cpu_limit=100, max_players=20, storage=4)


def plan_spec_for(plan: Optional[str]) -> PlanSpec:
    return PLANS.get(plan or "", PLANS[DEFAULT_PLAN])
