import datetime
import math
import random
from typing import Dict, Optional, Tuple

from app.models import Metrics, ServerRecord, utcnow
from core.plans import RuntimeType

# (base, ceiling) as a fraction of the plan's cpu limit
CPU_PROFILES: Dict[RuntimeType, Tuple[float, float]] = {
    RuntimeType.VANILLA: (0.20, 0.70),
    RuntimeType.PAPER: (0.20, 0.70),
    RuntimeType.SPIGOT: (0.20, 0.70),
    RuntimeType.FABRIC: (0.30, 0.90),
    RuntimeType.QUILT: (0.30, 0.90),
    # Mod overhead can push past the nominal limit
    RuntimeType.FORGE: (0.40, 1.50),
    RuntimeType.NEOFORGE: (0.40, 1.50),
}

# Idle memory footprint in GB
RAM_BASE: Dict[RuntimeType, float] = {
    RuntimeType.VANILLA: 0.5,
    RuntimeType.PAPER: 0.6,
    RuntimeType.SPIGOT: 0.6,
    RuntimeType.FABRIC: 0.8,
    RuntimeType.QUILT: 0.8,
    RuntimeType.FORGE: 1.2,
    RuntimeType.NEOFORGE: 1.2,
}

RAM_PER_PLAYER = 0.15
RAM_JITTER = 0.10
RAM_FLOOR = 0.3
RAM_CEILING_RATIO = 0.95


class MetricsSimulator:
    """
    Produces plausible CPU/RAM/uptime figures for a server.

    Nothing is stored on the record; figures are recomputed on every read.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def simulate(self, record: ServerRecord, now: Optional[datetime.datetime] = None) -> Metrics:
        if not record.is_online:
            return Metrics()

        spec = record.plan_spec
        cpu_usage = self.cpu_usage(record.runtime_type, spec.cpu_limit)
        ram_usage = self.ram_usage(record.runtime_type, spec.ram, record.current_players)

        return Metrics(
            cpu_usage=cpu_usage,
            cpu_percent=percent_of(cpu_usage, spec.cpu_limit),
            ram_usage=ram_usage,
            ram_percent=percent_of(ram_usage, spec.ram),
            uptime=uptime_seconds(record.started_at, now),
        )

    def cpu_usage(self, runtime_type: RuntimeType, cpu_limit: float) -> int:
        base, ceiling = CPU_PROFILES[runtime_type]
        low, high = base * cpu_limit, ceiling * cpu_limit
        # Integer draw kept inside [low, high]
        return min(math.floor(high), max(math.ceil(low), round(self.rng.uniform(low, high))))

    def ram_usage(self, runtime_type: RuntimeType, ram_limit: float, players: int) -> float:
        jitter = self.rng.uniform(1 - RAM_JITTER, 1 + RAM_JITTER)
        usage = RAM_BASE[runtime_type] * jitter + RAM_PER_PLAYER * max(players, 0)
        usage = min(max(usage, RAM_FLOOR), RAM_CEILING_RATIO * ram_limit)
        # Rounding may not leave the clamp window
        return min(max(round(usage, 1), RAM_FLOOR), RAM_CEILING_RATIO * ram_limit)


def percent_of(usage: float, limit: float) -> int:
    if not limit:
        return 0
    return round(usage / limit * 100)


def uptime_seconds(started_at: Optional[datetime.datetime], now: Optional[datetime.datetime] = None) -> int:
    if started_at is None:
        return 0
    now = now or utcnow()
    return max(0, int((now - started_at).total_seconds()))


def format_uptime(seconds: int) -> str:
    hours, remainder = divmod(int(seconds), 3600)
    minutes = remainder // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m"
    return f"{seconds}s"
