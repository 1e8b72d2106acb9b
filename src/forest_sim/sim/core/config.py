from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List

import yaml

from .agent import AgentRole, RoleStats

logger = logging.getLogger(__name__)

HEADING_MODES = ("four_quadrant", "single_quadrant")


@dataclass
class ArenaConfig:
    width: float = 1200.0
    height: float = 900.0
    # Margin on the right, top and bottom walls.
    edge: float = 25.0
    # Wider left margin reserved for UI.
    left_edge: float = 125.0

    def safe_zone(self) -> tuple[float, float, float, float]:
        """Safe rectangle as ``(left, top, width, height)``."""
        return (
            self.left_edge,
            self.edge,
            self.width - self.edge - self.left_edge,
            self.height - 2.0 * self.edge,
        )

    def contains(self, x: float, y: float) -> bool:
        return self.left_edge <= x <= self.width - self.edge and self.edge <= y <= self.height - self.edge


@dataclass
class RoleConfig:
    targets: List[str] = field(default_factory=list)
    scale: tuple[float, float] = (1.0, 1.0)
    sensory_range: float = 150.0
    sensory_angle: float = math.pi
    max_speed: float = 5.0
    max_force: float = 5.0
    spawn: tuple[float, float] = (0.0, 0.0)


def _default_roles() -> Dict[str, RoleConfig]:
    return {
        AgentRole.PREDATOR.value: RoleConfig(
            targets=[AgentRole.PREY.value],
            scale=(0.5, 0.5),
            sensory_range=150.0,
            sensory_angle=math.pi,
            max_speed=6.0,
            max_force=2.0,
            spawn=(200.0, 200.0),
        ),
        AgentRole.PREY.value: RoleConfig(
            targets=[AgentRole.PREDATOR.value],
            scale=(0.3, 0.3),
            sensory_range=150.0,
            sensory_angle=math.pi,
            max_speed=5.0,
            max_force=5.0,
            spawn=(1000.0, 600.0),
        ),
    }


@dataclass
class SimulationConfig:
    time_step: float = 1.0 / 30.0
    seed: int = 42
    config_version: str = "v1"
    rally_point: tuple[float, float] = (1000.0, 600.0)
    heading_mode: str = "four_quadrant"
    population: List[str] = field(default_factory=lambda: [AgentRole.PREDATOR.value, AgentRole.PREY.value])
    arena: ArenaConfig = field(default_factory=ArenaConfig)
    roles: Dict[str, RoleConfig] = field(default_factory=_default_roles)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        logger.info("Loaded simulation config from %s", path)
        return load_config(data)

    def role_table(self) -> Dict[AgentRole, RoleStats]:
        table: Dict[AgentRole, RoleStats] = {}
        for name, role_config in self.roles.items():
            role = _parse_role(name, "roles")
            table[role] = RoleStats(
                scale=role_config.scale,
                sensory_range=role_config.sensory_range,
                sensory_angle=role_config.sensory_angle,
                max_speed=role_config.max_speed,
                max_force=role_config.max_force,
                target_roles=frozenset(_parse_role(t, f"roles.{name}.targets") for t in role_config.targets),
                spawn=role_config.spawn,
            )
        return table

    def population_roles(self) -> List[AgentRole]:
        return [_parse_role(name, "population") for name in self.population]

    def validate(self) -> "SimulationConfig":
        if self.time_step <= 0:
            raise ValueError(f"time_step must be positive, got {self.time_step}")
        if self.heading_mode not in HEADING_MODES:
            raise ValueError(f"Unknown heading_mode: {self.heading_mode!r} (expected one of {HEADING_MODES})")
        _, _, safe_width, safe_height = self.arena.safe_zone()
        if safe_width <= 0 or safe_height <= 0:
            raise ValueError(f"Arena margins leave no safe zone: {self.arena}")
        table = self.role_table()
        for role in self.population_roles():
            if role not in table:
                raise ValueError(f"No role config for population entry {role.value!r}")
        return self


def _parse_role(name: str, where: str) -> AgentRole:
    try:
        return AgentRole(name)
    except ValueError:
        raise ValueError(f"Unknown role {name!r} in {where}") from None


def _pair(value: tuple[float, float] | list[float] | None, default: tuple[float, float]) -> tuple[float, float]:
    if isinstance(value, (tuple, list)) and len(value) == 2:
        return (float(value[0]), float(value[1]))
    return default


def _section(value: object, where: str) -> dict:
    # an empty YAML section loads as None
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section {where!r} must be a mapping, got {type(value).__name__}")
    return value


def load_config(raw: dict) -> SimulationConfig:
    defaults = SimulationConfig()
    roles = dict(defaults.roles)
    for name, role_raw in _section(raw.get("roles"), "roles").items():
        _parse_role(name, "roles")
        role_raw = _section(role_raw, f"roles.{name}")
        base = asdict(roles.get(name, RoleConfig()))
        base.update({k: v for k, v in role_raw.items() if k not in {"scale", "spawn"}})
        base["scale"] = _pair(role_raw.get("scale"), tuple(base["scale"]))
        base["spawn"] = _pair(role_raw.get("spawn"), tuple(base["spawn"]))
        roles[name] = RoleConfig(**base)

    arena = ArenaConfig(**_section(raw.get("arena"), "arena"))
    sim_values = {k: v for k, v in raw.items() if k not in {"arena", "roles", "rally_point"}}
    config = SimulationConfig(
        arena=arena,
        roles=roles,
        rally_point=_pair(raw.get("rally_point"), defaults.rally_point),
        **sim_values,
    )
    return config.validate()
