from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from pygame.math import Vector2


class AgentRole(str, Enum):
    PREDATOR = "predator"
    PREY = "prey"


@dataclass(frozen=True, slots=True)
class RoleStats:
    scale: Tuple[float, float]
    sensory_range: float
    sensory_angle: float
    max_speed: float
    max_force: float
    target_roles: FrozenSet[AgentRole]
    spawn: Tuple[float, float]


@dataclass(slots=True)
class Agent:
    id: int
    role: AgentRole
    stats: RoleStats
    position: Vector2
    velocity: Vector2 = field(default_factory=Vector2)
    acceleration: Vector2 = field(default_factory=Vector2)
    rotation: float = 0.0
    current_target: Optional[Vector2] = None

    @property
    def scale(self) -> Tuple[float, float]:
        return self.stats.scale

    @property
    def sensory_range(self) -> float:
        return self.stats.sensory_range

    @property
    def sensory_angle(self) -> float:
        return self.stats.sensory_angle

    @property
    def max_speed(self) -> float:
        return self.stats.max_speed

    @property
    def max_force(self) -> float:
        return self.stats.max_force

    @property
    def target_roles(self) -> FrozenSet[AgentRole]:
        return self.stats.target_roles

    def view(self) -> "AgentView":
        return AgentView(id=self.id, role=self.role, x=float(self.position.x), y=float(self.position.y))


@dataclass(frozen=True, slots=True)
class AgentView:
    """Read-only copy of the state other agents may perceive."""

    id: int
    role: AgentRole
    x: float
    y: float

    @property
    def position(self) -> Vector2:
        return Vector2(self.x, self.y)
