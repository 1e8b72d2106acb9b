from __future__ import annotations

from typing import TYPE_CHECKING, List

from ..core.agent import Agent, AgentRole
from ..types.metrics import TickMetrics

if TYPE_CHECKING:
    from ..core.config import ArenaConfig


def create_metrics(
    tick: int,
    agents: List[Agent],
    arena: ArenaConfig,
    targets_sensed: int,
    max_acceleration: float,
    duration_ms: float,
) -> TickMetrics:
    predators = 0
    prey = 0
    outside = 0
    speed_sum = 0.0
    for agent in agents:
        if agent.role is AgentRole.PREDATOR:
            predators += 1
        elif agent.role is AgentRole.PREY:
            prey += 1
        if not arena.contains(agent.position.x, agent.position.y):
            outside += 1
        speed_sum += agent.velocity.length()
    population = len(agents)
    return TickMetrics(
        tick=tick,
        population=population,
        predators=predators,
        prey=prey,
        targets_sensed=targets_sensed,
        outside_safe_zone=outside,
        average_speed=0.0 if population == 0 else speed_sum / population,
        max_acceleration=max_acceleration,
        tick_duration_ms=duration_ms,
    )
