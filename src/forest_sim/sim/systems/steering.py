from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from pygame.math import Vector2

from ..core.agent import Agent, AgentRole
from ..utils.math2d import random_vector, safe_normalize

if TYPE_CHECKING:
    from ..core.config import ArenaConfig, SimulationConfig
    from ..core.rng import DeterministicRng


def compute_desired_heading(agent: Agent, config: SimulationConfig, rng: DeterministicRng) -> Vector2:
    target = agent.current_target
    if agent.role is AgentRole.PREDATOR:
        if target is not None:
            return Vector2(target)
        rally_x, rally_y = config.rally_point
        return Vector2(rally_x, rally_y) - agent.position
    if agent.role is AgentRole.PREY:
        if target is not None:
            return -1.0 * target
        return random_vector(rng)
    raise ValueError(f"Unhandled agent role: {agent.role!r}")


def boundary_override(agent: Agent, arena: ArenaConfig) -> Optional[Vector2]:
    """Desired velocity pushing the agent back into the safe zone, or ``None`` inside it."""
    x = agent.position.x
    y = agent.position.y
    current = agent.velocity
    max_speed = agent.max_speed
    if x < arena.left_edge:
        return Vector2(max_speed, current.y)
    if x > arena.width - arena.edge:
        return Vector2(-max_speed, current.y)
    if y < arena.edge:
        return Vector2(current.x, max_speed)
    if y > arena.height - arena.edge:
        return Vector2(current.x, -max_speed)
    return None


def steer(agent: Agent, config: SimulationConfig, rng: DeterministicRng) -> Vector2:
    desired = boundary_override(agent, config.arena)
    if desired is None:
        desired = agent.max_speed * safe_normalize(compute_desired_heading(agent, config, rng))
    agent.acceleration = agent.max_force * safe_normalize(desired - agent.velocity)
    return desired
