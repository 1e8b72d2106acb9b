from __future__ import annotations

import math
from typing import Iterable, Optional

from pygame.math import Vector2

from ..core.agent import Agent, AgentView
from ..utils.math2d import angle_between, from_angle


def nearest_target(agent: Agent, snapshot: Iterable[AgentView]) -> Optional[Vector2]:
    """Offset to the closest snapshot entry whose role the agent hunts or fears."""
    target_roles = agent.target_roles
    pos_x = agent.position.x
    pos_y = agent.position.y
    best: Optional[Vector2] = None
    best_dist_sq = math.inf
    for other in snapshot:
        if other.id == agent.id or other.role not in target_roles:
            continue
        offset_x = other.x - pos_x
        offset_y = other.y - pos_y
        dist_sq = offset_x * offset_x + offset_y * offset_y
        # Strict comparison keeps the first of equally distant candidates.
        if dist_sq < best_dist_sq:
            best_dist_sq = dist_sq
            best = Vector2(offset_x, offset_y)
    return best


def in_sensory_cone(agent: Agent, offset: Vector2) -> bool:
    if offset.length() >= agent.sensory_range:
        return False
    angle = angle_between(offset, from_angle(agent.rotation))
    return angle is not None and angle < agent.sensory_angle


def sense_targets(agent: Agent, snapshot: Iterable[AgentView]) -> Optional[Vector2]:
    """
    Acquire the nearest sensed target for this tick.

    Only the nearest candidate is tested against the vision cone; a closer
    target behind the agent hides a farther one in front of it. The result is
    stored on ``agent.current_target`` and returned. The snapshot is never
    modified.
    """

    candidate = nearest_target(agent, snapshot)
    if candidate is not None and not in_sensory_cone(agent, candidate):
        candidate = None
    agent.current_target = candidate
    return candidate
