from __future__ import annotations

from pygame.math import Vector2

from ..core.agent import Agent
from ..utils.math2d import heading, principal_angle


def integrate(agent: Agent, heading_mode: str = "four_quadrant") -> None:
    agent.velocity = agent.velocity + agent.acceleration
    agent.position = agent.position + agent.velocity
    agent.acceleration = Vector2()
    agent.current_target = None
    if heading_mode == "single_quadrant":
        rotation = principal_angle(agent.velocity)
    else:
        rotation = heading(agent.velocity)
    # A stationary agent keeps facing where it last moved.
    if rotation is not None:
        agent.rotation = rotation
