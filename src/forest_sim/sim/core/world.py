from __future__ import annotations

import logging
from time import perf_counter
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pygame.math import Vector2

from .agent import Agent, AgentRole, AgentView
from .config import SimulationConfig
from .rng import DeterministicRng
from ..systems import integration, metrics as metrics_system, perception, steering
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotMetadata, SnapshotWorld

logger = logging.getLogger(__name__)


def initialize(config: SimulationConfig, roles: Optional[Iterable[AgentRole]] = None) -> List[Agent]:
    """Build the fixed starting population, one agent per entry of ``roles``."""
    table = config.role_table()
    roles = config.population_roles() if roles is None else [AgentRole(role) for role in roles]
    agents: List[Agent] = []
    for agent_id, role in enumerate(roles):
        stats = table[role]
        agents.append(
            Agent(
                id=agent_id,
                role=role,
                stats=stats,
                position=Vector2(stats.spawn),
            )
        )
    return agents


def take_snapshot(agents: Iterable[Agent]) -> Tuple[AgentView, ...]:
    return tuple(agent.view() for agent in agents)


def tick(agents: Sequence[Agent], config: SimulationConfig, rng: DeterministicRng) -> Tuple[int, float]:
    """
    Advance every agent by one fixed step.

    All agents perceive the same snapshot taken before anyone moves, so the
    processing order does not change what is sensed. Returns the number of
    agents that acquired a target and the largest steering force applied.
    """

    snapshot = take_snapshot(agents)
    targets_sensed = 0
    max_acceleration = 0.0
    for agent in agents:
        if perception.sense_targets(agent, snapshot) is not None:
            targets_sensed += 1
        steering.steer(agent, config, rng)
        max_acceleration = max(max_acceleration, agent.acceleration.length())
        integration.integrate(agent, config.heading_mode)
    return targets_sensed, max_acceleration


class World:
    def __init__(self, config: SimulationConfig):
        self._config = config.validate()
        self._rng = DeterministicRng(config.seed)
        self._agents: List[Agent] = []
        self._metrics: TickMetrics | None = None
        self._bootstrap_population()

    @property
    def agents(self) -> List[Agent]:
        return self._agents

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    def reset(self) -> None:
        self._agents.clear()
        self._rng.reset()
        self._metrics = None
        self._bootstrap_population()

    def step(self, tick_index: int) -> TickMetrics:
        start = perf_counter()
        targets_sensed, max_acceleration = tick(self._agents, self._config, self._rng)
        elapsed_ms = (perf_counter() - start) * 1000.0
        metrics = metrics_system.create_metrics(
            tick_index, self._agents, self._config.arena, targets_sensed, max_acceleration, elapsed_ms
        )
        self._metrics = metrics
        logger.debug(
            "tick %d: sensed=%d outside=%d avg_speed=%.3f",
            tick_index,
            metrics.targets_sensed,
            metrics.outside_safe_zone,
            metrics.average_speed,
        )
        return metrics

    def snapshot(self, tick_index: int) -> Snapshot:
        metrics = self._metrics
        if metrics is None:
            metrics = metrics_system.create_metrics(tick_index, self._agents, self._config.arena, 0, 0.0, 0.0)
        arena = self._config.arena
        time_step = self._config.time_step
        return Snapshot(
            tick=tick_index,
            metrics=metrics,
            agents=[self._agent_snapshot(agent) for agent in self._agents],
            world=SnapshotWorld(
                width=arena.width,
                height=arena.height,
                edge=arena.edge,
                left_edge=arena.left_edge,
                safe_zone=arena.safe_zone(),
            ),
            metadata=SnapshotMetadata(
                sim_dt=time_step,
                tick_rate=0.0 if time_step <= 0 else 1.0 / time_step,
                seed=self._config.seed,
                config_version=self._config.config_version,
            ),
        )

    def _bootstrap_population(self) -> None:
        self._agents.extend(initialize(self._config))
        logger.info(
            "Bootstrapped %d agents (%s) in %.0fx%.0f arena",
            len(self._agents),
            ", ".join(agent.role.value for agent in self._agents),
            self._config.arena.width,
            self._config.arena.height,
        )

    @staticmethod
    def _agent_snapshot(agent: Agent) -> Dict[str, object]:
        scale_x, scale_y = agent.scale
        return {
            "id": agent.id,
            "role": agent.role.value,
            "x": agent.position.x,
            "y": agent.position.y,
            "vx": agent.velocity.x,
            "vy": agent.velocity.y,
            "speed": agent.velocity.length(),
            "rotation": agent.rotation,
            "scale_x": scale_x,
            "scale_y": scale_y,
        }
