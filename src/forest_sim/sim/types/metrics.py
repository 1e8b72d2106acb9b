from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    predators: int
    prey: int
    targets_sensed: int
    outside_safe_zone: int
    average_speed: float
    max_acceleration: float
    tick_duration_ms: float = 0.0
