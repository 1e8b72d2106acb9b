from __future__ import annotations

import math
from typing import TYPE_CHECKING, Optional

from pygame.math import Vector2

if TYPE_CHECKING:
    from ..core.rng import DeterministicRng

_SNAP_EPSILON = 1e-6


def _snap(value: float) -> float:
    if -_SNAP_EPSILON < value < _SNAP_EPSILON:
        return 0.0
    return value


def safe_normalize(vector: Vector2) -> Vector2:
    magnitude_sq = vector.x * vector.x + vector.y * vector.y
    if magnitude_sq == 0.0:
        return Vector2()
    inv = 1.0 / math.sqrt(magnitude_sq)
    return Vector2(vector.x * inv, vector.y * inv)


def from_angle(theta: float) -> Vector2:
    """Unit vector pointing along ``theta`` (radians), near-zero components snapped to 0."""
    return Vector2(_snap(math.cos(theta)), _snap(math.sin(theta)))


def principal_angle(vector: Vector2) -> Optional[float]:
    """
    Single-quadrant heading ``atan(y / x)``.

    Vectors pointing into the left half-plane report the heading of their
    mirror image, so the result is always within ``[-pi/2, pi/2]``.
    Returns ``None`` for the zero vector.
    """

    if vector.x == 0.0:
        if vector.y == 0.0:
            return None
        return math.copysign(math.pi / 2.0, vector.y)
    return math.atan(vector.y / vector.x)


def heading(vector: Vector2) -> Optional[float]:
    if vector.x == 0.0 and vector.y == 0.0:
        return None
    return math.atan2(vector.y, vector.x)


def angle_between(a: Vector2, b: Vector2) -> Optional[float]:
    magnitude = a.length() * b.length()
    if magnitude == 0.0:
        return None
    cosine = a.dot(b) / magnitude
    return math.acos(max(-1.0, min(1.0, cosine)))


def random_vector(rng: "DeterministicRng") -> Vector2:
    return Vector2(rng.next_signed_unit(), rng.next_signed_unit())
