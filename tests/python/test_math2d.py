from __future__ import annotations

import math

import pytest
from pygame.math import Vector2
from pytest import approx

from forest_sim.sim.core.rng import DeterministicRng
from forest_sim.sim.utils.math2d import (
    angle_between,
    from_angle,
    heading,
    principal_angle,
    random_vector,
    safe_normalize,
)

SAMPLES = [
    (Vector2(4.0, 3.0), Vector2(2.0, -1.0)),
    (Vector2(-7.5, 0.25), Vector2(0.0, 12.0)),
    (Vector2(0.0, 0.0), Vector2(-3.0, -3.0)),
]


@pytest.mark.parametrize("a, b", SAMPLES)
def test_add_commutes_and_sub_is_antisymmetric(a, b):
    assert a + b == b + a
    assert a - b == -1.0 * (b - a)


def test_componentwise_arithmetic():
    a = Vector2(4.0, 3.0)
    b = Vector2(2.0, -1.0)
    assert a + b == Vector2(6.0, 2.0)
    assert a - b == Vector2(2.0, 4.0)
    assert a.dot(b) == 5.0
    assert a.length() == 5.0


def test_scalar_multiplication_commutes():
    v = Vector2(4.0, 2.0)
    assert v * 0.5 == Vector2(2.0, 1.0)
    assert 0.5 * v == v * 0.5


@pytest.mark.parametrize("vector", [Vector2(2.0, 0.0), Vector2(-3.0, 4.0), Vector2(1e-3, -2e-3), Vector2(1e6, 1e6)])
def test_safe_normalize_has_unit_length(vector):
    assert safe_normalize(vector).length() == approx(1.0)


def test_safe_normalize_leaves_input_untouched():
    vector = Vector2(2.0, 0.0)
    assert safe_normalize(vector) == Vector2(1.0, 0.0)
    assert vector == Vector2(2.0, 0.0)


def test_safe_normalize_of_zero_is_zero():
    assert safe_normalize(Vector2()) == Vector2(0.0, 0.0)


def test_from_angle_snaps_near_zero_components():
    up = from_angle(math.pi / 2.0)
    assert up.x == 0.0
    assert up.y == 1.0
    left = from_angle(math.pi)
    assert left.x == -1.0
    assert left.y == 0.0


@pytest.mark.parametrize("theta", [-1.5, -0.7, 0.0, 0.3, 1.2, 1.55])
def test_principal_angle_round_trip_in_right_half_plane(theta):
    assert principal_angle(from_angle(theta)) == approx(theta)


def test_principal_angle_of_vertical_vectors():
    assert principal_angle(from_angle(math.pi / 2.0)) == approx(math.pi / 2.0)
    assert principal_angle(Vector2(0.0, -2.0)) == approx(-math.pi / 2.0)


def test_principal_angle_mirrors_left_half_plane():
    # Single-quadrant: up-left reports the heading of down-right.
    assert principal_angle(Vector2(-1.0, 1.0)) == approx(-math.pi / 4.0)
    assert heading(Vector2(-1.0, 1.0)) == approx(3.0 * math.pi / 4.0)


def test_headings_of_zero_vector_are_undefined():
    assert principal_angle(Vector2()) is None
    assert heading(Vector2()) is None


def test_angle_between():
    assert angle_between(Vector2(1.0, 0.0), from_angle(math.pi / 2.0)) == approx(math.pi / 2.0)
    assert angle_between(Vector2(3.0, 3.0), Vector2(1.0, 1.0)) == approx(0.0, abs=1e-6)
    assert angle_between(Vector2(1.0, 1e-9), Vector2(-1.0, 0.0)) == approx(math.pi)


def test_angle_between_zero_vector_is_undefined():
    assert angle_between(Vector2(), Vector2(1.0, 0.0)) is None
    assert angle_between(Vector2(1.0, 0.0), Vector2()) is None


def test_random_vector_components_within_half_open_unit_range():
    rng = DeterministicRng(3)
    samples = [random_vector(rng) for _ in range(500)]
    for sample in samples:
        assert -1.0 <= sample.x < 1.0
        assert -1.0 <= sample.y < 1.0
    assert any(sample.x < 0 for sample in samples)
    assert any(sample.x > 0 for sample in samples)


def test_random_vector_is_reproducible_after_reset():
    rng = DeterministicRng(11)
    first = [random_vector(rng) for _ in range(5)]
    rng.reset()
    assert [random_vector(rng) for _ in range(5)] == first
