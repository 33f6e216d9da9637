import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from qglobe.core.geo import lonlat2xyz
from qglobe.core.quaternion import (
    Quaternion,
    angle_between,
    euler_to_quaternion,
    quaternion_from_vectors,
    quaternion_multiply,
    quaternion_to_euler,
)
from qglobe.core.states.orientation_state import Orientation
from qglobe.core.vector_utils import Vector3, normalize


def _random_quaternions(count: int, seed: int = 7) -> list[Quaternion]:
    rng = np.random.default_rng(seed)
    out = []
    for row in rng.normal(size=(count, 4)):
        out.append(Quaternion(*row).normalized())
    return out


def _same_rotation(q1: Quaternion, q2: Quaternion, atol: float = 1e-9) -> bool:
    a = np.array(q1.as_tuple())
    b = np.array(q2.as_tuple())
    return np.allclose(a, b, atol=atol) or np.allclose(a, -b, atol=atol)


# =============================================================================
# quaternion_from_vectors
# =============================================================================

@pytest.mark.parametrize("lon, lat", [(0, 0), (30, 45), (-170, -80), (90, 0), (0, 90)])
def test_from_same_vector_is_identity(lon, lat):
    v = lonlat2xyz(lon, lat)
    q = quaternion_from_vectors(v, v)
    assert q == Quaternion.identity()


def test_from_vectors_rotates_v0_onto_v1():
    v0 = lonlat2xyz(10, 20)
    v1 = lonlat2xyz(-35, 50)
    q = quaternion_from_vectors(v0, v1)
    assert q.is_unit()
    assert_allclose(q.rotate(v0), v1, atol=1e-12)


def test_from_vectors_is_minimal_rotation():
    """The rotation angle equals the angle between the vectors"""
    v0 = lonlat2xyz(0, 0)
    v1 = lonlat2xyz(40, 0)
    q = quaternion_from_vectors(v0, v1)
    assert 2 * math.acos(q.w) == pytest.approx(math.radians(40))
    assert_allclose(q.vector, (0.0, 0.0, math.sin(math.radians(20))), atol=1e-12)


def test_antipodal_vectors_give_half_turn():
    v = Vector3(1.0, 0.0, 0.0)
    q = quaternion_from_vectors(v, Vector3(-1.0, 0.0, 0.0))

    assert all(math.isfinite(c) for c in q.as_tuple())
    assert q.is_unit()
    assert q.w == pytest.approx(0.0)
    assert_allclose(q.as_tuple(), (0.0, 0.0, -1.0, 0.0), atol=1e-15)
    assert_allclose(q.rotate(v), (-1.0, 0.0, 0.0), atol=1e-12)


def test_antipodal_poles_use_fallback_axis():
    north = Vector3(0.0, 0.0, 1.0)
    q = quaternion_from_vectors(north, Vector3(0.0, 0.0, -1.0))
    assert q.is_unit()
    assert_allclose(q.as_tuple(), (0.0, 0.0, 1.0, 0.0), atol=1e-15)
    assert_allclose(q.rotate(north), (0.0, 0.0, -1.0), atol=1e-12)


def test_antipodal_generic_vector():
    v = normalize(Vector3(1.0, 2.0, 3.0))
    minus_v = Vector3(-v.x, -v.y, -v.z)
    q = quaternion_from_vectors(v, minus_v)
    assert q.is_unit()
    assert_allclose(q.rotate(v), minus_v, atol=1e-12)


def test_dot_overshoot_does_not_produce_nan():
    """Nearly identical vectors whose dot product rounds above 1"""
    v0 = Vector3(1.0, 1e-9, 0.0)
    v1 = Vector3(1.0, 0.0, 0.0)
    q = quaternion_from_vectors(v0, v1)
    assert all(math.isfinite(c) for c in q.as_tuple())


# =============================================================================
# quaternion_multiply
# =============================================================================

def test_multiply_by_identity():
    q = _random_quaternions(1)[0]
    assert _same_rotation(quaternion_multiply(q, Quaternion.identity()), q, atol=1e-15)
    assert _same_rotation(quaternion_multiply(Quaternion.identity(), q), q, atol=1e-15)


def test_multiply_is_not_commutative():
    qx = Quaternion.from_axis_angle(Vector3(1.0, 0.0, 0.0), math.pi / 2)
    qz = Quaternion.from_axis_angle(Vector3(0.0, 0.0, 1.0), math.pi / 2)
    assert not _same_rotation(quaternion_multiply(qx, qz), quaternion_multiply(qz, qx))


def test_multiply_applies_right_operand_first():
    qx = Quaternion.from_axis_angle(Vector3(1.0, 0.0, 0.0), math.pi / 2)
    qz = Quaternion.from_axis_angle(Vector3(0.0, 0.0, 1.0), math.pi / 2)
    v = Vector3(1.0, 0.0, 0.0)
    combined = quaternion_multiply(qx, qz)
    assert_allclose(combined.rotate(v), qx.rotate(qz.rotate(v)), atol=1e-12)
    # x -> y under qz, then y -> z under qx
    assert_allclose(combined.rotate(v), (0.0, 0.0, 1.0), atol=1e-12)


def test_multiply_is_associative():
    quats = _random_quaternions(30, seed=11)
    for a, b, c in zip(quats[0::3], quats[1::3], quats[2::3]):
        left = quaternion_multiply(quaternion_multiply(a, b), c)
        right = quaternion_multiply(a, quaternion_multiply(b, c))
        assert _same_rotation(left, right, atol=1e-12)


def test_multiply_keeps_unit_norm():
    quats = _random_quaternions(50, seed=3)
    q = Quaternion.identity()
    for step in quats:
        q = quaternion_multiply(q, step)
    assert q.norm == pytest.approx(1.0, abs=1e-12)


# =============================================================================
# Euler conversions
# =============================================================================

def test_euler_to_quaternion_yaw_only():
    q = euler_to_quaternion(Orientation(yaw=60.0))
    assert_allclose(q.as_tuple(), (math.cos(math.radians(30)), 0.0, 0.0, math.sin(math.radians(30))),
                    atol=1e-15)


def test_euler_to_quaternion_matches_axis_composition():
    """q = qx(roll) * qy(-pitch) * qz(yaw)"""
    o = Orientation(yaw=35.0, pitch=-20.0, roll=12.0)
    qx = Quaternion.from_axis_angle(Vector3(1.0, 0.0, 0.0), math.radians(o.roll))
    qy = Quaternion.from_axis_angle(Vector3(0.0, 1.0, 0.0), -math.radians(o.pitch))
    qz = Quaternion.from_axis_angle(Vector3(0.0, 0.0, 1.0), math.radians(o.yaw))
    expected = quaternion_multiply(qx, quaternion_multiply(qy, qz))
    assert _same_rotation(euler_to_quaternion(o), expected, atol=1e-12)


@pytest.mark.parametrize("orientation", [
    Orientation(0.0, 0.0, 0.0),
    Orientation(10.0, 0.0, 0.0),
    Orientation(-150.0, 45.0, 30.0),
    Orientation(120.0, -80.0, -170.0),
])
def test_euler_round_trip_from_orientation(orientation):
    back = quaternion_to_euler(euler_to_quaternion(orientation))
    assert back.as_tuple() == pytest.approx(orientation.as_tuple(), abs=1e-9)


def test_quaternion_round_trip_random():
    """euler_to_quaternion(quaternion_to_euler(q)) is q or -q away from gimbal lock"""
    checked = 0
    for q in _random_quaternions(200, seed=5):
        o = quaternion_to_euler(q)
        if abs(o.pitch) > 85.0:
            continue
        assert _same_rotation(euler_to_quaternion(o), q, atol=1e-9)
        checked += 1
    assert checked > 150


def test_euler_output_ranges():
    for q in _random_quaternions(100, seed=9):
        o = quaternion_to_euler(q)
        assert -180.0 <= o.yaw <= 180.0
        assert -90.0 <= o.pitch <= 90.0
        assert -180.0 <= o.roll <= 180.0


@pytest.mark.parametrize("orientation, expected", [
    (Orientation(30.0, 90.0, 20.0), Orientation(10.0, 90.0, 0.0)),
    (Orientation(30.0, -90.0, 20.0), Orientation(50.0, -90.0, 0.0)),
])
def test_gimbal_lock_sets_roll_to_zero(orientation, expected):
    result = quaternion_to_euler(euler_to_quaternion(orientation))
    assert result.roll == 0.0
    assert result.pitch == expected.pitch
    assert result.yaw == pytest.approx(expected.yaw, abs=1e-6)
    # Same rotation despite the different triple
    assert angle_between(euler_to_quaternion(result), euler_to_quaternion(orientation)) < 1e-6


def test_to_matrix_agrees_with_rotate():
    q = _random_quaternions(1, seed=21)[0]
    v = normalize(Vector3(0.3, -0.5, 0.8))
    matrix = np.asarray(q.to_matrix())
    assert_allclose(matrix @ np.asarray(v), q.rotate(v), atol=1e-12)


def test_angle_between_is_sign_insensitive():
    q = _random_quaternions(1, seed=4)[0]
    assert angle_between(q, -q) == pytest.approx(0.0, abs=1e-12)
    turn = Quaternion.from_axis_angle(Vector3(0.0, 1.0, 0.0), 0.25)
    assert angle_between(q, quaternion_multiply(q, turn)) == pytest.approx(0.25)
