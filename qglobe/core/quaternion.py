"""
Quaternion algebra for composing globe rotations.

Quaternions are scalar-first, q = (w, x, y, z), and act on vectors as
v' = q * v * conj(q). Every quaternion treated as a rotation here has unit
norm; products are renormalised so rounding never accumulates into the norm.

Euler triples follow the Orientation convention:

    R = Rx(roll) * Ry(-pitch) * Rz(yaw)    (world -> view)
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from qglobe.core.states.orientation_state import Orientation
from qglobe.core.vector_utils import Vector3, cross, dot, norm, normalize

# Cross products shorter than this are treated as (anti)parallel vectors.
PARALLEL_EPSILON = 1e-12
# |sin(pitch)| closer to 1 than this is treated as gimbal lock.
GIMBAL_LOCK_EPSILON = 1e-9
UNIT_TOLERANCE = 1e-6

_X_AXIS = Vector3(1.0, 0.0, 0.0)
_Z_AXIS = Vector3(0.0, 0.0, 1.0)


@dataclass(frozen=True)
class Quaternion:
    w: float
    x: float
    y: float
    z: float

    @classmethod
    def identity(cls) -> Quaternion:
        return cls(1.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_axis_angle(cls, axis: Vector3, angle: float) -> Quaternion:
        """
        Rotation by ``angle`` radians about ``axis`` (right-hand rule).

        :param axis: Rotation axis, need not be unit length
        :param angle: Angle in radians
        """
        ux, uy, uz = normalize(axis)
        s = math.sin(angle / 2)
        return cls(math.cos(angle / 2), ux * s, uy * s, uz * s)

    @property
    def vector(self) -> Vector3:
        return Vector3(self.x, self.y, self.z)

    @property
    def norm(self) -> float:
        return math.sqrt(self.w ** 2 + self.x ** 2 + self.y ** 2 + self.z ** 2)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return self.w, self.x, self.y, self.z

    def normalized(self) -> Quaternion:
        n = self.norm
        if n == 0:
            raise ValueError("Cannot normalize a zero quaternion.")
        return Quaternion(self.w / n, self.x / n, self.y / n, self.z / n)

    def conjugate(self) -> Quaternion:
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    def is_unit(self, tol: float = UNIT_TOLERANCE) -> bool:
        return abs(self.norm - 1.0) <= tol

    def is_identity(self) -> bool:
        return self.w == 1.0 and self.x == 0.0 and self.y == 0.0 and self.z == 0.0

    def rotate(self, vector: Vector3) -> Vector3:
        """Apply the rotation to a vector."""
        u = self.vector
        t = cross(u, vector)
        t = Vector3(2 * t.x, 2 * t.y, 2 * t.z)
        c = cross(u, t)
        return Vector3(
            vector[0] + self.w * t.x + c.x,
            vector[1] + self.w * t.y + c.y,
            vector[2] + self.w * t.z + c.z,
        )

    def to_matrix(self) -> tuple[tuple[float, float, float], ...]:
        """Row-major 3x3 rotation matrix."""
        w, x, y, z = self.w, self.x, self.y, self.z
        return (
            (1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)),
            (2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)),
            (2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)),
        )

    def __neg__(self) -> Quaternion:
        return Quaternion(-self.w, -self.x, -self.y, -self.z)

    def __mul__(self, other: Quaternion) -> Quaternion:
        return quaternion_multiply(self, other)


def _half_turn(vector: Vector3) -> Quaternion:
    """180 degree rotation about a fixed axis perpendicular to ``vector``."""
    axis = cross(vector, _Z_AXIS)
    if norm(axis) < 1e-6:
        axis = cross(vector, _X_AXIS)
    ax, ay, az = normalize(axis)
    return Quaternion(0.0, ax, ay, az)


def quaternion_from_vectors(v0: Vector3, v1: Vector3) -> Quaternion:
    """
    Minimal rotation taking unit vector ``v0`` onto unit vector ``v1``.

    Parallel vectors give the identity. Antiparallel vectors have no
    defined rotation plane, so a half turn about a fixed perpendicular axis
    is returned: cross(v0, z), or cross(v0, x) when v0 lies on the z axis.
    """
    axis = cross(v0, v1)
    axis_length = norm(axis)
    cos_angle = max(-1.0, min(1.0, dot(v0, v1)))

    if axis_length < PARALLEL_EPSILON:
        if cos_angle > 0:
            return Quaternion.identity()
        return _half_turn(v0)

    half_angle = 0.5 * math.acos(cos_angle)
    s = math.sin(half_angle) / axis_length
    return Quaternion(math.cos(half_angle), axis.x * s, axis.y * s, axis.z * s)


def quaternion_multiply(q1: Quaternion, q2: Quaternion) -> Quaternion:
    """
    Hamilton product q1 * q2 (apply q2 first, then q1).

    The result is renormalised.
    """
    a, b, c, d = q1.w, q1.x, q1.y, q1.z
    e, f, g, h = q2.w, q2.x, q2.y, q2.z
    product = Quaternion(
        a * e - b * f - c * g - d * h,
        a * f + b * e + c * h - d * g,
        a * g - b * h + c * e + d * f,
        a * h + b * g - c * f + d * e,
    )
    return product.normalized()


def euler_to_quaternion(orientation: Orientation) -> Quaternion:
    """
    Convert an Orientation to the unit quaternion of its world->view rotation.

    Equivalent to q_x(roll) * q_y(-pitch) * q_z(yaw).
    """
    half_yaw = math.radians(orientation.yaw) / 2
    half_pitch = math.radians(orientation.pitch) / 2
    half_roll = math.radians(orientation.roll) / 2

    cy, sy = math.cos(half_yaw), math.sin(half_yaw)
    cp, sp = math.cos(half_pitch), math.sin(half_pitch)
    cr, sr = math.cos(half_roll), math.sin(half_roll)

    return Quaternion(
        cr * cp * cy + sr * sp * sy,
        sr * cp * cy - cr * sp * sy,
        -(sr * cp * sy + cr * sp * cy),
        cr * cp * sy - sr * sp * cy,
    )


def quaternion_to_euler(q: Quaternion) -> Orientation:
    """
    Convert a unit quaternion to an Orientation.

    Yaw and roll are in (-180, 180], pitch in [-90, 90]. At gimbal lock
    (pitch = +-90) roll is fixed to 0 and the whole turn about the
    viewing axis is reported as yaw.
    """
    w, x, y, z = q.w, q.x, q.y, q.z
    sin_minus_pitch = max(-1.0, min(1.0, 2 * (x * z + w * y)))

    if abs(sin_minus_pitch) >= 1.0 - GIMBAL_LOCK_EPSILON:
        yaw = math.atan2(2 * (x * y + w * z), 1 - 2 * (x * x + z * z))
        return Orientation(
            yaw=math.degrees(yaw),
            pitch=-math.copysign(90.0, sin_minus_pitch),
            roll=0.0,
        )

    yaw = math.atan2(2 * (w * z - x * y), 1 - 2 * (y * y + z * z))
    pitch = -math.asin(sin_minus_pitch)
    roll = math.atan2(2 * (w * x - y * z), 1 - 2 * (x * x + y * y))
    return Orientation(math.degrees(yaw), math.degrees(pitch), math.degrees(roll))


def angle_between(q1: Quaternion, q2: Quaternion) -> float:
    """
    Angle in radians of the rotation taking q1 to q2.

    q and -q describe the same rotation, so the result is in [0, pi].
    """
    delta = quaternion_multiply(q1.conjugate(), q2)
    return 2 * math.atan2(norm(delta.vector), abs(delta.w))
