"""Vector utility functions for 3-component vectors."""
from __future__ import annotations

import math
from typing import NamedTuple


class Vector3(NamedTuple):
    """A point on, or a direction in, 3-space."""
    x: float
    y: float
    z: float


def dot(vector1: Vector3, vector2: Vector3) -> float:
    """
    Calculate the dot product of two 3D vectors.

    :param vector1: Vector (x, y, z)
    :param vector2: Vector (x, y, z)
    :return: Dot product of the two vectors
    """
    return vector1[0] * vector2[0] + vector1[1] * vector2[1] + vector1[2] * vector2[2]


def cross(vector1: Vector3, vector2: Vector3) -> Vector3:
    """
    Calculate the cross product of two 3D vectors.

    :param vector1: First vector (x, y, z)
    :param vector2: Second vector (x, y, z)
    :return: Cross product vector (x, y, z)
    """
    return Vector3(
        vector1[1] * vector2[2] - vector1[2] * vector2[1],
        vector1[2] * vector2[0] - vector1[0] * vector2[2],
        vector1[0] * vector2[1] - vector1[1] * vector2[0],
    )


def norm(vector: Vector3) -> float:
    """Calculate the Euclidean length of a vector."""
    return math.sqrt(vector[0] ** 2 + vector[1] ** 2 + vector[2] ** 2)


def normalize(vector: Vector3) -> Vector3:
    """
    Normalize a 3D vector.

    :param vector: Vector (x, y, z)
    :return: Normalized vector (x, y, z)
    :raises ValueError: if the vector has zero length
    """
    length = norm(vector)
    if length == 0:
        raise ValueError("Cannot normalize a zero-length vector.")
    return Vector3(vector[0] / length, vector[1] / length, vector[2] / length)
