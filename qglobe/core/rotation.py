"""Drag-to-rotation composition."""
from __future__ import annotations

from qglobe.core.geo import GeoPoint, lonlat2xyz
from qglobe.core.quaternion import (
    euler_to_quaternion,
    quaternion_from_vectors,
    quaternion_multiply,
    quaternion_to_euler,
)
from qglobe.core.states.orientation_state import Orientation


def compute_new_orientation(
        drag_origin: GeoPoint,
        current_pointer: GeoPoint,
        orientation: Orientation,
) -> Orientation:
    """
    Orientation that brings the grabbed surface point under the pointer.

    ``drag_origin`` is the geo point grabbed at pointer-down and
    ``current_pointer`` the geo point under the pointer, inverse-projected
    with ``orientation``. The drag rotation carries the origin onto the
    current point and is applied first, in the frame of the existing
    orientation: q_new = q_orientation * q_drag. Because the projection
    shows R(q) * v, the grabbed point then projects exactly where the
    pointer is.

    :param drag_origin: (longitude, latitude) grabbed at pointer-down
    :param current_pointer: (longitude, latitude) under the pointer now
    :param orientation: Orientation in effect when the pointer position was inverted
    :return: New orientation; ``orientation`` itself when the points coincide
    """
    v0 = lonlat2xyz(drag_origin[0], drag_origin[1])
    v1 = lonlat2xyz(current_pointer[0], current_pointer[1])

    q_drag = quaternion_from_vectors(v0, v1)
    if q_drag.is_identity():
        return orientation

    q_current = euler_to_quaternion(orientation)
    q_new = quaternion_multiply(q_current, q_drag)
    return quaternion_to_euler(q_new)
