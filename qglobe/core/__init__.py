"""Core components layer - rotation math and state, independent of Qt."""

from qglobe.core.geo import GeoPoint, angular_distance, lonlat2xyz, xyz2lonlat
from qglobe.core.quaternion import (
    Quaternion,
    euler_to_quaternion,
    quaternion_from_vectors,
    quaternion_multiply,
    quaternion_to_euler,
)
from qglobe.core.rotation import compute_new_orientation
from qglobe.core.states.drag_state import Dragging, DragState, Idle
from qglobe.core.states.orientation_state import Orientation, OrientationState, OrientationView
from qglobe.core.vector_utils import Vector3, cross, dot, normalize

__all__ = [
    "GeoPoint",
    "angular_distance",
    "lonlat2xyz",
    "xyz2lonlat",
    "Quaternion",
    "euler_to_quaternion",
    "quaternion_from_vectors",
    "quaternion_multiply",
    "quaternion_to_euler",
    "compute_new_orientation",
    "Dragging",
    "DragState",
    "Idle",
    "Orientation",
    "OrientationState",
    "OrientationView",
    "Vector3",
    "cross",
    "dot",
    "normalize",
]
