from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from qglobe.core.geo import GeoPoint
from qglobe.core.states.orientation_state import Orientation


@dataclass(frozen=True)
class Idle:
    """No gesture in progress."""

    @property
    def is_dragging(self) -> bool:
        return False


@dataclass(frozen=True)
class Dragging:
    """
    A live drag gesture.

    Key points:
    - `origin` is the geo point grabbed at pointer-down, fixed for the gesture.
    - `start_orientation` is the orientation in effect at pointer-down; it is
      reported when the gesture finishes. Moves always compose onto the
      stored orientation, never onto this one.
    """
    origin: GeoPoint
    start_orientation: Orientation

    @property
    def is_dragging(self) -> bool:
        return True


DragState = Union[Idle, Dragging]

IDLE = Idle()
