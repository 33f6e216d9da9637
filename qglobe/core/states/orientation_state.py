"""Orientation state management separated from UI concerns."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Orientation:
    """
    Immutable globe orientation as Euler angles in degrees.

    The world->view rotation is Rx(roll) * Ry(-pitch) * Rz(yaw): yaw spins the
    globe about its polar axis, pitch tilts the pole toward or away from the
    viewer and roll turns the picture about the viewing axis.
    """
    yaw: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0

    def as_tuple(self) -> tuple[float, float, float]:
        return self.yaw, self.pitch, self.roll

    def __str__(self) -> str:
        return f"Yaw: {self.yaw:.1f}, Pitch: {self.pitch:.1f}, Roll: {self.roll:.1f}"


OrientationCallback = Callable[[Orientation], None]


class OrientationView:
    """
    Read-only access to an OrientationState.

    Renderers, projections and hit-testing get a view; only the drag
    controller holds the state itself.
    """

    def __init__(self, state: OrientationState):
        self._state = state

    @property
    def current(self) -> Orientation:
        return self._state.orientation

    def add_changed_callback(self, callback: OrientationCallback) -> None:
        self._state.add_changed_callback(callback)

    def remove_changed_callback(self, callback: OrientationCallback) -> None:
        self._state.remove_changed_callback(callback)


class OrientationState:
    """
    Owns the persistent globe orientation.

    Responsible for:
    - Holding the single Orientation value (replaced, never mutated).
    - Callbacks for orientation changes.
    - Don't have concerns about UI.

    The stored value is swapped by a single reference assignment, so a reader
    on another thread sees either the old or the new triple, never a mix.
    """

    def __init__(self, initial: Orientation | None = None):
        self._orientation: Orientation = initial or Orientation()
        self._on_changed_callbacks: list[OrientationCallback] = []
        self._view = OrientationView(self)

    @property
    def orientation(self) -> Orientation:
        """Get current orientation."""
        return self._orientation

    @property
    def view(self) -> OrientationView:
        """Read-only handle for consumers."""
        return self._view

    def set_orientation(self, orientation: Orientation) -> bool:
        """
        Replace the orientation.

        :param orientation: New orientation
        :return: True if the value changed and callbacks were notified
        """
        if orientation == self._orientation:
            return False
        self._orientation = orientation
        self._notify_changed()
        return True

    def add_changed_callback(self, callback: OrientationCallback) -> None:
        """
        Add a callback for orientation changes.

        Callback signature: callback(orientation: Orientation) -> None
        """
        self._on_changed_callbacks.append(callback)

    def remove_changed_callback(self, callback: OrientationCallback) -> None:
        """Remove a callback for orientation changes."""
        self._on_changed_callbacks.remove(callback)

    def _notify_changed(self) -> None:
        for callback in self._on_changed_callbacks:
            try:
                callback(self._orientation)
            except Exception as e:
                logger.exception(f"Error in orientation callback: {e}")
