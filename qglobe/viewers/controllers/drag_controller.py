"""Drag session controller - turns pointer gestures into globe rotation."""
from __future__ import annotations

import logging
import math
from typing import Callable

from qglobe.core.rotation import compute_new_orientation
from qglobe.core.states.drag_state import IDLE, Dragging, DragState
from qglobe.core.states.orientation_state import (
    Orientation,
    OrientationState,
    OrientationView,
)
from qglobe.utils.log_util import log_io
from qglobe.viewers.projection import (
    DEFAULT_SCALE_EXTENT,
    OrthographicProjection,
    ProjectionParameters,
    ZoomTransform,
)

logger = logging.getLogger(__name__)


class InvalidPointerError(ValueError):
    """Raised when a pointer event carries non-finite screen coordinates."""


class DragController:
    """
    Single writer of the globe orientation.

    This class sits between pointer delivery and the projection, managing:
    - The drag state (Idle or Dragging with its grabbed geo point)
    - The persistent orientation, which only this class can change
    - The zoom/pan transform folded into the projection parameters
    - Callbacks for redraws and state transitions

    Usage:
        controller = DragController(ProjectionParameters.for_viewport(800, 600))
        controller.add_redraw_callback(widget.update)
        controller.pointer_down(x0, y0)
        controller.pointer_move(x1, y1)
        controller.pointer_up()
    """

    def __init__(self, parameters: ProjectionParameters | None = None,
                 initial: Orientation | None = None,
                 scale_extent: tuple[float, float] = DEFAULT_SCALE_EXTENT):
        self._orientation = OrientationState(initial)
        self._base_parameters = parameters or ProjectionParameters()
        self._scale_extent = scale_extent
        self._zoom = ZoomTransform()
        self._projection = OrthographicProjection(self._orientation.view, self._base_parameters)
        self._state: DragState = IDLE

        self._on_redraw_callbacks: list[Callable[[Orientation], None]] = []
        self._on_state_changed_callbacks: list[Callable[[DragState, DragState], None]] = []

    @property
    def state(self) -> DragState:
        """Get current drag state."""
        return self._state

    @property
    def is_dragging(self) -> bool:
        return self._state.is_dragging

    @property
    def orientation(self) -> OrientationView:
        """Read-only handle on the orientation."""
        return self._orientation.view

    @property
    def projection(self) -> OrthographicProjection:
        return self._projection

    @property
    def zoom(self) -> ZoomTransform:
        """Current zoom/pan transform, already clamped to the scale extent."""
        return self._zoom

    @log_io()
    def pointer_down(self, x: float, y: float) -> Dragging:
        """
        Start a gesture at a screen position.

        A press while already dragging restarts the gesture from the new
        position.
        :param x: Screen x
        :param y: Screen y
        :return: The new Dragging state
        """
        self._validate(x, y)
        origin = self._projection.inverse_project((x, y))
        if self._state.is_dragging:
            logger.debug("Pointer down while dragging; restarting the gesture")
        self._set_state(Dragging(origin=origin, start_orientation=self._orientation.orientation))
        return self._state

    def pointer_move(self, x: float, y: float) -> Orientation | None:
        """
        Rotate the globe so the grabbed point follows the pointer.

        :return: The stored orientation after the move, or None when idle
        """
        self._validate(x, y)
        state = self._state
        if not state.is_dragging:
            return None

        current = self._orientation.orientation
        pointer_geo = self._projection.inverse_project((x, y))
        new_orientation = compute_new_orientation(state.origin, pointer_geo, current)

        if self._orientation.set_orientation(new_orientation):
            logger.debug(f"Globe rotation: {new_orientation}")
            self._notify_redraw()
        return self._orientation.orientation

    def pointer_up(self) -> None:
        """Finish the gesture; the orientation is kept."""
        state = self._state
        if state.is_dragging:
            logger.info(f"Drag finished at {self._orientation.orientation} "
                        f"(started at {state.start_orientation})")
        self._set_state(IDLE)

    def cancel(self) -> None:
        """Abort the gesture (pointer cancel or lost capture); the orientation is kept."""
        if self._state.is_dragging:
            logger.info("Drag cancelled")
        self._set_state(IDLE)

    def set_parameters(self, parameters: ProjectionParameters) -> None:
        """Replace the un-zoomed scale/translate/clip values; the current zoom is kept."""
        self._base_parameters = parameters
        self._apply_projection()

    def apply_zoom(self, transform: ZoomTransform) -> ZoomTransform:
        """
        Apply a zoom/pan transform from the zoom collaborator.

        The transform replaces the previous one rather than composing with it.
        A gesture in progress keeps its grabbed point.
        :param transform: Scale factor k and offset (x, y) in screen pixels
        :return: The transform actually applied, k clamped to the scale extent
        """
        self._zoom = transform.clamped(self._scale_extent)
        logger.debug(f"Zoom: {self._zoom}")
        self._apply_projection()
        return self._zoom

    def add_redraw_callback(self, callback: Callable[[Orientation], None]) -> None:
        """
        Add a callback asking the renderer to redraw.

        Callback signature: callback(orientation: Orientation) -> None
        """
        self._on_redraw_callbacks.append(callback)

    def add_state_changed_callback(
            self,
            callback: Callable[[DragState, DragState], None]
    ) -> None:
        """
        Add a callback for drag state transitions.

        Callback signature: callback(old_state: DragState, new_state: DragState) -> None
        """
        self._on_state_changed_callbacks.append(callback)

    @staticmethod
    def _validate(x: float, y: float) -> None:
        try:
            finite = math.isfinite(x) and math.isfinite(y)
        except TypeError:
            finite = False
        if not finite:
            raise InvalidPointerError(f"Pointer position must be finite, got ({x}, {y})")

    def _apply_projection(self) -> None:
        self._projection.parameters = self._base_parameters.with_zoom(self._zoom, self._scale_extent)
        self._notify_redraw()

    def _set_state(self, new_state: DragState) -> None:
        old_state = self._state
        self._state = new_state
        if old_state is new_state:
            return
        for callback in self._on_state_changed_callbacks:
            try:
                callback(old_state, new_state)
            except Exception as e:
                logger.exception(f"Error in drag state callback: {e}")

    def _notify_redraw(self) -> None:
        orientation = self._orientation.orientation
        for callback in self._on_redraw_callbacks:
            try:
                callback(orientation)
            except Exception as e:
                logger.exception(f"Error in redraw callback: {e}")
