from qglobe.viewers.controllers.drag_controller import DragController, InvalidPointerError
from qglobe.viewers.markers import GeoDatum, MarkerPlacement, layout_markers
from qglobe.viewers.projection import OrthographicProjection, ProjectionParameters, ZoomTransform

__all__ = [
    "DragController",
    "InvalidPointerError",
    "GeoDatum",
    "MarkerPlacement",
    "layout_markers",
    "OrthographicProjection",
    "ProjectionParameters",
    "ZoomTransform",
]
