"""Qt event filter driving the drag controller from mouse events."""
from __future__ import annotations

import logging

from PySide6 import QtCore
from PySide6.QtCore import QEvent, Qt

from qglobe.app.app_settings_manager import AppSettingsManager
from qglobe.viewers.controllers.drag_controller import DragController, InvalidPointerError

logger = logging.getLogger(__name__)

# Events meaning the pointer gesture can no longer be trusted.
CANCEL_EVENTS = (
    QEvent.Type.UngrabMouse,
    QEvent.Type.TouchCancel,
    QEvent.Type.WindowDeactivate,
)


class GlobeInteractorStyle(QtCore.QObject):
    """
    Left-button drag rotates the globe.

    Install on the widget that shows the globe:
        style = GlobeInteractorStyle(controller, widget)
        widget.installEventFilter(style)

    Pointer positions are taken in the widget's own coordinates, which must
    be the coordinates the projection parameters are expressed in.
    """

    def __init__(self, controller: DragController, target: QtCore.QObject,
                 settings_manager: AppSettingsManager | None = None,
                 parent: QtCore.QObject | None = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self._target = target
        self._settings_manager = settings_manager

    @property
    def controller(self) -> DragController:
        return self._controller

    def eventFilter(self, obj: QtCore.QObject, event: QtCore.QEvent) -> bool:
        if obj is not self._target:
            return super().eventFilter(obj, event)

        etype = event.type()
        if etype == QEvent.Type.MouseButtonPress and event.button() == Qt.MouseButton.LeftButton:
            pos = event.position()
            return self._dispatch(self._controller.pointer_down, pos.x(), pos.y())
        if etype == QEvent.Type.MouseMove and self._controller.is_dragging:
            pos = event.position()
            return self._dispatch(self._controller.pointer_move, pos.x(), pos.y())
        if etype == QEvent.Type.MouseButtonRelease and event.button() == Qt.MouseButton.LeftButton:
            if self._controller.is_dragging:
                self._controller.pointer_up()
                return True
            return False
        if etype in CANCEL_EVENTS and self._controller.is_dragging:
            logger.debug(f"Drag cancelled by {etype}")
            self._controller.cancel()
        return super().eventFilter(obj, event)

    def _dispatch(self, handler, x: float, y: float) -> bool:
        try:
            handler(x, y)
        except InvalidPointerError:
            logger.warning("Ignoring pointer event at (%s, %s)", x, y, exc_info=True)
            self._controller.cancel()
            if self._settings_manager is not None and self._settings_manager.dev_mode:
                raise
        return True
