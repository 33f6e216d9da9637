import math
import os
import sys
from types import SimpleNamespace

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6 import QtWidgets
from PySide6.QtCore import QEvent, QPointF, Qt
from PySide6.QtGui import QMouseEvent

from qglobe.core.states.orientation_state import Orientation
from qglobe.viewers.controllers.drag_controller import DragController, InvalidPointerError
from qglobe.viewers.interactor_styles.globe_interactor_style import GlobeInteractorStyle
from qglobe.viewers.projection import ProjectionParameters

CX, CY = 400.0, 300.0


@pytest.fixture(scope="session")
def qapp():
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication(sys.argv)
    return app


@pytest.fixture
def widget(qapp):
    w = QtWidgets.QWidget()
    w.resize(800, 600)
    yield w
    w.deleteLater()


@pytest.fixture
def controller():
    return DragController(ProjectionParameters.for_viewport(800.0, 600.0, scale=300.0))


@pytest.fixture
def style(controller, widget):
    s = GlobeInteractorStyle(controller, widget)
    widget.installEventFilter(s)
    return s


def _mouse(etype, x, y, button=Qt.MouseButton.LeftButton, buttons=Qt.MouseButton.LeftButton):
    pos = QPointF(x, y)
    return QMouseEvent(etype, pos, pos, button, buttons, Qt.KeyboardModifier.NoModifier)


def _press(x, y, button=Qt.MouseButton.LeftButton):
    return _mouse(QEvent.Type.MouseButtonPress, x, y, button, button)


def _move(x, y):
    return _mouse(QEvent.Type.MouseMove, x, y, Qt.MouseButton.NoButton, Qt.MouseButton.LeftButton)


def _release(x, y, button=Qt.MouseButton.LeftButton):
    return _mouse(QEvent.Type.MouseButtonRelease, x, y, button, Qt.MouseButton.NoButton)


def test_left_drag_rotates_globe(style, widget, controller):
    assert style.eventFilter(widget, _press(CX, CY)) is True
    assert controller.is_dragging

    assert style.eventFilter(widget, _move(CX + 300.0 * math.sin(math.radians(10.0)), CY)) is True
    assert controller.orientation.current.yaw == pytest.approx(10.0, abs=1e-6)

    assert style.eventFilter(widget, _release(CX, CY)) is True
    assert not controller.is_dragging
    assert controller.orientation.current.yaw == pytest.approx(10.0, abs=1e-6)


def test_right_button_is_ignored(style, widget, controller):
    assert style.eventFilter(widget, _press(CX, CY, Qt.MouseButton.RightButton)) is False
    assert not controller.is_dragging


def test_hover_move_is_not_consumed(style, widget, controller):
    assert style.eventFilter(widget, _move(CX + 20, CY)) is False
    assert controller.orientation.current == Orientation()


def test_release_without_press_is_not_consumed(style, widget):
    assert style.eventFilter(widget, _release(CX, CY)) is False


def test_other_objects_are_ignored(style, controller, qapp):
    other = QtWidgets.QWidget()
    assert style.eventFilter(other, _press(CX, CY)) is False
    assert not controller.is_dragging
    other.deleteLater()


@pytest.mark.parametrize("etype", [QEvent.Type.UngrabMouse, QEvent.Type.WindowDeactivate])
def test_cancel_events_end_drag(style, widget, controller, etype):
    style.eventFilter(widget, _press(CX, CY))
    style.eventFilter(widget, _move(CX + 40, CY + 10))
    rotated = controller.orientation.current

    style.eventFilter(widget, QEvent(etype))
    assert not controller.is_dragging
    assert controller.orientation.current == rotated


def test_invalid_pointer_is_logged_and_cancels(style, controller, caplog):
    controller.pointer_down(CX, CY)
    assert style._dispatch(controller.pointer_move, math.nan, CY) is True
    assert not controller.is_dragging
    assert "Ignoring pointer event" in caplog.text


def test_invalid_pointer_raises_in_development(controller, widget):
    settings = SimpleNamespace(dev_mode=True)
    s = GlobeInteractorStyle(controller, widget, settings_manager=settings)
    with pytest.raises(InvalidPointerError):
        s._dispatch(controller.pointer_down, math.inf, CY)
    assert not controller.is_dragging
