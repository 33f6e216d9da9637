import dataclasses
import logging

import pytest

from qglobe.core.geo import GeoPoint
from qglobe.core.states.drag_state import IDLE, Dragging, Idle
from qglobe.core.states.orientation_state import Orientation, OrientationState


def test_orientation_is_immutable():
    o = Orientation(1.0, 2.0, 3.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        o.yaw = 5.0
    assert str(o) == "Yaw: 1.0, Pitch: 2.0, Roll: 3.0"


def test_set_orientation_notifies_on_change():
    state = OrientationState()
    seen = []
    state.view.add_changed_callback(seen.append)

    assert state.set_orientation(Orientation(10.0, 0.0, 0.0)) is True
    assert state.set_orientation(Orientation(10.0, 0.0, 0.0)) is False
    assert seen == [Orientation(10.0, 0.0, 0.0)]
    assert state.view.current == Orientation(10.0, 0.0, 0.0)


def test_remove_changed_callback():
    state = OrientationState()
    seen = []
    state.add_changed_callback(seen.append)
    state.view.remove_changed_callback(seen.append)
    state.set_orientation(Orientation(yaw=1.0))
    assert seen == []


def test_callback_errors_are_logged(caplog):
    state = OrientationState()
    seen = []

    def broken(_orientation):
        raise RuntimeError("renderer gone")

    state.add_changed_callback(broken)
    state.add_changed_callback(seen.append)
    with caplog.at_level(logging.ERROR):
        state.set_orientation(Orientation(pitch=20.0))
    assert "Error in orientation callback" in caplog.text
    assert seen == [Orientation(pitch=20.0)]


def test_drag_states():
    assert isinstance(IDLE, Idle)
    assert not IDLE.is_dragging
    dragging = Dragging(origin=GeoPoint(1.0, 2.0), start_orientation=Orientation())
    assert dragging.is_dragging
    assert dragging.origin.latitude == 2.0
