from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Callable

from qglobe.core.states.orientation_state import Orientation
from qglobe.viewers.projection import ProjectionParameters


@dataclass
class StatusField:
    """
    A status bar entry: a label, a formatter and the current value.

    :ivar label: The label/name of the status field.
    :ivar fmt: The format string used when no formatter is given.
    :ivar formatter: Callable turning the value into display text.
    :ivar value: The numerical value of the field.
    """
    label: str
    fmt: str = "{}"
    formatter: Callable[[Any], str] | None = None
    value: float | int = 0.0

    def __post_init__(self):
        if self.formatter is None:
            self.formatter = lambda v, fmt=self.fmt: fmt.format(v)

    def text(self) -> str:
        return f"{self.label}: {self.formatter(self.value)}"


def format_yaw(yaw: float) -> str:
    """
    Format the yaw angle in degrees.
    + -> E (the globe is turned eastward)
    - -> W
    """
    angle = abs(yaw)
    if yaw >= 0:
        return f"E {angle:.2f}"
    else:
        return f"W {angle:.2f}"


def format_pitch(pitch: float) -> str:
    """
    Format the pitch angle in degrees.
    + -> S (south pole tilted toward the viewer)
    - -> N
    """
    angle = abs(pitch)
    if pitch >= 0:
        return f"S {angle:.2f}"
    else:
        return f"N {angle:.2f}"


# To show another value, add a field here and fill it in orientation_status().
STATUS_FIELDS = {
    "yaw": StatusField(label="Yaw", formatter=format_yaw),
    "pitch": StatusField(label="Pitch", formatter=format_pitch),
    "roll": StatusField(label="Roll", fmt="{:.2f}"),
    "scale": StatusField(label="Scale", fmt="{:.0f}"),
}


def orientation_status(orientation: Orientation,
                       parameters: ProjectionParameters | None = None) -> dict[str, StatusField]:
    """Return a fresh copy of STATUS_FIELDS filled with the current values."""
    fields = {k: copy.deepcopy(v) for k, v in STATUS_FIELDS.items()}
    fields["yaw"].value = orientation.yaw
    fields["pitch"].value = orientation.pitch
    fields["roll"].value = orientation.roll
    if parameters is not None:
        fields["scale"].value = parameters.scale
    return fields
