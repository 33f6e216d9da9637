"""Screen layout of geo markers and their labels."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from qglobe.core.geo import GeoPoint, is_finite_geo
from qglobe.viewers.projection import OrthographicProjection

logger = logging.getLogger(__name__)

DEFAULT_LABEL_OFFSET = 5.0
# Markers disappear before the limb; labels last until the limb.
DEFAULT_MARKER_HORIZON_DEG = math.degrees(1.2)
DEFAULT_LABEL_HORIZON_DEG = math.degrees(1.57)


@dataclass(frozen=True)
class GeoDatum:
    """A value pinned to a place on the globe."""
    uid: str
    latitude: float
    longitude: float
    value: float | str | None = None
    color: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GeoDatum:
        """
        Build from a mapping with keys uid, lat, long and optional value, color.

        :raises ValueError: if a coordinate is missing or not finite
        """
        try:
            lat = float(data["lat"])
            lon = float(data["long"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid marker coordinates: {data!r}") from e
        if not is_finite_geo(GeoPoint(lon, lat)):
            raise ValueError(f"Marker coordinates must be finite: {data!r}")
        return cls(
            uid=str(data.get("uid", "")),
            latitude=lat,
            longitude=lon,
            value=data.get("value"),
            color=data.get("color"),
        )


@dataclass(frozen=True)
class MarkerPlacement:
    """Where (and whether) to draw one marker and its label."""
    uid: str
    x: float
    y: float
    label_x: float
    label_y: float
    marker_visible: bool
    label_visible: bool
    value: float | str | None = None
    color: str | None = None


def layout_markers(
        data: Iterable[GeoDatum],
        projection: OrthographicProjection,
        marker_horizon_deg: float | None = None,
        label_horizon_deg: float | None = None,
        label_offset: float = DEFAULT_LABEL_OFFSET,
) -> list[MarkerPlacement]:
    """
    Place markers and labels for the current orientation.

    A marker (or label) is visible while its great-circle distance to the
    projection centre is below its horizon. A horizon of None means the
    clip angle. Labels sit ``label_offset`` pixels above their marker.
    """
    items = list(data)
    if not items:
        return []

    clip = projection.parameters.clip_angle
    marker_limit = math.radians(clip if marker_horizon_deg is None else marker_horizon_deg)
    label_limit = math.radians(clip if label_horizon_deg is None else label_horizon_deg)

    xs, ys, distances = projection.project_many(
        [d.longitude for d in items], [d.latitude for d in items])

    placements = []
    for datum, x, y, distance in zip(items, xs, ys, distances):
        placements.append(MarkerPlacement(
            uid=datum.uid,
            x=float(x),
            y=float(y),
            label_x=float(x),
            label_y=float(y) - label_offset,
            marker_visible=bool(distance < marker_limit),
            label_visible=bool(distance < label_limit),
            value=datum.value,
            color=datum.color,
        ))

    logger.debug(
        "Laid out %d markers, %d visible",
        len(placements), sum(p.marker_visible for p in placements),
    )
    return placements
