"""Orthographic projection parameterised by the globe orientation."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Sequence

import numpy as np

from qglobe.core.geo import GeoPoint, angular_distance, lonlat2xyz, xyz2lonlat
from qglobe.core.quaternion import euler_to_quaternion
from qglobe.core.states.orientation_state import OrientationView
from qglobe.core.vector_utils import Vector3

logger = logging.getLogger(__name__)

ScreenPoint = tuple[float, float]

DEFAULT_SCALE = 300.0
DEFAULT_CLIP_ANGLE = 90.0
DEFAULT_SCALE_EXTENT = (0.1, 20.0)


@dataclass(frozen=True)
class ZoomTransform:
    """
    2-D zoom/pan transform applied on top of the projected output.

    A screen point p is displayed at k * p + (x, y).
    """
    k: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def clamped(self, scale_extent: tuple[float, float] = DEFAULT_SCALE_EXTENT) -> ZoomTransform:
        """Return the transform with k limited to ``scale_extent``."""
        lo, hi = scale_extent
        return replace(self, k=max(lo, min(hi, self.k)))


@dataclass(frozen=True)
class ProjectionParameters:
    """
    Scale, screen offset and clip angle of the projection.

    Independent of the orientation; replaced by the zoom/pan collaborator.
    """
    scale: float = DEFAULT_SCALE
    translate: ScreenPoint = (0.0, 0.0)
    clip_angle: float = DEFAULT_CLIP_ANGLE

    def __post_init__(self):
        if not (math.isfinite(self.scale) and self.scale > 0):
            raise ValueError(f"Projection scale must be positive, got {self.scale}")
        if not (0 < self.clip_angle <= 180):
            raise ValueError(f"Clip angle must be in (0, 180], got {self.clip_angle}")

    @classmethod
    def for_viewport(cls, width: float, height: float,
                     scale: float = DEFAULT_SCALE,
                     clip_angle: float = DEFAULT_CLIP_ANGLE) -> ProjectionParameters:
        """Centre the globe in a viewport of the given size."""
        return cls(scale=scale, translate=(width / 2, height / 2), clip_angle=clip_angle)

    def with_zoom(self, transform: ZoomTransform,
                  scale_extent: tuple[float, float] = DEFAULT_SCALE_EXTENT) -> ProjectionParameters:
        """
        Fold a zoom transform into the parameters.

        ``self`` is the un-zoomed base; the result projects straight to
        the zoomed screen position, so inverse projection of pointer
        coordinates stays consistent with what is displayed.
        """
        t = transform.clamped(scale_extent)
        tx, ty = self.translate
        return replace(self, scale=self.scale * t.k, translate=(t.k * tx + t.x, t.k * ty + t.y))


class OrthographicProjection:
    """
    Forward and inverse orthographic projection of the globe.

    The view looks down the +x axis of the rotated sphere: a world vector v
    is rotated to u = R * v and drawn at (tx + s * u_y, ty - s * u_z).
    Pure functions over the current orientation and parameters.
    """

    def __init__(self, orientation: OrientationView,
                 parameters: ProjectionParameters | None = None) -> None:
        self._orientation = orientation
        self._parameters = parameters or ProjectionParameters()

    @property
    def parameters(self) -> ProjectionParameters:
        return self._parameters

    @parameters.setter
    def parameters(self, parameters: ProjectionParameters) -> None:
        self._parameters = parameters
        logger.debug(f"Projection parameters: {parameters}")

    @property
    def orientation(self) -> OrientationView:
        return self._orientation

    def forward_project(self, geo: GeoPoint) -> ScreenPoint:
        """
        Project a geo point to screen coordinates.

        Points on the far hemisphere are still projected; use
        is_front_facing() to decide whether to draw them.
        """
        q = euler_to_quaternion(self._orientation.current)
        u = q.rotate(lonlat2xyz(geo[0], geo[1]))
        tx, ty = self._parameters.translate
        s = self._parameters.scale
        return tx + s * u.y, ty - s * u.z

    def inverse_project(self, point: ScreenPoint) -> GeoPoint:
        """
        Geo point under a screen position.

        Positions off the disk are clamped onto its rim, so a drag that
        leaves the globe keeps turning it instead of producing NaN.
        """
        tx, ty = self._parameters.translate
        s = self._parameters.scale
        uy = (point[0] - tx) / s
        uz = (ty - point[1]) / s
        rho = math.hypot(uy, uz)
        if rho > 1.0:
            uy, uz = uy / rho, uz / rho
            ux = 0.0
        else:
            ux = math.sqrt(max(0.0, 1.0 - rho * rho))

        q = euler_to_quaternion(self._orientation.current)
        v = q.conjugate().rotate(Vector3(ux, uy, uz))
        return xyz2lonlat(v)

    def contains(self, point: ScreenPoint) -> bool:
        """Return True if the screen position lies on the drawn disk."""
        tx, ty = self._parameters.translate
        radius = self._parameters.scale * math.sin(math.radians(min(90.0, self._parameters.clip_angle)))
        return math.hypot(point[0] - tx, point[1] - ty) <= radius

    def center(self) -> GeoPoint:
        """Geo point at the projection centre."""
        q = euler_to_quaternion(self._orientation.current)
        return xyz2lonlat(q.conjugate().rotate(Vector3(1.0, 0.0, 0.0)))

    def is_front_facing(self, geo: GeoPoint, horizon: float | None = None) -> bool:
        """
        Return True when ``geo`` lies on the visible hemisphere.

        :param geo: (longitude, latitude) in degrees
        :param horizon: Angular threshold in degrees; defaults to the clip angle
        """
        threshold = self._parameters.clip_angle if horizon is None else horizon
        return angular_distance(geo, self.center()) < math.radians(threshold)

    def project_many(self, longitudes: Sequence[float],
                     latitudes: Sequence[float]) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Batch forward projection.

        :return: (xs, ys, distances) where distances are great-circle angles
                 in radians from each point to the projection centre
        """
        lon = np.radians(np.asarray(longitudes, dtype=np.float64))
        lat = np.radians(np.asarray(latitudes, dtype=np.float64))
        cos_lat = np.cos(lat)
        world = np.stack([cos_lat * np.cos(lon), cos_lat * np.sin(lon), np.sin(lat)])

        matrix = np.asarray(euler_to_quaternion(self._orientation.current).to_matrix())
        view = matrix @ world

        tx, ty = self._parameters.translate
        s = self._parameters.scale
        xs = tx + s * view[1]
        ys = ty - s * view[2]
        distances = np.arccos(np.clip(view[0], -1.0, 1.0))
        return xs, ys, distances
