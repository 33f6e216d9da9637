"""Conversions between geographic coordinates and unit vectors on the sphere."""
from __future__ import annotations

import math
from typing import NamedTuple

from qglobe.core.vector_utils import Vector3


class GeoPoint(NamedTuple):
    """A geographic point in degrees."""
    longitude: float
    latitude: float


def lonlat2xyz(longitude: float, latitude: float) -> Vector3:
    """
    Convert a (longitude, latitude) pair in degrees to a unit vector.

    (0, 0) maps to +x, (90, 0) to +y and the north pole to +z.

    :param longitude: Longitude in degrees
    :param latitude: Latitude in degrees
    :return: Unit vector (x, y, z)
    """
    lon = math.radians(longitude)
    lat = math.radians(latitude)
    cos_lat = math.cos(lat)
    return Vector3(cos_lat * math.cos(lon), cos_lat * math.sin(lon), math.sin(lat))


def xyz2lonlat(vector: Vector3) -> GeoPoint:
    """
    Convert a unit vector back to a geographic point in degrees.

    The z component is clamped to [-1, 1] so rounding overshoot cannot
    leave the domain of asin.
    """
    x, y, z = vector
    z = max(-1.0, min(1.0, z))
    return GeoPoint(math.degrees(math.atan2(y, x)), math.degrees(math.asin(z)))


def angular_distance(a: GeoPoint, b: GeoPoint) -> float:
    """
    Great-circle distance between two geo points, in radians (haversine).

    :param a: First point (longitude, latitude) in degrees
    :param b: Second point (longitude, latitude) in degrees
    :return: Angle in [0, pi]
    """
    lon_a, lat_a = math.radians(a[0]), math.radians(a[1])
    lon_b, lat_b = math.radians(b[0]), math.radians(b[1])
    d_lat = lat_b - lat_a
    d_lon = lon_b - lon_a
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat_a) * math.cos(lat_b) * math.sin(d_lon / 2) ** 2
    return 2 * math.asin(math.sqrt(min(1.0, h)))


def is_finite_geo(point: GeoPoint) -> bool:
    return math.isfinite(point[0]) and math.isfinite(point[1])
