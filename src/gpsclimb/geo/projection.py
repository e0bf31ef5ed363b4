# gpsclimb/geo/projection.py
"""
Spherical Mercator projections for plotting tracks

Fast approximation of the ellipsoidal projection. Distances measured in the
projected plane are only exact on the Equator; good enough for drawing a
track, not for measuring it (use gpsclimb.geo.distance for that).

The y axis is flipped (north is negative) so screen-style coordinates come
out directly.
"""

from __future__ import annotations

import math

from gpsclimb.geo.coordinates import GeoCoordinate

MERCATOR_EARTH_RADIUS_M = 6_378_137.0


def mercator_to_meters(coord: GeoCoordinate) -> tuple[float, float]:
    """Project `coord` to (x, y) meters."""
    lat = math.radians(coord.latitude)
    y = math.log(math.tan(math.pi / 4.0 + lat / 2.0)) * MERCATOR_EARTH_RADIUS_M
    x = math.radians(coord.longitude) * MERCATOR_EARTH_RADIUS_M
    return x, -y


def mercator_to_degrees(coord: GeoCoordinate) -> tuple[float, float]:
    """Project `coord` to (x, y) in degrees (x is the longitude)."""
    lat = math.radians(coord.latitude)
    return coord.longitude, -math.degrees(math.log(math.tan(lat / 2.0 + math.pi / 4.0)))
