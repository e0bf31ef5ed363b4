# gpsclimb/geo/coordinates.py
"""
Coordinate value types for gpsclimb

Anything exposing `latitude` / `longitude` (degrees) is a GeoCoordinate and can
be used with the distance, bearing and offset helpers. Both the raw
Coordinate and the richer TrackPoint satisfy it.
"""

from __future__ import annotations

import datetime as _dt
import math
from dataclasses import dataclass
from typing import Optional, Protocol

# Spherical radius used for offsetting (same as the Mercator radius)
OFFSET_EARTH_RADIUS_M = 6_378_137.0

VALID_LATITUDE_RANGE = (-90.0, 90.0)
VALID_LONGITUDE_RANGE = (-180.0, 180.0)


class GeoCoordinate(Protocol):
    @property
    def latitude(self) -> float: ...

    @property
    def longitude(self) -> float: ...


@dataclass(frozen=True)
class Coordinate:
    """A geographic sample: degrees / degrees / meters."""

    latitude: float
    longitude: float
    elevation: float = 0.0

    def distance_to(self, other: GeoCoordinate) -> float:
        """Simple (spherical) distance in meters to `other`."""
        from gpsclimb.geo.distance import simple_distance

        return simple_distance(self, other)


@dataclass(frozen=True)
class TrackPoint:
    """
    A recorded track sample.

    Wraps a Coordinate with the optional extras a recording device provides:
      - time:  tz-aware UTC timestamp
      - power: instantaneous power in watts
    """

    coordinate: Coordinate
    time: Optional[_dt.datetime] = None
    power: Optional[float] = None

    @property
    def latitude(self) -> float:
        return self.coordinate.latitude

    @property
    def longitude(self) -> float:
        return self.coordinate.longitude

    @property
    def elevation(self) -> float:
        return self.coordinate.elevation


def offset(coord: GeoCoordinate, north: float = 0.0, east: float = 0.0) -> Coordinate:
    """
    Return a new Coordinate moved `north` / `east` meters from `coord`.

    Flat-earth approximation on a sphere; fine for the short offsets used
    when building synthetic tracks or nudging a known location. Negative
    values move south / west. The elevation of `coord` (if any) is kept.
    """
    d_lat = north / OFFSET_EARTH_RADIUS_M
    d_lon = east / (OFFSET_EARTH_RADIUS_M * math.cos(math.pi * coord.latitude / 180.0))

    return Coordinate(
        latitude=coord.latitude + math.degrees(d_lat),
        longitude=coord.longitude + math.degrees(d_lon),
        elevation=getattr(coord, "elevation", 0.0),
    )


def bearing(origin: GeoCoordinate, target: GeoCoordinate) -> float:
    """Initial bearing from `origin` to `target` in degrees (-180, 180]."""
    lat1 = math.radians(origin.latitude)
    lat2 = math.radians(target.latitude)
    d_lon = math.radians(target.longitude - origin.longitude)

    y = math.sin(d_lon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(d_lon)
    return math.degrees(math.atan2(y, x))
