import datetime as dt
import math

import pytest

from gpsclimb.geo.coordinates import Coordinate, TrackPoint, bearing, offset
from gpsclimb.geo.distance import simple_distance
from gpsclimb.geo.projection import (
    MERCATOR_EARTH_RADIUS_M,
    mercator_to_degrees,
    mercator_to_meters,
)

LEIPZIG = Coordinate(latitude=51.323331, longitude=12.368279, elevation=113.0)


class TestOffset:

    def test_north(self):
        moved = offset(LEIPZIG, north=1000)
        assert moved.longitude == LEIPZIG.longitude
        assert moved.latitude > LEIPZIG.latitude
        # offset uses the Mercator radius, distances the mean radius
        assert simple_distance(LEIPZIG, moved) == pytest.approx(998.881, abs=0.01)

    def test_east_and_west(self):
        east = offset(LEIPZIG, east=500)
        west = offset(LEIPZIG, east=-500)
        assert east.longitude > LEIPZIG.longitude > west.longitude
        assert simple_distance(east, west) == pytest.approx(998.88, abs=0.05)

    def test_keeps_elevation(self):
        assert offset(LEIPZIG, north=10).elevation == 113.0

    def test_zero_offset(self):
        assert offset(LEIPZIG) == LEIPZIG


@pytest.mark.parametrize(
    "target, expected",
    [
        (Coordinate(1.0, 0.0), 0.0),
        (Coordinate(0.0, 1.0), 90.0),
        (Coordinate(-1.0, 0.0), 180.0),
        (Coordinate(0.0, -1.0), -90.0),
    ],
)
def test_bearing_cardinal_directions(target, expected):
    assert bearing(Coordinate(0.0, 0.0), target) == pytest.approx(expected)


def test_track_point_is_a_geo_coordinate():
    when = dt.datetime(2025, 4, 26, 8, 0, tzinfo=dt.timezone.utc)
    tp = TrackPoint(coordinate=LEIPZIG, time=when, power=250.0)

    assert (tp.latitude, tp.longitude, tp.elevation) == (51.323331, 12.368279, 113.0)
    assert simple_distance(tp, LEIPZIG) == 0.0
    assert bearing(tp, offset(tp, east=100)) == pytest.approx(90.0, abs=0.01)


class TestMercator:

    def test_origin(self):
        x, y = mercator_to_meters(Coordinate(0.0, 0.0))
        assert x == 0.0
        assert y == pytest.approx(0.0, abs=1e-9)

    def test_antimeridian_x(self):
        x, _ = mercator_to_meters(Coordinate(0.0, 180.0))
        assert x == pytest.approx(math.pi * MERCATOR_EARTH_RADIUS_M)

    def test_northern_latitudes_are_negative_y(self):
        _, y = mercator_to_meters(Coordinate(45.0, 0.0))
        assert y == pytest.approx(-5_621_521.49, abs=0.5)

    def test_degrees(self):
        x, y = mercator_to_degrees(Coordinate(45.0, 10.0))
        assert x == 10.0
        assert y == pytest.approx(-50.498987, abs=1e-4)

    def test_southern_mirror(self):
        _, north = mercator_to_degrees(Coordinate(30.0, 0.0))
        _, south = mercator_to_degrees(Coordinate(-30.0, 0.0))
        assert north == pytest.approx(-south)
