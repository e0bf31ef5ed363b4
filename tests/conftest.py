import math
from pathlib import Path

import pytest

from gpsclimb.geo.coordinates import Coordinate
from gpsclimb.geo.distance import EARTH_RADIUS_M


def meridian_track(elevations, spacing_m):
    """
    Coordinates due north along the Greenwich meridian, `spacing_m` apart as
    measured by the simple (spherical) distance.
    """
    step = math.degrees(spacing_m / EARTH_RADIUS_M)
    return [
        Coordinate(latitude=i * step, longitude=0.0, elevation=ele)
        for i, ele in enumerate(elevations)
    ]


@pytest.fixture
def sample_gpx_path() -> Path:
    return Path(__file__).parent / "data" / "sample.gpx"


@pytest.fixture
def clean_env(monkeypatch):
    """Remove GPSCLIMB_* overrides inherited from the calling shell."""
    import os

    for var in list(os.environ):
        if var.startswith("GPSCLIMB_"):
            monkeypatch.delenv(var, raising=False)
    return monkeypatch
