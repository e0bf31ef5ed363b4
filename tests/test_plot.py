import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pytest  # noqa: E402

from gpsclimb.formats.gpx import read_track  # noqa: E402
from gpsclimb.visualize.plot import plot_profile, plot_track  # noqa: E402


@pytest.fixture
def track(sample_gpx_path):
    return read_track(sample_gpx_path)


def test_plot_profile_shades_climbs(track):
    climbs = track.graph.climbs()
    fig = plot_profile(track.graph, climbs, title=track.title)
    try:
        ax_ele, ax_grade = fig.axes
        assert ax_ele.get_title() == "Hill repeat"
        assert len(ax_ele.patches) == len(climbs) == 1
        assert ax_grade.get_ylabel() == "Grade (%)"
    finally:
        plt.close(fig)


def test_plot_track_with_elevations(track):
    fig = plot_track([p.coordinate for p in track.points], [p.elevation for p in track.points])
    try:
        # map axes plus colorbar
        assert len(fig.axes) == 2
    finally:
        plt.close(fig)


def test_plot_track_without_elevations(track):
    fig = plot_track([p.coordinate for p in track.points])
    try:
        (ax,) = fig.axes
        (line,) = ax.get_lines()
        assert len(line.get_xdata()) == len(track.points)
    finally:
        plt.close(fig)
