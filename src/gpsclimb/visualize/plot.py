# gpsclimb/visualize/plot.py
"""
Plotting routines for gpsclimb
"""

from typing import Optional, Sequence

import matplotlib.pyplot as plt

from gpsclimb.analyze.climbs import Climb
from gpsclimb.analyze.graph import TrackGraph
from gpsclimb.geo.coordinates import GeoCoordinate
from gpsclimb.geo.projection import mercator_to_meters


def plot_profile(graph: TrackGraph, climbs: Sequence[Climb] = (), title: Optional[str] = None):
    """Elevation over distance, grade segments as steps, climbs shaded."""
    fig, (ax_ele, ax_grade) = plt.subplots(
        2, 1, figsize=(10, 6), sharex=True, gridspec_kw={"height_ratios": [3, 1]}
    )

    ax_ele.plot(
        [h.distance for h in graph.height_map],
        [h.elevation for h in graph.height_map],
        color="tab:gray",
        linewidth=1,
    )
    for c in climbs:
        ax_ele.axvspan(c.start, c.end, color="tab:red", alpha=0.2)
        ax_ele.annotate(
            f"{c.grade * 100:.1f}%",
            xy=((c.start + c.end) / 2, c.top),
            ha="center",
            fontsize=8,
        )
    ax_ele.set_ylabel("Elevation (m)")
    ax_ele.set_title(title or "Elevation profile")

    if graph.grade_segments:
        edges = [s.start for s in graph.grade_segments] + [graph.grade_segments[-1].end]
        grades = [s.grade * 100 for s in graph.grade_segments]
        ax_grade.stairs(grades, edges, color="tab:blue")
    ax_grade.axhline(0, color="black", linewidth=0.5)
    ax_grade.set_ylabel("Grade (%)")
    ax_grade.set_xlabel("Distance (m)")

    fig.tight_layout()
    return fig


def plot_track(points: Sequence[GeoCoordinate], elevations: Optional[Sequence[float]] = None):
    """Track in Mercator meters, optionally coloured by elevation."""
    xy = [mercator_to_meters(p) for p in points]
    xs = [x for x, _ in xy]
    # projection y grows southwards; flip back for a north-up map
    ys = [-y for _, y in xy]

    fig, ax = plt.subplots(figsize=(8, 6))
    if elevations is not None:
        sc = ax.scatter(xs, ys, c=elevations, s=5, cmap="viridis")
        fig.colorbar(sc, ax=ax, label="Elevation (m)")
    else:
        ax.plot(xs, ys, linewidth=1)
    ax.set_aspect("equal", adjustable="datalim")
    ax.set_xlabel("x (m)")
    ax.set_ylabel("y (m)")
    ax.set_title("Track")
    return fig
