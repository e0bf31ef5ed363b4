# gpsclimb/analyze/track.py
"""
Track analysis summary for gpsclimb
"""

from pathlib import Path

from gpsclimb.analyze.climbs import (
    DEFAULT_EPSILON,
    DEFAULT_MAX_JOIN_DISTANCE,
    DEFAULT_MINIMUM_GRADE,
)
from gpsclimb.analyze.grades import DEFAULT_SEGMENT_LENGTH
from gpsclimb.analyze.graph import ElevationSmoothing, TrackGraph
from gpsclimb.formats.gpx import read_track
from gpsclimb.geo.distance import DEFAULT_MAX_ITERATIONS, DEFAULT_TOLERANCE, precise_distance


def summarize_graph(
    graph: TrackGraph,
    *,
    epsilon: float = DEFAULT_EPSILON,
    minimum_grade: float = DEFAULT_MINIMUM_GRADE,
    max_join_distance: float = DEFAULT_MAX_JOIN_DISTANCE,
) -> dict:
    """Return summary statistics of `graph` and its climbs."""
    climbs = graph.climbs(
        epsilon=epsilon,
        minimum_grade=minimum_grade,
        max_join_distance=max_join_distance,
    )

    return {
        "points": len(graph.segments),
        "distance_m": graph.distance,
        "elevation_gain_m": graph.elevation_gain,
        "grade_segments": len(graph.grade_segments),
        "max_grade": max((s.grade for s in graph.grade_segments), default=0.0),
        "climbs": len(climbs),
        "climb_elevation_m": sum(c.elevation for c in climbs),
        "climb_list": climbs,
    }


def precise_track_distance(
    graph: TrackGraph,
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> float:
    """Ellipsoidal track length; raises ConvergenceError like precise_distance."""
    coords = [s.coordinate for s in graph.segments]
    return sum(
        precise_distance(a, b, tolerance=tolerance, max_iterations=max_iterations)
        for a, b in zip(coords, coords[1:])
    )


def analyze_track(
    gpx_path: Path,
    *,
    segment_length: float = DEFAULT_SEGMENT_LENGTH,
    epsilon: float = DEFAULT_EPSILON,
    minimum_grade: float = DEFAULT_MINIMUM_GRADE,
    max_join_distance: float = DEFAULT_MAX_JOIN_DISTANCE,
    precise: bool = False,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> dict:
    track = read_track(
        gpx_path, elevation_smoothing=ElevationSmoothing.segmentation(segment_length)
    )
    stats = summarize_graph(
        track.graph,
        epsilon=epsilon,
        minimum_grade=minimum_grade,
        max_join_distance=max_join_distance,
    )
    if precise:
        stats["precise_distance_m"] = precise_track_distance(
            track.graph, tolerance=tolerance, max_iterations=max_iterations
        )
    stats["title"] = track.title
    stats["graph"] = track.graph
    return stats
