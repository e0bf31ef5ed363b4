# gpsclimb/analyze/graph.py
"""
Track graph: distance / elevation model of an ordered coordinate sequence

build_track_graph() turns raw coordinates into
  - per-point segments with the distance from the previous point
  - total distance and total elevation gain (ascents only)
  - a height map (cumulative distance -> elevation)
  - grade segments derived from the height map

build_track_graph_from_points() does the same for recorded TrackPoints and
optionally smooths the elevation profile first (see ElevationSmoothing).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from gpsclimb.analyze.climbs import (
    DEFAULT_EPSILON,
    DEFAULT_MAX_JOIN_DISTANCE,
    DEFAULT_MINIMUM_GRADE,
    Climb,
    find_climbs,
)
from gpsclimb.analyze.grades import (
    DEFAULT_SEGMENT_LENGTH,
    DistanceHeight,
    GradeSegment,
    calculate_grade_segments,
    height_at,
)
from gpsclimb.geo.coordinates import Coordinate, TrackPoint
from gpsclimb.geo.distance import simple_distance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackSegment:
    """A coordinate plus the distance (meters) from the preceding one."""

    coordinate: Coordinate
    distance_from_previous: float


@dataclass(frozen=True)
class TrackGraph:
    """
    Distance / elevation model of a track.

    Attributes:
    - segments:       one TrackSegment per input coordinate
    - distance:       total distance in meters
    - elevation_gain: sum of all ascents in meters (descents ignored)
    - height_map:     cumulative distance -> elevation, one sample per coordinate
    - grade_segments: contiguous GradeSegments covering [0, distance]
    """

    segments: tuple[TrackSegment, ...]
    distance: float
    elevation_gain: float
    height_map: tuple[DistanceHeight, ...]
    grade_segments: tuple[GradeSegment, ...]

    def height_at(self, distance: float) -> Optional[float]:
        return height_at(self.height_map, distance)

    def climbs(
        self,
        epsilon: float = DEFAULT_EPSILON,
        minimum_grade: float = DEFAULT_MINIMUM_GRADE,
        max_join_distance: float = DEFAULT_MAX_JOIN_DISTANCE,
    ) -> list[Climb]:
        """Climbs along this track, see gpsclimb.analyze.climbs.find_climbs."""
        if len(self.height_map) <= 1:
            return []
        return find_climbs(
            self.height_map,
            epsilon=epsilon,
            minimum_grade=minimum_grade,
            max_join_distance=max_join_distance,
        )


@dataclass(frozen=True)
class ElevationSmoothing:
    """
    How elevations are prepared before grade segmentation.

    Build instances with the constructors below:
    - none():                 raw elevations, default segment length
    - segmentation(length):   raw elevations, grade segments of `length` meters
    - smoothing(n):           moving average over `n` samples
    - combined(n, max_delta): moving average, then grade jumps between
                              neighbouring segments capped at `max_delta`
    """

    kind: str = "segmentation"
    segment_length: float = DEFAULT_SEGMENT_LENGTH
    sample_count: int = 1
    max_grade_delta: Optional[float] = None

    @classmethod
    def none(cls) -> "ElevationSmoothing":
        return cls(kind="none")

    @classmethod
    def segmentation(cls, segment_length: float = DEFAULT_SEGMENT_LENGTH) -> "ElevationSmoothing":
        return cls(kind="segmentation", segment_length=segment_length)

    @classmethod
    def smoothing(cls, sample_count: int) -> "ElevationSmoothing":
        return cls(kind="smoothing", sample_count=sample_count)

    @classmethod
    def combined(cls, sample_count: int, max_grade_delta: float) -> "ElevationSmoothing":
        return cls(kind="combined", sample_count=sample_count, max_grade_delta=max_grade_delta)


def smooth_elevations(elevations: Sequence[float], sample_count: int) -> list[float]:
    """
    Moving average over `sample_count` samples centred on each point (even
    counts lean one sample to the right); windows shrink at both ends of the
    track.
    """
    if sample_count <= 1 or len(elevations) < 2:
        return list(elevations)

    before = (sample_count - 1) // 2
    smoothed = []
    for i in range(len(elevations)):
        lo = max(0, i - before)
        hi = min(len(elevations), i - before + sample_count)
        window = elevations[lo:hi]
        smoothed.append(sum(window) / len(window))
    return smoothed


def limit_grade_changes(
    segments: Sequence[GradeSegment], max_grade_delta: float
) -> list[GradeSegment]:
    """Cap the grade change between neighbouring segments at `max_grade_delta`."""
    limited: list[GradeSegment] = []
    for segment in segments:
        if limited:
            previous = limited[-1].grade
            delta = segment.grade - previous
            if abs(delta) > max_grade_delta:
                segment = segment.adjusted(previous + math.copysign(max_grade_delta, delta))
        limited.append(segment)
    return limited


def _pairwise_distances(coordinates: Sequence[Coordinate]) -> list[float]:
    distances = [0.0] if coordinates else []
    for prev, cur in zip(coordinates, coordinates[1:]):
        distances.append(simple_distance(prev, cur))
    return distances


def _height_map(distances: Sequence[float], elevations: Sequence[float]) -> list[DistanceHeight]:
    height_map: list[DistanceHeight] = []
    so_far = 0.0
    for step, elevation in zip(distances, elevations):
        so_far += step
        height_map.append(DistanceHeight(distance=so_far, elevation=elevation))
    return height_map


def build_track_graph(
    coordinates: Sequence[Coordinate], segment_length: float = DEFAULT_SEGMENT_LENGTH
) -> TrackGraph:
    """
    Build the TrackGraph of an ordered coordinate sequence.

    Empty and single-point inputs give a zero-length graph without grade
    segments.

    Raises:
      ValueError: segment_length <= 0
    """
    return _build(coordinates, [c.elevation for c in coordinates], segment_length)


def build_track_graph_from_points(
    points: Sequence[TrackPoint],
    elevation_smoothing: ElevationSmoothing = ElevationSmoothing.segmentation(),
) -> TrackGraph:
    """
    Build the TrackGraph of recorded track points.

    Distance and elevation gain always come from the raw elevations; the
    smoothing only shapes the height map and the grade segments.
    """
    coordinates = [p.coordinate for p in points]
    elevations = [c.elevation for c in coordinates]

    if elevation_smoothing.kind in ("smoothing", "combined"):
        elevations = smooth_elevations(elevations, elevation_smoothing.sample_count)

    graph = _build(coordinates, elevations, elevation_smoothing.segment_length)

    if elevation_smoothing.kind == "combined" and elevation_smoothing.max_grade_delta is not None:
        graph = TrackGraph(
            segments=graph.segments,
            distance=graph.distance,
            elevation_gain=graph.elevation_gain,
            height_map=graph.height_map,
            grade_segments=tuple(
                limit_grade_changes(graph.grade_segments, elevation_smoothing.max_grade_delta)
            ),
        )
    return graph


def _build(
    coordinates: Sequence[Coordinate], elevations: Sequence[float], segment_length: float
) -> TrackGraph:
    if segment_length <= 0:
        raise ValueError(f"segment_length must be > 0 (got {segment_length})")

    distances = _pairwise_distances(coordinates)
    segments = [
        TrackSegment(coordinate=c, distance_from_previous=d)
        for c, d in zip(coordinates, distances)
    ]

    elevation_gain = 0.0
    for prev, cur in zip(coordinates, coordinates[1:]):
        delta = cur.elevation - prev.elevation
        if delta > 0:
            elevation_gain += delta

    height_map = _height_map(distances, elevations)
    grade_segments = calculate_grade_segments(height_map, segment_length)

    logger.debug(
        "track graph: %d points, %.1f m, +%.1f m, %d grade segments",
        len(coordinates), sum(distances), elevation_gain, len(grade_segments),
    )

    return TrackGraph(
        segments=tuple(segments),
        distance=sum(distances),
        elevation_gain=elevation_gain,
        height_map=tuple(height_map),
        grade_segments=tuple(grade_segments),
    )
