# gpsclimb/analyze/grades.py
"""
Grade segmentation of a height map

A height map is the ordered list of (distance along track, elevation) samples
produced by the track graph. This module

  - interpolates the elevation at any distance (height_at)
  - cuts the track into fixed-length strides and computes their grade
  - folds adjacent strides with (nearly) the same grade into coarser segments

Grades are rise over *horizontal* run: the segment length is treated as the
hypotenuse of the elevation triangle.
"""

from __future__ import annotations

import logging
import math
from bisect import bisect_right
from dataclasses import dataclass, replace
from operator import attrgetter
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_SEGMENT_LENGTH = 25.0

# Adjacent strides whose grades differ by at most this are folded together
GRADE_MERGE_THRESHOLD = 0.01

# GradeSegment.merged() only joins segments closer than this
SEGMENT_MERGE_THRESHOLD = 0.003

# Elevations closer than this (meters) compare equal
ELEVATION_TOLERANCE = 0.01


@dataclass(frozen=True)
class DistanceHeight:
    """One height map sample."""

    distance: float
    elevation: float


@dataclass(frozen=True, eq=False)
class GradeSegment:
    """
    A stretch of track [start, end] (meters along the track) with the
    elevation at both ends.

    end > start is a contract: violating it is a programming error.
    """

    start: float
    end: float
    elevation_at_start: float = 0.0
    elevation_at_end: float = 0.0

    def __post_init__(self) -> None:
        assert self.end > self.start, f"GradeSegment end {self.end} <= start {self.start}"

    @classmethod
    def from_grade(
        cls, start: float, end: float, grade: float, elevation_at_start: float = 0.0
    ) -> "GradeSegment":
        return cls(
            start=start,
            end=end,
            elevation_at_start=elevation_at_start,
            elevation_at_end=elevation_at_start + math.atan(grade) * (end - start),
        )

    @property
    def length(self) -> float:
        return self.end - self.start

    @property
    def elevation_gain(self) -> float:
        return self.elevation_at_end - self.elevation_at_start

    @property
    def grade(self) -> float:
        """Rise over horizontal run; +/-inf when there is no horizontal run."""
        length = self.length
        if length <= 0:
            return 0.0
        gain = self.elevation_gain
        run_squared = length * length - gain * gain
        if run_squared <= 0:
            return math.copysign(math.inf, gain)
        return gain / math.sqrt(run_squared)

    def adjusted(self, grade: float) -> "GradeSegment":
        """Same span and start elevation, end elevation moved to match `grade`."""
        return GradeSegment.from_grade(self.start, self.end, grade, self.elevation_at_start)

    def merged(self, other: "GradeSegment") -> "GradeSegment":
        """
        Extend this segment over `other` when their grades differ by less than
        SEGMENT_MERGE_THRESHOLD; otherwise return this segment unchanged.
        """
        if not abs(self.grade - other.grade) < SEGMENT_MERGE_THRESHOLD:
            return self
        return replace(self, end=other.end, elevation_at_end=other.elevation_at_end)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GradeSegment):
            return NotImplemented
        return (
            self.start == other.start
            and self.end == other.end
            and abs(self.elevation_at_start - other.elevation_at_start) <= ELEVATION_TOLERANCE
            and abs(self.elevation_at_end - other.elevation_at_end) <= ELEVATION_TOLERANCE
        )

    def __hash__(self) -> int:
        return hash((self.start, self.end))


def height_at(height_map: Sequence[DistanceHeight], distance: float) -> Optional[float]:
    """
    Elevation at `distance` along the track, linearly interpolated between the
    two bracketing samples. None when `distance` lies outside the map.
    """
    if not height_map:
        return None
    if distance == 0:
        return height_map[0].elevation
    if distance == height_map[-1].distance:
        return height_map[-1].elevation

    # first sample strictly beyond `distance`
    nxt = bisect_right(height_map, distance, key=attrgetter("distance"))
    if nxt == 0 or nxt == len(height_map):
        return None

    lo = height_map[nxt - 1]
    hi = height_map[nxt]
    t = (distance - lo.distance) / (hi.distance - lo.distance)
    return lo.elevation + t * (hi.elevation - lo.elevation)


def stride_segments(
    height_map: Sequence[DistanceHeight], segment_length: float, track_distance: float
) -> list[GradeSegment]:
    """One candidate segment per stride, plus a final partial stride."""
    strides: list[GradeSegment] = []
    previous_distance = 0.0
    previous_height = height_map[0].elevation

    k = 1
    distance = segment_length
    while distance < track_distance:
        height = height_at(height_map, distance)
        if height is None:
            break
        strides.append(GradeSegment(previous_distance, distance, previous_height, height))
        previous_distance, previous_height = distance, height
        k += 1
        distance = k * segment_length

    last_end = strides[-1].end if strides else 0.0
    if last_end < track_distance:
        strides.append(
            GradeSegment(last_end, track_distance, previous_height, height_map[-1].elevation)
        )
    return strides


def calculate_grade_segments(
    height_map: Sequence[DistanceHeight], segment_length: float = DEFAULT_SEGMENT_LENGTH
) -> list[GradeSegment]:
    """
    Contiguous grade segments covering [0, total distance] of `height_map`.

    Tracks shorter than `segment_length` yield one segment (or none when
    there is no distance to cover). Longer tracks are sampled every
    `segment_length` meters and neighbouring strides whose grades differ by
    no more than GRADE_MERGE_THRESHOLD are folded into the earlier one; the
    folded segment keeps its own elevation endpoints.
    """
    if segment_length <= 0:
        raise ValueError(f"segment_length must be > 0 (got {segment_length})")
    if len(height_map) < 2:
        return []

    track_distance = height_map[-1].distance
    if track_distance <= 0:
        return []

    if track_distance < segment_length:
        return [
            GradeSegment(0.0, track_distance, height_map[0].elevation, height_map[-1].elevation)
        ]

    strides = stride_segments(height_map, segment_length, track_distance)

    joined: list[GradeSegment] = []
    for segment in strides:
        if joined and abs(joined[-1].grade - segment.grade) <= GRADE_MERGE_THRESHOLD:
            last = joined[-1]
            remaining = min(segment_length, track_distance - last.end)
            joined[-1] = replace(last, end=last.end + remaining)
        else:
            joined.append(segment)

    logger.debug(
        "grade segments: %d strides of %.1f m folded into %d segments",
        len(strides), segment_length, len(joined),
    )
    return joined
