# gpsclimb/analyze/climbs.py
"""
Climb detection on a height map

Steps:
  1. simplify the (distance, elevation) polyline with Ramer-Douglas-Peucker,
     dropping wiggles smaller than `epsilon` meters
  2. every simplified piece that rises with a grade >= `minimum_grade` is a
     candidate climb
  3. candidates closer than `max_join_distance` (touching ones always) are
     joined into one climb spanning the gap, unless the gap drops so far
     that the joined climb would no longer rise by more than `epsilon`
  4. joined climbs that gain no more than `epsilon` are noise and dropped
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from gpsclimb.analyze.grades import DistanceHeight, GradeSegment

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 1.0
DEFAULT_MINIMUM_GRADE = 0.03
DEFAULT_MAX_JOIN_DISTANCE = 0.0


@dataclass(frozen=True)
class Climb:
    """
    A contiguous climbing region [start, end] (meters along the track).

    - bottom / top:     elevation at start / end
    - total_elevation:  sum of the rises inside the climb
    - grade:            average grade between start and end (horizontal run)
    - max_grade:        steepest simplified piece of the climb
    - score:            FIETS index of the climb
    """

    start: float
    end: float
    bottom: float
    top: float
    total_elevation: float
    grade: float
    max_grade: float
    score: float

    @property
    def distance(self) -> float:
        return self.end - self.start

    @property
    def elevation(self) -> float:
        return self.top - self.bottom


def fiets_score(bottom: float, top: float, distance: float) -> float:
    """FIETS climb difficulty: H^2 / (D * 10) + max(0, (T - 1000) / 1000)."""
    if distance <= 0:
        return 0.0
    height = top - bottom
    return height * height / (distance * 10) + max(0.0, (top - 1000.0) / 1000.0)


def _perpendicular_distance(
    p: DistanceHeight, a: DistanceHeight, b: DistanceHeight
) -> float:
    dx = b.distance - a.distance
    dy = b.elevation - a.elevation
    if dx == 0 and dy == 0:
        return math.hypot(p.distance - a.distance, p.elevation - a.elevation)
    t = ((p.distance - a.distance) * dx + (p.elevation - a.elevation) * dy) / (dx * dx + dy * dy)
    t = max(0.0, min(1.0, t))
    return math.hypot(p.distance - (a.distance + t * dx), p.elevation - (a.elevation + t * dy))


def simplify(height_map: Sequence[DistanceHeight], epsilon: float) -> list[DistanceHeight]:
    """
    Ramer-Douglas-Peucker simplification of the height profile.

    Works with an explicit stack so long tracks do not hit the recursion
    limit. First and last sample are always kept.
    """
    n = len(height_map)
    if n < 3:
        return list(height_map)

    keep = [False] * n
    keep[0] = keep[-1] = True
    stack = [(0, n - 1)]

    while stack:
        first, last = stack.pop()
        max_dist = -1.0
        index = first
        for i in range(first + 1, last):
            d = _perpendicular_distance(height_map[i], height_map[first], height_map[last])
            if d > max_dist:
                max_dist = d
                index = i
        if max_dist > epsilon:
            keep[index] = True
            stack.append((first, index))
            stack.append((index, last))

    return [p for p, k in zip(height_map, keep) if k]


def _climb(lo: DistanceHeight, hi: DistanceHeight) -> Climb:
    grade = GradeSegment(lo.distance, hi.distance, lo.elevation, hi.elevation).grade
    return Climb(
        start=lo.distance,
        end=hi.distance,
        bottom=lo.elevation,
        top=hi.elevation,
        total_elevation=hi.elevation - lo.elevation,
        grade=grade,
        max_grade=grade,
        score=fiets_score(lo.elevation, hi.elevation, hi.distance - lo.distance),
    )


def _join(first: Climb, second: Climb) -> Climb:
    grade = GradeSegment(first.start, second.end, first.bottom, second.top).grade
    return Climb(
        start=first.start,
        end=second.end,
        bottom=first.bottom,
        top=second.top,
        total_elevation=first.total_elevation + second.total_elevation,
        grade=grade,
        max_grade=max(first.max_grade, second.max_grade),
        score=fiets_score(first.bottom, second.top, second.end - first.start),
    )


def find_climbs(
    height_map: Sequence[DistanceHeight],
    epsilon: float = DEFAULT_EPSILON,
    minimum_grade: float = DEFAULT_MINIMUM_GRADE,
    max_join_distance: float = DEFAULT_MAX_JOIN_DISTANCE,
) -> list[Climb]:
    """
    Climbs along `height_map`, ordered by start distance.

    Args:
        epsilon:           simplification tolerance in meters
        minimum_grade:     smallest grade (fraction, 0.03 = 3%) counted as climbing
        max_join_distance: climbs separated by at most this many meters are joined

    Returns an empty list for fewer than two samples or a track without climbs.
    """
    if len(height_map) < 2:
        return []

    simplified = simplify(height_map, epsilon)

    candidates: list[Climb] = []
    for lo, hi in zip(simplified, simplified[1:]):
        if hi.distance <= lo.distance or hi.elevation <= lo.elevation:
            continue
        climb = _climb(lo, hi)
        if climb.grade >= minimum_grade:
            candidates.append(climb)

    joined: list[Climb] = []
    for climb in candidates:
        if (
            joined
            and joined[-1].end + max_join_distance >= climb.start
            and climb.top > joined[-1].bottom + epsilon
        ):
            joined[-1] = _join(joined[-1], climb)
        else:
            joined.append(climb)

    climbs = [c for c in joined if c.elevation > epsilon]

    logger.debug(
        "climbs: %d samples simplified to %d, %d candidates, %d climbs",
        len(height_map), len(simplified), len(candidates), len(climbs),
    )
    return climbs
