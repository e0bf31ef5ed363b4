import math

import pytest

from gpsclimb.analyze.grades import (
    DistanceHeight,
    GradeSegment,
    calculate_grade_segments,
    height_at,
    stride_segments,
)


def hm(*pairs):
    return [DistanceHeight(distance=d, elevation=e) for d, e in pairs]


class TestGradeSegment:

    def test_derived_values(self):
        s = GradeSegment(start=100, end=1100, elevation_at_start=200, elevation_at_end=300)
        assert s.length == 1000
        assert s.elevation_gain == 100
        # rise over horizontal run, the length is the hypotenuse
        assert s.grade == pytest.approx(100 / math.sqrt(1000**2 - 100**2))
        assert s.grade == pytest.approx(0.1005038, abs=1e-6)

    def test_descending_grade_is_negative(self):
        assert GradeSegment(0, 50, 10, 5).grade < 0

    def test_flat(self):
        assert GradeSegment(0, 25, 7, 7).grade == 0.0

    def test_no_horizontal_run_is_infinite(self):
        assert GradeSegment(0, 10, 0, 10).grade == math.inf
        assert GradeSegment(0, 10, 10, -5).grade == -math.inf

    @pytest.mark.parametrize("start, end", [(10, 10), (10, 5)])
    def test_end_must_be_after_start(self, start, end):
        with pytest.raises(AssertionError):
            GradeSegment(start, end)

    def test_from_grade(self):
        s = GradeSegment.from_grade(0, 100, 0.1, elevation_at_start=50)
        assert s.elevation_at_start == 50
        assert s.elevation_at_end == pytest.approx(50 + math.atan(0.1) * 100)

    def test_adjusted_returns_new_segment(self):
        s = GradeSegment(0, 100, 10, 20)
        flat = s.adjusted(0.0)
        assert flat.elevation_at_end == 10
        assert s.elevation_at_end == 20
        assert (flat.start, flat.end) == (0, 100)

    def test_merged_similar_grades(self):
        a = GradeSegment(0, 100, 0, 10)
        b = GradeSegment(100, 200, 10, 20)
        assert a.merged(b) == GradeSegment(0, 200, 0, 20)

    def test_merged_different_grades_keeps_self(self):
        a = GradeSegment(0, 100, 0, 10)
        b = GradeSegment(100, 200, 10, 30)
        assert a.merged(b) is a

    def test_equality_tolerates_small_elevation_noise(self):
        a = GradeSegment(0, 10, 0, 1)
        b = GradeSegment(0, 10, 0.005, 1.005)
        assert a == b
        assert hash(a) == hash(b)
        assert a != GradeSegment(0, 10, 0, 1.5)
        assert a != GradeSegment(0, 11, 0, 1)


class TestHeightAt:

    HM = hm((0, 100), (10, 110), (30, 90), (60, 90))

    def test_samples_round_trip(self):
        for sample in self.HM:
            assert height_at(self.HM, sample.distance) == sample.elevation

    @pytest.mark.parametrize(
        "distance, expected",
        [(5, 105), (20, 100), (25, 95), (45, 90)],
    )
    def test_linear_interpolation(self, distance, expected):
        assert height_at(self.HM, distance) == pytest.approx(expected)

    @pytest.mark.parametrize("distance", [-1, 60.5, 1000])
    def test_outside_is_none(self, distance):
        assert height_at(self.HM, distance) is None

    def test_empty(self):
        assert height_at([], 0) is None

    def test_duplicate_distances(self):
        # a paused recording repeats the same position
        m = hm((0, 0), (10, 5), (10, 5), (20, 10))
        assert height_at(m, 10) == 5
        assert height_at(m, 15) == pytest.approx(7.5)


class TestCalculateGradeSegments:

    def test_flat_100m_track(self):
        m = hm((0, 500), (100, 500))

        strides = stride_segments(m, 25, 100)
        assert len(strides) == 4
        assert all(s.grade == 0 for s in strides)

        assert calculate_grade_segments(m, 25) == [GradeSegment(0, 100, 500, 500)]

    def test_grade_change_starts_new_segment(self):
        m = hm((0, 0), (50, 0), (100, 10))
        segments = calculate_grade_segments(m, 25)

        # the folded segment keeps its own elevation endpoints
        assert segments == [GradeSegment(0, 50, 0, 0), GradeSegment(50, 100, 0, 5)]

    def test_final_partial_stride(self):
        m = hm((0, 0), (60, 0), (70, 5))
        strides = stride_segments(m, 25, 70)
        assert [(s.start, s.end) for s in strides] == [(0, 25), (25, 50), (50, 70)]
        assert strides[-1].elevation_at_end == 5

        segments = calculate_grade_segments(m, 25)
        assert segments[-1].end == pytest.approx(70)

    def test_shorter_than_segment_length(self):
        assert calculate_grade_segments(hm((0, 10), (20, 12)), 25) == [GradeSegment(0, 20, 10, 12)]

    def test_exactly_one_segment_length(self):
        assert calculate_grade_segments(hm((0, 3), (25, 3)), 25) == [GradeSegment(0, 25, 3, 3)]

    @pytest.mark.parametrize("m", [[], hm((0, 100)), hm((0, 100), (0, 120))])
    def test_degenerate_height_maps(self, m):
        assert calculate_grade_segments(m, 25) == []

    @pytest.mark.parametrize("length", [0, -25])
    def test_rejects_non_positive_segment_length(self, length):
        with pytest.raises(ValueError):
            calculate_grade_segments(hm((0, 0), (100, 0)), length)

    @pytest.mark.parametrize("segment_length", [10, 25, 33.3, 50])
    def test_contiguous_cover_of_whole_track(self, segment_length):
        m = hm(*[(i * 7.3, 100 + 10 * math.sin(i / 5)) for i in range(200)])
        total = m[-1].distance

        segments = calculate_grade_segments(m, segment_length)

        assert segments[0].start == 0
        for prev, cur in zip(segments, segments[1:]):
            assert prev.end == pytest.approx(cur.start)
        assert segments[-1].end == pytest.approx(total)
        assert len(segments) < math.ceil(total / segment_length) + 1
