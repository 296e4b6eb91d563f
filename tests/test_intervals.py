# tests/test_intervals.py
"""
Tests of the interval partition and of the envelope engine, sequential and threaded.
"""

import dataclasses
from fractions import Fraction

import pytest

from minplus import intervals
from minplus.elements import Point, Segment, SplitOverPointError
from minplus.rationalUtility import PLUS_INFINITY, MINUS_INFINITY
from minplus.computationSettings import ComputationSettings


class TestPartition:

    def test_compute_intervals(self):
        result = intervals.compute_intervals([Segment(0, 2, 0, 1), Point(1, 5), Segment(1, 3, 0, 0)])
        bounds = [(i.start, i.end) for i in result]
        assert bounds == [(0, 0), (0, 1), (1, 1), (1, 2), (2, 2), (2, 3), (3, 3)]
        counts = [len(i.elements) for i in result]
        # the boundaries of the open segments are not covered
        assert counts == [0, 1, 2, 2, 1, 1, 0]

    def test_split_point_interval(self):
        interval = intervals.Interval(Fraction(1), Fraction(1))
        with pytest.raises(SplitOverPointError):
            interval.split_over(Fraction(1))

    def test_split_interval(self):
        interval = intervals.Interval(Fraction(0), Fraction(2))
        interval.add(Segment(0, 2, 0, 1))
        left, center, right = interval.split_over(Fraction(1))
        assert center.elements == [Point(1, 1)]
        assert right.elements == [Segment(1, 2, 1, 1)]

    def test_empty_envelope(self):
        with pytest.raises(ValueError):
            intervals.lower_envelope([])


class TestEnvelope:

    def test_crossing_segments(self):
        result = intervals.lower_envelope([Segment(0, 4, 0, 1), Segment(0, 4, 1, 0)])
        assert result == [Segment(0, 1, 0, 1), Point(1, 1), Segment(1, 4, 1, 0)]

    def test_upper_envelope(self):
        result = intervals.upper_envelope([Segment(0, 4, 0, 1), Segment(0, 4, 1, 0)])
        assert result == [Segment(0, 1, 1, 0), Point(1, 1), Segment(1, 4, 1, 1)]

    def test_duplicates_collapse(self):
        result = intervals.lower_envelope([Segment(0, 1, 0, 1), Segment(0, 1, 0, 1), Point(0, 0), Point(0, 0)])
        assert result == [Point(0, 0), Segment(0, 1, 0, 1)]

    def test_infinities(self):
        assert intervals.lower_envelope([Segment(0, 1, PLUS_INFINITY, 0), Segment(0, 1, 2, 1)]) == [Segment(0, 1, 2, 1)]
        assert intervals.lower_envelope([Segment(0, 1, MINUS_INFINITY, 0), Segment(0, 1, 2, 1)]) == [Segment(0, 1, MINUS_INFINITY, 0)]

    def test_gaps_are_left_open(self):
        result = intervals.lower_envelope([Segment(0, 1, 0, 0), Segment(2, 3, 0, 0)])
        assert result == [Segment(0, 1, 0, 0), Segment(2, 3, 0, 0)]

    def test_three_lines(self):
        lines = [Segment(0, 6, 0, 3), Segment(0, 6, 2, 1), Segment(0, 6, 5, 0)]
        result = intervals.lower_envelope(lines)
        assert result == [Segment(0, 1, 0, 3), Point(1, 3), Segment(1, 3, 3, 1), Point(3, 5), Segment(3, 6, 5, 0)]


class TestParallelEnvelope:

    @pytest.fixture
    def staircase(self):
        """many overlapping pieces, so that there are many buckets"""
        elements = list()
        for k in range(40):
            elements.append(Point(k, k % 7))
            elements.append(Segment(k, k + 3, k % 5, Fraction(k % 3 - 1, 2)))
        return elements

    def test_threads_give_the_sequential_result(self, staircase):
        sequential = ComputationSettings.default()
        parallel = sequential.replace(use_parallelism=True, parallel_envelope_threshold=0, worker_count=3)
        assert intervals.lower_envelope(staircase, parallel) == intervals.lower_envelope(staircase, sequential)
        assert intervals.upper_envelope(staircase, parallel) == intervals.upper_envelope(staircase, sequential)

    def test_worker_failure_reaches_the_caller(self, staircase, monkeypatch):
        def failing_envelope(interval, lower):
            raise RuntimeError("envelope of %r" % interval)
        monkeypatch.setattr(intervals.Interval, "_envelope", failing_envelope)
        parallel = ComputationSettings.default().replace(use_parallelism=True, parallel_envelope_threshold=1, worker_count=3)
        with pytest.raises(RuntimeError):
            intervals.lower_envelope(staircase, parallel)


class TestSettings:

    def test_replace_keeps_the_other_fields(self):
        default = ComputationSettings.default()
        changed = default.replace(single_pass_convolution=False)
        assert not changed.single_pass_convolution
        assert changed.auto_optimize == default.auto_optimize
        assert default.single_pass_convolution

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            ComputationSettings.default().auto_optimize = False

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            ComputationSettings(worker_count=0)
