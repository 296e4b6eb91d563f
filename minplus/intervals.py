#!/usr/bin/python3
#
# This file is part of minplus
# Copyright (c) 2023-2024 the minplus authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, version 3.
#
# This program is distributed in the hope that it will be useful, but
# WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU
# General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <http://www.gnu.org/licenses/>.

"""
This module contains the interval engine: the union of the supports of a set of elements is
partitioned into elementary intervals (single instants and open intervals between two
consecutive boundaries), and the pointwise lower or upper envelope is computed per interval.
"""

import bisect
import logging
import threading
from typing import Iterable, List, Optional

from minplus import rationalUtility as ru
from minplus.rationalUtility import Rational, PLUS_INFINITY, MINUS_INFINITY
from minplus.elements import Element, Point, Segment, SplitOverPointError, can_merge_triplet
from minplus.computationSettings import ComputationSettings, resolve

logger = logging.getLogger("ENV")


class Interval:
    """
    Elementary interval of the partition: either the single instant [start, start] or the
    open interval (start, end). It holds the elements of all the operands that are active
    over it, already restricted to it.
    """
    start: Rational
    end: Rational
    elements: List[Element]

    def __init__(self, start: Rational, end: Rational) -> None:
        self.start = start
        self.end = end
        self.elements = list()

    @property
    def is_point_interval(self) -> bool:
        return self.start == self.end

    def add(self, element: Element) -> None:
        """Adds an element active over this interval, restricting it if it is a segment
        larger than the interval"""
        if(self.is_point_interval):
            if(isinstance(element, Point)):
                self.elements.append(element)
            else:
                self.elements.append(element.sample(self.start))
        else:
            if(isinstance(element, Point)):
                raise SplitOverPointError(element.time, string=("A point cannot be active over the open interval (%s, %s)" % (ru.to_string(self.start), ru.to_string(self.end))))
            if(element.start_time == self.start and element.end_time == self.end):
                self.elements.append(element)
            else:
                self.elements.append(element.restrict(self.start, self.end))

    def split_over(self, time: Rational) -> List['Interval']:
        """Splits the interval at the given instant

        Raises:
            SplitOverPointError: if the interval is a single instant, or time is outside of it
        """
        if(self.is_point_interval):
            raise SplitOverPointError(time, string=("Cannot split the point interval at %s" % ru.to_string(self.start)))
        if(not (self.start < time < self.end)):
            raise SplitOverPointError(time)
        left = Interval(self.start, time)
        center = Interval(time, time)
        right = Interval(time, self.end)
        for element in self.elements:
            l, p, r = element.split(time)
            left.elements.append(l)
            center.elements.append(p)
            right.elements.append(r)
        return [left, center, right]

    def lower_envelope(self) -> List[Element]:
        return self._envelope(lower=True)

    def upper_envelope(self) -> List[Element]:
        return self._envelope(lower=False)

    def _envelope(self, lower: bool) -> List[Element]:
        if(not self.elements):
            return list()
        if(self.is_point_interval):
            values = [p.value for p in self.elements]
            return [Point(self.start, min(values) if lower else max(values))]
        return segment_envelope(self.elements, lower)

    def __repr__(self) -> str:
        if(self.is_point_interval):
            return "Interval[%s] (%d elements)" % (ru.to_string(self.start), len(self.elements))
        return "Interval(%s, %s) (%d elements)" % (ru.to_string(self.start), ru.to_string(self.end), len(self.elements))


class IntervalTree:
    """
    Range structure over the sorted, distinct boundaries of a set of elements.

    Bucket 2i is the instant of the i-th boundary, bucket 2i+1 the open interval between the
    i-th and the (i+1)-th boundary. The buckets covered by an element are found with two
    binary searches.
    """

    def __init__(self, elements: List[Element]) -> None:
        boundaries = set()
        for element in elements:
            boundaries.add(element.start_time)
            boundaries.add(element.end_time)
        self.boundaries = sorted(boundaries)
        self.intervals = list()
        for i, t in enumerate(self.boundaries):
            self.intervals.append(Interval(t, t))
            if(i + 1 < len(self.boundaries)):
                self.intervals.append(Interval(t, self.boundaries[i + 1]))

    def query(self, start: Rational, end: Rational, is_point: bool) -> range:
        """Indexes of the buckets covered by an element"""
        i = bisect.bisect_left(self.boundaries, start)
        if(is_point):
            return range(2 * i, 2 * i + 1)
        j = bisect.bisect_left(self.boundaries, end)
        return range(2 * i + 1, 2 * j)

    def insert(self, element: Element) -> None:
        for index in self.query(element.start_time, element.end_time, isinstance(element, Point)):
            self.intervals[index].add(element)


def compute_intervals(elements: Iterable[Element]) -> List[Interval]:
    """Partitions the union of the supports of the elements in elementary intervals

    Args:
        elements (Iterable[Element]): the elements, in any order

    Returns:
        List[Interval]: the intervals in time order, each holding its active elements. Intervals
            with no active element (gaps between disjoint supports) are kept, empty.
    """
    elements = list(elements)
    if(not elements):
        return list()
    tree = IntervalTree(elements)
    for element in elements:
        tree.insert(element)
    return tree.intervals


class EnvelopeWorker(threading.Thread):
    """
    Computes the envelopes of a contiguous chunk of intervals.
    As a sub-class of Thread, several chunks are computed at the same time.
    """
    _intervals: List[Interval]
    _lower: bool
    result: List[Element]
    exception: Optional[Exception]

    def __init__(self, intervals: List[Interval], lower: bool, index: int) -> None:
        self._intervals = intervals
        self._lower = lower
        self.result = list()
        self.exception = None
        super().__init__(name="Envelope_%d" % index)

    def run(self) -> None:
        try:
            for interval in self._intervals:
                self.result.extend(interval._envelope(self._lower))
        except Exception as e:
            # raised again by the caller once joined
            self.exception = e


def lower_envelope(elements: Iterable[Element], settings: Optional[ComputationSettings] = None) -> List[Element]:
    """Pointwise minimum of a set of elements

    Args:
        elements (Iterable[Element]): the elements, in any order, possibly overlapping
        settings (ComputationSettings, optional): parallelism settings

    Returns:
        List[Element]: ordered elements, collinear segments merged. Parts of the union of the
            supports not covered by any element are left as gaps.
    """
    return _envelope(elements, True, resolve(settings))


def upper_envelope(elements: Iterable[Element], settings: Optional[ComputationSettings] = None) -> List[Element]:
    """Pointwise maximum of a set of elements, see lower_envelope"""
    return _envelope(elements, False, resolve(settings))


def _envelope(elements: Iterable[Element], lower: bool, settings: ComputationSettings) -> List[Element]:
    intervals = compute_intervals(elements)
    if(not intervals):
        raise ValueError("The envelope of an empty set of elements is not defined")
    if(settings.use_parallelism and len(intervals) >= settings.parallel_envelope_threshold and settings.worker_count > 1):
        logger.debug("%s envelope of %d intervals over %d threads" % ("lower" if lower else "upper", len(intervals), settings.worker_count))
        chunk_size = -(-len(intervals) // settings.worker_count)
        workers = list()
        for i in range(0, len(intervals), chunk_size):
            worker = EnvelopeWorker(intervals[i:i + chunk_size], lower, len(workers))
            worker.start()
            workers.append(worker)
        result = list()
        for worker in workers:
            worker.join()
        for worker in workers:
            if(worker.exception is not None):
                raise worker.exception
            result.extend(worker.result)
    else:
        result = list()
        for interval in intervals:
            result.extend(interval._envelope(lower))
    return merge(result)


def merge(elements: List[Element]) -> List[Element]:
    """Merges every segment-point-segment triplet lying on the same line"""
    merged = list()
    for element in elements:
        merged.append(element)
        while(len(merged) >= 3 and isinstance(merged[-1], Segment) and isinstance(merged[-2], Point) and isinstance(merged[-3], Segment)):
            left, point, right = merged[-3], merged[-2], merged[-1]
            if(can_merge_triplet(left, point, right)):
                del merged[-3:]
                merged.append(Segment(left.start_time, right.end_time, left.right_limit_at_start_time, left.slope))
            else:
                break
    return merged


#SEGMENT BUCKETS

def segment_envelope(segments: List[Segment], lower: bool) -> List[Element]:
    """Envelope of segments sharing the same open support

    The candidates are sorted by right limit at start, then the envelope is built by merging
    pairs of partial envelopes bottom-up, over explicit index ranges. Merging follows the
    winning line until the other one overtakes it, splitting at the exact crossing instant.

    Returns:
        List[Element]: the segments of the envelope, with the points joining them
    """
    start = segments[0].start_time
    end = segments[0].end_time
    absorbing = MINUS_INFINITY if lower else PLUS_INFINITY
    neutral = PLUS_INFINITY if lower else MINUS_INFINITY
    if(any(s.right_limit_at_start_time == absorbing for s in segments)):
        return [Segment(start, end, absorbing, 0)]
    candidates = [s for s in segments if s.right_limit_at_start_time != neutral]
    if(not candidates):
        return [Segment(start, end, neutral, 0)]

    if(lower):
        candidates.sort(key=lambda s: (s.right_limit_at_start_time, s.slope))
    else:
        candidates.sort(key=lambda s: (-s.right_limit_at_start_time, -s.slope))

    # all parallel: the extremal intercept wins everywhere
    if(all(s.slope == candidates[0].slope for s in candidates)):
        return [candidates[0]]

    # a piece is (start, end, value at start, slope)
    envelopes = [[(start, end, s.right_limit_at_start_time, s.slope)] for s in _distinct(candidates)]
    width = 1
    while(width < len(envelopes)):
        for i in range(0, len(envelopes) - width, 2 * width):
            envelopes[i] = _merge_pieces(envelopes[i], envelopes[i + width], lower)
        width *= 2

    result = list()
    for piece in envelopes[0]:
        if(result):
            result.append(Point(piece[0], piece[2]))
        result.append(Segment(piece[0], piece[1], piece[2], piece[3]))
    return result


def _distinct(candidates: List[Segment]) -> List[Segment]:
    distinct = list()
    for s in candidates:
        if(distinct and distinct[-1].right_limit_at_start_time == s.right_limit_at_start_time and distinct[-1].slope == s.slope):
            continue
        distinct.append(s)
    return distinct


def _merge_pieces(first: list, second: list, lower: bool) -> list:
    """Envelope of two piecewise-affine continuous functions over the same interval"""
    result = list()
    i = j = 0
    while(i < len(first) and j < len(second)):
        p = first[i]
        q = second[j]
        x = max(p[0], q[0])
        y = min(p[1], q[1])
        # values at x and limits at y of both lines
        px = p[2] + p[3] * (x - p[0])
        qx = q[2] + q[3] * (x - q[0])
        py = p[2] + p[3] * (y - p[0])
        qy = q[2] + q[3] * (y - q[0])
        if(lower):
            p_wins_x, q_wins_x = px <= qx, qx <= px
            p_wins_y, q_wins_y = py <= qy, qy <= py
        else:
            p_wins_x, q_wins_x = px >= qx, qx >= px
            p_wins_y, q_wins_y = py >= qy, qy >= py
        if(p_wins_x and p_wins_y):
            _append_piece(result, (x, y, px, p[3]))
        elif(q_wins_x and q_wins_y):
            _append_piece(result, (x, y, qx, q[3]))
        else:
            crossing = x + (qx - px) / (p[3] - q[3])
            if(p_wins_x):
                _append_piece(result, (x, crossing, px, p[3]))
                _append_piece(result, (crossing, y, q[2] + q[3] * (crossing - q[0]), q[3]))
            else:
                _append_piece(result, (x, crossing, qx, q[3]))
                _append_piece(result, (crossing, y, p[2] + p[3] * (crossing - p[0]), p[3]))
        if(p[1] == y):
            i += 1
        if(q[1] == y):
            j += 1
    return result


def _append_piece(pieces: list, piece: tuple) -> None:
    if(pieces):
        last = pieces[-1]
        if(last[3] == piece[3] and last[1] == piece[0]):
            pieces[-1] = (last[0], piece[1], last[2], last[3])
            return
    pieces.append(piece)
