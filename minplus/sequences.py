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
This module contains the Sequence: a finite, ordered and gap-free list of points and segments
describing a function over a finite interval.
"""

import bisect
from typing import Iterable, Iterator, List, Optional, Tuple

from minplus import rationalUtility as ru
from minplus.rationalUtility import Rational, PLUS_INFINITY
from minplus.elements import (Element, Point, Segment, CurveNotDefinedForThisValue,
    InvalidSequenceError)
from minplus import intervals
from minplus.computationSettings import ComputationSettings, resolve


def fill(elements: Iterable[Element], fill_from: Rational, fill_to: Rational, from_included: bool = True,
        to_included: bool = False, fill_with: Rational = PLUS_INFINITY) -> List[Element]:
    """Fills the gaps of ordered elements within fill_from and fill_to with a constant value

    Args:
        elements (Iterable[Element]): ordered elements, possibly with gaps
        fill_from (Rational): left endpoint of the filled interval
        fill_to (Rational): right endpoint of the filled interval
        from_included (bool, optional): True if fill_from is part of the interval. Defaults to True.
        to_included (bool, optional): True if fill_to is part of the interval. Defaults to False.
        fill_with (Rational, optional): the value used in the gaps. Defaults to +inf.

    Returns:
        List[Element]: elements without gaps
    """
    result = list()
    expected_start = fill_from
    expecting_point = from_included
    for element in elements:
        if(expected_start > element.start_time):
            raise InvalidSequenceError("Elements out of order at %s" % ru.to_string(element.start_time))
        if(expected_start < element.start_time):
            if(expecting_point):
                result.append(Point(expected_start, fill_with))
            result.append(Segment(expected_start, element.start_time, fill_with, 0))
            if(isinstance(element, Segment)):
                result.append(Point(element.start_time, fill_with))
        elif(isinstance(element, Segment) and expecting_point):
            result.append(Point(expected_start, fill_with))
        result.append(element)
        expected_start = element.end_time
        expecting_point = isinstance(element, Segment)
    if(expected_start < fill_to):
        if(expecting_point):
            result.append(Point(expected_start, fill_with))
        result.append(Segment(expected_start, fill_to, fill_with, 0))
        expecting_point = True
    if(to_included and expecting_point):
        result.append(Point(fill_to, fill_with))
    return result


class Sequence:
    """
    Finite piecewise-affine function: points and segments, alternating, strictly ordered in
    time and without gaps. A sequence can start and end with either kind of element.

    >>> s = Sequence([Point(0, 0), Segment(0, 2, 0, 1), Point(2, 2)])
    >>> s.value_at(1)
    Fraction(1, 1)
    """
    __slots__ = ("_elements", "_starts")

    def __init__(self, elements: Iterable[Element]) -> None:
        self._elements = tuple(elements)
        if(not self._elements):
            raise InvalidSequenceError("A sequence must have at least one element")
        for previous, current in zip(self._elements, self._elements[1:]):
            if(isinstance(previous, Point) and isinstance(current, Segment)):
                if(previous.time != current.start_time):
                    raise InvalidSequenceError("Point at %s is not followed by a segment starting at the same time (%s)" % (ru.to_string(previous.time), ru.to_string(current.start_time)))
            elif(isinstance(previous, Segment) and isinstance(current, Point)):
                if(previous.end_time != current.time):
                    raise InvalidSequenceError("Segment ending at %s is not followed by a point at the same time (%s)" % (ru.to_string(previous.end_time), ru.to_string(current.time)))
            else:
                raise InvalidSequenceError("Elements must alternate between points and segments, got %r then %r" % (previous, current))
        self._starts = [e.start_time for e in self._elements]

    @classmethod
    def filled(cls, elements: Iterable[Element], fill_from: Rational, fill_to: Rational, from_included: bool = True,
            to_included: bool = False, fill_with: Rational = PLUS_INFINITY) -> 'Sequence':
        return cls(fill(elements, fill_from, fill_to, from_included, to_included, fill_with))

    @property
    def elements(self) -> Tuple[Element, ...]:
        return self._elements

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[Element]:
        return iter(self._elements)

    def __getitem__(self, index):
        return self._elements[index]

    @property
    def defined_from(self) -> Rational:
        return self._elements[0].start_time

    @property
    def defined_until(self) -> Rational:
        return self._elements[-1].end_time

    @property
    def is_left_closed(self) -> bool:
        return isinstance(self._elements[0], Point)

    @property
    def is_right_closed(self) -> bool:
        return isinstance(self._elements[-1], Point)

    def is_defined_for(self, t: Rational) -> bool:
        if(t < self.defined_from or t > self.defined_until):
            return False
        if(t == self.defined_from):
            return self.is_left_closed
        if(t == self.defined_until):
            return self.is_right_closed
        return True

    #VALUES

    def _index_at(self, t: Rational) -> int:
        i = bisect.bisect_right(self._starts, t) - 1
        if(i < 0):
            return 0
        if(self._elements[i].is_defined_for(t)):
            return i
        if(i > 0 and self._elements[i - 1].is_defined_for(t)):
            return i - 1
        return i

    def get_active_element_at(self, t) -> Element:
        """Returns the element that defines the value at t

        Raises:
            CurveNotDefinedForThisValue: if t is outside the support
        """
        t = ru.to_rational(t)
        if(not self.is_defined_for(t)):
            raise CurveNotDefinedForThisValue(t, string=("The sequence defined over %s is not defined for %s" % (self._support_string(), ru.to_string(t))))
        return self._elements[self._index_at(t)]

    def value_at(self, t) -> Rational:
        t = ru.to_rational(t)
        return self.get_active_element_at(t).value_at(t)

    def right_limit_at(self, t) -> Rational:
        """Returns lim_{x->t,x>t} of the function"""
        t = ru.to_rational(t)
        if(not (self.defined_from <= t < self.defined_until)):
            raise CurveNotDefinedForThisValue(t, string=("Right limit not defined at %s for the sequence over %s" % (ru.to_string(t), self._support_string())))
        i = self._index_at(t)
        element = self._elements[i]
        if(isinstance(element, Point)):
            element = self._elements[i + 1]
        if(element.start_time == t):
            return element.right_limit_at_start_time
        return element.value_at(t)

    def left_limit_at(self, t) -> Rational:
        """Returns lim_{x->t,x<t} of the function"""
        t = ru.to_rational(t)
        if(not (self.defined_from < t <= self.defined_until)):
            raise CurveNotDefinedForThisValue(t, string=("Left limit not defined at %s for the sequence over %s" % (ru.to_string(t), self._support_string())))
        if(t == self.defined_until and not self.is_right_closed):
            return self._elements[-1].left_limit_at_end_time
        i = self._index_at(t)
        element = self._elements[i]
        if(isinstance(element, Point)):
            return self._elements[i - 1].left_limit_at_end_time
        return element.value_at(t)

    def _support_string(self) -> str:
        return "%s%s, %s%s" % ("[" if self.is_left_closed else "(", ru.to_string(self.defined_from),
            ru.to_string(self.defined_until), "]" if self.is_right_closed else ")")

    #CUT AND SHIFTS

    def cut(self, start, end, start_included: bool = True, end_included: bool = False) -> 'Sequence':
        """Restriction of the sequence to an interval

        Args:
            start (Rational): left endpoint of the interval
            end (Rational): right endpoint of the interval
            start_included (bool, optional): True if start is part of the interval. Defaults to True.
            end_included (bool, optional): True if end is part of the interval. Defaults to False.

        Raises:
            CurveNotDefinedForThisValue: if the interval is not inside the support of the sequence

        Returns:
            Sequence: the restricted sequence
        """
        start = ru.to_rational(start)
        end = ru.to_rational(end)
        if(start > end):
            raise ValueError("Invalid interval: %s > %s" % (ru.to_string(start), ru.to_string(end)))
        if(start == end):
            if(not (start_included and end_included)):
                raise ValueError("Cut endpoints, if equal, must be both included")
            return Sequence([Point(start, self.value_at(start))])
        start_ok = start > self.defined_from or (start == self.defined_from and (self.is_left_closed or not start_included))
        end_ok = end < self.defined_until or (end == self.defined_until and (self.is_right_closed or not end_included))
        if(not (start_ok and end_ok)):
            raise CurveNotDefinedForThisValue(start if not start_ok else end,
                string=("Cut %s%s, %s%s is out of the support %s" % ("[" if start_included else "(", ru.to_string(start),
                    ru.to_string(end), "]" if end_included else ")", self._support_string())))

        result = list()
        for element in self._elements[self._index_at(start):]:
            if(isinstance(element, Point)):
                if(element.time < start or (element.time == start and not start_included)):
                    continue
                if(element.time > end or (element.time == end and not end_included)):
                    break
                result.append(element)
                if(element.time == end):
                    break
            else:
                if(element.end_time <= start):
                    continue
                if(element.start_time >= end):
                    break
                lo = max(element.start_time, start)
                hi = min(element.end_time, end)
                if(lo > element.start_time and start_included):
                    result.append(element.sample(lo))
                if(lo == element.start_time and hi == element.end_time):
                    result.append(element)
                else:
                    result.append(element.restrict(lo, hi))
                if(hi < element.end_time):
                    if(end_included):
                        result.append(element.sample(hi))
                    break
        return Sequence(result)

    def optimize(self) -> 'Sequence':
        """Merges collinear segments, giving the minimal representation of the same function"""
        return Sequence(intervals.merge(list(self._elements)))

    def delay(self, delay) -> 'Sequence':
        delay = ru.to_rational(delay)
        return Sequence(e.delay(delay) for e in self._elements)

    def anticipate(self, time) -> 'Sequence':
        return self.delay(-ru.to_rational(time))

    def vertical_shift(self, shift) -> 'Sequence':
        shift = ru.to_rational(shift)
        return Sequence(e.vertical_shift(shift) for e in self._elements)

    def scale(self, factor) -> 'Sequence':
        factor = ru.to_rational(factor)
        return Sequence(e.scale(factor) for e in self._elements)

    def __neg__(self) -> 'Sequence':
        return Sequence(-e for e in self._elements)

    #COMPARISONS

    def __eq__(self, o: object) -> bool:
        if(isinstance(o, Sequence)):
            return self._elements == o._elements
        return False

    def __hash__(self) -> int:
        return hash(self._elements)

    def equivalent(self, other: 'Sequence') -> bool:
        """True if the two sequences describe the same function over the same support"""
        return self.optimize() == other.optimize()

    def less_or_equal(self, other: 'Sequence', settings: Optional[ComputationSettings] = None) -> bool:
        """True if self is pointwise lower or equal than other"""
        return self.minimum(other, settings).equivalent(self)

    #PROPERTIES

    def enumerate_breakpoints(self) -> Iterator[Tuple[Optional[Segment], Point, Optional[Segment]]]:
        """Yields (left segment, point, right segment) for every point of the sequence"""
        for i, element in enumerate(self._elements):
            if(isinstance(element, Point)):
                left = self._elements[i - 1] if i > 0 else None
                right = self._elements[i + 1] if i + 1 < len(self._elements) else None
                yield left, element, right

    def breakpoint_times(self) -> List[Rational]:
        return [e.time for e in self._elements if isinstance(e, Point)]

    @property
    def is_finite(self) -> bool:
        return all(e.is_finite for e in self._elements)

    @property
    def is_plus_infinite(self) -> bool:
        return all(e.is_plus_infinite for e in self._elements)

    @property
    def is_minus_infinite(self) -> bool:
        return all(e.is_minus_infinite for e in self._elements)

    @property
    def is_continuous(self) -> bool:
        return self.is_left_continuous and self.is_right_continuous

    @property
    def is_left_continuous(self) -> bool:
        return all(left is None or left.left_limit_at_end_time == p.value for left, p, _ in self.enumerate_breakpoints())

    @property
    def is_right_continuous(self) -> bool:
        return all(right is None or right.right_limit_at_start_time == p.value for _, p, right in self.enumerate_breakpoints())

    @property
    def is_non_negative(self) -> bool:
        return self.min_value() >= 0

    @property
    def is_non_decreasing(self) -> bool:
        for e in self._elements:
            if(isinstance(e, Segment) and e.slope < 0):
                return False
        for left, p, right in self.enumerate_breakpoints():
            if(left is not None and left.left_limit_at_end_time > p.value):
                return False
            if(right is not None and right.right_limit_at_start_time < p.value):
                return False
        return True

    def min_value(self) -> Rational:
        """Infimum of the function over the support, limits included"""
        values = list()
        for e in self._elements:
            if(isinstance(e, Point)):
                values.append(e.value)
            else:
                values.append(e.right_limit_at_start_time)
                values.append(e.left_limit_at_end_time)
        return min(values)

    def max_value(self) -> Rational:
        """Supremum of the function over the support, limits included"""
        values = list()
        for e in self._elements:
            if(isinstance(e, Point)):
                values.append(e.value)
            else:
                values.append(e.right_limit_at_start_time)
                values.append(e.left_limit_at_end_time)
        return max(values)

    def first_infinite_time(self) -> Rational:
        """Start of the first infinite element, +inf if all are finite"""
        for e in self._elements:
            if(not e.is_finite):
                return e.start_time
        return PLUS_INFINITY

    #TRANSFORMATIONS

    def to_left_continuous(self) -> 'Sequence':
        """Replaces the value of every point preceded by a segment with the left limit"""
        result = list()
        for i, e in enumerate(self._elements):
            if(isinstance(e, Point) and i > 0):
                result.append(Point(e.time, self._elements[i - 1].left_limit_at_end_time))
            else:
                result.append(e)
        return Sequence(result)

    def to_right_continuous(self) -> 'Sequence':
        """Replaces the value of every point followed by a segment with the right limit"""
        result = list()
        for i, e in enumerate(self._elements):
            if(isinstance(e, Point) and i + 1 < len(self._elements)):
                result.append(Point(e.time, self._elements[i + 1].right_limit_at_start_time))
            else:
                result.append(e)
        return Sequence(result)

    #POINTWISE OPERATIONS

    def addition(self, other: 'Sequence') -> 'Sequence':
        """Pointwise sum of two sequences with the same support"""
        result = list()
        for interval in intervals.compute_intervals(list(self._elements) + list(other._elements)):
            # the closing instant of right-open supports
            if(not interval.elements):
                continue
            if(len(interval.elements) != 2):
                raise CurveNotDefinedForThisValue(interval.start, string=("Addition of sequences with different supports %s and %s" % (self._support_string(), other._support_string())))
            a, b = interval.elements
            if(interval.is_point_interval):
                result.append(Point(interval.start, ru.add(a.value, b.value)))
            else:
                result.append(Segment(interval.start, interval.end, ru.add(a.right_limit_at_start_time, b.right_limit_at_start_time), a.slope + b.slope))
        return Sequence(intervals.merge(result))

    def __add__(self, other: 'Sequence') -> 'Sequence':
        if(isinstance(other, Sequence)):
            return self.addition(other)
        raise TypeError("unsupported operand type(s) for + or add(): %s and %s" % (type(self).__name__, type(other).__name__))

    def minimum(self, other: 'Sequence', settings: Optional[ComputationSettings] = None) -> 'Sequence':
        return Sequence(intervals.lower_envelope(list(self._elements) + list(other._elements), resolve(settings)))

    def maximum(self, other: 'Sequence', settings: Optional[ComputationSettings] = None) -> 'Sequence':
        return Sequence(intervals.upper_envelope(list(self._elements) + list(other._elements), resolve(settings)))

    def __repr__(self) -> str:
        return "Sequence(%s)" % ", ".join(repr(e) for e in self._elements)


def lower_envelope(sequences: List[Sequence], settings: Optional[ComputationSettings] = None) -> Sequence:
    """Pointwise minimum of several sequences"""
    elements = [e for s in sequences for e in s]
    return Sequence(intervals.lower_envelope(elements, resolve(settings)))


def upper_envelope(sequences: List[Sequence], settings: Optional[ComputationSettings] = None) -> Sequence:
    """Pointwise maximum of several sequences"""
    elements = [e for s in sequences for e in s]
    return Sequence(intervals.upper_envelope(elements, resolve(settings)))
