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
This module contains the atomic pieces of a piecewise-affine function: the Point, describing
the value at one instant, and the Segment, describing an affine function over an open interval.

It also defines the exceptions shared by the whole package and the element-wise (min,+) and
(max,+) operations used by the sequence algorithms.
"""

from fractions import Fraction
from typing import List, Tuple

from minplus import rationalUtility as ru
from minplus.rationalUtility import Rational, PLUS_INFINITY, MINUS_INFINITY

#EXCEPTIONS

class CurveNotDefinedForThisValue(Exception):
    def __init__(self, s_value, **kargs):
        self._s_value = s_value
        self._string = kargs.get("string", "The function is not defined for value %s" % ru.to_string(self._s_value))
        super().__init__(self._string)
    def __str__(self):
        return(self._string)
    def get_s_value(self):
        return self._s_value

class InvalidSequenceError(ValueError):
    """Raised when a list of elements is not a valid sequence (order, gaps, overlaps)"""

class InvalidCurveError(ValueError):
    """Raised when a curve descriptor is malformed or violates the periodicity law"""

class NotMonotoneError(ValueError):
    """Raised when an operation requires a non-decreasing function"""

class SplitOverPointError(ValueError):
    def __init__(self, time, **kargs):
        self._time = time
        self._string = kargs.get("string", "Cannot split at %s: not in the open support of the element" % ru.to_string(time))
        super().__init__(self._string)
    def __str__(self):
        return(self._string)


#ELEMENTS

class Element:
    '''
    General interface of the pieces of a sequence
    '''
    __slots__ = ()

    @property
    def start_time(self) -> Rational:
        raise NotImplementedError()

    @property
    def end_time(self) -> Rational:
        raise NotImplementedError()

    def value_at(self, t: Rational) -> Rational:
        raise NotImplementedError()

    def is_defined_for(self, t: Rational) -> bool:
        raise NotImplementedError()

    @property
    def is_finite(self) -> bool:
        raise NotImplementedError()

    @property
    def is_plus_infinite(self) -> bool:
        raise NotImplementedError()

    @property
    def is_minus_infinite(self) -> bool:
        raise NotImplementedError()

    @property
    def is_infinite(self) -> bool:
        return self.is_plus_infinite or self.is_minus_infinite

    def delay(self, delay: Rational) -> 'Element':
        raise NotImplementedError()

    def anticipate(self, time: Rational) -> 'Element':
        return self.delay(-time)

    def vertical_shift(self, shift: Rational) -> 'Element':
        raise NotImplementedError()

    def scale(self, factor: Rational) -> 'Element':
        raise NotImplementedError()

    def __neg__(self) -> 'Element':
        raise NotImplementedError()

    def inverse(self) -> 'Element':
        """Swaps the time and value axes"""
        raise NotImplementedError()


class Point(Element):
    """
    Value of a function at one instant

    >>> Point(1, 2)
    Point(1, 2)
    """
    __slots__ = ("time", "value")

    def __init__(self, time, value) -> None:
        self.time = ru.to_rational(time)
        self.value = ru.to_rational(value)
        if(not ru.is_finite(self.time)):
            raise ValueError("The time of a point must be finite")

    @property
    def start_time(self) -> Rational:
        return self.time

    @property
    def end_time(self) -> Rational:
        return self.time

    def value_at(self, t: Rational) -> Rational:
        if(t != self.time):
            raise CurveNotDefinedForThisValue(t, string=("Point at %s is not defined for %s" % (ru.to_string(self.time), ru.to_string(t))))
        return self.value

    def is_defined_for(self, t: Rational) -> bool:
        return t == self.time

    @property
    def is_finite(self) -> bool:
        return ru.is_finite(self.value)

    @property
    def is_plus_infinite(self) -> bool:
        return self.value == PLUS_INFINITY

    @property
    def is_minus_infinite(self) -> bool:
        return self.value == MINUS_INFINITY

    def delay(self, delay: Rational) -> 'Point':
        return Point(self.time + delay, self.value)

    def vertical_shift(self, shift: Rational) -> 'Point':
        return Point(self.time, ru.add(self.value, shift))

    def scale(self, factor: Rational) -> 'Point':
        return Point(self.time, ru.multiply(self.value, factor))

    def __neg__(self) -> 'Point':
        return Point(self.time, -self.value)

    def inverse(self) -> 'Point':
        if(not self.is_finite):
            raise ValueError("Cannot invert an infinite point")
        return Point(self.value, self.time)

    def __eq__(self, o: object) -> bool:
        if(isinstance(o, Point)):
            return self.time == o.time and self.value == o.value
        return False

    def __hash__(self) -> int:
        return hash(("Point", self.time, self.value))

    def __repr__(self) -> str:
        return "Point(%s, %s)" % (ru.to_string(self.time), ru.to_string(self.value))


class Segment(Element):
    """
    Affine function over the open interval (start_time, end_time). The values at the
    endpoints are not part of the segment.

    >>> s = Segment(0, 2, 1, Fraction(1, 2))
    >>> s.value_at(1)
    Fraction(3, 2)
    >>> s.left_limit_at_end_time
    Fraction(2, 1)
    """
    __slots__ = ("_start_time", "_end_time", "right_limit_at_start_time", "slope")

    def __init__(self, start_time, end_time, right_limit_at_start_time, slope) -> None:
        self._start_time = ru.to_rational(start_time)
        self._end_time = ru.to_rational(end_time)
        self.right_limit_at_start_time = ru.to_rational(right_limit_at_start_time)
        slope = ru.to_rational(slope)
        if(not (ru.is_finite(self._start_time) and ru.is_finite(self._end_time))):
            raise ValueError("The endpoints of a segment must be finite")
        if(self._end_time <= self._start_time):
            raise InvalidSequenceError("Segment end time %s must be after its start time %s" % (ru.to_string(self._end_time), ru.to_string(self._start_time)))
        if(not ru.is_finite(slope)):
            raise ValueError("The slope of a segment must be finite")
        if(not ru.is_finite(self.right_limit_at_start_time)):
            slope = Fraction(0)
        self.slope = slope

    @classmethod
    def constant(cls, start_time, end_time, value) -> 'Segment':
        return cls(start_time, end_time, value, 0)

    @classmethod
    def plus_infinite(cls, start_time, end_time) -> 'Segment':
        return cls(start_time, end_time, PLUS_INFINITY, 0)

    @classmethod
    def minus_infinite(cls, start_time, end_time) -> 'Segment':
        return cls(start_time, end_time, MINUS_INFINITY, 0)

    @property
    def start_time(self) -> Rational:
        return self._start_time

    @property
    def end_time(self) -> Rational:
        return self._end_time

    @property
    def length(self) -> Rational:
        return self._end_time - self._start_time

    @property
    def left_limit_at_end_time(self) -> Rational:
        return self.right_limit_at_start_time + ru.multiply(self.slope, self.length)

    @property
    def is_constant(self) -> bool:
        return self.slope == 0

    def value_at(self, t: Rational) -> Rational:
        if(not self.is_defined_for(t)):
            raise CurveNotDefinedForThisValue(t, string=("Segment (%s, %s) is not defined for %s" % (ru.to_string(self._start_time), ru.to_string(self._end_time), ru.to_string(t))))
        return self._line(t)

    def _line(self, t: Rational) -> Rational:
        return self.right_limit_at_start_time + ru.multiply(self.slope, t - self._start_time)

    def is_defined_for(self, t: Rational) -> bool:
        return self._start_time < t < self._end_time

    @property
    def is_finite(self) -> bool:
        return ru.is_finite(self.right_limit_at_start_time)

    @property
    def is_plus_infinite(self) -> bool:
        return self.right_limit_at_start_time == PLUS_INFINITY

    @property
    def is_minus_infinite(self) -> bool:
        return self.right_limit_at_start_time == MINUS_INFINITY

    def sample(self, t: Rational) -> Point:
        return Point(t, self.value_at(t))

    def split(self, t: Rational) -> Tuple['Segment', Point, 'Segment']:
        """Splits the segment at t, which must be inside its open support

        Raises:
            SplitOverPointError: if t is not in (start_time, end_time)

        Returns:
            Tuple[Segment, Point, Segment]: left part, point at t, right part
        """
        if(not self.is_defined_for(t)):
            raise SplitOverPointError(t)
        value = self._line(t)
        left = Segment(self._start_time, t, self.right_limit_at_start_time, self.slope)
        right = Segment(t, self._end_time, value, self.slope)
        return left, Point(t, value), right

    def restrict(self, start: Rational, end: Rational) -> 'Segment':
        """Restriction of the segment to (start, end), which must be a sub-interval of its support"""
        if(start < self._start_time or end > self._end_time or end <= start):
            raise SplitOverPointError(start, string=("Cannot restrict segment (%s, %s) to (%s, %s)" % (ru.to_string(self._start_time), ru.to_string(self._end_time), ru.to_string(start), ru.to_string(end))))
        if(start == self._start_time):
            return Segment(start, end, self.right_limit_at_start_time, self.slope)
        return Segment(start, end, self._line(start), self.slope)

    def split_over(self, times) -> List[Element]:
        """Splits the segment at every given time inside its support

        Args:
            times (Iterable[Rational]): sorted times; those outside the open support are ignored

        Returns:
            List[Element]: alternating segments and points covering the same support
        """
        result = list()
        current = self
        for t in times:
            if(t <= current.start_time):
                continue
            if(t >= current.end_time):
                break
            left, point, current = current.split(t)
            result.append(left)
            result.append(point)
        result.append(current)
        return result

    def delay(self, delay: Rational) -> 'Segment':
        return Segment(self._start_time + delay, self._end_time + delay, self.right_limit_at_start_time, self.slope)

    def vertical_shift(self, shift: Rational) -> 'Segment':
        return Segment(self._start_time, self._end_time, ru.add(self.right_limit_at_start_time, shift), self.slope)

    def scale(self, factor: Rational) -> 'Segment':
        return Segment(self._start_time, self._end_time, ru.multiply(self.right_limit_at_start_time, factor), ru.multiply(self.slope, factor))

    def __neg__(self) -> 'Segment':
        return Segment(self._start_time, self._end_time, -self.right_limit_at_start_time, -self.slope)

    def inverse(self) -> 'Segment':
        if(not self.is_finite):
            raise ValueError("Cannot invert an infinite segment")
        if(self.slope == 0):
            raise ValueError("Cannot invert a constant segment")
        if(self.slope > 0):
            return Segment(self.right_limit_at_start_time, self.left_limit_at_end_time, self._start_time, 1 / self.slope)
        return Segment(self.left_limit_at_end_time, self.right_limit_at_start_time, self._end_time, 1 / self.slope)

    def crossing_time(self, other: 'Segment') -> Rational:
        """Time at which the lines of the two segments cross, or +inf if they are parallel"""
        if(self.slope == other.slope):
            return PLUS_INFINITY
        return self._start_time + (other._line(self._start_time) - self.right_limit_at_start_time) / (self.slope - other.slope)

    def __eq__(self, o: object) -> bool:
        if(isinstance(o, Segment)):
            return (self._start_time == o._start_time and self._end_time == o._end_time
                and self.right_limit_at_start_time == o.right_limit_at_start_time and self.slope == o.slope)
        return False

    def __hash__(self) -> int:
        return hash(("Segment", self._start_time, self._end_time, self.right_limit_at_start_time, self.slope))

    def __repr__(self) -> str:
        return "Segment(%s, %s, %s, %s)" % (ru.to_string(self._start_time), ru.to_string(self._end_time),
            ru.to_string(self.right_limit_at_start_time), ru.to_string(self.slope))


def can_merge_triplet(left: Segment, point: Point, right: Segment) -> bool:
    """True if left, point and right lie on the same line"""
    return (left.end_time == point.time and point.time == right.start_time
        and left.slope == right.slope
        and left.left_limit_at_end_time == point.value
        and point.value == right.right_limit_at_start_time)


#ELEMENT-WISE OPERATIONS

def convolution(a: Element, b: Element) -> List[Element]:
    """(min,+) convolution of two elements, both with non +inf values

    The convolution of two segments follows the lowest slope first, then the highest one.
    """
    return _convolution(a, b, lowest_slope_first=True)


def max_plus_convolution(a: Element, b: Element) -> List[Element]:
    """(max,+) convolution of two elements, both with non -inf values

    The convolution of two segments follows the highest slope first, then the lowest one.
    """
    return _convolution(a, b, lowest_slope_first=False)


def deconvolution(a: Element, b: Element) -> List[Element]:
    """(min,+) deconvolution sup_s a(t+s) - b(s) of two elements, computed as the (max,+)
    convolution of a with the reflection u -> -b(-u) of b"""
    return max_plus_convolution(a, reflect(b))


def reflect(element: Element) -> Element:
    """Returns the element u -> -e(-u)"""
    if(isinstance(element, Point)):
        return Point(-element.time, -element.value)
    return Segment(-element.end_time, -element.start_time, -element.left_limit_at_end_time, element.slope)


def _convolution(a: Element, b: Element, lowest_slope_first: bool) -> List[Element]:
    if(isinstance(a, Point) and isinstance(b, Point)):
        return [Point(a.time + b.time, ru.add(a.value, b.value))]
    if(isinstance(a, Point)):
        return [b.delay(a.time).vertical_shift(a.value)]
    if(isinstance(b, Point)):
        return [a.delay(b.time).vertical_shift(b.value)]

    start = a.start_time + b.start_time
    end = a.end_time + b.end_time
    value = ru.add(a.right_limit_at_start_time, b.right_limit_at_start_time)
    if(a.slope == b.slope or not ru.is_finite(value)):
        return [Segment(start, end, value, a.slope)]

    if((a.slope < b.slope) == lowest_slope_first):
        first, second = a, b
    else:
        first, second = b, a
    middle = start + first.length
    middle_value = value + first.slope * first.length
    return [
        Segment(start, middle, value, first.slope),
        Point(middle, middle_value),
        Segment(middle, end, middle_value, second.slope),
    ]
