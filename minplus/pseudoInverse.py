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
This module computes the pseudo-inverses of non-decreasing curves:

    lower pseudo-inverse  f^-1_low(x) = inf{t >= 0 : f(t) >= x}, left-continuous
    upper pseudo-inverse  f^-1_up(x)  = inf{t >= 0 : f(t) > x}, right-continuous

Both are computed element by element over one or two periods of the curve: the inverse of a
pseudo-periodic curve with period (d, c) is pseudo-periodic with period (c, d).
"""

import logging
from typing import Iterable, Iterator, List, Optional

from minplus import rationalUtility as ru
from minplus.rationalUtility import Rational, PLUS_INFINITY, MINUS_INFINITY
from minplus.elements import Element, Point, Segment, NotMonotoneError
from minplus.sequences import Sequence
from minplus.curves import Curve
from minplus import intervals
from minplus.computationSettings import ComputationSettings, resolve

logger = logging.getLogger("PINV")


#SEQUENCES

def skip_until_value(elements: Iterable[Element], value: Rational) -> Iterator[Element]:
    """Drops the part of a non-decreasing sequence below value, splitting the segment that crosses it"""
    for e in elements:
        if(isinstance(e, Point)):
            if(e.value < value):
                continue
            yield e
        else:
            if(e.slope < 0):
                raise NotMonotoneError("Segments must be non-decreasing")
            end_value = e.left_limit_at_end_time
            if(e.is_constant and end_value < value):
                continue
            if(not e.is_constant and end_value <= value):
                continue
            if(e.right_limit_at_start_time < value):
                _, center, right = e.split(e.start_time + (value - e.right_limit_at_start_time) / e.slope)
                yield center
                yield right
            else:
                yield e


def lower_pseudo_inverse_elements(elements: Iterable[Element], start_from_zero: bool = True) -> List[Element]:
    """Lower pseudo-inverse of a finite non-decreasing sequence

    Args:
        elements (Iterable[Element]): the sequence, finite and non-decreasing
        start_from_zero (bool, optional): if True, the result is defined from x = 0. Defaults to True.

    Raises:
        NotMonotoneError: if the sequence is decreasing somewhere

    Returns:
        List[Element]: the elements of the inverse, left-continuous
    """
    merged = intervals.merge(list(elements))
    if(start_from_zero):
        merged = list(skip_until_value(merged, 0))
    result = list()
    previous_value = ru.to_rational(0) if start_from_zero else MINUS_INFINITY
    was_previous_point = None
    for e in merged:
        if(isinstance(e, Point)):
            if(e.value > previous_value):
                if(previous_value > MINUS_INFINITY):
                    # left-discontinuity, becomes a constant segment
                    if(was_previous_point is not True):
                        result.append(Point(previous_value, e.time))
                    result.append(Segment.constant(previous_value, e.value, e.time))
                result.append(e.inverse())
                previous_value = e.value
                was_previous_point = True
            elif(e.value == previous_value and was_previous_point is not True):
                result.append(e.inverse())
                was_previous_point = True
            elif(e.value < previous_value):
                raise NotMonotoneError("The sequence is not non-decreasing at %s" % ru.to_string(e.time))
            continue

        if(was_previous_point is None and start_from_zero):
            # the sequence enters the non-negative values with a segment
            result.append(Point(previous_value, e.start_time))
            was_previous_point = True
        start_value = e.right_limit_at_start_time
        if(start_value < previous_value or e.slope < 0):
            raise NotMonotoneError("The sequence is not non-decreasing at %s" % ru.to_string(e.start_time))
        if(e.is_constant):
            # constant segments become right-discontinuities
            if(start_value == previous_value):
                if(was_previous_point is None):
                    result.append(Point(start_value, e.start_time))
                    was_previous_point = True
            else:
                if(was_previous_point is True):
                    result.append(Segment.constant(previous_value, start_value, e.start_time))
                result.append(Point(start_value, e.start_time))
                previous_value = start_value
                was_previous_point = True
        else:
            if(start_value > previous_value):
                result.append(Segment.constant(previous_value, start_value, e.start_time))
                result.append(Point(start_value, e.start_time))
            result.append(e.inverse())
            previous_value = e.left_limit_at_end_time
            was_previous_point = False
    return result


def upper_pseudo_inverse_elements(elements: Iterable[Element], start_from_zero: bool = True) -> List[Element]:
    """Upper pseudo-inverse of a finite non-decreasing sequence

    Points are held back until the next element is known, since a following constant segment
    turns them into a right-discontinuity.
    """
    merged = intervals.merge(list(elements))
    if(start_from_zero):
        merged = list(skip_until_value(merged, 0))
    result = list()
    previous_value = ru.to_rational(0) if start_from_zero else MINUS_INFINITY
    was_previous_point = None
    held = None
    for e in merged:
        if(isinstance(e, Point)):
            if(e.value > previous_value):
                if(previous_value > MINUS_INFINITY):
                    if(held is not None):
                        result.append(held)
                        held = None
                    if(was_previous_point is not True):
                        result.append(Point(previous_value, e.time))
                    result.append(Segment.constant(previous_value, e.value, e.time))
                held = e.inverse()
                previous_value = e.value
                was_previous_point = True
            elif(e.value == previous_value and was_previous_point is not True):
                held = e.inverse()
                was_previous_point = True
            elif(e.value < previous_value):
                raise NotMonotoneError("The sequence is not non-decreasing at %s" % ru.to_string(e.time))
            continue

        if(was_previous_point is None and start_from_zero):
            held = Point(previous_value, e.start_time)
            was_previous_point = True
        start_value = e.right_limit_at_start_time
        if(start_value < previous_value or e.slope < 0):
            raise NotMonotoneError("The sequence is not non-decreasing at %s" % ru.to_string(e.start_time))
        if(e.is_constant):
            # constant segments become left-discontinuities
            if(start_value == previous_value):
                held = None
                result.append(Point(start_value, e.end_time))
                was_previous_point = True
            else:
                if(held is not None):
                    result.append(held)
                    held = None
                if(was_previous_point is True):
                    result.append(Segment.constant(previous_value, start_value, e.start_time))
                result.append(Point(start_value, e.end_time))
                previous_value = start_value
                was_previous_point = True
        else:
            if(held is not None):
                result.append(held)
                held = None
            if(start_value > previous_value):
                result.append(Segment.constant(previous_value, start_value, e.start_time))
                result.append(Point(start_value, e.start_time))
            result.append(e.inverse())
            previous_value = e.left_limit_at_end_time
            was_previous_point = False
    if(held is not None):
        result.append(held)
    return result


def pseudo_inverse_over_interval(curve: Curve, start, end, lower: bool = True) -> Sequence:
    """Pseudo-inverse of the curve restricted to [start, end], defined over [f(start), f(end)]

    Raises:
        NotMonotoneError: if the curve is decreasing within the interval
    """
    start = ru.to_rational(start)
    end = ru.to_rational(end)
    sequence = curve.cut(start, end, start_included=True, end_included=True)
    if(not sequence.is_finite):
        raise ValueError("The curve must be finite over [%s, %s]" % (ru.to_string(start), ru.to_string(end)))
    if(lower):
        return Sequence(lower_pseudo_inverse_elements(sequence, start_from_zero=False))
    return Sequence(upper_pseudo_inverse_elements(sequence, start_from_zero=False))


#CURVES

def lower_pseudo_inverse(curve: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
    """Lower pseudo-inverse of a non-decreasing curve

    The result is left-continuous; LPI(LPI(f)) is equivalent to f for left-continuous f.

    Raises:
        NotMonotoneError: if the curve is not non-decreasing
    """
    settings = resolve(settings)
    if(not curve.is_non_decreasing):
        raise NotMonotoneError("The pseudo-inverse is defined only for non-decreasing curves")
    if(curve.is_minus_infinite):
        return Curve.plus_infinite()

    if(curve.is_ultimately_constant):
        reduced = curve.optimize()
        start = reduced.pseudo_period_start
        value = reduced.value_at(start)
        logger.debug("lower pseudo-inverse: ultimately constant at %s from %s" % (ru.to_string(value), ru.to_string(start)))
        if(value < 0):
            return Curve.plus_infinite()
        elements = lower_pseudo_inverse_elements(reduced.cut(0, start, end_included=True))
        elements.append(Segment.plus_infinite(value, value + 2))
        return Curve(elements, value + 1, 1, 0)

    if(curve.is_weakly_ultimately_infinite):
        last_time = curve.base_sequence.first_infinite_time()
        if(last_time == 0):
            return Curve.zero()
        last_value = curve.base_sequence.left_limit_at(last_time)
        if(last_value < 0):
            return Curve([Point(0, last_time), Segment.constant(0, 1, last_time)], 0, 1, 0)
        elements = lower_pseudo_inverse_elements(curve.base_sequence.cut(0, last_time))
        if(not elements or not (isinstance(elements[-1], Point) and elements[-1].time == last_value)):
            elements.append(Point(last_value, last_time))
        elements.append(Segment.constant(last_value, last_value + 2, last_time))
        return Curve(elements, last_value + 1, 1, 0)

    return _periodic_pseudo_inverse(curve, lower_pseudo_inverse_elements, True, settings)


def upper_pseudo_inverse(curve: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
    """Upper pseudo-inverse of a non-decreasing curve

    The result is right-continuous; UPI(UPI(f)) is equivalent to f for right-continuous f.

    Raises:
        NotMonotoneError: if the curve is not non-decreasing
    """
    settings = resolve(settings)
    if(not curve.is_non_decreasing):
        raise NotMonotoneError("The pseudo-inverse is defined only for non-decreasing curves")
    if(curve.is_minus_infinite):
        return Curve.plus_infinite()

    if(curve.is_ultimately_constant):
        reduced = curve.optimize()
        start = reduced.pseudo_period_start
        value = reduced.value_at(start)
        logger.debug("upper pseudo-inverse: ultimately constant at %s from %s" % (ru.to_string(value), ru.to_string(start)))
        if(value < 0):
            return Curve.plus_infinite()
        elements = upper_pseudo_inverse_elements(reduced.cut(0, start, end_included=True))
        if(elements and isinstance(elements[-1], Point) and elements[-1].time == value):
            elements.pop()
        elements.append(Point(value, PLUS_INFINITY))
        elements.append(Segment.plus_infinite(value, value + 1))
        return Curve(elements, value, 1, 0)

    if(curve.is_weakly_ultimately_infinite):
        last_time = curve.base_sequence.first_infinite_time()
        if(last_time == 0):
            return Curve.zero()
        last_value = curve.base_sequence.left_limit_at(last_time)
        if(last_value < 0):
            return Curve([Point(0, last_time), Segment.constant(0, 1, last_time)], 0, 1, 0)
        elements = upper_pseudo_inverse_elements(curve.base_sequence.cut(0, last_time))
        if(elements and isinstance(elements[-1], Point) and elements[-1].time == last_value):
            elements.pop()
        elements.append(Point(last_value, last_time))
        elements.append(Segment.constant(last_value, last_value + 1, last_time))
        return Curve(elements, last_value, 1, 0)

    return _periodic_pseudo_inverse(curve, upper_pseudo_inverse_elements, False, settings)


def _periodic_pseudo_inverse(curve: Curve, inverse, lower: bool, settings: ComputationSettings) -> Curve:
    """Inverse of a curve that grows without bound: the period (d, c) becomes (c, d)"""
    d = curve.pseudo_period_length
    c = curve.pseudo_period_height
    if(not curve.is_non_negative):
        start = max(curve.first_pseudo_period_end, curve.first_non_negative_time())
        if(curve.value_at(start) < 0):
            start += d
        end = start + d
        inverse_start = curve.value_at(start)
    elif(lower):
        # one more period in case of a left-discontinuity at the end of the first one
        end = curve.second_pseudo_period_end
        inverse_start = curve.value_at(curve.first_pseudo_period_end)
    else:
        end = curve.first_pseudo_period_end
        inverse_start = curve.value_at(curve.pseudo_period_start)
    # the inverse of the point at the end is only needed to close the last segment
    elements = inverse(curve.cut(0, end, end_included=True))[:-1]
    logger.debug("%s pseudo-inverse: T=%s d=%s c=%s, %d elements" % ("lower" if lower else "upper",
        ru.to_string(inverse_start), ru.to_string(c), ru.to_string(d), len(elements)))
    result = Curve(elements, inverse_start, c, d)
    return result.optimize() if settings.auto_optimize else result
