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
This module contains the decomposition of a curve into its transient and periodic parts, and the
sub-additive and super-additive closures.

The sub-additive closure f* = inf_{n >= 0} f^(n) is first computed by repeated self-convolution,
h <- h * h starting from f with a zero origin, until the representation stabilizes. If it does not
stabilize within the configured number of rounds, the closure is computed exactly from the closures
of the elements of f.
"""

import logging
import warnings
from typing import List, Optional, Tuple

from minplus import rationalUtility as ru
from minplus.rationalUtility import PLUS_INFINITY, MINUS_INFINITY
from minplus.elements import Element, Point, Segment, CurveNotDefinedForThisValue
from minplus.sequences import Sequence, fill
from minplus.curves import Curve
from minplus import curves
from minplus import convolutions
from minplus import intervals
from minplus.computationSettings import ComputationSettings, resolve

logger = logging.getLogger("CLOS")


#DECOMPOSITION

def decompose(curve: Curve, time, minimum: bool = True) -> Tuple[Optional[Curve], Curve]:
    """Splits a curve at a time into a transient part and a periodic remainder

    Args:
        curve (Curve): the curve to split
        time (Rational): the cut point, non-negative and finite
        minimum (bool, optional): if True, the transient is +inf from the cut point on, so that
            the curve is the minimum of the two parts; -inf and maximum otherwise. Defaults to True.

    Raises:
        CurveNotDefinedForThisValue: if the cut point is negative or infinite

    Returns:
        Tuple[Optional[Curve], Curve]: the transient (None if the cut point is 0) and the curve
            f(t + time)
    """
    time = ru.to_rational(time)
    if(time < 0 or not ru.is_finite(time)):
        raise CurveNotDefinedForThisValue(time, string=("Cannot decompose a curve at %s" % ru.to_string(time)))
    neutral = PLUS_INFINITY if minimum else MINUS_INFINITY
    transient = None
    if(time > 0):
        transient = Curve(fill(curve.cut(0, time).elements, 0, time + 1, fill_with=neutral), time, 1, 0)
    return transient, curve.anticipate_by(time)


def recompose(transient: Optional[Curve], periodic: Curve, time, minimum: bool = True,
        settings: Optional[ComputationSettings] = None) -> Curve:
    """Inverse of decompose: min (or max) of the transient and the periodic part delayed by time"""
    time = ru.to_rational(time)
    neutral = PLUS_INFINITY if minimum else MINUS_INFINITY
    if(time == 0):
        delayed = periodic
    else:
        elements = [Point(0, neutral), Segment.constant(0, time, neutral)] + list(periodic.base_sequence.delay(time).elements)
        delayed = Curve(elements, periodic.pseudo_period_start + time, periodic.pseudo_period_length,
            periodic.pseudo_period_height)
    if(transient is None):
        return delayed
    if(minimum):
        return transient.minimum(delayed, settings)
    return transient.maximum(delayed, settings)


#ELEMENT CLOSURES

def point_closure(point: Point) -> Curve:
    """Sub-additive closure of a single point: 0 at the origin, k*v at k*t, +inf elsewhere

    A negative point at the origin gives n*v at 0 for every n, hence -inf there.
    """
    t = point.time
    v = point.value
    if(v == PLUS_INFINITY):
        return Curve.delta_zero()
    if(t == 0):
        if(v < 0):
            return Curve([Point(0, MINUS_INFINITY), Segment.plus_infinite(0, 1), Point(1, PLUS_INFINITY), Segment.plus_infinite(1, 2)], 1, 1, 0)
        return Curve.delta_zero()
    if(v == MINUS_INFINITY):
        return _absorb(point_closure(Point(t, 0)), keep_origin=True)
    return Curve([Point(0, 0), Segment.plus_infinite(0, t)], 0, t, v)


def segment_closure(segment: Segment) -> Curve:
    """Sub-additive closure of a single open segment (a, b), value v at a+ and slope rho

    The n-fold convolution of the segment is the segment (n*a, n*b) on the line n*r + rho*t,
    with r = v - rho*a. If r >= 0 the fewest repetitions win and the closure repeats with period b;
    otherwise the most repetitions win and it repeats with period a.
    """
    a = segment.start_time
    b = segment.end_time
    if(segment.is_plus_infinite):
        return Curve.delta_zero()
    if(segment.is_minus_infinite):
        return _absorb(segment_closure(Segment.constant(a, b, 0)), keep_origin=True)
    v = segment.right_limit_at_start_time
    rho = segment.slope
    r = v - rho * a
    if(r >= 0):
        count = ru.floor(b / (b - a)) + 1
        T, d, c = (count - 1) * b, b, segment.left_limit_at_end_time
    elif(a > 0):
        count = ru.floor(a / (b - a)) + 2
        T, d, c = count * a, a, v
    else:
        logger.debug("segment closure: negative segment from the origin, the closure is -inf")
        return Curve([Point(0, 0), Segment.minus_infinite(0, 1), Point(1, MINUS_INFINITY), Segment.minus_infinite(1, 2)], 1, 1, 0)

    pieces = [Point(0, 0)] + [Segment(n * a, n * b, n * v, rho) for n in range(1, count + 1)]
    envelope = intervals.lower_envelope(pieces)
    end = T + d
    sequence = Sequence(fill(envelope, 0, max(end, envelope[-1].end_time))).cut(0, end)
    logger.debug("segment closure: %d repetitions, T=%s d=%s c=%s" % (count, ru.to_string(T), ru.to_string(d), ru.to_string(c)))
    return Curve(sequence, T, d, c)


def element_closure(element: Element) -> Curve:
    if(isinstance(element, Point)):
        return point_closure(element)
    return segment_closure(element)


#CURVE CLOSURES

def sub_additive_closure(curve: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
    """Sub-additive closure inf_{n >= 0} f^(n) of a curve, the 0-fold term being delta_0

    Returns:
        Curve: the greatest sub-additive curve below f and delta_0, flagged as sub-additive
    """
    settings = resolve(settings)
    origin = curve.value_at(0)
    if(origin < 0):
        # f^(n)(0) = n*f(0): the closure is -inf wherever it would be finite
        logger.debug("sub-additive closure: negative origin")
        result = _absorb(sub_additive_closure(curve.with_zero_origin(), settings), keep_origin=False)
        return _flagged(result, "is_sub_additive")

    current = curve.with_zero_origin()
    for i in range(settings.closure_iteration_limit):
        following = convolutions.convolution(current, current, settings)
        logger.info("sub-additive closure: round %d, %d elements" % (i + 1, len(following.base_sequence)))
        if(following.equivalent(current)):
            return _flagged(current, "is_sub_additive")
        current = following

    warnings.warn("Sub-additive closure did not stabilize after %d rounds, computing it from the element closures"
        % settings.closure_iteration_limit)
    result = _closure_from_elements(curve.with_zero_origin(), settings)
    return _flagged(result, "is_sub_additive")


def _closure_from_elements(curve: Curve, settings: ComputationSettings) -> Curve:
    """Exact closure: the product of the transient element closures, convolved with
    delta_0 min (P * the product of the periodic element closures), P being the periodic part"""
    T = curve.pseudo_period_start
    d = curve.pseudo_period_length
    c = curve.pseudo_period_height
    factors = list()
    if(T > 0):
        factors.extend(_closures_of(curve.transient_sequence))
    periodic_factors = _closures_of(curve.pseudo_periodic_sequence)
    logger.debug("closure from %d transient and %d periodic element closures" % (len(factors), len(periodic_factors)))
    if(not curve.pseudo_periodic_sequence.is_plus_infinite):
        periodic = Curve(curve.base_sequence.cut(T, T + d), T, d, c, is_partial_curve=True)
        if(periodic_factors):
            periodic = convolutions.convolution(periodic, convolutions.convolution_of(periodic_factors, settings), settings)
        factors.append(curves.minimum([Curve.delta_zero(), periodic], settings))
    if(not factors):
        return Curve.delta_zero()
    return convolutions.convolution_of(factors, settings)


def _closures_of(sequence: Sequence) -> List[Curve]:
    """Closures of the elements of a sequence, skipping the ones equal to delta_0"""
    closures = list()
    for e in sequence:
        if(e.is_plus_infinite or (isinstance(e, Point) and e.time == 0 and e.value >= 0)):
            continue
        closures.append(element_closure(e))
    return closures


def super_additive_closure(curve: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
    """Super-additive closure sup_{n >= 0} f^(n) in the (max,+) algebra, computed as -(-f)*"""
    result = -sub_additive_closure(-curve, settings)
    return _flagged(result, "is_super_additive")


def _flagged(curve: Curve, flag: str) -> Curve:
    """Copy of the curve with a cached predicate known to be True, the input is left untouched"""
    result = Curve(curve.base_sequence, curve.pseudo_period_start, curve.pseudo_period_length,
        curve.pseudo_period_height)
    result.__dict__[flag] = True
    return result


def _absorb(curve: Curve, keep_origin: bool) -> Curve:
    """Replaces every finite value of the curve with -inf, possibly keeping the value at the origin"""
    curve = curve._with_transient()
    result = list()
    for i, e in enumerate(curve.base_sequence):
        if(not e.is_finite or (keep_origin and i == 0)):
            result.append(e)
        elif(isinstance(e, Point)):
            result.append(Point(e.time, MINUS_INFINITY))
        else:
            result.append(Segment.minus_infinite(e.start_time, e.end_time))
    return Curve(result, curve.pseudo_period_start, curve.pseudo_period_length, 0)
