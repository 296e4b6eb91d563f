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
This module contains the (min,+) and (max,+) convolution and deconvolution of sequences
and curves.

The convolution of two curves is the minimum of four partial terms: transient with transient,
transient with periodic (both ways) and periodic with periodic. When both curves have the same
long-term slope, a single convolution over a common period replaces the four terms. Non-decreasing
curves with a zero origin may instead go through the pseudo-inverses and the dual convolution.
"""

import functools
import logging
from fractions import Fraction
from typing import Iterable, Optional

from minplus import rationalUtility as ru
from minplus.rationalUtility import Rational, PLUS_INFINITY, MINUS_INFINITY
from minplus import elements as el
from minplus.elements import Point, Segment
from minplus.sequences import Sequence, fill
from minplus.curves import Curve, minimum, common_period
from minplus import intervals
from minplus.computationSettings import ComputationSettings, resolve

logger = logging.getLogger("CONV")


#SEQUENCES

def sequence_convolution(a: Sequence, b: Sequence, settings: Optional[ComputationSettings] = None,
        cut_end: Optional[Rational] = None) -> Sequence:
    """(min,+) convolution of two finite sequences

    Args:
        a (Sequence): first operand
        b (Sequence): second operand
        settings (ComputationSettings, optional): envelope settings
        cut_end (Rational, optional): if given, the result is cut at this time (excluded) and
            the element pairs starting after it are skipped

    Returns:
        Sequence: the convolution over the sum of the two supports, +inf where no pair contributes
    """
    return _sequence_convolution(a, b, True, resolve(settings), cut_end)


def sequence_max_plus_convolution(a: Sequence, b: Sequence, settings: Optional[ComputationSettings] = None,
        cut_end: Optional[Rational] = None) -> Sequence:
    """(max,+) convolution of two finite sequences, -inf where no pair contributes"""
    return _sequence_convolution(a, b, False, resolve(settings), cut_end)


def _sequence_convolution(a: Sequence, b: Sequence, lower: bool, settings: ComputationSettings,
        cut_end: Optional[Rational]) -> Sequence:
    neutral = PLUS_INFINITY if lower else MINUS_INFINITY
    operation = el.convolution if lower else el.max_plus_convolution
    skip = (lambda e: e.is_plus_infinite) if lower else (lambda e: e.is_minus_infinite)
    pieces = list()
    for ea in a:
        if(skip(ea)):
            continue
        for eb in b:
            if(cut_end is not None and ea.start_time + eb.start_time > cut_end):
                break
            if(skip(eb)):
                continue
            pieces.extend(operation(ea, eb))

    start = a.defined_from + b.defined_from
    end = a.defined_until + b.defined_until
    from_included = a.is_left_closed and b.is_left_closed
    to_included = a.is_right_closed and b.is_right_closed
    logger.debug("%s sequence convolution: %d x %d elements, %d pieces" % ("min-plus" if lower else "max-plus",
        len(a), len(b), len(pieces)))
    if(pieces):
        envelope = intervals.lower_envelope(pieces, settings) if lower else intervals.upper_envelope(pieces, settings)
    else:
        envelope = list()
    result = Sequence(fill(envelope, start, end, from_included, to_included, neutral))
    if(cut_end is not None and cut_end < end):
        return result.cut(start, cut_end, start_included=from_included)
    return result


def sequence_deconvolution(a: Sequence, b: Sequence, cut_start: Optional[Rational] = None,
        cut_end: Optional[Rational] = None, settings: Optional[ComputationSettings] = None) -> Sequence:
    """(min,+) deconvolution sup_s a(t + s) - b(s) of two finite sequences

    Args:
        a (Sequence): first operand
        b (Sequence): second operand
        cut_start (Rational, optional): if given, the pairs whose result ends before this time are
            skipped and the result starts here
        cut_end (Rational, optional): if given, the result is filled or cut up to this time (excluded)
        settings (ComputationSettings, optional): envelope settings

    Returns:
        Sequence: the deconvolution, -inf where no pair contributes
    """
    settings = resolve(settings)
    pieces = list()
    for ea in a:
        if(ea.is_minus_infinite):
            continue
        for eb in b:
            if(eb.is_plus_infinite):
                continue
            if(cut_start is not None and ea.end_time - eb.start_time < cut_start):
                continue
            pieces.extend(el.deconvolution(ea, eb))

    start = a.defined_from - b.defined_until
    end = a.defined_until - b.defined_from
    from_included = a.is_left_closed and b.is_right_closed
    to_included = a.is_right_closed and b.is_left_closed
    logger.debug("sequence deconvolution: %d x %d elements, %d pieces" % (len(a), len(b), len(pieces)))
    envelope = intervals.upper_envelope(pieces, settings) if pieces else list()
    if(cut_end is not None and cut_end > end):
        end, to_included = cut_end, False
    result = Sequence(fill(envelope, start, end, from_included, to_included, MINUS_INFINITY))
    if(cut_start is None and cut_end is None):
        return result
    cut_from = cut_start if cut_start is not None else start
    cut_to = cut_end if cut_end is not None else end
    return result.cut(cut_from, cut_to, start_included=True if cut_start is not None else from_included,
        end_included=(cut_end is None and to_included))


#CURVES

def convolution(f: Curve, g: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
    """(min,+) convolution inf_{0 <= s <= t} f(s) + g(t - s) of two curves

    Args:
        f (Curve): first operand
        g (Curve): second operand
        settings (ComputationSettings, optional): Defaults to ComputationSettings.default().

    Returns:
        Curve: the convolution, possibly the +inf curve
    """
    settings = resolve(settings)

    if(_is_infinite_except_origin(f, PLUS_INFINITY)):
        return _shift_by(g, f.value_at(0))
    if(_is_infinite_except_origin(g, PLUS_INFINITY)):
        return _shift_by(f, g.value_at(0))
    if(_is_infinite_except_origin(f, MINUS_INFINITY)):
        return _minus_infinite_after(g, f.value_at(0))
    if(_is_infinite_except_origin(g, MINUS_INFINITY)):
        return _minus_infinite_after(f, g.value_at(0))

    if(f.is_zero and g.is_non_negative and g.value_at(0) == 0):
        return f
    if(g.is_zero and f.is_non_negative and f.value_at(0) == 0):
        return g

    shortcut = f._convolution_shortcut(g)
    if(shortcut is None):
        shortcut = g._convolution_shortcut(f)
    if(shortcut is not None):
        logger.debug("convolution: closed form between %s and %s" % (type(f).__name__, type(g).__name__))
        return shortcut

    self_convolution = f is g or f.equivalent(g)
    if(self_convolution and settings.use_sub_additive_convolution_optimizations and f.value_at(0) == 0
            and (f.__dict__.get("is_sub_additive", False) or f.is_concave)):
        logger.debug("convolution: sub-additive curve with zero origin convolved with itself")
        return f

    if(settings.use_convolution_isomorphism and _isomorphism_applies(f, g, left_continuous=True)
            and _prefer_isomorphism(f, g, settings)):
        from minplus import pseudoInverse
        logger.debug("convolution: through the upper pseudo-inverses")
        inner = settings.replace(use_convolution_isomorphism=False)
        dual = max_plus_convolution(pseudoInverse.upper_pseudo_inverse(f, inner),
            pseudoInverse.upper_pseudo_inverse(g, inner), inner)
        return pseudoInverse.lower_pseudo_inverse(dual, settings)

    logger.debug("convolution of f (%d elements, T=%s d=%s) and g (%d elements, T=%s d=%s)" % (
        len(f.base_sequence), ru.to_string(f.pseudo_period_start), ru.to_string(f.pseudo_period_length),
        len(g.base_sequence), ru.to_string(g.pseudo_period_start), ru.to_string(g.pseudo_period_length)))

    if(settings.single_pass_convolution and f.pseudo_period_average_slope == g.pseudo_period_average_slope):
        result = _single_pass_convolution(f, g, settings)
    else:
        terms = list()
        if(f.pseudo_period_start > 0 and g.pseudo_period_start > 0):
            terms.append(_transient_transient(f, g, settings))
        if(f.pseudo_period_start > 0 and not g.pseudo_periodic_sequence.is_plus_infinite):
            terms.append(_transient_periodic(f, g, settings))
        if(g.pseudo_period_start > 0 and not f.pseudo_periodic_sequence.is_plus_infinite and not self_convolution):
            terms.append(_transient_periodic(g, f, settings))
        if(not f.pseudo_periodic_sequence.is_plus_infinite and not g.pseudo_periodic_sequence.is_plus_infinite):
            terms.append(_periodic_periodic(f, g, settings))
        if(not terms):
            return Curve.plus_infinite()
        logger.debug("convolution: minimum of %d partial terms" % len(terms))
        result = minimum(terms, settings)
    return result.optimize() if settings.auto_optimize else result


def _single_pass_convolution(f: Curve, g: Curve, settings: ComputationSettings) -> Curve:
    slope = f.pseudo_period_average_slope
    d = common_period(f, g)
    T = f.pseudo_period_start + g.pseudo_period_start + d
    c = d * slope if ru.is_finite(slope) else Fraction(0)
    end = T + d
    logger.debug("convolution: same slope, single pass with T=%s d=%s" % (ru.to_string(T), ru.to_string(d)))
    sequence = sequence_convolution(f.cut(0, end), g.cut(0, end), settings, end)
    return Curve(sequence.cut(0, end), T, d, c)


def _transient_transient(f: Curve, g: Curve, settings: ComputationSettings) -> Curve:
    sequence = sequence_convolution(f.transient_sequence, g.transient_sequence, settings)
    T = f.pseudo_period_start + g.pseudo_period_start
    result = Curve(fill(sequence.elements, 0, T + 1), T, 1, 0)
    return result.optimize() if settings.auto_optimize else result


def _transient_periodic(transient: Curve, periodic: Curve, settings: ComputationSettings) -> Curve:
    start = periodic.pseudo_period_start
    T = transient.pseudo_period_start + start
    d = periodic.pseudo_period_length
    c = periodic.pseudo_period_height
    sequence = sequence_convolution(transient.transient_sequence, periodic.cut(start, T + d), settings, T + d)
    result = Curve(sequence.cut(start, T + d), T, d, c, is_partial_curve=True)
    return result.optimize() if settings.auto_optimize else result


def _periodic_periodic(f: Curve, g: Curve, settings: ComputationSettings) -> Curve:
    d = common_period(f, g)
    tf = f.pseudo_period_start
    tg = g.pseudo_period_start
    T = tf + tg + d
    slope = min(f.pseudo_period_average_slope, g.pseudo_period_average_slope)
    c = d * slope if ru.is_finite(slope) else Fraction(0)
    logger.debug("convolution: periodic terms extended from d=%s and d=%s to T=%s d=%s" % (
        ru.to_string(f.pseudo_period_length), ru.to_string(g.pseudo_period_length), ru.to_string(T), ru.to_string(d)))
    end = T + d
    sequence = sequence_convolution(f.cut(tf, tf + 2 * d), g.cut(tg, tg + 2 * d), settings, end)
    result = Curve(sequence.cut(tf + tg, end), T, d, c, is_partial_curve=True)
    return result.optimize() if settings.auto_optimize else result


def _is_infinite_except_origin(curve: Curve, value: Rational) -> bool:
    """True if the curve is equal to value (+inf or -inf) everywhere but at the origin"""
    # with T > 0 the origin is not repeated by the period
    elements = curve._with_transient().base_sequence.elements
    if(value == PLUS_INFINITY):
        return all(e.is_plus_infinite for e in elements[1:])
    return all(e.is_minus_infinite for e in elements[1:])


def _minus_infinite_after(curve: Curve, origin: Rational) -> Curve:
    """Convolution of curve with a curve equal to origin at 0 and -inf elsewhere

    Any t past the first instant t0 where the curve is below +inf is reached with an -inf
    term, so the result is origin + curve over [0, t0] and -inf after.
    """
    t0 = PLUS_INFINITY
    for e in curve.base_sequence:
        if(not e.is_plus_infinite):
            t0 = e.time if isinstance(e, Point) else e.start_time
            break
    if(t0 == PLUS_INFINITY):
        return Curve.plus_infinite()
    logger.debug("convolution: -inf after the origin, absorbing past %s" % ru.to_string(t0))
    shifted = _shift_by(curve, origin)
    elements = list()
    if(t0 > 0):
        elements.extend([Point(0, PLUS_INFINITY), Segment.plus_infinite(0, t0)])
    elements.extend([Point(t0, shifted.value_at(t0)), Segment.minus_infinite(t0, t0 + 1),
        Point(t0 + 1, MINUS_INFINITY), Segment.minus_infinite(t0 + 1, t0 + 2)])
    return Curve(elements, t0 + 1, 1, 0)


def _shift_by(curve: Curve, value: Rational) -> Curve:
    """curve + value, where an infinite value absorbs every finite part of the curve"""
    if(ru.is_finite(value)):
        return curve.vertical_shift(value)
    if(value == PLUS_INFINITY):
        return Curve.plus_infinite()
    shifted = list()
    for e in curve.base_sequence:
        if(e.is_plus_infinite):
            shifted.append(e)
        elif(isinstance(e, Point)):
            shifted.append(Point(e.time, value))
        else:
            shifted.append(Segment.constant(e.start_time, e.end_time, value))
    return Curve(shifted, curve.pseudo_period_start, curve.pseudo_period_length, 0)


def convolution_of(curves: Iterable[Curve], settings: Optional[ComputationSettings] = None) -> Curve:
    """(min,+) convolution of several curves"""
    curves = list(curves)
    if(not curves):
        raise ValueError("Cannot compute the convolution of an empty set of curves")
    return functools.reduce(lambda a, b: convolution(a, b, settings), curves)


def deconvolution(f: Curve, g: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
    """(min,+) deconvolution sup_{s >= 0} f(t + s) - g(s)

    The result has the period of f, and is not forced to be 0 at the origin.
    """
    settings = resolve(settings)
    if(f.pseudo_period_average_slope > g.pseudo_period_average_slope):
        logger.debug("deconvolution: f grows faster than g, the result is +inf")
        return Curve.plus_infinite()
    T = max(f.pseudo_period_start, g.pseudo_period_start) + ru.lcm(f.pseudo_period_length, g.pseudo_period_length)
    end = f.first_pseudo_period_end
    logger.debug("deconvolution over [0, %s) with a window of %s" % (ru.to_string(end), ru.to_string(T)))
    sequence = sequence_deconvolution(f.cut(0, end + T), g.cut(0, T), 0, end, settings)
    result = Curve(sequence.optimize(), f.pseudo_period_start, f.pseudo_period_length, f.pseudo_period_height)
    return result.optimize() if settings.auto_optimize else result


def max_plus_convolution(f: Curve, g: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
    """(max,+) convolution sup_{0 <= s <= t} f(s) + g(t - s), computed as -((-f) * (-g))"""
    settings = resolve(settings)
    if(settings.use_convolution_isomorphism and _isomorphism_applies(f, g, left_continuous=False)
            and _prefer_isomorphism(f, g, settings)):
        from minplus import pseudoInverse
        logger.debug("max-plus convolution: through the lower pseudo-inverses")
        inner = settings.replace(use_convolution_isomorphism=False)
        dual = convolution(pseudoInverse.lower_pseudo_inverse(f, inner), pseudoInverse.lower_pseudo_inverse(g, inner), inner)
        return pseudoInverse.upper_pseudo_inverse(dual, settings)
    return -convolution(-f, -g, settings)


def max_plus_deconvolution(f: Curve, g: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
    """(max,+) deconvolution inf_{s >= 0} f(t + s) - g(s), computed as -((-f) / (-g))"""
    return -deconvolution(-f, -g, settings)


#ISOMORPHISM

def _isomorphism_applies(f: Curve, g: Curve, left_continuous: bool) -> bool:
    """True if both curves are finite, non-decreasing, 0 at the origin, with a positive finite
    slope, and left-continuous (resp. right-continuous)"""
    for h in (f, g):
        slope = h.pseudo_period_average_slope
        if(not ru.is_finite(slope) or slope <= 0):
            return False
        if(not h.is_finite or h.value_at(0) != 0 or not h.is_non_decreasing):
            return False
        if(not (h.is_left_continuous if left_continuous else h.is_right_continuous)):
            return False
    return True


def _prefer_isomorphism(f: Curve, g: Curve, settings: ComputationSettings) -> bool:
    """Compares the period of the direct computation with the one of the pseudo-inverses,
    which have swapped lengths and heights"""
    df, dg = f.pseudo_period_length, g.pseudo_period_length
    cf, cg = f.pseudo_period_height, g.pseudo_period_height
    if(settings.use_convolution_super_isospeed):
        nf = len(f.pseudo_periodic_sequence)
        ng = len(g.pseudo_periodic_sequence)
        direct = _period_cost(df, dg, nf, ng)
        inverse = _period_cost(cf, cg, nf, ng)
        logger.debug("super-isospeed: direct %s, inverse %s" % (ru.to_string(direct), ru.to_string(inverse)))
        return inverse < direct
    if(settings.use_convolution_isospeed):
        return ru.lcm(cf, cg) < ru.lcm(df, dg)
    return True


def _period_cost(a: Rational, b: Rational, na: int, nb: int) -> Rational:
    """Number of elements of the two periodic parts once extended to a common period"""
    length = ru.lcm(a, b)
    return (length / a) * na + (length / b) * nb
