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
This module contains the ultimately pseudo-periodic Curve and the operations that do not
need a dedicated engine: values, cuts, representation optimization, pointwise operations,
comparisons, monotone regularizations, composition and deviations.

A curve is described by a base sequence over [0, T+d) and the pseudo-period (T, d, c):
for t >= T, f(t + d) = f(t) + c.
"""

import bisect
import functools
import logging
import warnings
from fractions import Fraction
from typing import Iterable, List, Optional, Tuple

from minplus import rationalUtility as ru
from minplus.rationalUtility import Rational, PLUS_INFINITY, MINUS_INFINITY
from minplus.elements import (Element, Point, Segment, CurveNotDefinedForThisValue,
    InvalidCurveError, NotMonotoneError)
from minplus.sequences import Sequence, fill
from minplus.computationSettings import ComputationSettings, resolve

logger = logging.getLogger("OPT")
loggermin = logging.getLogger("MIN")


def copydoc(fromfunc, sep="\n"):
    """
    Decorator: Copy the docstring of `fromfunc`
    """
    def _decorator(func):
        sourcedoc = fromfunc.__doc__
        if func.__doc__ == None:
            func.__doc__ = sourcedoc
        else:
            func.__doc__ = sep.join([sourcedoc, func.__doc__])
        return func
    return _decorator


class Curve:
    '''
    Ultimately pseudo-periodic piecewise-affine function of the time t >= 0

    >>> c = Curve([Point(0, 0), Segment(0, 1, 0, 1)], 0, 1, 1)
    >>> c.value_at(5)
    Fraction(5, 1)
    '''
    _name: str
    _base_sequence: Sequence
    _pseudo_period_start: Rational
    _pseudo_period_length: Rational
    _pseudo_period_height: Rational
    _is_optimized: bool

    def __init__(self, base_sequence, pseudo_period_start, pseudo_period_length, pseudo_period_height,
            is_partial_curve: bool = False, **kargs) -> None:
        """
        Args:
            base_sequence (Sequence or Iterable[Element]): description of the curve over [0, T+d), or
                over a longer interval if it agrees with the periodic extension
            pseudo_period_start (Rational): T >= 0
            pseudo_period_length (Rational): d > 0
            pseudo_period_height (Rational): c, finite
            is_partial_curve (bool, optional): if True, the base sequence may start after 0 and the
                missing part is +inf. Defaults to False.

        Raises:
            InvalidCurveError: if the descriptor is malformed or the sequence violates the periodicity
        """
        self._name = kargs.get("name", "")
        self._is_optimized = False
        start = ru.to_rational(pseudo_period_start)
        length = ru.to_rational(pseudo_period_length)
        height = ru.to_rational(pseudo_period_height)
        if(not ru.is_finite(start) or start < 0):
            raise InvalidCurveError("The pseudo-period start must be finite and non-negative, got %s" % ru.to_string(start))
        if(not ru.is_finite(length) or length <= 0):
            raise InvalidCurveError("The pseudo-period length must be finite and positive, got %s" % ru.to_string(length))
        if(not ru.is_finite(height)):
            raise InvalidCurveError("The pseudo-period height must be finite, got %s" % ru.to_string(height))
        if(not isinstance(base_sequence, Sequence)):
            base_sequence = Sequence(base_sequence)
        if(is_partial_curve and (base_sequence.defined_from > 0 or not base_sequence.is_left_closed)):
            base_sequence = Sequence(fill(base_sequence.elements, 0, base_sequence.defined_until))
        if(base_sequence.defined_from != 0 or not base_sequence.is_left_closed):
            raise InvalidCurveError("The base sequence must start with a point at 0, it is defined over %s" % base_sequence._support_string())
        end = start + length
        if(base_sequence.defined_until < end):
            raise InvalidCurveError("The base sequence over %s does not cover [0, %s)" % (base_sequence._support_string(), ru.to_string(end)))

        extra = None
        if(base_sequence.defined_until > end or base_sequence.is_right_closed):
            extra = base_sequence.cut(end, base_sequence.defined_until, True, base_sequence.is_right_closed)
            base_sequence = base_sequence.cut(0, end)
        self._base_sequence = base_sequence
        self._pseudo_period_start = start
        self._pseudo_period_length = length
        self._pseudo_period_height = height
        if(extra is not None):
            expected = self.cut(end, extra.defined_until, True, extra.is_right_closed)
            if(not expected.equivalent(extra)):
                raise InvalidCurveError("The base sequence does not agree with its periodic extension after %s" % ru.to_string(end))

    def set_name(self, name: str) -> None:
        self._name = name

    def get_name(self) -> str:
        return self._name

    #FACTORIES

    @classmethod
    def plus_infinite(cls) -> 'Curve':
        return Curve([Point(0, PLUS_INFINITY), Segment.plus_infinite(0, 1)], 0, 1, 0)

    @classmethod
    def minus_infinite(cls) -> 'Curve':
        return Curve([Point(0, MINUS_INFINITY), Segment.minus_infinite(0, 1)], 0, 1, 0)

    @classmethod
    def zero(cls) -> 'Curve':
        return Curve([Point(0, 0), Segment.constant(0, 1, 0)], 0, 1, 0)

    @classmethod
    def delta_zero(cls) -> 'Curve':
        """Neutral element of the (min,+) convolution: 0 at the origin, +inf elsewhere"""
        return Curve([Point(0, 0), Segment.plus_infinite(0, 1), Point(1, PLUS_INFINITY), Segment.plus_infinite(1, 2)], 1, 1, 0)

    #DESCRIPTOR

    @property
    def base_sequence(self) -> Sequence:
        return self._base_sequence

    @property
    def pseudo_period_start(self) -> Rational:
        return self._pseudo_period_start

    @property
    def pseudo_period_length(self) -> Rational:
        return self._pseudo_period_length

    @property
    def pseudo_period_height(self) -> Rational:
        return self._pseudo_period_height

    @property
    def first_pseudo_period_end(self) -> Rational:
        return self._pseudo_period_start + self._pseudo_period_length

    @property
    def second_pseudo_period_end(self) -> Rational:
        return self._pseudo_period_start + 2 * self._pseudo_period_length

    @functools.cached_property
    def transient_sequence(self) -> Optional[Sequence]:
        if(self._pseudo_period_start == 0):
            return None
        return self._base_sequence.cut(0, self._pseudo_period_start)

    @functools.cached_property
    def pseudo_periodic_sequence(self) -> Sequence:
        return self._base_sequence.cut(self._pseudo_period_start, self.first_pseudo_period_end)

    @functools.cached_property
    def pseudo_period_average_slope(self) -> Rational:
        """c/d, or +inf (resp. -inf) if the periodic part of the curve is +inf (resp. -inf)"""
        period = self.pseudo_periodic_sequence
        if(period.is_plus_infinite):
            return PLUS_INFINITY
        if(period.is_minus_infinite):
            return MINUS_INFINITY
        return self._pseudo_period_height / self._pseudo_period_length

    #VALUES

    def value_at(self, t) -> Rational:
        """Value of the curve at t >= 0

        Raises:
            CurveNotDefinedForThisValue: if t is negative
        """
        t = ru.to_rational(t)
        if(t < 0 or not ru.is_finite(t)):
            raise CurveNotDefinedForThisValue(t, string=("The curve is not defined for %s" % ru.to_string(t)))
        if(t < self.first_pseudo_period_end):
            return self._base_sequence.value_at(t)
        k = ru.floor((t - self._pseudo_period_start) / self._pseudo_period_length)
        return ru.add(self._base_sequence.value_at(t - k * self._pseudo_period_length), k * self._pseudo_period_height)

    def right_limit_at(self, t) -> Rational:
        t = ru.to_rational(t)
        if(t < 0 or not ru.is_finite(t)):
            raise CurveNotDefinedForThisValue(t, string=("The right limit of the curve is not defined for %s" % ru.to_string(t)))
        if(t < self.first_pseudo_period_end):
            return self._base_sequence.right_limit_at(t)
        k = ru.floor((t - self._pseudo_period_start) / self._pseudo_period_length)
        return ru.add(self._base_sequence.right_limit_at(t - k * self._pseudo_period_length), k * self._pseudo_period_height)

    def left_limit_at(self, t) -> Rational:
        t = ru.to_rational(t)
        if(t <= 0 or not ru.is_finite(t)):
            raise CurveNotDefinedForThisValue(t, string=("The left limit of the curve is not defined for %s" % ru.to_string(t)))
        if(t <= self.first_pseudo_period_end):
            return self._base_sequence.left_limit_at(t)
        k = ru.ceil((t - self._pseudo_period_start) / self._pseudo_period_length) - 1
        return ru.add(self._base_sequence.left_limit_at(t - k * self._pseudo_period_length), k * self._pseudo_period_height)

    def __call__(self, t) -> Rational:
        return self.value_at(t)

    def cut(self, start, end, start_included: bool = True, end_included: bool = False) -> Sequence:
        """Finite sequence describing the curve over an interval, extending the periodic part as needed

        Args:
            start (Rational): left endpoint, non-negative
            end (Rational): right endpoint, finite
            start_included (bool, optional): Defaults to True.
            end_included (bool, optional): Defaults to False.

        Raises:
            CurveNotDefinedForThisValue: if start is negative or end is infinite

        Returns:
            Sequence: the restriction of the curve
        """
        start = ru.to_rational(start)
        end = ru.to_rational(end)
        if(start < 0 or not ru.is_finite(end)):
            raise CurveNotDefinedForThisValue(start if start < 0 else end,
                string=("Cannot cut the curve over [%s, %s]" % (ru.to_string(start), ru.to_string(end))))
        if(start == end):
            return Sequence([Point(start, self.value_at(start))])
        if(end < self.first_pseudo_period_end or (end == self.first_pseudo_period_end and not end_included)):
            return self._base_sequence.cut(start, end, start_included, end_included)
        return Sequence(self._elements_until(start, end)).cut(start, end, start_included, end_included)

    def _elements_until(self, start: Rational, end: Rational) -> List[Element]:
        T = self._pseudo_period_start
        d = self._pseudo_period_length
        c = self._pseudo_period_height
        if(self._periodic_tail_is_affine):
            # a single segment replaces the repetition of the period
            elements = list(self._base_sequence.cut(0, T).elements) if T > 0 else list()
            value = self._base_sequence.value_at(T)
            slope = c / d if ru.is_finite(value) else 0
            elements.append(Point(T, value))
            elements.append(Segment(T, end + 1, value, slope))
            return elements
        if(start < self.first_pseudo_period_end):
            elements = list(self._base_sequence.elements)
            first = 1
        else:
            elements = list()
            first = ru.floor((start - T) / d)
        last = ru.floor((end - T) / d)
        period = self.pseudo_periodic_sequence
        for i in range(first, last + 1):
            elements.extend(e.delay(i * d).vertical_shift(i * c) for e in period)
        return elements

    def extend(self, t) -> Sequence:
        """Sequence describing the curve over [0, t)"""
        return self.cut(0, t)

    #PREDICATES

    @functools.cached_property
    def _periodic_tail_is_affine(self) -> bool:
        """True if, from T on, the curve is a single half-line (possibly infinite)"""
        period = self.pseudo_periodic_sequence
        tail = Sequence(period.elements + tuple(
            e.delay(self._pseudo_period_length).vertical_shift(self._pseudo_period_height) for e in period)).optimize()
        if(len(tail) != 2):
            return False
        point, segment = tail.elements
        if(not ru.is_finite(point.value)):
            return point.value == segment.right_limit_at_start_time
        return point.value == segment.right_limit_at_start_time and segment.slope * self._pseudo_period_length == self._pseudo_period_height

    @functools.cached_property
    def is_finite(self) -> bool:
        return self._base_sequence.is_finite

    @functools.cached_property
    def is_plus_infinite(self) -> bool:
        return self._base_sequence.is_plus_infinite

    @functools.cached_property
    def is_minus_infinite(self) -> bool:
        return self._base_sequence.is_minus_infinite

    @functools.cached_property
    def is_zero(self) -> bool:
        return self._base_sequence.is_finite and self._pseudo_period_height == 0 \
            and self._base_sequence.min_value() == 0 and self._base_sequence.max_value() == 0

    @functools.cached_property
    def is_non_negative(self) -> bool:
        if(self._base_sequence.min_value() < 0):
            return False
        return self._pseudo_period_height >= 0 or not any(e.is_finite for e in self.pseudo_periodic_sequence)

    @functools.cached_property
    def is_non_decreasing(self) -> bool:
        return self.cut(0, self.second_pseudo_period_end).is_non_decreasing

    @functools.cached_property
    def is_left_continuous(self) -> bool:
        return self.cut(0, self.first_pseudo_period_end, end_included=True).is_left_continuous

    @functools.cached_property
    def is_right_continuous(self) -> bool:
        return self.cut(0, self.first_pseudo_period_end, end_included=True).is_right_continuous

    @property
    def is_continuous(self) -> bool:
        return self.is_left_continuous and self.is_right_continuous

    @functools.cached_property
    def is_continuous_except_origin(self) -> bool:
        return self.cut(0, self.first_pseudo_period_end, start_included=False, end_included=True).is_continuous

    @functools.cached_property
    def is_ultimately_finite(self) -> bool:
        return self.pseudo_periodic_sequence.is_finite

    @functools.cached_property
    def is_ultimately_infinite(self) -> bool:
        """True if the curve is infinite from a point on, which is the first infinite element"""
        return self._is_ultimately_infinite(weak=False)

    @functools.cached_property
    def is_weakly_ultimately_infinite(self) -> bool:
        """True if the curve is finite up to some time and infinite after it, the value at
        that time being possibly finite"""
        return self._is_ultimately_infinite(weak=True)

    def _is_ultimately_infinite(self, weak: bool) -> bool:
        elements = self.cut(0, self.second_pseudo_period_end).elements
        for i, e in enumerate(elements):
            if(e.is_infinite):
                if(not weak and isinstance(e, Segment)):
                    return False
                return all(o.is_infinite and o.value_at(_sample_time(o)) == e.value_at(_sample_time(e)) for o in elements[i:])
        return False

    @property
    def is_ultimately_plain(self) -> bool:
        return self.is_ultimately_finite or self.is_weakly_ultimately_infinite

    @functools.cached_property
    def is_ultimately_affine(self) -> bool:
        return self.is_ultimately_finite and self._periodic_tail_is_affine

    @property
    def is_ultimately_constant(self) -> bool:
        return self.is_ultimately_affine and self._pseudo_period_height == 0

    @functools.cached_property
    def is_sub_additive(self) -> bool:
        """True if f(s + t) <= f(s) + f(t) for any s, t, i.e. f <= f * f"""
        from minplus import convolutions
        settings = ComputationSettings.default().replace(use_sub_additive_convolution_optimizations=False)
        return self.less_or_equal(convolutions.convolution(self, self, settings), settings)

    @functools.cached_property
    def is_super_additive(self) -> bool:
        """True if f(s + t) >= f(s) + f(t) for any s, t"""
        from minplus import convolutions
        settings = ComputationSettings.default().replace(use_sub_additive_convolution_optimizations=False)
        return self.greater_or_equal(convolutions.max_plus_convolution(self, self, settings), settings)

    @functools.cached_property
    def is_concave(self) -> bool:
        """True if the curve is finite and concave over (0, +inf), with f(0) not above f(0+)"""
        if(not self.is_finite or not self.is_continuous_except_origin):
            return False
        if(self.value_at(0) > self.right_limit_at(0)):
            return False
        return _slopes_are_monotone(self.cut(0, self.second_pseudo_period_end).optimize(), increasing=False)

    @functools.cached_property
    def is_convex(self) -> bool:
        if(not self.is_finite or not self.is_continuous):
            return False
        return _slopes_are_monotone(self.cut(0, self.second_pseudo_period_end).optimize(), increasing=True)

    #NOTABLE TIMES AND VALUES

    def first_finite_time(self) -> Rational:
        for e in self._base_sequence:
            if(e.is_finite):
                return e.start_time
        return PLUS_INFINITY

    def first_finite_time_except_origin(self) -> Rational:
        for e in self._base_sequence.elements[1:]:
            if(e.is_finite):
                return e.start_time
        if(ru.is_finite(self._base_sequence.value_at(self._pseudo_period_start))):
            return self.first_pseudo_period_end
        return PLUS_INFINITY

    def first_non_zero_time(self) -> Rational:
        """inf{t : f(t) > 0}, for non-negative non-decreasing curves"""
        for e in self._base_sequence:
            if(isinstance(e, Point)):
                if(e.value > 0):
                    return e.time
            elif(e.right_limit_at_start_time > 0 or e.slope > 0):
                return e.start_time
        if(self._pseudo_period_height > 0):
            return self.first_pseudo_period_end
        return PLUS_INFINITY

    def first_non_negative_time(self) -> Rational:
        """inf{t : f(t) >= 0}, for non-decreasing curves"""
        end = self.first_pseudo_period_end
        if(self._base_sequence.max_value() < 0):
            c = self._pseudo_period_height
            period_max = max((v for v in _values(self.pseudo_periodic_sequence) if ru.is_finite(v)), default=MINUS_INFINITY)
            if(c <= 0 or not ru.is_finite(period_max)):
                return PLUS_INFINITY
            k = ru.ceil(-period_max / c)
            end = self.first_pseudo_period_end + k * self._pseudo_period_length
        for e in self.cut(0, end, end_included=True):
            if(isinstance(e, Point)):
                if(e.value >= 0):
                    return e.time
            elif(e.right_limit_at_start_time >= 0):
                return e.start_time
            elif(e.left_limit_at_end_time > 0):
                return e.start_time + (-e.right_limit_at_start_time) / e.slope
        return PLUS_INFINITY

    def max_value(self) -> Rational:
        """Supremum of the curve, +inf if it is not upper-bounded"""
        if(self.pseudo_period_average_slope <= 0):
            return self.cut(0, self.first_pseudo_period_end, end_included=True).max_value()
        return PLUS_INFINITY

    def min_value(self) -> Rational:
        """Infimum of the curve, -inf if it is not lower-bounded"""
        if(self.pseudo_period_average_slope >= 0):
            return self.cut(0, self.first_pseudo_period_end, end_included=True).min_value()
        return MINUS_INFINITY

    #OPTIMIZATION

    def optimize(self) -> 'Curve':
        """Minimal equivalent representation: smallest period, shortest transient, merged segments"""
        if(self._is_optimized):
            return self
        T = self._pseudo_period_start
        d = self._pseudo_period_length
        c = self._pseudo_period_height
        if(self._periodic_tail_is_affine):
            slope = self.pseudo_period_average_slope
            d, c = Fraction(1), (slope if ru.is_finite(slope) else Fraction(0))
            curve = Curve(self.cut(0, T + d), T, d, c)
        else:
            curve = self._factorize_period()
            d = curve._pseudo_period_length
            c = curve._pseudo_period_height
        T, base = curve._reduce_transient()
        result = Curve(base.optimize(), T, d, c, name=self._name)
        result._is_optimized = True
        logger.debug("optimize: T=%s d=%s c=%s, %d -> %d elements" % (ru.to_string(T), ru.to_string(d), ru.to_string(c),
            len(self._base_sequence), len(result._base_sequence)))
        return result

    def _factorize_period(self) -> 'Curve':
        curve = self
        while True:
            T = curve._pseudo_period_start
            d = curve._pseudo_period_length
            c = curve._pseudo_period_height
            window = curve.cut(T, T + 2 * d).optimize()
            count = len([t for t in window.breakpoint_times() if T < t <= T + d])
            reduced = None
            for p in _prime_factors(count):
                dp = d / p
                cp = c / p
                shifted = curve.cut(T + dp, T + dp + d).anticipate(dp).vertical_shift(-cp)
                if(shifted.equivalent(curve.cut(T, T + d))):
                    reduced = Curve(curve.cut(0, T + dp), T, dp, cp)
                    break
            if(reduced is None):
                return curve
            curve = reduced

    def _reduce_transient(self) -> Tuple[Rational, Sequence]:
        T = self._pseudo_period_start
        d = self._pseudo_period_length
        c = self._pseudo_period_height
        base = self._base_sequence.optimize()
        while T > 0:
            times = base.breakpoint_times()
            last_transient = times[bisect.bisect_left(times, T) - 1]
            last_periodic = times[bisect.bisect_left(times, T + d) - 1]
            candidate = max(last_transient, last_periodic - d)
            shifted = base.cut(candidate, T).delay(d).vertical_shift(c)
            if(not shifted.equivalent(base.cut(candidate + d, T + d))):
                break
            T = candidate
            base = base.cut(0, T + d)
        return T, base

    #POINTWISE OPERATIONS

    def addition(self, other: 'Curve', settings: Optional[ComputationSettings] = None) -> 'Curve':
        """Pointwise sum of two curves

        Raises:
            ArithmeticError: if +inf is added to -inf
        """
        settings = resolve(settings)
        T = max(self._pseudo_period_start, other._pseudo_period_start)
        d = common_period(self, other)
        c = self._pseudo_period_height * (d / self._pseudo_period_length) + other._pseudo_period_height * (d / other._pseudo_period_length)
        result = Curve(self.cut(0, T + d) + other.cut(0, T + d), T, d, c)
        return result.optimize() if settings.auto_optimize else result

    def subtraction(self, other: 'Curve', non_negative: bool = False, settings: Optional[ComputationSettings] = None) -> 'Curve':
        result = self.addition(-other, settings)
        if(non_negative):
            return result.to_non_negative(settings)
        return result

    def __add__(self, curve: 'Curve') -> 'Curve':
        """ Addition of two curves

        Arguments:
            curve {Curve} -- the curve to add to self

        Returns:
            Curve -- the addition self + curve
        """
        if(isinstance(curve, Curve)):
            return self.addition(curve)
        raise TypeError("unsupported operand type(s) for + or add(): %s and %s" % (type(self).__name__, type(curve).__name__))

    def __sub__(self, curve: 'Curve') -> 'Curve':
        if(isinstance(curve, Curve)):
            return self.subtraction(curve)
        raise TypeError("unsupported operand type(s) for - or sub(): %s and %s" % (type(self).__name__, type(curve).__name__))

    def __neg__(self) -> 'Curve':
        return Curve(-self._base_sequence, self._pseudo_period_start, self._pseudo_period_length, -self._pseudo_period_height)

    def negate(self) -> 'Curve':
        return -self

    def scale(self, factor) -> 'Curve':
        """Multiplies the values of the curve by a finite factor"""
        factor = ru.to_rational(factor)
        if(not ru.is_finite(factor)):
            raise ValueError("Cannot scale a curve by an infinite factor")
        return Curve(self._base_sequence.scale(factor), self._pseudo_period_start, self._pseudo_period_length,
            self._pseudo_period_height * factor)

    def vertical_shift(self, shift, except_origin: bool = False) -> 'Curve':
        """Adds a finite value to the curve, possibly leaving f(0) untouched"""
        shift = ru.to_rational(shift)
        if(not ru.is_finite(shift)):
            raise ValueError("Cannot shift a curve by an infinite value")
        if(not except_origin):
            return Curve(self._base_sequence.vertical_shift(shift), self._pseudo_period_start, self._pseudo_period_length,
                self._pseudo_period_height)
        curve = self._with_transient()
        elements = curve._base_sequence.elements
        return Curve([elements[0]] + [e.vertical_shift(shift) for e in elements[1:]], curve._pseudo_period_start,
            curve._pseudo_period_length, curve._pseudo_period_height)

    def delay_by(self, delay, prepend_with_zero: bool = True) -> 'Curve':
        """f(t - delay) for t >= delay; 0 (or +inf) before"""
        delay = ru.to_rational(delay)
        if(not ru.is_finite(delay) or delay < 0):
            raise ValueError("The delay must be finite and non-negative, got %s" % ru.to_string(delay))
        if(delay == 0):
            return self
        fill_with = Fraction(0) if prepend_with_zero else PLUS_INFINITY
        elements = [Point(0, fill_with), Segment.constant(0, delay, fill_with)] + list(self._base_sequence.delay(delay).elements)
        return Curve(elements, self._pseudo_period_start + delay, self._pseudo_period_length, self._pseudo_period_height)

    def anticipate_by(self, time) -> 'Curve':
        """f(t + time) for t >= 0"""
        time = ru.to_rational(time)
        if(not ru.is_finite(time) or time < 0):
            raise ValueError("The anticipation must be finite and non-negative, got %s" % ru.to_string(time))
        if(time == 0):
            return self
        T = max(self._pseudo_period_start - time, Fraction(0))
        d = self._pseudo_period_length
        return Curve(self.cut(time, time + T + d).anticipate(time), T, d, self._pseudo_period_height)

    def to_non_negative(self, settings: Optional[ComputationSettings] = None) -> 'Curve':
        """max(f, 0)"""
        return self.maximum(Curve.zero(), settings)

    def with_zero_origin(self) -> 'Curve':
        """The same curve with f(0) = 0"""
        if(self._base_sequence.value_at(0) == 0):
            return self
        curve = self._with_transient()
        elements = curve._base_sequence.elements
        return Curve((Point(0, 0),) + elements[1:], curve._pseudo_period_start, curve._pseudo_period_length,
            curve._pseudo_period_height)

    def _with_transient(self) -> 'Curve':
        """Equivalent representation with T > 0, so that the origin is not repeated by the period"""
        if(self._pseudo_period_start > 0):
            return self
        d = self._pseudo_period_length
        return Curve(self.cut(0, 2 * d), d, d, self._pseudo_period_height)

    #MINIMUM AND MAXIMUM

    def minimum(self, other: 'Curve', settings: Optional[ComputationSettings] = None) -> 'Curve':
        """Pointwise minimum of two curves"""
        return self._envelope(other, True, settings)

    def maximum(self, other: 'Curve', settings: Optional[ComputationSettings] = None) -> 'Curve':
        """Pointwise maximum of two curves"""
        return self._envelope(other, False, settings)

    def _envelope(self, other: 'Curve', lower: bool, settings: Optional[ComputationSettings]) -> 'Curve':
        settings = resolve(settings)
        absorbing = (lambda f: f.is_minus_infinite) if lower else (lambda f: f.is_plus_infinite)
        neutral = (lambda f: f.is_plus_infinite) if lower else (lambda f: f.is_minus_infinite)
        if(absorbing(self) or neutral(other)):
            return self
        if(absorbing(other) or neutral(self)):
            return other

        sa = self.pseudo_period_average_slope
        sb = other.pseudo_period_average_slope
        T = max(self._pseudo_period_start, other._pseudo_period_start)
        if(sa == sb):
            d = common_period(self, other)
            c = d * sa if ru.is_finite(sa) else Fraction(0)
        else:
            low, high = (self, other) if sa < sb else (other, self)
            winner = low if lower else high
            d = winner._pseudo_period_length
            c = winner._pseudo_period_height
            if(ru.is_finite(sa) and ru.is_finite(sb)):
                T = max(T, _bounds_intersection(low, high))
                loser = high if lower else low
                has_holes = any((e.is_plus_infinite if lower else e.is_minus_infinite) for e in winner.pseudo_periodic_sequence)
                if(has_holes and loser.is_ultimately_finite):
                    warnings.warn("%s of curves with different slopes: the dominating curve is ultimately %s in places where the other is finite"
                        % ("Minimum" if lower else "Maximum", "+inf" if lower else "-inf"))
        end = T + d
        a = self.cut(0, end)
        b = other.cut(0, end)
        sequence = a.minimum(b, settings) if lower else a.maximum(b, settings)
        loggermin.debug("%s: T=%s d=%s c=%s, %d elements" % ("minimum" if lower else "maximum", ru.to_string(T), ru.to_string(d),
            ru.to_string(c), len(sequence)))
        result = Curve(sequence, T, d, c)
        return result.optimize() if settings.auto_optimize else result

    #COMPARISONS

    def equivalent(self, other: 'Curve') -> bool:
        """True if the two curves describe the same function"""
        if(self.pseudo_period_average_slope != other.pseudo_period_average_slope):
            return False
        end = max(self._pseudo_period_start, other._pseudo_period_start) + ru.lcm(self._pseudo_period_length, other._pseudo_period_length)
        return self.cut(0, end).equivalent(other.cut(0, end))

    def find_first_inequivalence(self, other: 'Curve') -> Optional[Rational]:
        """Infimum of the times where the two curves differ, None if they are equivalent"""
        if(self.equivalent(other)):
            return None
        from minplus import intervals
        end = max(self._pseudo_period_start, other._pseudo_period_start) + ru.lcm(self._pseudo_period_length, other._pseudo_period_length)
        for interval in intervals.compute_intervals(list(self.cut(0, end)) + list(other.cut(0, end))):
            if(not interval.elements):
                continue
            a, b = interval.elements
            if(interval.is_point_interval):
                if(a.value != b.value):
                    return interval.start
            elif(a.right_limit_at_start_time != b.right_limit_at_start_time or a.slope != b.slope):
                return interval.start
        return end

    def less_or_equal(self, other: 'Curve', settings: Optional[ComputationSettings] = None) -> bool:
        """True if self(t) <= other(t) for any t"""
        return self.minimum(other, settings).equivalent(self)

    def greater_or_equal(self, other: 'Curve', settings: Optional[ComputationSettings] = None) -> bool:
        return self.maximum(other, settings).equivalent(self)

    def __eq__(self, o: object) -> bool:
        if(isinstance(o, Curve)):
            return self.equivalent(o)
        return NotImplemented

    __hash__ = None

    def __le__(self, other: 'Curve') -> bool:
        if(isinstance(other, Curve)):
            return self.less_or_equal(other)
        return NotImplemented

    def __ge__(self, other: 'Curve') -> bool:
        if(isinstance(other, Curve)):
            return self.greater_or_equal(other)
        return NotImplemented

    #CONTINUITY AND MONOTONY

    def to_left_continuous(self, settings: Optional[ComputationSettings] = None) -> 'Curve':
        """Replaces the value at each discontinuity with the left limit"""
        if(self.is_left_continuous):
            return self
        return self._map_points(lambda s: s.to_left_continuous(), settings)

    def to_right_continuous(self, settings: Optional[ComputationSettings] = None) -> 'Curve':
        """Replaces the value at each discontinuity with the right limit"""
        if(self.is_right_continuous):
            return self
        return self._map_points(lambda s: s.to_right_continuous(), settings)

    def _map_points(self, transformation, settings: Optional[ComputationSettings]) -> 'Curve':
        # the point at T may take its new value from the transient, so the period starts one period later
        start = self.first_pseudo_period_end
        end = start + self._pseudo_period_length
        transformed = transformation(self.cut(0, end, end_included=True))
        result = Curve(transformed.cut(0, end), start, self._pseudo_period_length, self._pseudo_period_height)
        return result.optimize() if resolve(settings).auto_optimize else result

    def to_upper_non_decreasing(self) -> 'Curve':
        """sup_{0 <= s <= t} f(s): the smallest non-decreasing curve above f"""
        if(self.is_non_decreasing):
            return self
        T = self._pseudo_period_start
        d = self._pseudo_period_length
        c = self._pseudo_period_height
        period = self.pseudo_periodic_sequence
        if(c > 0 and ru.is_finite(self.pseudo_period_average_slope) and not any(e.is_plus_infinite for e in period)):
            overall_max = self.cut(0, self.first_pseudo_period_end, end_included=True).max_value()
            if(ru.is_finite(overall_max)):
                period_min = min(v for v in _values(period) if ru.is_finite(v))
                k = max(1, ru.ceil((overall_max - period_min) / c))
                start = T + k * d
                return Curve(_running_maximum(self.cut(0, start + d)), start, d, c)
        # the running maximum is constant after the first period
        return Curve(_running_maximum(self.cut(0, T + 2 * d)), T + d, d, 0)

    def to_lower_non_decreasing(self) -> 'Curve':
        """inf_{s >= t} f(s): the largest non-decreasing curve below f"""
        if(self.is_non_decreasing):
            return self
        T = self._pseudo_period_start
        d = self._pseudo_period_length
        c = self._pseudo_period_height
        slope = self.pseudo_period_average_slope
        if(slope < 0):
            return Curve.minus_infinite()
        if(slope > 0 and slope != PLUS_INFINITY):
            return Curve(_running_minimum(self.cut(0, T + 2 * d), PLUS_INFINITY).cut(0, T + d), T, d, c)
        period_min = self.pseudo_periodic_sequence.min_value()
        return Curve(_running_minimum(self.cut(0, T + d), period_min), T, d, 0)

    #COMPOSITION AND DEVIATIONS

    def composition(self, inner: 'Curve', settings: Optional[ComputationSettings] = None) -> 'Curve':
        """f(g(t)) with g = inner, which must be non-negative, non-decreasing and finite

        Raises:
            NotMonotoneError: if the inner curve is decreasing somewhere
            ValueError: if the inner curve is negative or infinite somewhere
        """
        settings = resolve(settings)
        g = inner
        if(not g.is_non_decreasing):
            raise NotMonotoneError("The inner curve of a composition must be non-decreasing")
        if(not g.is_non_negative or not g.is_finite):
            raise ValueError("The inner curve of a composition must be non-negative and finite")
        f = self
        Tf, df, cf = f._pseudo_period_start, f._pseudo_period_length, f._pseudo_period_height
        Tg, dg, cg = g._pseudo_period_start, g._pseudo_period_length, g._pseudo_period_height
        if(cg == 0):
            T, d, c = Tg, dg, Fraction(0)
        else:
            # first time after which g stays above Tf
            period_min = g.pseudo_periodic_sequence.min_value()
            T = Tg + max(0, ru.ceil((Tf - period_min) / cg)) * dg
            if(settings.use_composition_optimizations and f.is_ultimately_affine):
                d, c = dg, f.pseudo_period_average_slope * cg
            elif(settings.use_composition_optimizations and g.is_ultimately_affine):
                T = max(T, Tg)
                d, c = df / g.pseudo_period_average_slope, cf
            else:
                d = df.numerator * dg * cg.denominator
                c = df.denominator * cg.numerator * cf
        inner_sequence = g.cut(0, T + d)
        outer_sequence = f.cut(0, inner_sequence.max_value(), end_included=True)
        result = Curve(_compose_sequences(outer_sequence, inner_sequence), T, d, c)
        logger.debug("composition: T=%s d=%s c=%s" % (ru.to_string(T), ru.to_string(d), ru.to_string(c)))
        return result.optimize() if settings.auto_optimize else result

    def _convolution_shortcut(self, other: 'Curve') -> Optional['Curve']:
        """Closed-form convolution with other, None if there is none"""
        return None

    def convolution(self, other: 'Curve', settings: Optional[ComputationSettings] = None) -> 'Curve':
        from minplus import convolutions
        return convolutions.convolution(self, other, settings)

    def deconvolution(self, other: 'Curve', settings: Optional[ComputationSettings] = None) -> 'Curve':
        from minplus import convolutions
        return convolutions.deconvolution(self, other, settings)

    def max_plus_convolution(self, other: 'Curve', settings: Optional[ComputationSettings] = None) -> 'Curve':
        from minplus import convolutions
        return convolutions.max_plus_convolution(self, other, settings)

    def max_plus_deconvolution(self, other: 'Curve', settings: Optional[ComputationSettings] = None) -> 'Curve':
        from minplus import convolutions
        return convolutions.max_plus_deconvolution(self, other, settings)

    def lower_pseudo_inverse(self, settings: Optional[ComputationSettings] = None) -> 'Curve':
        from minplus import pseudoInverse
        return pseudoInverse.lower_pseudo_inverse(self, settings)

    def upper_pseudo_inverse(self, settings: Optional[ComputationSettings] = None) -> 'Curve':
        from minplus import pseudoInverse
        return pseudoInverse.upper_pseudo_inverse(self, settings)

    def sub_additive_closure(self, settings: Optional[ComputationSettings] = None) -> 'Curve':
        from minplus import closures
        return closures.sub_additive_closure(self, settings)

    def super_additive_closure(self, settings: Optional[ComputationSettings] = None) -> 'Curve':
        from minplus import closures
        return closures.super_additive_closure(self, settings)

    def __mul__(self, curve: 'Curve') -> 'Curve':
        """ Min-Plus convolution of two curves

        Arguments:
            curve {Curve} -- the curve with which to do the min-plus convolution

        Returns:
            Curve -- self (min-plus convolution) curve
        """
        if(isinstance(curve, Curve)):
            return self.convolution(curve)
        raise TypeError("unsupported operand type(s) for * or mul(): %s and %s" % (type(self).__name__, type(curve).__name__))

    def __truediv__(self, curve: 'Curve') -> 'Curve':
        """ Min-Plus deconvolution of two curves

        Arguments:
            curve {Curve} -- the curve with which to do the min-plus deconvolution

        Returns:
            Curve -- self (min-plus deconvolution) curve
        """
        if(isinstance(curve, Curve)):
            return self.deconvolution(curve)
        raise TypeError("unsupported operand type(s) for / or truediv(): %s and %s" % (type(self).__name__, type(curve).__name__))

    def __mod__(self, sc: 'Curve') -> Rational:
        """ (Positive) Maximal horizontal distance between self as arrival curve et sc as service curve

        Arguments:
            sc {Curve} -- the service curve

        Returns:
            Rational -- h(self,sc), maximum horizontal distance
        """
        if(isinstance(sc, Curve)):
            return horizontal_deviation(self, sc)
        raise TypeError("unsupported operand type(s) for %% or mod(): %s and %s" % (type(self).__name__, type(sc).__name__))

    def get_max_vertical_distance(self, serviceCurve: 'Curve') -> Rational:
        return vertical_deviation(self, serviceCurve)

    def __repr__(self) -> str:
        return "Curve(%r, %s, %s, %s)" % (self._base_sequence, ru.to_string(self._pseudo_period_start),
            ru.to_string(self._pseudo_period_length), ru.to_string(self._pseudo_period_height))

    def __str__(self, **kargs) -> str:
        name = (self._name + ": ") if self._name and not kargs.get("without_name", False) else ""
        return "%sT=%s d=%s c=%s %s" % (name, ru.to_string(self._pseudo_period_start), ru.to_string(self._pseudo_period_length),
            ru.to_string(self._pseudo_period_height), self._base_sequence)


#MODULE FUNCTIONS

def minimum(curves: Iterable[Curve], settings: Optional[ComputationSettings] = None) -> Curve:
    """Pointwise minimum of several curves. Curves with the same long-term slope are
    combined first, then the groups from the lowest slope up."""
    return _envelope_of(curves, True, settings)


def maximum(curves: Iterable[Curve], settings: Optional[ComputationSettings] = None) -> Curve:
    """Pointwise maximum of several curves"""
    return _envelope_of(curves, False, settings)


def _envelope_of(curves: Iterable[Curve], lower: bool, settings: Optional[ComputationSettings]) -> Curve:
    curves = list(curves)
    if(not curves):
        raise ValueError("Cannot compute the envelope of an empty set of curves")
    groups = dict()
    for curve in curves:
        groups.setdefault(curve.pseudo_period_average_slope, list()).append(curve)
    partials = list()
    for slope in sorted(groups.keys(), reverse=not lower):
        partial = groups[slope][0]
        for curve in groups[slope][1:]:
            partial = partial._envelope(curve, lower, settings)
        partials.append(partial)
    result = partials[0]
    for partial in partials[1:]:
        result = result._envelope(partial, lower, settings)
    return result


def horizontal_deviation(a: Curve, b: Curve, settings: Optional[ComputationSettings] = None) -> Rational:
    """Maximal horizontal distance between a and b, the worst-case delay if a is an arrival curve
    and b a service curve

    Raises:
        NotMonotoneError: if a curve is not non-decreasing
    """
    if(not a.is_non_decreasing or not b.is_non_decreasing):
        raise NotMonotoneError("The arguments of the horizontal deviation must be non-decreasing")
    from minplus import pseudoInverse
    settings = resolve(settings)
    if(a.pseudo_period_average_slope > b.pseudo_period_average_slope):
        return PLUS_INFINITY
    inverse = pseudoInverse.lower_pseudo_inverse(b, settings)
    identity = Curve([Point(0, 0), Segment(0, 1, 0, 1)], 0, 1, 1)
    deviation = inverse.composition(a, settings).subtraction(identity, settings=settings).max_value()
    return max(deviation, Fraction(0))


def vertical_deviation(a: Curve, b: Curve, settings: Optional[ComputationSettings] = None) -> Rational:
    """Maximal vertical distance between a and b, the worst-case backlog if a is an arrival curve
    and b a service curve"""
    return a.subtraction(b, settings=settings).max_value()


#HELPERS

def _sample_time(e: Element) -> Rational:
    if(isinstance(e, Point)):
        return e.time
    return (e.start_time + e.end_time) / 2


def _values(sequence: Sequence) -> List[Rational]:
    """Values and limits at the breakpoints of a sequence"""
    values = list()
    for e in sequence:
        if(isinstance(e, Point)):
            values.append(e.value)
        else:
            values.append(e.right_limit_at_start_time)
            values.append(e.left_limit_at_end_time)
    return values


def _prime_factors(n: int) -> List[int]:
    factors = list()
    p = 2
    while p * p <= n:
        if(n % p == 0):
            factors.append(p)
            while n % p == 0:
                n //= p
        p += 1
    if(n > 1):
        factors.append(n)
    return factors


def common_period(a: Curve, b: Curve) -> Rational:
    """Period over which both curves repeat, keeping the other period when one of them is ultimately affine"""
    if(a._periodic_tail_is_affine):
        return b._pseudo_period_length
    if(b._periodic_tail_is_affine):
        return a._pseudo_period_length
    return ru.lcm(a._pseudo_period_length, b._pseudo_period_length)


def _bounds_intersection(low: Curve, high: Curve) -> Rational:
    """Time after which the affine upper bound of the ultimately lower curve is below the
    affine lower bound of the ultimately higher one"""
    def deviations(curve):
        slope = curve.pseudo_period_average_slope
        result = list()
        for e in curve.pseudo_periodic_sequence:
            if(not e.is_finite):
                continue
            if(isinstance(e, Point)):
                result.append(e.value - slope * e.time)
            else:
                result.append(e.right_limit_at_start_time - slope * e.start_time)
                result.append(e.left_limit_at_end_time - slope * e.end_time)
        return result
    upper = max(deviations(low))
    lower = min(deviations(high))
    return max((upper - lower) / (high.pseudo_period_average_slope - low.pseudo_period_average_slope), Fraction(0))


def _slopes_are_monotone(sequence: Sequence, increasing: bool) -> bool:
    slopes = [e.slope for e in sequence if isinstance(e, Segment)]
    for previous, current in zip(slopes, slopes[1:]):
        if((current < previous) if increasing else (current > previous)):
            return False
    return True


def _running_maximum(sequence: Sequence) -> Sequence:
    """sup_{s <= t} of a sequence starting at 0"""
    result = list()
    current = MINUS_INFINITY
    for e in sequence:
        if(isinstance(e, Point)):
            current = max(current, e.value)
            result.append(Point(e.time, current))
            continue
        start_value = e.right_limit_at_start_time
        end_value = e.left_limit_at_end_time
        if(e.slope <= 0 or not e.is_finite):
            current = max(current, start_value)
            result.append(Segment.constant(e.start_time, e.end_time, current))
        elif(start_value >= current):
            result.append(e)
            current = end_value
        elif(end_value <= current):
            result.append(Segment.constant(e.start_time, e.end_time, current))
        else:
            crossing = e.start_time + (current - start_value) / e.slope
            result.append(Segment.constant(e.start_time, crossing, current))
            result.append(Point(crossing, current))
            result.append(Segment(crossing, e.end_time, current, e.slope))
            current = end_value
    return Sequence(result).optimize()


def _running_minimum(sequence: Sequence, initial: Rational) -> Sequence:
    """inf_{s >= t} of a sequence, assuming the infimum after its end is initial"""
    result = list()
    current = initial
    for e in reversed(sequence.elements):
        if(isinstance(e, Point)):
            current = min(current, e.value)
            result.append(Point(e.time, current))
            continue
        start_value = e.right_limit_at_start_time
        end_value = e.left_limit_at_end_time
        if(e.slope <= 0 or not e.is_finite):
            current = min(current, end_value)
            result.append(Segment.constant(e.start_time, e.end_time, current))
        elif(end_value <= current):
            result.append(e)
            current = start_value
        elif(start_value >= current):
            result.append(Segment.constant(e.start_time, e.end_time, current))
        else:
            crossing = e.start_time + (current - start_value) / e.slope
            result.append(Segment.constant(crossing, e.end_time, current))
            result.append(Point(crossing, current))
            result.append(Segment(e.start_time, crossing, start_value, e.slope))
            current = start_value
    result.reverse()
    return Sequence(result).optimize()


def _compose_sequences(outer: Sequence, inner: Sequence) -> Sequence:
    """outer(inner(t)) for a finite non-decreasing inner sequence"""
    result = list()
    for e in inner:
        if(isinstance(e, Point)):
            result.append(Point(e.time, outer.value_at(e.value)))
        elif(e.slope == 0):
            result.append(Segment.constant(e.start_time, e.end_time, outer.value_at(e.right_limit_at_start_time)))
        else:
            low = e.right_limit_at_start_time
            high = e.left_limit_at_end_time
            back = lambda x: e.start_time + (x - low) / e.slope
            for o in outer.cut(low, high, start_included=False, end_included=False):
                if(isinstance(o, Point)):
                    result.append(Point(back(o.time), o.value))
                else:
                    result.append(Segment(back(o.start_time), back(o.end_time), o.right_limit_at_start_time, o.slope * e.slope))
    return Sequence(result).optimize()
