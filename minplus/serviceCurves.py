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
This module contains the classical arrival and service curves of network calculus.

Each of them is a Curve built from its parameters, so every generic operation applies. Some
operations between curves of the same family have a closed form that is returned directly.
"""

import logging
from typing import Optional

from minplus import rationalUtility as ru
from minplus.rationalUtility import Rational, PLUS_INFINITY
from minplus.elements import Point, Segment
from minplus.curves import Curve, copydoc
from minplus.computationSettings import ComputationSettings

logger = logging.getLogger("CONV")


class RateLatencyServiceCurve(Curve):
    '''
    Rate-latency service curve: beta(s) = rate * max(0, s - latency)

    >>> rl = RateLatencyServiceCurve(3, 5)
    >>> rl.value_at(5)
    Fraction(0, 1)
    >>> rl.value_at(7)
    Fraction(6, 1)
    '''

    def __init__(self, rate, latency, **kargs) -> None:
        rate = ru.to_rational(rate)
        latency = ru.to_rational(latency)
        if(latency < 0):
            raise ValueError("The latency must be non-negative, got %s" % ru.to_string(latency))
        if(latency == 0):
            elements = [Point(0, 0), Segment(0, 1, 0, rate)]
        else:
            elements = [Point(0, 0), Segment.constant(0, latency, 0), Point(latency, 0), Segment(latency, latency + 1, 0, rate)]
        super().__init__(elements, latency, 1, rate, **kargs)
        self._rate = rate
        self._latency = latency

    def get_rate(self) -> Rational:
        return self._rate

    def get_latency(self) -> Rational:
        return self._latency

    def y_to_x(self, y) -> Rational:
        return ((ru.to_rational(y) / self.get_rate()) + self.get_latency())

    @copydoc(Curve._convolution_shortcut)
    def _convolution_shortcut(self, other: Curve) -> Optional[Curve]:
        if(isinstance(other, RateLatencyServiceCurve) and self._rate >= 0 and other._rate >= 0):
            #Add latencies, get minimum rate
            return RateLatencyServiceCurve(min(self._rate, other._rate), self._latency + other._latency)
        if(isinstance(other, BoundedDelayServiceCurve) and self._rate >= 0):
            return RateLatencyServiceCurve(self._rate, self._latency + other.get_delay())
        return None

    def delay_by(self, delay, prepend_with_zero: bool = True) -> Curve:
        delay = ru.to_rational(delay)
        if(prepend_with_zero and ru.is_finite(delay) and delay >= 0):
            return RateLatencyServiceCurve(self._rate, self._latency + delay)
        return super().delay_by(delay, prepend_with_zero)

    def scale(self, factor) -> Curve:
        factor = ru.to_rational(factor)
        if(ru.is_finite(factor)):
            return RateLatencyServiceCurve(factor * self._rate, self._latency)
        return super().scale(factor)

    def __repr__(self) -> str:
        return "RateLatencyServiceCurve(%s, %s)" % (ru.to_string(self._rate), ru.to_string(self._latency))

    def __str__(self, **kargs) -> str:
        digits = kargs.get("digits", 2)
        return ("RL(%.*e,%.*e)" % (digits, ru.to_float(self._rate), digits, ru.to_float(self._latency)))


class SigmaRhoArrivalCurve(Curve):
    '''
    Leaky-bucket arrival curve: alpha(s) = sigma + rho * s for s > 0, alpha(0) = 0

    >>> sr = SigmaRhoArrivalCurve(100, 5)
    >>> sr.value_at(0), sr.value_at(10)
    (Fraction(0, 1), Fraction(150, 1))
    '''

    def __init__(self, sigma, rho, **kargs) -> None:
        sigma = ru.to_rational(sigma)
        rho = ru.to_rational(rho)
        elements = [Point(0, 0), Segment(0, 1, sigma, rho), Point(1, sigma + rho), Segment(1, 2, sigma + rho, rho)]
        super().__init__(elements, 1, 1, rho, **kargs)
        self._sigma = sigma
        self._rho = rho

    def get_sigma(self) -> Rational:
        return self._sigma

    def get_rho(self) -> Rational:
        return self._rho

    def get_burst(self) -> Rational:
        return self._sigma

    def get_rate(self) -> Rational:
        return self._rho

    def y_to_x(self, y) -> Rational:
        y = ru.to_rational(y)
        if (y <= self.get_burst()):
            return ru.to_rational(0)
        return ((y - self.get_burst()) / self.get_rate())

    def _is_leaky_bucket(self) -> bool:
        return self._sigma >= 0 and self._rho >= 0

    @copydoc(Curve._convolution_shortcut)
    def _convolution_shortcut(self, other: Curve) -> Optional[Curve]:
        if(isinstance(other, SigmaRhoArrivalCurve) and self._is_leaky_bucket() and other._is_leaky_bucket()):
            #concave curves with a zero origin: the convolution is the minimum
            return self.minimum(other)
        return None

    @copydoc(Curve.deconvolution)
    def deconvolution(self, other: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
        if(isinstance(other, RateLatencyServiceCurve) and self._is_leaky_bucket() and 0 <= self._rho <= other.get_rate()):
            logger.debug("deconvolution: closed form between %s and %s" % (type(self).__name__, type(other).__name__))
            burst = self._sigma + self._rho * other.get_latency()
            return Curve([Point(0, burst), Segment(0, 1, burst, self._rho)], 0, 1, self._rho)
        return super().deconvolution(other, settings)

    @copydoc(Curve.__mod__)
    def __mod__(self, serviceCurve: Curve) -> Rational:
        if(isinstance(serviceCurve, RateLatencyServiceCurve) and self._is_leaky_bucket() and serviceCurve.get_rate() > 0):
            if(self.get_rate() > serviceCurve.get_rate()):
                return PLUS_INFINITY
            return (serviceCurve.get_latency() + self.get_burst() / serviceCurve.get_rate())
        return super().__mod__(serviceCurve)

    def get_max_vertical_distance(self, serviceCurve: Curve) -> Rational:
        if(isinstance(serviceCurve, RateLatencyServiceCurve) and self._is_leaky_bucket() and serviceCurve.get_rate() >= 0):
            if(self.get_rate() > serviceCurve.get_rate()):
                return PLUS_INFINITY
            return (self._sigma + (self._rho * serviceCurve.get_latency()))
        if(isinstance(serviceCurve, BoundedDelayServiceCurve) and self._is_leaky_bucket()):
            if(serviceCurve.get_delay() == 0):
                return ru.to_rational(0)
            return self._sigma + self._rho * serviceCurve.get_delay()
        return super().get_max_vertical_distance(serviceCurve)

    def scale(self, factor) -> Curve:
        factor = ru.to_rational(factor)
        if(ru.is_finite(factor)):
            return SigmaRhoArrivalCurve(factor * self._sigma, factor * self._rho)
        return super().scale(factor)

    def __repr__(self) -> str:
        return "SigmaRhoArrivalCurve(%s, %s)" % (ru.to_string(self._sigma), ru.to_string(self._rho))

    def __str__(self, **kargs) -> str:
        digits = kargs.get("digits", 2)
        return ("LB(%.*e,%.*e)" % (digits, ru.to_float(self._rho), digits, ru.to_float(self._sigma)))


class ConstantCurve(Curve):
    '''
    Constant value for s > 0, 0 at the origin. The value may be +inf.
    '''

    def __init__(self, value, **kargs) -> None:
        value = ru.to_rational(value)
        elements = [Point(0, 0), Segment.constant(0, 1, value), Point(1, value), Segment.constant(1, 2, value)]
        super().__init__(elements, 1, 1, 0, **kargs)
        self._value = value

    def get_value(self) -> Rational:
        return self._value

    def __repr__(self) -> str:
        return "ConstantCurve(%s)" % ru.to_string(self._value)

    def __str__(self, **kargs) -> str:
        digits = kargs.get("digits", 2)
        return ("Const(%.*e)" % (digits, ru.to_float(self._value)))


class BoundedDelayServiceCurve(Curve):
    '''
    Pure delay service curve: 0 up to the delay (included), +inf after

    >>> BoundedDelayServiceCurve(2).value_at(2), BoundedDelayServiceCurve(2).value_at(3)
    (Fraction(0, 1), inf)
    '''

    def __init__(self, boundedDelay, **kargs) -> None:
        delay = ru.to_rational(boundedDelay)
        if(not ru.is_finite(delay) or delay < 0):
            raise ValueError("The delay must be finite and non-negative, got %s" % ru.to_string(delay))
        if(delay == 0):
            elements = [Point(0, 0), Segment.plus_infinite(0, 1), Point(1, PLUS_INFINITY), Segment.plus_infinite(1, 2)]
        else:
            elements = [Point(0, 0), Segment.constant(0, delay, 0), Point(delay, 0), Segment.plus_infinite(delay, delay + 1),
                Point(delay + 1, PLUS_INFINITY), Segment.plus_infinite(delay + 1, delay + 2)]
        super().__init__(elements, delay + 1, 1, 0, **kargs)
        self._d = delay
        self._name = kargs.get("name", "deltaDService")

    def get_delay(self) -> Rational:
        return self._d

    @copydoc(Curve._convolution_shortcut)
    def _convolution_shortcut(self, other: Curve) -> Optional[Curve]:
        if(isinstance(other, BoundedDelayServiceCurve)):
            return BoundedDelayServiceCurve(self._d + other._d)
        if(isinstance(other, RateLatencyServiceCurve)):
            return other._convolution_shortcut(self)
        if(other.is_non_decreasing and other.value_at(0) == 0):
            #f(max(0, t - delay))
            return other.delay_by(self._d)
        return None

    def __repr__(self) -> str:
        return "BoundedDelayServiceCurve(%s)" % ru.to_string(self._d)

    def __str__(self, **kargs) -> str:
        digits = kargs.get("digits", 2)
        return ("Gamma(%.*e)(s)" % (digits, ru.to_float(self._d)))


class StepCurve(Curve):
    '''
    Step of height value after step_time: 0 on [0, step_time], value after
    '''

    def __init__(self, value, step_time, **kargs) -> None:
        value = ru.to_rational(value)
        step_time = ru.to_rational(step_time)
        if(not ru.is_finite(step_time) or step_time < 0):
            raise ValueError("The step time must be finite and non-negative, got %s" % ru.to_string(step_time))
        elements = [Point(0, 0)]
        if(step_time > 0):
            elements += [Segment.constant(0, step_time, 0), Point(step_time, 0)]
        elements += [Segment.constant(step_time, step_time + 1, value), Point(step_time + 1, value),
            Segment.constant(step_time + 1, step_time + 2, value)]
        super().__init__(elements, step_time + 1, 1, 0, **kargs)
        self._value = value
        self._step_time = step_time

    def get_value(self) -> Rational:
        return self._value

    def get_step_time(self) -> Rational:
        return self._step_time

    def __repr__(self) -> str:
        return "StepCurve(%s, %s)" % (ru.to_string(self._value), ru.to_string(self._step_time))

    def __str__(self, **kargs) -> str:
        digits = kargs.get("digits", 2)
        return ("Step(%.*e,%.*e)" % (digits, ru.to_float(self._value), digits, ru.to_float(self._step_time)))


class StairCurve(Curve):
    '''
    Staircase a * ceil(s / b): a jump of a at 0+, then every b

    >>> stair = StairCurve(2, 3)
    >>> stair.value_at(3), stair.value_at(4)
    (Fraction(2, 1), Fraction(4, 1))
    '''

    def __init__(self, a, b, **kargs) -> None:
        a = ru.to_rational(a)
        b = ru.to_rational(b)
        if(a < 0 or not ru.is_finite(a)):
            raise ValueError("The step height must be finite and non-negative, got %s" % ru.to_string(a))
        if(b <= 0 or not ru.is_finite(b)):
            raise ValueError("The step length must be finite and positive, got %s" % ru.to_string(b))
        super().__init__([Point(0, 0), Segment.constant(0, b, a)], 0, b, a, **kargs)
        self._a = a
        self._b = b

    def get_a(self) -> Rational:
        return self._a

    def get_b(self) -> Rational:
        return self._b

    def __repr__(self) -> str:
        return "StairCurve(%s, %s)" % (ru.to_string(self._a), ru.to_string(self._b))

    def __str__(self, **kargs) -> str:
        digits = kargs.get("digits", 2)
        return ("Stair(%.*e,%.*e)" % (digits, ru.to_float(self._a), digits, ru.to_float(self._b)))


class TwoRatesServiceCurve(Curve):
    '''
    Service curve with a latency, then a transient rate up to transient_end, then a steady rate
    '''

    def __init__(self, delay, transient_rate, transient_end, steady_rate, **kargs) -> None:
        delay = ru.to_rational(delay)
        transient_rate = ru.to_rational(transient_rate)
        transient_end = ru.to_rational(transient_end)
        steady_rate = ru.to_rational(steady_rate)
        if(delay < 0):
            raise ValueError("The delay must be non-negative, got %s" % ru.to_string(delay))
        if(delay > transient_end):
            raise ValueError("The delay %s must not be after the transient end %s" % (ru.to_string(delay), ru.to_string(transient_end)))
        end_value = transient_rate * (transient_end - delay)
        elements = [Point(0, 0)]
        if(delay > 0):
            elements += [Segment.constant(0, delay, 0), Point(delay, 0)]
        if(transient_end > delay):
            elements += [Segment(delay, transient_end, 0, transient_rate), Point(transient_end, end_value)]
        elements.append(Segment(transient_end, transient_end + 1, end_value, steady_rate))
        super().__init__(elements, transient_end, 1, steady_rate, **kargs)
        self._delay = delay
        self._transient_rate = transient_rate
        self._transient_end = transient_end
        self._steady_rate = steady_rate

    def get_delay(self) -> Rational:
        return self._delay

    def get_transient_rate(self) -> Rational:
        return self._transient_rate

    def get_transient_end(self) -> Rational:
        return self._transient_end

    def get_steady_rate(self) -> Rational:
        return self._steady_rate

    def __repr__(self) -> str:
        return "TwoRatesServiceCurve(%s, %s, %s, %s)" % (ru.to_string(self._delay), ru.to_string(self._transient_rate),
            ru.to_string(self._transient_end), ru.to_string(self._steady_rate))

    def __str__(self, **kargs) -> str:
        digits = kargs.get("digits", 2)
        return ("TwoRates(%.*e,%.*e,%.*e,%.*e)" % (digits, ru.to_float(self._delay), digits, ru.to_float(self._transient_rate),
            digits, ru.to_float(self._transient_end), digits, ru.to_float(self._steady_rate)))
