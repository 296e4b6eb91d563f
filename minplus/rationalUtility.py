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
This module defines the number layer used by all the curves: finite values are exact
fractions (fractions.Fraction), infinite values are the float sentinels +inf and -inf.

All the inputs of the public API are converted with :func:`to_rational`, so that no
finite float ever enters a computation.
"""

import math
from fractions import Fraction
from typing import Union
import numpy as np

PLUS_INFINITY = np.inf
MINUS_INFINITY = -np.inf

Rational = Union[Fraction, float]

_INFINITY_STRINGS = {
    "+infinity": PLUS_INFINITY,
    "infinity": PLUS_INFINITY,
    "+inf": PLUS_INFINITY,
    "inf": PLUS_INFINITY,
    "-infinity": MINUS_INFINITY,
    "-inf": MINUS_INFINITY,
}


def to_rational(value) -> Rational:
    """Converts a number to the internal representation

    Args:
        value (int, str, Fraction, float): the value to convert. Strings can be fractions ("3/4"),
            decimals ("0.25") or infinities ("+Infinity", "-inf"). Finite floats are converted
            through their decimal representation, so that 0.1 becomes 1/10.

    Raises:
        ValueError: if the value is NaN or cannot be parsed

    Returns:
        Rational: a Fraction if the value is finite, +inf or -inf otherwise
    """
    if(isinstance(value, Fraction)):
        return value
    if(isinstance(value, bool)):
        raise ValueError("A boolean is not a valid rational: %r" % value)
    if(isinstance(value, int)):
        return Fraction(value)
    if(isinstance(value, str)):
        stripped = value.strip()
        if(stripped.lower() in _INFINITY_STRINGS):
            return _INFINITY_STRINGS[stripped.lower()]
        return Fraction(stripped)
    if(isinstance(value, (float, np.floating))):
        if(math.isnan(value)):
            raise ValueError("NaN is not a valid rational")
        if(math.isinf(value)):
            return PLUS_INFINITY if value > 0 else MINUS_INFINITY
        return Fraction(repr(float(value)))
    if(isinstance(value, np.integer)):
        return Fraction(int(value))
    raise ValueError("Cannot convert %r (%s) to a rational" % (value, type(value).__name__))


def is_finite(value: Rational) -> bool:
    return not (value == PLUS_INFINITY or value == MINUS_INFINITY)


def is_infinite(value: Rational) -> bool:
    return value == PLUS_INFINITY or value == MINUS_INFINITY


def is_plus_infinite(value: Rational) -> bool:
    return value == PLUS_INFINITY


def is_minus_infinite(value: Rational) -> bool:
    return value == MINUS_INFINITY


def is_integer(value: Rational) -> bool:
    return is_finite(value) and value.denominator == 1


def multiply(a: Rational, b: Rational) -> Rational:
    """Product where 0 times an infinity is 0 (slopes of infinite segments are 0)"""
    if(a == 0 or b == 0):
        return Fraction(0)
    return a * b


def add(a: Rational, b: Rational) -> Rational:
    """Sum of two rationals

    Raises:
        ArithmeticError: if the sum is +inf + -inf, which has no meaning for curves
    """
    if(is_infinite(a) and is_infinite(b) and a != b):
        raise ArithmeticError("Undefined sum between +inf and -inf")
    return a + b


def divide(a: Rational, b: Rational) -> Rational:
    if(b == 0):
        raise ZeroDivisionError("Division of %s by zero" % to_string(a))
    if(is_infinite(b)):
        if(is_infinite(a)):
            raise ArithmeticError("Undefined division between infinities")
        return Fraction(0)
    return a / b


def floor(value: Rational) -> int:
    return math.floor(value)


def ceil(value: Rational) -> int:
    return math.ceil(value)


def gcd(a: Fraction, b: Fraction) -> Fraction:
    """Greatest common divisor of two positive rationals:
    gcd(p1/q1, p2/q2) = gcd(p1, p2) / lcm(q1, q2)

    >>> gcd(Fraction(1, 2), Fraction(1, 3))
    Fraction(1, 6)
    """
    a = to_rational(a)
    b = to_rational(b)
    if(not (is_finite(a) and is_finite(b))):
        raise ArithmeticError("gcd is only defined for finite rationals")
    return Fraction(math.gcd(a.numerator, b.numerator), _int_lcm(a.denominator, b.denominator))


def lcm(a: Fraction, b: Fraction) -> Fraction:
    """Least common multiple of two positive rationals:
    lcm(p1/q1, p2/q2) = lcm(p1, p2) / gcd(q1, q2)

    >>> lcm(Fraction(3, 2), Fraction(2))
    Fraction(6, 1)
    """
    a = to_rational(a)
    b = to_rational(b)
    if(not (is_finite(a) and is_finite(b))):
        raise ArithmeticError("lcm is only defined for finite rationals")
    if(a <= 0 or b <= 0):
        raise ArithmeticError("lcm is only defined for positive rationals, got %s and %s" % (to_string(a), to_string(b)))
    return Fraction(_int_lcm(a.numerator, b.numerator), math.gcd(a.denominator, b.denominator))


def _int_lcm(a: int, b: int) -> int:
    return abs(a * b) // math.gcd(a, b)


def to_string(value: Rational) -> str:
    """Canonical string of a rational, used for serialization and messages

    >>> to_string(Fraction(3, 4))
    '3/4'
    >>> to_string(-np.inf)
    '-Infinity'
    """
    if(value == PLUS_INFINITY):
        return "+Infinity"
    if(value == MINUS_INFINITY):
        return "-Infinity"
    return str(value)


def to_float(value: Rational) -> float:
    return float(value)
