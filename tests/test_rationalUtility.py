# tests/test_rationalUtility.py
"""
Tests of the number layer: conversions, infinities, gcd/lcm of rationals.
"""

from fractions import Fraction

import numpy as np
import pytest

from minplus import rationalUtility as ru
from minplus.rationalUtility import PLUS_INFINITY, MINUS_INFINITY


class TestConversion:

    def test_int_and_fraction(self):
        assert ru.to_rational(3) == Fraction(3)
        assert ru.to_rational(Fraction(3, 4)) == Fraction(3, 4)

    def test_strings(self):
        assert ru.to_rational("3/4") == Fraction(3, 4)
        assert ru.to_rational(" 0.25 ") == Fraction(1, 4)
        assert ru.to_rational("+Infinity") == PLUS_INFINITY
        assert ru.to_rational("-inf") == MINUS_INFINITY

    def test_floats_go_through_their_decimal_representation(self):
        assert ru.to_rational(0.1) == Fraction(1, 10)
        assert ru.to_rational(np.float64(2.5)) == Fraction(5, 2)
        assert ru.to_rational(float("inf")) == PLUS_INFINITY

    def test_invalid_values(self):
        with pytest.raises(ValueError):
            ru.to_rational(float("nan"))
        with pytest.raises(ValueError):
            ru.to_rational(True)
        with pytest.raises(ValueError):
            ru.to_rational("three")

    def test_to_string(self):
        assert ru.to_string(Fraction(3, 4)) == "3/4"
        assert ru.to_string(Fraction(5)) == "5"
        assert ru.to_string(PLUS_INFINITY) == "+Infinity"
        assert ru.to_string(MINUS_INFINITY) == "-Infinity"


class TestArithmetic:

    def test_zero_times_infinity_is_zero(self):
        assert ru.multiply(Fraction(0), PLUS_INFINITY) == 0
        assert ru.multiply(Fraction(2), MINUS_INFINITY) == MINUS_INFINITY

    def test_opposite_infinities_cannot_be_added(self):
        with pytest.raises(ArithmeticError):
            ru.add(PLUS_INFINITY, MINUS_INFINITY)
        assert ru.add(PLUS_INFINITY, Fraction(3)) == PLUS_INFINITY

    def test_gcd_lcm(self):
        assert ru.gcd(Fraction(1, 2), Fraction(1, 3)) == Fraction(1, 6)
        assert ru.lcm(Fraction(3, 2), Fraction(2)) == Fraction(6)
        assert ru.lcm(Fraction(2, 3), Fraction(3, 4)) == Fraction(6)

    def test_lcm_of_non_positive(self):
        with pytest.raises(ArithmeticError):
            ru.lcm(Fraction(0), Fraction(2))
