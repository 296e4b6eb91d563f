# tests/test_pseudoInverse.py
"""
Tests of the lower and upper pseudo-inverses.
"""

from fractions import Fraction

import pytest

from minplus import closures
from minplus import pseudoInverse
from minplus.curves import Curve
from minplus.elements import Point, Segment, NotMonotoneError
from minplus.rationalUtility import PLUS_INFINITY
from minplus.serviceCurves import RateLatencyServiceCurve, SigmaRhoArrivalCurve, BoundedDelayServiceCurve, StepCurve


class TestRateLatency:

    def test_lower_pseudo_inverse(self):
        inverse = RateLatencyServiceCurve(3, 5).lower_pseudo_inverse()
        assert inverse.equivalent(SigmaRhoArrivalCurve(5, Fraction(1, 3)))
        assert inverse.is_left_continuous

    def test_upper_pseudo_inverse(self):
        inverse = RateLatencyServiceCurve(3, 5).upper_pseudo_inverse()
        expected = Curve([Point(0, 5), Segment(0, 1, 5, Fraction(1, 3))], 0, 1, Fraction(1, 3))
        assert inverse.equivalent(expected)
        assert inverse.is_right_continuous

    def test_over_an_interval(self):
        sequence = pseudoInverse.pseudo_inverse_over_interval(RateLatencyServiceCurve(3, 5), 5, 7)
        assert sequence.defined_from == 0
        assert sequence.defined_until == 6
        assert sequence.value_at(0) == 5
        assert sequence.value_at(3) == 6

    def test_over_an_interval_with_a_flat_start(self):
        rl = RateLatencyServiceCurve(3, 5)
        lower = pseudoInverse.pseudo_inverse_over_interval(rl, 0, 8)
        upper = pseudoInverse.pseudo_inverse_over_interval(rl, 0, 8, lower=False)
        assert lower.value_at(0) == 0
        assert upper.value_at(0) == 5
        for sequence in [lower, upper]:
            assert sequence.defined_until == 9
            assert sequence.value_at(3) == 6
            assert sequence.value_at(9) == 8

    def test_over_an_interval_of_a_decomposition(self):
        _, periodic = closures.decompose(RateLatencyServiceCurve(3, 5), 5)
        sequence = pseudoInverse.pseudo_inverse_over_interval(periodic, 0, 3)
        assert sequence.defined_from == 0
        assert sequence.defined_until == 9
        assert sequence.value_at(3) == 1
        assert sequence.value_at(9) == 3

    def test_over_an_interval_not_monotone(self, stair):
        with pytest.raises(NotMonotoneError):
            pseudoInverse.pseudo_inverse_over_interval(-stair, 0, 6)


class TestRoundTrip:

    def test_upper_of_upper(self, right_continuous_curve):
        inverse = right_continuous_curve.upper_pseudo_inverse()
        assert inverse.upper_pseudo_inverse().equivalent(right_continuous_curve)

    def test_lower_of_lower(self, left_continuous_curve):
        inverse = left_continuous_curve.lower_pseudo_inverse()
        assert inverse.lower_pseudo_inverse().equivalent(left_continuous_curve)

    def test_values_of_the_upper_inverse(self, right_continuous_curve):
        inverse = right_continuous_curve.upper_pseudo_inverse()
        for x, t in [(0, 0), (Fraction(1, 2), Fraction(1, 2)), (1, 1), (Fraction(3, 2), 1), (2, 1), (Fraction(5, 2), 2), (3, 3)]:
            assert inverse.value_at(x) == t


class TestSpecialShapes:

    def test_ultimately_constant(self):
        step = StepCurve(4, 2)
        lower = step.lower_pseudo_inverse()
        assert lower.value_at(0) == 0
        assert lower.value_at(2) == 2
        assert lower.value_at(4) == 2
        assert lower.value_at(5) == PLUS_INFINITY
        upper = step.upper_pseudo_inverse()
        assert upper.value_at(0) == 2
        assert upper.value_at(3) == 2
        assert upper.value_at(4) == PLUS_INFINITY

    def test_ultimately_infinite(self):
        lower = BoundedDelayServiceCurve(3).lower_pseudo_inverse()
        assert lower.value_at(0) == 0
        assert lower.value_at(1) == 3
        assert lower.value_at(100) == 3

    def test_minus_infinite(self):
        assert Curve.minus_infinite().lower_pseudo_inverse().is_plus_infinite

    def test_not_monotone(self, stair):
        with pytest.raises(NotMonotoneError):
            (-stair).lower_pseudo_inverse()
        with pytest.raises(NotMonotoneError):
            pseudoInverse.upper_pseudo_inverse(-stair)
