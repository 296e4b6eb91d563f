# tests/test_curves.py
"""
Tests of the Curve: construction, values, predicates, pointwise operations,
minimum/maximum, comparisons and deviations.
"""

from fractions import Fraction

import pytest

from minplus import curves
from minplus.curves import Curve
from minplus.elements import Point, Segment, InvalidCurveError, CurveNotDefinedForThisValue, NotMonotoneError
from minplus.rationalUtility import PLUS_INFINITY, MINUS_INFINITY
from minplus.serviceCurves import RateLatencyServiceCurve, SigmaRhoArrivalCurve, StairCurve


# =============================================================================
# 1. CONSTRUCTION AND VALUES
# =============================================================================

class TestConstruction:

    def test_period_length_must_be_positive(self):
        with pytest.raises(InvalidCurveError):
            Curve([Point(0, 0), Segment(0, 1, 0, 1)], 0, 0, 1)

    def test_period_start_must_be_non_negative(self):
        with pytest.raises(InvalidCurveError):
            Curve([Point(0, 0), Segment(0, 1, 0, 1)], -1, 1, 1)

    def test_base_sequence_must_cover_the_first_period(self):
        with pytest.raises(InvalidCurveError):
            Curve([Point(0, 0), Segment(0, 1, 0, 1)], 1, 1, 1)

    def test_base_sequence_must_start_at_zero(self):
        with pytest.raises(InvalidCurveError):
            Curve([Point(1, 0), Segment(1, 2, 0, 1)], 0, 2, 1)

    def test_longer_base_sequence_must_agree_with_the_period(self):
        with pytest.raises(InvalidCurveError):
            Curve([Point(0, 0), Segment(0, 1, 0, 1), Point(1, 5), Segment(1, 2, 5, 1)], 0, 1, 1)

    def test_partial_curve_is_filled_with_plus_infinity(self):
        c = Curve([Point(2, 0), Segment(2, 3, 0, 1)], 2, 1, 1, is_partial_curve=True)
        assert c.value_at(1) == PLUS_INFINITY
        assert c.value_at(Fraction(7, 2)) == Fraction(3, 2)


class TestValues:

    def test_periodic_extension(self, stair):
        assert stair.value_at(0) == 0
        assert stair.value_at(1) == 2
        assert stair.value_at(3) == 2
        assert stair.value_at(Fraction(31, 10)) == 4
        assert stair.value_at(300) == 200

    def test_limits(self, stair):
        assert stair.left_limit_at(3) == 2
        assert stair.right_limit_at(3) == 4
        with pytest.raises(CurveNotDefinedForThisValue):
            stair.left_limit_at(0)

    def test_negative_time(self, stair):
        with pytest.raises(CurveNotDefinedForThisValue):
            stair.value_at(-1)

    def test_cut_is_consistent_with_values(self, continuous_curve):
        times = [Fraction(k, 4) for k in range(0, 60)]
        sequence = continuous_curve.cut(0, 15, end_included=True)
        for t in times:
            assert sequence.value_at(t) == continuous_curve.value_at(t)

    def test_cut_after_the_first_period(self, continuous_curve):
        sequence = continuous_curve.cut(10, 12)
        assert sequence.defined_from == 10
        assert sequence.defined_until == 12
        for t in [10, Fraction(21, 2), 11, Fraction(23, 2)]:
            assert sequence.value_at(t) == continuous_curve.value_at(t)


# =============================================================================
# 2. PREDICATES
# =============================================================================

class TestPredicates:

    def test_rate_latency(self):
        rl = RateLatencyServiceCurve(3, 5)
        assert rl.is_finite
        assert rl.is_non_negative
        assert rl.is_non_decreasing
        assert rl.is_continuous
        assert rl.is_convex
        assert not rl.is_concave
        assert rl.is_ultimately_affine
        assert rl.pseudo_period_average_slope == 3

    def test_sigma_rho(self, sigma_rho):
        assert sigma_rho.is_concave
        assert sigma_rho.is_left_continuous
        assert not sigma_rho.is_right_continuous
        assert sigma_rho.is_continuous_except_origin

    def test_stair(self, stair):
        assert not stair.is_ultimately_affine
        assert stair.is_left_continuous
        assert stair.pseudo_period_average_slope == Fraction(2, 3)

    def test_infinite_curves(self):
        assert Curve.plus_infinite().is_plus_infinite
        assert Curve.plus_infinite().pseudo_period_average_slope == PLUS_INFINITY
        assert Curve.minus_infinite().pseudo_period_average_slope == MINUS_INFINITY
        assert Curve.plus_infinite().is_ultimately_infinite
        assert Curve.delta_zero().is_weakly_ultimately_infinite
        assert not Curve.delta_zero().is_ultimately_infinite
        assert Curve.zero().is_zero

    def test_notable_times(self):
        rl = RateLatencyServiceCurve(3, 5)
        assert rl.first_non_zero_time() == 5
        assert Curve.delta_zero().first_finite_time_except_origin() == PLUS_INFINITY


# =============================================================================
# 3. POINTWISE OPERATIONS
# =============================================================================

class TestPointwiseOperations:

    def test_sum_of_arrival_and_service(self, sigma_rho, rate_latency):
        total = sigma_rho + rate_latency
        assert total.value_at(0) == 0
        assert total.value_at(5) == 125
        assert total.value_at(10) == 150
        assert total.value_at(13) == 225
        assert total.value_at(20) == 400
        assert total.pseudo_period_average_slope == 25

    def test_sum_of_generic_curves(self, stair, as_generic):
        total = as_generic(stair) + as_generic(RateLatencyServiceCurve(3, 4))
        for t, v in [(0, 0), (1, 2), (3, 2), (4, 4), (5, 7), (6, 10), (7, 15), (31, 22 + 81)]:
            assert total.value_at(t) == v
        assert total.pseudo_period_average_slope == Fraction(11, 3)

    def test_subtraction(self, sigma_rho, rate_latency):
        difference = sigma_rho - rate_latency
        assert difference.value_at(10) == 150
        assert difference.value_at(20) == 0
        assert difference.pseudo_period_average_slope == -15

    def test_non_negative_subtraction(self, sigma_rho, rate_latency):
        difference = sigma_rho.subtraction(rate_latency, non_negative=True)
        assert difference.value_at(30) == 0
        assert difference.value_at(15) == 75

    def test_negate_scale_shift(self, stair):
        assert (-stair).value_at(4) == -4
        assert stair.scale(3).value_at(4) == 12
        assert stair.vertical_shift(1).value_at(0) == 1
        assert stair.vertical_shift(1, except_origin=True).value_at(0) == 0
        assert stair.vertical_shift(1, except_origin=True).value_at(4) == 5

    def test_delay_and_anticipate(self, stair):
        delayed = stair.delay_by(2)
        assert delayed.value_at(2) == 0
        assert delayed.value_at(3) == 2
        assert delayed.anticipate_by(2).equivalent(stair)

    def test_with_zero_origin(self):
        c = Curve([Point(0, 5), Segment(0, 1, 5, 1)], 0, 1, 1)
        assert c.with_zero_origin().value_at(0) == 0
        assert c.with_zero_origin().value_at(2) == 7

    def test_sum_with_opposite_infinity(self):
        with pytest.raises(ArithmeticError):
            Curve.plus_infinite() + Curve.minus_infinite()

    def test_type_errors(self, stair):
        with pytest.raises(TypeError):
            stair + 1
        with pytest.raises(TypeError):
            stair * "curve"


# =============================================================================
# 4. MINIMUM AND MAXIMUM
# =============================================================================

class TestEnvelopes:

    @pytest.mark.parametrize("lower", [True, False])
    def test_values_at_the_breakpoints(self, sigma_rho, rate_latency, stair, lower):
        for f, g in [(sigma_rho, rate_latency), (stair, rate_latency), (stair, sigma_rho)]:
            h = f.minimum(g) if lower else f.maximum(g)
            pick = min if lower else max
            times = set(h.cut(0, 40).breakpoint_times()) | set(f.cut(0, 40).breakpoint_times()) | set(g.cut(0, 40).breakpoint_times())
            for t in sorted(times) + [Fraction(1, 3), Fraction(77, 7), 55]:
                assert h.value_at(t) == pick(f.value_at(t), g.value_at(t))

    def test_minimum_of_several_curves(self, sigma_rho, rate_latency, stair):
        h = curves.minimum([sigma_rho, rate_latency, stair])
        for t in [0, 1, 5, 10, 12, 50, 200]:
            assert h.value_at(t) == min(sigma_rho.value_at(t), rate_latency.value_at(t), stair.value_at(t))

    def test_neutral_and_absorbing(self, stair):
        assert stair.minimum(Curve.plus_infinite()) is stair
        assert stair.maximum(Curve.minus_infinite()) is stair
        assert stair.minimum(Curve.minus_infinite()).is_minus_infinite

    def test_empty_minimum(self):
        with pytest.raises(ValueError):
            curves.minimum([])

    def test_holey_winner_warns(self):
        holey = Curve([Point(0, 0), Segment(0, 1, 0, 0), Point(1, 0), Segment(1, 2, PLUS_INFINITY, 0)], 0, 2, 1)
        with pytest.warns(UserWarning):
            holey.minimum(RateLatencyServiceCurve(5, 0))


# =============================================================================
# 5. EQUIVALENCE AND DOMINANCE
# =============================================================================

@pytest.fixture
def rate_latency_representations():
    """rate 3, latency 5, described three different ways"""
    return [
        RateLatencyServiceCurve(3, 5),
        Curve([Point(0, 0), Segment(0, 5, 0, 0), Point(5, 0), Segment(5, 7, 0, 3)], 5, 2, 6),
        Curve([Point(0, 0), Segment(0, 5, 0, 0), Point(5, 0), Segment(5, 8, 0, 3)], 7, 1, 3),
    ]


class TestEquivalence:

    def test_reflexive(self, rate_latency_representations):
        for f in rate_latency_representations:
            assert f.equivalent(f)

    def test_symmetric(self, rate_latency_representations):
        for f in rate_latency_representations:
            for g in rate_latency_representations:
                assert f.equivalent(g) == g.equivalent(f)
                assert f.equivalent(g)

    def test_transitive(self, rate_latency_representations):
        f, g, h = rate_latency_representations
        assert f.equivalent(g) and g.equivalent(h) and f.equivalent(h)

    def test_different_curves(self, rate_latency_representations):
        other = RateLatencyServiceCurve(3, 6)
        for f in rate_latency_representations:
            assert not f.equivalent(other)
        assert rate_latency_representations[0].find_first_inequivalence(other) == 5

    def test_optimize_gives_an_equivalent_minimal_curve(self, rate_latency_representations):
        for f in rate_latency_representations:
            o = f.optimize()
            assert o.equivalent(f)
            assert o.pseudo_period_start == 5
            assert o.pseudo_period_length == 1

    def test_optimize_reduces_an_unrolled_period(self):
        unrolled = Curve([Point(0, 0), Segment(0, 3, 2, 0), Point(3, 2), Segment(3, 6, 4, 0)], 0, 6, 4)
        o = unrolled.optimize()
        assert o.pseudo_period_length == 3
        assert o.equivalent(StairCurve(2, 3))

    def test_dominance(self, sigma_rho, rate_latency):
        assert rate_latency.minimum(sigma_rho) <= sigma_rho
        assert rate_latency.maximum(sigma_rho) >= rate_latency
        assert not (sigma_rho <= rate_latency)


# =============================================================================
# 6. MONOTONE AND CONTINUOUS VERSIONS
# =============================================================================

class TestTransformations:

    def test_to_left_and_right_continuous(self, stair):
        right = stair.to_right_continuous()
        assert right.is_right_continuous
        assert right.value_at(3) == 4
        assert right.value_at(0) == 2
        assert stair.to_left_continuous() is stair

    def test_to_upper_non_decreasing(self):
        saw = Curve([Point(0, 0), Segment(0, 1, 0, 2), Point(1, 2), Segment(1, 2, 2, -1)], 0, 2, 1)
        upper = saw.to_upper_non_decreasing()
        assert upper.is_non_decreasing
        for t in [0, Fraction(1, 2), 1, Fraction(3, 2), 2, Fraction(5, 2), 3, 7]:
            assert upper.value_at(t) >= saw.value_at(t)
        assert upper.value_at(Fraction(3, 2)) == 2
        assert upper.value_at(Fraction(5, 2)) == 2
        assert upper.value_at(3) == 3

    def test_to_lower_non_decreasing(self):
        saw = Curve([Point(0, 0), Segment(0, 1, 0, 2), Point(1, 2), Segment(1, 2, 2, -1)], 0, 2, 1)
        lower = saw.to_lower_non_decreasing()
        assert lower.is_non_decreasing
        assert lower.value_at(1) == 1
        assert lower.value_at(2) == 1
        assert lower.value_at(Fraction(1, 4)) == Fraction(1, 2)


# =============================================================================
# 7. COMPOSITION AND DEVIATIONS
# =============================================================================

class TestComposition:

    def test_compose_affine_curves(self):
        double = Curve([Point(0, 0), Segment(0, 1, 0, 2)], 0, 1, 2)
        rl = RateLatencyServiceCurve(3, 5)
        composed = rl.composition(double)
        for t in [0, 1, Fraction(5, 2), 3, 10]:
            assert composed.value_at(t) == rl.value_at(2 * t)

    def test_compose_with_stair(self, stair):
        rl = RateLatencyServiceCurve(3, 5)
        composed = rl.composition(stair)
        for t in [0, 1, 3, 4, 7, 10, 31]:
            assert composed.value_at(t) == rl.value_at(stair.value_at(t))

    def test_inner_must_be_non_decreasing(self, stair):
        with pytest.raises(NotMonotoneError):
            stair.composition(-stair)


class TestDeviations:

    def test_horizontal_deviation(self, sigma_rho, rate_latency):
        assert curves.horizontal_deviation(sigma_rho, rate_latency) == 15
        assert sigma_rho % rate_latency == 15

    def test_vertical_deviation(self, sigma_rho, rate_latency):
        assert curves.vertical_deviation(sigma_rho, rate_latency) == 150
        assert sigma_rho.get_max_vertical_distance(rate_latency) == 150

    def test_unstable_system(self, rate_latency):
        assert curves.horizontal_deviation(SigmaRhoArrivalCurve(1, 30), rate_latency) == PLUS_INFINITY
        assert curves.vertical_deviation(SigmaRhoArrivalCurve(1, 30), rate_latency) == PLUS_INFINITY
