# tests/test_convolutions.py
"""
Tests of the (min,+) and (max,+) convolutions and deconvolutions.

The same operation is computed along the different paths (closed forms, single pass, four
partial terms, pseudo-inverses) and the results are compared with each other and with values
computed by hand.
"""

from fractions import Fraction

import pytest

from minplus import convolutions
from minplus.curves import Curve
from minplus.elements import Point, Segment
from minplus.rationalUtility import PLUS_INFINITY, MINUS_INFINITY
from minplus.sequences import Sequence
from minplus.serviceCurves import RateLatencyServiceCurve, BoundedDelayServiceCurve, SigmaRhoArrivalCurve


class TestSequenceConvolution:

    def test_two_ramps(self):
        a = Sequence([Point(0, 0), Segment(0, 2, 0, 1), Point(2, 2)])
        b = Sequence([Point(0, 0), Segment(0, 1, 0, 3), Point(1, 3)])
        result = convolutions.sequence_convolution(a, b)
        assert result.defined_from == 0
        assert result.defined_until == 3
        for t, v in [(0, 0), (1, 1), (2, 2), (Fraction(5, 2), Fraction(7, 2)), (3, 5)]:
            assert result.value_at(t) == v

    def test_no_contribution_is_plus_infinite(self):
        a = Sequence([Point(0, PLUS_INFINITY), Segment.plus_infinite(0, 1)])
        b = Sequence([Point(0, 0), Segment(0, 1, 0, 1)])
        result = convolutions.sequence_convolution(a, b)
        assert result.is_plus_infinite


class TestRateLatency:

    def test_closed_form(self):
        result = RateLatencyServiceCurve(3, 4) * RateLatencyServiceCurve(4, 6)
        assert isinstance(result, RateLatencyServiceCurve)
        assert result.get_rate() == 3
        assert result.get_latency() == 10

    def test_generic_computation(self, as_generic, plain_settings):
        f = as_generic(RateLatencyServiceCurve(3, 4))
        g = as_generic(RateLatencyServiceCurve(4, 6))
        result = f.convolution(g, plain_settings)
        assert not isinstance(result, RateLatencyServiceCurve)
        for t in [0, 5, 10]:
            assert result.value_at(t) == 0
        assert result.value_at(12) == 6
        assert result.value_at(100) == 270
        assert result.pseudo_period_average_slope == 3
        assert result.is_continuous
        assert result.equivalent(RateLatencyServiceCurve(3, 10))

    def test_with_bounded_delay(self):
        result = RateLatencyServiceCurve(3, 4) * BoundedDelayServiceCurve(2)
        assert isinstance(result, RateLatencyServiceCurve)
        assert result.get_latency() == 6

    def test_several_curves(self):
        result = convolutions.convolution_of([RateLatencyServiceCurve(5, 1), RateLatencyServiceCurve(3, 2),
            RateLatencyServiceCurve(4, 3)])
        assert result.equivalent(RateLatencyServiceCurve(3, 6))

    def test_no_curves(self):
        with pytest.raises(ValueError):
            convolutions.convolution_of([])


class TestGenericConvolution:

    # continuous_curve convolved with a rate-latency of rate 2 and latency 1: the slopes above 2
    # are replaced with 2, then everything is delayed by 1
    EXPECTED = [(0, 0), (1, 0), (2, 1), (3, 2), (4, 4), (5, 6), (6, 8), (7, 9), (8, 11), (9, 12)]

    def test_four_terms(self, continuous_curve, plain_settings):
        result = continuous_curve.convolution(RateLatencyServiceCurve(2, 1), plain_settings)
        for t, v in self.EXPECTED:
            assert result.value_at(t) == v

    def test_default_settings(self, continuous_curve, settings):
        result = continuous_curve.convolution(RateLatencyServiceCurve(2, 1), settings)
        for t, v in self.EXPECTED:
            assert result.value_at(t) == v

    def test_through_the_pseudo_inverses(self, continuous_curve, settings, plain_settings):
        isomorphism = settings.replace(use_convolution_isospeed=False, use_convolution_super_isospeed=False)
        direct = continuous_curve.convolution(RateLatencyServiceCurve(2, 1), plain_settings)
        result = continuous_curve.convolution(RateLatencyServiceCurve(2, 1), isomorphism)
        for t, v in self.EXPECTED:
            assert result.value_at(t) == v
        assert result.equivalent(direct)

    def test_commutative(self, continuous_curve, left_continuous_curve, plain_settings):
        a = continuous_curve.convolution(left_continuous_curve, plain_settings)
        b = left_continuous_curve.convolution(continuous_curve, plain_settings)
        assert a.equivalent(b)

    def test_single_pass_matches_four_terms(self, stair, settings, plain_settings):
        assert stair.convolution(stair, settings).equivalent(stair.convolution(stair, plain_settings))

    def test_sub_additive_curve_with_itself(self, stair, plain_settings):
        # stair is sub-additive with stair(0) = 0
        assert stair.convolution(stair, plain_settings).equivalent(stair)

    def test_concave_curve_with_itself(self, sigma_rho, as_generic):
        f = as_generic(sigma_rho)
        assert (f * f).equivalent(sigma_rho)

    def test_sigma_rho_closed_form(self):
        result = SigmaRhoArrivalCurve(100, 5) * SigmaRhoArrivalCurve(20, 10)
        for t in [0, 1, 10, 16, 20, 100]:
            assert result.value_at(t) == min(SigmaRhoArrivalCurve(100, 5).value_at(t), SigmaRhoArrivalCurve(20, 10).value_at(t))


class TestNeutralAndAbsorbing:

    def test_delta_zero_is_neutral(self, continuous_curve):
        assert (Curve.delta_zero() * continuous_curve).equivalent(continuous_curve)
        assert (continuous_curve * Curve.delta_zero()).equivalent(continuous_curve)

    def test_plus_infinite_is_absorbing(self, stair):
        assert (Curve.plus_infinite() * stair).is_plus_infinite

    def test_zero_curve(self, rate_latency):
        assert (Curve.zero() * rate_latency).is_zero

    @pytest.fixture
    def minus_infinite_tail(self):
        """0 at the origin, -inf elsewhere"""
        return Curve([Point(0, 0), Segment.minus_infinite(0, 1), Point(1, MINUS_INFINITY), Segment.minus_infinite(1, 2)], 1, 1, 0)

    def test_minus_infinite_tail_absorbs(self, minus_infinite_tail):
        for result in [convolutions.convolution(minus_infinite_tail, Curve.zero()),
                convolutions.convolution(Curve.zero(), minus_infinite_tail)]:
            assert result.value_at(0) == 0
            for t in [Fraction(1, 2), 1, 10]:
                assert result.value_at(t) == MINUS_INFINITY

    def test_minus_infinite_tail_after_first_finite_value(self, minus_infinite_tail):
        late = Curve([Point(0, PLUS_INFINITY), Segment.plus_infinite(0, 2), Point(2, 5), Segment(2, 3, 5, 1)], 2, 1, 1)
        result = convolutions.convolution(minus_infinite_tail, late)
        for t, v in [(0, PLUS_INFINITY), (1, PLUS_INFINITY), (2, 5), (Fraction(5, 2), MINUS_INFINITY), (10, MINUS_INFINITY)]:
            assert result.value_at(t) == v

    def test_minus_infinite_curve(self, rate_latency):
        result = Curve.minus_infinite() * rate_latency
        for t in [0, 5, 50]:
            assert result.value_at(t) == MINUS_INFINITY

    def test_bounded_delay_delays(self, continuous_curve):
        result = BoundedDelayServiceCurve(3) * continuous_curve
        assert result.equivalent(continuous_curve.delay_by(3))
        assert result.value_at(3) == 0
        assert result.value_at(5) == 2
        assert result.value_at(6) == 5

    def test_bounded_delays_add_up(self):
        result = BoundedDelayServiceCurve(3) * BoundedDelayServiceCurve(4)
        assert isinstance(result, BoundedDelayServiceCurve)
        assert result.get_delay() == 7


class TestMaxPlusConvolution:

    def test_convex_curves(self, settings, plain_settings):
        f = RateLatencyServiceCurve(3, 4)
        g = RateLatencyServiceCurve(4, 6)
        expected = f.maximum(g)
        assert convolutions.max_plus_convolution(f, g, settings).equivalent(expected)
        assert convolutions.max_plus_convolution(f, g, plain_settings).equivalent(expected)
        assert f.max_plus_convolution(g).value_at(10) == 18
        assert f.max_plus_convolution(g).value_at(20) == 56


class TestDeconvolution:

    def test_sigma_rho_by_rate_latency(self, sigma_rho, rate_latency):
        result = sigma_rho / rate_latency
        assert result.value_at(0) == 150
        assert result.value_at(2) == 160

    def test_generic_matches_closed_form(self, sigma_rho, rate_latency, as_generic):
        generic = as_generic(sigma_rho).deconvolution(rate_latency)
        assert generic.equivalent(sigma_rho.deconvolution(rate_latency))

    def test_faster_arrivals(self, rate_latency):
        assert (SigmaRhoArrivalCurve(1, 30) / rate_latency).is_plus_infinite

    def test_max_plus_deconvolution_of_itself(self):
        f = RateLatencyServiceCurve(3, 4)
        # inf_s f(t + s) - f(s) is reached at s = 0 for a convex f with f(0) = 0
        result = f.max_plus_deconvolution(f)
        for t in [0, 2, 4, 7, 30]:
            assert result.value_at(t) == f.value_at(t)
