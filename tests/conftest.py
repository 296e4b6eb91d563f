# tests/conftest.py
import sys
from fractions import Fraction
from pathlib import Path

import pytest

# Adds the project root to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from minplus.elements import Point, Segment
from minplus.curves import Curve
from minplus.serviceCurves import RateLatencyServiceCurve, SigmaRhoArrivalCurve, StairCurve
from minplus.computationSettings import ComputationSettings


# =============================================================================
# SETTINGS
# =============================================================================

@pytest.fixture
def settings():
    return ComputationSettings.default()


@pytest.fixture
def plain_settings():
    """No shortcut: every convolution goes through the four partial terms"""
    return ComputationSettings.default().replace(
        use_convolution_isomorphism=False,
        single_pass_convolution=False,
        use_sub_additive_convolution_optimizations=False
    )


# =============================================================================
# CLOSED-FORM CURVES
# =============================================================================

@pytest.fixture
def rate_latency():
    """rate 20, latency 10"""
    return RateLatencyServiceCurve(20, 10)


@pytest.fixture
def sigma_rho():
    """burst 100, rate 5"""
    return SigmaRhoArrivalCurve(100, 5)


@pytest.fixture
def stair():
    """2 * ceil(t / 3)"""
    return StairCurve(2, 3)


# =============================================================================
# GENERIC CURVES
# =============================================================================

@pytest.fixture
def as_generic():
    """Strips the closed form of a curve, so that no shortcut applies"""
    def _strip(curve):
        return Curve(curve.base_sequence, curve.pseudo_period_start, curve.pseudo_period_length,
            curve.pseudo_period_height)
    return _strip


@pytest.fixture
def continuous_curve():
    """
    Continuous, non-decreasing, f(0) = 0.
    Slope 1 on [0, 2], slope 3 on [2, 3], then period (2, 3) with slopes 1 then 2.
    """
    return Curve([
        Point(0, 0), Segment(0, 2, 0, 1),
        Point(2, 2), Segment(2, 3, 2, 3),
        Point(3, 5), Segment(3, 4, 5, 1),
        Point(4, 6), Segment(4, 5, 6, 2)
    ], 3, 2, 3)


@pytest.fixture
def left_continuous_curve():
    """Non-decreasing, left-continuous: jumps right after 1 and every 2 after"""
    return Curve([
        Point(0, 0), Segment(0, 1, 0, 1),
        Point(1, 1), Segment(1, 3, 2, Fraction(1, 2))
    ], 1, 2, 2)


@pytest.fixture
def right_continuous_curve():
    """Non-decreasing, right-continuous: jumps at 1 and every 2 after"""
    return Curve([
        Point(0, 0), Segment(0, 1, 0, 1),
        Point(1, 2), Segment(1, 3, 2, Fraction(1, 2))
    ], 1, 2, 2)
