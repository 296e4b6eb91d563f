# tests/test_plotUtility.py
"""
Tests of the sampling and plotting helpers, drawn without a display.
"""

import math

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pytest

from minplus import plotUtility
from minplus.serviceCurves import BoundedDelayServiceCurve


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


class TestSampling:

    def test_interesting_xmax(self, sigma_rho, rate_latency):
        assert plotUtility.get_interesting_xmax_for_plot(sigma_rho) == 40.0
        assert plotUtility.get_interesting_xmax_for_plot(rate_latency) == 12.0

    def test_sample(self, rate_latency):
        x, y = plotUtility.sample(rate_latency, x_max=20, n_points=21)
        assert np.allclose(x, np.arange(21))
        assert y[10] == 0.0
        assert y[20] == 200.0

    def test_infinite_values(self):
        x, y = plotUtility.sample(BoundedDelayServiceCurve(2), x_max=4, n_points=5, without_zero=True)
        assert len(x) == 4
        assert y[:2] == [0.0, 0.0]
        assert math.isinf(y[3])


class TestPlots:

    def test_plot_curves(self, sigma_rho, rate_latency):
        fig = plotUtility.plot_curves(sigma_rho, rate_latency, n_points=50, colors=["blue", "red"], title="Flow")
        axes = fig.gca()
        assert len(axes.get_lines()) == 2
        assert axes.get_title() == "Flow"

    def test_plot_a_delay_computation(self, sigma_rho, rate_latency):
        fig = plotUtility.plot_a_delay_computation(sigma_rho, rate_latency, n_points=50)
        lines = fig.gca().get_lines()
        assert len(lines) == 3
        assert list(lines[2].get_xdata()) == [0, 15.0]
        assert sigma_rho.get_name() == "Arrival Curve"
        assert rate_latency.get_name() == "Service Curve"
