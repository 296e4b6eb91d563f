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
This module contains the plotting helpers of the curves, sampled with numpy and drawn with matplotlib
"""

from typing import List, Tuple

import numpy as np
import matplotlib.pyplot as plt

from minplus import rationalUtility as ru
from minplus.curves import Curve
from minplus.serviceCurves import RateLatencyServiceCurve, SigmaRhoArrivalCurve


def get_interesting_xmax_for_plot(curve: Curve) -> float:
    """Two pseudo-periods after the transient, or the closed-form horizon of a leaky bucket"""
    if(isinstance(curve, SigmaRhoArrivalCurve) and curve.get_rate() > 0 and curve.get_burst() > 0):
        return ru.to_float(2 * curve.get_burst() / curve.get_rate())
    return ru.to_float(curve.second_pseudo_period_end)


def sample(curve: Curve, **kargs) -> Tuple[np.ndarray, List[float]]:
    """
    Samples a curve over [x_min, x_max]

    Args:
        curve (Curve): the curve to sample
        x_min (float, optional): Defaults to 0.
        x_max (float, optional): Defaults to get_interesting_xmax_for_plot(curve).
        n_points (int, optional): Defaults to 10000.
        without_zero (bool, optional): drop the origin. Defaults to False.

    Returns:
        Tuple[np.ndarray, List[float]]: the times and the values, infinite values being +-inf
    """
    x_min = kargs.get("x_min", 0)
    x_max = kargs.get("x_max", get_interesting_xmax_for_plot(curve))
    n_points = kargs.get("n_points", 10000)
    x = np.linspace(x_min, x_max, num=n_points)
    if(kargs.get("without_zero", False)):
        x = x[1:]
    y = [ru.to_float(curve.value_at(x_v)) for x_v in x]
    return x, y


def plot_a_curve(curve: Curve, **kargs):
    x, y = sample(curve, **kargs)
    y_min = kargs.get("y_min", 0)
    y_max = kargs.get("y_max", 10)
    additionnalParams = dict()
    if 'color' in kargs.keys():
        additionnalParams["color"] = kargs.get("color")
    if(curve.get_name() != ""):
        plt.plot(x, y, label=curve.get_name() + " - " + curve.__str__(**kargs), **additionnalParams)
    else:
        plt.plot(x, y, label=curve.__str__(**kargs), **additionnalParams)
    if (("y_min" in kargs.keys()) or ("y_max" in kargs.keys())):
        plt.ylim(y_min, y_max)


def plot_curves(*curves: Curve, **kargs):
    """
    Plots several curves on the same figure

    Args:
        *curves (Curve): curves to plot
        colors (List[str], optional): colors used in turn
        title (str, optional): Defaults to "Curves".
    """
    fig = plt.figure()
    fig.tight_layout()
    if ("x_max" not in kargs.keys()):
        kargs["x_max"] = max(get_interesting_xmax_for_plot(curve) for curve in curves)
    mColors = list()
    if "colors" in kargs.keys():
        mColors = kargs.pop("colors")
    for i, curve in enumerate(curves):
        if(mColors):
            kargs["color"] = mColors[i % len(mColors)]
        plot_a_curve(curve, **kargs)
    plt.legend()
    plt.xlabel(kargs.get("x_label", "Time interval (s)"))
    plt.ylabel(kargs.get("y_label", "Data (bits)"))
    plt.title(kargs.get("title", "Curves"))
    return fig


def plot_a_delay_computation(arrivalCurve: Curve, serviceCurve: Curve, **kargs):
    """
    Plots an arrival curve, a service curve and the horizontal deviation between them
    """
    fig = plt.figure()
    if (not serviceCurve.get_name()):
        serviceCurve.set_name("Service Curve")
    if (not arrivalCurve.get_name()):
        arrivalCurve.set_name("Arrival Curve")
    delay = arrivalCurve % serviceCurve
    x = 0
    x_2 = 0
    y = 0
    if (isinstance(serviceCurve, RateLatencyServiceCurve) and isinstance(arrivalCurve, SigmaRhoArrivalCurve) and ru.is_finite(delay)):
        # the deviation is reached at the burst
        y = ru.to_float(arrivalCurve.get_burst())
        x_2 = ru.to_float(delay)

    if(x_2 > 0):
        kargs["x_max"] = kargs.get("x_max", 1.1 * x_2)
    else:
        kargs["x_max"] = kargs.get("x_max", max(get_interesting_xmax_for_plot(arrivalCurve), get_interesting_xmax_for_plot(serviceCurve)))
    colorAc = "blue"
    colorSc = "red"
    colors = kargs.pop("colors", list())
    if (len(colors) > 0):
        colorAc = colors[0]
    if (len(colors) > 1):
        colorSc = colors[1]
    plot_a_curve(arrivalCurve, **kargs, color=colorAc)
    plot_a_curve(serviceCurve, **kargs, color=colorSc)
    digits = kargs.get("digits", 2)
    plt.plot([x, x_2], [y, y], label=("Delay Bound: %.*es" % (digits, ru.to_float(delay))), color="green")
    plt.legend()
    plt.title(kargs.get("title", "Delay bound computation"))
    return fig
