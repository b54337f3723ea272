#!/usr/bin/python3
#
# This file is part of minplus
# Copyright (c) 2021-2022 Ludovic Thomas (ISAE-SUPAERO)
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
This module defines a set of useful methods for turning curves into numpy arrays, e.g. to plot them
"""

from fractions import Fraction
from typing import Tuple

import numpy as np

from minplus.curves import Curve
from minplus.elements import Point
from minplus.rational import RationalLike, to_rational


def sample_curve(curve: Curve, x_min: RationalLike, x_max: RationalLike, n_points: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Evaluates the curve on n_points evenly spaced times.

    Each time of the grid is converted back to an exact rational before the evaluation, so that
    the only rounding is the one of the returned floats. The infinities are mapped to np.inf.

    Args:
        curve (Curve): the curve
        x_min (RationalLike): first time of the grid, >= 0
        x_max (RationalLike): last time of the grid
        n_points (int): number of times

    Raises:
        ValueError: if the grid is empty or starts before 0

    Returns:
        Tuple[np.ndarray, np.ndarray]: the times and the values
    """
    start, end = to_rational(x_min), to_rational(x_max)
    if(n_points < 1):
        raise ValueError("At least one point is needed")
    if(start < 0 or end < start):
        raise ValueError("Invalid sampling interval [%s, %s]" % (start, end))
    x = np.linspace(float(start), float(end), n_points)
    y = np.array([float(curve.value_at(Fraction(float(t)))) for t in x])
    return x, y


def breakpoints(curve: Curve, until: RationalLike) -> Tuple[np.ndarray, np.ndarray]:
    """
    Times and values at which the curve changes, up to until included: for each point of the base
    sequence, its left limit, its value and its right limit. Consecutive equal entries are dropped.
    This is enough to draw the exact shape of a piecewise-linear curve.
    """
    until = to_rational(until)
    x, y = list(), list()
    for e in curve.cut(0, until, end_inclusive=True).elements:
        if(not isinstance(e, Point)):
            continue
        for value in _values_around(curve, e):
            if(x and x[-1] == float(e.time) and y[-1] == float(value)):
                continue
            x.append(float(e.time))
            y.append(float(value))
    return np.array(x), np.array(y)


def _values_around(curve: Curve, p: Point):
    if(p.time > 0):
        yield curve.left_limit_at(p.time)
    yield p.value
    yield curve.right_limit_at(p.time)
