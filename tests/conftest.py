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

import pytest

from minplus import specialCurves
from minplus.computationSettings import ComputationSettings
from minplus.curves import Curve
from minplus.elements import Point, Segment
from minplus.sequences import Sequence


@pytest.fixture
def settings():
    return ComputationSettings.default()


@pytest.fixture
def unoptimized():
    """All the shortcuts and the threads disabled, to compare against the optimized algorithms"""
    return ComputationSettings.default().without_optimizations().without_parallelism()


@pytest.fixture
def rate_latency():
    return specialCurves.rate_latency(3, 3)


@pytest.fixture
def token_bucket():
    return specialCurves.token_bucket(4, 1)


@pytest.fixture
def staircase():
    return specialCurves.staircase(2, 3)


@pytest.fixture
def periodic_curve():
    '''
    A curve with a transient part and a non-affine pseudo-periodic part:
    0 at 0, 1 over ]0, 1[, 2 at 1, slope 1 over ]1, 2[, then 3 over [2, 3[ repeated with c = 1
    '''
    base = Sequence([
        Point(0, 0),
        Segment(0, 1, 1, 0),
        Point(1, 2),
        Segment(1, 2, 2, 1),
        Point(2, 3),
        Segment(2, 3, 3, 0)
    ])
    return Curve(base, 2, 1, 1)
