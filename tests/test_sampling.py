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

import numpy as np
import pytest

from minplus.curves import Curve
from minplus.sampling import breakpoints, sample_curve


def test_sample_curve(token_bucket):
    x, y = sample_curve(token_bucket, 0, 2, 3)
    assert np.array_equal(x, np.array([0.0, 1.0, 2.0]))
    assert np.array_equal(y, np.array([0.0, 5.0, 6.0]))


def test_sample_infinite_values():
    _, y = sample_curve(Curve._delta_zero(), 0, 1, 2)
    assert y[0] == 0
    assert np.isinf(y[1])


def test_invalid_sampling(token_bucket):
    with pytest.raises(ValueError):
        sample_curve(token_bucket, 0, 1, 0)
    with pytest.raises(ValueError):
        sample_curve(token_bucket, 2, 1, 5)


def test_breakpoints(staircase):
    x, y = breakpoints(staircase, 6)
    assert x.tolist() == [0, 0, 3, 3, 6, 6]
    assert y.tolist() == [0, 2, 2, 4, 4, 6]
