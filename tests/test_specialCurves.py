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

from minplus import curves
from minplus import specialCurves
from minplus.rational import MINUS_INFINITY, PLUS_INFINITY, Rational


def test_rate_latency(rate_latency):
    assert rate_latency.value_at(2) == 0
    assert rate_latency.value_at(3) == 0
    assert rate_latency.value_at(5) == 6
    assert specialCurves.rate_latency(2, 0).value_at(1) == 2
    with pytest.raises(ValueError):
        specialCurves.rate_latency(1, -1)


def test_token_bucket(token_bucket):
    assert token_bucket.value_at(0) == 0
    assert token_bucket.right_limit_at(0) == 4
    assert token_bucket.value_at(3) == 7
    assert curves.equivalent(specialCurves.sigma_rho("4", "1"), token_bucket)


def test_delay_service():
    curve = specialCurves.delay_service(2)
    assert curve.value_at(2) == 0
    assert curve.value_at(Rational(5, 2)) == PLUS_INFINITY
    assert curve.value_at(10) == PLUS_INFINITY
    delta = specialCurves.delay_service(0)
    assert delta.value_at(0) == 0
    assert delta.value_at(Rational(1, 2)) == PLUS_INFINITY


def test_constant():
    curve = specialCurves.constant(3)
    assert curve.value_at(0) == 0
    assert curve.value_at(Rational(1, 2)) == 3
    assert curve.value_at(100) == 3
    assert specialCurves.constant(PLUS_INFINITY).value_at(1) == PLUS_INFINITY


def test_staircase(staircase):
    assert staircase.value_at(0) == 0
    assert staircase.value_at(1) == 2
    assert staircase.value_at(3) == 2
    assert staircase.value_at(4) == 4
    assert specialCurves.staircase(0, 3).is_identically_zero()
    with pytest.raises(ValueError):
        specialCurves.staircase(1, 0)
    with pytest.raises(ValueError):
        specialCurves.staircase(-1, 1)


def test_staircase_with_latency(staircase):
    curve = specialCurves.staircase(2, 3, 1)
    assert curve.value_at(1) == 0
    assert curve.value_at(Rational(3, 2)) == 2
    assert curve.value_at(4) == 2
    assert curve.value_at(Rational(9, 2)) == 4
    assert curve.pseudo_period_start == 1
    assert curves.equivalent(curve, staircase.delay_by(1))
    with pytest.raises(ValueError):
        specialCurves.staircase(2, 3, -1)


def test_step():
    curve = specialCurves.step(5, 2)
    assert curve.value_at(2) == 0
    assert curve.value_at(3) == 5
    assert curve.value_at(100) == 5
    assert curves.equivalent(specialCurves.step(5, 0), specialCurves.constant(5))


def test_affine():
    curve = specialCurves.affine(2, 1)
    assert curve.value_at(0) == 1
    assert curve.value_at(3) == 7


def test_trivial_curves():
    assert specialCurves.zero().is_identically_zero()
    assert specialCurves.plus_infinite().value_at(4) == PLUS_INFINITY
    assert specialCurves.minus_infinite().value_at(4) == MINUS_INFINITY
