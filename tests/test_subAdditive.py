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
from minplus import subAdditive
from minplus.exceptions import InvalidConstruction
from minplus.rational import Rational
from minplus.subAdditive import SubAdditiveCurve, SuperAdditiveCurve


@pytest.fixture
def large_burst():
    return SubAdditiveCurve(specialCurves.token_bucket(4, 1))


@pytest.fixture
def small_burst():
    return SubAdditiveCurve(specialCurves.token_bucket(2, 1))


@pytest.fixture
def fast_rate():
    return SubAdditiveCurve(specialCurves.token_bucket(2, 2))


def test_construction_checks_the_property(rate_latency, token_bucket):
    curve = SubAdditiveCurve(token_bucket)
    assert curve.is_sub_additive()
    assert curve.value_at(2) == 6
    with pytest.raises(InvalidConstruction):
        SubAdditiveCurve(rate_latency)
    with pytest.raises(InvalidConstruction):
        SubAdditiveCurve(specialCurves.affine(1, 1))


def test_construction_without_check(rate_latency):
    curve = SubAdditiveCurve(rate_latency, do_test=False)
    assert curve.is_sub_additive()
    assert not curve.is_sub_additive_check()


def test_convolution_of_ordered_curves(large_burst, small_burst, unoptimized):
    result = large_burst.convolution(small_burst)
    assert isinstance(result, SubAdditiveCurve)
    assert curves.equivalent(result, small_burst)
    assert curves.equivalent(large_burst.convolution(small_burst, unoptimized), small_burst)


def test_convolution_of_crossing_curves(large_burst, fast_rate, unoptimized):
    result = large_burst.convolution(fast_rate)
    assert result.value_at(0) == 0
    assert result.value_at(Rational(1, 2)) == 3
    assert result.value_at(1) == 4
    assert result.value_at(3) == 7
    assert curves.equivalent(result, large_burst.convolution(fast_rate, unoptimized))
    assert curves.equivalent(result, curves.minimum(large_burst, fast_rate))


def test_convolution_with_plain_curve(large_burst, rate_latency):
    result = large_burst.convolution(rate_latency)
    assert not isinstance(result, SubAdditiveCurve)
    assert curves.equivalent(result, curves.convolution(rate_latency, large_burst))


def test_list_convolution(large_burst, small_burst, fast_rate):
    result = subAdditive.list_convolution([large_burst, fast_rate, small_burst])
    assert curves.equivalent(result, subAdditive.list_convolution([small_burst, large_burst, fast_rate]))
    assert result.value_at(1) == 3
    with pytest.raises(ValueError):
        subAdditive.list_convolution([])


def test_estimate_convolution(large_burst, fast_rate):
    assert large_burst.estimate_convolution(fast_rate) >= 0


def test_dict_keeps_the_type(large_burst):
    restored = curves.curve_from_dict(large_burst.to_dict())
    assert isinstance(restored, SubAdditiveCurve)
    assert curves.equivalent(restored, large_burst)


def test_super_additive_curve(rate_latency, token_bucket):
    curve = SuperAdditiveCurve(rate_latency)
    assert curve.is_super_additive()
    assert curve.super_additive_closure() is curve
    with pytest.raises(InvalidConstruction):
        SuperAdditiveCurve(token_bucket)


@pytest.mark.parametrize("first, second", [
    (lambda: specialCurves.token_bucket(4, 1), lambda: specialCurves.staircase(2, 3)),
    (lambda: specialCurves.staircase(2, 3), lambda: specialCurves.staircase(3, 5)),
    (lambda: specialCurves.staircase(2, 2), lambda: specialCurves.token_bucket(3, 1)),
    (lambda: specialCurves.staircase(1, 1), lambda: specialCurves.token_bucket(1, 2)),
    (lambda: specialCurves.token_bucket(1, 3), lambda: specialCurves.token_bucket(5, 1)),
])
def test_optimized_convolution_matches_generic(settings, unoptimized, first, second):
    a, b = SubAdditiveCurve(first()), SubAdditiveCurve(second())
    result = a.convolution(b, settings)
    assert isinstance(result, SubAdditiveCurve)
    assert curves.equivalent(result, a.convolution(b, unoptimized))
    assert curves.equivalent(result, curves.convolution(first(), second(), unoptimized))
    assert curves.equivalent(result, b.convolution(a, settings))


def test_optimized_convolution_of_closures(periodic_curve, small_burst, unoptimized):
    closure = periodic_curve.sub_additive_closure()
    result = closure.convolution(small_burst)
    assert curves.equivalent(result, closure.convolution(small_burst, unoptimized))
