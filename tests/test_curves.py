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

import random

import pytest

from minplus import curves
from minplus import specialCurves
from minplus.curves import Curve
from minplus.elements import Point, Segment
from minplus.exceptions import InvalidConstruction
from minplus.rational import PLUS_INFINITY, Rational
from minplus.sequences import Sequence


@pytest.mark.parametrize("time, value", [
    (0, 0),
    (Rational(1, 2), 1),
    (1, 2),
    (Rational(3, 2), Rational(5, 2)),
    (2, 3),
    (3, 4),
    (Rational(7, 2), 4),
    (10, 11),
])
def test_periodic_values(periodic_curve, time, value):
    assert periodic_curve.value_at(time) == value


def test_periodic_limits(periodic_curve):
    assert periodic_curve.right_limit_at(0) == 1
    assert periodic_curve.left_limit_at(1) == 1
    assert periodic_curve.left_limit_at(3) == 3
    assert periodic_curve.left_limit_at(4) == 4
    assert periodic_curve.right_limit_at(4) == 5


def test_negative_time(periodic_curve):
    with pytest.raises(ValueError):
        periodic_curve.value_at(-1)
    with pytest.raises(ValueError):
        periodic_curve.left_limit_at(0)


def test_construction_needs_full_base():
    with pytest.raises(InvalidConstruction):
        Curve(Sequence.zero(0, 1), 1, 1, 0)
    with pytest.raises(InvalidConstruction):
        Curve(Sequence.zero(0, 1), 0, 0, 0)


def test_partial_curve_is_filled():
    c = Curve(Sequence([Point(0, 0)]), 1, 1, 0, is_partial_curve=True)
    assert c.value_at(0) == 0
    assert c.value_at(Rational(1, 2)) == PLUS_INFINITY


def test_cut_after_the_first_period(periodic_curve):
    cut = periodic_curve.cut(3, 4, end_inclusive=True)
    assert cut == Sequence([Point(3, 4), Segment(3, 4, 4, 0), Point(4, 5)])


def test_properties(periodic_curve, rate_latency, token_bucket):
    assert periodic_curve.is_non_decreasing()
    assert periodic_curve.is_non_negative()
    assert periodic_curve.is_finite()
    assert not periodic_curve.is_continuous()
    assert not periodic_curve.is_ultimately_affine()
    assert rate_latency.is_ultimately_affine()
    assert rate_latency.is_convex()
    assert token_bucket.is_concave()
    assert not token_bucket.is_continuous()
    assert token_bucket.is_continuous_except_origin()


def test_sub_additivity(rate_latency, token_bucket):
    assert token_bucket.is_sub_additive()
    assert not rate_latency.is_sub_additive()


def test_equivalent_representations(periodic_curve):
    other = Curve(periodic_curve.cut(0, 4), 2, 2, 2)
    assert curves.equivalent(periodic_curve, other)
    shifted = Curve(periodic_curve.cut(0, 4), 3, 1, 1)
    assert curves.equivalent(periodic_curve, shifted)
    assert curves.find_first_inequivalence(periodic_curve, other) is None


def test_first_inequivalence(rate_latency):
    other = specialCurves.rate_latency(3, 2)
    assert not curves.equivalent(rate_latency, other)
    assert curves.find_first_inequivalence(rate_latency, other) == 2


def test_addition_and_scaling(rate_latency, token_bucket):
    total = rate_latency + token_bucket
    assert total.value_at(5) == 15
    assert (rate_latency * 2).value_at(5) == 12
    assert (2 * rate_latency).value_at(5) == 12
    assert (token_bucket + 1).value_at(0) == 1
    assert (-token_bucket).value_at(1) == -5


def test_minimum(rate_latency, token_bucket):
    m = curves.minimum(rate_latency, token_bucket)
    assert m.value_at(1) == 0
    assert m.value_at(Rational(13, 2)) == Rational(21, 2)
    assert m.value_at(10) == 14
    assert m <= rate_latency
    assert m <= token_bucket


def test_maximum(rate_latency, token_bucket):
    m = curves.maximum(rate_latency, token_bucket)
    assert m.value_at(1) == 5
    assert m.value_at(10) == 21
    assert m >= rate_latency


def test_list_minimum_does_not_depend_on_order(rate_latency, token_bucket, staircase):
    items = [rate_latency, token_bucket, staircase]
    assert curves.equivalent(curves.list_minimum(items), curves.list_minimum(reversed(items)))
    assert curves.equivalent(curves.list_maximum(items), curves.list_maximum(reversed(items)))
    with pytest.raises(ValueError):
        curves.list_minimum([])


def test_convolution(rate_latency, token_bucket):
    result = rate_latency * token_bucket
    assert result.value_at(3) == 0
    assert result.value_at(4) == 3
    assert result.value_at(5) == 6
    assert result.value_at(10) == 11
    assert curves.equivalent(result, token_bucket.convolution(rate_latency))


def test_convolution_with_and_without_optimizations(rate_latency, token_bucket, unoptimized):
    optimized = curves.convolution(rate_latency, token_bucket)
    plain = curves.convolution(rate_latency, token_bucket, unoptimized)
    assert curves.equivalent(optimized, plain)


def test_convolution_of_same_slopes(settings, unoptimized):
    a = specialCurves.rate_latency(2, 1)
    b = specialCurves.token_bucket(1, 2)
    assert curves.equivalent(curves.convolution(a, b, settings), curves.convolution(a, b, unoptimized))


def test_convolution_with_zero(token_bucket):
    assert curves.equivalent(curves.convolution(Curve.zero(), token_bucket), Curve.zero())


def test_deconvolution(rate_latency, token_bucket):
    result = token_bucket / rate_latency
    assert result.value_at(0) == 7
    assert result.value_at(1) == 8
    assert result.value_at(3) == 10


def test_deconvolution_of_faster_curve(rate_latency, token_bucket):
    assert (rate_latency / token_bucket).is_plus_infinite()


def test_deviations(rate_latency, token_bucket):
    assert curves.horizontal_deviation(token_bucket, rate_latency) == Rational(13, 3)
    assert curves.vertical_deviation(token_bucket, rate_latency) == 7


def test_delay_and_anticipate(token_bucket):
    delayed = token_bucket.delay_by(2)
    assert delayed.value_at(2) == 0
    assert delayed.value_at(3) == 5
    assert curves.equivalent(delayed.anticipate_by(2), token_bucket)


def test_dict_round_trip(periodic_curve):
    data = periodic_curve.to_dict()
    assert data["pseudo_period_start"] == "2"
    restored = curves.curve_from_dict(data)
    assert restored.base_sequence == periodic_curve.base_sequence
    assert curves.equivalent(restored, periodic_curve)


def test_unknown_dict_type(periodic_curve):
    data = periodic_curve.to_dict()
    data["type"] = "unknownCurve"
    with pytest.raises(InvalidConstruction):
        curves.curve_from_dict(data)


def test_match(token_bucket):
    assert token_bucket.match(Point(2, 6))
    assert token_bucket.match(Segment(2, 3, 6, 1))
    assert not token_bucket.match(Segment(2, 3, 6, 2))


def test_dominance(rate_latency, token_bucket):
    verified, lower, upper = curves.asymptotic_dominance(rate_latency, token_bucket)
    assert verified
    assert lower is token_bucket
    verified, _, _ = curves.dominance(rate_latency, token_bucket)
    assert not verified


@pytest.mark.parametrize("first, second", [
    ((3, 2, 1), (5, 4, 3)),
    ((363, 149, 2), (682, 341, 924)),
])
def test_staircase_convolution_with_and_without_auto_optimize(settings, first, second):
    f = specialCurves.staircase(*first)
    g = specialCurves.staircase(*second)
    optimized = curves.convolution(f, g, settings.with_changes(auto_optimize=True))
    plain = curves.convolution(f, g, settings.with_changes(auto_optimize=False))
    assert curves.equivalent(optimized, plain)


def test_small_staircase_convolution_values(settings):
    f = specialCurves.staircase(3, 2, 1)
    g = specialCurves.staircase(5, 4, 3)
    result = curves.convolution(f, g, settings)
    assert result.value_at(4) == 0
    assert result.value_at(5) == 3


def _random_curve(rng):
    '''Non-negative curve with integer breakpoints, T in [0, 2], d in [1, 2]'''
    T, d, c = rng.randint(0, 2), rng.randint(1, 2), rng.randint(0, 3)
    items = list()
    for t in range(T + d):
        items.append(Point(t, rng.randint(0, 4)))
        items.append(Segment(t, t + 1, rng.randint(0, 4), rng.randint(0, 2)))
    return Curve(Sequence(items), T, d, c)


def _convolution_by_enumeration(f, g, t):
    #with integer breakpoints and t on the half grid, s -> f(s) + g(t - s) is linear between half-grid points
    candidates = list()
    s = Rational(0)
    while(s <= t):
        candidates.append(f.value_at(s) + g.value_at(t - s))
        if(s < t):
            candidates.append(f.right_limit_at(s) + g.left_limit_at(t - s))
        if(s > 0):
            candidates.append(f.left_limit_at(s) + g.right_limit_at(t - s))
        s += Rational(1, 2)
    return min(candidates)


@pytest.mark.parametrize("seed", range(64))
def test_random_convolution(settings, unoptimized, seed):
    rng = random.Random(seed)
    f, g = _random_curve(rng), _random_curve(rng)
    result = curves.convolution(f, g, settings)
    for k in range(17):
        t = Rational(k, 2)
        assert result.value_at(t) == _convolution_by_enumeration(f, g, t)
    assert curves.equivalent(result, curves.convolution(f, g, unoptimized))
