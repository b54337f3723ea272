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

from minplus import curveOptimization
from minplus import curves
from minplus import specialCurves
from minplus.curves import Curve
from minplus.elements import Point, Segment
from minplus.rational import PLUS_INFINITY, Rational
from minplus.sequences import Sequence


@pytest.mark.parametrize("n, expected", [
    (1, []),
    (2, [2]),
    (12, [2, 3]),
    (13, [13]),
    (90, [2, 3, 5]),
])
def test_prime_divisors(n, expected):
    assert list(curveOptimization.prime_divisors(n)) == expected


def test_period_factorization(periodic_curve):
    doubled = Curve(periodic_curve.cut(0, 4), 2, 2, 2)
    factorized = doubled.period_factorization()
    assert factorized.pseudo_period_start == 2
    assert factorized.pseudo_period_length == 1
    assert factorized.pseudo_period_height == 1
    assert curves.equivalent(factorized, doubled)


def test_affine_normalization(token_bucket):
    stretched = Curve(token_bucket.cut(0, 3), 1, 2, 2)
    normalized = stretched.affine_normalization()
    assert normalized.pseudo_period_length == 1
    assert normalized.pseudo_period_height == 1
    assert curves.equivalent(normalized, token_bucket)


def test_transient_reduction(periodic_curve):
    late = Curve(periodic_curve.cut(0, 4), 3, 1, 1)
    reduced = late.transient_reduction()
    assert reduced.pseudo_period_start == 2
    assert curves.equivalent(reduced, periodic_curve)


def test_no_improvement_returns_same_curve(periodic_curve):
    assert periodic_curve.period_factorization() is periodic_curve
    assert periodic_curve.transient_reduction() is periodic_curve


def test_optimize_is_idempotent(periodic_curve):
    optimized = Curve(periodic_curve.cut(0, 5), 3, 2, 2).optimize()
    assert curves.equivalent(optimized, periodic_curve)
    assert optimized.optimize().base_sequence == optimized.base_sequence


def test_minimum_starts_period_at_crossing(rate_latency, token_bucket):
    m = curves.minimum(rate_latency, token_bucket)
    assert m.pseudo_period_start == Rational(13, 2)


@pytest.mark.parametrize("steps", [3, 5])
def test_period_factorization_of_prime_repetitions(steps):
    #ceil(t), written with one step per unit of time
    items = list()
    for i in range(steps):
        items.extend([Point(i, i), Segment(i, i + 1, i + 1, 0)])
    repeated = Curve(Sequence(items), 0, steps, steps)
    factorized = repeated.period_factorization()
    assert factorized.pseudo_period_length == 1
    assert factorized.pseudo_period_height == 1
    assert curves.equivalent(factorized, repeated)
    assert curves.equivalent(factorized, specialCurves.staircase(1, 1))


def test_period_factorization_with_infinite_segments():
    items = list()
    for i in range(3):
        items.extend([Point(i, i), Segment(i, i + 1, PLUS_INFINITY, 0)])
    repeated = Curve(Sequence(items), 0, 3, 3)
    factorized = repeated.period_factorization()
    assert factorized.pseudo_period_length == 1
    assert factorized.pseudo_period_height == 1
    assert factorized.value_at(7) == 7
    assert factorized.value_at(Rational(15, 2)) == PLUS_INFINITY
    assert curves.equivalent(factorized, repeated)


def test_period_factorization_needs_aligned_infinities():
    items = [
        Point(0, 0), Segment(0, 1, PLUS_INFINITY, 0),
        Point(1, 1), Segment(1, 2, PLUS_INFINITY, 0),
        Point(2, 2), Segment(2, 3, 2, 0)
    ]
    curve = Curve(Sequence(items), 0, 3, 3)
    assert curve.period_factorization() is curve


def test_transient_reduction_keeps_finite_part_out_of_infinite_period():
    #finite over [0, 2[, +inf after
    curve = Curve(Sequence([
        Point(0, 0),
        Segment(0, 2, 0, 1),
        Point(2, PLUS_INFINITY),
        Segment(2, 3, PLUS_INFINITY, 0)
    ]), 2, 1, PLUS_INFINITY)
    reduced = curve.transient_reduction()
    assert reduced.pseudo_period_start == 2
    assert reduced.value_at(Rational(3, 2)) == Rational(3, 2)
    assert reduced.value_at(Rational(5, 2)) == PLUS_INFINITY


def test_transient_reduction_into_infinite_transient():
    curve = Curve(Sequence([
        Point(0, 0),
        Segment(0, 1, 0, 1),
        Point(1, PLUS_INFINITY),
        Segment(1, 2, PLUS_INFINITY, 0),
        Point(2, PLUS_INFINITY),
        Segment(2, 3, PLUS_INFINITY, 0)
    ]), 2, 1, PLUS_INFINITY)
    reduced = curve.transient_reduction()
    assert reduced.pseudo_period_start == 1
    assert curves.equivalent(reduced, curve)
