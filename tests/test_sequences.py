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

from minplus import sequences as seq
from minplus.elements import Point, Segment
from minplus.exceptions import DomainMismatch, InvalidConstruction
from minplus.rational import PLUS_INFINITY, Rational
from minplus.sequences import Sequence


@pytest.fixture
def identity():
    return Sequence([Point(0, 0), Segment(0, 2, 0, 1)])


def test_construction_rejects_gaps():
    with pytest.raises(InvalidConstruction):
        Sequence([Point(0, 0), Segment(1, 2, 0, 1)])
    with pytest.raises(InvalidConstruction):
        Sequence([])


def test_construction_fills_gaps():
    s = Sequence([Point(1, 1)], fill_from=0, fill_to=2)
    assert s.value_at(0) == PLUS_INFINITY
    assert s.value_at(1) == 1
    assert s.left_limit_at(2) == PLUS_INFINITY
    assert s.is_right_open


def test_values_and_limits():
    s = Sequence([Point(0, 0), Segment(0, 1, 1, 0), Point(1, 2), Segment(1, 2, 2, 1)])
    assert s.value_at(0) == 0
    assert s.right_limit_at(0) == 1
    assert s.value_at(Rational(1, 2)) == 1
    assert s.left_limit_at(1) == 1
    assert s.value_at(1) == 2
    assert s.left_limit_at(2) == 3
    with pytest.raises(DomainMismatch):
        s.value_at(2)


def test_cut(identity):
    cut = identity.cut(Rational(1, 2), Rational(3, 2), end_inclusive=True)
    assert cut == Sequence([Point(Rational(1, 2), Rational(1, 2)), Segment(Rational(1, 2), Rational(3, 2), Rational(1, 2), 1), Point(Rational(3, 2), Rational(3, 2))])
    assert identity.cut(1, 1, True, True) == Sequence([Point(1, 1)])
    with pytest.raises(ValueError):
        identity.cut(1, 1)
    with pytest.raises(DomainMismatch):
        identity.cut(0, 3)


def test_optimize_merges_collinear_elements():
    s = Sequence([Point(0, 0), Segment(0, 1, 0, 1), Point(1, 1), Segment(1, 2, 1, 1)])
    assert s.optimize() == Sequence([Point(0, 0), Segment(0, 2, 0, 1)])
    assert s.equivalent(Sequence([Point(0, 0), Segment(0, 2, 0, 1)]))


def test_enforce_split_at(identity):
    split = identity.enforce_split_at(1)
    assert len(split) == 4
    assert split.equivalent(identity)


def test_delay():
    s = Sequence([Point(0, 1), Segment(0, 1, 1, 1)])
    assert s.delay(2) == Sequence([Point(0, 0), Segment(0, 2, 0, 0), Point(2, 1), Segment(2, 3, 1, 1)])
    assert s.delay(2, prepend_with_zero=False).defined_from == 2
    with pytest.raises(ValueError):
        s.delay(-1)


def test_anticipate(identity):
    assert identity.anticipate(1) == Sequence([Point(0, 1), Segment(0, 1, 1, 1)])


def test_concat():
    a = Sequence([Point(0, 0), Segment(0, 1, 0, 1)])
    b = Sequence([Point(0, 0), Segment(0, 1, 0, 2)])
    assert seq.concat(a, b) == Sequence([Point(0, 0), Segment(0, 1, 0, 1), Point(1, 1), Segment(1, 2, 1, 2)])


def test_concat_rejects_infinite_junction():
    a = Sequence.plus_infinite(0, 1)
    b = Sequence.zero(0, 1)
    with pytest.raises(ValueError):
        seq.concat(a, b)


def test_addition(identity):
    b = Sequence([Point(0, 1), Segment(0, 1, 1, 0), Point(1, 1), Segment(1, 3, 1, 1)])
    result = identity + b
    assert result == Sequence([Point(0, 1), Segment(0, 1, 1, 1), Point(1, 2), Segment(1, 2, 2, 2)])
    assert result.value_at(Rational(3, 2)) == 3


def test_addition_without_overlap():
    with pytest.raises(DomainMismatch):
        Sequence.zero(0, 1) + Sequence.zero(2, 3)


def test_minimum():
    a = Sequence([Point(0, 0), Segment(0, 2, 0, 2)])
    b = Sequence.constant(1, 0, 2)
    expected = Sequence([Point(0, 0), Segment(0, Rational(1, 2), 0, 2), Point(Rational(1, 2), 1), Segment(Rational(1, 2), 2, 1, 0)])
    assert seq.minimum(a, b) == expected
    assert seq.less_or_equal(expected, a)
    assert not seq.less_or_equal(a, b)


def test_minimum_over_union_fills_with_infinity():
    a = Sequence.zero(0, 1)
    b = Sequence.constant(1, 0, 2)
    result = seq.minimum(a, b, cut_to_overlap=False)
    assert result.defined_until == 2
    assert result.value_at(Rational(1, 2)) == 0
    assert result.value_at(Rational(3, 2)) == 1


def test_lower_envelope_of_overlapping_elements():
    envelope = seq.lower_envelope([Segment(0, 2, 1, 0), Point(1, 0), Segment(0, 2, 2, -1)])
    assert envelope == [Segment(0, 1, 1, 0), Point(1, 0), Segment(1, 2, 1, -1)]


def test_self_convolution(identity, unoptimized):
    result = seq.convolution(identity, identity, unoptimized)
    assert result.equivalent(Sequence([Point(0, 0), Segment(0, 4, 0, 1)]))


def test_convolution_is_commutative(unoptimized):
    f = Sequence([Point(0, 0), Segment(0, 1, 0, 2)])
    g = Sequence([Point(0, 1), Segment(0, 2, 1, 0)])
    assert seq.convolution(f, g, unoptimized).equivalent(seq.convolution(g, f, unoptimized))


def test_convolution_cut(identity, unoptimized):
    result = seq.convolution(identity, identity, unoptimized, cut_end=1)
    assert result.defined_until == 1


def test_convolution_of_the_same_function_split_differently(settings):
    f = Sequence([Point(0, 0), Segment(0, 2, 10, -1), Point(2, 8), Segment(2, 4, 8, -1), Point(4, 100)])
    g = Sequence([Point(0, 0), Segment(0, 4, 10, -1), Point(4, 100)])
    assert f.equivalent(g)
    #inf over s in ]3, 4[ of (10 - s) + (10 - (7 - s))
    assert seq.convolution(f, g, settings).value_at(7) == 13
    assert seq.convolution(g, f, settings).value_at(7) == 13
    assert seq.convolution(f, f, settings).value_at(7) == 13
    assert seq.estimate_convolution(f, g) > seq.estimate_convolution(g, g)


def test_convolution_of_equal_copies(identity, unoptimized):
    copy = Sequence(list(identity.elements))
    assert copy is not identity
    assert seq.estimate_convolution(identity, copy) == seq.estimate_convolution(identity, identity)
    assert seq.convolution(identity, copy, unoptimized).equivalent(seq.convolution(identity, identity, unoptimized))


def test_composition():
    f = Sequence([Point(0, 0), Segment(0, 2, 0, 3)])
    g = Sequence([Point(0, 0), Segment(0, 4, 0, Rational(1, 2))])
    assert seq.composition(f, g) == Sequence([Point(0, 0), Segment(0, 4, 0, Rational(3, 2))])


def test_composition_needs_non_decreasing_inner():
    f = Sequence([Point(0, 0), Segment(0, 2, 0, 3)])
    g = Sequence([Point(0, 2), Segment(0, 2, 2, -1)])
    with pytest.raises(ValueError):
        seq.composition(f, g)


def test_lower_pseudo_inverse():
    s = Sequence([Point(0, 0), Segment(0, 2, 0, 2)])
    assert s.lower_pseudo_inverse() == Sequence([Point(0, 0), Segment(0, 4, 0, Rational(1, 2))])


def test_lower_pseudo_inverse_of_a_jump():
    s = Sequence([Point(0, 0), Segment(0, 1, 0, 0), Point(1, 2), Segment(1, 2, 2, 1)])
    assert s.lower_pseudo_inverse() == Sequence([Point(0, 0), Segment(0, 2, 1, 0), Point(2, 1), Segment(2, 3, 1, 1)])


def test_pseudo_inverse_of_decreasing_sequence():
    with pytest.raises(ValueError):
        Sequence([Point(0, 2), Segment(0, 2, 2, -1)]).lower_pseudo_inverse()
