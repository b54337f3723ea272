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

from minplus import elements as el
from minplus.elements import Point, Segment
from minplus.exceptions import DomainMismatch, InvalidConstruction
from minplus.rational import MINUS_INFINITY, PLUS_INFINITY, Rational


def test_segment_values():
    s = Segment(1, 3, 2, Rational(1, 2))
    assert s.value_at(2) == Rational(5, 2)
    assert s.right_limit_at(1) == 2
    assert s.left_limit_at_end_time == 3
    assert s.length == 2
    with pytest.raises(DomainMismatch):
        s.value_at(1)


def test_segment_needs_positive_length():
    with pytest.raises(InvalidConstruction):
        Segment(2, 2, 0, 0)


def test_infinite_segment_is_normalized():
    s = Segment(0, 1, PLUS_INFINITY, 5)
    assert s.slope == 0
    assert s.is_plus_infinite()
    s = Segment(0, 1, 3, MINUS_INFINITY)
    assert s.is_minus_infinite()
    assert s.slope == 0


def test_start_and_end_slopes():
    s = Segment(1, 2, 1, 2)
    assert s.start_slope == 1
    assert s.end_slope == Rational(3, 2)
    assert Segment(0, 1, 1, 0).start_slope == PLUS_INFINITY


def test_split():
    left, point, right = Segment(0, 4, 0, 1).split(1)
    assert left == Segment(0, 1, 0, 1)
    assert point == Point(1, 1)
    assert right == Segment(1, 4, 1, 1)


def test_point_convolution():
    assert Point(1, 2) * Point(2, 3) == [Point(3, 5)]
    assert el.convolution(Point(1, 1), Segment(0, 2, 0, 1)) == [Segment(1, 3, 1, 1)]


def test_segment_convolution_starts_with_lower_slope():
    result = el.convolution(Segment(0, 1, 0, 2), Segment(0, 2, 0, 1))
    assert result == [Segment(0, 2, 0, 1), Point(2, 2), Segment(2, 3, 2, 2)]


def test_convolution_cut():
    result = el.convolution(Segment(0, 1, 0, 2), Segment(0, 2, 0, 1), Rational(1))
    assert result == [Segment(0, 1, 0, 1)]


def test_deconvolution_by_origin():
    s = Segment(1, 2, 3, 1)
    assert el.deconvolution(s, Point.origin()) == [s]


def test_minimum_of_crossing_segments():
    result = el.minimum(Segment(0, 2, 0, 2), Segment(0, 2, 1, 0))
    assert result == [Segment(0, Rational(1, 2), 0, 2), Point(Rational(1, 2), 1), Segment(Rational(1, 2), 2, 1, 0)]


def test_maximum_of_point_and_segment():
    assert el.maximum(Point(1, 0), Segment(0, 2, 0, 1)) == [Point(1, 1)]


def test_addition():
    assert Segment(0, 1, 1, 1) + Segment(0, 1, 2, 3) == Segment(0, 1, 3, 4)
    with pytest.raises(DomainMismatch):
        Segment(0, 1, 0, 0) + Segment(0, 2, 0, 0)


def test_inverse():
    assert Segment(0, 2, 1, 2).inverse() == Segment(1, 5, 0, Rational(1, 2))
    with pytest.raises(DomainMismatch):
        Segment(0, 1, 0, 0).inverse()
