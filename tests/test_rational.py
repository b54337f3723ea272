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

import math
from fractions import Fraction

import pytest

from minplus.exceptions import DivisionByZero, MinPlusError, UndefinedOperation
from minplus.rational import MINUS_INFINITY, PLUS_INFINITY, Rational, gcd, lcm, to_rational


def test_lowest_terms():
    r = Rational(6, 4)
    assert r.numerator == 3
    assert r.denominator == 2
    assert r == Fraction(3, 2)


def test_equal_to_int_and_fraction():
    assert Rational(3) == 3
    assert Rational(1, 2) == Fraction(1, 2)
    assert hash(Rational(3)) == hash(3)
    assert len({Rational(2, 4), Rational(1, 2)}) == 1


@pytest.mark.parametrize("text, expected", [
    ("1/3", Rational(1, 3)),
    ("2.5", Rational(5, 2)),
    ("-4", Rational(-4)),
    ("inf", PLUS_INFINITY),
    ("-inf", MINUS_INFINITY),
])
def test_from_string(text, expected):
    assert to_rational(text) == expected


def test_infinity_arithmetic():
    assert PLUS_INFINITY + 5 == PLUS_INFINITY
    assert MINUS_INFINITY - 5 == MINUS_INFINITY
    assert PLUS_INFINITY * -2 == MINUS_INFINITY
    assert Rational(3) / PLUS_INFINITY == 0
    assert -PLUS_INFINITY == MINUS_INFINITY


@pytest.mark.parametrize("operation", [
    lambda: PLUS_INFINITY + MINUS_INFINITY,
    lambda: PLUS_INFINITY - PLUS_INFINITY,
    lambda: Rational(0) * PLUS_INFINITY,
    lambda: PLUS_INFINITY / MINUS_INFINITY,
])
def test_undefined_operations(operation):
    with pytest.raises(UndefinedOperation):
        operation()


def test_division_by_zero():
    with pytest.raises(DivisionByZero):
        Rational(1) / 0
    with pytest.raises(MinPlusError):
        Rational(1, 0)


def test_total_order():
    values = [PLUS_INFINITY, Rational(1, 3), MINUS_INFINITY, Rational(-2), Rational(0)]
    assert sorted(values) == [MINUS_INFINITY, Rational(-2), Rational(0), Rational(1, 3), PLUS_INFINITY]
    assert MINUS_INFINITY < -10**30
    assert 10**30 < PLUS_INFINITY


def test_floor_ceil():
    assert math.floor(Rational(7, 2)) == 3
    assert math.ceil(Rational(7, 2)) == 4
    assert math.floor(Rational(-7, 2)) == -4
    with pytest.raises(UndefinedOperation):
        math.floor(PLUS_INFINITY)


def test_int_truncates():
    assert int(Rational(7, 2)) == 3
    assert int(Rational(-7, 2)) == -3
    assert int(Rational(4)) == 4
    assert math.trunc(Rational(-1, 3)) == 0
    with pytest.raises(UndefinedOperation):
        int(PLUS_INFINITY)


def test_float_conversion():
    assert float(Rational(1, 4)) == 0.25
    assert float(PLUS_INFINITY) == math.inf


def test_gcd_lcm():
    assert gcd(Rational(1, 2), Rational(1, 3)) == Rational(1, 6)
    assert lcm(Rational(1, 2), Rational(1, 3)) == 1
    assert lcm(4, 6) == 12
    assert lcm(Rational(5, 2), Rational(5, 2)) == Rational(5, 2)


def test_repr():
    assert repr(Rational(1, 2)) == "Rational(1, 2)"
    assert repr(Rational(4)) == "Rational(4)"
    assert str(PLUS_INFINITY) == "+inf"
