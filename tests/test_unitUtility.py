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

from minplus.rational import Rational
from minplus.unitUtility import read_data, read_rate, read_time


@pytest.mark.parametrize("text, expected", [
    ("2ms", Rational(1, 500)),
    ("10us", Rational(1, 100000)),
    ("5ns", Rational(1, 200000000)),
    ("1.5s", Rational(3, 2)),
    ("3", Rational(3, 1000)),
])
def test_read_time(text, expected):
    assert read_time(text) == expected


@pytest.mark.parametrize("text, expected", [
    ("10Mbps", 10**7),
    ("1Gbps", 10**9),
    ("2.5kbps", 2500),
    ("5", 5),
])
def test_read_rate(text, expected):
    assert read_rate(text) == expected


@pytest.mark.parametrize("text, expected", [
    ("1kB", 8000),
    ("1500b", 1500),
    ("1Mb", 10**6),
    ("2", 16),
])
def test_read_data(text, expected):
    assert read_data(text) == expected


def test_numbers_are_kept():
    assert read_time(Rational(1, 2)) == Rational(1, 2)
    assert read_rate(3) == 3
