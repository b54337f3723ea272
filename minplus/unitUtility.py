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

"""
This modules defines the units accepted when building curves from strings. It reads times (in seconds),
rates (in bits per second) and amounts of data (in bits) as exact rationals.

>>> read_time("2ms")
Rational(1, 500)
"""

from fractions import Fraction
from typing import Dict, Union

from minplus.rational import Rational, to_rational

Quantity = Union[str, int, float, Fraction, Rational]


def _read(s: str, multiplicators: Dict[str, Fraction], default: Fraction) -> Rational:
    s = s.strip()
    for key in multiplicators:
        if s.endswith(key):
            substract = s[:-len(key)].strip()
            return to_rational(Fraction(substract) * multiplicators[key])
    return to_rational(Fraction(s) * default)


def read_rate(s: Quantity) -> Rational:
    """Reads a rate in bits per second, e.g. "10Mbps". Without unit, the value is in bits per second."""
    if(not isinstance(s, str)):
        return to_rational(s)
    multiplicators = {
        "Gbps": Fraction(10**9),
        "Mbps": Fraction(10**6),
        "kbps": Fraction(10**3),
        "bps": Fraction(1)
    }
    return _read(s, multiplicators, Fraction(1))


def read_time(s: Quantity) -> Rational:
    """Reads a time in seconds, e.g. "2ms". Without unit, the value is in milliseconds."""
    if(not isinstance(s, str)):
        return to_rational(s)
    multiplicators = {
        "ns": Fraction(1, 10**9),
        "us": Fraction(1, 10**6),
        "ms": Fraction(1, 10**3),
        "s": Fraction(1)
    }
    return _read(s, multiplicators, Fraction(1, 10**3)) #default


def read_data(s: Quantity) -> Rational:
    """
    Reads an amount of data in bits, e.g. "1kB" or "1500b". Without unit, the value is in bytes.
    """
    if(not isinstance(s, str)):
        return to_rational(s)
    byteMultiplicators = {
        "B": Fraction(8),
        "b": Fraction(1)
    }
    multiplicators = {
        "k": Fraction(10**3),
        "M": Fraction(10**6),
        "G": Fraction(10**9)
    }
    s = s.strip()
    firstMultiplicator = Fraction(8) #default to bytes
    secondMultiplicator = Fraction(1)
    for key in byteMultiplicators:
        if s.endswith(key):
            s = s[:-len(key)]
            firstMultiplicator = byteMultiplicators[key]
            break
    for key in multiplicators:
        if s.endswith(key):
            s = s[:-len(key)]
            secondMultiplicator = multiplicators[key]
            break
    return to_rational(Fraction(s.strip()) * firstMultiplicator * secondMultiplicator)
