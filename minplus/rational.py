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
This module defines the exact rational numbers used by the min-plus algebra.

A Rational is either a finite fraction (stored as a fractions.Fraction, always in lowest terms)
or one of the two sentinels PLUS_INFINITY and MINUS_INFINITY.
Arithmetic follows the extended-real conventions, except that the undefined forms
(inf - inf, 0 * inf, inf / inf) raise UndefinedOperation instead of producing a NaN.
"""

import math
import numbers
from fractions import Fraction
from typing import Iterable, Union

from minplus.exceptions import DivisionByZero, UndefinedOperation

RationalLike = Union["Rational", int, Fraction, str, float]


class Rational:
    """
    Exact fraction with signed infinities.

    Instances are immutable and hashable. A finite Rational compares (and hashes) equal to the
    int or Fraction with the same value, so that Rational(3) == 3 holds.

    >>> Rational(1, 3) + Rational(1, 6)
    Rational(1, 2)
    """
    __slots__ = ("_value", "_sign")
    _value: Fraction    #The finite value, Fraction(0) for the infinities
    _sign: int          #0 if finite, +1 for +inf, -1 for -inf

    def __init__(self, numerator: RationalLike = 0, denominator: RationalLike = 1) -> None:
        if(isinstance(numerator, Rational) and denominator == 1):
            self._value = numerator._value
            self._sign = numerator._sign
            return
        if(isinstance(numerator, str)):
            stripped = numerator.strip().lower()
            if(stripped in ("inf", "+inf", "infinity", "+infinity", "+∞", "∞")):
                self._value, self._sign = Fraction(0), 1
                return
            if(stripped in ("-inf", "-infinity", "-∞")):
                self._value, self._sign = Fraction(0), -1
                return
        if(isinstance(numerator, float) and math.isinf(numerator)):
            self._value, self._sign = Fraction(0), (1 if numerator > 0 else -1)
            return
        if(isinstance(numerator, Rational)):
            numerator = numerator.to_fraction()
        if(isinstance(denominator, Rational)):
            denominator = denominator.to_fraction()
        if(denominator == 0):
            raise DivisionByZero(numerator)
        self._value = Fraction(numerator) / Fraction(denominator)
        self._sign = 0

    @classmethod
    def _infinity(cls, sign: int) -> "Rational":
        r = cls.__new__(cls)
        r._value = Fraction(0)
        r._sign = sign
        return r

    @classmethod
    def _from_fraction(cls, value: Fraction) -> "Rational":
        r = cls.__new__(cls)
        r._value = value
        r._sign = 0
        return r

    # Properties

    @property
    def numerator(self) -> int:
        if(self._sign != 0):
            return self._sign
        return self._value.numerator

    @property
    def denominator(self) -> int:
        if(self._sign != 0):
            return 0
        return self._value.denominator

    def is_finite(self) -> bool:
        return self._sign == 0

    def is_infinite(self) -> bool:
        return self._sign != 0

    def is_plus_infinite(self) -> bool:
        return self._sign > 0

    def is_minus_infinite(self) -> bool:
        return self._sign < 0

    def is_zero(self) -> bool:
        return self._sign == 0 and self._value == 0

    def is_positive(self) -> bool:
        return self._sign > 0 or (self._sign == 0 and self._value > 0)

    def is_negative(self) -> bool:
        return self._sign < 0 or (self._sign == 0 and self._value < 0)

    def to_fraction(self) -> Fraction:
        if(self._sign != 0):
            raise UndefinedOperation(self, "to_fraction", None, string="Cannot convert %s to a Fraction" % self)
        return self._value

    def __float__(self) -> float:
        if(self._sign != 0):
            return math.inf * self._sign
        return float(self._value)

    # Arithmetic

    def __neg__(self) -> "Rational":
        if(self._sign != 0):
            return Rational._infinity(-self._sign)
        return Rational._from_fraction(-self._value)

    def __pos__(self) -> "Rational":
        return self

    def __abs__(self) -> "Rational":
        if(self._sign != 0):
            return PLUS_INFINITY
        return Rational._from_fraction(abs(self._value))

    def __add__(self, other) -> "Rational":
        other = _coerce(other)
        if(other is NotImplemented):
            return NotImplemented
        if(self._sign == 0 and other._sign == 0):
            return Rational._from_fraction(self._value + other._value)
        if(self._sign != 0 and other._sign != 0 and self._sign != other._sign):
            raise UndefinedOperation(self, "+", other)
        return Rational._infinity(self._sign if self._sign != 0 else other._sign)

    __radd__ = __add__

    def __sub__(self, other) -> "Rational":
        other = _coerce(other)
        if(other is NotImplemented):
            return NotImplemented
        return self.__add__(-other)

    def __rsub__(self, other) -> "Rational":
        other = _coerce(other)
        if(other is NotImplemented):
            return NotImplemented
        return other.__add__(-self)

    def __mul__(self, other) -> "Rational":
        other = _coerce(other)
        if(other is NotImplemented):
            return NotImplemented
        if(self._sign == 0 and other._sign == 0):
            return Rational._from_fraction(self._value * other._value)
        if(self.is_zero() or other.is_zero()):
            raise UndefinedOperation(self, "*", other)
        return Rational._infinity(_sign_of(self) * _sign_of(other))

    __rmul__ = __mul__

    def __truediv__(self, other) -> "Rational":
        other = _coerce(other)
        if(other is NotImplemented):
            return NotImplemented
        if(other.is_zero()):
            raise DivisionByZero(self)
        if(other._sign != 0):
            if(self._sign != 0):
                raise UndefinedOperation(self, "/", other)
            return ZERO
        if(self._sign != 0):
            return Rational._infinity(self._sign * _sign_of(other))
        return Rational._from_fraction(self._value / other._value)

    def __rtruediv__(self, other) -> "Rational":
        other = _coerce(other)
        if(other is NotImplemented):
            return NotImplemented
        return other.__truediv__(self)

    # Comparisons

    def _key(self):
        return (self._sign, self._value)

    def __eq__(self, other) -> bool:
        other = _coerce(other)
        if(other is NotImplemented):
            return NotImplemented
        return self._sign == other._sign and self._value == other._value

    def __lt__(self, other) -> bool:
        other = _coerce(other)
        if(other is NotImplemented):
            return NotImplemented
        return self._key() < other._key()

    def __le__(self, other) -> bool:
        other = _coerce(other)
        if(other is NotImplemented):
            return NotImplemented
        return self._key() <= other._key()

    def __gt__(self, other) -> bool:
        other = _coerce(other)
        if(other is NotImplemented):
            return NotImplemented
        return self._key() > other._key()

    def __ge__(self, other) -> bool:
        other = _coerce(other)
        if(other is NotImplemented):
            return NotImplemented
        return self._key() >= other._key()

    def __hash__(self) -> int:
        if(self._sign != 0):
            return hash(("Rational", self._sign))
        return hash(self._value)

    def __bool__(self) -> bool:
        return not self.is_zero()

    # Integer parts

    def __floor__(self) -> int:
        if(self._sign != 0):
            raise UndefinedOperation(self, "floor", None, string="Cannot take the floor of %s" % self)
        return math.floor(self._value)

    def __ceil__(self) -> int:
        if(self._sign != 0):
            raise UndefinedOperation(self, "ceil", None, string="Cannot take the ceiling of %s" % self)
        return math.ceil(self._value)

    def __int__(self) -> int:
        """Truncation towards zero, as int(Fraction)"""
        if(self._sign != 0):
            raise UndefinedOperation(self, "int", None, string="Cannot convert %s to an integer" % self)
        return int(self._value)

    def __trunc__(self) -> int:
        return int(self)

    def floor(self) -> "Rational":
        return Rational(math.floor(self))

    def ceil(self) -> "Rational":
        return Rational(math.ceil(self))

    # Representation

    def __repr__(self) -> str:
        if(self._sign > 0):
            return "PLUS_INFINITY"
        if(self._sign < 0):
            return "MINUS_INFINITY"
        if(self._value.denominator == 1):
            return "Rational(%d)" % self._value.numerator
        return "Rational(%d, %d)" % (self._value.numerator, self._value.denominator)

    def __str__(self) -> str:
        if(self._sign > 0):
            return "+inf"
        if(self._sign < 0):
            return "-inf"
        return str(self._value)

    def __reduce__(self):
        return (Rational, (str(self),))


def _sign_of(r: Rational) -> int:
    if(r._sign != 0):
        return r._sign
    return (r._value > 0) - (r._value < 0)


def _coerce(other):
    if(isinstance(other, Rational)):
        return other
    if(isinstance(other, (int, Fraction))):
        return Rational._from_fraction(Fraction(other))
    if(isinstance(other, float)):
        return Rational(other)
    if(isinstance(other, numbers.Rational)):
        return Rational._from_fraction(Fraction(other.numerator, other.denominator))
    return NotImplemented


def to_rational(x: RationalLike) -> Rational:
    """Converts ints, Fractions, exact floats, strings ("1/3", "2.5", "inf") to a Rational"""
    if(isinstance(x, Rational)):
        return x
    return Rational(x)


def gcd(a: RationalLike, b: RationalLike) -> Rational:
    """Greatest common divisor of two positive rationals: gcd(p/q, r/s) = gcd(p, r) / lcm(q, s)"""
    a, b = to_rational(a), to_rational(b)
    if(a.is_infinite() or b.is_infinite()):
        raise UndefinedOperation(a, "gcd", b)
    return Rational(math.gcd(a.numerator, b.numerator), _int_lcm(a.denominator, b.denominator))


def lcm(a: RationalLike, b: RationalLike) -> Rational:
    """Least common multiple of two positive rationals: lcm(p/q, r/s) = lcm(p, r) / gcd(q, s)"""
    a, b = to_rational(a), to_rational(b)
    if(a.is_infinite() or b.is_infinite()):
        raise UndefinedOperation(a, "lcm", b)
    if(a == b):
        return a
    return Rational(_int_lcm(a.numerator, b.numerator), math.gcd(a.denominator, b.denominator))


def _int_lcm(a: int, b: int) -> int:
    return abs(a * b) // math.gcd(a, b)


def rational_min(values: Iterable[RationalLike]) -> Rational:
    return min(to_rational(v) for v in values)


def rational_max(values: Iterable[RationalLike]) -> Rational:
    return max(to_rational(v) for v in values)


ZERO = Rational._from_fraction(Fraction(0))
ONE = Rational._from_fraction(Fraction(1))
PLUS_INFINITY = Rational._infinity(1)
MINUS_INFINITY = Rational._infinity(-1)
