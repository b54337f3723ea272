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
This module contains the exceptions raised by the min-plus algebra
"""


class MinPlusError(Exception):
    """Base class of all the errors raised by the algebra"""

    def __init__(self, *args, **kargs):
        super().__init__(*args)
        self._string = kargs.get("string", args[0] if args else self.default_message())

    def default_message(self) -> str:
        return "Min-plus algebra error"

    def __str__(self):
        return(self._string)


class InvalidConstruction(MinPlusError):
    """An element, sequence or curve invariant is violated at construction"""

    def default_message(self) -> str:
        return "Invalid construction"


class UndefinedOperation(MinPlusError):
    """Arithmetic on infinities with no defined result, e.g. inf - inf or 0 * inf"""

    def __init__(self, left=None, operator: str = "?", right=None, **kargs):
        self._left = left
        self._operator = operator
        self._right = right
        kargs.setdefault("string", "Undefined operation: %s %s %s" % (left, operator, right))
        super().__init__(**kargs)

    def getOperands(self):
        return (self._left, self._right)


class DomainMismatch(MinPlusError):
    """Operands defined over disjoint domains, or a position requested out of the support"""

    def default_message(self) -> str:
        return "The operands are not defined over a common domain"


class DivisionByZero(MinPlusError):

    def __init__(self, dividend=None, **kargs):
        self._dividend = dividend
        kargs.setdefault("string", "Division of %s by zero" % (dividend))
        super().__init__(**kargs)
