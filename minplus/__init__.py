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
Exact min-plus and max-plus algebra of ultimately pseudo-periodic piecewise-linear curves
"""

#curves must be loaded first, it loads the closures and the sub-additive curves
from minplus.curves import Curve
from minplus.computationSettings import ComputationSettings
from minplus.elements import Point, Segment
from minplus.exceptions import DivisionByZero, DomainMismatch, InvalidConstruction, MinPlusError, UndefinedOperation
from minplus.rational import MINUS_INFINITY, PLUS_INFINITY, Rational
from minplus.sequences import Sequence
from minplus.subAdditive import SubAdditiveCurve, SuperAdditiveCurve

__version__ = "1.0.0"
