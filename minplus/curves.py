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
This module defines the Curve, an ultimately pseudo-periodic piecewise-linear function over [0, +inf[,
and the min-plus and max-plus operators between curves.

A curve is described by a base sequence over [0, T + d[ and by the triple (T, d, c):
for t >= T + d, f(t) = f(t - k*d) + k*c, with k such that t - k*d lies in [T, T + d[.

Every binary operator follows the same steps: compute a common horizon from the periods of the
operands, apply the sequence operator to both operands extended to the horizon, derive the
resulting (T, d, c) and finally optimize the representation if the settings ask for it.
"""

import logging
import math
from typing import Dict, Iterable, List, Optional, Tuple, Union

from minplus import parallelUtility
from minplus import sequences as seq
from minplus.computationSettings import ComputationSettings, resolve
from minplus.elements import Element, Point, Segment
from minplus.exceptions import InvalidConstruction
from minplus.rational import MINUS_INFINITY, PLUS_INFINITY, ZERO, Rational, RationalLike, lcm, to_rational
from minplus.sequences import Sequence

logger = logging.getLogger("CRV")

#Minimum number of curves before folding a list with several threads
LIST_PARALLELIZATION_THRESHOLD = 8


class Curve:
    '''
    Ultimately pseudo-periodic piecewise-linear function over [0, +inf[

    >>> c = Curve(Sequence([Point(0, 0), Segment(0, 1, 0, 1)]), 0, 1, 1)
    >>> c.value_at(Rational(5, 2))
    Rational(5, 2)
    '''
    _TYPE_TAG = "curve"

    base_sequence: Sequence             #Defined over [0, T + d[, with a point at T
    pseudo_period_start: Rational       #T
    pseudo_period_length: Rational      #d
    pseudo_period_height: Rational      #c

    def __init__(self, base_sequence: Sequence, pseudo_period_start: RationalLike, pseudo_period_length: RationalLike,
                 pseudo_period_height: RationalLike, is_partial_curve: bool = False) -> None:
        """
        Args:
            base_sequence (Sequence): the sequence describing the curve over [0, T + d[
            pseudo_period_start (RationalLike): T, the start of the pseudo-periodic part
            pseudo_period_length (RationalLike): d, strictly positive
            pseudo_period_height (RationalLike): c, the increment of the curve over a pseudo-period
            is_partial_curve (bool, optional): if True, the parts of [0, T + d[ not covered by
                base_sequence are filled with +inf. Defaults to False.

        Raises:
            InvalidConstruction: if the base sequence does not cover [0, T + d[, or if T or d are not valid
        """
        T = to_rational(pseudo_period_start)
        d = to_rational(pseudo_period_length)
        if(T.is_infinite() or T < 0):
            raise InvalidConstruction("Pseudo-period start must be finite and >= 0, got %s" % T)
        if(d.is_infinite() or d <= 0):
            raise InvalidConstruction("Pseudo-period length must be finite and > 0, got %s" % d)
        end = T + d
        if(base_sequence.defined_from != 0 or base_sequence.defined_until != end):
            if(is_partial_curve):
                base_sequence = Sequence(base_sequence.elements, fill_from=ZERO, fill_to=end)
            else:
                raise InvalidConstruction("Base sequence must start at 0 and end at T + d = %s, got [%s, %s]"
                                          % (end, base_sequence.defined_from, base_sequence.defined_until))
        self._set(base_sequence.optimize().cut(0, end, True, False).enforce_split_at(T), T, d, to_rational(pseudo_period_height))

    def _set(self, base_sequence: Sequence, T: Rational, d: Rational, c: Rational) -> None:
        self.base_sequence = base_sequence
        self.pseudo_period_start = T
        self.pseudo_period_length = d
        self.pseudo_period_height = c
        self._periodicIndex = base_sequence._index_at(T)
        self._isSubAdditive: Optional[bool] = None
        self._isSuperAdditive: Optional[bool] = None

    # Predefined curves

    @staticmethod
    def plus_infinite() -> 'Curve':
        return Curve(Sequence([Point.plus_infinite(0), Segment.plus_infinite(0, 1)]), 0, 1, 0)

    @staticmethod
    def minus_infinite() -> 'Curve':
        return Curve(Sequence([Point.minus_infinite(0), Segment.minus_infinite(0, 1)]), 0, 1, 0)

    @staticmethod
    def zero() -> 'Curve':
        return Curve(Sequence.zero(0, 1), 0, 1, 0)

    @staticmethod
    def _delta_zero() -> 'Curve':
        #0 at the origin, +inf after
        return Curve(Sequence([Point.origin(), Segment.plus_infinite(0, 1), Point.plus_infinite(1), Segment.plus_infinite(1, 2)]),
                     1, 1, PLUS_INFINITY)

    @staticmethod
    def _identity() -> 'Curve':
        return Curve(Sequence([Point.origin(), Segment(0, 1, 0, 1)]), 0, 1, 1)

    # Structure

    @property
    def first_pseudo_period_end(self) -> Rational:
        return self.pseudo_period_start + self.pseudo_period_length

    @property
    def second_pseudo_period_end(self) -> Rational:
        return self.pseudo_period_start + 2 * self.pseudo_period_length

    @property
    def pseudo_period_average_slope(self) -> Rational:
        """c / d, or the sign of the pseudo-periodic part if it is only made of infinities"""
        periodic = self.pseudo_periodic_elements
        if(all(e.is_infinite() for e in periodic)):
            return PLUS_INFINITY if periodic[0].is_plus_infinite() else MINUS_INFINITY
        return self.pseudo_period_height / self.pseudo_period_length

    @property
    def transient_elements(self) -> Tuple[Element, ...]:
        return self.base_sequence.elements[:self._periodicIndex]

    @property
    def pseudo_periodic_elements(self) -> Tuple[Element, ...]:
        return self.base_sequence.elements[self._periodicIndex:]

    @property
    def transient_sequence(self) -> Optional[Sequence]:
        """The part of the base sequence over [0, T[, None if T = 0"""
        if(not self.has_transient()):
            return None
        return Sequence(self.transient_elements)

    @property
    def pseudo_periodic_sequence(self) -> Sequence:
        return Sequence(self.pseudo_periodic_elements)

    def has_transient(self) -> bool:
        return self.pseudo_period_start > 0

    @property
    def first_finite_time(self) -> Rational:
        return self.base_sequence.first_finite_time

    @property
    def first_finite_time_except_origin(self) -> Rational:
        t = self.base_sequence.first_finite_time_after(0)
        if(t.is_finite()):
            return t
        if(self.value_at(self.pseudo_period_start).is_finite() and self.pseudo_period_height.is_finite()):
            return self.first_pseudo_period_end
        return PLUS_INFINITY

    @property
    def first_non_zero_time(self) -> Rational:
        if(self.is_identically_zero()):
            return PLUS_INFINITY
        return min(self.base_sequence.first_non_zero_time, self.first_pseudo_period_end)

    @property
    def first_non_negative_time(self) -> Rational:
        if(self.is_non_negative()):
            return ZERO
        t = _first_non_negative_in(self.base_sequence.elements)
        if(t.is_finite()):
            return t
        slope = self.pseudo_period_average_slope
        if(slope <= 0):
            return PLUS_INFINITY
        T, d = self.pseudo_period_start, self.pseudo_period_length
        #first pseudo-period whose supremum is non-negative
        k = max(0, math.ceil(-self.cut(T, T + d).max_value() / self.pseudo_period_height))
        return _first_non_negative_in(self.cut(T + k * d, T + (k + 1) * d, end_inclusive=True).elements)

    def _extension_elements(self, index: int) -> List[Element]:
        """The elements of the pseudo-periodic part, copied index periods later"""
        if(index == 0):
            return list(self.pseudo_periodic_elements)
        delay = index * self.pseudo_period_length
        shift = index * self.pseudo_period_height
        return [e.delay(delay).vertical_shift(shift) for e in self.pseudo_periodic_elements]

    # Queries

    def value_at(self, time: RationalLike) -> Rational:
        """
        Args:
            time (RationalLike): a non-negative time

        Raises:
            ValueError: if time is negative
        """
        time = to_rational(time)
        if(time < 0):
            raise ValueError("Curves are defined for t >= 0 only, got %s" % time)
        if(time < self.first_pseudo_period_end):
            return self.base_sequence.value_at(time)
        k = math.floor((time - self.pseudo_period_start) / self.pseudo_period_length)
        return self.base_sequence.value_at(time - k * self.pseudo_period_length) + k * self.pseudo_period_height

    def __call__(self, time: RationalLike) -> Rational:
        return self.value_at(time)

    def right_limit_at(self, time: RationalLike) -> Rational:
        time = to_rational(time)
        if(time < 0):
            raise ValueError("Curves are defined for t >= 0 only, got %s" % time)
        if(time < self.first_pseudo_period_end):
            return self.base_sequence.right_limit_at(time)
        k = math.floor((time - self.pseudo_period_start) / self.pseudo_period_length)
        return self.base_sequence.right_limit_at(time - k * self.pseudo_period_length) + k * self.pseudo_period_height

    def left_limit_at(self, time: RationalLike) -> Rational:
        """
        Raises:
            ValueError: if time is not strictly positive
        """
        time = to_rational(time)
        if(time <= 0):
            raise ValueError("The left limit is defined for t > 0 only, got %s" % time)
        if(time <= self.first_pseudo_period_end):
            return self.base_sequence.left_limit_at(time)
        k = math.ceil((time - self.first_pseudo_period_end) / self.pseudo_period_length)
        return self.base_sequence.left_limit_at(time - k * self.pseudo_period_length) + k * self.pseudo_period_height

    def get_active_element_at(self, time: RationalLike) -> Element:
        time = to_rational(time)
        if(time < 0):
            raise ValueError("Curves are defined for t >= 0 only, got %s" % time)
        if(time < self.first_pseudo_period_end):
            return self.base_sequence.get_active_element_at(time)
        k = math.floor((time - self.pseudo_period_start) / self.pseudo_period_length)
        return Sequence(self._extension_elements(k)).get_active_element_at(time)

    def cut(self, start: RationalLike, end: RationalLike, start_inclusive: bool = True, end_inclusive: bool = False) -> Sequence:
        """
        Returns the sequence describing the curve over the given interval

        Args:
            start (RationalLike): left endpoint, >= 0
            end (RationalLike): right endpoint, finite
            start_inclusive (bool, optional): Defaults to True.
            end_inclusive (bool, optional): Defaults to False.

        Raises:
            ValueError: if the interval is not a valid finite interval of [0, +inf[
        """
        start, end = to_rational(start), to_rational(end)
        if(start < 0 or start.is_infinite() or end.is_infinite()):
            raise ValueError("Cannot cut a curve over [%s, %s]" % (start, end))
        if(start > end):
            raise ValueError("Cut start %s is after its end %s" % (start, end))
        if(start == end):
            if(not (start_inclusive and end_inclusive)):
                raise ValueError("Cut endpoints, if equal, must both be inclusive")
            return Sequence([Point(start, self.value_at(start))])
        periodEnd = self.first_pseudo_period_end
        if(end < periodEnd or (end == periodEnd and not end_inclusive)):
            return self.base_sequence.cut(start, end, start_inclusive, end_inclusive)
        if(self.is_ultimately_affine()):
            return self._cut_ultimately_affine(start, end, start_inclusive, end_inclusive)

        T, d = self.pseudo_period_start, self.pseudo_period_length
        if(end_inclusive):
            lastIndex = math.floor((end - T) / d)
        else:
            lastIndex = math.ceil((end - T) / d) - 1
        if(start >= periodEnd):
            firstIndex = math.floor((start - T) / d)
            items = list()
        else:
            firstIndex = 1
            items = list(self.base_sequence.elements)
        for k in range(firstIndex, lastIndex + 1):
            items.extend(self._extension_elements(k))
        return Sequence(seq.cut_elements(items, start, end, start_inclusive, end_inclusive))

    def _cut_ultimately_affine(self, start: Rational, end: Rational, start_inclusive: bool, end_inclusive: bool) -> Sequence:
        T = self.pseudo_period_start
        last = self.base_sequence.elements[-1]

        def line(t):
            return last.right_limit_at_start_time + last.slope * (t - T)

        if(start >= T):
            items = list()
            if(start_inclusive):
                items.append(Point(start, self.value_at(start)))
            items.append(Segment(start, end, line(start), last.slope))
            if(end_inclusive):
                items.append(Point(end, line(end)))
            return Sequence(items)
        items = list(self.base_sequence.elements[:-1])
        items.append(Segment(T, end, last.right_limit_at_start_time, last.slope))
        if(end_inclusive):
            items.append(Point(end, line(end)))
        return Sequence(seq.cut_elements(items, start, end, start_inclusive, end_inclusive))

    def extend(self, time: RationalLike) -> Sequence:
        """The sequence describing the curve over [0, time["""
        return self.cut(0, time)

    def match(self, item: Union[Element, Sequence]) -> bool:
        """True if the curve coincides with the given element, or with all the elements of the given sequence"""
        if(isinstance(item, Sequence)):
            return all(self.match(e) for e in item.elements)
        if(isinstance(item, Point)):
            return self.value_at(item.time) == item.value
        cut = self.cut(item.start_time, item.end_time, False, False)
        return len(cut) == 1 and cut.elements[0] == item

    def min_value(self) -> Rational:
        """The infimum of the curve"""
        if(self.pseudo_period_average_slope >= 0):
            return self.cut(0, self.first_pseudo_period_end, end_inclusive=True).min_value()
        return MINUS_INFINITY

    def max_value(self) -> Rational:
        """The supremum of the curve"""
        if(self.pseudo_period_average_slope <= 0):
            return self.cut(0, self.first_pseudo_period_end, end_inclusive=True).max_value()
        return PLUS_INFINITY

    def time_at(self, value: RationalLike) -> Rational:
        """The first time at which the (non-decreasing closure of the) curve reaches value"""
        return self.to_non_decreasing().lower_pseudo_inverse().value_at(value)

    # Properties

    def is_finite(self) -> bool:
        return self.base_sequence.is_finite() and self.pseudo_period_height.is_finite()

    def is_identically_zero(self) -> bool:
        return self.base_sequence.is_zero() and self.pseudo_period_height == 0

    def is_zero_at_zero(self) -> bool:
        return self.value_at(0) == 0

    def is_plus_infinite(self) -> bool:
        return self.base_sequence.is_plus_infinite()

    def is_minus_infinite(self) -> bool:
        return self.base_sequence.is_minus_infinite()

    def is_well_defined(self) -> bool:
        """True unless the curve takes both the values +inf and -inf, which makes the sums with it undefined"""
        values = list(seq._element_values(self.cut(0, self.second_pseudo_period_end).elements))
        return not (PLUS_INFINITY in values and MINUS_INFINITY in values)

    def is_ultimately_finite(self) -> bool:
        return all(e.is_finite() for e in self.pseudo_periodic_elements)

    def is_ultimately_infinite(self) -> bool:
        """True if the curve is infinite, with a fixed sign, from a time at which it takes an infinite value"""
        return self._scan_ultimately_infinite(allowSegmentStart=False)

    def is_weakly_ultimately_infinite(self) -> bool:
        """True if the curve is infinite, with a fixed sign, after some time"""
        return self._scan_ultimately_infinite(allowSegmentStart=True)

    def _scan_ultimately_infinite(self, allowSegmentStart: bool) -> bool:
        items = self.cut(0, self.second_pseudo_period_end).elements
        for i, e in enumerate(items):
            if(e.is_infinite()):
                if(not allowSegmentStart and not isinstance(e, Point)):
                    return False
                sign = e.is_plus_infinite()
                return all(x.is_infinite() and x.is_plus_infinite() == sign for x in items[i:])
        return False

    def is_ultimately_affine(self) -> bool:
        periodic = self.pseudo_periodic_elements
        if(len(periodic) != 2 or not self.is_ultimately_finite() or self.pseudo_period_height.is_infinite()):
            return False
        point, segment = periodic
        return (segment.slope == self.pseudo_period_average_slope
                and segment.left_limit_at_end_time == point.value + self.pseudo_period_height)

    def is_ultimately_constant(self) -> bool:
        return self.is_ultimately_affine() and self.pseudo_period_average_slope == 0

    def is_ultimately_plain(self) -> bool:
        """True if the pseudo-periodic part is either finite or infinite everywhere"""
        return self.is_ultimately_finite() or self.is_ultimately_infinite()

    def is_continuous(self) -> bool:
        return self.base_sequence.is_continuous() and self._is_periodic_continuous()

    def is_continuous_except_origin(self) -> bool:
        rest = self.base_sequence.cut(0, self.first_pseudo_period_end, start_inclusive=False)
        return rest.is_continuous() and self._is_periodic_continuous()

    def _is_periodic_continuous(self) -> bool:
        periodic = self.pseudo_periodic_elements
        return periodic[0].value + self.pseudo_period_height == periodic[-1].left_limit_at_end_time

    def is_left_continuous(self) -> bool:
        return self.cut(0, self.second_pseudo_period_end).is_left_continuous()

    def is_right_continuous(self) -> bool:
        return self.cut(0, self.second_pseudo_period_end).is_right_continuous()

    def is_continuous_at(self, time: RationalLike) -> bool:
        time = to_rational(time)
        if(time > 0):
            return self.is_left_continuous_at(time) and self.is_right_continuous_at(time)
        return self.is_right_continuous_at(time)

    def is_left_continuous_at(self, time: RationalLike) -> bool:
        return self.left_limit_at(time) == self.value_at(time)

    def is_right_continuous_at(self, time: RationalLike) -> bool:
        return self.right_limit_at(time) == self.value_at(time)

    def is_non_negative(self) -> bool:
        return self.min_value() >= 0

    def is_non_decreasing(self) -> bool:
        return self.cut(0, self.second_pseudo_period_end).is_non_decreasing()

    def is_sub_additive(self) -> bool:
        """True if f(s + t) <= f(s) + f(t); computed once and cached"""
        if(self._isSubAdditive is None):
            if(self.value_at(0) >= 0):
                origin = self.with_zero_origin()
                self._isSubAdditive = equivalent(origin, convolution(origin, origin))
            else:
                self._isSubAdditive = equivalent(self, Curve.minus_infinite())
        return self._isSubAdditive

    def is_regular_sub_additive(self) -> bool:
        return self.is_sub_additive() and self.value_at(0) == 0

    def is_super_additive(self) -> bool:
        """True if f(s + t) >= f(s) + f(t); computed once and cached"""
        if(self._isSuperAdditive is None):
            if(self.value_at(0) <= 0):
                origin = self.with_zero_origin()
                self._isSuperAdditive = equivalent(origin, max_plus_convolution(origin, origin))
            else:
                self._isSuperAdditive = equivalent(self, Curve.plus_infinite())
        return self._isSuperAdditive

    def is_regular_super_additive(self) -> bool:
        return self.is_super_additive() and self.value_at(0) == 0

    def is_concave(self) -> bool:
        if(not (self.is_continuous_except_origin() and self.value_at(0) <= self.right_limit_at(0) and self.is_ultimately_affine())):
            return False
        previousSlope = PLUS_INFINITY
        for e in self.base_sequence.elements:
            if(isinstance(e, Segment)):
                if(e.slope > previousSlope):
                    return False
                previousSlope = e.slope
        return True

    def is_regular_concave(self) -> bool:
        return self.is_concave() and self.value_at(0) == 0

    def is_convex(self) -> bool:
        if(not (self.is_continuous_except_origin() and self.value_at(0) >= self.right_limit_at(0) and self.is_ultimately_affine())):
            return False
        previousSlope = MINUS_INFINITY
        for e in self.base_sequence.elements:
            if(isinstance(e, Segment)):
                if(e.slope < previousSlope):
                    return False
                previousSlope = e.slope
        return True

    def is_regular_convex(self) -> bool:
        return self.is_convex() and self.value_at(0) == 0

    # Unary transformations

    def negate(self) -> 'Curve':
        if(self.is_identically_zero()):
            return self
        return Curve(-self.base_sequence, self.pseudo_period_start, self.pseudo_period_length, -self.pseudo_period_height)

    def __neg__(self) -> 'Curve':
        return self.negate()

    def scale(self, scaling: RationalLike) -> 'Curve':
        scaling = to_rational(scaling)
        return Curve(self.base_sequence.scale(scaling), self.pseudo_period_start, self.pseudo_period_length,
                     self.pseudo_period_length * self.pseudo_period_average_slope * scaling)

    def delay_by(self, delay: RationalLike) -> 'Curve':
        """
        Shifts the curve to the right, the curve is 0 over [0, delay]

        Raises:
            ValueError: if delay is negative
        """
        delay = to_rational(delay)
        if(delay < 0):
            raise ValueError("Delay must be >= 0")
        if(delay == 0):
            return self
        return Curve(self.base_sequence.delay(delay), self.pseudo_period_start + delay,
                     self.pseudo_period_length, self.pseudo_period_height)

    def anticipate_by(self, time: RationalLike) -> 'Curve':
        """
        Shifts the curve to the left, dropping its part over [0, time[

        Raises:
            ValueError: if time is negative
        """
        time = to_rational(time)
        if(time < 0):
            raise ValueError("Time must be >= 0")
        if(time == 0):
            return self
        if(time <= self.pseudo_period_start):
            return Curve(self.base_sequence.anticipate(time), self.pseudo_period_start - time,
                         self.pseudo_period_length, self.pseudo_period_height)
        return Curve(self.extend(time + self.pseudo_period_length).anticipate(time), 0,
                     self.pseudo_period_length, self.pseudo_period_height)

    def vertical_shift(self, shift: RationalLike, except_origin: bool = True) -> 'Curve':
        """
        Adds shift to the curve

        Args:
            shift (RationalLike): the value added
            except_origin (bool, optional): if True, the value at 0 is left unchanged. Defaults to True.
        """
        shift = to_rational(shift)
        if(shift == 0):
            return self
        if(shift.is_plus_infinite()):
            if(except_origin):
                return minimum_with_element(Curve.plus_infinite(), Point(0, self.value_at(0)))
            return Curve.plus_infinite()
        curve = self
        if(except_origin and not curve.has_transient()):
            #the origin must not be part of the pseudo-periodic part
            d = curve.pseudo_period_length
            curve = Curve(curve.cut(0, 2 * d), d, d, curve.pseudo_period_height)
        return Curve(curve.base_sequence.vertical_shift(shift, except_origin), curve.pseudo_period_start,
                     curve.pseudo_period_length, curve.pseudo_period_height)

    def to_non_negative(self) -> 'Curve':
        return maximum(self, Curve.zero())

    def with_zero_origin(self) -> 'Curve':
        """min(f, delta_0): the curve with f(0) lowered to 0"""
        if(self.value_at(0) == 0):
            return self
        return minimum(self, Curve._delta_zero())

    def to_non_decreasing(self) -> 'Curve':
        """
        Upper non-decreasing closure, sup_{s <= t} f(s)

        Instead of the max-plus convolution, only the breakpoints at which the curve decreases
        contribute a lower-bound term to the maximum.
        """
        if(self.is_non_decreasing()):
            return self
        T, d, c = self.pseudo_period_start, self.pseudo_period_length, self.pseudo_period_height
        curves = [self]
        if(self.has_transient()):
            for left, center, right in seq.enumerate_breakpoints(self.base_sequence.cut(0, T, end_inclusive=True).elements):
                if(_is_decreasing_at(left, center, right)):
                    curves.append(_lower_bound_curve(center.time, _breakpoint_max(left, center, right), 1, 0))
        isPeriodicBound = self.pseudo_period_average_slope > 0
        for left, center, right in seq.enumerate_breakpoints(self.cut(T, T + d, end_inclusive=True).elements):
            if(_is_decreasing_at(left, center, right)):
                value = _breakpoint_max(left, center, right)
                if(isPeriodicBound):
                    curves.append(_lower_bound_curve(center.time, value, d, c))
                else:
                    curves.append(_lower_bound_curve(center.time, value, 1, 0))
        logger.debug("Non-decreasing closure with %d lower bounds" % (len(curves) - 1))
        return list_maximum(curves)

    def to_lower_non_decreasing(self) -> 'Curve':
        """
        Lower non-decreasing closure, inf_{s >= t} f(s)

        With a non-negative long-term slope the closure keeps (T, d, c), since the infimum over [t, +inf[
        is reached within [t, t + d[. With a negative slope, the closure is -inf.
        """
        if(self.is_non_decreasing()):
            return self
        if(self.pseudo_period_average_slope < 0):
            return Curve.minus_infinite()
        window = self.cut(0, self.second_pseudo_period_end)
        closure = Sequence(_backward_running_minimum(window.elements))
        return Curve(closure.cut(0, self.first_pseudo_period_end), self.pseudo_period_start,
                     self.pseudo_period_length, self.pseudo_period_height)

    def to_left_continuous(self) -> 'Curve':
        T, d = self.pseudo_period_start, self.pseudo_period_length
        elements = seq.to_left_continuous(self.cut(0, T + 2 * d).elements)
        return Curve(Sequence(elements), T + d, d, self.pseudo_period_height)

    def to_right_continuous(self) -> 'Curve':
        return Curve(self.base_sequence.to_right_continuous(), self.pseudo_period_start,
                     self.pseudo_period_length, self.pseudo_period_height)

    def lower_pseudo_inverse(self) -> 'Curve':
        """
        Lower pseudo-inverse, inf { t >= 0 : f(t) >= x }

        Raises:
            ValueError: if the curve is not non-decreasing
        """
        if(not self.is_non_decreasing()):
            raise ValueError("The pseudo-inverse is defined only for non-decreasing functions")
        if(self.is_ultimately_constant()):
            curve = self.transient_reduction()
            value = curve.value_at(curve.pseudo_period_start)
            items = seq.lower_pseudo_inverse(curve.base_sequence.cut(0, curve.pseudo_period_start, end_inclusive=True).elements)
            items.append(Segment.plus_infinite(value, value + 2))
            return Curve(Sequence(items), value + 1, 1, 0)
        if(self.is_weakly_ultimately_infinite()):
            return self._pseudo_inverse_until_infinity(seq.lower_pseudo_inverse)
        if(not self.is_non_negative()):
            T = self._first_non_negative_period_start()
            items = seq.lower_pseudo_inverse(self.cut(0, T + self.pseudo_period_length, end_inclusive=True).elements)[:-1]
            return Curve(Sequence(items), self.value_at(T), self.pseudo_period_height, self.pseudo_period_length).transient_reduction()
        #the point at T + 2d is kept for a left-discontinuity there, its inverse is then dropped
        items = seq.lower_pseudo_inverse(self.cut(0, self.second_pseudo_period_end, end_inclusive=True).elements)[:-1]
        return Curve(Sequence(items), self.value_at(self.first_pseudo_period_end),
                     self.pseudo_period_height, self.pseudo_period_length).transient_reduction()

    def upper_pseudo_inverse(self) -> 'Curve':
        """
        Upper pseudo-inverse, inf { t >= 0 : f(t) > x }

        Raises:
            ValueError: if the curve is not non-decreasing
        """
        if(not self.is_non_decreasing()):
            raise ValueError("The pseudo-inverse is defined only for non-decreasing functions")
        if(self.is_ultimately_constant()):
            curve = self.transient_reduction()
            value = curve.value_at(curve.pseudo_period_start)
            if(curve.has_transient()):
                items = seq.upper_pseudo_inverse(curve.transient_elements)
            elif(value > 0):
                items = [Point.origin(), Segment.zero(0, value)]
            else:
                items = list()
            items.append(Point.plus_infinite(value))
            items.append(Segment.plus_infinite(value, value + 1))
            return Curve(Sequence(items), value, 1, 0)
        if(self.is_weakly_ultimately_infinite()):
            return self._pseudo_inverse_until_infinity(seq.upper_pseudo_inverse)
        if(not self.is_non_negative()):
            T = self._first_non_negative_period_start()
            items = seq.upper_pseudo_inverse(self.cut(0, T + self.pseudo_period_length, end_inclusive=True).elements)[:-1]
            return Curve(Sequence(items), self.value_at(T), self.pseudo_period_height, self.pseudo_period_length).transient_reduction()
        items = seq.upper_pseudo_inverse(self.cut(0, self.first_pseudo_period_end, end_inclusive=True).elements)[:-1]
        return Curve(Sequence(items), self.value_at(self.pseudo_period_start),
                     self.pseudo_period_height, self.pseudo_period_length)

    def _first_non_negative_period_start(self) -> Rational:
        T = max(self.first_pseudo_period_end, self.first_non_negative_time)
        if(self.value_at(T) < 0):
            T += self.pseudo_period_length
        return T

    def _pseudo_inverse_until_infinity(self, inverse) -> 'Curve':
        lastFiniteTime = self.base_sequence.first_infinite_time
        if(lastFiniteTime.is_infinite()):
            lastFiniteTime = self.first_pseudo_period_end
        if(lastFiniteTime == 0):
            return Curve.zero() if self.is_plus_infinite() or self.value_at(0).is_finite() else Curve.plus_infinite()
        lastFiniteValue = self.left_limit_at(lastFiniteTime)
        items = inverse(self.base_sequence.cut(0, lastFiniteTime).elements)
        if(not (isinstance(items[-1], Point) and items[-1].time == lastFiniteValue)):
            items.append(Point(lastFiniteValue, lastFiniteTime))
        items.append(Segment.constant(lastFiniteValue, lastFiniteValue + 1, lastFiniteTime))
        return Curve(Sequence(items), lastFiniteValue, 1, 0)

    # Representation

    def optimize(self) -> 'Curve':
        """Returns an equivalent curve with a minimal representation"""
        return curveOptimization.optimize(self)

    def period_factorization(self) -> 'Curve':
        return curveOptimization.period_factorization(self)

    def affine_normalization(self) -> 'Curve':
        return curveOptimization.affine_normalization(self)

    def transient_reduction(self) -> 'Curve':
        return curveOptimization.transient_reduction(self)

    def to_dict(self) -> Dict:
        """Plain-data projection, with the rationals encoded as strings"""
        return {
            "type": self._TYPE_TAG,
            "base_sequence": [element_to_dict(e) for e in self.base_sequence.elements],
            "pseudo_period_start": str(self.pseudo_period_start),
            "pseudo_period_length": str(self.pseudo_period_length),
            "pseudo_period_height": str(self.pseudo_period_height)
        }

    def __repr__(self) -> str:
        return "%s(T=%s, d=%s, c=%s, %s)" % (type(self).__name__, self.pseudo_period_start, self.pseudo_period_length,
                                           self.pseudo_period_height, self.base_sequence)

    # Operators

    def convolution(self, curve: 'Curve', settings: Optional[ComputationSettings] = None) -> 'Curve':
        """
        Min-plus convolution, inf_{0 <= s <= t} { f(s) + g(t - s) }

        With equal long-term slopes, both curves are extended once to a common horizon.
        Otherwise, the result is the minimum of the convolutions of the transient and pseudo-periodic parts.
        """
        settings = resolve(settings)
        a, b = self, curve
        if(a.first_finite_time_except_origin.is_plus_infinite()):
            return b.vertical_shift(a.value_at(0), except_origin=False)
        if(b.first_finite_time_except_origin.is_plus_infinite()):
            return a.vertical_shift(b.value_at(0), except_origin=False)
        if(a.is_identically_zero() and b.is_non_negative() and b.value_at(0) == 0):
            return a
        if(b.is_identically_zero() and a.is_non_negative() and a.value_at(0) == 0):
            return b

        if(settings.single_pass_convolution and a.pseudo_period_average_slope == b.pseudo_period_average_slope):
            d = lcm(a.pseudo_period_length, b.pseudo_period_length)
            T = a.pseudo_period_start + b.pseudo_period_start + d
            c = a.pseudo_period_average_slope * d
            cutEnd = T + d
            logger.debug("Single pass convolution, T %s d %s" % (T, d))
            convolved = seq.convolution(a.cut(0, cutEnd), b.cut(0, cutEnd), settings, cutEnd)
            result = Curve(convolved.cut(0, cutEnd), T, d, c)
            return result.optimize() if settings.auto_optimize else result

        a, b = _with_transient(a), _with_transient(b)
        terms = list()
        if(equivalent(a, b, settings)):
            #self-convolution, the transient x periodic term is computed once
            if(a.has_transient()):
                terms.append(_convolution_transient_transient(a, a, settings))
            if(a.has_transient() and not a.is_weakly_ultimately_infinite()):
                terms.append(_convolution_transient_periodic(a, a, settings))
            if(not a.is_weakly_ultimately_infinite()):
                terms.append(_convolution_periodic_periodic(a, a, settings))
        else:
            if(a.has_transient()):
                if(b.has_transient()):
                    terms.append(_convolution_transient_transient(a, b, settings))
                if(not b.is_weakly_ultimately_infinite()):
                    terms.append(_convolution_transient_periodic(a, b, settings))
            if(not a.is_weakly_ultimately_infinite()):
                if(b.has_transient()):
                    terms.append(_convolution_transient_periodic(b, a, settings))
                if(not b.is_weakly_ultimately_infinite()):
                    terms.append(_convolution_periodic_periodic(a, b, settings))
        logger.debug("Convolution by parts, %d terms" % len(terms))
        return list_minimum(terms, settings)

    def estimate_convolution(self, curve: 'Curve', count_elements: bool = False, settings: Optional[ComputationSettings] = None) -> int:
        """
        Counts the elementary convolutions that convolution(self, curve) would compute

        Args:
            count_elements (bool, optional): if True, counts the elements produced instead of the pairs. Defaults to False.
        """
        settings = resolve(settings)
        a, b = self, curve
        if(a.first_finite_time_except_origin.is_plus_infinite() or b.first_finite_time_except_origin.is_plus_infinite()):
            return 0
        if(a.is_identically_zero() or b.is_identically_zero()):
            return 0

        if(settings.single_pass_convolution and a.pseudo_period_average_slope == b.pseudo_period_average_slope):
            d = lcm(a.pseudo_period_length, b.pseudo_period_length)
            cutEnd = a.pseudo_period_start + b.pseudo_period_start + 2 * d
            return seq.estimate_convolution(a.cut(0, cutEnd), b.cut(0, cutEnd), settings, cutEnd, count_elements)

        a, b = _with_transient(a), _with_transient(b)

        def transientTransient(x, y):
            return seq.estimate_convolution(Sequence(x.transient_elements), Sequence(y.transient_elements),
                                            settings, count_elements=count_elements)

        def transientPeriodic(t, p):
            T = t.pseudo_period_start + p.pseudo_period_start
            periodic = p.cut(p.pseudo_period_start, T + p.pseudo_period_length)
            return seq.estimate_convolution(Sequence(t.transient_elements), periodic, settings, count_elements=count_elements)

        def periodicPeriodic(x, y):
            d = _earliest_valid_length(x, y)
            cutEnd = x.pseudo_period_start + y.pseudo_period_start + 2 * d
            first = x.cut(x.pseudo_period_start, x.pseudo_period_start + 2 * d)
            second = y.cut(y.pseudo_period_start, y.pseudo_period_start + 2 * d)
            return seq.estimate_convolution(first, second, settings, cutEnd, count_elements)

        count = 0
        if(equivalent(a, b, settings)):
            if(a.has_transient()):
                count += transientTransient(a, a)
            if(a.has_transient() and not a.is_weakly_ultimately_infinite()):
                count += transientPeriodic(a, a)
            if(not a.is_weakly_ultimately_infinite()):
                count += periodicPeriodic(a, a)
        else:
            if(a.has_transient()):
                if(b.has_transient()):
                    count += transientTransient(a, b)
                if(not b.is_weakly_ultimately_infinite()):
                    count += transientPeriodic(a, b)
            if(not a.is_weakly_ultimately_infinite()):
                if(b.has_transient()):
                    count += transientPeriodic(b, a)
                if(not b.is_weakly_ultimately_infinite()):
                    count += periodicPeriodic(a, b)
        return count

    def sub_additive_closure(self, settings: Optional[ComputationSettings] = None) -> 'Curve':
        """The sub-additive closure, inf_{n >= 0} of the n-th self-convolution of f"""
        return closures.sub_additive_closure(self, settings)

    def super_additive_closure(self, settings: Optional[ComputationSettings] = None) -> 'Curve':
        """The super-additive closure, -(sub-additive closure of -f)"""
        return subAdditive.SuperAdditiveCurve(-self.negate().sub_additive_closure(settings), do_test=False)

    def deconvolution(self, curve: 'Curve', settings: Optional[ComputationSettings] = None) -> 'Curve':
        return deconvolution(self, curve, settings)

    def composition(self, inner: 'Curve', settings: Optional[ComputationSettings] = None) -> 'Curve':
        """f(g(t)), with self as f and inner as g"""
        return composition(self, inner, settings)

    def __add__(self, other):
        if(isinstance(other, Curve)):
            return addition(self, other)
        return self.vertical_shift(other, except_origin=False)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        if(isinstance(other, Curve)):
            return subtraction(self, other)
        return self.vertical_shift(-to_rational(other), except_origin=False)

    def __mul__(self, other):
        if(isinstance(other, Curve)):
            return convolution(self, other)
        return self.scale(other)

    def __rmul__(self, other):
        return self.scale(other)

    def __truediv__(self, other: 'Curve') -> 'Curve':
        return deconvolution(self, other)

    def __le__(self, other) -> bool:
        if(isinstance(other, Point)):
            return self.value_at(other.time) <= other.value
        return less_or_equal(self, other)

    def __ge__(self, other) -> bool:
        if(isinstance(other, Point)):
            return self.value_at(other.time) >= other.value
        return greater_or_equal(self, other)


#HELPERS

def _first_non_negative_in(elements: Iterable[Element]) -> Rational:
    for e in elements:
        if(isinstance(e, Point)):
            if(e.value >= 0):
                return e.time
            continue
        if(e.right_limit_at_start_time >= 0):
            return e.start_time
        if(e.slope > 0):
            t = e.start_time + (-e.right_limit_at_start_time / e.slope)
            if(t <= e.end_time):
                return t
    return PLUS_INFINITY


def _is_decreasing_at(left: Optional[Segment], center: Point, right: Optional[Segment]) -> bool:
    return ((left is not None and left.left_limit_at_end_time > center.value)
            or (right is not None and center.value > right.right_limit_at_start_time)
            or (right is not None and right.slope < 0))


def _breakpoint_max(left: Optional[Segment], center: Point, right: Optional[Segment]) -> Rational:
    values = [center.value]
    if(left is not None):
        values.append(left.left_limit_at_end_time)
    if(right is not None):
        values.append(right.right_limit_at_start_time)
    return max(values)


def _lower_bound_curve(time: Rational, value: Rational, d: RationalLike, c: RationalLike) -> Curve:
    """-inf before time, then value, repeated with (d, c)"""
    items = list()
    if(time > 0):
        items.append(Point.minus_infinite(0))
        items.append(Segment.minus_infinite(0, time))
    items.append(Point(time, value))
    items.append(Segment(time, time + to_rational(d), value, 0))
    return Curve(Sequence(items), time, d, c)


def _backward_running_minimum(elements: Tuple[Element, ...]) -> List[Element]:
    """inf_{s >= t} f(s) for t in the support of an ordered list of elements"""
    result: List[Element] = list()
    m = PLUS_INFINITY
    for e in reversed(elements):
        if(isinstance(e, Point)):
            m = min(m, e.value)
            result.append(Point(e.time, m))
            continue
        rl, ll = e.right_limit_at_start_time, e.left_limit_at_end_time
        if(e.slope > 0 and m > rl):
            if(m >= ll):
                result.append(e)
            else:
                crossing = e.start_time + (m - rl) / e.slope
                result.append(Segment(crossing, e.end_time, m, 0))
                result.append(Point(crossing, m))
                result.append(Segment(e.start_time, crossing, rl, e.slope))
        else:
            result.append(Segment(e.start_time, e.end_time, min(m, rl, ll), 0))
        m = min(m, rl, ll)
    result.reverse()
    return seq.merge(result)


def _bound_deviations(curve: Curve, slope: Rational) -> List[Rational]:
    """Offsets of the finite pseudo-periodic elements of curve from the line of the given slope"""
    deviations = list()
    for e in curve.pseudo_periodic_elements:
        if(not e.is_finite()):
            continue
        if(isinstance(e, Point)):
            deviations.append(e.value - slope * e.time)
        else:
            deviations.append(e.right_limit_at_start_time - slope * e.start_time)
            deviations.append(e.left_limit_at_end_time - slope * e.end_time)
    return deviations


def _bounds_intersection(lower: Curve, higher: Curve) -> Rational:
    """A time after which the curve with the lower slope stays below the other one"""
    lowerSlope = lower.pseudo_period_average_slope
    higherSlope = higher.pseudo_period_average_slope
    upperDeviations = _bound_deviations(lower, lowerSlope)
    lowerDeviations = _bound_deviations(higher, higherSlope)
    if(not upperDeviations or not lowerDeviations):
        return ZERO
    return (max(upperDeviations) - min(lowerDeviations)) / (higherSlope - lowerSlope)


def _with_transient(curve: Curve) -> Curve:
    """A curve that is infinite after its first pseudo-period gets an explicit transient part"""
    if(curve.has_transient() or not curve.is_weakly_ultimately_infinite()):
        return curve
    T, d = curve.pseudo_period_start, curve.pseudo_period_length
    return Curve(curve.cut(0, T + 2 * d), T + d, d, curve.pseudo_period_height)


def _earliest_valid_length(a: Curve, b: Curve) -> Rational:
    if(a.is_ultimately_affine()):
        return b.pseudo_period_length
    if(b.is_ultimately_affine()):
        return a.pseudo_period_length
    return lcm(a.pseudo_period_length, b.pseudo_period_length)


def _convolution_transient_transient(a: Curve, b: Curve, settings: ComputationSettings) -> Curve:
    convolved = seq.convolution(Sequence(a.transient_elements), Sequence(b.transient_elements), settings)
    #the period of this term is arbitrary, the curve is +inf after T
    d = max(a.pseudo_period_length, b.pseudo_period_length)
    T = convolved.defined_until
    result = Curve(Sequence(convolved.elements, fill_from=ZERO, fill_to=T + d), T, d, PLUS_INFINITY)
    return result.optimize() if settings.auto_optimize else result


def _convolution_transient_periodic(transientCurve: Curve, periodicCurve: Curve, settings: ComputationSettings) -> Curve:
    T = transientCurve.pseudo_period_start + periodicCurve.pseudo_period_start
    d = periodicCurve.pseudo_period_length
    c = periodicCurve.pseudo_period_height
    periodic = periodicCurve.cut(periodicCurve.pseudo_period_start, T + d)
    convolved = seq.convolution(Sequence(transientCurve.transient_elements), periodic, settings)
    result = Curve(convolved.cut(periodicCurve.pseudo_period_start, T + d), T, d, c, is_partial_curve=True)
    return result.optimize() if settings.auto_optimize else result


def _convolution_periodic_periodic(a: Curve, b: Curve, settings: ComputationSettings) -> Curve:
    d = _earliest_valid_length(a, b)
    t1, t2 = a.pseudo_period_start, b.pseudo_period_start
    T = t1 + t2 + d
    c = d * min(a.pseudo_period_average_slope, b.pseudo_period_average_slope)
    logger.debug("Periodic convolution term, extending from T1 %s d1 %s T2 %s d2 %s to T %s d %s"
                 % (t1, a.pseudo_period_length, t2, b.pseudo_period_length, T, d))
    cutEnd = T + d
    convolved = seq.convolution(a.cut(t1, t1 + 2 * d), b.cut(t2, t2 + 2 * d), settings, cutEnd)
    result = Curve(convolved.cut(t1 + t2, cutEnd), T, d, c, is_partial_curve=True)
    return result.optimize() if settings.auto_optimize else result


def element_to_dict(e: Element) -> Dict:
    if(isinstance(e, Point)):
        return {"type": "point", "time": str(e.time), "value": str(e.value)}
    return {
        "type": "segment",
        "start_time": str(e.start_time),
        "end_time": str(e.end_time),
        "right_limit_at_start_time": str(e.right_limit_at_start_time),
        "slope": str(e.slope)
    }


def element_from_dict(data: Dict) -> Element:
    """
    Raises:
        InvalidConstruction: if the type tag is unknown
    """
    if(data["type"] == "point"):
        return Point(data["time"], data["value"])
    if(data["type"] == "segment"):
        return Segment(data["start_time"], data["end_time"], data["right_limit_at_start_time"], data["slope"])
    raise InvalidConstruction("Unknown element type %s" % data["type"])


def curve_from_dict(data: Dict) -> Curve:
    """
    Restores a curve from its plain-data projection

    Raises:
        InvalidConstruction: if the type tag is unknown
    """
    base = Sequence(element_from_dict(e) for e in data["base_sequence"])
    curve = Curve(base, data["pseudo_period_start"], data["pseudo_period_length"], data["pseudo_period_height"])
    tag = data.get("type", Curve._TYPE_TAG)
    if(tag == Curve._TYPE_TAG):
        return curve
    if(tag == subAdditive.SubAdditiveCurve._TYPE_TAG):
        return subAdditive.SubAdditiveCurve(curve, do_test=False)
    if(tag == subAdditive.SuperAdditiveCurve._TYPE_TAG):
        return subAdditive.SuperAdditiveCurve(curve, do_test=False)
    raise InvalidConstruction("Unknown curve type %s" % tag)


#COMPARISONS

def _comparison_horizon(a: Curve, b: Curve) -> Rational:
    #both curves are pseudo-periodic after max(T), with a common period lcm(d)
    return max(a.pseudo_period_start, b.pseudo_period_start) + lcm(a.pseudo_period_length, b.pseudo_period_length)


def equivalent(a: Curve, b: Curve, settings: Optional[ComputationSettings] = None) -> bool:
    """True if the two curves represent the same function"""
    if(a is b):
        return True
    if(a.pseudo_period_average_slope != b.pseudo_period_average_slope):
        return False
    horizon = _comparison_horizon(a, b)
    return seq.equivalent(a.cut(0, horizon, end_inclusive=True), b.cut(0, horizon, end_inclusive=True))


def equivalent_except_origin(a: Curve, b: Curve, settings: Optional[ComputationSettings] = None) -> bool:
    if(a.pseudo_period_average_slope != b.pseudo_period_average_slope):
        return False
    horizon = _comparison_horizon(a, b)
    return seq.equivalent(a.cut(0, horizon, start_inclusive=False, end_inclusive=True),
                          b.cut(0, horizon, start_inclusive=False, end_inclusive=True))


def find_first_inequivalence(a: Curve, b: Curve) -> Optional[Rational]:
    """Returns the first time around which the two curves differ, None if they are equivalent"""
    horizon = _comparison_horizon(a, b)
    firstDifference = seq.find_first_inequivalence(a.cut(0, horizon, end_inclusive=True), b.cut(0, horizon, end_inclusive=True))
    if(firstDifference is None and a.pseudo_period_average_slope != b.pseudo_period_average_slope):
        return horizon
    return firstDifference


def less_or_equal(a: Curve, b: Curve, settings: Optional[ComputationSettings] = None) -> bool:
    """True if a(t) <= b(t) for all t"""
    return equivalent(a, minimum(a, b, settings), settings)


def greater_or_equal(a: Curve, b: Curve, settings: Optional[ComputationSettings] = None) -> bool:
    return equivalent(a, maximum(a, b, settings), settings)


def dominance(a: Curve, b: Curve, settings: Optional[ComputationSettings] = None) -> Tuple[bool, Curve, Curve]:
    """
    Checks if one curve is below the other one everywhere

    Returns:
        Tuple[bool, Curve, Curve]: (verified, lower, upper), with (False, a, b) if the curves cross
    """
    if(a is b):
        return (True, a, b)
    lowest = minimum(a, b, settings)
    if(equivalent(a, lowest)):
        return (True, a, b)
    if(equivalent(b, lowest)):
        return (True, b, a)
    return (False, a, b)


def asymptotic_dominance(a: Curve, b: Curve, settings: Optional[ComputationSettings] = None) -> Tuple[bool, Curve, Curve]:
    """
    Checks if one curve is ultimately below the other one

    Returns:
        Tuple[bool, Curve, Curve]: (verified, lower, upper), with (False, a, b) if neither is ultimately below
    """
    slopeA, slopeB = a.pseudo_period_average_slope, b.pseudo_period_average_slope
    if(slopeA < slopeB):
        return (True, a, b)
    if(slopeB < slopeA):
        return (True, b, a)
    lowest = minimum(a, b, settings)
    if(a.match(lowest.pseudo_periodic_sequence)):
        return (True, a, b)
    if(b.match(lowest.pseudo_periodic_sequence)):
        return (True, b, a)
    return (False, a, b)


#BINARY OPERATORS

def addition(a: Curve, b: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
    settings = resolve(settings)
    T = max(a.pseudo_period_start, b.pseudo_period_start)
    d = lcm(a.pseudo_period_length, b.pseudo_period_length)
    c = d * (a.pseudo_period_average_slope + b.pseudo_period_average_slope)
    horizon = T + d
    result = Curve(seq.addition(a.extend(horizon), b.extend(horizon)), T, d, c)
    return result.optimize() if settings.auto_optimize else result


def subtraction(a: Curve, b: Curve, non_negative: bool = True, settings: Optional[ComputationSettings] = None) -> Curve:
    """
    a - b

    Args:
        non_negative (bool, optional): if True, the result is clipped to its non-negative part. Defaults to True.
    """
    difference = addition(a, -b, settings)
    if(non_negative):
        return difference.to_non_negative()
    return difference


def _envelope(a: Curve, b: Curve, isMinimum: bool, settings: ComputationSettings) -> Curve:
    slopeA, slopeB = a.pseudo_period_average_slope, b.pseudo_period_average_slope
    if(slopeA == slopeB):
        if(a.is_ultimately_affine()):
            d = b.pseudo_period_length
        elif(b.is_ultimately_affine()):
            d = a.pseudo_period_length
        else:
            horizon = _comparison_horizon(a, b)
            aCut, bCut = a.cut(0, horizon), b.cut(0, horizon)
            compare = seq.less_or_equal if isMinimum else seq.greater_or_equal
            if(compare(aCut, bCut, settings)):
                d = a.pseudo_period_length
            elif(compare(bCut, aCut, settings)):
                d = b.pseudo_period_length
            else:
                d = lcm(a.pseudo_period_length, b.pseudo_period_length)
        c = d * slopeA
        T = max(a.pseudo_period_start, b.pseudo_period_start)
    else:
        lower, higher = (a, b) if slopeA < slopeB else (b, a)
        dominant = lower if isMinimum else higher
        d, c = dominant.pseudo_period_length, dominant.pseudo_period_height
        T = max(a.pseudo_period_start, b.pseudo_period_start)
        if(slopeA.is_finite() and slopeB.is_finite()):
            T = max(T, _bounds_intersection(lower, higher))
    horizon = T + d
    if(isMinimum):
        envelope = seq.minimum(a.extend(horizon), b.extend(horizon), settings=settings)
    else:
        envelope = seq.maximum(a.extend(horizon), b.extend(horizon), settings=settings)
    result = Curve(envelope, T, d, c)
    return result.optimize() if settings.auto_optimize else result


def minimum(a: Curve, b: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
    """
    Pointwise minimum of two curves

    With equal long-term slopes the period is the one of the lower curve, if there is one, else the lcm.
    With different slopes, the result is the curve with the lower slope after the time where the
    bounds of the two pseudo-periodic parts cross.
    """
    return _envelope(a, b, True, resolve(settings))


def maximum(a: Curve, b: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
    """Pointwise maximum of two curves, see minimum"""
    return _envelope(a, b, False, resolve(settings))


def _element_as_curve(e: Element, fillWith: Rational) -> Curve:
    end = e.end_time
    return Curve(Sequence([e], fill_from=ZERO, fill_to=end + 2, fill_with=fillWith), end + 1, 1, 0)


def minimum_with_element(curve: Curve, e: Element, settings: Optional[ComputationSettings] = None) -> Curve:
    """Minimum of a curve and an element, the element being +inf outside its support"""
    return minimum(curve, _element_as_curve(e, PLUS_INFINITY), settings)


def maximum_with_element(curve: Curve, e: Element, settings: Optional[ComputationSettings] = None) -> Curve:
    """Maximum of a curve and an element, the element being -inf outside its support"""
    return maximum(curve, _element_as_curve(e, MINUS_INFINITY), settings)


def convolution(a: Curve, b: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
    return a.convolution(b, settings)


def estimate_convolution(a: Curve, b: Curve, count_elements: bool = False, settings: Optional[ComputationSettings] = None) -> int:
    return a.estimate_convolution(b, count_elements, settings)


def deconvolution(a: Curve, b: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
    """
    Min-plus deconvolution, sup_{u >= 0} { a(t + u) - b(u) }

    The result is +inf when a grows faster than b in the long term.
    """
    settings = resolve(settings)
    if(a.pseudo_period_average_slope > b.pseudo_period_average_slope):
        return Curve.plus_infinite()
    T = max(a.pseudo_period_start, b.pseudo_period_start) + lcm(a.pseudo_period_length, b.pseudo_period_length)
    firstCut = a.cut(0, T + a.first_pseudo_period_end)
    secondCut = b.cut(0, T)
    deconvolved = seq.deconvolution(firstCut, secondCut, 0, a.first_pseudo_period_end, settings).optimize()
    return Curve(deconvolved, a.pseudo_period_start, a.pseudo_period_length, a.pseudo_period_height)


def max_plus_convolution(a: Curve, b: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
    """Max-plus convolution, sup_{0 <= s <= t} { f(s) + g(t - s) }"""
    return -convolution(-a, -b, settings)


def max_plus_deconvolution(a: Curve, b: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
    return -deconvolution(-a, -b, settings)


def composition(f: Curve, g: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
    """
    Computes f(g(t))

    Raises:
        ValueError: if g is not non-negative and non-decreasing
    """
    settings = resolve(settings)
    if(not g.is_non_negative()):
        raise ValueError("The inner curve must be non-negative")
    if(not g.is_non_decreasing()):
        raise ValueError("The inner curve must be non-decreasing")

    innerStart = g.pseudo_period_start
    outerStart = g.lower_pseudo_inverse().value_at(f.pseudo_period_start)
    T = max(innerStart, outerStart)
    df, cf = f.pseudo_period_length, f.pseudo_period_height
    dg, cg = g.pseudo_period_length, g.pseudo_period_height
    if(settings.use_composition_optimizations and (f.is_ultimately_constant() or g.is_ultimately_constant())):
        T = min(innerStart if g.is_ultimately_constant() else PLUS_INFINITY,
                outerStart if f.is_ultimately_constant() else PLUS_INFINITY)
        d, c = Rational(1), ZERO
    elif(settings.use_composition_optimizations and f.is_ultimately_affine() and g.is_ultimately_affine()):
        d, c = Rational(1), f.pseudo_period_average_slope * g.pseudo_period_average_slope
    elif(settings.use_composition_optimizations and f.is_ultimately_affine()):
        d, c = dg, cg * f.pseudo_period_average_slope
    elif(settings.use_composition_optimizations and g.is_ultimately_affine()):
        d, c = df / g.pseudo_period_average_slope, cf
    else:
        d = Rational(df.numerator * cg.denominator) * dg
        c = Rational(df.denominator * cg.numerator) * cf
    logger.debug("Composition, T %s d %s c %s" % (T, d, c))

    gCut = g.cut(0, T + d)
    fCut = f.cut(g.value_at(0), g.left_limit_at(T + d), end_inclusive=True)
    result = Curve(seq.composition(fCut, gCut), T, d, c)
    return result.optimize() if settings.auto_optimize else result


#LIST OPERATORS

def _fold(operator, curves: Iterable[Curve], settings: Optional[ComputationSettings]) -> Curve:
    settings = resolve(settings)
    curves = list(curves)
    if(not curves):
        raise ValueError("The list of curves is empty")
    doMultithread = settings.use_parallel_list_operations and len(curves) >= LIST_PARALLELIZATION_THRESHOLD
    return parallelUtility.fork_join_reduce(lambda a, b: operator(a, b, settings), curves, settings.parallel_workers, doMultithread)


def list_minimum(curves: Iterable[Curve], settings: Optional[ComputationSettings] = None) -> Curve:
    """
    Raises:
        ValueError: if the list is empty
    """
    return _fold(minimum, curves, settings)


def list_maximum(curves: Iterable[Curve], settings: Optional[ComputationSettings] = None) -> Curve:
    return _fold(maximum, curves, settings)


def list_addition(curves: Iterable[Curve], settings: Optional[ComputationSettings] = None) -> Curve:
    return _fold(addition, curves, settings)


def list_convolution(curves: Iterable[Curve], settings: Optional[ComputationSettings] = None) -> Curve:
    return _fold(convolution, curves, settings)


def list_max_plus_convolution(curves: Iterable[Curve], settings: Optional[ComputationSettings] = None) -> Curve:
    return _fold(max_plus_convolution, curves, settings)


#DEVIATIONS

def horizontal_deviation(a: Curve, b: Curve) -> Rational:
    """
    The maximum horizontal distance between a and b, i.e. the delay bound of an arrival curve a
    through a service curve b

    Raises:
        ValueError: if the curves are not non-decreasing
    """
    if(not a.is_non_decreasing() or not b.is_non_decreasing()):
        raise ValueError("The arguments must be non-decreasing")
    return subtraction(b.lower_pseudo_inverse().composition(a), Curve._identity()).max_value()


def vertical_deviation(a: Curve, b: Curve) -> Rational:
    """The maximum vertical distance between a and b, i.e. the backlog bound of an arrival curve a through a service curve b"""
    return subtraction(a, b).max_value()


from minplus import closures  # noqa: E402
from minplus import curveOptimization  # noqa: E402
from minplus import subAdditive  # noqa: E402
