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
This module defines the Sequence, a piecewise-linear function over a finite interval,
and the operators between sequences.

A sequence is an ordered list of alternating points and segments, with no gap and no overlap.
A sequence that starts (resp. ends) with a segment is left-open (resp. right-open).
"""

import bisect
import logging
from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from minplus import elements as el
from minplus import parallelUtility
from minplus.computationSettings import ComputationSettings, resolve
from minplus.elements import Element, Point, Segment
from minplus.exceptions import DomainMismatch, InvalidConstruction
from minplus.rational import MINUS_INFINITY, PLUS_INFINITY, ZERO, Rational, RationalLike, to_rational

logger = logging.getLogger("SEQ")

Breakpoint = Tuple[Optional[Segment], Point, Optional[Segment]]


class Sequence:
    '''
    Piecewise-linear function over a finite interval

    The interval is [defined_from, defined_until], each end being open or closed
    depending on whether the first (last) element is a segment or a point.
    '''
    elements: Tuple[Element, ...]
    _starts: List[Rational]             #Start times of the elements, for the binary searches

    def __init__(self, elements: Iterable[Element], fill_from: Optional[RationalLike] = None,
                 fill_to: Optional[RationalLike] = None, fill_with: RationalLike = PLUS_INFINITY) -> None:
        """
        Args:
            elements (Iterable[Element]): the elements, in time order
            fill_from (RationalLike, optional): if set with fill_to, the gaps within [fill_from, fill_to[ are filled
            fill_to (RationalLike, optional): see fill_from
            fill_with (RationalLike, optional): the value of the filling elements. Defaults to +inf.

        Raises:
            InvalidConstruction: if the elements are empty, or not contiguous
        """
        elementList = list(elements)
        if(fill_from is not None and fill_to is not None):
            elementList = fill(elementList, to_rational(fill_from), to_rational(fill_to), fill_with=to_rational(fill_with))
        if(not elementList):
            raise InvalidConstruction("A sequence needs at least one element")
        for previous, current in zip(elementList, elementList[1:]):
            if(isinstance(previous, Point)):
                if(not isinstance(current, Segment) or current.start_time != previous.time):
                    raise InvalidConstruction("Gap or overlap after %s: %s" % (previous, current))
            elif(not isinstance(current, Point) or current.time != previous.end_time):
                raise InvalidConstruction("Gap or overlap after %s: %s" % (previous, current))
        self.elements = tuple(elementList)
        self._starts = [e.start_time for e in self.elements]

    # Constructors

    @staticmethod
    def constant(value: RationalLike, start: RationalLike, end: RationalLike, start_included: bool = True, end_included: bool = False) -> 'Sequence':
        start, end = to_rational(start), to_rational(end)
        items = list()
        if(start_included):
            items.append(Point(start, value))
        items.append(Segment(start, end, value, 0))
        if(end_included):
            items.append(Point(end, value))
        return Sequence(items)

    @staticmethod
    def zero(start: RationalLike, end: RationalLike, start_included: bool = True, end_included: bool = False) -> 'Sequence':
        return Sequence.constant(0, start, end, start_included, end_included)

    @staticmethod
    def plus_infinite(start: RationalLike, end: RationalLike, start_included: bool = True, end_included: bool = False) -> 'Sequence':
        return Sequence.constant(PLUS_INFINITY, start, end, start_included, end_included)

    @staticmethod
    def minus_infinite(start: RationalLike, end: RationalLike, start_included: bool = True, end_included: bool = False) -> 'Sequence':
        return Sequence.constant(MINUS_INFINITY, start, end, start_included, end_included)

    # Support

    @property
    def defined_from(self) -> Rational:
        return self.elements[0].start_time

    @property
    def defined_until(self) -> Rational:
        return self.elements[-1].end_time

    @property
    def is_left_closed(self) -> bool:
        return isinstance(self.elements[0], Point)

    @property
    def is_right_closed(self) -> bool:
        return isinstance(self.elements[-1], Point)

    @property
    def is_left_open(self) -> bool:
        return not self.is_left_closed

    @property
    def is_right_open(self) -> bool:
        return not self.is_right_closed

    def is_defined_at(self, time: RationalLike) -> bool:
        time = to_rational(time)
        if(time == self.defined_from):
            return self.is_left_closed
        if(time == self.defined_until):
            return self.is_right_closed
        return self.defined_from < time < self.defined_until

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[Element]:
        return iter(self.elements)

    def __eq__(self, o: object) -> bool:
        if(not isinstance(o, Sequence)):
            return False
        return self.elements == o.elements

    def __hash__(self) -> int:
        return hash(self.elements)

    def __repr__(self) -> str:
        return "Sequence([%s])" % ", ".join(repr(e) for e in self.elements)

    # Lookups

    def _index_at(self, time: Rational) -> int:
        index = bisect.bisect_right(self._starts, time) - 1
        if(index < 0):
            raise DomainMismatch("The sequence is not defined at %s" % time)
        e = self.elements[index]
        if(isinstance(e, Segment) and e.start_time == time):
            index -= 1
            if(index < 0):
                raise DomainMismatch("The sequence is not defined at %s" % time)
            return index
        if(isinstance(e, Point) and e.time != time):
            raise DomainMismatch("The sequence is not defined at %s" % time)
        if(isinstance(e, Segment) and not time < e.end_time):
            raise DomainMismatch("The sequence is not defined at %s" % time)
        return index

    def get_active_element_at(self, time: RationalLike) -> Element:
        """ Returns the element defining the sequence at time

        Raises:
            DomainMismatch: if the sequence is not defined at time
        """
        return self.elements[self._index_at(to_rational(time))]

    def get_active_segment_after(self, time: RationalLike) -> Segment:
        """Returns the segment defining the right limit at time"""
        time = to_rational(time)
        index = bisect.bisect_right(self._starts, time) - 1
        if(index >= 0):
            e = self.elements[index]
            if(isinstance(e, Segment) and e.start_time <= time < e.end_time):
                return e
            if(isinstance(e, Point) and e.time == time and index + 1 < len(self.elements)):
                return self.elements[index + 1]
        raise DomainMismatch("The sequence has no segment after %s" % time)

    def get_active_segment_before(self, time: RationalLike) -> Segment:
        """Returns the segment defining the left limit at time"""
        time = to_rational(time)
        index = bisect.bisect_left(self._starts, time) - 1
        if(index >= 0):
            e = self.elements[index]
            if(isinstance(e, Segment) and e.start_time < time <= e.end_time):
                return e
        raise DomainMismatch("The sequence has no segment before %s" % time)

    def value_at(self, time: RationalLike) -> Rational:
        return self.get_active_element_at(time).value_at(time)

    def right_limit_at(self, time: RationalLike) -> Rational:
        return self.get_active_segment_after(time).right_limit_at(time)

    def left_limit_at(self, time: RationalLike) -> Rational:
        return self.get_active_segment_before(time).left_limit_at(time)

    # Properties

    def is_finite(self) -> bool:
        return all(e.is_finite() for e in self.elements)

    def is_infinite(self) -> bool:
        return all(e.is_infinite() for e in self.elements)

    def is_plus_infinite(self) -> bool:
        return all(e.is_plus_infinite() for e in self.elements)

    def is_minus_infinite(self) -> bool:
        return all(e.is_minus_infinite() for e in self.elements)

    def is_zero(self) -> bool:
        return all(_is_zero_element(e) for e in self.elements)

    @property
    def first_finite_time(self) -> Rational:
        """The first instant around which the sequence is finite, +inf if there is none"""
        for e in self.elements:
            if(e.is_finite()):
                return e.start_time
        return PLUS_INFINITY

    def first_finite_time_after(self, time: RationalLike) -> Rational:
        time = to_rational(time)
        for e in self.elements:
            if((e.start_time > time or (e.start_time == time and isinstance(e, Segment))) and e.is_finite()):
                return e.start_time
        return PLUS_INFINITY

    @property
    def first_infinite_time(self) -> Rational:
        for e in self.elements:
            if(e.is_infinite()):
                return e.start_time
        return PLUS_INFINITY

    @property
    def first_non_zero_time(self) -> Rational:
        for e in self.elements:
            if(not _is_zero_element(e)):
                return e.start_time
        return PLUS_INFINITY

    def enumerate_breakpoints(self) -> Iterator[Breakpoint]:
        return enumerate_breakpoints(self.elements)

    def is_continuous(self) -> bool:
        return is_continuous(self.elements)

    def is_left_continuous(self) -> bool:
        return all(left is None or left.left_limit_at_end_time == center.value
                   for left, center, _ in self.enumerate_breakpoints())

    def is_right_continuous(self) -> bool:
        return all(right is None or right.right_limit_at_start_time == center.value
                   for _, center, right in self.enumerate_breakpoints())

    def is_continuous_at(self, time: RationalLike) -> bool:
        time = to_rational(time)
        if(time == self.defined_from):
            return self.is_right_continuous_at(time)
        if(time == self.defined_until):
            return self.is_left_continuous_at(time)
        return self.is_left_continuous_at(time) and self.is_right_continuous_at(time)

    def is_left_continuous_at(self, time: RationalLike) -> bool:
        time = to_rational(time)
        if(time == self.defined_until and self.is_right_open):
            return True
        if(time == self.defined_from):
            return True
        return self.left_limit_at(time) == self.value_at(time)

    def is_right_continuous_at(self, time: RationalLike) -> bool:
        time = to_rational(time)
        if(time == self.defined_from and self.is_left_open):
            return True
        if(time == self.defined_until):
            return True
        return self.right_limit_at(time) == self.value_at(time)

    def is_non_negative(self) -> bool:
        return self.min_value() >= 0

    def is_non_decreasing(self) -> bool:
        return is_non_decreasing(self.elements)

    def min_value(self) -> Rational:
        """The infimum of the values of the sequence, including the limits"""
        return min(_element_values(self.elements))

    def max_value(self) -> Rational:
        """The supremum of the values of the sequence, including the limits"""
        return max(_element_values(self.elements))

    # Basic manipulations

    def cut(self, start: RationalLike, end: RationalLike, start_inclusive: bool = True, end_inclusive: bool = False) -> 'Sequence':
        """
        Returns the part of the sequence over the given interval

        Args:
            start (RationalLike): left endpoint
            end (RationalLike): right endpoint
            start_inclusive (bool, optional): True if the cut is left-closed. Defaults to True.
            end_inclusive (bool, optional): True if the cut is right-closed. Defaults to False.

        Raises:
            ValueError: if start > end, or start == end without both endpoints included
            DomainMismatch: if the interval is not within the support of the sequence
        """
        start, end = to_rational(start), to_rational(end)
        if(start > end):
            raise ValueError("Cut start %s is after its end %s" % (start, end))
        if(start < self.defined_from or end > self.defined_until):
            raise DomainMismatch("Cut [%s, %s] is out of the support [%s, %s]" % (start, end, self.defined_from, self.defined_until))
        if((start_inclusive and not self.is_defined_at(start)) or (end_inclusive and not self.is_defined_at(end))):
            raise DomainMismatch("Cut includes endpoints that the sequence does not define")
        if(start == end):
            if(not (start_inclusive and end_inclusive)):
                raise ValueError("Cut endpoints, if equal, must both be inclusive")
            return Sequence([Point(start, self.value_at(start))])
        if(start == self.defined_from and end == self.defined_until
                and start_inclusive == self.is_left_closed and end_inclusive == self.is_right_closed):
            return self
        firstIndex = max(0, bisect.bisect_right(self._starts, start) - 2)
        return Sequence(cut_elements(self.elements[firstIndex:], start, end, start_inclusive, end_inclusive))

    def optimize(self) -> 'Sequence':
        """Merges the segment-point-segment triplets lying on a same line"""
        merged = merge(self.elements)
        if(len(merged) == len(self.elements)):
            return self
        return Sequence(merged)

    def equivalent(self, other: 'Sequence') -> bool:
        return equivalent(self, other)

    def enforce_split_at(self, time: RationalLike) -> 'Sequence':
        """Returns an equivalent sequence with a point at time"""
        time = to_rational(time)
        index = self._index_at(time)
        target = self.elements[index]
        if(isinstance(target, Point)):
            return self
        left, point, right = target.split(time)
        return Sequence(self.elements[:index] + (left, point, right) + self.elements[index + 1:])

    def delay(self, delay: RationalLike, prepend_with_zero: bool = True) -> 'Sequence':
        """
        Shifts the sequence to the right

        Args:
            delay (RationalLike): non-negative delay
            prepend_with_zero (bool, optional): if True, the sequence is 0 between its previous start and its new one. Defaults to True.
        """
        delay = to_rational(delay)
        if(delay < 0):
            raise ValueError("Delay must be >= 0")
        if(delay == 0):
            return self
        delayed = list()
        if(prepend_with_zero):
            if(self.is_left_closed):
                delayed.append(Point.zero(self.defined_from))
            delayed.append(Segment.zero(self.defined_from, self.defined_from + delay))
        delayed.extend(e.delay(delay) for e in self.elements)
        return Sequence(delayed)

    def anticipate(self, time: RationalLike) -> 'Sequence':
        """Shifts the sequence to the left, dropping what falls before its start"""
        time = to_rational(time)
        if(time < 0):
            raise ValueError("Time must be >= 0")
        if(time == 0):
            return self
        anticipated = list()
        for e in self.elements:
            if(isinstance(e, Point)):
                if(e.time >= time):
                    anticipated.append(e.anticipate(time))
            elif(e.start_time >= time):
                anticipated.append(e.anticipate(time))
            elif(e.is_defined_for(time)):
                _, center, right = e.split(time)
                anticipated.append(center.anticipate(time))
                anticipated.append(right.anticipate(time))
        return Sequence(anticipated)

    def vertical_shift(self, shift: RationalLike, except_origin: bool = True) -> 'Sequence':
        shift = to_rational(shift)
        if(shift == 0):
            return self
        return Sequence(
            e if (except_origin and isinstance(e, Point) and e.time == 0) else e.vertical_shift(shift)
            for e in self.elements)

    def scale(self, scaling: RationalLike) -> 'Sequence':
        return Sequence(e.scale(scaling) for e in self.elements)

    def negate(self) -> 'Sequence':
        if(self.is_zero()):
            return self
        return Sequence(-e for e in self.elements)

    def __neg__(self) -> 'Sequence':
        return self.negate()

    def to_non_negative(self) -> 'Sequence':
        return maximum(self, Sequence.zero(self.defined_from, self.defined_until, end_included=True))

    def to_left_continuous(self) -> 'Sequence':
        return Sequence(to_left_continuous(self.elements))

    def to_right_continuous(self) -> 'Sequence':
        return Sequence(to_right_continuous(self.elements))

    def lower_pseudo_inverse(self, start_from_zero: bool = True) -> 'Sequence':
        """
        Computes the lower pseudo-inverse, inf { t : f(t) >= x }

        Raises:
            ValueError: if the sequence is not non-decreasing
        """
        return Sequence(lower_pseudo_inverse(self.elements, start_from_zero))

    def upper_pseudo_inverse(self, start_from_zero: bool = True) -> 'Sequence':
        """
        Computes the upper pseudo-inverse, inf { t : f(t) > x }

        Raises:
            ValueError: if the sequence is not non-decreasing
        """
        return Sequence(upper_pseudo_inverse(self.elements, start_from_zero))

    # Operators

    def __add__(self, other: 'Sequence') -> 'Sequence':
        return addition(self, other)

    def __sub__(self, other: 'Sequence') -> 'Sequence':
        return subtraction(self, other)

    def __le__(self, other: 'Sequence') -> bool:
        return less_or_equal(self, other)

    def __ge__(self, other: 'Sequence') -> bool:
        return greater_or_equal(self, other)


#ELEMENT LISTS

def _is_zero_element(e: Element) -> bool:
    if(isinstance(e, Point)):
        return e.value == 0
    return e.right_limit_at_start_time == 0 and e.slope == 0


def _element_values(elements: Iterable[Element]) -> Iterator[Rational]:
    for e in elements:
        if(isinstance(e, Point)):
            yield e.value
        else:
            yield e.right_limit_at_start_time
            yield e.left_limit_at_end_time


def enumerate_breakpoints(elements: Iterable[Element]) -> Iterator[Breakpoint]:
    """Yields (segment before, point, segment after) for each point of an ordered list of elements"""
    items = list(elements)
    for i, e in enumerate(items):
        if(isinstance(e, Point)):
            left = items[i - 1] if i > 0 else None
            right = items[i + 1] if i + 1 < len(items) else None
            yield (left, e, right)


def is_continuous(elements: Iterable[Element]) -> bool:
    lastValue = None
    for e in elements:
        startValue = e.value if isinstance(e, Point) else e.right_limit_at_start_time
        if(lastValue is not None and startValue != lastValue):
            return False
        lastValue = e.value if isinstance(e, Point) else e.left_limit_at_end_time
    return True


def is_non_decreasing(elements: Iterable[Element]) -> bool:
    items = list(elements)
    for e in items:
        if(isinstance(e, Segment) and e.slope < 0):
            return False
    for left, center, right in enumerate_breakpoints(items):
        if(left is not None and left.left_limit_at_end_time > center.value):
            return False
        if(right is not None and center.value > right.right_limit_at_start_time):
            return False
    return True


def cut_elements(elements: Iterable[Element], start: Rational, end: Rational,
                 start_inclusive: bool = True, end_inclusive: bool = False) -> List[Element]:
    """Cuts an ordered list of elements to the given interval, without checking the support"""
    result = list()
    for e in elements:
        if(isinstance(e, Point)):
            if(e.time < start or (e.time == start and not start_inclusive)):
                continue
            if(e.time > end or (e.time == end and not end_inclusive)):
                break
            result.append(e)
            continue
        if(e.end_time <= start):
            continue
        if(e.start_time >= end):
            break
        if(e.start_time < start and start_inclusive):
            result.append(Point(start, e.value_at(start)))
        result.append(e.cut(max(e.start_time, start), min(e.end_time, end)))
        if(e.end_time > end):
            if(end_inclusive):
                result.append(Point(end, e.value_at(end)))
            break
    return result


def fill(elements: Iterable[Element], fill_from: Rational, fill_to: Rational,
         is_from_included: bool = True, is_to_included: bool = False, fill_with: Rational = PLUS_INFINITY) -> List[Element]:
    """
    Fills the gaps of an ordered list of elements within the given interval

    Raises:
        InvalidConstruction: if the elements are not in time order, or start before fill_from
    """
    result = list()
    expectedStart = fill_from
    isExpectingPoint = is_from_included
    for e in elements:
        if(e.start_time < expectedStart or (e.start_time == expectedStart and isinstance(e, Point) and not isExpectingPoint)):
            raise InvalidConstruction("Elements out of order at %s" % e)
        if(e.start_time > expectedStart):
            if(isExpectingPoint):
                result.append(Point(expectedStart, fill_with))
            result.append(Segment(expectedStart, e.start_time, fill_with, 0))
            if(isinstance(e, Segment)):
                result.append(Point(e.start_time, fill_with))
        elif(isinstance(e, Segment) and isExpectingPoint):
            result.append(Point(expectedStart, fill_with))
        result.append(e)
        expectedStart = e.end_time
        isExpectingPoint = isinstance(e, Segment)
    if(expectedStart < fill_to):
        if(isExpectingPoint):
            result.append(Point(expectedStart, fill_with))
        result.append(Segment(expectedStart, fill_to, fill_with, 0))
        if(is_to_included):
            result.append(Point(fill_to, fill_with))
    elif(expectedStart == fill_to and isExpectingPoint and is_to_included):
        result.append(Point(fill_to, fill_with))
    return result


def merge(elements: Iterable[Element]) -> List[Element]:
    """Merges the segment-point-segment triplets of an ordered list that lie on a same line"""
    result: List[Element] = list()
    for e in elements:
        if(isinstance(e, Segment) and len(result) >= 2
                and isinstance(result[-1], Point) and isinstance(result[-2], Segment)):
            left, point = result[-2], result[-1]
            if(left.end_time == point.time == e.start_time
                    and left.left_limit_at_end_time == point.value == e.right_limit_at_start_time
                    and left.slope == e.slope):
                result.pop()
                result.pop()
                result.append(Segment(left.start_time, e.end_time, left.right_limit_at_start_time, left.slope))
                continue
        result.append(e)
    return result


def to_left_continuous(elements: Iterable[Element]) -> List[Element]:
    items = list(elements)
    result = list()
    for i, e in enumerate(items):
        if(isinstance(e, Point) and i > 0):
            result.append(Point(e.time, items[i - 1].left_limit_at_end_time))
        else:
            result.append(e)
    return result


def to_right_continuous(elements: Iterable[Element]) -> List[Element]:
    items = list(elements)
    result = list()
    for i, e in enumerate(items):
        if(isinstance(e, Point) and i + 1 < len(items)):
            result.append(Point(e.time, items[i + 1].right_limit_at_start_time))
        else:
            result.append(e)
    return result


def lower_envelope(elements: Iterable[Element]) -> List[Element]:
    """
    Lower envelope of an unordered bag of elements, which may overlap.

    The result is ordered and merged. Where no element is defined, the result has a gap.
    """
    items = list(elements)
    if(not items):
        return list()
    pointsAt: Dict[Rational, List[Point]] = defaultdict(list)
    segmentsFrom: Dict[Rational, List[Segment]] = defaultdict(list)
    times = set()
    for e in items:
        times.add(e.start_time)
        times.add(e.end_time)
        if(isinstance(e, Point)):
            pointsAt[e.time].append(e)
        else:
            segmentsFrom[e.start_time].append(e)
    times = sorted(times)
    result = list()
    active: List[Segment] = list()
    for i, t in enumerate(times):
        active = [s for s in active if s.end_time > t]
        candidates = [p.value for p in pointsAt.get(t, ())] + [s.value_at(t) for s in active]
        if(candidates):
            result.append(Point(t, min(candidates)))
        active.extend(segmentsFrom.get(t, ()))
        if(i + 1 < len(times) and active):
            result.extend(el.lower_envelope_of_lines(active, t, times[i + 1]))
    return merge(result)


def upper_envelope(elements: Iterable[Element]) -> List[Element]:
    return [-e for e in lower_envelope(-e for e in elements)]


def equivalent(a: Sequence, b: Sequence) -> bool:
    """True if the two sequences represent the same function over the same support"""
    return merge(a.elements) == merge(b.elements)


def find_first_inequivalence(a: Sequence, b: Sequence) -> Optional[Rational]:
    """Returns the first time around which the two sequences differ, None if they are equivalent"""
    spotsA = list(_spots(merge(a.elements)))
    spotsB = list(_spots(merge(b.elements)))
    for pa, pb in zip(spotsA, spotsB):
        if(pa != pb):
            return min(pa.time, pb.time)
    if(len(spotsA) > len(spotsB)):
        return spotsA[len(spotsB)].time
    if(len(spotsB) > len(spotsA)):
        return spotsB[len(spotsA)].time
    return None


def _spots(elements: Iterable[Element]) -> Iterator[Point]:
    for e in elements:
        if(isinstance(e, Point)):
            yield e
        else:
            yield Point(e.start_time, e.right_limit_at_start_time)
            yield Point(e.end_time, e.left_limit_at_end_time)


def concat(a: Sequence, b: Sequence, preserve_delay: bool = False, preserve_shift: bool = False) -> Sequence:
    """
    Appends b at the end of a

    Args:
        a (Sequence): the first part
        b (Sequence): the second part
        preserve_delay (bool, optional): if True, b keeps its own start time offset. Defaults to False.
        preserve_shift (bool, optional): if True, b keeps its own starting value offset. Defaults to False.

    Raises:
        ValueError: if a is infinite at its end, or b at its start
    """
    aEndingValue = a.value_at(a.defined_until) if a.is_right_closed else a.left_limit_at(a.defined_until)
    bStartingValue = b.value_at(b.defined_from) if b.is_left_closed else b.right_limit_at(b.defined_from)
    if(aEndingValue.is_infinite()):
        raise ValueError("Left sequence is infinite at its end, cannot concatenate")
    if(bStartingValue.is_infinite()):
        raise ValueError("Right sequence is infinite at its start, cannot concatenate")
    if(preserve_delay):
        displaced = b.delay(a.defined_until, prepend_with_zero=False)
    else:
        displaced = b.delay(a.defined_until - b.defined_from, prepend_with_zero=False)
    if(preserve_shift):
        displaced = displaced.vertical_shift(aEndingValue, except_origin=False)
    else:
        displaced = displaced.vertical_shift(aEndingValue - bStartingValue, except_origin=False)
    concatenated = list(a.elements)
    if(a.is_right_open and b.is_left_open):
        concatenated.append(Point(a.defined_until, aEndingValue))
    concatenated.extend(displaced.elements)
    return Sequence(concatenated)


def get_overlap(a: Sequence, b: Sequence) -> Optional[Tuple[Rational, Rational, bool, bool]]:
    """Returns (start, end, is left-closed, is right-closed) of the common support, None if there is none"""
    start = max(a.defined_from, b.defined_from)
    end = min(a.defined_until, b.defined_until)
    if(start > end):
        return None
    isLeftClosed = a.is_defined_at(start) and b.is_defined_at(start)
    isRightClosed = a.is_defined_at(end) and b.is_defined_at(end)
    if(start == end and not (isLeftClosed and isRightClosed)):
        return None
    return (start, end, isLeftClosed, isRightClosed)


def _cut_to_overlap(a: Sequence, b: Sequence) -> Tuple[Sequence, Sequence]:
    overlap = get_overlap(a, b)
    if(overlap is None):
        raise DomainMismatch("The sequences do not overlap")
    start, end, isLeftClosed, isRightClosed = overlap
    return a.cut(start, end, isLeftClosed, isRightClosed), b.cut(start, end, isLeftClosed, isRightClosed)


def _pieces(a: Sequence, b: Sequence) -> Iterator[Tuple[Element, Element]]:
    """Yields the pairs of elements of two sequences with the same support, split to common intervals"""
    boundaries = set()
    for e in a.elements + b.elements:
        boundaries.add(e.start_time)
        boundaries.add(e.end_time)
    times = sorted(boundaries)
    return zip(_split_at(a, times), _split_at(b, times))


def _split_at(s: Sequence, times: List[Rational]) -> List[Element]:
    result = list()
    i = 0
    for e in s.elements:
        if(isinstance(e, Point)):
            result.append(e)
            continue
        while(i < len(times) and times[i] <= e.start_time):
            i += 1
        current = e
        while(i < len(times) and times[i] < e.end_time):
            left, point, current = current.split(times[i])
            result.append(left)
            result.append(point)
            i += 1
        result.append(current)
    return result


#SEQUENCE OPERATORS

def addition(a: Sequence, b: Sequence) -> Sequence:
    """ Sum of two sequences over their overlap

    Raises:
        DomainMismatch: if the sequences do not overlap
    """
    a, b = _cut_to_overlap(a, b)
    return Sequence(merge(el.addition(ea, eb) for ea, eb in _pieces(a, b)))


def subtraction(a: Sequence, b: Sequence, non_negative: bool = True) -> Sequence:
    difference = addition(a, -b)
    if(non_negative):
        return difference.to_non_negative()
    return difference


def minimum(a: Sequence, b: Sequence, cut_to_overlap: bool = True, settings: Optional[ComputationSettings] = None) -> Sequence:
    """
    Minimum of two sequences

    Args:
        a (Sequence): first operand
        b (Sequence): second operand
        cut_to_overlap (bool, optional): if True, the result is over the common support, otherwise over the union
            of the supports, filled with +inf. Defaults to True.
        settings (ComputationSettings, optional): the settings

    Raises:
        DomainMismatch: if cut_to_overlap and the sequences do not overlap
    """
    if(cut_to_overlap):
        a, b = _cut_to_overlap(a, b)
        return Sequence(lower_envelope(a.elements + b.elements))
    return Sequence(lower_envelope(a.elements + b.elements),
                    fill_from=min(a.defined_from, b.defined_from),
                    fill_to=max(a.defined_until, b.defined_until))


def maximum(a: Sequence, b: Sequence, cut_to_overlap: bool = True, settings: Optional[ComputationSettings] = None) -> Sequence:
    if(cut_to_overlap):
        a, b = _cut_to_overlap(a, b)
        return Sequence(upper_envelope(a.elements + b.elements))
    return Sequence(upper_envelope(a.elements + b.elements),
                    fill_from=min(a.defined_from, b.defined_from),
                    fill_to=max(a.defined_until, b.defined_until),
                    fill_with=MINUS_INFINITY)


def less_or_equal(a: Sequence, b: Sequence, settings: Optional[ComputationSettings] = None) -> bool:
    """True if a is below b over their common support"""
    cutA, _ = _cut_to_overlap(a, b)
    return equivalent(cutA, minimum(a, b, True, settings))


def greater_or_equal(a: Sequence, b: Sequence, settings: Optional[ComputationSettings] = None) -> bool:
    cutA, _ = _cut_to_overlap(a, b)
    return equivalent(cutA, maximum(a, b, True, settings))


def _convolution_pairs(f: Sequence, g: Sequence, cut_end: Rational, isSelfConvolution: bool) -> Iterator[Tuple[Element, Element]]:
    finiteG = [eb for eb in g.elements if eb.is_finite()]
    for ea in f.elements:
        if(not ea.is_finite()):
            continue
        for eb in finiteG:
            if(cut_end.is_finite() and not ea.start_time + eb.start_time < cut_end):
                continue
            if(isSelfConvolution and not ea.start_time <= eb.start_time):
                continue
            yield (ea, eb)


def convolution(f: Sequence, g: Sequence, settings: Optional[ComputationSettings] = None,
                cut_end: Optional[RationalLike] = None) -> Sequence:
    """
    Min-plus convolution of two sequences, inf_{s} { f(s) + g(t - s) }

    Args:
        f (Sequence): first operand
        g (Sequence): second operand
        settings (ComputationSettings, optional): selects the serial, parallel or partitioned computation
        cut_end (RationalLike, optional): if set, the result is only computed before cut_end

    Raises:
        DomainMismatch: if cut_end is before the start of the result
    """
    settings = resolve(settings)
    cut_end = PLUS_INFINITY if cut_end is None else to_rational(cut_end)
    resultStart = f.defined_from + g.defined_from
    resultEnd = min(f.defined_until + g.defined_until, cut_end)

    if(f.is_plus_infinite() or g.is_plus_infinite()):
        return Sequence.plus_infinite(resultStart, resultEnd)
    if(cut_end.is_finite() and cut_end < resultStart):
        raise DomainMismatch("Convolution is cut at %s, before it starts at %s" % (cut_end, resultStart))

    #symmetric pairs are skipped only when both operands hold the same elements
    isSelfConvolution = f is g or f == g
    pairsCount = sum(1 for _ in _convolution_pairs(f, g, cut_end, isSelfConvolution))
    areFinite = f.is_finite() and g.is_finite()

    def convolve(pair):
        return el.convolution(pair[0], pair[1], cut_end)

    if(settings.use_convolution_partitioning and pairsCount > settings.convolution_partitioning_threshold):
        logger.debug("Partitioned convolution of %d pairs" % pairsCount)
        pairs = list(_convolution_pairs(f, g, cut_end, isSelfConvolution))
        partials = list()
        size = settings.convolution_partitioning_threshold
        for chunkStart in range(0, len(pairs), size):
            chunk = pairs[chunkStart:chunkStart + size]
            pieces = parallelUtility.fork_join_map(convolve, chunk, settings.parallel_workers, settings.use_parallel_convolution)
            partials.extend(fill(lower_envelope(e for piece in pieces for e in piece), resultStart, resultEnd))
        envelope = lower_envelope(partials)
        if(areFinite):
            return Sequence(e for e in envelope if e.is_finite())
        return Sequence(envelope, fill_from=resultStart, fill_to=resultEnd)

    if(settings.use_parallel_convolution and pairsCount > settings.convolution_parallelization_threshold):
        logger.debug("Parallel convolution of %d pairs" % pairsCount)
        pieces = parallelUtility.fork_join_map(convolve, list(_convolution_pairs(f, g, cut_end, isSelfConvolution)), settings.parallel_workers)
    else:
        pieces = [convolve(pair) for pair in _convolution_pairs(f, g, cut_end, isSelfConvolution)]
    envelope = lower_envelope(e for piece in pieces for e in piece)
    if(areFinite):
        return Sequence(envelope)
    return Sequence(envelope, fill_from=resultStart, fill_to=resultEnd)


def estimate_convolution(f: Sequence, g: Sequence, settings: Optional[ComputationSettings] = None,
                         cut_end: Optional[RationalLike] = None, count_elements: bool = False) -> int:
    """
    Counts the elementary convolutions that convolution(f, g) would compute

    Args:
        count_elements (bool, optional): if True, counts the elements produced instead of the pairs. Defaults to False.
    """
    cut_end = PLUS_INFINITY if cut_end is None else to_rational(cut_end)
    if(f.is_infinite() or g.is_infinite()):
        return 0
    isSelfConvolution = f is g or f == g
    pairs = _convolution_pairs(f, g, cut_end, isSelfConvolution)
    if(count_elements):
        return sum(len(el.convolution(ea, eb)) for ea, eb in pairs)
    return sum(1 for _ in pairs)


def deconvolution(a: Sequence, b: Sequence, cut_start: Optional[RationalLike] = None,
                  cut_end: Optional[RationalLike] = None, settings: Optional[ComputationSettings] = None) -> Sequence:
    """
    Min-plus deconvolution of two sequences, sup_{u} { a(t + u) - b(u) }

    Args:
        cut_start (RationalLike, optional): if set, the result is cut from cut_start
        cut_end (RationalLike, optional): if set, the result is filled and cut until cut_end
    """
    settings = resolve(settings)
    cut_start = None if cut_start is None else to_rational(cut_start)
    cut_end = None if cut_end is None else to_rational(cut_end)
    pairs = [(ea, eb) for ea in a.elements for eb in b.elements
             if ea.is_finite() and eb.is_finite() and (cut_start is None or ea.end_time - eb.start_time >= cut_start)]
    if(not pairs):
        raise DomainMismatch("The deconvolution has no finite pair of elements")

    def deconvolve(pair):
        return el.deconvolution(pair[0], pair[1])

    doMultithread = settings.use_parallel_convolution and len(pairs) > settings.convolution_parallelization_threshold
    pieces = parallelUtility.fork_join_map(deconvolve, pairs, settings.parallel_workers, doMultithread)
    result = upper_envelope(e for piece in pieces for e in piece)
    resultStart = result[0].start_time
    resultEnd = result[-1].end_time
    if(cut_start is None and cut_end is None):
        return Sequence(result)
    if(cut_end is not None):
        result = fill(result, resultStart, cut_end, is_from_included=isinstance(result[0], Point))
    start = resultStart if cut_start is None else cut_start
    end = resultEnd if cut_end is None else cut_end
    return Sequence(result).cut(start, end)


def max_plus_convolution(f: Sequence, g: Sequence, settings: Optional[ComputationSettings] = None,
                         cut_end: Optional[RationalLike] = None) -> Sequence:
    """Max-plus convolution of two sequences, sup_{s} { f(s) + g(t - s) }"""
    return -convolution(-f, -g, settings, cut_end)


def max_plus_deconvolution(a: Sequence, b: Sequence, settings: Optional[ComputationSettings] = None) -> Sequence:
    return -deconvolution(-a, -b, settings=settings)


def composition(f: Sequence, g: Sequence) -> Sequence:
    """
    Computes f(g(t))

    Args:
        f (Sequence): outer function, defined over [g(a), g(b-)[ or [g(a), g(b-)]
        g (Sequence): inner function, non-negative and non-decreasing over [a, b[

    Raises:
        ValueError: if the preconditions on f and g are not met
    """
    if(g.is_left_open or g.is_right_closed):
        raise ValueError("g must be defined over an interval [a, b[")
    if(not g.is_non_negative()):
        raise ValueError("g must be non-negative")
    if(not g.is_non_decreasing()):
        raise ValueError("g must be non-decreasing")
    if(f.is_left_open or f.defined_from != g.value_at(g.defined_from)
            or f.defined_until != g.left_limit_at(g.defined_until)):
        raise ValueError("f must be defined over [g(a), g(b-)[ or [g(a), g(b-)]")

    gTimes = [center.time for _, center, _ in g.enumerate_breakpoints()] + [g.defined_until]
    gInverse = g.lower_pseudo_inverse()
    fBreakpoints = [center.time for _, center, _ in f.enumerate_breakpoints()]
    if(f.is_right_closed):
        fBreakpoints = fBreakpoints[:-1]
    fTimes = [gInverse.value_at(t) for t in fBreakpoints]
    times = sorted(set(gTimes) | set(fTimes))

    composed = list()
    for previousTime, time in zip(times, times[1:]):
        gRightLimit = g.right_limit_at(previousTime)
        composed.append(Point(previousTime, f.value_at(g.value_at(previousTime))))
        gSegment = g.get_active_segment_after(previousTime)
        if(gSegment.slope != 0):
            fSegment = f.get_active_segment_after(gRightLimit)
            composed.append(Segment(previousTime, time, fSegment.right_limit_at(gRightLimit), gSegment.slope * fSegment.slope))
        else:
            composed.append(Segment(previousTime, time, f.value_at(gRightLimit), 0))
    return Sequence(merge(composed))


#PSEUDO-INVERSES

def _skip_until_value(elements: Iterable[Element], value: Rational) -> Iterator[Element]:
    for e in elements:
        if(isinstance(e, Point)):
            if(e.value >= value):
                yield e
            continue
        if(e.slope < 0):
            raise ValueError("The sequence is not non-decreasing")
        if(e.is_constant() and e.left_limit_at_end_time < value):
            continue
        if(not e.is_constant() and e.left_limit_at_end_time <= value):
            continue
        if(e.right_limit_at_start_time < value):
            _, center, right = e.split(e.inverse().value_at(value))
            yield center
            yield right
        else:
            yield e


def lower_pseudo_inverse(elements: Iterable[Element], start_from_zero: bool = True) -> List[Element]:
    """
    Lower pseudo-inverse of an ordered, non-decreasing list of elements

    Constant segments become right-discontinuities, and discontinuities become constant segments.

    Raises:
        ValueError: if the elements are not non-decreasing
    """
    merged = merge(elements)
    if(start_from_zero):
        merged = list(_skip_until_value(merged, ZERO))
    if(not merged):
        raise ValueError("No element to invert")
    result = list()
    previousValue = ZERO if start_from_zero else MINUS_INFINITY
    wasPreviousPoint = None
    for e in merged:
        if(isinstance(e, Point)):
            if(e.value > previousValue):
                if(previousValue > MINUS_INFINITY):
                    if(wasPreviousPoint is not True):
                        result.append(Point(previousValue, e.time))
                    result.append(Segment(previousValue, e.value, e.time, 0))
                result.append(e.inverse())
                previousValue = e.value
                wasPreviousPoint = True
            elif(e.value == previousValue and wasPreviousPoint is not True):
                result.append(e.inverse())
                wasPreviousPoint = True
            elif(e.value < previousValue):
                raise ValueError("The sequence is not non-decreasing")
        elif(e.is_constant()):
            value = e.right_limit_at_start_time
            if(value == previousValue):
                if(wasPreviousPoint is None):
                    result.append(Point(value, e.start_time))
            elif(value > previousValue):
                if(wasPreviousPoint is True):
                    result.append(Segment(previousValue, value, e.start_time, 0))
                result.append(Point(value, e.start_time))
                previousValue = value
                wasPreviousPoint = True
            else:
                raise ValueError("The sequence is not non-decreasing")
        elif(e.slope > 0):
            if(e.right_limit_at_start_time > previousValue):
                if(previousValue > MINUS_INFINITY):
                    result.append(Segment(previousValue, e.right_limit_at_start_time, e.start_time, 0))
                result.append(Point(e.right_limit_at_start_time, e.start_time))
                result.append(e.inverse())
            elif(e.right_limit_at_start_time == previousValue):
                result.append(e.inverse())
            else:
                raise ValueError("The sequence is not non-decreasing")
            previousValue = e.left_limit_at_end_time
            wasPreviousPoint = False
        else:
            raise ValueError("The sequence is not non-decreasing")
    return result


def upper_pseudo_inverse(elements: Iterable[Element], start_from_zero: bool = True) -> List[Element]:
    """
    Upper pseudo-inverse of an ordered, non-decreasing list of elements

    Raises:
        ValueError: if the elements are not non-decreasing
    """
    merged = merge(elements)
    if(start_from_zero):
        merged = list(_skip_until_value(merged, ZERO))
    if(not merged):
        raise ValueError("No element to invert")
    result = list()
    previousValue = MINUS_INFINITY
    wasPreviousPoint = None
    heldPoint = None        #held back, replaced by a right-continuity point if a constant segment follows
    for e in merged:
        if(isinstance(e, Point)):
            if(e.value > previousValue):
                if(previousValue > MINUS_INFINITY):
                    if(wasPreviousPoint is not True):
                        result.append(Point(previousValue, e.time))
                    result.append(Segment(previousValue, e.value, e.time, 0))
                heldPoint = e.inverse()
                previousValue = e.value
                wasPreviousPoint = True
            elif(e.value == previousValue and wasPreviousPoint is not True):
                heldPoint = e.inverse()
                wasPreviousPoint = True
            elif(e.value < previousValue):
                raise ValueError("The sequence is not non-decreasing")
        elif(e.is_constant()):
            value = e.right_limit_at_start_time
            if(value == previousValue):
                result.append(Point(value, e.end_time))
                heldPoint = None
                wasPreviousPoint = True
            elif(value > previousValue):
                if(heldPoint is not None):
                    result.append(heldPoint)
                    heldPoint = None
                if(wasPreviousPoint is True):
                    result.append(Segment(previousValue, value, e.start_time, 0))
                result.append(Point(value, e.end_time))
                previousValue = value
                wasPreviousPoint = True
            else:
                raise ValueError("The sequence is not non-decreasing")
        elif(e.slope > 0):
            if(heldPoint is not None):
                result.append(heldPoint)
                heldPoint = None
            if(e.right_limit_at_start_time > previousValue):
                if(previousValue > MINUS_INFINITY):
                    result.append(Segment(previousValue, e.right_limit_at_start_time, e.start_time, 0))
                result.append(Point(e.right_limit_at_start_time, e.start_time))
                result.append(e.inverse())
            elif(e.right_limit_at_start_time == previousValue):
                result.append(e.inverse())
            else:
                raise ValueError("The sequence is not non-decreasing")
            previousValue = e.left_limit_at_end_time
            wasPreviousPoint = False
        else:
            raise ValueError("The sequence is not non-decreasing")
    if(heldPoint is not None):
        result.append(heldPoint)
    return result
