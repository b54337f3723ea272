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
This module contains the atomic pieces of a piecewise-linear function: the Point and the Segment,
and the min-plus operations between two of them.
"""

from typing import List, Optional, Tuple

from minplus.exceptions import DomainMismatch, InvalidConstruction, UndefinedOperation
from minplus.rational import PLUS_INFINITY, MINUS_INFINITY, ZERO, Rational, RationalLike, to_rational


class Element:
    '''
    General interface for the elements of a sequence
    '''
    __slots__ = ()

    @property
    def start_time(self) -> Rational:
        raise NotImplementedError()

    @property
    def end_time(self) -> Rational:
        raise NotImplementedError()

    def is_finite(self) -> bool:
        raise NotImplementedError()

    def is_plus_infinite(self) -> bool:
        raise NotImplementedError()

    def is_minus_infinite(self) -> bool:
        raise NotImplementedError()

    def is_infinite(self) -> bool:
        return not self.is_finite()

    def value_at(self, time: RationalLike) -> Rational:
        """ Returns the value of the element at time, if the element is defined there

        Raises:
            DomainMismatch: if the element is not defined at time
        """
        raise NotImplementedError()

    def delay(self, delay: RationalLike) -> 'Element':
        raise NotImplementedError()

    def anticipate(self, time: RationalLike) -> 'Element':
        return self.delay(-to_rational(time))

    def vertical_shift(self, shift: RationalLike) -> 'Element':
        raise NotImplementedError()

    def scale(self, scaling: RationalLike) -> 'Element':
        raise NotImplementedError()

    def inverse(self) -> 'Element':
        """Returns the element with time and value axes swapped"""
        raise NotImplementedError()

    def __neg__(self) -> 'Element':
        raise NotImplementedError()

    def __add__(self, other: 'Element') -> 'Element':
        return addition(self, other)

    def __mul__(self, other: 'Element') -> List['Element']:
        return convolution(self, other)


class Point(Element):
    '''
    The value of a function exactly at a time
    '''
    __slots__ = ("time", "value")
    time: Rational
    value: Rational

    def __init__(self, time: RationalLike, value: RationalLike) -> None:
        self.time = to_rational(time)
        self.value = to_rational(value)

    @staticmethod
    def origin() -> 'Point':
        return Point(0, 0)

    @staticmethod
    def zero(time: RationalLike) -> 'Point':
        return Point(time, 0)

    @staticmethod
    def plus_infinite(time: RationalLike) -> 'Point':
        return Point(time, PLUS_INFINITY)

    @staticmethod
    def minus_infinite(time: RationalLike) -> 'Point':
        return Point(time, MINUS_INFINITY)

    @property
    def start_time(self) -> Rational:
        return self.time

    @property
    def end_time(self) -> Rational:
        return self.time

    def is_finite(self) -> bool:
        return self.value.is_finite()

    def is_plus_infinite(self) -> bool:
        return self.value.is_plus_infinite()

    def is_minus_infinite(self) -> bool:
        return self.value.is_minus_infinite()

    def is_origin(self) -> bool:
        return self.time == 0 and self.value == 0

    def value_at(self, time: RationalLike) -> Rational:
        if(to_rational(time) != self.time):
            raise DomainMismatch("Point at %s is not defined at %s" % (self.time, time))
        return self.value

    def delay(self, delay: RationalLike) -> 'Point':
        return Point(self.time + to_rational(delay), self.value)

    def vertical_shift(self, shift: RationalLike) -> 'Point':
        return Point(self.time, self.value + to_rational(shift))

    def scale(self, scaling: RationalLike) -> 'Point':
        return Point(self.time, self.value * to_rational(scaling))

    def inverse(self) -> 'Point':
        return Point(self.value, self.time)

    def __neg__(self) -> 'Point':
        return Point(self.time, -self.value)

    def __eq__(self, o: object) -> bool:
        if(not isinstance(o, Point)):
            return False
        return self.time == o.time and self.value == o.value

    def __hash__(self) -> int:
        return hash(("Point", self.time, self.value))

    def __repr__(self) -> str:
        return "Point(%s, %s)" % (self.time, self.value)


class Segment(Element):
    '''
    An affine piece of function over the open interval ]start_time, end_time[

    A segment with an infinite right limit (or an infinite slope) is an infinite segment,
    normalized with an infinite right limit and a zero slope.
    '''
    __slots__ = ("_start_time", "_end_time", "right_limit_at_start_time", "slope")
    _start_time: Rational
    _end_time: Rational
    right_limit_at_start_time: Rational
    slope: Rational

    def __init__(self, start_time: RationalLike, end_time: RationalLike, right_limit_at_start_time: RationalLike, slope: RationalLike) -> None:
        self._start_time = to_rational(start_time)
        self._end_time = to_rational(end_time)
        if(not self._start_time < self._end_time):
            raise InvalidConstruction("Segment start (%s) must be before its end (%s)" % (start_time, end_time))
        rightLimit = to_rational(right_limit_at_start_time)
        slope = to_rational(slope)
        if(rightLimit.is_infinite() or slope.is_infinite()):
            if(rightLimit.is_infinite() and slope.is_infinite() and rightLimit != slope):
                raise UndefinedOperation(rightLimit, "+", slope)
            rightLimit = rightLimit if rightLimit.is_infinite() else slope
            slope = ZERO
        self.right_limit_at_start_time = rightLimit
        self.slope = slope

    @staticmethod
    def zero(start_time: RationalLike, end_time: RationalLike) -> 'Segment':
        return Segment(start_time, end_time, 0, 0)

    @staticmethod
    def constant(start_time: RationalLike, end_time: RationalLike, value: RationalLike) -> 'Segment':
        return Segment(start_time, end_time, value, 0)

    @staticmethod
    def plus_infinite(start_time: RationalLike, end_time: RationalLike) -> 'Segment':
        return Segment(start_time, end_time, PLUS_INFINITY, 0)

    @staticmethod
    def minus_infinite(start_time: RationalLike, end_time: RationalLike) -> 'Segment':
        return Segment(start_time, end_time, MINUS_INFINITY, 0)

    @property
    def start_time(self) -> Rational:
        return self._start_time

    @property
    def end_time(self) -> Rational:
        return self._end_time

    @property
    def length(self) -> Rational:
        return self._end_time - self._start_time

    @property
    def left_limit_at_end_time(self) -> Rational:
        if(self.right_limit_at_start_time.is_infinite()):
            return self.right_limit_at_start_time
        return self.right_limit_at_start_time + self.slope * self.length

    @property
    def start_slope(self) -> Rational:
        """Slope of the line from the origin to the right limit at start time"""
        if(self._start_time > 0):
            return self.right_limit_at_start_time / self._start_time
        return PLUS_INFINITY

    @property
    def end_slope(self) -> Rational:
        """Slope of the line from the origin to the left limit at end time"""
        return self.left_limit_at_end_time / self._end_time

    def is_finite(self) -> bool:
        return self.right_limit_at_start_time.is_finite()

    def is_plus_infinite(self) -> bool:
        return self.right_limit_at_start_time.is_plus_infinite()

    def is_minus_infinite(self) -> bool:
        return self.right_limit_at_start_time.is_minus_infinite()

    def is_constant(self) -> bool:
        return self.slope == 0

    def is_defined_for(self, time: RationalLike) -> bool:
        return self._start_time < to_rational(time) < self._end_time

    def _line_at(self, time: Rational) -> Rational:
        if(self.right_limit_at_start_time.is_infinite()):
            return self.right_limit_at_start_time
        return self.right_limit_at_start_time + self.slope * (time - self._start_time)

    def value_at(self, time: RationalLike) -> Rational:
        time = to_rational(time)
        if(not self._start_time < time < self._end_time):
            raise DomainMismatch("Segment ]%s, %s[ is not defined at %s" % (self._start_time, self._end_time, time))
        return self._line_at(time)

    def right_limit_at(self, time: RationalLike) -> Rational:
        time = to_rational(time)
        if(not self._start_time <= time < self._end_time):
            raise DomainMismatch("Segment ]%s, %s[ has no right limit at %s" % (self._start_time, self._end_time, time))
        return self._line_at(time)

    def left_limit_at(self, time: RationalLike) -> Rational:
        time = to_rational(time)
        if(not self._start_time < time <= self._end_time):
            raise DomainMismatch("Segment ]%s, %s[ has no left limit at %s" % (self._start_time, self._end_time, time))
        return self._line_at(time)

    def split(self, time: RationalLike) -> Tuple['Segment', Point, 'Segment']:
        """Splits the segment at an interior time, returns (left segment, point, right segment)"""
        time = to_rational(time)
        value = self.value_at(time)
        return (
            Segment(self._start_time, time, self.right_limit_at_start_time, self.slope),
            Point(time, value),
            Segment(time, self._end_time, value, self.slope))

    def cut(self, start_time: RationalLike, end_time: RationalLike) -> 'Segment':
        """Restricts the segment to ]start_time, end_time[, which must be inside its support"""
        start_time = to_rational(start_time)
        end_time = to_rational(end_time)
        if(start_time < self._start_time or end_time > self._end_time):
            raise DomainMismatch("Cannot cut ]%s, %s[ to ]%s, %s[" % (self._start_time, self._end_time, start_time, end_time))
        if(start_time == self._start_time and end_time == self._end_time):
            return self
        return Segment(start_time, end_time, self.right_limit_at(start_time), self.slope)

    def delay(self, delay: RationalLike) -> 'Segment':
        delay = to_rational(delay)
        return Segment(self._start_time + delay, self._end_time + delay, self.right_limit_at_start_time, self.slope)

    def vertical_shift(self, shift: RationalLike) -> 'Segment':
        return Segment(self._start_time, self._end_time, self.right_limit_at_start_time + to_rational(shift), self.slope)

    def scale(self, scaling: RationalLike) -> 'Segment':
        scaling = to_rational(scaling)
        if(self.is_infinite()):
            return Segment(self._start_time, self._end_time, self.right_limit_at_start_time * scaling, 0)
        return Segment(self._start_time, self._end_time, self.right_limit_at_start_time * scaling, self.slope * scaling)

    def inverse(self) -> 'Segment':
        if(not self.slope > 0 or self.is_infinite()):
            raise DomainMismatch("Only finite increasing segments can be inverted")
        return Segment(self.right_limit_at_start_time, self.left_limit_at_end_time, self._start_time, 1 / self.slope)

    def __neg__(self) -> 'Segment':
        return Segment(self._start_time, self._end_time, -self.right_limit_at_start_time, -self.slope)

    def __eq__(self, o: object) -> bool:
        if(not isinstance(o, Segment)):
            return False
        return (self._start_time == o._start_time and self._end_time == o._end_time
                and self.right_limit_at_start_time == o.right_limit_at_start_time and self.slope == o.slope)

    def __hash__(self) -> int:
        return hash(("Segment", self._start_time, self._end_time, self.right_limit_at_start_time, self.slope))

    def __repr__(self) -> str:
        return "Segment(%s, %s, %s, %s)" % (self._start_time, self._end_time, self.right_limit_at_start_time, self.slope)


#ELEMENT OPERATORS

def addition(a: Element, b: Element) -> Element:
    """ Sum of two elements with the same support

    Raises:
        DomainMismatch: if the supports differ
    """
    if(isinstance(a, Point) and isinstance(b, Point)):
        if(a.time != b.time):
            raise DomainMismatch("Cannot add points at %s and %s" % (a.time, b.time))
        return Point(a.time, a.value + b.value)
    if(isinstance(a, Segment) and isinstance(b, Segment)):
        if(a.start_time != b.start_time or a.end_time != b.end_time):
            raise DomainMismatch("Cannot add segments with different supports")
        if(a.is_infinite() or b.is_infinite()):
            return Segment(a.start_time, a.end_time, a.right_limit_at_start_time + b.right_limit_at_start_time, 0)
        return Segment(a.start_time, a.end_time, a.right_limit_at_start_time + b.right_limit_at_start_time, a.slope + b.slope)
    raise DomainMismatch("Cannot add a point and a segment")


def convolution(a: Element, b: Element, cut_end: Optional[Rational] = None) -> List[Element]:
    """
    Min-plus convolution of two elements. Returns 1 to 3 elements.

    Args:
        a (Element): first operand
        b (Element): second operand
        cut_end (Rational, optional): the elements (or parts) at or after cut_end are dropped

    Returns:
        List[Element]: the elements of the convolution, in time order
    """
    if(isinstance(a, Point) and isinstance(b, Point)):
        result = [Point(a.time + b.time, a.value + b.value)]
    elif(isinstance(a, Point)):
        result = [_convolution_segment_point(b, a)]
    elif(isinstance(b, Point)):
        result = [_convolution_segment_point(a, b)]
    else:
        result = _convolution_segment_segment(a, b)
    if(cut_end is None or cut_end.is_plus_infinite()):
        return result
    return _cut_elements_before(result, cut_end)


def _convolution_segment_point(segment: Segment, point: Point) -> Segment:
    return Segment(
        segment.start_time + point.time,
        segment.end_time + point.time,
        segment.right_limit_at_start_time + point.value,
        segment.slope)


def _convolution_segment_segment(a: Segment, b: Segment) -> List[Element]:
    if(a.is_infinite() or b.is_infinite()):
        return [Segment(a.start_time + b.start_time, a.end_time + b.end_time,
                        a.right_limit_at_start_time + b.right_limit_at_start_time, 0)]
    if(a.slope == b.slope):
        return [Segment(a.start_time + b.start_time, a.end_time + b.end_time,
                        a.right_limit_at_start_time + b.right_limit_at_start_time, a.slope)]
    if(a.slope < b.slope):
        minSlope, maxSlope = a, b
    else:
        minSlope, maxSlope = b, a
    startTime = minSlope.start_time + maxSlope.start_time
    middleTime = startTime + minSlope.length
    middleValue = minSlope.left_limit_at_end_time + maxSlope.right_limit_at_start_time
    return [
        Segment(startTime, middleTime, minSlope.right_limit_at_start_time + maxSlope.right_limit_at_start_time, minSlope.slope),
        Point(middleTime, middleValue),
        Segment(middleTime, minSlope.end_time + maxSlope.end_time, middleValue, maxSlope.slope)
    ]


def _cut_elements_before(elements: List[Element], cut_end: Rational) -> List[Element]:
    result = list()
    for e in elements:
        if(e.start_time >= cut_end):
            break
        if(isinstance(e, Segment) and e.end_time > cut_end):
            result.append(e.cut(e.start_time, cut_end))
            break
        result.append(e)
    return result


def deconvolution(a: Element, b: Element) -> List[Element]:
    """
    Min-plus deconvolution of two finite elements, that is sup_u { a(t + u) - b(u) }

    Raises:
        UndefinedOperation: if an operand is infinite
    """
    if(a.is_infinite() or b.is_infinite()):
        raise UndefinedOperation(a, "deconvolution", b, string="The deconvolution is only defined for finite elements")
    if(isinstance(a, Point) and isinstance(b, Point)):
        return [Point(a.time - b.time, a.value - b.value)]
    if(isinstance(a, Point)):
        return [Segment(
            a.time - b.end_time,
            a.time - b.start_time,
            a.value - b.left_limit_at_end_time,
            b.slope)]
    if(isinstance(b, Point)):
        if(b.is_origin()):
            return [a]
        return [Segment(a.start_time - b.time, a.end_time - b.time, a.right_limit_at_start_time - b.value, a.slope)]
    if(a.slope < b.slope):
        minSlope, maxSlope = a, b
    else:
        minSlope, maxSlope = b, a
    startTime = a.start_time - b.end_time
    middleTime = startTime + maxSlope.length
    endTime = a.end_time - b.start_time
    initValue = a.right_limit_at_start_time - b.left_limit_at_end_time
    middleValue = initValue + maxSlope.slope * maxSlope.length
    return [
        Segment(startTime, middleTime, initValue, maxSlope.slope),
        Point(middleTime, middleValue),
        Segment(middleTime, endTime, middleValue, minSlope.slope)
    ]


def minimum(a: Element, b: Element) -> List[Element]:
    """ Minimum of two elements over the overlap of their supports

    Raises:
        DomainMismatch: if the supports do not overlap
    """
    if(isinstance(a, Point) or isinstance(b, Point)):
        point, other = (a, b) if isinstance(a, Point) else (b, a)
        return [Point(point.time, min(point.value, other.value_at(point.time)))]
    start = max(a.start_time, b.start_time)
    end = min(a.end_time, b.end_time)
    if(not start < end):
        raise DomainMismatch("The segments do not overlap")
    return lower_envelope_of_lines([a, b], start, end)


def maximum(a: Element, b: Element) -> List[Element]:
    return [-e for e in minimum(-a, -b)]


def lower_envelope_of_lines(segments: List[Segment], start: Rational, end: Rational) -> List[Element]:
    """
    Lower envelope, over ]start, end[, of segments that are all defined over the whole interval.

    Returns:
        List[Element]: alternating segments and intersection points covering ]start, end[
    """
    if(any(s.is_minus_infinite() for s in segments)):
        return [Segment.minus_infinite(start, end)]
    lines = set((s.right_limit_at(start), s.slope) for s in segments if s.is_finite())
    if(not lines):
        return [Segment.plus_infinite(start, end)]
    currentValue, currentSlope = min(lines)
    if(len(lines) == 1):
        return [Segment(start, end, currentValue, currentSlope)]
    result = list()
    time = start
    while True:
        #(value at start, slope) of the next line taking over, and when
        crossingTime = None
        nextLine = None
        for (value, slope) in lines:
            if(slope >= currentSlope):
                continue
            t = start + (value - currentValue) / (currentSlope - slope)
            if(not time < t < end):
                continue
            if(crossingTime is None or t < crossingTime or (t == crossingTime and slope < nextLine[1])):
                crossingTime = t
                nextLine = (value, slope)
        valueAtTime = currentValue + currentSlope * (time - start)
        if(crossingTime is None):
            result.append(Segment(time, end, valueAtTime, currentSlope))
            return result
        result.append(Segment(time, crossingTime, valueAtTime, currentSlope))
        result.append(Point(crossingTime, currentValue + currentSlope * (crossingTime - start)))
        time = crossingTime
        currentValue, currentSlope = nextLine
