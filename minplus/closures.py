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
This module contains the sub-additive closures of elements and curves.

The closure of a curve is the convolution of the closures of its elements: each transient element
is closed alone, each pseudo-periodic element is closed together with its copies (d, c) later.
The element closures follow the case analysis of Bouillard and Thierry, "An algorithmic toolbox
for network calculus" (2008), with the boundaries of the cases kept exactly.
"""

import logging
import math
from typing import List, Optional

from minplus import curves
from minplus import parallelUtility
from minplus import sequences as seq
from minplus import subAdditive
from minplus.computationSettings import ComputationSettings, resolve
from minplus.curves import Curve
from minplus.elements import Element, Point, Segment
from minplus.rational import Rational, RationalLike, gcd, lcm, to_rational
from minplus.sequences import Sequence
from minplus.subAdditive import SubAdditiveCurve

logger = logging.getLogger("CLO")


def sub_additive_closure(curve: Curve, settings: Optional[ComputationSettings] = None) -> SubAdditiveCurve:
    """
    Computes the sub-additive closure of a curve, inf_{n >= 0} of the n-th self-convolution,
    the 0-th being 0 at the origin and +inf after.

    Args:
        curve (Curve): the curve
        settings (ComputationSettings, optional): the settings

    Returns:
        SubAdditiveCurve: the closure
    """
    settings = resolve(settings)
    if(curve.value_at(0) < 0):
        logger.debug("Negative value at the origin, the closure is -inf")
        return SubAdditiveCurve(Curve.minus_infinite(), do_test=False)

    d, c = curve.pseudo_period_length, curve.pseudo_period_height
    #+inf elements have the neutral element of the convolution as closure
    tasks = [(e, None) for e in curve.transient_elements if not e.is_plus_infinite()]
    tasks.extend((e, (d, c)) for e in curve.pseudo_periodic_elements if not e.is_plus_infinite())
    if(not tasks):
        return SubAdditiveCurve(Curve._delta_zero(), do_test=False)
    logger.debug("Closure of %d transient and %d pseudo-periodic elements"
                 % (len(curve.transient_elements), len(curve.pseudo_periodic_elements)))

    def closeElement(task):
        e, period = task
        if(period is None or period[1].is_infinite()):
            return element_closure(e, settings=settings)
        return element_closure(e, period[0], period[1], settings)

    closures = parallelUtility.fork_join_map(closeElement, tasks, settings.parallel_workers,
                                             settings.use_parallel_closures and len(tasks) > 1)
    if(settings.use_sub_additive_convolution_optimizations):
        return subAdditive.list_convolution(closures, settings)
    return SubAdditiveCurve(curves.list_convolution(closures, settings), do_test=False)


def element_closure(e: Element, pseudo_period_length: Optional[RationalLike] = None,
                    pseudo_period_height: Optional[RationalLike] = None,
                    settings: Optional[ComputationSettings] = None) -> SubAdditiveCurve:
    """
    Closure of a single element, or of an element with all its copies (k*d, k*c) later

    Raises:
        ValueError: if the period is not strictly positive
    """
    settings = resolve(settings)
    if(pseudo_period_length is None):
        if(isinstance(e, Point)):
            return point_closure(e)
        return segment_closure(e, settings)
    d, c = to_rational(pseudo_period_length), to_rational(pseudo_period_height)
    if(d <= 0):
        raise ValueError("Period must be > 0")
    if(isinstance(e, Point)):
        return periodic_point_closure(e, d, c, settings)
    return periodic_segment_closure(e, d, c, settings)


def _minus_infinite_after_origin() -> SubAdditiveCurve:
    return SubAdditiveCurve(
        Sequence([Point.origin(), Segment.minus_infinite(0, 1), Point.minus_infinite(1), Segment.minus_infinite(1, 2)]),
        1, 1, 0, do_test=False)


def _minimized(closure: Curve, settings: ComputationSettings) -> SubAdditiveCurve:
    if(settings.use_representation_minimization):
        return SubAdditiveCurve(closure.optimize(), do_test=False)
    return SubAdditiveCurve(closure, do_test=False)


#POINTS

def point_closure(p: Point) -> SubAdditiveCurve:
    """Closure of a point: the points k*t -> k*v"""
    if(p.time == 0):
        if(p.value < 0):
            return SubAdditiveCurve(Curve.minus_infinite(), do_test=False)
        return SubAdditiveCurve(Curve._delta_zero(), do_test=False)
    base = Sequence([Point.origin()], fill_from=0, fill_to=p.time)
    return SubAdditiveCurve(base, 0, p.time, p.value, do_test=False)


def periodic_point_closure(p: Point, d: Rational, c: Rational, settings: ComputationSettings) -> SubAdditiveCurve:
    if(p.time == 0):
        if(p.value < 0):
            return SubAdditiveCurve(Curve.minus_infinite(), do_test=False)
        base = Sequence([Point.origin(), Point(d, p.value + c)], fill_from=0, fill_to=2 * d)
        return SubAdditiveCurve(base, d, d, c, do_test=False)
    pointSlope = p.value / p.time
    iterationSlope = c / d
    if(pointSlope > iterationSlope):
        closure = _periodic_point_closure_type_a(p, d, c, settings)
    elif(pointSlope < iterationSlope):
        closure = _periodic_point_closure_type_b(p, d, c, settings)
    else:
        closure = _periodic_point_closure_type_c(p, d)
    return _minimized(closure, settings)


def _periodic_point_closure_type_a(p: Point, d: Rational, c: Rational, settings: ComputationSettings) -> Curve:
    beta = math.floor(d / gcd(d, p.time))
    logger.debug("Periodic point closure type A, beta %d" % beta)
    iterated = list()
    for k in range(1, beta + 1):
        pointK = Point(k * p.time, k * p.value)
        base = Sequence([Point.origin(), pointK], fill_from=0, fill_to=pointK.time + d)
        iterated.append(Curve(base, pointK.time, d, c))
    return curves.list_minimum(iterated, settings)


def _periodic_point_closure_type_b(p: Point, d: Rational, c: Rational, settings: ComputationSettings) -> Curve:
    alpha = math.floor(p.time / gcd(d, p.time)) - 1
    logger.debug("Periodic point closure type B, alpha %d" % alpha)
    iterated = list()
    for i in range(alpha + 1):
        pointI = Point(p.time + i * d, p.value + i * c)
        base = Sequence([Point.origin(), pointI], fill_from=0, fill_to=pointI.time + p.time)
        iterated.append(Curve(base, pointI.time, p.time, p.value))
    return curves.list_minimum(iterated, settings)


def _periodic_point_closure_type_c(p: Point, d: Rational) -> Curve:
    slope = p.value / p.time
    common = gcd(p.time, d)
    #the Frobenius number of (t, d), shifted by t
    periodStart = lcm(p.time, d) - p.time - d + common + p.time
    periodEnd = periodStart + common
    maxK = math.floor(periodEnd / p.time) - 1
    maxI = math.floor((periodEnd - p.time) / d)
    logger.debug("Periodic point closure type C, maxK %d maxI %d" % (maxK, maxI))
    times = set()
    for i in range(maxI + 1):
        for k in range(maxK + 1):
            time = p.time + k * p.time + i * d
            if(time < periodEnd):
                times.add(time)
    points = [Point.origin()] + [Point(t, slope * t) for t in sorted(times)]
    return Curve(Sequence(points, fill_from=0, fill_to=periodEnd), periodStart, common, slope * common)


#SEGMENTS

def segment_closure(s: Segment, settings: ComputationSettings) -> SubAdditiveCurve:
    """Closure of a segment alone"""
    if(s.start_time == 0):
        if(s.right_limit_at_start_time < 0):
            return _minus_infinite_after_origin()
        if(s.right_limit_at_start_time == 0 and s.slope == 0):
            return SubAdditiveCurve(Curve.zero(), do_test=False)
        if(s.right_limit_at_start_time > 0):
            return _minimized(_segment_closure_type_b(s), settings)
    if(s.start_slope <= s.end_slope):
        closure = _segment_closure_type_a(s)
    else:
        closure = _segment_closure_type_b(s)
    return _minimized(closure, settings)


def _segment_closure_type_a(s: Segment) -> Curve:
    k = math.floor(s.start_time / s.length)
    items: List[Element] = [Point.origin()]
    for i in range(1, k + 1):
        items.append(Segment(i * s.start_time, i * s.end_time, i * s.right_limit_at_start_time, s.slope))
    periodStart = (k + 1) * s.start_time
    periodEnd = (k + 2) * s.start_time
    startValue = (k + 1) * s.right_limit_at_start_time
    items.append(Point(periodStart, startValue))
    items.append(Segment(periodStart, periodEnd, startValue, s.slope))
    base = Sequence(seq.lower_envelope(items), fill_from=0, fill_to=periodEnd).cut(0, periodEnd)
    return Curve(base, periodStart, s.start_time, s.right_limit_at_start_time)


def _segment_closure_type_b(s: Segment) -> Curve:
    k = math.floor(s.start_time / s.length)
    items: List[Element] = [Point.origin()]
    for i in range(1, k + 2):
        items.append(Segment(i * s.start_time, i * s.end_time, i * s.right_limit_at_start_time, s.slope))
    periodStart = (k + 1) * s.end_time
    periodEnd = (k + 2) * s.end_time
    startValue = (k + 2) * s.left_limit_at_end_time - s.slope * s.end_time
    items.append(Point(periodStart, startValue))
    items.append(Segment(periodStart, periodEnd, startValue, s.slope))
    base = Sequence(seq.lower_envelope(items), fill_from=0, fill_to=periodEnd).cut(0, periodEnd)
    return Curve(base, periodStart, s.end_time, s.left_limit_at_end_time)


def periodic_segment_closure(s: Segment, d: Rational, c: Rational, settings: ComputationSettings) -> SubAdditiveCurve:
    """
    Closure of a segment with all its copies (k*d, k*c) later

    The four cases compare the slope of the iteration rho = c/d with the slope of the segment,
    then with the slope from the origin of its start (cases A, B) or of its end (cases C, D).
    """
    rho = c / d
    if(rho <= s.slope):
        if(s.start_slope < rho):
            closure = _periodic_segment_closure_type_a(s, d, c, settings)
        else:
            closure = _periodic_segment_closure_type_b(s, d, c, settings)
    else:
        if(s.end_slope < rho):
            closure = _periodic_segment_closure_type_c(s, d, c, settings)
        else:
            closure = _periodic_segment_closure_type_d(s, d, c, settings)
    return _minimized(closure, settings)


def _first_valid_k(isValid) -> int:
    k = 1
    while(not isValid(k)):
        k += 1
    return k


def _periodic_segment_closure_type_a(s: Segment, d: Rational, c: Rational, settings: ComputationSettings) -> Curve:
    k0 = math.floor(d / s.length) + 1

    def isValid(k):
        ratio = k * s.start_time / d
        return math.ceil(ratio) * (s.slope - c / d) <= ratio * (s.slope - s.right_limit_at_start_time / s.start_time)

    bigK = _first_valid_k(isValid)
    i0 = math.ceil(bigK * s.start_time / d)
    logger.debug("Periodic segment closure type A, k0 %d K %d i0 %d" % (k0, bigK, i0))
    terms = [_periodic_segment_convolution(s, d, c, k) for k in range(1, k0)]
    terms.extend(_transversal_view(s, d, c, i) for i in range(i0))
    return curves.list_minimum(terms, settings)


def _periodic_segment_closure_type_b(s: Segment, d: Rational, c: Rational, settings: ComputationSettings) -> Curve:
    k0 = math.floor(d / s.length) + 1

    def isValid(k):
        if(s.start_time == 0):
            return True
        ratio = k * s.start_time / d
        return math.floor(ratio) * (s.slope - c / d) >= ratio * (s.slope - s.start_slope)

    bigK = _first_valid_k(isValid)
    k1 = k0 + bigK
    logger.debug("Periodic segment closure type B, k0 %d K %d k1 %d" % (k0, bigK, k1))
    return curves.list_minimum([_periodic_segment_convolution(s, d, c, k) for k in range(1, k1)], settings)


def _periodic_segment_closure_type_c(s: Segment, d: Rational, c: Rational, settings: ComputationSettings) -> Curve:
    k0 = math.floor(d / s.length) + 1

    def isValid(k):
        ratio = k * s.end_time / d
        return math.floor(ratio) * (c / d - s.slope) >= ratio * (s.end_slope - s.slope)

    bigK = _first_valid_k(isValid)
    i0 = math.floor(bigK * s.end_time / d)
    logger.debug("Periodic segment closure type C, k0 %d K %d i0 %d" % (k0, bigK, i0))
    terms = [_periodic_segment_convolution(s, d, c, k) for k in range(1, k0)]
    #the 0-th transversal view is always included
    terms.extend(_transversal_view(s, d, c, i) for i in range(max(i0, 1)))
    return curves.list_minimum(terms, settings)


def _periodic_segment_closure_type_d(s: Segment, d: Rational, c: Rational, settings: ComputationSettings) -> Curve:
    k0 = math.floor(d / s.length) + 1

    def isValid(k):
        ratio = k * s.end_time / d
        return math.ceil(ratio) * (c / d - s.slope) <= ratio * (s.end_slope - s.slope)

    bigK = _first_valid_k(isValid)
    k1 = k0 + bigK
    logger.debug("Periodic segment closure type D, k0 %d K %d k1 %d" % (k0, bigK, k1))
    return curves.list_minimum([_periodic_segment_convolution(s, d, c, k) for k in range(1, k1)], settings)


def _periodic_segment_convolution(s: Segment, d: Rational, c: Rational, k: int) -> Curve:
    """
    The k-th self-convolution of the segment with its copies

    Raises:
        ValueError: if k is not strictly positive
    """
    if(k <= 0):
        raise ValueError("k must be > 0")
    startTime = k * s.start_time
    startValue = k * s.right_limit_at_start_time
    if(k * s.length <= d):
        #disjoint copies
        base = Sequence([Point.origin(), Segment(startTime, k * s.end_time, startValue, s.slope)],
                        fill_from=0, fill_to=startTime + d)
        return Curve(base, startTime, d, c)
    if(c / d <= s.slope):
        #overlapping copies, each above the previous one: the pseudo-period is written as left-closed
        midTime = startTime + d
        endTime = midTime + d
        base = Sequence([
            Point.origin(),
            Segment(startTime, midTime, startValue, s.slope),
            Point(midTime, startValue + s.slope * d),
            Segment(midTime, endTime, startValue + c, s.slope)
        ], fill_from=0, fill_to=endTime)
        return Curve(base, midTime, d, c)
    midTime = k * s.end_time
    midValue = startValue + c + s.slope * (k * s.length - d)
    endTime = midTime + d
    base = Sequence([
        Point.origin(),
        Segment(startTime, midTime, startValue, s.slope),
        Point(midTime, midValue),
        Segment(midTime, endTime, midValue, s.slope)
    ], fill_from=0, fill_to=endTime)
    return Curve(base, midTime, d, c, is_partial_curve=True)


def _transversal_view(s: Segment, d: Rational, c: Rational, i: int) -> Curve:
    """
    The minimum over k of the k-th convolutions involving i copies of the period

    Raises:
        ValueError: if called in case B, which has no transversal views
    """
    k0 = math.floor(d / s.length) + 1
    rho = c / d
    if(rho <= s.slope):
        if(not s.start_slope < rho):
            raise ValueError("Periodic segment closure of type B has no transversal views")
        if(s.start_time > d):
            return _transversal_view_type_a(s, d, c, i, k0)
        return _transversal_view_type_b(s, d, c, i, k0)
    if(i == 0):
        if(s.slope <= s.start_slope):
            return _transversal_view_type_c(s, k0)
        return _transversal_view_type_d(s, k0)
    if(s.end_time >= d):
        return _transversal_view_type_e(s, d, c, i, k0)
    if(s.end_slope <= s.slope):
        return _transversal_view_type_f(s, d, c, i, k0)
    return _transversal_view_type_g(s, d, c, i, k0)


def _transversal_view_type_a(s: Segment, d: Rational, c: Rational, i: int, k0: int) -> Curve:
    baseTime = k0 * s.start_time + i * d
    baseValue = k0 * s.right_limit_at_start_time + i * c
    base = Sequence([
        Point.origin(),
        Segment(baseTime, baseTime + d, baseValue, s.slope),
        Point(baseTime + d, baseValue + d * s.slope)
    ], fill_from=0, fill_to=baseTime + s.start_time)
    return Curve(base, baseTime, s.start_time, s.right_limit_at_start_time)


def _transversal_view_type_b(s: Segment, d: Rational, c: Rational, i: int, k0: int) -> Curve:
    baseTime = k0 * s.start_time + i * d
    baseValue = k0 * s.right_limit_at_start_time + i * c
    midTime = baseTime + s.start_time
    base = Sequence([
        Point.origin(),
        Segment(baseTime, midTime, baseValue, s.slope),
        Point(midTime, baseValue + s.start_time * s.slope),
        Segment(midTime, midTime + s.start_time, (k0 + 1) * s.right_limit_at_start_time + i * c, s.slope)
    ], fill_from=0, fill_to=midTime + s.start_time)
    return Curve(base, midTime, s.start_time, s.right_limit_at_start_time)


def _transversal_view_type_c(s: Segment, k0: int) -> Curve:
    bigK0 = max(math.floor(s.start_time / s.length) + 1, k0)
    items: List[Element] = [Point.origin()]
    for k in range(k0, bigK0 + 1):
        items.append(Segment(k * s.start_time, k * s.end_time, k * s.right_limit_at_start_time, s.slope))
    closingStart = bigK0 * s.end_time
    closingValue = (bigK0 + 1) * s.left_limit_at_end_time - s.slope * s.end_time
    items.append(Point(closingStart, closingValue))
    items.append(Segment(closingStart, (bigK0 + 1) * s.end_time, closingValue, s.slope))
    return Curve(Sequence(items, fill_from=0, fill_to=s.end_time), closingStart, s.end_time, s.left_limit_at_end_time)


def _transversal_view_type_d(s: Segment, k0: int) -> Curve:
    bigK0 = max(math.floor(s.start_time / s.length) + 1, k0)
    items: List[Element] = [Point.origin()]
    for k in range(k0, bigK0):
        items.append(Segment(k * s.start_time, k * s.end_time, k * s.right_limit_at_start_time, s.slope))
    closingStart = bigK0 * s.start_time
    closingValue = bigK0 * s.right_limit_at_start_time
    closingMid = (bigK0 + 1) * s.start_time
    closingEnd = (bigK0 + 2) * s.start_time
    items.append(Segment(closingStart, closingMid, closingValue, s.slope))
    items.append(Point(closingMid, closingValue + s.slope * s.start_time))
    items.append(Segment(closingMid, closingEnd, closingValue + s.right_limit_at_start_time, s.slope))
    return Curve(Sequence(items, fill_from=0, fill_to=closingEnd), closingMid, s.start_time, s.right_limit_at_start_time)


def _transversal_view_type_e(s: Segment, d: Rational, c: Rational, i: int, k0: int) -> Curve:
    baseTime = k0 * s.end_time + (i - 1) * d
    baseValue = k0 * s.left_limit_at_end_time + i * c - s.slope * d
    base = Sequence([
        Point.origin(),
        Point(baseTime, baseValue),
        Segment(baseTime, baseTime + d, baseValue, s.slope)
    ], fill_from=0, fill_to=baseTime + s.end_time)
    return Curve(base, baseTime, s.end_time, s.left_limit_at_end_time)


def _transversal_view_type_f(s: Segment, d: Rational, c: Rational, i: int, k0: int) -> Curve:
    baseTime = k0 * s.end_time + (i - 1) * d
    baseValue = k0 * s.left_limit_at_end_time + i * c - s.slope * d
    periodEnd = baseTime + s.end_time
    base = Sequence([
        Point.origin(),
        Point(baseTime, baseValue),
        Segment(baseTime, periodEnd, baseValue, s.slope)
    ], fill_from=0, fill_to=periodEnd)
    return Curve(base, baseTime, s.end_time, s.left_limit_at_end_time)


def _transversal_view_type_g(s: Segment, d: Rational, c: Rational, i: int, k0: int) -> Curve:
    startTime = k0 * s.end_time + (i - 1) * d
    startValue = k0 * s.left_limit_at_end_time + i * c - s.slope * d
    midTime = startTime + d
    midValue = (k0 + 1) * s.left_limit_at_end_time + i * c - s.slope * s.end_time
    periodEnd = midTime + s.end_time
    base = Sequence([
        Point.origin(),
        Point(startTime, startValue),
        Segment(startTime, midTime, startValue, s.slope),
        Point(midTime, midValue),
        Segment(midTime, periodEnd, midValue, s.slope)
    ], fill_from=0, fill_to=periodEnd)
    return Curve(base, midTime, s.end_time, s.left_limit_at_end_time)


