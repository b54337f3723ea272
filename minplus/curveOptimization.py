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
This module contains the representation minimization of curves.

The same function has infinitely many (T, d, c) representations. The three passes below,
applied in this order by optimize(), look for a shorter one:
    - period_factorization: the pseudo-periodic part is made of k repetitions of a smaller pattern
    - affine_normalization: an ultimately affine curve gets d = 1
    - transient_reduction: the end of the transient part already repeats the pseudo-periodic pattern

Each pass returns the curve itself when no improvement is found.
"""

import logging
from typing import Iterator

from minplus import sequences as seq
from minplus.curves import Curve
from minplus.elements import Point, Segment
from minplus.rational import ONE, Rational
from minplus.sequences import Sequence

logger = logging.getLogger("OPT")


def optimize(curve: Curve) -> Curve:
    """Applies all the minimization passes in sequence"""
    optimized = transient_reduction(affine_normalization(period_factorization(curve)))
    if(optimized is not curve):
        logger.debug("Optimization: T %s -> %s, d %s -> %s, elements %d -> %d"
                     % (curve.pseudo_period_start, optimized.pseudo_period_start,
                        curve.pseudo_period_length, optimized.pseudo_period_length,
                        len(curve.base_sequence), len(optimized.base_sequence)))
    return optimized


def prime_divisors(n: int) -> Iterator[int]:
    """Distinct prime divisors of n, by trial division"""
    p = 2
    while(p * p <= n):
        if(n % p == 0):
            while(n % p == 0):
                n //= p
            yield p
        p += 1 if p == 2 else 2
    if(n > 1):
        yield n


def _count_breakpoints(periodic: Sequence, periodHeight: Rational) -> int:
    """Number of breakpoints of one pseudo-period, counting the junction with the next one"""
    items = periodic.elements
    points = [e for e in items if isinstance(e, Point)]
    segments = [e for e in items if isinstance(e, Segment)]
    breakpoints = len(points) - 1
    first, last = segments[0], segments[-1]
    startingValue = points[0].value
    if(startingValue.is_infinite() or last.left_limit_at_end_time.is_infinite()):
        if(not (startingValue.is_infinite() and last.left_limit_at_end_time.is_infinite() and first.is_infinite())):
            breakpoints += 1
    elif(startingValue != first.right_limit_at_start_time
            or last.left_limit_at_end_time - startingValue != periodHeight
            or first.slope != last.slope):
        breakpoints += 1
    return breakpoints


def _is_repeated(periodic: Sequence, start: Rational, length: Rational, step: Rational, count: int) -> bool:
    for i in range(count - 1):
        left = periodic.cut(start + i * length, start + (i + 1) * length)
        shifted = left.delay(length, prepend_with_zero=False).vertical_shift(step, except_origin=False)
        right = periodic.cut(start + (i + 1) * length, start + (i + 2) * length)
        if(not seq.equivalent(shifted, right)):
            return False
    return True


def period_factorization(curve: Curve) -> Curve:
    """Looks for a pseudo-period made of repetitions of a simpler pattern, and keeps only one of them"""
    if(len(curve.pseudo_periodic_elements) <= 2 or curve.pseudo_period_height.is_infinite()):
        return curve
    T = curve.pseudo_period_start
    periodic = curve.pseudo_periodic_sequence
    length, height = curve.pseudo_period_length, curve.pseudo_period_height
    optimized = False
    anotherRound = True
    while(anotherRound):
        anotherRound = False
        breakpoints = _count_breakpoints(periodic, height)
        for prime in prime_divisors(breakpoints):
            if(_is_repeated(periodic, T, length / prime, height / prime, prime)):
                length /= prime
                height /= prime
                periodic = periodic.cut(T, T + length)
                optimized = anotherRound = True
                break
    if(not optimized):
        return curve
    logger.debug("Period factorization, d %s -> %s" % (curve.pseudo_period_length, length))
    return Curve(Sequence(curve.transient_elements + periodic.elements), T, length, height)


def affine_normalization(curve: Curve) -> Curve:
    """An ultimately affine curve is represented with d = 1"""
    if(curve.is_ultimately_affine() and curve.pseudo_period_length != 1):
        T = curve.pseudo_period_start
        return Curve(curve.cut(0, T + 1), T, ONE, curve.pseudo_period_average_slope)
    return curve


def _can_merge(left: Segment, point: Point, right: Segment) -> bool:
    return (left.left_limit_at_end_time == point.value == right.right_limit_at_start_time
            and left.slope == right.slope)


def transient_reduction(curve: Curve) -> Curve:
    """Moves T backwards for as long as the transient part already follows the pseudo-periodic pattern"""
    if(curve.is_ultimately_affine()):
        return _affine_transient_reduction(curve)

    height = curve.pseudo_period_height
    sequence = curve.base_sequence
    periodic = curve.pseudo_periodic_sequence
    periodStart = curve.pseudo_period_start
    periodLength = curve.pseudo_period_length
    optimized = False

    #by whole periods
    while(periodStart - periodLength > 0):
        candidate = sequence.cut(periodStart - periodLength, periodStart).optimize()
        if(not _can_shift(candidate, height)):
            break
        shifted = candidate.vertical_shift(height, except_origin=False).delay(periodLength, prepend_with_zero=False)
        if(not seq.equivalent(shifted, periodic)):
            break
        periodStart -= periodLength
        periodic = candidate
        optimized = True
    if(optimized):
        sequence = sequence.cut(0, periodStart + periodLength)

    #by segment and point
    while(len(sequence) >= 2):
        tail = Sequence(sequence.elements[-2:])
        if(not periodStart - tail.defined_until + tail.defined_from > 0):
            break
        candidate = sequence.cut(periodStart - (tail.defined_until - tail.defined_from), periodStart).optimize()
        if(not _can_shift(candidate, height)):
            break
        shifted = candidate.vertical_shift(height, except_origin=False).delay(periodLength, prepend_with_zero=False)
        if(not seq.equivalent(shifted, tail)):
            break
        periodStart -= tail.defined_until - tail.defined_from
        sequence = sequence.cut(0, periodStart + periodLength)
        optimized = True

    if(not optimized):
        return curve
    logger.debug("Transient reduction, T %s -> %s" % (curve.pseudo_period_start, periodStart))
    return Curve(sequence, periodStart, periodLength, height)


def _can_shift(candidate: Sequence, height: Rational) -> bool:
    if(height.is_finite()):
        return True
    #a finite value shifted by an infinite height would match the infinite tail
    if(height.is_plus_infinite()):
        return all(e.is_plus_infinite() for e in candidate.elements)
    return all(e.is_minus_infinite() for e in candidate.elements)


def _affine_transient_reduction(curve: Curve) -> Curve:
    """An affine tail is extended backwards over the segments that lie on the same line"""
    reduced = curve
    while(True):
        items = reduced.base_sequence.elements
        if(len(items) < 4):
            return reduced
        candidatePoint, candidateSegment, affinePoint, affineSegment = items[-4:]
        if(not (_can_merge(candidateSegment, affinePoint, affineSegment)
                and candidatePoint.value == candidateSegment.right_limit_at_start_time)):
            return reduced
        t = candidatePoint.time
        d = t / 10 if t > 0 else ONE
        reduced = Curve(reduced.cut(0, t + d), t, d, affineSegment.slope * d)
