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
This module contains the curves known to be sub-additive (resp. super-additive), and the optimized
convolution between sub-additive curves.

The convolution of two regular sub-additive curves f and g tries, in this order:
    - order shortcut: if f <= g, f * g = f
    - partial skip: if the minimum ends up following only one of the curves, only the transient part of the other one is convolved
    - colored convolution: only the pairs of elements of min(f, g) that come from different curves are convolved
    - the generic algorithm
"""

import logging
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

from minplus import curves
from minplus import elements as el
from minplus import parallelUtility
from minplus import sequences as seq
from minplus.computationSettings import ComputationSettings, resolve
from minplus.curves import Curve
from minplus.elements import Element, Point
from minplus.exceptions import InvalidConstruction
from minplus.rational import ZERO, Rational, RationalLike, lcm
from minplus.sequences import Sequence

logger = logging.getLogger("SAC")


class _Color(Enum):
    A = 0       #the element belongs to the first curve
    B = 1       #the element belongs to the second curve
    BOTH = 2    #the element is made of pieces of both curves


def _as_plain_curve(curve: Curve) -> Curve:
    return Curve(curve.base_sequence, curve.pseudo_period_start, curve.pseudo_period_length, curve.pseudo_period_height)


class SubAdditiveCurve(Curve):
    '''
    A curve f with f(s + t) <= f(s) + f(t)

    The property is checked at construction unless do_test is False, in which case the caller guarantees it.
    '''
    _TYPE_TAG = "subAdditiveCurve"

    def __init__(self, base_or_curve: Union[Sequence, Curve], pseudo_period_start: Optional[RationalLike] = None,
                 pseudo_period_length: Optional[RationalLike] = None, pseudo_period_height: Optional[RationalLike] = None,
                 do_test: bool = True) -> None:
        """
        Args:
            base_or_curve (Union[Sequence, Curve]): either a curve to copy, or the base sequence
            pseudo_period_start (RationalLike, optional): T, when a base sequence is given
            pseudo_period_length (RationalLike, optional): d, when a base sequence is given
            pseudo_period_height (RationalLike, optional): c, when a base sequence is given
            do_test (bool, optional): if True, checks that the curve is regular sub-additive. Defaults to True.

        Raises:
            InvalidConstruction: if do_test is True and the curve is not sub-additive with f(0) = 0
        """
        if(isinstance(base_or_curve, Curve)):
            self._set(base_or_curve.base_sequence, base_or_curve.pseudo_period_start,
                      base_or_curve.pseudo_period_length, base_or_curve.pseudo_period_height)
        else:
            super().__init__(base_or_curve, pseudo_period_start, pseudo_period_length, pseudo_period_height)
        if(do_test and not self.is_regular_sub_additive_check()):
            raise InvalidConstruction("The curve constructed is not actually sub-additive with f(0) = 0")

    def is_sub_additive(self) -> bool:
        return True

    def is_sub_additive_check(self) -> bool:
        """Tests the property instead of trusting the type"""
        return _as_plain_curve(self).is_sub_additive()

    def is_regular_sub_additive_check(self) -> bool:
        return self.is_sub_additive_check() and self.value_at(0) == 0

    def sub_additive_closure(self, settings: Optional[ComputationSettings] = None) -> 'SubAdditiveCurve':
        return self

    def convolution(self, curve: Curve, settings: Optional[ComputationSettings] = None) -> Curve:
        """
        Min-plus convolution. The result of two sub-additive curves is sub-additive.
        """
        settings = resolve(settings)
        if(isinstance(curve, SubAdditiveCurve)):
            if(settings.use_sub_additive_convolution_optimizations):
                return _sub_additive_convolution(self, curve, settings)
            return SubAdditiveCurve(Curve.convolution(self, curve, settings), do_test=False)
        return Curve.convolution(self, curve, settings)

    def estimate_convolution(self, curve: Curve, count_elements: bool = False, settings: Optional[ComputationSettings] = None) -> int:
        settings = resolve(settings)
        if(settings.use_sub_additive_convolution_optimizations and isinstance(curve, SubAdditiveCurve)):
            return _estimate_sub_additive_convolution(self, curve, count_elements, settings)
        return Curve.estimate_convolution(self, curve, count_elements, settings)


class SuperAdditiveCurve(Curve):
    '''
    A curve f with f(s + t) >= f(s) + f(t)

    The property is checked at construction unless do_test is False, in which case the caller guarantees it.
    '''
    _TYPE_TAG = "superAdditiveCurve"

    def __init__(self, base_or_curve: Union[Sequence, Curve], pseudo_period_start: Optional[RationalLike] = None,
                 pseudo_period_length: Optional[RationalLike] = None, pseudo_period_height: Optional[RationalLike] = None,
                 do_test: bool = True) -> None:
        """
        Raises:
            InvalidConstruction: if do_test is True and the curve is not super-additive
        """
        if(isinstance(base_or_curve, Curve)):
            self._set(base_or_curve.base_sequence, base_or_curve.pseudo_period_start,
                      base_or_curve.pseudo_period_length, base_or_curve.pseudo_period_height)
        else:
            super().__init__(base_or_curve, pseudo_period_start, pseudo_period_length, pseudo_period_height)
        if(do_test and not self.is_super_additive_check()):
            raise InvalidConstruction("The curve constructed is not actually super-additive")

    def is_super_additive(self) -> bool:
        return True

    def is_super_additive_check(self) -> bool:
        return _as_plain_curve(self).is_super_additive()

    def super_additive_closure(self, settings: Optional[ComputationSettings] = None) -> 'SuperAdditiveCurve':
        return self


#OPTIMIZED CONVOLUTION

def _minimum_and_order(a: SubAdditiveCurve, b: SubAdditiveCurve, settings: ComputationSettings) -> Tuple[Curve, bool, bool]:
    #a stable T is needed for the partial skip
    minimum = curves.minimum(a, b, settings.with_changes(auto_optimize=False)).period_factorization()
    return minimum, curves.equivalent(a, minimum, settings), curves.equivalent(b, minimum, settings)


def _can_skip_partially(a: SubAdditiveCurve, b: SubAdditiveCurve, minimum: Curve) -> bool:
    return (a.pseudo_period_average_slope != b.pseudo_period_average_slope
            or a.match(minimum.pseudo_periodic_sequence)
            or b.match(minimum.pseudo_periodic_sequence))


def _partial_skip_operands(a: SubAdditiveCurve, b: SubAdditiveCurve, minimum: Curve) -> Tuple[SubAdditiveCurve, SubAdditiveCurve, Optional[Curve]]:
    """
    Returns the curve that is ultimately the minimum, the other one, and the transient part of the other one.
    The transient part is None if the minimum has no transient part.
    """
    slopeA, slopeB = a.pseudo_period_average_slope, b.pseudo_period_average_slope
    if(slopeA < slopeB):
        lower, higher = a, b
    elif(slopeA > slopeB):
        lower, higher = b, a
    elif(a.match(minimum.pseudo_periodic_sequence)):
        lower, higher = a, b
    else:
        lower, higher = b, a
    T = minimum.pseudo_period_start
    if(T == 0):
        return lower, higher, None
    higherTransient = Curve(higher.cut(0, T), T, lower.pseudo_period_length, 0, is_partial_curve=True)
    return lower, higher, higherTransient


def _can_color(a: SubAdditiveCurve, b: SubAdditiveCurve, settings: ComputationSettings) -> bool:
    return (a.value_at(0) == 0 and b.value_at(0) == 0
            and (settings.use_minimum_self_convolution_for_curves_with_infinities or (a.is_finite() and b.is_finite())))


def _sub_additive_convolution(a: SubAdditiveCurve, b: SubAdditiveCurve, settings: ComputationSettings) -> SubAdditiveCurve:
    minimum, isALower, isBLower = _minimum_and_order(a, b, settings)
    if(isALower or isBLower):
        logger.debug("Sub-additive convolution: complete skip")
        return a if isALower else b

    if(_can_skip_partially(a, b, minimum)):
        lower, higher, higherTransient = _partial_skip_operands(a, b, minimum)
        if(higherTransient is None):
            logger.debug("Sub-additive convolution: complete skip, the minimum has no transient part")
            return lower
        generic = settings.with_changes(use_sub_additive_convolution_optimizations=False)
        if(curves.estimate_convolution(lower, higherTransient, False, settings) <= curves.estimate_convolution(lower, higher, False, generic)):
            logger.debug("Sub-additive convolution: partial skip")
            return SubAdditiveCurve(curves.minimum(curves.convolution(lower, higherTransient, settings), lower, settings), do_test=False)
        logger.debug("Sub-additive convolution: partial skip is more expensive than the generic algorithm")
        return SubAdditiveCurve(Curve.convolution(a, b, settings), do_test=False)

    if(_can_color(a, b, settings)):
        return _colored_convolution(a, b, minimum.transient_reduction(), settings)

    logger.debug("Sub-additive convolution: no optimization applies")
    return SubAdditiveCurve(Curve.convolution(a, b, settings), do_test=False)


def _colored_horizon(a: Curve, b: Curve, minimum: Curve) -> Tuple[Rational, Rational, Rational]:
    d = min(minimum.pseudo_period_length, lcm(a.pseudo_period_length, b.pseudo_period_length))
    T = min(2 * minimum.pseudo_period_start, a.pseudo_period_start + b.pseudo_period_start) + d
    return T, d, d * minimum.pseudo_period_average_slope


def _colors(a: Curve, b: Curve, minimumCut: Sequence) -> List[_Color]:
    colors = list()
    for e in minimumCut.elements:
        if(a.match(e)):
            colors.append(_Color.A)
        elif(b.match(e)):
            colors.append(_Color.B)
        else:
            colors.append(_Color.BOTH)
    return colors


def _colored_pairs(minimumCut: Sequence, colors: List[_Color], cutEnd: Rational) -> List[Tuple[Element, Element]]:
    """
    The pairs of elements to convolve: elements of different colors, each pair taken once, plus the
    pairs with the origin which give the minimum itself
    """
    items = minimumCut.elements
    pairs = list()
    for ia, ea in enumerate(items):
        if(not ea.is_finite()):
            continue
        for ib, eb in enumerate(items):
            if(colors[ia] == colors[ib] and colors[ib] != _Color.BOTH):
                continue
            if(ea.start_time < eb.start_time and ea.start_time + eb.start_time < cutEnd and eb.is_finite()):
                pairs.append((ea, eb))
    origin = Point.origin()
    pairs.extend((origin, e) for e in items)
    return pairs


def _colored_sequence_convolution(pairs: List[Tuple[Element, Element]], cutEnd: Rational, settings: ComputationSettings) -> Sequence:
    def convolve(pair):
        return el.convolution(pair[0], pair[1], cutEnd)

    if(settings.use_convolution_partitioning and len(pairs) > settings.convolution_partitioning_threshold):
        logger.debug("Partitioned colored convolution of %d pairs" % len(pairs))
        partials = list()
        size = settings.convolution_partitioning_threshold
        for chunkStart in range(0, len(pairs), size):
            chunk = pairs[chunkStart:chunkStart + size]
            pieces = parallelUtility.fork_join_map(convolve, chunk, settings.parallel_workers, settings.use_parallel_convolution)
            partials.extend(seq.fill(seq.lower_envelope(e for piece in pieces for e in piece), ZERO, cutEnd))
        return Sequence(seq.lower_envelope(partials), fill_from=ZERO, fill_to=cutEnd)

    if(settings.use_parallel_convolution and len(pairs) > settings.convolution_parallelization_threshold):
        logger.debug("Parallel colored convolution of %d pairs" % len(pairs))
        pieces = parallelUtility.fork_join_map(convolve, pairs, settings.parallel_workers)
    else:
        pieces = [convolve(pair) for pair in pairs]
    return Sequence(seq.lower_envelope(e for piece in pieces for e in piece), fill_from=ZERO, fill_to=cutEnd)


def _colored_convolution(a: SubAdditiveCurve, b: SubAdditiveCurve, minimum: Curve, settings: ComputationSettings) -> SubAdditiveCurve:
    """
    Convolution of two regular sub-additive curves as the self-convolution of their minimum,
    skipping the pairs of elements that belong to the same curve
    """
    T, d, c = _colored_horizon(a, b, minimum)
    cutEnd = T + d
    logger.debug("Colored convolution: T_min %s d_min %s extended to T %s d %s"
                 % (minimum.pseudo_period_start, minimum.pseudo_period_length, T, d))
    minimumCut = minimum.cut(0, cutEnd)
    pairs = _colored_pairs(minimumCut, _colors(a, b, minimumCut), cutEnd)
    convolved = _colored_sequence_convolution(pairs, cutEnd, settings)
    result = Curve(convolved, T, d, c)
    if(settings.use_representation_minimization):
        result = result.optimize()
    return SubAdditiveCurve(result, do_test=False)


def _estimate_sub_additive_convolution(a: SubAdditiveCurve, b: SubAdditiveCurve, count_elements: bool, settings: ComputationSettings) -> int:
    generic = settings.with_changes(use_sub_additive_convolution_optimizations=False)
    minimum, isALower, isBLower = _minimum_and_order(a, b, settings)
    if(isALower or isBLower):
        return 0

    if(_can_skip_partially(a, b, minimum)):
        lower, higher, higherTransient = _partial_skip_operands(a, b, minimum)
        if(higherTransient is None):
            return 0
        return min(curves.estimate_convolution(lower, higherTransient, count_elements, settings),
                   Curve.estimate_convolution(a, b, count_elements, generic))

    if(_can_color(a, b, settings)):
        reduced = minimum.transient_reduction()
        T, d, _ = _colored_horizon(a, b, reduced)
        cutEnd = T + d
        minimumCut = reduced.cut(0, cutEnd)
        pairs = _colored_pairs(minimumCut, _colors(a, b, minimumCut), cutEnd)
        if(count_elements):
            return sum(len(el.convolution(ea, eb, cutEnd)) for ea, eb in pairs)
        return len(pairs)

    return Curve.estimate_convolution(a, b, count_elements, generic)


def list_convolution(items: Iterable[SubAdditiveCurve], settings: Optional[ComputationSettings] = None) -> SubAdditiveCurve:
    """
    Convolution of a list of sub-additive curves.
    The curves are convolved starting from the likely lowest one, so that the order shortcut applies more often.

    Raises:
        ValueError: if the list is empty
    """
    settings = resolve(settings)
    ordered = sorted(items, key=lambda c: (c.right_limit_at(0), c.pseudo_period_average_slope), reverse=True)
    if(not ordered):
        raise ValueError("The list of curves is empty")
    current = ordered[-1]
    for i, curve in enumerate(ordered[:-1]):
        logger.debug("List convolution #%d, current size %d" % (i + 1, len(current.base_sequence)))
        current = current.convolution(curve, settings)
    return current
