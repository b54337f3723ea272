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
This module contains the factories of the curves commonly used in network calculus.

They all build generic curves: the result of rate_latency() is a Curve like any other, and the
operators do not treat it differently. Values can be given as numbers or as strings ("5/2").
"""

from minplus.curves import Curve
from minplus.elements import Point, Segment
from minplus.rational import ONE, PLUS_INFINITY, RationalLike, to_rational
from minplus.sequences import Sequence

#Length of the pseudo-period of the ultimately affine curves, any value gives the same function
DEFAULT_PERIOD_LENGTH = ONE


def rate_latency(rate: RationalLike, latency: RationalLike) -> Curve:
    '''
    Rate-latency service curve: beta(t) = rate * max(0, t - latency)

    Raises:
        ValueError: if latency is negative

    >>> rate_latency(3, 3).value_at(5)
    Rational(6)
    '''
    rate, latency = to_rational(rate), to_rational(latency)
    if(latency < 0):
        raise ValueError("Latency must be >= 0, got %s" % latency)
    d = DEFAULT_PERIOD_LENGTH
    if(latency == 0):
        items = [Point.origin(), Segment(0, d, 0, rate)]
    else:
        items = [Point.origin(), Segment.zero(0, latency), Point.zero(latency), Segment(latency, latency + d, 0, rate)]
    return Curve(Sequence(items), latency, d, rate * d)


def token_bucket(sigma: RationalLike, rho: RationalLike) -> Curve:
    '''
    Token-bucket (sigma-rho) arrival curve: alpha(0) = 0, alpha(t) = sigma + rho * t for t > 0
    '''
    sigma, rho = to_rational(sigma), to_rational(rho)
    d = DEFAULT_PERIOD_LENGTH
    items = [
        Point.origin(),
        Segment(0, d, sigma, rho),
        Point(d, sigma + rho * d),
        Segment(d, 2 * d, sigma + rho * d, rho)
    ]
    return Curve(Sequence(items), d, d, rho * d)


def sigma_rho(sigma: RationalLike, rho: RationalLike) -> Curve:
    """Same as token_bucket"""
    return token_bucket(sigma, rho)


def delay_service(delay: RationalLike) -> Curve:
    '''
    Bounded-delay service curve: 0 over [0, delay], +inf after

    Raises:
        ValueError: if delay is negative
    '''
    delay = to_rational(delay)
    if(delay < 0):
        raise ValueError("Delay must be >= 0, got %s" % delay)
    if(delay == 0):
        return Curve._delta_zero()
    items = [
        Point.origin(),
        Segment.zero(0, delay),
        Point.zero(delay),
        Segment.plus_infinite(delay, 2 * delay),
        Point.plus_infinite(2 * delay),
        Segment.plus_infinite(2 * delay, 3 * delay)
    ]
    return Curve(Sequence(items), 2 * delay, delay, PLUS_INFINITY)


def constant(value: RationalLike) -> Curve:
    '''
    0 at the origin, value for t > 0. An infinite value gives +inf for t > 0.
    '''
    value = to_rational(value)
    d = DEFAULT_PERIOD_LENGTH
    if(value.is_infinite()):
        items = [Point.origin(), Segment.plus_infinite(0, d), Point.plus_infinite(d), Segment.plus_infinite(d, 2 * d)]
    else:
        items = [Point.origin(), Segment.constant(0, d, value), Point(d, value), Segment.constant(d, 2 * d, value)]
    return Curve(Sequence(items), d, d, 0)


def zero() -> Curve:
    return Curve.zero()


def plus_infinite() -> Curve:
    return Curve.plus_infinite()


def minus_infinite() -> Curve:
    return Curve.minus_infinite()


def staircase(height: RationalLike, width: RationalLike, latency: RationalLike = 0) -> Curve:
    '''
    Staircase: 0 over [0, latency], then height * ceil((t - latency) / width)

    Raises:
        ValueError: if height or latency is negative, or width is not positive
    '''
    height, width, latency = to_rational(height), to_rational(width), to_rational(latency)
    if(latency < 0):
        raise ValueError("Latency must be >= 0, got %s" % latency)
    if(height < 0):
        raise ValueError("Height must be >= 0, got %s" % height)
    if(width <= 0):
        raise ValueError("Width must be > 0, got %s" % width)
    if(height == 0):
        return Curve(Sequence.zero(0, width), 0, width, 0)
    curve = Curve(Sequence([Point.origin(), Segment.constant(0, width, height)]), 0, width, height)
    return curve.delay_by(latency)


def step(value: RationalLike, step_time: RationalLike) -> Curve:
    '''
    Step: 0 over [0, step_time], value after

    Raises:
        ValueError: if step_time is negative
    '''
    value, stepTime = to_rational(value), to_rational(step_time)
    if(stepTime < 0):
        raise ValueError("Step time must be >= 0, got %s" % stepTime)
    if(stepTime == 0):
        return constant(value)
    d = DEFAULT_PERIOD_LENGTH
    items = [
        Point.origin(),
        Segment.zero(0, stepTime),
        Point.zero(stepTime),
        Segment.constant(stepTime, stepTime + d, value),
        Point(stepTime + d, value),
        Segment.constant(stepTime + d, stepTime + 2 * d, value)
    ]
    return Curve(Sequence(items), stepTime + d, d, 0)


def affine(rate: RationalLike, value_at_zero: RationalLike = 0) -> Curve:
    """value_at_zero + rate * t, including at the origin"""
    rate, origin = to_rational(rate), to_rational(value_at_zero)
    return Curve(Sequence([Point(0, origin), Segment(0, 1, origin, rate)]), 0, 1, rate)

