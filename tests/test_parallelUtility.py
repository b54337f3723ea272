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

import operator

import pytest

from minplus.parallelUtility import fork_join_map, fork_join_reduce, split_in_chunks


def test_split_in_chunks():
    assert split_in_chunks(list(range(5)), 2) == [[0, 1, 2], [3, 4]]
    assert split_in_chunks(list(range(2)), 4) == [[0], [1]]


@pytest.mark.parametrize("doMultithread", [True, False])
def test_fork_join_map_keeps_order(doMultithread):
    assert fork_join_map(lambda x: 2 * x, range(10), 3, doMultithread) == [2 * x for x in range(10)]


def test_fork_join_map_of_nothing():
    assert fork_join_map(lambda x: x, [], 4) == []


def test_errors_are_raised_after_the_join():
    def failing(x):
        if(x == 7):
            raise KeyError(x)
        return x

    with pytest.raises(KeyError):
        fork_join_map(failing, range(10), 4)


def test_fork_join_reduce():
    assert fork_join_reduce(operator.add, range(1, 11), 4) == 55
    assert fork_join_reduce(min, [5, 3, 8], 2, doMultithread=False) == 3
    with pytest.raises(ValueError):
        fork_join_reduce(operator.add, [], 4)
