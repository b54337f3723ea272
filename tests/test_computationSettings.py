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

import dataclasses

import pytest

from minplus.computationSettings import ComputationSettings, resolve


def test_default_is_shared():
    assert ComputationSettings.default() is ComputationSettings.default()
    assert resolve(None) is ComputationSettings.default()


def test_with_changes_returns_a_copy(settings):
    changed = settings.with_changes(parallel_workers=8)
    assert changed.parallel_workers == 8
    assert settings.parallel_workers == 4
    assert resolve(changed) is changed


def test_settings_are_immutable(settings):
    with pytest.raises(dataclasses.FrozenInstanceError):
        settings.auto_optimize = False


def test_without_optimizations(unoptimized):
    assert not unoptimized.auto_optimize
    assert not unoptimized.use_sub_additive_convolution_optimizations
    assert not unoptimized.single_pass_convolution
    assert not unoptimized.use_parallel_convolution
    assert not unoptimized.use_parallel_closures
    assert unoptimized.use_convolution_partitioning
