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
This module defines the settings that select the algorithms used by the curve operators.

The settings are an immutable value passed explicitly to every operator, there is no global state.
Use ComputationSettings.default() for the defaults, and with_changes() to derive a modified copy:

>>> s = ComputationSettings.default().with_changes(auto_optimize=False)
"""

import dataclasses
from typing import Optional


@dataclasses.dataclass(frozen=True)
class ComputationSettings:
    auto_optimize: bool = True                                          #Optimize the results of the generic curve operators
    use_representation_minimization: bool = True                        #Optimize the results of closures and sub-additive convolutions
    use_sub_additive_convolution_optimizations: bool = True             #Order/partial-skip/colored shortcuts for sub-additive curves
    use_minimum_self_convolution_for_curves_with_infinities: bool = True    #Allow the colored convolution on curves that are not finite
    use_composition_optimizations: bool = True                          #Period shortcuts for ultimately affine/constant compositions
    single_pass_convolution: bool = True                                #Single extension for curves with the same long-term slope
    use_parallel_convolution: bool = True                               #Spawn threads for the elementary convolutions
    convolution_parallelization_threshold: int = 2000                   #Minimum number of pairs before spawning threads
    use_convolution_partitioning: bool = True                           #Compute the lower envelope by chunks of pairs
    convolution_partitioning_threshold: int = 50000                     #Maximum number of pairs in a chunk
    use_parallel_list_operations: bool = True                           #Spawn threads for the folds of lists of curves
    use_parallel_closures: bool = True                                  #Spawn threads for the closures of the elements
    parallel_workers: int = 4                                           #Number of threads of a fork-join

    def with_changes(self, **kargs) -> "ComputationSettings":
        """Returns a copy of these settings with the given fields replaced"""
        return dataclasses.replace(self, **kargs)

    def without_optimizations(self) -> "ComputationSettings":
        """Returns a copy of these settings with all the algorithmic shortcuts disabled"""
        return self.with_changes(
            auto_optimize=False,
            use_representation_minimization=False,
            use_sub_additive_convolution_optimizations=False,
            use_composition_optimizations=False,
            single_pass_convolution=False)

    def without_parallelism(self) -> "ComputationSettings":
        return self.with_changes(
            use_parallel_convolution=False,
            use_parallel_list_operations=False,
            use_parallel_closures=False)

    @staticmethod
    def default() -> "ComputationSettings":
        return _DEFAULT


_DEFAULT = ComputationSettings()


def resolve(settings: Optional[ComputationSettings]) -> ComputationSettings:
    return _DEFAULT if settings is None else settings
