#!/usr/bin/python3
#
# This file is part of minplus
# Copyright (c) 2023-2024 the minplus authors
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
Settings of the curve computations.

A ComputationSettings value is passed explicitly to every operation that needs it.
None of the toggles changes the function computed, only its representation and the
time needed to obtain it.
"""

import dataclasses
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ComputationSettings:
    """
    Immutable settings of the algorithms

    Attributes:
        use_parallelism (bool): dispatch the envelope buckets to worker threads when there are
            more than parallel_envelope_threshold of them
        parallel_envelope_threshold (int): number of buckets above which threads are used
        worker_count (int): number of worker threads of the envelope engine
        single_pass_convolution (bool): convolve curves with the same long-term slope in one
            pass over a common period instead of the four partial terms
        auto_optimize (bool): optimize the representation of every intermediate result
        use_convolution_isomorphism (bool): allow the computation of a convolution through the
            pseudo-inverses and the dual convolution when it is expected to be cheaper
        use_convolution_isospeed (bool): when both paths are valid, pick the one with the
            smallest resulting period
        use_convolution_super_isospeed (bool): also account for the resulting heights when
            comparing the two paths
        use_sub_additive_convolution_optimizations (bool): use f * f = f for sub-additive
            curves with f(0) = 0
        use_composition_optimizations (bool): use the ultimately affine/constant shortcuts
            in the composition
        closure_iteration_limit (int): number of self-convolution rounds attempted by the
            closures before switching to the element-wise algorithm
    """
    use_parallelism: bool = False
    parallel_envelope_threshold: int = 5000
    worker_count: int = 4
    single_pass_convolution: bool = True
    auto_optimize: bool = True
    use_convolution_isomorphism: bool = True
    use_convolution_isospeed: bool = True
    use_convolution_super_isospeed: bool = False
    use_sub_additive_convolution_optimizations: bool = True
    use_composition_optimizations: bool = True
    closure_iteration_limit: int = 4

    def __post_init__(self):
        if(self.worker_count < 1):
            raise ValueError("worker_count must be at least 1, got %d" % self.worker_count)
        if(self.parallel_envelope_threshold < 0):
            raise ValueError("parallel_envelope_threshold must be non-negative, got %d" % self.parallel_envelope_threshold)
        if(self.closure_iteration_limit < 0):
            raise ValueError("closure_iteration_limit must be non-negative, got %d" % self.closure_iteration_limit)

    @classmethod
    def default(cls) -> 'ComputationSettings':
        return cls()

    def replace(self, **changes) -> 'ComputationSettings':
        """Returns a copy of these settings where the given fields are overridden

        >>> ComputationSettings.default().replace(use_parallelism=True).use_parallelism
        True
        """
        return dataclasses.replace(self, **changes)


def resolve(settings: Optional[ComputationSettings]) -> ComputationSettings:
    if(settings is None):
        return ComputationSettings.default()
    return settings
