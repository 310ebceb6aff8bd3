#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Discrete representation of the filament: the arc length partition, the
tangent angle samples living on it, and the boundary parameters of the
clamped start / fixed end problem.
"""


import logging
from dataclasses import dataclass, field
from typing import Tuple

import numpy as np


logger = logging.getLogger(__name__)

# fewer samples than this give a one sided derivative everywhere
MIN_CURVATURE_SAMPLES = 3
LENGTH_RTOL = 1e-9


class InputValidationError(ValueError):
    """raised for malformed input before any solve is attempted"""


def _frozen_array(values, name):
    try:
        a = np.array(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InputValidationError(f"{name} must be a sequence of reals") from e
    if a.ndim != 1:
        raise InputValidationError(f"{name} must be one dimensional, "
                                   f"got shape {a.shape}")
    if not np.all(np.isfinite(a)):
        raise InputValidationError(f"{name} contains non-finite values")
    a.setflags(write=False)
    return a


@dataclass(frozen=True)
class ArcLengthPartition:
    """strictly increasing sample locations 0 = s_0 < ... < s_{n-1} = L"""
    s: np.ndarray

    def __post_init__(self):
        s = _frozen_array(self.s, "partition")
        if len(s) < 2:
            raise InputValidationError(
                f"partition needs at least 2 samples, got {len(s)}")
        if s[0] != 0:
            raise InputValidationError(
                f"partition must start at arc length 0, got {s[0]}")
        if np.any(np.diff(s) <= 0):
            raise InputValidationError("partition must be strictly increasing")
        if len(s) < MIN_CURVATURE_SAMPLES:
            logger.warning("partition has only %d samples, curvature "
                           "estimates will be crude", len(s))
        object.__setattr__(self, "s", s)

    def __len__(self):
        return len(self.s)

    @property
    def n_samples(self):
        return len(self.s)

    @property
    def length(self):
        return float(self.s[-1])


def arc_length_partition(length, n_samples):
    """evenly spaced partition of a filament of the given length"""
    if not np.isfinite(length) or length <= 0:
        raise InputValidationError(f"filament length must be positive, "
                                   f"got {length}")
    if n_samples < 2:
        raise InputValidationError(
            f"partition needs at least 2 samples, got {n_samples}")
    s = np.linspace(0., length, int(n_samples))
    # linspace can miss the last node by an ulp
    s[-1] = length
    return ArcLengthPartition(s)


@dataclass(frozen=True)
class CurveModel:
    """tangent angle theta (radians) sampled on an arc length partition"""
    partition: ArcLengthPartition
    theta: np.ndarray

    def __post_init__(self):
        if not isinstance(self.partition, ArcLengthPartition):
            object.__setattr__(self, "partition",
                               ArcLengthPartition(self.partition))
        theta = _frozen_array(self.theta, "theta")
        if len(theta) != len(self.partition):
            raise InputValidationError(
                f"theta has {len(theta)} samples but the partition has "
                f"{len(self.partition)}")
        object.__setattr__(self, "theta", theta)

    def __len__(self):
        return len(self.theta)

    @property
    def s(self):
        return self.partition.s


@dataclass(frozen=True)
class BoundaryParameters:
    """filament length, target end position and clamped start tangent"""
    length: float
    end_point: Tuple[float, float]
    start_slope: float = field(default=0.)

    def __post_init__(self):
        length = float(self.length)
        if not np.isfinite(length) or length <= 0:
            raise InputValidationError(f"filament length must be positive, "
                                       f"got {self.length}")
        try:
            end_point = tuple(float(c) for c in self.end_point)
        except (TypeError, ValueError) as e:
            raise InputValidationError(f"end point must be an (x, y) pair, "
                                       f"got {self.end_point}") from e
        if len(end_point) != 2 or not np.all(np.isfinite(end_point)):
            raise InputValidationError(f"end point must be a finite (x, y) "
                                       f"pair, got {self.end_point}")
        start_slope = float(self.start_slope)
        if not np.isfinite(start_slope):
            raise InputValidationError("start slope must be finite")
        if np.hypot(*end_point) > length:
            logger.warning("end point %s lies farther than the filament "
                           "length %g, the problem is infeasible",
                           end_point, length)
        object.__setattr__(self, "length", length)
        object.__setattr__(self, "end_point", end_point)
        object.__setattr__(self, "start_slope", start_slope)

    def check_partition(self, partition):
        """raise unless the partition spans exactly this filament"""
        if not np.isclose(partition.length, self.length,
                          rtol=LENGTH_RTOL, atol=0.):
            raise InputValidationError(
                f"partition spans arc length {partition.length} but the "
                f"filament length is {self.length}")
