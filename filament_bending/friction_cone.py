#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Minimum coefficient of friction at the end contact of the filament.

The multipliers of the end position constraints are the in-plane contact
force F. The contact normal N is perpendicular to the end tangent. The
contact holds quasi-statically when F lies inside the friction cone about N,
so the smallest admissible coefficient is the tangent of the angle between
F and N.
"""


import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from filament_bending.curve_model import CurveModel, InputValidationError


logger = logging.getLogger(__name__)

FORCE_TOLERANCE = 1e-12
ANGLE_TOLERANCE = 1e-8


class FrictionStatus(Enum):
    DEFINED = 'defined'
    # no contact force, no friction requirement
    UNDEFINED = 'undefined'
    # force tangential to the contact, needs infinite friction
    INFEASIBLE = 'infeasible'


@dataclass(frozen=True)
class FrictionResult:
    coefficient: float
    status: FrictionStatus
    angle: float
    force: np.ndarray
    normal: np.ndarray

    @property
    def is_defined(self):
        return self.status is FrictionStatus.DEFINED


def end_normal(theta):
    """in plane unit normal at the last sample, the end tangent turned
    by +90 degrees"""
    if isinstance(theta, CurveModel):
        theta = theta.theta
    theta = np.asarray(theta, dtype=np.float64)
    if theta.ndim != 1 or len(theta) == 0:
        raise InputValidationError("theta must be a non-empty 1-D sequence")
    return np.array([-np.sin(theta[-1]), np.cos(theta[-1]), 0.])


def compute_cof(multipliers, theta, *, force_tolerance=FORCE_TOLERANCE,
                angle_tolerance=ANGLE_TOLERANCE):
    """minimum friction coefficient from the [start tangent, end x, end y]
    multipliers and the solved tangent angles"""
    multipliers = np.asarray(multipliers, dtype=np.float64)
    if multipliers.shape != (3,):
        raise InputValidationError(f"expected 3 multipliers, got shape "
                                   f"{multipliers.shape}")
    force = np.array([multipliers[1], multipliers[2], 0.])
    normal = end_normal(theta)

    if not np.all(np.isfinite(force)):
        logger.warning("contact force is not finite, friction requirement "
                       "is undefined")
        return FrictionResult(np.nan, FrictionStatus.UNDEFINED, np.nan,
                              force, normal)
    if np.linalg.norm(force) <= force_tolerance:
        logger.info("zero contact force, friction requirement is undefined")
        return FrictionResult(np.nan, FrictionStatus.UNDEFINED, np.nan,
                              force, normal)

    # atan2 stays accurate near 0 and pi where acos does not
    angle = np.arctan2(np.linalg.norm(np.cross(force, normal)),
                       np.dot(force, normal))
    if abs(np.cos(angle)) <= angle_tolerance:
        logger.warning("contact force is tangential to the end, no finite "
                       "friction coefficient holds the filament")
        return FrictionResult(np.inf, FrictionStatus.INFEASIBLE, float(angle),
                              force, normal)

    # the cone is symmetric about the normal line
    coefficient = abs(np.tan(angle))
    logger.debug("contact angle %.6g rad, friction coefficient %.6g",
                 angle, coefficient)
    return FrictionResult(float(coefficient), FrictionStatus.DEFINED,
                          float(angle), force, normal)
