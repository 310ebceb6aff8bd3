#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Equilibrium shape of an inextensible filament by minimizing its bending
energy. The filament is described by its tangent angle theta(s) sampled on
an arc length partition. The start tangent is clamped and the end position
is fixed through the path integrals

    x_end = int cos(theta) ds        y_end = int sin(theta) ds

The Lagrange multipliers of the two end position constraints are the
contact reaction force at the end of the filament.
"""


import logging
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional

import numpy as np
from scipy.optimize import minimize, NonlinearConstraint, BFGS

from filament_bending import numerics
from filament_bending.curve_model import (ArcLengthPartition, CurveModel,
                                          BoundaryParameters,
                                          InputValidationError,
                                          arc_length_partition)


logger = logging.getLogger(__name__)


# SET UP OPTIMIZATION OPTIONS
MAX_EVALUATIONS = 100000
OPTIMALITY_TOLERANCE = 1e-2
STEP_TOLERANCE = 1e-3
CONSTRAINT_TOLERANCE = 1e-2
# end point distance this close to the length means a straight filament
STRETCHED_RTOL = 1e-9


@dataclass(frozen=True)
class SolverOptions:
    """convergence policy of the constrained solve"""
    max_evaluations: int = MAX_EVALUATIONS
    optimality_tolerance: float = OPTIMALITY_TOLERANCE
    step_tolerance: float = STEP_TOLERANCE
    constraint_tolerance: float = CONSTRAINT_TOLERANCE
    verbose: int = 0

    def __post_init__(self):
        if self.max_evaluations < 1:
            raise InputValidationError("max_evaluations must be positive")
        for name in ('optimality_tolerance', 'step_tolerance',
                     'constraint_tolerance'):
            if not getattr(self, name) > 0:
                raise InputValidationError(f"{name} must be positive")

    def to_scipy(self):
        """options dict for scipy.optimize.minimize(method='trust-constr')"""
        # trust-constr budgets iterations, not function evaluations
        return {'maxiter': int(self.max_evaluations),
                'gtol': self.optimality_tolerance,
                'xtol': self.step_tolerance,
                'verbose': self.verbose}
# END: SET UP OPTIMIZATION OPTIONS


class SolveStatus(Enum):
    CONVERGED = 'converged'
    MAX_ITERATIONS_REACHED = 'max_iterations_reached'
    INFEASIBLE_OR_STALLED = 'infeasible_or_stalled'
    NUMERICAL_FAILURE = 'numerical_failure'


@dataclass(frozen=True)
class SolveResult:
    """outcome of one constrained solve

    theta is a CurveModel when the initial guess was one, otherwise the raw
    array. multipliers follow the order of the constraint residuals and the
    sign convention grad f + J^T multipliers = 0. Do not trust theta unless
    status is CONVERGED."""
    theta: object
    energy: float
    status: SolveStatus
    multipliers: np.ndarray
    gradient: Optional[np.ndarray] = None
    lagrangian_gradient: Optional[np.ndarray] = None
    hessian: Optional[np.ndarray] = None
    constraint_violation: float = np.nan
    optimality: float = np.nan
    iterations: int = 0
    evaluations: int = 0
    message: str = ''

    @property
    def trustworthy(self):
        return self.status is SolveStatus.CONVERGED


class BendingCurve(NamedTuple):
    x: np.ndarray
    y: np.ndarray
    theta: np.ndarray
    multipliers: np.ndarray
    status: SolveStatus
    energy: float


def _readonly(a):
    if a is None:
        return None
    a = np.array(a, dtype=np.float64)
    a.setflags(write=False)
    return a


def _samples(theta, partition=None):
    """theta values and node locations from a CurveModel or an array"""
    if isinstance(theta, CurveModel):
        return np.asarray(theta.theta), theta.s
    if partition is None:
        raise InputValidationError("a partition is required with raw theta")
    if not isinstance(partition, ArcLengthPartition):
        partition = ArcLengthPartition(partition)
    theta = np.asarray(theta, dtype=np.float64)
    if theta.ndim != 1 or len(theta) != len(partition):
        raise InputValidationError(
            f"theta has shape {theta.shape} but the partition has "
            f"{len(partition)} samples")
    return theta, partition.s


# DEFINE OBJECTIVE AND CONSTRAINTS
def bending_energy(theta, partition=None):
    """int (dtheta/ds)^2 ds, finite difference derivative and trapezoidal
    rule on the partition nodes"""
    theta, s = _samples(theta, partition)
    if len(s) < 2:
        raise InputValidationError("bending energy needs at least 2 samples")
    curvature = numerics.finite_difference(theta, s)
    return numerics.trapezoid(curvature**2, s)


def boundary_residuals(theta, partition, boundary):
    """[start tangent, end x, end y] residuals, all zero when satisfied"""
    theta, s = _samples(theta, partition)
    x_end, y_end = boundary.end_point
    return np.array([theta[0] - boundary.start_slope,
                     numerics.trapezoid(np.cos(theta), s) - x_end,
                     numerics.trapezoid(np.sin(theta), s) - y_end])
# END: DEFINE OBJECTIVE AND CONSTRAINTS


# DEFINE FIRST AND SECOND ORDER DERIVATIVES
class BendingProblem:
    """objective and constraints of one filament with exact derivatives

    The energy is w @ (D theta)^2 with D the finite difference matrix and w
    the trapezoid weights of the partition, both fixed for the solve."""

    def __init__(self, partition, boundary):
        boundary.check_partition(partition)
        self.partition = partition
        self.boundary = boundary
        self.s = partition.s
        self.D = numerics.differentiation_matrix(self.s)
        self.w = numerics.trapezoid_weights(self.s)
        self._energy_hess = 2*self.D.T @ (self.w[:, np.newaxis]*self.D)

    def energy(self, theta):
        return bending_energy(theta, self.partition)

    def energy_grad(self, theta):
        return 2*self.D.T @ (self.w*(self.D @ theta))

    def energy_hess(self, theta):
        return self._energy_hess

    def residuals(self, theta):
        return boundary_residuals(theta, self.partition, self.boundary)

    def residuals_jac(self, theta):
        jac = np.zeros((3, len(theta)))
        jac[0, 0] = 1.
        jac[1] = -self.w*np.sin(theta)
        jac[2] = self.w*np.cos(theta)
        return jac

    def residuals_hess(self, theta, v):
        # the start tangent residual is linear
        return np.diag(-self.w*(v[1]*np.cos(theta) + v[2]*np.sin(theta)))
# END: DEFINE FIRST AND SECOND ORDER DERIVATIVES


def initial_guess(partition):
    """multi-harmonic start away from the straight (zero curvature) filament
    theta(u) = 1 + sin(2 pi u) + cos(2 pi u) + sin(4 pi u) + cos(4 pi u)
    with u = s/L"""
    if not isinstance(partition, ArcLengthPartition):
        partition = ArcLengthPartition(partition)
    u = 2*np.pi*partition.s/partition.length
    theta = 1 + np.sin(u) + np.cos(u) + np.sin(2*u) + np.cos(2*u)
    return CurveModel(partition, theta)


# DEFINE FUNCTION TO LOG OPTIMIZATION ITERATIONS
def log_iteration(intermediate_result):
    logger.debug("iteration %d: energy %.6g, constraint violation %.3g, "
                 "optimality %.3g", intermediate_result.nit,
                 intermediate_result.fun,
                 intermediate_result.constr_violation,
                 intermediate_result.optimality)
# END: DEFINE FUNCTION TO LOG OPTIMIZATION ITERATIONS


def _solve_status(res, options):
    if not (np.all(np.isfinite(res.x)) and np.isfinite(res.fun)):
        return SolveStatus.NUMERICAL_FAILURE
    if res.status == 0:
        return SolveStatus.MAX_ITERATIONS_REACHED
    if res.status == 1:
        return SolveStatus.CONVERGED
    if res.status == 2 and res.constr_violation <= options.constraint_tolerance:
        return SolveStatus.CONVERGED
    return SolveStatus.INFEASIBLE_OR_STALLED


def optimize(objective, constraints, theta0, options=None, *, jac=None,
             hess=None, constraints_jac=None, constraints_hess=None):
    """minimize objective(theta) subject to constraints(theta) == 0

    Equality constrained SQP (scipy trust-constr). Derivatives that are not
    given are approximated: finite differences for gradients and Jacobians,
    BFGS updates for Hessians. An exact hess needs an exact jac. Solver
    failures are reported in the status of the returned SolveResult, they
    are not raised."""
    if jac is None and hess is not None:
        raise InputValidationError("hess requires jac, finite difference "
                                   "gradients only work with BFGS updates")
    options = options or SolverOptions()
    model = theta0 if isinstance(theta0, CurveModel) else None
    x0 = np.array(theta0 if model is None else model.theta, dtype=np.float64)

    n_constraints = len(np.atleast_1d(constraints(x0)))
    zeros = np.zeros(n_constraints)
    cons = NonlinearConstraint(constraints, zeros, zeros,
                               jac=constraints_jac or '2-point',
                               hess=constraints_hess or BFGS())
    if jac is None:
        jac = '2-point'

    try:
        res = minimize(objective, x0, method='trust-constr',
                       jac=jac, hess=hess or BFGS(),
                       constraints=[cons],
                       options=options.to_scipy(),
                       callback=log_iteration)
    except (np.linalg.LinAlgError, FloatingPointError) as e:
        logger.error("solver broke down: %s", e)
        return SolveResult(theta=_readonly(x0) if model is None else model,
                           energy=np.nan,
                           status=SolveStatus.NUMERICAL_FAILURE,
                           multipliers=_readonly(np.full(n_constraints,
                                                         np.nan)),
                           message=str(e))

    status = _solve_status(res, options)
    if res.v:
        multipliers = res.v[0]
    else:
        multipliers = np.full(n_constraints, np.nan)
    hessian = hess(res.x) if callable(hess) else None
    # a CurveModel only holds finite angles, report the start instead
    theta = _readonly(res.x if np.all(np.isfinite(res.x)) else x0)
    if model is not None:
        theta = CurveModel(model.partition, theta)

    log = logger.info if status is SolveStatus.CONVERGED else logger.warning
    log("solve finished (%s) after %d iterations: energy %.6g, "
        "constraint violation %.3g, %s", status.value, res.nit, res.fun,
        res.constr_violation, res.message)
    return SolveResult(theta=theta,
                       energy=float(res.fun),
                       status=status,
                       multipliers=_readonly(multipliers),
                       gradient=_readonly(res.grad),
                       lagrangian_gradient=_readonly(res.lagrangian_grad),
                       hessian=_readonly(hessian),
                       constraint_violation=float(res.constr_violation),
                       optimality=float(res.optimality),
                       iterations=int(res.nit),
                       evaluations=int(res.nfev),
                       message=str(res.message))


def reconstruct_coordinates(theta, partition=None):
    """x(s), y(s) of the filament, starting at the origin"""
    theta, s = _samples(theta, partition)
    x = numerics.cumulative_trapezoid(np.cos(theta), s)
    y = numerics.cumulative_trapezoid(np.sin(theta), s)
    return x, y


def _as_partition(partition, boundary):
    if isinstance(partition, (int, np.integer)):
        return arc_length_partition(boundary.length, partition)
    if not isinstance(partition, ArcLengthPartition):
        return ArcLengthPartition(partition)
    return partition


def is_fully_stretched(boundary):
    """true when the end point lies at the full filament length"""
    return np.isclose(np.hypot(*boundary.end_point), boundary.length,
                      rtol=STRETCHED_RTOL, atol=0.)


def straight_solution(problem, options=None):
    """closed form solve of a fully stretched filament

    The only feasible shape is the straight line to the end point. The end
    position Jacobian is rank deficient there, so the end multipliers are
    not determined and are reported as zero (no contact force)."""
    options = options or SolverOptions()
    boundary = problem.boundary
    direction = np.arctan2(boundary.end_point[1], boundary.end_point[0])
    # the 2 pi branch closest to the clamped start tangent
    direction += 2*np.pi*np.round((boundary.start_slope - direction)/(2*np.pi))
    theta = np.full(len(problem.partition), direction)

    residuals = problem.residuals(theta)
    violation = float(np.max(np.abs(residuals)))
    if violation <= options.constraint_tolerance:
        status = SolveStatus.CONVERGED
    else:
        status = SolveStatus.INFEASIBLE_OR_STALLED
    gradient = problem.energy_grad(theta)
    log = logger.info if status is SolveStatus.CONVERGED else logger.warning
    log("filament is fully stretched, straight solution along %.6g rad "
        "(%s), constraint violation %.3g", direction, status.value, violation)
    return SolveResult(theta=CurveModel(problem.partition, theta),
                       energy=problem.energy(theta),
                       status=status,
                       multipliers=_readonly(np.zeros(3)),
                       gradient=_readonly(gradient),
                       lagrangian_gradient=_readonly(gradient),
                       hessian=_readonly(problem.energy_hess(theta)),
                       constraint_violation=violation,
                       optimality=float(np.max(np.abs(gradient))),
                       message='fully stretched filament, solved in '
                               'closed form')


def solve_bending_problem(partition, boundary, options=None):
    """minimum bending energy filament for the given boundary parameters

    partition may be an ArcLengthPartition, an array of arc lengths, or a
    sample count for an evenly spaced partition of boundary.length"""
    if not isinstance(boundary, BoundaryParameters):
        raise InputValidationError("boundary must be BoundaryParameters")
    partition = _as_partition(partition, boundary)
    problem = BendingProblem(partition, boundary)
    logger.info("solving filament of length %g to end point (%g, %g) "
                "with start slope %g on %d samples", boundary.length,
                boundary.end_point[0], boundary.end_point[1],
                boundary.start_slope, len(partition))

    if is_fully_stretched(boundary):
        return straight_solution(problem, options)
    return optimize(problem.energy, problem.residuals,
                    initial_guess(partition), options,
                    jac=problem.energy_grad,
                    hess=problem.energy_hess,
                    constraints_jac=problem.residuals_jac,
                    constraints_hess=problem.residuals_hess)


def generate_bending_curve(partition, boundary, options=None):
    """solve and reconstruct the filament shape

    Returns a BendingCurve, which unpacks as
    x, y, theta, multipliers, status, energy."""
    result = solve_bending_problem(partition, boundary, options)
    x, y = reconstruct_coordinates(result.theta)
    return BendingCurve(x=x, y=y,
                        theta=result.theta.theta,
                        multipliers=result.multipliers,
                        status=result.status,
                        energy=result.energy)
