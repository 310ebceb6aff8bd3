#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Small numerical utilities shared by the bending energy, the boundary
constraints and the coordinate reconstruction. All of them act on samples
taken at the nodes of one arc length partition, so the objective and the
constraints are discretized with the same node set and the same rules:

    derivative: second order central differences in the interior,
                first order one sided differences at both ends
    integral:   trapezoidal rule
"""


import numpy as np
from scipy import integrate


def finite_difference(values, s):
    """derivative of values sampled at the (possibly non-uniform) nodes s"""
    return np.gradient(np.asarray(values, dtype=np.float64), s, edge_order=1)


def differentiation_matrix(s):
    """matrix D such that D @ v == finite_difference(v, s)
    np.gradient is linear, so column j is the derivative of the j-th unit
    vector"""
    n = len(s)
    return np.gradient(np.eye(n), s, axis=0, edge_order=1)


def trapezoid(values, s):
    """trapezoidal rule integral of values over the nodes s"""
    return float(integrate.trapezoid(values, s))


def trapezoid_weights(s):
    """quadrature weights w such that w @ v == trapezoid(v, s)"""
    ds = np.diff(s)
    w = np.zeros(len(s))
    w[:-1] += 0.5*ds
    w[1:] += 0.5*ds
    return w


def cumulative_trapezoid(values, s):
    """running trapezoidal integral, zero at the first node"""
    return integrate.cumulative_trapezoid(values, s, initial=0)
