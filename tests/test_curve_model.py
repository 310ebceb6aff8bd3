import logging

import numpy as np
import pytest

from filament_bending.curve_model import (ArcLengthPartition, CurveModel,
                                          BoundaryParameters,
                                          InputValidationError,
                                          arc_length_partition)


def test_arc_length_partition_is_evenly_spaced():
    p = arc_length_partition(2., 5)
    np.testing.assert_allclose(p.s, [0., .5, 1., 1.5, 2.])
    assert p.length == 2.
    assert p.n_samples == len(p) == 5


@pytest.mark.parametrize('s', [[0.], [0., .5, .4, 1.], [.1, .5, 1.],
                               [0., np.nan, 1.], [[0., 1.], [2., 3.]]])
def test_partition_rejects_malformed_input(s):
    with pytest.raises(InputValidationError):
        ArcLengthPartition(s)


def test_partition_with_two_samples_warns(caplog):
    with caplog.at_level(logging.WARNING, logger='filament_bending'):
        p = ArcLengthPartition([0., 1.])
    assert len(p) == 2
    assert 'curvature' in caplog.text


@pytest.mark.parametrize('length, n', [(0., 10), (-1., 10), (1., 1)])
def test_arc_length_partition_rejects_bad_parameters(length, n):
    with pytest.raises(InputValidationError):
        arc_length_partition(length, n)


def test_partition_is_immutable():
    p = arc_length_partition(1., 4)
    with pytest.raises(ValueError):
        p.s[1] = .2


def test_curve_model_requires_matching_lengths():
    p = arc_length_partition(1., 4)
    with pytest.raises(InputValidationError):
        CurveModel(p, np.zeros(3))
    c = CurveModel(p, [0., .1, .2, .3])
    assert len(c) == 4
    np.testing.assert_array_equal(c.s, p.s)
    with pytest.raises(ValueError):
        c.theta[0] = 1.


def test_curve_model_accepts_raw_partition():
    c = CurveModel([0., .5, 1.], [0., 0., 0.])
    assert isinstance(c.partition, ArcLengthPartition)


def test_boundary_parameters():
    b = BoundaryParameters(length=1, end_point=[.6, .3], start_slope=0)
    assert b.length == 1.
    assert b.end_point == (.6, .3)
    assert b.start_slope == 0.


@pytest.mark.parametrize('kwargs', [
    dict(length=0., end_point=(0., 0.)),
    dict(length=-2., end_point=(0., 0.)),
    dict(length=1., end_point=(1., 0., 0.)),
    dict(length=1., end_point=1.),
    dict(length=1., end_point=(0., 0.), start_slope=np.inf)])
def test_boundary_parameters_reject_bad_input(kwargs):
    with pytest.raises(InputValidationError):
        BoundaryParameters(**kwargs)


def test_unreachable_end_point_warns(caplog):
    with caplog.at_level(logging.WARNING, logger='filament_bending'):
        BoundaryParameters(length=1., end_point=(2., 0.))
    assert 'infeasible' in caplog.text


def test_check_partition():
    b = BoundaryParameters(length=1., end_point=(.5, .5))
    b.check_partition(arc_length_partition(1., 10))
    with pytest.raises(InputValidationError):
        b.check_partition(arc_length_partition(2., 10))
