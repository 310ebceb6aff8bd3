import numpy as np
import pytest

from filament_bending.curve_model import (CurveModel, InputValidationError,
                                          arc_length_partition)
from filament_bending.friction_cone import (FrictionStatus, compute_cof,
                                            end_normal)


STRAIGHT = np.zeros(5)


def test_end_normal_is_perpendicular_to_end_tangent():
    theta = np.array([0., .4, 1.1])
    normal = end_normal(theta)
    tangent = np.array([np.cos(1.1), np.sin(1.1), 0.])
    assert normal @ tangent == pytest.approx(0.)
    assert np.linalg.norm(normal) == pytest.approx(1.)
    assert normal[2] == 0.


def test_force_along_normal_needs_no_friction():
    result = compute_cof([5., 0., 2.], STRAIGHT)
    assert result.status is FrictionStatus.DEFINED
    assert result.is_defined
    assert result.coefficient == 0.
    assert result.angle == 0.


def test_force_against_normal_needs_no_friction():
    result = compute_cof([0., 0., -2.], STRAIGHT)
    assert result.status is FrictionStatus.DEFINED
    assert result.coefficient == pytest.approx(0., abs=1e-12)
    assert result.angle == pytest.approx(np.pi)


def test_tangential_force_is_infeasible():
    result = compute_cof([0., 3., 0.], STRAIGHT)
    assert result.status is FrictionStatus.INFEASIBLE
    assert not result.is_defined
    assert result.coefficient == np.inf
    assert result.angle == pytest.approx(np.pi/2)


def test_zero_force_is_undefined():
    result = compute_cof([1., 0., 0.], STRAIGHT)
    assert result.status is FrictionStatus.UNDEFINED
    assert np.isnan(result.coefficient)


def test_non_finite_force_is_undefined():
    result = compute_cof([np.nan, np.nan, np.nan], STRAIGHT)
    assert result.status is FrictionStatus.UNDEFINED
    assert np.isnan(result.coefficient)


@pytest.mark.parametrize('angle', [.1, np.pi/4, 1.2, np.pi - .3])
def test_coefficient_is_tangent_of_contact_angle(angle):
    # N = (0, 1) for a straight end, rotate F away from it
    force = 2.5*np.array([np.sin(angle), np.cos(angle)])
    result = compute_cof([0., force[0], force[1]], STRAIGHT)
    assert result.angle == pytest.approx(angle)
    assert result.coefficient == pytest.approx(abs(np.tan(angle)))


def test_uses_tangent_at_last_sample():
    # end pointing up, the normal points in -x
    theta = np.array([0., .7, np.pi/2])
    result = compute_cof([0., -2., 0.], theta)
    assert result.coefficient == pytest.approx(0., abs=1e-12)
    np.testing.assert_allclose(result.normal, [-1., 0., 0.], atol=1e-15)


def test_accepts_curve_model():
    p = arc_length_partition(1., 5)
    result = compute_cof([0., 1., 1.], CurveModel(p, np.zeros(5)))
    assert result.coefficient == pytest.approx(1.)


@pytest.mark.parametrize('multipliers', [[1., 2.], [1., 2., 3., 4.],
                                         [[1., 2., 3.]]])
def test_rejects_wrong_number_of_multipliers(multipliers):
    with pytest.raises(InputValidationError):
        compute_cof(multipliers, STRAIGHT)


def test_rejects_empty_theta():
    with pytest.raises(InputValidationError):
        compute_cof([0., 1., 1.], [])


def test_tolerances_are_keyword_only():
    with pytest.raises(TypeError):
        compute_cof([0., 1., 1.], STRAIGHT, 1e-3)
    result = compute_cof([0., 1e-6, 0.], STRAIGHT, force_tolerance=1e-3)
    assert result.status is FrictionStatus.UNDEFINED
