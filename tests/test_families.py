import math

import numpy as np
import pytest

from simplex_fitting import AVAILABLE_FIT_TYPES, FIT_FORMULAS, FIT_NAMES, FitType, evaluate, get_family


def test_registry_lists_user_fit_types():
    assert len(AVAILABLE_FIT_TYPES) == 25
    assert [int(t) for t in AVAILABLE_FIT_TYPES] == list(range(25))
    assert FIT_NAMES[FitType.STRAIGHT_LINE] == "Straight Line"
    assert FIT_NAMES[FitType.POLY3] == "3rd Degree Polynomial"
    assert FIT_NAMES[FitType.POLY8] == "8th Degree Polynomial"
    assert FIT_FORMULAS[FitType.POLY2] == "y = a+bx+cx^2"
    assert FIT_FORMULAS[FitType.GAUSSIAN] == "y = a + (b-a)*exp(-(x-c)*(x-c)/(2*d*d))"
    assert FitType.GAUSSIAN_INTERNAL not in FIT_NAMES
    with pytest.raises(TypeError):
        FIT_NAMES[FitType.LOG] = "x"  # type: ignore[index]


def test_unknown_fit_types():
    with pytest.raises(ValueError):
        get_family(99)
    with pytest.raises(ValueError):
        get_family(FitType.CUSTOM)


@pytest.mark.parametrize(
    "fit_type, num_params",
    [
        (FitType.STRAIGHT_LINE, 2),
        (FitType.POLY8, 9),
        (FitType.EXP_WITH_OFFSET, 3),
        (FitType.RODBARD, 4),
        (FitType.GAUSSIAN_NOOFFSET, 3),
        (FitType.CHAPMAN, 3),
        (FitType.ERF, 4),
    ],
)
def test_num_params(fit_type, num_params):
    assert get_family(fit_type).num_params == num_params


def test_regression_params():
    assert get_family(FitType.STRAIGHT_LINE).num_regression_params == 2
    assert get_family(FitType.STRAIGHT_LINE).factor_is_slope
    assert get_family(FitType.EXPONENTIAL).num_regression_params == 1
    assert get_family(FitType.GAUSSIAN_INTERNAL).num_regression_params == 2
    assert get_family(FitType.GAUSSIAN).num_regression_params == 0
    assert get_family(FitType.INV_RODBARD).factor_param == 2


def test_scalar_and_array_evaluation():
    p = [1.0, 2.0, 3.0]
    y = evaluate(FitType.POLY2, p, 2.0)
    assert isinstance(y, float)
    assert y == pytest.approx(1 + 4 + 12)
    np.testing.assert_allclose(evaluate(FitType.POLY2, p, [0.0, 1.0]), [1.0, 6.0])


def test_power_at_zero_and_negative_x():
    assert evaluate(FitType.POWER, [2.0, 0.5], 0.0) == 0.0
    assert evaluate(FitType.POWER, [2.0, 0.5], 4.0) == pytest.approx(4.0)
    assert math.isnan(evaluate(FitType.POWER, [2.0, 0.5], -1.0))


def test_log_with_offset_outside_domain():
    assert math.isnan(evaluate(FitType.LOG2, [1.0, 1.0, 2.0], 2.0))
    assert evaluate(FitType.LOG2, [1.0, 2.0, 2.0], 2.0 + math.e) == pytest.approx(3.0)


def test_inverse_rodbard_outside_domain():
    p = [0.0, 2.0, 3.0, 10.0]
    assert math.isnan(evaluate(FitType.INV_RODBARD, p, -1.0))
    assert math.isnan(evaluate(FitType.INV_RODBARD, p, 10.0))
    assert evaluate(FitType.RODBARD2, p, -1.0) == 0.0
    assert evaluate(FitType.RODBARD2, p, 10.0) == 0.0
    # x = 5 is halfway between a and d: y = c
    assert evaluate(FitType.INV_RODBARD, p, 5.0) == pytest.approx(3.0)


def test_rodbard_inverse_roundtrip():
    p = [0.5, 1.7, 3.0, 9.0]
    x = np.linspace(0.2, 20.0, 15)
    y = evaluate(FitType.RODBARD, p, x)
    np.testing.assert_allclose(evaluate(FitType.INV_RODBARD, p, y), x, rtol=1e-10)


def test_gamma_variate():
    assert evaluate(FitType.GAMMA_VARIATE, [1.0, 2.0, 2.0, 1.5], 0.5) == 0.0
    assert evaluate(FitType.GAMMA_VARIATE, [1.0, 2.0, 2.0, 1.5], 1.0) == 0.0
    assert math.isnan(evaluate(FitType.GAMMA_VARIATE, [1.0, -2.0, 2.0, 1.5], 3.0))
    assert evaluate(FitType.GAMMA_VARIATE, [1.0, -2.0, 2.0, 1.5], 0.0) == 0.0
    expected = 2.0 * 2.0**2 * math.exp(-2.0 / 1.5)
    assert evaluate(FitType.GAMMA_VARIATE, [1.0, 2.0, 2.0, 1.5], 3.0) == pytest.approx(expected)


def test_erf_is_offset_at_center():
    assert evaluate(FitType.ERF, [1.0, 2.0, 0.5, 3.0], 0.5) == pytest.approx(1.0)
    assert evaluate(FitType.ERF, [1.0, 2.0, 0.5, 3.0], 1e6) == pytest.approx(3.0)


def test_internal_forms_match_user_forms():
    x = np.linspace(-3.0, 6.0, 19)
    gauss = [1.0, 5.0, 2.0, 0.8]
    internal = [1.0, 4.0, 2.0, 0.8]
    np.testing.assert_allclose(
        evaluate(FitType.GAUSSIAN, gauss, x), evaluate(FitType.GAUSSIAN_INTERNAL, internal, x)
    )

    x = np.linspace(0.1, 10.0, 12)
    rodbard = [0.5, 2.0, 3.0, 4.0]
    internal = [-3.5, 2.0, 3.0, 4.0]
    np.testing.assert_allclose(
        evaluate(FitType.RODBARD, rodbard, x), evaluate(FitType.RODBARD_INTERNAL, internal, x)
    )


def test_domain_validators():
    x = np.array([-1.0, 1.0, 2.0])
    y = np.array([1.0, 2.0, 3.0])
    assert get_family(FitType.POWER).validate(x, y) == "Cannot fit Power when x<0"
    assert get_family(FitType.LOG).validate(np.array([0.0, 1.0]), np.ones(2)) == "Cannot fit x<=0"
    assert get_family(FitType.RODBARD).validate(x, y) is not None
    assert get_family(FitType.RODBARD2).validate(y, x) is not None
    assert get_family(FitType.EXP_REGRESSION).validate(y, np.array([1.0, 0.0, 2.0])) is not None
    assert get_family(FitType.STRAIGHT_LINE).validate(x, y) is None

    # (0, 0) carries no information for a power law and is ignored
    power_regression = get_family(FitType.POWER_REGRESSION)
    assert power_regression.validate(np.array([0.0, 1.0, 2.0]), np.array([0.0, 1.0, 4.0])) is None
    assert power_regression.validate(np.array([0.0, 1.0, 2.0]), np.array([1.0, 1.0, 4.0])) is not None
