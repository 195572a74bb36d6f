import math

import numpy as np
import pytest

from simplex_fitting import regress
from simplex_fitting.regression import SSE_FLOOR


def test_offset_and_factor():
    f = np.array([1.0, 2.0, 3.0, 4.0])
    y = 2.0 + 3.0 * f
    res = regress(y, f, has_offset=True, has_factor=True)
    assert res.offset == pytest.approx(2.0)
    assert res.factor == pytest.approx(3.0)
    reference = 9.0 * 30.0 + 4 * 4.0 + float(np.dot(y, y))
    assert res.sse == pytest.approx(SSE_FLOOR * reference)


def test_factor_only():
    f = np.array([0.5, 1.0, 2.0])
    res = regress(2.5 * f, f, has_offset=False, has_factor=True)
    assert res.offset == 0.0
    assert res.factor == pytest.approx(2.5)
    assert res.sse >= 0.0


def test_offset_only_is_mean_difference():
    f = np.array([1.0, -1.0, 4.0, 0.0])
    y = f + np.array([1.0, 2.0, 1.0, 2.0])
    res = regress(y, f, has_offset=True, has_factor=False)
    assert res.offset == pytest.approx(1.5)
    assert res.factor == 1.0
    assert res.sse == pytest.approx(4 * 0.25)


def test_slope_regression_for_polynomials():
    x = np.array([0.0, 1.0, 2.0, 3.0])
    f = x**2  # c*x^2 with a = b = 0
    y = 1.0 + 2.0 * x + x**2
    res = regress(y, f, has_offset=True, has_factor=True, x=x)
    assert res.offset == pytest.approx(1.0)
    assert res.factor == pytest.approx(2.0)


def test_slope_needs_factor():
    x = np.arange(3.0)
    with pytest.raises(ValueError):
        regress(x, x, has_offset=True, has_factor=False, x=x)


def test_nan_function_value_gives_nan():
    f = np.array([1.0, math.nan, 2.0])
    res = regress(np.ones(3), f, has_offset=True, has_factor=True)
    assert all(math.isnan(v) for v in res)


def test_degenerate_function_gives_zero_factor():
    f = np.zeros(4)
    y = np.array([1.0, 2.0, 3.0, 4.0])
    res = regress(y, f, has_offset=False, has_factor=True)
    assert res.factor == 0.0
    assert res.sse == pytest.approx(float(np.dot(y, y)))

    res = regress(y, np.ones(4), has_offset=True, has_factor=True)
    assert res.factor == 0.0
    assert res.offset == pytest.approx(2.5)


def test_floor_uses_cached_sum_of_squares():
    f = np.array([1.0, 2.0, 3.0])
    y = 4.0 * f
    res = regress(y, f, has_offset=False, has_factor=True, sum_y2=1e6)
    assert res.sse == pytest.approx(SSE_FLOOR * 1e6)
