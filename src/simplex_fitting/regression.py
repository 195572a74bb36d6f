"""Closed-form linear regression for parameters that enter a model linearly.

A fit function ``y = offset + factor * g(x; p)`` (or ``y = offset + slope * x
+ g(x; p)`` for polynomials) only needs the simplex for the nonlinear
parameters ``p``; offset and factor (or slope) follow from least squares.
"""
from __future__ import annotations

import math
from typing import NamedTuple, Optional

import numpy as np

__all__ = ["RegressionResult", "regress", "SSE_FLOOR"]

# relative floor for the sum of squared residuals (rounding noise)
SSE_FLOOR = 2e-15


class RegressionResult(NamedTuple):
    offset: float
    factor: float
    sse: float


_NAN_RESULT = RegressionResult(math.nan, math.nan, math.nan)


def regress(
    y: np.ndarray,
    f: np.ndarray,
    *,
    has_offset: bool,
    has_factor: bool,
    x: Optional[np.ndarray] = None,
    sum_y2: Optional[float] = None,
) -> RegressionResult:
    """Best offset and/or factor for ``y ~ offset + factor * f``.

    Parameters
    ----------
    y:
        Data values.
    f:
        Function values with offset 0 and factor 1 (slope 0 if ``x`` given).
    has_offset, has_factor:
        Which of the two linear parameters are free. A missing offset is 0,
        a missing factor is 1.
    x:
        If given, the factor is a slope: ``y - f ~ offset + factor * x``.
    sum_y2:
        Cached sum of y**2 (reference for the floor of the result).

    Returns
    -------
    RegressionResult
        All NaN if any function value is NaN. A non-finite factor (e.g.
        all ``f`` equal to zero) is replaced by 0.
    """
    y = np.asarray(y, dtype=float)
    f = np.asarray(f, dtype=float)
    if np.any(np.isnan(f)):
        return _NAN_RESULT
    if sum_y2 is None:
        sum_y2 = float(np.dot(y, y))

    if x is not None:
        if not has_factor:
            raise ValueError("A slope regression needs has_factor=True.")
        target = y - f
        regressor = np.asarray(x, dtype=float)
    else:
        target = y
        regressor = f
    n = y.shape[0]

    offset = 0.0
    factor = 1.0
    with np.errstate(all="ignore"):
        if has_factor and has_offset:
            sum_r = float(np.sum(regressor))
            sum_t = float(np.sum(target))
            sxx = float(np.dot(regressor, regressor)) - sum_r * sum_r / n
            sxy = float(np.dot(regressor, target)) - sum_r * sum_t / n
            factor = sxy / sxx if sxx != 0 else math.nan
            if not math.isfinite(factor):
                factor = 0.0
            offset = (sum_t - factor * sum_r) / n
        elif has_factor:
            srr = float(np.dot(regressor, regressor))
            factor = float(np.dot(regressor, target)) / srr if srr != 0 else math.nan
            if not math.isfinite(factor):
                factor = 0.0
        elif has_offset:
            offset = float(np.mean(target - regressor))

        residuals = target - offset - factor * regressor
        sse = float(np.dot(residuals, residuals))

    if math.isnan(sse):
        return RegressionResult(offset, factor, math.nan)
    if has_factor and not has_offset:
        reference = sum_y2
    else:
        reference = factor * factor * float(np.dot(regressor, regressor)) + n * offset * offset + sum_y2
    sse = max(sse, SSE_FLOOR * reference)
    return RegressionResult(offset, factor, sse)
