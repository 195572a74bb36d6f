from __future__ import annotations

from typing import List, Optional

import numpy as np

from ..data import DataSummary
from ..guess import GuessState
from .common import FitFamily, FitType, has_mixed_signs, safe_span


def power_func(p, x):
    """y = a*x^b; 0 at x=0, NaN for x<0."""
    return np.where(x == 0, 0.0, p[0] * np.exp(p[1] * np.log(x)))


def log_func(p, x):
    """y = a*ln(b*x)"""
    return p[0] * np.log(p[1] * x)


def log2_func(p, x):
    """y = a + b*ln(x-c); NaN for x <= c."""
    tmp = x - p[2]
    return np.where(tmp > 0, p[0] + p[1] * np.log(np.where(tmp > 0, tmp, 1.0)), np.nan)


def nonzero_points(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Mask of points that are not (0, 0); those carry no power-law information."""
    return ~((x == 0) & (y == 0))


def _log_log_slope(x: np.ndarray, y: np.ndarray) -> Optional[float]:
    use = (x > 0) & (y != 0)
    if np.count_nonzero(use) < 2 or has_mixed_signs(y[use]):
        return None
    slope = np.polyfit(np.log(x[use]), np.log(np.abs(y[use])), 1)[0]
    return float(slope) if np.isfinite(slope) else None


def _guess_power(data: DataSummary, x, y, g: GuessState) -> None:
    exponent = _log_log_slope(x, y)
    g.setdefault(a=data.y_mean, b=1.0 if exponent is None else exponent)
    g.vary(b=0.5)


def _guess_log(data: DataSummary, x, y, g: GuessState) -> None:
    g.setdefault(a=data.y_mean, b=1.0 / data.x_mean if data.x_mean != 0 else 1.0)


def _guess_log2(data: DataSummary, x, y, g: GuessState) -> None:
    span = safe_span(data.x_span)
    g.setdefault(a=data.y_mean, b=data.slope * span, c=data.x_min - 0.1 * span)
    g.vary(c=0.05 * span)


def _validate_power(x: np.ndarray, y: np.ndarray) -> Optional[str]:
    if np.any(x < 0):
        return "Cannot fit Power when x<0"
    return None


def _validate_log(x: np.ndarray, y: np.ndarray) -> Optional[str]:
    if np.any(x <= 0):
        return "Cannot fit x<=0"
    return None


def _validate_power_regression(x: np.ndarray, y: np.ndarray) -> Optional[str]:
    use = nonzero_points(x, y)
    x, y = x[use], y[use]
    if x.shape[0] == 0 or np.any(x <= 0):
        return "Cannot fit x<=0 with power regression"
    if np.any(y == 0) or has_mixed_signs(y):
        return "Cannot fit y=0 or mixed-sign y with power regression"
    return None


def power_log_families() -> List[FitFamily]:
    return [
        FitFamily(
            fit_type=FitType.POWER,
            name="Power",
            formula="y = a*x^b",
            num_params=2,
            func=power_func,
            guesser=_guess_power,
            factor_param=0,
            validator=_validate_power,
        ),
        FitFamily(
            fit_type=FitType.LOG,
            name="Log",
            formula="y = a*ln(bx)",
            num_params=2,
            func=log_func,
            guesser=_guess_log,
            factor_param=0,
            validator=_validate_log,
        ),
        FitFamily(
            fit_type=FitType.LOG2,
            name="y = a+b*ln(x-c)",
            formula="y = a+b*ln(x-c)",
            num_params=3,
            func=log2_func,
            guesser=_guess_log2,
            offset_param=0,
            factor_param=1,
        ),
        FitFamily(
            fit_type=FitType.POWER_REGRESSION,
            name="Power (linear regression)",
            formula="y = a*x^b",
            num_params=2,
            func=power_func,
            validator=_validate_power_regression,
        ),
    ]
