from __future__ import annotations

from typing import List, Optional

import numpy as np

from ..data import DataSummary
from ..guess import GuessState
from .common import FitFamily, FitType, has_mixed_signs, safe_span


def exponential_func(p, x):
    """y = a*exp(b*x)"""
    return p[0] * np.exp(p[1] * x)


def exp_with_offset_func(p, x):
    """y = a*exp(-b*x) + c"""
    return p[0] * np.exp(-p[1] * x) + p[2]


def exp_recovery_func(p, x):
    """y = a*(1-exp(-b*x)) + c"""
    return p[0] * (1.0 - np.exp(-p[1] * x)) + p[2]


def exp_recovery_no_offset_func(p, x):
    return p[0] * (1.0 - np.exp(-p[1] * x))


def _log_slope(x: np.ndarray, y: np.ndarray) -> Optional[float]:
    """Slope of ln|y| vs x, None if y is zero somewhere or changes sign."""
    if np.any(y == 0) or has_mixed_signs(y) or x.shape[0] < 2:
        return None
    slope = np.polyfit(x, np.log(np.abs(y)), 1)[0]
    return float(slope) if np.isfinite(slope) and slope != 0 else None


def _guess_exponential(data: DataSummary, x, y, g: GuessState) -> None:
    span = safe_span(data.x_span)
    rate = _log_slope(x, y)
    if rate is None:
        # one e-fold change over the x range; sign from whether |y| grows with x
        grows = (abs(data.last_y) > abs(data.first_y)) == (data.last_x > data.first_x)
        rate = 1.0 / span if grows else -1.0 / span
    g.setdefault(b=rate)
    g.setdefault(a=data.first_y)
    g.vary(b=0.5 / span)


def _guess_exp_with_offset(data: DataSummary, x, y, g: GuessState) -> None:
    span = safe_span(data.x_span)
    g.setdefault(a=data.first_y - data.last_y, b=1.0 / span, c=data.last_y)
    g.vary(b=0.5 / span)


def _guess_exp_recovery(data: DataSummary, x, y, g: GuessState) -> None:
    span = safe_span(data.x_span)
    g.setdefault(a=data.last_y - data.first_y, b=1.0 / span, c=data.first_y)
    g.vary(b=0.5 / span)


def _guess_exp_recovery_no_offset(data: DataSummary, x, y, g: GuessState) -> None:
    span = safe_span(data.x_span)
    g.setdefault(a=data.last_y, b=1.0 / span)
    g.vary(b=0.5 / span)


def _validate_exp_regression(x: np.ndarray, y: np.ndarray) -> Optional[str]:
    if np.any(y == 0) or has_mixed_signs(y):
        return "Cannot fit y=0 or mixed-sign y with exponential regression"
    return None


def exponential_families() -> List[FitFamily]:
    return [
        FitFamily(
            fit_type=FitType.EXPONENTIAL,
            name="Exponential",
            formula="y = a*exp(bx)",
            num_params=2,
            func=exponential_func,
            guesser=_guess_exponential,
            factor_param=0,
        ),
        FitFamily(
            fit_type=FitType.EXP_WITH_OFFSET,
            name="Exponential with Offset",
            formula="y = a*exp(-bx) + c",
            num_params=3,
            func=exp_with_offset_func,
            guesser=_guess_exp_with_offset,
            offset_param=2,
            factor_param=0,
        ),
        FitFamily(
            fit_type=FitType.EXP_RECOVERY,
            name="Exponential Recovery",
            formula="y = a*(1-exp(-b*x)) + c",
            num_params=3,
            func=exp_recovery_func,
            guesser=_guess_exp_recovery,
            offset_param=2,
            factor_param=0,
        ),
        FitFamily(
            fit_type=FitType.EXP_RECOVERY_NOOFFSET,
            name="Exponential Recovery (no offset)",
            formula="y = a*(1-exp(-b*x))",
            num_params=2,
            func=exp_recovery_no_offset_func,
            guesser=_guess_exp_recovery_no_offset,
            factor_param=0,
        ),
        FitFamily(
            fit_type=FitType.EXP_REGRESSION,
            name="Exponential (linear regression)",
            formula="y = a*exp(bx)",
            num_params=2,
            func=exponential_func,
            validator=_validate_exp_regression,
        ),
    ]
