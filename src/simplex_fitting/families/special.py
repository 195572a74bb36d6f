"""Gamma variate, Chapman-Richards and error function fits."""
from __future__ import annotations

import math
from typing import List, Optional

import numpy as np
from scipy.special import erf

from ..data import DataSummary
from ..guess import GuessState
from .common import FitFamily, FitType, safe_span


def gamma_variate_func(p, x):
    """y = b*(x-a)^c*exp(-(x-a)/d); 0 for x <= a, else NaN unless b, c, d > 0."""
    if p[1] <= 0 or p[2] <= 0 or p[3] <= 0:
        return np.where(x > p[0], np.nan, 0.0)
    dx = np.where(x > p[0], x - p[0], 0.0)
    return np.where(x > p[0], p[1] * np.power(dx, p[2]) * np.exp(-dx / p[3]), 0.0)


def chapman_func(p, x):
    """y = a*(1-exp(-b*x))^c"""
    return p[0] * np.power(1.0 - np.exp(-p[1] * x), p[2])


def erf_func(p, x):
    """y = a+b*erf((x-c)/d)"""
    return p[0] + p[1] * erf((x - p[2]) / p[3])


def _guess_gamma_variate(data: DataSummary, x, y, g: GuessState) -> None:
    # the curve starts rising at a; the peak is at a + c*d, so c and d ~ sqrt(peak - a)
    ab = data.x_of_max - data.x_min + 0.1
    shape = math.sqrt(ab)
    g.setdefault(a=data.x_min, c=shape, d=shape)
    with np.errstate(all="ignore"):
        height = data.y_max / (np.power(ab, g.c) * np.exp(-ab / g.d))
    g.setdefault(b=height if np.isfinite(height) and height > 0 else 1.0)


def _guess_chapman(data: DataSummary, x, y, g: GuessState) -> None:
    g.setdefault(a=data.y_max, b=1.0 / safe_span(data.x_span), c=1.5)


def _mid_crossing(x: np.ndarray, y: np.ndarray, level: float) -> Optional[float]:
    """x where y first crosses 'level' (linear interpolation)."""
    above = y >= level
    idx = np.nonzero(above[1:] != above[:-1])[0]
    if idx.shape[0] == 0:
        return None
    i = int(idx[0])
    dy = y[i + 1] - y[i]
    if dy == 0:
        return float(x[i])
    return float(x[i] + (level - y[i]) * (x[i + 1] - x[i]) / dy)


def _guess_erf(data: DataSummary, x, y, g: GuessState) -> None:
    span = safe_span(data.x_span)
    center = _mid_crossing(x, y, 0.5 * (data.y_min + data.y_max))
    g.setdefault(
        a=0.5 * (data.y_min + data.y_max),
        b=0.5 * (data.last_y - data.first_y),
        c=data.x_mean if center is None else center,
        d=0.1 * span,
    )
    g.vary(c=0.1 * span)


def _validate_chapman(x: np.ndarray, y: np.ndarray) -> Optional[str]:
    if np.any(x < 0):
        return "Cannot fit Chapman-Richards when x<0"
    return None


def special_families() -> List[FitFamily]:
    return [
        FitFamily(
            fit_type=FitType.GAMMA_VARIATE,
            name="Gamma Variate",
            formula="y = b*(x-a)^c*exp(-(x-a)/d)",
            num_params=4,
            func=gamma_variate_func,
            guesser=_guess_gamma_variate,
            factor_param=1,
        ),
        FitFamily(
            fit_type=FitType.CHAPMAN,
            name="Chapman-Richards",
            formula="y = a*(1-exp(-b*x))^c",
            num_params=3,
            func=chapman_func,
            guesser=_guess_chapman,
            factor_param=0,
            validator=_validate_chapman,
        ),
        FitFamily(
            fit_type=FitType.ERF,
            name="Error Function",
            formula="y = a+b*erf((x-c)/d)",
            num_params=4,
            func=erf_func,
            guesser=_guess_erf,
            offset_param=0,
            factor_param=1,
        ),
    ]
