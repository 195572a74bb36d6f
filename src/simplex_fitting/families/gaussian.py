from __future__ import annotations

from typing import List

import numpy as np

from ..data import DataSummary
from ..guess import GuessState
from .common import FitFamily, FitType, safe_span

# 1/sqrt(2*pi): width of a unit-area, unit-height Gaussian
_INV_SQRT_2PI = 0.39894


def _bell(x, center, width):
    return np.exp(-(x - center) * (x - center) / (2.0 * width * width))


def gaussian_func(p, x):
    """y = a + (b-a)*exp(-(x-c)^2/(2d^2))"""
    return p[0] + (p[1] - p[0]) * _bell(x, p[2], p[3])


def gaussian_internal_func(p, x):
    """y = a + b*exp(-(x-c)^2/(2d^2)); b is the height above the offset."""
    return p[0] + p[1] * _bell(x, p[2], p[3])


def gaussian_no_offset_func(p, x):
    """y = a*exp(-(x-b)^2/(2c^2))"""
    return p[0] * _bell(x, p[1], p[2])


def _width_from_area(data: DataSummary, baseline: float) -> float:
    """Width such that the peak area matches the area above the baseline."""
    span = safe_span(data.x_span)
    width = _INV_SQRT_2PI * span * (data.y_mean - baseline) / (data.y_max - baseline + 1e-100)
    if not np.isfinite(width) or width <= 0:
        width = 0.1 * span
    return width


def _guess_gaussian_internal(data: DataSummary, x, y, g: GuessState) -> None:
    g.setdefault(
        a=data.y_min,
        b=data.y_max - data.y_min,
        c=data.x_of_max,
        d=_width_from_area(data, data.y_min),
    )
    g.vary(c=0.1 * safe_span(data.x_span))


def _guess_gaussian_no_offset(data: DataSummary, x, y, g: GuessState) -> None:
    g.setdefault(a=data.y_max, b=data.x_of_max, c=_width_from_area(data, 0.0))
    g.vary(b=0.1 * safe_span(data.x_span))


def gaussian_families() -> List[FitFamily]:
    return [
        FitFamily(
            fit_type=FitType.GAUSSIAN,
            name="Gaussian",
            formula="y = a + (b-a)*exp(-(x-c)*(x-c)/(2*d*d))",
            num_params=4,
            func=gaussian_func,
        ),
        FitFamily(
            fit_type=FitType.GAUSSIAN_INTERNAL,
            name="Gaussian (internal)",
            formula="y = a + b*exp(-(x-c)*(x-c)/(2*d*d))",
            num_params=4,
            func=gaussian_internal_func,
            guesser=_guess_gaussian_internal,
            offset_param=0,
            factor_param=1,
        ),
        FitFamily(
            fit_type=FitType.GAUSSIAN_NOOFFSET,
            name="Gaussian (no offset)",
            formula="y = a*exp(-(x-b)*(x-b)/(2*c*c))",
            num_params=3,
            func=gaussian_no_offset_func,
            guesser=_guess_gaussian_no_offset,
            factor_param=0,
        ),
    ]
