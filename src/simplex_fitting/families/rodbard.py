"""Rodbard (four-parameter logistic) curves and their inverse."""
from __future__ import annotations

from typing import List, Optional

import numpy as np

from ..data import DataSummary
from ..guess import GuessState
from .common import FitFamily, FitType, has_mixed_signs, safe_span


def rodbard_func(p, x):
    """y = d + (a-d)/(1 + (x/c)^b)"""
    return p[3] + (p[0] - p[3]) / (1.0 + np.power(x / p[2], p[1]))


def rodbard_internal_func(p, x):
    """y = d + a/(1 + (x/c)^b); a is (a-d) of the usual form."""
    return p[3] + p[0] / (1.0 + np.power(x / p[2], p[1]))


def _inverse_rodbard(p, x, outside: float):
    # avoid x >= d (singularity) and x < a (negative base)
    valid = (p[3] - x >= 2 * np.finfo(float).tiny) & (x >= p[0])
    ratio = np.where(valid, (x - p[0]) / np.where(valid, p[3] - x, 1.0), 1.0)
    return np.where(valid, p[2] * np.exp(np.log(ratio) / p[1]), outside)


def inv_rodbard_func(p, x):
    """y = c*((x-a)/(d-x))^(1/b); NaN outside a <= x < d."""
    return _inverse_rodbard(p, x, np.nan)


def rodbard2_func(p, x):
    """Rodbard fitted with x and y swapped, solved for y; 0 outside a <= x < d."""
    return _inverse_rodbard(p, x, 0.0)


def _guess_rodbard_internal(data: DataSummary, x, y, g: GuessState) -> None:
    g.setdefault(a=data.first_y - data.last_y, b=1.0, c=data.x_mean, d=data.last_y)
    g.vary(c=0.1 * safe_span(data.x_span))


def _guess_inv_rodbard(data: DataSummary, x, y, g: GuessState) -> None:
    span = safe_span(data.x_span)
    g.setdefault(a=data.x_min - 0.1 * span, b=1.0, c=data.y_mean, d=data.x_max + 0.1 * span)
    g.vary(a=0.05 * span, d=0.05 * span)


def _validate_rodbard(x: np.ndarray, y: np.ndarray) -> Optional[str]:
    if has_mixed_signs(x):
        return "Cannot fit Rodbard when x has mixed signs"
    return None


def _validate_rodbard2(x: np.ndarray, y: np.ndarray) -> Optional[str]:
    # x and y change roles for this fit
    if has_mixed_signs(y):
        return "Cannot fit Rodbard (NIH Image) when y has mixed signs"
    return None


def rodbard_families() -> List[FitFamily]:
    return [
        FitFamily(
            fit_type=FitType.RODBARD,
            name="Rodbard",
            formula="y = d+(a-d)/(1+(x/c)^b)",
            num_params=4,
            func=rodbard_func,
            validator=_validate_rodbard,
        ),
        FitFamily(
            fit_type=FitType.RODBARD_INTERNAL,
            name="Rodbard (internal)",
            formula="y = d+a/(1+(x/c)^b)",
            num_params=4,
            func=rodbard_internal_func,
            guesser=_guess_rodbard_internal,
            offset_param=3,
            factor_param=0,
        ),
        FitFamily(
            fit_type=FitType.RODBARD2,
            name="Rodbard (NIH Image)",
            formula="x = d+(a-d)/(1+(y/c)^b) [y = c*((x-a)/(d-x))^(1/b)]",
            num_params=4,
            func=rodbard2_func,
            validator=_validate_rodbard2,
        ),
        FitFamily(
            fit_type=FitType.INV_RODBARD,
            name="Inverse Rodbard",
            formula="y = c*((x-a)/(d-x))^(1/b)",
            num_params=4,
            func=inv_rodbard_func,
            guesser=_guess_inv_rodbard,
            factor_param=2,
        ),
    ]
