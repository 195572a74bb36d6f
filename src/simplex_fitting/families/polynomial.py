from __future__ import annotations

from typing import List

import numpy as np
from numpy.polynomial import polynomial as P

from ..data import DataSummary
from ..guess import GuessState
from ..util import PARAM_LETTERS
from .common import FitFamily, FitType

_ORDINALS = {2: "2nd", 3: "3rd"}


def polynomial_func(p: np.ndarray, x: np.ndarray, degree: int) -> np.ndarray:
    """y = a + b*x + c*x^2 + ... up to x**degree."""
    return P.polyval(x, p[: degree + 1])


def _guess_polynomial(degree: int):
    def guess(data: DataSummary, x: np.ndarray, y: np.ndarray, g: GuessState) -> None:
        g.setdefault(a=data.y_intercept, b=data.slope)
        half_span = 0.5 * data.x_span or 1.0
        y_range = data.y_span or 1.0
        for j in range(2, degree + 1):
            letter = PARAM_LETTERS[j]
            g.setdefault(**{letter: 0.0})
            # a change of y_range over half the x range
            g.vary(**{letter: y_range / half_span**j})

    return guess


def _formula(degree: int) -> str:
    terms = ["a", "bx"] + [f"{PARAM_LETTERS[j]}x^{j}" for j in range(2, degree + 1)]
    return "y = " + "+".join(terms)


def _name(degree: int) -> str:
    if degree == 1:
        return "Straight Line"
    return f"{_ORDINALS.get(degree, f'{degree}th')} Degree Polynomial"


def polynomial_family(fit_type: FitType, degree: int) -> FitFamily:
    return FitFamily(
        fit_type=fit_type,
        name=_name(degree),
        formula=_formula(degree),
        num_params=degree + 1,
        func=lambda p, x: polynomial_func(p, x, degree),
        guesser=_guess_polynomial(degree),
        offset_param=0,
        factor_param=1,
        factor_is_slope=True,
    )


def polynomial_families() -> List[FitFamily]:
    types = [
        FitType.STRAIGHT_LINE,
        FitType.POLY2,
        FitType.POLY3,
        FitType.POLY4,
        FitType.POLY5,
        FitType.POLY6,
        FitType.POLY7,
        FitType.POLY8,
    ]
    return [polynomial_family(t, degree) for degree, t in enumerate(types, start=1)]
