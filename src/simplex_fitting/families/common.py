from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from ..guess import Guesser

# (params, x) -> y; params is a 1-D array of at least num_params values
ModelFunc = Callable[[np.ndarray, np.ndarray], np.ndarray]
# (x, y) -> error message, or None if the data can be fitted
Validator = Callable[[np.ndarray, np.ndarray], Optional[str]]


class FitType(enum.IntEnum):
    STRAIGHT_LINE = 0
    POLY2 = 1
    POLY3 = 2
    POLY4 = 3
    EXPONENTIAL = 4
    POWER = 5
    LOG = 6
    RODBARD = 7
    GAMMA_VARIATE = 8
    LOG2 = 9
    RODBARD2 = 10
    EXP_WITH_OFFSET = 11
    GAUSSIAN = 12
    EXP_RECOVERY = 13
    INV_RODBARD = 14
    EXP_REGRESSION = 15
    POWER_REGRESSION = 16
    POLY5 = 17
    POLY6 = 18
    POLY7 = 19
    POLY8 = 20
    GAUSSIAN_NOOFFSET = 21
    EXP_RECOVERY_NOOFFSET = 22
    CHAPMAN = 23
    ERF = 24
    CUSTOM = 100
    # reparameterized forms used while fitting GAUSSIAN and RODBARD
    GAUSSIAN_INTERNAL = 101
    RODBARD_INTERNAL = 102


@dataclass(frozen=True)
class FitFamily:
    """Descriptor of one fit function.

    offset_param and factor_param are the indices of parameters that enter
    linearly (``offset + factor*g``) and are found by regression instead of
    the simplex. With factor_is_slope the factor multiplies x instead.
    """

    fit_type: FitType
    name: str
    formula: str
    num_params: int
    func: ModelFunc
    guesser: Optional[Guesser] = None
    offset_param: Optional[int] = None
    factor_param: Optional[int] = None
    factor_is_slope: bool = False
    validator: Optional[Validator] = None

    @property
    def num_regression_params(self) -> int:
        return int(self.offset_param is not None) + int(self.factor_param is not None)

    def evaluate(self, params, x):
        """Function value(s) at x; a scalar x gives a float."""
        p = np.asarray(params, dtype=float)
        x_arr = np.asarray(x, dtype=float)
        with np.errstate(all="ignore"):
            y = np.broadcast_to(self.func(p, x_arr), x_arr.shape)
        if x_arr.ndim == 0:
            return float(y)
        return np.array(y, dtype=float)

    def validate(self, x: np.ndarray, y: np.ndarray) -> Optional[str]:
        if self.validator is None:
            return None
        return self.validator(x, y)


def has_mixed_signs(values: np.ndarray) -> bool:
    return bool(np.any(values > 0) and np.any(values < 0))


def safe_span(span: float) -> float:
    """x or y range, 1 for degenerate data."""
    return span if span > 0 and np.isfinite(span) else 1.0
