from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

import numpy as np


def prepare_xy(x: Any, y: Any) -> Tuple[np.ndarray, np.ndarray]:
    """Copy user inputs to 1-D float64 arrays of equal, nonzero length."""
    x_arr = np.array(x, dtype=float, copy=True)
    y_arr = np.array(y, dtype=float, copy=True)
    if x_arr.ndim != 1 or y_arr.ndim != 1:
        raise ValueError("x and y must be 1-D arrays.")
    if x_arr.shape != y_arr.shape:
        raise ValueError(
            f"x and y must have the same length, got {x_arr.shape[0]} and {y_arr.shape[0]}."
        )
    if x_arr.shape[0] == 0:
        raise ValueError("Cannot fit empty data.")
    return x_arr, y_arr


@dataclass(frozen=True)
class DataSummary:
    """Simple statistics of (x, y) data used for initial guesses."""

    n: int
    x_min: float
    x_max: float
    x_mean: float
    y_min: float
    y_max: float
    y_mean: float
    x_of_max: float
    first_x: float
    first_y: float
    last_x: float
    last_y: float
    # straight line through the first and last point
    slope: float
    y_intercept: float
    # sum of squared deviations of y from its mean, exactly 0 for constant y
    ssd: float

    @staticmethod
    def from_arrays(x: np.ndarray, y: np.ndarray) -> "DataSummary":
        n = int(x.shape[0])
        i_max = int(np.argmax(y))
        first_x, first_y = float(x[0]), float(y[0])
        last_x, last_y = float(x[-1]), float(y[-1])
        if last_x - first_x != 0:
            slope = (last_y - first_y) / (last_x - first_x)
        else:
            slope = 1.0
        return DataSummary(
            n=n,
            x_min=float(np.min(x)),
            x_max=float(np.max(x)),
            x_mean=float(np.mean(x)),
            y_min=float(np.min(y)),
            y_max=float(np.max(y)),
            y_mean=float(np.mean(y)),
            x_of_max=float(x[i_max]),
            first_x=first_x,
            first_y=first_y,
            last_x=last_x,
            last_y=last_y,
            slope=slope,
            y_intercept=first_y - slope * first_x,
            ssd=_sum_of_squared_deviations(y),
        )

    @property
    def x_span(self) -> float:
        return self.x_max - self.x_min

    @property
    def y_span(self) -> float:
        return self.y_max - self.y_min


def _sum_of_squared_deviations(y: np.ndarray) -> float:
    if np.min(y) == np.max(y):
        return 0.0
    d = y - np.mean(y)
    return float(np.dot(d, d))
