from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np

PARAM_LETTERS = "abcdefghi"


def param_names(num_params: int) -> Tuple[str, ...]:
    """Conventional parameter names a, b, c, ... for a fit with num_params."""
    if num_params > len(PARAM_LETTERS):
        raise ValueError(f"At most {len(PARAM_LETTERS)} parameters are supported.")
    return tuple(PARAM_LETTERS[:num_params])


def as_float_array(values: Optional[Sequence[float]]) -> Optional[np.ndarray]:
    """Convert an optional sequence to a 1-D float array (None stays None)."""
    if values is None:
        return None
    return np.asarray(values, dtype=float).reshape(-1)


def format_value(x: float, digits: int = 5) -> str:
    """Compact number formatting for result summaries.

    Uses fixed notation for moderate magnitudes and scientific notation
    otherwise, so that tiny sums of squares stay readable.
    """
    x = float(x)
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "-Infinity" if x < 0 else "Infinity"
    if x == 0.0:
        return "0"
    mag = abs(x)
    if 1e-3 <= mag < 1e9:
        return f"{x:.{digits}g}" if mag >= 1e5 else f"{x:.{digits}f}".rstrip("0").rstrip(".")
    return f"{x:.{digits - 1}e}"
