from __future__ import annotations

import math
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

import numpy as np

from .data import DataSummary
from .util import param_names

Guesser = Callable[[DataSummary, np.ndarray, np.ndarray, "GuessState"], None]


class GuessState:
    """Mutable initial-parameter state passed to guessers.

    Supports:
        g.a = 1.0
        g.is_unset("a")
        g.vary(c=0.1)       # initial simplex variation of c
    """

    def __init__(self, num_params: int):
        object.__setattr__(self, "_names", param_names(num_params))
        object.__setattr__(self, "_d", {})
        object.__setattr__(self, "_var", {})

    def __getattr__(self, name: str) -> Any:
        d = object.__getattribute__(self, "_d")
        if name in d:
            return d[name]
        raise AttributeError(name)

    def __setattr__(self, name: str, value: Any) -> None:
        names = object.__getattribute__(self, "_names")
        if name not in names:
            raise AttributeError(f"No parameter {name!r}; have {names}.")
        d = object.__getattribute__(self, "_d")
        d[name] = float(value)

    def is_unset(self, name: str) -> bool:
        d = object.__getattribute__(self, "_d")
        return name not in d

    def setdefault(self, **values: float) -> None:
        """Set only the parameters that have no value yet."""
        for name, value in values.items():
            if self.is_unset(name):
                setattr(self, name, value)

    def vary(self, **variations: float) -> None:
        var = object.__getattribute__(self, "_var")
        for name, value in variations.items():
            var.setdefault(name, abs(float(value)))

    def seed(
        self,
        params: Optional[Sequence[float]],
        variations: Optional[Sequence[float]] = None,
    ) -> None:
        """Take user-supplied values first; NaN entries stay unset."""
        names = object.__getattribute__(self, "_names")
        var = object.__getattribute__(self, "_var")
        if params is not None:
            for name, value in zip(names, params):
                if not math.isnan(float(value)):
                    setattr(self, name, value)
        if variations is not None:
            for name, value in zip(names, variations):
                if not math.isnan(float(value)):
                    var[name] = abs(float(value))

    def to_dict(self) -> Dict[str, float]:
        return dict(object.__getattribute__(self, "_d"))

    def arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Initial parameters and variations; 10% of the value if not given.

        Parameters without a value start at 0; the minimizer then uses its
        default variation of 0.01.
        """
        names = object.__getattribute__(self, "_names")
        d = object.__getattribute__(self, "_d")
        var = object.__getattribute__(self, "_var")
        params = np.array([d.get(n, 0.0) for n in names], dtype=float)
        variations = np.array(
            [var.get(n, 0.1 * abs(d.get(n, 0.0))) for n in names], dtype=float
        )
        return params, variations
