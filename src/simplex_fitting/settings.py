from __future__ import annotations

import math
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional, Tuple

import numpy as np

__all__ = ["MinimizerSettings", "ITER_FACTOR"]

# default iteration budget per num_params**2 (twice that with restarts)
ITER_FACTOR = 750


@dataclass(frozen=True)
class MinimizerSettings:
    """Numeric configuration of a Minimizer.

    Parameters
    ----------
    max_iterations:
        Budget over all restarts and both threads. None means
        ``ITER_FACTOR * num_params**2``, doubled when ``max_restarts > 0``.
    max_restarts:
        Extra rounds when two runs disagree. 0 runs once in one thread.
    random_seed:
        Seed for the simplex initialization; results are reproducible.
    max_rel_error, max_abs_error:
        Convergence is reached when either the relative or the absolute
        spread of the function values is below these.
    param_resolutions:
        Optional per-parameter resolution; minimization also stops when
        all vertices are closer to the best one than this.
    max_threads:
        None uses two threads when more than one CPU is available.
        At most two threads are used.
    """

    max_iterations: Optional[int] = None
    max_restarts: int = 2
    random_seed: int = 0
    max_rel_error: float = 1e-10
    max_abs_error: float = 1e-100
    param_resolutions: Optional[Tuple[float, ...]] = None
    max_threads: Optional[int] = None

    def __post_init__(self) -> None:
        if self.param_resolutions is not None and not isinstance(
            self.param_resolutions, tuple
        ):
            object.__setattr__(
                self,
                "param_resolutions",
                tuple(float(v) for v in np.asarray(self.param_resolutions, dtype=float).ravel()),
            )
        self._validate()

    def _validate(self) -> None:
        if self.max_iterations is not None and int(self.max_iterations) <= 0:
            raise ValueError("max_iterations must be positive (or None for the default).")
        if int(self.max_restarts) < 0:
            raise ValueError("max_restarts must be >= 0.")
        if not (self.max_rel_error >= 0) or not (self.max_abs_error >= 0):
            raise ValueError("max_rel_error and max_abs_error must be >= 0.")
        if self.max_threads is not None and int(self.max_threads) < 1:
            raise ValueError("max_threads must be >= 1.")
        if self.param_resolutions is not None:
            if any(math.isnan(r) or r < 0 for r in self.param_resolutions):
                raise ValueError("param_resolutions must be non-negative numbers.")

    @staticmethod
    def from_mapping(options: Optional[Mapping[str, Any]] = None) -> "MinimizerSettings":
        """Build settings from a plain options dict (unknown keys raise)."""
        return MinimizerSettings().with_options(**dict(options or {}))

    def with_options(self, **options: Any) -> "MinimizerSettings":
        """Return a validated copy with some options replaced."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise TypeError(
                f"Unknown minimizer option(s) {unknown}. Available: {tuple(sorted(known))}"
            )
        return replace(self, **options)

    def use_single_thread(self) -> bool:
        if self.max_threads is None:
            return (os.cpu_count() or 1) <= 1
        return int(self.max_threads) <= 1

    def resolved_max_iterations(self, num_params: int) -> int:
        if self.max_iterations is not None:
            return int(self.max_iterations)
        max_iter = ITER_FACTOR * num_params * num_params
        if self.max_restarts > 0:
            max_iter *= 2
        return max_iter

    def resolutions_array(self, num_params: int) -> Optional[np.ndarray]:
        if self.param_resolutions is None:
            return None
        res = np.asarray(self.param_resolutions, dtype=float)
        if res.shape[0] < num_params:
            raise ValueError(
                f"param_resolutions has {res.shape[0]} entries; need {num_params}."
            )
        return res[:num_params]
