"""Built-in fit families + registry."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping, Union

from .common import FitFamily, FitType
from .exponential import exponential_families
from .gaussian import gaussian_families
from .polynomial import polynomial_families
from .power_log import nonzero_points, power_log_families
from .rodbard import rodbard_families
from .special import special_families

__all__ = [
    "FitFamily",
    "FitType",
    "get_family",
    "evaluate",
    "nonzero_points",
    "AVAILABLE_FIT_TYPES",
    "FIT_NAMES",
    "FIT_FORMULAS",
]

_FAMILIES: Mapping[FitType, FitFamily] = MappingProxyType(
    {
        fam.fit_type: fam
        for fam in (
            polynomial_families()
            + exponential_families()
            + power_log_families()
            + rodbard_families()
            + gaussian_families()
            + special_families()
        )
    }
)

_INTERNAL = (FitType.GAUSSIAN_INTERNAL, FitType.RODBARD_INTERNAL)

# fit types a user can request from CurveFitter.do_fit, in code order
AVAILABLE_FIT_TYPES = tuple(sorted(t for t in _FAMILIES if t not in _INTERNAL))
FIT_NAMES: Mapping[FitType, str] = MappingProxyType(
    {t: _FAMILIES[t].name for t in AVAILABLE_FIT_TYPES}
)
FIT_FORMULAS: Mapping[FitType, str] = MappingProxyType(
    {t: _FAMILIES[t].formula for t in AVAILABLE_FIT_TYPES}
)


def get_family(fit_type: Union[int, FitType]) -> FitFamily:
    """Return the built-in family for a fit type code."""
    try:
        return _FAMILIES[FitType(fit_type)]
    except (KeyError, ValueError) as e:
        raise ValueError(
            f"Unknown fit type {fit_type!r}. Available: {tuple(int(t) for t in AVAILABLE_FIT_TYPES)}"
        ) from e


def evaluate(fit_type: Union[int, FitType], params: Any, x: Any) -> Any:
    """Value of a built-in fit function at x (scalar or array)."""
    return get_family(fit_type).evaluate(params, x)
