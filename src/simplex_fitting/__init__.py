"""simplex_fitting public API."""
from .curve_fitter import CurveFitter
from .families import AVAILABLE_FIT_TYPES, FIT_FORMULAS, FIT_NAMES, FitFamily, FitType, evaluate, get_family
from .minimizer import Minimizer
from .regression import RegressionResult, regress
from .settings import MinimizerSettings
from .status import CancellationToken, Status
from . import families

__all__ = [
    "CurveFitter",
    "Minimizer",
    "MinimizerSettings",
    "Status",
    "CancellationToken",
    "FitType",
    "FitFamily",
    "RegressionResult",
    "regress",
    "evaluate",
    "get_family",
    "AVAILABLE_FIT_TYPES",
    "FIT_NAMES",
    "FIT_FORMULAS",
    "families",
]
