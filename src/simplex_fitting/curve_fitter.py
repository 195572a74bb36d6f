"""Least-squares curve fitting driven by the simplex Minimizer.

Parameters that enter a fit function linearly (an offset, a factor, or the
slope of a polynomial) are not searched by the simplex; for each simplex
vertex they follow from linear regression. Fitting a Gaussian thus only needs
a two-dimensional simplex (center and width).
"""
from __future__ import annotations

import logging
import math
import time
from typing import Any, Callable, Optional, Sequence, Tuple, Union

import numpy as np

from .custom import FormulaError, count_formula_params, custom_family
from .data import DataSummary, prepare_xy
from .families import FitFamily, FitType, get_family, nonzero_points
from .guess import GuessState
from .minimizer import Minimizer
from .regression import SSE_FLOOR, regress
from .status import Status
from .util import as_float_array, format_value, param_names

log = logging.getLogger(__name__)

__all__ = ["CurveFitter"]

# fit types that are fitted in a different form and mapped back afterwards
_FITTED_AS = {
    FitType.GAUSSIAN: FitType.GAUSSIAN_INTERNAL,
    FitType.RODBARD: FitType.RODBARD_INTERNAL,
    FitType.RODBARD2: FitType.RODBARD_INTERNAL,
    FitType.EXP_REGRESSION: FitType.STRAIGHT_LINE,
    FitType.POWER_REGRESSION: FitType.STRAIGHT_LINE,
}


class CurveFitter:
    """Fit y = f(x) to data with a built-in or user-defined function.

    Typical use::

        cf = CurveFitter(x, y)
        cf.do_fit(FitType.GAUSSIAN)
        a, b, c, d, sse = cf.get_params()
        print(cf.get_result_string())

    Keyword options are passed to the Minimizer (see MinimizerSettings),
    e.g. ``CurveFitter(x, y, max_restarts=0, random_seed=3)``.
    """

    def __init__(self, x: Any, y: Any, **minimizer_options: Any):
        self._x, self._y = prepare_xy(x, y)
        self._data = DataSummary.from_arrays(self._x, self._y)
        self.minimizer = Minimizer(**minimizer_options)

        self._initial_params: Optional[np.ndarray] = None
        self._initial_variations: Optional[np.ndarray] = None
        self._custom_offset: Optional[int] = None
        self._custom_factor: Optional[int] = None
        self._custom_factor_is_slope = False

        self._family: Optional[FitFamily] = None
        self._fit_family: Optional[FitFamily] = None
        self._final_params: Optional[np.ndarray] = None
        self._status: Optional[Status] = None
        self._error_string: Optional[str] = None
        self._num_iterations = 0
        self._minimizer_used = False
        self._time_ms = 0.0

    # ---- configuration ----
    def get_minimizer(self) -> Minimizer:
        return self.minimizer

    def set_max_iterations(self, max_iterations: int) -> None:
        self.minimizer.configure(max_iterations=max_iterations)

    def set_restarts(self, max_restarts: int) -> None:
        self.minimizer.configure(max_restarts=max_restarts)

    def set_initial_parameters(
        self, params: Optional[Sequence[float]], variations: Optional[Sequence[float]] = None
    ) -> None:
        """Starting values for the next fits (NaN entries are guessed)."""
        self._initial_params = as_float_array(params)
        self._initial_variations = as_float_array(variations)

    def set_offset_multiply_slope_params(
        self, offset: Optional[int], multiply: Optional[int], slope: Optional[int]
    ) -> None:
        """Declare linear parameters of a user-defined function.

        Indices (or None / -1 for none) of a parameter that is added to the
        function, one that multiplies it, and one that multiplies x in an
        additive term. Multiply and slope exclude each other. These
        parameters are then found by linear regression, which is only
        correct if the function really depends on them in this way.
        """
        offset, multiply, slope = (_index_or_none(v) for v in (offset, multiply, slope))
        if multiply is not None and slope is not None:
            raise ValueError("A function can have a 'multiply' or a 'slope' parameter, not both.")
        self._custom_offset = offset
        self._custom_factor = multiply if slope is None else slope
        self._custom_factor_is_slope = slope is not None

    def abort(self) -> None:
        self.minimizer.abort()

    # ---- fitting ----
    def do_fit(
        self,
        fit_type: Union[int, FitType],
        show_settings: bool = False,
        *,
        initial_params: Optional[Sequence[float]] = None,
        initial_param_variations: Optional[Sequence[float]] = None,
    ) -> None:
        """Fit a built-in function; see FitType.

        ``show_settings`` is accepted for compatibility and ignored.
        Incompatible data (e.g. x<0 for a power law) leaves the previous
        parameters in place; get_status() is then INITIALIZATION_FAILURE
        and get_status_string() tells why.
        """
        try:
            fit_type = FitType(fit_type)
        except ValueError as e:
            raise ValueError(f"Invalid fit type {fit_type!r}") from e
        if fit_type == FitType.CUSTOM:
            if self._family is None or self._family.fit_type != FitType.CUSTOM:
                raise ValueError("No user-defined function; use do_custom_fit.")
            family = self._family
        else:
            family = get_family(fit_type)
            if fit_type in (FitType.GAUSSIAN_INTERNAL, FitType.RODBARD_INTERNAL):
                raise ValueError(f"Invalid fit type {fit_type!r}")
        self._run(family, initial_params, initial_param_variations)

    def do_custom_fit(
        self,
        formula_or_callable: Union[str, Callable[[np.ndarray, np.ndarray], Any]],
        initial_params: Optional[Sequence[float]] = None,
        show_settings: bool = False,
        *,
        num_params: Optional[int] = None,
        initial_param_variations: Optional[Sequence[float]] = None,
    ) -> int:
        """Fit a formula such as ``"y = a + b*exp(-c*x)"`` or a callable.

        A callable is called as ``func(params, x_array)`` and needs
        ``num_params``. Returns the number of parameters, or 0 if the
        formula is invalid (see get_error_string()).
        """
        if formula_or_callable is None:
            raise ValueError("No formula or function given.")
        if isinstance(formula_or_callable, str):
            if count_formula_params(formula_or_callable) == 0:
                self._fail("Formula must contain x, y and parameters from a..f")
                return 0
        try:
            family = custom_family(
                formula_or_callable,
                num_params,
                offset_param=self._custom_offset,
                factor_param=self._custom_factor,
                factor_is_slope=self._custom_factor_is_slope,
            )
        except FormulaError as e:
            self._fail(str(e))
            return 0
        self._family = family
        self._run(family, initial_params, initial_param_variations)
        return family.num_params

    def _fail(self, message: str) -> None:
        log.debug("fit not started: %s", message)
        self._error_string = message
        self._status = Status.INITIALIZATION_FAILURE

    def _run(
        self,
        family: FitFamily,
        initial_params: Optional[Sequence[float]],
        initial_param_variations: Optional[Sequence[float]],
    ) -> None:
        start = time.perf_counter()
        self._error_string = None
        self._status = None
        message = family.validate(self._x, self._y)
        if message is not None:
            self._fail(message)
            self._time_ms = (time.perf_counter() - start) * 1e3
            return

        initial = as_float_array(initial_params)
        if initial is None:
            initial = self._initial_params
        variations = as_float_array(initial_param_variations)
        if variations is None:
            variations = self._initial_variations

        fit_type = family.fit_type
        x, y = self._x, self._y
        fit_family = family
        if fit_type in _FITTED_AS:
            fit_family = get_family(_FITTED_AS[fit_type])
        if fit_type == FitType.RODBARD2:
            x, y = y, x
        elif fit_type in (FitType.EXP_REGRESSION, FitType.POWER_REGRESSION):
            if fit_type == FitType.POWER_REGRESSION:
                use = nonzero_points(x, y)
                x, y = np.log(x[use]), y[use]
            y_sign = 1.0 if y[0] > 0 else -1.0
            y = np.log(np.abs(y))
            initial = None  # log-transformed fits are closed form
        initial = _to_internal(fit_type, initial)

        params, status, iterations = self._fit(fit_family, x, y, initial, variations)

        if fit_type in (FitType.GAUSSIAN,):
            params[1] += params[0]
        elif fit_type in (FitType.RODBARD, FitType.RODBARD2):
            params[0] += params[3]
        elif fit_type in (FitType.EXP_REGRESSION, FitType.POWER_REGRESSION):
            params[0] = y_sign * math.exp(params[0])
        _normalize(fit_type, params)

        residuals = self._y - family.evaluate(params, self._x)
        sse = float(np.dot(residuals, residuals))
        self._family = family
        self._fit_family = fit_family
        self._final_params = np.append(params, sse)
        self._status = status
        self._num_iterations = iterations
        self._time_ms = (time.perf_counter() - start) * 1e3
        log.debug(
            "%s fit: %s, %d iterations, SSE=%g, %.1f ms",
            family.name,
            status.name,
            iterations,
            sse,
            self._time_ms,
        )

    def _fit(
        self,
        family: FitFamily,
        x: np.ndarray,
        y: np.ndarray,
        initial: Optional[np.ndarray],
        variations: Optional[np.ndarray],
    ) -> Tuple[np.ndarray, Status, int]:
        """Fit 'family' to (x, y); returns params, status and iterations."""
        n = family.num_params
        g = GuessState(n)
        g.seed(initial, variations)
        if family.guesser is not None:
            family.guesser(DataSummary.from_arrays(x, y), x, y, g)
        params, param_variations = g.arrays()

        offset_index = family.offset_param
        factor_index = family.factor_param
        slope = family.factor_is_slope
        linear = [i for i in (offset_index, factor_index) if i is not None]
        free = [i for i in range(n) if i not in linear]
        sum_y2 = float(np.dot(y, y))

        def with_linear_placeholders(p: np.ndarray) -> np.ndarray:
            if offset_index is not None:
                p[offset_index] = 0.0
            if factor_index is not None:
                p[factor_index] = 0.0 if slope else 1.0
            return p

        def regression(p: np.ndarray):
            f = family.evaluate(with_linear_placeholders(p), x)
            return regress(
                y,
                f,
                has_offset=offset_index is not None,
                has_factor=factor_index is not None,
                x=x if slope else None,
                sum_y2=sum_y2,
            )

        def store_linear(p: np.ndarray, offset: float, factor: float) -> None:
            if offset_index is not None:
                p[offset_index] = offset
            if factor_index is not None:
                p[factor_index] = factor

        self._minimizer_used = bool(free)
        if not free:
            result = regression(params.copy())
            store_linear(params, result.offset, result.factor)
            return params, Status.SUCCESS, 1

        m = len(free)
        template = params

        def objective(vertex: np.ndarray) -> float:
            p = template.copy()
            p[free] = vertex[:m]
            if not linear:
                residuals = y - family.evaluate(p, x)
                # same floor as regress(); NaN stays NaN
                return max(float(np.dot(residuals, residuals)), SSE_FLOOR * sum_y2)
            result = regression(p)
            vertex[m + 1] = result.offset
            vertex[m + 2] = result.factor
            return result.sse

        self.minimizer.set_function(objective, m)
        self.minimizer.set_extra_array_elements(2 if linear else 0)
        status = self.minimizer.minimize(params[free], param_variations[free])
        best = self.minimizer.get_params()
        params = template.copy()
        params[free] = best[:m]
        if linear:
            store_linear(params, best[m + 1], best[m + 2])
        return params, status, self.minimizer.get_iterations()

    # ---- results ----
    def get_x_points(self) -> np.ndarray:
        return self._x.copy()

    def get_y_points(self) -> np.ndarray:
        return self._y.copy()

    def get_params(self) -> Optional[np.ndarray]:
        """Fitted parameters followed by the sum of squared residuals.

        None before the first fit that got past data validation.
        """
        return None if self._final_params is None else self._final_params.copy()

    def get_status(self) -> Optional[Status]:
        return self._status

    def get_status_string(self) -> str:
        if self._error_string is not None:
            return self._error_string
        if self._status is None:
            return "No fit"
        return self._status.message

    def get_error_string(self) -> Optional[str]:
        return self._error_string

    def get_iterations(self) -> int:
        return self._num_iterations

    def get_max_iterations(self) -> int:
        return self.minimizer.get_max_iterations()

    def get_restarts(self) -> int:
        return self.minimizer.get_max_restarts()

    def get_time(self) -> float:
        """Duration of the last fit in milliseconds."""
        return self._time_ms

    def get_num_params(self) -> int:
        return 0 if self._family is None else self._family.num_params

    def get_num_free_params(self) -> int:
        """Parameters searched by the simplex (not found by regression)."""
        if self._fit_family is None or not self._minimizer_used:
            return 0
        return self._fit_family.num_params - self._fit_family.num_regression_params

    def get_fit_type(self) -> Optional[FitType]:
        return None if self._family is None else self._family.fit_type

    def get_name(self) -> str:
        return "" if self._family is None else self._family.name

    def get_formula(self) -> str:
        return "" if self._family is None else self._family.formula

    def f(self, x: Any) -> Any:
        """Fitted function at x (scalar or array)."""
        params = self._fitted_params()
        return self._family.evaluate(params, x)  # type: ignore[union-attr]

    def get_residuals(self) -> np.ndarray:
        params = self._fitted_params()
        return self._y - self._family.evaluate(params, self._x)  # type: ignore[union-attr]

    def get_sum_residuals_sqr(self) -> float:
        if self._final_params is None:
            return math.nan
        return float(self._final_params[-1])

    def get_sd(self) -> float:
        """Standard deviation of the residuals."""
        residuals = self.get_residuals()
        if residuals.shape[0] < 2:
            return 0.0
        return float(np.std(residuals, ddof=1))

    def get_r_squared(self) -> float:
        """Coefficient of determination, 1 - SSE/SSD (0 for constant y)."""
        ssd = self._data.ssd
        if not ssd > 0:
            return 0.0
        return 1.0 - self.get_sum_residuals_sqr() / ssd

    def get_fit_goodness(self) -> float:
        """R^2 corrected for the number of parameters (0 if undetermined)."""
        n = self._data.n
        dof = n - self.get_num_params()
        ssd = self._data.ssd
        if dof <= 0 or not ssd > 0:
            return 0.0
        return 1.0 - (self.get_sum_residuals_sqr() / dof) / (ssd / (n - 1))

    def get_result_string(self) -> str:
        """Multi-line summary of the last fit."""
        lines = [
            f"Formula: {self.get_formula()}",
            f"Status: {self.get_status_string()}",
        ]
        if self._final_params is None:
            return "\n".join(lines)
        if self._minimizer_used:
            lines.append(
                f"Number of completed minimizations: {self.minimizer.get_completed_minimizations()}"
            )
            lines.append(
                f"Number of iterations: {self.get_iterations()} (max: {self.get_max_iterations()})"
            )
        else:
            lines.append(f"Number of iterations: {self.get_iterations()}")
        lines += [
            f"Time: {self._time_ms:.1f} ms",
            f"Sum of residuals squared: {format_value(self.get_sum_residuals_sqr())}",
            f"Standard deviation: {format_value(self.get_sd())}",
            f"R^2: {format_value(self.get_r_squared())}",
            "Parameters:",
        ]
        names = param_names(self.get_num_params())
        for name, value in zip(names, self._final_params[:-1]):
            lines.append(f"  {name} = {format_value(value)}")
        return "\n".join(lines)

    def _fitted_params(self) -> np.ndarray:
        if self._final_params is None or self._family is None:
            raise RuntimeError("No fit result; call do_fit or do_custom_fit first.")
        return self._final_params[:-1]

    def __repr__(self) -> str:
        status = None if self._status is None else self._status.name
        return f"CurveFitter(n={self._data.n}, fit={self.get_name()!r}, status={status})"


def _index_or_none(value: Optional[int]) -> Optional[int]:
    if value is None or int(value) < 0:
        return None
    return int(value)


def _to_internal(fit_type: FitType, initial: Optional[np.ndarray]) -> Optional[np.ndarray]:
    """User-form initial parameters in the form actually fitted."""
    if initial is None or initial.shape[0] < 4:
        return initial
    initial = initial.copy()
    if fit_type == FitType.GAUSSIAN:
        initial[1] -= initial[0]
    elif fit_type in (FitType.RODBARD, FitType.RODBARD2):
        initial[0] -= initial[3]
    return initial


def _normalize(fit_type: FitType, params: np.ndarray) -> None:
    """Canonical signs: Gaussian widths >= 0, ERF with b >= 0."""
    if fit_type == FitType.GAUSSIAN:
        params[3] = abs(params[3])
    elif fit_type == FitType.GAUSSIAN_NOOFFSET:
        params[2] = abs(params[2])
    elif fit_type == FitType.ERF and params[1] < 0:
        params[1] = -params[1]
        params[3] = -params[3]
