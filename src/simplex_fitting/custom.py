"""User-defined fit functions: formula strings or Python callables.

A formula is written as ``y = <expression in x and a..f>``, e.g.
``"y = a + b*exp(-c*x)"``. ``^`` means power and ``ln`` the natural log.
Parameters are the letters a..f that occur in the formula, in alphabetical
order; ``"y = a + c*x"`` has two parameters, a and c.
"""
from __future__ import annotations

import re
from typing import Callable, Optional, Tuple

import numpy as np
import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    parse_expr,
    standard_transformations,
)
from tokenize import TokenError

from .data import DataSummary
from .families import FitFamily, FitType
from .guess import GuessState
from .util import PARAM_LETTERS

__all__ = ["FormulaError", "count_formula_params", "custom_family", "MAX_FORMULA_PARAMS"]

FORMULA_LETTERS = "abcdef"
MAX_FORMULA_PARAMS = len(FORMULA_LETTERS)

_TOKEN = re.compile(r"\b([a-fxy])\b")
_TRANSFORMATIONS = standard_transformations + (convert_xor,)


class FormulaError(ValueError):
    """The formula cannot be parsed or uses unknown names."""


def _tokens(formula: str) -> set:
    return set(_TOKEN.findall(formula))


def formula_letters(formula: str) -> Tuple[str, ...]:
    """Parameter letters of a formula in slot order."""
    tokens = _tokens(formula)
    return tuple(c for c in FORMULA_LETTERS if c in tokens)


def count_formula_params(formula: str) -> int:
    """Number of parameters a..f in the formula; 0 if x or y is missing."""
    tokens = _tokens(formula)
    if "x" not in tokens or "y" not in tokens:
        return 0
    return len(formula_letters(formula))


def compile_formula(formula: str) -> Tuple[Callable[[np.ndarray, np.ndarray], np.ndarray], int]:
    """Compile 'y = ...' to a vectorized function (params, x) -> y.

    Raises
    ------
    FormulaError
        No parameters, no 'y =' on the left, unknown names, or a syntax error.
    """
    num_params = count_formula_params(formula)
    if num_params == 0:
        raise FormulaError(f"Formula needs x, y and at least one of a..f: {formula!r}")
    lhs, sep, rhs = formula.partition("=")
    if not sep or lhs.strip() != "y":
        raise FormulaError(f"Formula must have the form 'y = ...': {formula!r}")

    letters = formula_letters(formula)
    symbols = {name: sp.Symbol(name) for name in FORMULA_LETTERS + "x"}
    local_dict = dict(symbols)
    local_dict["ln"] = sp.log
    try:
        expr = parse_expr(rhs.strip(), local_dict=local_dict, transformations=_TRANSFORMATIONS)
    except (sp.SympifyError, SyntaxError, TokenError, TypeError) as e:
        raise FormulaError(f"Cannot parse formula {formula!r}: {e}") from e

    allowed = {symbols[c] for c in letters} | {symbols["x"]}
    unknown = sorted(str(s) for s in expr.free_symbols - allowed)
    if unknown:
        raise FormulaError(f"Unknown name(s) {unknown} in formula {formula!r}")

    fn = sp.lambdify([symbols[c] for c in letters] + [symbols["x"]], expr, modules=["scipy", "numpy"])

    def func(p, x):
        return fn(*p[:num_params], x)

    return func, num_params


def _guess_ones(num_params: int):
    def guess(data: DataSummary, x, y, g: GuessState) -> None:
        g.setdefault(**{PARAM_LETTERS[i]: 1.0 for i in range(num_params)})

    return guess


def custom_family(
    formula_or_callable,
    num_params: Optional[int] = None,
    *,
    offset_param: Optional[int] = None,
    factor_param: Optional[int] = None,
    factor_is_slope: bool = False,
) -> FitFamily:
    """Build a CUSTOM fit family from a formula string or a callable.

    Callables are called as ``func(params, x_array)`` and must return an
    array like x_array (or a scalar); ``num_params`` is required for them.
    """
    if isinstance(formula_or_callable, str):
        func, n = compile_formula(formula_or_callable)
        formula = formula_or_callable.strip()
        if num_params is not None and int(num_params) != n:
            raise ValueError(f"Formula has {n} parameters, not {num_params}.")
    elif callable(formula_or_callable):
        if num_params is None:
            raise ValueError("num_params is required for a callable fit function.")
        n = int(num_params)
        if not 1 <= n <= len(PARAM_LETTERS):
            raise ValueError(f"num_params must be 1..{len(PARAM_LETTERS)}, got {n}.")
        func = formula_or_callable
        formula = getattr(func, "__name__", "user function")
    else:
        raise TypeError("Expected a formula string or a callable (params, x) -> y.")

    for index in (offset_param, factor_param):
        if index is not None and not 0 <= index < n:
            raise ValueError(f"Parameter index {index} out of range for {n} parameters.")
    if offset_param is not None and offset_param == factor_param:
        raise ValueError("Offset and factor must be different parameters.")

    return FitFamily(
        fit_type=FitType.CUSTOM,
        name="User-defined",
        formula=formula,
        num_params=n,
        func=func,
        guesser=_guess_ones(n),
        offset_param=offset_param,
        factor_param=factor_param,
        factor_is_slope=factor_is_slope,
    )
