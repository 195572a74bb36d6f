from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple

import numpy as np

from .util import format_value, param_names


def plot_fit(
    fitter: Any,
    ax: Optional[Any] = None,
    *,
    xg: Optional[np.ndarray] = None,
    num_points: int = 400,
    data_kwargs: Optional[Mapping[str, Any]] = None,
    line_kwargs: Optional[Mapping[str, Any]] = None,
    show_params: bool = False,
    param_digits: int = 5,
    text_kwargs: Optional[Mapping[str, Any]] = None,
) -> Tuple[Any, Any]:
    """Plot the data of a CurveFitter and its fitted curve on a Matplotlib Axes.

    Parameters
    ----------
    fitter : CurveFitter
        Fitter after do_fit / do_custom_fit. Without a result only the data
        points are drawn.
    ax : matplotlib.axes.Axes, optional
        If None, a new figure/axes is created.
    xg : ndarray, optional
        Grid for the fit line. Defaults to num_points points over the x range.
    data_kwargs, line_kwargs, text_kwargs : dict, optional
        Styling kwargs for the data points, the fit line and the text box.
    show_params : bool
        If True, annotate the formula, parameters and R^2 on the plot.
    param_digits : int
        Digits for the parameter values in the text box.
    """
    import matplotlib.pyplot as plt

    if ax is None:
        fig, ax = plt.subplots()
    else:
        fig = ax.figure

    data_kwargs = dict(data_kwargs or {})
    line_kwargs = dict(line_kwargs or {})
    text_kwargs = dict(text_kwargs or {})

    x_arr = fitter.get_x_points()
    y_arr = fitter.get_y_points()
    data_kwargs.setdefault("marker", "o")
    data_kwargs.setdefault("linestyle", "none")
    data_kwargs.setdefault("label", "data")
    ax.plot(x_arr, y_arr, **data_kwargs)

    params = fitter.get_params()
    if params is None:
        return fig, ax

    if xg is None:
        xg = np.linspace(float(np.min(x_arr)), float(np.max(x_arr)), int(num_points))
    line_kwargs.setdefault("label", fitter.get_name())
    ax.plot(xg, fitter.f(xg), **line_kwargs)

    if show_params:
        lines = [fitter.get_formula()]
        for name, value in zip(param_names(fitter.get_num_params()), params[:-1]):
            lines.append(f"{name}={format_value(value, param_digits)}")
        lines.append(f"R^2={format_value(fitter.get_r_squared(), param_digits)}")
        text_kwargs.setdefault("ha", "left")
        text_kwargs.setdefault("va", "top")
        text_kwargs.setdefault("fontsize", 9)
        text_kwargs.setdefault("transform", ax.transAxes)
        text_kwargs.setdefault(
            "bbox",
            {"boxstyle": "round", "facecolor": "white", "alpha": 0.7, "edgecolor": "none"},
        )
        ax.text(0.02, 0.98, "\n".join(lines), **text_kwargs)

    return fig, ax
