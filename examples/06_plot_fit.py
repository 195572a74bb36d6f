import numpy as np
import matplotlib.pyplot as plt

from simplex_fitting import CurveFitter, FitType
from simplex_fitting.plotting import plot_fit

rng = np.random.default_rng(3)
x = np.linspace(0, 5, 40)
y = 2.0 * (1 - np.exp(-1.3 * x)) + 0.3 + rng.normal(0, 0.03, size=x.size)

cf = CurveFitter(x, y)
cf.do_fit(FitType.EXP_RECOVERY)

fig, ax = plot_fit(cf, show_params=True, line_kwargs={"color": "C1"})
ax.set_xlabel("time")
ax.set_ylabel("signal")
ax.legend(loc="lower right")
plt.show()
